from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from managed_objects import handler as handler_module
from managed_objects.errors import ConfigError
from managed_objects.services.callback import CallbackReporter
from tests.helpers.events import TARGET_BUCKET

if TYPE_CHECKING:
    from pathlib import Path

    from managed_objects.utils.aws.aws_utils import AwsClients
    from tests.helpers.fakes import FakeHttpSession, FakeS3Client


@pytest.fixture(autouse=True)
def _wire(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, clients: AwsClients, http: FakeHttpSession) -> None:
    monkeypatch.setenv("WORK_ROOT", str(tmp_path))
    monkeypatch.delenv("SKIP", raising=False)
    monkeypatch.setattr(handler_module, "_clients", None)
    monkeypatch.setattr(handler_module, "create_aws_clients", lambda region: clients)
    monkeypatch.setattr(
        handler_module,
        "CallbackReporter",
        lambda timeout=30.0: CallbackReporter(session=http, timeout=timeout),
    )


def test_handler_reconciles_and_reports(make_event, s3: FakeS3Client, http: FakeHttpSession) -> None:
    handler_module.handler(make_event(objects=[{"key": "index.html", "body": "<h1>hi</h1>"}]), None)

    assert s3.snapshot(TARGET_BUCKET) == {"index.html": b"<h1>hi</h1>"}
    assert json.loads(http.sent[0]["data"])["Status"] == "SUCCESS"


def test_skip_environment_flag(monkeypatch: pytest.MonkeyPatch, make_event, s3: FakeS3Client, http: FakeHttpSession) -> None:
    monkeypatch.setenv("SKIP", "true")
    s3.put(TARGET_BUCKET, "keep.txt", "x")

    handler_module.handler(make_event("Delete"), None)

    assert s3.snapshot(TARGET_BUCKET) == {"keep.txt": b"x"}
    assert json.loads(http.sent[0]["data"])["Status"] == "SUCCESS"


def test_invalid_configuration_reports_failed(
    monkeypatch: pytest.MonkeyPatch, make_event, http: FakeHttpSession
) -> None:
    monkeypatch.setenv("MAX_WORKERS", "many")

    with pytest.raises(ConfigError):
        handler_module.handler(make_event(), None)

    body = json.loads(http.sent[0]["data"])
    assert body["Status"] == "FAILED"
    assert "MAX_WORKERS" in body["Reason"]
