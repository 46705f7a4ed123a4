from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from managed_objects import cli
from tests.helpers.events import TARGET_BUCKET

if TYPE_CHECKING:
    from pathlib import Path

    from managed_objects.utils.aws.aws_utils import AwsClients
    from tests.helpers.fakes import FakeS3Client


@pytest.fixture(autouse=True)
def _clients(monkeypatch: pytest.MonkeyPatch, clients: AwsClients) -> None:
    monkeypatch.delenv("SKIP", raising=False)
    monkeypatch.setattr(cli, "create_aws_clients", lambda region: clients)


def _event_file(tmp_path: Path, event: dict) -> str:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(event))
    return str(path)


def test_cli_runs_event_without_callback(tmp_path: Path, make_event, s3: FakeS3Client) -> None:
    event_path = _event_file(tmp_path, make_event(objects=[{"key": "a.txt", "body": "1"}]))

    code = cli.main([event_path, "--no-callback", "--work-root", str(tmp_path / "work"), "--no-colour"])

    assert code == 0
    assert s3.snapshot(TARGET_BUCKET) == {"a.txt": b"1"}


def test_cli_returns_failure_code(tmp_path: Path, make_event, s3: FakeS3Client) -> None:
    event = make_event(objects=[{"key": "a.txt", "body": "1"}, {"key": "/a.txt", "body": "2"}])
    event_path = _event_file(tmp_path, event)

    code = cli.main([event_path, "--no-callback", "--work-root", str(tmp_path / "work"), "--quiet"])

    assert code == 1
    assert s3.snapshot(TARGET_BUCKET) == {}


def test_cli_skip_flag(tmp_path: Path, make_event, s3: FakeS3Client) -> None:
    event_path = _event_file(tmp_path, make_event("Delete"))
    s3.put(TARGET_BUCKET, "keep.txt", "x")

    assert cli.main([event_path, "--skip", "--no-callback"]) == 0
    assert s3.snapshot(TARGET_BUCKET) == {"keep.txt": b"x"}


def test_cli_missing_event_file(tmp_path: Path) -> None:
    assert cli.main([str(tmp_path / "nope.json"), "--no-callback"]) == 1
