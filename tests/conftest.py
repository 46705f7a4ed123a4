from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from managed_objects.services.callback import CallbackReporter
from managed_objects.utils.aws.aws_utils import AwsClients
from managed_objects.utils.config_loader import Settings
from tests.helpers import events
from tests.helpers.fakes import FakeClock, FakeCloudFrontClient, FakeHttpSession, FakeS3Client

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def cloudfront() -> FakeCloudFrontClient:
    return FakeCloudFrontClient()


@pytest.fixture
def http() -> FakeHttpSession:
    return FakeHttpSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(work_root=str(tmp_path / "work"), max_workers=4)


@pytest.fixture
def clients(s3: FakeS3Client, cloudfront: FakeCloudFrontClient) -> AwsClients:
    return AwsClients(s3=s3, cloudfront=cloudfront)


@pytest.fixture
def reporter(http: FakeHttpSession) -> CallbackReporter:
    return CallbackReporter(session=http, timeout=5)


@pytest.fixture
def make_event() -> Callable[..., dict[str, Any]]:
    return events.make_event
