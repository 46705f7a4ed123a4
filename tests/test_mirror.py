from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from managed_objects.errors import MirrorError, RequestError
from managed_objects.services.aws.mirror import BucketMirror
from managed_objects.services.aws.operations import parse_bucket_url
from tests.helpers.fakes import FakeS3Client, client_error

if TYPE_CHECKING:
    from pathlib import Path


def _local_tree(root: Path, files: dict[str, str]) -> str:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    root.mkdir(parents=True, exist_ok=True)
    return str(root)


def test_parse_bucket_url() -> None:
    assert parse_bucket_url("s3://site") == ("site", "")
    assert parse_bucket_url("s3://site/") == ("site", "")
    assert parse_bucket_url("s3://site/web") == ("site", "web/")

    with pytest.raises(RequestError):
        parse_bucket_url("site")


def test_sync_uploads_new_files_with_content_types(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {}})
    local = _local_tree(tmp_path / "final", {"index.html": "<h1>hi</h1>", "css/a.css": "a{}", "VERSION": "1"})

    result = BucketMirror(s3, "s3://site").sync(local)

    assert sorted(result.uploaded) == ["VERSION", "css/a.css", "index.html"]
    assert s3.snapshot("site") == {"index.html": b"<h1>hi</h1>", "css/a.css": b"a{}", "VERSION": b"1"}
    stored = s3.buckets["site"]
    assert stored["index.html"].content_type == "text/html"
    assert stored["css/a.css"].content_type == "text/css"
    assert stored["VERSION"].content_type == "text/html"


def test_sync_deletes_stale_and_skips_unchanged(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {"old.html": "bye", "page.html": "v1"}})
    s3.put("site", "index.html", "<h1>hi</h1>", content_type="text/html")
    local = _local_tree(tmp_path / "final", {"index.html": "<h1>hi</h1>", "page.html": "v2"})

    result = BucketMirror(s3, "s3://site").sync(local)

    assert result.unchanged == ["index.html"]
    assert result.uploaded == ["page.html"]
    assert result.deleted == ["old.html"]
    assert s3.snapshot("site") == {"index.html": b"<h1>hi</h1>", "page.html": b"v2"}


def test_same_bytes_with_wrong_content_type_are_reuploaded(tmp_path: Path) -> None:
    s3 = FakeS3Client()
    s3.put("site", "index.html", "<h1>hi</h1>", content_type="binary/octet-stream")
    local = _local_tree(tmp_path / "final", {"index.html": "<h1>hi</h1>"})

    result = BucketMirror(s3, "s3://site").sync(local)

    assert result.uploaded == ["index.html"]
    assert result.unchanged == []
    assert s3.buckets["site"]["index.html"].content_type == "text/html"
    assert ("head_object", "site", "index.html") in s3.calls


def test_metadata_failure_raises_mirror_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    s3 = FakeS3Client()
    s3.put("site", "index.html", "<h1>hi</h1>", content_type="text/html")

    def denied(Bucket: str, Key: str) -> dict:  # noqa: N803
        raise client_error("AccessDenied", "HeadObject")

    monkeypatch.setattr(s3, "head_object", denied)

    with pytest.raises(MirrorError, match="Could not read metadata of index.html"):
        BucketMirror(s3, "s3://site").sync(_local_tree(tmp_path / "final", {"index.html": "<h1>hi</h1>"}))


def test_sync_of_empty_tree_empties_bucket(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {f"f{i}.txt": str(i) for i in range(5)}})
    local = _local_tree(tmp_path / "final", {})

    result = BucketMirror(s3, "s3://site").sync(local)

    assert result.deleted == [f"f{i}.txt" for i in range(5)]
    assert s3.snapshot("site") == {}


def test_sync_is_scoped_to_prefix(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {"web/old.txt": "x", "logs/keep.txt": "y"}})
    local = _local_tree(tmp_path / "final", {"new.txt": "z"})

    BucketMirror(s3, "s3://site/web").sync(local)

    assert s3.snapshot("site") == {"web/new.txt": b"z", "logs/keep.txt": b"y"}


def test_second_sync_changes_nothing(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {}})
    local = _local_tree(tmp_path / "final", {"index.html": "<h1>hi</h1>"})
    mirror = BucketMirror(s3, "s3://site")
    mirror.sync(local)

    result = mirror.sync(local)

    assert result.uploaded == []
    assert result.deleted == []
    assert result.unchanged == ["index.html"]


def test_upload_failure_aborts_mirror(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {"stale.txt": "x"}})
    s3.failing_uploads.add("b.txt")
    local = _local_tree(tmp_path / "final", {"a.txt": "a", "b.txt": "b"})

    with pytest.raises(MirrorError, match="Could not upload b.txt"):
        BucketMirror(s3, "s3://site").sync(local)

    assert "stale.txt" in s3.snapshot("site")
    assert not [c for c in s3.calls if c[0] == "delete_objects"]


def test_delete_errors_abort_mirror(tmp_path: Path) -> None:
    s3 = FakeS3Client({"site": {"stale.txt": "x"}})
    s3.failing_deletes.add("stale.txt")
    local = _local_tree(tmp_path / "final", {})

    with pytest.raises(MirrorError, match="stale.txt"):
        BucketMirror(s3, "s3://site").sync(local)


def test_listing_failure_raises_mirror_error(tmp_path: Path) -> None:
    s3 = FakeS3Client()
    s3.list_errors["site"] = "NoSuchBucket"

    with pytest.raises(MirrorError, match="NoSuchBucket"):
        BucketMirror(s3, "s3://site").sync(_local_tree(tmp_path / "final", {"a.txt": "a"}))


def test_deletes_are_batched(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("managed_objects.services.aws.operations.DELETE_BATCH_SIZE", 2)
    s3 = FakeS3Client({"site": {f"f{i}.txt": "x" for i in range(5)}})

    BucketMirror(s3, "s3://site").sync(_local_tree(tmp_path / "final", {}))

    assert [c[2] for c in s3.calls if c[0] == "delete_objects"] == [2, 2, 1]
