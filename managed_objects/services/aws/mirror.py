"""
Bucket mirror: make a bucket (or prefix) exactly match a local tree.

Objects whose size and MD5 match the remote ETag are left alone, new or
changed files are uploaded with a content-type inferred from their
extension, and remote objects with no local counterpart are deleted.
An empty local tree therefore empties the target.
"""
import hashlib
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List

from ...errors import MirrorError
from ...utils.content_types import content_type_for
from ...utils.file_utils import list_files
from ...utils.logger import get_logger
from .operations import S3Operations, parse_bucket_url

log = get_logger(__name__)


@dataclass
class MirrorResult:
    """Outcome of one mirror run (keys relative to the target prefix)."""

    uploaded: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


def file_md5(path, chunk_size=8 * 1024 * 1024) -> str:
    """Hex MD5 of a file, read in chunks."""
    md5 = hashlib.md5()
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            md5.update(chunk)
    return md5.hexdigest()


class BucketMirror:
    """Synchronizes a local directory to an ``s3://`` URL with deletion.

    Args:
        s3_client: boto3 S3 client
        bucket_url: Target ``s3://bucket[/prefix]``
        max_workers: Concurrent uploads
    """

    def __init__(self, s3_client, bucket_url, max_workers=8):
        self.bucket_url = bucket_url
        self.bucket_name, self.prefix = parse_bucket_url(bucket_url)
        self.operations = S3Operations(s3_client, self.bucket_name)
        self.max_workers = max_workers

    def _is_unchanged(self, local_path, rel_path, remote: Dict) -> bool:
        if remote is None or remote['size'] != os.path.getsize(local_path):
            return False
        # Multipart ETags are not content MD5s; such objects are re-uploaded
        if remote['etag'] != file_md5(local_path):
            return False
        # Same bytes under a stale content-type still need rewriting
        stored = self.operations.head_object(self.prefix + rel_path)
        return stored['content_type'] == content_type_for(rel_path)

    def sync(self, local_dir) -> MirrorResult:
        """Mirror *local_dir* to the target.

        Args:
            local_dir: Directory holding the final object tree

        Returns:
            MirrorResult describing what changed

        Raises:
            MirrorError: If any listing, upload or delete fails
        """
        log.info("Syncing from %s to %s...", local_dir, self.bucket_url)
        result = MirrorResult()

        remote = {
            key[len(self.prefix):]: meta
            for key, meta in self.operations.list_objects(self.prefix).items()
        }

        to_upload = []
        try:
            for rel_path in list_files(local_dir):
                local_path = os.path.join(local_dir, rel_path)
                if self._is_unchanged(local_path, rel_path, remote.get(rel_path)):
                    result.unchanged.append(rel_path)
                else:
                    to_upload.append(rel_path)
        except OSError as e:
            raise MirrorError(f"Could not read local tree {local_dir}: {e}") from e

        if to_upload:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(
                        self.operations.upload_file,
                        os.path.join(local_dir, rel_path),
                        self.prefix + rel_path,
                        content_type_for(rel_path),
                    )
                    for rel_path in to_upload
                ]
                errors = [f.exception() for f in futures if f.exception() is not None]
            if errors:
                log.error("%d of %d upload(s) failed", len(errors), len(to_upload))
                raise errors[0]
        result.uploaded = to_upload

        local = set(result.uploaded) | set(result.unchanged)
        stale = sorted(key for key in remote if key not in local)
        if stale:
            log.debug("Deleting stale objects: %s", stale)
            self.operations.delete_objects(self.prefix + key for key in stale)
        result.deleted = stale

        log.info(
            "Sync complete: %d uploaded, %d unchanged, %d deleted",
            len(result.uploaded), len(result.unchanged), len(result.deleted),
        )
        return result
