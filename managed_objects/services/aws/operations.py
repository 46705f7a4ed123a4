"""
Low-level S3 primitive operations.

Provides the base helpers every bucket interaction builds on: archive
download, object listing, upload and batched deletion. Unlike a
best-effort sync tool these never swallow errors; botocore failures are
translated into the reconciliation error taxonomy.
"""
import os
from typing import Dict, Iterable, List, Tuple
from urllib.parse import urlparse

from botocore.exceptions import BotoCoreError, ClientError

from ...errors import AssemblyError, FetchError, MirrorError, RequestError
from ...utils.file_utils import ensure_dir
from ...utils.logger import get_logger

log = get_logger(__name__)

# DeleteObjects accepts at most this many keys per call
DELETE_BATCH_SIZE = 1000


def parse_bucket_url(bucket_url: str) -> Tuple[str, str]:
    """Split ``s3://bucket/prefix`` into bucket name and key prefix.

    Args:
        bucket_url: Target URL as declared

    Returns:
        Tuple of (bucket_name, prefix); prefix is empty or ends with ``/``

    Raises:
        RequestError: If the URL is not an ``s3://`` URL with a bucket
    """
    parsed = urlparse(bucket_url)
    if parsed.scheme != 's3' or not parsed.netloc:
        raise RequestError(f"Invalid bucket URL: {bucket_url}")
    prefix = parsed.path.lstrip('/')
    if prefix and not prefix.endswith('/'):
        prefix += '/'
    return parsed.netloc, prefix


def _describe(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get('Error', {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', str(exc))}"
    return str(exc)


class S3Operations:
    """Primitive operations against one bucket.

    Args:
        s3_client: boto3 S3 client (or a compatible fake)
        bucket_name: S3 bucket name
    """

    def __init__(self, s3_client, bucket_name):
        self.s3_client = s3_client
        self.bucket_name = bucket_name

    def download_file(self, s3_key, local_path):
        """Download an object to a local file.

        Args:
            s3_key: S3 object key
            local_path: Local file path

        Raises:
            FetchError: If the object is missing or unreachable
            AssemblyError: If the local file cannot be written
        """
        ensure_dir(os.path.dirname(local_path))
        try:
            self.s3_client.download_file(self.bucket_name, s3_key, local_path)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(
                f"Could not get object {self.bucket_name}/{s3_key}: {_describe(e)}"
            ) from e
        except OSError as e:
            raise AssemblyError(f"Could not write {local_path}: {e}") from e

    def list_objects(self, prefix='') -> Dict[str, Dict]:
        """List every object under a prefix.

        Args:
            prefix: S3 key prefix

        Returns:
            Mapping of key to ``{'size': int, 'etag': str}``

        Raises:
            MirrorError: If listing fails
        """
        objects = {}
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for obj in page.get('Contents', []):
                    objects[obj['Key']] = {
                        'size': obj.get('Size', 0),
                        'etag': obj.get('ETag', '').strip('"'),
                    }
        except (ClientError, BotoCoreError) as e:
            raise MirrorError(f"Could not list s3://{self.bucket_name}/{prefix}: {_describe(e)}") from e
        return objects

    def head_object(self, s3_key) -> Dict:
        """Read an object's metadata.

        Args:
            s3_key: S3 object key

        Returns:
            Dictionary with ``size``, ``etag`` and ``content_type``

        Raises:
            MirrorError: If the request fails
        """
        try:
            response = self.s3_client.head_object(Bucket=self.bucket_name, Key=s3_key)
        except (ClientError, BotoCoreError) as e:
            raise MirrorError(f"Could not read metadata of {s3_key}: {_describe(e)}") from e
        return {
            'size': response.get('ContentLength', 0),
            'etag': response.get('ETag', '').strip('"'),
            'content_type': response.get('ContentType'),
        }

    def upload_file(self, local_path, s3_key, content_type):
        """Upload a local file, overwriting any existing object.

        Args:
            local_path: Local file path
            s3_key: S3 object key
            content_type: Content-Type metadata for the object

        Raises:
            MirrorError: If the upload fails
        """
        try:
            self.s3_client.upload_file(
                local_path, self.bucket_name, s3_key,
                ExtraArgs={'ContentType': content_type},
            )
        except (ClientError, BotoCoreError, OSError) as e:
            raise MirrorError(f"Could not upload {s3_key}: {_describe(e)}") from e

    def delete_objects(self, keys: Iterable[str]) -> int:
        """Delete objects in batches.

        Args:
            keys: Object keys to delete

        Returns:
            Number of objects deleted

        Raises:
            MirrorError: If a batch call fails or reports per-key errors
        """
        keys = list(keys)
        deleted = 0
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch: List[str] = keys[start:start + DELETE_BATCH_SIZE]
            try:
                response = self.s3_client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={'Objects': [{'Key': k} for k in batch], 'Quiet': True},
                )
            except (ClientError, BotoCoreError) as e:
                raise MirrorError(f"Could not delete objects from {self.bucket_name}: {_describe(e)}") from e

            errors = response.get('Errors') or []
            if errors:
                first = errors[0]
                raise MirrorError(
                    f"Could not delete {len(errors)} object(s) from {self.bucket_name}, "
                    f"first: {first.get('Key')} ({first.get('Code')}: {first.get('Message')})"
                )
            deleted += len(batch)
        return deleted
