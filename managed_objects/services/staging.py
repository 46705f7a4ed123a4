"""
Archive staging on local ephemeral storage.

Layout for one request::

    <work_root>/<request_id>/            staging area root
    <work_root>/<request_id>/<hash>/     one directory per archive asset
    <work_root>/<request_id>/final/      merged object tree to mirror
"""
import os
import posixpath
import re
import zipfile
from typing import List, Tuple

from ..errors import AssemblyError, DecodeError
from ..models.request import ArchiveSource
from ..utils.file_utils import ensure_dir, is_within, list_files, remove_tree, remove_tree_quietly
from ..utils.logger import get_logger
from .aws.operations import S3Operations

log = get_logger(__name__)

FINAL_DIR_NAME = "final"
UNZIPPED_DIR_NAME = "unzipped"
ARCHIVE_FILE_NAME = "archive.zip"
_DRIVE = re.compile(r"^[A-Za-z]:")


def _check_segment(value: str, what: str) -> str:
    if not value or value in ('.', '..') or '/' in value or '\\' in value or '\0' in value:
        raise AssemblyError(f"Unsafe {what} for staging directory: {value!r}")
    return value


class StagingArea:
    """Ephemeral directory tree owned by a single request.

    Args:
        work_root: Ephemeral root directory (``/tmp`` on Lambda)
        request_id: Request identifier, used as the directory name
    """

    def __init__(self, work_root, request_id):
        self.root = os.path.join(work_root, _check_segment(request_id, "request id"))
        self.final_dir = os.path.join(self.root, FINAL_DIR_NAME)

    def reset(self):
        """Destroy any stale tree from an earlier attempt and create ``final/``.

        Raises:
            AssemblyError: If the tree cannot be recreated
        """
        log.info("Setting up work area %s...", self.root)
        try:
            remove_tree(self.root)
            ensure_dir(self.final_dir)
        except OSError as e:
            raise AssemblyError(f"Could not set up work area {self.root}: {e}") from e

    def asset_dir(self, content_hash: str) -> str:
        """Staging directory for one archive asset."""
        _check_segment(content_hash, "asset hash")
        if content_hash == FINAL_DIR_NAME:
            raise AssemblyError(f"Asset hash collides with the final directory: {content_hash}")
        return os.path.join(self.root, content_hash)

    def cleanup(self) -> bool:
        """Remove the whole staging area; failures are only logged."""
        return remove_tree_quietly(self.root)


def extract_archive(archive_path, destination) -> List[str]:
    """
    Extract a zip archive, rejecting entries that would escape *destination*.

    Every entry is validated before anything is written.

    Args:
        archive_path: Path to the zip file
        destination: Directory to extract into

    Returns:
        Sorted relative paths of the extracted files

    Raises:
        DecodeError: If the archive is corrupt or holds unsafe paths
        AssemblyError: If writing to disk fails
    """
    try:
        with zipfile.ZipFile(archive_path) as zf:
            # A bare "./" entry names the extraction root itself
            infos = [info for info in zf.infolist() if posixpath.normpath(info.filename) != '.']
            for info in infos:
                name = info.filename
                if (name.startswith('/') or '\\' in name or _DRIVE.match(name)
                        or '..' in posixpath.normpath(name).split('/')
                        or not is_within(destination, name.rstrip('/'))):
                    raise DecodeError(f"Unsafe path in archive {os.path.basename(archive_path)}: {name!r}")

            ensure_dir(destination)
            for info in infos:
                zf.extract(info, destination)
    except zipfile.BadZipFile as e:
        raise DecodeError(f"Invalid zip archive {os.path.basename(archive_path)}: {e}") from e
    except (zipfile.LargeZipFile, NotImplementedError, RuntimeError, EOFError) as e:
        raise DecodeError(f"Could not decode {os.path.basename(archive_path)}: {e}") from e
    except OSError as e:
        raise AssemblyError(f"Could not extract {archive_path}: {e}") from e

    return list_files(destination)


class ArchiveStager:
    """Downloads archive assets and extracts them locally.

    Args:
        s3_client: boto3 S3 client used to read asset buckets
    """

    def __init__(self, s3_client):
        self.s3_client = s3_client

    def stage(self, source: ArchiveSource, staging_dir) -> Tuple[str, List[str]]:
        """
        Fetch one archive into *staging_dir* and extract it.

        The downloaded zip is deleted once extracted.

        Args:
            source: Asset locator
            staging_dir: Per-asset staging directory

        Returns:
            Tuple of (extraction directory, extracted relative paths)

        Raises:
            FetchError: If the archive cannot be downloaded
            DecodeError: If the archive is invalid or unsafe
            AssemblyError: On local filesystem failures
        """
        archive_path = os.path.join(staging_dir, ARCHIVE_FILE_NAME)
        unzipped = os.path.join(staging_dir, UNZIPPED_DIR_NAME)

        log.info("Getting object %s/%s to %s...", source.bucket, source.key, archive_path)
        S3Operations(self.s3_client, source.bucket).download_file(source.key, archive_path)

        log.info("Unzipping %s to %s...", archive_path, unzipped)
        paths = extract_archive(archive_path, unzipped)
        try:
            os.remove(archive_path)
        except OSError as e:
            raise AssemblyError(f"Could not remove {archive_path}: {e}") from e

        log.debug("Asset %s contains %d file(s)", source.content_hash, len(paths))
        return unzipped, paths
