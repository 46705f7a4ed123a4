"""
Object assembler: merges archive assets and inline objects into one tree.

All contributors run concurrently on a thread pool and are joined before
returning, so duplicate detection always sees the complete path list.
"""
import os
import shutil
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import List, Sequence

from ..errors import AssemblyError, ReconciliationError
from ..models.contribution import Contribution
from ..models.request import ArchiveSource, InlineObject
from ..utils.file_utils import ensure_dir, is_within, normalize_key, remove_tree
from ..utils.logger import get_logger
from .staging import ArchiveStager, StagingArea

log = get_logger(__name__)


class ObjectAssembler:
    """Builds the final object tree for one request.

    Args:
        stager: ArchiveStager used to fetch and extract assets
        staging_area: The request's StagingArea
        max_workers: Maximum concurrent contributors
    """

    def __init__(self, stager: ArchiveStager, staging_area: StagingArea, max_workers: int = 8):
        self.stager = stager
        self.staging_area = staging_area
        self.max_workers = max_workers

    def assemble(self, assets: Sequence[ArchiveSource], objects: Sequence[InlineObject]) -> List[Contribution]:
        """
        Write every asset and inline object into the final directory.

        Args:
            assets: Archive sources in declared order
            objects: Inline objects in declared order

        Returns:
            One Contribution per source, assets first, in declared order

        Raises:
            FetchError: If an archive cannot be downloaded
            DecodeError: If an archive is invalid or unsafe
            AssemblyError: On local filesystem failures or unsafe keys
        """
        tasks = [(self._contribute_asset, asset) for asset in assets]
        tasks += [(self._contribute_object, obj) for obj in objects]
        if not tasks:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._guarded, fn, arg) for fn, arg in tasks]
            _, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()

        for future in futures:
            if not future.cancelled() and future.exception() is not None:
                raise future.exception()

        return [future.result() for future in futures]

    @staticmethod
    def _guarded(fn, arg) -> Contribution:
        try:
            return fn(arg)
        except ReconciliationError:
            raise
        except OSError as e:
            raise AssemblyError(f"Filesystem error while assembling objects: {e}") from e

    def _contribute_asset(self, asset: ArchiveSource) -> Contribution:
        staging_dir = self.staging_area.asset_dir(asset.content_hash)
        ensure_dir(staging_dir)
        unzipped, paths = self.stager.stage(asset, staging_dir)

        log.info("Moving %s to %s...", unzipped, self.staging_area.final_dir)
        shutil.copytree(unzipped, self.staging_area.final_dir, dirs_exist_ok=True)
        remove_tree(staging_dir)
        return Contribution(f"asset:{asset.content_hash}", paths)

    def _contribute_object(self, obj: InlineObject) -> Contribution:
        final_dir = self.staging_area.final_dir
        rel_path = normalize_key(obj.key)
        if not rel_path or not is_within(final_dir, rel_path):
            raise AssemblyError(f"Unsafe object key: {obj.key!r}")

        log.info("Adding object %s to %s...", obj.key, final_dir)
        target = os.path.join(final_dir, *rel_path.split('/'))
        ensure_dir(os.path.dirname(target))
        with open(target, 'wb') as f:
            f.write(obj.body.encode('utf-8'))
        return Contribution(f"object:{obj.key}", [rel_path])
