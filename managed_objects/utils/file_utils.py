"""
File system utilities
"""
import os
import posixpath
import shutil
from pathlib import Path
from typing import List

from .logger import get_logger

log = get_logger(__name__)


def ensure_dir(directory):
    """
    Ensure directory exists, create if it doesn't.

    Args:
        directory: Directory path
    """
    os.makedirs(directory, exist_ok=True)


def remove_tree(path):
    """
    Remove a directory tree if it exists.

    Args:
        path: Directory path
    """
    if os.path.exists(path):
        shutil.rmtree(path)


def remove_tree_quietly(path) -> bool:
    """
    Remove a directory tree, logging instead of raising on failure.

    Args:
        path: Directory path

    Returns:
        True if the tree is gone
    """
    try:
        remove_tree(path)
        return True
    except OSError as e:
        log.warning("Could not remove %s: %s", path, e)
        return False


def list_files(root) -> List[str]:
    """
    List every regular file under *root* as a POSIX relative path.

    Args:
        root: Directory to walk

    Returns:
        Sorted relative paths, directories excluded
    """
    base = Path(root)
    if not base.is_dir():
        return []
    return sorted(p.relative_to(base).as_posix() for p in base.rglob('*') if p.is_file())


def normalize_key(key: str) -> str:
    """
    Normalise an object key to a POSIX relative path.

    Leading slashes and ``.`` segments are dropped, backslashes become
    forward slashes.

    Args:
        key: Object key as declared

    Returns:
        Normalised relative path, or an empty string if nothing is left
    """
    cleaned = posixpath.normpath(key.replace('\\', '/').lstrip('/'))
    return '' if cleaned == '.' else cleaned


def is_within(root, relative_path: str) -> bool:
    """
    Check that *relative_path* resolves inside *root*.

    Args:
        root: Containing directory
        relative_path: Path relative to *root*

    Returns:
        True if the joined path does not escape *root*
    """
    if not relative_path or os.path.isabs(relative_path) or posixpath.isabs(relative_path):
        return False
    base = os.path.realpath(root)
    target = os.path.realpath(os.path.join(base, relative_path))
    return os.path.commonpath([base, target]) == base and target != base
