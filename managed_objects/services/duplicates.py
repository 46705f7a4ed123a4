"""
Duplicate key detection across contributors
"""
from collections import Counter, defaultdict
from typing import Dict, List, Sequence

from ..errors import DuplicateKeyError
from ..models.contribution import Contribution
from ..utils.logger import get_logger

log = get_logger(__name__)


def find_duplicates(paths: Sequence[str]) -> List[str]:
    """Return every path occurring more than once, sorted."""
    return sorted(path for path, count in Counter(paths).items() if count > 1)


def check_duplicates(contributions: Sequence[Contribution]) -> None:
    """
    Fail if any relative path was contributed more than once.

    Detection only: no contributor is ever picked as a winner.

    Args:
        contributions: Every contributor's path list

    Raises:
        DuplicateKeyError: Naming each colliding path and its contributors
    """
    duplicates = find_duplicates([p for c in contributions for p in c.paths])
    if not duplicates:
        return

    wanted = set(duplicates)
    owners: Dict[str, List[str]] = defaultdict(list)
    for contribution in contributions:
        for path in contribution.paths:
            if path in wanted:
                owners[path].append(contribution.contributor)

    for path in duplicates:
        log.error("Object key %s contributed by %s", path, ", ".join(owners[path]))
    raise DuplicateKeyError(duplicates, dict(owners))
