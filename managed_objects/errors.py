"""
Exception taxonomy for bucket reconciliation.

Every failure that aborts an invocation derives from
:class:`ReconciliationError`; the handler reports its message as the
FAILED reason.
"""
import json
from typing import Dict, List, Optional


class ReconciliationError(Exception):
    """Base class for all reconciliation failures."""


class RequestError(ReconciliationError):
    """The incoming event is malformed or declares an unknown action kind."""


class ConfigError(ReconciliationError):
    """An environment setting has an invalid value."""


class FetchError(ReconciliationError):
    """A remote archive object is unreachable or missing."""


class DecodeError(ReconciliationError):
    """An archive is corrupt or contains unsafe entry paths."""


class AssemblyError(ReconciliationError):
    """A local filesystem failure occurred while merging contributors."""


class DuplicateKeyError(ReconciliationError):
    """Two or more contributors declared the same relative path.

    Attributes:
        paths: Sorted list of colliding relative paths
        contributors: Mapping of each colliding path to the contributors
            that produced it
    """

    def __init__(self, paths: List[str], contributors: Optional[Dict[str, List[str]]] = None):
        self.paths = paths
        self.contributors = contributors or {}
        super().__init__(f"Duplicate object keys: {json.dumps(paths)}")


class MirrorError(ReconciliationError):
    """Synchronizing the local tree to the bucket failed."""


class InvalidationError(ReconciliationError):
    """One or more invalidation actions failed.

    Attributes:
        failures: Mapping of distribution id to failure message
    """

    def __init__(self, message: str, failures: Optional[Dict[str, str]] = None):
        self.failures = failures or {}
        super().__init__(message)


class InvalidationTimeoutError(InvalidationError):
    """An invalidation did not complete within the polling budget."""


class ReportError(ReconciliationError):
    """The status callback could not be delivered."""
