"""
Data models for bucket reconciliation
"""

from .request import (
    RequestType,
    ArchiveSource,
    InlineObject,
    DeclaredProps,
    ReconciliationRequest,
)
from .actions import CloudFrontInvalidation, InvalidationAction, parse_invalidation_action
from .contribution import Contribution

__all__ = [
    'RequestType',
    'ArchiveSource',
    'InlineObject',
    'DeclaredProps',
    'ReconciliationRequest',
    'CloudFrontInvalidation',
    'InvalidationAction',
    'parse_invalidation_action',
    'Contribution',
]
