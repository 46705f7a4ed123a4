"""
AWS-facing reconciliation services.

- :mod:`operations`: primitive S3 list/upload/download/delete helpers
- :mod:`mirror`: make a bucket exactly match a local tree
- :mod:`invalidation`: CloudFront invalidation dispatch and polling
"""
from .operations import S3Operations, parse_bucket_url
from .mirror import BucketMirror, MirrorResult
from .invalidation import InvalidationDispatcher

__all__ = [
    'S3Operations',
    'parse_bucket_url',
    'BucketMirror',
    'MirrorResult',
    'InvalidationDispatcher',
]
