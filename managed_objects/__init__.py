"""
Managed Objects Bucket: custom resource handler for S3 bucket content.

Reconciles a bucket against a declared set of archive assets and inline
objects, then invalidates dependent CloudFront distributions.
"""

__version__ = "1.0.0"
