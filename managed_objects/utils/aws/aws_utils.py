"""AWS utilities for session management.

Creates the boto3 session and the S3 / CloudFront clients the handler
needs. Clients are built once per cold start and passed into the
services explicitly, so tests can substitute in-memory fakes.
"""
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

# Invalidation polling and large archive downloads both need generous
# read timeouts; retries use botocore's adaptive mode.
_CLIENT_CONFIG = BotoConfig(
    connect_timeout=10,
    read_timeout=60,
    retries={"max_attempts": 5, "mode": "adaptive"},
)


@dataclass
class AwsClients:
    """Bundle of service clients used by one invocation."""

    s3: Any
    cloudfront: Any


def create_boto3_session(region_name: Optional[str] = None):
    """Create a boto3 session from the execution role's credentials.

    Args:
        region_name: Optional AWS region

    Returns:
        boto3.Session object

    Example:
        >>> session = create_boto3_session('us-east-1')
        >>> s3 = session.client('s3')
    """
    return boto3.Session(region_name=region_name)


def create_aws_clients(region_name: Optional[str] = None, session=None) -> AwsClients:
    """Create the S3 and CloudFront clients.

    Args:
        region_name: Optional AWS region
        session: Existing boto3 session to reuse

    Returns:
        AwsClients instance
    """
    session = session or create_boto3_session(region_name)
    return AwsClients(
        s3=session.client('s3', config=_CLIENT_CONFIG),
        cloudfront=session.client('cloudfront', config=_CLIENT_CONFIG),
    )
