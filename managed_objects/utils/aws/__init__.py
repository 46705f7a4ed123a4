"""AWS utilities sub-package.

Contains boto3 session and client construction.
"""
from .aws_utils import (
    AwsClients,
    create_boto3_session,
    create_aws_clients,
)

__all__ = [
    'AwsClients',
    'create_boto3_session',
    'create_aws_clients',
]
