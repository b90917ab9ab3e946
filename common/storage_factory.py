"""
Factory module for creating storage system instances.
"""

import logging

# Suppress boto3/botocore logging BEFORE importing any boto3-related modules
logging.getLogger('botocore').setLevel(logging.CRITICAL)
logging.getLogger('botocore.credentials').setLevel(logging.CRITICAL)
logging.getLogger('boto3').setLevel(logging.CRITICAL)
logging.getLogger('aioboto3').setLevel(logging.CRITICAL)
logging.getLogger('urllib3').setLevel(logging.CRITICAL)
logging.getLogger('s3transfer').setLevel(logging.CRITICAL)

from systems.base import ObjectStorageSystem
from configuration import (
    AWS_ACCESS_KEY_ID,
    AWS_SECRET_ACCESS_KEY,
    AWS_REGION,
    REQUEST_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


def create_storage_system(
    endpoint: str,
    region: str = None,
    max_connections: int = 100,
    request_timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> ObjectStorageSystem:
    """Create the S3-compatible storage system for ``endpoint``.

    Credentials are read from the environment (see configuration).

    Args:
        endpoint: Endpoint URL of the storage service
        region: Signing region (default: AWS_REGION)
        max_connections: Connection pool size, normally the total worker count
        request_timeout: Per-request timeout in seconds

    Returns:
        ObjectStorageSystem (not yet opened; use it as an async context manager)
    """
    credentials = {
        "access_key_id": AWS_ACCESS_KEY_ID,
        "secret_access_key": AWS_SECRET_ACCESS_KEY,
        "region_name": region or AWS_REGION,
    }
    if not AWS_ACCESS_KEY_ID:
        logger.warning("AWS_ACCESS_KEY_ID is not set; falling back to the default credential chain")

    return ObjectStorageSystem(
        endpoint,
        credentials,
        max_connections=max_connections,
        request_timeout=request_timeout,
    )
