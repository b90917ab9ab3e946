"""
Async S3-compatible object storage system.
"""

import asyncio
import logging
from typing import List, NamedTuple, Optional

import aioboto3
from aiohttp.client_exceptions import ClientConnectionError, ClientPayloadError
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
)
from urllib3.exceptions import IncompleteRead

from configuration import (
    CONNECT_TIMEOUT_SECONDS,
    MAX_POOL_CONNECTIONS,
    READ_TIMEOUT_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
)
from systems.errors import ApplicationError, DispatchError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

# Failures where no usable response reached us
DISPATCH_EXCEPTIONS = (
    asyncio.TimeoutError,
    BotoConnectionError,
    HTTPClientError,
    IncompleteRead,
    ClientConnectionError,
    ClientPayloadError,
)

NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}


class ListPage(NamedTuple):
    """One page of a ListObjectsV2 response."""

    keys: List[str]
    next_token: Optional[str] = None


def translate_error(error: Exception, key: str = None) -> Optional[StorageError]:
    """Map a transport exception onto the storage error taxonomy.

    Args:
        error: Exception raised by aioboto3/botocore/aiohttp
        key: Object key (or prefix) the request targeted

    Returns:
        The matching StorageError, or None if the exception is not a storage failure
    """
    if isinstance(error, StorageError):
        return error

    if isinstance(error, DISPATCH_EXCEPTIONS):
        return DispatchError(f"{type(error).__name__}: {error}", key=key)

    if isinstance(error, ClientError):
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        status_code = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode', 0)
        message = f"S3 error {error_code} (HTTP {status_code})"
        if error_code in NOT_FOUND_CODES or status_code == 404:
            return NotFoundError(message, key=key, code=error_code, status=status_code)
        return ApplicationError(message, key=key, code=error_code, status=status_code)

    if isinstance(error, BotoCoreError):
        return ApplicationError(f"{type(error).__name__}: {error}", key=key)

    return None


class ObjectStorageSystem:
    """Async S3-compatible storage exposing put, get and list."""

    def __init__(
        self,
        endpoint: str,
        credentials: dict,
        max_connections: int = 100,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.endpoint = endpoint
        self.credentials = credentials
        self.request_timeout = request_timeout

        self._config = self._create_config(max_connections)

        self.session = aioboto3.Session(
            aws_access_key_id=credentials.get("access_key_id") or None,
            aws_secret_access_key=credentials.get("secret_access_key") or None,
            region_name=credentials.get("region_name"),
        )

        self.client = None

        logger.info(
            f"Initialized async storage for {endpoint} "
            f"(max_pool_connections={self._config.max_pool_connections})"
        )

    def _create_config(self, max_connections: int) -> Config:
        """Create the botocore config shared by every request."""
        pool_size = min(max(max_connections, 10), MAX_POOL_CONNECTIONS)
        if max_connections > MAX_POOL_CONNECTIONS:
            logger.warning(
                f"Requested pool size ({max_connections}) exceeds maximum "
                f"({MAX_POOL_CONNECTIONS}); workers will queue for connections"
            )

        return Config(
            max_pool_connections=pool_size,
            connect_timeout=CONNECT_TIMEOUT_SECONDS,
            read_timeout=READ_TIMEOUT_SECONDS,
            retries={
                'max_attempts': 3,
                'mode': 'adaptive',
            },
            s3={
                'payload_signing_enabled': False,
                'addressing_style': 'path',
            },
            tcp_keepalive=True,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        self.client = await self.session.client(
            "s3",
            endpoint_url=self.endpoint or None,
            config=self._config,
        ).__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.client:
            await self.client.__aexit__(exc_type, exc_val, exc_tb)
            self.client = None

    def _require_client(self):
        if not self.client:
            raise RuntimeError("Storage client not initialized. Use async context manager.")

    def _raise_translated(self, error: Exception, key: str):
        storage_error = translate_error(error, key)
        if storage_error is None:
            raise error
        raise storage_error from error

    async def put_object(self, bucket: str, key: str, body: bytes) -> None:
        """Upload ``body`` as a single PUT request.

        Raises:
            DispatchError: Connection-level failure
            ApplicationError: The service rejected the request
        """
        self._require_client()
        try:
            await asyncio.wait_for(
                self.client.put_object(Bucket=bucket, Key=key, Body=body),
                timeout=self.request_timeout,
            )
        except Exception as e:
            self._raise_translated(e, key)

    async def get_object(self, bucket: str, key: str) -> bytes:
        """Download an object and read its body fully into memory.

        Raises:
            DispatchError: Connection-level failure or truncated body
            NotFoundError: The key does not exist
            ApplicationError: Any other service error
        """
        self._require_client()
        try:
            response = await asyncio.wait_for(
                self.client.get_object(Bucket=bucket, Key=key),
                timeout=self.request_timeout,
            )
            body = response["Body"]
            return await asyncio.wait_for(body.read(), timeout=self.request_timeout)
        except Exception as e:
            self._raise_translated(e, key)

    async def list_objects(
        self, bucket: str, prefix: str, continuation_token: Optional[str] = None
    ) -> ListPage:
        """List one page of keys under ``prefix``.

        Returns:
            ListPage whose next_token is None on the last page
        """
        self._require_client()
        params = {"Bucket": bucket, "Prefix": prefix}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        try:
            response = await asyncio.wait_for(
                self.client.list_objects_v2(**params),
                timeout=self.request_timeout,
            )
        except Exception as e:
            self._raise_translated(e, prefix)

        keys = [obj["Key"] for obj in response.get("Contents", [])]
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        return ListPage(keys=keys, next_token=next_token)

    async def verify_connection(self, bucket: str) -> bool:
        """Verify the bucket is reachable."""
        if not self.client:
            logger.error("Client not initialized. Use async context manager.")
            return False

        try:
            await asyncio.wait_for(
                self.client.head_bucket(Bucket=bucket), timeout=self.request_timeout
            )
            logger.info(f"✓ Successfully connected to bucket: {bucket}")
            logger.info(f"✓ Endpoint: {self.endpoint}")
            return True
        except Exception as e:
            logger.warning(f"✗ Connection verification failed for bucket {bucket}: {e}")
            return False
