"""
Single PUT/GET attempts against a storage system, timed and classified.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from common.run_configuration import KeyStrategy
from common.workload import WorkloadGenerator
from configuration import EMPTY_LISTING_BACKOFF_SECONDS, MAX_EMPTY_LISTINGS
from persistence.record import OperationRecord, OperationType
from systems.errors import DispatchError

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    SUCCESS = "success"
    SKIP = "skip"  # transient dispatch failure or nothing to read; not measured
    FAILURE = "failure"


@dataclass(frozen=True)
class Outcome:
    """Result of one attempt; only successes carry a record."""

    status: OutcomeStatus
    record: Optional[OperationRecord] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, record: OperationRecord) -> "Outcome":
        return cls(OutcomeStatus.SUCCESS, record=record)

    @classmethod
    def skip(cls, error: Exception = None) -> "Outcome":
        return cls(OutcomeStatus.SKIP, error=error)

    @classmethod
    def failure(cls, error: Exception) -> "Outcome":
        return cls(OutcomeStatus.FAILURE, error=error)

    @property
    def is_success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


class OperationExecutor:
    """Runs single timed requests for the workers of one run.

    The storage system must provide ``put_object``, ``get_object`` and
    ``list_objects`` coroutines raising ``systems.errors`` exceptions.
    """

    def __init__(
        self,
        storage_system,
        bucket: str,
        prefix: str,
        key_strategy: KeyStrategy = KeyStrategy.LISTING,
        empty_listing_backoff_seconds: float = EMPTY_LISTING_BACKOFF_SECONDS,
        max_empty_listings: int = MAX_EMPTY_LISTINGS,
        stop_event: asyncio.Event = None,
    ):
        """Initialize the executor.

        Args:
            storage_system: Storage capability (see class docstring)
            bucket: Target bucket
            prefix: Root prefix under which keys are written and listed
            key_strategy: How get attempts choose a key
            empty_listing_backoff_seconds: Sleep between listings of an empty prefix
            max_empty_listings: Consecutive empty listings before a get attempt is skipped
            stop_event: Cancellation event; interrupts the listing backoff when set
        """
        self.storage_system = storage_system
        self.bucket = bucket
        self.prefix = prefix
        self.key_strategy = key_strategy
        self.empty_listing_backoff_seconds = empty_listing_backoff_seconds
        self.max_empty_listings = max_empty_listings
        self.stop_event = stop_event

        # Diagnostics
        self.listings = 0
        self.empty_listing_backoffs = 0

    @property
    def list_prefix(self) -> str:
        prefix = self.prefix.rstrip("/")
        return f"{prefix}/" if prefix else ""

    def _classify_error(self, kind: OperationType, key: Optional[str], error: Exception) -> Outcome:
        if isinstance(error, DispatchError):
            logger.debug(f"Dispatch error during {kind.name} {key}: {error}")
            return Outcome.skip(error)

        logger.error(f"Error during {kind.name} {key}: {error}")
        return Outcome.failure(error)

    async def execute_put(self, key: str, body: bytes, worker_id: int = None) -> Outcome:
        """Upload ``body`` under ``key`` and time the request."""
        logger.debug(f"Before put {key} ({len(body)} bytes)")
        start_time = time.perf_counter()
        try:
            await self.storage_system.put_object(self.bucket, key, body)
        except Exception as e:
            return self._classify_error(OperationType.PUT, key, e)
        end_time = time.perf_counter()
        logger.debug(f"After put {key}")

        return Outcome.success(OperationRecord(
            kind=OperationType.PUT,
            start_time=start_time,
            end_time=end_time,
            byte_size=len(body),
            key=key,
            worker_id=worker_id,
        ))

    async def execute_get(self, generator: WorkloadGenerator, worker_id: int = None) -> Outcome:
        """Resolve a key, download it and time the request.

        Key resolution (listing, backoff) is not part of the measured duration.
        """
        try:
            key = await self.resolve_key(generator)
        except Exception as e:
            return self._classify_error(OperationType.GET, self.list_prefix, e)

        if key is None:
            return Outcome.skip()

        logger.debug(f"Before get {key}")
        start_time = time.perf_counter()
        try:
            data = await self.storage_system.get_object(self.bucket, key)
        except Exception as e:
            return self._classify_error(OperationType.GET, key, e)
        end_time = time.perf_counter()
        logger.debug(f"After get {key}")

        return Outcome.success(OperationRecord(
            kind=OperationType.GET,
            start_time=start_time,
            end_time=end_time,
            byte_size=len(data),
            key=key,
            worker_id=worker_id,
        ))

    async def resolve_key(self, generator: WorkloadGenerator) -> Optional[str]:
        """Choose the key a get attempt reads.

        Returns:
            The key, or None if the prefix stayed empty or the run was cancelled
        """
        if self.key_strategy is KeyStrategy.BLIND:
            return generator.generate_key(self.prefix, OperationType.PUT, generator.random_size())

        empty_listings = 0
        while True:
            keys = await self.list_all_keys()
            if keys:
                return generator.choose(keys)

            empty_listings += 1
            if empty_listings >= self.max_empty_listings:
                logger.warning(
                    f"No objects under '{self.list_prefix}' after {empty_listings} listings, "
                    f"skipping get attempt"
                )
                return None
            if self._cancelled():
                return None

            self.empty_listing_backoffs += 1
            logger.info(
                f"No objects under '{self.list_prefix}', "
                f"listing again in {self.empty_listing_backoff_seconds}s"
            )
            await self._backoff()

    async def list_all_keys(self) -> List[str]:
        """List every key under the run prefix, following continuation tokens."""
        keys: List[str] = []
        token = None
        while True:
            page = await self.storage_system.list_objects(self.bucket, self.list_prefix, token)
            keys.extend(page.keys)
            if page.next_token is None:
                break
            token = page.next_token

        self.listings += 1
        logger.debug(f"List objects size: {len(keys)}")
        return keys

    def _cancelled(self) -> bool:
        return self.stop_event is not None and self.stop_event.is_set()

    async def _backoff(self):
        if self.stop_event is None:
            await asyncio.sleep(self.empty_listing_backoff_seconds)
            return
        try:
            await asyncio.wait_for(self.stop_event.wait(), timeout=self.empty_listing_backoff_seconds)
        except asyncio.TimeoutError:
            pass
