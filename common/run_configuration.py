"""
Per-run configuration for the load harness.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from configuration import (
    AWS_REGION,
    EMPTY_LISTING_BACKOFF_SECONDS,
    MAX_EMPTY_LISTINGS,
    MAX_OBJECT_SIZE_BYTES,
    MIN_OBJECT_SIZE_BYTES,
    REQUEST_TIMEOUT_SECONDS,
)


class ConfigurationError(ValueError):
    """Invalid run parameters; raised before any worker starts."""


class RunMode(Enum):
    """Termination policy shared by every worker of a run."""

    BOUNDED = "bounded"  # fixed iteration count per worker
    CONTINUOUS = "continuous"  # until cancelled


class KeyStrategy(Enum):
    """How get workers choose the key to read."""

    LISTING = "list"  # pick a random key from a full listing of the prefix
    BLIND = "blind"  # build a put-style key from a random size


@dataclass(frozen=True)
class RunConfiguration:
    """Immutable parameters of one run."""

    endpoint: str
    bucket: str
    prefix: str
    put_workers: int
    get_workers: int
    mode: RunMode = RunMode.BOUNDED
    put_per_worker: Optional[int] = None
    get_per_worker: Optional[int] = None
    key_strategy: KeyStrategy = KeyStrategy.LISTING
    min_object_size: int = MIN_OBJECT_SIZE_BYTES
    max_object_size: int = MAX_OBJECT_SIZE_BYTES
    duration_seconds: Optional[float] = None
    empty_listing_backoff_seconds: float = EMPTY_LISTING_BACKOFF_SECONDS
    max_empty_listings: int = MAX_EMPTY_LISTINGS
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    region: str = AWS_REGION
    seed: Optional[int] = None
    metrics_port: Optional[int] = None

    @classmethod
    def bounded(cls, endpoint: str, bucket: str, prefix: str, put_workers: int,
                put_per_worker: int, get_workers: int, get_per_worker: int,
                **options) -> "RunConfiguration":
        """Configuration for a run with a fixed number of requests per worker."""
        config = cls(endpoint=endpoint, bucket=bucket, prefix=prefix,
                     put_workers=put_workers, get_workers=get_workers,
                     mode=RunMode.BOUNDED, put_per_worker=put_per_worker,
                     get_per_worker=get_per_worker, **options)
        config.validate()
        return config

    @classmethod
    def continuous(cls, endpoint: str, bucket: str, prefix: str, put_workers: int,
                   get_workers: int, **options) -> "RunConfiguration":
        """Configuration for a run that lasts until cancelled."""
        config = cls(endpoint=endpoint, bucket=bucket, prefix=prefix,
                     put_workers=put_workers, get_workers=get_workers,
                     mode=RunMode.CONTINUOUS, **options)
        config.validate()
        return config

    @property
    def total_workers(self) -> int:
        return self.put_workers + self.get_workers

    def validate(self) -> None:
        """Check the parameters.

        Raises:
            ConfigurationError: If any parameter is out of range or inconsistent with the mode
        """
        if not self.endpoint:
            raise ConfigurationError("endpoint must not be empty")
        if not self.bucket:
            raise ConfigurationError("bucket must not be empty")
        if self.put_workers < 0 or self.get_workers < 0:
            raise ConfigurationError("worker counts must be non-negative")

        if self.mode is RunMode.BOUNDED:
            if self.put_per_worker is None or self.get_per_worker is None:
                raise ConfigurationError("bounded mode needs put and get iteration counts")
            if self.put_per_worker < 0 or self.get_per_worker < 0:
                raise ConfigurationError("iteration counts must be non-negative")
            if self.duration_seconds is not None:
                raise ConfigurationError("duration only applies to continuous mode")
        else:
            if self.put_per_worker is not None or self.get_per_worker is not None:
                raise ConfigurationError("continuous mode takes no iteration counts")
            if self.duration_seconds is not None and self.duration_seconds <= 0:
                raise ConfigurationError("duration must be positive")

        if self.min_object_size < 0 or self.max_object_size <= self.min_object_size:
            raise ConfigurationError(
                f"invalid payload size range [{self.min_object_size}, {self.max_object_size})"
            )
        if self.empty_listing_backoff_seconds < 0:
            raise ConfigurationError("listing backoff must be non-negative")
        if self.max_empty_listings < 1:
            raise ConfigurationError("max_empty_listings must be at least 1")
