"""
Basic data structures for the load harness.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from configuration import MS_PER_SECOND


class OperationType(Enum):
    """Kind of request a record measures."""

    PUT = "put"
    GET = "get"


@dataclass(frozen=True)
class OperationRecord:
    """Timing and size of one successful request.

    Timestamps come from ``time.perf_counter()`` and are only meaningful
    relative to each other within one process.
    """

    kind: OperationType
    start_time: float
    end_time: float
    byte_size: int
    key: Optional[str] = None
    worker_id: Optional[int] = None

    def __post_init__(self):
        if self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) precedes start_time ({self.start_time})"
            )
        if self.byte_size < 0:
            raise ValueError(f"byte_size must be non-negative, got {self.byte_size}")

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * MS_PER_SECOND
