"""
Shared statistics collector for operation records.
"""

import logging
import threading
from typing import List

from persistence.record import OperationRecord

logger = logging.getLogger(__name__)


class StatisticsCollector:
    """Thread-safe accumulator of operation records.

    Workers append concurrently; the runner drains once after every worker
    has finished. Nothing stops an append after the drain, the join before
    aggregation does.
    """

    def __init__(self):
        self._records: List[OperationRecord] = []
        self._lock = threading.Lock()

    def append(self, record: OperationRecord) -> None:
        """Add a record.

        Args:
            record: Record of one successful request
        """
        with self._lock:
            self._records.append(record)

    def drain_all(self) -> List[OperationRecord]:
        """Return every accumulated record and empty the collector."""
        with self._lock:
            records, self._records = self._records, []
        logger.debug(f"Drained {len(records)} records")
        return records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
