"""
Shared utilities for harness metrics calculations: latency statistics, throughput and size conversions.
"""

import logging
from typing import Iterable

import pandas as pd

from configuration import BITS_PER_BYTE, BITS_PER_MEGABIT, BYTES_PER_MB
from persistence.record import OperationRecord

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ['kind', 'start_time', 'end_time', 'duration_ms', 'byte_size']


def records_to_dataframe(records: Iterable[OperationRecord]) -> pd.DataFrame:
    """
    Convert operation records into a DataFrame with one row per record.

    The columns are always present, so an empty input yields an empty frame
    that can still be filtered and summed.

    Args:
        records: Operation records

    Returns:
        DataFrame with columns kind, start_time, end_time, duration_ms, byte_size
    """
    rows = [
        {
            'kind': record.kind.value,
            'start_time': record.start_time,
            'end_time': record.end_time,
            'duration_ms': record.duration_ms,
            'byte_size': record.byte_size,
        }
        for record in records
    ]
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    return df.astype({
        'start_time': 'float64',
        'end_time': 'float64',
        'duration_ms': 'float64',
        'byte_size': 'int64',
    })


def calculate_latency_stats(data: pd.DataFrame, latency_col: str = 'duration_ms') -> dict:
    """
    Calculate latency statistics (mean and percentiles) from a DataFrame.

    Args:
        data: DataFrame with a latency column
        latency_col: Column name for latency values (default: 'duration_ms')

    Returns:
        Dictionary with avg, p50, p95, p99 latency statistics
    """
    if len(data) == 0 or latency_col not in data.columns:
        return {
            'avg': 0.0,
            'p50': 0.0,
            'p95': 0.0,
            'p99': 0.0
        }

    latencies = data[latency_col]

    return {
        'avg': float(latencies.mean()),
        'p50': float(latencies.quantile(0.5)),
        'p95': float(latencies.quantile(0.95)),
        'p99': float(latencies.quantile(0.99))
    }


def calculate_throughput_mbps(total_bytes: float, duration_seconds: float) -> float:
    """
    Calculate throughput in megabits per second from bytes and duration.

    Args:
        total_bytes: Total bytes transferred
        duration_seconds: Duration in seconds

    Returns:
        Throughput in Mbps, 0.0 for a non-positive duration
    """
    if duration_seconds <= 0:
        return 0.0
    return (total_bytes * BITS_PER_BYTE) / (duration_seconds * BITS_PER_MEGABIT)


def bytes_to_mb(total_bytes: float) -> float:
    """Convert bytes to megabytes (MiB)."""
    return total_bytes / BYTES_PER_MB
