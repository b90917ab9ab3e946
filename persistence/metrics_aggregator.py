"""
Metrics aggregator: per-operation summary statistics and the final report.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

import pandas as pd

from common.metrics_utils import (
    records_to_dataframe,
    calculate_latency_stats,
    calculate_throughput_mbps,
    bytes_to_mb,
)
from persistence.record import OperationRecord, OperationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationSummary:
    """Aggregated statistics for one operation type."""

    kind: OperationType
    count: int = 0
    total_time_ms: float = 0.0
    avg_time_ms: float = 0.0
    total_bytes: int = 0
    p50_ms: float = 0.0
    p95_ms: float = 0.0
    p99_ms: float = 0.0
    throughput_mbps: float = 0.0

    @property
    def has_samples(self) -> bool:
        """False when the average is undefined (no records of this kind)."""
        return self.count > 0


@dataclass(frozen=True)
class Summary:
    """Aggregated statistics for a whole run, one entry per operation type."""

    put: OperationSummary
    get: OperationSummary

    def for_kind(self, kind: OperationType) -> OperationSummary:
        return self.put if kind is OperationType.PUT else self.get


def _summarize(kind: OperationType, partition: pd.DataFrame) -> OperationSummary:
    count = len(partition)
    if count == 0:
        return OperationSummary(kind=kind)

    total_time_ms = float(partition['duration_ms'].sum())
    total_bytes = int(partition['byte_size'].sum())
    latency_stats = calculate_latency_stats(partition, latency_col='duration_ms')
    span_seconds = float(partition['end_time'].max() - partition['start_time'].min())

    return OperationSummary(
        kind=kind,
        count=count,
        total_time_ms=total_time_ms,
        avg_time_ms=total_time_ms / count,
        total_bytes=total_bytes,
        p50_ms=latency_stats['p50'],
        p95_ms=latency_stats['p95'],
        p99_ms=latency_stats['p99'],
        throughput_mbps=calculate_throughput_mbps(total_bytes, span_seconds),
    )


def aggregate(records: Iterable[OperationRecord]) -> Summary:
    """Partition records by operation type and summarize each partition.

    Pure function of ``records``; both partitions are always present.

    Args:
        records: Records drained from the statistics collector

    Returns:
        Summary with PUT and GET statistics
    """
    df = records_to_dataframe(records)
    summaries = {
        kind: _summarize(kind, df[df['kind'] == kind.value])
        for kind in OperationType
    }
    logger.debug(
        f"Aggregated {len(df)} records: "
        f"{summaries[OperationType.PUT].count} put, {summaries[OperationType.GET].count} get"
    )
    return Summary(put=summaries[OperationType.PUT], get=summaries[OperationType.GET])


def format_operation_line(stats: OperationSummary) -> str:
    """Render one fixed-format report line."""
    avg = f"{stats.avg_time_ms:.2f}ms"
    if not stats.has_samples:
        avg += " (no samples)"
    return (
        f"{stats.kind.name} stats: count={stats.count}, "
        f"total_time={stats.total_time_ms:.0f}ms, "
        f"avg_time={avg}, "
        f"total_size={bytes_to_mb(stats.total_bytes):.2f} MB, "
        f"p50={stats.p50_ms:.2f}ms, p95={stats.p95_ms:.2f}ms, p99={stats.p99_ms:.2f}ms, "
        f"throughput={stats.throughput_mbps:.2f} Mbps"
    )


def render_report(summary: Summary) -> str:
    """Render the summary as the PUT line followed by the GET line."""
    lines: List[str] = [format_operation_line(summary.for_kind(kind)) for kind in OperationType]
    return "\n".join(lines)
