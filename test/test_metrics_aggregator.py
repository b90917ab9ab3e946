"""
Tests for aggregation and report rendering.
"""

import os
import sys
import unittest

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.metrics_utils import calculate_throughput_mbps, records_to_dataframe
from persistence.metrics_aggregator import aggregate, render_report
from persistence.record import OperationRecord, OperationType


def record(kind, start, duration_ms, byte_size):
    return OperationRecord(kind, start_time=start, end_time=start + duration_ms / 1000.0,
                           byte_size=byte_size)


class TestAggregate(unittest.TestCase):
    """Partitioning, zero-count guard and purity."""

    def setUp(self):
        self.records = [
            record(OperationType.PUT, 0.0, 10.0, 1000),
            record(OperationType.PUT, 1.0, 30.0, 3000),
            record(OperationType.GET, 2.0, 5.0, 500),
            record(OperationType.PUT, 3.0, 20.0, 2000),
            record(OperationType.GET, 4.0, 15.0, 1500),
        ]

    def test_empty_records(self):
        """No records: both partitions present, zero counts, no division error."""
        summary = aggregate([])
        for stats in (summary.put, summary.get):
            self.assertEqual(stats.count, 0)
            self.assertEqual(stats.total_time_ms, 0.0)
            self.assertEqual(stats.avg_time_ms, 0.0)
            self.assertEqual(stats.total_bytes, 0)
            self.assertFalse(stats.has_samples)

    def test_partition_correctness(self):
        summary = aggregate(self.records)

        self.assertEqual(summary.put.count, 3)
        self.assertAlmostEqual(summary.put.total_time_ms, 60.0, places=6)
        self.assertAlmostEqual(summary.put.avg_time_ms, 20.0, places=6)
        self.assertEqual(summary.put.total_bytes, 6000)

        self.assertEqual(summary.get.count, 2)
        self.assertAlmostEqual(summary.get.total_time_ms, 20.0, places=6)
        self.assertAlmostEqual(summary.get.avg_time_ms, 10.0, places=6)
        self.assertEqual(summary.get.total_bytes, 2000)

    def test_single_partition(self):
        """Only puts: the get partition is still reported, with zero count."""
        puts = [r for r in self.records if r.kind is OperationType.PUT]
        summary = aggregate(puts)
        self.assertEqual(summary.put.count, 3)
        self.assertEqual(summary.get.count, 0)
        self.assertEqual(summary.get.avg_time_ms, 0.0)

    def test_idempotent(self):
        """Aggregating the same records twice gives equal summaries."""
        self.assertEqual(aggregate(self.records), aggregate(self.records))
        self.assertEqual(aggregate([]), aggregate([]))

    def test_percentiles(self):
        summary = aggregate(self.records)
        self.assertAlmostEqual(summary.put.p50_ms, 20.0, places=6)
        self.assertLessEqual(summary.put.p50_ms, summary.put.p95_ms)
        self.assertLessEqual(summary.put.p95_ms, summary.put.p99_ms)
        self.assertLessEqual(summary.put.p99_ms, 30.0 + 1e-6)

    def test_throughput_over_partition_span(self):
        """Put span runs from 0.0 to 3.02s."""
        summary = aggregate(self.records)
        expected = calculate_throughput_mbps(6000, 3.02)
        self.assertAlmostEqual(summary.put.throughput_mbps, expected, places=6)
        self.assertEqual(calculate_throughput_mbps(100, 0), 0.0)

    def test_dataframe_columns_for_empty_input(self):
        df = records_to_dataframe([])
        self.assertEqual(len(df), 0)
        self.assertIn('duration_ms', df.columns)
        self.assertIn('byte_size', df.columns)


class TestRenderReport(unittest.TestCase):
    """Fixed-format report."""

    def test_report_lists_both_operations(self):
        report = render_report(aggregate([record(OperationType.PUT, 0.0, 10.0, 2 * 1024 * 1024)]))
        lines = report.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("PUT stats: count=1, total_time=10ms, avg_time=10.00ms"))
        self.assertIn("total_size=2.00 MB", lines[0])
        self.assertTrue(lines[1].startswith("GET stats: count=0, total_time=0ms, avg_time=0.00ms (no samples)"))

    def test_report_for_empty_run(self):
        report = render_report(aggregate([]))
        self.assertEqual(report.count("(no samples)"), 2)


if __name__ == '__main__':
    unittest.main()
