"""
Tests for workload generation and operation records.
"""

import os
import random
import sys
import unittest

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from configuration import MAX_OBJECT_SIZE_BYTES, MIN_OBJECT_SIZE_BYTES
from common.workload import WorkloadGenerator, generate_key
from persistence.record import OperationRecord, OperationType


class TestWorkloadGenerator(unittest.TestCase):
    """Payload sizes, payload bytes and key naming."""

    def test_default_size_bounds(self):
        """Sizes stay within [1 KiB, 100 MiB)."""
        self.assertEqual(MIN_OBJECT_SIZE_BYTES, 1024)
        self.assertEqual(MAX_OBJECT_SIZE_BYTES, 104857600)

        generator = WorkloadGenerator(random.Random(7))
        sizes = [generator.random_size() for _ in range(10000)]
        self.assertTrue(all(1024 <= s < 104857600 for s in sizes))

    def test_payload_length_matches_size(self):
        """The body holds exactly ``size`` bytes."""
        generator = WorkloadGenerator(random.Random(1), min_size=1024, max_size=8192)
        for _ in range(50):
            size, body = generator.generate_payload()
            self.assertIsInstance(body, bytes)
            self.assertEqual(len(body), size)
            self.assertGreaterEqual(size, 1024)
            self.assertLess(size, 8192)

    def test_seeded_generators_repeat(self):
        """Two generators with the same seed produce the same payloads."""
        first = WorkloadGenerator(random.Random(42), min_size=1024, max_size=4096)
        second = WorkloadGenerator(random.Random(42), min_size=1024, max_size=4096)
        self.assertEqual(first.generate_payload(), second.generate_payload())

    def test_empty_size_range_rejected(self):
        with self.assertRaises(ValueError):
            WorkloadGenerator(min_size=4096, max_size=4096)

    def test_generate_key(self):
        """Keys join prefix, operation segment and discriminator."""
        self.assertEqual(generate_key("bench", OperationType.PUT, 52311), "bench/put_52311")
        self.assertEqual(generate_key("bench/", OperationType.GET, 7), "bench/get_7")
        self.assertEqual(generate_key("", OperationType.PUT, 1024), "put_1024")

    def test_choose_returns_listed_key(self):
        generator = WorkloadGenerator(random.Random(3))
        keys = ["a", "b", "c"]
        chosen = {generator.choose(keys) for _ in range(200)}
        self.assertEqual(chosen, set(keys))


class TestOperationRecord(unittest.TestCase):
    """Record invariants."""

    def test_duration(self):
        record = OperationRecord(OperationType.PUT, start_time=1.0, end_time=1.25, byte_size=2048)
        self.assertAlmostEqual(record.duration_ms, 250.0)
        self.assertGreaterEqual(record.end_time, record.start_time)

    def test_end_before_start_rejected(self):
        with self.assertRaises(ValueError):
            OperationRecord(OperationType.GET, start_time=2.0, end_time=1.0, byte_size=10)

    def test_negative_size_rejected(self):
        with self.assertRaises(ValueError):
            OperationRecord(OperationType.GET, start_time=1.0, end_time=1.0, byte_size=-1)

    def test_record_is_immutable(self):
        record = OperationRecord(OperationType.PUT, start_time=1.0, end_time=2.0, byte_size=1)
        with self.assertRaises(AttributeError):
            record.byte_size = 5


if __name__ == '__main__':
    unittest.main()
