"""
Tests for CLI argument handling.
"""

import os
import sys
import unittest
from unittest.mock import patch

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli import PutGetBenchCLI
from common.run_configuration import ConfigurationError, KeyStrategy, RunConfiguration, RunMode


class TestBuildConfiguration(unittest.TestCase):
    """Positional counts select the run mode."""

    def setUp(self):
        self.cli = PutGetBenchCLI()

    def build(self, *args):
        return self.cli.build_configuration(self.cli.parser.parse_args(list(args)))

    def test_four_counts_is_bounded(self):
        config = self.build("http://localhost:9000", "bucket", "bench", "2", "3", "4", "5")
        self.assertEqual(config.mode, RunMode.BOUNDED)
        self.assertEqual((config.put_workers, config.put_per_worker), (2, 3))
        self.assertEqual((config.get_workers, config.get_per_worker), (4, 5))
        self.assertEqual(config.key_strategy, KeyStrategy.LISTING)

    def test_two_counts_is_continuous(self):
        config = self.build("http://localhost:9000", "bucket", "bench", "2", "4",
                            "--duration", "30", "--get-mode", "blind")
        self.assertEqual(config.mode, RunMode.CONTINUOUS)
        self.assertEqual((config.put_workers, config.get_workers), (2, 4))
        self.assertIsNone(config.put_per_worker)
        self.assertEqual(config.duration_seconds, 30.0)
        self.assertEqual(config.key_strategy, KeyStrategy.BLIND)

    def test_three_counts_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.build("http://localhost:9000", "bucket", "bench", "1", "2", "3")

    def test_duration_with_bounded_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.build("http://localhost:9000", "bucket", "bench", "1", "1", "1", "1", "--duration", "5")

    def test_size_range_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.build("http://localhost:9000", "bucket", "bench", "1", "1",
                       "--min-size", "4096", "--max-size", "1024")


class TestRunExitCodes(unittest.TestCase):
    """Bad arguments end the process before any worker starts."""

    def setUp(self):
        self.cli = PutGetBenchCLI()

    def test_non_integer_count(self):
        with patch('sys.stderr'), self.assertRaises(SystemExit) as ctx:
            self.cli.run(["http://localhost:9000", "bucket", "bench", "two", "3"])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_negative_count(self):
        with patch('sys.stderr'), self.assertRaises(SystemExit) as ctx:
            self.cli.run(["http://localhost:9000", "bucket", "bench", "1", "-3"])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_missing_arguments(self):
        with patch('sys.stderr'), self.assertRaises(SystemExit) as ctx:
            self.cli.run(["http://localhost:9000"])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_wrong_count_returns_error_without_running(self):
        with patch('cli.uvloop.run') as run_loop, patch('sys.stderr'):
            code = self.cli.run(["http://localhost:9000", "bucket", "bench", "1", "2", "3"])
        self.assertEqual(code, 1)
        run_loop.assert_not_called()

    def test_valid_arguments_start_run(self):
        with patch('cli.uvloop.run', return_value=0) as run_loop:
            code = self.cli.run(["http://localhost:9000", "bucket", "bench", "1", "1", "0", "0"])
        self.assertEqual(code, 0)
        run_loop.assert_called_once()
        run_loop.call_args[0][0].close()


class TestRunConfiguration(unittest.TestCase):
    """Validation of run parameters."""

    def test_bounded_needs_counts(self):
        with self.assertRaises(ConfigurationError):
            RunConfiguration("http://x", "bucket", "p", 1, 1, mode=RunMode.BOUNDED).validate()

    def test_continuous_rejects_counts(self):
        with self.assertRaises(ConfigurationError):
            RunConfiguration("http://x", "bucket", "p", 1, 1, mode=RunMode.CONTINUOUS,
                             put_per_worker=3, get_per_worker=3).validate()

    def test_empty_bucket(self):
        with self.assertRaises(ConfigurationError):
            RunConfiguration.bounded("http://x", "", "p", 1, 1, 1, 1)

    def test_total_workers(self):
        config = RunConfiguration.continuous("http://x", "bucket", "p", 3, 4)
        self.assertEqual(config.total_workers, 7)


if __name__ == '__main__':
    unittest.main()
