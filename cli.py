import os
import sys
import logging
import argparse

# Required: Use uvloop for better performance
import uvloop

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    AWS_REGION,
    MAX_OBJECT_SIZE_BYTES,
    MIN_OBJECT_SIZE_BYTES,
)
from common.run_configuration import ConfigurationError, KeyStrategy, RunConfiguration

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    """argparse type for counts."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def setup_logging(verbose: bool = False):
    """Configure root logging (only if not already configured)."""
    if not logging.root.handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
        )
    elif verbose:
        logging.root.setLevel(logging.DEBUG)


class PutGetBenchCLI:
    """CLI interface for the PUT/GET load harness."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog='putget-bench',
            description='Concurrent PUT/GET load generator for S3-compatible object storage',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Counts:
  PUT_WORKERS PUT_PER_WORKER GET_WORKERS GET_PER_WORKER   bounded run
  PUT_WORKERS GET_WORKERS                                 continuous run (until Ctrl+C or --duration)

Examples:
  # 4 put workers x 10 uploads, 8 get workers x 20 downloads
  putget-bench http://localhost:9000 bench-bucket run1 4 10 8 20

  # Continuous load for 10 minutes, reading blind keys
  putget-bench http://localhost:9000 bench-bucket run1 4 8 --duration 600 --get-mode blind
            """
        )

        parser.add_argument('endpoint', help='Storage endpoint URL')
        parser.add_argument('bucket', help='Target bucket')
        parser.add_argument('root_prefix', help='Key prefix for every object written or read')
        parser.add_argument('counts', nargs='+', type=non_negative_int, metavar='COUNT',
                            help='Worker and iteration counts (2 or 4 integers, see below)')

        parser.add_argument('--get-mode', choices=[s.value for s in KeyStrategy],
                            default=KeyStrategy.LISTING.value,
                            help='How get workers choose keys (default: list)')
        parser.add_argument('--duration', type=float, default=None,
                            help='Stop a continuous run after this many seconds')
        parser.add_argument('--min-size', type=non_negative_int, default=MIN_OBJECT_SIZE_BYTES,
                            help=f'Minimum payload size in bytes (default: {MIN_OBJECT_SIZE_BYTES})')
        parser.add_argument('--max-size', type=non_negative_int, default=MAX_OBJECT_SIZE_BYTES,
                            help=f'Payload size upper bound, exclusive (default: {MAX_OBJECT_SIZE_BYTES})')
        parser.add_argument('--seed', type=int, default=None,
                            help='Base seed for the per-worker random sources')
        parser.add_argument('--region', default=AWS_REGION,
                            help=f'Signing region (default: {AWS_REGION})')
        parser.add_argument('--metrics-port', type=int, default=None,
                            help='Expose Prometheus metrics on this port')
        parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

        return parser

    def build_configuration(self, parsed_args) -> RunConfiguration:
        """Turn parsed arguments into a validated run configuration.

        Raises:
            ConfigurationError: If the arguments describe an invalid run
        """
        options = dict(
            key_strategy=KeyStrategy(parsed_args.get_mode),
            min_object_size=parsed_args.min_size,
            max_object_size=parsed_args.max_size,
            region=parsed_args.region,
            seed=parsed_args.seed,
            metrics_port=parsed_args.metrics_port,
        )
        counts = parsed_args.counts

        if len(counts) == 4:
            put_workers, put_per_worker, get_workers, get_per_worker = counts
            if parsed_args.duration is not None:
                raise ConfigurationError("--duration only applies to continuous runs (2 counts)")
            return RunConfiguration.bounded(
                parsed_args.endpoint, parsed_args.bucket, parsed_args.root_prefix,
                put_workers, put_per_worker, get_workers, get_per_worker, **options
            )
        if len(counts) == 2:
            put_workers, get_workers = counts
            return RunConfiguration.continuous(
                parsed_args.endpoint, parsed_args.bucket, parsed_args.root_prefix,
                put_workers, get_workers, duration_seconds=parsed_args.duration, **options
            )
        raise ConfigurationError(f"expected 2 or 4 counts, got {len(counts)}")

    async def run_load(self, config: RunConfiguration):
        """Run the harness and print the report."""
        from common.runner import LoadRunner
        from persistence.metrics_aggregator import render_report

        logger.info("=== PUT/GET Load Run ===")

        runner = LoadRunner(config)
        summary = await runner.run()

        print("\n=== Final Results ===")
        print(render_report(summary))
        return 0

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)
        setup_logging(parsed_args.verbose)

        try:
            config = self.build_configuration(parsed_args)
        except ConfigurationError as e:
            self.parser.print_usage(sys.stderr)
            logger.error(f"Invalid configuration: {e}")
            return 1

        try:
            return uvloop.run(self.run_load(config))
        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return 1
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            return 1


def main():
    """Main entry point."""
    cli = PutGetBenchCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
