"""
Load runner: one complete PUT/GET run from configuration to summary.
"""

import asyncio
import logging
import signal
from typing import Optional

from common.run_configuration import RunConfiguration, RunMode
from common.storage_factory import create_storage_system
from common.worker_pool import WorkerPool
from persistence.collector import StatisticsCollector
from persistence.metrics_aggregator import Summary, aggregate
from persistence.prom import SimplePrometheusExporter

logger = logging.getLogger(__name__)


class LoadRunner:
    """Runs the worker pool against a storage system and aggregates the results."""

    def __init__(
        self,
        config: RunConfiguration,
        storage_system=None,
        exporter: Optional[SimplePrometheusExporter] = None,
        install_signal_handlers: bool = True,
    ):
        self.config = config
        self.storage_system = storage_system or create_storage_system(
            config.endpoint,
            region=config.region,
            max_connections=config.total_workers,
            request_timeout=config.request_timeout_seconds,
        )
        if exporter is None and config.metrics_port:
            exporter = SimplePrometheusExporter(config.metrics_port)
        self.exporter = exporter
        self.install_signal_handlers = install_signal_handlers

        self.collector = StatisticsCollector()
        self.worker_pool = WorkerPool(self.storage_system, self.collector, config, exporter)

        logger.info(
            f"Initialized load runner: {config.endpoint} bucket={config.bucket} "
            f"prefix={config.prefix!r} mode={config.mode.value}"
        )

    def stop(self):
        """Request a cooperative stop of every worker."""
        self.worker_pool.stop()

    def _add_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> bool:
        try:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self.stop)
            return True
        except (NotImplementedError, RuntimeError) as e:
            logger.debug(f"Signal handlers unavailable: {e}")
            return False

    @staticmethod
    def _remove_signal_handlers(loop: asyncio.AbstractEventLoop):
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    async def run(self) -> Summary:
        """Execute the run and return its summary."""
        loop = asyncio.get_running_loop()

        if self.exporter:
            self.exporter.start_server()

        async with self.storage_system:
            await self.storage_system.verify_connection(self.config.bucket)

            handlers_installed = self.install_signal_handlers and self._add_signal_handlers(loop)
            timer = None
            try:
                await self.worker_pool.start_workers()

                if self.config.mode is RunMode.CONTINUOUS:
                    if self.config.duration_seconds:
                        logger.info(f"Running for {self.config.duration_seconds}s")
                        timer = loop.call_later(self.config.duration_seconds, self.stop)
                    else:
                        logger.info("Running until interrupted (Ctrl+C to stop)")

                await self.worker_pool.wait()
            finally:
                if timer:
                    timer.cancel()
                if handlers_installed:
                    self._remove_signal_handlers(loop)
                self.worker_pool.cleanup()

        records = self.collector.drain_all()
        summary = aggregate(records)

        for kind, counts in self.worker_pool.get_outcome_counts().items():
            logger.info(
                f"{kind.name} attempts: {counts['success']} succeeded, "
                f"{counts['skip']} skipped, {counts['failure']} failed"
            )
        logger.info(f"Executor listings: {self.worker_pool.executor.listings}, "
                    f"empty-listing backoffs: {self.worker_pool.executor.empty_listing_backoffs}")

        return summary
