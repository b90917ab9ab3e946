"""
Async worker pool running put and get request loops against one bucket.
"""

import asyncio
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from common.executor import OperationExecutor, Outcome, OutcomeStatus
from common.run_configuration import RunConfiguration, RunMode
from common.workload import WorkloadGenerator
from configuration import MS_PER_SECOND, PAYLOAD_THREADS_MIN, PROGRESS_INTERVAL
from persistence.collector import StatisticsCollector
from persistence.prom import SimplePrometheusExporter
from persistence.record import OperationType

logger = logging.getLogger(__name__)


class WorkerPool:
    """Fixed pool of put and get workers sharing one statistics collector.

    Every worker runs the same loop; the run mode decides whether it stops
    after a fixed number of iterations or only when ``stop()`` is called.
    The stop event is checked between iterations, so a request in flight is
    always allowed to finish.
    """

    def __init__(
        self,
        storage_system,
        collector: StatisticsCollector,
        config: RunConfiguration,
        exporter: Optional[SimplePrometheusExporter] = None,
    ):
        """Initialize the worker pool.

        Args:
            storage_system: Storage capability shared by all workers
            collector: Collector receiving the records of successful requests
            config: Run configuration (worker counts, mode, workload bounds)
            exporter: Optional Prometheus exporter for live metrics
        """
        self.collector = collector
        self.config = config
        self.exporter = exporter

        self.stop_event = asyncio.Event()
        self.executor = OperationExecutor(
            storage_system,
            config.bucket,
            config.prefix,
            key_strategy=config.key_strategy,
            empty_listing_backoff_seconds=config.empty_listing_backoff_seconds,
            max_empty_listings=config.max_empty_listings,
            stop_event=self.stop_event,
        )

        self.worker_tasks: List[asyncio.Task] = []
        self.worker_states: Dict[int, Dict[str, Any]] = {}
        self.is_running = False

        # Payload generation is CPU-bound; keep it off the event loop
        self._payload_executor = ThreadPoolExecutor(
            max_workers=max(PAYLOAD_THREADS_MIN, config.put_workers),
            thread_name_prefix="payload",
        )

        logger.info(
            f"Initialized WorkerPool: {config.put_workers} put workers, "
            f"{config.get_workers} get workers, mode={config.mode.value}, "
            f"get key strategy={config.key_strategy.value}"
        )

    def _make_generator(self, worker_id: int) -> WorkloadGenerator:
        rng = random.Random(self.config.seed + worker_id) if self.config.seed is not None else random.Random()
        return WorkloadGenerator(
            rng,
            min_size=self.config.min_object_size,
            max_size=self.config.max_object_size,
        )

    def _iterations_for(self, kind: OperationType) -> Optional[int]:
        if self.config.mode is RunMode.CONTINUOUS:
            return None
        return self.config.put_per_worker if kind is OperationType.PUT else self.config.get_per_worker

    async def start_workers(self):
        """Spawn every put and get worker."""
        if self.is_running:
            logger.warning("Worker pool already running")
            return

        self.stop_event.clear()
        self.is_running = True

        worker_id = 0
        for kind, count in ((OperationType.PUT, self.config.put_workers),
                            (OperationType.GET, self.config.get_workers)):
            iterations = self._iterations_for(kind)
            for _ in range(count):
                self.worker_states[worker_id] = {
                    "kind": kind,
                    "iterations": iterations,
                    "success": 0,
                    "skip": 0,
                    "failure": 0,
                }
                task = asyncio.create_task(self._worker_task(worker_id, kind, iterations))
                self.worker_tasks.append(task)
                worker_id += 1

        logger.info(f"Worker pool ready: {len(self.worker_tasks)} workers")

    async def _worker_task(self, worker_id: int, kind: OperationType, iterations: Optional[int]):
        """Request loop of one worker."""
        worker_state = self.worker_states[worker_id]
        generator = self._make_generator(worker_id)
        remaining = iterations

        if self.exporter:
            self.exporter.worker_started(kind.value)
        try:
            while not self.stop_event.is_set():
                if remaining is not None:
                    if remaining <= 0:
                        break
                    remaining -= 1

                outcome = await self._run_iteration(worker_id, kind, generator)
                self._record_outcome(worker_id, worker_state, kind, outcome)

        except Exception as e:
            logger.error(f"Worker {worker_id} fatal error: {e}", exc_info=True)
        finally:
            if self.exporter:
                self.exporter.worker_stopped(kind.value)
            logger.debug(
                f"Worker {worker_id} ({kind.value}) finished: "
                f"{worker_state['success']} ok, {worker_state['skip']} skipped, "
                f"{worker_state['failure']} failed"
            )

    async def _run_iteration(
        self, worker_id: int, kind: OperationType, generator: WorkloadGenerator
    ) -> Outcome:
        if kind is OperationType.GET:
            return await self.executor.execute_get(generator, worker_id)

        loop = asyncio.get_running_loop()
        size, body = await loop.run_in_executor(self._payload_executor, generator.generate_payload)
        key = generator.generate_key(self.config.prefix, OperationType.PUT, size)
        return await self.executor.execute_put(key, body, worker_id)

    def _record_outcome(
        self, worker_id: int, worker_state: Dict[str, Any], kind: OperationType, outcome: Outcome
    ):
        worker_state[outcome.status.value] += 1
        if self.exporter:
            self.exporter.record_outcome(kind.value, outcome.status.value)

        if outcome.status is not OutcomeStatus.SUCCESS:
            return

        record = outcome.record
        self.collector.append(record)
        if self.exporter:
            self.exporter.record_success(kind.value, record.duration_ms / MS_PER_SECOND, record.byte_size)

        if worker_state["success"] % PROGRESS_INTERVAL == 0:
            logger.debug(f"Worker {worker_id}: {worker_state['success']} {kind.value} requests completed")

    async def wait(self):
        """Block until every worker has finished."""
        if not self.worker_tasks:
            self.is_running = False
            return

        results = await asyncio.gather(*self.worker_tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"Worker task ended with {type(result).__name__}: {result}")

        self.worker_tasks.clear()
        self.is_running = False
        logger.info("All workers finished")

    async def run(self):
        """Start all workers and wait for them."""
        await self.start_workers()
        await self.wait()

    def stop(self):
        """Ask every worker to stop after its current request."""
        if not self.stop_event.is_set():
            logger.info("Stopping worker pool...")
            self.stop_event.set()

    def get_outcome_counts(self) -> Dict[OperationType, Dict[str, int]]:
        """Sum success/skip/failure counts per operation type."""
        counts = {kind: {status.value: 0 for status in OutcomeStatus} for kind in OperationType}
        for state in self.worker_states.values():
            for status in OutcomeStatus:
                counts[state["kind"]][status.value] += state[status.value]
        return counts

    def cleanup(self):
        """Release the payload generation threads."""
        self._payload_executor.shutdown(wait=True)
        logger.info("Worker pool cleaned up")
