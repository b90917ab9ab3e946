"""
Simple Prometheus metrics exporter for the load harness.
"""

import logging
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from configuration import METRICS_NAMESPACE

logger = logging.getLogger(__name__)

# Payloads run from 1 KiB to 100 MiB, so request durations span several decades
DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0)


class SimplePrometheusExporter:
    """Live per-operation metrics, served over HTTP when a port is given."""

    def __init__(self, port: int = 9100, registry: CollectorRegistry = None):
        self.port = port
        self.registry = registry or CollectorRegistry()
        self.server_started = False

        self.requests_total = Counter(
            f'{METRICS_NAMESPACE}_requests_total', 'Requests by operation and outcome',
            ['operation', 'outcome'], registry=self.registry,
        )
        self.request_duration = Histogram(
            f'{METRICS_NAMESPACE}_request_duration_seconds', 'Duration of successful requests',
            ['operation'], buckets=DURATION_BUCKETS, registry=self.registry,
        )
        self.bytes_transferred = Counter(
            f'{METRICS_NAMESPACE}_bytes_total', 'Bytes transferred by successful requests',
            ['operation'], registry=self.registry,
        )
        self.active_workers = Gauge(
            f'{METRICS_NAMESPACE}_active_workers', 'Running workers', ['operation'],
            registry=self.registry,
        )

    def start_server(self):
        """Start the Prometheus HTTP server."""
        if not self.server_started:
            try:
                start_http_server(self.port, registry=self.registry)
                self.server_started = True
                logger.info(f"Prometheus server started on port {self.port}")
            except Exception as e:
                logger.error(f"Failed to start Prometheus server: {e}")

    def record_outcome(self, operation: str, outcome: str):
        """Count one attempt."""
        self.requests_total.labels(operation=operation, outcome=outcome).inc()

    def record_success(self, operation: str, duration_seconds: float, byte_size: int):
        """Record timing and size of a successful request."""
        self.request_duration.labels(operation=operation).observe(duration_seconds)
        self.bytes_transferred.labels(operation=operation).inc(byte_size)

    def worker_started(self, operation: str):
        self.active_workers.labels(operation=operation).inc()

    def worker_stopped(self, operation: str):
        self.active_workers.labels(operation=operation).dec()
