"""
Common utilities for the PUT/GET load harness.
"""

from .workload import WorkloadGenerator
from .worker_pool import WorkerPool

__all__ = ['WorkloadGenerator', 'WorkerPool']
