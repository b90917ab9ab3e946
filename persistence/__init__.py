"""
Record storage and aggregation for the load harness.
"""

from .record import OperationRecord, OperationType
from .collector import StatisticsCollector

__all__ = ['OperationRecord', 'OperationType', 'StatisticsCollector']
