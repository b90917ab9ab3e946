"""
Object storage systems used by the load harness.
"""

from .errors import StorageError, DispatchError, ApplicationError, NotFoundError

__all__ = ['StorageError', 'DispatchError', 'ApplicationError', 'NotFoundError']
