"""
Error taxonomy for storage system calls.
"""


class StorageError(Exception):
    """Base class for errors raised by a storage system."""

    def __init__(self, message: str, key: str = None):
        super().__init__(message)
        self.key = key


class DispatchError(StorageError):
    """The request never produced a response: connection, timeout or truncated payload."""


class ApplicationError(StorageError):
    """The service answered with an error (access denied, malformed response, ...)."""

    def __init__(self, message: str, key: str = None, code: str = None, status: int = None):
        super().__init__(message, key=key)
        self.code = code
        self.status = status


class NotFoundError(ApplicationError):
    """The requested object or bucket does not exist."""
