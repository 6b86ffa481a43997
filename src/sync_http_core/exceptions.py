"""
Custom exceptions for sync_http_core.

This module defines the exception hierarchy used throughout
the library for error handling and debugging.
"""

from typing import Optional


class HTTPCoreError(Exception):
    """Base exception for all sync_http_core errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ResolutionError(HTTPCoreError):
    """Raised when the OS resolver cannot resolve a hostname."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Resolution error: {message}", cause)


class ConnectionError(HTTPCoreError):
    """Raised when a socket operation (open/connect/send/recv) fails."""
    
    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        errno: Optional[int] = None,
    ) -> None:
        super().__init__(f"Connection error: {message}", cause)
        if errno is None and isinstance(cause, OSError):
            errno = cause.errno
        self.errno = errno


class ProtocolError(HTTPCoreError):
    """Raised when the response violates HTTP/1.1 framing."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class RequestAborted(HTTPCoreError):
    """
    Raised inside a worker once abort() has been observed.
    
    This never ends up as an ERROR state; it only unwinds the worker.
    """
    
    def __init__(self, message: str = "Operation aborted") -> None:
        super().__init__(message)
