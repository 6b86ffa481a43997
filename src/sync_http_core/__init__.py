"""
sync_http_core - Minimal abortable HTTP/1.1 client

A small HTTP/1.1 client built on getaddrinfo and raw stream sockets.
Every call blocks its caller and can be aborted from another thread.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .http_primitives import Headers, Method, Response, SocketAddress
from .buffer import BufferedReader
from .resolver import NameResolver, ResolverState
from .http11 import HTTPRequest, RequestStatus
from .client import fetch
from .exceptions import (
    HTTPCoreError,
    ResolutionError,
    ConnectionError,
    ProtocolError,
    RequestAborted,
)

__all__ = [
    "Headers",
    "Method",
    "Response",
    "SocketAddress",
    "BufferedReader",
    "NameResolver",
    "ResolverState",
    "HTTPRequest",
    "RequestStatus",
    "fetch",
    "HTTPCoreError",
    "ResolutionError",
    "ConnectionError",
    "ProtocolError",
    "RequestAborted",
]
