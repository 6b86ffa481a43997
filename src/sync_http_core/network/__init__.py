"""
Network helpers for sync_http_core.

This module provides the low-level socket utilities used by the
request engine and an in-memory byte source for tests.
"""

from .mock import MockByteSource
from .utils import (
    create_socket,
    parse_url,
    format_host_header,
    is_ipv6_address,
    get_socket_error,
)

__all__ = [
    "MockByteSource",
    "create_socket",
    "parse_url",
    "format_host_header",
    "is_ipv6_address",
    "get_socket_error",
]
