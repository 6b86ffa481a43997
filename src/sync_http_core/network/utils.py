"""
Network utilities for sync_http_core.

This module provides utility functions for common network operations
including socket creation, URL parsing and address classification.
"""

import socket
from typing import Optional, Tuple
from urllib.parse import urlparse


def create_socket(
    family: int = socket.AF_INET,
    type: int = socket.SOCK_STREAM,
    proto: int = 0
) -> socket.socket:
    """
    Create a blocking stream socket for the given address family.

    Args:
        family: Address family (default: AF_INET)
        type: Socket type (default: SOCK_STREAM)
        proto: Protocol (default: 0 for auto)

    Returns:
        Configured socket object

    Raises:
        OSError: If socket creation fails
    """
    sock = socket.socket(family, type, proto)

    try:
        # Requests are written in one burst; don't hold back the tail
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    except OSError:
        sock.close()
        raise

    # No timeout: blocking calls are released by shutdown() on abort
    sock.settimeout(None)

    return sock


def parse_url(url: str) -> Tuple[str, str, int, str]:
    """
    Parse URL into components.

    Args:
        url: URL string to parse

    Returns:
        Tuple of (scheme, host, port, path)

    Raises:
        ValueError: If URL is malformed
    """
    parsed = urlparse(url)

    # Extract scheme
    scheme = parsed.scheme or "http"

    # Extract host
    host = parsed.hostname or ""
    if not host:
        raise ValueError("No hostname found in URL")

    # Extract port
    port = parsed.port
    if port is None:
        port = 443 if scheme == "https" else 80

    # Extract path; the fragment never goes on the wire
    path = parsed.path or "/"
    if parsed.query:
        path += "?" + parsed.query

    return scheme, host, port, path


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Format host header for HTTP requests.

    Args:
        host: Hostname
        port: Port number
        scheme: URL scheme

    Returns:
        Formatted host header string
    """
    if is_ipv6_address(host):
        host = f"[{host}]"
    if (scheme == "https" and port == 443) or (scheme == "http" and port == 80):
        return host
    return f"{host}:{port}"


def is_ipv6_address(host: str) -> bool:
    """
    Check if a host string is an IPv6 address.

    Args:
        host: Host string to check

    Returns:
        True if the host is an IPv6 address
    """
    try:
        socket.inet_pton(socket.AF_INET6, host)
        return True
    except OSError:
        return False


def get_socket_error(sock: socket.socket) -> Optional[int]:
    """
    Get the pending error code for a socket.

    Args:
        sock: Socket object

    Returns:
        errno value or None if no error is pending
    """
    try:
        error_code = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    except OSError as e:
        return e.errno
    return error_code or None
