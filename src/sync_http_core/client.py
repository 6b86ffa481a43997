"""
Convenience client for sync_http_core.

fetch() ties NameResolver and HTTPRequest together for the common
case of one request to one URL. It is the only place that adds headers
on the caller's behalf; HTTPRequest itself never does.
"""

import logging
from typing import Optional

from .exceptions import HTTPCoreError, ResolutionError
from .http11 import HTTPRequest, RequestStatus
from .http_primitives import Headers, Method, SocketAddress, find_header_value
from .network.utils import format_host_header, parse_url
from .resolver import NameResolver, ResolverState

logger = logging.getLogger(__name__)


def pick_address(resolver: NameResolver) -> SocketAddress:
    """
    Choose the address to connect to, preferring IPv4.

    Raises:
        ResolutionError: If the resolver produced no address
    """
    for candidates in (resolver.ipv4_results, resolver.ipv6_results, resolver.results):
        if candidates:
            return candidates[0]
    raise ResolutionError(f"No usable address for {resolver.hostname}")


def resolve(hostname: str, port: int) -> NameResolver:
    """
    Run a NameResolver and raise its error instead of returning it.

    Raises:
        ResolutionError: If resolution failed
    """
    resolver = NameResolver(hostname, port)
    resolver.run()

    if resolver.state is ResolverState.ERROR:
        raise resolver.error

    return resolver


def fetch(
    url: str,
    method: str = "GET",
    headers: Optional[Headers] = None,
    body: Optional[bytes] = None,
) -> HTTPRequest:
    """
    Resolve url, perform one request and return the finished HTTPRequest.

    Host and "Connection: close" are added unless present in headers, and
    Content-Length when a body is given.

    Args:
        url: Absolute http:// URL
        method: HTTP method name
        headers: Optional list of (name, value) header tuples
        body: Optional request body for POST/PUT/PATCH

    Raises:
        ValueError: If the URL is not a plain http URL
        HTTPCoreError: If resolution or the request ends in an error
    """
    scheme, host, port, path = parse_url(url)
    if scheme != "http":
        raise ValueError(f"Unsupported scheme: {scheme!r}")

    request_method = Method.create(method, body)
    request_headers: Headers = list(headers or [])

    if find_header_value(request_headers, "Host") is None:
        request_headers.insert(0, ("Host", format_host_header(host, port, scheme)))
    if find_header_value(request_headers, "Connection") is None:
        request_headers.append(("Connection", "close"))
    if request_method.sends_body and find_header_value(request_headers, "Content-Length") is None:
        request_headers.append(("Content-Length", str(len(request_method.body))))

    resolver = resolve(host, port)
    address = pick_address(resolver)
    logger.debug(f"Fetching {url} via {address}")

    request = HTTPRequest(address, path, request_method, request_headers)
    request.run()

    if request.status is RequestStatus.ERROR:
        raise request.error or HTTPCoreError(f"Request to {url} failed")

    return request
