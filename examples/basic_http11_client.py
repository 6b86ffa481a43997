"""
Basic HTTP/1.1 client example using sync_http_core.

This example demonstrates resolving a hostname, running a request
against one of the resolved addresses, and aborting a request from
another thread.
"""

import logging
import sys
import threading

from sync_http_core import (
    HTTPRequest,
    Method,
    NameResolver,
    RequestStatus,
    ResolverState,
    fetch,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def simple_get_request(hostname: str) -> None:
    """Demonstrate a GET request driven step by step."""
    logger.info(f"Resolving {hostname}...")
    
    resolver = NameResolver(hostname, 80)
    resolver.run()
    
    if resolver.state is not ResolverState.RESOLVED:
        logger.error(f"Resolution failed: {resolver.error}")
        return
    
    logger.info(
        f"{len(resolver.ipv4_results)} IPv4 and "
        f"{len(resolver.ipv6_results)} IPv6 addresses"
    )
    address = (resolver.ipv4_results or resolver.results)[0]
    
    request = HTTPRequest(
        address,
        "/",
        Method.GET,
        [("Host", hostname), ("Connection", "close")],
    )
    request.run()
    
    if request.status is RequestStatus.COMPLETED:
        logger.info(f"Response status: {request.status_code}")
        for name, value in request.response_headers:
            logger.info(f"  {name}: {value}")
        logger.info(f"Response body length: {len(request.body)} bytes")
    else:
        logger.error(f"Request ended as {request.status.value}: {request.error}")


def aborted_request(hostname: str) -> None:
    """Demonstrate aborting a request from another thread."""
    resolver = NameResolver(hostname, 80)
    resolver.run()
    if resolver.state is not ResolverState.RESOLVED:
        return
    
    request = HTTPRequest(
        resolver.results[0],
        "/",
        Method.GET,
        [("Host", hostname), ("Connection", "close")],
    )
    threading.Timer(0.01, request.abort).start()
    request.run()
    
    logger.info(f"Request state after abort: {request.status.value}")


def fetch_url(url: str) -> None:
    """Demonstrate the fetch() shortcut."""
    request = fetch(url)
    logger.info(f"{url} -> {request.status_code} ({len(request.body)} bytes)")


if __name__ == "__main__":
    host = sys.argv[1] if len(sys.argv) > 1 else "example.com"
    simple_get_request(host)
    aborted_request(host)
    fetch_url(f"http://{host}/")
