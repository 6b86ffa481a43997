"""
Name resolution for sync_http_core.

NameResolver blocks its caller while a background worker runs
socket.getaddrinfo, and can be aborted from any other thread.
"""

import logging
import socket
import time
from enum import Enum
from typing import List, Optional

from .concurrency import CompletionSignal, StatusHolder, start_worker
from .exceptions import HTTPCoreError, ResolutionError
from .http_primitives import SocketAddress

logger = logging.getLogger(__name__)


class ResolverState(Enum):
    """States of a NameResolver."""
    INITIALIZED = "initialized"
    RUNNING = "running"
    RESOLVED = "resolved"   # terminal, results available
    ERROR = "error"         # terminal, see NameResolver.error
    ABORTED = "aborted"     # terminal, results cleared


TERMINAL_RESOLVER_STATES = frozenset({
    ResolverState.RESOLVED,
    ResolverState.ERROR,
    ResolverState.ABORTED,
})


class NameResolver:
    """
    Abortable hostname resolver.

    Example:
        resolver = NameResolver("example.com", 80)
        resolver.run()
        if resolver.state is ResolverState.RESOLVED:
            address = resolver.ipv4_results[0]

    getaddrinfo itself cannot be interrupted. abort() releases the caller
    at once and the in-flight lookup finishes on its own worker thread;
    its result is discarded.
    """

    def __init__(self, hostname: str, port: int) -> None:
        """
        Initialize the resolver.

        Args:
            hostname: Hostname or numeric address to resolve
            port: Port to attach to every resolved address
        """
        if port < 0:
            raise ValueError(f"port must not be negative, got {port}")

        self.hostname = hostname
        self.port = port

        self._status: StatusHolder[ResolverState] = StatusHolder(
            ResolverState.INITIALIZED, TERMINAL_RESOLVER_STATES
        )
        self._signal = CompletionSignal()
        self._results: List[SocketAddress] = []
        self._error: Optional[HTTPCoreError] = None

    def run(self) -> None:
        """
        Resolve the hostname, blocking until a terminal state is reached.

        Failures are never raised; inspect state and error afterwards.

        Raises:
            RuntimeError: If the resolver is already running
        """
        with self._status.lock:
            state = self._status.value
            if state in TERMINAL_RESOLVER_STATES:
                logger.debug(f"Resolver for {self.hostname} already {state.value}")
                return
            if state is ResolverState.RUNNING:
                raise RuntimeError("NameResolver is already running")
            self._status.transition(ResolverState.RUNNING)

        start_worker(self._resolve, f"resolve-{self.hostname}")
        self._signal.wait()

    def abort(self) -> None:
        """Abort a pending or running resolution; no-op once terminal."""
        with self._status.lock:
            if self._status.value not in (ResolverState.INITIALIZED, ResolverState.RUNNING):
                return
            self._status.transition(ResolverState.ABORTED)
            self._results = []

        logger.debug(f"Resolution of {self.hostname} aborted")
        self._signal.set()

    def _resolve(self) -> None:
        start_time = time.time()
        try:
            infos = socket.getaddrinfo(
                self.hostname,
                str(self.port),
                socket.AF_UNSPEC,
                socket.SOCK_STREAM,
            )
        except socket.gaierror as e:
            self._fail(ResolutionError(e.strerror or str(e), cause=e))
        except (OSError, UnicodeError) as e:
            self._fail(ResolutionError(str(e), cause=e))
        except Exception as e:
            logger.exception(f"Unexpected failure resolving {self.hostname}")
            self._fail(HTTPCoreError(f"Unexpected error: {e}", cause=e))
        else:
            results = [SocketAddress.from_addrinfo(info) for info in infos]
            with self._status.lock:
                applied = self._status.transition(ResolverState.RESOLVED)
                if applied:
                    self._results = results
            if applied:
                logger.debug(
                    f"Resolved {self.hostname} to {len(results)} addresses "
                    f"({time.time() - start_time:.3f}s)"
                )
            else:
                logger.debug(f"Discarding late result for {self.hostname}")
        finally:
            self._signal.set()

    def _fail(self, error: HTTPCoreError) -> None:
        with self._status.lock:
            if not self._status.transition(ResolverState.ERROR):
                return
            self._error = error
        logger.error(f"Resolution of {self.hostname} failed: {error}")

    @property
    def state(self) -> ResolverState:
        return self._status.value

    @property
    def error(self) -> Optional[HTTPCoreError]:
        """The failure cause once the state is ERROR."""
        with self._status.lock:
            return self._error

    @property
    def results(self) -> List[SocketAddress]:
        """Every resolved address, in resolver order."""
        with self._status.lock:
            return list(self._results)

    @property
    def ipv4_results(self) -> List[SocketAddress]:
        return [address for address in self.results if address.is_ipv4]

    @property
    def ipv6_results(self) -> List[SocketAddress]:
        return [address for address in self.results if address.is_ipv6]
