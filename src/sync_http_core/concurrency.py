"""
Synchronization scaffolding for sync_http_core.

This module provides the pieces shared by NameResolver and HTTPRequest
to turn background work into a single blocking call that can be
aborted from another thread:

- background workers started on demand, one per run();
- a one-shot completion signal the blocked caller waits on;
- a lock-guarded status holder that refuses to leave a terminal state.
"""

import logging
import threading
from enum import Enum
from typing import Callable, FrozenSet, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Enum)


def start_worker(target: Callable[[], None], name: str) -> threading.Thread:
    """
    Run target on a new daemon thread and return the thread.

    Workers are not queued behind a fixed limit: a getaddrinfo or
    connect() abandoned by abort() keeps its own thread until the OS
    call returns, and never delays later runs or interpreter exit.
    """
    worker = threading.Thread(target=target, name=f"sync_http_core-{name}", daemon=True)
    worker.start()
    logger.debug(f"Started worker {worker.name}")
    return worker


class CompletionSignal:
    """
    Single-use wait primitive.

    The first call to set() releases every waiter; later calls are
    ignored and report False so callers can tell who won.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()

    def set(self) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    @property
    def is_set(self) -> bool:
        return self._event.is_set()


class StatusHolder(Generic[S]):
    """
    Mutex-guarded status with monotonic terminal enforcement.

    Every read and every write of the status goes through one lock.
    transition() only applies when the current value is not terminal,
    which makes it a guarded compare-and-set. Hold `lock` around a
    transition to publish payloads together with the new status.
    """

    def __init__(self, initial: S, terminal: FrozenSet[S]) -> None:
        self._value = initial
        self._terminal = terminal
        self.lock = threading.RLock()

    @property
    def value(self) -> S:
        with self.lock:
            return self._value

    @property
    def is_terminal(self) -> bool:
        with self.lock:
            return self._value in self._terminal

    def transition(self, new_value: S) -> bool:
        """
        Move to new_value unless the current value is terminal.

        Args:
            new_value: The status to move to

        Returns:
            True if the transition was applied
        """
        with self.lock:
            if self._value in self._terminal:
                logger.debug(
                    f"Ignoring transition {self._value.name} -> {new_value.name}"
                )
                return False
            logger.debug(f"Transition {self._value.name} -> {new_value.name}")
            self._value = new_value
            return True
