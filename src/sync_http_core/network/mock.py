"""
Mock byte sources for testing.

This module provides an in-memory filler that can stand in for a
socket when exercising BufferedReader without network I/O.
"""

from typing import Iterable, List, Optional

from ..exceptions import RequestAborted


class MockByteSource:
    """
    In-memory filler for BufferedReader.

    Data is served in the given segments, each one possibly split further
    by the size the reader asks for, so tests control where refills land.
    Once the segments are exhausted the source returns b"".
    """

    def __init__(self, segments: Iterable[bytes] = ()) -> None:
        """
        Initialize the mock source.

        Args:
            segments: Blocks of data returned by successive fills.
        """
        self._segments: List[bytes] = list(segments)
        self._aborted = False
        self.requested_sizes: List[int] = []

    def __call__(self, size: int) -> bytes:
        self.requested_sizes.append(size)

        if self._aborted:
            raise RequestAborted()

        if not self._segments:
            return b""

        segment = self._segments[0]
        result, rest = segment[:size], segment[size:]
        if rest:
            self._segments[0] = rest
        else:
            self._segments.pop(0)
        return result

    def add_data(self, data: bytes) -> None:
        """Queue another segment."""
        self._segments.append(data)

    def abort(self) -> None:
        """Make every following fill raise RequestAborted."""
        self._aborted = True

    @property
    def fill_count(self) -> int:
        return len(self.requested_sizes)

    @property
    def remaining(self) -> Optional[bytes]:
        """Unserved data, or None if everything was served."""
        if not self._segments:
            return None
        return b"".join(self._segments)
