"""
Buffered reading for sync_http_core.

BufferedReader turns a raw, abort-aware byte source into line- and
length-oriented reads, so the header and chunk parsing in http11 does
not depend on the transport and can be tested against memory.
"""

from typing import Callable

from .exceptions import ProtocolError

Filler = Callable[[int], bytes]


class BufferedReader:
    """
    Line and fixed-length reader over a filler function.

    The filler is called with a target size and returns at most that many
    bytes. It may raise (for example RequestAborted or ConnectionError);
    such errors propagate unchanged out of read_line() and read_exact().
    """

    DEFAULT_FILL_SIZE = 4096

    def __init__(self, filler: Filler, fill_size: int = DEFAULT_FILL_SIZE) -> None:
        """
        Args:
            filler: Callable returning up to n bytes from the source
            fill_size: Target size passed to the filler on each refill
        """
        if fill_size <= 0:
            raise ValueError("fill_size must be positive")
        self._filler = filler
        self._fill_size = fill_size
        self._data = b""
        self._offset = 0

    @property
    def buffered(self) -> int:
        """Number of bytes buffered but not yet consumed."""
        return len(self._data) - self._offset

    def fill_buffer(self, size: int) -> None:
        """Replace the buffer with one fresh block from the filler."""
        data = self._filler(size)
        if not data:
            raise ProtocolError("Byte source returned no data")
        self._data = bytes(data)
        self._offset = 0

    def _ensure_data(self) -> None:
        if self._offset == len(self._data):
            self.fill_buffer(self._fill_size)

    def read_line(self) -> str:
        """
        Read up to the next CR LF and return the text without it.

        Bytes are decoded as latin-1. Stray CR or LF characters that are
        not part of the terminating pair are dropped.
        """
        line = bytearray()
        last = None
        while True:
            self._ensure_data()
            char = self._data[self._offset]
            self._offset += 1

            if last == 0x0D and char == 0x0A:
                return line.decode("latin-1")

            if char != 0x0D and char != 0x0A:
                line.append(char)

            last = char

    def read_exact(self, size: int) -> bytes:
        """
        Read exactly size bytes.

        Raises:
            ProtocolError: If the source runs dry before size bytes arrive
        """
        if size < 0:
            raise ValueError("size must not be negative")

        chunks = []
        remaining = size
        while remaining > 0:
            self._ensure_data()
            available = min(remaining, len(self._data) - self._offset)
            chunks.append(self._data[self._offset:self._offset + available])
            self._offset += available
            remaining -= available

        return b"".join(chunks)
