"""
HTTP/1.1 request engine for sync_http_core.

This module implements the HTTPRequest class, which drives one stream
socket through connect, send and receive on a background worker while the
caller blocks in run(). Any other thread may call abort() to stop it.
"""

import logging
import socket
import string
import time
from enum import Enum
from typing import List, Optional, Union

from .buffer import BufferedReader
from .concurrency import CompletionSignal, StatusHolder, start_worker
from .exceptions import (
    HTTPCoreError,
    ConnectionError,
    ProtocolError,
    RequestAborted,
)
from .http_primitives import (
    Headers,
    Method,
    Response,
    SocketAddress,
    find_header_value,
)
from .network.utils import create_socket, get_socket_error

logger = logging.getLogger(__name__)

STATUS_LINE_PREFIX = "HTTP/1.1 "


def _all_in(text: str, allowed: str) -> bool:
    # int() alone also takes signs, underscores, "0x" and non-ASCII digits
    return bool(text) and all(char in allowed for char in text)


class RequestStatus(Enum):
    """States of an HTTP request."""
    INITIALIZED = "initialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    REQUEST_SENT = "request_sent"
    COMPLETED = "completed"   # terminal, see HTTPRequest.response
    ERROR = "error"           # terminal, see HTTPRequest.error
    ABORTED = "aborted"       # terminal


TERMINAL_REQUEST_STATES = frozenset({
    RequestStatus.COMPLETED,
    RequestStatus.ERROR,
    RequestStatus.ABORTED,
})


class HTTPRequest:
    """
    Single-use HTTP/1.1 request against a resolved address.

    The engine writes exactly the headers it is given; callers supply
    Host, Connection, Content-Length and friends themselves. The response
    body is read by Content-Length or chunked framing, never by waiting
    for the peer to close, so send "Connection: close" only if wanted.

    Example:
        request = HTTPRequest(
            address,
            "/",
            Method.GET,
            [("Host", "example.com"), ("Connection", "close")],
        )
        request.run()
        if request.status is RequestStatus.COMPLETED:
            print(request.response.status_code)
    """

    # Default configuration
    SEND_CHUNK_SIZE = 4096
    RECV_SIZE = 4096

    def __init__(
        self,
        address: SocketAddress,
        path: str,
        method: Union[Method, str] = Method.GET,
        headers: Optional[Headers] = None,
        send_chunk_size: Optional[int] = None,
        recv_size: Optional[int] = None,
    ) -> None:
        """
        Initialize the request.

        Args:
            address: Resolved address to connect to
            path: Request target written on the request line
            method: Method (with body for POST/PUT/PATCH) or a method name
            headers: Ordered list of (name, value) header tuples
            send_chunk_size: Maximum bytes handed to a single send()
            recv_size: Bytes requested from each recv()
        """
        if isinstance(method, str):
            method = Method.create(method)

        self.address = address
        self.path = path
        self.method = method
        self.request_headers: Headers = list(headers or [])

        self._send_chunk_size = send_chunk_size or self.SEND_CHUNK_SIZE
        self._recv_size = recv_size or self.RECV_SIZE

        self._status: StatusHolder[RequestStatus] = StatusHolder(
            RequestStatus.INITIALIZED, TERMINAL_REQUEST_STATES
        )
        self._signal = CompletionSignal()
        self._socket: Optional[socket.socket] = None
        self._response: Optional[Response] = None
        self._error: Optional[HTTPCoreError] = None

        # Metrics
        self._bytes_sent = 0
        self._bytes_received = 0

    def __del__(self) -> None:
        sock = getattr(self, "_socket", None)
        if sock is not None:
            sock.close()

    def run(self) -> None:
        """
        Perform the request, blocking until a terminal state is reached.

        Failures are never raised; inspect status, response and error
        afterwards.

        Raises:
            RuntimeError: If the request is already in flight
        """
        with self._status.lock:
            status = self._status.value
            if status in TERMINAL_REQUEST_STATES:
                logger.debug(f"Request {self.method} {self.path} already {status.value}")
                return
            if status is not RequestStatus.INITIALIZED:
                raise RuntimeError("HTTPRequest is already running")
            self._status.transition(RequestStatus.CONNECTING)

        start_worker(self._perform, f"request-{self.address}")
        self._signal.wait()

    def abort(self) -> None:
        """
        Abort the request from any thread; no-op once terminal.

        An open socket is shut down in both directions so a worker
        blocked in send() or recv() returns immediately.
        """
        with self._status.lock:
            if not self._status.transition(RequestStatus.ABORTED):
                return
            if self._socket is not None:
                try:
                    self._socket.shutdown(socket.SHUT_RDWR)
                except OSError as e:
                    # Not connected yet; the worker notices the flag instead
                    logger.debug(f"shutdown() on abort failed: {e}")

        logger.debug(f"Request {self.method} {self.path} aborted")
        self._signal.set()

    def _perform(self) -> None:
        start_time = time.time()
        try:
            self._connect()
            self._send_request()
            response = self._receive_response()

            with self._status.lock:
                completed = self._status.transition(RequestStatus.COMPLETED)
                if completed:
                    self._response = response

            if completed:
                logger.debug(
                    f"{self.method} {self.path} -> {response.status_code} "
                    f"({time.time() - start_time:.3f}s)"
                )

        except RequestAborted:
            logger.debug(
                f"{self.method} {self.path} stopped after abort "
                f"({time.time() - start_time:.3f}s)"
            )

        except (ConnectionError, ProtocolError) as e:
            self._fail(e)

        except Exception as e:
            logger.exception(f"Unexpected failure in {self.method} {self.path}")
            self._fail(HTTPCoreError(f"Unexpected error: {e}", cause=e))

        finally:
            self._close_socket()
            self._signal.set()

    def _fail(self, error: HTTPCoreError) -> None:
        with self._status.lock:
            if not self._status.transition(RequestStatus.ERROR):
                return
            self._error = error
        logger.error(f"{self.method} {self.path} failed: {error}")

    def _abort_if_aborted(self) -> None:
        if self._status.value is RequestStatus.ABORTED:
            raise RequestAborted()

    def _set_status(self, status: RequestStatus) -> None:
        self._status.transition(status)

    def _connect(self) -> None:
        try:
            sock = create_socket(self.address.family)
        except OSError as e:
            raise ConnectionError(f"Cannot open socket: {e.strerror}", cause=e)

        with self._status.lock:
            self._socket = sock
        self._abort_if_aborted()

        try:
            sock.connect(self.address.sockaddr)
        except OSError as e:
            self._abort_if_aborted()
            errno = e.errno or get_socket_error(sock)
            raise ConnectionError(
                f"Cannot connect to {self.address}: {e.strerror or e}",
                cause=e,
                errno=errno,
            )

        self._abort_if_aborted()
        self._set_status(RequestStatus.CONNECTED)

    def build_request_bytes(self) -> bytes:
        """
        Serialize the request line, headers and body.

        Returns:
            The exact bytes written to the socket
        """
        lines = [f"{self.method.name} {self.path} HTTP/1.1\r\n"]
        for name, value in self.request_headers:
            lines.append(f"{name}: {value}\r\n")
        lines.append("\r\n")

        data = "".join(lines).encode("utf-8")
        if self.method.sends_body:
            data += self.method.body
        return data

    def _send_request(self) -> None:
        data = memoryview(self.build_request_bytes())

        offset = 0
        while offset < len(data):
            chunk = data[offset:offset + self._send_chunk_size]
            try:
                sent = self._socket.send(chunk)
            except OSError as e:
                self._abort_if_aborted()
                raise ConnectionError(f"send() failed: {e.strerror or e}", cause=e)

            offset += sent
            self._bytes_sent += sent
            self._abort_if_aborted()

        self._set_status(RequestStatus.REQUEST_SENT)

    def _recv(self, size: int) -> bytes:
        """Filler for the BufferedReader over the socket."""
        try:
            data = self._socket.recv(size)
        except OSError as e:
            self._abort_if_aborted()
            raise ConnectionError(f"recv() failed: {e.strerror or e}", cause=e)

        self._abort_if_aborted()

        if not data:
            raise ProtocolError("recv() returned 0 bytes before the response was complete")

        self._bytes_received += len(data)
        return data

    def _receive_response(self) -> Response:
        reader = BufferedReader(self._recv, self._recv_size)

        status_code = self._read_status_line(reader)
        headers = self._read_headers(reader)
        if self._has_body(status_code):
            body = self._read_body(headers, reader)
        else:
            body = b""

        return Response(status_code=status_code, headers=headers, body=body)

    def _read_status_line(self, reader: BufferedReader) -> int:
        line = reader.read_line()

        if not line.startswith(STATUS_LINE_PREFIX):
            raise ProtocolError(f"Not an HTTP/1.1 status line: {line!r}")

        offset = len(STATUS_LINE_PREFIX)
        code = line[offset:offset + 3]
        if len(code) != 3 or not code.isdigit():
            raise ProtocolError(f"Invalid status code in {line!r}")

        return int(code)

    def _read_headers(self, reader: BufferedReader) -> Headers:
        headers: Headers = []

        while True:
            line = reader.read_line()
            if line == "":
                return headers

            name, colon, value = line.partition(":")
            if not colon:
                raise ProtocolError(f"Header line without colon: {line!r}")

            headers.append((name, value.lstrip(" ")))

    def _has_body(self, status_code: int) -> bool:
        # Informational
        if 100 <= status_code < 200:
            return False

        # No Content, Not Modified
        if status_code in (204, 304):
            return False

        return self.method.name != "HEAD"

    def _read_body(self, headers: Headers, reader: BufferedReader) -> bytes:
        transfer_encoding = find_header_value(headers, "Transfer-Encoding", "identity")

        if "chunked" in transfer_encoding.lower().split(" "):
            return self._read_chunked_body(reader)

        content_length = find_header_value(headers, "Content-Length", "0")
        length_text = content_length.strip()
        if length_text.startswith("-") and _all_in(length_text[1:], string.digits):
            raise ProtocolError(f"Negative Content-Length: {length_text}")
        if not _all_in(length_text, string.digits):
            raise ProtocolError(f"Invalid Content-Length: {content_length!r}")
        length = int(length_text)

        return reader.read_exact(length)

    def _read_chunked_body(self, reader: BufferedReader) -> bytes:
        chunks: List[bytes] = []

        while True:
            chunk = self._read_next_chunk(reader)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def _read_next_chunk(self, reader: BufferedReader) -> bytes:
        line = reader.read_line()

        # Chunk extensions (";name=value") are ignored
        size_text = line.split(";", 1)[0].strip()
        if not _all_in(size_text, string.hexdigits):
            raise ProtocolError(f"Invalid chunk size line: {line!r}")
        size = int(size_text, 16)

        data = reader.read_exact(size)
        reader.read_line()
        return data

    def _close_socket(self) -> None:
        with self._status.lock:
            sock, self._socket = self._socket, None
        if sock is not None:
            sock.close()

    @property
    def status(self) -> RequestStatus:
        return self._status.value

    @property
    def response(self) -> Optional[Response]:
        """The complete response once the status is COMPLETED."""
        with self._status.lock:
            return self._response

    @property
    def error(self) -> Optional[HTTPCoreError]:
        """The failure cause once the status is ERROR."""
        with self._status.lock:
            return self._error

    @property
    def status_code(self) -> Optional[int]:
        response = self.response
        return response.status_code if response else None

    @property
    def response_headers(self) -> Headers:
        response = self.response
        return list(response.headers) if response else []

    @property
    def body(self) -> Optional[bytes]:
        response = self.response
        return response.body if response else None

    @property
    def metrics(self) -> dict:
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "status": self.status.value,
        }
