"""
Pytest configuration for sync_http_core tests.

This file contains shared fixtures and configuration for all tests in
the project, including a small threaded HTTP/1.1 server that frames
its responses with h11.
"""

import logging
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import h11
import pytest

from sync_http_core.http_primitives import SocketAddress

logger = logging.getLogger(__name__)


@dataclass
class ReceivedRequest:
    """A request as seen by the local server."""
    method: str
    target: str
    headers: List[Tuple[str, str]]
    body: bytes


@dataclass
class Reply:
    """
    What the local server sends back.

    With raw set, the bytes are written verbatim and the connection is
    closed; otherwise h11 frames status, headers and body_parts. Each
    entry of body_parts becomes one chunk under chunked encoding.
    """
    status_code: int = 200
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body_parts: List[bytes] = field(default_factory=list)
    delay: float = 0.0
    raw: Optional[bytes] = None


Handler = Callable[[ReceivedRequest], Reply]


def text_reply(text: str, status_code: int = 200) -> Reply:
    body = text.encode("utf-8")
    return Reply(
        status_code=status_code,
        headers=[
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(body))),
        ],
        body_parts=[body],
    )


class LocalHTTPServer:
    """One-request-per-connection HTTP/1.1 server on 127.0.0.1."""

    def __init__(self, handler: Optional[Handler] = None) -> None:
        self.handler: Handler = handler or (lambda request: text_reply("Hello World"))
        self.requests: List[ReceivedRequest] = []
        self._stopping = threading.Event()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(16)
        self._listener.settimeout(0.1)
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)

    @property
    def port(self) -> int:
        return self._listener.getsockname()[1]

    @property
    def address(self) -> SocketAddress:
        return SocketAddress(socket.AF_INET, ("127.0.0.1", self.port))

    def start(self) -> "LocalHTTPServer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stopping.set()
        self._thread.join(timeout=2.0)
        self._listener.close()

    def _accept_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            threading.Thread(target=self._serve, args=(conn,), daemon=True).start()

    def _serve(self, conn: socket.socket) -> None:
        conn.settimeout(10.0)
        try:
            self._handle_connection(conn)
        except (OSError, h11.ProtocolError) as e:
            logger.debug(f"Local server connection ended: {e}")
        finally:
            conn.close()

    def _handle_connection(self, conn: socket.socket) -> None:
        h11_connection = h11.Connection(h11.SERVER)
        request = None
        body = b""

        while True:
            event = h11_connection.next_event()
            if event is h11.NEED_DATA:
                h11_connection.receive_data(conn.recv(65536))
                continue
            if isinstance(event, h11.Request):
                request = event
            elif isinstance(event, h11.Data):
                body += event.data
            elif isinstance(event, h11.EndOfMessage):
                break
            elif isinstance(event, h11.ConnectionClosed):
                return

        received = ReceivedRequest(
            method=request.method.decode("ascii"),
            target=request.target.decode("ascii"),
            headers=[(n.decode("latin-1"), v.decode("latin-1")) for n, v in request.headers.raw_items()],
            body=body,
        )
        self.requests.append(received)

        reply = self.handler(received)
        if reply.delay:
            time.sleep(reply.delay)

        if reply.raw is not None:
            conn.sendall(reply.raw)
            return

        conn.sendall(h11_connection.send(
            h11.Response(status_code=reply.status_code, headers=reply.headers)
        ))
        if received.method != "HEAD":
            for part in reply.body_parts:
                conn.sendall(h11_connection.send(h11.Data(data=part)))
        conn.sendall(h11_connection.send(h11.EndOfMessage()))


@pytest.fixture
def server():
    """Start a local HTTP server; set server.handler to customize replies."""
    local_server = LocalHTTPServer().start()
    yield local_server
    local_server.stop()


@pytest.fixture
def address(server):
    """The server's address as the request engine consumes it."""
    return server.address


@pytest.fixture
def closed_port():
    """A localhost port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def base_headers():
    """Headers every test request sends."""
    return [("Host", "localhost"), ("Connection", "close")]
