"""
HTTP primitives for sync_http_core.

This module defines the core data structures shared by the resolver and
the request engine. All classes are immutable to ensure thread safety
and simplify reasoning.
"""

import socket
from dataclasses import dataclass, field
from typing import (
    Any,
    ClassVar,
    List,
    Optional,
    Tuple,
    Union,
)

from typing_extensions import TypeAlias


# Type aliases for better readability
Headers: TypeAlias = List[Tuple[str, str]]
StatusCode: TypeAlias = int


def find_header_value(
    headers: Headers,
    name: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Return the value of the first header matching name (case-insensitive).

    Args:
        headers: List of (name, value) header tuples
        name: Header name to look for
        default: Value returned when the header is absent
    """
    name_lower = name.lower()
    for header_name, header_value in headers:
        if header_name.lower() == name_lower:
            return header_value
    return default


@dataclass(frozen=True)
class Method:
    """
    HTTP request method, carrying the request body for POST/PUT/PATCH.

    Use the class attributes for body-less methods and the factory
    methods for the others:

        Method.GET
        Method.post(b'{"a": 1}')
    """

    BODY_METHODS: ClassVar[Tuple[str, ...]] = ("POST", "PUT", "PATCH")
    BODYLESS_METHODS: ClassVar[Tuple[str, ...]] = ("GET", "HEAD", "DELETE")

    GET: ClassVar["Method"]
    HEAD: ClassVar["Method"]
    DELETE: ClassVar["Method"]

    name: str
    body: bytes = b""

    def __post_init__(self) -> None:
        """Validate method data after initialization."""
        if self.name not in self.BODY_METHODS + self.BODYLESS_METHODS:
            raise ValueError(f"Unsupported method: {self.name!r}")

        if not isinstance(self.body, bytes):
            raise ValueError("body must be bytes")

        if self.body and self.name in self.BODYLESS_METHODS:
            raise ValueError(f"{self.name} requests cannot carry a body")

    @classmethod
    def create(
        cls,
        name: Union[str, bytes],
        body: Optional[bytes] = None,
    ) -> "Method":
        """
        Create a Method with proper type conversion.

        Args:
            name: Method name (case-insensitive)
            body: Optional request body for POST/PUT/PATCH
        """
        if isinstance(name, bytes):
            name = name.decode("ascii")
        return cls(name=name.upper(), body=body or b"")

    @classmethod
    def post(cls, body: bytes) -> "Method":
        return cls("POST", body)

    @classmethod
    def put(cls, body: bytes) -> "Method":
        return cls("PUT", body)

    @classmethod
    def patch(cls, body: bytes) -> "Method":
        return cls("PATCH", body)

    @property
    def sends_body(self) -> bool:
        """Whether the body bytes are written after the header block."""
        return self.name in self.BODY_METHODS

    def __str__(self) -> str:
        return self.name


Method.GET = Method("GET")
Method.HEAD = Method("HEAD")
Method.DELETE = Method("DELETE")


@dataclass(frozen=True)
class SocketAddress:
    """
    Immutable OS-level socket address.

    Wraps the family tag and the sockaddr tuple returned by
    socket.getaddrinfo, ready to be passed to socket.connect.
    """

    family: int
    sockaddr: Tuple[Any, ...]

    @classmethod
    def from_addrinfo(cls, info: Tuple[Any, ...]) -> "SocketAddress":
        """Build a SocketAddress from one getaddrinfo() entry."""
        family, _type, _proto, _canonname, sockaddr = info
        return cls(family=int(family), sockaddr=tuple(sockaddr))

    @property
    def host(self) -> str:
        """Numeric string form of the network address."""
        return self.sockaddr[0]

    @property
    def port(self) -> int:
        return self.sockaddr[1]

    @property
    def is_ipv4(self) -> bool:
        return self.family == socket.AF_INET

    @property
    def is_ipv6(self) -> bool:
        return self.family == socket.AF_INET6

    def __str__(self) -> str:
        if self.is_ipv6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response representation.

    Holds the status code, the headers in wire order and the
    fully-read body of a completed request.
    """

    status_code: StatusCode
    headers: Headers = field(default_factory=list)
    body: bytes = b""

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, str) or not isinstance(value, str):
                raise ValueError("header names and values must be str")

        if not isinstance(self.body, bytes):
            raise ValueError("body must be bytes")

    def get_header(self, name: str) -> Optional[str]:
        """Get a header value by name (case-insensitive)."""
        return find_header_value(self.headers, name)

    def get_all(self, name: str) -> List[str]:
        """Get every value of a header, in wire order (case-insensitive)."""
        name_lower = name.lower()
        return [
            header_value
            for header_name, header_value in self.headers
            if header_name.lower() == name_lower
        ]

    def has_header(self, name: str) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, replacing undecodable bytes."""
        return self.body.decode("utf-8", errors="replace")
