"""
Unit tests for HTTP primitives.

Tests the Method, SocketAddress and Response classes to ensure they
validate their input and maintain immutability.
"""

import dataclasses
import socket

import pytest

from sync_http_core.http_primitives import (
    Method,
    Response,
    SocketAddress,
    find_header_value,
)


class TestMethod:
    """Test Method class functionality."""
    
    def test_bodyless_methods(self) -> None:
        """Test the predefined body-less methods."""
        assert Method.GET.name == "GET"
        assert Method.HEAD.name == "HEAD"
        assert Method.DELETE.name == "DELETE"
        assert not Method.GET.sends_body
        assert Method.GET.body == b""
    
    def test_body_methods(self) -> None:
        """Test the body-carrying factories."""
        assert Method.post(b"a") == Method("POST", b"a")
        assert Method.put(b"b") == Method("PUT", b"b")
        assert Method.patch(b"c") == Method("PATCH", b"c")
        assert Method.post(b"").sends_body
    
    def test_create_from_string(self) -> None:
        """Test creating a Method from a name."""
        assert Method.create("get") == Method.GET
        assert Method.create(b"POST", b"x") == Method.post(b"x")
        assert Method.create("PUT") == Method.put(b"")
    
    def test_body_rejected_for_get(self) -> None:
        """Test that GET/HEAD/DELETE cannot carry a body."""
        with pytest.raises(ValueError):
            Method("GET", b"body")
        
        with pytest.raises(ValueError):
            Method.create("HEAD", b"body")
    
    def test_unsupported_method(self) -> None:
        """Test that unknown method names are rejected."""
        with pytest.raises(ValueError):
            Method.create("TRACE")
    
    def test_body_must_be_bytes(self) -> None:
        """Test body type validation."""
        with pytest.raises(ValueError):
            Method("POST", "text")  # type: ignore[arg-type]
    
    def test_immutability(self) -> None:
        """Test that Method is immutable."""
        method = Method.post(b"x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            method.body = b"y"  # type: ignore[misc]
    
    def test_str(self) -> None:
        """Test string conversion."""
        assert str(Method.patch(b"")) == "PATCH"


class TestSocketAddress:
    """Test SocketAddress class functionality."""
    
    def test_ipv4(self) -> None:
        """Test an IPv4 address."""
        address = SocketAddress(socket.AF_INET, ("8.8.8.8", 80))
        assert address.is_ipv4
        assert not address.is_ipv6
        assert address.host == "8.8.8.8"
        assert address.port == 80
        assert str(address) == "8.8.8.8:80"
    
    def test_ipv6(self) -> None:
        """Test an IPv6 address."""
        address = SocketAddress(socket.AF_INET6, ("::1", 8080, 0, 0))
        assert address.is_ipv6
        assert not address.is_ipv4
        assert str(address) == "[::1]:8080"
    
    def test_from_addrinfo(self) -> None:
        """Test building from a getaddrinfo entry."""
        info = (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 443))
        address = SocketAddress.from_addrinfo(info)
        assert address == SocketAddress(socket.AF_INET, ("127.0.0.1", 443))
    
    def test_hashable(self) -> None:
        """Test that equal addresses hash equally."""
        a = SocketAddress(socket.AF_INET, ("127.0.0.1", 80))
        b = SocketAddress(socket.AF_INET, ("127.0.0.1", 80))
        assert len({a, b}) == 1


class TestResponse:
    """Test Response class functionality."""
    
    def test_basic_creation(self) -> None:
        """Test basic Response creation."""
        response = Response(200, [("Content-Type", "text/plain")], b"Hello")
        assert response.status_code == 200
        assert response.headers == [("Content-Type", "text/plain")]
        assert response.body == b"Hello"
        assert response.text == "Hello"
    
    def test_defaults(self) -> None:
        """Test Response defaults."""
        response = Response(204)
        assert response.headers == []
        assert response.body == b""
    
    def test_get_header_case_insensitive(self) -> None:
        """Test case-insensitive header lookup."""
        response = Response(200, [("Content-Type", "text/html")])
        assert response.get_header("content-type") == "text/html"
        assert response.get_header("CONTENT-TYPE") == "text/html"
        assert response.get_header("X-Missing") is None
        assert response.has_header("Content-type")
        assert not response.has_header("X-Missing")
    
    def test_get_all(self) -> None:
        """Test duplicate headers with different case."""
        response = Response(200, [("Vary", "a"), ("X", "1"), ("vary", "b")])
        assert response.get_all("VARY") == ["a", "b"]
        assert response.get_header("vary") == "a"
    
    def test_validation(self) -> None:
        """Test Response validation."""
        with pytest.raises(ValueError):
            Response("200")  # type: ignore[arg-type]
        
        with pytest.raises(ValueError):
            Response(200, [(b"Name", b"value")])  # type: ignore[list-item]
        
        with pytest.raises(ValueError):
            Response(200, [], "body")  # type: ignore[arg-type]
    
    def test_immutability(self) -> None:
        """Test that Response is immutable."""
        response = Response(200)
        with pytest.raises(dataclasses.FrozenInstanceError):
            response.status_code = 404  # type: ignore[misc]


class TestFindHeaderValue:
    """Test the header lookup helper."""
    
    def test_first_match_wins(self) -> None:
        headers = [("X-A", "1"), ("x-a", "2")]
        assert find_header_value(headers, "x-A") == "1"
    
    def test_default(self) -> None:
        assert find_header_value([], "Content-Length", "0") == "0"
        assert find_header_value([], "Content-Length") is None
