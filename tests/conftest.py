"""
Pytest configuration for reqstream tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

from typing import List, Optional, Tuple

import pytest

from reqstream.network.mock import MockNetworkBackend


def build_response(
    status: int = 200,
    headers: Optional[List[Tuple[str, str]]] = None,
    body: bytes = b"",
    reason: str = "OK",
    content_length: bool = True,
) -> bytes:
    """Serialize a raw HTTP/1.1 response."""
    headers = list(headers or [])
    if content_length and not any(name.lower() == "content-length" for name, _ in headers):
        headers.append(("Content-Length", str(len(body))))
    head = f"HTTP/1.1 {status} {reason}\r\n"
    head += "".join(f"{name}: {value}\r\n" for name, value in headers)
    return head.encode("latin-1") + b"\r\n" + body


@pytest.fixture
def mock_backend():
    """Create a fresh mock network backend."""
    return MockNetworkBackend()


@pytest.fixture
def make_response():
    """Factory for raw HTTP/1.1 response bytes."""
    return build_response


@pytest.fixture
def sample_headers():
    """Sample response headers for testing."""
    return [
        (b"Content-Type", b"application/json; charset=UTF-8"),
        (b"Content-Encoding", b"gzip, br"),
        (b"Set-Cookie", b"a=1"),
        (b"Set-Cookie", b"b=2"),
        (b"Server", b"nginx/1.18.0"),
    ]


@pytest.fixture
def sample_stream_data():
    """Sample stream data for testing."""
    return [
        b"Hello",
        b", ",
        b"World",
        b"!",
    ]

