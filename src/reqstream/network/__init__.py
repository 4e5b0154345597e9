"""
Network backend components for reqstream.

This module provides the transport seam used by Request: the
stream and backend interfaces, the asyncio implementation and
in-memory mocks for tests.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .asyncio_backend import AsyncioNetworkBackend, AsyncioNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import (
    URLComponents,
    create_ssl_context,
    format_host_header,
    is_ipv6_address,
    parse_url,
)

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "AsyncioNetworkBackend",
    "AsyncioNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "URLComponents",
    "create_ssl_context",
    "format_host_header",
    "is_ipv6_address",
    "parse_url",
]
