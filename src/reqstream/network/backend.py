"""
Network backend interface for reqstream.

This module defines the NetworkBackend interface that opens
connections for a Request. A backend owns DNS resolution, TCP
and TLS; reqstream never reimplements any of those.
"""

import ssl
from abc import ABC, abstractmethod
from typing import List, Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """
    Interface for network backend implementations.

    Each call opens a brand new connection. Connections are never
    reused between requests.
    """

    @abstractmethod
    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Connect to a TCP endpoint.

        Args:
            host: The hostname or IP address to connect to.
            port: The port number to connect to.
            timeout: Optional timeout in seconds for the connection.

        Returns:
            A NetworkStream representing the TCP connection.

        Raises:
            OSError: If the connection fails.
            asyncio.TimeoutError: If the connection times out.
        """
        pass

    @abstractmethod
    async def connect_tls(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> NetworkStream:
        """
        Connect to a TLS endpoint.

        Args:
            host: The hostname, also used for certificate verification.
            port: The port number to connect to.
            timeout: Optional timeout in seconds for connect and handshake.
            ssl_context: Context to use instead of the default one.
            alpn_protocols: Optional list of ALPN protocols to negotiate.

        Returns:
            A NetworkStream representing the TLS connection.

        Raises:
            OSError: If the connection or the handshake fails.
            asyncio.TimeoutError: If the connection times out.
        """
        pass
