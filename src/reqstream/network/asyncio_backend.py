"""
asyncio network backend for reqstream.

Connections are opened with ``asyncio.open_connection``; the event
loop takes care of DNS, sockets and the TLS handshake.
"""

import asyncio
import logging
import ssl
from typing import Any, List, Optional

from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import create_ssl_context

logger = logging.getLogger(__name__)


class AsyncioNetworkStream(NetworkStream):
    """Network stream over an asyncio reader/writer pair."""

    DEFAULT_READ_SIZE = 65536

    def __init__(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")
        return await self._reader.read(max_bytes or self.DEFAULT_READ_SIZE)

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._writer.write(data)
        await self._writer.drain()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            logger.debug(f"Error while closing stream: {e}")

    def get_extra_info(self, name: str) -> Optional[Any]:
        if name == "ssl_object":
            return self._writer.get_extra_info("ssl_object") is not None
        return self._writer.get_extra_info(name)

    @property
    def is_closed(self) -> bool:
        return self._closed


class AsyncioNetworkBackend(NetworkBackend):
    """Network backend built on the running asyncio event loop."""

    DEFAULT_CONNECT_TIMEOUT = 30.0

    def __init__(self, connect_timeout: Optional[float] = None) -> None:
        self._connect_timeout = connect_timeout or self.DEFAULT_CONNECT_TIMEOUT

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> AsyncioNetworkStream:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout or self._connect_timeout,
        )
        logger.debug(f"TCP connection established to {host}:{port}")
        return AsyncioNetworkStream(reader, writer)

    async def connect_tls(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> AsyncioNetworkStream:
        context = ssl_context or create_ssl_context(alpn_protocols)
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, ssl=context, server_hostname=host),
            timeout=timeout or self._connect_timeout,
        )
        logger.debug(f"TLS connection established to {host}:{port}")
        return AsyncioNetworkStream(reader, writer)
