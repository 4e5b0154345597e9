"""
Mock network implementations for testing.

This module provides in-memory implementations of NetworkStream and
NetworkBackend. Tests script the raw bytes a server would send, how
they are sliced into reads, and whether the connection hangs or fails.
"""

import asyncio
from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    Args:
        data: Bytes available for reading, as sent by the server.
        read_size: Upper bound for a single read, to simulate a server
            delivering its response in several pieces.
        hang: When all data is consumed, block instead of reporting end
            of stream, until the stream is closed.
        error: Raised by ``read`` once all data is consumed.
    """

    def __init__(
        self,
        data: bytes = b"",
        read_size: Optional[int] = None,
        hang: bool = False,
        error: Optional[BaseException] = None,
    ) -> None:
        self._data = data
        self._position = 0
        self._read_size = read_size
        self._hang = hang
        self._error = error
        self._closed = False
        self._closed_event: Optional[asyncio.Event] = None
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []
        self.reads = 0

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")

        self.reads += 1
        if self._position >= len(self._data):
            if self._error is not None:
                raise self._error
            if self._hang:
                if self._closed_event is None:
                    self._closed_event = asyncio.Event()
                await self._closed_event.wait()
            return b""

        limits = [n for n in (max_bytes, self._read_size) if n]
        end = len(self._data)
        if limits:
            end = min(self._position + min(limits), end)
        result = self._data[self._position:end]
        self._position = end
        return result

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._write_buffer.append(data)

    async def aclose(self) -> None:
        self._closed = True
        if self._closed_event is not None:
            self._closed_event.set()

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        self._data += data

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Responses are queued per ``(host, port)``; every connection attempt
    takes the next queued stream, so a redirect chain to the same host
    is scripted by queueing one response per hop.
    """

    def __init__(self) -> None:
        self._queued: Dict[Tuple[str, int], Deque[MockNetworkStream]] = defaultdict(deque)
        self.connections: List[MockNetworkStream] = []
        self.connect_calls: List[Tuple[str, int, bool]] = []

    def add_response(
        self, host: str, port: int, data: bytes, **stream_options: Any
    ) -> MockNetworkStream:
        """
        Queue the raw bytes for the next connection to host:port.

        Args:
            host: The hostname.
            port: The port number.
            data: Raw HTTP response bytes.
            **stream_options: Passed through to MockNetworkStream.

        Returns:
            The queued stream, for later inspection.
        """
        stream = MockNetworkStream(data, **stream_options)
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self._queued[(host, port)].append(stream)
        return stream

    def _take(self, host: str, port: int, tls: bool) -> MockNetworkStream:
        self.connect_calls.append((host, port, tls))
        queue = self._queued.get((host, port))
        if not queue:
            raise ConnectionRefusedError(f"No mock response queued for {host}:{port}")
        stream = queue.popleft()
        stream.set_extra_info("ssl_object", tls)
        self.connections.append(stream)
        return stream

    async def connect_tcp(
        self, host: str, port: int, timeout: Optional[float] = None
    ) -> MockNetworkStream:
        return self._take(host, port, tls=False)

    async def connect_tls(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Any = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> MockNetworkStream:
        return self._take(host, port, tls=True)

    def reset(self) -> None:
        """Drop queued responses and recorded connections."""
        self._queued.clear()
        self.connections.clear()
        self.connect_calls.clear()
