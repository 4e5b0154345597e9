"""
HTTP/1.1 exchange implementation for reqstream.

This module implements the HTTP11Connection class that runs a single
HTTP/1.1 request/response exchange over a NetworkStream, using h11
for the wire format. Connections are never reused.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

import h11

from .exceptions import ProtocolError, StreamError
from .network.stream import NetworkStream

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of an HTTP/1.1 exchange."""
    NEW = "new"           # Connection opened, nothing sent yet
    ACTIVE = "active"     # Request sent, response in progress
    DONE = "done"         # Response body fully received
    CLOSED = "closed"     # Connection closed


class HTTP11Connection:
    """
    One HTTP/1.1 request/response exchange.

    The response body is pulled on demand with ``receive_body_chunk``,
    so nothing is read from the network until the caller asks for it.
    """

    DEFAULT_READ_SIZE = 65536

    def __init__(self, stream: NetworkStream, chunk_size: Optional[int] = None) -> None:
        """
        Initialize the exchange.

        Args:
            stream: The NetworkStream to use for communication
            chunk_size: Maximum size of body chunks handed to the caller
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._state = ConnectionState.NEW
        self._chunk_size = chunk_size
        self._read_size = chunk_size or self.DEFAULT_READ_SIZE
        self._pending = b""

        self._bytes_sent = 0
        self._bytes_received = 0

    async def send_request(
        self,
        method: str,
        target: str,
        headers: List[Tuple[str, str]],
        body: Optional[bytes] = None,
    ) -> None:
        """
        Send the request head and body.

        Args:
            method: HTTP method
            target: Request target (path and query)
            headers: List of (name, value) header tuples
            body: Optional request body
        """
        if self._state != ConnectionState.NEW:
            raise ProtocolError("Request already sent on this connection")
        self._state = ConnectionState.ACTIVE

        try:
            await self._send_event(h11.Request(method=method, target=target, headers=headers))
            if body:
                await self._send_event(h11.Data(data=body))
            await self._send_event(h11.EndOfMessage())
        except h11.LocalProtocolError as e:
            raise ProtocolError(str(e), e) from e

        logger.debug(f"Sent {method} {target} ({self._bytes_sent} bytes)")

    async def _send_event(self, event: h11.Event) -> None:
        data = self._h11_connection.send(event)
        if data:
            await self._stream.write(data)
            self._bytes_sent += len(data)

    async def _next_event(self) -> h11.Event:
        while True:
            event = self._h11_connection.next_event()
            if event is not h11.NEED_DATA:
                return event

            data = await self._stream.read(self._read_size)
            # An empty read tells h11 the peer closed the connection
            self._h11_connection.receive_data(data)
            self._bytes_received += len(data)

    async def receive_response(self) -> h11.Response:
        """
        Receive the final response head.

        Informational (1xx) responses are skipped.

        Returns:
            The h11 Response event

        Raises:
            ProtocolError: If the server closes or sends malformed data
        """
        while True:
            try:
                event = await self._next_event()
            except h11.RemoteProtocolError as e:
                raise ProtocolError(str(e), e) from e

            if isinstance(event, h11.InformationalResponse):
                logger.debug(f"Skipping informational response {event.status_code}")
                continue

            if isinstance(event, h11.Response):
                return event

            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed by server")

    async def receive_body_chunk(self) -> Optional[bytes]:
        """
        Receive the next chunk of the response body.

        Returns:
            Chunk of data, or None once the body is complete

        Raises:
            StreamError: If the connection ends before the body is complete
        """
        if self._pending:
            return self._take_pending()

        if self._state == ConnectionState.DONE:
            return None

        while True:
            try:
                event = await self._next_event()
            except h11.RemoteProtocolError as e:
                raise StreamError(str(e), e) from e

            if isinstance(event, h11.Data):
                if not event.data:
                    continue
                self._pending = bytes(event.data)
                return self._take_pending()

            if isinstance(event, h11.EndOfMessage):
                self._state = ConnectionState.DONE
                return None

            if isinstance(event, h11.ConnectionClosed):
                raise StreamError("Connection closed by server")

    def _take_pending(self) -> bytes:
        if self._chunk_size:
            chunk = self._pending[:self._chunk_size]
            self._pending = self._pending[self._chunk_size:]
        else:
            chunk, self._pending = self._pending, b""
        return chunk

    async def close(self) -> None:
        """Close the connection and cleanup resources."""
        if self._state != ConnectionState.CLOSED:
            self._state = ConnectionState.CLOSED
            await self._stream.aclose()
            logger.debug(
                f"Connection closed ({self._bytes_sent} bytes sent, "
                f"{self._bytes_received} bytes received)"
            )
