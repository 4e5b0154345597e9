"""
Streaming helpers for reqstream.

This module provides the async iterator over a response body and the
backpressure primitive used by streaming callbacks. Reading is driven
by consumption: nothing is pulled from the network until the consumer
asks for the next chunk.
"""

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from .exceptions import StreamError

if TYPE_CHECKING:
    from .http11 import HTTP11Connection  # Forward reference


class ResponseStream:
    """
    Stream for HTTP response bodies.

    Iterating yields raw (still encoded) body chunks in arrival order.
    Any transport failure while reading surfaces as StreamError.
    """

    def __init__(self, connection: "HTTP11Connection") -> None:
        self._connection = connection
        self._bytes_read = 0

    def __aiter__(self) -> "ResponseStream":
        return self

    async def __anext__(self) -> bytes:
        try:
            chunk = await self._connection.receive_body_chunk()
        except StreamError:
            raise
        except (OSError, RuntimeError) as e:
            raise StreamError(f"Error reading from stream: {e}", e) from e

        if chunk is None:
            raise StopAsyncIteration

        self._bytes_read += len(chunk)
        return chunk

    @property
    def bytes_read(self) -> int:
        return self._bytes_read


async def wait_for_consumer(result: Any) -> None:
    """
    Honour the backpressure signal returned by a chunk callback.

    ``None`` (or any other plain value) means continue immediately.
    An ``asyncio.Event`` suspends reading until it is set, and any
    awaitable (coroutine, task, future) suspends until it completes.

    Args:
        result: The value the callback returned
    """
    if isinstance(result, asyncio.Event):
        await result.wait()
    elif inspect.isawaitable(result):
        await result

