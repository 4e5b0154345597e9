"""
HTTP request builder and send pipeline for reqstream.

A Request collects method, headers, query and body, then ``send`` runs
the response pipeline: connect, write the request, read the head, follow
redirects, and stream the body into a Message or into a caller callback.
"""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from typing_extensions import TypeAlias

from . import __version__
from .codecs import ContentDecoder
from .content_type import ContentType
from .exceptions import (
    ConnectTimeout,
    RequestAborted,
    RequestError,
    RequestStatus,
    RequestTimeout,
    StreamError,
    TooManyRedirects,
)
from .http11 import HTTP11Connection
from .message import Message
from .network.asyncio_backend import AsyncioNetworkBackend
from .network.backend import NetworkBackend
from .network.stream import NetworkStream
from .network.utils import URLComponents, format_host_header, parse_url
from .streams import ResponseStream, wait_for_consumer

logger = logging.getLogger(__name__)

ChunkCallback: TypeAlias = Callable[[Message, bytes], Any]

FORM_MIME_TYPE = "application/x-www-form-urlencoded"

MIME_ALIASES = {
    "buffer": "application/octet-stream",
    "json": "application/json",
    "form": FORM_MIME_TYPE,
    "text": "text/plain",
}


class EncodedContent(NamedTuple):
    """A request body ready to be written."""
    data: bytes
    mime_type: str
    size: int


def encode_content(data: Any, mime_type: Optional[str] = None) -> EncodedContent:
    """
    Encode request body data.

    Without an explicit type, bytes are sent as ``application/octet-stream``,
    strings as ``text/plain`` and anything else as JSON. The short aliases
    ``buffer``, ``json``, ``form`` and ``text`` are accepted as types.

    Args:
        data: Bytes, string, or any JSON-serializable object
        mime_type: Optional mime type or alias

    Returns:
        EncodedContent with the body bytes, resolved mime type and size
    """
    if mime_type:
        kind = str(mime_type).lower()
    elif isinstance(data, (bytes, bytearray, memoryview)):
        kind = "buffer"
    elif isinstance(data, str):
        kind = "text"
    else:
        kind = "json"

    resolved = MIME_ALIASES.get(kind, kind)
    is_form = ContentType(resolved).mime_type == FORM_MIME_TYPE

    if isinstance(data, (bytes, bytearray, memoryview)):
        body = bytes(data)
    elif isinstance(data, str):
        if is_form:
            data = urlencode(parse_qsl(data, keep_blank_values=True))
        body = data.encode("utf-8")
    elif is_form and isinstance(data, Mapping):
        body = urlencode(data, doseq=True).encode("utf-8")
    else:
        body = json.dumps(data, separators=(",", ":")).encode("utf-8")

    return EncodedContent(data=body, mime_type=resolved, size=len(body))


class Request:
    """
    A reusable HTTP request.

    Builder methods return the request itself so calls can be chained::

        message = await (
            Request("https://example.com/api", timeout=5000)
            .set_query("page", 2)
            .set_header("Accept", "application/json")
            .send()
        )

    A Request instance must not be sent concurrently: redirects update
    ``url`` in place and the header mapping is shared by every send.
    """

    DEFAULT_MAX_REDIRECTS = 10
    DEFAULT_USER_AGENT = f"reqstream/{__version__}"
    ACCEPT_ENCODING = "gzip, deflate, br"

    def __init__(
        self,
        url: str,
        method: Optional[str] = None,
        timeout: Optional[int] = None,
        follow_redirects: bool = False,
        accept_encoding: bool = False,
        chunk_size: Optional[int] = None,
        max_redirects: Optional[int] = None,
        stream_redirects: bool = False,
        backend: Optional[NetworkBackend] = None,
    ) -> None:
        """
        Create a Request.

        Args:
            url: Absolute request URL
            method: Request method, defaults to GET (POST once data is set)
            timeout: Per-hop timeout in milliseconds
            follow_redirects: Whether to follow redirect responses
            accept_encoding: Advertise gzip, deflate and br support
            chunk_size: Maximum number of bytes per body chunk
            max_redirects: Redirect hops allowed before giving up
            stream_redirects: Keep the chunk callback across redirect hops
            backend: Network backend, AsyncioNetworkBackend by default
        """
        self.url = str(url)
        self.options: Dict[str, Any] = {"headers": {}}
        self.follow_redirects = bool(follow_redirects)
        self.stream_redirects = bool(stream_redirects)
        self.max_redirects = (
            self.DEFAULT_MAX_REDIRECTS if max_redirects is None else int(max_redirects)
        )
        self.chunk_size = chunk_size
        self.timeout: Optional[int] = None
        self.content: Optional[EncodedContent] = None
        self.backend = backend or AsyncioNetworkBackend()

        if accept_encoding:
            self.set_header("accept-encoding", self.ACCEPT_ENCODING)
        self.set_timeout(timeout)
        self.set_option("method", method)

    @property
    def method(self) -> Optional[str]:
        return self.options.get("method")

    @property
    def headers(self) -> Dict[str, Any]:
        return self.options["headers"]

    def set_timeout(self, timeout: Optional[int]) -> "Request":
        """Set the request timeout in milliseconds; 0 disables it."""
        if timeout is not None:
            self.timeout = int(timeout)
        return self

    def set_option(
        self, name: Union[str, Mapping[str, Any]], value: Any = None
    ) -> "Request":
        """
        Set raw transport options.

        Recognized options are ``method``, ``headers``, ``connect_timeout``,
        ``ssl_context`` and ``alpn_protocols``; others are stored as-is.
        """
        if isinstance(name, str):
            self.options[name] = value
        else:
            for key, item in name.items():
                self.options[str(key)] = item
        return self

    def set_query(
        self, name: Union[str, Mapping[str, Any]], value: Any = None
    ) -> "Request":
        """Append name-value pairs to the URL query string."""
        pairs = [(name, value)] if isinstance(name, str) else list(name.items())
        extra = urlencode([(str(key), str(item)) for key, item in pairs])

        parts = urlsplit(self.url)
        query = f"{parts.query}&{extra}" if parts.query else extra
        self.url = urlunsplit(parts._replace(query=query))
        return self

    def set_header(
        self, name: Union[str, Mapping[str, Any]], value: Any = None
    ) -> "Request":
        """Set request headers; names are lowercased, None removes a header."""
        items = [(name, value)] if isinstance(name, str) else list(name.items())
        for key, item in items:
            key = str(key).lower()
            if item is None:
                self.headers.pop(key, None)
            else:
                self.headers[key] = item
        return self

    def set_data(self, data: Any, mime_type: Optional[str] = None) -> "Request":
        """
        Set the request body.

        Content-Type and Content-Length are derived from the encoded body,
        and the method becomes POST unless it was already set.
        """
        self.content = encode_content(data, mime_type)
        self.set_header("content-type", self.content.mime_type)
        self.set_header("content-length", str(self.content.size))
        if not self.method:
            self.options["method"] = "POST"
        return self

    async def send(self, callback: Optional[ChunkCallback] = None) -> Message:
        """
        Send the request and receive the response.

        Args:
            callback: Optional ``callback(message, chunk)`` that receives raw,
                still encoded body chunks instead of accumulating them. Return
                an awaitable or an ``asyncio.Event`` to pause reading until it
                completes or is set.

        Returns:
            The completed Message

        Raises:
            RequestError: For every failure; ``request`` holds this request
        """
        start_time = time.time()
        try:
            message = await self._send(callback)
        except Exception as error:
            logger.error(f"{self} failed: {error} ({time.time() - start_time:.3f}s)")
            raise RequestError.wrap(error, self)

        logger.debug(
            f"{self} -> {message.status_code} "
            f"({len(message.content)} bytes, {time.time() - start_time:.3f}s)"
        )
        return message

    async def _send(self, callback: Optional[ChunkCallback]) -> Message:
        redirects = 0
        while True:
            message, location = await self._send_once(callback)
            if location is None:
                return message

            redirects += 1
            if redirects > self.max_redirects:
                raise TooManyRedirects(self.max_redirects)

            logger.debug(f"Redirect {message.status_code}: {self.url} -> {location}")
            self.url = location
            if not self.stream_redirects:
                callback = None

    async def _send_once(
        self, callback: Optional[ChunkCallback]
    ) -> Tuple[Message, Optional[str]]:
        url = parse_url(self.url)
        method = self.method or "GET"
        self.options["method"] = method
        self.options["path"] = url.target

        exchange = self._exchange(url, method, callback)
        if not self.timeout:
            return await exchange

        try:
            return await asyncio.wait_for(exchange, self.timeout / 1000)
        except asyncio.TimeoutError:
            raise RequestTimeout(self.timeout) from None

    async def _exchange(
        self,
        url: URLComponents,
        method: str,
        callback: Optional[ChunkCallback],
    ) -> Tuple[Message, Optional[str]]:
        stream = await self._connect(url)
        connection = HTTP11Connection(stream, chunk_size=self.chunk_size)
        try:
            await connection.send_request(
                method,
                url.target,
                self._build_headers(url),
                self.content.data if self.content else None,
            )

            response = await connection.receive_response()
            message = Message(response.status_code, response.headers, response.reason)
            logger.debug(f"{method} {self.url} -> {message.status_code}")

            if self.follow_redirects and message.is_redirection():
                return message, urljoin(self.url, message.location)

            if not message.is_success():
                raise RequestStatus(message.status_code)

            await self._receive_body(connection, message, callback)
            return message, None
        finally:
            await connection.close()

    async def _connect(self, url: URLComponents) -> NetworkStream:
        timeout = self.options.get("connect_timeout")
        # Connect deadlines are reported apart from the request timeout
        try:
            if url.scheme == "https":
                return await self.backend.connect_tls(
                    url.host,
                    url.port,
                    timeout=timeout,
                    ssl_context=self.options.get("ssl_context"),
                    alpn_protocols=self.options.get("alpn_protocols"),
                )
            return await self.backend.connect_tcp(url.host, url.port, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ConnectTimeout(timeout, e) from e

    def _build_headers(self, url: URLComponents) -> list:
        headers: Dict[str, Any] = {
            "host": format_host_header(url.host, url.port, url.scheme),
            "user-agent": self.DEFAULT_USER_AGENT,
            "connection": "close",
        }
        headers.update(self.headers)
        return [(name, str(value)) for name, value in headers.items()]

    async def _receive_body(
        self,
        connection: HTTP11Connection,
        message: Message,
        callback: Optional[ChunkCallback],
    ) -> None:
        stream = ResponseStream(connection)
        decoder = None if callback else ContentDecoder.for_encodings(message.encodings)

        try:
            async for chunk in stream:
                if callback is not None:
                    await wait_for_consumer(callback(message, chunk))
                else:
                    message.concat(await decoder.adecode(chunk))
            if decoder is not None:
                message.concat(await decoder.aflush())
        except StreamError as error:
            message.invalid = True
            raise RequestAborted(message, error) from error
        except Exception:
            message.invalid = True
            raise

        message.invalid = False
        logger.debug(f"Received {stream.bytes_read} body bytes from {self.url}")

    def __str__(self) -> str:
        return f"{self.method or 'GET'} {self.url}"

    def __repr__(self) -> str:
        return f"<Request [{self}]>"
