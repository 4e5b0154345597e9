"""
HTTP response message for reqstream.

A Message is created as soon as the response head is known and is
filled with decoded body bytes while the response streams in.
"""

import codecs
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from typing_extensions import TypeAlias

from .codecs import parse_encodings
from .content_type import ContentType

HeaderValue: TypeAlias = Union[str, List[str]]
RawHeaders: TypeAlias = Union[
    Iterable[Tuple[Union[str, bytes], Union[str, bytes]]],
    Mapping[str, HeaderValue],
]

# Repeated occurrences of these are kept as lists instead of being joined.
LIST_HEADERS = {"set-cookie"}


def _to_str(value: Union[str, bytes]) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def normalize_headers(raw: Optional[RawHeaders]) -> Dict[str, HeaderValue]:
    """
    Build a lowercased header mapping.

    Repeated headers are joined with ``", "`` except for those in
    ``LIST_HEADERS`` which collect every value in a list.
    """
    headers: Dict[str, HeaderValue] = {}
    if raw is None:
        return headers

    items = raw.items() if isinstance(raw, Mapping) else raw
    for name, value in items:
        key = _to_str(name).lower()
        values = [_to_str(v) for v in value] if isinstance(value, list) else [_to_str(value)]
        for item in values:
            if key in LIST_HEADERS:
                existing = headers.get(key, [])
                if not isinstance(existing, list):
                    existing = [existing]
                headers[key] = existing + [item]
            elif key in headers:
                headers[key] = f"{headers[key]}, {item}"
            else:
                headers[key] = item
    return headers


class Message:
    """
    An HTTP response.

    Attributes:
        status_code: Numeric status code
        reason: Reason phrase sent by the server, if any
        headers: Lowercased header mapping
        content_type: Parsed Content-Type header
        charset: Charset used by ``text()``
        encoding: Raw Content-Encoding header
        encodings: Content encodings in the order they must be decoded
        content: Decoded body received so far
        invalid: Set when the body stream ended abnormally
    """

    DEFAULT_CHARSET = "utf-8"

    def __init__(
        self,
        status_code: int,
        headers: Optional[RawHeaders] = None,
        reason: Union[str, bytes, None] = None,
    ) -> None:
        self.status_code = int(status_code)
        self.reason = _to_str(reason) if reason else ""
        self.headers = normalize_headers(headers)
        self.content_type = ContentType(self.header("content-type"))
        self.charset = self.content_type.get_param("charset", self.DEFAULT_CHARSET)
        self.encoding = self.header("content-encoding")
        self.encodings = parse_encodings(self.encoding)
        self.content = b""
        self.invalid: Optional[bool] = None

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value by name (case-insensitive), lists joined."""
        value = self.headers.get(name.lower())
        if value is None:
            return default
        if isinstance(value, list):
            return ", ".join(value)
        return value

    @property
    def location(self) -> Optional[str]:
        return self.header("location")

    def concat(self, chunk: bytes) -> "Message":
        """Append a decoded chunk to the message content."""
        self.content += chunk
        return self

    def status(self) -> int:
        return self.status_code

    def is_success(self) -> bool:
        """Check if the request was received, understood, and accepted."""
        return 200 <= self.status_code < 300

    def is_redirection(self) -> bool:
        """
        Check if the client has to request another URL.

        A 201 Created or any 3xx status counts, but only when the
        response carries a Location header.
        """
        return "location" in self.headers and (
            self.status_code == 201 or 300 <= self.status_code < 400
        )

    def text(self) -> str:
        """Get the message content decoded with the detected charset."""
        try:
            codecs.lookup(self.charset)
            charset = self.charset
        except LookupError:
            charset = self.DEFAULT_CHARSET
        return self.content.decode(charset)

    def json(self) -> Any:
        """Parse the message content as JSON."""
        return json.loads(self.text())

    def __str__(self) -> str:
        return self.text()

    def __repr__(self) -> str:
        return f"<Message [{self.status_code}]>"
