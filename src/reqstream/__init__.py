"""
reqstream - Streaming HTTP/1.1 request library

A small asyncio HTTP client centred on the response pipeline:
chunked body ingestion, content decoding, redirects, timeouts
and callback-driven backpressure.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .content_type import ContentType
from .codecs import Encoding, ContentDecoder, compress, decompress
from .message import Message
from .request import EncodedContent, Request, encode_content
from .exceptions import (
    RequestError,
    RequestTimeout,
    ConnectTimeout,
    RequestAborted,
    RequestStatus,
    ProtocolError,
    TooManyRedirects,
    StreamError,
    DecodingError,
)

__all__ = [
    "ContentType",
    "Encoding",
    "ContentDecoder",
    "compress",
    "decompress",
    "Message",
    "EncodedContent",
    "Request",
    "encode_content",
    "RequestError",
    "RequestTimeout",
    "ConnectTimeout",
    "RequestAborted",
    "RequestStatus",
    "ProtocolError",
    "TooManyRedirects",
    "StreamError",
    "DecodingError",
]
