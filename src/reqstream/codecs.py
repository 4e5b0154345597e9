"""
Content-encoding support for reqstream.

This module maps content-encoding names onto decompression transforms.
It offers a stateless ``decompress`` for whole buffers and a family of
streaming decoders that keep codec state across chunk boundaries, which
is what the response pipeline uses while a body is still arriving.

Unrecognized encoding names are never an error: they resolve to
``Encoding.IDENTITY`` and the data passes through unchanged.
"""

import asyncio
import gzip
import logging
import zlib
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import brotli
from typing_extensions import TypeAlias

from .exceptions import DecodingError

logger = logging.getLogger(__name__)

Transform: TypeAlias = Callable[[bytes], bytes]


class Encoding(Enum):
    """Supported content encodings."""
    GZIP = "gzip"
    DEFLATE = "deflate"
    BR = "br"
    IDENTITY = "identity"

    @classmethod
    def parse(cls, name: str) -> "Encoding":
        """Resolve an encoding name, falling back to IDENTITY."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.IDENTITY


def parse_encodings(header: Optional[str]) -> List[str]:
    """
    Split a Content-Encoding header into decode order.

    Encodings are listed in the order they were applied, so the last one
    listed is the outermost layer and has to be removed first.

    Args:
        header: Raw Content-Encoding header value

    Returns:
        Lowercased encoding names, in the order they must be decoded
    """
    if not header:
        return []
    names = [name.strip().lower() for name in header.split(",")]
    return [name for name in reversed(names) if name]


def _inflate(data: bytes) -> bytes:
    # "deflate" is supposed to be zlib-wrapped but many servers send raw deflate
    try:
        return zlib.decompress(data)
    except zlib.error:
        return zlib.decompress(data, -zlib.MAX_WBITS)


def _identity(data: bytes) -> bytes:
    return data


DECOMPRESSORS: Dict[Encoding, Transform] = {
    Encoding.GZIP: gzip.decompress,
    Encoding.DEFLATE: _inflate,
    Encoding.BR: brotli.decompress,
    Encoding.IDENTITY: _identity,
}

COMPRESSORS: Dict[Encoding, Transform] = {
    Encoding.GZIP: gzip.compress,
    Encoding.DEFLATE: zlib.compress,
    Encoding.BR: brotli.compress,
    Encoding.IDENTITY: _identity,
}


async def decompress(chunk: bytes, encodings: Optional[Iterable[str]]) -> bytes:
    """
    Decompress a complete buffer.

    Args:
        chunk: Compressed data
        encodings: Encoding names in decode order

    Returns:
        The decoded data

    Raises:
        DecodingError: If a recognized codec rejects the data
    """
    for name in encodings or ():
        encoding = Encoding.parse(name)
        if encoding is Encoding.IDENTITY:
            continue
        try:
            chunk = await asyncio.to_thread(DECOMPRESSORS[encoding], chunk)
        except (OSError, EOFError, zlib.error, brotli.error) as exc:
            raise DecodingError(f"invalid {encoding.value} data", exc) from exc
    return chunk


def compress(data: bytes, encodings: Iterable[str]) -> bytes:
    """Compress data, applying encodings in the order listed."""
    for name in encodings:
        data = COMPRESSORS[Encoding.parse(name)](data)
    return data


class ContentDecoder:
    """
    Base class for streaming content decoders.

    ``decode`` may be fed arbitrary slices of the encoded body and
    ``flush`` returns whatever the codec still buffers once the body
    has ended. The async variants run each step off the event loop.
    """

    def decode(self, data: bytes) -> bytes:
        raise NotImplementedError()  # pragma: no cover

    def flush(self) -> bytes:
        raise NotImplementedError()  # pragma: no cover

    async def adecode(self, data: bytes) -> bytes:
        return await asyncio.to_thread(self.decode, data)

    async def aflush(self) -> bytes:
        return await asyncio.to_thread(self.flush)

    @staticmethod
    def for_encodings(encodings: Sequence[str]) -> "ContentDecoder":
        """
        Build the decoder chain for a list of encodings in decode order.

        Args:
            encodings: Encoding names, innermost-last as in Message.encodings

        Returns:
            A single decoder, a MultiDecoder, or an IdentityDecoder
        """
        decoders: List[ContentDecoder] = []
        for name in encodings:
            encoding = Encoding.parse(name)
            if encoding is Encoding.IDENTITY:
                logger.debug(f"Passing through content-encoding {name!r}")
                continue
            decoders.append(SUPPORTED_DECODERS[encoding]())

        if len(decoders) == 1:
            return decoders[0]
        if len(decoders) > 1:
            return MultiDecoder(decoders)
        return IdentityDecoder()


class IdentityDecoder(ContentDecoder):
    def decode(self, data: bytes) -> bytes:
        return data

    def flush(self) -> bytes:
        return b""

    async def adecode(self, data: bytes) -> bytes:
        return data

    async def aflush(self) -> bytes:
        return b""


class GZipDecoder(ContentDecoder):
    """Handles gzip bodies, including multi-member streams."""

    def __init__(self) -> None:
        self.decompressor = zlib.decompressobj(zlib.MAX_WBITS | 16)
        self.seen_data = False

    def decode(self, data: bytes) -> bytes:
        output = b""
        self.seen_data = self.seen_data or bool(data)
        try:
            output += self.decompressor.decompress(data)
            while self.decompressor.eof and self.decompressor.unused_data:
                unused = self.decompressor.unused_data
                self.decompressor = zlib.decompressobj(zlib.MAX_WBITS | 16)
                output += self.decompressor.decompress(unused)
        except zlib.error as exc:
            raise DecodingError("invalid gzip data", exc) from exc
        return output

    def flush(self) -> bytes:
        try:
            output = self.decompressor.flush()
        except zlib.error as exc:  # pragma: no cover
            raise DecodingError("invalid gzip data", exc) from exc
        if self.seen_data and not self.decompressor.eof:
            raise DecodingError("truncated gzip data")
        return output


class DeflateDecoder(ContentDecoder):
    """Handles both zlib-wrapped and raw deflate bodies."""

    def __init__(self) -> None:
        self.first_attempt = True
        self.seen_data = False
        self.decompressor = zlib.decompressobj()

    def decode(self, data: bytes) -> bytes:
        if not data:
            return b""
        was_first_attempt = self.first_attempt
        self.first_attempt = False
        self.seen_data = True
        try:
            return self.decompressor.decompress(data)
        except zlib.error as exc:
            if was_first_attempt:
                self.decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
                return self.decode(data)
            raise DecodingError("invalid deflate data", exc) from exc

    def flush(self) -> bytes:
        try:
            output = self.decompressor.flush()
        except zlib.error as exc:  # pragma: no cover
            raise DecodingError("invalid deflate data", exc) from exc
        if self.seen_data and not self.decompressor.eof:
            raise DecodingError("truncated deflate data")
        return output


class BrotliDecoder(ContentDecoder):
    def __init__(self) -> None:
        self.seen_data = False
        self.decompressor = brotli.Decompressor()

    def decode(self, data: bytes) -> bytes:
        if not data:
            return b""
        self.seen_data = True
        try:
            return self.decompressor.process(data)
        except brotli.error as exc:
            raise DecodingError("invalid brotli data", exc) from exc

    def flush(self) -> bytes:
        if self.seen_data and not self.decompressor.is_finished():
            raise DecodingError("truncated brotli data")
        return b""


class MultiDecoder(ContentDecoder):
    """Chains several decoders, feeding each one's output to the next."""

    def __init__(self, children: Sequence[ContentDecoder]) -> None:
        self.children = list(children)

    def decode(self, data: bytes) -> bytes:
        for child in self.children:
            data = child.decode(data)
        return data

    def flush(self) -> bytes:
        data = b""
        for child in self.children:
            data = child.decode(data) + child.flush()
        return data

    async def adecode(self, data: bytes) -> bytes:
        for child in self.children:
            data = await child.adecode(data)
        return data

    async def aflush(self) -> bytes:
        data = b""
        for child in self.children:
            data = await child.adecode(data) + await child.aflush()
        return data


SUPPORTED_DECODERS = {
    Encoding.GZIP: GZipDecoder,
    Encoding.DEFLATE: DeflateDecoder,
    Encoding.BR: BrotliDecoder,
    Encoding.IDENTITY: IdentityDecoder,
}
