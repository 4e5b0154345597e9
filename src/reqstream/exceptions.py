"""
Custom exceptions for reqstream.

This module defines the exception hierarchy used throughout
the library. Every failure surfaced by ``Request.send`` is a
``RequestError`` so callers only need a single ``except`` clause.
"""

from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .message import Message


class RequestError(Exception):
    """Base exception for all reqstream errors."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        request: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.request = request
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def wrap(cls, cause: BaseException, context: Any) -> "RequestError":
        """
        Attach request context to an error.

        Errors that already belong to the hierarchy are returned as-is,
        with ``request`` filled in when it was not set yet. Anything else
        is wrapped in a new error whose ``cause`` is the original.

        Args:
            cause: The exception to wrap
            context: Object describing the request (usually the Request)

        Returns:
            A RequestError carrying the context
        """
        if isinstance(cause, RequestError):
            if cause.request is None:
                cause.request = str(context)
            return cause
        return cls(f"{context}: {cause}", cause=cause, request=str(context))


class RequestTimeout(RequestError):
    """Raised when a request does not complete within its timeout."""

    def __init__(self, timeout: int) -> None:
        super().__init__(f"Request timed out after {timeout} ms")
        self.timeout = timeout


class ConnectTimeout(RequestError):
    """Raised when the backend cannot open a connection in time."""

    def __init__(
        self, timeout: Optional[float] = None, cause: Optional[BaseException] = None
    ) -> None:
        if timeout:
            message = f"Connect timed out after {timeout} s"
        else:
            message = "Connect timed out"
        super().__init__(message, cause)
        self.timeout = timeout


class RequestAborted(RequestError):
    """
    Raised when the connection ends before the response body is complete.

    The partially received message is kept on the exception so callers
    can inspect whatever arrived before the failure.
    """

    def __init__(
        self, message: "Message", cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(
            "The connection was terminated while the message was still being sent",
            cause,
        )
        self.partial = message


class RequestStatus(RequestError):
    """Raised for responses outside the 2xx range that are not followed."""

    def __init__(self, code: int, reason: Optional[str] = None) -> None:
        if not reason:
            try:
                reason = HTTPStatus(code).phrase
            except ValueError:
                reason = f"Error #{code}"
        super().__init__(reason)
        self.code = code
        self.reason = reason


class ProtocolError(RequestError):
    """Raised for unsupported URL schemes or malformed HTTP exchanges."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class TooManyRedirects(RequestError):
    """Raised when a redirect chain exceeds the configured limit."""

    def __init__(self, max_redirects: int) -> None:
        super().__init__(f"Exceeded maximum of {max_redirects} redirects")
        self.max_redirects = max_redirects


class StreamError(RequestError):
    """Raised when there's an error reading a response body stream."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)


class DecodingError(RequestError):
    """Raised when a content-encoding cannot be decoded."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Decoding error: {message}", cause)
