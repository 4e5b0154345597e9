"""
Unit tests for custom exceptions.

Tests the exception hierarchy to ensure proper error handling
and cause tracking.
"""

import pytest

from reqstream.exceptions import (
    ConnectTimeout,
    DecodingError,
    ProtocolError,
    RequestAborted,
    RequestError,
    RequestStatus,
    RequestTimeout,
    StreamError,
    TooManyRedirects,
)
from reqstream.message import Message


class TestRequestError:
    """Test base RequestError class."""

    def test_basic_creation(self) -> None:
        """Test creating basic RequestError."""
        error = RequestError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.cause is None
        assert error.request is None

    def test_with_cause(self) -> None:
        """Test creating RequestError with cause."""
        original_error = ValueError("Original error")
        error = RequestError("Test error message", cause=original_error)
        assert error.cause is original_error
        assert error.__cause__ is original_error

    def test_wrap_foreign_exception(self) -> None:
        """Test wrapping an exception from outside the hierarchy."""
        original_error = OSError("Network unreachable")
        error = RequestError.wrap(original_error, "GET http://example.com/")

        assert type(error) is RequestError
        assert error.cause is original_error
        assert error.request == "GET http://example.com/"
        assert "GET http://example.com/" in str(error)
        assert "Network unreachable" in str(error)

    def test_wrap_keeps_request_errors(self) -> None:
        """Test that errors from the hierarchy are returned as-is."""
        original_error = RequestStatus(404)
        error = RequestError.wrap(original_error, "GET http://example.com/")

        assert error is original_error
        assert error.request == "GET http://example.com/"

    def test_wrap_does_not_override_context(self) -> None:
        """Test that the innermost context wins."""
        original_error = RequestTimeout(50)
        original_error.request = "GET http://first.example/"
        error = RequestError.wrap(original_error, "GET http://second.example/")
        assert error.request == "GET http://first.example/"


class TestRequestTimeout:
    def test_message(self) -> None:
        error = RequestTimeout(50)
        assert str(error) == "Request timed out after 50 ms"
        assert error.timeout == 50


class TestConnectTimeout:
    def test_message(self) -> None:
        cause = TimeoutError()
        error = ConnectTimeout(2.5, cause)
        assert str(error) == "Connect timed out after 2.5 s"
        assert error.timeout == 2.5
        assert error.cause is cause

    def test_without_timeout(self) -> None:
        assert str(ConnectTimeout()) == "Connect timed out"


class TestRequestAborted:
    def test_carries_partial_message(self) -> None:
        message = Message(200).concat(b"partial")
        error = RequestAborted(message)
        assert error.partial is message
        assert error.partial.content == b"partial"
        assert "terminated" in str(error)


class TestRequestStatus:
    def test_known_status(self) -> None:
        error = RequestStatus(404)
        assert error.code == 404
        assert str(error) == "Not Found"

    def test_unknown_status(self) -> None:
        error = RequestStatus(599)
        assert error.code == 599
        assert str(error) == "Error #599"

    def test_explicit_reason(self) -> None:
        error = RequestStatus(500, "Backend exploded")
        assert error.reason == "Backend exploded"


class TestOtherErrors:
    def test_protocol_error(self) -> None:
        error = ProtocolError("Invalid URL protocol: 'ftp'")
        assert "Protocol error: Invalid URL protocol" in str(error)

    def test_too_many_redirects(self) -> None:
        error = TooManyRedirects(10)
        assert error.max_redirects == 10
        assert "10 redirects" in str(error)

    def test_stream_error(self) -> None:
        original_error = IOError("Broken pipe")
        error = StreamError("Stream closed unexpectedly", cause=original_error)
        assert "Stream error: Stream closed unexpectedly" in str(error)
        assert error.cause is original_error


class TestExceptionHierarchy:
    """Test exception hierarchy and inheritance."""

    @pytest.mark.parametrize(
        "error_class",
        [
            RequestTimeout,
            ConnectTimeout,
            RequestAborted,
            RequestStatus,
            ProtocolError,
            TooManyRedirects,
            StreamError,
            DecodingError,
        ],
    )
    def test_inheritance(self, error_class) -> None:
        """Test that all exceptions inherit from RequestError."""
        assert issubclass(error_class, RequestError)

    def test_exception_raising(self) -> None:
        """Test that exceptions can be raised and caught as RequestError."""
        with pytest.raises(RequestError) as exc_info:
            raise RequestStatus(503)

        assert exc_info.value.code == 503
