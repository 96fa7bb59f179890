"""Structured exception classes for the XMS client.

Every failed API call surfaces exactly one of these. The classification
order mirrors the order in which a completed exchange is inspected:
transport failure, malformed success payload, declared API error and
finally any other unexpected response.
"""

import json
from typing import Any, Dict, Optional

import httpx


class XmsError(Exception):
    """Base exception for all XMS client errors.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class TransportError(XmsError):
    """Raised when no response could be obtained from the server.

    Covers every ``httpx.RequestError`` raised while sending a request or
    reading its response: connection failures, I/O errors, timeouts, broken
    content encodings and redirect loops. The transport exception is kept both as
    ``original_error`` and as ``__cause__``.

    :param message: Description of the transport failure
    :param original_error: The exception raised by the transport
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """Initialize transport error with message and original exception."""
        details = {}
        if original_error is not None:
            details["error_type"] = type(original_error).__name__
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)
        self.original_error = original_error


class DecodeError(XmsError):
    """Raised when a response has the expected status but a malformed body.

    This is never raised for a declared API error: the status matched
    what the operation expects, only the payload could not be parsed
    into the declared result type.

    :param message: Description of the decoding failure
    :param original_error: The parser's own exception
    :param content: The raw body that failed to decode
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        content: Optional[bytes] = None,
    ):
        """Initialize decode error with message and parser exception."""
        details = {}
        if original_error is not None:
            details["error_type"] = type(original_error).__name__
        super().__init__(message=message, code="DECODE_ERROR", details=details)
        self.original_error = original_error
        self.content = content


class ApiResponseError(XmsError):
    """Raised when the server rejects a request with a structured error.

    The ``code`` and ``text`` attributes are taken verbatim from the
    error body returned by the API.

    :param code: Machine readable error code from the server
    :param text: Human readable error text from the server
    :param status_code: HTTP status of the response
    """

    def __init__(self, code: str, text: str, status_code: Optional[int] = None):
        """Initialize API error with the server supplied code and text."""
        details: Dict[str, Any] = {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(message=f"{code}: {text}", code=code, details=details)
        self.text = text
        self.status_code = status_code


class UnexpectedResponseError(XmsError):
    """Raised for any response that is neither a success nor an API error.

    The response body is preserved byte-for-byte in ``content`` and the
    full ``httpx.Response`` is available as ``response`` so callers can
    inspect headers and content type after the fact.

    :param response: The completed HTTP response
    """

    def __init__(self, response: httpx.Response):
        """Initialize with the unexpected response."""
        super().__init__(
            message=f"Unexpected response status {response.status_code}",
            code="UNEXPECTED_RESPONSE",
            details={"status_code": response.status_code},
        )
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def content(self) -> bytes:
        return self.response.content

    @property
    def content_type(self) -> Optional[str]:
        return self.response.headers.get("content-type")


class ConnectionClosedError(XmsError):
    """Raised when an operation is issued on a connection that is not running."""

    def __init__(self, message: str = "API connection is closed"):
        """Initialize closed error with message."""
        super().__init__(message=message, code="CONNECTION_CLOSED")


class InvalidArgumentError(XmsError, ValueError):
    """Raised when a caller supplied argument violates a precondition.

    Always raised synchronously, before any I/O takes place.

    :param message: Description of the violated precondition
    :param argument: Optional name of the offending argument
    :param value: Optional offending value
    """

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        value: Optional[Any] = None,
    ):
        """Initialize invalid argument error with optional argument/value."""
        details = {}
        if argument:
            details["argument"] = argument
        if value is not None:
            details["value"] = str(value)
        super().__init__(message=message, code="INVALID_ARGUMENT", details=details)


class CallTimeoutError(XmsError, TimeoutError):
    """Raised when waiting for a call result exceeds the given timeout.

    The call itself keeps running; only the wait gave up.

    :param timeout: The timeout in seconds that elapsed
    """

    def __init__(self, timeout: Optional[float] = None):
        """Initialize timeout error with the elapsed timeout."""
        details = {}
        if timeout is not None:
            details["timeout"] = timeout
        super().__init__(
            message=f"Call did not complete within {timeout} seconds",
            code="CALL_TIMEOUT",
            details=details,
        )


class CallCancelledError(XmsError):
    """Raised when waiting for the result of a cancelled call."""

    def __init__(self, message: str = "Call was cancelled"):
        """Initialize cancellation error with message."""
        super().__init__(message=message, code="CALL_CANCELLED")


class ConfigurationError(XmsError):
    """Raised for configuration-related errors.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
