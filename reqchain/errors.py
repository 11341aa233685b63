"""
Error taxonomy for reqchain.

Only failures that this layer detects itself are defined here. Transport
errors (``requests.RequestException``) and validation errors
(``pydantic.ValidationError``) are never wrapped and reach the caller as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from reqchain.response import Response


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Response validation
    STATUS_CODE_MISMATCH = "STATUS_CODE_MISMATCH"

    # Serialization
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    ENCODING_ERROR = "ENCODING_ERROR"
    DECODING_ERROR = "DECODING_ERROR"


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ReqchainException(Exception):
    """
    Base exception for all reqchain errors.

    Carries a stable error code and structured details next to the
    human-readable message.
    """

    def __init__(
        self,
        message: str,
        code: str = "REQCHAIN_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class StatusCodeError(ReqchainException):
    """
    Raised by ``Response.check_status`` when the observed status code is not
    one of the expected ones.

    The failed response stays attached so the caller can branch on the
    actual status or decode an error payload from it.
    """

    def __init__(self, expected_statuses: Sequence[int], response: "Response") -> None:
        self.expected_statuses = list(expected_statuses)
        self.response = response

        inner = response.inner
        status = inner.status_code
        message = "%d returned for %s %s, expected %s" % (
            status,
            inner.info("http_method"),
            inner.info("url"),
            ", ".join(str(code) for code in self.expected_statuses),
        )
        super().__init__(
            message=message,
            code=ErrorCodes.STATUS_CODE_MISMATCH,
            details={
                "status": status,
                "expected_statuses": self.expected_statuses,
            },
        )


class SerializationError(ReqchainException):
    """Exception raised when a value cannot be encoded into a format."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.ENCODING_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class UnsupportedFormatError(SerializationError):
    """Exception raised when no registered encoder handles a format."""

    def __init__(self, format: str, operation: str = "encoding") -> None:
        self.format = format
        super().__init__(
            message=f'Serialization for the format "{format}" is not supported',
            code=ErrorCodes.UNSUPPORTED_FORMAT,
            details={"format": format, "operation": operation},
        )


class DecodingError(ReqchainException, ValueError):
    """Exception raised when a payload cannot be decoded."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.DECODING_ERROR,
            details=details,
        )
