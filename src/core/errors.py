"""Error types and error classification utilities for leaderboard computations.

The services only raise. classify_error_with_response is for the route
handlers that call them, to turn an exception into a response body.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ValidationError


class InvalidRangeError(ValueError):
    """Raised when a period cannot be resolved into a valid date range.

    Covers custom ranges with a missing bound, inverted bounds (start after end)
    and unknown period or comparison tokens. Raised before any aggregation runs.
    """

    def __init__(self, message: str, *, start: date | None = None, end: date | None = None) -> None:
        super().__init__(message)
        self.start = start
        self.end = end


class StoreError(RuntimeError):
    """Raised when the activity store is not configured or a read fails."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Request errors
    ERR_INVALID_RANGE = "ERR_INVALID_RANGE"
    ERR_INVALID_PARAMETER = "ERR_INVALID_PARAMETER"

    # Store errors
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised while building a leaderboard, trend or milestone result

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, InvalidRangeError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_RANGE,
            message=str(exception) or "The requested date range is invalid.",
            suggestion="Provide both a start and an end date in YYYY-MM-DD form, with start on or before end.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, ValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_PARAMETER,
            message="One or more request parameters are invalid.",
            suggestion="Check the period, pagination and date parameters and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, StoreError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_UNAVAILABLE,
            message="Activity data is temporarily unavailable.",
            suggestion="Please try again in a moment.",
            severity=ErrorSeverity.HIGH,
        )

    if isinstance(exception, ValueError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_PARAMETER,
            message=str(exception) or "A request parameter is invalid.",
            suggestion="Check the request parameters and try again.",
            severity=ErrorSeverity.LOW,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
