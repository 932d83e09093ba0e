"""Error handling utilities."""

from enum import Enum
from typing import Optional, Any, Dict
import logging


logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error code enumeration."""

    # Measurement / fabric errors
    INVALID_FABRIC_WIDTH = "INVALID_FABRIC_WIDTH"
    INVALID_MEASUREMENT = "INVALID_MEASUREMENT"
    INCOMPLETE_MEASUREMENT = "INCOMPLETE_MEASUREMENT"
    MISSING_FABRIC_SELECTION = "MISSING_FABRIC_SELECTION"

    # Markup / discount
    UNRESOLVED_MARKUP = "UNRESOLVED_MARKUP"
    DISCOUNT_EXCEEDS_BASE = "DISCOUNT_EXCEEDS_BASE"

    # Pricing profiles
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    PROFILE_PARSE_ERROR = "PROFILE_PARSE_ERROR"

    # Data validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.INVALID_FABRIC_WIDTH: "Fabric width must be greater than zero",
    ErrorCode.INVALID_MEASUREMENT: "Measurement values cannot be negative",
    ErrorCode.INCOMPLETE_MEASUREMENT: "Incomplete measurement: rail width and drop are required",
    ErrorCode.MISSING_FABRIC_SELECTION: "No fabric selected, fallback fabric used",

    ErrorCode.UNRESOLVED_MARKUP: "No markup rule matched, 0% default applied",
    ErrorCode.DISCOUNT_EXCEEDS_BASE: "Fixed discount exceeds the discountable amount and was capped",

    ErrorCode.PROFILE_NOT_FOUND: "Pricing profile not found",
    ErrorCode.PROFILE_PARSE_ERROR: "Pricing profile could not be parsed",

    ErrorCode.VALIDATION_ERROR: "Data validation failed",

    ErrorCode.INTERNAL_ERROR: "Internal server error",
}


class APIError(Exception):
    """Custom API error exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: Optional[str] = None,
        status_code: int = 400,
        details: Optional[Any] = None,
    ):
        """
        Initialize APIError.

        Args:
            error_code: Error code from ErrorCode enum
            message: Custom error message (overrides default)
            status_code: HTTP status code
            details: Additional error details
        """
        self.error_code = error_code
        self.message = message or ERROR_MESSAGES.get(error_code, "An error occurred")
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation."""
        return self.message


class InvalidFabricWidthError(APIError):
    """Fabric width is zero or negative; no requirement can be computed."""

    def __init__(self, fabric_width: float, fabric_id: Optional[str] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_FABRIC_WIDTH,
            message=f"Fabric width must be greater than zero (got {fabric_width})",
            status_code=422,
            details={"fabric_width": fabric_width, "fabric_id": fabric_id},
        )


class InvalidMeasurementError(APIError):
    """A length or percentage that must be non-negative is negative."""

    def __init__(self, field: str, value: float):
        super().__init__(
            error_code=ErrorCode.INVALID_MEASUREMENT,
            message=f"{field} cannot be negative (got {value})",
            status_code=422,
            details={"field": field, "value": value},
        )


def raise_error(
    error_code: ErrorCode,
    message: Optional[str] = None,
    status_code: int = 400,
    details: Optional[Any] = None,
) -> None:
    """
    Raise an API error.

    Args:
        error_code: Error code from ErrorCode enum
        message: Custom error message (overrides default)
        status_code: HTTP status code
        details: Additional error details

    Raises:
        APIError: Always raises APIError with provided parameters
    """
    raise APIError(
        error_code=error_code,
        message=message,
        status_code=status_code,
        details=details,
    )


def log_error(error: Exception, context: str = "") -> None:
    """
    Log an error with context.

    Args:
        error: Exception to log
        context: Context description
    """
    if isinstance(error, APIError):
        logger.error(
            f"APIError [{context}]: {error.error_code} - {error.message}",
            extra={"details": error.details},
        )
    else:
        logger.error(f"Error [{context}]: {str(error)}", exc_info=True)
