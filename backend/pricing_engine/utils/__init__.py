"""Utils package."""

from .errors import (
    APIError,
    ErrorCode,
    InvalidFabricWidthError,
    InvalidMeasurementError,
    raise_error,
    log_error,
)
from .money import round_money, money_product, sum_money, clean_length

__all__ = [
    "APIError",
    "ErrorCode",
    "InvalidFabricWidthError",
    "InvalidMeasurementError",
    "raise_error",
    "log_error",
    "round_money",
    "money_product",
    "sum_money",
    "clean_length",
]
