"""
Map Python exceptions to ASCOM Alpaca error codes.
"""

from typing import Tuple

from boltwood_alpaca.utils.exceptions import (
    DriverError,
    InvalidValueError,
    MethodNotAllowedError,
)


# ASCOM Alpaca Error Codes
ERROR_INVALID_VALUE = 1001
ERROR_METHOD_NOT_ALLOWED = 1007
ERROR_NOT_IMPLEMENTED = 0x400  # 1024
ERROR_DRIVER_ERROR = 0x500  # 1280

# HTTP status codes that accompany the Alpaca error
HTTP_STATUS = {
    ERROR_INVALID_VALUE: 400,
    ERROR_METHOD_NOT_ALLOWED: 405,
}


def map_exception_to_alpaca(exception: Exception) -> Tuple[int, str]:
    """
    Map exception to Alpaca error code and message.

    Args:
        exception: Python exception.

    Returns:
        Tuple of (ErrorNumber, ErrorMessage).
    """
    if isinstance(exception, InvalidValueError):
        return (ERROR_INVALID_VALUE, str(exception))

    if isinstance(exception, MethodNotAllowedError):
        return (ERROR_METHOD_NOT_ALLOWED, "Method not allowed")

    if isinstance(exception, NotImplementedError):
        return (ERROR_NOT_IMPLEMENTED, str(exception) or "Not implemented")

    if isinstance(exception, DriverError):
        return (ERROR_DRIVER_ERROR, str(exception))

    return (ERROR_DRIVER_ERROR, f"Internal error: {type(exception).__name__}: {exception}")


def http_status_for(error_number: int) -> int:
    """Transport status for an Alpaca error number (200 unless listed)."""
    return HTTP_STATUS.get(error_number, 200)
