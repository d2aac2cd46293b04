"""
Custom exception classes for the Boltwood Alpaca driver.
"""


class BoltwoodAlpacaException(Exception):
    """Base exception for all Boltwood driver errors."""
    pass


class MalformedTelemetry(BoltwoodAlpacaException):
    """Boltwood data line is ill-formed (wrong line count, too few fields, bad date)."""
    pass


class TelemetrySourceUnavailable(BoltwoodAlpacaException):
    """Boltwood data file or URL could not be read."""
    pass


class DriverError(BoltwoodAlpacaException):
    """General driver error (maps to Alpaca ErrorNumber 0x500)."""
    pass


class NoDataError(DriverError):
    """No weather snapshot has been received yet."""
    pass


class InvalidValueError(BoltwoodAlpacaException):
    """Invalid parameter value supplied by a client (maps to Alpaca ErrorNumber 1001)."""
    pass


class MethodNotAllowedError(BoltwoodAlpacaException):
    """HTTP verb not supported by the endpoint (maps to Alpaca ErrorNumber 1007)."""
    pass


class DiscoveryMalformed(BoltwoodAlpacaException):
    """UDP payload is not an Alpaca discovery request."""
    pass
