"""
Client-visible Connected latch for the ObservingConditions device.
"""

import logging
import threading
from typing import Optional

from boltwood_alpaca.utils.exceptions import InvalidValueError


logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "t", "1"}
_FALSE_VALUES = {"false", "f", "0"}


def parse_bool(raw: Optional[str]) -> bool:
    """
    Parse an Alpaca boolean form value.

    Raises:
        InvalidValueError: If the value is missing or not a boolean.
    """
    if raw is None:
        raise InvalidValueError("Missing Connected value")
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidValueError(f"Invalid Connected value: '{raw}'")


class ConnectionState:
    """
    Connected/Disconnected state requested by Alpaca clients.

    The flag does not start or stop weather polling.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._connected = False

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connected

    def set_connected(self, value: bool) -> None:
        with self._lock:
            previous = self._connected
            self._connected = value
        if previous != value:
            logger.info(f"Device {'connected' if value else 'disconnected'} by client")

    def write(self, raw: Optional[str]) -> None:
        """
        Apply a client PUT value.

        Raises:
            InvalidValueError: If raw is not a boolean; state is unchanged.
        """
        self.set_connected(parse_bool(raw))
