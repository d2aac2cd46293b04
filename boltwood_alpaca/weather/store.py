"""
Thread-safe holder of the latest weather snapshot.
"""

import threading
import time
from typing import Optional

from boltwood_alpaca.weather.snapshot import WeatherSnapshot


class TelemetryStore:
    """
    Latest-value cell written by the poller and read by API handlers.

    Snapshots are immutable, so readers hold a consistent reference
    even while a newer snapshot is being published.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[WeatherSnapshot] = None
        self._published_at: Optional[float] = None

    def publish(self, snapshot: WeatherSnapshot) -> None:
        """Replace the current snapshot."""
        with self._lock:
            self._snapshot = snapshot
            self._published_at = time.monotonic()

    def current(self) -> Optional[WeatherSnapshot]:
        """
        Get the latest snapshot.

        Returns:
            Latest WeatherSnapshot, or None before the first successful poll.
        """
        with self._lock:
            return self._snapshot

    def seconds_since_update(self) -> Optional[float]:
        """Seconds since the last publish, or None if nothing was published."""
        with self._lock:
            published_at = self._published_at
        if published_at is None:
            return None
        return time.monotonic() - published_at
