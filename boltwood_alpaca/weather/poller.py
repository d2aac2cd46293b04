"""
Background polling of the Boltwood data source.
"""

import logging
import threading
from typing import Optional

from boltwood_alpaca.utils.exceptions import MalformedTelemetry, TelemetrySourceUnavailable
from boltwood_alpaca.weather.parser import TelemetryParser
from boltwood_alpaca.weather.source import TelemetrySource
from boltwood_alpaca.weather.store import TelemetryStore


logger = logging.getLogger(__name__)


class WeatherPoller:
    """
    Periodically reads, parses and publishes Boltwood data.

    Failures are logged and the previous snapshot is kept; the next
    interval tick is the only retry.
    """

    def __init__(
        self,
        source: TelemetrySource,
        parser: TelemetryParser,
        store: TelemetryStore,
        interval_seconds: float
    ):
        self.source = source
        self.parser = parser
        self.store = store
        self.interval_seconds = interval_seconds

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling in a background thread."""
        if self.running:
            logger.warning("Weather poller already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="weather-poller", daemon=True)
        self._thread.start()

        logger.info(
            f"Weather poller started (source: {self.source.location}, "
            f"interval: {self.interval_seconds}s)"
        )

    def stop(self) -> None:
        """Stop polling and wait for the thread to exit."""
        if not self._thread:
            return

        self._stop_event.set()
        self._thread.join(timeout=5.0)
        self._thread = None

        logger.info("Weather poller stopped")

    def poll_once(self) -> bool:
        """
        Run a single read/parse/publish cycle.

        Returns:
            True if a new snapshot was published.
        """
        try:
            data = self.source.read()
        except TelemetrySourceUnavailable as e:
            logger.error(f"Error reading Boltwood data: {e}")
            return False

        try:
            snapshot = self.parser.parse(data)
        except MalformedTelemetry as e:
            logger.error(f"Invalid Boltwood data ({len(data)} bytes): {e}; raw={data[:200]!r}")
            return False

        self.store.publish(snapshot)
        logger.debug(f"Weather data updated: {snapshot}")
        return True

    def _run(self) -> None:
        logger.debug("Weather polling thread started")

        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                # Keep polling whatever happens; next tick is the recovery
                logger.error(f"Unexpected error in weather poller: {e}", exc_info=True)
            self._stop_event.wait(self.interval_seconds)

        logger.debug("Weather polling thread stopped")
