"""
Reads raw Boltwood data from a local file or an HTTP(S) URL.
"""

import logging
from pathlib import Path

import requests

from boltwood_alpaca.utils.exceptions import TelemetrySourceUnavailable


logger = logging.getLogger(__name__)


class TelemetrySource:
    """Fetches the Boltwood data file on demand."""

    def __init__(self, location: str, timeout_seconds: float = 10.0):
        """
        Args:
            location: File path, or URL starting with http:// or https://.
            timeout_seconds: Timeout for HTTP requests.
        """
        self.location = location
        self.timeout_seconds = timeout_seconds

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    def read(self) -> bytes:
        """
        Read the current content of the source.

        Raises:
            TelemetrySourceUnavailable: If the file or URL cannot be read.
        """
        if self.is_remote:
            return self._read_http()
        return self._read_file()

    def _read_http(self) -> bytes:
        try:
            response = requests.get(self.location, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TelemetrySourceUnavailable(
                f"Failed to fetch {self.location}: {e}"
            ) from e
        return response.content

    def _read_file(self) -> bytes:
        try:
            return Path(self.location).read_bytes()
        except OSError as e:
            raise TelemetrySourceUnavailable(
                f"Failed to read {self.location}: {e}"
            ) from e
