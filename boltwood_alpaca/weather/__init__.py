"""
Weather package: Boltwood data acquisition, parsing and storage.
"""

from boltwood_alpaca.weather.snapshot import WeatherSnapshot
from boltwood_alpaca.weather.parser import TelemetryParser, lookup_condition
from boltwood_alpaca.weather.source import TelemetrySource
from boltwood_alpaca.weather.store import TelemetryStore
from boltwood_alpaca.weather.poller import WeatherPoller

__all__ = [
    "WeatherSnapshot",
    "TelemetryParser",
    "lookup_condition",
    "TelemetrySource",
    "TelemetryStore",
    "WeatherPoller",
]
