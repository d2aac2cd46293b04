"""
ASCOM Alpaca ObservingConditions driver for the Boltwood II cloud sensor.

Bridges the Boltwood one-line weather data file (local path or HTTP URL)
to Alpaca REST clients (NINA, Voyager, SGP) with UDP discovery support.
"""

__version__ = "0.1.0"
