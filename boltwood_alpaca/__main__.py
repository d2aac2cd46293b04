"""
Main entry point for Boltwood II ASCOM Alpaca Driver.

Usage:
    python -m boltwood_alpaca [--config CONFIG_PATH]
"""

import argparse
import logging
import signal
import sys

import uvicorn

from boltwood_alpaca import __version__
from boltwood_alpaca.config.loader import load_config, ConfigurationError
from boltwood_alpaca.utils.logging_setup import setup_logging
from boltwood_alpaca.api.app import create_app
from boltwood_alpaca.api.connection import ConnectionState
from boltwood_alpaca.api.discovery import DiscoveryServer, generate_device_id
from boltwood_alpaca.api.transactions import TransactionSequencer
from boltwood_alpaca.weather import TelemetryParser, TelemetrySource, TelemetryStore, WeatherPoller


logger = logging.getLogger(__name__)


# Global resources for cleanup
discovery_server = None
weather_poller = None


def shutdown() -> None:
    """Stop background services."""
    if discovery_server:
        discovery_server.stop()
    if weather_poller:
        weather_poller.stop()


def signal_handler(signum, frame):
    """Handle shutdown signals (SIGINT, SIGTERM)."""
    logger.info(f"Received signal {signum}, shutting down...")
    shutdown()
    sys.exit(0)


def main():
    """Main application entry point."""
    global discovery_server, weather_poller

    parser = argparse.ArgumentParser(description="Boltwood II ASCOM Alpaca Driver")
    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to configuration file (default: config.json)"
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.logging)

    logger.info("=" * 60)
    logger.info(f"Boltwood II ASCOM Alpaca Driver v{__version__}")
    logger.info("=" * 60)

    # Shared state, owned here and injected into every consumer
    store = TelemetryStore()
    connection = ConnectionState()
    sequencer = TransactionSequencer()
    device_id = generate_device_id()
    logger.info(f"Device unique ID: {device_id}")

    weather_poller = WeatherPoller(
        source=TelemetrySource(
            config.telemetry.source,
            timeout_seconds=config.telemetry.http_timeout_seconds
        ),
        parser=TelemetryParser(
            config.telemetry.timezone,
            numeric_policy=config.telemetry.numeric_policy
        ),
        store=store,
        interval_seconds=config.telemetry.polling_interval_seconds
    )
    weather_poller.start()

    app = create_app(
        config,
        store=store,
        connection=connection,
        sequencer=sequencer,
        device_id=device_id
    )

    server_port = config.server.port

    if config.server.discovery_enabled:
        discovery_server = DiscoveryServer(
            server_port,
            device_id,
            discovery_port=config.server.discovery_port
        )
        try:
            discovery_server.start()
        except OSError as e:
            logger.error(f"Failed to start discovery server: {e}")
            logger.warning("Continuing without discovery (clients won't auto-detect)")
            discovery_server = None

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(f"Starting Alpaca API server on {config.server.ip}:{server_port}")
    logger.info(f"Status page available at http://localhost:{server_port}/")
    logger.info("Press Ctrl+C to stop")

    try:
        uvicorn.run(
            app,
            host=config.server.ip,
            port=server_port,
            log_level=config.logging.level.lower(),
            log_config=None,  # keep the handlers installed by setup_logging
            access_log=False  # request logging is done by the app middleware
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        shutdown()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
