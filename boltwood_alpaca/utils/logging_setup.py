"""
Root logger configuration: stdout plus an optional rotating log file.

The driver runs unattended for weeks next to the weather station, so the
file handler rotates instead of growing without bound.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from boltwood_alpaca.config.models import LoggingConfig


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s]: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Third-party loggers that would otherwise log every poll of an http source
QUIET_LOGGERS = ("urllib3",)


def _file_handler(path: str, formatter: logging.Formatter) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8"
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: LoggingConfig) -> None:
    """
    Install console and file handlers on the root logger.

    Calling it again replaces the previous handlers. A log file that
    cannot be opened is reported and the driver keeps logging to stdout.
    """
    root = logging.getLogger()
    root.setLevel(config.level)
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if config.file:
        try:
            root.addHandler(_file_handler(config.file, formatter))
        except OSError as e:
            root.error(f"Cannot open log file {config.file}: {e}")
        else:
            root.info(f"Logging to file: {config.file}")

    if config.level != "DEBUG":
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Log level {config.level}")
