"""
Load config.json into a validated AppConfig.

A missing file is replaced by the defaults, written back to disk so the
observer has a file to edit. Top-level keys starting with "_" are
comments and are ignored.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import AppConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"

DEFAULT_CONFIG_COMMENT = (
    "Boltwood Alpaca driver configuration (auto-generated). "
    "Set telemetry.source to the Boltwood one-line data file or its http(s) URL."
)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""


def _write_default_config(config_path: Path) -> AppConfig:
    config = AppConfig()
    document = {"_comment": DEFAULT_CONFIG_COMMENT, **config.model_dump()}
    try:
        config_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    except OSError as e:
        logger.warning(f"Using defaults; could not write {config_path}: {e}")
    else:
        logger.info(f"Wrote default configuration to {config_path}")
    return config


def _read_document(config_path: Path) -> Dict[str, Any]:
    try:
        document = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read {config_path}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"{config_path} must contain a JSON object")
    return {k: v for k, v in document.items() if not k.startswith("_")}


def _describe(error: ValidationError) -> str:
    lines = ["Configuration validation failed:"]
    for item in error.errors():
        where = ".".join(str(part) for part in item["loc"])
        lines.append(f"  - {where}: {item['msg']}")
    return "\n".join(lines)


def _warn_if_source_missing(config: AppConfig) -> None:
    """Point out a local data file that does not exist (yet)."""
    source = config.telemetry.source
    if source.startswith(("http://", "https://")):
        return
    if not Path(source).exists():
        logger.warning(
            f"Telemetry source {source} does not exist; "
            f"readings stay unavailable until the Boltwood software writes it"
        )


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load and validate the driver configuration.

    Args:
        path: Path to the JSON file (config.json in the working directory if None).

    Returns:
        Validated AppConfig instance.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or fails validation.
    """
    config_path = Path(path or DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        logger.info(f"{config_path} not found, creating it with default settings")
        config = _write_default_config(config_path)
    else:
        try:
            config = AppConfig(**_read_document(config_path))
        except ValidationError as e:
            raise ConfigurationError(_describe(e)) from e
        logger.info(f"Configuration loaded from {config_path}")

    _warn_if_source_missing(config)
    return config
