from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from boltwood_alpaca.config.loader import ConfigurationError, load_config
from boltwood_alpaca.config.models import AppConfig, LoggingConfig
from boltwood_alpaca.utils.logging_setup import setup_logging


def _write(path: Path, data) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_missing_config_creates_default(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    config = load_config(str(path))

    assert config == AppConfig()
    assert path.exists()
    # generated file (with its _comment key) loads back cleanly
    assert load_config(str(path)) == config


def test_defaults() -> None:
    config = AppConfig()

    assert config.server.port == 11111
    assert config.server.discovery_port == 32227
    assert config.telemetry.timezone == "UTC"
    assert config.telemetry.numeric_policy == "zero_fill"


def test_full_config(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "config.json",
        {
            "server": {"port": 8080, "discovery_enabled": False},
            "telemetry": {
                "source": "http://observatory.local/boltwood.txt",
                "polling_interval_seconds": 15,
                "timezone": "America/New_York",
                "numeric_policy": "strict",
            },
            "logging": {"level": "debug", "file": None},
        },
    )

    config = load_config(path)

    assert config.server.port == 8080
    assert config.telemetry.source == "http://observatory.local/boltwood.txt"
    assert config.telemetry.polling_interval_seconds == 15.0
    assert config.logging.level == "DEBUG"


@pytest.mark.parametrize(
    "data,field",
    [
        ({"telemetry": {"timezone": "Mars/Olympus"}}, "timezone"),
        ({"telemetry": {"source": "  "}}, "source"),
        ({"telemetry": {"numeric_policy": "lenient"}}, "numeric_policy"),
        ({"telemetry": {"polling_interval_seconds": 0}}, "polling_interval_seconds"),
        ({"server": {"port": 70000}}, "port"),
        ({"serial": {}}, "serial"),
    ],
)
def test_invalid_config(tmp_path: Path, data, field: str) -> None:
    path = _write(tmp_path / "config.json", data)

    with pytest.raises(ConfigurationError, match=field):
        load_config(path)


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        load_config(str(path))


def test_setup_logging_with_file(tmp_path: Path) -> None:
    log_file = tmp_path / "driver.log"

    setup_logging(LoggingConfig(level="WARNING", file=str(log_file)))
    try:
        logging.getLogger("boltwood_alpaca.test").warning("hello")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        for handler in root.handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()


def test_missing_local_source_is_reported(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(tmp_path / "config.json", {"telemetry": {"source": str(tmp_path / "absent.txt")}})

    with caplog.at_level(logging.WARNING, logger="boltwood_alpaca.config.loader"):
        load_config(path)

    assert "absent.txt does not exist" in caplog.text


def test_remote_source_is_not_checked(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(tmp_path / "config.json", {"telemetry": {"source": "https://weather.local/b.txt"}})

    with caplog.at_level(logging.WARNING, logger="boltwood_alpaca.config.loader"):
        load_config(path)

    assert "does not exist" not in caplog.text


def test_top_level_json_must_be_object(tmp_path: Path) -> None:
    path = _write(tmp_path / "config.json", [1, 2])

    with pytest.raises(ConfigurationError, match="JSON object"):
        load_config(path)


def test_setup_logging_creates_log_directory_and_quiets_urllib3(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "nested" / "driver.log"

    setup_logging(LoggingConfig(level="INFO", file=str(log_file)))
    try:
        assert log_file.parent.is_dir()
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()
        logging.getLogger("urllib3").setLevel(logging.NOTSET)
