from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from boltwood_alpaca.api.app import create_app
from boltwood_alpaca.config.models import AppConfig, LoggingConfig
from boltwood_alpaca.weather.store import TelemetryStore

# Fields 15..20: cloud=2, wind=1, rain=1, darkness=2, roof=0, alert=1
SAMPLE_LINE = (
    "2024-01-01 03:15:00.00 C M 5.0 10.0 12.0 15.0 55.0 3.0 20.0 "
    "0 0 0 0 2 1 1 2 0 1"
)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(logging=LoggingConfig(file=None))


@pytest.fixture
def store() -> TelemetryStore:
    return TelemetryStore()


@pytest.fixture
def client(config: AppConfig, store: TelemetryStore) -> TestClient:
    app = create_app(config, store=store, device_id="4242")
    return TestClient(app)


@pytest.fixture
def sample_line() -> str:
    return SAMPLE_LINE
