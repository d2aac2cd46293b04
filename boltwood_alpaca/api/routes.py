"""
ASCOM Alpaca API endpoints for the ObservingConditions device.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from boltwood_alpaca import __version__
from boltwood_alpaca.api.connection import ConnectionState
from boltwood_alpaca.api.models import (
    AlpacaResponse,
    make_response,
    parse_client_transaction_id,
    to_json_response,
)
from boltwood_alpaca.api.transactions import TransactionSequencer
from boltwood_alpaca.utils.exceptions import InvalidValueError, NoDataError
from boltwood_alpaca.weather.snapshot import WeatherSnapshot
from boltwood_alpaca.weather.store import TelemetryStore


logger = logging.getLogger(__name__)

DEVICE_TYPE = "ObservingConditions"
DEVICE_NUMBER = 0
DEVICE_NAME = "Boltwood II Weather Station"
DEVICE_DESCRIPTION = "Boltwood II Weather Data Driver"
DRIVER_INFO = f"ASCOM Alpaca Boltwood II Weather Data Driver v{__version__}"
INTERFACE_VERSION = 1

router = APIRouter(prefix="/api/v1/observingconditions/0", tags=["observingconditions"])


def get_store(request: Request) -> TelemetryStore:
    """Dependency to get the telemetry store from app.state."""
    return request.app.state.store


def get_connection(request: Request) -> ConnectionState:
    """Dependency to get the connection latch from app.state."""
    return request.app.state.connection


def get_sequencer(request: Request) -> TransactionSequencer:
    """Dependency to get the transaction sequencer from app.state."""
    return request.app.state.sequencer


async def get_params(request: Request) -> Dict[str, str]:
    """
    Collect request parameters with lower-cased names.

    Alpaca parameter names are case-insensitive; GET parameters come from
    the query string, PUT parameters from the form body. The result is
    kept on request.state so exception handlers can still find the
    ClientTransactionID after the body has been consumed.
    """
    cached = getattr(request.state, "alpaca_params", None)
    if cached is not None:
        return cached

    params = {k.lower(): v for k, v in request.query_params.items()}
    request.state.alpaca_params = params
    if request.method == "PUT":
        try:
            form = await request.form()
        except (StarletteHTTPException, MultiPartException) as e:
            detail = getattr(e, "detail", None) or getattr(e, "message", str(e))
            raise InvalidValueError(f"Failed to parse form data: {detail}") from e
        params.update({k.lower(): v for k, v in form.items() if isinstance(v, str)})
    return params


def get_client_id(params: Dict[str, str] = Depends(get_params)) -> int:
    """Extract ClientTransactionID (0 when missing or invalid)."""
    return parse_client_transaction_id(params.get("clienttransactionid"))


def _current_snapshot(store: TelemetryStore) -> WeatherSnapshot:
    snapshot = store.current()
    if snapshot is None:
        raise NoDataError("No weather data available yet")
    return snapshot


def _reading(
    name: str,
    attribute: str,
    client_id: int,
    store: TelemetryStore,
    sequencer: TransactionSequencer
) -> AlpacaResponse:
    """Envelope one snapshot attribute."""
    try:
        value = getattr(_current_snapshot(store), attribute)
        logger.debug(f"GET /{name} -> {value}")
        return make_response(value, client_id, sequencer.next())
    except NoDataError as e:
        logger.warning(f"GET /{name}: {e}")
        return make_response(None, client_id, sequencer.next(), e)


# Common device endpoints

@router.get("/connected", response_model=AlpacaResponse)
async def get_connected(
    client_id: int = Depends(get_client_id),
    connection: ConnectionState = Depends(get_connection),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get connection status."""
    value = connection.connected
    logger.debug(f"GET /connected -> {value}")
    return make_response(value, client_id, sequencer.next())


@router.put("/connected", response_model=AlpacaResponse)
async def put_connected(
    params: Dict[str, str] = Depends(get_params),
    client_id: int = Depends(get_client_id),
    connection: ConnectionState = Depends(get_connection),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Connect or disconnect (client-visible latch only)."""
    try:
        connection.write(params.get("connected"))
    except InvalidValueError as e:
        logger.warning(f"Error in /connected PUT: {e}")
        return to_json_response(make_response(None, client_id, sequencer.next(), e))

    return make_response(None, client_id, sequencer.next())


@router.get("/name", response_model=AlpacaResponse)
async def get_name(
    client_id: int = Depends(get_client_id),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get device name."""
    return make_response(DEVICE_NAME, client_id, sequencer.next())


@router.get("/description", response_model=AlpacaResponse)
async def get_description(
    client_id: int = Depends(get_client_id),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get device description."""
    return make_response(DEVICE_DESCRIPTION, client_id, sequencer.next())


@router.get("/driverinfo", response_model=AlpacaResponse)
async def get_driverinfo(
    client_id: int = Depends(get_client_id),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get driver information."""
    return make_response(DRIVER_INFO, client_id, sequencer.next())


@router.get("/driverversion", response_model=AlpacaResponse)
async def get_driverversion(
    client_id: int = Depends(get_client_id),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get driver version."""
    return make_response(__version__, client_id, sequencer.next())


@router.get("/interfaceversion", response_model=AlpacaResponse)
async def get_interfaceversion(
    client_id: int = Depends(get_client_id),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get ASCOM interface version."""
    return make_response(INTERFACE_VERSION, client_id, sequencer.next())


@router.get("/supportedactions", response_model=AlpacaResponse)
async def get_supportedactions(
    client_id: int = Depends(get_client_id),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get list of supported actions (empty)."""
    return make_response([], client_id, sequencer.next())


# Observing conditions readings (units as reported by the Boltwood)

@router.get("/temperature", response_model=AlpacaResponse)
async def get_temperature(
    client_id: int = Depends(get_client_id),
    store: TelemetryStore = Depends(get_store),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get ambient temperature."""
    return _reading("temperature", "ambient_temperature", client_id, store, sequencer)


@router.get("/humidity", response_model=AlpacaResponse)
async def get_humidity(
    client_id: int = Depends(get_client_id),
    store: TelemetryStore = Depends(get_store),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get relative humidity (%)."""
    return _reading("humidity", "humidity", client_id, store, sequencer)


@router.get("/dewpoint", response_model=AlpacaResponse)
async def get_dewpoint(
    client_id: int = Depends(get_client_id),
    store: TelemetryStore = Depends(get_store),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get dew point."""
    return _reading("dewpoint", "dew_point", client_id, store, sequencer)


@router.get("/windspeed", response_model=AlpacaResponse)
async def get_windspeed(
    client_id: int = Depends(get_client_id),
    store: TelemetryStore = Depends(get_store),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get wind speed."""
    return _reading("windspeed", "wind_speed", client_id, store, sequencer)


@router.get("/skytemperature", response_model=AlpacaResponse)
async def get_skytemperature(
    client_id: int = Depends(get_client_id),
    store: TelemetryStore = Depends(get_store),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get sky temperature."""
    return _reading("skytemperature", "sky_temperature", client_id, store, sequencer)


@router.get("/weather", response_model=AlpacaResponse)
async def get_weather(
    client_id: int = Depends(get_client_id),
    store: TelemetryStore = Depends(get_store),
    sequencer: TransactionSequencer = Depends(get_sequencer)
):
    """Get the full latest snapshot, including unit tags and conditions."""
    try:
        value = _current_snapshot(store).to_dict()
        return make_response(value, client_id, sequencer.next())
    except NoDataError as e:
        logger.warning(f"GET /weather: {e}")
        return make_response(None, client_id, sequencer.next(), e)
