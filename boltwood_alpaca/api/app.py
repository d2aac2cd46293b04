"""
FastAPI application factory.
"""

import html
import logging
import socket
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from boltwood_alpaca import __version__
from boltwood_alpaca.config.models import AppConfig
from boltwood_alpaca.api.connection import ConnectionState
from boltwood_alpaca.api.discovery import generate_device_id
from boltwood_alpaca.api.models import make_response, parse_client_transaction_id, to_json_response
from boltwood_alpaca.api.routes import (
    DEVICE_NAME,
    DEVICE_NUMBER,
    DEVICE_TYPE,
    get_params,
    router as device_router,
)
from boltwood_alpaca.api.transactions import TransactionSequencer
from boltwood_alpaca.utils.exceptions import InvalidValueError, MethodNotAllowedError
from boltwood_alpaca.weather.store import TelemetryStore


logger = logging.getLogger(__name__)

SERVER_NAME = "Boltwood II ASCOM Alpaca Server"
MANUFACTURER = "Boltwood Alpaca Project"


async def _client_id(request: Request) -> int:
    """ClientTransactionID from the query string or, for PUT, the form body."""
    try:
        params = await get_params(request)
    except InvalidValueError:
        params = request.state.alpaca_params
    return parse_client_transaction_id(params.get("clienttransactionid"))


def create_app(
    config: AppConfig,
    store: Optional[TelemetryStore] = None,
    connection: Optional[ConnectionState] = None,
    sequencer: Optional[TransactionSequencer] = None,
    device_id: Optional[str] = None
) -> FastAPI:
    """
    Create FastAPI application instance.

    Args:
        config: Application configuration.
        store: Telemetry store shared with the poller (new one if None).
        connection: Connected latch (new one if None).
        sequencer: Server transaction sequencer (new one if None).
        device_id: Unique ID reported to clients (generated if None).

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(
        title="Boltwood II ASCOM Alpaca Driver",
        description="ASCOM Alpaca ObservingConditions driver for the Boltwood II cloud sensor",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.config = config
    app.state.store = store if store is not None else TelemetryStore()
    app.state.connection = connection if connection is not None else ConnectionState()
    app.state.sequencer = sequencer if sequencer is not None else TransactionSequencer()
    app.state.device_id = device_id if device_id is not None else generate_device_id()

    # CORS middleware (allow all origins for Alpaca compatibility)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with its duration."""
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        logger.debug(
            f"{client} {request.method} {request.url.path} "
            f"-> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def alpaca_http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Report unsupported verbs on device endpoints as Alpaca errors."""
        if exc.status_code == 405 and request.url.path.startswith("/api/v1/"):
            logger.warning(f"Method {request.method} not allowed on {request.url.path}")
            response = make_response(
                value=None,
                client_id=await _client_id(request),
                server_id=request.app.state.sequencer.next(),
                error=MethodNotAllowedError(request.method)
            )
            return to_json_response(response)
        return await http_exception_handler(request, exc)

    @app.exception_handler(InvalidValueError)
    async def invalid_value_handler(request: Request, exc: InvalidValueError):
        """Report unusable request parameters as Alpaca errors (HTTP 400)."""
        logger.warning(f"Invalid request to {request.url.path}: {exc}")
        response = make_response(
            value=None,
            client_id=await _client_id(request),
            server_id=request.app.state.sequencer.next(),
            error=exc
        )
        return to_json_response(response)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and return Alpaca error response."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        response = make_response(
            value=None,
            client_id=await _client_id(request),
            server_id=request.app.state.sequencer.next(),
            error=exc
        )

        return JSONResponse(
            status_code=200,  # driver errors travel in the envelope
            content=response.model_dump()
        )

    # Management API endpoints (required for client discovery)
    @app.get("/management/apiversions")
    async def get_api_versions():
        """Return supported Alpaca API versions."""
        return {"Value": [1]}

    @app.get("/management/v1/configureddevices")
    async def get_configured_devices(request: Request):
        """Return list of configured devices."""
        return {
            "Value": [
                {
                    "DeviceName": DEVICE_NAME,
                    "DeviceType": DEVICE_TYPE,
                    "DeviceNumber": DEVICE_NUMBER,
                    "UniqueID": request.app.state.device_id
                }
            ]
        }

    @app.get("/management/v1/description")
    async def get_server_description():
        """Return server description."""
        return {
            "Value": {
                "ServerName": SERVER_NAME,
                "Manufacturer": MANUFACTURER,
                "ManufacturerVersion": __version__,
                "Location": socket.gethostname()
            }
        }

    # Raw snapshot for the status page
    @app.get("/api/weather")
    async def get_weather_raw(request: Request):
        """Return the latest snapshot without the Alpaca envelope ({} before data)."""
        snapshot = request.app.state.store.current()
        return snapshot.to_dict() if snapshot is not None else {}

    @app.get("/", response_class=HTMLResponse)
    async def status_page():
        """Live weather status page."""
        interval_ms = int(config.telemetry.polling_interval_seconds * 1000)
        return HTMLResponse(content=_get_status_page_html(interval_ms))

    # ASCOM Alpaca Setup Page
    @app.get("/setup/v1/observingconditions/0/setup", response_class=HTMLResponse)
    async def setup_page(request: Request):
        """ASCOM Alpaca setup page (read-only configuration summary)."""
        store: TelemetryStore = request.app.state.store
        age = store.seconds_since_update()
        page = _get_setup_page_html(
            source=html.escape(config.telemetry.source),
            interval=config.telemetry.polling_interval_seconds,
            tz_name=config.telemetry.timezone,
            numeric_policy=config.telemetry.numeric_policy,
            connected=request.app.state.connection.connected,
            last_update="never" if age is None else f"{age:.0f} s ago",
        )
        return HTMLResponse(content=page)

    app.include_router(device_router)

    logger.info("FastAPI application created")
    return app


_PAGE_STYLE = """
        body { font-family: 'Segoe UI', Tahoma, sans-serif; max-width: 640px;
               margin: 40px auto; padding: 20px; background: #1a1a2e; color: #eee; }
        h1 { color: #4CAF50; margin-bottom: 5px; }
        .section { background: #16213e; border-radius: 8px; padding: 20px; }
        .info-row { display: flex; justify-content: space-between;
                    padding: 8px 0; border-bottom: 1px solid #333; }
        .info-row:last-child { border-bottom: none; }
        .info-label { color: #aaa; }
        .info-value { font-weight: bold; }
"""


def _get_status_page_html(polling_interval_ms: int) -> str:
    """Generate the live status page HTML."""
    return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Boltwood II Weather Data</title>
    <style>{_PAGE_STYLE}</style>
</head>
<body>
    <h1>Current Weather Conditions</h1>
    <div class="section" id="weather-data">Loading...</div>

    <script>
        var pollingInterval = {polling_interval_ms};
        var rows = [
            ['Date', function(d) {{ return new Date(d.Date).toLocaleString(); }}],
            ['Sky Temperature', function(d) {{ return d.SkyTemperature.toFixed(1) + d.TemperatureScale; }}],
            ['Ambient Temperature', function(d) {{ return d.AmbientTemperature.toFixed(1) + d.TemperatureScale; }}],
            ['Sensor Temperature', function(d) {{ return d.SensorTemperature.toFixed(1) + d.TemperatureScale; }}],
            ['Wind Speed', function(d) {{ return d.WindSpeed.toFixed(1) + ' ' + d.WindSpeedScale; }}],
            ['Humidity', function(d) {{ return d.Humidity.toFixed(1) + '%'; }}],
            ['Dew Point', function(d) {{ return d.DewPoint.toFixed(1) + d.TemperatureScale; }}],
            ['Dew Heater', function(d) {{ return d.DewHeaterPercentage.toFixed(1) + '%'; }}],
            ['Rain Flag', function(d) {{ return d.RainFlag; }}],
            ['Wet Flag', function(d) {{ return d.WetFlag; }}],
            ['Cloud Condition', function(d) {{ return d.CloudCondition; }}],
            ['Wind Condition', function(d) {{ return d.WindCondition; }}],
            ['Rain Condition', function(d) {{ return d.RainCondition; }}],
            ['Darkness Condition', function(d) {{ return d.DarknessCondition; }}],
            ['Alert Status', function(d) {{ return d.AlertStatus; }}]
        ];

        function updateWeatherData() {{
            fetch('/api/weather')
                .then(function(response) {{ return response.json(); }})
                .then(function(data) {{
                    var div = document.getElementById('weather-data');
                    if (!data.Date) {{
                        div.textContent = 'No weather data received yet';
                        return;
                    }}
                    div.textContent = '';
                    for (var i = 0; i < rows.length; i++) {{
                        var row = document.createElement('div');
                        row.className = 'info-row';
                        var label = document.createElement('span');
                        label.className = 'info-label';
                        label.textContent = rows[i][0];
                        var value = document.createElement('span');
                        value.className = 'info-value';
                        value.textContent = rows[i][1](data);
                        row.appendChild(label);
                        row.appendChild(value);
                        div.appendChild(row);
                    }}
                }})
                .catch(function(error) {{ console.error('Error fetching weather data:', error); }});
        }}

        updateWeatherData();
        setInterval(updateWeatherData, pollingInterval);
    </script>
</body>
</html>'''


def _get_setup_page_html(source, interval, tz_name, numeric_policy, connected, last_update) -> str:
    """Generate setup page HTML."""
    status_text = 'Connected' if connected else 'Disconnected'
    return f'''<!DOCTYPE html>
<html>
<head>
    <title>Boltwood Driver Setup</title>
    <style>{_PAGE_STYLE}</style>
</head>
<body>
    <h1>Boltwood Driver Setup</h1>
    <p>Settings are read from config.json; edit it and restart the driver to change them.</p>
    <div class="section">
        <div class="info-row"><span class="info-label">Status:</span><span class="info-value">{status_text}</span></div>
        <div class="info-row"><span class="info-label">Data source:</span><span class="info-value">{source}</span></div>
        <div class="info-row"><span class="info-label">Polling interval:</span><span class="info-value">{interval} s</span></div>
        <div class="info-row"><span class="info-label">Timezone:</span><span class="info-value">{tz_name}</span></div>
        <div class="info-row"><span class="info-label">Numeric fields:</span><span class="info-value">{numeric_policy}</span></div>
        <div class="info-row"><span class="info-label">Last update:</span><span class="info-value">{last_update}</span></div>
    </div>
    <p><a href="/" style="color:#4CAF50">Open weather status page</a></p>
</body>
</html>'''
