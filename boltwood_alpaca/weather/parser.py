"""
Boltwood II one-line data file parser.

The Boltwood Clarity software writes a single whitespace-separated line:

    Date       Time        T V SkyT  AmbT  SenT  Wind  Hum  DewPt Hea R W Since Now() c w r d C A
    2024-01-01 03:15:00.00 C M 5.0   10.0  12.0  15.0  55.0 3.0   20.0 0 0 0  0     1 2 1 1 2 0 1

Fields 13 (seconds since last valid data), 14 (Now() day value) and
19 (roof close flag) are unreliable on many installations and are ignored.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Union
from zoneinfo import ZoneInfo

from boltwood_alpaca.utils.exceptions import MalformedTelemetry
from boltwood_alpaca.weather.snapshot import WeatherSnapshot


logger = logging.getLogger(__name__)

MIN_FIELDS = 21
DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
UNKNOWN = "Unknown"

# Field positions in the data line
FIELD_DATE = 0
FIELD_TIME = 1
FIELD_TEMPERATURE_SCALE = 2
FIELD_WIND_SPEED_SCALE = 3
FIELD_SKY_TEMPERATURE = 4
FIELD_AMBIENT_TEMPERATURE = 5
FIELD_SENSOR_TEMPERATURE = 6
FIELD_WIND_SPEED = 7
FIELD_HUMIDITY = 8
FIELD_DEW_POINT = 9
FIELD_DEW_HEATER = 10
FIELD_RAIN_FLAG = 11
FIELD_WET_FLAG = 12
FIELD_CLOUD = 15
FIELD_WIND = 16
FIELD_RAIN = 17
FIELD_DARKNESS = 18
FIELD_ALERT = 20

CLOUD_CONDITIONS: Dict[int, str] = {1: "Clear", 2: "Light Clouds", 3: "Very Cloudy"}
WIND_CONDITIONS: Dict[int, str] = {1: "Calm", 2: "Windy", 3: "Very Windy"}
RAIN_CONDITIONS: Dict[int, str] = {1: "Dry", 2: "Damp", 3: "Rain"}
DARKNESS_CONDITIONS: Dict[int, str] = {1: "Dark", 2: "Dim", 3: "Daylight"}
ALERT_STATUSES: Dict[int, str] = {0: "No Alert", 1: "Alert"}

NUMERIC_POLICIES = ("zero_fill", "strict")


def lookup_condition(table: Dict[int, str], code: int) -> str:
    """Map a Boltwood condition code to its label ("Unknown" if unmapped)."""
    return table.get(code, UNKNOWN)


class TelemetryParser:
    """
    Converts raw Boltwood data into WeatherSnapshot instances.

    Numeric fields are handled according to ``numeric_policy``:
    ``zero_fill`` replaces an unreadable value with 0 and logs a warning,
    ``strict`` rejects the whole line.
    """

    def __init__(self, tz_name: str = "UTC", numeric_policy: str = "zero_fill"):
        if numeric_policy not in NUMERIC_POLICIES:
            raise ValueError(
                f"Invalid numeric policy: {numeric_policy}. Must be one of {NUMERIC_POLICIES}"
            )
        self.tz = ZoneInfo(tz_name)
        self.numeric_policy = numeric_policy

    def parse(self, data: Union[bytes, str]) -> WeatherSnapshot:
        """
        Parse one Boltwood data line.

        Args:
            data: Raw file/HTTP content.

        Returns:
            Fully populated WeatherSnapshot.

        Raises:
            MalformedTelemetry: If the content is not exactly one well-formed line.
        """
        if isinstance(data, bytes):
            text = data.decode("utf-8", errors="replace")
        else:
            text = data

        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) != 1:
            raise MalformedTelemetry(
                f"Expected exactly one data line, got {len(lines)}"
            )

        fields = lines[0].split()
        if len(fields) < MIN_FIELDS:
            raise MalformedTelemetry(
                f"Insufficient fields in Boltwood data: got {len(fields)}, expected {MIN_FIELDS}"
            )

        date = self._parse_date(fields[FIELD_DATE], fields[FIELD_TIME])

        return WeatherSnapshot(
            date=date,
            temperature_scale=fields[FIELD_TEMPERATURE_SCALE],
            wind_speed_scale=fields[FIELD_WIND_SPEED_SCALE],
            sky_temperature=self._number(fields, FIELD_SKY_TEMPERATURE, "sky temperature", float),
            ambient_temperature=self._number(fields, FIELD_AMBIENT_TEMPERATURE, "ambient temperature", float),
            sensor_temperature=self._number(fields, FIELD_SENSOR_TEMPERATURE, "sensor temperature", float),
            wind_speed=self._number(fields, FIELD_WIND_SPEED, "wind speed", float),
            humidity=self._number(fields, FIELD_HUMIDITY, "humidity", float),
            dew_point=self._number(fields, FIELD_DEW_POINT, "dew point", float),
            dew_heater_percentage=self._number(fields, FIELD_DEW_HEATER, "dew heater", float),
            rain_flag=self._number(fields, FIELD_RAIN_FLAG, "rain flag", int),
            wet_flag=self._number(fields, FIELD_WET_FLAG, "wet flag", int),
            cloud_condition=lookup_condition(
                CLOUD_CONDITIONS, self._number(fields, FIELD_CLOUD, "cloud condition", int)
            ),
            wind_condition=lookup_condition(
                WIND_CONDITIONS, self._number(fields, FIELD_WIND, "wind condition", int)
            ),
            rain_condition=lookup_condition(
                RAIN_CONDITIONS, self._number(fields, FIELD_RAIN, "rain condition", int)
            ),
            darkness_condition=lookup_condition(
                DARKNESS_CONDITIONS, self._number(fields, FIELD_DARKNESS, "darkness condition", int)
            ),
            alert_status=lookup_condition(
                ALERT_STATUSES, self._number(fields, FIELD_ALERT, "alert status", int)
            ),
        )

    def _parse_date(self, date_str: str, time_str: str) -> datetime:
        """Parse date and time fields in the configured timezone, return UTC."""
        combined = f"{date_str} {time_str}"
        try:
            local = datetime.strptime(combined, DATE_FORMAT)
        except ValueError as e:
            raise MalformedTelemetry(f"Invalid date '{combined}': {e}") from e
        try:
            return local.replace(tzinfo=self.tz).astimezone(timezone.utc)
        except (OverflowError, ValueError) as e:
            raise MalformedTelemetry(f"Date '{combined}' out of range: {e}") from e

    def _number(self, fields: List[str], index: int, name: str, convert: Callable):
        """Convert one numeric field, applying the numeric policy on failure."""
        raw = fields[index]
        try:
            value = convert(raw)
            if not math.isfinite(value):
                raise ValueError("not a finite number")
            return value
        except ValueError:
            if self.numeric_policy == "strict":
                raise MalformedTelemetry(
                    f"Invalid {name} in field {index}: '{raw}'"
                ) from None
            logger.warning(f"Invalid {name} in field {index}: '{raw}', using 0")
            return convert(0)
