"""
Immutable weather snapshot produced from one Boltwood data line.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class WeatherSnapshot:
    """
    One complete Boltwood II sample.

    Readings are kept in the units reported by the sensor; the unit tags
    are carried alongside them.
    """
    date: datetime  # UTC
    temperature_scale: str  # "C" or "F"
    wind_speed_scale: str  # "K" (km/h), "M" (mph) or "m" (m/s)
    sky_temperature: float
    ambient_temperature: float
    sensor_temperature: float
    wind_speed: float
    humidity: float
    dew_point: float
    dew_heater_percentage: float
    rain_flag: int
    wet_flag: int
    cloud_condition: str
    wind_condition: str
    rain_condition: str
    darkness_condition: str
    alert_status: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (Alpaca-style keys)."""
        return {
            "Date": self.date.isoformat(),
            "TemperatureScale": self.temperature_scale,
            "WindSpeedScale": self.wind_speed_scale,
            "SkyTemperature": self.sky_temperature,
            "AmbientTemperature": self.ambient_temperature,
            "SensorTemperature": self.sensor_temperature,
            "WindSpeed": self.wind_speed,
            "Humidity": self.humidity,
            "DewPoint": self.dew_point,
            "DewHeaterPercentage": self.dew_heater_percentage,
            "RainFlag": self.rain_flag,
            "WetFlag": self.wet_flag,
            "CloudCondition": self.cloud_condition,
            "WindCondition": self.wind_condition,
            "RainCondition": self.rain_condition,
            "DarknessCondition": self.darkness_condition,
            "AlertStatus": self.alert_status,
        }
