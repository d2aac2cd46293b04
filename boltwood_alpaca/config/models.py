"""
Configuration models using Pydantic for validation.

All configuration is loaded from config.json and validated at startup.
"""

from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerConfig(BaseModel):
    """HTTP server and discovery configuration."""

    ip: str = Field(default="0.0.0.0", description="IP address to bind to")
    port: int = Field(default=11111, ge=1, le=65535, description="Alpaca HTTP port")
    discovery_enabled: bool = Field(
        default=True, description="Enable UDP discovery protocol"
    )
    discovery_port: int = Field(
        default=32227, ge=1, le=65535, description="UDP port for Alpaca discovery"
    )


class TelemetryConfig(BaseModel):
    """Boltwood data source configuration."""

    source: str = Field(
        default="boltwood.txt",
        description="Path to the Boltwood one-line data file, or an http(s) URL serving it"
    )
    polling_interval_seconds: float = Field(
        default=60.0, gt=0, le=3600, description="Interval between reads of the source"
    )
    timezone: str = Field(
        default="UTC", description="IANA timezone the Boltwood timestamps are written in"
    )
    http_timeout_seconds: float = Field(
        default=10.0, gt=0, le=120, description="Timeout for fetching an http(s) source"
    )
    numeric_policy: Literal["zero_fill", "strict"] = Field(
        default="zero_fill",
        description="zero_fill: unreadable numeric fields become 0; strict: reject the line"
    )

    @field_validator("source")
    @classmethod
    def validate_source(cls, v):
        """Require a non-empty source."""
        if not v.strip():
            raise ValueError("Telemetry source must not be empty")
        return v.strip()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Ensure the timezone is known to zoneinfo."""
        if not v:
            return "UTC"
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    file: Optional[str] = Field(
        default="boltwood_alpaca.log",
        description="Log file path (None for console only)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class AppConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    server: ServerConfig = Field(default_factory=ServerConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
