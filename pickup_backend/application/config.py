"""
Configuración de la aplicación. Defaults en un solo lugar; overrides por entorno (.env).
"""

from typing import Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from pickup_backend.domain.business_date import parse_day_switch_time
from pickup_backend.domain.models import DEFAULT_ROUTE_CAPACITY, DaySwitchBoundary

DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_DAY_SWITCH_TIME = "05:00"


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix PICKUP_) with sensible defaults."""

    default_timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA timezone used to resolve business dates",
    )
    default_day_switch_time: str = Field(
        default=DEFAULT_DAY_SWITCH_TIME,
        description="Day-switch boundary (HH:MM) for venues without their own setting",
    )
    venue_day_switch_times: Dict[str, str] = Field(
        default_factory=dict,
        description="Per-venue day-switch boundary overrides, venue_id -> HH:MM",
    )
    default_route_capacity: int = Field(
        default=DEFAULT_ROUTE_CAPACITY,
        description="Capacity used when a route or suggestion does not give one",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "PICKUP_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("default_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown IANA timezone: {value!r}") from e
        return value

    @field_validator("default_day_switch_time")
    @classmethod
    def _valid_day_switch(cls, value: str) -> str:
        parse_day_switch_time(value)
        return value

    @field_validator("venue_day_switch_times")
    @classmethod
    def _valid_venue_day_switches(cls, value: Dict[str, str]) -> Dict[str, str]:
        for venue_id, time_text in value.items():
            try:
                parse_day_switch_time(time_text)
            except ValueError as e:
                raise ValueError(f"venue {venue_id}: {e}") from e
        return value

    def day_switch_for(self, venue_id: Optional[str]) -> DaySwitchBoundary:
        """Boundary for a venue; falls back to the default setting."""
        value = self.venue_day_switch_times.get(venue_id or "") or self.default_day_switch_time
        return parse_day_switch_time(value)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
