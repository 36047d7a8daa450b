from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


TellingId = str


class Current(BaseModel):
    """Current reading as returned by the Open-Meteo ``current`` block.

    Attribute names carry the unit; the JSON keys are the Open-Meteo variable
    names. Every field is optional and explicit ``null`` values are accepted:
    - temperature in Celsius
    - wind speed as reported by the endpoint (m/s scale assumed downstream)
    - wind direction in degrees (0..360, meteorological "from")
    - cloud cover in percent
    - pressure in hectopascal (hPa)
    - visibility in metres
    - precipitation in millimetres (current intensity)
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    time: Optional[str] = Field(default=None)
    temperature_c: Optional[float] = Field(default=None, alias="temperature_2m")
    wind_speed_ms: Optional[float] = Field(default=None, alias="wind_speed_10m")
    wind_direction_deg: Optional[float] = Field(default=None, alias="wind_direction_10m")
    cloud_cover_pct: Optional[float] = Field(default=None, alias="cloud_cover")
    pressure_hpa: Optional[float] = Field(default=None, alias="pressure_msl")
    visibility_m: Optional[float] = Field(default=None, alias="visibility")
    precipitation_mm: Optional[float] = Field(default=None, alias="precipitation")


class OpenMeteoResponse(BaseModel):
    """Minimal Open-Meteo forecast response (only what we read)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    current: Optional[Current] = Field(default=None)


@dataclass(frozen=True)
class Location:
    """A single device fix. ``timestamp`` is in epoch milliseconds."""

    latitude: float
    longitude: float
    timestamp: int


@dataclass(frozen=True)
class NormalizedWeather:
    beaufort: int
    wind_rose_label: str
    cloud_eighths: str
    precipitation_code: str


@dataclass(frozen=True)
class WeatherSnapshot:
    location: Location
    current: Current
    normalized: NormalizedWeather


@dataclass(frozen=True)
class WeatherFormValues:
    """Values used to pre-fill the weather part of the count metadata form."""

    wind_label: str
    wind_code: str
    beaufort: str
    beaufort_display: str
    cloud_eighths: str
    cloud_display: str
    precipitation_code: str
    precipitation_label: str
    temperature_c: Optional[int]
    visibility_m: Optional[int]
    pressure_hpa: Optional[int]


__all__ = [
    "Current",
    "Location",
    "NormalizedWeather",
    "OpenMeteoResponse",
    "TellingId",
    "WeatherFormValues",
    "WeatherSnapshot",
]
