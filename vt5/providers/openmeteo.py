from __future__ import annotations

import logging
from typing import Optional

import requests

from .base import ProviderError, RequestConfig, WeatherProvider
from ..codec import DecodeError, JsonCodec
from ..entities import Current, OpenMeteoResponse


CURRENT_FIELDS = (
    "temperature_2m",
    "wind_speed_10m",
    "wind_direction_10m",
    "cloud_cover",
    "pressure_msl",
    "visibility",
    "precipitation",
)


class OpenMeteoProvider(WeatherProvider):
    """Current conditions from Open-Meteo (no API key required)."""

    name = "open-meteo"
    base_url = "https://api.open-meteo.com/v1/forecast"

    def __init__(
        self,
        base_url: Optional[str] = None,
        codec: Optional[JsonCodec] = None,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        super().__init__(session=session, request_config=request_config)
        self.base_url = base_url or self.base_url
        self.codec = codec or JsonCodec()
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch_current(self, latitude: float, longitude: float) -> Optional[Current]:
        """Return the ``current`` block, or ``None`` when nothing usable came back."""
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(CURRENT_FIELDS),
            "timezone": "auto",
        }
        try:
            response = self._request("GET", self.base_url, params=params)
        except ProviderError as exc:
            self._log.warning("Current weather unavailable for %.4f,%.4f: %s", latitude, longitude, exc)
            return None
        try:
            payload = self.codec.decode(OpenMeteoResponse, response.content)
        except DecodeError as exc:
            self._log.warning("Discarding malformed Open-Meteo body: %s", exc)
            return None
        if payload.current is None:
            self._log.info("Open-Meteo response without current block")
        return payload.current


__all__ = ["CURRENT_FIELDS", "OpenMeteoProvider"]
