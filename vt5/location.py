"""Last-known location lookup across a prioritised list of providers."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .entities import Location


logger = logging.getLogger(__name__)

NETWORK_PROVIDER = "network"
GPS_PROVIDER = "gps"
DEFAULT_PROVIDER_ORDER = (NETWORK_PROVIDER, GPS_PROVIDER)


class LocationProvider(Protocol):
    name: str

    def last_known(self) -> Optional[Location]:
        """Return the most recent fix this provider has, if any."""
        ...


class FixFileLocationProvider:
    """Reads the last fix a location daemon wrote as ``<directory>/<name>.json``."""

    def __init__(self, directory: Path | str, name: str) -> None:
        self.path = Path(directory) / f"{name}.json"
        self.name = name

    def last_known(self) -> Optional[Location]:
        if not self.path.is_file():
            return None
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"location fix must be an object: {self.path}")
        return Location(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            timestamp=int(data["timestamp"]),
        )


def default_providers(directory: Path | str) -> list[FixFileLocationProvider]:
    return [FixFileLocationProvider(directory, name) for name in DEFAULT_PROVIDER_ORDER]


def select_best_location(providers: Iterable[LocationProvider]) -> Optional[Location]:
    """Keep the most recent fix across ``providers``, asked in priority order.

    A provider that raises counts as having no fix. On equal timestamps the
    earlier provider wins.
    """
    best: Optional[Location] = None
    for provider in providers:
        try:
            location = provider.last_known()
        except Exception as exc:  # noqa: BLE001 - an unavailable provider is not an error
            logger.warning("Location provider %s failed: %s", getattr(provider, "name", provider), exc)
            continue
        if location is None:
            continue
        if best is None or location.timestamp > best.timestamp:
            best = location
    return best


__all__ = [
    "DEFAULT_PROVIDER_ORDER",
    "FixFileLocationProvider",
    "GPS_PROVIDER",
    "LocationProvider",
    "NETWORK_PROVIDER",
    "default_providers",
    "select_best_location",
]
