from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from ..cache import WeatherCache
from ..entities import Location, WeatherSnapshot
from ..location import LocationProvider, select_best_location
from ..normalize import normalize


class WeatherService:
    """Location -> current reading -> normalised codes, cached per rounded coordinate.

    Every failure degrades to ``None`` ("no data"); nothing here raises to the
    caller for a missing fix, an unreachable endpoint or a malformed body.
    """

    CURRENT_TTL = 10 * 60

    def __init__(
        self,
        *,
        location_providers: Iterable[LocationProvider],
        provider: Any,
        cache: Optional[WeatherCache] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.location_providers: Sequence[LocationProvider] = list(location_providers)
        self.provider = provider
        self.cache = cache or WeatherCache()
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def current_location(self) -> Optional[Location]:
        return select_best_location(self.location_providers)

    def current_snapshot(self) -> Optional[WeatherSnapshot]:
        location = self.current_location()
        if location is None:
            self._log.info("No location available for weather lookup")
            return None
        return self.snapshot_at(location)

    def snapshot_at(self, location: Location) -> Optional[WeatherSnapshot]:
        cache_key = self._cache_key(location.latitude, location.longitude)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached
        current = self.provider.fetch_current(location.latitude, location.longitude)
        if current is None:
            return None
        snapshot = WeatherSnapshot(location=location, current=current, normalized=normalize(current))
        self.cache.set(cache_key, snapshot, self.CURRENT_TTL)
        return snapshot

    def preload(self) -> bool:
        """Warm the cache for the current location; used as a background preload task."""
        return self.current_snapshot() is not None

    # Helpers ------------------------------------------------------------
    def _cache_key(self, latitude: float, longitude: float) -> str:
        return f"weather:current:{latitude:.3f}:{longitude:.3f}"


__all__ = ["WeatherService"]
