"""Classification of raw meteorological readings into form codes.

All functions are pure and total: ``None`` and NaN inputs map to a defined
fallback instead of raising.
"""
from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

from .entities import Current, NormalizedWeather, WeatherFormValues


BEAUFORT_THRESHOLDS_MS = (0.2, 1.5, 3.3, 5.4, 7.9, 10.7, 13.8, 17.1, 20.7, 24.4, 28.4, 32.6)

WIND_ROSE_LABELS = (
    "N", "NNO", "NO", "ONO", "O", "OZO", "ZO", "ZZO",
    "Z", "ZZW", "ZW", "WZW", "W", "WNW", "NW", "NNW",
)

PRECIP_NONE = "geen"
PRECIP_DRIZZLE = "motregen"
PRECIP_RAIN = "regen"


def _is_missing(value: Optional[float]) -> bool:
    return value is None or math.isnan(value)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ms_to_beaufort(speed_ms: Optional[float]) -> int:
    """Map wind speed (m/s) to Beaufort 0..12; band upper edges are inclusive."""
    if _is_missing(speed_ms):
        return 0
    for index, threshold in enumerate(BEAUFORT_THRESHOLDS_MS):
        if speed_ms <= threshold:
            return index
    return 12


def deg_to_16_wind_label(deg: Optional[float]) -> str:
    """Map a bearing to the 16-point Dutch wind rose, 22.5 degree sectors centred on each label."""
    if deg is None or not math.isfinite(deg):
        return WIND_ROSE_LABELS[0]
    index = int(math.floor(((deg + 11.25) % 360.0) / 22.5))
    index = min(max(index, 0), len(WIND_ROSE_LABELS) - 1)
    return WIND_ROSE_LABELS[index]


def cloud_percent_to_eighths(pct: Optional[float]) -> str:
    p = 0.0 if _is_missing(pct) else min(max(float(pct), 0.0), 100.0)
    eighths = min(max(round_half_up(p / 100.0 * 8.0), 0), 8)
    return str(eighths)


def precipitation_to_code(precip_mm: Optional[float]) -> str:
    value = 0.0 if _is_missing(precip_mm) else precip_mm
    if value < 0.05:
        return PRECIP_NONE
    if value < 0.5:
        return PRECIP_DRIZZLE
    return PRECIP_RAIN


def to_visibility_meters(value: Optional[float]) -> Optional[int]:
    if _is_missing(value) or math.isinf(value):
        return None
    return max(0, round_half_up(value))


def normalize(current: Current) -> NormalizedWeather:
    return NormalizedWeather(
        beaufort=ms_to_beaufort(current.wind_speed_ms),
        wind_rose_label=deg_to_16_wind_label(current.wind_direction_deg),
        cloud_eighths=cloud_percent_to_eighths(current.cloud_cover_pct),
        precipitation_code=precipitation_to_code(current.precipitation_mm),
    )


def _rounded(value: Optional[float]) -> Optional[int]:
    if _is_missing(value) or math.isinf(value):
        return None
    return round_half_up(value)


def build_form_values(
    current: Current,
    codes_by_category: Optional[Mapping[str, Sequence[object]]] = None,
) -> WeatherFormValues:
    """Derive the metadata form values for ``current``.

    ``codes_by_category`` is the server-data code table grouped by field name;
    objects need ``tekst`` and ``value`` attributes. The wind code is looked up
    by label (falling back to the code for ``N``), the precipitation label by
    code (falling back to the code itself).
    """
    normalized = normalize(current)
    codes = codes_by_category or {}

    value_by_label = {
        (getattr(code, "tekst", None) or "").upper(): getattr(code, "value", None) or ""
        for code in codes.get("wind", ())
    }
    wind_code = value_by_label.get(normalized.wind_rose_label) or value_by_label.get("N") or "n"

    label_by_value = {
        getattr(code, "value", None) or "": getattr(code, "tekst", None) or (getattr(code, "value", None) or "")
        for code in codes.get("neerslag", ())
    }
    precipitation_label = label_by_value.get(normalized.precipitation_code) or normalized.precipitation_code

    beaufort = normalized.beaufort
    return WeatherFormValues(
        wind_label=normalized.wind_rose_label,
        wind_code=wind_code,
        beaufort=str(beaufort),
        beaufort_display="<1bf" if beaufort == 0 else f"{beaufort}bf",
        cloud_eighths=normalized.cloud_eighths,
        cloud_display=f"{normalized.cloud_eighths}/8",
        precipitation_code=normalized.precipitation_code,
        precipitation_label=precipitation_label,
        temperature_c=_rounded(current.temperature_c),
        visibility_m=to_visibility_meters(current.visibility_m),
        pressure_hpa=_rounded(current.pressure_hpa),
    )


__all__ = [
    "BEAUFORT_THRESHOLDS_MS",
    "WIND_ROSE_LABELS",
    "build_form_values",
    "cloud_percent_to_eighths",
    "deg_to_16_wind_label",
    "ms_to_beaufort",
    "normalize",
    "precipitation_to_code",
    "round_half_up",
    "to_visibility_meters",
]
