from __future__ import annotations

import math

import pytest

from vt5.entities import Current
from vt5.normalize import (
    WIND_ROSE_LABELS,
    build_form_values,
    cloud_percent_to_eighths,
    deg_to_16_wind_label,
    ms_to_beaufort,
    normalize,
    precipitation_to_code,
    round_half_up,
    to_visibility_meters,
)
from vt5.serverdata import CodeItem


@pytest.mark.parametrize(
    "speed, expected",
    [(None, 0), (0.0, 0), (0.2, 0), (0.21, 1), (1.5, 1), (1.51, 2), (32.6, 11), (32.61, 12), (100.0, 12)],
)
def test_beaufort_bands(speed, expected):
    assert ms_to_beaufort(speed) == expected


def test_beaufort_is_monotonic_and_bounded():
    speeds = [step * 0.05 for step in range(0, 1000)]
    values = [ms_to_beaufort(speed) for speed in speeds]

    assert values == sorted(values)
    assert all(0 <= value <= 12 for value in values)
    assert ms_to_beaufort(math.nan) == 0


@pytest.mark.parametrize(
    "deg, expected",
    [(None, "N"), (0, "N"), (11, "N"), (12, "NNO"), (90, "O"), (180, "Z"), (270, "W"), (348.75, "N"), (348.7, "NNW")],
)
def test_wind_rose_labels(deg, expected):
    assert deg_to_16_wind_label(deg) == expected


def test_wind_rose_is_periodic():
    for deg in range(-720, 720, 7):
        assert deg_to_16_wind_label(deg) == deg_to_16_wind_label(deg + 360)
        assert deg_to_16_wind_label(deg) in WIND_ROSE_LABELS
    assert deg_to_16_wind_label(-90) == "W"
    assert deg_to_16_wind_label(math.inf) == "N"


@pytest.mark.parametrize("pct, expected", [(None, "0"), (0, "0"), (50, "4"), (100, "8"), (-20, "0"), (250, "8"), (6.25, "1")])
def test_cloud_eighths(pct, expected):
    assert cloud_percent_to_eighths(pct) == expected


def test_cloud_eighths_range():
    assert {cloud_percent_to_eighths(pct) for pct in range(0, 101)} == {str(i) for i in range(9)}


@pytest.mark.parametrize(
    "mm, expected",
    [(None, "geen"), (0.0, "geen"), (0.049, "geen"), (0.05, "motregen"), (0.49, "motregen"), (0.5, "regen"), (12.0, "regen")],
)
def test_precipitation_codes(mm, expected):
    assert precipitation_to_code(mm) == expected


def test_round_half_up_and_visibility():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert to_visibility_meters(24140.4) == 24140
    assert to_visibility_meters(-5) == 0
    assert to_visibility_meters(None) is None
    assert to_visibility_meters(math.inf) is None


def test_normalize_current_reading():
    current = Current(wind_speed_10m=6.0, wind_direction_10m=225.0, cloud_cover=75, precipitation=0.2)

    normalized = normalize(current)

    assert normalized.beaufort == 4
    assert normalized.wind_rose_label == "ZW"
    assert normalized.cloud_eighths == "6"
    assert normalized.precipitation_code == "motregen"


def test_form_values_use_code_table():
    codes = {
        "wind": [
            CodeItem(veld="wind", waarde="n", tekst="N"),
            CodeItem(veld="wind", waarde="zw", tekst="ZW"),
        ],
        "neerslag": [CodeItem(veld="neerslag", waarde="motregen", tekst="Motregen")],
    }
    current = Current(
        temperature_2m=12.5,
        wind_speed_10m=0.1,
        wind_direction_10m=226.0,
        cloud_cover=100,
        pressure_msl=1013.4,
        visibility=9999.6,
        precipitation=0.1,
    )

    form = build_form_values(current, codes)

    assert form.wind_label == "ZW"
    assert form.wind_code == "zw"
    assert form.beaufort == "0"
    assert form.beaufort_display == "<1bf"
    assert form.cloud_display == "8/8"
    assert form.precipitation_label == "Motregen"
    assert form.temperature_c == 13
    assert form.pressure_hpa == 1013
    assert form.visibility_m == 10000


def test_form_values_fall_back_without_code_table():
    form = build_form_values(Current(wind_direction_10m=90.0, wind_speed_10m=9.0))

    assert form.wind_code == "n"
    assert form.beaufort_display == "5bf"
    assert form.precipitation_label == "geen"
    assert form.temperature_c is None
