from __future__ import annotations

import json
import os
import subprocess
import sys
from io import StringIO
from pathlib import Path

import pytest
from django.apps import apps as django_apps
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import override_settings

from vt5app import lifecycle

from .helpers import write_json


WEATHER_URL = "https://open-meteo.test/v1/forecast"
REPO_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture()
def command_settings(tmp_path, documents_dir):
    location_dir = tmp_path / "location"
    location_dir.mkdir()
    with override_settings(
        VT5_DOCUMENTS_DIR=str(documents_dir),
        VT5_PREFS_URL=f"sqlite:///{tmp_path / 'prefs.db'}",
        VT5_LOCATION_DIR=str(location_dir),
        WEATHER_BASE_URL=WEATHER_URL,
    ):
        yield location_dir
    app = lifecycle._instance
    if app is not None:
        app.on_terminate()


def _run(*args, **options) -> str:
    out = StringIO()
    call_command(*args, stdout=out, **options)
    return out.getvalue()


def test_weather_fetch_with_coordinates(command_settings, requests_mock):
    requests_mock.get(
        WEATHER_URL,
        json={
            "current": {
                "time": "2024-05-01T12:00",
                "temperature_2m": 9.6,
                "wind_speed_10m": 3.4,
                "wind_direction_10m": 315,
                "cloud_cover": 88,
                "precipitation": 0.0,
            }
        },
    )

    payload = json.loads(_run("weather_fetch", lat=51.4, lon=3.56))

    assert payload["latitude"] == 51.4
    assert payload["normalized"] == {
        "beaufort": 3,
        "wind_rose_label": "NW",
        "cloud_eighths": "7",
        "precipitation_code": "geen",
    }
    assert payload["form"]["temperature_c"] == 10
    assert payload["form"]["wind_code"] == "n"


def test_weather_fetch_uses_last_known_location(command_settings, requests_mock):
    write_json(command_settings / "gps.json", {"latitude": 52.0, "longitude": 4.5, "timestamp": 1_700_000_000_000})
    requests_mock.get(WEATHER_URL, json={"current": {"temperature_2m": 1.0}})

    payload = json.loads(_run("weather_fetch"))

    assert payload["longitude"] == 4.5
    assert requests_mock.last_request.qs["latitude"] == ["52.0"]


def test_weather_fetch_without_data_fails(command_settings, requests_mock):
    requests_mock.get(WEATHER_URL, status_code=503)

    with pytest.raises(CommandError):
        _run("weather_fetch", lat=1.0, lon=2.0)
    with pytest.raises(CommandError):
        _run("weather_fetch")
    with pytest.raises(CommandError):
        _run("weather_fetch", lat=1.0)


def test_preload_command_prints_outcomes(command_settings):
    payload = json.loads(_run("preload", create_folders=True, timeout=10))

    assert payload["root_present"] is True
    assert payload["tasks"]["ServerDataCache"]["state"] == "succeeded"
    assert payload["tasks"]["AliasMatcher"]["state"] == "unavailable"
    assert payload["tasks"]["AliasManager"]["state"] == "unavailable"


def test_next_telling_id_command(command_settings):
    assert _run("next_telling_id").strip() == "1"
    assert _run("next_telling_id").strip() == "2"


def test_preload_command_after_startup_hook_sees_created_folders(command_settings, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["manage.py", "preload"])
    with override_settings(VT5_PRELOAD_ON_STARTUP=True):
        django_apps.get_app_config("vt5app").ready()
    app = lifecycle.get_app()
    assert app.supervisor.wait_idle(timeout=10)
    assert app.registry.snapshot()["root_present"] is False

    payload = json.loads(_run("preload", create_folders=True, timeout=10))

    assert payload["root_present"] is True
    assert payload["tasks"]["ServerDataCache"]["state"] == "succeeded"
    assert lifecycle.get_app() is app


def _manage(tmp_path, *args: str) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env.update(
        DJANGO_SETTINGS_MODULE="vt5app.settings",
        DJANGO_SECRET_KEY="test-secret",
        VT5_PRELOAD_ON_STARTUP="1",
        VT5_DOCUMENTS_DIR=str(tmp_path / "Documents"),
        VT5_PREFS_URL=f"sqlite:///{tmp_path / 'prefs.db'}",
        VT5_LOCATION_DIR="",
    )
    return subprocess.run(
        [sys.executable, str(REPO_ROOT / "manage.py"), *args],
        cwd=REPO_ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=120,
        check=True,
    )


def test_manage_py_preload_with_startup_hook_enabled(tmp_path):
    result = _manage(tmp_path, "preload", "--create-folders", "--timeout", "10")

    payload = json.loads(result.stdout.strip().splitlines()[-1])
    assert payload["root_present"] is True
    assert payload["tasks"]["ServerDataCache"]["state"] == "succeeded"
    assert (tmp_path / "Documents" / "VT5" / "binaries").is_dir()


def test_manage_py_next_telling_id_skips_startup_preload(tmp_path):
    first = _manage(tmp_path, "next_telling_id")
    second = _manage(tmp_path, "next_telling_id")

    assert first.stdout.strip() == "1"
    assert second.stdout.strip() == "2"
    assert "Starting background preload" not in first.stderr
