"""Django settings for the VT5 host process."""
from __future__ import annotations

import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def env_flag(name: str, default: str = "0") -> bool:
    return env(name, default).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = env_flag("DJANGO_DEBUG")

INSTALLED_APPS = [
    "vt5app.apps.VT5AppConfig",
]

# Preferences live in their own sqlite file (VT5_PREFS_URL); no ORM models.
DATABASES: dict = {}

LANGUAGE_CODE = "nl-nl"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

VT5_DOCUMENTS_DIR = env("VT5_DOCUMENTS_DIR", str(Path.home() / "Documents"))
VT5_PREFS_URL = env("VT5_PREFS_URL", f"sqlite:///{BASE_DIR / 'vt5_prefs.db'}")
VT5_LOCATION_DIR = env("VT5_LOCATION_DIR", "")
VT5_PRELOAD_ON_STARTUP = env_flag("VT5_PRELOAD_ON_STARTUP", "1")
VT5_PRELOAD_WEATHER = env_flag("VT5_PRELOAD_WEATHER", "0")
# Management commands that run without the startup preload.
VT5_PRELOAD_SKIP_COMMANDS = tuple(
    name.strip() for name in env("VT5_PRELOAD_SKIP_COMMANDS", "next_telling_id,weather_fetch").split(",") if name.strip()
)
VT5_IO_WORKERS = int(env("VT5_IO_WORKERS", "4"))
VT5_CPU_WORKERS = int(env("VT5_CPU_WORKERS", "0")) or None

WEATHER_BASE_URL = env("WEATHER_BASE_URL", "https://api.open-meteo.com/v1/forecast")
WEATHER_CONNECT_TIMEOUT = float(env("WEATHER_CONNECT_TIMEOUT", "15"))
WEATHER_READ_TIMEOUT = float(env("WEATHER_READ_TIMEOUT", "30"))

LOG_LEVEL = env("VT5_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {
            "format": "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}
