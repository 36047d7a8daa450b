"""Fetch and normalise the current weather with the same stack as the app."""
from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from vt5.entities import Location
from vt5.normalize import build_form_values

from ...apps import build_app
from ...lifecycle import ensure_app


class Command(BaseCommand):
    help = "Fetch current weather for the given coordinates or the last known location"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--lat", type=float, help="Latitude")
        parser.add_argument("--lon", type=float, help="Longitude")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        latitude = options.get("lat")
        longitude = options.get("lon")
        if (latitude is None) != (longitude is None):
            raise CommandError("--lat and --lon must be given together")

        app = ensure_app(build_app)
        service = app.weather
        if latitude is None:
            snapshot = service.current_snapshot()
        else:
            snapshot = service.snapshot_at(Location(latitude=latitude, longitude=longitude, timestamp=0))
        if snapshot is None:
            raise CommandError("Weather unavailable (no location or no usable response)")

        codes = app.server_data.snapshot_or_empty(app.storage_root).codes_by_category
        payload = {
            "latitude": snapshot.location.latitude,
            "longitude": snapshot.location.longitude,
            "time": snapshot.current.time,
            "normalized": asdict(snapshot.normalized),
            "form": asdict(build_form_values(snapshot.current, codes)),
        }
        self.stdout.write(json.dumps(payload))
