"""Run the startup preload in the foreground and print what happened."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from ...apps import build_app
from ...lifecycle import ensure_app


class Command(BaseCommand):
    help = "Preload server data and alias indexes, then print the outcome per task"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--timeout", type=float, default=120.0, help="Seconds to wait for the preload")
        parser.add_argument("--create-folders", action="store_true", help="Create the VT5 folder tree first")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        timeout = options["timeout"]
        app = ensure_app(build_app)
        if options.get("create_folders"):
            if not app.storage_root.ensure_folders():
                raise CommandError("VT5_DOCUMENTS_DIR is not configured")
            # the startup hook may already have probed the tree before it existed
            if app.created:
                app.rerun_preload(timeout=timeout)
        app.on_create()
        if not app.supervisor.wait_idle(timeout=timeout):
            raise CommandError(f"Preload did not finish within {timeout}s")
        self.stdout.write(json.dumps(app.registry.snapshot(), sort_keys=True))
