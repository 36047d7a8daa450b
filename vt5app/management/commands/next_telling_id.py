from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand

from ...apps import build_app
from ...lifecycle import ensure_app


class Command(BaseCommand):
    help = "Issue and print the next count id"

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        self.stdout.write(ensure_app(build_app).next_telling_id())
