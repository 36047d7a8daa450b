from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from django.apps import AppConfig
from django.conf import settings


logger = logging.getLogger(__name__)

_COMMAND_ENTRY_POINTS = ("manage.py", "django-admin", "django-admin.py", "__main__.py")


def build_app():
    from .lifecycle import LifecycleConfig, VT5App

    return VT5App(LifecycleConfig.from_settings(settings))


def running_command(argv: Optional[list] = None) -> Optional[str]:
    """Name of the management command this process runs, if any."""
    argv = sys.argv if argv is None else argv
    if len(argv) > 1 and os.path.basename(argv[0]) in _COMMAND_ENTRY_POINTS:
        return argv[1]
    return None


class VT5AppConfig(AppConfig):
    name = "vt5app"
    verbose_name = "VT5"

    def ready(self) -> None:
        if not settings.VT5_PRELOAD_ON_STARTUP:
            logger.debug("Startup preload disabled (VT5_PRELOAD_ON_STARTUP)")
            return
        command = running_command()
        if command in settings.VT5_PRELOAD_SKIP_COMMANDS:
            logger.debug("Startup preload skipped for command %s", command)
            return
        from .lifecycle import ensure_app

        ensure_app(build_app).on_create()
