"""Process-wide application object.

``VT5App`` owns the shared resources (JSON codec, HTTP session, preload
supervisor, preference store) and exposes them through a write-once global
accessor once :meth:`VT5App.on_create` ran.
"""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from vt5.aliases import AliasManager, AliasMatcher
from vt5.codec import JsonCodec
from vt5.entities import TellingId
from vt5.ids import TellingIdGenerator
from vt5.location import default_providers
from vt5.providers import OpenMeteoProvider, RequestConfig
from vt5.serverdata import ServerDataCache
from vt5.services import WeatherService
from vt5.storage_root import StorageRoot

from .prefs import PreferenceStore
from .preload import Phase, PreloadSupervisor, PreloadTask
from .registry import PreloadRegistry


logger = logging.getLogger(__name__)


@dataclass
class LifecycleConfig:
    documents_dir: Optional[str] = os.getenv("VT5_DOCUMENTS_DIR")
    prefs_url: str = os.getenv("VT5_PREFS_URL", "sqlite:///./vt5_prefs.db")
    location_dir: Optional[str] = os.getenv("VT5_LOCATION_DIR")
    preload_weather: bool = os.getenv("VT5_PRELOAD_WEATHER", "0") == "1"
    weather_base_url: Optional[str] = os.getenv("WEATHER_BASE_URL")
    connect_timeout: float = 15.0
    read_timeout: float = 30.0
    io_workers: int = 4
    cpu_workers: Optional[int] = None

    @classmethod
    def from_settings(cls, settings) -> "LifecycleConfig":
        return cls(
            documents_dir=settings.VT5_DOCUMENTS_DIR or None,
            prefs_url=settings.VT5_PREFS_URL,
            location_dir=settings.VT5_LOCATION_DIR or None,
            preload_weather=settings.VT5_PRELOAD_WEATHER,
            weather_base_url=settings.WEATHER_BASE_URL or None,
            connect_timeout=settings.WEATHER_CONNECT_TIMEOUT,
            read_timeout=settings.WEATHER_READ_TIMEOUT,
            io_workers=settings.VT5_IO_WORKERS,
            cpu_workers=settings.VT5_CPU_WORKERS,
        )


class VT5App:
    def __init__(
        self,
        config: Optional[LifecycleConfig] = None,
        *,
        prefs: Optional[PreferenceStore] = None,
        registry: Optional[PreloadRegistry] = None,
    ) -> None:
        self.config = config or LifecycleConfig()
        self.storage_root = StorageRoot(self.config.documents_dir)
        self.prefs = prefs or PreferenceStore(self.config.prefs_url)
        self.registry = registry or PreloadRegistry()
        self.server_data = ServerDataCache()
        self.alias_matcher = AliasMatcher()
        self.alias_manager = AliasManager()
        self.request_config = RequestConfig(
            connect_timeout=self.config.connect_timeout,
            read_timeout=self.config.read_timeout,
        )
        self._ids = TellingIdGenerator(self.prefs)
        self._lock = threading.RLock()
        self._json: Optional[JsonCodec] = None
        self._http: Optional[requests.Session] = None
        self._supervisor: Optional[PreloadSupervisor] = None
        self._weather: Optional[WeatherService] = None
        self._created = False
        self._log = logging.getLogger(self.__class__.__name__)

    # -- Shared resources ---------------------------------------------------
    @property
    def json(self) -> JsonCodec:
        if self._json is None:
            with self._lock:
                if self._json is None:
                    self._json = JsonCodec()
        return self._json

    @property
    def http(self) -> requests.Session:
        if self._http is None:
            with self._lock:
                if self._http is None:
                    self._http = requests.Session()
        return self._http

    @property
    def supervisor(self) -> PreloadSupervisor:
        if self._supervisor is None:
            with self._lock:
                if self._supervisor is None:
                    self._supervisor = self._build_supervisor()
        return self._supervisor

    @property
    def weather(self) -> WeatherService:
        if self._weather is None:
            with self._lock:
                if self._weather is None:
                    provider = OpenMeteoProvider(
                        base_url=self.config.weather_base_url,
                        codec=self.json,
                        session=self.http,
                        request_config=self.request_config,
                    )
                    location_dir = self.config.location_dir
                    self._weather = WeatherService(
                        location_providers=default_providers(location_dir) if location_dir else [],
                        provider=provider,
                    )
        return self._weather

    # -- Lifecycle ----------------------------------------------------------
    @property
    def created(self) -> bool:
        return self._created

    def on_create(self) -> None:
        with self._lock:
            if self._created:
                self._log.debug("on_create already ran")
                return
            install(self)
            self._created = True
        self._log.info("VT5 app created (root=%s)", self.storage_root.path)
        self.supervisor.start()

    def rerun_preload(self, timeout: Optional[float] = None) -> PreloadSupervisor:
        """Start a fresh preload once the previous run is idle, e.g. after the folder tree was created.

        Collaborators that already loaded keep their data; the rest retry.
        """
        with self._lock:
            previous = self._supervisor
            supervisor = self._build_supervisor()
        if previous is not None:
            previous.wait_idle(timeout=timeout)
            previous.shutdown(wait=False)
        with self._lock:
            self._supervisor = supervisor
        self._log.info("Re-running preload (root=%s)", self.storage_root.path)
        supervisor.start()
        return supervisor

    def on_terminate(self) -> None:
        """Release the pools and the HTTP session without waiting for running work."""
        with self._lock:
            supervisor, http = self._supervisor, self._http
        if supervisor is not None:
            supervisor.shutdown(wait=False)
        if http is not None:
            http.close()
        uninstall(self)
        self._log.info("VT5 app terminated")

    def next_telling_id(self) -> TellingId:
        return self._ids.next_id()

    # -- Internals ----------------------------------------------------------
    def _build_supervisor(self) -> PreloadSupervisor:
        root = self.storage_root
        supervisor = PreloadSupervisor(
            root,
            registry=self.registry,
            io_workers=self.config.io_workers,
            cpu_workers=self.config.cpu_workers,
        )
        supervisor.register(PreloadTask.ensure_loaded(self.alias_matcher, root))
        supervisor.register(PreloadTask.ensure_loaded(self.alias_manager, root))
        supervisor.register(PreloadTask.ensure_loaded(self.server_data, root, Phase.IO_LOAD))
        if self.config.preload_weather:
            supervisor.register(PreloadTask("WeatherService", Phase.IO_LOAD, lambda: self.weather.preload()))
        return supervisor


_instance: Optional[VT5App] = None
_instance_lock = threading.Lock()


def install(app: VT5App) -> None:
    global _instance
    with _instance_lock:
        if _instance is not None and _instance is not app:
            raise RuntimeError("another VT5App is already installed")
        _instance = app


def uninstall(app: VT5App) -> None:
    global _instance
    with _instance_lock:
        if _instance is app:
            _instance = None


def get_app() -> VT5App:
    app = _instance
    if app is None:
        raise RuntimeError("VT5App is not initialised; on_create() has not run")
    return app


def ensure_app(factory: Callable[[], VT5App]) -> VT5App:
    """Return the installed app, installing ``factory()`` when there is none."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = factory()
            logger.debug("Installed VT5 app from factory")
        return _instance


def next_telling_id() -> TellingId:
    return get_app().next_telling_id()


__all__ = [
    "LifecycleConfig",
    "VT5App",
    "ensure_app",
    "get_app",
    "install",
    "next_telling_id",
    "uninstall",
]
