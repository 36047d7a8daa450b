"""Background preloading of startup data.

``PreloadSupervisor.start()`` returns immediately. Work is spread over two
thread pools: an I/O pool for the storage probe and independent loads, and a
CPU pool for index construction. Every task runs inside its own exception
boundary; a failure is logged and recorded, never raised to the caller and
never allowed to stop a sibling.
"""
from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, List, Optional, Set

from vt5.preloadable import Preloadable
from vt5.storage_root import StorageRoot

from .registry import (
    STATE_FAILED,
    STATE_SUCCEEDED,
    STATE_UNAVAILABLE,
    PreloadRegistry,
)


class Phase(str, Enum):
    IO_PROBE = "io_probe"
    CPU_BUILD = "cpu_build"
    IO_LOAD = "io_load"


@dataclass(frozen=True)
class PreloadTask:
    name: str
    phase: Phase
    operation: Callable[[], object]

    @classmethod
    def ensure_loaded(cls, collaborator: Preloadable, root: StorageRoot, phase: Phase = Phase.CPU_BUILD) -> "PreloadTask":
        return cls(collaborator.name, phase, partial(collaborator.ensure_loaded, root))


class PreloadSupervisor:
    def __init__(
        self,
        root: StorageRoot,
        *,
        registry: Optional[PreloadRegistry] = None,
        io_workers: int = 4,
        cpu_workers: Optional[int] = None,
        probe: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.root = root
        self.registry = registry or PreloadRegistry()
        self._probe = probe or root.probe_root_exists
        self._io_pool = ThreadPoolExecutor(max_workers=io_workers, thread_name_prefix="vt5-preload-io")
        self._cpu_pool = ThreadPoolExecutor(
            max_workers=cpu_workers or os.cpu_count() or 2,
            thread_name_prefix="vt5-preload-cpu",
        )
        self._tasks: List[PreloadTask] = []
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._started = False
        self._log = logging.getLogger(self.__class__.__name__)

    # -- Configuration ------------------------------------------------------
    def register(self, task: PreloadTask) -> None:
        if task.phase is Phase.IO_PROBE:
            raise ValueError("the storage probe is built in; register CPU_BUILD or IO_LOAD tasks")
        with self._lock:
            if self._started:
                raise RuntimeError("cannot register preload tasks after start()")
            if any(existing.name == task.name for existing in self._tasks):
                raise ValueError(f"duplicate preload task: {task.name}")
            self._tasks.append(task)

    @property
    def started(self) -> bool:
        return self._started

    # -- Lifecycle ----------------------------------------------------------
    def start(self) -> None:
        """Fan out all registered tasks and return without waiting for any of them."""
        with self._lock:
            if self._started:
                self._log.debug("Preload already started")
                return
            self._started = True
            tasks = list(self._tasks)
        cpu_tasks = [task for task in tasks if task.phase is Phase.CPU_BUILD]
        io_tasks = [task for task in tasks if task.phase is Phase.IO_LOAD]
        self._log.info("Starting background preload (cpu=%d, io=%d)", len(cpu_tasks), len(io_tasks))
        self._submit(self._io_pool, self._run_index_group, cpu_tasks)
        for task in io_tasks:
            self._submit(self._io_pool, self._run_contained, task)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted unit finished; ``False`` on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = set(self._pending)
            if not pending:
                return True
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            wait(pending, timeout=remaining)

    def shutdown(self, wait: bool = False) -> None:
        self._io_pool.shutdown(wait=wait, cancel_futures=not wait)
        self._cpu_pool.shutdown(wait=wait, cancel_futures=not wait)

    # -- Internals ----------------------------------------------------------
    def _submit(self, pool: ThreadPoolExecutor, fn: Callable, *args) -> None:
        try:
            future = pool.submit(fn, *args)
        except RuntimeError as exc:
            self._log.warning("Preload work not scheduled: %s", exc)
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _run_index_group(self, cpu_tasks: List[PreloadTask]) -> None:
        try:
            present = bool(self._probe())
        except Exception as exc:  # noqa: BLE001 - a failed probe counts as "absent"
            self._log.warning("Storage root probe failed: %s", exc, exc_info=exc)
            present = False
        self._log.debug("Storage root %s present=%s", self.root, present)
        self.registry.record_root_probe(present)
        if not present:
            self._log.info("VT5 root not present during preload; index preloads attempted best-effort")
        for task in cpu_tasks:
            self._submit(self._cpu_pool, self._run_contained, task)

    def _run_contained(self, task: PreloadTask) -> None:
        self.registry.record_started(task.name)
        try:
            result = task.operation()
        except Exception as exc:  # noqa: BLE001 - preload failures are contained per task
            self._log.warning("%s failed (background): %s", task.name, exc, exc_info=exc)
            self.registry.record_finished(task.name, STATE_FAILED, error=f"{type(exc).__name__}: {exc}")
            return
        if result is False:
            self._log.info("%s: data not available yet", task.name)
            self.registry.record_finished(task.name, STATE_UNAVAILABLE)
            return
        self._log.info("%s: background preload complete", task.name)
        self.registry.record_finished(task.name, STATE_SUCCEEDED)


__all__ = ["Phase", "PreloadSupervisor", "PreloadTask"]
