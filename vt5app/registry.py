"""In-memory record of preload outcomes.

The supervisor never reports results to the code that triggered it; this
registry is where the outcome of each background task can be inspected
afterwards (``manage.py preload`` prints it).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional


STATE_RUNNING = "running"
STATE_SUCCEEDED = "succeeded"
STATE_UNAVAILABLE = "unavailable"
STATE_FAILED = "failed"


@dataclass(frozen=True)
class TaskOutcome:
    state: str
    started_at: str
    finished_at: Optional[str] = None
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


class PreloadRegistry:
    def __init__(self) -> None:
        self._tasks: Dict[str, TaskOutcome] = {}
        self._root_present: Optional[bool] = None
        self._lock = Lock()

    def record_started(self, task: str, when: Optional[datetime] = None) -> None:
        if not task:
            raise ValueError("task must be provided")
        with self._lock:
            self._tasks[task] = TaskOutcome(state=STATE_RUNNING, started_at=self._format_datetime(when))

    def record_finished(
        self,
        task: str,
        state: str,
        error: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> None:
        if state not in (STATE_SUCCEEDED, STATE_UNAVAILABLE, STATE_FAILED):
            raise ValueError(f"unknown state: {state}")
        finished = self._format_datetime(when)
        with self._lock:
            previous = self._tasks.get(task)
            started = previous.started_at if previous else finished
            self._tasks[task] = TaskOutcome(state=state, started_at=started, finished_at=finished, error=error)

    def record_root_probe(self, present: bool) -> None:
        with self._lock:
            self._root_present = bool(present)

    def outcome(self, task: str) -> Optional[TaskOutcome]:
        with self._lock:
            return self._tasks.get(task)

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            tasks = {name: outcome.as_dict() for name, outcome in self._tasks.items()}
            root_present = self._root_present
        return {"root_present": root_present, "tasks": tasks}

    @staticmethod
    def _format_datetime(value: Optional[datetime]) -> str:
        value = value or datetime.now(timezone.utc)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()


__all__ = [
    "PreloadRegistry",
    "STATE_FAILED",
    "STATE_RUNNING",
    "STATE_SUCCEEDED",
    "STATE_UNAVAILABLE",
    "TaskOutcome",
]
