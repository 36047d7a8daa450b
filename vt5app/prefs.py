"""Durable application preferences backed by sqlite."""
from __future__ import annotations

import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional
from urllib.parse import unquote, urlparse


class PreferenceStoreError(RuntimeError):
    """Raised when the preference database cannot be read or written."""


class DatabaseSession:
    """Minimal DB-API session wrapper."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection

    def execute(self, sql: str, params: tuple = ()):
        return self.connection.execute(sql, params)

    def fetchone(self, sql: str, params: tuple = ()):
        cursor = self.execute(sql, params)
        row = cursor.fetchone()
        cursor.close()
        return row

    def commit(self) -> None:
        if self.connection.in_transaction:
            self.connection.execute("COMMIT")

    def rollback(self) -> None:
        if self.connection.in_transaction:
            self.connection.execute("ROLLBACK")

    def close(self) -> None:
        self.connection.close()


def default_prefs_url() -> str:
    return os.getenv("VT5_PREFS_URL", "sqlite:///./vt5_prefs.db")


def sqlite_path(url: str) -> str:
    """``sqlite:///relative.db`` or ``sqlite:////absolute.db``; a bare path is used as is."""
    parsed = urlparse(url)
    if not parsed.scheme:
        path = url
    elif not parsed.scheme.startswith("sqlite"):
        raise ValueError(f"Unsupported preference store scheme: {parsed.scheme}")
    else:
        path = unquote(parsed.path)
        if path.startswith("/"):
            path = path[1:]
        path = path or ":memory:"
    if path == ":memory:":
        return path
    return os.path.abspath(path)


class PreferenceStore:
    """Key/value preferences, one row per key.

    Every session opens its own connection; writes that must be atomic run in
    a ``BEGIN IMMEDIATE`` transaction so they also exclude other processes.
    """

    def __init__(self, url: Optional[str] = None, timeout: float = 10.0) -> None:
        self.url = url or default_prefs_url()
        self.path = sqlite_path(self.url)
        self.timeout = timeout
        self._schema_lock = threading.Lock()
        self._schema_ready = False

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self.path,
            timeout=self.timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        return connection

    @contextmanager
    def session_scope(self, immediate: bool = False) -> Iterator[DatabaseSession]:
        try:
            self._ensure_schema()
            session = DatabaseSession(self._connect())
        except sqlite3.Error as exc:
            raise PreferenceStoreError(f"preference store unavailable: {self.path}") from exc
        try:
            session.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield session
            session.commit()
        except sqlite3.Error as exc:
            session.rollback()
            raise PreferenceStoreError(f"preference store error: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            connection = self._connect()
            try:
                connection.execute(
                    """
                    CREATE TABLE IF NOT EXISTS preferences (
                        key VARCHAR(128) PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
            finally:
                connection.close()
            self._schema_ready = True

    # -- Accessors ----------------------------------------------------------
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self.session_scope() as session:
            row = session.fetchone("SELECT value FROM preferences WHERE key = ?", (key,))
        return row["value"] if row is not None else default

    def put(self, key: str, value: str) -> None:
        with self.session_scope(immediate=True) as session:
            session.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, str(value)),
            )

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        return int(value) if value is not None else default

    def get_and_increment(self, key: str, default: int) -> int:
        with self.session_scope(immediate=True) as session:
            row = session.fetchone("SELECT value FROM preferences WHERE key = ?", (key,))
            current = int(row["value"]) if row is not None else default
            session.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, str(current + 1)),
            )
        return current


__all__ = ["DatabaseSession", "PreferenceStore", "PreferenceStoreError", "default_prefs_url"]
