"""Persisted key-value storage for client state: files, memory or browser cookies."""
from __future__ import annotations

import fcntl
import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Mapping, Union

from airesume.log import get_logger

log = get_logger(__name__)

AUTH_STORAGE_KEY = "auth-storage"
THEME_STORAGE_KEY = "theme-storage"
STORAGE_VERSION = 0


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


def _encode(state: dict[str, Any]) -> str:
    return json.dumps({"state": state, "version": STORAGE_VERSION})


def _decode(raw: str | Mapping | None, key: str) -> dict[str, Any] | None:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        envelope = raw
    else:
        try:
            envelope = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            log.warning("Error parsing stored %s: %s", key, exc)
            return None
    state = envelope.get("state") if isinstance(envelope, Mapping) else None
    return dict(state) if isinstance(state, Mapping) else None


def _check_key(key: str) -> str:
    if not key or "/" in key or key.startswith("."):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class KeyValueStorage:
    """Stores each value as ``{"state": ..., "version": 0}`` under ``<dir>/<key>.json``.

    Shared by everything that points at the same directory, so only a
    single-user context should use it.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.json"

    def contains(self, key: str) -> bool:
        return self._path(key).exists()

    def get(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            text = f.read()
            _unlock(f)
        return _decode(text, key)

    def set(self, key: str, state: dict[str, Any]) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            _lock(f)
            f.write(_encode(state))
            _unlock(f)
        log.debug("Stored %s", key)

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
            log.debug("Removed %s", key)


class MemoryStorage:
    """Envelopes kept in a dict owned by one context."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def contains(self, key: str) -> bool:
        return _check_key(key) in self._values

    def get(self, key: str) -> dict[str, Any] | None:
        return _decode(self._values.get(_check_key(key)), key)

    def set(self, key: str, state: dict[str, Any]) -> None:
        self._values[_check_key(key)] = _encode(state)

    def remove(self, key: str) -> None:
        self._values.pop(_check_key(key), None)


class CookieStorage:
    """Envelopes kept in the visitor's browser cookies.

    ``manager`` is an ``extra_streamlit_components.CookieManager``. Streamlit
    renders a fresh one on every script run, so the app calls :meth:`bind`
    each run. Writes made before the first bind are kept in memory and
    flushed then.
    """

    def __init__(self, manager=None, *, max_age: timedelta = timedelta(days=30)) -> None:
        self.manager = manager
        self.max_age = max_age
        self._pending: dict[str, str | None] = {}
        self._writes = 0

    @property
    def loaded(self) -> bool:
        """True once the browser has reported its cookies."""
        return bool(getattr(self.manager, "cookies", None))

    def bind(self, manager) -> None:
        self.manager = manager
        # Component keys only need to be unique within one run.
        self._writes = 0
        pending, self._pending = self._pending, {}
        for key, value in pending.items():
            if value is None:
                self.remove(key)
            else:
                self._write(key, value)

    def _component_key(self, action: str, key: str) -> str:
        self._writes += 1
        return f"{action}-{key}-{self._writes}"

    def _write(self, key: str, value: str) -> None:
        if self.manager is None:
            self._pending[key] = value
            return
        self.manager.set(
            key,
            value,
            expires_at=datetime.now() + self.max_age,
            key=self._component_key("set", key),
        )
        log.debug("Stored %s in browser cookie", key)

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> dict[str, Any] | None:
        _check_key(key)
        if key in self._pending:
            return _decode(self._pending[key], key)
        if self.manager is None:
            return None
        return _decode(self.manager.get(cookie=key), key)

    def set(self, key: str, state: dict[str, Any]) -> None:
        self._write(_check_key(key), _encode(state))

    def remove(self, key: str) -> None:
        _check_key(key)
        if self.manager is None:
            self._pending[key] = None
            return
        if self.manager.get(cookie=key) is not None:
            self.manager.delete(key, key=self._component_key("delete", key))
            log.debug("Removed %s browser cookie", key)


Storage = Union[KeyValueStorage, MemoryStorage, CookieStorage]
