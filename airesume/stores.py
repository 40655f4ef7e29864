"""Persisted client state: the auth session and the theme preference."""
from __future__ import annotations

from typing import Any, Callable

from airesume.log import get_logger
from airesume.models import User
from airesume.storage import AUTH_STORAGE_KEY, THEME_STORAGE_KEY, Storage

log = get_logger(__name__)


class AuthStore:
    """Bearer token and signed-in user, persisted under ``auth-storage``."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self.token: str | None = None
        self.user: dict[str, Any] | None = None
        self.is_authenticated = False
        self.reload()

    def reload(self) -> None:
        state = self._storage.get(AUTH_STORAGE_KEY) or {}
        self.token = state.get("token") or None
        self.user = state.get("user") or None
        self.is_authenticated = bool(state.get("isAuthenticated") and self.token)

    def _persist(self) -> None:
        self._storage.set(
            AUTH_STORAGE_KEY,
            {"user": self.user, "token": self.token, "isAuthenticated": self.is_authenticated},
        )

    @property
    def current_user(self) -> User | None:
        return User.from_dict(self.user) if self.user else None

    @property
    def user_type(self) -> str | None:
        return (self.user or {}).get("user_type")

    def login(self, user: dict[str, Any], token: str) -> None:
        self.user = user
        self.token = token
        self.is_authenticated = True
        self._persist()
        log.info("Signed in as %s (%s)", user.get("email", "?"), user.get("user_type", "?"))

    def update_user(self, user: dict[str, Any]) -> None:
        self.user = {**(self.user or {}), **user}
        self._persist()

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.is_authenticated = False
        self._storage.remove(AUTH_STORAGE_KEY)
        log.info("Signed out")


class ThemeStore:
    """Dark-mode flag, persisted under ``theme-storage``."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        state = storage.get(THEME_STORAGE_KEY) or {}
        self.is_dark_mode = bool(state.get("isDarkMode", False))

    def set_theme(self, is_dark: bool) -> None:
        self.is_dark_mode = bool(is_dark)
        self._storage.set(THEME_STORAGE_KEY, {"isDarkMode": self.is_dark_mode})

    def toggle(self) -> bool:
        self.set_theme(not self.is_dark_mode)
        return self.is_dark_mode

    def initialize(self, prefers_dark: Callable[[], bool]) -> bool:
        """Apply the stored preference, or the OS one when nothing is stored."""
        state = self._storage.get(THEME_STORAGE_KEY)
        if state is not None:
            self.is_dark_mode = bool(state.get("isDarkMode", False))
        elif prefers_dark():
            self.set_theme(True)
        return self.is_dark_mode
