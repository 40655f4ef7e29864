"""Authentication endpoints and the client-side session around them."""
from __future__ import annotations

from typing import Any

from airesume.api.client import ApiClient
from airesume.errors import ApiError
from airesume.log import get_logger
from airesume.models import User
from airesume.stores import AuthStore

log = get_logger(__name__)


class AuthService:
    def __init__(self, api: ApiClient, auth_store: AuthStore) -> None:
        self.api = api
        self.auth_store = auth_store

    def login(self, email: str, password: str) -> User:
        data = self.api.post("/api/auth/login", json={"email": email, "password": password})
        user = data.get("user") or {}
        self.auth_store.login(user, data["access_token"])
        return User.from_dict(user)

    def register(self, user_data: dict[str, Any]) -> User:
        """Creates the account only; the caller still has to log in."""
        return User.from_dict(self.api.post("/api/auth/register", json=user_data))

    def logout(self) -> None:
        # There is no server-side logout endpoint.
        self.auth_store.logout()

    def get_profile(self) -> User:
        return User.from_dict(self.api.get("/api/auth/me"))

    def update_profile(self, changes: dict[str, Any]) -> User:
        data = self.api.put("/api/auth/me", json=changes)
        self.auth_store.update_user(data)
        return User.from_dict(data)

    def change_password(self, current_password: str, new_password: str) -> Any:
        return self.api.request(
            "POST",
            "/api/auth/change-password",
            data={"current_password": current_password, "new_password": new_password},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def deactivate_account(self) -> None:
        self.api.delete("/api/auth/deactivate")
        self.auth_store.logout()

    def verify_token(self) -> User:
        """Refresh the stored user; an invalid token ends the session."""
        try:
            data = self.api.post("/api/auth/verify-token")
        except ApiError:
            log.warning("Token verification failed, signing out")
            self.auth_store.logout()
            raise
        user = data.get("user") or {}
        self.auth_store.update_user(user)
        return User.from_dict(user)
