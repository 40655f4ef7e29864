"""Client error taxonomy and helpers that turn errors into user-facing text."""
from __future__ import annotations

from typing import Any


class ClientValidationError(ValueError):
    """Local validation failure. Never reaches the network."""


class ApiError(Exception):
    """A failed request against the remote API.

    ``status_code`` is None when no HTTP response arrived at all.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
        url: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


_STATUS_ERRORS: dict[int, type[ApiError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}


def error_for_status(status_code: int) -> type[ApiError]:
    return _STATUS_ERRORS.get(status_code, ApiError)


def status_of(exc: BaseException) -> int | None:
    return getattr(exc, "status_code", None)


def _format_loc(loc: Any) -> str:
    if isinstance(loc, (list, tuple)):
        return ".".join(str(part) for part in loc)
    return "" if loc is None else str(loc)


def flatten_validation_detail(detail: list) -> str:
    """``[{"loc": ["body", "title"], "msg": "..."}]`` -> ``"body.title: ..."``."""
    parts = []
    for item in detail:
        if isinstance(item, dict):
            parts.append(f"{_format_loc(item.get('loc'))}: {item.get('msg', '')}")
        else:
            parts.append(str(item))
    return ", ".join(parts)


def describe_error(exc: BaseException, fallback: str) -> str:
    """Best human-readable message for ``exc``.

    API errors are described from the server's body when it has a known
    shape and fall back to ``fallback`` otherwise; local errors use their
    own text.
    """
    if not isinstance(exc, ApiError):
        return str(exc) or fallback
    body = exc.body
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, list) and detail:
            return f"Validation error: {flatten_validation_detail(detail)}"
        if isinstance(detail, str) and detail:
            return detail
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return fallback


def role_restricted_message(exc: BaseException, restricted: str, fallback: str) -> str:
    """403s mean the feature is not offered to this role, not that it broke."""
    if status_of(exc) == 403:
        return restricted
    return fallback
