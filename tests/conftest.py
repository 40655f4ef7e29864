"""Shared fixtures: a recording fake of ``requests.Session`` and an app context."""
from __future__ import annotations

import json
import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))
os.environ.setdefault("AIRESUME_LOG_DIR", tempfile.mkdtemp(prefix="airesume-logs-"))

import pytest
import requests

from airesume.config import Settings
from airesume.context import AppContext
from airesume.query import QueryCache

API_BASE = "http://api.test"


def make_response(status: int, body: Any = None, url: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.reason = "OK" if status < 400 else "Error"
    resp.encoding = "utf-8"
    if body is None:
        resp._content = b""
    elif isinstance(body, bytes):
        resp._content = body
    else:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    return resp


@dataclass
class Call:
    method: str
    path: str
    params: dict | None = None
    json: Any = None
    data: Any = None
    headers: dict = field(default_factory=dict)


class FakeSession:
    """Answers requests from registered routes and records every call.

    A route registered with several responses replays them in order and
    then keeps returning the last one. Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.closed = False
        self._routes: dict[tuple[str, str], list] = {}

    def add(self, method: str, path: str, *responses: Any) -> "FakeSession":
        self._routes[(method.upper(), path)] = list(responses) or [(200, None)]
        return self

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]

    def request(self, method, url, params=None, json=None, data=None, headers=None, timeout=None):
        path = urlsplit(url).path
        if hasattr(data, "read"):
            reader = data
            data = b"".join(iter(lambda: reader.read(1024), b""))
        self.calls.append(Call(method, path, params, json, data, dict(headers or {})))

        queue = self._routes.get((method, path))
        if not queue:
            return make_response(404, {"detail": "Not Found"}, url)
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, BaseException):
            raise answer
        status, body = answer
        return make_response(status, body, url)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(api_base_url=API_BASE, storage_dir=tmp_path / "storage")


@pytest.fixture
def ctx(settings, session):
    with AppContext(settings, session=session, queries=QueryCache(retry_delay=0)) as context:
        yield context


@pytest.fixture
def employer(ctx):
    ctx.auth.login(
        {"id": 1, "email": "hr@acme.test", "first_name": "Dana", "user_type": "employer"},
        "employer-token",
    )
    return ctx


@pytest.fixture
def employee(ctx):
    ctx.auth.login(
        {"id": 2, "email": "sam@example.test", "first_name": "Sam", "user_type": "employee"},
        "employee-token",
    )
    return ctx
