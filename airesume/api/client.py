"""HTTP client for the recruitment API: bearer auth, error mapping, uploads."""
from __future__ import annotations

import io
from typing import Any, Callable, Mapping

import requests
from urllib3 import encode_multipart_formdata

from airesume.errors import ApiError, error_for_status
from airesume.log import get_logger
from airesume.stores import AuthStore

log = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


def clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Drop unset query parameters; booleans go out as ``true``/``false``."""
    if not params:
        return None
    cleaned: dict[str, Any] = {}
    for k, v in params.items():
        if v is None:
            continue
        cleaned[k] = ("true" if v else "false") if isinstance(v, bool) else v
    return cleaned


def _decode(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


class _ProgressReader:
    """File-like multipart body that reports how much has been read."""

    def __init__(self, payload: bytes, on_progress: ProgressCallback | None) -> None:
        self._buf = io.BytesIO(payload)
        self._total = len(payload)
        self._sent = 0
        self._on_progress = on_progress

    def __len__(self) -> int:
        return self._total

    def read(self, size: int = -1) -> bytes:
        chunk = self._buf.read(size)
        if chunk:
            self._sent += len(chunk)
            if self._on_progress is not None:
                self._on_progress(self._sent, self._total)
        return chunk


class ApiClient:
    def __init__(
        self,
        base_url: str,
        auth_store: AuthStore,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_store = auth_store
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.auth_store.token:
            headers["Authorization"] = f"Bearer {self.auth_store.token}"
        if extra:
            headers.update(extra)
        return headers

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                params=clean_params(params),
                json=json,
                data=data,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.warning("%s %s transport error: %s", method, path, exc)
            raise ApiError(f"{method} {path} failed: {exc}", url=url) from exc

        if not resp.ok:
            if resp.status_code == 401 and self.auth_store.token:
                log.warning("%s %s returned 401, clearing stored session", method, path)
                self.auth_store.logout()
            error_cls = error_for_status(resp.status_code)
            raise error_cls(
                f"{method} {path} failed with status {resp.status_code}",
                status_code=resp.status_code,
                body=_decode(resp),
                url=url,
            )
        log.debug("%s %s -> %d", method, path, resp.status_code)
        return resp

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        return _decode(self._send(method, path, **kwargs))

    def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
    ) -> Any:
        return self.request("POST", path, json=json, params=params, data=data)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def download(self, path: str) -> bytes:
        return self._send("GET", path).content

    def upload(
        self,
        path: str,
        file_name: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        on_progress: ProgressCallback | None = None,
    ) -> Any:
        """POST ``content`` as the multipart field ``file``."""
        body, multipart_type = encode_multipart_formdata(
            {"file": (file_name, content, content_type)}
        )
        log.info("Uploading %s (%d bytes) to %s", file_name, len(content), path)
        return self.request(
            "POST",
            path,
            data=_ProgressReader(body, on_progress),
            headers={"Content-Type": multipart_type},
        )
