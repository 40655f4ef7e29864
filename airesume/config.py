"""Load environment and optional YAML settings for the client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from airesume.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DEFAULT_STORAGE_DIR: Path = ROOT_DIR / "data" / "storage"

DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CACHE_TIME = 5 * 60.0

APP_NAME = "AI Resume"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Smart Recruitment Platform"


@dataclass(frozen=True)
class QueryPolicy:
    stale_time: float = 0.0
    cache_time: float = DEFAULT_CACHE_TIME


# Seconds. Recommendations change slowly; searches are re-run on demand.
DEFAULT_QUERY_POLICIES: dict[str, QueryPolicy] = {
    "job-recommendations": QueryPolicy(stale_time=5 * 60.0),
    "job-search": QueryPolicy(stale_time=2 * 60.0),
    "candidate-search": QueryPolicy(stale_time=2 * 60.0),
    "skills-analysis": QueryPolicy(stale_time=5 * 60.0),
}


@dataclass
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_TIMEOUT
    storage_dir: Path = DEFAULT_STORAGE_DIR
    query_policies: dict[str, QueryPolicy] = field(
        default_factory=lambda: dict(DEFAULT_QUERY_POLICIES)
    )

    def policy(self, query_name: str) -> QueryPolicy:
        return self.query_policies.get(query_name, QueryPolicy())


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Defaults, then ``settings.yaml``, then environment variables."""
    data = _read_yaml(path or SETTINGS_PATH)

    policies = dict(DEFAULT_QUERY_POLICIES)
    for name, raw in (data.get("queries") or {}).items():
        base = policies.get(name, QueryPolicy())
        raw = raw or {}
        policies[name] = QueryPolicy(
            stale_time=float(raw.get("stale_time", base.stale_time)),
            cache_time=float(raw.get("cache_time", base.cache_time)),
        )

    base_url = (
        get_env("VITE_API_BASE_URL")
        or str(data.get("api_base_url") or "")
        or DEFAULT_API_BASE_URL
    )
    storage_dir = get_env("AIRESUME_STORAGE_DIR") or data.get("storage_dir")

    settings = Settings(
        api_base_url=base_url.rstrip("/"),
        request_timeout=float(data.get("request_timeout", DEFAULT_TIMEOUT)),
        storage_dir=Path(storage_dir) if storage_dir else DEFAULT_STORAGE_DIR,
        query_policies=policies,
    )
    log.debug("Loaded settings: api=%s storage=%s", settings.api_base_url, settings.storage_dir)
    return settings
