"""Logging for the client: console plus a dated file, stdlib only."""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# Streamlit reruns the script on every interaction; connection-pool and
# file-watcher chatter would drown the client's own records.
QUIET_LOGGERS = ("urllib3", "watchdog", "streamlit.watcher")

_state = {"configured": False}


def default_log_dir() -> Path:
    override = os.environ.get("AIRESUME_LOG_DIR", "").strip()
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "logs"


def _level(name: str | None) -> int:
    value = logging.getLevelName((name or os.environ.get("LOG_LEVEL", "INFO")).upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str | None = None, log_dir: Path | None = None) -> None:
    """Attach console and file handlers to the root logger.

    Handlers are only added when the root logger has none, so a host that
    already configured logging (pytest, streamlit) keeps its own.
    """
    numeric = _level(level)
    root = logging.getLogger()
    root.setLevel(numeric)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))
    _state["configured"] = True

    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(numeric)
    console.setFormatter(formatter)
    root.addHandler(console)

    target = log_dir or default_log_dir()
    try:
        target.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            target / f"airesume_{date.today():%Y-%m-%d}.log", encoding="utf-8"
        )
    except OSError:
        # Read-only checkout: console only.
        return
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    if not _state["configured"]:
        configure_logging()
    return logging.getLogger(name)
