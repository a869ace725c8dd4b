"""Load search settings and environment configuration."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from applypilot.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "search.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
REPORTS_DIR: Path = ROOT_DIR / "reports"
STORE_PATH: Path = DATA_DIR / "applypilot.json"

DEFAULT_SOURCE_TIMEOUT = 8.0

# Credentials the USAJobs adapter needs; without all three it stays inert.
USAJOBS_ENV_KEYS: tuple[str, ...] = ("USAJOBS_HOST", "USAJOBS_USER_AGENT", "USAJOBS_AUTH_KEY")

DEFAULT_SETTINGS: dict[str, Any] = {
    "filters": {
        "locations": [],
        "keywords": [],
        "remote_only": False,
        "relocation": "any",
        "level": "",
        "min_relevance": 1,
        "us_only": True,
        "posted_within_days": 30,
    },
    "source_timeout": DEFAULT_SOURCE_TIMEOUT,
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def source_timeout(settings: dict[str, Any] | None = None) -> float:
    """Per-request adapter timeout in seconds.

    ``SOURCE_TIMEOUT_SECONDS`` wins over the settings file.
    """
    raw = get_env("SOURCE_TIMEOUT_SECONDS")
    if not raw and settings:
        raw = str(settings.get("source_timeout", ""))
    try:
        value = float(raw) if raw else DEFAULT_SOURCE_TIMEOUT
    except ValueError:
        log.warning("Ignoring invalid source timeout %r", raw)
        value = DEFAULT_SOURCE_TIMEOUT
    return value if value > 0 else DEFAULT_SOURCE_TIMEOUT


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Defaults overlaid with ``config/search.yaml`` when present."""
    path = path or SETTINGS_PATH
    settings: dict[str, Any] = {
        "filters": dict(DEFAULT_SETTINGS["filters"]),
        "source_timeout": DEFAULT_SETTINGS["source_timeout"],
    }
    if not path.exists():
        return settings

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping, got {type(data).__name__}")

    # Older files kept filter keys at the top level
    filters = data.get("filters")
    if filters is None:
        filters = {k: v for k, v in data.items() if k in settings["filters"]}
    settings["filters"].update(filters or {})
    if "source_timeout" in data:
        settings["source_timeout"] = data["source_timeout"]

    log.debug("Loaded search settings from %s", path)
    return settings


def ensure_dirs() -> None:
    for d in (DATA_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)
