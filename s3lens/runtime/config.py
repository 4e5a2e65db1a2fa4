"""Persistent JSON config.

Holds preview limits, the status timeout, download destinations, key
bindings, and the highlight style. Loading never fails: a missing file gives
defaults silently, a broken one gives defaults plus an error text for the
status bar, and individual bad fields fall back to their defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from ..input.bindings import KeyBindings

logger = logging.getLogger(__name__)

APP_NAME = "s3lens"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

MIN_PREVIEW_WIDTH_PERCENT = 20
MAX_PREVIEW_WIDTH_PERCENT = 80
DEFAULT_STYLE = "monokai"


@dataclass(frozen=True)
class DownloadDestination:
    """Named local directory offered in download mode."""

    name: str
    path: str


def _default_destinations() -> list[DownloadDestination]:
    return [
        DownloadDestination("Downloads", "~/Downloads"),
        DownloadDestination("Temp", "/tmp"),
    ]


@dataclass(frozen=True)
class AppConfig:
    preview_max_size: int = 102_400
    preview_width_percent: int = 50
    status_message_timeout_secs: float = 5.0
    max_concurrent_downloads: int = 4
    download_destinations: list[DownloadDestination] = field(default_factory=_default_destinations)
    key_bindings: KeyBindings = field(default_factory=KeyBindings)
    style: str = DEFAULT_STYLE


def clamp_preview_width(percent: int) -> int:
    return max(MIN_PREVIEW_WIDTH_PERCENT, min(MAX_PREVIEW_WIDTH_PERCENT, percent))


def _coerce_positive_int(value: object, default: int) -> int:
    """Accept positive ints only; booleans and other types fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _coerce_positive_number(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return float(value)


def _coerce_destinations(value: object) -> list[DownloadDestination]:
    """Keep well-formed ``{name, path}`` objects; a non-list falls back to defaults.

    An explicit empty list is honored so download mode can report that no
    destinations are configured.
    """
    if not isinstance(value, list):
        return _default_destinations()
    destinations: list[DownloadDestination] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        path = item.get("path")
        if isinstance(name, str) and isinstance(path, str) and path.strip():
            destinations.append(DownloadDestination(name.strip() or path, path.strip()))
    return destinations


def config_from_mapping(data: dict[str, object]) -> AppConfig:
    defaults = AppConfig()
    style = data.get("style")
    key_bindings = data.get("key_bindings")
    return AppConfig(
        preview_max_size=_coerce_positive_int(data.get("preview_max_size"), defaults.preview_max_size),
        preview_width_percent=clamp_preview_width(
            _coerce_positive_int(data.get("preview_width_percent"), defaults.preview_width_percent)
        ),
        status_message_timeout_secs=_coerce_positive_number(
            data.get("status_message_timeout_secs"), defaults.status_message_timeout_secs
        ),
        max_concurrent_downloads=_coerce_positive_int(
            data.get("max_concurrent_downloads"), defaults.max_concurrent_downloads
        ),
        download_destinations=(
            _coerce_destinations(data["download_destinations"])
            if "download_destinations" in data
            else defaults.download_destinations
        ),
        key_bindings=(
            KeyBindings.from_mapping(key_bindings) if isinstance(key_bindings, dict) else defaults.key_bindings
        ),
        style=style.strip() if isinstance(style, str) and style.strip() else defaults.style,
    )


def load_config_data() -> tuple[dict[str, object], str | None]:
    """Read the raw JSON object, returning ``({}, error)`` when it is unusable."""
    if not CONFIG_PATH.exists():
        return {}, None
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("cannot read config %s: %s", CONFIG_PATH, exc)
        return {}, f"cannot read {CONFIG_PATH}: {exc}"
    except json.JSONDecodeError as exc:
        logger.warning("malformed config %s: %s", CONFIG_PATH, exc)
        return {}, f"{CONFIG_PATH}: {exc}"
    if not isinstance(data, dict):
        return {}, f"{CONFIG_PATH}: top level must be a JSON object"
    return data, None


def load_config() -> tuple[AppConfig, str | None]:
    """Load the app config; the second item is an error text when defaults were forced."""
    data, error = load_config_data()
    return config_from_mapping(data), error


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never takes the session down.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("cannot write config %s: %s", CONFIG_PATH, exc)


def default_config_data() -> dict[str, object]:
    """Starter config with every scalar default spelled out."""
    defaults = AppConfig()
    return {
        "preview_max_size": defaults.preview_max_size,
        "preview_width_percent": defaults.preview_width_percent,
        "status_message_timeout_secs": defaults.status_message_timeout_secs,
        "max_concurrent_downloads": defaults.max_concurrent_downloads,
        "download_destinations": [
            {"name": destination.name, "path": destination.path} for destination in defaults.download_destinations
        ],
        "style": defaults.style,
        "key_bindings": {},
    }
