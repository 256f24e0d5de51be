"""
User preferences for TreeNotes.

Settings come from two places. Environment variables win; app.py may have
filled them from a .env file. Otherwise the value stored in config.json is
used, and a built-in default after that. Only the dark mode switch is written
back from the UI.

Known keys: dark_mode, export_filename, log_level, port.
"""

import json
import logging
import os
from typing import Optional

from treenotes.constants import EXPORT_FILENAME
from treenotes.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080

_TRUTHY = {"1", "true", "yes", "on"}


def load_config() -> dict:
    """
    Stored preferences as a dict.

    A missing file, broken JSON or a top level that is not an object all read
    as no preferences; the last two are logged.
    """
    path = get_config_path()
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: expected an object, got {type(data).__name__}")
        return {}
    return data


def save_config(config: dict) -> None:
    """Write preferences, creating the home directory when needed."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2, sort_keys=True), encoding='utf-8')
    logger.debug(f"Saved preferences to {path}")


def get_dark_mode() -> bool:
    """TREENOTES_DARK_MODE if set (1/true/yes/on), else the stored choice."""
    env_value = os.environ.get("TREENOTES_DARK_MODE")
    if env_value is not None:
        return env_value.strip().lower() in _TRUTHY
    return bool(load_config().get("dark_mode", False))


def set_dark_mode(enabled: bool) -> None:
    """Persist the dark mode preference."""
    config = load_config()
    config["dark_mode"] = bool(enabled)
    save_config(config)


def get_export_filename() -> str:
    name = os.environ.get("TREENOTES_EXPORT_NAME") or load_config().get("export_filename")
    return name or EXPORT_FILENAME


def get_log_level() -> str:
    level = os.environ.get("TREENOTES_LOG_LEVEL") or load_config().get("log_level") or "INFO"
    return str(level).upper()


def get_port() -> int:
    raw: Optional[str] = os.environ.get("TREENOTES_PORT")
    if raw is None:
        raw = load_config().get("port")
    if raw is None:
        return DEFAULT_PORT
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid port {raw!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT
