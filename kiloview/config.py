"""Persistent JSON config helpers.

Holds logging preferences only. All access is defensive: a malformed or
missing config falls back to defaults.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

APP_NAME = "kiloview"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_LOG_DIR = Path(user_log_dir(APP_NAME, appauthor=False))
DEFAULT_LOG_LEVEL = "WARNING"


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_log_file(config: dict[str, object]) -> Path | None:
    """Configured log file path, or ``None`` when logging is off.

    ``"default"`` selects ``kiloview.log`` in the platform log directory.
    """
    value = config.get("log_file")
    if not isinstance(value, str) or not value.strip():
        return None
    if value == "default":
        return DEFAULT_LOG_DIR / f"{APP_NAME}.log"
    return Path(value).expanduser()


def load_log_level(config: dict[str, object]) -> str:
    value = config.get("log_level")
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return DEFAULT_LOG_LEVEL
