"""Persistent user preferences for apphosting-toolkit.

Stored as JSON in the XDG config location:
~/.config/apphosting-toolkit/preferences.json

Known keys:
    config_path       absolute path to the YAML config file
    default_location  replication region used when creating new secrets
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "apphosting-toolkit"
PREFERENCES_FILE = CONFIG_DIR / "preferences.json"

KNOWN_PREFERENCES = ("config_path", "default_location")


def _check_key(key: str) -> None:
    if key not in KNOWN_PREFERENCES:
        raise KeyError(
            f"Unknown preference '{key}'. Known preferences: {', '.join(KNOWN_PREFERENCES)}"
        )


def _read() -> Dict[str, Any]:
    """Read the preferences file. A missing or corrupt file reads as empty."""
    if not PREFERENCES_FILE.exists():
        return {}
    try:
        with open(PREFERENCES_FILE, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Ignoring unreadable preferences file {PREFERENCES_FILE}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"Ignoring preferences file {PREFERENCES_FILE}: expected a JSON object")
        return {}
    return data


def _write(preferences: Dict[str, Any]) -> None:
    PREFERENCES_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2, sort_keys=True)


def get_preference(key: str) -> Optional[str]:
    _check_key(key)
    return _read().get(key)


def set_preference(key: str, value: str) -> None:
    _check_key(key)
    preferences = _read()
    preferences[key] = value
    _write(preferences)
    logger.info(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> None:
    """Remove a preference. Clearing an unset preference is a no-op."""
    _check_key(key)
    preferences = _read()
    if preferences.pop(key, None) is None:
        logger.debug(f"Preference '{key}' not set, nothing to clear")
        return
    _write(preferences)
    logger.info(f"Preference '{key}' cleared")


def get_all_preferences() -> Dict[str, Any]:
    return _read()
