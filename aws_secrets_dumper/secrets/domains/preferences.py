"""Persistent CLI preferences for aws-secrets-dumper.

Preferences live next to the config file, in the XDG Base Directory location:
~/.config/aws-secrets-dumper/preferences.json

The only preference currently used is ``config_path``, set with
``aws-secrets-dumper config set-path``.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "aws-secrets-dumper"
PREFERENCES_FILE = CONFIG_DIR / "preferences.json"


def _load_preferences() -> Dict[str, Any]:
    """
    Read the preferences file.

    Returns:
        Dictionary of preferences, or empty dict if the file is missing or unreadable
    """
    if not PREFERENCES_FILE.exists():
        return {}

    try:
        with open(PREFERENCES_FILE, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable preferences file {PREFERENCES_FILE}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring preferences file {PREFERENCES_FILE}: not a JSON object")
        return {}
    return data


def _save_preferences(preferences: Dict[str, Any]) -> None:
    PREFERENCES_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2)


def get_preference(key: str) -> Optional[str]:
    """Return the stored value for key, or None."""
    return _load_preferences().get(key)


def set_preference(key: str, value: str) -> None:
    """Store value under key, creating the preferences file if needed."""
    preferences = _load_preferences()
    preferences[key] = value
    _save_preferences(preferences)
    logger.debug(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> None:
    """Remove key from preferences. Missing keys are ignored."""
    preferences = _load_preferences()
    if key not in preferences:
        logger.debug(f"Preference '{key}' not found, nothing to clear")
        return

    del preferences[key]
    _save_preferences(preferences)
    logger.debug(f"Preference '{key}' cleared")
