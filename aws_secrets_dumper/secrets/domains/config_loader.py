"""Configuration loader for aws-secrets-dumper."""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import preferences
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "AWS_SECRETS_DUMPER_CONFIG"
DEFAULT_THROTTLE_SECONDS = 0.1


@dataclass
class Settings:
    """Resolved settings. Every field has a usable default."""
    region: Optional[str] = None
    profile: Optional[str] = None
    throttle_seconds: float = DEFAULT_THROTTLE_SECONDS


def default_config_path() -> Path:
    return preferences.CONFIG_DIR / "config.yml"


def _get_config_path() -> Optional[str]:
    """
    Find the config file, if any.

    Priority order:
    1. AWS_SECRETS_DUMPER_CONFIG environment variable
    2. User preference (stored in ~/.config/aws-secrets-dumper/preferences.json)
    3. Default location: ~/.config/aws-secrets-dumper/config.yml

    Returns:
        Absolute path to config file, or None when no config file exists

    Raises:
        ConfigError: If the environment variable points to a missing file
    """
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        config_path = Path(env_path).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"{CONFIG_PATH_ENV} points to a missing file: {config_path}")
        logger.debug(f"Using config from {CONFIG_PATH_ENV}: {config_path}")
        return str(config_path)

    config_path_pref = preferences.get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.debug(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    return None


def _section(config: Dict[str, Any], name: str, config_path: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' in config at {config_path} must be a mapping")
    return section


def load_config() -> Settings:
    """
    Load settings from the YAML config file.

    A missing config file is not an error: the AWS SDK's default credential and
    region chain is used, and the default throttle applies.

    Raises:
        ConfigError: If the config file is unreadable or has invalid values
    """
    config_path = _get_config_path()
    if config_path is None:
        logger.debug("No config file found, using defaults")
        return Settings()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if config is None:
        logger.debug(f"Config file at {config_path} is empty, using defaults")
        return Settings()

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    aws = _section(config, "aws", config_path)
    throttle = _section(config, "throttle", config_path)

    delay = throttle.get("delay_seconds", DEFAULT_THROTTLE_SECONDS)
    if isinstance(delay, bool) or not isinstance(delay, (int, float)):
        raise ConfigError(f"'throttle.delay_seconds' must be a number, got: {delay!r}")
    if delay < 0:
        raise ConfigError(f"'throttle.delay_seconds' must not be negative, got: {delay}")

    settings = Settings(
        region=aws.get("region"),
        profile=aws.get("profile"),
        throttle_seconds=float(delay),
    )
    logger.debug(f"Configuration loaded from {config_path}")
    return settings
