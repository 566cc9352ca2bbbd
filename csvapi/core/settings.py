from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError


load_dotenv(override=False)

HOME_ENV = "CSVAPI_HOME"
LOG_DIR_ENV = "CSVAPI_LOG_DIR"
CONFIG_PATH_ENV = "CSVAPI_CONFIG_PATH"
TIMEOUT_ENV = "CSVAPI_TIMEOUT_SEC"
LOG_LEVEL_ENV = "CSVAPI_LOG_LEVEL"

DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"


def _read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip()


def _read_env_float(key: str) -> float | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:  # noqa: BLE001 - configuration validation
        raise ConfigError(f"Environment variable {key} must be a number") from exc


def app_home() -> Path:
    """Writable base for runtime files (logs, persisted config)."""
    env = _read_env(HOME_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".csvapi"


def log_dir() -> Path:
    env = _read_env(LOG_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return app_home() / "logs"


def config_path() -> Path:
    """Location of the persisted base URL / auth token file."""
    env = _read_env(CONFIG_PATH_ENV)
    if env:
        return Path(env).expanduser()
    return app_home() / "config.yaml"


def log_level() -> int:
    value = (_read_env(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(value)
    if not isinstance(level, int):
        raise ConfigError(f"Environment variable {LOG_LEVEL_ENV} must be a logging level name")
    return level


def request_timeout() -> float:
    """Return the per-request timeout in seconds."""
    value = _read_env_float(TIMEOUT_ENV)
    if value is None:
        return DEFAULT_TIMEOUT
    if value <= 0:
        raise ConfigError(f"Environment variable {TIMEOUT_ENV} must be positive")
    return value
