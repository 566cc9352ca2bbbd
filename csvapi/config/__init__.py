"""Persisted connection defaults (base URL and auth token).

The endpoint path is entered per session and never written to disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Protocol

import yaml

from csvapi.core.errors import ConfigPersistError
from csvapi.core.settings import config_path


@dataclass(frozen=True)
class PersistedConfig:
    """Values remembered between sessions."""

    base_url: str = ""
    auth_token: str = ""


class ConfigStore(Protocol):
    """Durable key-value persistence for connection defaults."""

    def load(self) -> PersistedConfig:
        ...

    def save(self, config: PersistedConfig) -> None:
        ...


class MemoryConfigStore:
    """In-process store for embedding and tests."""

    def __init__(self, initial: PersistedConfig | None = None) -> None:
        self._value = initial or PersistedConfig()
        self.saves = 0

    def load(self) -> PersistedConfig:
        return self._value

    def save(self, config: PersistedConfig) -> None:
        self._value = config
        self.saves += 1


class YamlConfigStore:
    """File-backed store writing a small YAML mapping."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else config_path()

    def load(self) -> PersistedConfig:
        if not self.path.exists():
            return PersistedConfig()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigPersistError(f"Failed to read config file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigPersistError(f"Config file {self.path} must contain a mapping")
        return PersistedConfig(
            base_url=_as_text(data.get("base_url")),
            auth_token=_as_text(data.get("auth_token")),
        )

    def save(self, config: PersistedConfig) -> None:
        payload: Dict[str, Any] = {
            "base_url": config.base_url,
            "auth_token": config.auth_token,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump(payload, handle, allow_unicode=True, sort_keys=False)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigPersistError(f"Failed to write config file {self.path}: {exc}") from exc


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


__all__ = [
    "ConfigStore",
    "MemoryConfigStore",
    "PersistedConfig",
    "YamlConfigStore",
]
