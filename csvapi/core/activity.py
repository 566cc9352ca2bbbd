"""Append-only activity log surfaced to the user during a session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal

from .logger import get_logger

LOGGER = get_logger()

EntryKind = Literal["info", "success", "error"]
Clock = Callable[[], datetime]


@dataclass(frozen=True, slots=True)
class ActivityLogEntry:
    """Single timestamped activity line."""

    message: str
    kind: EntryKind
    timestamp: str


class ActivityRecorder:
    """Collect activity entries and mirror them into the application log."""

    def __init__(self, *, clock: Clock | None = None, logger: logging.Logger | None = None) -> None:
        self._clock = clock or datetime.now
        self._logger = logger or LOGGER
        self._entries: list[ActivityLogEntry] = []

    @property
    def entries(self) -> tuple[ActivityLogEntry, ...]:
        return tuple(self._entries)

    def add(self, message: str, kind: EntryKind = "info") -> ActivityLogEntry:
        if kind not in ("info", "success", "error"):
            raise ValueError(f"unknown activity kind: {kind}")
        entry = ActivityLogEntry(
            message=message,
            kind=kind,
            timestamp=self._clock().strftime("%H:%M:%S"),
        )
        self._entries.append(entry)
        if kind == "error":
            self._logger.error("csvapi.activity %s", message)
        else:
            self._logger.info("csvapi.activity [%s] %s", kind, message)
        return entry

    def info(self, message: str) -> ActivityLogEntry:
        return self.add(message, "info")

    def success(self, message: str) -> ActivityLogEntry:
        return self.add(message, "success")

    def error(self, message: str) -> ActivityLogEntry:
        return self.add(message, "error")

    def reset(self) -> None:
        self._entries.clear()

    def messages(self, kind: EntryKind | None = None) -> list[str]:
        """Return entry messages, optionally filtered by kind."""

        return [entry.message for entry in self._entries if kind is None or entry.kind == kind]

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ActivityLogEntry", "ActivityRecorder", "EntryKind"]
