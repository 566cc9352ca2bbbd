"""Inter-request pacing."""

from __future__ import annotations

import time
from typing import Protocol


class Pacer(Protocol):
    """Suspends the run between two records."""

    def wait(self, delay_ms: int) -> None:
        ...


class SleepPacer:
    """Wall-clock pacer used outside tests."""

    def wait(self, delay_ms: int) -> None:
        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)


__all__ = ["Pacer", "SleepPacer"]
