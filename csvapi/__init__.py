"""Replay spreadsheet rows as outbound API calls."""

from __future__ import annotations

from .core.session import SubmissionSession

__all__ = ["SubmissionSession"]

__version__ = "0.1.0"
