"""Custom exceptions used across csvapi."""

from __future__ import annotations

from typing import Iterable


class CsvApiError(Exception):
    """Base error for the application."""


class ConfigError(CsvApiError):
    """Configuration related error."""


class ConfigPersistError(CsvApiError):
    """Raised when the configuration backend rejects a load or save."""


class ParseError(CsvApiError):
    """Raised when a spreadsheet cannot be decoded."""


class SchemaError(CsvApiError):
    """Raised for illegal field descriptor operations."""


class ValidationError(CsvApiError):
    """Raised when pre-flight checks fail; carries every collected reason."""

    def __init__(self, reasons: Iterable[str]) -> None:
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons))


class RowSubmissionError(CsvApiError):
    """Raised when a single record's request fails."""

    def __init__(self, message: str, *, status_code: int | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
