"""Cell value conversion applied before a record is submitted."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from .schema import Attachment, FieldDescriptor, FieldType

EXCEL_EPOCH = datetime(1899, 12, 30)
EXCEL_SERIAL_MIN = 1
EXCEL_SERIAL_MAX = 2958466
ISO_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")
TRUE_TOKENS = frozenset({"true", "1", "yes"})
FALSE_TOKENS = frozenset({"false", "0", "no"})
BOOLEAN_TOKENS = TRUE_TOKENS | FALSE_TOKENS


def is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_empty(value: object) -> bool:
    """Missing or falsy cells are submitted as an empty string."""

    if is_missing(value):
        return True
    if isinstance(value, (bool, int, float)):
        return not value
    return False


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_excel_serial(value: object) -> bool:
    return is_number(value) and EXCEL_SERIAL_MIN < value < EXCEL_SERIAL_MAX


def parse_number(text: str) -> int | float | None:
    """Parse a finite numeric literal; integral values come back as ``int``."""

    candidate = text.strip()
    if not candidate or "_" in candidate:
        return None
    try:
        number = float(candidate)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if number.is_integer() and re.fullmatch(r"[+-]?\d+", candidate):
        return int(candidate)
    return number


def excel_serial_to_iso(serial: float) -> str:
    """Convert an Excel serial day count to ``YYYY-MM-DD``.

    The 1899-12-30 anchor absorbs the spreadsheet's fictitious 1900-02-29.
    """

    moment = EXCEL_EPOCH + timedelta(milliseconds=serial * 86_400_000)
    return moment.strftime("%Y-%m-%d")


def _parse_generic_date(value: object) -> str | None:
    if isinstance(value, datetime):
        stamp = pd.Timestamp(value)
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, str):
        stamp = pd.to_datetime(value.strip(), errors="coerce")
    else:
        return None
    if stamp is None or pd.isna(stamp):
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC")
    return stamp.strftime("%Y-%m-%d")


def convert_date(value: Any) -> Any:
    """Normalise a date-like cell to ``YYYY-MM-DD``; unparseable input is returned as-is."""

    if is_empty(value):
        return ""
    if isinstance(value, str):
        match = ISO_DATE_PREFIX.match(value)
        if match:
            return match.group(1)
    if is_excel_serial(value):
        return excel_serial_to_iso(value)
    try:
        parsed = _parse_generic_date(value)
    except (TypeError, ValueError, OverflowError):
        parsed = None
    return value if parsed is None else parsed


def _to_number(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value
    if isinstance(value, str):
        parsed = parse_number(value)
        return value if parsed is None else parsed
    return value


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if token in TRUE_TOKENS:
            return True
        if token in FALSE_TOKENS:
            return False
    if is_number(value):
        return value != 0
    return bool(value)


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def convert_type(value: Any, field_type: FieldType | str) -> Any:
    """Coerce ``value`` to the declared field type."""

    if is_missing(value):
        return value
    resolved = FieldType(field_type)
    if resolved is FieldType.NUMBER:
        return _to_number(value)
    if resolved is FieldType.BOOLEAN:
        return _to_boolean(value)
    return _to_string(value)


def transform_value(
    value: Any,
    descriptor: FieldDescriptor,
) -> Any | Attachment | None:
    """Produce the outbound payload value for one cell."""

    if descriptor.is_image:
        return descriptor.attachment
    if is_empty(value):
        return ""
    if descriptor.is_date:
        return convert_date(value)
    return convert_type(value, descriptor.type)


def infer_field_type(sample: Any) -> FieldType:
    """Guess the declared type of a column from its first value."""

    if isinstance(sample, bool):
        return FieldType.BOOLEAN
    if is_number(sample):
        return FieldType.NUMBER
    if isinstance(sample, str):
        if sample.strip().lower() in BOOLEAN_TOKENS:
            return FieldType.BOOLEAN
        if parse_number(sample) is not None:
            return FieldType.NUMBER
    return FieldType.STRING


def looks_like_date(header: str, sample: Any) -> bool:
    lowered = str(header).lower()
    if "date" in lowered or "time" in lowered:
        return True
    if isinstance(sample, (datetime, date)):
        return True
    return is_excel_serial(sample)


__all__ = [
    "EXCEL_EPOCH",
    "convert_date",
    "convert_type",
    "excel_serial_to_iso",
    "infer_field_type",
    "is_empty",
    "is_excel_serial",
    "looks_like_date",
    "transform_value",
]
