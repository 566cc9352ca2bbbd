"""Spreadsheet input helpers."""

# Module responsibilities:
# - Decode the first sheet of an uploaded workbook or delimited text file with pandas.
# - Hand back read-only records with native Python cell values plus a small preview.
# - Derive the initial field schema from the header row and the first record.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import pandas as pd

from csvapi.core.errors import ParseError
from csvapi.core.logger import get_logger
from csvapi.services.fields.schema import FieldSchema
from csvapi.services.fields.transform import infer_field_type, is_missing, looks_like_date

LOGGER = get_logger()

PREVIEW_ROWS = 3
ZIP_MAGIC = b"PK\x03\x04"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
TEXT_SUFFIXES = {".csv": ",", ".tsv": "\t", ".txt": ","}
TEXT_ENCODINGS = ("utf-8-sig", "cp1252")

Record = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ParsedSheet:
    """Decoded first sheet of an uploaded file."""

    headers: tuple[str, ...]
    records: tuple[Record, ...]

    @property
    def total_rows(self) -> int:
        return len(self.records)

    @property
    def preview(self) -> tuple[Record, ...]:
        return self.records[:PREVIEW_ROWS]


def _detect_format(content: bytes, filename: str | None) -> str:
    suffix = Path(filename).suffix.lower() if filename else ""
    if suffix in EXCEL_SUFFIXES:
        return "excel"
    if suffix in TEXT_SUFFIXES:
        return suffix
    if content.startswith(ZIP_MAGIC) or content.startswith(OLE2_MAGIC):
        return "excel"
    return ".csv"


def _read_text(content: bytes, sep: str, encoding: str) -> pd.DataFrame:
    return pd.read_csv(
        BytesIO(content),
        sep=sep,
        encoding=encoding,
        keep_default_na=False,
        na_values=[""],
        skip_blank_lines=True,
    )


def _read_frame(content: bytes, fmt: str) -> pd.DataFrame:
    if fmt == "excel":
        return pd.read_excel(BytesIO(content), sheet_name=0)
    sep = TEXT_SUFFIXES[fmt]
    try:
        return _read_text(content, sep, TEXT_ENCODINGS[0])
    except UnicodeDecodeError:
        # Excel's plain "CSV" export is Windows-1252.
        LOGGER.info("csvapi.parser encoding_fallback from=%s to=%s", *TEXT_ENCODINGS)
        return _read_text(content, sep, TEXT_ENCODINGS[1])


def _to_native(value: Any) -> Any:
    if is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, (str, bytes, datetime)):
        return value.item()
    return value


def parse_table(content: bytes, filename: str | None = None) -> ParsedSheet:
    """Decode the first sheet of a spreadsheet-family file.

    Args:
        content: Raw file bytes.
        filename: Optional original file name used to pick the reader.

    Returns:
        ParsedSheet with headers and one read-only record per non-blank row.

    Raises:
        ParseError: When the content cannot be read as a table.
    """

    if not content:
        raise ParseError("file is empty")

    fmt = _detect_format(content, filename)
    LOGGER.info("csvapi.parser reading name=%s format=%s bytes=%d", filename, fmt, len(content))
    try:
        frame = _read_frame(content, fmt)
    except Exception as exc:  # noqa: BLE001 - every reader failure surfaces as ParseError
        LOGGER.error("csvapi.parser failed name=%s error=%s", filename, exc)
        raise ParseError(str(exc) or type(exc).__name__) from exc

    frame = frame.dropna(how="all")
    headers = tuple(str(column) for column in frame.columns)
    records: list[Record] = []
    for raw in frame.itertuples(index=False, name=None):
        row = {header: _to_native(value) for header, value in zip(headers, raw)}
        records.append(MappingProxyType(row))

    LOGGER.info("csvapi.parser loaded rows=%d columns=%d", len(records), len(headers))
    return ParsedSheet(headers=headers, records=tuple(records))


def infer_schema(sheet: ParsedSheet) -> FieldSchema:
    """Build the initial field schema from the header row and first record."""

    if not sheet.records:
        return FieldSchema()
    sample = sheet.records[0]
    types = [infer_field_type(sample.get(header)) for header in sheet.headers]
    date_flags = [looks_like_date(header, sample.get(header)) for header in sheet.headers]
    return FieldSchema.from_headers(sheet.headers, types=types, date_flags=date_flags)


__all__ = ["ParsedSheet", "Record", "infer_schema", "parse_table"]
