"""Spreadsheet decoding."""

from .parser import ParsedSheet, Record, infer_schema, parse_table

__all__ = ["ParsedSheet", "Record", "infer_schema", "parse_table"]
