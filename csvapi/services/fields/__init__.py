"""Field schema and per-cell value conversion."""

from .schema import Attachment, FieldDescriptor, FieldSchema, FieldType
from .transform import convert_date, convert_type, transform_value

__all__ = [
    "Attachment",
    "FieldDescriptor",
    "FieldSchema",
    "FieldType",
    "convert_date",
    "convert_type",
    "transform_value",
]
