"""Field descriptors controlling how each spreadsheet column is submitted."""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from csvapi.core.errors import SchemaError


class FieldType(str, Enum):
    """Declared output type of a column."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


def detect_mime_type(path: str | os.PathLike[str]) -> str:
    """Best-effort MIME type detection."""

    mime, _ = mimetypes.guess_type(str(path))
    return mime or "application/octet-stream"


@dataclass(frozen=True, slots=True)
class Attachment:
    """Binary file bound to an image field for the current session."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "Attachment":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(str(path))
        return cls(
            filename=file_path.name,
            content=file_path.read_bytes(),
            content_type=detect_mime_type(file_path),
        )

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(slots=True)
class FieldDescriptor:
    """Per-column metadata; owns the bound attachment, if any."""

    name: str = ""
    type: FieldType = FieldType.STRING
    is_date: bool = False
    is_image: bool = False
    attachment: Attachment | None = field(default=None, repr=False)

    @property
    def clean_name(self) -> str:
        return self.name.strip()

    def label(self, position: int) -> str:
        """Name used in user-facing messages (1-based position when unnamed)."""

        return self.name or str(position + 1)


class FieldSchema:
    """Ordered, never-empty sequence of field descriptors."""

    def __init__(self, descriptors: Iterable[FieldDescriptor] | None = None) -> None:
        self._fields: list[FieldDescriptor] = list(descriptors or [])
        if not self._fields:
            self._fields.append(FieldDescriptor())

    @classmethod
    def from_headers(
        cls,
        headers: Sequence[str],
        types: Sequence[FieldType] | None = None,
        date_flags: Sequence[bool] | None = None,
    ) -> "FieldSchema":
        if types is not None and len(types) != len(headers):
            raise SchemaError("types must match the number of headers")
        if date_flags is not None and len(date_flags) != len(headers):
            raise SchemaError("date flags must match the number of headers")
        descriptors = [
            FieldDescriptor(
                name=str(header),
                type=FieldType(types[idx]) if types is not None else FieldType.STRING,
                is_date=bool(date_flags[idx]) if date_flags is not None else False,
            )
            for idx, header in enumerate(headers)
        ]
        return cls(descriptors)

    # Sequence protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __getitem__(self, index: int) -> FieldDescriptor:
        return self._fields[index]

    @property
    def descriptors(self) -> tuple[FieldDescriptor, ...]:
        return tuple(self._fields)

    @property
    def names(self) -> list[str]:
        return [descriptor.name for descriptor in self._fields]

    # Mutations ---------------------------------------------------------

    def add_field(self) -> FieldDescriptor:
        descriptor = FieldDescriptor()
        self._fields.append(descriptor)
        return descriptor

    def remove_field(self, index: int) -> bool:
        """Remove the descriptor at ``index``; refused when it is the last one."""

        if len(self._fields) <= 1:
            return False
        del self._fields[index]
        return True

    def rename(self, index: int, name: str) -> None:
        self._fields[index].name = name

    def set_type(self, index: int, field_type: FieldType | str) -> None:
        try:
            resolved = FieldType(field_type)
        except ValueError as exc:
            raise SchemaError(f"unknown field type: {field_type}") from exc
        self._fields[index].type = resolved

    def set_date(self, index: int, is_date: bool) -> None:
        self._fields[index].is_date = bool(is_date)

    def set_image(self, index: int, is_image: bool) -> None:
        descriptor = self._fields[index]
        descriptor.is_image = bool(is_image)
        if not descriptor.is_image:
            descriptor.attachment = None

    def bind_attachment(self, index: int, attachment: Attachment) -> None:
        descriptor = self._fields[index]
        if not descriptor.is_image:
            raise SchemaError(f"field {descriptor.label(index)} is not an image field")
        descriptor.attachment = attachment

    # Queries -----------------------------------------------------------

    def active_fields(self) -> list[FieldDescriptor]:
        """Descriptors with a non-blank name, in order."""

        return [descriptor for descriptor in self._fields if descriptor.clean_name]

    def has_image_fields(self) -> bool:
        return any(descriptor.is_image for descriptor in self._fields)

    def missing_attachments(self) -> list[tuple[int, FieldDescriptor]]:
        return [
            (idx, descriptor)
            for idx, descriptor in enumerate(self._fields)
            if descriptor.is_image and descriptor.attachment is None
        ]


__all__ = [
    "Attachment",
    "FieldDescriptor",
    "FieldSchema",
    "FieldType",
    "detect_mime_type",
]
