from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from csvapi.config import ConfigStore, MemoryConfigStore, PersistedConfig
from csvapi.services.fields.schema import Attachment, FieldSchema, FieldType
from csvapi.services.submit.executor import BatchSubmitter, ProgressCallback
from csvapi.services.submit.models import HeaderPair, RunConfig, SubmissionReport
from csvapi.services.submit.pacing import Pacer
from csvapi.services.submit.transport import Transport
from csvapi.services.tabular.parser import ParsedSheet, Record, infer_schema, parse_table

from .activity import ActivityRecorder
from .errors import ConfigPersistError, ParseError
from .logger import get_logger


StatusCB = Callable[[str], None]


def _kb(size: int) -> str:
    return f"{size / 1024:.2f}"


class SubmissionSession:
    """Coordinates Load -> Map fields -> Submit for one interactive session.

    A collaborator UI drives this object; everything the user sees comes back
    through ``logs`` and ``status``.
    """

    def __init__(
        self,
        config_store: ConfigStore | None = None,
        *,
        transport: Transport | None = None,
        pacer: Pacer | None = None,
        recorder: ActivityRecorder | None = None,
        logger: logging.Logger | None = None,
        status_cb: StatusCB | None = None,
    ) -> None:
        self.logger = logger or get_logger()
        self.recorder = recorder or ActivityRecorder(logger=self.logger)
        self.config_store = config_store or MemoryConfigStore()
        self.submitter = BatchSubmitter(
            transport=transport,
            pacer=pacer,
            recorder=self.recorder,
            logger=self.logger,
        )
        self.status = ""
        self._status_cb = status_cb
        self.filename: str | None = None
        self.sheet: ParsedSheet | None = None
        self.schema = FieldSchema()
        self.config = RunConfig()
        self._load_persisted_config()

    # Properties ----------------------------------------------------------

    @property
    def logs(self):
        return self.recorder.entries

    @property
    def preview(self) -> tuple[Record, ...]:
        return self.sheet.preview if self.sheet else ()

    @property
    def total_rows(self) -> int:
        return self.sheet.total_rows if self.sheet else 0

    # Configuration -------------------------------------------------------

    def _load_persisted_config(self) -> None:
        try:
            stored = self.config_store.load()
        except ConfigPersistError as exc:
            self.logger.error("csvapi.session config_load_failed error=%s", exc)
            self.recorder.error(f"Error loading API configuration: {exc}")
            return
        self.config = self.config.model_copy(
            update={"base_url": stored.base_url, "auth_token": stored.auth_token}
        )

    def update_config(self, **changes: Any) -> RunConfig:
        """Apply and validate changes to the run configuration."""

        merged = {**self.config.model_dump(), **changes}
        self.config = RunConfig.model_validate(merged)
        return self.config

    def save_config(self) -> bool:
        persisted = PersistedConfig(base_url=self.config.base_url, auth_token=self.config.auth_token)
        try:
            self.config_store.save(persisted)
        except ConfigPersistError as exc:
            self.logger.error("csvapi.session config_save_failed error=%s", exc)
            self.recorder.error("Error saving API configuration")
            return False
        self.recorder.success("API configuration saved")
        return True

    def add_custom_header(self) -> None:
        self.config.custom_headers = [*self.config.custom_headers, HeaderPair()]

    def update_custom_header(self, index: int, *, key: str | None = None, value: str | None = None) -> None:
        headers = list(self.config.custom_headers)
        current = headers[index]
        headers[index] = HeaderPair(
            key=current.key if key is None else key,
            value=current.value if value is None else value,
        )
        self.config.custom_headers = headers

    def remove_custom_header(self, index: int) -> bool:
        headers = list(self.config.custom_headers)
        if len(headers) <= 1:
            return False
        del headers[index]
        self.config.custom_headers = headers
        return True

    # File loading --------------------------------------------------------

    def load_file(self, content: bytes, filename: str | None = None) -> ParsedSheet:
        """Parse a spreadsheet and replace records, schema, and logs.

        On ``ParseError`` the previous sheet and schema stay in place.
        """

        try:
            sheet = parse_table(content, filename)
        except ParseError as exc:
            self.recorder.error(f"Error reading file: {exc}")
            raise

        self.recorder.reset()
        self.filename = filename
        self.sheet = sheet
        self.recorder.success(f"File selected: {filename or 'upload'} ({_kb(len(content))} KB)")
        self.schema = infer_schema(sheet)
        if sheet.records:
            self._log_detection()
        return sheet

    def load_path(self, path: str | Path) -> ParsedSheet:
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Source file not found: {file_path}")
        return self.load_file(file_path.read_bytes(), file_path.name)

    def _log_detection(self) -> None:
        names = self.schema.names
        self.recorder.info(f"Auto-detected {len(names)} fields: {', '.join(names)}")
        date_count = sum(1 for descriptor in self.schema if descriptor.is_date)
        if date_count:
            self.recorder.info(f"Detected {date_count} potential date fields")
        typed = sum(1 for descriptor in self.schema if descriptor.type is not FieldType.STRING)
        if typed:
            self.recorder.info(f"Auto-detected {typed} non-string field types")

    # Field schema --------------------------------------------------------

    def add_field(self) -> None:
        self.schema.add_field()

    def remove_field(self, index: int) -> bool:
        return self.schema.remove_field(index)

    def rename_field(self, index: int, name: str) -> None:
        self.schema.rename(index, name)

    def set_field_type(self, index: int, field_type: FieldType | str) -> None:
        self.schema.set_type(index, field_type)

    def set_date_field(self, index: int, is_date: bool) -> None:
        self.schema.set_date(index, is_date)

    def set_image_field(self, index: int, is_image: bool) -> None:
        self.schema.set_image(index, is_image)

    def attach_image(self, index: int, attachment: Attachment | str | Path) -> Attachment:
        if not isinstance(attachment, Attachment):
            attachment = Attachment.from_path(attachment)
        self.schema.bind_attachment(index, attachment)
        label = self.schema[index].label(index)
        self.recorder.success(
            f"Image uploaded for field {label}: {attachment.filename} ({_kb(attachment.size)} KB)"
        )
        return attachment

    # Submission ----------------------------------------------------------

    def _set_status(self, text: str) -> None:
        self.status = text
        if self._status_cb:
            self._status_cb(text)

    def submit(self, progress_cb: ProgressCallback | None = None) -> SubmissionReport:
        records = self.sheet.records if self.sheet is not None else None
        return self.submitter.run(
            records,
            self.schema,
            self.config,
            progress_cb=progress_cb,
            status_cb=self._set_status,
        )


__all__ = ["SubmissionSession"]
