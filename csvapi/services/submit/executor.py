"""Sequential batch submitter with progress reporting and per-row failure capture."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Mapping, Sequence

from csvapi.core.activity import ActivityRecorder
from csvapi.core.errors import RowSubmissionError, ValidationError
from csvapi.core.logger import get_logger
from csvapi.services.fields.schema import FieldDescriptor, FieldSchema

from .builder import build_request, describe_conversion, log_request
from .models import (
    ProgressUpdate,
    RunConfig,
    SubmissionOutcome,
    SubmissionReport,
    SubmissionState,
)
from .pacing import Pacer, SleepPacer
from .transport import HttpTransport, Transport, error_body, is_success
from .validate import validate_submission

LOGGER = get_logger()

SUCCESS_LOG_INTERVAL = 10

ProgressCallback = Callable[[ProgressUpdate], None]
StatusCallback = Callable[[str], None]


def percent_complete(processed: int, total: int) -> int:
    if total <= 0:
        return 100
    # Half-up rounding, not banker's rounding.
    return math.floor(processed * 100 / total + 0.5)


def iter_batches(records: Sequence[Any], batch_size: int):
    for start in range(0, len(records), batch_size):
        yield start, records[start : start + batch_size]


class BatchSubmitter:
    """Validate, then replay every record as one request, strictly in order."""

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        pacer: Pacer | None = None,
        recorder: ActivityRecorder | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or LOGGER
        self.transport = transport or HttpTransport(logger=self.logger)
        self.pacer = pacer or SleepPacer()
        self.recorder = recorder or ActivityRecorder(logger=self.logger)
        self.state = SubmissionState.IDLE

    # ------------------------------------------------------------------
    def run(
        self,
        records: Sequence[Mapping[str, Any]] | None,
        schema: FieldSchema,
        config: RunConfig,
        *,
        progress_cb: ProgressCallback | None = None,
        status_cb: StatusCallback | None = None,
    ) -> SubmissionReport:
        if self.state in (SubmissionState.VALIDATING, SubmissionState.RUNNING):
            raise RuntimeError("a submission run is already in progress")

        def status(text: str) -> None:
            if status_cb:
                status_cb(text)

        self.recorder.reset()
        self.state = SubmissionState.VALIDATING
        status("Validating...")
        try:
            validate_submission(has_file=records is not None, schema=schema, config=config)
            self.state = SubmissionState.RUNNING
        except ValidationError as exc:
            self.state = SubmissionState.ABORTED
            for reason in exc.reasons:
                self.recorder.error(reason)
            self.logger.warning("csvapi.submit aborted reasons=%d", len(exc.reasons))
            status("Please fix the validation errors above")
            return SubmissionReport(state=self.state, reasons=list(exc.reasons))
        finally:
            if self.state is SubmissionState.VALIDATING:
                # Checks raised something other than ValidationError.
                self.state = SubmissionState.ABORTED

        status("Processing...")
        report = SubmissionReport(state=self.state, total=len(records))
        try:
            self._dispatch_all(records, schema, config, report, progress_cb, status)
        finally:
            self.state = SubmissionState.COMPLETED
            report.state = self.state
            summary = f"Complete! Success: {report.success_count} | Failed: {report.failure_count}"
            status(summary)
            self.recorder.add(summary, "success" if report.success_count > 0 else "error")
            if report.failures:
                rows = ", ".join(str(row) for row in report.failed_rows)
                self.recorder.error(f"Failed rows: {rows}")
        return report

    # ------------------------------------------------------------------
    def _dispatch_all(
        self,
        records: Sequence[Mapping[str, Any]],
        schema: FieldSchema,
        config: RunConfig,
        report: SubmissionReport,
        progress_cb: ProgressCallback | None,
        status: StatusCallback,
    ) -> None:
        total = len(records)
        self.recorder.info(f"Starting submission of {total} rows")
        self.logger.info(
            "csvapi.submit start rows=%d batch_size=%d delay_ms=%d method=%s",
            total,
            config.batch_size,
            config.delay_ms,
            config.method,
        )

        for start, batch in iter_batches(records, config.batch_size):
            for offset, record in enumerate(batch):
                index = start + offset
                outcome = self._submit_one(index + 1, record, schema, config, diagnostics=index == 0)
                if outcome.success:
                    report.success_count += 1
                    if report.success_count % SUCCESS_LOG_INTERVAL == 0:
                        self.recorder.info(f"Processed {report.success_count} rows successfully")
                else:
                    report.failure_count += 1
                    report.failures.append(outcome)
                if config.delay_ms > 0 and index < total - 1:
                    self.pacer.wait(config.delay_ms)

            processed = min(start + config.batch_size, total)
            update = ProgressUpdate(processed=processed, total=total, percent=percent_complete(processed, total))
            report.progress.append(update)
            self.logger.info("csvapi.submit progress %s", update.describe())
            if progress_cb:
                progress_cb(update)
            status(f"Processing... {update.describe()}")

    def _submit_one(
        self,
        row_number: int,
        record: Mapping[str, Any],
        schema: FieldSchema,
        config: RunConfig,
        *,
        diagnostics: bool,
    ) -> SubmissionOutcome:
        def on_convert(descriptor: FieldDescriptor, raw: Any, value: Any) -> None:
            self.recorder.info(describe_conversion(descriptor, raw, value))

        try:
            request = build_request(record, schema, config, on_convert=on_convert if diagnostics else None)
            if diagnostics:
                for name, (filename, _content, _ctype) in (request.files or {}).items():
                    self.recorder.info(f"Adding image file for {name}: {filename}")
            log_request(self.logger, row_number, request)
            response = self.transport.send(request)
            if not is_success(response.status_code):
                raise RowSubmissionError(
                    f"{response.status_code} {response.reason or ''}".strip(),
                    status_code=response.status_code,
                    detail=error_body(response),
                )
        except RowSubmissionError as exc:
            if exc.status_code is not None:
                self.recorder.error(f"Row {row_number} failed: {exc}")
            else:
                self.recorder.error(f"Row {row_number} error: {exc}")
            self.logger.warning(
                "csvapi.submit row_failed row=%d status=%s detail=%s",
                row_number,
                exc.status_code,
                exc.detail,
            )
            return SubmissionOutcome(
                row_number=row_number,
                success=False,
                status_code=exc.status_code,
                error_message=exc.detail or str(exc),
            )
        except Exception as exc:  # noqa: BLE001 - a single row never ends the run
            message = str(exc) or type(exc).__name__
            self.recorder.error(f"Row {row_number} error: {message}")
            self.logger.warning("csvapi.submit row_error row=%d error=%s", row_number, message, exc_info=exc)
            return SubmissionOutcome(row_number=row_number, success=False, error_message=message)
        return SubmissionOutcome(row_number=row_number, success=True, status_code=response.status_code)


__all__ = ["BatchSubmitter", "iter_batches", "percent_complete"]
