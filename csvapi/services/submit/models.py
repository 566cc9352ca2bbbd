"""Data models used by the submission service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["POST", "PUT", "PATCH"]
MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 100


class HeaderPair(BaseModel):
    """User supplied header row; blank rows are ignored when sending."""

    key: str = ""
    value: str = ""

    def is_complete(self) -> bool:
        return bool(self.key.strip() and self.value.strip())


class RunConfig(BaseModel):
    """Target endpoint and pacing options for a submission run."""

    model_config = ConfigDict(validate_assignment=True)

    base_url: str = ""
    endpoint_path: str = ""
    auth_token: str = ""
    method: HttpMethod = "POST"
    batch_size: int = Field(default=1, ge=MIN_BATCH_SIZE, le=MAX_BATCH_SIZE)
    delay_ms: int = Field(default=0, ge=0)
    custom_headers: List[HeaderPair] = Field(default_factory=lambda: [HeaderPair()])

    @property
    def url(self) -> str:
        # Literal concatenation; callers supply the slash.
        return f"{self.base_url}{self.endpoint_path}"


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ABORTED = "aborted"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """Result of sending one record."""

    row_number: int
    success: bool
    status_code: Optional[int] = None
    error_message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    processed: int
    total: int
    percent: int

    def describe(self) -> str:
        return f"{self.processed}/{self.total} ({self.percent}%)"


@dataclass(slots=True)
class OutboundRequest:
    """Fully assembled HTTP request for one record."""

    method: str
    url: str
    headers: dict[str, str]
    json: Optional[dict[str, Any]] = None
    data: Optional[dict[str, str]] = None
    files: Optional[dict[str, tuple[str, bytes, str]]] = None

    @property
    def is_multipart(self) -> bool:
        return self.files is not None


@dataclass(slots=True)
class SubmissionReport:
    """Aggregated outcome returned to callers once a run is terminal."""

    state: SubmissionState
    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    failures: List[SubmissionOutcome] = field(default_factory=list)
    progress: List[ProgressUpdate] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)

    @property
    def failed_rows(self) -> list[int]:
        return [outcome.row_number for outcome in self.failures]


__all__ = [
    "HeaderPair",
    "HttpMethod",
    "OutboundRequest",
    "ProgressUpdate",
    "RunConfig",
    "SubmissionOutcome",
    "SubmissionReport",
    "SubmissionState",
    "MAX_BATCH_SIZE",
    "MIN_BATCH_SIZE",
]
