"""Request construction and sequential batch submission."""

from .builder import build_request
from .executor import BatchSubmitter
from .models import (
    HeaderPair,
    OutboundRequest,
    ProgressUpdate,
    RunConfig,
    SubmissionOutcome,
    SubmissionReport,
    SubmissionState,
)
from .pacing import Pacer, SleepPacer
from .transport import HttpTransport, Transport

__all__ = [
    "BatchSubmitter",
    "HeaderPair",
    "HttpTransport",
    "OutboundRequest",
    "Pacer",
    "ProgressUpdate",
    "RunConfig",
    "SleepPacer",
    "SubmissionOutcome",
    "SubmissionReport",
    "SubmissionState",
    "Transport",
    "build_request",
]
