from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Logger and config paths resolve at import time; keep them out of the real home.
os.environ.setdefault("CSVAPI_HOME", tempfile.mkdtemp(prefix="csvapi-tests-"))

from csvapi.core.activity import ActivityRecorder  # noqa: E402
from tests.fakes import RecordingPacer, RecordingTransport  # noqa: E402


@pytest.fixture()
def recorder() -> ActivityRecorder:
    return ActivityRecorder()


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def pacer() -> RecordingPacer:
    return RecordingPacer()
