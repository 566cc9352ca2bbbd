from __future__ import annotations

import pytest

from csvapi.config import MemoryConfigStore, PersistedConfig
from csvapi.core.errors import ConfigPersistError, ParseError
from csvapi.core.session import SubmissionSession
from csvapi.services.fields.schema import Attachment, FieldType
from csvapi.services.submit.models import SubmissionState
from tests.fakes import MockResponse, RecordingTransport

CSV = b"id,name,Signup Date,active\n1,Ada,45853,yes\n2,Bob,45292,no\n3,Cy,,yes\n"


class BrokenStore:
    def load(self) -> PersistedConfig:
        raise ConfigPersistError("disk on fire")

    def save(self, config: PersistedConfig) -> None:
        raise ConfigPersistError("read only")


@pytest.fixture()
def session(transport, pacer, recorder) -> SubmissionSession:
    store = MemoryConfigStore(PersistedConfig(base_url="https://api.example.com", auth_token="tok"))
    return SubmissionSession(store, transport=transport, pacer=pacer, recorder=recorder)


def test_persisted_defaults_are_applied(session) -> None:
    assert session.config.base_url == "https://api.example.com"
    assert session.config.auth_token == "tok"
    assert session.config.endpoint_path == ""


def test_load_failure_is_logged_not_raised(recorder) -> None:
    session = SubmissionSession(BrokenStore(), recorder=recorder)
    assert session.config.base_url == ""
    assert recorder.messages("error") == ["Error loading API configuration: disk on fire"]


def test_save_config_reports_outcome(session, recorder) -> None:
    session.update_config(base_url="https://other.example.com", endpoint_path="/x")
    assert session.save_config() is True
    assert session.config_store.load() == PersistedConfig(base_url="https://other.example.com", auth_token="tok")
    assert recorder.messages("success")[-1] == "API configuration saved"

    failing = SubmissionSession(BrokenStore(), recorder=recorder)
    assert failing.save_config() is False
    assert recorder.messages("error")[-1] == "Error saving API configuration"


def test_load_file_replaces_state_and_logs_detection(session, recorder) -> None:
    recorder.info("old")
    session.load_file(CSV, "people.csv")

    assert session.total_rows == 3
    assert len(session.preview) == 3
    assert session.schema.names == ["id", "name", "Signup Date", "active"]
    assert [d.type for d in session.schema] == [
        FieldType.NUMBER,
        FieldType.STRING,
        FieldType.NUMBER,
        FieldType.BOOLEAN,
    ]
    assert [d.is_date for d in session.schema] == [False, False, True, False]
    messages = recorder.messages()
    assert "old" not in messages
    assert messages[0].startswith("File selected: people.csv (")
    assert "Auto-detected 4 fields: id, name, Signup Date, active" in messages
    assert "Detected 1 potential date fields" in messages
    assert "Auto-detected 3 non-string field types" in messages


def test_parse_error_keeps_previous_sheet(session, recorder) -> None:
    session.load_file(CSV, "people.csv")
    with pytest.raises(ParseError):
        session.load_file(b"PK\x03\x04garbage", "bad.xlsx")

    assert session.total_rows == 3
    assert session.schema.names[0] == "id"
    assert recorder.messages("error")[-1].startswith("Error reading file:")


def test_load_path(session, tmp_path) -> None:
    path = tmp_path / "rows.csv"
    path.write_bytes(CSV)
    session.load_path(path)
    assert session.filename == "rows.csv"
    with pytest.raises(FileNotFoundError):
        session.load_path(tmp_path / "missing.csv")


def test_custom_header_rows_never_drop_below_one(session) -> None:
    assert session.remove_custom_header(0) is False
    session.add_custom_header()
    session.update_custom_header(1, key="X-Trace", value="1")
    assert session.remove_custom_header(0) is True
    assert [(h.key, h.value) for h in session.config.custom_headers] == [("X-Trace", "1")]


def test_attach_image_from_path(session, recorder, tmp_path) -> None:
    image = tmp_path / "logo.png"
    image.write_bytes(b"\x89PNG" + b"0" * 1020)
    session.load_file(CSV, "people.csv")
    session.add_field()
    session.rename_field(4, "logo")
    session.set_image_field(4, True)

    attachment = session.attach_image(4, image)

    assert attachment.content_type == "image/png"
    assert recorder.messages("success")[-1] == "Image uploaded for field logo: logo.png (1.00 KB)"


def test_submit_end_to_end(transport, pacer, recorder) -> None:
    statuses = []
    store = MemoryConfigStore(PersistedConfig(base_url="https://api.example.com", auth_token="tok"))
    session = SubmissionSession(
        store,
        transport=transport,
        pacer=pacer,
        recorder=recorder,
        status_cb=statuses.append,
    )
    session.load_file(CSV, "people.csv")
    session.update_config(endpoint_path="/people", batch_size=2)

    report = session.submit()

    assert report.state is SubmissionState.COMPLETED
    assert report.success_count == 3
    assert [r.json for r in transport.requests] == [
        {"id": 1, "name": "Ada", "Signup Date": "2025-07-15", "active": True},
        {"id": 2, "name": "Bob", "Signup Date": "2024-01-01", "active": False},
        {"id": 3, "name": "Cy", "Signup Date": "", "active": True},
    ]
    assert transport.requests[0].url == "https://api.example.com/people"
    assert session.status == "Complete! Success: 3 | Failed: 0"
    assert statuses[-1] == session.status
    assert "File selected" not in " ".join(recorder.messages())


def test_submit_multipart_with_image(session, transport) -> None:
    session.load_file(CSV, "people.csv")
    session.update_config(endpoint_path="/people")
    session.set_image_field(1, True)

    aborted = session.submit()
    assert aborted.state is SubmissionState.ABORTED
    assert aborted.reasons == ["Please upload an image for field name"]

    session.attach_image(1, Attachment(filename="n.jpg", content=b"jpg", content_type="image/jpeg"))
    report = session.submit()

    assert report.success_count == 3
    first = transport.requests[0]
    assert first.is_multipart
    assert first.files == {"name": ("n.jpg", b"jpg", "image/jpeg")}
    assert first.data == {"id": "1", "Signup Date": "2025-07-15", "active": "true"}


def test_submit_without_file_aborts(session, transport) -> None:
    session.update_config(endpoint_path="/people")
    report = session.submit()
    assert report.reasons == ["Please upload a CSV file"]
    assert transport.requests == []


def test_server_errors_do_not_stop_session(recorder, pacer) -> None:
    transport = RecordingTransport({2: MockResponse(status_code=422, reason="Unprocessable Entity")})
    store = MemoryConfigStore(PersistedConfig(base_url="https://api.example.com", auth_token="tok"))
    session = SubmissionSession(store, transport=transport, pacer=pacer, recorder=recorder)
    session.load_file(CSV, "people.csv")
    session.update_config(endpoint_path="/people")

    report = session.submit()

    assert report.failed_rows == [2]
    assert len(transport.requests) == 3
    assert "Row 2 failed: 422 Unprocessable Entity" in recorder.messages("error")
