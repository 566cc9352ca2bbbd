from __future__ import annotations

import pytest
import requests

from csvapi.core.errors import RowSubmissionError
from csvapi.services.submit.models import OutboundRequest
from csvapi.services.submit.transport import HttpTransport, error_body, is_success, redact_url
from tests.fakes import FakeSession, MockResponse


def _request(**overrides) -> OutboundRequest:
    values = {
        "method": "POST",
        "url": "https://api.example.com/items?token=abc",
        "headers": {"Authorization": "Bearer t"},
        "json": {"id": 1},
    }
    values.update(overrides)
    return OutboundRequest(**values)


def test_send_passes_request_through_session() -> None:
    session = FakeSession([MockResponse(status_code=201)])
    transport = HttpTransport(session=session, timeout=5)

    response = transport.send(_request())

    assert response.status_code == 201
    assert session.calls == [("POST", "https://api.example.com/items?token=abc")]
    kwargs = session.call_kwargs[0]
    assert kwargs["json"] == {"id": 1}
    assert kwargs["files"] is None
    assert kwargs["timeout"] == 5
    assert session.headers["User-Agent"].startswith("csvapi/")


def test_multipart_fields_forwarded() -> None:
    session = FakeSession()
    transport = HttpTransport(session=session, timeout=5)
    files = {"photo": ("a.png", b"x", "image/png")}

    transport.send(_request(json=None, data={"name": "A"}, files=files))

    assert session.call_kwargs[0]["data"] == {"name": "A"}
    assert session.call_kwargs[0]["files"] == files


def test_connection_error_becomes_row_error() -> None:
    session = FakeSession([requests.ConnectionError("refused")])
    transport = HttpTransport(session=session, timeout=5)

    with pytest.raises(RowSubmissionError) as excinfo:
        transport.send(_request())
    assert str(excinfo.value) == "refused"
    assert excinfo.value.status_code is None


def test_timeout_becomes_row_error() -> None:
    session = FakeSession([requests.Timeout("slow")])
    transport = HttpTransport(session=session, timeout=5)

    with pytest.raises(RowSubmissionError, match="timed out"):
        transport.send(_request())


def test_close_releases_session() -> None:
    session = FakeSession()
    HttpTransport(session=session, timeout=1).close()
    assert session.closed


def test_timeout_defaults_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("CSVAPI_TIMEOUT_SEC", "7.5")
    session = FakeSession()
    HttpTransport(session=session).send(_request())
    assert session.call_kwargs[0]["timeout"] == 7.5


@pytest.mark.parametrize("status, expected", [(200, True), (204, True), (299, True), (199, False), (302, False), (500, False)])
def test_is_success(status, expected) -> None:
    assert is_success(status) is expected


def test_error_body_is_truncated() -> None:
    assert error_body(MockResponse(text_data="x" * 250)) == "x" * 200 + "..."
    assert error_body(MockResponse(text_data="short")) == "short"


def test_redact_url_drops_query() -> None:
    assert redact_url("https://h/p?token=1") == "https://h/p"
    assert redact_url("https://h/p") == "https://h/p"
