"""Hand-written doubles for the HTTP session, transport, and pacer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from csvapi.services.submit.models import OutboundRequest


@dataclass
class MockResponse:
    status_code: int = 200
    json_data: dict[str, Any] | None = None
    text_data: str | None = None
    reason: str = "OK"
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> dict[str, Any]:
        if self.json_data is None:
            raise ValueError("JSON body not set")
        return self.json_data

    @property
    def text(self) -> str:
        if self.text_data is not None:
            return self.text_data
        if self.json_data is not None:
            return json.dumps(self.json_data)
        return ""


class FakeSession:
    """Stands in for ``requests.Session``; queued items are returned or raised in order."""

    def __init__(self, responses: list[MockResponse | Exception] | None = None) -> None:
        self._responses = list(responses or [])
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.call_kwargs: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        self.calls.append((method, url))
        self.call_kwargs.append(kwargs)
        if not self._responses:
            return MockResponse()
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class RecordingTransport:
    """Transport double keyed by 1-based call number."""

    def __init__(self, responses: dict[int, MockResponse | Exception] | None = None) -> None:
        self.responses = responses or {}
        self.requests: list[OutboundRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def send(self, request: OutboundRequest) -> MockResponse:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.requests.append(request)
            item = self.responses.get(len(self.requests), MockResponse())
            if isinstance(item, Exception):
                raise item
            return item
        finally:
            self.in_flight -= 1


class RecordingPacer:
    def __init__(self) -> None:
        self.waits: list[int] = []

    def wait(self, delay_ms: int) -> None:
        self.waits.append(delay_ms)


