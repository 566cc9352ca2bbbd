"""HTTP transport for record submissions."""

from __future__ import annotations

import logging
from typing import Protocol

import requests
from requests import Response
from requests.exceptions import RequestException, Timeout

from csvapi.core.errors import RowSubmissionError
from csvapi.core.logger import get_logger
from csvapi.core.settings import request_timeout

from .models import OutboundRequest

LOGGER = get_logger()

USER_AGENT = "csvapi/0.1"
MAX_ERROR_BODY = 200


class Transport(Protocol):
    """Sends one request and returns the raw response."""

    def send(self, request: OutboundRequest) -> Response:
        """Send ``request``; transport faults raise ``RowSubmissionError``."""


class HttpTransport:
    """Request helper around a reusable ``requests`` session. No retries."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._timeout = timeout or request_timeout()
        self._logger = logger or LOGGER

    @property
    def session(self) -> requests.Session:
        return self._session

    def send(self, request: OutboundRequest) -> Response:
        try:
            return self._session.request(
                request.method,
                request.url,
                headers=request.headers,
                json=request.json,
                data=request.data,
                files=request.files,
                timeout=self._timeout,
            )
        except Timeout as exc:
            self._logger.warning(
                "csvapi.http timeout method=%s url=%s",
                request.method,
                redact_url(request.url),
                exc_info=exc,
            )
            raise RowSubmissionError("Request timed out") from exc
        except RequestException as exc:
            self._logger.warning(
                "csvapi.http connection_error method=%s url=%s error=%s",
                request.method,
                redact_url(request.url),
                type(exc).__name__,
            )
            raise RowSubmissionError(str(exc) or type(exc).__name__) from exc

    def close(self) -> None:
        """Release the underlying HTTP session."""

        self._session.close()


def is_success(status: int) -> bool:
    return 200 <= status < 300


def error_body(response: Response) -> str:
    text = response.text or ""
    if len(text) > MAX_ERROR_BODY:
        text = text[:MAX_ERROR_BODY] + "..."
    return text


def redact_url(url: str) -> str:
    if "?" in url:
        return url.split("?")[0]
    return url


__all__ = ["HttpTransport", "Transport", "error_body", "is_success", "redact_url"]
