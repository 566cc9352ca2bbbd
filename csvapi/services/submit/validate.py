"""Pre-flight checks run before any record is sent."""

from __future__ import annotations

from urllib.parse import urlsplit

from csvapi.core.errors import ValidationError
from csvapi.services.fields.schema import FieldSchema

from .models import RunConfig

ALLOWED_SCHEMES = {"http", "https"}


def is_valid_url(url: str) -> bool:
    """Accept absolute http(s) URLs with a host.

    Surrounding whitespace is ignored and spaces in the path are allowed
    (requests percent-encodes them). Whitespace inside the host and schemes
    other than http/https are rejected.
    """

    candidate = url.strip()
    if not candidate:
        return False
    try:
        parts = urlsplit(candidate)
        parts.port  # noqa: B018 - raises ValueError on malformed ports
    except ValueError:
        return False
    if any(ch.isspace() for ch in parts.netloc):
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.hostname)


def collect_reasons(*, has_file: bool, schema: FieldSchema, config: RunConfig) -> list[str]:
    """Return every failing check, in a stable order."""

    reasons: list[str] = []
    if not has_file:
        reasons.append("Please upload a CSV file")
    if not config.base_url.strip():
        reasons.append("Base URL is required")
    if not config.endpoint_path.strip():
        reasons.append("API Endpoint is required")
    if not config.auth_token.strip():
        reasons.append("Auth Token is required")
    if not schema.active_fields():
        reasons.append("At least one field name is required")
    if not is_valid_url(config.url):
        reasons.append("Invalid URL format")
    for index, descriptor in schema.missing_attachments():
        reasons.append(f"Please upload an image for field {descriptor.label(index)}")
    return reasons


def validate_submission(*, has_file: bool, schema: FieldSchema, config: RunConfig) -> None:
    """Raise ``ValidationError`` carrying all reasons when any check fails."""

    reasons = collect_reasons(has_file=has_file, schema=schema, config=config)
    if reasons:
        raise ValidationError(reasons)


__all__ = ["collect_reasons", "is_valid_url", "validate_submission"]
