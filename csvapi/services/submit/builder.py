"""Assemble one outbound request per record."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Callable, Mapping

from csvapi.services.fields.schema import Attachment, FieldDescriptor, FieldSchema
from csvapi.services.fields.transform import transform_value

from .models import OutboundRequest, RunConfig
from .transport import redact_url

AUTHORIZATION_HEADER = "Authorization"
CONTENT_TYPE_HEADER = "Content-Type"
JSON_CONTENT_TYPE = "application/json"

ConversionHook = Callable[[FieldDescriptor, Any, Any], None]


def build_headers(config: RunConfig, *, json_body: bool) -> dict[str, str]:
    headers = {AUTHORIZATION_HEADER: f"Bearer {config.auth_token}"}
    for pair in config.custom_headers:
        if pair.is_complete():
            headers[pair.key.strip()] = pair.value.strip()
    if json_body:
        headers[CONTENT_TYPE_HEADER] = JSON_CONTENT_TYPE
    return headers


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def build_request(
    record: Mapping[str, Any],
    schema: FieldSchema,
    config: RunConfig,
    *,
    on_convert: ConversionHook | None = None,
) -> OutboundRequest:
    """Build the request for ``record``.

    Image attachments are assumed to be bound; the submitter validates that
    before the first record is built. ``on_convert`` is called for every
    non-image field whose outbound value differs from the raw cell.
    """

    multipart = schema.has_image_fields()
    payload: dict[str, Any] = {}
    files: dict[str, tuple[str, bytes, str]] = {}

    for descriptor in schema.active_fields():
        name = descriptor.clean_name
        raw = record.get(name, "")
        value = transform_value(raw, descriptor)
        if descriptor.is_image:
            attachment: Attachment | None = value
            if attachment is not None:
                files[name] = (attachment.filename, attachment.content, attachment.content_type)
            continue
        if on_convert is not None and raw is not None and value != raw:
            on_convert(descriptor, raw, value)
        payload[name] = value

    if multipart:
        return OutboundRequest(
            method=config.method,
            url=config.url,
            headers=build_headers(config, json_body=False),
            data={name: _form_value(value) for name, value in payload.items()},
            files=files,
        )
    return OutboundRequest(
        method=config.method,
        url=config.url,
        headers=build_headers(config, json_body=True),
        json={name: _json_safe(value) for name, value in payload.items()},
    )


def describe_conversion(descriptor: FieldDescriptor, raw: Any, value: Any) -> str:
    if descriptor.is_date:
        return f"Converting {descriptor.clean_name}: {raw} -> {value}"
    return f"Converting {descriptor.clean_name} to {descriptor.type.value}: {raw} -> {value}"


def log_request(logger: logging.Logger, row_number: int, request: OutboundRequest) -> None:
    logger.info(
        "csvapi.builder row=%d method=%s url=%s header_keys=%s multipart=%s",
        row_number,
        request.method,
        redact_url(request.url),
        ",".join(sorted(request.headers)),
        request.is_multipart,
    )


__all__ = [
    "AUTHORIZATION_HEADER",
    "JSON_CONTENT_TYPE",
    "build_headers",
    "build_request",
    "describe_conversion",
    "log_request",
]
