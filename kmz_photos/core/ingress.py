"""Thin ingress boundary helpers for the Azure Functions entrypoints.

Keeps transport concerns out of ``function_app.py`` so that the HTTP
layer only binds triggers and hands off:

- **parse_extraction_request** — validates the uploaded body and query
  flags and builds an ``ExtractionRequest``.
- **build_error_response_body** — renders a ``PipelineError`` as the
  structured JSON error payload.
- **status_code_for_error** — maps an error's category to an HTTP status.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass

from kmz_photos.core.config import ConfigValidationError, ExtractorConfig, parse_bool
from kmz_photos.core.constants import DEFAULT_SOURCE_NAME
from kmz_photos.core.exceptions import ContractError, PipelineError
from kmz_photos.models.extraction import ExtractionOptions

logger = logging.getLogger("kmz_photos.core.ingress")

# Query parameter names accepted by the HTTP endpoints.
PARAM_FILENAME = "filename"
PARAM_EXTRACT_ALL = "extractAllImages"
PARAM_KEEP_STRUCTURE = "keepStructure"

CORRELATION_HEADER = "x-correlation-id"


@dataclass(frozen=True, slots=True)
class ExtractionRequest:
    """Validated input for one extraction run.

    Attributes:
        data: Uploaded KMZ bytes.
        source_name: Upload name (``filename`` query parameter).
        options: Effective run switches.
        correlation_id: Caller-supplied or generated request identifier.
    """

    data: bytes
    source_name: str
    options: ExtractionOptions
    correlation_id: str


def parse_extraction_request(
    body: bytes | None,
    params: Mapping[str, str],
    headers: Mapping[str, str] | None = None,
    *,
    config: ExtractorConfig,
) -> ExtractionRequest:
    """Validate an upload and build an ``ExtractionRequest``.

    Args:
        body: Raw request body (the KMZ archive).
        params: Query parameters.
        headers: Request headers; ``x-correlation-id`` is propagated.
        config: Extractor configuration supplying defaults and limits.

    Raises:
        ContractError: If the body is empty or too large, or a flag is
            not a boolean literal.
    """
    correlation_id = _correlation_id(headers or {})

    if not body:
        msg = "Request body is empty; upload the KMZ archive as the request body"
        raise ContractError(
            msg, stage="ingress", code="EMPTY_BODY", correlation_id=correlation_id
        )

    if len(body) > config.max_archive_bytes:
        msg = (
            f"Upload is {len(body)} bytes, larger than the "
            f"{config.max_archive_bytes} byte limit"
        )
        raise ContractError(
            msg, stage="ingress", code="PAYLOAD_TOO_LARGE", correlation_id=correlation_id
        )

    defaults = config.to_options()
    options = ExtractionOptions(
        keep_structure=_flag(
            params, PARAM_KEEP_STRUCTURE, defaults.keep_structure, correlation_id
        ),
        extract_all_images=_flag(
            params, PARAM_EXTRACT_ALL, defaults.extract_all_images, correlation_id
        ),
    )

    source_name = str(params.get(PARAM_FILENAME, "") or DEFAULT_SOURCE_NAME)

    return ExtractionRequest(
        data=body,
        source_name=source_name,
        options=options,
        correlation_id=correlation_id,
    )


def build_error_response_body(error: PipelineError, *, correlation_id: str = "") -> str:
    """Serialise *error* to the JSON error payload."""
    payload = error.to_error_dict()
    if correlation_id and not payload.get("correlation_id"):
        payload["correlation_id"] = correlation_id
    return json.dumps({"error": payload})


def status_code_for_error(error: PipelineError) -> int:
    """Map an error to an HTTP status code.

    ``ContractError`` → 400 (413 for oversized uploads), validation
    failures (bad archive, missing or malformed KML) → 422, anything
    else → 500.
    """
    if isinstance(error, ContractError):
        return 413 if error.code == "PAYLOAD_TOO_LARGE" else 400
    if error.category == "validation":
        return 422
    return 500


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _flag(params: Mapping[str, str], key: str, default: bool, correlation_id: str) -> bool:
    raw = params.get(key)
    if raw is None:
        return default
    try:
        return parse_bool(key, raw)
    except ConfigValidationError as exc:
        raise ContractError(
            f"Query parameter {key}={raw!r} must be a boolean",
            stage="ingress",
            code="INVALID_FLAG",
            correlation_id=correlation_id,
        ) from exc


def _correlation_id(headers: Mapping[str, str]) -> str:
    for key, value in headers.items():
        if key.lower() == CORRELATION_HEADER and value:
            return str(value)
    return uuid.uuid4().hex
