"""Azure Functions entry point — KMZ Photo Extractor.

This module registers the HTTP functions using the Python v2
programming model.

All business logic lives in the kmz_photos package. This file is purely
the wiring layer between Azure Functions bindings and application code.
"""

from __future__ import annotations

import logging

import azure.functions as func

from kmz_photos.core.config import ExtractorConfig
from kmz_photos.core.exceptions import PipelineError
from kmz_photos.core.ingress import (
    build_error_response_body,
    parse_extraction_request,
    status_code_for_error,
)
from kmz_photos.models.report import ExtractionReport
from kmz_photos.orchestrators.extraction import extract_photos

app = func.FunctionApp(http_auth_level=func.AuthLevel.FUNCTION)

logger = logging.getLogger("kmz_photos.function_app")

# Fail fast on bad configuration at startup.
CONFIG = ExtractorConfig.from_env()


# ---------------------------------------------------------------------------
# HTTP: Extract photos → zip download
# ---------------------------------------------------------------------------


@app.function_name("extract_photos")
@app.route(route="extract", methods=["POST"])
def extract_photos_http(req: func.HttpRequest) -> func.HttpResponse:
    """Extract placemark photos from an uploaded KMZ.

    Request:
        Body: the raw KMZ archive.
        Query: ``filename``, ``extractAllImages``, ``keepStructure``.

    Returns:
        ``200`` with the photo zip as an attachment named
        ``<base>_extracted_photos.zip``, plus ``X-Total-Placemarks`` and
        ``X-Total-Photos`` headers; a JSON error payload otherwise.
    """
    correlation_id = ""
    try:
        request = parse_extraction_request(
            req.get_body(), req.params, req.headers, config=CONFIG
        )
        correlation_id = request.correlation_id

        logger.info(
            "extract_photos started | source=%s | size=%d | extract_all=%s | correlation_id=%s",
            request.source_name,
            len(request.data),
            request.options.extract_all_images,
            correlation_id,
        )

        result = extract_photos(
            request.data,
            request.options,
            source_name=request.source_name,
            output_suffix=CONFIG.output_suffix,
        )
    except PipelineError as exc:
        return _error_response(exc, correlation_id)

    logger.info(
        "extract_photos completed | source=%s | placemarks=%d | photos=%d | correlation_id=%s",
        result.source_name,
        result.total_placemarks,
        result.total_photos,
        correlation_id,
    )

    return func.HttpResponse(
        body=result.output_archive_bytes,
        status_code=200,
        mimetype="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{result.download_name}"',
            "X-Total-Placemarks": str(result.total_placemarks),
            "X-Total-Photos": str(result.total_photos),
            "X-Correlation-Id": correlation_id,
        },
    )


# ---------------------------------------------------------------------------
# HTTP: Extract photos → JSON run report
# ---------------------------------------------------------------------------


@app.function_name("extract_photos_report")
@app.route(route="extract/report", methods=["POST"])
def extract_photos_report_http(req: func.HttpRequest) -> func.HttpResponse:
    """Run an extraction and return the JSON run report instead of the zip."""
    correlation_id = ""
    try:
        request = parse_extraction_request(
            req.get_body(), req.params, req.headers, config=CONFIG
        )
        correlation_id = request.correlation_id
        result = extract_photos(
            request.data,
            request.options,
            source_name=request.source_name,
            output_suffix=CONFIG.output_suffix,
        )
    except PipelineError as exc:
        return _error_response(exc, correlation_id)

    report = ExtractionReport.from_result(result)
    logger.info(
        "extract_photos_report completed | source=%s | photos=%d | warnings=%d",
        report.source_name,
        report.total_photos,
        report.warning_count,
    )
    return func.HttpResponse(
        body=report.to_json(),
        status_code=200,
        mimetype="application/json",
        headers={"X-Correlation-Id": correlation_id},
    )


def _error_response(exc: PipelineError, correlation_id: str) -> func.HttpResponse:
    correlation_id = exc.correlation_id or correlation_id
    status_code = status_code_for_error(exc)
    logger.warning(
        "Extraction request rejected | status=%d | code=%s | error=%s | correlation_id=%s",
        status_code,
        exc.code,
        exc.message,
        correlation_id,
    )
    return func.HttpResponse(
        body=build_error_response_body(exc, correlation_id=correlation_id),
        status_code=status_code,
        mimetype="application/json",
        headers={"X-Correlation-Id": correlation_id},
    )
