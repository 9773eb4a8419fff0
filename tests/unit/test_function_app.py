"""Tests for the HTTP wiring in ``function_app``."""

from __future__ import annotations

import json

import azure.functions as func
import pytest

import function_app
from tests.conftest import JPEG_BYTES, build_kmz, read_zip


def _user_function(registered: object):
    """Return the plain callable behind a v2 decorated function."""
    build = getattr(registered, "build", None)
    if build is None:
        return registered
    return build().get_user_function()


def _request(body: bytes, route: str = "extract", **params: str) -> func.HttpRequest:
    return func.HttpRequest(
        method="POST",
        url=f"/api/{route}",
        headers={"x-correlation-id": "test-corr"},
        params=params,
        body=body,
    )


class TestExtractRoute:
    def test_returns_zip_download(self, pole_kmz: bytes) -> None:
        handler = _user_function(function_app.extract_photos_http)
        resp = handler(_request(pole_kmz, filename="site survey.kmz"))

        assert resp.status_code == 200
        assert resp.mimetype == "application/zip"
        assert resp.headers["Content-Disposition"] == (
            'attachment; filename="site survey_extracted_photos.zip"'
        )
        assert resp.headers["X-Total-Placemarks"] == "1"
        assert resp.headers["X-Total-Photos"] == "1"
        assert resp.headers["X-Correlation-Id"] == "test-corr"
        assert read_zip(resp.get_body()) == {"Pole 12.jpg": JPEG_BYTES}

    def test_missing_kml_is_422(self) -> None:
        handler = _user_function(function_app.extract_photos_http)
        resp = handler(_request(build_kmz({"a.jpg": JPEG_BYTES})))

        assert resp.status_code == 422
        error = json.loads(resp.get_body())["error"]
        assert error["code"] == "KML_MISSING"
        assert error["correlation_id"] == "test-corr"
        assert resp.headers["X-Correlation-Id"] == "test-corr"

    @pytest.mark.parametrize(
        ("body", "params", "status"),
        [
            (b"", {}, 400),
            (b"PK", {"keepStructure": "maybe"}, 400),
        ],
    )
    def test_contract_errors(self, body: bytes, params: dict[str, str], status: int) -> None:
        handler = _user_function(function_app.extract_photos_http)
        resp = handler(_request(body, **params))
        assert resp.status_code == status
        assert resp.headers["X-Correlation-Id"] == "test-corr"


class TestReportRoute:
    def test_returns_json_report(self, pole_kmz: bytes) -> None:
        handler = _user_function(function_app.extract_photos_report_http)
        resp = handler(_request(pole_kmz, route="extract/report", filename="a.kmz"))

        assert resp.status_code == 200
        report = json.loads(resp.get_body())
        assert report["download_name"] == "a_extracted_photos.zip"
        assert report["total_photos"] == 1
        assert report["images"][0]["name"] == "Pole 12.jpg"

    def test_bad_archive_is_422(self) -> None:
        handler = _user_function(function_app.extract_photos_report_http)
        resp = handler(_request(b"not a zip", route="extract/report"))
        assert resp.status_code == 422
        assert resp.headers["X-Correlation-Id"] == "test-corr"
