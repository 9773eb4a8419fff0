"""Tests for the JSON run report and download naming."""

from __future__ import annotations

import json

import pytest

from kmz_photos.core.constants import build_download_name
from kmz_photos.models.extraction import ExtractedImage, LogStatus, decode_payload_size
from kmz_photos.models.report import SCHEMA_VERSION, ExtractionReport
from kmz_photos.orchestrators.extraction import extract_photos
from tests.conftest import JPEG_BYTES, build_kmz, kml_document, placemark_xml


class TestExtractionReport:
    def test_from_result(self) -> None:
        kml = kml_document(
            placemark_xml("?-Pole 12", description='<img src="pole12.jpg"><img src="x.jpg">'),
            placemark_xml("?-Roof", pictures="data:image/png;base64,QUJD"),
        )
        result = extract_photos(
            build_kmz({"doc.kml": kml, "images/pole12.jpg": JPEG_BYTES}),
            source_name="survey.kmz",
        )
        report = ExtractionReport.from_result(result)

        assert report.schema_version == SCHEMA_VERSION
        assert report.source_name == "survey.kmz"
        assert report.download_name == "survey_extracted_photos.zip"
        assert report.total_placemarks == 2
        assert report.total_photos == 2
        assert report.warning_count == 1
        assert [image.name for image in report.images] == ["Pole 12.jpg", "Roof.png"]
        assert report.images[0].original_archive_path == "images/pole12.jpg"
        assert report.images[0].size_bytes == len(JPEG_BYTES)
        assert report.images[1].mime_type == "image/png"
        assert report.images[1].size_bytes == 3
        assert len(report.logs) == len(result.logs)

    def test_to_json(self, pole_kmz: bytes) -> None:
        report = ExtractionReport.from_result(extract_photos(pole_kmz))
        payload = json.loads(report.to_json())

        assert payload["schema_version"] == SCHEMA_VERSION
        assert payload["total_photos"] == 1
        assert payload["logs"][0]["status"] == LogStatus.INFO.value
        assert "output_archive_bytes" not in payload


class TestDecodePayloadSize:
    def test_bytes(self) -> None:
        assert decode_payload_size(ExtractedImage(name="a.jpg", data=b"1234")) == 4

    def test_base64(self) -> None:
        assert decode_payload_size(ExtractedImage(name="a.png", data="QUJD")) == 3

    def test_undecodable(self) -> None:
        assert decode_payload_size(ExtractedImage(name="a.png", data="Q")) == 0


class TestBuildDownloadName:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("site survey.kmz", "site survey_extracted_photos.zip"),
            ("archive.v2.kmz", "archive.v2_extracted_photos.zip"),
            ("uploads/area.kmz", "area_extracted_photos.zip"),
            ("C:\\maps\\area.KMZ", "area_extracted_photos.zip"),
            ("noext", "noext_extracted_photos.zip"),
            ("", "photos_extracted_photos.zip"),
        ],
    )
    def test_names(self, source: str, expected: str) -> None:
        assert build_download_name(source) == expected

    def test_custom_suffix(self) -> None:
        assert build_download_name("a.kmz", "-images.zip") == "a-images.zip"
