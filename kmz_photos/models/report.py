"""Pydantic run report for the ``/extract/report`` endpoint.

The report is the JSON "flight recorder" of one extraction: what was
uploaded, how many placemarks and photos were found, which images were
written and the full run log.  It carries no image bytes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from kmz_photos.models.extraction import decode_payload_size

if TYPE_CHECKING:
    from kmz_photos.models.extraction import ExtractionResult

# Schema version for forward compatibility
SCHEMA_VERSION = "kmz-photos-report-v1"


class ReportImage(BaseModel):
    """One image written to the output archive.

    Attributes:
        name: Output filename.
        mime_type: Declared MIME type for inline images.
        original_archive_path: Source entry path for archive images.
        size_bytes: Decoded image size.
    """

    name: str
    mime_type: str | None = None
    original_archive_path: str | None = None
    size_bytes: int = 0


class ReportLogEntry(BaseModel):
    """One run-log line."""

    status: str
    message: str
    code: str = ""


class ExtractionReport(BaseModel):
    """Top-level run report.

    Attributes:
        schema_version: Report schema identifier.
        source_name: Uploaded archive name.
        download_name: Filename the output archive is offered under.
        total_placemarks: Placemarks scanned.
        total_photos: Images written to the output archive.
        warning_count: Log entries with ``warning`` or ``error`` status.
        images: Per-image summary.
        logs: Full run log.
    """

    schema_version: str = SCHEMA_VERSION
    source_name: str = ""
    download_name: str = ""
    total_placemarks: int = 0
    total_photos: int = 0
    warning_count: int = 0
    images: list[ReportImage] = Field(default_factory=list)
    logs: list[ReportLogEntry] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ExtractionResult) -> ExtractionReport:
        """Build a report from an ``ExtractionResult``."""
        return cls(
            source_name=result.source_name,
            download_name=result.download_name,
            total_placemarks=result.total_placemarks,
            total_photos=result.total_photos,
            warning_count=len(result.warnings),
            images=[
                ReportImage(
                    name=image.name,
                    mime_type=image.mime_type,
                    original_archive_path=image.original_archive_path,
                    size_bytes=decode_payload_size(image),
                )
                for image in result.images
            ],
            logs=[ReportLogEntry(**entry.to_dict()) for entry in result.logs],
        )

    def to_json(self) -> str:
        """Serialise to a JSON string (2-space indent)."""
        return self.model_dump_json(indent=2)
