"""Data models and schemas.

Defines the data structures used throughout an extraction run:
- Placemark: A named KML placemark and its raw image references
- ExtractedImage: A photo ready to be written to the output archive
- LogEntry: One line of the run's audit trail
- ExtractionOptions / ExtractionResult: Run input switches and output
- ExtractionReport: Pydantic JSON summary of a run
"""

from kmz_photos.models.extraction import (
    ExtractedImage,
    ExtractionOptions,
    ExtractionPhase,
    ExtractionResult,
    LogEntry,
    LogStatus,
    Placemark,
    ReferenceKind,
)
from kmz_photos.models.report import ExtractionReport

__all__ = [
    "ExtractedImage",
    "ExtractionOptions",
    "ExtractionPhase",
    "ExtractionReport",
    "ExtractionResult",
    "LogEntry",
    "LogStatus",
    "Placemark",
    "ReferenceKind",
]
