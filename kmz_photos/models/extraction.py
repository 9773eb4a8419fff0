"""Data model for a single photo-extraction run.

A run reads one KMZ archive, scans its KML placemarks, resolves each
placemark's image references and produces an ``ExtractionResult``.
All records here are immutable; the run log is append-only while the
run is in progress and frozen into a tuple when it ends.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kmz_photos.core.constants import DEFAULT_OUTPUT_SUFFIX, build_download_name


class LogStatus(str, Enum):
    """Severity of a run-log entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ReferenceKind(str, Enum):
    """How an image reference is stored."""

    REMOTE = "remote"
    INLINE = "inline"
    ARCHIVE = "archive"


class ExtractionPhase(str, Enum):
    """Lifecycle of one extraction run."""

    IDLE = "idle"
    LOADING = "loading"
    SCANNING = "scanning"
    RESOLVING = "resolving"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One line of the run's audit trail.

    Attributes:
        status: Severity (``info``, ``success``, ``warning``, ``error``).
        message: Human-readable message naming the placemark or file.
        code: Machine-readable code of the condition that produced the
            entry (e.g. ``"DUPLICATE_NAME"``); empty for plain progress.
    """

    status: LogStatus
    message: str
    code: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"status": self.status.value, "message": self.message, "code": self.code}


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    """Per-run switches.

    Attributes:
        keep_structure: Keep the ``"?-"`` marker prefix in output filenames.
        extract_all_images: Process every named placemark instead of only
            those whose name starts with ``"?-"``.
    """

    keep_structure: bool = False
    extract_all_images: bool = False


@dataclass(frozen=True, slots=True)
class Placemark:
    """A named KML placemark and the raw image references it carries.

    Attributes:
        name: Trimmed ``<name>`` text.
        references: Raw references in collection order (description first,
            then ``pictures`` data fields). Duplicates are kept.
        element: The lxml element the record was built from.
    """

    name: str
    references: tuple[str, ...] = ()
    element: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ExtractedImage:
    """A photo ready to be written to the output archive.

    Attributes:
        name: Output filename, unique within one run.
        data: Base64 payload (``str``) for inline images, raw entry bytes
            for images read from the archive.
        mime_type: Declared MIME type of an inline image.
        original_archive_path: Source entry path of an archive image.
    """

    name: str
    data: bytes | str
    mime_type: str | None = None
    original_archive_path: str | None = None

    @property
    def content(self) -> bytes:
        """Decoded image bytes.

        Raises:
            binascii.Error: If an inline payload is not valid base64.
        """
        if isinstance(self.data, bytes):
            return self.data
        return base64.b64decode(self.data)

    @property
    def is_inline(self) -> bool:
        return isinstance(self.data, str)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Terminal artifact of one run.

    Attributes:
        total_placemarks: Placemarks that passed the name and marker filters.
        total_photos: Images written to the output archive.
        logs: The complete run log, in the order it was written.
        output_archive_bytes: The output zip.
        images: The images written to the output archive.
        source_name: Name of the uploaded archive, if known.
        output_suffix: Suffix used to build ``download_name``.
    """

    total_placemarks: int
    total_photos: int
    logs: tuple[LogEntry, ...]
    output_archive_bytes: bytes
    images: tuple[ExtractedImage, ...] = ()
    source_name: str = ""
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX

    @property
    def warnings(self) -> tuple[LogEntry, ...]:
        """Log entries with ``warning`` or ``error`` status."""
        return tuple(
            entry
            for entry in self.logs
            if entry.status in (LogStatus.WARNING, LogStatus.ERROR)
        )

    @property
    def download_name(self) -> str:
        """Filename to offer the output archive under."""
        return build_download_name(self.source_name, self.output_suffix)

    @property
    def image_names(self) -> list[str]:
        return [image.name for image in self.images]


def decode_payload_size(image: ExtractedImage) -> int:
    """Return the decoded size of *image* in bytes, or ``0`` if undecodable."""
    try:
        return len(image.content)
    except (binascii.Error, ValueError):
        return 0
