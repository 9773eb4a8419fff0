"""Image resolution: turn raw placemark references into output images.

A raw reference is one of:

- a remote ``http://`` / ``https://`` URL: skipped silently;
- a ``data:<mime>;base64,<payload>`` URI: decoded inline;
- an archive-relative path: matched against the archive's file entries.

Archive paths are matched in three tiers, each scanned in archive
enumeration order: exact normalised path, then path suffix
(``.../<reference>``), then basename.  Real archives vary in whether
references are absolute-from-root, relative or bare filenames.

Generated names are unique per run; a later image that would reuse a
name is dropped and logged, never renamed.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import TYPE_CHECKING

from kmz_photos.core.exceptions import (
    ArchiveFileNotFoundWarning,
    DuplicateNameWarning,
    InlinePayloadError,
    PipelineError,
    RecoverableError,
    ReferenceFormatWarning,
)
from kmz_photos.models.extraction import ExtractedImage, LogEntry, LogStatus, ReferenceKind
from kmz_photos.utils.filenames import (
    DEFAULT_EXTENSION,
    extension_for_mime_type,
    generate_file_name,
)
from kmz_photos.utils.paths import normalize_path, path_basename, path_extension

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kmz_photos.core.archive import KmzArchive

logger = logging.getLogger("kmz_photos.activities.resolve_images")

_DATA_URI_RE = re.compile(r"^data:([A-Za-z\-+/]+);base64,(.+)\Z")

_REMOTE_PREFIXES = ("http://", "https://")
_INLINE_PREFIX = "data:"

_LOG_LEVELS = {
    LogStatus.INFO: logging.INFO,
    LogStatus.SUCCESS: logging.INFO,
    LogStatus.WARNING: logging.WARNING,
    LogStatus.ERROR: logging.ERROR,
}


def classify_reference(reference: str) -> ReferenceKind:
    """Classify a raw reference as remote, inline or archive-relative."""
    if reference.startswith(_REMOTE_PREFIXES):
        return ReferenceKind.REMOTE
    if reference.startswith(_INLINE_PREFIX):
        return ReferenceKind.INLINE
    return ReferenceKind.ARCHIVE


def find_archive_entry(reference: str, file_paths: Sequence[str]) -> str | None:
    """Find the archive entry a relative reference points at.

    Args:
        reference: Raw archive-relative reference.
        file_paths: File entry paths in enumeration order.

    Returns:
        The matching entry path, or ``None``.
    """
    wanted = normalize_path(reference)
    if not wanted:
        return None

    normalized = [(path, normalize_path(path)) for path in file_paths]

    for path, candidate in normalized:
        if candidate == wanted:
            return path

    suffix = "/" + wanted
    for path, candidate in normalized:
        if candidate.endswith(suffix):
            return path

    wanted_name = path_basename(wanted)
    if not wanted_name:
        return None
    for path, candidate in normalized:
        if path_basename(candidate) == wanted_name:
            return path

    return None


def decode_data_uri(reference: str, placemark_name: str) -> tuple[str, str]:
    """Split a ``data:`` URI into ``(mime_type, base64_payload)``.

    Raises:
        ReferenceFormatWarning: If the URI is not ``data:<mime>;base64,<payload>``.
    """
    match = _DATA_URI_RE.match(reference)
    if match is None:
        msg = f'Invalid data URL format for placemark "{placemark_name}"'
        raise ReferenceFormatWarning(msg)
    return match.group(1), match.group(2)


class ImageResolver:
    """Resolves references for one run and owns that run's images and log.

    Build a new resolver for every run; nothing is shared between
    instances.

    Attributes:
        images: Images accepted so far, in resolution order.
        logs: Run-log entries written so far.
    """

    def __init__(self, archive: KmzArchive, *, logs: list[LogEntry] | None = None) -> None:
        self._archive = archive
        self._file_paths = archive.file_paths()
        self._names: set[str] = set()
        self.images: list[ExtractedImage] = []
        self.logs: list[LogEntry] = logs if logs is not None else []

    @property
    def file_paths(self) -> list[str]:
        return list(self._file_paths)

    def log(self, status: LogStatus, message: str, *, code: str = "") -> None:
        """Append a run-log entry and mirror it to the module logger."""
        self.logs.append(LogEntry(status=status, message=message, code=code))
        logger.log(_LOG_LEVELS[status], "%s", message)

    def resolve(
        self, reference: str, placemark_name: str, *, keep_structure: bool
    ) -> ExtractedImage | None:
        """Resolve one reference, recording the outcome in the run log.

        Returns:
            The accepted image, or ``None`` if the reference was remote,
            malformed, undecodable, unreadable, missing or a duplicate.
        """
        kind = classify_reference(reference)
        if kind is ReferenceKind.REMOTE:
            return None

        try:
            if kind is ReferenceKind.INLINE:
                return self._resolve_inline(reference, placemark_name, keep_structure)
            return self._resolve_archive(reference, placemark_name, keep_structure)
        except RecoverableError as exc:
            self.log(LogStatus.WARNING, exc.message, code=exc.code)
        except PipelineError as exc:
            self.log(
                LogStatus.ERROR,
                f'Error extracting image for placemark "{placemark_name}": {exc.message}',
                code=exc.code,
            )
        return None

    # -----------------------------------------------------------------------
    # Branches
    # -----------------------------------------------------------------------

    def _resolve_inline(
        self, reference: str, placemark_name: str, keep_structure: bool
    ) -> ExtractedImage:
        mime_type, payload = decode_data_uri(reference, placemark_name)
        file_name = generate_file_name(
            placemark_name, extension_for_mime_type(mime_type), keep_structure
        )
        try:
            base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            msg = f'Inline image "{file_name}" is not valid base64: {exc}'
            raise InlinePayloadError(msg) from exc

        image = self._accept(
            ExtractedImage(name=file_name, data=payload, mime_type=mime_type)
        )
        self.log(
            LogStatus.SUCCESS,
            f'Extracted base64 image from placemark "{placemark_name}" as "{file_name}"',
        )
        return image

    def _resolve_archive(
        self, reference: str, placemark_name: str, keep_structure: bool
    ) -> ExtractedImage:
        entry_path = find_archive_entry(reference, self._file_paths)
        if entry_path is None:
            msg = f'File "{reference}" not found in KMZ for placemark "{placemark_name}"'
            raise ArchiveFileNotFoundWarning(msg)

        extension = path_extension(entry_path) or DEFAULT_EXTENSION
        file_name = generate_file_name(placemark_name, extension, keep_structure)
        self._check_unique(file_name)

        content = self._archive.read_entry(entry_path, "bytes")
        image = self._accept(
            ExtractedImage(name=file_name, data=content, original_archive_path=entry_path)
        )
        self.log(
            LogStatus.SUCCESS,
            f'Extracted file "{entry_path}" from KMZ as "{file_name}"',
        )
        return image

    # -----------------------------------------------------------------------
    # Uniqueness
    # -----------------------------------------------------------------------

    def _check_unique(self, file_name: str) -> None:
        if file_name in self._names:
            msg = f'File "{file_name}" was already extracted, skipping'
            raise DuplicateNameWarning(msg)

    def _accept(self, image: ExtractedImage) -> ExtractedImage:
        self._check_unique(image.name)
        self._names.add(image.name)
        self.images.append(image)
        return image
