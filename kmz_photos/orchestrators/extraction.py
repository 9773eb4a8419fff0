"""End-to-end photo extraction from a KMZ archive.

Drives one run through its phases:

1. Loading: open the archive and locate the KML entry
2. Scanning: parse the KML and collect named placemarks
3. Resolving: turn each placemark's references into images
4. Assembling: write the surviving images into a fresh zip

Fatal errors in loading/parsing (``InvalidArchiveError``,
``MissingKmlError``, ``KmlParseError``) propagate to the caller and no
result is produced.  Per-reference problems are written to the run log
and the run carries on.

Every call builds its own run state, so concurrent or repeated calls
never see each other's placemarks, images or logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kmz_photos.activities.resolve_images import ImageResolver
from kmz_photos.activities.scan_placemarks import parse_kml_document, scan_placemarks
from kmz_photos.core.archive import create_archive, open_archive
from kmz_photos.core.constants import DEFAULT_OUTPUT_SUFFIX, KML_SUFFIX
from kmz_photos.core.exceptions import MissingKmlError, PipelineError
from kmz_photos.models.extraction import (
    ExtractionOptions,
    ExtractionPhase,
    ExtractionResult,
    LogStatus,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

    from kmz_photos.core.archive import KmzArchive
    from kmz_photos.models.extraction import ExtractedImage, Placemark

logger = logging.getLogger("kmz_photos.orchestrators.extraction")


def extract_photos(
    data: bytes,
    options: ExtractionOptions | None = None,
    *,
    source_name: str = "",
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX,
) -> ExtractionResult:
    """Extract placemark photos from a KMZ archive.

    Args:
        data: Raw KMZ bytes.
        options: Run switches; defaults to marked placemarks only, with
            the ``"?-"`` prefix stripped from filenames.
        source_name: Upload name, used in log messages and the download name.
        output_suffix: Suffix for the download name.

    Returns:
        The run's ``ExtractionResult``.

    Raises:
        InvalidArchiveError: If *data* is not a zip archive.
        MissingKmlError: If the archive holds no ``.kml`` entry.
        KmlParseError: If the KML entry is empty or not well-formed XML.
    """
    run = _ExtractionRun(options or ExtractionOptions(), source_name=source_name)
    try:
        return run.execute(data, output_suffix=output_suffix)
    except PipelineError as exc:
        run.fail(exc)
        raise


def find_kml_entry(file_paths: list[str]) -> str:
    """Return the first file path ending in ``.kml`` (case-insensitive).

    Raises:
        MissingKmlError: If no such entry exists.
    """
    for path in file_paths:
        if path.lower().endswith(KML_SUFFIX):
            return path
    msg = "Cannot find a KML file in the KMZ archive"
    raise MissingKmlError(msg)


class _ExtractionRun:
    """State for a single extraction; never reused."""

    def __init__(self, options: ExtractionOptions, *, source_name: str) -> None:
        self.options = options
        self.source_name = source_name
        self.phase = ExtractionPhase.IDLE
        self.placemarks: list[Placemark] = []

    def execute(self, data: bytes, *, output_suffix: str) -> ExtractionResult:
        self._enter(ExtractionPhase.LOADING)
        with open_archive(data) as archive:
            resolver = ImageResolver(archive)
            resolver.log(
                LogStatus.INFO,
                f"Starting photo extraction from {self.source_name or 'KMZ archive'}",
            )
            root = self._load_kml(archive, resolver)

            self._enter(ExtractionPhase.SCANNING)
            self.placemarks = scan_placemarks(
                root, filter_to_marked=not self.options.extract_all_images
            )

            self._enter(ExtractionPhase.RESOLVING)
            for placemark in self.placemarks:
                for reference in placemark.references:
                    resolver.resolve(
                        reference,
                        placemark.name,
                        keep_structure=self.options.keep_structure,
                    )

        self._enter(ExtractionPhase.ASSEMBLING)
        written, archive_bytes = self._assemble(resolver)

        resolver.log(
            LogStatus.SUCCESS,
            f"Extracted {len(written)} photo(s) from the KMZ file",
        )
        resolver.log(
            LogStatus.INFO,
            f"Found {len(self.placemarks)} placemark(s) in the KMZ file",
        )

        self._enter(ExtractionPhase.DONE)
        logger.info(
            "Extraction completed | source=%s | placemarks=%d | photos=%d | warnings=%d",
            self.source_name,
            len(self.placemarks),
            len(written),
            sum(1 for e in resolver.logs if e.status in (LogStatus.WARNING, LogStatus.ERROR)),
        )

        return ExtractionResult(
            total_placemarks=len(self.placemarks),
            total_photos=len(written),
            logs=tuple(resolver.logs),
            output_archive_bytes=archive_bytes,
            images=tuple(written),
            source_name=self.source_name,
            output_suffix=output_suffix,
        )

    def fail(self, exc: PipelineError) -> None:
        self._enter(ExtractionPhase.FAILED)
        logger.error(
            "Extraction failed | source=%s | code=%s | error=%s",
            self.source_name,
            exc.code,
            exc.message,
        )

    # -----------------------------------------------------------------------
    # Phases
    # -----------------------------------------------------------------------

    def _load_kml(self, archive: KmzArchive, resolver: ImageResolver) -> _Element:
        file_paths = archive.file_paths()
        kml_path = find_kml_entry(file_paths)

        kml_count = sum(1 for p in file_paths if p.lower().endswith(KML_SUFFIX))
        if kml_count > 1:
            resolver.log(
                LogStatus.INFO,
                f'Found {kml_count} KML files in the KMZ, using "{kml_path}"',
            )

        kml_content = archive.read_entry(kml_path, "bytes")
        return parse_kml_document(kml_content, source_filename=kml_path)

    def _assemble(self, resolver: ImageResolver) -> tuple[list[ExtractedImage], bytes]:
        builder = create_archive()
        written: list[ExtractedImage] = []

        for image in resolver.images:
            builder.add_entry(image.name, image.data, "base64" if image.is_inline else "bytes")
            written.append(image)

        return written, builder.finalize()

    def _enter(self, phase: ExtractionPhase) -> None:
        logger.debug(
            "Extraction phase | source=%s | %s -> %s",
            self.source_name,
            self.phase.value,
            phase.value,
        )
        self.phase = phase
