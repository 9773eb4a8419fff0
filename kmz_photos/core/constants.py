"""Shared extraction constants — single source of truth.

Centralises the placemark marker convention, KML element names and the
download naming rule so that the scanner, resolver, orchestrator and
HTTP layer agree on every literal.
"""

from __future__ import annotations

from pathlib import PurePosixPath

# ---------------------------------------------------------------------------
# Placemark conventions
# ---------------------------------------------------------------------------

MARKER_PREFIX: str = "?-"
"""Placemark name prefix meaning "has attached photos"."""

PICTURES_DATA_NAME: str = "pictures"
"""``ExtendedData/Data@name`` value whose ``value`` holds photo markup."""

KML_SUFFIX: str = ".kml"

# ---------------------------------------------------------------------------
# Output naming
# ---------------------------------------------------------------------------

DEFAULT_OUTPUT_SUFFIX: str = "_extracted_photos.zip"
"""Appended to the uploaded archive's base name for the download."""

DEFAULT_SOURCE_NAME: str = "photos.kmz"


def build_download_name(source_name: str, suffix: str = DEFAULT_OUTPUT_SUFFIX) -> str:
    """Build the download filename for an uploaded archive.

    Args:
        source_name: Original upload name (e.g. ``"site survey.kmz"``).
            Directory components are ignored.
        suffix: Output suffix, ``"_extracted_photos.zip"`` by default.

    Returns:
        ``"<originalBaseName><suffix>"``, e.g.
        ``"site survey_extracted_photos.zip"``.
    """
    base = PurePosixPath(source_name.replace("\\", "/")).name or DEFAULT_SOURCE_NAME
    if "." in base:
        base = base.rsplit(".", 1)[0] or base
    return f"{base}{suffix}"
