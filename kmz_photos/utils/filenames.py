"""Output filename generation for extracted photos.

Each photo is named after its placemark.  Characters that are unsafe in
filenames on common platforms are replaced, and the ``"?-"`` marker
prefix is dropped unless the caller asks to keep it.
"""

from __future__ import annotations

import re

from kmz_photos.core.constants import MARKER_PREFIX

# Characters replaced in placemark names: < > : " / \ | *
_UNSAFE_CHARS_RE = re.compile(r'[<>:"/\\|*]')
_UNSAFE_REPLACEMENT = "-?"

DEFAULT_EXTENSION = ".jpg"

# First match wins; substring test against the MIME subtype.
_MIME_EXTENSIONS: tuple[tuple[str, str], ...] = (
    ("png", ".png"),
    ("gif", ".gif"),
    ("jpeg", ".jpg"),
    ("webp", ".webp"),
    ("bmp", ".bmp"),
)


def clean_placemark_name(placemark_name: str) -> str:
    """Replace each filesystem-unsafe character with ``-?``."""
    return _UNSAFE_CHARS_RE.sub(_UNSAFE_REPLACEMENT, placemark_name)


def generate_file_name(placemark_name: str, extension: str, keep_structure: bool) -> str:
    """Build the output filename for a placemark's photo.

    Args:
        placemark_name: Trimmed placemark name (may be empty).
        extension: File extension with or without its leading dot.
        keep_structure: Keep a leading ``"?-"`` marker in the result.

    Returns:
        Cleaned name followed by the dotted extension, e.g.
        ``generate_file_name("?-Pole 12", "jpg", False) == "Pole 12.jpg"``.
    """
    clean_name = clean_placemark_name(placemark_name)

    if not keep_structure and clean_name.startswith(MARKER_PREFIX):
        clean_name = clean_name[len(MARKER_PREFIX) :]

    if not extension.startswith("."):
        extension = "." + extension

    return clean_name + extension


def extension_for_mime_type(mime_type: str) -> str:
    """Map a MIME type (``image/png``) to a file extension (``.png``).

    Unknown subtypes default to ``.jpg``.
    """
    subtype = mime_type.split("/", 1)[-1]
    for needle, extension in _MIME_EXTENSIONS:
        if needle in subtype:
            return extension
    return DEFAULT_EXTENSION
