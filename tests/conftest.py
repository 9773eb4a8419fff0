"""Shared pytest fixtures for the KMZ Photo Extractor test suite."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable

import pytest

# ---------------------------------------------------------------------------
# KML / KMZ builders
# ---------------------------------------------------------------------------

KML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n<kml xmlns="http://www.opengis.net/kml/2.2">'

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-body"


def placemark_xml(
    name: str | None,
    *,
    description: str | None = None,
    pictures: str | None = None,
) -> str:
    """Render one ``<Placemark>``; ``description``/``pictures`` go in CDATA."""
    parts = ["<Placemark>"]
    if name is not None:
        parts.append(f"<name>{name}</name>")
    if description is not None:
        parts.append(f"<description><![CDATA[{description}]]></description>")
    if pictures is not None:
        parts.append(
            '<ExtendedData><Data name="pictures">'
            f"<value><![CDATA[{pictures}]]></value>"
            "</Data></ExtendedData>"
        )
    parts.append("<Point><coordinates>106.8,-6.2,0</coordinates></Point>")
    parts.append("</Placemark>")
    return "".join(parts)


def kml_document(*placemarks: str) -> str:
    """Wrap placemark snippets in a KML 2.2 document."""
    return f"{KML_HEADER}<Document>{''.join(placemarks)}</Document></kml>"


def build_kmz(entries: dict[str, bytes | str]) -> bytes:
    """Build a zip in memory; entry order follows dict order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path, content in entries.items():
            zf.writestr(path, content)
    return buffer.getvalue()


def mark_encrypted(data: bytes, name: str) -> bytes:
    """Set the "encrypted" flag on *name*'s central directory record.

    ``zipfile`` resets flag bits when writing, so the bit is patched into
    the finished archive instead.
    """
    buf = bytearray(data)
    eocd = buf.rfind(b"PK\x05\x06")
    pos = int.from_bytes(buf[eocd + 16 : eocd + 20], "little")
    encoded = name.encode("utf-8")
    while buf[pos : pos + 4] == b"PK\x01\x02":
        name_len = int.from_bytes(buf[pos + 28 : pos + 30], "little")
        extra_len = int.from_bytes(buf[pos + 30 : pos + 32], "little")
        comment_len = int.from_bytes(buf[pos + 32 : pos + 34], "little")
        if bytes(buf[pos + 46 : pos + 46 + name_len]) == encoded:
            flags = int.from_bytes(buf[pos + 8 : pos + 10], "little") | 0x1
            buf[pos + 8 : pos + 10] = flags.to_bytes(2, "little")
            return bytes(buf)
        pos += 46 + name_len + extra_len + comment_len
    raise KeyError(name)


def read_zip(data: bytes) -> dict[str, bytes]:
    """Read every file entry of a zip into a dict."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


@pytest.fixture()
def make_kmz() -> Callable[[dict[str, bytes | str]], bytes]:
    """Return the in-memory KMZ builder."""
    return build_kmz


@pytest.fixture()
def pole_kmz() -> bytes:
    """KMZ with one marked placemark referencing ``pole12.jpg`` by bare name."""
    kml = kml_document(
        placemark_xml("?-Pole 12", description='<img src="pole12.jpg">'),
    )
    return build_kmz({"doc.kml": kml, "images/": b"", "images/pole12.jpg": JPEG_BYTES})


@pytest.fixture()
def pole_kmz_with_other() -> bytes:
    """``pole_kmz`` plus an unmarked placemark ``Other`` without images."""
    kml = kml_document(
        placemark_xml("?-Pole 12", description='<img src="pole12.jpg">'),
        placemark_xml("Other", description="No photos here"),
    )
    return build_kmz({"doc.kml": kml, "images/pole12.jpg": JPEG_BYTES})
