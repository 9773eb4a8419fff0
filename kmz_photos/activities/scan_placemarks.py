"""KML placemark scanning.

Parses the KML document held in a KMZ archive and walks its
``Placemark`` elements in document order, pairing each named placemark
with the raw image references found in:

- its ``description`` (inline HTML, CDATA or escaped markup), then
- every ``ExtendedData/Data[@name="pictures"]/value`` field.

Lookups use the ``{*}`` namespace wildcard, so KML 2.2, Google ``gx``
documents and namespace-less files are all handled the same way.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kmz_photos.activities.extract_references import extract_references
from kmz_photos.core.constants import MARKER_PREFIX, PICTURES_DATA_NAME
from kmz_photos.core.exceptions import KmlParseError
from kmz_photos.models.extraction import Placemark

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger("kmz_photos.activities.scan_placemarks")


def parse_kml_document(content: str | bytes, *, source_filename: str = "") -> _Element:
    """Parse KML text into an lxml element tree.

    Args:
        content: KML document as text or bytes.
        source_filename: Entry name used in error messages.

    Returns:
        The document's root element.

    Raises:
        KmlParseError: If the content is empty or not well-formed XML.
    """
    from lxml import etree  # type: ignore[attr-defined]

    label = source_filename or "<kml>"
    raw = content.encode("utf-8") if isinstance(content, str) else content

    if not raw.strip():
        msg = f"KML document {label} is empty"
        raise KmlParseError(msg)

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root: _Element = etree.fromstring(raw, parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"KML document {label} is not valid XML: {exc}"
        raise KmlParseError(msg) from exc

    return root


def scan_placemarks(root: _Element, *, filter_to_marked: bool) -> list[Placemark]:
    """Collect named placemarks and their raw image references.

    Args:
        root: Parsed KML root element.
        filter_to_marked: Only keep placemarks whose name starts with
            the ``"?-"`` marker.

    Returns:
        One ``Placemark`` per qualifying element, in document order.
        Placemarks without a ``name`` child, and unmarked placemarks when
        filtering, are left out without being logged.
    """
    placemarks: list[Placemark] = []

    for element in root.iter("{*}Placemark"):
        name_elem = element.find("{*}name")
        if name_elem is None:
            continue

        name = _text_content(name_elem).strip()
        if filter_to_marked and not name.startswith(MARKER_PREFIX):
            continue

        references = [*_description_references(element), *_pictures_references(element)]
        placemarks.append(Placemark(name=name, references=tuple(references), element=element))

    logger.debug(
        "Placemarks scanned | kept=%d | filter_to_marked=%s",
        len(placemarks),
        filter_to_marked,
    )
    return placemarks


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _description_references(placemark: _Element) -> list[str]:
    description = placemark.find("{*}description")
    if description is None:
        return []
    return extract_references(inner_markup(description))


def _pictures_references(placemark: _Element) -> list[str]:
    references: list[str] = []
    for data_elem in placemark.iterfind("{*}ExtendedData/{*}Data"):
        if data_elem.get("name") != PICTURES_DATA_NAME:
            continue
        value_elem = data_elem.find("{*}value")
        if value_elem is not None:
            references.extend(extract_references(inner_markup(value_elem)))
    return references


def inner_markup(element: _Element) -> str:
    """Return the element's text followed by its serialised children.

    CDATA and escaped HTML arrive as text; literal XHTML children are
    serialised back to markup so ``<img>`` tags inside them are found.
    """
    from lxml import etree  # type: ignore[attr-defined]

    parts = [element.text or ""]
    parts.extend(
        etree.tostring(child, encoding="unicode", with_tail=True) for child in element
    )
    return "".join(parts)


def _text_content(element: _Element) -> str:
    return "".join(element.itertext())
