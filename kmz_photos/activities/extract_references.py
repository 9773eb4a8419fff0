"""Image reference extraction from placemark markup.

Placemark descriptions and ``pictures`` data fields hold free-form HTML,
not validated KML, so references are found by pattern matching rather
than by parsing the fragment:

1. Every ``<img ... src="...">`` tag, in document order.
2. Only if there are no such tags, every inline
   ``data:image/<subtype>;base64,<payload>`` run in the text.
"""

from __future__ import annotations

import re

_IMG_SRC_RE = re.compile(r"""<img\b[^>]*?\ssrc=["']([^"']+?)["'][^>]*>""", re.IGNORECASE)
_INLINE_IMAGE_RE = re.compile(r"""data:image/[^;]+;base64,[^"']+""", re.IGNORECASE)


def extract_references(markup: str | None) -> list[str]:
    """Return image references found in *markup*.

    Args:
        markup: HTML or plain text; ``None`` and ``""`` yield ``[]``.

    Returns:
        ``src`` values of ``<img>`` tags in order, duplicates kept.  When
        there are none, the full ``data:image/...;base64,...`` matches
        instead.
    """
    if not markup:
        return []

    references = [match.group(1) for match in _IMG_SRC_RE.finditer(markup)]
    if references:
        return references

    return [match.group(0) for match in _INLINE_IMAGE_RE.finditer(markup)]
