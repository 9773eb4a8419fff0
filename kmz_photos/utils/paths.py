"""Archive path normalisation.

KML references often carry URL decoration (``?v=2``, ``#top``) or a
leading slash that archive entry names never have.  These helpers strip
that decoration so references and entry names can be compared directly.
"""

from __future__ import annotations


def normalize_path(path: str) -> str:
    """Strip ``?query``, then ``#fragment``, then one leading ``/``.

    >>> normalize_path("/images/a.jpg?v=2#top")
    'images/a.jpg'
    """
    normalized = path.split("?", 1)[0]
    normalized = normalized.split("#", 1)[0]
    if normalized.startswith("/"):
        normalized = normalized[1:]
    return normalized


def path_basename(path: str) -> str:
    """Return the final ``/``-separated segment of *path*."""
    return path.rsplit("/", 1)[-1]


def path_extension(path: str) -> str:
    """Return the lower-cased extension of *path*'s basename, with its dot.

    Returns ``""`` when the basename has no extension.
    """
    name = path_basename(path)
    if "." not in name.lstrip("."):
        return ""
    return "." + name.rsplit(".", 1)[-1].lower()
