"""In-memory zip adapter for KMZ input and photo-archive output.

Wraps :mod:`zipfile` behind the small surface the extractor needs:

- ``open_archive`` / ``KmzArchive``: enumerate and read entries of an
  uploaded KMZ held in memory.
- ``create_archive`` / ``ArchiveBuilder``: collect entries and produce
  the output zip as bytes.

Entries can be read or written as raw ``bytes``, decoded ``text`` or a
``base64`` string.
"""

from __future__ import annotations

import base64
import io
import logging
import zipfile
import zlib
from dataclasses import dataclass
from typing import Literal

from kmz_photos.core.exceptions import EntryNotFoundError, InvalidArchiveError

logger = logging.getLogger("kmz_photos.core.archive")

Encoding = Literal["bytes", "text", "base64"]

_ENCODINGS: frozenset[str] = frozenset({"bytes", "text", "base64"})


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """One entry in the archive's central directory."""

    path: str
    is_directory: bool = False


class KmzArchive:
    """Read-only view over a zip archive held in memory."""

    def __init__(self, zip_file: zipfile.ZipFile) -> None:
        self._zip = zip_file
        self._entries = [
            ArchiveEntry(path=info.filename, is_directory=info.is_dir())
            for info in zip_file.infolist()
        ]

    def list_entries(self) -> list[ArchiveEntry]:
        """Return every entry, directories included, in enumeration order."""
        return list(self._entries)

    def file_paths(self) -> list[str]:
        """Return the paths of file entries in enumeration order."""
        return [entry.path for entry in self._entries if not entry.is_directory]

    def read_entry(self, path: str, encoding: Encoding = "bytes") -> bytes | str:
        """Read one entry.

        Args:
            path: Exact entry path as listed by ``list_entries``.
            encoding: ``"bytes"`` for raw content, ``"text"`` for UTF-8
                text (BOM stripped), ``"base64"`` for an ASCII base64 string.

        Raises:
            EntryNotFoundError: If *path* is not in the archive.
            InvalidArchiveError: If the entry is encrypted, uses an
                unsupported compression method or cannot be decompressed.
            ValueError: If *encoding* is not recognised.
        """
        _check_encoding(encoding)
        try:
            raw = self._zip.read(path)
        except KeyError as exc:
            msg = f"Entry not found in archive: {path!r}"
            raise EntryNotFoundError(msg) from exc
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            OSError,
            RuntimeError,
            NotImplementedError,
        ) as exc:
            msg = f"Cannot read entry {path!r}: {exc}"
            raise InvalidArchiveError(msg) from exc

        if encoding == "text":
            return raw.decode("utf-8-sig", errors="replace")
        if encoding == "base64":
            return base64.b64encode(raw).decode("ascii")
        return raw

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> KmzArchive:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_archive(data: bytes) -> KmzArchive:
    """Open a zip archive from bytes.

    Raises:
        InvalidArchiveError: If *data* is empty or not a zip container.
    """
    if not data:
        msg = "Archive is empty"
        raise InvalidArchiveError(msg)

    try:
        zip_file = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError) as exc:
        msg = f"Not a valid KMZ/zip archive: {exc}"
        raise InvalidArchiveError(msg) from exc

    logger.debug("Archive opened | entries=%d | size=%d bytes", len(zip_file.infolist()), len(data))
    return KmzArchive(zip_file)


class ArchiveBuilder:
    """Accumulates entries for a new zip archive."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, mode="w", compression=zipfile.ZIP_DEFLATED)
        self._names: list[str] = []
        self._finalized = False

    @property
    def names(self) -> list[str]:
        """Entry names added so far, in order."""
        return list(self._names)

    def add_entry(self, path: str, content: bytes | str, encoding: Encoding = "bytes") -> None:
        """Add one entry.

        Args:
            path: Entry path inside the new archive.
            content: ``bytes`` for ``"bytes"``; ``str`` for ``"text"``
                (written as UTF-8) or ``"base64"`` (decoded first).
            encoding: How *content* is represented.

        Raises:
            binascii.Error: If a ``"base64"`` payload is not valid base64.
            RuntimeError: If the builder was already finalized.
            ValueError: If *encoding* is not recognised.
        """
        _check_encoding(encoding)
        if self._finalized:
            msg = "Cannot add entries to a finalized archive"
            raise RuntimeError(msg)

        if encoding == "base64":
            payload = base64.b64decode(content)
        elif encoding == "text":
            payload = content.encode("utf-8") if isinstance(content, str) else content
        else:
            payload = content if isinstance(content, bytes) else content.encode("utf-8")

        self._zip.writestr(path, payload)
        self._names.append(path)

    def finalize(self) -> bytes:
        """Close the archive and return its bytes."""
        if not self._finalized:
            self._zip.close()
            self._finalized = True
        return self._buffer.getvalue()


def create_archive() -> ArchiveBuilder:
    """Return a new, empty ``ArchiveBuilder``."""
    return ArchiveBuilder()


def _check_encoding(encoding: str) -> None:
    if encoding not in _ENCODINGS:
        msg = f"Unsupported entry encoding: {encoding!r} (expected one of {sorted(_ENCODINGS)})"
        raise ValueError(msg)
