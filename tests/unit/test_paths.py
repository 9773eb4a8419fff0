"""Tests for archive path normalisation helpers."""

from __future__ import annotations

import pytest

from kmz_photos.utils.paths import normalize_path, path_basename, path_extension


class TestNormalizePath:
    """Strip query, fragment and one leading slash."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("images/a.jpg", "images/a.jpg"),
            ("/images/a.jpg", "images/a.jpg"),
            ("images/a.jpg?v=2", "images/a.jpg"),
            ("images/a.jpg#frag", "images/a.jpg"),
            ("/images/a.jpg?v=2#frag", "images/a.jpg"),
            ("a.jpg#x?y", "a.jpg"),
            ("", ""),
            ("/", ""),
        ],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_path(raw) == expected

    def test_only_one_leading_slash_removed(self) -> None:
        assert normalize_path("//images/a.jpg") == "/images/a.jpg"

    def test_idempotent_on_clean_path(self) -> None:
        once = normalize_path("/files/photo.png?size=large")
        assert normalize_path(once) == once


class TestPathHelpers:
    """Basename and extension helpers."""

    def test_basename(self) -> None:
        assert path_basename("files/sub/photo.JPG") == "photo.JPG"
        assert path_basename("photo.jpg") == "photo.jpg"

    def test_extension_lower_cased(self) -> None:
        assert path_extension("files/photo.JPG") == ".jpg"

    def test_extension_uses_basename_only(self) -> None:
        assert path_extension("images.v2/photo") == ""

    def test_hidden_file_has_no_extension(self) -> None:
        assert path_extension("files/.hidden") == ""
