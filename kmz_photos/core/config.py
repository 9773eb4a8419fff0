"""Extractor configuration loaded from environment variables.

Azure Functions app settings (or ``local.settings.json`` for local dev)
are the source of truth. ``from_env()`` raises ``ConfigValidationError``
if any value is out of its valid range, so bad configuration is caught
at startup rather than on the first upload.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from kmz_photos.core.constants import DEFAULT_OUTPUT_SUFFIX
from kmz_photos.core.exceptions import PipelineError
from kmz_photos.models.extraction import ExtractionOptions

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        self.message = message
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ExtractorConfig:
    """Immutable extractor configuration.

    Attributes:
        extract_all_images: Default for ``ExtractionOptions.extract_all_images``.
        keep_structure: Default for ``ExtractionOptions.keep_structure``.
        max_archive_bytes: Largest upload the HTTP endpoint accepts.
        output_suffix: Suffix appended to the upload's base name for the
            download (``"_extracted_photos.zip"``).
    """

    extract_all_images: bool = False
    keep_structure: bool = False
    max_archive_bytes: int = 100 * 1024 * 1024
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX

    @classmethod
    def from_env(cls) -> ExtractorConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a boolean flag is not a recognised
                literal, or a value is out of range.
            ValueError: If ``KMZ_MAX_ARCHIVE_BYTES`` is not an integer.
        """
        config = cls(
            extract_all_images=parse_bool(
                "KMZ_EXTRACT_ALL_IMAGES", os.getenv("KMZ_EXTRACT_ALL_IMAGES", "false")
            ),
            keep_structure=parse_bool(
                "KMZ_KEEP_STRUCTURE", os.getenv("KMZ_KEEP_STRUCTURE", "false")
            ),
            max_archive_bytes=int(os.getenv("KMZ_MAX_ARCHIVE_BYTES", str(100 * 1024 * 1024))),
            output_suffix=os.getenv("KMZ_OUTPUT_SUFFIX", DEFAULT_OUTPUT_SUFFIX),
        )
        _validate(config)
        return config

    def to_options(self) -> ExtractionOptions:
        """Return the default per-run options for this configuration."""
        return ExtractionOptions(
            keep_structure=self.keep_structure,
            extract_all_images=self.extract_all_images,
        )


def parse_bool(key: str, raw: str) -> bool:
    """Parse a boolean flag (``true/false/1/0/yes/no/on/off``).

    Raises:
        ConfigValidationError: If *raw* is not a recognised literal.
    """
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigValidationError(key, raw, "must be a boolean (true/false/1/0/yes/no)")


def _validate(config: ExtractorConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.max_archive_bytes <= 0:
        raise ConfigValidationError(
            "KMZ_MAX_ARCHIVE_BYTES",
            config.max_archive_bytes,
            "must be > 0 (bytes)",
        )

    if not config.output_suffix:
        raise ConfigValidationError(
            "KMZ_OUTPUT_SUFFIX",
            config.output_suffix,
            "must not be empty",
        )

    if not config.output_suffix.lower().endswith(".zip"):
        raise ConfigValidationError(
            "KMZ_OUTPUT_SUFFIX",
            config.output_suffix,
            "must end with .zip",
        )
