"""Unified extraction exception taxonomy.

Every domain exception inherits from ``PipelineError`` and carries
structured context fields so that the HTTP layer, the run log and
operator diagnostics all see the same shape.

Taxonomy categories
-------------------
- ``ValidationError``   — bad input (archive, KML), never retryable.
- ``PermanentError``    — unrecoverable domain failures, not retryable.
- ``ContractError``     — malformed requests at the ingress boundary.
- ``RecoverableError``  — per-reference conditions that are recorded in
  the run log and never abort a run.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all extraction-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"load_archive"``, ``"resolve_images"``).
        code: Machine-readable error code (e.g. ``"KML_MISSING"``).
        retryable: Whether the caller may retry the operation.
        correlation_id: Request correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, RecoverableError):
            return "recoverable"
        return "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PipelineError):
    """Input or domain-model validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PipelineError):
    """Unrecoverable domain failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(PipelineError):
    """Malformed request at the ingress boundary. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class RecoverableError(PipelineError):
    """A condition that skips one reference and is written to the run log.

    Raised inside the resolver and caught before it reaches the caller.
    """

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Fatal extraction errors
# ---------------------------------------------------------------------------


class InvalidArchiveError(ValidationError):
    """Raised when the input bytes are not a readable zip container."""

    default_stage = "load_archive"
    default_code = "INVALID_ARCHIVE"


class EntryNotFoundError(PermanentError):
    """Raised when a named entry does not exist in the archive."""

    default_stage = "load_archive"
    default_code = "ENTRY_NOT_FOUND"


class MissingKmlError(ValidationError):
    """Raised when the archive holds no ``.kml`` document."""

    default_stage = "load_archive"
    default_code = "KML_MISSING"


class KmlParseError(ValidationError):
    """Raised when the KML entry is empty or not well-formed XML."""

    default_stage = "parse_kml"
    default_code = "KML_PARSE_FAILED"


# ---------------------------------------------------------------------------
# Recoverable per-reference conditions
# ---------------------------------------------------------------------------


class ReferenceFormatWarning(RecoverableError):
    """A ``data:`` reference does not match ``data:<mime>;base64,<payload>``."""

    default_stage = "resolve_images"
    default_code = "REFERENCE_FORMAT"


class ArchiveFileNotFoundWarning(RecoverableError):
    """An archive-relative reference matches no file entry."""

    default_stage = "resolve_images"
    default_code = "FILE_NOT_FOUND"


class DuplicateNameWarning(RecoverableError):
    """A generated filename collides with an image already extracted."""

    default_stage = "resolve_images"
    default_code = "DUPLICATE_NAME"


# ---------------------------------------------------------------------------
# Per-reference errors (logged as ``error``, run continues)
# ---------------------------------------------------------------------------


class InlinePayloadError(PermanentError):
    """A well-formed ``data:`` URI whose payload is not valid base64."""

    default_stage = "resolve_images"
    default_code = "PAYLOAD_DECODE_FAILED"
