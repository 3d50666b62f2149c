"""Typed exception hierarchy for the render pipeline.

All project exceptions inherit from RenderError so callers can catch
everything raised by this package in one place. Exceptions carry their
structured context as attributes in addition to the formatted message.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.parity_gate.models import MismatchReport


GENERIC_PARITY_ERROR_CODE = "PARITY_MISMATCH"
STRICT_PARITY_ERROR_CODE = "STRICT_PARITY_MISMATCH"


class RenderError(Exception):
    """Base exception for all rendering errors."""
    pass


class RendererUnavailableError(RenderError):
    """Raised when the requested strategy is not configured and fallback is off."""

    def __init__(self, strategy: str, reason: str = "not configured"):
        super().__init__(f"{strategy} renderer is unavailable: {reason}")
        self.strategy = strategy
        self.reason = reason


class ParityMismatchError(RenderError):
    """Raised when legacy and native output differ and fallback is disabled.

    Attributes:
        code: Caller-configurable error code
        parity: MismatchReport describing every divergent region
    """

    def __init__(self, report: "MismatchReport", code: str = GENERIC_PARITY_ERROR_CODE):
        super().__init__(
            f"Render parity mismatch ({code}) at index {report.index}: "
            f"legacy={report.legacy_length} candidate={report.candidate_length} "
            f"segments={report.segment_count}"
        )
        self.code = code
        self.parity = report
