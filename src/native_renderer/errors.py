"""Error types raised by the native render strategy."""

from typing import Optional

from src.render_pipeline.errors import RenderError


class NativeRenderError(RenderError):
    """Base exception for native strategy failures."""
    pass


class HostRendererUnavailableError(NativeRenderError):
    """Raised when the host render engine is missing or exposes no usable call shape.

    Attributes:
        reason: What was missing
    """

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or "host renderer does not expose render_markdown/render"
        super().__init__(f"Host markdown renderer is not available: {self.reason}")
