"""Render pipeline orchestrating the legacy and native strategies.

This module provides the pipeline classes callers invoke directly, their
flags and result models, the error taxonomy and a request sequencer.
"""

from .errors import (
    GENERIC_PARITY_ERROR_CODE,
    STRICT_PARITY_ERROR_CODE,
    ParityMismatchError,
    RenderError,
    RendererUnavailableError,
)
from .models import ExportResult, RenderContext, RenderDiagnostic, RenderFlags
from .pipeline import LegacyRenderPipeline, NativeRenderPipeline, RenderPipelines, create_render_pipelines
from .sequencer import RenderSequencer

__all__ = [
    'GENERIC_PARITY_ERROR_CODE',
    'STRICT_PARITY_ERROR_CODE',
    'ParityMismatchError',
    'RenderError',
    'RendererUnavailableError',
    'ExportResult',
    'RenderContext',
    'RenderDiagnostic',
    'RenderFlags',
    'LegacyRenderPipeline',
    'NativeRenderPipeline',
    'RenderPipelines',
    'create_render_pipelines',
    'RenderSequencer',
]
