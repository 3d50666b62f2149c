"""Render strategy orchestration with parity enforcement and legacy fallback.

NativeRenderPipeline runs the native strategy and, when parity enforcement is
on, the legacy strategy as well. Output that diverges from the legacy result
is never returned while enforcement is on: the caller receives the legacy
output when fallback is enabled, or a ParityMismatchError otherwise.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

from src.parity_gate import build_mismatch_report, is_exact_match

from .errors import ParityMismatchError, RendererUnavailableError
from .models import ExportResult, RenderContext, RenderDiagnostic, RenderFlags

logger = logging.getLogger(__name__)

NativeStrategy = Callable[[str, RenderContext], Awaitable[str]]


def _coerce_context(context: Optional[Any]) -> RenderContext:
    if isinstance(context, RenderContext):
        return context
    if isinstance(context, dict):
        return RenderContext(
            markdown=context.get('markdown', ''),
            source_path=context.get('source_path', context.get('sourcePath', '')) or '',
        )
    return RenderContext()


class LegacyRenderPipeline:
    """Legacy strategy: the markdown-it-py generator.

    Attributes:
        converter: LegacyConverter, or any object with convert/update_source_path
    """

    def __init__(self, converter: Any):
        self.converter = converter

    async def render_for_preview(self, markdown: str, context: Optional[Any] = None) -> str:
        if self.converter is None or not callable(getattr(self.converter, 'convert', None)):
            raise RendererUnavailableError("legacy", "legacy converter is not ready")

        ctx = _coerce_context(context)
        if callable(getattr(self.converter, 'update_source_path', None)):
            self.converter.update_source_path(ctx.source_path)
        return await self.converter.convert(markdown)

    async def render_for_export(self, markdown: str, context: Optional[Any] = None) -> ExportResult:
        return ExportResult(html=await self.render_for_preview(markdown, context))


class NativeRenderPipeline:
    """Native strategy with parity gate and legacy fallback.

    Attributes:
        native_renderer: Async callable (markdown, context) -> html, or None
        legacy_pipeline: LegacyRenderPipeline used for parity and fallback
        get_flags: Callable returning the current RenderFlags
    """

    def __init__(
        self,
        native_renderer: Optional[NativeStrategy] = None,
        legacy_pipeline: Optional[LegacyRenderPipeline] = None,
        get_flags: Optional[Callable[[], Optional[RenderFlags]]] = None,
    ):
        self.native_renderer = native_renderer
        self.legacy_pipeline = legacy_pipeline
        self.get_flags = get_flags or RenderFlags

    async def render_for_preview(self, markdown: str, context: Optional[Any] = None) -> str:
        """Render markdown, returning native output only when it is safe to do so.

        Raises:
            RendererUnavailableError: Native strategy missing and fallback disabled
            ParityMismatchError: Outputs differ and fallback is disabled
            Exception: Native or transform failures when fallback is disabled,
                re-raised unchanged
        """
        return await self._render(markdown, _coerce_context(context), None)

    async def render_for_export(self, markdown: str, context: Optional[Any] = None) -> ExportResult:
        """Render like render_for_preview and report every recovered problem."""
        diagnostics: List[RenderDiagnostic] = []
        html = await self._render(markdown, _coerce_context(context), diagnostics)
        return ExportResult(html=html, diagnostics=diagnostics)

    def _can_fall_back(self, flags: RenderFlags) -> bool:
        return flags.fallback_on_mismatch and self.legacy_pipeline is not None

    async def _render(
        self,
        markdown: str,
        context: RenderContext,
        diagnostics: Optional[List[RenderDiagnostic]],
    ) -> str:
        flags = self.get_flags() or RenderFlags()

        if self.native_renderer is None:
            if self._can_fall_back(flags):
                return await self.legacy_pipeline.render_for_preview(markdown, context)
            raise RendererUnavailableError("native", "native renderer is not configured")

        try:
            native_html = await self.native_renderer(markdown, context)
        except Exception as e:
            if not self._can_fall_back(flags):
                raise
            logger.warning(f"Native render failed, falling back to legacy: {e}")
            _record(diagnostics, 'native_failure', f"Native render failed: {e}")
            return await self.legacy_pipeline.render_for_preview(markdown, context)

        if not flags.enforce_parity or self.legacy_pipeline is None:
            return native_html

        legacy_html = await self.legacy_pipeline.render_for_preview(markdown, context)

        try:
            compared_legacy = await _apply_transform(flags, legacy_html, markdown, context, 'legacy')
            compared_native = await _apply_transform(flags, native_html, markdown, context, 'native')
        except Exception as e:
            if not self._can_fall_back(flags):
                raise
            logger.warning(f"Parity transform failed, falling back to legacy: {e}")
            _record(diagnostics, 'transform_failure', f"Parity transform failed: {e}")
            return legacy_html

        if is_exact_match(compared_legacy, compared_native):
            return native_html

        report = build_mismatch_report(compared_legacy, compared_native)
        await _notify_observer(flags, markdown, context, report)

        if self._can_fall_back(flags):
            logger.warning(
                f"Native parity mismatch at index {report.index} "
                f"({report.segment_count} segment(s), legacy={report.legacy_length}, "
                f"native={report.candidate_length}), falling back to legacy"
            )
            _record(diagnostics, 'parity_mismatch', f"Parity mismatch at index {report.index}", report)
            return legacy_html

        raise ParityMismatchError(report, code=flags.parity_error_code)


async def _apply_transform(flags: RenderFlags, html: str, markdown: str, context: RenderContext, side: str) -> str:
    if flags.parity_transform is None:
        return html
    result = flags.parity_transform(html, {'markdown': markdown, 'context': context, 'pipeline': side})
    if inspect.isawaitable(result):
        result = await result
    return html if result is None else result


async def _notify_observer(flags: RenderFlags, markdown: str, context: RenderContext, report) -> None:
    if flags.on_parity_mismatch is None:
        return
    try:
        result = flags.on_parity_mismatch({'markdown': markdown, 'context': context, 'mismatch': report})
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.warning("Parity mismatch observer raised", exc_info=True)


def _record(diagnostics: Optional[List[RenderDiagnostic]], kind: str, message: str, report=None) -> None:
    if diagnostics is not None:
        diagnostics.append(RenderDiagnostic(kind=kind, message=message, report=report))


@dataclass
class RenderPipelines:
    """Pair of pipelines sharing one legacy converter.

    Attributes:
        legacy: LegacyRenderPipeline
        native: NativeRenderPipeline wrapping the legacy pipeline
    """
    legacy: LegacyRenderPipeline
    native: NativeRenderPipeline

    def select(self, flags: RenderFlags):
        return self.native if flags.use_native_strategy else self.legacy


def create_render_pipelines(
    converter: Any,
    get_flags: Optional[Callable[[], Optional[RenderFlags]]] = None,
    native_renderer: Optional[NativeStrategy] = None,
) -> RenderPipelines:
    """Build the legacy pipeline and a native pipeline that falls back to it."""
    legacy = LegacyRenderPipeline(converter)
    native = NativeRenderPipeline(
        native_renderer=native_renderer,
        legacy_pipeline=legacy,
        get_flags=get_flags,
    )
    return RenderPipelines(legacy=legacy, native=native)
