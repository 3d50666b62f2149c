"""Integration tests for legacy/native render parity.

Every document here is rendered by the legacy generator and by the native
strategy (reference host engine + transcoder) and the outputs must be
byte-identical, both directly and through a strict pipeline.
"""

import pytest

from src.legacy_renderer import clean_html_for_draft
from src.native_renderer import NativeRenderer, ReferenceHostRenderer
from src.parity_gate import build_mismatch_report
from src.render_pipeline import (
    STRICT_PARITY_ERROR_CODE,
    RenderContext,
    RenderFlags,
    create_render_pipelines,
)
from tests.fixtures.sample_markdown import PARITY_DOCUMENTS, SAMPLE_MARKDOWN_MATH


def strict_flags(**overrides) -> RenderFlags:
    values = dict(
        use_native_strategy=True,
        fallback_on_mismatch=False,
        enforce_parity=True,
        parity_error_code=STRICT_PARITY_ERROR_CODE,
    )
    values.update(overrides)
    return RenderFlags(**values)


@pytest.mark.integration
class TestNativeLegacyParity:
    """Native output equals legacy output for supported documents."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("markdown", PARITY_DOCUMENTS)
    async def test_documents_render_identically(self, converter, native_renderer, markdown):
        legacy = converter.render(markdown)
        native = await native_renderer(markdown, RenderContext(markdown=markdown))

        report = build_mismatch_report(legacy, native)
        assert report.is_match, report.to_dict()

    @pytest.mark.asyncio
    async def test_deferred_embeds_render_identically(self, converter):
        markdown = "Before\n\n![cat](cat.png)\n\nAfter\n"
        renderer = NativeRenderer(converter, ReferenceHostRenderer(defer_embeds_ms=15), settle_interval_ms=5)

        assert await renderer(markdown, RenderContext(markdown=markdown)) == converter.render(markdown)

    @pytest.mark.asyncio
    async def test_math_document_uses_legacy_conversion(self, converter, native_renderer):
        html = await native_renderer(SAMPLE_MARKDOWN_MATH, RenderContext(markdown=SAMPLE_MARKDOWN_MATH))

        assert html == converter.render(SAMPLE_MARKDOWN_MATH)


@pytest.mark.integration
class TestStrictPipeline:
    """Full pipeline runs with fallback disabled."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("markdown", PARITY_DOCUMENTS)
    async def test_export_returns_native_without_diagnostics(self, converter, native_renderer, markdown):
        flags = strict_flags(parity_transform=clean_html_for_draft)
        pipelines = create_render_pipelines(converter, get_flags=lambda: flags, native_renderer=native_renderer)

        result = await pipelines.select(flags).render_for_export(markdown, RenderContext(markdown=markdown))

        assert result.diagnostics == []
        assert result.html == converter.render(markdown)

    @pytest.mark.asyncio
    async def test_select_legacy_when_native_disabled(self, converter, native_renderer):
        flags = strict_flags(use_native_strategy=False)
        pipelines = create_render_pipelines(converter, get_flags=lambda: flags, native_renderer=native_renderer)

        assert pipelines.select(flags) is pipelines.legacy


@pytest.mark.integration
class TestVaultImages:
    """Image sources resolve against a real vault directory."""

    def test_legacy_resolves_to_file_uri(self, vault, vault_converter):
        vault_converter.update_source_path("notes/a.md")

        html = vault_converter.render("![cat](cat.png)")

        assert (vault / "notes" / "cat.png").resolve().as_uri() in html

    @pytest.mark.asyncio
    async def test_native_matches_legacy_with_vault(self, vault, vault_converter):
        markdown = (vault / "notes" / "a.md").read_text(encoding='utf-8')
        renderer = NativeRenderer(vault_converter, ReferenceHostRenderer())
        context = RenderContext(markdown=markdown, source_path="notes/a.md")

        native = await renderer(markdown, context)
        legacy = vault_converter.render(markdown)

        assert native == legacy
        assert (vault / "notes" / "cat.png").resolve().as_uri() in native

    def test_missing_image_is_left_unresolved(self, vault, vault_converter):
        vault_converter.update_source_path("notes/a.md")

        html = vault_converter.render("![dog](dog.png)")

        assert 'file://' not in html
        assert 'dog.png' in html
