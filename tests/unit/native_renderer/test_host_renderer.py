"""Unit tests for native_renderer.host_renderer and host_engine modules."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from src.legacy_renderer import inner_html, new_container
from src.native_renderer import HostRendererUnavailableError, ReferenceHostRenderer, render_with_host
from src.native_renderer.host_engine import heading_slug, host_image_src


class TestRenderWithHost:
    """Test cases for render_with_host() call shapes."""

    @pytest.mark.asyncio
    async def test_no_host(self):
        with pytest.raises(HostRendererUnavailableError, match="no host renderer configured"):
            await render_with_host(None, "x", new_container())

    @pytest.mark.asyncio
    async def test_host_without_call_shape(self):
        """Hosts exposing neither method are rejected with a descriptive message."""
        host = Mock(spec=[])

        with pytest.raises(HostRendererUnavailableError) as exc_info:
            await render_with_host(host, "x", new_container())

        assert "render_markdown/render" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_sync_render_markdown(self):
        host = Mock(spec=['render_markdown'])
        target = new_container()

        await render_with_host(host, "# x", target, "notes/a.md")

        host.render_markdown.assert_called_once_with("# x", target, "notes/a.md", None)

    @pytest.mark.asyncio
    async def test_async_render_markdown(self):
        host = Mock(spec=['render_markdown'])
        host.render_markdown = AsyncMock()
        target = new_container()
        component = object()

        await render_with_host(host, "# x", target, "a.md", component)

        host.render_markdown.assert_awaited_once_with("# x", target, "a.md", component)

    @pytest.mark.asyncio
    async def test_render_with_app(self):
        """The render(app, ...) shape receives the app handle first."""
        host = Mock(spec=['render'])
        app = object()
        target = new_container()

        await render_with_host(host, "x", target, None, None, app)

        host.render.assert_called_once_with(app, "x", target, "", None)

    @pytest.mark.asyncio
    async def test_render_without_app(self):
        host = Mock(spec=['render'])

        with pytest.raises(HostRendererUnavailableError, match="app instance"):
            await render_with_host(host, "x", new_container())

    @pytest.mark.asyncio
    async def test_render_markdown_preferred(self):
        host = Mock(spec=['render_markdown', 'render'])

        await render_with_host(host, "x", new_container(), app=object())

        host.render_markdown.assert_called_once()
        host.render.assert_not_called()


class TestReferenceHostRenderer:
    """Test cases for the markdown-it-py reference host engine."""

    def test_heading_attributes(self):
        html = ReferenceHostRenderer().render_html("# Hi there")

        assert '<h1 data-heading="Hi there" dir="auto" id="hi-there">Hi there</h1>' in html

    def test_paragraph_direction(self):
        assert ReferenceHostRenderer().render_html("x") == '<p dir="auto">x</p>\n'

    def test_callout_shape(self):
        html = ReferenceHostRenderer().render_html("> [!tip] Tip\n> body")

        assert '<div data-callout="tip" class="callout">' in html
        assert '<div class="callout-title-inner">Tip</div>' in html
        assert '<div class="callout-content"><p dir="auto">body</p>' in html

    def test_strikethrough_uses_s(self):
        assert '<s>x</s>' in ReferenceHostRenderer().render_html("~~x~~")

    def test_fence_language_classes(self):
        html = ReferenceHostRenderer().render_html("```js\nx\n```")

        assert html == '<pre class="language-js"><code class="language-js">x\n</code></pre>\n'

    def test_image_source_uses_app_origin(self):
        html = ReferenceHostRenderer().render_html("![cat](cat.png)")

        assert '<img alt="cat" src="app://obsidian.md/cat.png">' in html

    def test_math_uses_mathjax_container(self):
        assert '<mjx-container' in ReferenceHostRenderer().render_html("$$\nx\n$$")

    @pytest.mark.asyncio
    async def test_render_markdown_fills_target(self):
        target = new_container('<p>old</p>')

        await ReferenceHostRenderer().render_markdown("new", target)

        assert inner_html(target) == '<p dir="auto">new</p>\n'

    @pytest.mark.asyncio
    async def test_deferred_embeds(self):
        """With defer_embeds_ms, images start as placeholders and resolve later."""
        host = ReferenceHostRenderer(defer_embeds_ms=10)
        target = new_container()

        await host.render_markdown("![cat](cat.png)", target)

        assert target.find('img') is None
        assert target.select_one('span.image-embed')['src'] == 'cat.png'
        assert host.resolve_embeds(target) == 1
        assert target.find('img')['src'] == 'app://obsidian.md/cat.png'
        assert host.resolve_embeds(target) == 0

    @pytest.mark.asyncio
    async def test_cancel_pending_stops_deferred_resolution(self):
        host = ReferenceHostRenderer(defer_embeds_ms=5)
        target = new_container()

        await host.render_markdown("![cat](cat.png)", target)
        assert host.pending_count == 1

        assert host.cancel_pending(target) == 1
        await asyncio.sleep(0.02)

        assert host.pending_count == 0
        assert target.find('img') is None

    @pytest.mark.asyncio
    async def test_deferred_resolution_clears_pending(self):
        host = ReferenceHostRenderer(defer_embeds_ms=5)
        target = new_container()

        await host.render_markdown("![cat](cat.png)", target)
        await asyncio.sleep(0.05)

        assert host.pending_count == 0
        assert target.find('img') is not None

    @pytest.mark.asyncio
    async def test_rerender_cancels_previous_schedule(self):
        host = ReferenceHostRenderer(defer_embeds_ms=10_000)
        target = new_container()

        await host.render_markdown("![a](a.png)", target)
        await host.render_markdown("![b](b.png)", target)

        assert host.pending_count == 1
        host.cancel_pending()
        assert host.pending_count == 0

    @pytest.mark.parametrize("text,slug", [
        ("Hello, World!", "hello-world"),
        ("  Mixed   Case ", "mixed-case"),
    ])
    def test_heading_slug(self, text, slug):
        assert heading_slug(text) == slug

    @pytest.mark.parametrize("src,expected", [
        ("cat.png", "app://obsidian.md/cat.png"),
        ("/abs/cat.png", "app://obsidian.md/abs/cat.png"),
        ("https://example.com/x.png", "https://example.com/x.png"),
        ("", ""),
    ])
    def test_host_image_src(self, src, expected):
        assert host_image_src(src) == expected
