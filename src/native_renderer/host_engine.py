"""Reference host Markdown engine built on markdown-it-py.

ReferenceHostRenderer stands in for a desktop host's own renderer: it emits
the same host-native shapes (callout divs, <s> strike-through, direction and
heading attributes, app:// image sources, MathJax containers) so the native
strategy can run outside the host application. Image embeds can optionally
be deferred and filled in after the render call returns.
"""

import asyncio
import logging
import re
from typing import Any, Dict, Optional, Tuple

from bs4 import Tag
from markdown_it import MarkdownIt
from mdit_py_plugins.dollarmath import dollarmath_plugin

from src.legacy_renderer.callouts import mark_callout_tokens
from src.legacy_renderer.html_fragments import owner_document, set_inner_html
from src.legacy_renderer.links import escape_html, has_explicit_protocol

logger = logging.getLogger(__name__)

HOST_APP_ORIGIN = 'app://obsidian.md/'
PENDING_EMBED_SELECTOR = 'span.internal-embed.image-embed'


def heading_slug(text: str) -> str:
    slug = re.sub(r'[^\w\s-]', '', (text or '').strip().lower())
    return re.sub(r'\s+', '-', slug)


def host_image_src(src: str) -> str:
    """Prefix relative sources with the host application origin."""
    value = (src or '').strip()
    if not value or value.startswith('#') or value.startswith('//') or has_explicit_protocol(value):
        return value
    return HOST_APP_ORIGIN + value.lstrip('/')


class ReferenceHostRenderer:
    """markdown-it-py engine exposing the render_markdown call shape.

    Attributes:
        defer_embeds_ms: When > 0, images are emitted as embed placeholders and
            resolved this many milliseconds after render_markdown returns
        md: Configured markdown-it-py parser
    """

    def __init__(self, defer_embeds_ms: int = 0):
        self.defer_embeds_ms = defer_embeds_ms
        self.md = self._build_markdown_it()
        self._pending: Dict[int, Tuple[Tag, asyncio.TimerHandle]] = {}

    def _build_markdown_it(self) -> MarkdownIt:
        md = MarkdownIt('default', {'html': True, 'breaks': False, 'linkify': False, 'typographer': False})
        md.use(dollarmath_plugin, allow_digits=False, double_inline=True)
        md.core.ruler.push('host_callouts', mark_callout_tokens)

        def paragraph_open(renderer, tokens, idx, options, env):
            if tokens[idx].hidden:
                return ''
            return '<p dir="auto">'

        def heading_open(renderer, tokens, idx, options, env):
            text = tokens[idx + 1].content if idx + 1 < len(tokens) else ''
            return (
                f'<{tokens[idx].tag} data-heading="{escape_html(text)}" dir="auto" '
                f'id="{escape_html(heading_slug(text))}">'
            )

        def blockquote_open(renderer, tokens, idx, options, env):
            info = tokens[idx].meta.get('callout')
            if info is None:
                return '<blockquote dir="auto">'
            return (
                f'<div data-callout="{escape_html(info.type)}" class="callout">'
                f'<div class="callout-title" dir="auto">'
                f'<div class="callout-icon"></div>'
                f'<div class="callout-title-inner">{escape_html(info.title)}</div>'
                f'</div><div class="callout-content">'
            )

        def blockquote_close(renderer, tokens, idx, options, env):
            if tokens[idx].meta.get('callout') is not None:
                return '</div></div>'
            return '</blockquote>'

        def fence(renderer, tokens, idx, options, env):
            info = (tokens[idx].info or '').strip()
            lang = info.split()[0] if info else ''
            class_attr = f' class="language-{escape_html(lang)}"' if lang else ''
            return f'<pre{class_attr}><code{class_attr}>{escape_html(tokens[idx].content)}</code></pre>\n'

        def image(renderer, tokens, idx, options, env):
            token = tokens[idx]
            src = token.attrGet('src') or ''
            alt = token.content or ''
            if self.defer_embeds_ms > 0 and not has_explicit_protocol(src):
                return (
                    f'<span alt="{escape_html(alt)}" src="{escape_html(src)}" '
                    f'class="internal-embed image-embed"></span>'
                )
            return f'<img alt="{escape_html(alt)}" src="{escape_html(host_image_src(src))}">'

        def math_inline(renderer, tokens, idx, options, env):
            return f'<mjx-container class="MathJax" jax="CHTML">{escape_html(tokens[idx].content)}</mjx-container>'

        def math_block(renderer, tokens, idx, options, env):
            return (
                f'<mjx-container class="MathJax" jax="CHTML" display="true">'
                f'{escape_html(tokens[idx].content.strip())}</mjx-container>\n'
            )

        md.add_render_rule('paragraph_open', paragraph_open)
        md.add_render_rule('heading_open', heading_open)
        md.add_render_rule('blockquote_open', blockquote_open)
        md.add_render_rule('blockquote_close', blockquote_close)
        md.add_render_rule('fence', fence)
        md.add_render_rule('image', image)
        md.add_render_rule('math_inline', math_inline)
        md.add_render_rule('math_inline_double', math_block)
        md.add_render_rule('math_block', math_block)
        md.add_render_rule('math_block_label', math_block)
        return md

    def render_html(self, markdown: str) -> str:
        return self.md.render(markdown or '')

    async def render_markdown(self, markdown: str, target: Tag, source_path: str = '', component: Optional[Any] = None) -> None:
        """Render markdown into target, replacing its children."""
        self.cancel_pending(target)
        set_inner_html(target, self.render_html(markdown))
        if self.defer_embeds_ms > 0 and target.select_one(PENDING_EMBED_SELECTOR) is not None:
            loop = asyncio.get_running_loop()
            handle = loop.call_later(self.defer_embeds_ms / 1000, self._resolve_deferred, target)
            self._pending[id(target)] = (target, handle)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def cancel_pending(self, target: Optional[Tag] = None) -> int:
        """Cancel scheduled embed resolution for target, or for every target."""
        keys = list(self._pending) if target is None else [id(target)]
        cancelled = 0
        for key in keys:
            entry = self._pending.pop(key, None)
            if entry is not None:
                entry[1].cancel()
                cancelled += 1
        return cancelled

    def _resolve_deferred(self, target: Tag) -> None:
        self._pending.pop(id(target), None)
        self.resolve_embeds(target)

    def resolve_embeds(self, target: Tag) -> int:
        """Insert <img> children into pending image-embed placeholders."""
        document = owner_document(target)
        resolved = 0
        for embed in target.select(PENDING_EMBED_SELECTOR):
            if embed.find('img') is not None:
                continue
            img = document.new_tag('img', attrs={
                'alt': embed.get('alt', ''),
                'src': host_image_src(embed.get('src', '')),
            })
            embed.append(img)
            resolved += 1
        logger.debug(f"Resolved {resolved} deferred image embed(s)")
        return resolved
