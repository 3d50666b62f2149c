"""Legacy Markdown to styled-HTML generator.

This module wraps markdown-it-py with render rules that inline the theme's
CSS into every element, since the publishing surface strips stylesheets.
It also exposes the reusable helpers (link validation, callout markup, code
blocks, figures, post-processing hooks) that the transcoder relies on to
reproduce the same dialect from host-rendered trees.
"""

import logging
import re
from typing import Any, List, Optional

from markdown_it import MarkdownIt
from mdit_py_plugins.dollarmath import dollarmath_plugin

from . import code_blocks
from .callouts import mark_callout_tokens, render_callout_open
from .links import escape_html, sanitize_html, validate_link
from .models import CalloutInfo
from .resolver import VaultPathResolver
from .theme import Theme
from .uri import decode_uri_component

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r'^---\n[\s\S]*?\n---\n?')
WIKI_IMAGE_PATTERN = re.compile(r'!\[\[(.*?)(?:\|(.*?))?\]\]')
IMAGE_EXTENSION_PATTERN = re.compile(r'\.(jpg|jpeg|png|gif|webp|svg|bmp)$', re.IGNORECASE)
SIZE_HINT_PATTERN = re.compile(r'\|\s*\d+(x\d+)?\s*$')
SIMPLE_FIGURE_STYLE = 'display:block;margin:16px 0;text-align:center;'
WATERMARK_SPACER_STYLE = 'display:block;height:8px;line-height:8px;font-size:0;'
DEFAULT_IMAGE_CAPTION = '图片'

LIST_ITEM_PATTERN = re.compile(r'<li[^>]*>[\s\S]*?</li>')
PARAGRAPH_STYLE_PATTERN = re.compile(r'<p style="[^"]*">')
WRAPPED_FIGURE_PATTERN = re.compile(r'<p[^>]*>\s*(<figure[\s\S]*?</figure>)\s*</p>', re.IGNORECASE)
BLOCKQUOTE_PATTERN = re.compile(r'<blockquote[^>]*>[\s\S]*?</blockquote>')
PARAGRAPH_MARGIN_PATTERN = re.compile(r'margin: 0 0 \d+px 0;')
WRAPPED_MATH_PATTERN = re.compile(r'<p[^>]*>\s*(<section class="math-block"[\s\S]*?</section>)\s*</p>')
MATH_CLASS_PATTERN = re.compile(r' class="math-(?:block|inline)"')


def safe_decode_caption(text: str) -> str:
    """Decode percent-escapes in a caption, keeping the raw text when malformed."""
    if not text or '%' not in text:
        return text or ''
    try:
        return decode_uri_component(text)
    except ValueError:
        return text


def extract_file_name(src: str) -> str:
    """Return the last path component of src without its image extension."""
    if not src:
        return DEFAULT_IMAGE_CAPTION
    name = src.split('/')[-1].split('\\')[-1]
    return IMAGE_EXTENSION_PATTERN.sub('', name) or DEFAULT_IMAGE_CAPTION


def derive_image_caption(src: str = '', alt: str = '') -> str:
    """Derive a figure caption from alt text, or from the file name when alt is empty."""
    caption = alt or extract_file_name(src)
    caption = safe_decode_caption(caption)
    caption = re.sub(r'[?#].*$', '', caption)
    caption = SIZE_HINT_PATTERN.sub('', caption)
    caption = IMAGE_EXTENSION_PATTERN.sub('', caption)
    return caption or DEFAULT_IMAGE_CAPTION


class LegacyConverter:
    """Markdown to legacy-dialect HTML generator.

    Attributes:
        theme: Theme providing inline styles
        avatar_url: Watermark avatar; enables the watermark figure layout
        show_image_caption: Whether figures get a caption
        resolver: Optional VaultPathResolver for local image sources
        source_path: Path of the document being rendered, relative to the vault
        md: Configured markdown-it-py parser
    """

    def __init__(
        self,
        theme: Optional[Theme] = None,
        avatar_url: str = '',
        show_image_caption: bool = True,
        resolver: Optional[VaultPathResolver] = None,
        source_path: str = '',
    ):
        self.theme = theme or Theme()
        self.avatar_url = avatar_url
        self.show_image_caption = show_image_caption
        self.resolver = resolver
        self.source_path = source_path
        self.md = self._build_markdown_it()
        self._inline_md = (
            MarkdownIt('zero', {'typographer': True})
            .enable(['replacements', 'smartquotes'])
        )

    def _build_markdown_it(self) -> MarkdownIt:
        md = MarkdownIt('default', {
            'html': True,
            'breaks': True,
            'linkify': True,
            'typographer': True,
        })
        md.use(dollarmath_plugin, allow_digits=False, double_inline=True)
        md.core.ruler.push('legacy_callouts', mark_callout_tokens)
        self._setup_render_rules(md)
        return md

    def update_source_path(self, path: str) -> None:
        self.source_path = path or ''

    @property
    def typographer_enabled(self) -> bool:
        return bool(self.md.options.get('typographer'))

    def get_inline_style(self, tag: str) -> str:
        return self.theme.get_style(tag)

    def validate_link(self, url: str, is_image: bool = False) -> str:
        return validate_link(url, is_image)

    def resolve_image_path(self, src: str) -> str:
        if self.resolver is None:
            return src
        return self.resolver.resolve(src, self.source_path)

    def extract_file_name(self, src: str) -> str:
        return extract_file_name(src)

    def strip_frontmatter(self, markdown: str) -> str:
        return FRONTMATTER_PATTERN.sub('', markdown or '', count=1)

    def render_callout_open(self, info: CalloutInfo) -> str:
        return render_callout_open(self.theme, info)

    def create_code_block(self, content: str, lang: str) -> str:
        return code_blocks.create_code_block(
            content,
            lang,
            mac_header=self.theme.mac_code_block,
            line_numbers=self.theme.code_line_number,
        )

    def render_inline(self, text: str) -> str:
        """Apply typographic substitutions to plain text and return HTML."""
        return self._inline_md.renderInline(text)

    def linkify_matches(self, text: str) -> List[Any]:
        """Return linkify-it-py matches for bare URLs in text."""
        if self.md.linkify is None:
            return []
        return self.md.linkify.match(text) or []

    def render_figure(self, src: str, alt: str = '') -> str:
        """Return figure markup for an image with its caption.

        In watermark mode (avatar_url set) the figure carries an avatar header
        and left-aligned layout instead of a caption below the image.
        """
        caption = escape_html(derive_image_caption(src, alt))
        img = (
            f'<img src="{escape_html(src)}" alt="{escape_html(alt)}" '
            f'style="{self.get_inline_style("img")}">'
        )

        if self.avatar_url:
            figure_style = self.get_inline_style('figure').replace('text-align: center;', 'text-align: left;')
            return (
                f'<figure style="{figure_style}">'
                f'<div style="{self.get_inline_style("avatar-header")}">'
                f'<img src="{escape_html(self.avatar_url)}" alt="logo" style="{self.get_inline_style("avatar")}">'
                f'<span style="{self.get_inline_style("avatar-caption")}">{caption}</span>'
                f'</div>'
                f'<section style="{WATERMARK_SPACER_STYLE}">&nbsp;</section>'
                f'{img}</figure>'
            )

        if self.show_image_caption:
            figcaption = f'<figcaption style="{self.get_inline_style("figcaption")}">{caption}</figcaption>'
            return f'<figure style="{SIMPLE_FIGURE_STYLE}">{img}{figcaption}</figure>'
        return f'<figure style="{SIMPLE_FIGURE_STYLE}">{img}</figure>'

    def _setup_render_rules(self, md: MarkdownIt) -> None:
        style = self.get_inline_style

        def styled_open(tag: str):
            # renderToken keeps markdown-it's block newlines, which the host output also carries
            def rule(renderer, tokens, idx, options, env):
                token = tokens[idx]
                token.tag = tag
                token.attrs = {'style': style(tag)}
                return renderer.renderToken(tokens, idx, options, env)
            return rule

        def paragraph_open(renderer, tokens, idx, options, env):
            if tokens[idx].hidden:
                return ''
            return f'<p style="{style("p")}">'

        def heading_open(renderer, tokens, idx, options, env):
            tag = tokens[idx].tag
            return f'<{tag} style="{style(tag)}">'

        def blockquote_open(renderer, tokens, idx, options, env):
            info = tokens[idx].meta.get('callout')
            if info is not None:
                return self.render_callout_open(info)
            return f'<blockquote style="{style("blockquote")}">'

        def blockquote_close(renderer, tokens, idx, options, env):
            if tokens[idx].meta.get('callout') is not None:
                return '</section></section>'
            return '</blockquote>'

        def code_inline(renderer, tokens, idx, options, env):
            return f'<code style="{style("code")}">{escape_html(tokens[idx].content)}</code>'

        def fence(renderer, tokens, idx, options, env):
            info = (tokens[idx].info or '').strip()
            lang = info.split()[0] if info else 'text'
            return self.create_code_block(tokens[idx].content, lang) + '\n'

        def code_block(renderer, tokens, idx, options, env):
            return self.create_code_block(tokens[idx].content, 'text') + '\n'

        def link_open(renderer, tokens, idx, options, env):
            href = self.validate_link(tokens[idx].attrGet('href') or '')
            return f'<a href="{escape_html(href)}" style="{style("a")}">'

        def s_open(renderer, tokens, idx, options, env):
            return f'<del style="{style("del")}">'

        def s_close(renderer, tokens, idx, options, env):
            return '</del>'

        def image(renderer, tokens, idx, options, env):
            token = tokens[idx]
            src = self.resolve_image_path(token.attrGet('src') or '')
            return self.render_figure(src, token.content or '')

        def hr(renderer, tokens, idx, options, env):
            return f'<hr style="{style("hr")}">\n'

        def math_inline(renderer, tokens, idx, options, env):
            return f'<span class="math-inline" style="{style("em")}">{escape_html(tokens[idx].content)}</span>'

        def math_block(renderer, tokens, idx, options, env):
            return (
                f'<section class="math-block" style="text-align: center; margin: 16px 0; overflow-x: auto;">'
                f'{escape_html(tokens[idx].content.strip())}</section>\n'
            )

        for tag in ('bullet_list', 'ordered_list', 'list_item', 'strong', 'em', 'table', 'thead', 'th', 'td'):
            html_tag = {
                'bullet_list': 'ul',
                'ordered_list': 'ol',
                'list_item': 'li',
            }.get(tag, tag)
            md.add_render_rule(f'{tag}_open', styled_open(html_tag))

        md.add_render_rule('paragraph_open', paragraph_open)
        md.add_render_rule('heading_open', heading_open)
        md.add_render_rule('blockquote_open', blockquote_open)
        md.add_render_rule('blockquote_close', blockquote_close)
        md.add_render_rule('code_inline', code_inline)
        md.add_render_rule('fence', fence)
        md.add_render_rule('code_block', code_block)
        md.add_render_rule('link_open', link_open)
        md.add_render_rule('s_open', s_open)
        md.add_render_rule('s_close', s_close)
        md.add_render_rule('image', image)
        md.add_render_rule('hr', hr)
        md.add_render_rule('math_inline', math_inline)
        md.add_render_rule('math_inline_double', math_block)
        md.add_render_rule('math_block', math_block)
        md.add_render_rule('math_block_label', math_block)

    def fix_list_paragraphs(self, html: str) -> str:
        """Restyle paragraphs inside list items with the compact 'li p' style."""
        li_p_style = self.get_inline_style('li p')
        return LIST_ITEM_PATTERN.sub(
            lambda m: PARAGRAPH_STYLE_PATTERN.sub(f'<p style="{li_p_style}">', m.group(0)),
            html,
        )

    def unwrap_figures(self, html: str) -> str:
        """Remove <p> wrappers around figures, which would otherwise split into empty paragraphs."""
        return WRAPPED_FIGURE_PATTERN.sub(r'\1', html)

    def remove_blockquote_paragraph_margins(self, html: str) -> str:
        return BLOCKQUOTE_PATTERN.sub(
            lambda m: PARAGRAPH_MARGIN_PATTERN.sub('margin: 0;', m.group(0)),
            html,
        )

    def fix_math_tags(self, html: str) -> str:
        html = WRAPPED_MATH_PATTERN.sub(r'\1', html)
        return MATH_CLASS_PATTERN.sub('', html)

    def sanitize_html(self, html: str) -> str:
        return sanitize_html(html)

    def post_process(self, html: str) -> str:
        """Run the shared post-processing hooks in order."""
        html = self.fix_list_paragraphs(html)
        html = self.unwrap_figures(html)
        html = self.remove_blockquote_paragraph_margins(html)
        html = self.fix_math_tags(html)
        return self.sanitize_html(html)

    def wrap_section(self, html: str) -> str:
        return f'<section style="{self.get_inline_style("section")}">{html}</section>'

    def render(self, markdown: str) -> str:
        """Synchronously convert Markdown to legacy-dialect HTML."""
        text = WIKI_IMAGE_PATTERN.sub(
            lambda m: f'![{m.group(2) or ""}]({m.group(1)})',
            markdown or '',
        )
        html = self.md.render(self.strip_frontmatter(text))
        return self.wrap_section(self.post_process(html))

    async def convert(self, markdown: str) -> str:
        return self.render(markdown)
