"""Structural and text passes that align a host tree with the legacy dialect."""

import logging
import re
from typing import List

from bs4 import NavigableString, Tag
from bs4.element import Comment

from src.legacy_renderer.html_fragments import owner_document, parse_fragment

from .images import SKIP_STYLE_MARKER, canonicalize_relative_url
from .node_kinds import UNSAFE_TAGS, allowed_attributes, classify, is_host_only_attribute, kept_classes

logger = logging.getLogger(__name__)

LINKIFY_SKIP_TAGS = frozenset({
    'a', 'pre', 'code', 'kbd', 'samp', 'script', 'style', 'textarea', 'svg',
    'mjx-container', 'mjx-math', 'math',
})
TYPOGRAPHER_SKIP_TAGS = LINKIFY_SKIP_TAGS - {'a'}
TYPOGRAPHER_TRIGGER = re.compile(r'["\']|\.{3}|---?|\+-|\((?:c|r|tm)\)', re.IGNORECASE)
DELETE_LABEL = re.compile(r'[：:]$')
LANGUAGE_CLASS = re.compile(r'language-([\w-]+)')

STYLED_TAGS = (
    'p', 'blockquote', 'pre', 'code', 'ul', 'ol', 'li', 'figure', 'figcaption',
    'img', 'a', 'table', 'thead', 'th', 'td', 'hr', 'strong', 'em', 'del',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
)
TRIMMED_BLOCKS = ('p', 'li', 'blockquote', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'figcaption', 'td', 'th')
EDGE_WHITESPACE = ' \t\xa0'


def _text_nodes(container: Tag) -> List[NavigableString]:
    return [
        node for node in container.descendants
        if isinstance(node, NavigableString) and not isinstance(node, Comment)
    ]


def _inside(node, tags) -> bool:
    return any(parent.name in tags for parent in node.parents)


def prune_attributes(container: Tag, final_stage: bool = False) -> None:
    """Drop host-only and disallowed attributes from every element."""
    for element in container.find_all(True):
        kind = classify(element.name)
        allowed = allowed_attributes(kind, final_stage)
        for name in list(element.attrs):
            lowered = name.lower()
            if is_host_only_attribute(lowered) or lowered not in allowed:
                del element.attrs[name]

        classes = element.get('class')
        if classes:
            keep = kept_classes(kind, list(classes), final_stage)
            if keep:
                element['class'] = keep
            else:
                del element['class']

        style = element.get('style')
        if style is not None and not style.strip():
            del element['style']


def rename_strike_tags(container: Tag) -> None:
    for element in container.find_all('s'):
        element.name = 'del'


def merge_delete_nesting(container: Tag) -> None:
    """Nest "<del>label:</del> <del>text</del>" pairs the way the legacy parser does."""
    for first in container.find_all('del'):
        if first.parent is None or first.parent.name == 'del':
            continue
        if first.find('del') is not None:
            continue

        spacer = first.next_sibling
        if isinstance(spacer, NavigableString) and not spacer.strip():
            second = spacer.next_sibling
        elif isinstance(spacer, Tag) and spacer.name == 'del':
            second, spacer = spacer, None
        else:
            continue

        if not isinstance(second, Tag) or second.name != 'del':
            continue
        if not DELETE_LABEL.search(first.get_text().strip()):
            continue
        if not second.get_text().strip():
            continue

        if not re.search(r'\s$', first.get_text()):
            first.append(' ')
        first.append(second.extract())
        if spacer is not None and spacer.parent is not None:
            spacer.extract()


def strip_unsafe_tags(container: Tag) -> None:
    for element in container.find_all(list(UNSAFE_TAGS)):
        if not element.decomposed:
            element.decompose()


def linkify_text(container: Tag, converter) -> None:
    """Wrap bare URLs in anchors where the legacy parser would linkify them."""
    document = owner_document(container)
    for node in _text_nodes(container):
        if node.parent is None or _inside(node, LINKIFY_SKIP_TAGS):
            continue
        original = str(node)
        if '.' not in original:
            continue

        pieces = []
        cursor = 0
        for match in converter.linkify_matches(original):
            start, end = match.index, match.last_index
            if start < cursor or end <= start or end > len(original):
                continue
            if start > cursor:
                pieces.append(NavigableString(original[cursor:start]))
            display = original[start:end]
            anchor = document.new_tag('a', href=converter.validate_link((match.url or match.text or display).strip()))
            anchor.string = display
            pieces.append(anchor)
            cursor = end

        if cursor == 0:
            continue
        if cursor < len(original):
            pieces.append(NavigableString(original[cursor:]))
        for piece in pieces:
            node.insert_before(piece)
        node.extract()


def apply_typographer(container: Tag, converter) -> None:
    """Apply the legacy parser's typographic replacements to plain text."""
    if not converter.typographer_enabled:
        return
    for node in _text_nodes(container):
        if node.parent is None or _inside(node, TYPOGRAPHER_SKIP_TAGS):
            continue
        original = str(node)
        if not original or not TYPOGRAPHER_TRIGGER.search(original):
            continue
        rendered = converter.render_inline(original)
        if not rendered or rendered == original:
            continue
        normalized = parse_fragment(rendered).get_text()
        if normalized and normalized != original:
            node.replace_with(NavigableString(normalized))


def sanitize_anchors(container: Tag, converter) -> None:
    for anchor in container.find_all('a', href=True):
        safe = converter.validate_link(anchor['href'], False)
        anchor['href'] = canonicalize_relative_url(safe)


def convert_pre_blocks(container: Tag, converter) -> None:
    """Replace host code blocks with the legacy code snippet markup."""
    for pre in container.find_all('pre'):
        if pre.parent is None:
            continue
        if any('code-snippet__fix' in (parent.get('class') or []) for parent in pre.parents if isinstance(parent, Tag)):
            continue
        code = pre.find('code')
        class_names = ' '.join((pre.get('class') or []) + ((code.get('class') or []) if code is not None else []))
        match = LANGUAGE_CLASS.search(class_names)
        lang = match.group(1) if match else 'text'
        content = (code if code is not None else pre).get_text()

        fragment = parse_fragment(converter.create_code_block(content, lang))
        replacement = next((node for node in fragment.contents if isinstance(node, Tag)), None)
        if replacement is not None:
            pre.replace_with(replacement)
            logger.debug(f"Converted code block (language: {lang})")


def _set_style_if_missing(element: Tag, style: str) -> None:
    existing = element.get('style')
    if existing and existing.strip():
        return
    element['style'] = style


def apply_theme_styles(container: Tag, converter) -> None:
    for tag in STYLED_TAGS:
        style = converter.get_inline_style(tag)
        if not style:
            continue
        for element in container.find_all(tag):
            if tag == 'img' and element.get(SKIP_STYLE_MARKER) == '1':
                continue
            _set_style_if_missing(element, style)

    li_p_style = converter.get_inline_style('li p')
    if li_p_style:
        for paragraph in container.select('li > p'):
            _set_style_if_missing(paragraph, li_p_style)


def _trim_edge(block: Tag, leading: bool) -> None:
    node = block.contents[0] if leading and block.contents else (block.contents[-1] if block.contents else None)
    while isinstance(node, NavigableString) and not isinstance(node, Comment):
        original = str(node)
        trimmed = original.lstrip(EDGE_WHITESPACE) if leading else original.rstrip(EDGE_WHITESPACE)
        if trimmed == original:
            return
        if trimmed:
            node.replace_with(NavigableString(trimmed))
            return
        following = node.next_sibling if leading else node.previous_sibling
        node.extract()
        node = following


def trim_block_whitespace(container: Tag) -> None:
    """Remove spaces and no-break spaces at the edges of block text."""
    blocks = container.find_all(list(TRIMMED_BLOCKS))
    for block in blocks:
        _trim_edge(block, leading=True)
    for block in blocks:
        _trim_edge(block, leading=False)
