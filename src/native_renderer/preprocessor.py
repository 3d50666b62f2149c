"""Markdown rewriting applied before the host engine renders a document.

The host engine and the legacy generator disagree on a handful of dialect
details. These rules rewrite the source so the host engine produces the
legacy behavior: soft breaks become hard breaks, script-scheme links stay
literal text and plain [[wikilinks]] are not resolved into navigation.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from src.legacy_renderer.uri import encode_uri

MATH_FENCE_INDENT = re.compile(r'^[\t ]+(\$\$)', re.MULTILINE)
WIKI_IMAGE_EMBED = re.compile(r'!\[\[([^\[\]|]+)(?:\|([^\[\]]+))?\]\]')
UNSAFE_LINK = re.compile(r'\[[^\]]+\]\(((?:javascript|vbscript|data):[^)\r\n]*)\)', re.IGNORECASE)
PLAIN_WIKILINK = re.compile(r'(^|[^!\\])(\[\[[^\[\]\r\n]+?\]\])')
CODE_SPAN = re.compile(r'(`+)([\s\S]*?)\1')
FENCE_DELIMITER = re.compile(r'^\s{0,3}((`{3,})|(~{3,}))(.*)$')
MATH_FENCE = re.compile(r'^\s*\$\$\s*$')
QUOTE_PREFIX = re.compile(r'^\s{0,3}(?:>\s?)+')
LIST_ITEM = re.compile(r'^(?:[*+-]|\d+[.)])\s+')
TRAILING_BREAK = re.compile(r'<br\s*/?>\s*$', re.IGNORECASE)


@dataclass
class FenceState:
    """Open code fence.

    Attributes:
        marker: Fence character, ` or ~
        length: Length of the opening marker run
    """
    marker: str
    length: int


def parse_fence_delimiter(line: str) -> Optional[FenceState]:
    match = FENCE_DELIMITER.match(line or '')
    if not match:
        return None
    run = match.group(1)
    return FenceState(marker=run[0], length=len(run))


def is_math_fence(line: str) -> bool:
    return bool(MATH_FENCE.match(line or ''))


class _BlockTracker:
    """Tracks code-fence and math-fence state while scanning lines."""

    def __init__(self):
        self.fence: Optional[FenceState] = None
        self.in_math = False

    def consume_delimiter(self, line: str) -> bool:
        """Update state for a delimiter line; return True if line was one."""
        delimiter = parse_fence_delimiter(line)
        if delimiter is not None:
            if self.fence is None:
                self.fence = delimiter
            elif delimiter.marker == self.fence.marker and delimiter.length >= self.fence.length:
                self.fence = None
            return True
        if self.fence is None and is_math_fence(line):
            self.in_math = not self.in_math
            return True
        return False

    @property
    def inside_block(self) -> bool:
        return self.fence is not None or self.in_math


def strip_math_fence_indent(markdown: str) -> str:
    return MATH_FENCE_INDENT.sub(r'\1', markdown)


def rewrite_image_embeds(markdown: str) -> str:
    """Rewrite ![[path|alt]] embeds into standard image syntax."""
    return WIKI_IMAGE_EMBED.sub(
        lambda m: f'![{m.group(2) or ""}]({encode_uri(m.group(1).strip())})',
        markdown,
    )


def neutralize_unsafe_links(markdown: str) -> str:
    """Escape links with script or data schemes so they render as text."""
    if not markdown:
        return markdown or ''

    def escape(match):
        start = match.start()
        previous = markdown[start - 1] if start > 0 else ''
        if previous in ('!', '\\'):
            return match.group(0)
        return '\\' + match.group(0)

    return UNSAFE_LINK.sub(escape, markdown)


def _escape_wikilinks(text: str) -> str:
    return PLAIN_WIKILINK.sub(lambda m: f'{m.group(1)}\\{m.group(2)}', text)


def _escape_outside_code_spans(line: str) -> str:
    if '[[' not in line:
        return line
    parts: List[str] = []
    cursor = 0
    for match in CODE_SPAN.finditer(line):
        parts.append(_escape_wikilinks(line[cursor:match.start()]))
        parts.append(match.group(0))
        cursor = match.end()
    parts.append(_escape_wikilinks(line[cursor:]))
    return ''.join(parts)


def neutralize_plain_wikilinks(markdown: str) -> str:
    """Escape [[Target]] references outside code spans and fenced blocks."""
    if not markdown:
        return markdown or ''
    lines = markdown.split('\n')
    tracker = _BlockTracker()
    for index, line in enumerate(lines):
        if tracker.consume_delimiter(line) or tracker.inside_block:
            continue
        lines[index] = _escape_outside_code_spans(line)
    return '\n'.join(lines)


def is_quote_line(line: str) -> bool:
    return bool(QUOTE_PREFIX.match(line or ''))


def strip_quote_prefix(line: str) -> str:
    return QUOTE_PREFIX.sub('', line or '', count=1)


def is_list_item(trimmed: str) -> bool:
    return bool(LIST_ITEM.match(trimmed or ''))


def starts_new_block(trimmed: str) -> bool:
    if not trimmed:
        return True
    return bool(
        re.match(r'^#{1,6}\s', trimmed)
        or trimmed.startswith('>')
        or re.match(r'^([-*_])(?:\s*\1){2,}\s*$', trimmed)
        or is_list_item(trimmed)
        or trimmed.startswith('|')
        or re.match(r'^<[^>]+>', trimmed)
        or parse_fence_delimiter(trimmed) is not None
    )


def append_hard_break(line: str) -> str:
    if not line or TRAILING_BREAK.search(line):
        return line
    return line.rstrip(' \t') + '<br>'


def append_quote_hard_break(line: str) -> str:
    if not line or re.search(r'\\\s*$', line):
        return line
    return line.rstrip(' \t') + '\\'


def inject_hard_breaks(markdown: str) -> str:
    """Promote soft line breaks to hard breaks outside fenced blocks.

    Quote lines followed by another quote line get a backslash break; callout
    marker lines are left alone. Other lines get a trailing <br> unless the
    next line starts a new block.
    """
    lines = (markdown or '').split('\n')
    tracker = _BlockTracker()

    for index in range(len(lines) - 1):
        line = lines[index]
        next_line = lines[index + 1]

        if tracker.consume_delimiter(line) or tracker.inside_block:
            continue
        if not line or not next_line:
            continue
        if re.search(r'[ \t]{2,}$', line) or line.endswith('\\'):
            continue

        if is_quote_line(line) and is_quote_line(next_line):
            current = strip_quote_prefix(line).strip()
            following = strip_quote_prefix(next_line).strip()
            if not current or not following:
                continue
            if current.startswith('[!') or following.startswith('[!'):
                continue
            lines[index] = append_quote_hard_break(line)
            continue

        trimmed = line.strip()
        if starts_new_block(trimmed) and not is_list_item(trimmed):
            continue
        if starts_new_block(next_line.strip()):
            continue
        lines[index] = append_hard_break(line)

    return '\n'.join(lines)


def preprocess_markdown(markdown: str, converter=None) -> str:
    """Apply every host-side rewrite in order.

    Args:
        markdown: Raw document text
        converter: Legacy generator; its strip_frontmatter hook is used when present

    Returns:
        Markdown ready for the host engine
    """
    output = strip_math_fence_indent(markdown or '')
    output = rewrite_image_embeds(output)
    strip_frontmatter = getattr(converter, 'strip_frontmatter', None)
    if callable(strip_frontmatter):
        output = strip_frontmatter(output)
    output = neutralize_unsafe_links(output)
    output = neutralize_plain_wikilinks(output)
    return inject_hard_breaks(output)
