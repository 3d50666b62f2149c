"""Callout blocks in the legacy dialect.

A callout is a quote block whose first line reads "[!type] optional title".
The legacy shape is an outer <section> with a tinted header (icon + title)
and a content <section>; the markup is closed by "</section></section>".
"""

import re
from typing import List, Optional

from .links import escape_html
from .models import CalloutInfo
from .theme import Theme

DEFAULT_CALLOUT_ICON = '📌'

CALLOUT_ICONS = {
    'note': 'ℹ️',
    'info': 'ℹ️',
    'todo': '☑️',
    'abstract': '📄',
    'summary': '📄',
    'tldr': '📄',
    'tip': '💡',
    'hint': '💡',
    'important': '💡',
    'success': '✅',
    'check': '✅',
    'done': '✅',
    'question': '❓',
    'help': '❓',
    'faq': '❓',
    'warning': '⚠️',
    'caution': '⚠️',
    'attention': '⚠️',
    'failure': '❌',
    'fail': '❌',
    'missing': '❌',
    'danger': '🚨',
    'error': '❌',
    'bug': '🐛',
    'quote': '💬',
    'cite': '📝',
    'example': '📋',
}

CALLOUT_LABELS = {
    'note': '备注',
    'info': '信息',
    'todo': '待办',
    'abstract': '摘要',
    'summary': '摘要',
    'tldr': '摘要',
    'tip': '提示',
    'hint': '提示',
    'important': '重要',
    'success': '成功',
    'check': '成功',
    'done': '完成',
    'question': '问题',
    'help': '问题',
    'faq': '问题',
    'warning': '警告',
    'caution': '警告',
    'attention': '注意',
    'failure': '失败',
    'fail': '失败',
    'missing': '缺失',
    'danger': '危险',
    'error': '错误',
    'bug': 'Bug',
    'quote': '引用',
    'cite': '引用',
    'example': '示例',
}

CALLOUT_MARKER_PATTERN = re.compile(r'^\[!([\w-]+)\][+-]?[ \t]*(.*)$')


def title_case(value: str) -> str:
    text = (value or '').strip()
    if not text:
        return ''
    return text[0].upper() + text[1:]


def resolve_callout_icon(callout_type: str) -> str:
    key = (callout_type or '').strip().lower()
    return CALLOUT_ICONS.get(key, DEFAULT_CALLOUT_ICON)


def build_callout_info(callout_type: str, title: str = '') -> CalloutInfo:
    """Build CalloutInfo from a type keyword and an optional explicit title."""
    key = (callout_type or '').strip().lower()
    resolved_title = (title or '').strip() or title_case(key) or 'Callout'
    return CalloutInfo(
        type=key or resolved_title.lower(),
        title=resolved_title,
        icon=resolve_callout_icon(key or resolved_title),
        label=CALLOUT_LABELS.get(key, key or resolved_title),
    )


def parse_callout_marker(first_line: str) -> Optional[CalloutInfo]:
    """Parse "[!type] title" into CalloutInfo, or None if not a marker line."""
    match = CALLOUT_MARKER_PATTERN.match((first_line or '').strip())
    if not match:
        return None
    return build_callout_info(match.group(1), match.group(2))


def render_callout_open(theme: Theme, info: CalloutInfo) -> str:
    """Return the opening markup of a legacy callout.

    The caller appends the content and then "</section></section>".
    """
    color = theme.color
    if theme.config['blockquote_style'] == 'center':
        outer_style = (
            f"margin: 30px 60px; padding: 0; text-align: center; background: {color}1A; "
            f"border-radius: 4px; overflow: hidden;"
        )
        header_justify = ' justify-content: center;'
    elif theme.theme_name == 'wechat':
        outer_style = (
            f"margin: 16px 0 16px 4px; border-left: 3px solid {color}99; background: {color}1A; "
            f"border-radius: 3px; overflow: hidden;"
        )
        header_justify = ''
    else:
        outer_style = (
            f"margin: 16px 0 16px 0; border-left: 4px solid {color}; background: {color}1A; "
            f"border-radius: 3px; overflow: hidden;"
        )
        header_justify = ''

    header_style = (
        f"display: flex; align-items: center;{header_justify} padding: 8px 16px; "
        f"background: {color}26; font-weight: bold; color: {color};"
    )
    return (
        f'<section style="{outer_style}">'
        f'<section style="{header_style}">'
        f'<span style="margin-right: 8px;">{info.icon}</span>'
        f'<span>{escape_html(info.title)}</span>'
        f'</section>'
        f'<section style="padding: 12px 16px;">'
    )


def _take_callout_marker(tokens, idx: int) -> Optional[CalloutInfo]:
    inline = tokens[idx + 2]
    children = inline.children or []
    split_at = next(
        (pos for pos, child in enumerate(children) if child.type in ('softbreak', 'hardbreak')),
        len(children),
    )
    first_line = ''.join(child.content for child in children[:split_at] if child.type == 'text')
    info = parse_callout_marker(first_line)
    if info is None:
        return None

    remaining = children[split_at + 1:]
    inline.children = remaining
    inline.content = inline.content.split('\n', 1)[1] if '\n' in inline.content else ''
    if not any(child.content.strip() or child.type not in ('text', 'softbreak') for child in remaining):
        tokens[idx + 1].hidden = True
        # paragraph_close follows the inline token
        if idx + 3 < len(tokens) and tokens[idx + 3].type == 'paragraph_close':
            tokens[idx + 3].hidden = True
    return info


def mark_callout_tokens(state) -> None:
    """markdown-it core rule: attach CalloutInfo to callout blockquote tokens.

    The marker line is removed from the first paragraph, and blockquote
    open/close tokens carry the info in ``meta['callout']`` (None for plain
    quotes).
    """
    stack: List[Optional[CalloutInfo]] = []
    tokens = state.tokens
    for idx, token in enumerate(tokens):
        if token.type == 'blockquote_open':
            info = None
            if (
                idx + 2 < len(tokens)
                and tokens[idx + 1].type == 'paragraph_open'
                and tokens[idx + 2].type == 'inline'
            ):
                info = _take_callout_marker(tokens, idx)
            token.meta['callout'] = info
            stack.append(info)
        elif token.type == 'blockquote_close' and stack:
            token.meta['callout'] = stack.pop()
