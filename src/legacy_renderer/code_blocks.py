"""Styled code block markup for the legacy dialect.

Code is tokenized with Pygments and every token is emitted as a <span> with
an inline GitHub-dark color, since the publishing surface drops stylesheets
and class names. Whitespace is written as &nbsp; and line breaks as <br/>.
"""

import html
import logging
from typing import List, Tuple

from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Token,
)
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

BACKGROUND = '#0d1117'
FOREGROUND = '#f0f6fc'
BAR_BACKGROUND = '#161b22'
BORDER_COLOR = '#30363d'
LINE_HEIGHT = '1.75'

TOKEN_STYLES = {
    Keyword: 'color:#ff7b72 !important;',
    Keyword.Type: 'color:#ffa657 !important;',
    Keyword.Constant: 'color:#79c0ff !important;',
    Name.Builtin: 'color:#ffa657 !important;',
    Name.Function: 'color:#d2a8ff !important;',
    Name.Class: 'color:#d2a8ff !important;',
    Name.Decorator: 'color:#ffa657 !important;',
    Name.Tag: 'color:#7ee787 !important;',
    Name.Attribute: 'color:#79c0ff !important;',
    Name.Variable: 'color:#ffa657 !important;',
    Name.Constant: 'color:#79c0ff !important;',
    Name.Property: 'color:#79c0ff !important;',
    String: 'color:#a5d6ff !important;',
    String.Regex: 'color:#a5d6ff !important;',
    Number: 'color:#79c0ff !important;',
    Comment: 'color:#8b949e !important;font-style:italic !important;',
    Comment.Preproc: 'color:#ffa657 !important;',
    Operator: 'color:#ff7b72 !important;',
    Punctuation: 'color:#e6e6e6 !important;',
}

Run = Tuple[str, str]

MAC_HEADER = (
    f'<section style="display:block !important;background:{BAR_BACKGROUND} !important;'
    f'padding:10px !important;border:none !important;border-bottom:1px solid {BORDER_COLOR} !important;'
    f'border-radius:8px 8px 0 0 !important;line-height:1 !important;">'
    + ''.join(
        f'<span style="display:inline-block !important;width:12px !important;height:12px !important;'
        f'border-radius:50% !important;background:{dot} !important;{margin}"></span>'
        for dot, margin in (
            ('#ff5f57', 'margin-right:8px !important;'),
            ('#ffbd2e', 'margin-right:8px !important;'),
            ('#28c840', ''),
        )
    )
    + '</section>'
)


def _style_for(token_type) -> str:
    while token_type is not Token:
        style = TOKEN_STYLES.get(token_type)
        if style:
            return style
        token_type = token_type.parent
    return ''


def _get_lexer(lang: str):
    try:
        return get_lexer_by_name(lang or 'text', stripnl=False, ensurenl=False)
    except ClassNotFound:
        logger.debug(f"No lexer for language '{lang}', using plain text")
        return TextLexer(stripnl=False, ensurenl=False)


def highlight_lines(code: str, lang: str) -> List[List[Run]]:
    """Tokenize code into lines of (style, text) runs."""
    lines: List[List[Run]] = [[]]
    for token_type, value in _get_lexer(lang).get_tokens(code):
        style = _style_for(token_type)
        parts = value.split('\n')
        for position, part in enumerate(parts):
            if position > 0:
                lines.append([])
            if part:
                lines[-1].append((style, part))
    return lines


def _format_text(text: str) -> str:
    escaped = html.escape(text.replace('\t', '    '), quote=False)
    return escaped.replace(' ', '&nbsp;')


def format_line(runs: List[Run]) -> str:
    parts = []
    for style, text in runs:
        formatted = _format_text(text)
        if style:
            parts.append(f'<span style="{style}">{formatted}</span>')
        else:
            parts.append(formatted)
    return ''.join(parts)


def create_code_block(content: str, lang: str, mac_header: bool = True, line_numbers: bool = False) -> str:
    """Render a fenced code block as legacy section markup.

    Args:
        content: Raw code
        lang: Language name used to pick the lexer ("text" when unknown)
        mac_header: Prepend the three-dot window header
        line_numbers: Add a right-aligned line-number column

    Returns:
        HTML for a <section class="code-snippet__fix"> block
    """
    lines = content.replace('\r\n', '\n').split('\n')
    while lines and not lines[-1].strip():
        lines.pop()
    highlighted = highlight_lines('\n'.join(lines), lang)[:max(len(lines), 1)]

    if line_numbers:
        rendered_lines = [format_line(runs) or '&nbsp;' for runs in highlighted]
        numbers = ''.join(
            f'<section style="height:1.75em !important;line-height:{LINE_HEIGHT} !important;'
            f'padding:0 12px 0 12px !important;font-size:13px !important;color:#95989C !important;'
            f'text-align:right !important;white-space:nowrap !important;vertical-align:top !important;'
            f'margin:0 !important;">{number}</section>'
            for number in range(1, len(rendered_lines) + 1)
        )
        code_lines = (
            f'<section style="white-space:nowrap !important;display:inline-block !important;'
            f'min-width:100% !important;line-height:{LINE_HEIGHT} !important;font-size:13px !important;">'
            f'{"<br/>".join(rendered_lines)}</section>'
        )
        code_html = (
            '<section style="display:flex !important;align-items:flex-start !important;'
            'overflow-x:hidden !important;overflow-y:visible !important;width:100% !important;'
            'padding:0 !important;margin:0 !important;">'
            '<section style="text-align:right !important;padding:12px 0 12px 0 !important;'
            'border-right:1px solid rgba(255,255,255,0.1) !important;user-select:none !important;'
            'background:transparent !important;flex:0 0 auto !important;min-width:3.5em !important;'
            f'margin:0 !important;">{numbers}</section>'
            '<section style="flex:1 1 auto !important;overflow-x:auto !important;overflow-y:visible !important;'
            f'padding:12px 12px 12px 16px !important;margin:0 !important;min-width:0 !important;">{code_lines}</section>'
            '</section>'
        )
    else:
        code_lines = (
            f'<section style="white-space:nowrap !important;display:inline-block !important;'
            f'min-width:100% !important;word-break:keep-all !important;overflow-wrap:normal !important;'
            f'line-height:{LINE_HEIGHT} !important;font-size:13px !important;margin:0 !important;">'
            f'{"<br/>".join(format_line(runs) for runs in highlighted)}</section>'
        )
        code_html = (
            '<section style="display:flex !important;align-items:flex-start !important;'
            'overflow-x:hidden !important;overflow-y:visible !important;width:100% !important;'
            'padding:0 !important;margin:0 !important;">'
            '<section style="flex:1 1 auto !important;overflow-x:auto !important;overflow-y:visible !important;'
            f'padding:12px !important;min-width:0 !important;margin:0 !important;">{code_lines}</section>'
            '</section>'
        )

    return (
        f'<section class="code-snippet__fix" style="width:100% !important;margin:12px 0 !important;'
        f'background:{BACKGROUND} !important;border:1px solid {BORDER_COLOR} !important;'
        f'border-radius:8px !important;overflow:hidden !important;'
        f'box-shadow: 0 4px 12px rgba(0,0,0,0.3) !important;display:block !important;">'
        f'{MAC_HEADER if mac_header else ""}'
        f'<section style="padding:0 !important;border:none !important;background:{BACKGROUND} !important;'
        f'color:{FOREGROUND} !important;font-family:\'SF Mono\',Consolas,Monaco,monospace !important;'
        f'font-size:13px !important;line-height:{LINE_HEIGHT} !important;white-space:nowrap !important;'
        f'overflow-x:auto !important;display:block !important;">'
        f'<pre style="margin:0 !important;padding:0 !important;background:{BACKGROUND} !important;'
        f'font-family:inherit !important;font-size:13px !important;line-height:inherit !important;'
        f'color:{FOREGROUND} !important;white-space:nowrap !important;overflow-x:visible !important;'
        f'display:inline-block !important;min-width:100% !important;">{code_html}</pre>'
        f'</section></section>'
    )
