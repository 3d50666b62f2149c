"""Conversion of host-native callout blocks into the legacy callout shape."""

import logging

from bs4 import Tag

from src.legacy_renderer.callouts import build_callout_info
from src.legacy_renderer.html_fragments import inner_html, parse_fragment

logger = logging.getLogger(__name__)

CALLOUT_SELECTOR = 'div.callout, aside.callout, blockquote.callout, section.callout'
CALLOUT_TAGS = frozenset({'div', 'aside', 'blockquote', 'section'})
LEGACY_CALLOUT_CLOSE = '</section></section>'


def _is_callout(node) -> bool:
    return (
        isinstance(node, Tag)
        and node.name in CALLOUT_TAGS
        and 'callout' in (node.get('class') or [])
    )


def callout_depth(node: Tag) -> int:
    return sum(1 for parent in node.parents if _is_callout(parent))


def _title_text(callout: Tag) -> str:
    title = (
        callout.select_one(':scope > .callout-title .callout-title-inner')
        or callout.select_one(':scope > .callout-title-inner')
        or callout.select_one(':scope > .callout-title')
    )
    return title.get_text().strip() if title is not None else ''


def convert_host_callouts(container: Tag, converter) -> int:
    """Replace host callouts with legacy callout markup, deepest first.

    Returns:
        Number of callouts converted
    """
    callouts = container.select(CALLOUT_SELECTOR)
    if not callouts:
        return 0

    # Stable sort keeps document order among callouts of equal depth.
    callouts.sort(key=callout_depth, reverse=True)
    converted = 0
    for callout in callouts:
        if callout.parent is None:
            continue

        callout_type = (callout.get('data-callout') or callout.get('data-callout-type') or '').strip().lower()
        info = build_callout_info(callout_type, _title_text(callout))

        content = (
            callout.select_one(':scope > .callout-content')
            or callout.select_one(':scope > .callout-body')
        )
        content_html = inner_html(content if content is not None else callout)

        open_html = converter.render_callout_open(info)
        if not open_html:
            continue

        fragment = parse_fragment(f"{open_html}{content_html}{LEGACY_CALLOUT_CLOSE}")
        for node in list(fragment.contents):
            callout.insert_before(node)
        callout.decompose()
        converted += 1

    logger.debug(f"Converted {converted} callout(s)")
    return converted
