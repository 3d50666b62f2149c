"""Host-rendered tree to legacy-dialect HTML.

The transcoder copies the host's rendered tree into a detached container and
rewrites it in ordered passes until it carries the same markup the legacy
generator would emit for the same Markdown. The order matters: callouts are
rebuilt before attribute pruning discards their data-callout markers, links
are sanitized before images become figures, and theme styles are applied
only where an element has none of its own.
"""

import logging
import re
from typing import Union

from bs4 import Tag

from src.legacy_renderer.html_fragments import inner_html, new_container

from .callouts import convert_host_callouts
from .images import (
    convert_standalone_images,
    materialize_embed_placeholders,
    promote_embed_alt_hints,
    unwrap_resolved_embeds,
)
from .text_passes import (
    apply_theme_styles,
    apply_typographer,
    convert_pre_blocks,
    linkify_text,
    merge_delete_nesting,
    prune_attributes,
    rename_strike_tags,
    sanitize_anchors,
    strip_unsafe_tags,
    trim_block_whitespace,
)

logger = logging.getLogger(__name__)

SPLIT_DELETE_PATTERN = re.compile(r'<del([^>]*)>([^<]*[：:])</del>(?:\s|&nbsp;|<br\s*/?>)*<del([^>]*)>')


def normalize_delete_nesting_in_html(html: str) -> str:
    """Merge "label:" deletions with the deletion that follows them."""
    if not html:
        return html
    return SPLIT_DELETE_PATTERN.sub(r'<del\1>\2 <del\3>', html)


def transcode(root: Union[Tag, str], converter) -> str:
    """Rewrite a host-rendered tree into legacy-dialect HTML.

    Args:
        root: Element holding the host output, or its inner HTML
        converter: LegacyConverter supplying styles and dialect helpers

    Returns:
        HTML wrapped in the themed outer <section>
    """
    source_html = root if isinstance(root, str) else inner_html(root)
    container = new_container(source_html or '')

    materialize_embed_placeholders(container, converter)
    promote_embed_alt_hints(container)
    unwrap_resolved_embeds(container)
    convert_host_callouts(container, converter)
    prune_attributes(container, final_stage=False)
    rename_strike_tags(container)
    merge_delete_nesting(container)
    strip_unsafe_tags(container)
    linkify_text(container, converter)
    apply_typographer(container, converter)
    sanitize_anchors(container, converter)
    convert_pre_blocks(container, converter)
    convert_standalone_images(container, converter)
    apply_theme_styles(container, converter)
    prune_attributes(container, final_stage=True)
    trim_block_whitespace(container)

    html = converter.post_process(inner_html(container))
    html = normalize_delete_nesting_in_html(html)
    logger.debug(f"Transcoded host output into {len(html)} characters")
    return converter.wrap_section(html)
