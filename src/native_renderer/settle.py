"""Waiting for asynchronously resolved host content to settle."""

import asyncio
import logging
import time

from bs4 import Tag

from src.legacy_renderer.html_fragments import inner_html

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_TIMEOUT_MS = 500
DEFAULT_SETTLE_INTERVAL_MS = 16
EMBED_SELECTOR = 'span.internal-embed, span.image-embed, div.internal-embed, div.image-embed'


def count_unresolved_embeds(root: Tag) -> int:
    """Count image-embed placeholders that have no <img> yet."""
    if root is None:
        return 0
    return sum(
        1 for embed in root.select(EMBED_SELECTOR)
        if 'image-embed' in (embed.get('class') or []) and embed.find('img') is None
    )


def snapshot(root: Tag) -> str:
    return f"{count_unresolved_embeds(root)}:{inner_html(root) if root is not None else ''}"


async def wait_for_settle(
    root: Tag,
    timeout_ms: int = DEFAULT_SETTLE_TIMEOUT_MS,
    interval_ms: int = DEFAULT_SETTLE_INTERVAL_MS,
) -> bool:
    """Poll root until two consecutive snapshots agree and no embed is unresolved.

    Returns:
        True if the tree settled, False if the timeout elapsed first. A timeout
        is not an error; callers proceed with the tree as it is.
    """
    deadline = time.monotonic() + timeout_ms / 1000
    previous = None
    while time.monotonic() < deadline:
        current = snapshot(root)
        if current == previous and count_unresolved_embeds(root) == 0:
            return True
        previous = current
        await asyncio.sleep(interval_ms / 1000)

    logger.debug(f"Host output did not settle within {timeout_ms}ms, continuing")
    return False
