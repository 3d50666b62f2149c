"""Native render strategy: host engine render, settle wait, transcode."""

import logging
import re
from typing import Any, Optional

from src.legacy_renderer.html_fragments import new_container
from src.transcoder import transcode

from .errors import NativeRenderError
from .host_renderer import render_with_host
from .preprocessor import preprocess_markdown
from .settle import DEFAULT_SETTLE_INTERVAL_MS, DEFAULT_SETTLE_TIMEOUT_MS, wait_for_settle

logger = logging.getLogger(__name__)

HOST_MATH_MARKUP = re.compile(r'<mjx-(?:math|container)\b', re.IGNORECASE)


def contains_host_math_markup(html: str) -> bool:
    return bool(HOST_MATH_MARKUP.search(html or ''))


class NativeRenderer:
    """Renders Markdown through the host engine and transcodes the result.

    Instances are callables with the native strategy signature
    ``await renderer(markdown, context) -> str``.

    Attributes:
        converter: LegacyConverter used for styling and dialect helpers
        host: Host render engine
        app: Host application handle, required by the render() call shape
        component: Lifecycle component handed to the host engine
        settle_timeout_ms: Upper bound for the settle wait
        settle_interval_ms: Settle poll interval
    """

    def __init__(
        self,
        converter: Any,
        host: Any,
        app: Any = None,
        component: Any = None,
        settle_timeout_ms: int = DEFAULT_SETTLE_TIMEOUT_MS,
        settle_interval_ms: int = DEFAULT_SETTLE_INTERVAL_MS,
    ):
        self.converter = converter
        self.host = host
        self.app = app
        self.component = component
        self.settle_timeout_ms = settle_timeout_ms
        self.settle_interval_ms = settle_interval_ms

    async def __call__(self, markdown: str, context: Optional[Any] = None) -> str:
        if self.converter is None:
            raise NativeRenderError("Native renderer requires a legacy converter")

        source_path = getattr(context, 'source_path', '') or ''
        if hasattr(self.converter, 'update_source_path'):
            self.converter.update_source_path(source_path)

        target = new_container()
        prepared = preprocess_markdown(markdown, self.converter)
        await render_with_host(self.host, prepared, target, source_path, self.component, self.app)
        settled = await wait_for_settle(target, self.settle_timeout_ms, self.settle_interval_ms)
        if not settled:
            cancel_pending = getattr(self.host, 'cancel_pending', None)
            if callable(cancel_pending):
                cancel_pending(target)

        html = transcode(target, self.converter)
        if contains_host_math_markup(html):
            # Host math markup has no legacy counterpart
            logger.debug("Host output contains math markup, using legacy conversion")
            return await self.converter.convert(markdown)
        return html
