"""Invocation of the host render engine through either supported call shape."""

import inspect
import logging
from typing import Any

from bs4 import Tag

from .errors import HostRendererUnavailableError

logger = logging.getLogger(__name__)


async def _await_if_needed(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


async def render_with_host(
    host: Any,
    markdown: str,
    target: Tag,
    source_path: str = '',
    component: Any = None,
    app: Any = None,
) -> None:
    """Render markdown into target using the host engine.

    Supports render_markdown(markdown, target, source_path, component) and
    render(app, markdown, target, source_path, component); either may be sync
    or a coroutine function.

    Raises:
        HostRendererUnavailableError: If host is None or has neither call shape
    """
    if host is None:
        raise HostRendererUnavailableError("no host renderer configured")

    render_markdown = getattr(host, 'render_markdown', None)
    if callable(render_markdown):
        await _await_if_needed(render_markdown(markdown, target, source_path or '', component))
        return

    render = getattr(host, 'render', None)
    if callable(render):
        if app is None:
            raise HostRendererUnavailableError("host app instance is required for render()")
        await _await_if_needed(render(app, markdown, target, source_path or '', component))
        return

    raise HostRendererUnavailableError()

