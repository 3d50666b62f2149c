"""Native render strategy backed by a host Markdown engine.

This module provides the Markdown preprocessor, the host engine call
contract, the settle wait and the NativeRenderer strategy, plus a
markdown-it-py based reference host engine.
"""

from .errors import HostRendererUnavailableError, NativeRenderError
from .host_engine import ReferenceHostRenderer
from .host_renderer import render_with_host
from .native_renderer import NativeRenderer, contains_host_math_markup
from .preprocessor import inject_hard_breaks, neutralize_plain_wikilinks, neutralize_unsafe_links, preprocess_markdown
from .settle import count_unresolved_embeds, wait_for_settle

__all__ = [
    'HostRendererUnavailableError',
    'NativeRenderError',
    'NativeRenderer',
    'ReferenceHostRenderer',
    'contains_host_math_markup',
    'count_unresolved_embeds',
    'inject_hard_breaks',
    'neutralize_plain_wikilinks',
    'neutralize_unsafe_links',
    'preprocess_markdown',
    'render_with_host',
    'wait_for_settle',
]
