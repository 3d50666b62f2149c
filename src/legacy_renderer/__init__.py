"""Legacy Markdown to styled-HTML generator.

This package provides the markdown-it-py based generator that produces the
publishing surface's inline-styled HTML dialect, together with its theme,
link safety rules, code block highlighting and post-processing hooks.
"""

from .converter import LegacyConverter, derive_image_caption, extract_file_name, safe_decode_caption
from .draft_cleaner import clean_html_for_draft
from .html_fragments import FRAGMENT_FORMATTER, inner_html, new_container, parse_fragment
from .links import sanitize_html, validate_link
from .models import CacheEntry, CalloutInfo
from .resolver import ResolutionCache, VaultPathResolver
from .theme import Theme

__all__ = [
    'LegacyConverter',
    'derive_image_caption',
    'extract_file_name',
    'safe_decode_caption',
    'clean_html_for_draft',
    'FRAGMENT_FORMATTER',
    'inner_html',
    'new_container',
    'parse_fragment',
    'sanitize_html',
    'validate_link',
    'CacheEntry',
    'CalloutInfo',
    'ResolutionCache',
    'VaultPathResolver',
    'Theme',
]
