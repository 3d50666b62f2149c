"""Link safety and HTML sanitization for the legacy dialect."""

import logging
import re

from .html_fragments import inner_html, parse_fragment

logger = logging.getLogger(__name__)

EXPLICIT_PROTOCOL_PATTERN = re.compile(r'^[a-zA-Z][a-zA-Z\d+.-]*:')

SAFE_PROTOCOLS = frozenset({
    'http', 'https', 'mailto', 'tel', 'obsidian', 'app', 'capacitor',
})

DANGEROUS_TAGS = (
    'script', 'iframe', 'object', 'embed', 'form', 'input', 'button', 'style',
    'link', 'meta', 'frame', 'frameset',
)

URL_ATTRIBUTES = ('href', 'src', 'action', 'formaction', 'xlink:href')

UNSAFE_URL_PATTERN = re.compile(r'^\s*(?:javascript|vbscript):', re.IGNORECASE)


def has_explicit_protocol(value: str) -> bool:
    return bool(EXPLICIT_PROTOCOL_PATTERN.match(value or ''))


def validate_link(url: str, is_image: bool = False) -> str:
    """Return a URL that is safe to emit in an href or src attribute.

    Relative paths and fragments pass through. Known-safe schemes pass
    through. data: URLs are kept only for images with an image MIME type.

    Args:
        url: Raw URL from the markup
        is_image: Whether the URL is an image source

    Returns:
        The URL unchanged, '#unsafe' for data: links, or '#' when blocked
    """
    value = (url or '').strip()
    if not value or not has_explicit_protocol(value):
        return value

    scheme = value.split(':', 1)[0].lower()
    if scheme == 'data':
        if not is_image:
            return '#unsafe'
        if re.match(r'^data:image/', value, re.IGNORECASE):
            return value
        return '#'
    if scheme in SAFE_PROTOCOLS:
        return value

    logger.debug(f"Blocked link with scheme '{scheme}'")
    return '#'


def sanitize_html(html: str) -> str:
    """Remove executable content from an HTML fragment.

    Dangerous elements are dropped together with their content, every on*
    event handler attribute is removed, and script-scheme URLs are replaced
    with '#'.
    """
    if not html:
        return html or ''

    soup = parse_fragment(html)
    for element in soup.find_all(list(DANGEROUS_TAGS)):
        if not element.decomposed:
            element.decompose()

    for element in soup.find_all(True):
        for name in list(element.attrs):
            lowered = name.lower()
            if lowered.startswith('on'):
                del element.attrs[name]
                continue
            if lowered in URL_ATTRIBUTES:
                value = element.attrs[name]
                if isinstance(value, str) and UNSAFE_URL_PATTERN.match(value):
                    element.attrs[name] = '#'

    return inner_html(soup)


def escape_html(text: str) -> str:
    return (
        (text or '')
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&#039;')
    )
