"""Image passes: embed placeholders, size hints and figure conversion."""

import logging
import re
from typing import Optional
from urllib.parse import urlsplit

from bs4 import Tag

from src.legacy_renderer.html_fragments import owner_document, parse_fragment
from src.legacy_renderer.links import has_explicit_protocol
from src.legacy_renderer.uri import decode_uri, decode_uri_component, encode_uri

logger = logging.getLogger(__name__)

EMBED_SELECTOR = 'span.internal-embed, span.image-embed, div.internal-embed, div.image-embed'
HOST_APP_PREFIX = re.compile(r'^app://obsidian\.md/', re.IGNORECASE)
IMAGE_SOURCE_PREFIX = re.compile(r'^(data:image/|app://|capacitor://|https?://)', re.IGNORECASE)
IMAGE_SOURCE_EXTENSION = re.compile(r'\.(png|jpe?g|gif|webp|svg|bmp|avif)(\?|#|$)', re.IGNORECASE)
SIZED_ALT = re.compile(r'\|\s*\d+(x\d+)?\s*$', re.IGNORECASE)
WIKI_EMBED_TEXT = re.compile(r'^!\[\[([^\]|]+)(?:\|[^\]]+)?\]\]$')

WIDTH_HINT_ATTRIBUTES = (
    'width', 'data-width', 'data-size', 'data-image-width', 'style', 'src',
    'data-src', 'data-href', 'title', 'aria-label', 'alt',
)
ALT_HINT_ATTRIBUTES = ('alt', 'title', 'aria-label', 'data-alt', 'data-caption')
EMBED_SOURCE_ATTRIBUTES = ('src', 'data-src', 'data-href', 'href')
MAX_ANCESTOR_DEPTH = 6
SKIP_STYLE_MARKER = 'data-skip-style'


def looks_like_image_src(src: str) -> bool:
    value = (src or '').strip()
    if not value:
        return False
    if IMAGE_SOURCE_PREFIX.match(value):
        return True
    return bool(IMAGE_SOURCE_EXTENSION.search(value))


def canonicalize_relative_url(url: str) -> str:
    """Percent-encode a relative URL the way the legacy generator does.

    Fragments, protocol-relative and absolute URLs are returned unchanged.
    """
    value = (url or '').strip()
    if not value or value.startswith('#') or value.startswith('//') or has_explicit_protocol(value):
        return value
    try:
        decoded = decode_uri(value)
    except ValueError:
        decoded = value
    return encode_uri(decoded)


def normalize_host_image_src(src: str) -> str:
    """Map a host image source onto the path the legacy generator receives.

    Unresolved host sources look like app://obsidian.md/<path>; the legacy
    generator sees the plain, percent-encoded <path>.
    """
    value = (src or '').strip()
    if not value:
        return value
    if HOST_APP_PREFIX.match(value):
        path = urlsplit(value).path.lstrip('/')
        try:
            path = decode_uri_component(path)
        except ValueError:
            pass
        if not path:
            return value
        value = path
    return canonicalize_relative_url(value)


def _attribute_text(element: Tag, name: str) -> str:
    value = element.get(name)
    if isinstance(value, list):
        value = ' '.join(value)
    return (value or '').strip()


def extract_width_hint(text: str) -> str:
    value = text or ''
    if not value:
        return ''
    match = re.search(r'\|(\d{2,4})(?:x\d+)?(?:\]\]|$)', value, re.IGNORECASE)
    if match:
        return match.group(1)
    match = re.search(r'\b(?:max-)?width\s*[:=]\s*(\d{2,4})\s*px\b', value, re.IGNORECASE)
    if match:
        return match.group(1)
    match = re.match(r'^\s*(\d{2,4})\s*$', value)
    if match:
        return match.group(1)
    return ''


def _ancestors_and_self(element: Tag):
    cursor: Optional[Tag] = element
    depth = 0
    while cursor is not None and depth < MAX_ANCESTOR_DEPTH and cursor.name != '[document]':
        yield cursor
        cursor = cursor.parent
        depth += 1


def find_width_hint(element: Tag) -> str:
    """Search element and its close ancestors for an explicit width hint."""
    for cursor in _ancestors_and_self(element):
        for name in WIDTH_HINT_ATTRIBUTES:
            width = extract_width_hint(_attribute_text(cursor, name))
            if width:
                return width
        width = extract_width_hint(cursor.get_text())
        if width:
            return width
    return ''


def find_alt_hint(element: Tag, raw_alt: str) -> str:
    base = (raw_alt or '').strip()
    if not base:
        return ''
    for cursor in _ancestors_and_self(element):
        for name in ALT_HINT_ATTRIBUTES:
            value = _attribute_text(cursor, name)
            if not value or value == base:
                continue
            if value.startswith(f'{base}|') and re.search(r'\|\d{2,4}(x\d+)?\s*$', value, re.IGNORECASE):
                return value
    return ''


def build_parity_alt(img: Tag, raw_alt: str) -> str:
    """Rebuild the "alt|width" form the legacy generator sees in Markdown."""
    alt = raw_alt or ''
    if not alt or SIZED_ALT.search(alt):
        return alt

    hinted = find_alt_hint(img, alt)
    if hinted:
        return hinted

    width = _attribute_text(img, 'width')
    if width.isdigit():
        return f'{alt}|{width}'

    match = re.search(r'(?:^|;)\s*width\s*:\s*(\d+)px\b', _attribute_text(img, 'style'), re.IGNORECASE)
    if match:
        return f'{alt}|{match.group(1)}'

    width = find_width_hint(img)
    if width:
        return f'{alt}|{width}'
    return alt


def extract_embed_src(embed: Tag) -> str:
    for name in EMBED_SOURCE_ATTRIBUTES:
        value = _attribute_text(embed, name)
        if value:
            return value
    match = WIKI_EMBED_TEXT.match(embed.get_text().strip())
    return match.group(1).strip() if match else ''


def materialize_embed_placeholders(container: Tag, converter) -> int:
    """Turn image-embed placeholders that never received an <img> into images."""
    document = owner_document(container)
    count = 0
    for embed in container.select(EMBED_SELECTOR):
        if embed.find('img') is not None:
            continue
        src = extract_embed_src(embed)
        force_image = 'image-embed' in (embed.get('class') or [])
        if not src or (not force_image and not looks_like_image_src(src)):
            continue

        img = document.new_tag('img', attrs={'src': converter.resolve_image_path(normalize_host_image_src(src))})
        alt = _attribute_text(embed, 'alt')
        if alt:
            img['alt'] = alt
        width = find_width_hint(embed)
        if width:
            img['width'] = width
        embed.replace_with(img)
        count += 1
    return count


def promote_embed_alt_hints(container: Tag) -> None:
    """Copy "alt|width" hints from embed wrappers onto their images."""
    for embed in container.select(EMBED_SELECTOR):
        img = embed.find('img')
        if img is None:
            continue
        embed_alt = _attribute_text(embed, 'alt')
        img_alt = _attribute_text(img, 'alt')
        if SIZED_ALT.search(embed_alt) and (not img_alt or embed_alt.startswith(f'{img_alt}|')):
            img['alt'] = embed_alt
        width = find_width_hint(embed)
        if width and not img.get('width'):
            img['width'] = width


def _has_figure_ancestor(img: Tag) -> bool:
    return any(parent.name == 'figure' for parent in img.parents)


def convert_standalone_images(container: Tag, converter) -> int:
    """Replace bare images with the legacy figure markup.

    Images whose source does not look like an image keep their raw shape and
    are marked so the theme pass leaves them unstyled.
    """
    count = 0
    for img in container.find_all('img'):
        if img.parent is None or _has_figure_ancestor(img):
            continue
        if img.get('alt') == 'logo' or 'math-formula-image' in (img.get('class') or []):
            continue

        src = converter.validate_link(normalize_host_image_src(_attribute_text(img, 'src')), True)
        if not looks_like_image_src(src):
            img['src'] = src
            img[SKIP_STYLE_MARKER] = '1'
            continue

        src = converter.resolve_image_path(src)
        alt = build_parity_alt(img, img.get('alt') or '')
        figure = next(
            (node for node in parse_fragment(converter.render_figure(src, alt)).contents if isinstance(node, Tag)),
            None,
        )
        if figure is None:
            continue
        img.replace_with(figure)
        count += 1
    logger.debug(f"Converted {count} standalone image(s)")
    return count


def unwrap_resolved_embeds(container: Tag) -> None:
    """Replace embed wrappers that hold an image with the image itself."""
    for embed in container.select(EMBED_SELECTOR):
        if embed.parent is None:
            continue
        img = embed.find('img')
        if img is not None:
            embed.replace_with(img.extract())
