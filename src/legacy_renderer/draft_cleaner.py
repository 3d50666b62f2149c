"""Nested-list cleanup for the publishing surface's draft editor.

The draft editor flattens nested lists unpredictably. This module rewrites
list structures into shapes it keeps intact: list items with nested lists
lose their paragraph wrappers, deeply nested lists become marker-prefixed
paragraphs, and whitespace-only nodes inside lists are removed. The result
is also the canonical form used when comparing render outputs.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import NavigableString, Tag

from .html_fragments import inner_html, new_container, owner_document

logger = logging.getLogger(__name__)

LIST_TAGS = ('ul', 'ol')
BLOCK_TAGS = frozenset({'ul', 'ol', 'table', 'pre', 'blockquote', 'section', 'figure', 'div'})
PSEUDO_LIST_INDENT = 20


def _is_blank_text(node) -> bool:
    return isinstance(node, NavigableString) and not str(node).strip()


def _child_tags(element: Tag) -> List[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]


def _list_depth(element: Tag) -> int:
    return sum(1 for parent in element.parents if parent.name in LIST_TAGS)


def _unwrap_item_paragraphs(container: Tag) -> None:
    for li in container.find_all('li'):
        if li.find(LIST_TAGS) is None:
            continue

        for child in _child_tags(li):
            if child.name == 'p':
                child.unwrap()

        first_list = next((child for child in _child_tags(li) if child.name in LIST_TAGS), None)
        if first_list is None:
            continue

        leading = []
        for node in li.children:
            if node is first_list:
                break
            leading.append(node)
        meaningful = [node for node in leading if not _is_blank_text(node)]
        if not meaningful:
            continue
        if any(isinstance(node, Tag) and node.name in BLOCK_TAGS for node in meaningful):
            continue

        line_height = re.search(r'line-height:\s*[^;]+', li.get('style', ''), re.IGNORECASE)
        wrapper = owner_document(container).new_tag('span')
        wrapper['style'] = f"display:block;margin:0;padding:0;{line_height.group(0) + ';' if line_height else ''}"
        for node in meaningful:
            wrapper.append(node.extract())
        first_list.insert_before(wrapper)


def _pseudo_items(container: Tag, list_element: Tag, depth: int) -> List[Any]:
    nodes: List[Any] = []
    ordered = list_element.name == 'ol'
    index = 1

    for li in _child_tags(list_element):
        if li.name != 'li':
            continue
        nested_lists = [child for child in _child_tags(li) if child.name in LIST_TAGS]

        content: List[Any] = []
        for node in list(li.children):
            if isinstance(node, Tag) and node.name in LIST_TAGS:
                continue
            if isinstance(node, Tag) and node.name == 'p':
                children = list(node.children)
                if children and content:
                    content.append(NavigableString(' '))
                content.extend(children)
                continue
            content.append(node)

        while content and _is_blank_text(content[0]):
            content.pop(0)
        if content and isinstance(content[0], NavigableString):
            stripped = str(content[0]).lstrip()
            if stripped:
                content[0] = NavigableString(stripped)
            else:
                content.pop(0)

        has_content = any(not isinstance(node, NavigableString) or str(node).strip() for node in content)
        if has_content:
            cleaned: List[Any] = []
            for node in content:
                if isinstance(node, NavigableString):
                    text = re.sub(r'\s{2,}', ' ', re.sub(r'\s*\n\s*', ' ', str(node)))
                    if not text.strip():
                        continue
                    node = NavigableString(text)
                cleaned.append(node)

            marker = f'{index}. ' if ordered else '• '
            first_text = next(
                (pos for pos, node in enumerate(cleaned) if isinstance(node, NavigableString) and str(node).strip()),
                None,
            )
            if first_text is not None:
                cleaned[first_text] = NavigableString(marker + str(cleaned[first_text]))
            else:
                cleaned.insert(0, NavigableString(marker))

            indent = max(0, depth - 1) * PSEUDO_LIST_INDENT
            wrapper = owner_document(container).new_tag('p')
            wrapper['style'] = f"{li.get('style', '')} margin:0 0 4px {indent}px; padding:0;"
            for node in cleaned:
                wrapper.append(node.extract() if node.parent is not None else node)
            nodes.append(wrapper)

        for nested in nested_lists:
            nodes.extend(_pseudo_items(container, nested, depth + 1))
        index += 1

    return nodes


def _flatten_deep_lists(container: Tag) -> None:
    for list_element in container.find_all(LIST_TAGS):
        if list_element.decomposed or not _is_inside(list_element, container):
            continue
        depth = _list_depth(list_element)
        if depth < 2:
            continue
        for node in _pseudo_items(container, list_element, depth):
            list_element.insert_before(node)
        list_element.decompose()


def _is_inside(node: Tag, container: Tag) -> bool:
    return any(parent is container for parent in node.parents)


def _zero_nested_list_margins(container: Tag) -> None:
    for nested in container.select('li > ul, li > ol'):
        style = re.sub(r'margin:\s*[^;]+;?', '', nested.get('style', ''), flags=re.IGNORECASE)
        nested['style'] = 'margin: 0; ' + style


def _remove_empty_items(container: Tag) -> None:
    for li in container.find_all('li'):
        if li.decomposed:
            continue
        if not li.get_text().strip() and li.find(['img', 'ul', 'ol']) is None:
            li.decompose()


def _remove_blank_text(container: Tag, tags) -> None:
    for element in container.find_all(tags):
        for node in list(element.children):
            if _is_blank_text(node):
                node.extract()


def clean_html_for_draft(html: str, meta: Optional[Dict[str, Any]] = None) -> str:
    """Rewrite nested lists into a draft-editor-safe shape.

    Args:
        html: Rendered legacy-dialect HTML
        meta: Ignored; accepted so the function can serve as a parity transform

    Returns:
        Cleaned HTML serialized with the shared fragment formatter
    """
    container = new_container(html)
    _unwrap_item_paragraphs(container)
    _flatten_deep_lists(container)
    _zero_nested_list_margins(container)
    _remove_empty_items(container)
    _remove_blank_text(container, list(LIST_TAGS))
    _remove_blank_text(container, 'li')
    return inner_html(container)
