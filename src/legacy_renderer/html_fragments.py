"""Parsing and serialization of HTML fragments.

Every component that produces markup serializes through FRAGMENT_FORMATTER
so that both render strategies emit byte-comparable output: void elements
without a closing slash, XML-minimal entity escaping, and no-break spaces
written as &nbsp;.
"""

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

FRAGMENT_PARSER = "html.parser"


def _substitute_entities(value: str) -> str:
    return EntitySubstitution.substitute_xml(value).replace("\xa0", "&nbsp;")


FRAGMENT_FORMATTER = HTMLFormatter(
    entity_substitution=_substitute_entities,
    void_element_close_prefix=None,
)


def parse_fragment(html: str) -> BeautifulSoup:
    """Parse an HTML fragment with the stdlib-backed parser."""
    return BeautifulSoup(html or "", FRAGMENT_PARSER)


def new_container(html: str = "") -> Tag:
    """Create a detached <div> holding the parsed fragment."""
    soup = BeautifulSoup("<div></div>", FRAGMENT_PARSER)
    container = soup.div
    set_inner_html(container, html)
    return container


def set_inner_html(target: Tag, html: str) -> None:
    """Replace the children of target with the parsed fragment."""
    target.clear()
    fragment = parse_fragment(html)
    for child in list(fragment.contents):
        target.append(child.extract())


def inner_html(node: Tag) -> str:
    return node.decode_contents(formatter=FRAGMENT_FORMATTER)


def owner_document(node: Tag) -> BeautifulSoup:
    """Return the BeautifulSoup object that node belongs to.

    Tags must be created through their document so void elements such as
    <img> serialize without a closing tag.
    """
    if isinstance(node, BeautifulSoup):
        return node
    for parent in node.parents:
        if isinstance(parent, BeautifulSoup):
            return parent
    raise ValueError(f"<{node.name}> is not attached to a document")
