"""Node kinds of the legacy dialect and their attribute policies.

Every element is classified into exactly one NodeKind, and each policy table
is keyed by NodeKind so a new kind must be added to every table before it
can be used.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Tuple


class NodeKind(Enum):
    """Element categories with distinct attribute rules."""
    ANCHOR = "anchor"
    IMAGE = "image"
    SECTION = "section"
    CODE = "code"
    UNSAFE = "unsafe"
    ELEMENT = "element"


UNSAFE_TAGS = frozenset({
    'script', 'iframe', 'object', 'embed', 'form', 'input', 'button', 'style',
})

_KIND_BY_TAG: Dict[str, NodeKind] = {
    'a': NodeKind.ANCHOR,
    'img': NodeKind.IMAGE,
    'section': NodeKind.SECTION,
    'pre': NodeKind.CODE,
    'code': NodeKind.CODE,
    **{tag: NodeKind.UNSAFE for tag in UNSAFE_TAGS},
}

# (non-final stage, final stage)
ALLOWED_ATTRIBUTES: Dict[NodeKind, Tuple[FrozenSet[str], FrozenSet[str]]] = {
    NodeKind.ANCHOR: (frozenset({'href', 'style'}), frozenset({'href', 'style'})),
    NodeKind.IMAGE: (
        frozenset({'src', 'alt', 'style', 'width', 'height', 'class'}),
        frozenset({'src', 'alt', 'style', 'width', 'height', 'class'}),
    ),
    NodeKind.SECTION: (frozenset({'style', 'class'}), frozenset({'style', 'class'})),
    NodeKind.CODE: (frozenset({'style', 'class'}), frozenset({'style'})),
    NodeKind.UNSAFE: (frozenset(), frozenset()),
    NodeKind.ELEMENT: (frozenset({'style'}), frozenset({'style'})),
}

# Class names kept per kind: exact names and prefixes, (non-final, final)
KEPT_CLASSES: Dict[NodeKind, Tuple[Tuple[FrozenSet[str], Tuple[str, ...]], Tuple[FrozenSet[str], Tuple[str, ...]]]] = {
    NodeKind.ANCHOR: ((frozenset(), ()), (frozenset(), ())),
    NodeKind.IMAGE: ((frozenset({'math-formula-image'}), ()), (frozenset({'math-formula-image'}), ())),
    NodeKind.SECTION: ((frozenset({'code-snippet__fix'}), ()), (frozenset({'code-snippet__fix'}), ())),
    NodeKind.CODE: ((frozenset(), ('language-',)), (frozenset(), ())),
    NodeKind.UNSAFE: ((frozenset(), ()), (frozenset(), ())),
    NodeKind.ELEMENT: ((frozenset(), ()), (frozenset(), ())),
}

HOST_ONLY_ATTRIBUTES = frozenset({'id', 'dir'})


def classify(tag_name: str) -> NodeKind:
    return _KIND_BY_TAG.get((tag_name or '').lower(), NodeKind.ELEMENT)


def allowed_attributes(kind: NodeKind, final_stage: bool = False) -> FrozenSet[str]:
    return ALLOWED_ATTRIBUTES[kind][1 if final_stage else 0]


def is_host_only_attribute(name: str) -> bool:
    lowered = name.lower()
    return lowered.startswith('data-') or lowered in HOST_ONLY_ATTRIBUTES


def kept_classes(kind: NodeKind, classes: List[str], final_stage: bool = False) -> List[str]:
    """Filter a class list down to the names the legacy dialect keeps."""
    names, prefixes = KEPT_CLASSES[kind][1 if final_stage else 0]
    return [
        name for name in classes
        if name in names or any(name.startswith(prefix) for prefix in prefixes)
    ]
