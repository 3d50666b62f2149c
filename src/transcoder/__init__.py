"""Transcoding of host-rendered trees into the legacy HTML dialect.

This module provides the ordered rewrite passes that turn the host
renderer's markup into byte-comparable legacy output.
"""

from .node_kinds import NodeKind, classify
from .transcoder import normalize_delete_nesting_in_html, transcode

__all__ = [
    'NodeKind',
    'classify',
    'normalize_delete_nesting_in_html',
    'transcode',
]
