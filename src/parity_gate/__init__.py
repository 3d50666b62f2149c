"""Parity gate for comparing legacy and native render output.

This package provides pure functions that compare two markup strings and
describe every region where they diverge, with line/column positions and
bounded snippets for diagnostics.
"""

from .models import MismatchReport, Segment
from .parity_gate import (
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_LOOKAHEAD,
    DEFAULT_MAX_SEGMENTS,
    build_mismatch_report,
    collect_segments,
    first_diverging_index,
    is_exact_match,
    line_column,
)

__all__ = [
    'MismatchReport',
    'Segment',
    'DEFAULT_CONTEXT_WINDOW',
    'DEFAULT_LOOKAHEAD',
    'DEFAULT_MAX_SEGMENTS',
    'build_mismatch_report',
    'collect_segments',
    'first_diverging_index',
    'is_exact_match',
    'line_column',
]
