"""Comparison of two rendered markup strings.

The gate performs plain value equality; any normalization is applied by the
caller before comparing. When the strings differ, the segment collector walks
both strings and resynchronizes after each divergence so the report lists
every distinct divergent region instead of a single garbled tail.
"""

import logging
from typing import List, Optional, Tuple

from .models import MismatchReport, Segment

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_WINDOW = 80
DEFAULT_LOOKAHEAD = 64
DEFAULT_MAX_SEGMENTS = 200


def is_exact_match(legacy: Optional[str], candidate: Optional[str]) -> bool:
    """Return True when both strings are identical."""
    return (legacy or "") == (candidate or "")


def first_diverging_index(legacy: Optional[str], candidate: Optional[str]) -> int:
    """Return the first index where the strings differ, or -1 if identical.

    When one string is a prefix of the other, the length of the shorter one
    is returned.
    """
    a = legacy or ""
    b = candidate or ""
    limit = min(len(a), len(b))
    for k in range(limit):
        if a[k] != b[k]:
            return k
    if len(a) != len(b):
        return limit
    return -1


def line_column(text: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of offset within text."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    column = offset - text.rfind("\n", 0, offset)
    return line, column


def _snippet(text: str, start: int, end: int, window: int) -> str:
    # Long regions are clipped so snippets stay bounded at roughly 3 * window.
    stop = min(len(text), min(end, start + window) + window)
    return text[max(0, start - window):stop]


def _agrees(a: str, b: str, i: int, j: int) -> bool:
    if i >= len(a) or j >= len(b) or a[i] != b[j]:
        return False
    next_i, next_j = i + 1, j + 1
    if next_i == len(a) and next_j == len(b):
        return True
    return next_i < len(a) and next_j < len(b) and a[next_i] == b[next_j]


def _find_resync(a: str, b: str, i: int, j: int, lookahead: int) -> Optional[Tuple[int, int]]:
    """Find the nearest (i', j') past a divergence where both strings agree again.

    Candidates are visited in order of total skipped characters so that a
    single insertion or deletion resynchronizes before a wider substitution.
    """
    max_i = min(len(a) - 1, i + lookahead)
    max_j = min(len(b) - 1, j + lookahead)
    if max_i < i or max_j < j:
        return None
    for distance in range(1, (max_i - i) + (max_j - j) + 1):
        for skip_a in range(0, distance + 1):
            skip_b = distance - skip_a
            ri, rj = i + skip_a, j + skip_b
            if ri > max_i or rj > max_j:
                continue
            if _agrees(a, b, ri, rj):
                return ri, rj
    return None


def collect_segments(
    legacy: str,
    candidate: str,
    context_window: int = DEFAULT_CONTEXT_WINDOW,
    lookahead: int = DEFAULT_LOOKAHEAD,
    max_segments: Optional[int] = DEFAULT_MAX_SEGMENTS,
) -> Tuple[List[Segment], int]:
    """Collect every divergent region between two strings.

    Args:
        legacy: Reference string
        candidate: String compared against the reference
        context_window: Characters of context kept on each side of a snippet
        lookahead: Maximum distance searched for a resynchronization point
        max_segments: Cap on recorded segments, or None for no cap

    Returns:
        Tuple of (recorded segments, true segment count)
    """
    a, b = legacy or "", candidate or ""
    segments: List[Segment] = []
    total = 0
    i = j = 0

    while i < len(a) or j < len(b):
        if i < len(a) and j < len(b) and a[i] == b[j]:
            i += 1
            j += 1
            continue

        resync = _find_resync(a, b, i, j, lookahead)
        end_i, end_j = resync if resync is not None else (len(a), len(b))

        total += 1
        if max_segments is None or len(segments) < max_segments:
            legacy_line, legacy_column = line_column(a, i)
            candidate_line, candidate_column = line_column(b, j)
            segments.append(Segment(
                index=i,
                legacy_start=i,
                legacy_end=end_i,
                candidate_start=j,
                candidate_end=end_j,
                legacy_line=legacy_line,
                legacy_column=legacy_column,
                candidate_line=candidate_line,
                candidate_column=candidate_column,
                legacy_snippet=_snippet(a, i, end_i, context_window),
                candidate_snippet=_snippet(b, j, end_j, context_window),
            ))

        if resync is None:
            break
        i, j = end_i, end_j

    return segments, total


def build_mismatch_report(
    legacy: Optional[str],
    candidate: Optional[str],
    context_window: int = DEFAULT_CONTEXT_WINDOW,
    lookahead: int = DEFAULT_LOOKAHEAD,
    max_segments: Optional[int] = DEFAULT_MAX_SEGMENTS,
) -> MismatchReport:
    """Build a MismatchReport for two strings.

    Identical inputs produce index -1 with no segments.
    """
    a, b = legacy or "", candidate or ""
    index = first_diverging_index(a, b)
    if index == -1:
        return MismatchReport(
            index=-1,
            legacy_length=len(a),
            candidate_length=len(b),
            length_delta=len(b) - len(a),
            segment_count=0,
        )

    segments, total = collect_segments(
        a, b,
        context_window=context_window,
        lookahead=lookahead,
        max_segments=max_segments,
    )
    truncated = max_segments is not None and total > max_segments
    logger.debug(
        f"Parity mismatch at index {index}: {total} segment(s), truncated={truncated}"
    )
    return MismatchReport(
        index=index,
        legacy_length=len(a),
        candidate_length=len(b),
        length_delta=len(b) - len(a),
        segment_count=total,
        segments=segments,
        truncated=truncated,
        legacy_snippet=a[max(0, index - context_window):index + context_window],
        candidate_snippet=b[max(0, index - context_window):index + context_window],
    )
