"""Data models for parity comparison results."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List


@dataclass(frozen=True)
class Segment:
    """One resynchronized mismatched region.

    Offsets are half-open ranges into each string. Lines and columns are
    1-based and computed independently for each side.

    Attributes:
        index: Offset of the divergence in the legacy string
        legacy_start: Start of the region in the legacy string
        legacy_end: End (exclusive) of the region in the legacy string
        candidate_start: Start of the region in the candidate string
        candidate_end: End (exclusive) of the region in the candidate string
        legacy_line: Line of legacy_start
        legacy_column: Column of legacy_start
        candidate_line: Line of candidate_start
        candidate_column: Column of candidate_start
        legacy_snippet: Bounded excerpt of the legacy string around the region
        candidate_snippet: Bounded excerpt of the candidate string around the region
    """
    index: int
    legacy_start: int
    legacy_end: int
    candidate_start: int
    candidate_end: int
    legacy_line: int
    legacy_column: int
    candidate_line: int
    candidate_column: int
    legacy_snippet: str
    candidate_snippet: str


@dataclass(frozen=True)
class MismatchReport:
    """Structured comparison result.

    index == -1 and segment_count == 0 denote exact equality.

    Attributes:
        index: First diverging index, or -1
        legacy_length: Length of the legacy string
        candidate_length: Length of the candidate string
        length_delta: candidate_length - legacy_length
        segment_count: True number of divergent regions
        segments: Recorded regions (at most the configured cap)
        truncated: True when segment_count exceeds the number recorded
        legacy_snippet: Headline excerpt of the legacy string
        candidate_snippet: Headline excerpt of the candidate string
    """
    index: int
    legacy_length: int
    candidate_length: int
    length_delta: int
    segment_count: int
    segments: List[Segment] = field(default_factory=list)
    truncated: bool = False
    legacy_snippet: str = ""
    candidate_snippet: str = ""

    @property
    def is_match(self) -> bool:
        return self.index == -1

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary form for logs and JSON output."""
        return asdict(self)
