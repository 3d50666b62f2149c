"""Unit tests for parity_gate.parity_gate module."""

import random

import pytest

from src.parity_gate import (
    MismatchReport,
    build_mismatch_report,
    collect_segments,
    first_diverging_index,
    is_exact_match,
    line_column,
)


class TestFirstDivergingIndex:
    """Test cases for first_diverging_index()."""

    def test_identical_strings_return_minus_one(self):
        """Identical strings have no divergence."""
        assert first_diverging_index("<p>same</p>", "<p>same</p>") == -1

    def test_empty_and_none_are_identical(self):
        """None is treated as the empty string."""
        assert first_diverging_index(None, "") == -1

    def test_first_differing_character(self):
        """Index of the first differing character is returned."""
        assert first_diverging_index("<section>legacy</section>", "<section>native</section>") == 9

    def test_prefix_returns_shorter_length(self):
        """When one string is a prefix of the other, the shorter length is the index."""
        assert first_diverging_index("abc", "abcdef") == 3
        assert first_diverging_index("abcdef", "abc") == 3


class TestLineColumn:
    """Test cases for line_column()."""

    def test_start_of_text(self):
        assert line_column("abc", 0) == (1, 1)

    def test_second_line(self):
        """Columns restart after each newline."""
        assert line_column("line1\nline2X", 11) == (2, 6)

    def test_offset_is_clamped(self):
        """Offsets past the end are clamped to the text length."""
        assert line_column("ab", 10) == (1, 3)


class TestCollectSegments:
    """Test cases for collect_segments()."""

    def test_single_deletion_resynchronizes(self):
        """A one-character deletion produces one segment of width one on the legacy side."""
        segments, total = collect_segments("abcXdef", "abcdef")

        assert total == 1
        assert len(segments) == 1
        segment = segments[0]
        assert (segment.legacy_start, segment.legacy_end) == (3, 4)
        assert (segment.candidate_start, segment.candidate_end) == (3, 3)

    def test_single_insertion_resynchronizes(self):
        """A one-character insertion produces one segment on the candidate side."""
        segments, total = collect_segments("abcdef", "abcXdef")

        assert total == 1
        assert (segments[0].legacy_start, segments[0].legacy_end) == (3, 3)
        assert (segments[0].candidate_start, segments[0].candidate_end) == (3, 4)

    def test_substitution_inside_markup(self):
        """A word substitution is one segment, not a garbled tail."""
        segments, total = collect_segments("<section>legacy</section>", "<section>native</section>")

        assert total == 1
        assert segments[0].index == 9
        assert segments[0].legacy_end == 15
        assert segments[0].candidate_end == 15

    def test_every_region_is_reported(self):
        """Independent differences each get their own segment."""
        segments, total = collect_segments("0ab0ab0ab0ab0ab", "1ab1ab1ab1ab1ab")

        assert total == 5
        assert [segment.index for segment in segments] == [0, 3, 6, 9, 12]

    def test_segment_cap_keeps_true_count(self):
        """The cap limits recorded segments but not the reported count."""
        segments, total = collect_segments("0ab0ab0ab0ab0ab", "1ab1ab1ab1ab1ab", max_segments=2)

        assert len(segments) == 2
        assert total == 5

    def test_trailing_extra_text(self):
        """Extra trailing characters form a final segment to the end."""
        segments, total = collect_segments("line1\nline2X", "line1\nline2")

        assert total == 1
        segment = segments[0]
        assert (segment.legacy_start, segment.legacy_end) == (11, 12)
        assert (segment.legacy_line, segment.legacy_column) == (2, 6)
        assert (segment.candidate_line, segment.candidate_column) == (2, 6)

    def test_snippets_are_bounded(self):
        """Snippets never exceed three context windows."""
        legacy = "x" * 500 + "A" * 400 + "y" * 500
        candidate = "x" * 500 + "B" * 400 + "y" * 500

        segments, _ = collect_segments(legacy, candidate, context_window=20)

        assert segments
        for segment in segments:
            assert len(segment.legacy_snippet) <= 60
            assert len(segment.candidate_snippet) <= 60


class TestBuildMismatchReport:
    """Test cases for build_mismatch_report()."""

    def test_identical_report(self):
        """Identical strings produce an empty report with index -1."""
        report = build_mismatch_report("<p>a</p>", "<p>a</p>")

        assert isinstance(report, MismatchReport)
        assert report.index == -1
        assert report.segment_count == 0
        assert report.segments == []
        assert report.is_match is True
        assert report.length_delta == 0

    def test_mismatch_report_fields(self):
        """A mismatch report carries lengths, delta and segments."""
        report = build_mismatch_report("abcXdef", "abcdef")

        assert report.index == 3
        assert report.legacy_length == 7
        assert report.candidate_length == 6
        assert report.length_delta == -1
        assert report.segment_count == 1
        assert report.truncated is False
        assert report.is_match is False

    def test_truncated_flag(self):
        """truncated is set when more segments exist than are recorded."""
        report = build_mismatch_report("0ab0ab0ab0ab0ab", "1ab1ab1ab1ab1ab", max_segments=2)

        assert report.segment_count == 5
        assert len(report.segments) == 2
        assert report.truncated is True

    def test_to_dict(self):
        """to_dict returns plain data including nested segments."""
        data = build_mismatch_report("abcXdef", "abcdef").to_dict()

        assert data['index'] == 3
        assert data['segments'][0]['legacy_start'] == 3


class TestIsExactMatch:
    """Test cases for is_exact_match()."""

    @pytest.mark.parametrize("legacy,candidate,expected", [
        ("<p>x</p>", "<p>x</p>", True),
        ("<p>x</p>", "<p>x</p>\n", False),
        (None, "", True),
    ])
    def test_plain_equality(self, legacy, candidate, expected):
        """No normalization is applied by the gate itself."""
        assert is_exact_match(legacy, candidate) is expected


def perturb(text: str, rng: random.Random, edits: int) -> str:
    """Apply random insertions, deletions and substitutions to text."""
    alphabet = '<>/ab c="\n'
    chars = list(text)
    for _ in range(edits):
        position = rng.randrange(len(chars) + 1)
        operation = rng.choice(('insert', 'delete', 'substitute'))
        if operation == 'insert' or not chars:
            chars[position:position] = rng.choices(alphabet, k=rng.randint(1, 5))
        elif operation == 'delete':
            del chars[min(position, len(chars) - 1):position + rng.randint(1, 5)]
        else:
            index = min(position, len(chars) - 1)
            chars[index] = rng.choice(alphabet)
    return ''.join(chars)


def perturbed_pair(seed: int):
    rng = random.Random(seed)
    if seed % 5 == 0:
        legacy = 'ab' * rng.randint(20, 80)
    else:
        legacy = ''.join(rng.choices('<>/ab c="\n', k=rng.randint(0, 300)))
    return legacy, perturb(legacy, rng, rng.randint(0, 6))


class TestSegmentCover:
    """Segments cover every divergent position of randomly perturbed inputs."""

    @pytest.mark.parametrize("seed", range(60))
    def test_unmatched_regions_cover_all_differences(self, seed):
        legacy, candidate = perturbed_pair(seed)

        segments, total = collect_segments(legacy, candidate, max_segments=None)

        assert len(segments) == total
        legacy_pos = candidate_pos = 0
        for segment in segments:
            assert segment.legacy_start >= legacy_pos
            assert segment.candidate_start >= candidate_pos
            assert legacy[legacy_pos:segment.legacy_start] == candidate[candidate_pos:segment.candidate_start]
            assert segment.legacy_end >= segment.legacy_start
            assert segment.candidate_end >= segment.candidate_start
            legacy_pos, candidate_pos = segment.legacy_end, segment.candidate_end
        assert legacy[legacy_pos:] == candidate[candidate_pos:]

    @pytest.mark.parametrize("seed", range(60))
    def test_index_is_minus_one_only_for_equal_strings(self, seed):
        legacy, candidate = perturbed_pair(seed)

        report = build_mismatch_report(legacy, candidate, max_segments=None)

        assert (report.index == -1) == (legacy == candidate)
        assert (report.segment_count == 0) == (legacy == candidate)
        assert report.index == first_diverging_index(legacy, candidate)
        if report.segments:
            assert report.segments[0].legacy_start == report.index
