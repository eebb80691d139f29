"""Tests for SequenceAligner.

WHY: The aligner's one-to-one guarantee and its tie-break order decide
which transcript words a point claims, and therefore its timing.

HOW: Worked example, structural properties over several inputs, tie
and conflict cases, injected distance functions, and segment_timing.

RULES:
- Output is injective on both indices and sorted by ref_index
- Ties go to the lowest target index
- A failing distance function yields [] for that call only
"""

import pytest

from scriptsync.core.aligner import SequenceAligner
from scriptsync.core.ir import Alignment, TimedWord


@pytest.fixture
def aligner():
    return SequenceAligner()


# ---------------------------------------------------------------------------
# align()
# ---------------------------------------------------------------------------


class TestAlign:
    def test_worked_example(self, aligner):
        result = aligner.align(["cat", "dog"], ["dog", "cat", "fish"])
        assert result == [Alignment(0, 1, 0), Alignment(1, 0, 0)]

    @pytest.mark.parametrize("reference, target", [
        (["cat", "dog"], ["dog", "cat", "fish"]),
        (["the", "the", "the"], ["the", "a", "the"]),
        (["whales", "can", "dive"], ["wales", "can", "dive", "deep"]),
        (["a", "b", "c", "d", "e"], ["x"]),
        (["one"], ["one", "one", "one"]),
    ])
    def test_injective_and_sorted(self, aligner, reference, target):
        result = aligner.align(reference, target)
        refs = [a.ref_index for a in result]
        targets = [a.target_index for a in result]
        assert len(set(refs)) == len(refs)
        assert len(set(targets)) == len(targets)
        assert refs == sorted(refs)
        assert len(result) <= min(len(reference), len(target))

    def test_tie_goes_to_first_target(self, aligner):
        result = aligner.align(["ab"], ["ax", "ay", "az"])
        assert result == [Alignment(0, 0, 1)]

    def test_conflict_keeps_closer_reference(self, aligner):
        # both references want target 0; "cat" is the exact match
        result = aligner.align(["cart", "cat"], ["cat"])
        assert result == [Alignment(1, 0, 0)]

    def test_duplicate_references_claim_first_target_once(self, aligner):
        result = aligner.align(["the", "the"], ["the", "the"])
        # both pick target 0 (first minimum); only the first survives
        assert result == [Alignment(0, 0, 0)]

    def test_empty_inputs(self, aligner):
        assert aligner.align([], ["a"]) == []
        assert aligner.align(["a"], []) == []

    def test_injected_distance(self):
        calls = []

        def length_gap(a, b):
            calls.append((a, b))
            return abs(len(a) - len(b))

        aligner = SequenceAligner(distance=length_gap)
        result = aligner.align(["abc"], ["x", "xyz"])
        assert result == [Alignment(0, 1, 0)]
        assert calls == [("abc", "x"), ("abc", "xyz")]

    @pytest.mark.parametrize("error", [TypeError, ValueError])
    def test_distance_failure_yields_empty(self, error, caplog):
        def broken(a, b):
            raise error("incomparable")

        assert SequenceAligner(distance=broken).align(["a"], ["b"]) == []
        assert "Distance computation failed" in caplog.text

    @pytest.mark.parametrize("reference, target", [
        (["x"], None),
        (None, ["x"]),
        (["x"], 42),
    ])
    def test_malformed_sequences_yield_empty(self, aligner, reference, target, caplog):
        assert aligner.align(reference, target) == []
        assert "Distance computation failed" in caplog.text


# ---------------------------------------------------------------------------
# segment_timing()
# ---------------------------------------------------------------------------


WORDS = [
    TimedWord("alpha", 0, 400),
    TimedWord("beta", 500, 900),
    TimedWord("gamma", 1000, 1400),
    TimedWord("delta", 1500, 1900),
]


class TestSegmentTiming:
    def test_span_from_min_to_max_target(self):
        alignments = [Alignment(0, 2, 0), Alignment(1, 1, 0), Alignment(2, 3, 1)]
        timing = SequenceAligner.segment_timing(alignments, WORDS, text="seg")
        assert timing.text == "seg"
        assert timing.start_time_ms == 500
        assert timing.end_time_ms == 1900
        assert timing.duration_ms == 1400
        assert timing.is_resolved

    def test_no_alignments_is_unresolved(self):
        timing = SequenceAligner.segment_timing([], WORDS, text="seg")
        assert (timing.start_time_ms, timing.end_time_ms, timing.duration_ms) == (0, 0, 0)
        assert not timing.is_resolved

    def test_missing_word_is_unresolved(self):
        timing = SequenceAligner.segment_timing([Alignment(0, 9, 0)], WORDS)
        assert not timing.is_resolved

    def test_missing_words_is_unresolved(self):
        assert not SequenceAligner.segment_timing([Alignment(0, 0, 0)], None).is_resolved
        assert not SequenceAligner.segment_timing([Alignment(0, 0, 0)], []).is_resolved
