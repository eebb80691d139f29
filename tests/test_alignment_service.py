"""Tests for AlignmentService.align_segments.

WHY: Point timing is read straight off these results. The output must
line up with the input segments one-to-one, and later segments must
never re-claim words an earlier segment already used.

HOW: Grid-timed transcriptions from conftest (word i starts at i*500 ms)
make expected timings easy to read off.

RULES:
- len(output) == len(segments), same order, for any content
- Cursor monotonicity between resolved segments
- Unresolved entries are all-zero and leave the cursor in place
"""

import pytest

from rapidfuzz.distance import Levenshtein

from scriptsync.core.aligner import SequenceAligner
from scriptsync.core.alignment import AlignmentService


@pytest.fixture
def service():
    return AlignmentService()


class _RecordingAligner(SequenceAligner):
    """Real aligner that remembers the global target indices it produced."""

    def __init__(self):
        super().__init__()
        self.spans = []

    def segment_timing(self, alignments, timed_words, text=""):
        self.spans.append(sorted(a.target_index for a in alignments))
        return super().segment_timing(alignments, timed_words, text=text)


class _CrashingAligner(SequenceAligner):
    def align(self, reference_tokens, target_tokens):
        raise RuntimeError("unexpected")


class TestShape:
    def test_empty_segment_list(self, service, transcription_of):
        t = transcription_of("hello world")
        assert service.align_segments(t.text, t.words, []) == []

    @pytest.mark.parametrize("segments", [
        ["hello world"],
        ["", "hello", "!!!", "world", "never spoken at all"],
        ["a"] * 10,
    ])
    def test_same_length_and_order(self, service, transcription_of, segments):
        t = transcription_of("hello world this is a short transcript")
        result = service.align_segments(t.text, t.words, segments)
        assert len(result) == len(segments)
        assert [r.text for r in result] == segments


class TestTiming:
    def test_single_segment_spans_matched_words(self, service, transcription_of):
        t = transcription_of("so today we talk about whales and dolphins")
        [timing] = service.align_segments(t.text, t.words, ["We talk about whales."])
        assert timing.start_time_ms == t.words[2].start_ms
        assert timing.end_time_ms == t.words[5].end_ms
        assert timing.duration_ms == t.words[5].end_ms - t.words[2].start_ms

    def test_spoken_numbers_match_digits(self, service, ocean_transcription):
        segments = ["The ocean covers 71 percent of the planet."]
        [timing] = service.align_segments(
            ocean_transcription.text, ocean_transcription.words, segments
        )
        assert timing.start_time_ms == ocean_transcription.words[0].start_ms
        assert timing.is_resolved

    def test_merged_number_words_shift_later_timings(self, service, ocean_transcription):
        words = ocean_transcription.words
        segments = [
            "The ocean covers 71 percent of the planet.",
            "Whales can dive 2000 meters deep.",
            "Coral reefs are home to a quarter of marine species.",
        ]
        first, second, third = service.align_segments(ocean_transcription.text, words, segments)

        assert first.end_time_ms == words[7].end_ms
        # token i maps to words[i]; "two thousand" is one token
        assert second.end_time_ms == words[13].end_ms
        assert words[14].text == "deep."
        assert third.start_time_ms == words[14].start_ms == 7000
        assert words[23].text == "marine"
        assert third.end_time_ms == words[23].end_ms

    def test_empty_and_punctuation_only_segments_unresolved(self, service, transcription_of):
        t = transcription_of("hello world")
        result = service.align_segments(t.text, t.words, ["", "?!", "hello world"])
        assert not result[0].is_resolved
        assert not result[1].is_resolved
        assert result[2].start_time_ms == 0
        assert result[2].end_time_ms == t.words[1].end_ms

    def test_exhausted_transcript_unresolved(self, service, transcription_of):
        t = transcription_of("hello world")
        result = service.align_segments(t.text, t.words, ["hello world", "again"])
        assert result[0].is_resolved
        assert not result[1].is_resolved


class TestCursor:
    def test_repeated_phrase_claims_later_words(self, service, transcription_of):
        t = transcription_of("in this video we look at cats in this video we look at dogs")
        first, second = service.align_segments(
            t.text,
            t.words,
            ["In this video we look at cats.", "In this video we look at dogs."],
        )
        assert first.start_time_ms == t.words[0].start_ms
        assert first.end_time_ms == t.words[6].end_ms
        assert second.start_time_ms == t.words[7].start_ms
        assert second.end_time_ms == t.words[13].end_ms

    def test_monotonic_target_indices(self, ocean_transcription, ocean_section):
        aligner = _RecordingAligner()
        service = AlignmentService(aligner=aligner)
        segments = [p.text for p in ocean_section.points]
        result = service.align_segments(
            ocean_transcription.text, ocean_transcription.words, segments
        )
        assert all(r.is_resolved for r in result)
        for earlier, later in zip(aligner.spans, aligner.spans[1:]):
            assert min(later) >= max(earlier) + 1

    def test_unresolved_segment_leaves_cursor(self, transcription_of):
        failing_once = {"done": False}

        def flaky(a, b):
            if not failing_once["done"] and a == "zzz":
                failing_once["done"] = True
                raise TypeError("bad token")
            return Levenshtein.distance(a, b)

        service = AlignmentService(aligner=SequenceAligner(distance=flaky))
        t = transcription_of("alpha beta gamma")
        result = service.align_segments(t.text, t.words, ["zzz", "alpha"])
        assert not result[0].is_resolved
        assert result[1].start_time_ms == t.words[0].start_ms


class TestFailures:
    def test_unexpected_aligner_error_is_contained(self, caplog, transcription_of):
        service = AlignmentService(aligner=_CrashingAligner())
        t = transcription_of("hello world")
        result = service.align_segments(t.text, t.words, ["hello", "world"])
        assert len(result) == 2
        assert not any(r.is_resolved for r in result)
        assert "could not be aligned" in caplog.text
