"""Locate script points inside a raw transcript string.

WHY: Sometimes only the transcript text is at hand (no word timing is used
for the lookup), yet callers still want to know which stretch of the
transcript voices which point. ASR text rarely reproduces the script
verbatim, so an exact search alone misses most points.

HOW: Three tiers, cheapest first:
  1. Exact substring search of the normalized point from the current
     position.
  2. For 2-3 word points, the first two words as a prefix search.
  3. Fuzzy: every occurrence of a "significant" word (4+ characters, or
     the first three words when none qualify) opens a context window
     around it, scored against the point by similarity(). The best window
     above MATCH_ACCEPT_THRESHOLD wins; one above
     MATCH_SHORT_CIRCUIT_THRESHOLD ends the search at once.

RULES:
- Indices refer to the normalized transcript, never the raw one
- Normalization here is case + punctuation + whitespace; numbers are
  left alone
- A match never starts before start_position
- NOT_FOUND (-1) is a result, not an error; unmatched points are kept
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence, Set, Tuple

from scriptsync.config import (
    MATCH_ACCEPT_THRESHOLD,
    MATCH_SHORT_CIRCUIT_THRESHOLD,
    MATCH_WINDOW_LEFT_PADDING,
    MATCH_WINDOW_MAX_CHARS,
    SIGNIFICANT_WORD_MIN_LENGTH,
)
from scriptsync.core.ir import PointSpan, Section
from scriptsync.core.script import extract_points_from_sections, parse_script_into_sections

logger = logging.getLogger(__name__)

NOT_FOUND = -1

_MATCH_PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
_WHITESPACE_RE = re.compile(r"\s+")

_LENGTH_WEIGHT = 0.2
_OVERLAP_WEIGHT = 0.4
_SEQUENCE_WEIGHT = 0.4
_OVERLAP_MIN_WORD_LENGTH = 3
_MAX_NGRAM = 4


def normalize_for_matching(text: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    stripped = _MATCH_PUNCTUATION_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def _ngrams(words: Sequence[str], n: int) -> Iterable[Tuple[str, ...]]:
    return (tuple(words[i:i + n]) for i in range(len(words) - n + 1))


def similarity(a: str, b: str) -> float:
    """Score how alike two normalized strings are, from 0.0 to 1.0.

    Weighted blend of word-count ratio (0.2), shared-word overlap for words
    of 3+ characters (0.4), and shared word n-grams of size 2..4 (0.4,
    an n-gram counts n, normalized by twice the longer word count).
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    words_a = a.split()
    words_b = b.split()
    if not words_a or not words_b:
        return 0.0

    shorter, longer = sorted((len(words_a), len(words_b)))
    length_ratio = shorter / longer

    unique_a: Set[str] = set(words_a)
    unique_b: Set[str] = set(words_b)
    shared = sum(
        1 for word in unique_a
        if word in unique_b and len(word) >= _OVERLAP_MIN_WORD_LENGTH
    )
    word_overlap = shared / max(len(unique_a), len(unique_b))

    sequence_matches = 0
    for n in range(2, min(_MAX_NGRAM, shorter // 2) + 1):
        grams_b = set(_ngrams(words_b, n))
        sequence_matches += sum(n for gram in _ngrams(words_a, n) if gram in grams_b)
    sequence_score = min(sequence_matches / (longer * 2), 1.0)

    score = (
        _LENGTH_WEIGHT * length_ratio
        + _OVERLAP_WEIGHT * word_overlap
        + _SEQUENCE_WEIGHT * sequence_score
    )
    return max(0.0, min(score, 1.0))


class TranscriptSegmenter:
    """Find where script points sit in a transcript string."""

    def find_best_match(self, segment_text: str, transcript: str, start_position: int = 0) -> int:
        """Index of *segment_text* in the normalized *transcript*, or NOT_FOUND."""
        return self._find(
            normalize_for_matching(segment_text),
            normalize_for_matching(transcript),
            max(start_position, 0),
        )

    @staticmethod
    def _find(point: str, haystack: str, start: int) -> int:
        if not point or start >= len(haystack):
            return NOT_FOUND

        exact = haystack.find(point, start)
        if exact != NOT_FOUND:
            return exact

        words = point.split(" ")
        if 2 <= len(words) <= 3:
            prefix = haystack.find(" ".join(words[:2]), start)
            if prefix != NOT_FOUND:
                return prefix

        significant = [w for w in words if len(w) >= SIGNIFICANT_WORD_MIN_LENGTH] or words[:3]
        window = min(len(point) * 2, MATCH_WINDOW_MAX_CHARS)
        best_index = NOT_FOUND
        best_score = 0.0

        for word in significant:
            position = start
            while True:
                found = haystack.find(word, position)
                if found == NOT_FOUND:
                    break
                # padding stops at start so a window never reaches behind the cursor
                context_start = max(found - MATCH_WINDOW_LEFT_PADDING, start)
                context_end = min(found + window, len(haystack))
                score = similarity(point, haystack[context_start:context_end])
                if score > MATCH_ACCEPT_THRESHOLD and score > best_score:
                    best_score = score
                    best_index = context_start
                    if score > MATCH_SHORT_CIRCUIT_THRESHOLD:
                        break
                position = found + len(word)
            if best_score > MATCH_SHORT_CIRCUIT_THRESHOLD:
                break

        if best_index != NOT_FOUND:
            logger.debug("Fuzzy match for %r at %d (score %.2f)", point[:40], best_index, best_score)
        return best_index

    def locate_points(self, points: Sequence[str], transcript: str) -> List[PointSpan]:
        """Locate each point in order; every point is reported, found or not.

        A located point runs up to the start of the next located point, or
        to the end of the transcript.
        """
        haystack = normalize_for_matching(transcript)
        starts: List[int] = []
        position = 0

        for point in points:
            normalized = normalize_for_matching(point)
            index = self._find(normalized, haystack, position)
            starts.append(index)
            if index != NOT_FOUND:
                position = min(index + len(normalized), len(haystack))

        spans: List[PointSpan] = []
        for i, (point, start) in enumerate(zip(points, starts)):
            if start == NOT_FOUND:
                spans.append(PointSpan(text=point))
                continue
            end = next((s for s in starts[i + 1:] if s != NOT_FOUND), len(haystack))
            spans.append(
                PointSpan(
                    text=point,
                    start_index=start,
                    end_index=end,
                    matched_text=haystack[start:end].strip(),
                )
            )

        missing = sum(1 for span in spans if not span.found)
        if missing:
            logger.warning("%d of %d points not found in transcript, kept unmatched", missing, len(spans))
        return spans

    def segment_section_transcript(self, transcript: str, section: Section) -> Section:
        """Copy of *section* with every point kept, unmatched ones included.

        The lookup here only logs points that could not be found in
        *transcript*; callers that need the spans use locate_points().
        """
        self.locate_points(section.points, transcript)
        return Section(id=section.id, text=section.text, points=list(section.points))

    def locate_sections(self, transcript: str, sections: Sequence[Section]) -> List[Tuple[Section, List[PointSpan]]]:
        """Locate the points of all *sections* in one pass over *transcript*."""
        flat = [point for section in sections for point in section.points]
        spans = self.locate_points(flat, transcript)

        located: List[Tuple[Section, List[PointSpan]]] = []
        offset = 0
        for section in sections:
            count = len(section.points)
            located.append((section, spans[offset:offset + count]))
            offset += count
        return located

    def segment_transcript(self, transcript: str, original_script: str) -> List[Section]:
        """Parse *original_script* and segment *transcript* by its structure."""
        sections = extract_points_from_sections(parse_script_into_sections(original_script))
        located = self.locate_sections(transcript, sections)
        found = sum(1 for _, spans in located for span in spans if span.found)
        total = sum(len(spans) for _, spans in located)
        logger.info("Segmented transcript: %d/%d points located in %d sections", found, total, len(sections))
        return [
            Section(id=section.id, text=section.text, points=list(section.points))
            for section, _ in located
        ]
