"""Sliding-window alignment of ordered segments against one transcript.

WHY: The transcript's word order is time order. Script segments are
voiced in script order, so once a segment has claimed transcript tokens,
later segments must only look at what comes after. Without that cursor a
repeated phrase ("in this video") would be matched twice to the same
words and collapse two points onto one timestamp.

HOW: Tokenize the transcript once. Keep a cursor into its tokens. For each
segment, align its tokens against tokens[cursor:], shift the matched
indices back to global positions, read the timing off the timed words,
and move the cursor past the last matched token.

RULES:
- Output has exactly one SegmentTiming per input segment, in input order
- Unmatched/empty segments get an unresolved (all-zero) entry and leave
  the cursor where it was
- The cursor is local to one align_segments() call
- Global token index i is mapped to transcript_words[i]
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from scriptsync.core.aligner import SequenceAligner
from scriptsync.core.ir import Alignment, SegmentTiming, TimedWord
from scriptsync.core.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


class AlignmentService:
    """Time a list of script segments against a word-timed transcript."""

    def __init__(
        self,
        normalizer: Optional[TextNormalizer] = None,
        aligner: Optional[SequenceAligner] = None,
    ) -> None:
        self.normalizer = normalizer or TextNormalizer()
        self.aligner = aligner or SequenceAligner()

    def align_segments(
        self,
        transcript_text: str,
        transcript_words: Sequence[TimedWord],
        segments: Sequence[str],
    ) -> List[SegmentTiming]:
        """Return one SegmentTiming per segment, same order as *segments*."""
        transcript_tokens = self.normalizer.tokenize(transcript_text)
        timings: List[SegmentTiming] = []
        cursor = 0

        for position, segment in enumerate(segments):
            try:
                timing, cursor = self._align_one(
                    segment, transcript_tokens, transcript_words, cursor
                )
            except Exception:
                logger.exception("Segment %d could not be aligned, leaving it unresolved", position)
                timing = SegmentTiming.unresolved(segment if isinstance(segment, str) else "")
            timings.append(timing)

        resolved = sum(1 for t in timings if t.is_resolved)
        logger.info(
            "Aligned %d/%d segments against %d transcript tokens",
            resolved,
            len(timings),
            len(transcript_tokens),
        )
        return timings

    def _align_one(
        self,
        segment: str,
        transcript_tokens: List[str],
        transcript_words: Sequence[TimedWord],
        cursor: int,
    ) -> Tuple[SegmentTiming, int]:
        segment_tokens = self.normalizer.tokenize(segment)
        if not segment_tokens:
            return SegmentTiming.unresolved(segment), cursor

        remaining = transcript_tokens[cursor:]
        if not remaining:
            logger.debug("Transcript exhausted before segment %r", segment[:40])
            return SegmentTiming.unresolved(segment), cursor

        local = self.aligner.align(segment_tokens, remaining)
        if not local:
            return SegmentTiming.unresolved(segment), cursor

        shifted = [
            Alignment(a.ref_index, a.target_index + cursor, a.distance) for a in local
        ]
        timing = self.aligner.segment_timing(shifted, transcript_words, text=segment)
        next_cursor = max(a.target_index for a in shifted) + 1
        return timing, next_cursor
