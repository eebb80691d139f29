"""Greedy one-to-one token alignment by edit distance.

WHY: A script point and the stretch of transcript that voices it share
most of their words, but ASR misspells some and drops or adds others.
Matching each point token to its closest transcript token and then
resolving conflicts gives a cheap, good-enough correspondence for timing.

HOW:
  1. For every reference token, scan all target tokens and keep the one
     with the smallest distance (first index wins on ties).
  2. Sort those candidates by ascending distance (stable).
  3. Walk the sorted list and keep a candidate only if neither its
     reference index nor its target index has been used yet.
  4. Return the survivors sorted by reference index.

RULES:
- The result is one-to-one on both sides
- Length of the result is at most min(len(reference), len(target))
- A failing distance function yields [] for that call, logged as a warning
- Greedy, not a global optimum; O(n·m) distance calls
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from scriptsync.core.ir import Alignment, SegmentTiming, TimedWord

logger = logging.getLogger(__name__)

DistanceFunction = Callable[[str, str], int]


class SequenceAligner:
    """Align two token sequences; Levenshtein distance unless told otherwise."""

    def __init__(self, distance: Optional[DistanceFunction] = None) -> None:
        self._distance: DistanceFunction = distance or Levenshtein.distance

    def align(
        self,
        reference_tokens: Sequence[str],
        target_tokens: Sequence[str],
    ) -> List[Alignment]:
        """Return the one-to-one alignments between the two sequences."""
        try:
            candidates = self._closest_targets(reference_tokens, target_tokens)
        except (TypeError, ValueError):
            logger.warning(
                "Distance computation failed for %s against %s, no alignments produced",
                type(reference_tokens).__name__,
                type(target_tokens).__name__,
                exc_info=True,
            )
            return []

        alignments = _keep_one_to_one(candidates)
        logger.debug(
            "Aligned %d/%d reference tokens against %d target tokens",
            len(alignments),
            len(reference_tokens),
            len(target_tokens),
        )
        return alignments

    def _closest_targets(
        self,
        reference_tokens: Sequence[str],
        target_tokens: Sequence[str],
    ) -> List[Alignment]:
        candidates: List[Alignment] = []
        for ref_index, ref_token in enumerate(reference_tokens):
            best: Optional[Alignment] = None
            for target_index, target_token in enumerate(target_tokens):
                distance = self._distance(ref_token, target_token)
                if best is None or distance < best.distance:
                    best = Alignment(ref_index, target_index, distance)
            if best is not None:
                candidates.append(best)
        return candidates

    @staticmethod
    def segment_timing(
        alignments: Sequence[Alignment],
        timed_words: Sequence[TimedWord],
        text: str = "",
    ) -> SegmentTiming:
        """Map the matched target span onto word timestamps.

        First word's start to last word's end. Unresolved (all zero) when
        there is nothing to map or a target index has no timed word.
        """
        if not alignments or not timed_words:
            return SegmentTiming.unresolved(text)

        first = min(a.target_index for a in alignments)
        last = max(a.target_index for a in alignments)
        if first < 0 or last >= len(timed_words):
            logger.debug(
                "Target span %d..%d outside %d timed words, leaving unresolved",
                first,
                last,
                len(timed_words),
            )
            return SegmentTiming.unresolved(text)

        start_ms = timed_words[first].start_ms
        end_ms = timed_words[last].end_ms
        return SegmentTiming(
            text=text,
            start_time_ms=start_ms,
            end_time_ms=end_ms,
            duration_ms=end_ms - start_ms,
        )


def _keep_one_to_one(candidates: List[Alignment]) -> List[Alignment]:
    used_refs = set()
    used_targets = set()
    kept: List[Alignment] = []

    for candidate in sorted(candidates, key=lambda a: a.distance):
        if candidate.ref_index in used_refs or candidate.target_index in used_targets:
            continue
        used_refs.add(candidate.ref_index)
        used_targets.add(candidate.target_index)
        kept.append(candidate)

    kept.sort(key=lambda a: a.ref_index)
    return kept
