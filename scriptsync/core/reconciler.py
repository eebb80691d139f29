"""Turn raw per-point timings into contiguous section timing.

WHY: Raw alignment timings have gaps (pauses between sentences) and can
overlap (a word claimed at the edge of two points). Video cuts need the
opposite: every point starts exactly where the previous one ended, and
each section starts exactly where the previous section ended, so the
visuals play back without black frames or double cuts.

HOW: Two passes per section.
  Pass 1 (starts): the first point starts at the section offset. Each
  later point starts at the previous point's raw end, shifted by the
  offset; when that raw end is unresolved it falls back to its own raw
  start. Starts never go backwards.
  Pass 2 (ends): every point ends where the next one starts. The last
  point ends at its start plus its raw duration plus SECTION_END_BUFFER_MS,
  and that value becomes the section's end and the next section's offset.

RULES:
- Interior raw boundaries are discarded on purpose; only the first start
  and the last duration come from the raw alignment
- point[i].end == point[i+1].start within a section, starts non-decreasing
- The last point's end includes exactly the end buffer
- No word-level data means no timing: MissingWordTimingError, never a
  zero-length section
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from scriptsync.config import SECTION_END_BUFFER_MS
from scriptsync.core.alignment import AlignmentService
from scriptsync.core.ir import ProcessedSection, SegmentTiming, TranscriptionResult

logger = logging.getLogger(__name__)


class SyncError(Exception):
    """Base error for failures that must reach the orchestrator."""


class MissingWordTimingError(SyncError):
    """Timing was requested but there is no word-level transcription data."""


class ReconciliationError(SyncError):
    """Section and raw timings do not fit together."""


class SyncReconciler:
    """Assign final start/end times to the points of ordered sections."""

    def __init__(
        self,
        alignment_service: Optional[AlignmentService] = None,
        end_buffer_ms: int = SECTION_END_BUFFER_MS,
    ) -> None:
        self.alignment_service = alignment_service or AlignmentService()
        self.end_buffer_ms = end_buffer_ms

    def reconcile(
        self,
        section: ProcessedSection,
        raw_timings: Sequence[SegmentTiming],
        section_offset_ms: int,
    ) -> ProcessedSection:
        """Return a copy of *section* with contiguous point timing.

        Raises:
            MissingWordTimingError: raw_timings is empty.
            ReconciliationError: the section has no points, or the number
                of raw timings differs from the number of points.
        """
        if not section.points:
            raise ReconciliationError(f"Section {section.section_id} has no points to time")
        if not raw_timings:
            raise MissingWordTimingError(
                f"Section {section.section_id}: no raw timings to reconcile"
            )
        if len(raw_timings) != len(section.points):
            raise ReconciliationError(
                f"Section {section.section_id}: {len(raw_timings)} raw timings "
                f"for {len(section.points)} points"
            )

        # Pass 1: starts
        starts: List[int] = []
        previous_end: Optional[int] = None
        for index, raw in enumerate(raw_timings):
            if index == 0:
                start = section_offset_ms
            elif previous_end is not None:
                start = previous_end
            else:
                start = section_offset_ms + raw.start_time_ms
            if starts:
                start = max(start, starts[-1])
            starts.append(start)
            previous_end = section_offset_ms + raw.end_time_ms if raw.is_resolved else None

        # Pass 2: ends
        ends = starts[1:]
        last_raw = raw_timings[-1]
        last_duration = max(last_raw.end_time_ms - last_raw.start_time_ms, 0)
        ends.append(starts[-1] + last_duration + self.end_buffer_ms)

        points = [
            dataclasses.replace(point, start_time_ms=start, end_time_ms=end)
            for point, start, end in zip(section.points, starts, ends)
        ]
        unresolved = sum(1 for raw in raw_timings if not raw.is_resolved)
        if unresolved:
            logger.warning(
                "Section %s: %d/%d points had no raw timing, chained from neighbours",
                section.section_id,
                unresolved,
                len(raw_timings),
            )
        logger.info(
            "Section %s timed: %d points, %d..%d ms",
            section.section_id,
            len(points),
            section_offset_ms,
            ends[-1],
        )
        return dataclasses.replace(
            section,
            points=points,
            section_offset_ms=section_offset_ms,
            section_end_time_ms=ends[-1],
        )

    def sync_section(
        self,
        section: ProcessedSection,
        transcription: Optional[TranscriptionResult],
        section_offset_ms: int,
    ) -> ProcessedSection:
        """Align the section's points against its transcription, then reconcile."""
        raw_timings = self.match_points(section, transcription)
        return self.reconcile(section, raw_timings, section_offset_ms)

    def match_points(
        self,
        section: ProcessedSection,
        transcription: Optional[TranscriptionResult],
    ) -> List[SegmentTiming]:
        """Raw per-point timings for *section* from its word-timed transcription."""
        if transcription is None or not transcription.words:
            raise MissingWordTimingError(
                f"Section {section.section_id}: transcription has no word-level timing"
            )
        return self.alignment_service.align_segments(
            transcription.text,
            transcription.words,
            [point.text for point in section.points],
        )

    def reconcile_sections(
        self,
        pairs: Iterable[Tuple[ProcessedSection, TranscriptionResult]],
        initial_offset_ms: int = 0,
    ) -> List[ProcessedSection]:
        """Time sections strictly in order, each starting where the last ended.

        Any failure propagates; use SyncPipeline for per-section fallback.
        """
        offset = initial_offset_ms
        timed: List[ProcessedSection] = []
        for section, transcription in pairs:
            result = self.sync_section(section, transcription, offset)
            offset = result.section_end_time_ms
            timed.append(result)
        return timed
