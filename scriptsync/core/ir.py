"""Intermediate representation dataclasses for transcripts, points, and timing.

WHY: The aligner, the segmenter, the reconciler, and the pipeline all pass
the same handful of structures around — timed words from ASR, per-segment
timing estimates, script sections, and video-bearing points. One well-typed
module keeps those contracts in a single place and decouples the algorithms
from the JSON boundary.

HOW: Plain dataclasses, grouped by producer:
  TimedWord / TranscriptionResult — produced by the ASR collaborator
  Alignment                       — produced by the sequence aligner
  SegmentTiming                   — produced by the alignment service
  PointSpan                       — produced by the transcript segmenter
  Section / TimedPoint / ProcessedSection — script structures, annotated
                                    with timing by the reconciler
  SectionState / SyncOutcome / SectionSyncResult — pipeline bookkeeping

RULES:
- All times are integer milliseconds
- Zero timing on a SegmentTiming means "unresolved", never "missing"
- Alignment is frozen; the aligner's one-to-one invariant is per call
- ProcessedSection.section_offset_ms of section N+1 equals
  section_end_time_ms of section N
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


@dataclass
class TimedWord:
    """One recognized word with its position in the audio.

    RULES:
    - start_ms >= 0 and end_ms >= start_ms
    - Sequences of TimedWord are ordered by non-decreasing start_ms
    - text may carry trailing punctuation ("people,"); the normalizer strips it
    """

    text: str
    start_ms: int
    end_ms: int
    confidence: float = 1.0


@dataclass
class TranscriptionResult:
    """Full output of the transcription collaborator for one audio track."""

    text: str
    words: list[TimedWord] = field(default_factory=list)


@dataclass(frozen=True)
class Alignment:
    """A claimed correspondence between one reference and one target token.

    ref_index points into the segment's tokens, target_index into the
    transcript's tokens, distance is the edit distance between the two.
    """

    ref_index: int
    target_index: int
    distance: int


@dataclass
class SegmentTiming:
    """Raw timing estimate for one script segment.

    WHY: Every input segment gets exactly one SegmentTiming, even when the
    segment could not be found in the audio. Callers rely on the output list
    having the same length and order as the input list.

    RULES:
    - All-zero start/end/duration means "unresolved"
    - duration_ms == end_time_ms - start_time_ms
    """

    text: str
    start_time_ms: int = 0
    end_time_ms: int = 0
    duration_ms: int = 0

    @classmethod
    def unresolved(cls, text: str) -> SegmentTiming:
        return cls(text=text)

    @property
    def is_resolved(self) -> bool:
        return not (self.start_time_ms == 0 and self.end_time_ms == 0 and self.duration_ms == 0)


@dataclass
class PointSpan:
    """Where a point was located inside a transcript string.

    Indices refer to the segmenter's normalized transcript text. A point that
    could not be located keeps start_index/end_index as None and an empty
    matched_text; it is still reported.
    """

    text: str
    start_index: int | None = None
    end_index: int | None = None
    matched_text: str = ""

    @property
    def found(self) -> bool:
        return self.start_index is not None


@dataclass
class Section:
    """A contiguous block of script text voiced as one audio track.

    RULES:
    - id is "section1", "section2", ... when produced by the script parser
    - points are ordered and are what gets timed
    """

    id: str
    text: str
    points: list[str] = field(default_factory=list)


@dataclass
class TimedPoint:
    """A video-bearing point, with timing once reconciled."""

    text: str
    video_id: str = ""
    video_url: str = ""
    video_thumbnail: str = ""
    start_time_ms: int | None = None
    end_time_ms: int | None = None


@dataclass
class ProcessedSection:
    """A section's points plus its voice-over and placement on the timeline.

    WHY: The orchestrator builds one ProcessedSection per script section,
    attaches the voice-over that was synthesized for it, and hands it to the
    reconciler, which fills in point timing and the section's span.

    RULES:
    - section_offset_ms / section_end_time_ms are None until reconciled
    - section_end_time_ms includes the trailing end buffer
    - Lifecycle is one request; nothing is persisted
    """

    section_id: str
    points: list[TimedPoint] = field(default_factory=list)
    voice_over_id: str | None = None
    audio_url: str | None = None
    section_offset_ms: int | None = None
    section_end_time_ms: int | None = None

    @property
    def is_timed(self) -> bool:
        return self.section_end_time_ms is not None


class SectionState(str, enum.Enum):
    """Progress of one section through the timing pass.

    RULES:
    - Normal order: pending_transcript → transcribed → points_matched → timed
    - failed can be entered from any stage and is terminal
    """

    PENDING_TRANSCRIPT = "pending_transcript"
    TRANSCRIBED = "transcribed"
    POINTS_MATCHED = "points_matched"
    TIMED = "timed"
    FAILED = "failed"


class SyncOutcome(str, enum.Enum):
    """Tag of a SectionSyncResult.

    RULES:
    - timed: section carries reconciled point timing
    - untimed: nothing to synchronize (no audio); section returned as is
    - failed: synchronization was attempted and raised; section returned
      untouched so the caller can fall back to a video-only result
    """

    TIMED = "timed"
    UNTIMED = "untimed"
    FAILED = "failed"


@dataclass
class SectionSyncResult:
    """Tagged outcome of synchronizing one section.

    WHY: A zero timing already means "this point was not found". Hard
    failures must not be encoded as zeros too, so each section result is
    tagged with its outcome and, on failure, the error message and the
    stage that was running when it happened.
    """

    outcome: SyncOutcome
    section: ProcessedSection
    state: SectionState
    error: str | None = None
    failed_at: SectionState | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not SyncOutcome.FAILED
