"""Sequential timing pass over all sections of one script.

WHY: Each section's offset is the previous section's end, so sections
must be timed strictly in order. A section that cannot be timed must not
take the whole script down with it: the caller still wants every other
section, and a video-only result for the broken one.

HOW: For each section, in order:
  PENDING_TRANSCRIPT → (await transcription) → TRANSCRIBED
  → (align points) → POINTS_MATCHED → (reconcile) → TIMED
Any exception on the way marks the section FAILED, keeps the original
section as the fallback, records the stage, and leaves the running
offset untouched. Sections without audio come back UNTIMED.

RULES:
- One section at a time; the running offset is local to one run() call
- A transcription supplied up front (transcripts mapping, keyed by
  section_id) is used instead of calling the transcriber
- No timeouts and no cancellation here; the transcriber owns waiting
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Mapping, Optional, Protocol, Tuple

from scriptsync.core.ir import (
    ProcessedSection,
    SectionState,
    SectionSyncResult,
    SyncOutcome,
    TranscriptionResult,
)
from scriptsync.core.reconciler import SyncReconciler

logger = logging.getLogger(__name__)


class Transcriber(Protocol):
    """Anything that can turn a hosted audio file into a word-timed transcription."""

    async def transcribe(
        self, audio_url: str, context_text: Optional[str] = None
    ) -> TranscriptionResult:
        ...


class SyncPipeline:
    """Time ordered sections with per-section fallback."""

    def __init__(
        self,
        transcriber: Optional[Transcriber] = None,
        reconciler: Optional[SyncReconciler] = None,
    ) -> None:
        self.transcriber = transcriber
        self.reconciler = reconciler or SyncReconciler()

    async def run(
        self,
        sections: Iterable[ProcessedSection],
        initial_offset_ms: int = 0,
        transcripts: Optional[Mapping[str, TranscriptionResult]] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> List[SectionSyncResult]:
        """Transcribe (where needed) and time every section in order."""
        transcripts = transcripts or {}
        results: List[SectionSyncResult] = []
        offset = initial_offset_ms

        for section in sections:
            if on_status:
                on_status(f"Syncing {section.section_id}...")

            if section.section_id in transcripts:
                result = self._time_section(section, transcripts[section.section_id], offset)
            elif not section.audio_url:
                logger.info("Section %s has no audio, leaving it untimed", section.section_id)
                result = SectionSyncResult(
                    SyncOutcome.UNTIMED, section, SectionState.PENDING_TRANSCRIPT
                )
            else:
                try:
                    transcription = await self._transcribe(section)
                except Exception as exc:
                    logger.exception("Transcription failed for section %s", section.section_id)
                    result = _failed(section, SectionState.PENDING_TRANSCRIPT, exc)
                else:
                    result = self._time_section(section, transcription, offset)

            if result.outcome is SyncOutcome.TIMED:
                offset = result.section.section_end_time_ms
            results.append(result)

        _log_summary(results)
        return results

    def sync_transcribed(
        self,
        pairs: Iterable[Tuple[ProcessedSection, TranscriptionResult]],
        initial_offset_ms: int = 0,
    ) -> List[SectionSyncResult]:
        """Same as run() for transcriptions that are already available."""
        results: List[SectionSyncResult] = []
        offset = initial_offset_ms
        for section, transcription in pairs:
            result = self._time_section(section, transcription, offset)
            if result.outcome is SyncOutcome.TIMED:
                offset = result.section.section_end_time_ms
            results.append(result)

        _log_summary(results)
        return results

    async def _transcribe(self, section: ProcessedSection) -> TranscriptionResult:
        if self.transcriber is None:
            raise RuntimeError(
                f"Section {section.section_id} needs transcription but no transcriber is configured"
            )
        context_text = " ".join(point.text for point in section.points) or None
        return await self.transcriber.transcribe(section.audio_url, context_text=context_text)

    def _time_section(
        self,
        section: ProcessedSection,
        transcription: Optional[TranscriptionResult],
        offset_ms: int,
    ) -> SectionSyncResult:
        stage = SectionState.TRANSCRIBED
        try:
            raw_timings = self.reconciler.match_points(section, transcription)
            stage = SectionState.POINTS_MATCHED
            timed = self.reconciler.reconcile(section, raw_timings, offset_ms)
        except Exception as exc:
            logger.exception("Timing failed for section %s at %s", section.section_id, stage.value)
            return _failed(section, stage, exc)
        return SectionSyncResult(SyncOutcome.TIMED, timed, SectionState.TIMED)


def _failed(section: ProcessedSection, stage: SectionState, exc: Exception) -> SectionSyncResult:
    return SectionSyncResult(
        SyncOutcome.FAILED,
        section,
        SectionState.FAILED,
        error=str(exc),
        failed_at=stage,
    )


def _log_summary(results: List[SectionSyncResult]) -> None:
    counts = {outcome: 0 for outcome in SyncOutcome}
    for result in results:
        counts[result.outcome] += 1
    logger.info(
        "Sync finished: %d timed, %d untimed, %d failed",
        counts[SyncOutcome.TIMED],
        counts[SyncOutcome.UNTIMED],
        counts[SyncOutcome.FAILED],
    )
