"""Pydantic models for the JSON boundary.

WHY: Transcriptions, sync jobs, and timing results travel as camelCase
JSON (startMs, sectionOffsetMs, ...) between this engine and the
services around it. Validating at the boundary keeps bad timestamps out
of the core, which assumes well-formed, time-ordered words.

HOW: Every model derives from _CamelModel (camelCase aliases, snake_case
accepted too). Input models convert to the core dataclasses with
to_ir(); output models are built from them with from_ir().

RULES:
- Word times are non-negative integers and endMs >= startMs
- Transcription words must be in non-decreasing startMs order
- Words also accept "start"/"end" keys (AssemblyAI-style payloads)
- A point may be given as a bare string
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from scriptsync.core.ir import (
    ProcessedSection,
    SectionState,
    SectionSyncResult,
    SegmentTiming,
    SyncOutcome,
    TimedPoint,
    TimedWord,
    TranscriptionResult,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Transcription input
# ---------------------------------------------------------------------------


class TimedWordModel(_CamelModel):
    text: str
    start_ms: int = Field(
        ge=0,
        validation_alias=AliasChoices("startMs", "start_ms", "start"),
        serialization_alias="startMs",
    )
    end_ms: int = Field(
        ge=0,
        validation_alias=AliasChoices("endMs", "end_ms", "end"),
        serialization_alias="endMs",
    )
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _end_after_start(self) -> TimedWordModel:
        if self.end_ms < self.start_ms:
            raise ValueError(f"word {self.text!r} ends ({self.end_ms}) before it starts ({self.start_ms})")
        return self

    def to_ir(self) -> TimedWord:
        return TimedWord(self.text, self.start_ms, self.end_ms, self.confidence)


class TranscriptionModel(_CamelModel):
    """A word-timed transcription: {text, words: [{text, startMs, endMs, confidence}]}."""

    text: str = ""
    words: List[TimedWordModel] = Field(default_factory=list)

    @field_validator("words")
    @classmethod
    def _time_ordered(cls, words: List[TimedWordModel]) -> List[TimedWordModel]:
        for previous, word in zip(words, words[1:]):
            if word.start_ms < previous.start_ms:
                raise ValueError(
                    f"words must be in time order: {word.text!r} at {word.start_ms} "
                    f"follows {previous.text!r} at {previous.start_ms}"
                )
        return words

    def to_ir(self) -> TranscriptionResult:
        words = [w.to_ir() for w in self.words]
        text = self.text or " ".join(w.text for w in words)
        return TranscriptionResult(text=text, words=words)


# ---------------------------------------------------------------------------
# Sections and points
# ---------------------------------------------------------------------------


class TimedPointModel(_CamelModel):
    text: str
    video_id: str = ""
    video_url: str = ""
    video_thumbnail: str = ""
    start_time_ms: Optional[int] = Field(default=None, ge=0)
    end_time_ms: Optional[int] = Field(default=None, ge=0)

    def to_ir(self) -> TimedPoint:
        return TimedPoint(
            text=self.text,
            video_id=self.video_id,
            video_url=self.video_url,
            video_thumbnail=self.video_thumbnail,
            start_time_ms=self.start_time_ms,
            end_time_ms=self.end_time_ms,
        )

    @classmethod
    def from_ir(cls, point: TimedPoint) -> TimedPointModel:
        return cls(
            text=point.text,
            video_id=point.video_id,
            video_url=point.video_url,
            video_thumbnail=point.video_thumbnail,
            start_time_ms=point.start_time_ms,
            end_time_ms=point.end_time_ms,
        )


class ProcessedSectionModel(_CamelModel):
    section_id: str
    points: List[TimedPointModel] = Field(default_factory=list)
    voice_over_id: Optional[str] = None
    audio_url: Optional[str] = None
    section_offset_ms: Optional[int] = Field(default=None, ge=0)
    section_end_time_ms: Optional[int] = Field(default=None, ge=0)

    @field_validator("points", mode="before")
    @classmethod
    def _bare_string_points(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"text": item} if isinstance(item, str) else item for item in value]
        return value

    def to_ir(self) -> ProcessedSection:
        return ProcessedSection(
            section_id=self.section_id,
            points=[p.to_ir() for p in self.points],
            voice_over_id=self.voice_over_id,
            audio_url=self.audio_url,
            section_offset_ms=self.section_offset_ms,
            section_end_time_ms=self.section_end_time_ms,
        )

    @classmethod
    def from_ir(cls, section: ProcessedSection) -> ProcessedSectionModel:
        return cls(
            section_id=section.section_id,
            points=[TimedPointModel.from_ir(p) for p in section.points],
            voice_over_id=section.voice_over_id,
            audio_url=section.audio_url,
            section_offset_ms=section.section_offset_ms,
            section_end_time_ms=section.section_end_time_ms,
        )


# ---------------------------------------------------------------------------
# Sync job (CLI input) and results
# ---------------------------------------------------------------------------


class SyncJobSectionModel(ProcessedSectionModel):
    """A section to time; an inline transcript skips the transcription step."""

    transcript: Optional[TranscriptionModel] = None


class SyncJobModel(_CamelModel):
    sections: List[SyncJobSectionModel]
    initial_offset_ms: int = Field(default=0, ge=0)


class SegmentTimingModel(_CamelModel):
    text: str
    start_time_ms: int
    end_time_ms: int
    duration_ms: int

    @classmethod
    def from_ir(cls, timing: SegmentTiming) -> SegmentTimingModel:
        return cls(
            text=timing.text,
            start_time_ms=timing.start_time_ms,
            end_time_ms=timing.end_time_ms,
            duration_ms=timing.duration_ms,
        )


class SectionResultModel(_CamelModel):
    outcome: SyncOutcome
    state: SectionState
    section: ProcessedSectionModel
    failed_at: Optional[SectionState] = None
    error: Optional[str] = None

    @classmethod
    def from_ir(cls, result: SectionSyncResult) -> SectionResultModel:
        return cls(
            outcome=result.outcome,
            state=result.state,
            section=ProcessedSectionModel.from_ir(result.section),
            failed_at=result.failed_at,
            error=result.error,
        )
