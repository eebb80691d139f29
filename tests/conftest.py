"""Shared test fixtures for the scriptsync test suite.

WHY: Most test modules need word-timed transcriptions, sections of points,
and the verified Soniox token sample. Centralizing them keeps every test
on the same data and the same timing grid.

HOW: make_transcription() turns plain text into a TranscriptionResult on
a fixed grid (word i spans i*500 .. i*500+400 ms). Fixtures wrap it for
the common script/transcript pairs.

RULES:
- Word i of a grid transcription starts at i * WORD_STEP_MS
- Timed words are 1:1 with the whitespace words of the text; normalized
  tokens are not when spoken numbers merge ("two thousand" is one token)
- Token data matches the verified Soniox sample exactly
"""

from typing import Any, Dict, List

import pytest

from scriptsync.core.ir import ProcessedSection, TimedPoint, TimedWord, TranscriptionResult

WORD_STEP_MS = 500
WORD_LENGTH_MS = 400


def make_transcription(text: str, offset_ms: int = 0) -> TranscriptionResult:
    """Grid-timed transcription of *text* (one TimedWord per whitespace token)."""
    words = [
        TimedWord(
            text=token,
            start_ms=offset_ms + i * WORD_STEP_MS,
            end_ms=offset_ms + i * WORD_STEP_MS + WORD_LENGTH_MS,
            confidence=0.9,
        )
        for i, token in enumerate(text.split())
    ]
    return TranscriptionResult(text=text, words=words)


def make_section(section_id: str, *points: str, audio_url: str = "") -> ProcessedSection:
    return ProcessedSection(
        section_id=section_id,
        points=[TimedPoint(text=p, video_id=f"{section_id}-v{i}") for i, p in enumerate(points)],
        audio_url=audio_url or None,
    )


# ---------------------------------------------------------------------------
# Verified Soniox token sample
# ---------------------------------------------------------------------------

VERIFIED_TOKENS: List[Dict[str, Any]] = [
    {"text": "How",      "start_ms": 120,  "end_ms": 250,  "confidence": 0.97},
    {"text": " are",     "start_ms": 260,  "end_ms": 380,  "confidence": 0.95},
    {"text": " you",     "start_ms": 390,  "end_ms": 510,  "confidence": 0.96},
    {"text": " do",      "start_ms": 520,  "end_ms": 600,  "confidence": 0.93},
    {"text": "ing",      "start_ms": 600,  "end_ms": 720,  "confidence": 0.94},
    {"text": " to",      "start_ms": 730,  "end_ms": 790,  "confidence": 0.91},
    {"text": "day",      "start_ms": 790,  "end_ms": 920,  "confidence": 0.96},
    {"text": "?",        "start_ms": 920,  "end_ms": 940,  "confidence": 0.99},
    {"text": "I",        "start_ms": 1200, "end_ms": 1260, "confidence": 0.98},
    {"text": " am",      "start_ms": 1270, "end_ms": 1380, "confidence": 0.97},
    {"text": " fan",     "start_ms": 1390, "end_ms": 1520, "confidence": 0.90},
    {"text": "tastic",   "start_ms": 1520, "end_ms": 1780, "confidence": 0.93},
    {"text": ",",        "start_ms": 1780, "end_ms": 1800, "confidence": 0.98},
    {"text": " thank",   "start_ms": 1810, "end_ms": 1950, "confidence": 0.96},
    {"text": " you",     "start_ms": 1960, "end_ms": 2100, "confidence": 0.97},
    {"text": ".",        "start_ms": 2100, "end_ms": 2120, "confidence": 0.99},
]


@pytest.fixture
def verified_sample_tokens():
    """The verified Soniox token array (two sentences, BPE fragments)."""
    return [dict(t) for t in VERIFIED_TOKENS]


@pytest.fixture
def sample_soniox_response():
    """Full GET /transcriptions/{id}/transcript body with the verified tokens."""
    return {
        "id": "73d4357d-cad2-4338-a60d-ec6f2044f721",
        "text": "How are you doing today? I am fantastic, thank you.",
        "tokens": [dict(t) for t in VERIFIED_TOKENS],
    }


# ---------------------------------------------------------------------------
# Script / transcript pairs
# ---------------------------------------------------------------------------


@pytest.fixture
def ocean_transcription():
    """Voice-over of three points about the ocean, with spoken numbers.

    "two thousand" normalizes to one token, so from "meters" on token i
    maps to the word before the one that voiced it.
    """
    return make_transcription(
        "The ocean covers seventy-one percent of the planet. "
        "Whales can dive two thousand meters deep. "
        "Coral reefs are home to a quarter of marine species."
    )


@pytest.fixture
def ocean_section():
    return make_section(
        "section1",
        "The ocean covers 71 percent of the planet.",
        "Whales can dive 2000 meters deep.",
        "Coral reefs are home to a quarter of marine species.",
        audio_url="https://cdn.example.com/vo/section1.mp3",
    )


@pytest.fixture
def transcription_of():
    """Factory: grid-timed TranscriptionResult from text."""
    return make_transcription


@pytest.fixture
def section_of():
    """Factory: ProcessedSection from an id and point texts."""
    return make_section
