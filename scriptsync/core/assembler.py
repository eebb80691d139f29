"""Soniox sub-word tokens → word-timed TranscriptionResult.

WHY: Soniox returns BPE fragments (" fan", "tastic") and punctuation as
separate tokens. The alignment service wants one TimedWord per spoken
word, in the same order as the tokens of the transcript text, so that
transcript token i and timed word i are the same word.

HOW: A leading space starts a new word; a token without one continues
the current word. Punctuation-only tokens are glued onto the word they
follow instead of becoming words of their own (the normalizer strips
them again). The transcript text is the words joined by single spaces.

RULES:
- First token always starts a word, leading space or not
- Continuation extends end_ms; confidence is the minimum over fragments
- Punctuation never produces a TimedWord; leading punctuation is dropped
- Translation tokens carry no timing and must be filtered out first
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from scriptsync.api.models import SonioxToken
from scriptsync.core.ir import TimedWord, TranscriptionResult

_PUNCTUATION_RE = re.compile(r"^\s*[.,!?;:…—–\-\"'“”‘’()]+\s*$")


def filter_translation_tokens(tokens: Sequence[SonioxToken]) -> List[SonioxToken]:
    """Drop translation tokens; they have no place in the audio."""
    return [t for t in tokens if t.translation_status != "translation"]


def assemble_words(tokens: Sequence[SonioxToken]) -> List[TimedWord]:
    """Merge Soniox tokens into TimedWords."""
    words: List[TimedWord] = []
    current: Optional[TimedWord] = None

    for token in tokens:
        if token.start_ms is None or token.end_ms is None:
            continue

        if _PUNCTUATION_RE.match(token.text):
            mark = token.text.strip()
            if current is not None:
                current.text += mark
                words.append(current)
                current = None
            elif words:
                words[-1].text += mark
            continue

        if token.text.startswith(" ") or current is None:
            if current is not None:
                words.append(current)
            current = TimedWord(
                text=token.text.lstrip(" "),
                start_ms=token.start_ms,
                end_ms=token.end_ms,
                confidence=token.confidence,
            )
        else:
            current.text += token.text
            current.end_ms = token.end_ms
            current.confidence = min(current.confidence, token.confidence)

    if current is not None:
        words.append(current)
    return words


def build_transcription(words: List[TimedWord]) -> TranscriptionResult:
    return TranscriptionResult(text=" ".join(w.text for w in words), words=words)


def transcription_from_tokens(tokens: Sequence[SonioxToken]) -> TranscriptionResult:
    """Filter, assemble, and wrap a raw Soniox token list."""
    return build_transcription(assemble_words(filter_translation_tokens(tokens)))
