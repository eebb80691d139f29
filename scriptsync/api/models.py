"""Typed views of the Soniox async API responses the transcriber reads.

WHY: The transcriber only needs three things back from Soniox: the job
status while polling, and the flat token list once the job completes.
Small dataclasses keep field access explicit and catch renamed fields at
the parsing step instead of deep inside the assembler.

HOW: One dataclass per JSON object, each with a from_dict() factory that
pulls the known fields and tolerates the optional ones.

RULES:
- start_ms/end_ms are None only on translation tokens
- status is one of "queued", "processing", "completed", "error"
- error_message is only set when status is "error"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class SonioxToken:
    """One sub-word token; text keeps its leading space (" are")."""

    text: str
    start_ms: Optional[int]
    end_ms: Optional[int]
    confidence: float = 1.0
    translation_status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> SonioxToken:
        return cls(
            text=data["text"],
            start_ms=data.get("start_ms"),
            end_ms=data.get("end_ms"),
            confidence=data.get("confidence", 1.0),
            translation_status=data.get("translation_status"),
        )


@dataclass
class TranscriptionStatus:
    """Polling response of GET /transcriptions/{id}."""

    id: str
    status: str
    error_message: Optional[str] = None

    @property
    def is_done(self) -> bool:
        return self.status in ("completed", "error")

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionStatus:
        return cls(
            id=data["id"],
            status=data["status"],
            error_message=data.get("error_message"),
        )


@dataclass
class TranscriptResponse:
    """Body of GET /transcriptions/{id}/transcript.

    text is Soniox's own plaintext rendering; the transcriber rebuilds the
    text from the assembled words so text tokens and timed words line up.
    """

    id: str
    text: str
    tokens: List[SonioxToken] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptResponse:
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            tokens=[SonioxToken.from_dict(t) for t in data.get("tokens", [])],
        )
