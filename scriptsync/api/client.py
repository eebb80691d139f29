"""Async Soniox client and the Transcriber built on it.

WHY: The timing pass needs a word-timed transcription of each section's
voice-over. The voice-over already lives at a URL (the speech-synthesis
service hosts it), so the transcription job is created straight from
that URL; no upload step.

HOW: SonioxClient wraps httpx.AsyncClient as an async context manager,
one method per API step: create_transcription → poll_until_complete →
fetch_transcript → cleanup. SonioxTranscriber drives those steps for one
audio URL and assembles the tokens into a TranscriptionResult.

RULES:
- Always use the async context manager (async with SonioxClient(...) as client:)
- Polling uses exponential backoff: 2s initial, 1.5x factor, 15s max, 60min timeout
- The section's script text may be sent as context; it is size-checked first
- cleanup() is best-effort and logs, never raises
- Status callback (on_status) is optional
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

import httpx

from scriptsync.api.models import SonioxToken, TranscriptResponse, TranscriptionStatus
from scriptsync.config import SONIOX_BASE_URL, SONIOX_LANGUAGE_HINTS, SONIOX_MODEL, load_api_key
from scriptsync.core.assembler import transcription_from_tokens
from scriptsync.core.ir import TranscriptionResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_POLL_INITIAL_INTERVAL_S = 2.0
_POLL_BACKOFF_FACTOR = 1.5
_POLL_MAX_INTERVAL_S = 15.0
_POLL_TIMEOUT_S = 60 * 60  # 60 minutes

_CONTEXT_MAX_CHARS = 10_000  # ~8,000 tokens

StatusCallback = Callable[[str], None]


class SonioxAPIError(Exception):
    """Soniox answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Soniox API error {status_code}: {message}")


class ContextTooLargeError(ValueError):
    """Context text is over the Soniox limit; raised before any request."""


class TranscriptionError(Exception):
    """The transcription job ended in status "error"."""


class TranscriptionTimeoutError(TimeoutError):
    """Polling gave up after the timeout."""


class SonioxClient:
    """Async client for the Soniox async transcription API.

    RULES:
    - api_key defaults to load_api_key() from .env
    - base_url / model default to the config values
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval_s: float = _POLL_INITIAL_INTERVAL_S,
        poll_timeout_s: float = _POLL_TIMEOUT_S,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or SONIOX_BASE_URL).rstrip("/")
        self._model = model or SONIOX_MODEL
        self._transport = transport
        self._poll_interval_s = poll_interval_s
        self._poll_timeout_s = poll_timeout_s
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> SonioxClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "SonioxClient must be used as an async context manager: "
                "async with SonioxClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Step 1: Create transcription from a hosted audio file
    # ------------------------------------------------------------------

    async def create_transcription(
        self,
        audio_url: str,
        language_hints: Optional[List[str]] = None,
        context_text: Optional[str] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> str:
        """Start a transcription job for *audio_url* and return its ID.

        Raises:
            ContextTooLargeError: context_text is over the size limit.
            SonioxAPIError: non-2xx response.
        """
        client = self._ensure_client()
        if on_status:
            on_status("Creating transcription...")

        body: dict = {"model": self._model, "audio_url": audio_url}
        hints = language_hints if language_hints is not None else SONIOX_LANGUAGE_HINTS
        if hints:
            body["language_hints"] = hints
        if context_text:
            _validate_context_size(context_text)
            body["context"] = {"text": context_text}

        resp = await client.post("/transcriptions", json=body)
        if resp.status_code not in (200, 201):
            raise SonioxAPIError(resp.status_code, resp.text)

        transcription_id = resp.json()["id"]
        logger.info("Created transcription %s for %s", transcription_id, audio_url)
        return transcription_id

    # ------------------------------------------------------------------
    # Step 2: Poll until complete
    # ------------------------------------------------------------------

    async def poll_until_complete(
        self,
        transcription_id: str,
        on_status: Optional[StatusCallback] = None,
    ) -> TranscriptionStatus:
        """Poll until the job completes.

        Raises:
            TranscriptionError: the job reported status "error".
            TranscriptionTimeoutError: the poll timeout elapsed.
            SonioxAPIError: non-200 polling response.
        """
        client = self._ensure_client()
        interval = self._poll_interval_s
        start_time = time.monotonic()

        while True:
            elapsed = time.monotonic() - start_time
            if elapsed > self._poll_timeout_s:
                raise TranscriptionTimeoutError(
                    f"Transcription {transcription_id} timed out after "
                    f"{elapsed:.0f}s (limit: {self._poll_timeout_s:.0f}s)"
                )

            resp = await client.get(f"/transcriptions/{transcription_id}")
            if resp.status_code != 200:
                raise SonioxAPIError(resp.status_code, resp.text)

            status = TranscriptionStatus.from_dict(resp.json())
            logger.debug("Transcription %s: %s", transcription_id, status.status)
            if on_status:
                on_status(f"Transcription {status.status} ({int(elapsed)}s)")

            if status.is_done:
                if status.status == "error":
                    raise TranscriptionError(f"Transcription failed: {status.error_message}")
                return status

            await asyncio.sleep(interval)
            interval = min(interval * _POLL_BACKOFF_FACTOR, _POLL_MAX_INTERVAL_S)

    # ------------------------------------------------------------------
    # Step 3: Fetch transcript tokens
    # ------------------------------------------------------------------

    async def fetch_transcript(self, transcription_id: str) -> List[SonioxToken]:
        client = self._ensure_client()
        resp = await client.get(f"/transcriptions/{transcription_id}/transcript")
        if resp.status_code != 200:
            raise SonioxAPIError(resp.status_code, resp.text)
        return TranscriptResponse.from_dict(resp.json()).tokens

    # ------------------------------------------------------------------
    # Step 4: Cleanup
    # ------------------------------------------------------------------

    async def cleanup(self, transcription_id: str) -> None:
        """Delete the transcription from Soniox storage (best-effort)."""
        client = self._ensure_client()
        try:
            resp = await client.delete(f"/transcriptions/{transcription_id}")
        except httpx.HTTPError as exc:
            logger.warning("Cleanup of transcription %s failed: %s", transcription_id, exc)
            return
        if resp.status_code not in (200, 204):
            logger.warning(
                "Cleanup of transcription %s returned %d", transcription_id, resp.status_code
            )


def _validate_context_size(context_text: str) -> None:
    if len(context_text) > _CONTEXT_MAX_CHARS:
        raise ContextTooLargeError(
            f"Context size ({len(context_text):,} characters) exceeds the Soniox "
            f"limit of {_CONTEXT_MAX_CHARS:,} characters."
        )


class SonioxTranscriber:
    """Transcriber backed by SonioxClient; one job per audio URL.

    Extra keyword arguments are passed to SonioxClient (api_key, transport,
    poll_interval_s, ...). The client is opened per call, so one instance
    can serve many sections.
    """

    def __init__(
        self,
        language_hints: Optional[List[str]] = None,
        on_status: Optional[StatusCallback] = None,
        **client_kwargs,
    ) -> None:
        self._language_hints = language_hints
        self._on_status = on_status
        self._client_kwargs = client_kwargs
        # Fail fast on a missing key instead of at the first section.
        if not client_kwargs.get("api_key"):
            self._client_kwargs["api_key"] = load_api_key()

    async def transcribe(
        self,
        audio_url: str,
        context_text: Optional[str] = None,
    ) -> TranscriptionResult:
        async with SonioxClient(**self._client_kwargs) as client:
            transcription_id = await client.create_transcription(
                audio_url,
                language_hints=self._language_hints,
                context_text=context_text,
                on_status=self._on_status,
            )
            try:
                await client.poll_until_complete(transcription_id, on_status=self._on_status)
                tokens = await client.fetch_transcript(transcription_id)
            finally:
                await client.cleanup(transcription_id)

        result = transcription_from_tokens(tokens)
        logger.info("Transcribed %s: %d words", audio_url, len(result.words))
        return result
