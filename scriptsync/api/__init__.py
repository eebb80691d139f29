"""Soniox transcription collaborator — async HTTP access to word-timed ASR.

WHY: The core consumes transcriptions but never produces them. This
package is the one place that talks to the Soniox API to turn a hosted
voice-over into a TranscriptionResult.

HOW: client.py holds SonioxClient (httpx.AsyncClient, one method per API
step) and SonioxTranscriber (the pipeline's Transcriber). models.py holds
typed views of the API responses.

RULES:
- All HTTP calls go through SonioxClient (no direct httpx usage elsewhere)
- Authentication is via Bearer token from config
- Transcriptions are deleted after their tokens are fetched
"""
