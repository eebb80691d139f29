"""Configuration constants, matching thresholds, and .env loading.

WHY: Centralizes every tunable value so it is easy to find and change.
Timing constants and fuzzy-matching thresholds are plain data — not
buried in logic — so both humans and coding agents can adjust them
confidently. Transcription-service settings come from the environment.

HOW: python-dotenv loads the .env file on import. Algorithm constants
are module-level values. Service settings read os.getenv with defaults.
load_api_key() gives a clear error when the key is missing.

RULES:
- SECTION_END_BUFFER_MS is fixed at 500 and is not environment-tunable
- Matching thresholds are fixed; they define the segmenter's behavior
- API key is loaded from .env via python-dotenv, never hardcoded
- Service defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

SECTION_END_BUFFER_MS = 500
"""Trailing silence appended to the last point of every section."""

# ---------------------------------------------------------------------------
# Transcript segmenter (fuzzy point location)
# ---------------------------------------------------------------------------

MATCH_ACCEPT_THRESHOLD = 0.4
"""A context window must score above this to count as a match."""

MATCH_SHORT_CIRCUIT_THRESHOLD = 0.7
"""A window scoring above this ends the search immediately."""

MATCH_WINDOW_MAX_CHARS = 200
MATCH_WINDOW_LEFT_PADDING = 20
SIGNIFICANT_WORD_MIN_LENGTH = 4

# ---------------------------------------------------------------------------
# Transcription service (Soniox)
# ---------------------------------------------------------------------------

SONIOX_BASE_URL = os.getenv("SONIOX_BASE_URL", "https://api.soniox.com/v1")
SONIOX_MODEL = os.getenv("SONIOX_MODEL", "stt-async-v4")
SONIOX_LANGUAGE_HINTS = [
    code.strip()
    for code in os.getenv("SONIOX_LANGUAGE_HINTS", "en").split(",")
    if code.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_api_key() -> str:
    """Load the Soniox API key from the environment.

    WHY: Voice-over transcription needs the key. Loading it from the
    environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("SONIOX_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Soniox API key not configured. "
            "Add SONIOX_API_KEY to the .env file in the project folder."
        )
    return key
