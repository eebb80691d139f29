"""Canonical text form used before comparing script and transcript tokens.

WHY: Script text and ASR output differ in case, punctuation, and number
spelling ("Twenty-six people," vs "26 people"). Edit distance between raw
tokens would mostly measure those differences instead of the words.

HOW: lowercase → strip a fixed punctuation set → spell-out numbers become
digits → collapse whitespace → trim. Tokenization splits the normalized
string on whitespace.

RULES:
- Hyphens survive normalization ("well-known" stays one token)
- normalize(normalize(x)) == normalize(x)
- Never raises: a failing number conversion logs a warning and the
  pre-conversion text is used
- Non-string input is returned unchanged; tokenize() of it is []
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional

from scriptsync.core.numbers import NumberWordConverter

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[.,;:\"“”'‘’!?()\[\]{}]")
_WHITESPACE_RE = re.compile(r"\s+")


class TextNormalizer:
    """Bring text into the comparison form shared by the aligner.

    The number converter is injectable so callers can swap in another
    spelling rule set; the default handles English cardinals.
    """

    def __init__(self, number_converter: Optional[NumberWordConverter] = None) -> None:
        self._numbers = number_converter or NumberWordConverter()

    def normalize(self, text: Any) -> Any:
        """Return the normalized form of *text*.

        >>> TextNormalizer().normalize("Twenty-six people, Chapter Two!")
        '26 people chapter 2'
        """
        if not isinstance(text, str):
            logger.warning("normalize() got %s, returning it unchanged", type(text).__name__)
            return text

        normalized = _PUNCTUATION_RE.sub("", text.lower())
        try:
            normalized = self._numbers.convert(normalized)
        except Exception:
            logger.warning("Number conversion failed, keeping words as spelled", exc_info=True)
        return _WHITESPACE_RE.sub(" ", normalized).strip()

    def tokenize(self, text: Any) -> List[str]:
        """Split normalized *text* into tokens; [] for non-string input."""
        if not isinstance(text, str):
            return []
        return self.normalize(text).split()
