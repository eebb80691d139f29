"""Spoken English cardinal numbers → digit strings.

WHY: A script says "Chapter 2" while the ASR transcript of the voice-over
says "chapter two", or the other way round. Token alignment compares words
by edit distance, so both sides must spell numbers the same way before
they meet.

HOW: The text is split into words and the whitespace between them. Each
maximal run of number words that forms one well-formed cardinal is parsed
left to right with a small grammar (units, teens, tens, hyphenated
compounds, "hundred", scale words, and a joining "and") and replaced by
its value. Words outside a number, and the whitespace around a number,
are kept as they were.

RULES:
- Only lowercase matching is attempted after .lower(); callers normalize case
- "zero" is always a number of its own
- "hundred" and scale words never start a number ("hundred" alone stays)
- "and" joins only after "hundred"/a scale word and before a smaller part
- A word that cannot continue the current number starts a new one
  ("one two" → "1 2")
- Digits are never touched, so convert(convert(x)) == convert(x)
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

_SPLIT_RE = re.compile(r"(\s+)")

_UNITS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9,
}

_TEENS = {
    "ten": 10, "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
}

_TENS = {
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}

_SCALES = {
    "thousand": 10 ** 3,
    "million": 10 ** 6,
    "billion": 10 ** 9,
    "trillion": 10 ** 12,
}

_COMPOUND_RE = re.compile(
    r"^({})-({})$".format("|".join(_TENS), "|".join(_UNITS))
)

# Token kinds
_ZERO = "zero"
_UNIT = "unit"
_TEEN = "teen"
_TEN = "tens"
_COMPOUND = "compound"
_HUNDRED = "hundred"
_SCALE = "scale"
_AND = "and"

_SMALL_KINDS = frozenset({_UNIT, _TEEN, _TEN, _COMPOUND})


def _classify(word: str) -> Optional[Tuple[str, int]]:
    """Return (kind, value) for a number word, or None."""
    lowered = word.lower()
    if lowered == "zero":
        return _ZERO, 0
    if lowered in _UNITS:
        return _UNIT, _UNITS[lowered]
    if lowered in _TEENS:
        return _TEEN, _TEENS[lowered]
    if lowered in _TENS:
        return _TEN, _TENS[lowered]
    if lowered == "hundred":
        return _HUNDRED, 100
    if lowered in _SCALES:
        return _SCALE, _SCALES[lowered]
    if lowered == "and":
        return _AND, 0
    match = _COMPOUND_RE.match(lowered)
    if match:
        return _COMPOUND, _TENS[match.group(1)] + _UNITS[match.group(2)]
    return None


class NumberWordConverter:
    """Rewrite runs of English number words as digits.

    Stateless; one instance can be shared by any number of normalizers.
    """

    def convert(self, text: str) -> str:
        parts = _SPLIT_RE.split(text)
        words = parts[0::2]
        separators = parts[1::2]

        pieces: List[str] = []
        index = 0
        while index < len(words):
            consumed, value = self._parse_number(words, index)
            if consumed == 0:
                pieces.append(words[index])
                last = index
                index += 1
            else:
                pieces.append(str(value))
                last = index + consumed - 1
                index += consumed
            if last < len(separators):
                pieces.append(separators[last])

        return "".join(pieces)

    @staticmethod
    def _parse_number(words: List[str], start: int) -> Tuple[int, int]:
        """Parse one cardinal starting at words[start].

        Returns (words consumed, value); (0, 0) when words[start] cannot
        start a number.
        """
        first = _classify(words[start])
        if first is None or first[0] in (_HUNDRED, _SCALE, _AND):
            return 0, 0

        kind, value = first
        if kind == _ZERO:
            return 1, 0

        total = 0
        current = value
        last_kind = kind
        last_scale: Optional[int] = None
        index = start + 1

        while index < len(words):
            token = _classify(words[index])
            if token is None:
                break
            kind, value = token

            if kind == _AND:
                if last_kind not in (_HUNDRED, _SCALE) or index + 1 >= len(words):
                    break
                following = _classify(words[index + 1])
                if following is None or following[0] not in _SMALL_KINDS:
                    break
                last_kind = _AND
                index += 1
                continue

            if kind == _UNIT:
                if last_kind == _TEN or last_kind in (_HUNDRED, _SCALE, _AND):
                    current += value
                else:
                    break
            elif kind in (_TEEN, _TEN, _COMPOUND):
                if last_kind in (_HUNDRED, _SCALE, _AND):
                    current += value
                else:
                    break
            elif kind == _HUNDRED:
                if last_kind in _SMALL_KINDS and 0 < current < 100:
                    current *= 100
                else:
                    break
            elif kind == _SCALE:
                if last_kind in _SMALL_KINDS | {_HUNDRED} and current > 0 and (
                    last_scale is None or value < last_scale
                ):
                    total += current * value
                    current = 0
                    last_scale = value
                else:
                    break
            else:
                # zero never continues a number
                break

            last_kind = kind
            index += 1

        return index - start, total + current
