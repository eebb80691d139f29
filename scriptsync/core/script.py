"""Split a narration script into sections and points.

A section is one paragraph of the script (one voice-over track); a point
is one sentence of a section (one visual). Blank lines separate sections.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import List

from scriptsync.core.ir import Section

logger = logging.getLogger(__name__)

_SECTION_BREAK_RE = re.compile(r"\n\s*\n+")
_SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?])\s+")


def parse_script_into_sections(script: str) -> List[Section]:
    """Split *script* on blank lines into sections ``section1``, ``section2``, ..."""
    texts = [chunk.strip() for chunk in _SECTION_BREAK_RE.split(script)]
    sections = [
        Section(id=f"section{index}", text=text)
        for index, text in enumerate((t for t in texts if t), start=1)
    ]
    logger.info("Script split into %d sections", len(sections))
    return sections


def split_section(text: str) -> List[str]:
    """Split section text into sentence points, keeping the terminators."""
    return [part.strip() for part in _SENTENCE_BREAK_RE.split(text) if part.strip()]


def extract_points(section: Section) -> Section:
    """Return a copy of *section* with its points filled from its text."""
    points = split_section(section.text)
    logger.debug("%s: %d points from %d characters", section.id, len(points), len(section.text))
    return dataclasses.replace(section, points=points)


def extract_points_from_sections(sections: List[Section]) -> List[Section]:
    return [extract_points(section) for section in sections]
