"""Command-line interface for scriptsync.

WHY: The engine normally runs inside a script-to-video service, but
timing problems are easiest to reproduce from files: a saved transcript,
a list of points, a job description. The CLI exposes each stage on its
own so a bad cut can be traced to alignment, segmentation, or
reconciliation.

HOW: argparse with three subcommands:
  align    transcript JSON + segments file → per-segment timings
  segment  transcript (JSON or text) + script text → located points
  sync     job JSON (sections, inline transcripts and/or audio URLs)
           → tagged per-section results
Input files are validated through the pydantic models in schemas.py.
Results go to stdout (or --output) as JSON; status goes to stderr.

RULES:
- Status output goes to stderr (not stdout)
- Sections in a sync job with an inline transcript are never sent to Soniox
- The Soniox API key is only required when a section needs transcription
- Exit code 1 on invalid input or configuration, 130 on Ctrl-C
- Python 3.9 compatible — no match/case, no X | Y unions
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from scriptsync import __version__
from scriptsync.config import LOG_LEVEL
from scriptsync.core.alignment import AlignmentService
from scriptsync.core.pipeline import SyncPipeline
from scriptsync.core.segmenter import TranscriptSegmenter
from scriptsync.core.script import extract_points_from_sections, parse_script_into_sections
from scriptsync.schemas import (
    SectionResultModel,
    SegmentTimingModel,
    SyncJobModel,
    TranscriptionModel,
)

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def _emit(payload: Any, output: Optional[str]) -> None:
    """Write *payload* as JSON to --output or stdout."""
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        _status(f"Wrote {output}")
    else:
        print(text)


def _load_transcription(path: str) -> TranscriptionModel:
    raw = Path(path).read_text(encoding="utf-8")
    return TranscriptionModel.model_validate_json(raw)


def _load_segments(path: str) -> List[str]:
    """Segments from a JSON list of strings, or one segment per line."""
    raw = Path(path).read_text(encoding="utf-8")
    if path.endswith(".json"):
        data = json.loads(raw)
        if not isinstance(data, list) or not all(isinstance(s, str) for s in data):
            raise ValueError(f"{path}: expected a JSON list of strings")
        return data
    return [line.strip() for line in raw.splitlines() if line.strip()]


def _load_transcript_text(path: str) -> str:
    raw = Path(path).read_text(encoding="utf-8")
    if path.endswith(".json"):
        return TranscriptionModel.model_validate_json(raw).to_ir().text
    return raw


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_align(args: argparse.Namespace) -> None:
    transcription = _load_transcription(args.transcript).to_ir()
    segments = _load_segments(args.segments)
    _status(f"Aligning {len(segments)} segments against {len(transcription.words)} words...")

    timings = AlignmentService().align_segments(transcription.text, transcription.words, segments)
    resolved = sum(1 for t in timings if t.is_resolved)
    _status(f"Resolved {resolved}/{len(timings)} segments.")
    _emit(
        [SegmentTimingModel.from_ir(t).model_dump(by_alias=True) for t in timings],
        args.output,
    )


def _cmd_segment(args: argparse.Namespace) -> None:
    transcript = _load_transcript_text(args.transcript)
    script = Path(args.script).read_text(encoding="utf-8")
    sections = extract_points_from_sections(parse_script_into_sections(script))
    _status(f"Locating points of {len(sections)} sections...")

    located = TranscriptSegmenter().locate_sections(transcript, sections)
    payload: List[Dict[str, Any]] = []
    for section, spans in located:
        payload.append({
            "sectionId": section.id,
            "points": [
                {
                    "text": span.text,
                    "found": span.found,
                    "startIndex": span.start_index,
                    "endIndex": span.end_index,
                    "matchedText": span.matched_text,
                }
                for span in spans
            ],
        })
    _emit(payload, args.output)


async def _cmd_sync(args: argparse.Namespace) -> None:
    job = SyncJobModel.model_validate_json(Path(args.job).read_text(encoding="utf-8"))
    sections = [s.to_ir() for s in job.sections]
    transcripts = {s.section_id: s.transcript.to_ir() for s in job.sections if s.transcript is not None}

    transcriber = None
    if any(s.audio_url and s.section_id not in transcripts for s in sections):
        # Only audio-only sections need Soniox.
        from scriptsync.api.client import SonioxTranscriber

        languages = [args.language] if args.language else None
        transcriber = SonioxTranscriber(language_hints=languages, on_status=_status)

    pipeline = SyncPipeline(transcriber=transcriber)
    results = await pipeline.run(
        sections,
        initial_offset_ms=job.initial_offset_ms,
        transcripts=transcripts,
        on_status=_status,
    )

    failed = [r for r in results if not r.ok]
    _status(f"Done: {len(results) - len(failed)} ok, {len(failed)} failed.")
    _emit(
        [SectionResultModel.from_ir(r).model_dump(mode="json", by_alias=True) for r in results],
        args.output,
    )


# ---------------------------------------------------------------------------
# Parser / entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scriptsync",
        description="Time script points against word-timed speech transcriptions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: %(default)s, from LOG_LEVEL).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    align = subparsers.add_parser("align", help="Time segments against a word-timed transcript.")
    align.add_argument("transcript", help="Transcript JSON: {text, words: [{text, startMs, endMs}]}.")
    align.add_argument("segments", help="Segments: JSON list of strings, or a text file, one per line.")
    align.add_argument("--output", "-o", default=None, help="Write JSON here instead of stdout.")

    segment = subparsers.add_parser("segment", help="Locate script points inside transcript text.")
    segment.add_argument("transcript", help="Transcript text file, or transcript JSON.")
    segment.add_argument("script", help="Script text file; blank lines separate sections.")
    segment.add_argument("--output", "-o", default=None, help="Write JSON here instead of stdout.")

    sync = subparsers.add_parser("sync", help="Time all sections of a sync job.")
    sync.add_argument("job", help="Job JSON: {sections: [...], initialOffsetMs}.")
    sync.add_argument(
        "--language",
        default=None,
        help="Language hint for Soniox (default: SONIOX_LANGUAGE_HINTS).",
    )
    sync.add_argument("--output", "-o", default=None, help="Write JSON here instead of stdout.")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``scriptsync`` and ``python -m scriptsync``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        if args.command == "align":
            _cmd_align(args)
        elif args.command == "segment":
            _cmd_segment(args)
        else:
            asyncio.run(_cmd_sync(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except ValidationError as e:
        print("Error: invalid input\n{}".format(e), file=sys.stderr)
        sys.exit(1)
    except (ValueError, OSError) as e:
        # Config errors (missing API key, bad segments file, unreadable input)
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
