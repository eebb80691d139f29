"""scriptsync — time script points against word-timed speech transcriptions.

WHY: A narrated video is built from a script split into sections (one
voice-over track each) and points (one visual each). To cut visuals to
the voice-over, every point needs a start/end time in the audio. ASR
gives word timings but knows nothing about the script's points.

HOW: Four-stage core — normalize text, align point tokens to transcript
tokens, reconcile raw per-point timings into contiguous section timing,
chain sections end-to-start. A text-only segmenter locates points inside
a raw transcript string when word timing is not used.

RULES:
- The core consumes transcriptions; it never runs speech recognition
- Nothing is persisted; every structure is rebuilt per request
- Alignment is a bounded greedy heuristic, not a global optimum
"""

__version__ = "0.1.0"
