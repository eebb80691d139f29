"""Core synchronization modules — normalization, alignment, reconciliation.

WHY: The algorithms that turn a word-timed transcription and a list of
script points into contiguous point timing. Everything here works on
in-memory structures; no network, no files.

HOW: ir.py defines the shared dataclasses. numbers.py and normalizer.py
canonicalize text, aligner.py and alignment.py match point tokens to
transcript tokens, reconciler.py chains the timings, pipeline.py runs
sections in order. script.py and segmenter.py are text-only utilities
for splitting scripts and locating points in transcript strings.

RULES:
- Components are constructed with their collaborators; no singletons
- Degrading steps log and return placeholders; SyncError subclasses
  propagate to the pipeline
"""
