"""
Spotter - Audio Event Analysis Pipeline

Turns the raw event list returned by an audio-classification model into a
ranked, capped, presentation-ready analysis result.

Pipeline Stages (fixed order):
    1. validate  : clip payload preconditions
    2. classify  : external classifier gateway
    3. curate    : filter, rank, fill, cap
    4. danger    : dangerous-label matching
    5. advise    : precautionary text (danger only)
    6. summarize : synopsis (non-empty events only)
    7. assemble  : immutable result, pushed to history

Invariants:
    - All event times are seconds (float) within a 10 s clip
    - EventRecord and AnalysisResult are immutable
    - A failed analysis never touches history
"""

__version__ = "1.0.0"
