"""
Event Curation Engine.

Responsibilities:
    - Drop detections below the confidence threshold
    - Rank detections by confidence (stable)
    - Optionally synthesize filler events up to a minimum count
    - Cap the list for display

Invariants:
    - Output is a new tuple; input is never mutated
    - Equal-confidence detections keep their arrival order
    - Filler events carry SYNTHETIC_ID_PREFIX ids and confidence >= 0.65
    - Filler events follow detected events; they are never ranked above them
    - Synthetic input events below FILLER_CONFIDENCE_MIN are dropped
    - curate(curate(x)) == curate(x) for the same options
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from spotter.events import CLIP_DURATION_S, SYNTHETIC_ID_PREFIX, EventRecord


# =============================================================================
# Constants (FROZEN)
# =============================================================================

FILLER_CONFIDENCE_MIN = 0.65
FILLER_CONFIDENCE_MAX = 1.0

FILLER_START_S = 1.0
FILLER_STEP_S = 1.5
FILLER_LENGTH_S = 1.0

# Number of distinct filler slots whose span fits inside one clip
FILLER_SLOTS = int((CLIP_DURATION_S - FILLER_START_S - FILLER_LENGTH_S) // FILLER_STEP_S) + 1

DEFAULT_FILLER_CATEGORIES = (
    "glass break",
    "shout detected",
    "siren freq",
    "heavy impact",
    "conversation",
    "dog bark",
    "baby sneeze",
    "keyboard typing",
    "phone ring",
    "door slam",
)


# =============================================================================
# CurationOptions
# =============================================================================


@dataclass(frozen=True)
class CurationOptions:
    """
    Per-call curation policy.

    Attributes:
        confidence_threshold: Detections below this are dropped
        max_results: Output is truncated to this many events
        min_results: Filler tops the list up to this many events
        filler_categories: Ordered categories used for filler labels
        filler_enabled: When False, no synthetic event is ever produced
    """
    confidence_threshold: float
    max_results: int
    min_results: int
    filler_categories: tuple[str, ...] = DEFAULT_FILLER_CATEGORIES
    filler_enabled: bool = True

    def __post_init__(self) -> None:
        if not (0.0 <= self.confidence_threshold <= 1.0):
            raise ValueError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )
        if self.max_results < 0 or self.min_results < 0:
            raise ValueError("max_results and min_results must be non-negative")
        # Normalized to a tuple so options stay hashable
        object.__setattr__(self, "filler_categories", tuple(self.filler_categories))
        if self.filler_enabled and self.min_results > 0 and not self.filler_categories:
            raise ValueError("filler_categories must be non-empty when filler is enabled")


# =============================================================================
# Curation
# =============================================================================


def curate(
    raw: Sequence[EventRecord],
    options: CurationOptions,
    rng: np.random.Generator | None = None,
) -> tuple[EventRecord, ...]:
    """
    Filter, rank, fill and cap a raw event list.

    Args:
        raw: Events as returned by the classifier gateway (or a previous
            curation pass)
        options: Curation policy
        rng: Random generator for filler confidences (default: fresh
            unseeded generator)

    Returns:
        Curated events, detected events first in descending confidence,
        then filler events.
    """
    detected = [
        e for e in raw
        if not e.is_synthetic and e.confidence >= options.confidence_threshold
    ]
    # sorted() is stable: ties keep arrival order
    detected = sorted(detected, key=lambda e: -e.confidence)
    # Only filler-grade synthetic events survive a re-curation pass
    synthetic = [
        e for e in raw
        if e.is_synthetic and e.confidence >= FILLER_CONFIDENCE_MIN
    ]

    curated = detected + synthetic

    if options.filler_enabled and len(curated) < options.min_results:
        if rng is None:
            rng = np.random.default_rng()
        curated = _fill(curated, options, rng)

    return tuple(curated[: options.max_results])


def _fill(
    events: list[EventRecord],
    options: CurationOptions,
    rng: np.random.Generator,
) -> list[EventRecord]:
    """
    Append synthetic events until options.min_results is reached.

    Categories are cycled starting at the current list length. A category
    whose name already appears in some label is skipped, unless every
    category is already present, in which case the cycle repeats them.
    """
    categories = options.filler_categories
    filled = list(events)
    cursor = len(filled)

    while len(filled) < options.min_results:
        present = [e.label.lower() for e in filled]
        unused = [c for c in categories if not any(c.lower() in p for p in present)]

        category = categories[cursor % len(categories)]
        cursor += 1
        if unused and category not in unused:
            continue

        filled.append(_synthesize(len(filled), category, rng))

    return filled


def _synthesize(position: int, category: str, rng: np.random.Generator) -> EventRecord:
    """Build one filler event for output position ``position``."""
    slot = position % FILLER_SLOTS
    start = FILLER_START_S + slot * FILLER_STEP_S
    confidence = float(rng.uniform(FILLER_CONFIDENCE_MIN, FILLER_CONFIDENCE_MAX))
    return EventRecord(
        id=f"{SYNTHETIC_ID_PREFIX}{position}",
        label=category[:1].upper() + category[1:],
        start_time=start,
        end_time=start + FILLER_LENGTH_S,
        confidence=confidence,
    )
