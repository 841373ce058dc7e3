"""
Danger Classifier.

Matches curated events against a configured set of dangerous label
substrings. Pure and deterministic.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from spotter.events import EventRecord


DEFAULT_DANGEROUS_LABELS = frozenset({
    "siren",
    "glass break",
    "shout",
    "scream",
    "heavy impact",
    "gunshot",
    "explosion",
    "alarm",
    "profanity",
    "vulgar language",
})


@dataclass(frozen=True)
class DangerAssessment:
    """
    Attributes:
        is_danger: True iff at least one event matched
        matched_labels: Original label text of every matching event, in
            event order (duplicates kept)
    """
    is_danger: bool
    matched_labels: tuple[str, ...] = ()


def classify_danger(
    events: Sequence[EventRecord],
    dangerous_labels: Iterable[str],
) -> DangerAssessment:
    """
    Flag events whose label contains any dangerous substring.

    Matching is case-insensitive substring containment, so "siren" matches
    "Ambient Siren" and "Siren freq".
    """
    needles = [d.lower() for d in dangerous_labels if d]
    matched = tuple(
        e.label for e in events
        if any(n in e.label.lower() for n in needles)
    )
    return DangerAssessment(is_danger=bool(matched), matched_labels=matched)
