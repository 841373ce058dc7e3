"""
Spotter Collaborator Contracts.

Single-method capability interfaces for the external collaborators of the
pipeline. Production code binds them to a model-serving client; tests
substitute deterministic fakes.

This module provides:
- ClassifierGateway: audio clip -> raw EventRecords
- AdvisoryGenerator: matched dangerous labels -> precaution text
- SummaryGenerator: curated events -> short synopsis

INVARIANTS:
- Every method is a coroutine
- Implementations raise on failure; they never return partial garbage
- Implementations do not mutate their inputs
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from spotter.events import EventRecord

if TYPE_CHECKING:
    from spotter.audio import AudioClip


# =============================================================================
# ClassifierGateway
# =============================================================================


class ClassifierGateway(ABC):
    """
    Black-box audio classifier.

    Subclasses must implement `classify(clip)` returning zero or more
    EventRecords for a single clip of nominal CLIP_DURATION_S length.
    """

    @abstractmethod
    async def classify(self, clip: "AudioClip") -> list[EventRecord]:
        """
        Classify the sound events in one clip.

        Args:
            clip: Validated audio clip

        Returns:
            Raw detections, possibly empty, in arrival order.
        """
        ...


# =============================================================================
# AdvisoryGenerator
# =============================================================================


class AdvisoryGenerator(ABC):
    """Turns matched dangerous labels into human-readable precaution text."""

    @abstractmethod
    async def advise(self, labels: Sequence[str]) -> str:
        """
        Args:
            labels: Non-empty matched labels, in curated event order

        Returns:
            Precaution message; may be empty, in which case the pipeline
            substitutes its fallback message.
        """
        ...


# =============================================================================
# SummaryGenerator
# =============================================================================


class SummaryGenerator(ABC):
    """Writes a short natural-language synopsis of curated events."""

    @abstractmethod
    async def summarize(self, events: Sequence[EventRecord]) -> str:
        """
        Args:
            events: Non-empty curated events

        Returns:
            Short synopsis string.
        """
        ...
