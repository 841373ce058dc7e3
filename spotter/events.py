"""
Spotter Event Record Model.

Responsibilities:
- Canonical shape of one detected event
- Conversion from/to the gateway wire shape

Invariants:
- 0 <= start_time < end_time <= CLIP_DURATION_S
- 0 <= confidence <= 1 (a probability, not necessarily calibrated)
- Records are frozen: filtered, reordered or copied, never mutated
"""

from dataclasses import dataclass
from typing import Any, Mapping


# =============================================================================
# Constants (FROZEN)
# =============================================================================

CLIP_DURATION_S = 10.0
SYNTHETIC_ID_PREFIX = "synthetic-"


# =============================================================================
# EventRecord
# =============================================================================


@dataclass(frozen=True)
class EventRecord:
    """
    One labeled, time-bounded detection.

    Attributes:
        id: Identifier, unique within one analysis result
        label: Human-readable event label (e.g., "Door slam")
        start_time: Start of the event in seconds
        end_time: End of the event in seconds
        confidence: Detection confidence in [0, 1]
    """
    id: str
    label: str
    start_time: float
    end_time: float
    confidence: float

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Event id must be non-empty")
        if not (0.0 <= self.start_time < self.end_time <= CLIP_DURATION_S):
            raise ValueError(
                f"Event '{self.id}' has invalid span "
                f"[{self.start_time}, {self.end_time}] for a {CLIP_DURATION_S}s clip"
            )
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(
                f"Event '{self.id}' confidence {self.confidence} outside [0, 1]"
            )

    @property
    def is_synthetic(self) -> bool:
        """True for filler events fabricated by curation, not detected."""
        return self.id.startswith(SYNTHETIC_ID_PREFIX)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventRecord":
        """
        Build a record from the gateway wire shape.

        Accepts either "label" or "event" for the label key, and camelCase
        "startTime"/"endTime" time keys.

        Raises:
            ValueError: If keys are missing or values are out of range.
        """
        try:
            label = data["label"] if "label" in data else data["event"]
            return cls(
                id=str(data["id"]),
                label=str(label),
                start_time=float(data["startTime"]),
                end_time=float(data["endTime"]),
                confidence=float(data["confidence"]),
            )
        except KeyError as e:
            raise ValueError(f"Event is missing field {e}") from e
        except TypeError as e:
            raise ValueError(f"Event has a malformed field: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the export shape."""
        return {
            "id": self.id,
            "label": self.label,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "confidence": self.confidence,
        }
