"""
Analysis Result Assembler.

Responsibilities:
- AnalysisResult: immutable record of one analyzed clip
- History: most-recent-first sequence of results for a session
- ResultAssembler: builds a result and pushes it onto the history

Invariants:
- Exactly one AnalysisResult per successfully analyzed clip
- precautionary_message is empty unless the result is a danger result
- Only the assembler adds to history; nothing removes entries
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterator, Sequence

from spotter.danger import DangerAssessment
from spotter.events import EventRecord
from spotter.telemetry import TelemetrySample
from spotter.utils import now_utc


NO_EVENTS_SUMMARY = "No significant audio events were detected in this clip."


# =============================================================================
# AnalysisResult
# =============================================================================


@dataclass(frozen=True)
class AnalysisResult:
    """
    Presentation-ready outcome of one clip analysis.

    Attributes:
        id: Unique result identifier ("analysis-<hex>")
        clip_name: Name of the analyzed clip
        timestamp: Aware datetime captured at assembly; formatted for
            display by the report renderer
        events: Curated events, in display order
        is_danger: Whether any event matched the danger label set
        precautionary_message: Advisory text, "" when not a danger result
        summary: Short natural-language synopsis
        audio_source: Opaque reference to the analyzed audio
        telemetry: Synthetic panel values
    """
    id: str
    clip_name: str
    timestamp: datetime
    events: tuple[EventRecord, ...]
    is_danger: bool
    precautionary_message: str
    summary: str
    audio_source: Any
    telemetry: TelemetrySample

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the export shape (schemas/analysis.schema.json).

        The audio source is exported only when it is a string reference.
        """
        return {
            "id": self.id,
            "clipName": self.clip_name,
            "timestamp": self.timestamp.isoformat(),
            "events": [e.to_dict() for e in self.events],
            "isDanger": self.is_danger,
            "precautionaryMessage": self.precautionary_message,
            "summary": self.summary,
            "audioSource": self.audio_source if isinstance(self.audio_source, str) else None,
            "telemetry": self.telemetry.to_dict(),
        }


# =============================================================================
# History
# =============================================================================


class History:
    """
    Ordered results of a session, most recent first.

    Read access is iteration, indexing, len() and latest(). Results are
    immutable, so selecting one for display cannot alter it.
    """

    def __init__(self) -> None:
        self._results: list[AnalysisResult] = []

    def push_front(self, result: AnalysisResult) -> None:
        self._results.insert(0, result)

    def latest(self) -> AnalysisResult | None:
        return self._results[0] if self._results else None

    def __iter__(self) -> Iterator[AnalysisResult]:
        return iter(tuple(self._results))

    def __len__(self) -> int:
        return len(self._results)

    def __getitem__(self, index: int) -> AnalysisResult:
        return self._results[index]


# =============================================================================
# ResultAssembler
# =============================================================================


def new_result_id() -> str:
    return f"analysis-{uuid.uuid4().hex}"


class ResultAssembler:
    """
    Combines curated events and derived signals into an AnalysisResult.

    Args:
        history: Session history that receives every assembled result
        clock: Callable returning the current aware datetime
        id_factory: Callable returning a fresh unique result id
    """

    def __init__(
        self,
        history: History,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = new_result_id,
    ):
        self.history = history
        self._clock = clock
        self._id_factory = id_factory

    def assemble(
        self,
        clip_name: str,
        audio_source: Any,
        curated_events: Sequence[EventRecord],
        danger: DangerAssessment,
        advisory_text: str,
        summary_text: str,
        telemetry: TelemetrySample,
    ) -> AnalysisResult:
        """
        Build the result and push it to the front of the history.

        Args:
            clip_name: Name of the analyzed clip
            audio_source: Opaque audio reference
            curated_events: Output of curation
            danger: Output of the danger classifier
            advisory_text: Advisory text; ignored unless danger.is_danger
            summary_text: Synopsis; replaced by NO_EVENTS_SUMMARY when
                there are no events
            telemetry: Panel values for this analysis

        Returns:
            The newly assembled result (also history[0]).
        """
        events = tuple(curated_events)
        result = AnalysisResult(
            id=self._id_factory(),
            clip_name=clip_name,
            timestamp=self._clock(),
            events=events,
            is_danger=danger.is_danger,
            precautionary_message=advisory_text if danger.is_danger else "",
            summary=summary_text if events else NO_EVENTS_SUMMARY,
            audio_source=audio_source,
            telemetry=telemetry,
        )
        self.history.push_front(result)
        return result
