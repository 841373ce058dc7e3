"""
Spotter Result Assembler Tests
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from spotter.danger import DangerAssessment
from spotter.result import NO_EVENTS_SUMMARY, History, ResultAssembler
from spotter.telemetry import TelemetrySample
from tests.conftest import make_event

FIXED_TIME = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

TELEMETRY = TelemetrySample(
    peak_level=-3.1, events_per_hour=150, process_load=12,
    uptime="0h 5m", noise_floor=-55, snr=12,
)


@pytest.fixture
def history():
    return History()


@pytest.fixture
def assembler(history):
    counter = iter(range(100))
    return ResultAssembler(
        history,
        clock=lambda: FIXED_TIME,
        id_factory=lambda: f"analysis-{next(counter)}",
    )


def _assemble(assembler, events=(), danger=DangerAssessment(False), advisory="", summary="S"):
    return assembler.assemble(
        clip_name="clip.wav",
        audio_source="data:audio/wav;base64,AAAA",
        curated_events=events,
        danger=danger,
        advisory_text=advisory,
        summary_text=summary,
        telemetry=TELEMETRY,
    )


class TestAssemble:

    def test_fields(self, assembler):
        events = [make_event("Door slam", 0.9)]
        result = _assemble(assembler, events=events, summary="A door slammed.")
        assert result.id == "analysis-0"
        assert result.clip_name == "clip.wav"
        assert result.timestamp == FIXED_TIME
        assert result.events == tuple(events)
        assert result.summary == "A door slammed."
        assert result.telemetry is TELEMETRY

    def test_advisory_dropped_when_not_danger(self, assembler):
        result = _assemble(assembler, events=[make_event("Door slam", 0.9)], advisory="Run!")
        assert result.is_danger is False
        assert result.precautionary_message == ""

    def test_advisory_kept_when_danger(self, assembler):
        danger = DangerAssessment(True, ("Siren",))
        result = _assemble(assembler, events=[make_event("Siren", 0.9)], danger=danger,
                           advisory="Clear the road.")
        assert result.is_danger is True
        assert result.precautionary_message == "Clear the road."

    def test_empty_events_use_fixed_summary(self, assembler):
        result = _assemble(assembler, events=[], summary="ignored")
        assert result.summary == NO_EVENTS_SUMMARY

    def test_result_is_frozen(self, assembler):
        result = _assemble(assembler)
        with pytest.raises(FrozenInstanceError):
            result.summary = "changed"

    def test_events_copied_to_tuple(self, assembler):
        events = [make_event("Door slam", 0.9)]
        result = _assemble(assembler, events=events)
        events.append(make_event("Dog bark", 0.9))
        assert len(result.events) == 1

    def test_default_ids_unique(self, history):
        assembler = ResultAssembler(history)
        ids = {_assemble(assembler).id for _ in range(20)}
        assert len(ids) == 20
        assert all(i.startswith("analysis-") for i in ids)

    def test_to_dict(self, assembler):
        result = _assemble(assembler, events=[make_event("Door slam", 0.9, id="evt-1")])
        data = result.to_dict()
        assert data["clipName"] == "clip.wav"
        assert data["timestamp"] == "2025-01-02T03:04:05+00:00"
        assert data["events"][0]["id"] == "evt-1"
        assert data["telemetry"]["uptime"] == "0h 5m"
        assert data["audioSource"] == "data:audio/wav;base64,AAAA"


class TestHistory:

    def test_most_recent_first(self, assembler, history):
        results = [_assemble(assembler) for _ in range(3)]
        assert len(history) == 3
        assert history[0] is results[2]
        assert list(history) == results[::-1]
        assert history.latest() is results[2]

    def test_empty(self, history):
        assert len(history) == 0
        assert history.latest() is None
        assert list(history) == []

    def test_iteration_is_a_snapshot(self, assembler, history):
        _assemble(assembler)
        iterator = iter(history)
        _assemble(assembler)
        assert len(list(iterator)) == 1

    def test_no_removal_api(self, history):
        assert not hasattr(history, "pop")
        assert not hasattr(history, "remove")
