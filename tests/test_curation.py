"""
Spotter Curation Tests

Coverage:
- Threshold filtering
- Stable descending ranking
- Filler synthesis (labels, spans, confidences, ids)
- Capping and output length
- Idempotence and input immutability
"""

import numpy as np
import pytest

from spotter.curation import (
    FILLER_CONFIDENCE_MIN,
    CurationOptions,
    curate,
)
from spotter.events import CLIP_DURATION_S, EventRecord
from tests.conftest import make_event


def _options(threshold=0.8, max_results=5, min_results=0, categories=("glass break", "siren"),
             filler=True):
    return CurationOptions(
        confidence_threshold=threshold,
        max_results=max_results,
        min_results=min_results,
        filler_categories=categories,
        filler_enabled=filler,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def mixed_events():
    return [
        make_event("Dog bark", 0.55, id="evt-1"),
        make_event("Door slam", 0.9, id="evt-2"),
        make_event("Phone ring", 0.3, id="evt-3"),
        make_event("Keyboard typing", 0.9, id="evt-4"),
        make_event("Conversation", 0.72, id="evt-5"),
        make_event("Clapping", 0.61, id="evt-6"),
    ]


# =============================================================================
# Filtering and ranking
# =============================================================================


class TestFilterAndSort:

    def test_door_slam_example(self):
        raw = [
            make_event("Door slam", 0.9, start=1.0, end=1.5, id="evt-1"),
            make_event("Phone ring", 0.3, start=2.0, end=3.0, id="evt-2"),
        ]
        curated = curate(raw, _options(threshold=0.8, filler=False))
        assert [e.label for e in curated] == ["Door slam"]
        assert curated[0] is raw[0]

    @pytest.mark.parametrize("threshold", [0.0, 0.5, 0.6, 0.8, 1.0])
    def test_no_detection_below_threshold(self, mixed_events, threshold, rng):
        curated = curate(mixed_events, _options(threshold=threshold, min_results=5), rng=rng)
        for event in curated:
            if event.is_synthetic:
                assert event.confidence >= FILLER_CONFIDENCE_MIN
            else:
                assert event.confidence >= threshold

    def test_low_confidence_synthetic_input_dropped(self):
        raw = [
            EventRecord("synthetic-x", "Hum", 1.0, 2.0, 0.1),
            EventRecord("synthetic-y", "Glass break", 2.5, 3.5, 0.7),
        ]
        curated = curate(raw, _options(threshold=0.8, min_results=0, filler=False))
        assert [e.id for e in curated] == ["synthetic-y"]

    def test_sorted_descending_with_stable_ties(self, mixed_events):
        curated = curate(mixed_events, _options(threshold=0.5, max_results=10, filler=False))
        assert [e.id for e in curated] == ["evt-2", "evt-4", "evt-5", "evt-6", "evt-1"]

    def test_input_not_mutated(self, mixed_events, rng):
        before = list(mixed_events)
        curate(mixed_events, _options(threshold=0.5, min_results=8, max_results=8), rng=rng)
        assert mixed_events == before

    def test_returns_new_tuple(self, mixed_events):
        curated = curate(mixed_events, _options(threshold=0.0, max_results=10, filler=False))
        assert isinstance(curated, tuple)


# =============================================================================
# Filler synthesis
# =============================================================================


class TestFiller:

    def test_empty_input_fills_cycling_categories(self, rng):
        curated = curate([], _options(min_results=5), rng=rng)
        assert len(curated) == 5
        assert [e.label for e in curated] == [
            "Glass break", "Siren", "Glass break", "Siren", "Glass break",
        ]
        assert all(e.is_synthetic for e in curated)

    def test_filler_skips_categories_already_present(self, rng):
        raw = [make_event("Ambient Siren", 0.95, id="evt-1")]
        options = _options(min_results=3, categories=("glass break", "siren", "dog bark"))
        curated = curate(raw, options, rng=rng)
        assert [e.label for e in curated] == ["Ambient Siren", "Dog bark", "Glass break"]

    def test_filler_spans_are_deterministic(self, rng):
        curated = curate([], _options(min_results=5), rng=rng)
        spans = [(e.start_time, e.end_time) for e in curated]
        assert spans == [(1.0, 2.0), (2.5, 3.5), (4.0, 5.0), (5.5, 6.5), (7.0, 8.0)]

    def test_filler_spans_stay_inside_clip(self, rng):
        curated = curate([], _options(min_results=12, max_results=12), rng=rng)
        assert len(curated) == 12
        assert all(e.end_time <= CLIP_DURATION_S for e in curated)

    def test_filler_confidence_range(self, rng):
        curated = curate([], _options(min_results=50, max_results=50), rng=rng)
        assert all(0.65 <= e.confidence < 1.0 for e in curated)

    def test_filler_ids_are_unique_and_prefixed(self, rng):
        curated = curate([make_event("Door slam", 0.9)], _options(min_results=5), rng=rng)
        ids = [e.id for e in curated]
        assert len(set(ids)) == len(ids)
        assert [e.is_synthetic for e in curated] == [False, True, True, True, True]
        assert ids[1:] == ["synthetic-1", "synthetic-2", "synthetic-3", "synthetic-4"]

    def test_filler_disabled_never_synthesizes(self, rng):
        curated = curate([], _options(min_results=5, filler=False), rng=rng)
        assert curated == ()

    def test_filler_follows_detections(self, rng):
        raw = [make_event("Door slam", 0.81, id="evt-1")]
        curated = curate(raw, _options(min_results=4), rng=rng)
        assert curated[0].id == "evt-1"
        assert all(e.is_synthetic for e in curated[1:])

    def test_seeded_generator_is_reproducible(self):
        a = curate([], _options(min_results=5), rng=np.random.default_rng(9))
        b = curate([], _options(min_results=5), rng=np.random.default_rng(9))
        assert a == b


# =============================================================================
# Capping, length and idempotence
# =============================================================================


class TestCapAndLength:

    @pytest.mark.parametrize("min_results,max_results", [(0, 5), (5, 5), (8, 5), (5, 3), (2, 10)])
    def test_length_with_filler(self, mixed_events, rng, min_results, max_results):
        options = _options(threshold=0.6, min_results=min_results, max_results=max_results)
        filtered = sum(1 for e in mixed_events if e.confidence >= 0.6)
        curated = curate(mixed_events, options, rng=rng)
        assert len(curated) == min(max_results, max(min_results, filtered))

    @pytest.mark.parametrize("max_results", [0, 1, 3, 10])
    def test_length_without_filler(self, mixed_events, max_results):
        options = _options(threshold=0.6, min_results=5, max_results=max_results, filler=False)
        filtered = sum(1 for e in mixed_events if e.confidence >= 0.6)
        assert len(curate(mixed_events, options)) == min(max_results, filtered)

    def test_cap_preserves_order(self, mixed_events):
        full = curate(mixed_events, _options(threshold=0.0, max_results=10, filler=False))
        capped = curate(mixed_events, _options(threshold=0.0, max_results=3, filler=False))
        assert capped == full[:3]

    @pytest.mark.parametrize("min_results,max_results", [(5, 5), (5, 3), (0, 2), (7, 7)])
    def test_idempotent(self, mixed_events, rng, min_results, max_results):
        options = _options(threshold=0.8, min_results=min_results, max_results=max_results)
        once = curate(mixed_events, options, rng=rng)
        twice = curate(once, options, rng=rng)
        assert twice == once


class TestOptions:

    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError, match="confidence_threshold"):
            _options(threshold=1.5)

    def test_negative_counts(self):
        with pytest.raises(ValueError):
            _options(max_results=-1)

    def test_filler_requires_categories(self):
        with pytest.raises(ValueError, match="filler_categories"):
            _options(min_results=3, categories=())

    def test_categories_stored_as_tuple(self):
        assert _options(categories=["siren"]).filler_categories == ("siren",)
