"""
Spotter Test Configuration

Provides WAV clip fixtures and deterministic collaborator fakes.
"""

import asyncio
import io
import subprocess
import sys
from pathlib import Path
from typing import Sequence

import numpy as np
import pytest
import soundfile as sf

from spotter.audio import AudioClip
from spotter.config import PipelineConfig
from spotter.contracts import AdvisoryGenerator, ClassifierGateway, SummaryGenerator
from spotter.events import EventRecord
from spotter.pipeline import AnalysisPipeline

SAMPLE_RATE = 16000


def run_cli(*args: str, cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run spotter CLI as subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "spotter", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


def make_wav_bytes(duration_sec: float = 1.0, sr: int = SAMPLE_RATE) -> bytes:
    """Encode a short deterministic tone as PCM-16 WAV bytes."""
    t = np.arange(int(sr * duration_sec)) / sr
    samples = (0.3 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
    buf = io.BytesIO()
    sf.write(buf, samples, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def make_event(
    label: str,
    confidence: float,
    start: float = 1.0,
    end: float = 1.5,
    id: str | None = None,
) -> EventRecord:
    return EventRecord(
        id=id or f"evt-{label.lower().replace(' ', '-')}",
        label=label,
        start_time=start,
        end_time=end,
        confidence=confidence,
    )


# =============================================================================
# Collaborator fakes
# =============================================================================


class FakeClassifier(ClassifierGateway):
    """Returns fixed events, or raises, and counts calls."""

    def __init__(self, events: Sequence[EventRecord] = (), error: Exception | None = None,
                 delay: float = 0.0):
        self.events = list(events)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def classify(self, clip):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.events)


class FakeAdvisor(AdvisoryGenerator):
    def __init__(self, text: str = "Stay safe.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls = 0
        self.received: list[tuple[str, ...]] = []

    async def advise(self, labels):
        self.calls += 1
        self.received.append(tuple(labels))
        if self.error is not None:
            raise self.error
        return self.text


class FakeSummarizer(SummaryGenerator):
    def __init__(self, text: str = "Things happened.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls = 0

    async def summarize(self, events):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def wav_clip() -> AudioClip:
    """A valid one-second WAV clip."""
    return AudioClip(name="clip.wav", data=make_wav_bytes(1.0), mime_type="audio/wav")


@pytest.fixture
def test_wav_path(tmp_path) -> Path:
    """A valid one-second WAV file on disk."""
    path = tmp_path / "door_slam.wav"
    path.write_bytes(make_wav_bytes(1.0))
    return path


@pytest.fixture
def no_filler_config() -> PipelineConfig:
    return PipelineConfig(confidence_threshold=0.8, min_results=0, max_results=5,
                          filler_enabled=False)


@pytest.fixture
def make_pipeline():
    """Factory for pipelines wired to fakes with a seeded generator."""
    def _make(classifier=None, advisor=None, summarizer=None, config=None):
        return AnalysisPipeline(
            classifier=classifier or FakeClassifier(),
            advisor=advisor or FakeAdvisor(),
            summarizer=summarizer or FakeSummarizer(),
            config=config or PipelineConfig(),
            rng=np.random.default_rng(7),
        )
    return _make
