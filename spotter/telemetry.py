"""
Telemetry Sampler.

Produces the instrument-panel values shown next to each analysis. The
values are synthetic and are not derived from the audio; only the uptime
is real, measured from an explicitly supplied process start time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import numpy as np

from spotter.utils import now_utc


@dataclass(frozen=True)
class TelemetrySample:
    """Read-only panel values attached to one AnalysisResult."""
    peak_level: float
    events_per_hour: int
    process_load: int
    uptime: str
    noise_floor: int
    snr: int

    def to_dict(self) -> dict:
        return {
            "peakLevel": self.peak_level,
            "eventsPerHour": self.events_per_hour,
            "processLoad": self.process_load,
            "uptime": self.uptime,
            "noiseFloor": self.noise_floor,
            "snr": self.snr,
        }


def format_uptime(started: datetime, now: datetime) -> str:
    """Format elapsed time as "<hours>h <minutes>m"."""
    elapsed = max(0, int((now - started).total_seconds()))
    hours, remainder = divmod(elapsed, 3600)
    return f"{hours}h {remainder // 60}m"


class TelemetrySampler:
    """
    Draws one TelemetrySample per analysis.

    Args:
        process_start: Timezone-aware instant the process (or session) began
        rng: Random generator (default: fresh unseeded generator)
        clock: Callable returning the current aware datetime
    """

    def __init__(
        self,
        process_start: datetime,
        rng: np.random.Generator | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.process_start = process_start
        self._rng = rng if rng is not None else np.random.default_rng()
        self._clock = clock

    def sample(self) -> TelemetrySample:
        rng = self._rng
        return TelemetrySample(
            peak_level=round(-3.2 + float(rng.uniform(-2.5, 2.5)), 1),
            events_per_hour=100 + int(rng.integers(0, 100)),
            process_load=10 + int(rng.integers(0, 10)),
            uptime=format_uptime(self.process_start, self._clock()),
            noise_floor=-60 + int(rng.integers(0, 10)),
            snr=10 + int(rng.integers(0, 5)),
        )
