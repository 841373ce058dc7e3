"""
Spotter Pipeline Orchestrator

PIPELINE STAGES (FIXED ORDER):

    1. validate    → spotter.audio.validate_clip
    2. classify    → ClassifierGateway (external)
    3. curate      → spotter.curation.curate
    4. danger      → spotter.danger.classify_danger
    5. advise      → AdvisoryGenerator (external, danger results only)
    6. summarize   → SummaryGenerator (external, non-empty events only)
    7. assemble    → spotter.result.ResultAssembler

INVARIANTS:
    - Stages execute in order; external stages never call each other
    - Every external call is bounded by config.gateway_timeout_s
    - Pipeline stops on first failure; nothing is stored for a failed clip
    - History appends are serialized per pipeline instance
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, TypeVar

import numpy as np

from spotter.audio import AudioClip, validate_clip
from spotter.config import PipelineConfig
from spotter.contracts import AdvisoryGenerator, ClassifierGateway, SummaryGenerator
from spotter.curation import curate
from spotter.danger import classify_danger
from spotter.errors import AnalysisFailed, InvalidInput
from spotter.events import EventRecord
from spotter.result import NO_EVENTS_SUMMARY, AnalysisResult, History, ResultAssembler
from spotter.telemetry import TelemetrySampler
from spotter.utils import now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")


STAGE_ORDER = [
    "validate",
    "classify",
    "curate",
    "danger",
    "advise",
    "summarize",
    "assemble",
]

ADVISORY_FALLBACK = "Undefined threat detected. Proceed with caution."


class AnalysisPipeline:
    """
    Runs clips through the analysis stages and records results in a history.

    Args:
        classifier: Classifier gateway binding
        advisor: Advisory generator binding
        summarizer: Summary generator binding
        config: Policy knobs (default: PipelineConfig())
        history: Session history (default: new empty History)
        sampler: Telemetry sampler (default: uptime measured from now)
        rng: Random generator used for filler confidences
        assembler: Result assembler (default: one bound to history)
        process_start: Start instant for the uptime reading, used when no
            sampler is given (default: now)
    """

    def __init__(
        self,
        classifier: ClassifierGateway,
        advisor: AdvisoryGenerator,
        summarizer: SummaryGenerator,
        config: PipelineConfig | None = None,
        history: History | None = None,
        sampler: TelemetrySampler | None = None,
        rng: np.random.Generator | None = None,
        assembler: ResultAssembler | None = None,
        process_start: datetime | None = None,
    ):
        self.classifier = classifier
        self.advisor = advisor
        self.summarizer = summarizer
        self.config = config or PipelineConfig()
        self.history = history if history is not None else History()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.sampler = sampler or TelemetrySampler(process_start or now_utc(), rng=self.rng)
        self.assembler = assembler or ResultAssembler(self.history)
        self._append_lock = asyncio.Lock()

    async def analyze(self, clip: AudioClip) -> AnalysisResult:
        """
        Analyze one clip end to end.

        Args:
            clip: Audio clip to analyze

        Returns:
            The assembled result, which is also history[0] at the moment
            of assembly.

        Raises:
            InvalidInput: If the clip fails preconditions (no external call
                is made).
            AnalysisFailed: If an external collaborator fails or times out.
        """
        try:
            validate_clip(clip, self.config.max_payload_bytes)
        except InvalidInput as e:
            logger.error("Rejected clip %r: %s", clip.name, e.reason)
            raise

        raw = await self._call("classify", clip.name, self.classifier.classify(clip))
        raw = self._check_detections(clip.name, raw)

        curated = curate(raw, self.config.curation_options(), rng=self.rng)
        danger = classify_danger(curated, self.config.dangerous_labels)
        logger.debug(
            "Clip %r: %d raw, %d curated, danger=%s",
            clip.name, len(raw), len(curated), danger.is_danger,
        )

        advisory = ""
        if danger.is_danger:
            advisory = await self._call(
                "advise", clip.name, self.advisor.advise(danger.matched_labels)
            )
            if advisory is not None and not isinstance(advisory, str):
                raise AnalysisFailed(
                    "advise", clip.name,
                    f"advisory generator returned {type(advisory).__name__}, expected text",
                )
            if not advisory or not advisory.strip():
                logger.warning(
                    "Advisory generator returned no content for clip %r; using fallback",
                    clip.name,
                )
                advisory = ADVISORY_FALLBACK

        if curated:
            summary = await self._call("summarize", clip.name, self.summarizer.summarize(curated))
            if not isinstance(summary, str) or not summary.strip():
                raise AnalysisFailed("summarize", clip.name, "summary generator returned no content")
        else:
            summary = NO_EVENTS_SUMMARY

        telemetry = self.sampler.sample()

        async with self._append_lock:
            result = self.assembler.assemble(
                clip_name=clip.name,
                audio_source=clip.data_uri,
                curated_events=curated,
                danger=danger,
                advisory_text=advisory,
                summary_text=summary,
                telemetry=telemetry,
            )

        logger.info(
            "Analyzed clip %r: %d events, danger=%s (%s)",
            clip.name, len(result.events), result.is_danger, result.id,
        )
        return result

    async def _call(self, stage: str, clip_name: str, awaitable: Awaitable[T]) -> T:
        """Await an external call under the configured timeout."""
        logger.debug("Stage %s started for clip %r", stage, clip_name)
        timeout = self.config.gateway_timeout_s
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error("Stage %s timed out after %.1fs for clip %r", stage, timeout, clip_name)
            raise AnalysisFailed(stage, clip_name, f"timed out after {timeout}s", e) from e
        except Exception as e:
            logger.exception("Stage %s failed for clip %r", stage, clip_name)
            raise AnalysisFailed(stage, clip_name, str(e) or type(e).__name__, e) from e

    @staticmethod
    def _check_detections(clip_name: str, raw: object) -> list[EventRecord]:
        """Reject classifier output that is not a list of real detections."""
        if not isinstance(raw, (list, tuple)) or not all(isinstance(e, EventRecord) for e in raw):
            raise AnalysisFailed("classify", clip_name, "classifier returned an unusable response")
        if any(e.is_synthetic for e in raw):
            raise AnalysisFailed("classify", clip_name, "classifier used the reserved synthetic id prefix")
        seen: set[str] = set()
        for event in raw:
            if event.id in seen:
                raise AnalysisFailed(
                    "classify", clip_name, f"classifier returned duplicate event id '{event.id}'"
                )
            seen.add(event.id)
        return list(raw)
