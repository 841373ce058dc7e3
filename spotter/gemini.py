"""
Gemini collaborator bindings.

Model-backed implementations of the classifier gateway and the advisory
and summary generators, using Google Gemini through google-generativeai.
The dependency is optional (extra "gemini") and imported on first use.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Sequence

from spotter.audio import AudioClip
from spotter.contracts import AdvisoryGenerator, ClassifierGateway, SummaryGenerator
from spotter.events import CLIP_DURATION_S, EventRecord
from spotter.utils import parse_json_from_llm

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gemini-1.5-flash"

CLASSIFY_PROMPT = f"""You are an expert audio analyst. Identify all distinct sound events in the provided {CLIP_DURATION_S:.0f}-second audio clip.

Events can include sounds like "Dog bark", "Keyboard typing", "Phone ring", "Baby sneeze", "Clapping", "Door slam", "Siren", "Glass break", "Profanity" and more.

For each event provide a unique id (e.g. "evt-1"), a descriptive name, precise start and end times in seconds, and a confidence score between 0.0 and 1.0.

Respond with JSON only, in this shape:
{{"events": [{{"id": "evt-1", "event": "Dog bark", "startTime": 1.2, "endTime": 1.8, "confidence": 0.93}}]}}"""

PRECAUTION_PROMPT = """You are a security AI. Based on the following detected audio events, generate a short, clear and helpful precautionary message (1-2 sentences).

Detected events:
{events}

Example: for 'siren' a message could be "Emergency vehicle detected nearby. Please be aware of your surroundings and clear any pathways if necessary."
Example: for 'glass break', 'shout' a message could be "Potential disturbance detected. For your safety, please be cautious and consider checking the area if it is safe to do so."

Respond with JSON only: {{"message": "..."}}"""

SUMMARY_PROMPT = """You are an AI assistant that analyzes audio events and provides a concise summary.

Given the following detected audio events with their start and end times and confidence scores, write a short summary (2-3 sentences) highlighting the key findings.

Events:
{events}

Respond with JSON only: {{"summary": "..."}}"""


class GeminiClient:
    """
    Thin async wrapper around a Gemini GenerativeModel.

    Args:
        api_key: API key (default: GEMINI_API_KEY environment variable)
        model: Model name
        generative_model: Pre-built model object exposing
            generate_content_async(); skips google-generativeai setup
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        generative_model: Any = None,
    ):
        self.model = model
        self._api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self._model = generative_model

    def _get_model(self):
        if self._model is not None:
            return self._model
        if not self._api_key:
            raise ValueError("GEMINI_API_KEY required for Gemini analysis")
        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError("google-generativeai package required. pip install 'spotter[gemini]'")

        genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(self.model)
        logger.info("Initialized Gemini model %s", self.model)
        return self._model

    async def generate_json(self, parts: list[Any]) -> Any:
        """Send prompt parts and parse the JSON reply."""
        response = await self._get_model().generate_content_async(
            parts,
            generation_config={"response_mime_type": "application/json"},
        )
        return parse_json_from_llm(response.text)


# =============================================================================
# Bindings
# =============================================================================


class GeminiClassifier(ClassifierGateway):
    def __init__(self, client: GeminiClient):
        self.client = client

    async def classify(self, clip: AudioClip) -> list[EventRecord]:
        reply = await self.client.generate_json([
            CLASSIFY_PROMPT,
            {"mime_type": clip.mime_type, "data": clip.data},
        ])
        if not isinstance(reply, dict) or not isinstance(reply.get("events", []), list):
            raise ValueError(f"Unexpected classifier response shape: {type(reply).__name__}")
        return [EventRecord.from_dict(item) for item in reply.get("events", [])]


class GeminiAdvisor(AdvisoryGenerator):
    def __init__(self, client: GeminiClient):
        self.client = client

    async def advise(self, labels: Sequence[str]) -> str:
        prompt = PRECAUTION_PROMPT.format(events="\n".join(f"- {label}" for label in labels))
        reply = await self.client.generate_json([prompt])
        # Missing message is the degraded path; the pipeline substitutes its fallback
        if not isinstance(reply, dict):
            return ""
        return str(reply.get("message") or "")


class GeminiSummarizer(SummaryGenerator):
    def __init__(self, client: GeminiClient):
        self.client = client

    async def summarize(self, events: Sequence[EventRecord]) -> str:
        lines = "\n".join(
            f"- Event: {e.label}, Start Time: {e.start_time}s, "
            f"End Time: {e.end_time}s, Confidence: {e.confidence}"
            for e in events
        )
        reply = await self.client.generate_json([SUMMARY_PROMPT.format(events=lines)])
        if not isinstance(reply, dict) or not reply.get("summary"):
            raise ValueError("Summary response did not contain a summary")
        return str(reply["summary"])
