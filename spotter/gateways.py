"""
Offline collaborator bindings.

- SyntheticClassifier: deterministic stand-in for the classification model
- TemplateAdvisor: rule-based precaution text
- TemplateSummarizer: rule-based synopsis

None of these look at the audio signal. SyntheticClassifier derives its
events from a hash of the payload so the same clip always yields the same
detections.
"""

import hashlib
from typing import Sequence

import numpy as np

from spotter.audio import AudioClip
from spotter.contracts import AdvisoryGenerator, ClassifierGateway, SummaryGenerator
from spotter.curation import DEFAULT_FILLER_CATEGORIES
from spotter.events import CLIP_DURATION_S, EventRecord


# =============================================================================
# SyntheticClassifier
# =============================================================================


class SyntheticClassifier(ClassifierGateway):
    """
    Generates plausible detections from the payload hash.

    Args:
        vocabulary: Event labels to draw from
        max_events: Upper bound on events per clip
    """

    def __init__(
        self,
        vocabulary: Sequence[str] = DEFAULT_FILLER_CATEGORIES,
        max_events: int = 6,
    ):
        if not vocabulary:
            raise ValueError("vocabulary must be non-empty")
        self.vocabulary = tuple(vocabulary)
        self.max_events = max_events

    async def classify(self, clip: AudioClip) -> list[EventRecord]:
        digest = hashlib.sha256(clip.data).digest()
        rng = np.random.default_rng(int.from_bytes(digest[:8], "big"))

        count = int(rng.integers(0, self.max_events + 1))
        events = []
        for i in range(count):
            label = self.vocabulary[int(rng.integers(0, len(self.vocabulary)))]
            start = round(float(rng.uniform(0.0, CLIP_DURATION_S - 0.5)), 2)
            length = round(float(rng.uniform(0.2, 2.0)), 2)
            events.append(EventRecord(
                id=f"evt-{i + 1}",
                label=label[:1].upper() + label[1:],
                start_time=start,
                end_time=min(CLIP_DURATION_S, start + length),
                confidence=round(float(rng.uniform(0.3, 1.0)), 3),
            ))
        return events


# =============================================================================
# TemplateAdvisor
# =============================================================================

# (label substring, advice); first match per label wins
ADVICE_RULES = (
    ("siren", "Emergency vehicle detected nearby. Be aware of your surroundings "
              "and clear any pathways if necessary."),
    ("alarm", "An alarm is sounding. Check for smoke or other hazards and be "
              "ready to leave the area."),
    ("glass break", "Breaking glass detected. Be cautious and check the area "
                    "only if it is safe to do so."),
    ("shout", "Raised voices detected. Stay alert and keep a safe distance."),
    ("scream", "A scream was detected. Check on the people nearby if it is "
               "safe to do so."),
    ("heavy impact", "A heavy impact was detected. Check for falls or damage."),
    ("gunshot", "Possible gunshot detected. Move to a safe location and "
                "contact emergency services."),
    ("explosion", "Possible explosion detected. Move away from the area and "
                  "contact emergency services."),
    ("profanity", "Inappropriate language detected. Please be mindful of the "
                  "environment."),
    ("vulgar language", "Inappropriate language detected. Please be mindful "
                        "of the environment."),
)


class TemplateAdvisor(AdvisoryGenerator):
    """Concatenates one canned sentence per distinct matched rule."""

    async def advise(self, labels: Sequence[str]) -> str:
        messages: list[str] = []
        for label in labels:
            lowered = label.lower()
            for needle, advice in ADVICE_RULES:
                if needle in lowered:
                    if advice not in messages:
                        messages.append(advice)
                    break
        return " ".join(messages)


# =============================================================================
# TemplateSummarizer
# =============================================================================


class TemplateSummarizer(SummaryGenerator):
    """Describes the event count, the strongest event and the time span."""

    async def summarize(self, events: Sequence[EventRecord]) -> str:
        top = max(events, key=lambda e: e.confidence)
        start = min(e.start_time for e in events)
        end = max(e.end_time for e in events)
        noun = "event" if len(events) == 1 else "events"
        labels = ", ".join(dict.fromkeys(e.label for e in events))
        return (
            f"{len(events)} audio {noun} detected between {start:.2f}s and {end:.2f}s: "
            f"{labels}. The most confident detection is {top.label} "
            f"at {round(top.confidence * 100)}%."
        )
