"""
Spotter Configuration.

PipelineConfig holds the policy knobs of one pipeline instance. Defaults
match the dashboard behaviour (threshold 0.8, five results, filler on);
every value can be overridden from SPOTTER_* environment variables, which
may come from a .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, TypeVar

from dotenv import load_dotenv

from spotter.audio import DEFAULT_MAX_PAYLOAD_BYTES
from spotter.curation import DEFAULT_FILLER_CATEGORIES, CurationOptions
from spotter.danger import DEFAULT_DANGEROUS_LABELS
from spotter.gemini import DEFAULT_MODEL

T = TypeVar("T")

ENV_PREFIX = "SPOTTER_"


@dataclass(frozen=True)
class PipelineConfig:
    confidence_threshold: float = 0.8
    min_results: int = 5
    max_results: int = 5
    filler_enabled: bool = True
    filler_categories: tuple[str, ...] = DEFAULT_FILLER_CATEGORIES
    dangerous_labels: frozenset[str] = field(default_factory=lambda: DEFAULT_DANGEROUS_LABELS)
    gateway_timeout_s: float = 30.0
    max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    gemini_model: str = DEFAULT_MODEL

    def __post_init__(self) -> None:
        if self.gateway_timeout_s <= 0:
            raise ValueError("gateway_timeout_s must be positive")
        if self.max_payload_bytes <= 0:
            raise ValueError("max_payload_bytes must be positive")

    def curation_options(self) -> CurationOptions:
        return CurationOptions(
            confidence_threshold=self.confidence_threshold,
            max_results=self.max_results,
            min_results=self.min_results,
            filler_categories=self.filler_categories,
            filler_enabled=self.filler_enabled,
        )

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        dotenv: bool = True,
    ) -> "PipelineConfig":
        """
        Build a config from SPOTTER_* variables.

        Args:
            env: Variables to read (default: os.environ)
            dotenv: Load a .env file into os.environ first (only when
                env is None)

        Raises:
            ValueError: If a variable cannot be parsed; the message names it.
        """
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        defaults = cls()

        def read(name: str, parse: Callable[[str], T], default: T) -> T:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return parse(raw.strip())
            except ValueError as e:
                raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from e

        return cls(
            confidence_threshold=read("CONFIDENCE_THRESHOLD", float, defaults.confidence_threshold),
            min_results=read("MIN_RESULTS", int, defaults.min_results),
            max_results=read("MAX_RESULTS", int, defaults.max_results),
            filler_enabled=read("FILLER_ENABLED", _parse_bool, defaults.filler_enabled),
            filler_categories=read("FILLER_CATEGORIES", _parse_list, defaults.filler_categories),
            dangerous_labels=read(
                "DANGEROUS_LABELS",
                lambda raw: frozenset(_parse_list(raw)),
                defaults.dangerous_labels,
            ),
            gateway_timeout_s=read("GATEWAY_TIMEOUT_S", float, defaults.gateway_timeout_s),
            max_payload_bytes=read("MAX_PAYLOAD_BYTES", int, defaults.max_payload_bytes),
            gemini_model=read("GEMINI_MODEL", str, defaults.gemini_model),
        )


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw}")


def _parse_list(raw: str) -> tuple[str, ...]:
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    if not items:
        raise ValueError("empty list")
    return items
