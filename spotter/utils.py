"""
Spotter Utilities - Shared helper functions.

Responsibilities:
- Timezone-aware timestamps
- JSON serialization helpers
- Parsing JSON out of model responses
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Mapping


def now_utc() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def serialize_json(data: Mapping[str, Any]) -> str:
    """
    Serialize dictionary to JSON deterministically.
    
    Args:
        data: Dictionary to serialize.
    
    Returns:
        JSON string with sorted keys, 2-space indent, trailing newline.
    """
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def parse_json_from_llm(text: str) -> Any:
    """
    Parse JSON from model output, stripping markdown code fences if present.
    
    Raises:
        json.JSONDecodeError: If the remaining text is not valid JSON.
    """
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```(?:json)?\s*", "", text)
        text = re.sub(r"\s*```\s*$", "", text)
    return json.loads(text)
