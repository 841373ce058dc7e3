"""
Spotter Report Renderer.

Responsibilities:
- Plain-text analysis report (one result per report)
- JSON export of a result
- Display categories for event labels

Invariants:
- Event times rendered as two-decimal seconds
- Confidence rendered as a rounded percentage
- Danger results carry a banner and the precautionary message
"""

import re
from pathlib import Path

from spotter.result import AnalysisResult
from spotter.utils import serialize_json


REPORT_TITLE = "SPOTTER.AI - Analysis Report"
DANGER_BANNER = "!!! DANGER DETECTED !!!"

# Ordered: first substring match wins
LABEL_CATEGORIES = (
    "glass break",
    "shout",
    "siren",
    "heavy impact",
    "conversation",
    "dog bark",
    "baby sneeze",
    "keyboard typing",
    "phone ring",
    "door slam",
    "footsteps",
    "machine noise",
)
DEFAULT_CATEGORY = "default"


def categorize_label(label: str) -> str:
    """Return the display category of a label, or "default"."""
    lowered = label.lower()
    for category in LABEL_CATEGORIES:
        if category in lowered:
            return category
    return DEFAULT_CATEGORY


def format_timestamp(result: AnalysisResult) -> str:
    """Local wall-clock display time of a result."""
    return result.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


def render_text_report(result: AnalysisResult) -> str:
    """
    Render one result as a plain-text report.

    Args:
        result: Analysis result to render

    Returns:
        Report text with trailing newline.
    """
    lines = [
        REPORT_TITLE,
        "=" * len(REPORT_TITLE),
        f"Clip Name: {result.clip_name}",
        f"Timestamp: {format_timestamp(result)}",
        "",
    ]

    if result.is_danger:
        lines.append(DANGER_BANNER)
        if result.precautionary_message:
            lines.append(f"Precaution: {result.precautionary_message}")
        lines.append("")

    lines += ["Summary", "-------", result.summary, "", "Detected Events", "---------------"]

    if not result.events:
        lines.append("(none)")
    for event in result.events:
        lines += [
            f"Event: {event.label} [{categorize_label(event.label)}]",
            f"  - Time: {event.start_time:.2f}s - {event.end_time:.2f}s",
            f"  - Confidence: {round(event.confidence * 100)}%",
        ]

    t = result.telemetry
    lines += [
        "",
        "Telemetry",
        "---------",
        f"Peak level: {t.peak_level:.1f} dB | Noise floor: {t.noise_floor} dB | SNR: {t.snr} dB",
        f"Events/hour: {t.events_per_hour} | Process load: {t.process_load}% | Uptime: {t.uptime}",
    ]
    return "\n".join(lines) + "\n"


def report_filename(result: AnalysisResult, suffix: str = ".txt") -> str:
    """analysis_<clip name with non-alphanumerics replaced by _><suffix>"""
    safe = re.sub(r"[^a-z0-9]", "_", result.clip_name, flags=re.IGNORECASE)
    return f"analysis_{safe}{suffix}"


def write_report(result: AnalysisResult, out_dir: Path) -> Path:
    """Write the text report into out_dir and return its path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report_filename(result)
    path.write_text(render_text_report(result))
    return path


def write_json(result: AnalysisResult, out_dir: Path) -> Path:
    """Write the JSON export into out_dir and return its path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report_filename(result, suffix=".json")
    path.write_text(serialize_json(result.to_dict()))
    return path
