"""
Spotter Audio Clip Payloads.

Clips reach the pipeline as opaque payloads: raw bytes plus a MIME type,
usually transported as a base64 data URI. No signal processing happens
here; libsndfile is only used to probe the duration of formats it can
read.

Library Stack:
    - soundfile: container probing (WAV/FLAC/OGG)

INVARIANTS:
    - Validation happens before any external call
    - Validation never modifies the payload
"""

import base64
import binascii
import io
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

import soundfile as sf

from spotter.errors import InvalidInput
from spotter.events import CLIP_DURATION_S


# =============================================================================
# Constants (FROZEN)
# =============================================================================

SUPPORTED_MEDIA_TYPES = frozenset({
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/flac",
    "audio/ogg",
    "audio/webm",
    "audio/mpeg",
    "audio/mp4",
})

# Formats libsndfile can open from memory
PROBEABLE_MEDIA_TYPES = frozenset({
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/flac",
    "audio/ogg",
})

# Browser recordings use these containers for audio-only streams
AUDIO_CONTAINER_TYPES = {
    "video/webm": "audio/webm",
    "video/ogg": "audio/ogg",
    "video/mp4": "audio/mp4",
}

DEFAULT_MAX_PAYLOAD_BYTES = 10 * 1024 * 1024
DURATION_TOLERANCE_S = 0.5

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[^,;]+)*;base64,(?P<data>.*)$", re.S)


# =============================================================================
# AudioClip
# =============================================================================


@dataclass(frozen=True)
class AudioClip:
    """
    One bounded audio sample submitted for analysis.

    Attributes:
        name: Display name of the clip (e.g., file name or "REC-<time>")
        data: Encoded audio bytes
        mime_type: Media type of data (e.g., "audio/wav")
    """
    name: str
    data: bytes
    mime_type: str

    @classmethod
    def from_data_uri(cls, name: str, uri: str) -> "AudioClip":
        """
        Decode a 'data:<mimetype>;base64,<payload>' URI.

        Raises:
            InvalidInput: If the URI is malformed or not base64.
        """
        match = _DATA_URI_RE.match(uri.strip())
        if match is None:
            raise InvalidInput(name, "expected a base64 data URI")
        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidInput(name, f"payload is not valid base64: {e}") from e
        return cls(name=name, data=data, mime_type=match.group("mime").lower())

    @classmethod
    def from_path(
        cls,
        path: Path,
        name: str | None = None,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
    ) -> "AudioClip":
        """
        Read a clip from disk, guessing the media type from the suffix.

        Container types that mimetypes reports as video (webm, ogg, mp4)
        are recorded as their audio counterpart.

        Raises:
            InvalidInput: If the media type cannot be determined or the
                file exceeds max_payload_bytes (checked before reading).
        """
        path = Path(path)
        clip_name = name or path.name
        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type is None:
            raise InvalidInput(clip_name, f"cannot determine media type of '{path.suffix}' files")
        mime_type = AUDIO_CONTAINER_TYPES.get(mime_type, mime_type)

        size = path.stat().st_size
        if size > max_payload_bytes:
            raise InvalidInput(clip_name, f"payload is {size} bytes, limit is {max_payload_bytes}")
        return cls(name=clip_name, data=path.read_bytes(), mime_type=mime_type)

    @property
    def data_uri(self) -> str:
        """The clip encoded as a base64 data URI."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


# =============================================================================
# Validation
# =============================================================================


def probe_duration(clip: AudioClip) -> float:
    """
    Return the clip duration in seconds using libsndfile.

    Raises:
        InvalidInput: If libsndfile cannot read the payload.
    """
    try:
        info = sf.info(io.BytesIO(clip.data))
    except RuntimeError as e:
        raise InvalidInput(clip.name, f"unreadable {clip.mime_type} payload: {e}") from e
    return info.frames / info.samplerate


def validate_clip(clip: AudioClip, max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES) -> None:
    """
    Check clip preconditions before the pipeline starts.

    Checks:
        1. Media type is a supported audio type
        2. Payload is non-empty and within max_payload_bytes
        3. For probeable formats, duration fits one clip (plus tolerance)

    Raises:
        InvalidInput: On the first failed check.
    """
    if clip.mime_type not in SUPPORTED_MEDIA_TYPES:
        raise InvalidInput(clip.name, f"unsupported media type '{clip.mime_type}'")
    if not clip.data:
        raise InvalidInput(clip.name, "payload is empty")
    if len(clip.data) > max_payload_bytes:
        raise InvalidInput(
            clip.name,
            f"payload is {len(clip.data)} bytes, limit is {max_payload_bytes}",
        )
    if clip.mime_type in PROBEABLE_MEDIA_TYPES:
        duration = probe_duration(clip)
        if duration > CLIP_DURATION_S + DURATION_TOLERANCE_S:
            raise InvalidInput(
                clip.name,
                f"clip is {duration:.2f}s long, limit is {CLIP_DURATION_S:.0f}s",
            )
