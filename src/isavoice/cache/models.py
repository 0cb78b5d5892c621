"""Data models for the audio cache."""

from dataclasses import dataclass, field
from datetime import datetime

from ..tts.models import AudioPayload


@dataclass
class AudioCacheEntry:
    """Cached remote audio for one spoken phrase.

    Attributes:
        key: Normalized text key (trimmed, whitespace-collapsed, lower-case)
        payload: Audio returned by the remote provider
        timestamp: When this entry was created
        hits: Number of times the entry was reused
    """

    key: str
    payload: AudioPayload
    timestamp: datetime = field(default_factory=datetime.now)
    hits: int = 0
