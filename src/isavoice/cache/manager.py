"""In-memory audio cache keyed by spoken text."""

import logging

from ..tts.models import AudioPayload
from .models import AudioCacheEntry

logger = logging.getLogger(__name__)


class AudioCache:
    """Process-lifetime cache of remote speech audio.

    Entries are never evicted: the number of distinct phrases the
    assistant says in one session is small.

    Example:
        cache = AudioCache()
        cache.put("Olá, Ana!", payload)
        cache.get("  olá, ana! ")  # same entry
    """

    def __init__(self) -> None:
        self._entries: dict[str, AudioCacheEntry] = {}

    @staticmethod
    def make_key(text: str) -> str:
        """Build the cache key: trimmed, whitespace-collapsed, case-insensitive."""
        return " ".join(text.split()).lower()

    def get(self, text: str) -> AudioPayload | None:
        """Return cached audio for text, or None on a miss."""
        entry = self._entries.get(self.make_key(text))
        if entry is None:
            return None
        entry.hits += 1
        logger.debug(f"Cache hit for '{entry.key[:50]}' ({entry.hits} hits)")
        return entry.payload

    def put(self, text: str, payload: AudioPayload) -> AudioCacheEntry:
        """Store audio for text, replacing any previous entry.

        Raises:
            ValueError: If text is empty after normalization
        """
        key = self.make_key(text)
        if not key:
            raise ValueError("Cannot cache audio for empty text")
        entry = AudioCacheEntry(key=key, payload=payload)
        self._entries[key] = entry
        logger.debug(f"Cached {len(payload.audio)} bytes for '{key[:50]}'")
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, text: str) -> bool:
        return self.make_key(text) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
