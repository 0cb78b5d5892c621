"""Backend replaying previously fetched remote audio."""

import logging

from ..audio.coordinator import PlaybackCoordinator
from ..cache.manager import AudioCache
from .base import BackendResult, ClipFactory, SpeechBackend, SpeechOutcome, play_payload

logger = logging.getLogger(__name__)


class CachedAudioBackend(SpeechBackend):
    """Plays audio cached by RemoteSynthesisBackend for the same text."""

    name = "cache"

    def __init__(
        self, cache: AudioCache, coordinator: PlaybackCoordinator, player: ClipFactory
    ) -> None:
        self.cache = cache
        self.coordinator = coordinator
        self.player = player

    async def try_speak(self, text: str, generation: int) -> BackendResult:
        payload = self.cache.get(text)
        if payload is None:
            return BackendResult(SpeechOutcome.SKIPPED, self.name)

        logger.info("Using cached audio")
        return await play_payload(
            self, self.coordinator, self.player, payload, generation, cached=True
        )
