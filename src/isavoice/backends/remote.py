"""Backend fetching speech from a remote provider."""

import logging

from ..audio.coordinator import PlaybackCoordinator
from ..cache.manager import AudioCache
from ..providers.base import RemoteSpeechProvider
from ..tts.errors import TTSError
from .base import BackendResult, ClipFactory, SpeechBackend, SpeechOutcome, play_payload

logger = logging.getLogger(__name__)


class RemoteSynthesisBackend(SpeechBackend):
    """Synthesizes text remotely, caches the audio and plays it.

    A fetch that resolves after a newer request has started is cached but
    never played.
    """

    def __init__(
        self,
        provider: RemoteSpeechProvider,
        coordinator: PlaybackCoordinator,
        player: ClipFactory,
        cache: AudioCache | None = None,
    ) -> None:
        self.provider = provider
        self.coordinator = coordinator
        self.player = player
        self.cache = cache
        self.name = f"remote:{provider.name}"

    async def try_speak(self, text: str, generation: int) -> BackendResult:
        if not self.coordinator.is_current(generation):
            return BackendResult(SpeechOutcome.SUPERSEDED, self.name)

        try:
            payload = await self.provider.synthesize(text)
        except (TTSError, ValueError) as e:
            logger.warning(f"{self.name}: synthesis failed: {e}")
            return BackendResult(SpeechOutcome.FAILED, self.name, e)

        if self.cache is not None:
            self.cache.put(text, payload)

        if not self.coordinator.is_current(generation):
            logger.debug(f"{self.name}: discarding audio for superseded request")
            return BackendResult(SpeechOutcome.SUPERSEDED, self.name)

        return await play_payload(self, self.coordinator, self.player, payload, generation)

    async def fetch(self, text: str) -> bool:
        """Synthesize and cache text without playing it.

        Returns:
            True if audio was cached
        """
        if self.cache is None:
            return False
        try:
            payload = await self.provider.synthesize(text)
        except (TTSError, ValueError) as e:
            logger.error(f"{self.name}: preload failed for '{text[:50]}': {e}")
            return False
        self.cache.put(text, payload)
        return True
