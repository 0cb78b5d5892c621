"""TTS pipeline orchestrator for isavoice.

Coordinates the speech backends, the audio cache and the playback
coordinator behind one speak() call. Backends are tried in order
(cache -> remote synthesis -> native synthesis) until one of them speaks.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from ..audio.coordinator import PlaybackCoordinator
from ..audio.synthesis import SpeechOptions, SystemSpeechSynthesizer
from ..backends import (
    BackendResult,
    CachedAudioBackend,
    NativeSynthesisBackend,
    RemoteSynthesisBackend,
    SpeechBackend,
    SpeechOutcome,
)
from ..cache.manager import AudioCache
from ..providers import ProviderRegistry
from .errors import TTSError
from .normalize import normalize_for_speech

if TYPE_CHECKING:
    from ..backends.base import ClipFactory
    from ..config import IsaVoiceConfig
    from ..providers.base import RemoteSpeechProvider
    from ..state import VoicePreferences

logger = logging.getLogger(__name__)


class TTSPipeline:
    """Orchestrates the speech workflow from raw text to audible output.

    Every speak() call starts a new request on the coordinator, so the
    newest request always wins: anything still playing is stopped and
    late results of older requests are discarded.

    Example:
        pipeline = TTSPipeline.create(config)
        result = await pipeline.speak("Seu saldo é de R$ 1.234,56")
        # Returns: {"spoken": True, "backend": "remote:edge",
        #           "cached": False, "outcome": "spoken"}
    """

    def __init__(
        self,
        coordinator: PlaybackCoordinator,
        backends: Sequence[SpeechBackend],
        preferences: "VoicePreferences | None" = None,
        spell_out: bool = True,
        cache: AudioCache | None = None,
    ) -> None:
        """Initialize TTS pipeline.

        Args:
            coordinator: Playback coordinator shared by all backends
            backends: Backends in the order they are tried
            preferences: Voice-enabled flag; None means always enabled
            spell_out: Read currency amounts as words instead of numerals
            cache: Audio cache used by the backends, cleared by clear_cache()
        """
        self.coordinator = coordinator
        self.backends = list(backends)
        self.preferences = preferences
        self.spell_out = spell_out
        self.cache = cache

        logger.debug(
            f"TTSPipeline initialized with backends="
            f"{[backend.name for backend in self.backends]}"
        )

    @classmethod
    def create(
        cls,
        config: "IsaVoiceConfig | None" = None,
        *,
        coordinator: PlaybackCoordinator | None = None,
        provider: "RemoteSpeechProvider | None" = None,
        player: "ClipFactory | None" = None,
        preferences: "VoicePreferences | None" = None,
        spell_out: bool = True,
    ) -> "TTSPipeline":
        """Build the default cache -> remote -> native chain from config.

        A remote provider that cannot be configured (no endpoint, no key)
        is logged and left out; native synthesis still works.

        Args:
            config: Loaded configuration (defaults apply when None)
            coordinator: Existing coordinator to share
            provider: Remote provider overriding the configured one
            player: Clip factory for remote audio (defaults to AudioPlayer)
            preferences: Voice-enabled flag
            spell_out: Read currency amounts as words

        Returns:
            Configured TTSPipeline
        """
        if config is None:
            from ..config import default_config

            config = default_config()

        options = SpeechOptions(
            lang=config.native.lang,
            rate=config.native.rate,
            pitch=config.native.pitch,
            volume=config.native.volume,
        )
        if coordinator is None:
            coordinator = PlaybackCoordinator(SystemSpeechSynthesizer(options))

        if provider is None:
            kwargs: dict[str, Any] = {}
            if config.remote.provider == "edge":
                kwargs = {
                    "endpoint": config.remote.endpoint,
                    "timeout": config.remote.timeout,
                }
            try:
                provider = ProviderRegistry.create(config.remote.provider, **kwargs)
            except (KeyError, TTSError) as e:
                logger.warning(f"Remote speech disabled: {e}")

        cache = AudioCache() if config.cache.enabled else None
        backends: list[SpeechBackend] = []
        if provider is not None:
            if player is None:
                from ..audio.player import AudioPlayer

                player = AudioPlayer()
            if cache is not None:
                backends.append(CachedAudioBackend(cache, coordinator, player))
            backends.append(RemoteSynthesisBackend(provider, coordinator, player, cache))
        backends.append(NativeSynthesisBackend(coordinator, options))

        return cls(coordinator, backends, preferences, spell_out, cache)

    async def speak(self, text: str, *, force_native: bool = False) -> dict[str, Any]:
        """Speak text, falling back through the backends.

        Args:
            text: Raw text; currency, emoji and markdown are normalized first
            force_native: Skip every backend that needs remote audio output

        Returns:
            Dictionary with workflow results:
                {
                    "spoken": bool,        # True if the text was heard in full
                    "backend": str | None, # Backend that produced the outcome
                    "cached": bool,        # True if audio came from cache
                    "outcome": str         # SpeechOutcome value
                }
        """
        result: dict[str, Any] = {
            "spoken": False,
            "backend": None,
            "cached": False,
            "outcome": SpeechOutcome.SKIPPED.value,
        }

        if self.preferences is not None and not self.preferences.is_voice_enabled():
            logger.debug("Voice disabled, not speaking")
            return result
        if not text or not text.strip():
            return result

        speech = normalize_for_speech(text, self.spell_out)
        if not speech:
            logger.debug("Nothing left to say after normalization")
            return result

        generation = self.coordinator.begin_request()
        audio_refused = False

        for backend in self.backends:
            if backend.uses_audio_output and (force_native or audio_refused):
                continue

            try:
                attempt = await backend.try_speak(speech, generation)
            except TTSError as e:
                logger.error(f"{backend.name}: unexpected failure: {e}")
                attempt = BackendResult(SpeechOutcome.FAILED, backend.name, e)

            result.update(
                backend=attempt.backend,
                cached=attempt.cached,
                outcome=attempt.outcome.value,
            )
            if attempt.outcome is SpeechOutcome.SPOKEN:
                result["spoken"] = True
                return result
            if attempt.outcome is SpeechOutcome.SUPERSEDED:
                return result
            if attempt.playback_rejected:
                logger.info("Audio output refused, falling back to native speech")
                audio_refused = True

        if result["outcome"] != SpeechOutcome.SKIPPED.value:
            logger.warning(f"No backend could speak: last outcome {result['outcome']}")
        return result

    def stop(self) -> None:
        """Stop all speech and invalidate pending requests."""
        self.coordinator.stop_all()

    def is_speaking(self) -> bool:
        return self.coordinator.is_playing()

    async def preload(self, phrases: Iterable[str]) -> int:
        """Fill the cache with remote audio for phrases, without playing.

        Returns:
            Number of phrases cached
        """
        if self.preferences is not None and not self.preferences.is_voice_enabled():
            logger.debug("Voice disabled, not preloading")
            return 0

        remotes = [b for b in self.backends if isinstance(b, RemoteSynthesisBackend)]
        if not remotes or self.cache is None:
            logger.debug("Preload skipped: no remote backend or cache")
            return 0

        texts = [normalize_for_speech(p, self.spell_out) for p in phrases]
        unique = {AudioCache.make_key(t): t for t in texts if t}
        texts = [t for t in unique.values() if t not in self.cache]
        results = await asyncio.gather(*(remotes[0].fetch(t) for t in texts))
        cached = sum(1 for ok in results if ok)
        logger.info(f"Preloaded {cached}/{len(texts)} phrases")
        return cached

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()
