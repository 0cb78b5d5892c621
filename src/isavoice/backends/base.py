"""Speech backend interface.

A backend is one strategy for making text audible. The TTS pipeline holds
an ordered list of backends and tries them until one speaks.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ..audio.coordinator import Playable, PlaybackCoordinator
from ..tts.errors import PlaybackError, PlaybackRejectedError
from ..tts.models import AudioPayload

logger = logging.getLogger(__name__)


class SpeechOutcome(str, Enum):
    """How a backend attempt ended."""

    SPOKEN = "spoken"
    SKIPPED = "skipped"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    UNSUPPORTED = "unsupported"


@dataclass
class BackendResult:
    """Result of one backend attempt.

    Attributes:
        outcome: How the attempt ended
        backend: Name of the backend that produced the result
        error: The failure, when outcome is FAILED
        cached: True if the audio came from the cache
    """

    outcome: SpeechOutcome
    backend: str
    error: Exception | None = None
    cached: bool = False

    @property
    def playback_rejected(self) -> bool:
        return isinstance(self.error, PlaybackRejectedError)


class ClipFactory(Protocol):
    """Anything that turns audio bytes into a Playable (AudioPlayer does)."""

    def clip(self, audio_data: bytes, content_type: str = "audio/mpeg") -> Playable:
        ...


class SpeechBackend(ABC):
    """Abstract base class for speech backends."""

    name: str = "backend"
    # Backends that need an audio device are skipped after the platform
    # refused audio output once in the same request.
    uses_audio_output: bool = True

    @abstractmethod
    async def try_speak(self, text: str, generation: int) -> BackendResult:
        """Attempt to make text audible.

        Args:
            text: Normalized text to speak
            generation: Request token from PlaybackCoordinator.begin_request()

        Returns:
            BackendResult; failures are reported, never raised
        """
        pass


async def play_payload(
    backend: SpeechBackend,
    coordinator: PlaybackCoordinator,
    player: ClipFactory,
    payload: AudioPayload,
    generation: int,
    cached: bool = False,
) -> BackendResult:
    """Play remote audio through the coordinator and report the outcome."""
    try:
        clip = player.clip(payload.audio, payload.content_type)
        played = await coordinator.play_exclusively(clip, generation=generation)
    except PlaybackError as e:
        logger.warning(f"{backend.name}: playback failed: {e}")
        return BackendResult(SpeechOutcome.FAILED, backend.name, e, cached)

    outcome = SpeechOutcome.SPOKEN if played else SpeechOutcome.SUPERSEDED
    return BackendResult(outcome, backend.name, cached=cached)
