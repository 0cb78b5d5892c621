"""Backend speaking through on-device speech synthesis."""

import dataclasses
import logging

from ..audio.coordinator import PlaybackCoordinator
from ..audio.synthesis import SpeechOptions
from .base import BackendResult, SpeechBackend, SpeechOutcome

logger = logging.getLogger(__name__)


class NativeSynthesisBackend(SpeechBackend):
    """Last-resort backend: the operating system's own voice."""

    name = "native"
    uses_audio_output = False

    def __init__(
        self, coordinator: PlaybackCoordinator, options: SpeechOptions | None = None
    ) -> None:
        self.coordinator = coordinator
        self.options = options or SpeechOptions()

    def is_supported(self) -> bool:
        synthesizer = self.coordinator.synthesizer
        return synthesizer is not None and synthesizer.is_supported()

    async def try_speak(self, text: str, generation: int) -> BackendResult:
        if not self.is_supported():
            logger.info("Native speech synthesis unavailable, skipping utterance")
            return BackendResult(SpeechOutcome.UNSUPPORTED, self.name)

        errors: list[BaseException] = []
        options = dataclasses.replace(self.options, on_error=errors.append)
        task = self.coordinator.speak_exclusively(text, options, generation=generation)
        if task is None:
            return BackendResult(SpeechOutcome.SUPERSEDED, self.name)

        spoken = await task
        if errors:
            error = errors[0]
            return BackendResult(
                SpeechOutcome.FAILED,
                self.name,
                error if isinstance(error, Exception) else None,
            )
        outcome = SpeechOutcome.SPOKEN if spoken else SpeechOutcome.SUPERSEDED
        return BackendResult(outcome, self.name)
