"""Abstract base class for remote speech-generation providers.

A provider turns cleaned text into playable audio. It never plays
anything itself; playback belongs to the PlaybackCoordinator.
"""

from abc import ABC, abstractmethod

from ..tts.models import AudioPayload


class RemoteSpeechProvider(ABC):
    """Abstract base class for remote speech-generation providers."""

    name: str = "remote"

    @abstractmethod
    async def synthesize(self, text: str) -> AudioPayload:
        """Convert text to playable audio.

        Args:
            text: Cleaned text to convert to speech

        Returns:
            Audio bytes with their content type

        Raises:
            TTSAPIError: If the service answered with an error payload
            TTSRateLimitError: If the service signalled rate limiting
            TTSAuthError: If the credentials were refused
            TTSTransportError: If the service could not be reached
            ValueError: If text is empty
        """
        pass
