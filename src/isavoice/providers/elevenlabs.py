"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import logging
import os

from elevenlabs.client import ElevenLabs

from ..tts.errors import TTSAPIError, TTSAuthError, TTSRateLimitError, TTSTransportError
from ..tts.models import AudioPayload, CredentialStatus, VoiceSettings
from .base import RemoteSpeechProvider

logger = logging.getLogger(__name__)

# Laura - warm, friendly female voice for Brazilian Portuguese
DEFAULT_VOICE_ID = "FGY2WhTYpPnrIDTdsKH5"
DEFAULT_MODEL_ID = "eleven_multilingual_v2"
DEFAULT_OUTPUT_FORMAT = "mp3_44100_128"


def _map_error(e: Exception, action: str) -> Exception:
    message = str(e)
    if "unauthorized" in message.lower() or "401" in message:
        return TTSAuthError(f"Authentication failed: {e}", e)
    if "429" in message:
        return TTSRateLimitError(f"Rate limit exceeded: {e}", e)
    if isinstance(e, (ConnectionError, TimeoutError, OSError)):
        return TTSTransportError(f"{action} failed: {e}", e)
    return TTSAPIError(f"{action} failed: {e}", None, e)


class ElevenLabsProvider(RemoteSpeechProvider):
    """ElevenLabs TTS provider implementation.

    Calls the ElevenLabs API directly with the assistant's voice, instead of
    going through the hosted edge function.
    """

    name = "elevenlabs"

    def __init__(
        self,
        api_key: str | None = None,
        voice_id: str = DEFAULT_VOICE_ID,
        model_id: str = DEFAULT_MODEL_ID,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY_CUSTOM, then ELEVENLABS_API_KEY.
            voice_id: Voice to synthesize with
            model_id: ElevenLabs model ID to use
            voice_settings: Voice tuning; persona defaults when None

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = (
            api_key
            or os.getenv("ELEVENLABS_API_KEY_CUSTOM")
            or os.getenv("ELEVENLABS_API_KEY")
        )
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        self.voice_id = voice_id
        self.model_id = model_id
        self.voice_settings = voice_settings or VoiceSettings()

    def _convert(self, text: str, voice_settings: dict) -> bytes:
        audio_generator = self._client.text_to_speech.convert(
            text=text,
            voice_id=self.voice_id,
            model_id=self.model_id,
            output_format=DEFAULT_OUTPUT_FORMAT,
            voice_settings=voice_settings,
        )
        # Collect all audio chunks
        return b"".join(audio_generator)

    async def synthesize(self, text: str) -> AudioPayload:
        """Convert text to speech audio.

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
            TTSRateLimitError: If the account is rate limited
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        try:
            # Run synchronous ElevenLabs client in thread to avoid blocking event loop
            audio_bytes = await asyncio.to_thread(
                self._convert, text.strip(), self.voice_settings.to_dict()
            )
        except Exception as e:
            raise _map_error(e, "API call") from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        return AudioPayload(audio_bytes, "audio/mpeg", self.name)

    async def check_credentials(self, test_voice: bool = False) -> CredentialStatus:
        """Validate the API key by synthesizing a short test phrase.

        Quota information is read from the subscription endpoint when the
        key has access to it; keys scoped to speech only still validate.

        Args:
            test_voice: Synthesize a full sentence and return its audio

        Returns:
            CredentialStatus describing the key
        """
        character_count, character_limit = 0, 10000
        try:
            subscription = await asyncio.to_thread(self._client.user.subscription.get)
            character_count = subscription.character_count or 0
            character_limit = subscription.character_limit or character_limit
        except Exception as e:
            logger.debug(f"Subscription lookup failed, testing speech directly: {e}")

        text = (
            "Olá! Teste de voz realizado com sucesso. A chave está funcionando perfeitamente!"
            if test_voice
            else "Teste"
        )
        try:
            audio = await asyncio.to_thread(
                self._convert, text, {"stability": 0.5, "similarity_boost": 0.75}
            )
        except Exception as e:
            error = _map_error(e, "Voice test")
            return CredentialStatus(
                valid=False,
                character_count=character_count,
                character_limit=character_limit,
                error=str(error),
            )

        return CredentialStatus(
            valid=True,
            character_count=character_count,
            character_limit=character_limit,
            sample_audio=audio if test_voice else None,
        )
