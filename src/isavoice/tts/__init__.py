"""Text-to-speech façade: normalization, errors and the speech pipeline."""

from .errors import (
    PlaybackError,
    PlaybackRejectedError,
    SynthesisUnsupportedError,
    TTSAPIError,
    TTSAuthError,
    TTSError,
    TTSRateLimitError,
    TTSTransportError,
)
from .models import AudioPayload, VoiceSettings
from .normalize import currency_to_speech, normalize_for_speech

__all__ = [
    "AudioPayload",
    "PlaybackError",
    "PlaybackRejectedError",
    "SynthesisUnsupportedError",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "TTSPipeline",
    "TTSRateLimitError",
    "TTSTransportError",
    "VoiceSettings",
    "currency_to_speech",
    "normalize_for_speech",
]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "TTSPipeline":
        from .pipeline import TTSPipeline

        return TTSPipeline
    raise AttributeError(f"module 'isavoice.tts' has no attribute {name!r}")
