"""Speech backends, tried in order by the TTS pipeline."""

from .base import BackendResult, SpeechBackend, SpeechOutcome
from .cached import CachedAudioBackend
from .native import NativeSynthesisBackend
from .remote import RemoteSynthesisBackend

__all__ = [
    "BackendResult",
    "CachedAudioBackend",
    "NativeSynthesisBackend",
    "RemoteSynthesisBackend",
    "SpeechBackend",
    "SpeechOutcome",
]
