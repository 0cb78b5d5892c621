"""Audio output package for isavoice.

This package provides the single-flight playback coordinator together with
its two output adapters: pygame audio clips and native speech synthesis.
"""

from .coordinator import ActiveAudioHandle, Playable, PlaybackCoordinator
from .synthesis import SpeechOptions, SystemSpeechSynthesizer, Utterance

__all__ = [
    "ActiveAudioHandle",
    "Playable",
    "PlaybackCoordinator",
    "SpeechOptions",
    "SystemSpeechSynthesizer",
    "Utterance",
]
