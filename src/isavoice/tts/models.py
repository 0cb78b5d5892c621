"""TTS data models with validation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioPayload:
    """Playable audio returned by a remote speech provider.

    Args:
        audio: Encoded audio bytes (MP3 or WAV)
        content_type: MIME type reported by the provider
        source: Provider name that produced the audio
    """

    audio: bytes
    content_type: str = "audio/mpeg"
    source: str = "remote"

    def __post_init__(self) -> None:
        """Validate payload."""
        if not self.audio:
            raise ValueError("audio cannot be empty")


@dataclass
class VoiceSettings:
    """Voice generation settings.

    Defaults are tuned for the ISA persona: expressive, slightly fast
    Brazilian Portuguese.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
        speed: Speaking speed (0.7-1.2)
    """

    stability: float = 0.4
    similarity_boost: float = 0.75
    style: float = 0.6
    use_speaker_boost: bool = True
    speed: float = 1.05

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")
        if not 0.7 <= self.speed <= 1.2:
            raise ValueError("speed must be between 0.7 and 1.2")

    def to_dict(self) -> dict:
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
            "speed": self.speed,
        }


@dataclass(frozen=True)
class CredentialStatus:
    """Result of validating a speech provider API key.

    Args:
        valid: Whether the key could synthesize speech
        character_count: Characters consumed in the current period
        character_limit: Characters allowed in the current period
        sample_audio: Test utterance audio when requested
        error: Failure description when the key is not valid
    """

    valid: bool
    character_count: int = 0
    character_limit: int = 10000
    sample_audio: bytes | None = None
    error: str | None = None

    @property
    def characters_remaining(self) -> int:
        return max(self.character_limit - self.character_count, 0)
