"""Audio output for pre-rendered speech using pygame."""

# ruff: noqa: E402
import os

# Suppress pygame's welcome message BEFORE any pygame import
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import warnings

# Suppress pygame's pkg_resources deprecation warning spam
warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import asyncio
import io
import logging
import threading

import pygame

from ..tts.errors import PlaybackError, PlaybackRejectedError

logger = logging.getLogger(__name__)


class AudioPlayer:
    """Shared pygame mixer wrapper.

    The mixer is initialised on first playback. A mixer that cannot be
    opened (no output device, audio server denied) raises
    PlaybackRejectedError so callers can fall back to native speech.
    """

    def __init__(self, poll_hz: int = 20) -> None:
        self.poll_hz = poll_hz
        self._lock = threading.Lock()
        self._owner: "AudioClip | None" = None

    def clip(self, audio_data: bytes, content_type: str = "audio/mpeg") -> "AudioClip":
        """Create a playable clip for audio bytes.

        Raises:
            ValueError: If no audio data is provided
        """
        return AudioClip(self, audio_data, content_type)

    def _ensure_mixer(self) -> None:
        if pygame.mixer.get_init():
            return
        try:
            pygame.mixer.init()
        except pygame.error as e:
            raise PlaybackRejectedError(
                f"Failed to initialize pygame audio mixer: {e}", e
            ) from e

    def _play_blocking(self, clip: "AudioClip") -> None:
        """Synchronous playback, run in a worker thread."""
        with self._lock:
            if clip.stop_event.is_set():
                return
            self._ensure_mixer()
            try:
                pygame.mixer.music.load(io.BytesIO(clip.audio_data))
                pygame.mixer.music.play()
            except pygame.error as e:
                raise PlaybackError(f"Failed to play audio: {e}", e) from e
            self._owner = clip

        clock = pygame.time.Clock()
        try:
            while not clip.stop_event.is_set() and pygame.mixer.music.get_busy():
                clock.tick(self.poll_hz)
        finally:
            with self._lock:
                if self._owner is clip:
                    self._owner = None

    def _halt(self, clip: "AudioClip") -> None:
        with self._lock:
            if self._owner is clip:
                pygame.mixer.music.stop()
                self._owner = None


class AudioClip:
    """In-memory audio that plays once through the shared AudioPlayer."""

    def __init__(
        self, player: AudioPlayer, audio_data: bytes, content_type: str = "audio/mpeg"
    ) -> None:
        if not audio_data:
            raise ValueError("No audio data provided")
        self.player = player
        self.audio_data = audio_data
        self.content_type = content_type
        self.stop_event = threading.Event()

    async def play(self) -> None:
        """Play through the system speakers until finished or stopped.

        Raises:
            PlaybackRejectedError: If the audio device cannot be opened
            PlaybackError: If playback fails
        """
        await asyncio.to_thread(self.player._play_blocking, self)

    def stop(self) -> None:
        self.stop_event.set()
        try:
            self.player._halt(self)
        except pygame.error as e:
            logger.warning(f"Failed to halt audio: {e}")
