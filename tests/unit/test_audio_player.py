"""Unit tests for AudioPlayer validation and error handling logic."""

import asyncio
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pygame
import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from isavoice.audio.player import AudioClip, AudioPlayer
from isavoice.tts.errors import PlaybackError, PlaybackRejectedError


@pytest.fixture
def mock_mixer():
    """pygame mixer that reports ready and plays instantly."""
    with patch("isavoice.audio.player.pygame.mixer") as mixer:
        with patch("isavoice.audio.player.pygame.time.Clock"):
            mixer.get_init.return_value = True
            mixer.music.get_busy.return_value = False
            yield mixer


class TestAudioClipValidation:
    """Test AudioClip validation logic."""

    def test_clip_with_empty_data_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="No audio data provided"):
            AudioPlayer().clip(b"")

    def test_clip_keeps_content_type(self) -> None:
        clip = AudioPlayer().clip(b"data", "audio/wav")
        assert isinstance(clip, AudioClip)
        assert clip.content_type == "audio/wav"


class TestAudioPlayerErrorHandling:
    """Test AudioPlayer error handling."""

    @pytest.mark.asyncio
    async def test_mixer_init_failure_raises_playback_rejected(self) -> None:
        with patch("isavoice.audio.player.pygame.mixer.get_init", return_value=None):
            with patch("isavoice.audio.player.pygame.mixer.init") as mock_init:
                mock_init.side_effect = pygame.error("Audio system unavailable")

                with pytest.raises(
                    PlaybackRejectedError, match="Failed to initialize pygame audio mixer"
                ):
                    await AudioPlayer().clip(b"data").play()

    @pytest.mark.asyncio
    async def test_load_failure_raises_playback_error(self, mock_mixer) -> None:
        mock_mixer.music.load.side_effect = pygame.error("Unrecognized audio format")

        with pytest.raises(PlaybackError, match="Failed to play audio") as exc_info:
            await AudioPlayer().clip(b"not audio").play()

        assert not isinstance(exc_info.value, PlaybackRejectedError)


class TestAudioPlayerPlayback:
    """Test playback and stopping."""

    @pytest.mark.asyncio
    async def test_play_loads_bytes_and_waits_for_end(self, mock_mixer) -> None:
        mock_mixer.music.get_busy.side_effect = [True, True, False]

        await AudioPlayer().clip(b"mp3 data").play()

        loaded = mock_mixer.music.load.call_args.args[0]
        assert loaded.read() == b"mp3 data"
        mock_mixer.music.play.assert_called_once()
        assert mock_mixer.music.get_busy.call_count == 3

    @pytest.mark.asyncio
    async def test_stop_halts_owned_clip(self, mock_mixer) -> None:
        mock_mixer.music.get_busy.return_value = True
        player = AudioPlayer()
        clip = player.clip(b"mp3 data")

        task = asyncio.create_task(clip.play())
        for _ in range(200):
            if player._owner is clip:
                break
            await asyncio.sleep(0.01)

        clip.stop()
        await asyncio.wait_for(task, timeout=2)

        mock_mixer.music.stop.assert_called_once()
        assert player._owner is None

    @pytest.mark.asyncio
    async def test_stopped_clip_never_plays(self, mock_mixer) -> None:
        clip = AudioPlayer().clip(b"mp3 data")
        clip.stop()

        await clip.play()

        mock_mixer.music.play.assert_not_called()

    def test_stop_does_not_halt_other_clip(self, mock_mixer) -> None:
        player = AudioPlayer()
        current = player.clip(b"current")
        old = player.clip(b"old")
        player._owner = current

        old.stop()

        mock_mixer.music.stop.assert_not_called()
        assert player._owner is current

    def test_halt_error_is_logged(self, mock_mixer) -> None:
        player = AudioPlayer()
        clip = player.clip(b"data")
        player._owner = clip
        mock_mixer.music.stop.side_effect = pygame.error("mixer not initialized")

        with patch("isavoice.audio.player.logger") as mock_logger:
            clip.stop()

        mock_logger.warning.assert_called_once()
        assert clip.stop_event.is_set()
