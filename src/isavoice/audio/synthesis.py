"""Native on-device speech synthesis.

Speaks directly through the operating system's speech engine (say on
macOS, espeak-ng/espeak on Linux, SAPI on Windows). Used as the last
fallback when remote audio cannot be fetched or played.
"""

import asyncio
import logging
import platform
import re
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

from ..tts.errors import PlaybackError, SynthesisUnsupportedError

logger = logging.getLogger(__name__)

# Best Brazilian Portuguese voices, in order of preference
PREFERRED_VOICES = [
    "Microsoft Daniel",
    "Google português do Brasil",
    "Daniel",
    "Luciana",
]

_BASE_WORDS_PER_MINUTE = 175
_MAC_VOICE_RE = re.compile(r"^(.+?)\s{2,}([a-z]{2}[_-][A-Za-z]{2})\b")


@dataclass
class SpeechOptions:
    """Options for a native speech utterance.

    Args:
        lang: BCP 47 language tag
        rate: Speaking rate multiplier (0.1-10.0)
        pitch: Pitch multiplier (0.0-2.0)
        volume: Volume (0.0-1.0)
        voice: Explicit voice name; preferred voices are used when None
        on_end: Called after the utterance finishes naturally
        on_error: Called with the exception when the utterance fails
    """

    lang: str = "pt-BR"
    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0
    voice: str | None = None
    on_end: Callable[[], None] | None = None
    on_error: Callable[[BaseException], None] | None = None

    def __post_init__(self) -> None:
        """Validate speech options."""
        if not 0.1 <= self.rate <= 10.0:
            raise ValueError("rate must be between 0.1 and 10.0")
        if not 0.0 <= self.pitch <= 2.0:
            raise ValueError("pitch must be between 0.0 and 2.0")
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError("volume must be between 0.0 and 1.0")


class Utterance:
    """One native speech utterance, backed by an OS speech process."""

    def __init__(self, command: list[str], text: str) -> None:
        self.command = command
        self.text = text
        self._process: asyncio.subprocess.Process | None = None
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def play(self) -> None:
        """Speak the text and wait until the speech process exits.

        Raises:
            PlaybackError: If the speech process cannot start or fails
        """
        if self._stopped:
            return

        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PlaybackError(f"Failed to start native speech: {e}", e) from e

        # stop() may have been called while the process was spawning
        if self._stopped:
            self._terminate()

        _, stderr = await self._process.communicate()

        if self._stopped:
            return
        if self._process.returncode != 0:
            raise PlaybackError(
                f"Native speech failed with code {self._process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )

    def stop(self) -> None:
        self._stopped = True
        self._terminate()

    def _terminate(self) -> None:
        if self._process is not None and self._process.returncode is None:
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass


class SystemSpeechSynthesizer:
    """Native speech synthesizer using the operating system's voices.

    Note: Audio quality will be robotic compared to the remote voice.
    """

    def __init__(
        self,
        default_options: SpeechOptions | None = None,
        system: str | None = None,
    ) -> None:
        """Initialize synthesizer and detect platform.

        Args:
            default_options: Options applied when a call passes none
            system: Platform name override ("Darwin", "Linux", "Windows")
        """
        self.platform = system or platform.system()
        self.default_options = default_options or SpeechOptions()
        self._binary = self._find_binary()
        self._voices: list[tuple[str, str]] | None = None

    def _find_binary(self) -> str | None:
        if self.platform == "Darwin":
            return shutil.which("say")
        if self.platform == "Linux":
            return shutil.which("espeak-ng") or shutil.which("espeak")
        if self.platform == "Windows":
            return shutil.which("powershell")
        return None

    def is_supported(self) -> bool:
        return self._binary is not None

    def utterance(self, text: str, options: SpeechOptions | None = None) -> Utterance:
        """Create an utterance for text without starting it.

        Raises:
            SynthesisUnsupportedError: If native synthesis is not supported
        """
        if self._binary is None:
            raise SynthesisUnsupportedError(
                f"Native speech not supported on {self.platform}"
            )
        return Utterance(self.build_command(text, options or self.default_options), text)

    def build_command(self, text: str, options: SpeechOptions) -> list[str]:
        """Build the platform speech command for text."""
        words_per_minute = str(int(_BASE_WORDS_PER_MINUTE * options.rate))
        voice = options.voice or self.preferred_voice(options.lang)

        if self.platform == "Darwin":
            cmd = [self._binary, "-r", words_per_minute]
            if voice:
                cmd.extend(["-v", voice])
            cmd.append(text)
            return cmd

        if self.platform == "Linux":
            return [
                self._binary,
                "-v",
                (options.voice or options.lang).lower(),
                "-s",
                words_per_minute,
                "-p",
                str(int(50 * options.pitch)),
                "-a",
                str(int(100 * options.volume)),
                text,
            ]

        # Windows: SAPI rate is -10..10 around 0
        sapi_rate = max(-10, min(10, round((options.rate - 1.0) * 10)))
        ps_script = (
            "Add-Type -AssemblyName System.Speech; "
            "$speak = New-Object System.Speech.Synthesis.SpeechSynthesizer; "
            f"$speak.Rate = {sapi_rate}; "
            f"$speak.Volume = {int(options.volume * 100)}; "
        )
        if voice:
            ps_script += f"$speak.SelectVoice({_ps_quote(voice)}); "
        ps_script += f"$speak.Speak({_ps_quote(text)}); $speak.Dispose()"
        return [self._binary, "-NoProfile", "-Command", ps_script]

    def preferred_voice(self, lang: str) -> str | None:
        """Pick the best installed voice for lang from PREFERRED_VOICES."""
        if self.platform == "Linux":
            return None

        prefix = lang.split("-")[0].lower()
        voices = self.list_voices()
        for preferred in PREFERRED_VOICES:
            for name, voice_lang in voices:
                if preferred in name and voice_lang.lower().startswith(prefix):
                    return name
        return None

    def list_voices(self) -> list[tuple[str, str]]:
        """List installed (name, language) voice pairs. Cached after first call."""
        if self._voices is not None:
            return self._voices

        voices = []
        try:
            if self.platform == "Darwin" and self._binary:
                result = subprocess.run(
                    [self._binary, "-v", "?"], capture_output=True, text=True, check=True
                )
                for line in result.stdout.splitlines():
                    match = _MAC_VOICE_RE.match(line)
                    if match:
                        voices.append((match.group(1).strip(), match.group(2)))

            elif self.platform == "Windows" and self._binary:
                ps_script = (
                    "Add-Type -AssemblyName System.Speech; "
                    "(New-Object System.Speech.Synthesis.SpeechSynthesizer)"
                    ".GetInstalledVoices() | ForEach-Object { "
                    "$_.VoiceInfo.Name + '|' + $_.VoiceInfo.Culture.Name }"
                )
                result = subprocess.run(
                    [self._binary, "-NoProfile", "-Command", ps_script],
                    capture_output=True,
                    text=True,
                    check=True,
                )
                for line in result.stdout.splitlines():
                    name, _, voice_lang = line.strip().partition("|")
                    if name:
                        voices.append((name, voice_lang))

        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning(f"Failed to list system voices: {e}")

        self._voices = voices
        return voices


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"
