"""Configuration management for isavoice.

Loads configuration from ~/.config/isavoice/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "isavoice"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_STATE_PATH = Path.home() / ".local" / "state" / "isavoice" / "state.json"

DEFAULT_CONFIG = """\
# isavoice configuration

[remote]
# Remote speech provider: "edge" (hosted text-to-speech function) or
# "elevenlabs" (direct API access)
provider = "edge"

# URL of the text-to-speech function (edge provider only)
endpoint = ""

# Seconds to wait for remote speech before falling back to the native
# voice; 0 waits indefinitely
timeout = 30.0

[native]
# On-device speech synthesis used when remote audio is unavailable
lang = "pt-BR"
rate = 1.0
pitch = 1.0
volume = 1.0

[cache]
# Reuse remote audio for repeated phrases during a session
enabled = true

[state]
# Persistent flags (voice enabled, last greeting date)
path = "~/.local/state/isavoice/state.json"

# API keys are read from environment variables, not this file:
#   ISAVOICE_API_KEY    - key for the text-to-speech function
#   ELEVENLABS_API_KEY  - ElevenLabs provider
"""


@dataclass(frozen=True)
class RemoteConfig:
    """Remote speech provider configuration."""

    provider: str
    endpoint: str | None
    timeout: float | None


@dataclass(frozen=True)
class NativeConfig:
    """Native speech synthesis configuration."""

    lang: str
    rate: float
    pitch: float
    volume: float


@dataclass(frozen=True)
class CacheConfig:
    """Audio cache configuration."""

    enabled: bool


@dataclass(frozen=True)
class StateConfig:
    """Persistent state configuration."""

    path: Path


@dataclass(frozen=True)
class IsaVoiceConfig:
    """Top-level isavoice configuration."""

    remote: RemoteConfig
    native: NativeConfig
    cache: CacheConfig
    state: StateConfig


_cached_config: IsaVoiceConfig | None = None


def default_config() -> IsaVoiceConfig:
    """Configuration used when no file is involved (library use, tests)."""
    return parse_config(tomllib.loads(DEFAULT_CONFIG))


def generate_config(path: Path = CONFIG_PATH) -> Path:
    """Generate default config file at ~/.config/isavoice/config.toml."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _timeout(value: str | float | None) -> float | None:
    if value in (None, ""):
        return None
    seconds = float(value)
    return seconds if seconds > 0 else None


def parse_config(data: dict) -> IsaVoiceConfig:
    """Build an IsaVoiceConfig from parsed TOML with env var overrides.

    Raises:
        ValueError: If required values are missing
    """
    remote = data.get("remote", {})
    native = data.get("native", {})
    cache = data.get("cache", {})
    state = data.get("state", {})

    # Validate required fields
    missing = []
    if "provider" not in remote:
        missing.append("remote.provider")
    if "lang" not in native:
        missing.append("native.lang")
    if "enabled" not in cache:
        missing.append("cache.enabled")
    if missing:
        raise ValueError(f"Missing required config values: {', '.join(missing)}")

    endpoint = os.getenv("ISAVOICE_SPEECH_ENDPOINT", remote.get("endpoint", ""))
    state_path = os.getenv("ISAVOICE_STATE_PATH", state.get("path", ""))

    return IsaVoiceConfig(
        remote=RemoteConfig(
            provider=os.getenv("ISAVOICE_PROVIDER", remote["provider"]),
            endpoint=endpoint or None,
            timeout=_timeout(os.getenv("ISAVOICE_TIMEOUT", remote.get("timeout", 30.0))),
        ),
        native=NativeConfig(
            lang=native["lang"],
            rate=float(native.get("rate", 1.0)),
            pitch=float(native.get("pitch", 1.0)),
            volume=float(native.get("volume", 1.0)),
        ),
        cache=CacheConfig(enabled=bool(cache["enabled"])),
        state=StateConfig(
            path=Path(state_path).expanduser() if state_path else DEFAULT_STATE_PATH
        ),
    )


def load_config(path: Path | None = None) -> IsaVoiceConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Args:
        path: Config file to read (defaults to ~/.config/isavoice/config.toml)

    Returns:
        Loaded and validated IsaVoiceConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    global _cached_config
    if path is None and _cached_config is not None:
        return _cached_config

    config_path = path or CONFIG_PATH
    if not config_path.exists():
        generated = generate_config(config_path)
        print(
            f"No config found. Generated {generated}. Review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    try:
        config = parse_config(data)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        print(f"Edit {config_path} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1) from None

    if path is None:
        _cached_config = config
    return config
