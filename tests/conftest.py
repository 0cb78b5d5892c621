"""Pytest configuration and fixtures for isavoice tests."""

import sys
from pathlib import Path

import pytest

# Add src and the shared test helpers to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

ISAVOICE_ENV_VARS = (
    "ISAVOICE_PROVIDER",
    "ISAVOICE_SPEECH_ENDPOINT",
    "ISAVOICE_API_KEY",
    "ISAVOICE_TIMEOUT",
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_API_KEY_CUSTOM",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path) -> None:
    """Keep tests away from the developer's keys, config and state file."""
    for name in ISAVOICE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ISAVOICE_STATE_PATH", str(tmp_path / "state.json"))

    import isavoice.config

    monkeypatch.setattr(isavoice.config, "_cached_config", None)
    monkeypatch.setattr(isavoice.config, "CONFIG_PATH", tmp_path / "config.toml")
