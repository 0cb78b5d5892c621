"""Typer CLI definition for isavoice."""

import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

import typer

from .config import IsaVoiceConfig, load_config
from .greeting import (
    GreetingSequencer,
    PageType,
    SnapshotBuilder,
    StaticFinancialData,
    UserProfile,
)
from .state import GreetingState, JsonFileStateStore, MemoryStateStore, VoicePreferences
from .tts.errors import TTSAuthError
from .tts.normalize import normalize_for_speech
from .tts.pipeline import TTSPipeline

app = typer.Typer(help="ISA voice assistant: speak text and page greetings")


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def _fail(message: str, error: BaseException | None, debug: bool) -> None:
    """Print an error the way every command does and exit with status 1."""
    if debug and error is not None:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _preferences(config: IsaVoiceConfig) -> VoicePreferences:
    return VoicePreferences(JsonFileStateStore(config.state.path))


def process_text_input(text: str | None) -> str:
    """Return the text to speak.

    Raises:
        ValueError: If no text is provided
    """
    if text is None or not text.strip():
        raise ValueError("No text provided")
    return text


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to speak"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    native: bool = typer.Option(
        False, "--native", help="Use the system voice only, skip remote speech"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Remote provider (from config if omitted)"
    ),
    digits: bool = typer.Option(
        False, "--digits", help="Read currency amounts as numerals"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Speak text through the fallback chain (cache, remote, native)."""
    _configure_logging(debug)

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text(encoding="utf-8")
            except FileNotFoundError as e:
                _fail(f"File not found: {file}", e, debug)
            except (PermissionError, UnicodeDecodeError) as e:
                _fail(f"Unable to read file: {file}", e, debug)
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        speech_text = process_text_input(text)
    except ValueError as e:
        _fail(str(e), e, debug)

    config = load_config()
    if provider:
        config = dataclasses.replace(
            config, remote=dataclasses.replace(config.remote, provider=provider)
        )
    preferences = _preferences(config)
    if not preferences.is_voice_enabled():
        typer.echo("Voice is disabled. Run 'isavoice voice on' to enable it.", err=True)
        raise typer.Exit(0)

    pipeline = TTSPipeline.create(config, preferences=preferences, spell_out=not digits)
    result = asyncio.run(pipeline.speak(speech_text, force_native=native))
    if debug:
        typer.echo(f"Debug - Result: {result}", err=True)
    if not result["spoken"]:
        _fail(f"Could not speak text (last outcome: {result['outcome']})", None, debug)


@app.command()
def normalize(
    text: str = typer.Argument(..., help="Text to normalize"),
    digits: bool = typer.Option(
        False, "--digits", help="Read currency amounts as numerals"
    ),
) -> None:
    """Print text the way it will be spoken."""
    typer.echo(normalize_for_speech(text, spell_out=not digits))


@app.command()
def voice(
    action: str = typer.Argument("status", help="on, off or status"),
) -> None:
    """Enable, disable or show the automatic voice setting."""
    action = action.lower()
    if action not in ("on", "off", "status"):
        _fail(f"Unknown action '{action}'. Use on, off or status", None, False)

    preferences = _preferences(load_config())
    if action != "status":
        preferences.set_voice_enabled(action == "on")
    state = "enabled" if preferences.is_voice_enabled() else "disabled"
    typer.echo(f"Voice {state}")


@app.command()
def greet(
    page: str = typer.Argument(..., help="Page type: dashboard, planner, card, goals"),
    data: Path = typer.Option(..., "--data", help="JSON file with financial data"),
    name: str = typer.Option("Cliente", "--name", help="User's full name"),
    user_id: int = typer.Option(1, "--user-id", help="User registration number"),
    initial_balance: float = typer.Option(0.0, "--initial-balance"),
    credit_limit: float = typer.Option(0.0, "--credit-limit"),
    credit_used: float = typer.Option(0.0, "--credit-used"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Run the page greeting once, as a fresh session would."""
    _configure_logging(debug)

    try:
        provider = StaticFinancialData.from_file(data)
    except (OSError, ValueError) as e:
        _fail(f"Failed to load financial data: {e}", e, debug)

    config = load_config()
    persistent = JsonFileStateStore(config.state.path)
    preferences = VoicePreferences(persistent)
    pipeline = TTSPipeline.create(config, preferences=preferences)
    sequencer = GreetingSequencer(
        pipeline,
        GreetingState(persistent, MemoryStateStore()),
        preferences,
        SnapshotBuilder(provider),
        UserProfile(user_id, name, initial_balance, credit_limit, credit_used),
    )

    page_type = PageType.parse(page)
    if page_type is PageType.OTHER:
        typer.echo(f"Page '{page}' has no greeting", err=True)
        raise typer.Exit(0)

    if asyncio.run(sequencer.greet(page_type)):
        typer.echo(f"Greeted {page_type.value}")
    else:
        typer.echo(f"No greeting due for {page_type.value}")


@app.command("check-key")
def check_key(
    test_voice: bool = typer.Option(
        False, "--test-voice", help="Also synthesize a short sample"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Validate the ElevenLabs API key and show the character quota."""
    _configure_logging(debug)
    from .providers.elevenlabs import ElevenLabsProvider

    try:
        provider = ElevenLabsProvider()
    except TTSAuthError as e:
        _fail(str(e), e, debug)

    status = asyncio.run(provider.check_credentials(test_voice=test_voice))

    if not status.valid:
        _fail(f"Invalid API key: {status.error}", None, debug)

    typer.echo("✓ API key valid")
    typer.echo(
        f"Characters used: {status.character_count}/{status.character_limit} "
        f"({status.characters_remaining} remaining)"
    )
    if status.sample_audio is not None:
        typer.echo(f"Sample audio: {len(status.sample_audio)} bytes")
