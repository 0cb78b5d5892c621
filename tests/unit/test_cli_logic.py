"""Unit tests for CLI logic and commands."""

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from isavoice import config as config_module
from isavoice.cli import app, process_text_input
from isavoice.config import generate_config
from isavoice.tts.models import CredentialStatus
from test_helpers import RecordingPipeline

runner = CliRunner()


@pytest.fixture
def config_file() -> Path:
    """Write the default config where load_config() looks for it."""
    return generate_config(config_module.CONFIG_PATH)


@pytest.fixture
def mock_pipeline():
    pipeline = MagicMock()
    pipeline.speak = AsyncMock(
        return_value={"spoken": True, "backend": "native", "cached": False, "outcome": "spoken"}
    )
    with patch("isavoice.cli.TTSPipeline") as mock_class:
        mock_class.create.return_value = pipeline
        yield mock_class, pipeline


def test_process_text_input_with_valid_text() -> None:
    """Test that process_text_input returns text when provided."""
    assert process_text_input("Olá, Ana") == "Olá, Ana"


def test_process_text_input_preserves_whitespace() -> None:
    assert process_text_input("  Olá   Ana  ") == "  Olá   Ana  "


@pytest.mark.parametrize("text", [None, "", "   "])
def test_process_text_input_without_text_raises_value_error(text) -> None:
    """Test that process_text_input raises ValueError when there is nothing to say."""
    with pytest.raises(ValueError, match="No text provided"):
        process_text_input(text)


class TestSpeakCommand:
    """Test the speak command with a mocked pipeline."""

    def test_speaks_argument(self, config_file, mock_pipeline) -> None:
        mock_class, pipeline = mock_pipeline

        result = runner.invoke(app, ["speak", "Saldo R$ 10,00"])

        assert result.exit_code == 0
        pipeline.speak.assert_awaited_once_with("Saldo R$ 10,00", force_native=False)
        assert mock_class.create.call_args.kwargs["spell_out"] is True

    def test_native_and_digits_flags(self, config_file, mock_pipeline) -> None:
        mock_class, pipeline = mock_pipeline

        result = runner.invoke(app, ["speak", "Oi", "--native", "--digits"])

        assert result.exit_code == 0
        pipeline.speak.assert_awaited_once_with("Oi", force_native=True)
        assert mock_class.create.call_args.kwargs["spell_out"] is False

    def test_provider_override(self, config_file, mock_pipeline) -> None:
        mock_class, _ = mock_pipeline

        runner.invoke(app, ["speak", "Oi", "-p", "elevenlabs"])

        config = mock_class.create.call_args.args[0]
        assert config.remote.provider == "elevenlabs"

    def test_reads_text_from_file(self, config_file, mock_pipeline, tmp_path) -> None:
        _, pipeline = mock_pipeline
        text_file = tmp_path / "texto.txt"
        text_file.write_text("Boa tarde", encoding="utf-8")

        result = runner.invoke(app, ["speak", "-f", str(text_file)])

        assert result.exit_code == 0
        pipeline.speak.assert_awaited_once_with("Boa tarde", force_native=False)

    def test_missing_file_fails(self, config_file, mock_pipeline, tmp_path) -> None:
        result = runner.invoke(app, ["speak", "-f", str(tmp_path / "nope.txt")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_reads_stdin(self, config_file, mock_pipeline) -> None:
        _, pipeline = mock_pipeline

        result = runner.invoke(app, ["speak"], input="Bom dia\n")

        assert result.exit_code == 0
        pipeline.speak.assert_awaited_once_with("Bom dia", force_native=False)

    def test_empty_input_fails(self, config_file, mock_pipeline) -> None:
        result = runner.invoke(app, ["speak"], input="")

        assert result.exit_code == 1
        assert "Error: No text provided" in result.output

    def test_unspoken_text_fails(self, config_file, mock_pipeline) -> None:
        _, pipeline = mock_pipeline
        pipeline.speak.return_value = {
            "spoken": False,
            "backend": "native",
            "cached": False,
            "outcome": "unsupported",
        }

        result = runner.invoke(app, ["speak", "Oi"])

        assert result.exit_code == 1
        assert "last outcome: unsupported" in result.output

    def test_voice_disabled_is_not_an_error(self, config_file, mock_pipeline) -> None:
        mock_class, _ = mock_pipeline
        runner.invoke(app, ["voice", "off"])

        result = runner.invoke(app, ["speak", "Oi"])

        assert result.exit_code == 0
        assert "Voice is disabled" in result.output
        mock_class.create.assert_not_called()

    def test_first_run_generates_config(self, mock_pipeline) -> None:
        result = runner.invoke(app, ["speak", "Oi"])

        assert result.exit_code == 1
        assert config_module.CONFIG_PATH.exists()


class TestNormalizeCommand:
    def test_spells_out_currency(self) -> None:
        result = runner.invoke(app, ["normalize", "Saldo: R$ 10,00 💰"])

        assert result.exit_code == 0
        assert result.output.strip() == "Saldo: dez reais"

    def test_digits(self) -> None:
        result = runner.invoke(app, ["normalize", "Saldo: R$ 10,00", "--digits"])
        assert result.output.strip() == "Saldo: 10 reais"


class TestVoiceCommand:
    def test_status_defaults_to_enabled(self, config_file) -> None:
        result = runner.invoke(app, ["voice"])
        assert result.output.strip() == "Voice enabled"

    def test_off_persists(self, config_file, tmp_path) -> None:
        runner.invoke(app, ["voice", "off"])

        result = runner.invoke(app, ["voice", "status"])

        assert result.output.strip() == "Voice disabled"
        state = json.loads((tmp_path / "state.json").read_text())
        assert state["isa_voice_enabled"] == "false"

    def test_unknown_action(self, config_file) -> None:
        result = runner.invoke(app, ["voice", "maybe"])

        assert result.exit_code == 1
        assert "Unknown action 'maybe'" in result.output


class TestGreetCommand:
    """Test the greet command against a JSON data file."""

    @pytest.fixture
    def data_file(self, tmp_path) -> Path:
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"goals": [{"name": "Viagem", "target_amount": 3000}]}))
        return path

    def test_greets_once_per_run(self, config_file, data_file) -> None:
        pipeline = RecordingPipeline()
        with patch("isavoice.cli.TTSPipeline") as mock_class:
            mock_class.create.return_value = pipeline
            result = runner.invoke(app, ["greet", "goals", "--data", str(data_file)])

        assert result.exit_code == 0
        assert "Greeted goals" in result.output
        assert pipeline.spoken == [
            "Você tem 1 meta ativa no seu perfil. "
            "Acesse a aba planejamento para atualizar suas metas."
        ]

    def test_dashboard_welcome_only_once_per_day(self, config_file, data_file) -> None:
        first, second = RecordingPipeline(), RecordingPipeline()
        with patch("isavoice.cli.TTSPipeline") as mock_class:
            mock_class.create.side_effect = [first, second]
            args = ["greet", "dashboard", "--data", str(data_file), "--name", "Ana Lima"]
            runner.invoke(app, args)
            runner.invoke(app, args)

        assert len(first.spoken) == 2
        assert "Sou a ISA" in first.spoken[0]
        assert len(second.spoken) == 1

    def test_other_page(self, config_file, data_file) -> None:
        result = runner.invoke(app, ["greet", "ai", "--data", str(data_file)])

        assert result.exit_code == 0
        assert "has no greeting" in result.output

    def test_invalid_data_file(self, config_file, tmp_path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("[")

        result = runner.invoke(app, ["greet", "card", "--data", str(bad)])

        assert result.exit_code == 1
        assert "Failed to load financial data" in result.output

    def test_non_object_data_file(self, config_file, tmp_path) -> None:
        bad = tmp_path / "list.json"
        bad.write_text("[1, 2]")

        result = runner.invoke(app, ["greet", "card", "--data", str(bad)])

        assert result.exit_code == 1
        assert "Error: Failed to load financial data" in result.output
        assert "expected a JSON object" in result.output


class TestCheckKeyCommand:
    def test_missing_key(self) -> None:
        result = runner.invoke(app, ["check-key"])

        assert result.exit_code == 1
        assert "ElevenLabs API key not found" in result.output

    def test_valid_key(self) -> None:
        status = CredentialStatus(valid=True, character_count=100, character_limit=1000)
        with patch("isavoice.providers.elevenlabs.ElevenLabsProvider") as mock_class:
            mock_class.return_value.check_credentials = AsyncMock(return_value=status)
            result = runner.invoke(app, ["check-key"])

        assert result.exit_code == 0
        assert "✓ API key valid" in result.output
        assert "Characters used: 100/1000 (900 remaining)" in result.output

    def test_invalid_key(self) -> None:
        status = CredentialStatus(valid=False, error="Authentication failed: 401")
        with patch("isavoice.providers.elevenlabs.ElevenLabsProvider") as mock_class:
            mock_class.return_value.check_credentials = AsyncMock(return_value=status)
            result = runner.invoke(app, ["check-key"])

        assert result.exit_code == 1
        assert "Invalid API key: Authentication failed: 401" in result.output
