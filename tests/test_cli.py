"""Tests for the command line interface."""
import pytest
from typer.testing import CliRunner

from cortexia.cli.app import app
from cortexia.settings import ChatSettings, CompatibleProvider

runner = CliRunner()


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point the CLI at temporary files."""
    monkeypatch.setenv("CORTEXIA_DB_PATH", str(tmp_path / "cortexia.db"))
    monkeypatch.setenv("CORTEXIA_SETTINGS_PATH", str(tmp_path / "settings.json"))
    return tmp_path


class TestConfigureCommand:
    """Tests for `cortexia configure`."""

    def test_show_defaults(self, cli_env):
        """Test that configure without options only shows settings."""
        result = runner.invoke(app, ["configure"])

        assert result.exit_code == 0
        assert "OpenAI" in result.output
        assert not (cli_env / "settings.json").exists()

    def test_save_settings(self, cli_env):
        """Test that options are persisted."""
        result = runner.invoke(app, [
            "configure",
            "--provider", "ollama",
            "--model", "llama3",
            "--temperature", "0.5",
            "--ollama-url", "http://localhost:11434",
        ])

        assert result.exit_code == 0
        saved = ChatSettings.load(cli_env / "settings.json")
        assert saved.provider is CompatibleProvider.OLLAMA
        assert saved.model_id == "llama3"
        assert saved.temperature == 0.5
        assert saved.ollama_base_url == "http://localhost:11434"

    def test_temperature_out_of_range(self, cli_env):
        """Test that invalid temperatures are rejected."""
        result = runner.invoke(app, ["configure", "--temperature", "3"])

        assert result.exit_code != 0


class TestHistoryCommand:
    """Tests for `cortexia history`."""

    def test_empty_history(self, cli_env):
        """Test listing an empty history."""
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No chats yet" in result.output


class TestPromptsCommand:
    """Tests for `cortexia prompts`."""

    def test_empty_library(self, cli_env):
        """Test listing when nothing is saved."""
        result = runner.invoke(app, ["prompts"])

        assert result.exit_code == 0
        assert "No saved prompts" in result.output

    def test_add_edit_delete(self, cli_env):
        """Test managing prompts by their list number."""
        added = runner.invoke(app, ["prompts", "--add", "Explain like I'm five"])
        assert added.exit_code == 0
        assert "Explain like I'm five" in added.output

        edited = runner.invoke(app, ["prompts", "--edit", "1", "--text", "Explain briefly"])
        assert edited.exit_code == 0
        assert "Explain briefly" in edited.output

        deleted = runner.invoke(app, ["prompts", "--delete", "1"])
        assert deleted.exit_code == 0
        assert "No saved prompts" in deleted.output

    def test_unknown_number(self, cli_env):
        """Test that an out-of-range number fails."""
        result = runner.invoke(app, ["prompts", "--delete", "3"])

        assert result.exit_code == 1
        assert "No prompt number 3" in result.output
