# ==============================================================================
# Tests for CLI Help Commands
# ==============================================================================
"""
Tests that all CLI help commands generate the expected output.

Verifies that every command and subcommand in the sessiontracker CLI:
- Exits with code 0 when invoked with --help
- Contains the expected description text
- Lists the expected subcommands or options

These tests use the real app from sessiontracker.app to ensure the full
command tree is wired up correctly and that Typer can introspect all command
function signatures without errors.
"""

import pytest
from typer.testing import CliRunner

from sessiontracker.app import app

runner = CliRunner()


# ==============================================================================
# Root App
# ==============================================================================


class TestRootHelp:
    """Tests for the root `sessiontracker --help` output."""

    def test_exit_code(self):
        """Root --help exits successfully."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Root --help shows the app description."""
        result = runner.invoke(app, ["--help"])
        assert "Session start/end tracking" in result.output

    def test_lists_all_subcommands(self):
        """Root --help lists every top-level command."""
        result = runner.invoke(app, ["--help"])
        for cmd in ["run", "worker", "status", "pending", "config", "reset", "replay"]:
            assert cmd in result.output, f"Missing command: {cmd}"


# ==============================================================================
# Commands
# ==============================================================================


@pytest.mark.parametrize(
    "args,expected",
    [
        (["run", "--help"], "--no-watchdog"),
        (["worker", "--help"], "--batch-size"),
        (["status", "--help"], "--json"),
        (["pending", "--help"], "--limit"),
        (["config", "--help"], "show"),
        (["config", "show", "--help"], "--json"),
        (["reset", "--help"], "--yes"),
        (["replay", "--help"], "--drain"),
    ],
)
def test_command_help(args, expected):
    """Each command's help exits cleanly and lists its options."""
    result = runner.invoke(app, args)
    assert result.exit_code == 0
    assert expected in result.output


def test_config_show_json(monkeypatch):
    """config show --json prints the effective session settings."""
    import json

    from sessiontracker.utils.config import get_settings

    monkeypatch.setenv("SESSION_LENGTH", "45")
    get_settings.cache_clear()
    try:
        result = runner.invoke(app, ["config", "show", "--json"])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["session"]["length_seconds"] == 2700
    assert data["session"]["start_event"]
