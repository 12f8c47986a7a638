# ==============================================================================
# Session Tracker CLI
# ==============================================================================
"""
Command-line interface for the session tracker.

Usage:
    sessiontracker --help
    sessiontracker run
    sessiontracker run --no-watchdog
    sessiontracker worker
    sessiontracker status
    sessiontracker pending
    sessiontracker config show
    sessiontracker reset -y
    sessiontracker replay events.jsonl
"""

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
import os

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="sessiontracker",
    help="Session start/end tracking for behavioral event streams",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register process commands from cli.run module
from sessiontracker.cli.run import run_consumer, run_worker

app.command("run")(run_consumer)
app.command("worker")(run_worker)

# Status commands are imported from sessiontracker.cli.status
from sessiontracker.cli.status import show_pending, show_status

app.command("status")(show_status)
app.command("pending")(show_pending)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from cli.config module
from sessiontracker.cli.config import config_show

config_app.command("show")(config_show)

# Register data commands from cli.data and cli.replay modules
from sessiontracker.cli.data import data_reset
from sessiontracker.cli.replay import replay

app.command("reset")(data_reset)
app.command("replay")(replay)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
