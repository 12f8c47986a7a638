# ==============================================================================
# Replay Command
# ==============================================================================
"""
Replay command for the session tracker CLI.

Feeds a JSON-lines file of inbound events through the session tracker, the
same way the Kafka consumer would. Useful for backfills and demos.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError

from sessiontracker.cli.shared import C, I, setup_cli_logging
from sessiontracker.utils.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class ReplaySummary:
    """Outcome counts of one replay."""

    tracked: int = 0
    ignored: int = 0
    invalid: int = 0


# ==============================================================================
# Helpers
# ==============================================================================


def read_events(path: Path):
    """
    Yield event dicts from a JSON-lines file.

    Blank lines are ignored. Lines that are not a JSON object are logged and
    skipped.

    Args:
        path: JSON-lines file

    Yields:
        Tuple of (line number, event dict)
    """
    with path.open(encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Line %d: invalid JSON (%s)", line_number, e)
                continue
            if not isinstance(event, dict):
                logger.warning("Line %d: not a JSON object", line_number)
                continue
            yield line_number, event




def replay_events(tracker, path: Path) -> ReplaySummary:
    """
    Feed every event of a JSON-lines file to the tracker, in file order.

    Args:
        tracker: SessionTracker receiving the events
        path: JSON-lines file

    Returns:
        ReplaySummary with tracked, ignored and invalid counts
    """
    summary = ReplaySummary()
    for line_number, event in read_events(path):
        try:
            tracked = tracker.handle(event)
        except ValidationError as e:
            logger.warning("Line %d: %s", line_number, e.errors(include_url=False))
            summary.invalid += 1
            continue
        if tracked:
            summary.tracked += 1
        else:
            summary.ignored += 1
    return summary


# ==============================================================================
# Command
# ==============================================================================


def replay(
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON-lines event file"),
    ],
    sink: Annotated[
        Optional[str],
        typer.Option("--sink", "-s", help="Override SINK_IMPL (kafka, http, log)"),
    ] = None,
    drain: Annotated[
        bool,
        typer.Option(
            "--drain",
            help="Also run session checks that were already due before the replay "
            "(sessions opened by the replay are checked one session length later)",
        ),
    ] = False,
) -> None:
    """Feed a JSON-lines file of events through the session tracker.

    Session state is written to Valkey, so sessions opened by the replay
    are closed later by 'run' or 'worker' once they go quiet.

    Examples:
        sessiontracker replay events.jsonl
        sessiontracker replay events.jsonl --sink log --drain
    """
    from sessiontracker.infrastructure import check_valkey_connection, create_tracker

    settings = get_settings()
    setup_cli_logging(settings.log_level)

    if sink is not None:
        if sink not in ("kafka", "http", "log"):
            raise typer.BadParameter(f"Unknown sink: '{sink}'. Use kafka, http or log")
        settings = settings.model_copy(
            update={"sink": settings.sink.model_copy(update={"impl": sink})}
        )

    if not check_valkey_connection(settings.valkey.url):
        print(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to Valkey{C.RESET}")
        raise typer.Exit(1)

    tracker = create_tracker(settings)
    try:
        summary = replay_events(tracker, file)
        checks = tracker.run_due_checks() if drain else 0
    finally:
        tracker.sink.close()

    print()
    print(
        f"{C.BRIGHT_GREEN}{I.CHECK} Tracked {C.WHITE}{summary.tracked:,}{C.RESET}"
        f"{C.BRIGHT_GREEN} events{C.RESET}"
    )
    if summary.ignored:
        print(f"  {I.BULLET} Ignored {summary.ignored:,} events (own session events or no distinct_id)")
    if summary.invalid:
        print(f"{C.BRIGHT_YELLOW}{I.WARN} Skipped {summary.invalid:,} invalid events{C.RESET}")
    if drain:
        print(f"  {I.BULLET} Ran {C.WHITE}{checks:,}{C.RESET} previously due session checks")
    print()
