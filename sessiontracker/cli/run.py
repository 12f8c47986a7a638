# ==============================================================================
# Run Commands
# ==============================================================================
"""
Foreground process commands for the session tracker CLI.

- run: consume inbound events from Kafka (and drain due checks)
- worker: drain due session checks only
"""

from typing import Annotated

import typer

from sessiontracker.cli.shared import C, I
from sessiontracker.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def run_consumer(
    no_watchdog: Annotated[
        bool,
        typer.Option(
            "--no-watchdog",
            help="Do not run due session checks in this process (use 'worker' instead)",
        ),
    ] = False,
) -> None:
    """Consume inbound events and track sessions.

    Runs in the foreground until interrupted (Ctrl+C / SIGTERM).

    Examples:
        sessiontracker run
        sessiontracker run --no-watchdog
    """
    from sessiontracker.consumers import SessionTrackerConsumer
    from sessiontracker.infrastructure import check_valkey_connection, create_tracker

    settings = get_settings()

    if not check_valkey_connection(settings.valkey.url):
        print(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to Valkey{C.RESET}")
        raise typer.Exit(1)

    tracker = create_tracker(settings)
    runner = SessionTrackerConsumer.from_settings(
        settings, tracker, run_watchdog=not no_watchdog
    )
    runner.run()


def run_worker(
    batch_size: Annotated[
        int, typer.Option("--batch-size", "-b", help="Due checks to run per iteration")
    ] = 0,
) -> None:
    """Run due session checks without consuming events.

    Any number of workers can share the same Valkey queue.

    Examples:
        sessiontracker worker
        sessiontracker worker --batch-size 500
    """
    from sessiontracker.infrastructure import check_valkey_connection, create_tracker
    from sessiontracker.worker import WatchdogWorker

    settings = get_settings()

    if not check_valkey_connection(settings.valkey.url):
        print(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to Valkey{C.RESET}")
        raise typer.Exit(1)

    tracker = create_tracker(settings)
    worker = WatchdogWorker(
        tracker,
        batch_size=batch_size or settings.consumer.worker_batch_size,
        log_level=settings.log_level,
    )
    worker.run()
