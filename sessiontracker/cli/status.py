# ==============================================================================
# Status Command
# ==============================================================================
"""
Status command for the session tracker CLI.

Displays Valkey reachability, the number of tracked sessions and the
pending session checks. The pending command lists the scheduled checks
in a table.
"""

import json as json_module
import time
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from sessiontracker.cli.shared import C, I
from sessiontracker.utils.config import get_settings


# ==============================================================================
# Data Collection
# ==============================================================================


def _collect_status() -> dict[str, Any]:
    """Collect tracker status from Valkey."""
    from sessiontracker.infrastructure import (
        check_valkey_connection,
        create_scheduler,
        create_valkey_client,
    )

    settings = get_settings()
    config = settings.session.to_tracker_config()

    status: dict[str, Any] = {
        "valkey": {
            "host": settings.valkey.host,
            "port": settings.valkey.port,
            "reachable": check_valkey_connection(settings.valkey.url),
        },
        "session_length_seconds": config.session_length_seconds,
        "active_sessions": None,
        "pending_checks": None,
        "due_checks": None,
    }
    if not status["valkey"]["reachable"]:
        return status

    client = create_valkey_client(settings.valkey.url)
    try:
        scheduler = create_scheduler(settings, client)
        status["active_sessions"] = sum(
            1 for _ in client.scan_iter(match=config.session_key("*"), count=500)
        )
        status["pending_checks"] = scheduler.pending_count()
        status["due_checks"] = scheduler.due_count()
    finally:
        client.close()
    return status


# ==============================================================================
# Command
# ==============================================================================


def show_status(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show session tracker status.

    Examples:
        sessiontracker status
        sessiontracker status --json
    """
    status = _collect_status()

    if json_output:
        print(json_module.dumps(status, indent=2))
        if not status["valkey"]["reachable"]:
            raise typer.Exit(1)
        return

    valkey = status["valkey"]
    print()
    print(f"{C.BOLD}Session Tracker{C.RESET}")
    print()
    if not valkey["reachable"]:
        print(
            f"{C.BRIGHT_RED}{I.CROSS} Valkey unreachable at "
            f"{C.WHITE}{valkey['host']}:{valkey['port']}{C.RESET}"
        )
        print()
        raise typer.Exit(1)

    print(
        f"{C.BRIGHT_GREEN}{I.CHECK} Valkey reachable at "
        f"{C.WHITE}{valkey['host']}:{valkey['port']}{C.RESET}"
    )
    print(f"  {I.BULLET} Session length:  {C.WHITE}{status['session_length_seconds']}s{C.RESET}")
    print(f"  {I.BULLET} Active sessions: {C.WHITE}{status['active_sessions']:,}{C.RESET}")
    print(f"  {I.BULLET} Pending checks:  {C.WHITE}{status['pending_checks']:,}{C.RESET}")

    due = status["due_checks"]
    if due:
        print(f"  {C.BRIGHT_YELLOW}{I.WARN} Due checks:      {due:,} (is a worker running?){C.RESET}")
    else:
        print(f"  {I.BULLET} Due checks:      {C.WHITE}0{C.RESET}")
    print()


def show_pending(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum checks to list")] = 20,
) -> None:
    """List scheduled session checks, soonest first.

    Examples:
        sessiontracker pending
        sessiontracker pending -n 100
    """
    from sessiontracker.infrastructure import (
        check_valkey_connection,
        create_scheduler,
        create_valkey_client,
    )

    settings = get_settings()
    if not check_valkey_connection(settings.valkey.url):
        print(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to Valkey{C.RESET}")
        raise typer.Exit(1)

    client = create_valkey_client(settings.valkey.url)
    try:
        tasks = create_scheduler(settings, client).pending_tasks()
    finally:
        client.close()

    if not tasks:
        print(f"\n  {C.DIM}No pending session checks{C.RESET}\n")
        return

    now = time.time()
    console = Console()
    table = Table(
        title=f"Pending session checks ({len(tasks):,})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Subject")
    table.add_column("Session start")
    table.add_column("Due in", justify="right")
    table.add_column("Attempt", justify="right")

    for task, due_at in tasks[:limit]:
        payload = task.get("payload") or {}
        due_in = due_at - now
        table.add_row(
            str(payload.get("distinct_id", "?")),
            str(payload.get("session_start", "?")),
            f"{due_in:,.0f}s" if due_in > 0 else "due",
            str(task.get("attempt", 1)),
        )

    print()
    console.print(table)
    if len(tasks) > limit:
        print(f"  {C.DIM}... and {len(tasks) - limit:,} more{C.RESET}")
    print()
