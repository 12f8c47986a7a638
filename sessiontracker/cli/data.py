# ==============================================================================
# Data Commands
# ==============================================================================
"""
Data management commands for the session tracker CLI.

Deletes tracker state from Valkey: session counters, last-seen timestamps,
event count snapshots and pending session checks.
"""

from typing import Annotated

import typer

from sessiontracker.cli.shared import C, I
from sessiontracker.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def data_reset(
    confirm: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Delete all session tracker state from Valkey.

    Open sessions are forgotten without emitting an end event. Stop the
    consumer and workers before running this command.

    Examples:
        sessiontracker reset       # With confirmation prompt
        sessiontracker reset -y    # Skip confirmation
    """
    from sessiontracker.infrastructure import (
        ValkeyCache,
        check_valkey_connection,
        create_scheduler,
        create_valkey_client,
    )

    settings = get_settings()
    prefix = settings.session.key_prefix

    if not check_valkey_connection(settings.valkey.url):
        print(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to Valkey{C.RESET}")
        raise typer.Exit(1)

    if not confirm:
        typer.confirm(
            f"This will DELETE all keys under '{prefix}' in Valkey. Are you sure?",
            abort=True,
        )
        print()

    client = create_valkey_client(settings.valkey.url)
    try:
        cleared = create_scheduler(settings, client).clear()
        print(
            f"{C.BRIGHT_GREEN}{I.CHECK} Removed "
            f"{C.WHITE}{cleared:,}{C.RESET}{C.BRIGHT_GREEN} pending session checks{C.RESET}"
        )

        deleted = ValkeyCache(client=client).delete_pattern(f"{prefix}*")
        print(
            f"{C.BRIGHT_GREEN}{I.CHECK} Deleted "
            f"{C.WHITE}{deleted:,}{C.RESET}{C.BRIGHT_GREEN} session keys{C.RESET}"
        )
    finally:
        client.close()
    print()
