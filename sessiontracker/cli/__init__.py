# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the session tracker.

Commands are organized into separate modules for maintainability:
- shared.py: Colors, icons and logging setup
- run.py: Foreground consumer and worker processes
- status.py: Tracker status and pending checks
- config.py: Effective configuration
- data.py: State reset
- replay.py: JSON-lines replay
"""

from sessiontracker.cli.shared import (
    # Classes
    Colors,
    Icons,
    # Aliases
    C,
    I,
    # Logging
    setup_cli_logging,
)

__all__ = [
    # Classes
    "Colors",
    "Icons",
    # Aliases
    "C",
    "I",
    # Logging
    "setup_cli_logging",
]
