# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared constants and helpers used across CLI command modules.

This module provides:
- ANSI color codes and status icons
- Logging setup for foreground commands
"""

import logging

from sessiontracker.base.runner import LOG_FORMAT

# ==============================================================================
# ANSI Colors and Icons
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    BULLET = "•"


# Module-level aliases for convenience
C, I = Colors, Icons


def setup_cli_logging(level: str) -> None:
    """Configure logging for commands that run in the foreground."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


__all__ = [
    "C",
    "Colors",
    "I",
    "Icons",
    "setup_cli_logging",
]
