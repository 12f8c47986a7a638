# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Session boundary detection with no concrete infrastructure dependencies.

This module contains:
- Domain models (InboundEvent, SessionDescriptor, TrackerConfig)
- The session gate (session start detection)
- The expiry watchdog (session end detection)
- The SessionTracker facade

All code here talks to the host only through the abstract Cache,
TaskScheduler and EventSink classes.
"""

from sessiontracker.core.gate import SessionGate
from sessiontracker.core.models import (
    CHECK_SESSION_TASK,
    InboundEvent,
    SessionDescriptor,
    TrackerConfig,
)
from sessiontracker.core.tracker import SessionTracker
from sessiontracker.core.watchdog import ExpiryWatchdog

__all__ = [
    "CHECK_SESSION_TASK",
    "ExpiryWatchdog",
    "InboundEvent",
    "SessionDescriptor",
    "SessionGate",
    "SessionTracker",
    "TrackerConfig",
]
