# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the capability contract of the session tracker.

The core needs exactly three things from its host:
- Cache: key-value store with an atomic counter and TTLs
- TaskScheduler: durable delayed task execution
- EventSink: destination for emitted session events

BaseRunner provides shared process lifecycle handling for long-running hosts.
"""

from sessiontracker.base.cache import Cache
from sessiontracker.base.runner import BaseRunner
from sessiontracker.base.scheduler import TaskHandler, TaskScheduler, to_seconds
from sessiontracker.base.sinks import EventSink

__all__ = [
    "BaseRunner",
    "Cache",
    "EventSink",
    "TaskHandler",
    "TaskScheduler",
    "to_seconds",
]
