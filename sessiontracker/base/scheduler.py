# ==============================================================================
# Task Scheduler Abstract Base Class
# ==============================================================================
"""
Abstract interface for durable delayed task execution.

The session tracker enqueues its watchdog check through schedule(); the host
process drains due tasks through run_due(). Delivery is at-least-once, so
handlers must tolerate duplicate or stale invocations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping

TaskHandler = Callable[[dict], None]

# Seconds per supported delay unit
TIME_UNITS: dict[str, float] = {
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
}


def to_seconds(delay: float, unit: str) -> float:
    """
    Convert a delay in the given unit to seconds.

    Raises:
        ValueError: If the unit is not supported
    """
    try:
        return delay * TIME_UNITS[unit]
    except KeyError:
        raise ValueError(f"Unsupported time unit: {unit}") from None


class TaskScheduler(ABC):
    """Durable delayed task queue."""

    @abstractmethod
    def schedule(self, task_name: str, payload: dict, delay: float, unit: str = "seconds") -> str:
        """
        Enqueue a task to run after a delay.

        Args:
            task_name: Registered handler name
            payload: JSON-serializable task payload
            delay: Delay before the task becomes due
            unit: Unit of the delay (milliseconds, seconds, minutes, hours)

        Returns:
            Identifier of the scheduled task
        """
        ...

    @abstractmethod
    def run_due(self, handlers: Mapping[str, TaskHandler], limit: int = 100) -> int:
        """
        Run tasks whose due time has passed.

        Args:
            handlers: Mapping of task name to handler
            limit: Maximum number of tasks to run in this call

        Returns:
            Count of tasks executed successfully
        """
        ...

    @abstractmethod
    def pending_count(self) -> int:
        """Count of tasks waiting to run (due or not)."""
        ...
