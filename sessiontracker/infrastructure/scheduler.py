# ==============================================================================
# Valkey Delayed Task Scheduler
# ==============================================================================
"""
Valkey/Redis implementation of the TaskScheduler interface.

Scheduled tasks live in a single sorted set, scored by due time (epoch
seconds). Each member is a JSON document:

    {"id": "...", "task": "checkIfSessionIsOver", "payload": {...}, "attempt": 1}

Workers claim a due task by pushing its score forward by a lease (WATCH /
MULTI transaction), run the handler, then remove it. A worker that dies
mid-task leaves the task to become due again when the lease runs out, and a
handler that raises is re-enqueued after a retry delay. Delivery is
therefore at-least-once.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable, Mapping

import redis

from sessiontracker.base import TaskHandler, TaskScheduler, to_seconds
from sessiontracker.utils.retry import REDIS_RETRY_EXCEPTIONS, RETRY_ATTEMPTS, retry_standard

logger = logging.getLogger(__name__)


# ==============================================================================
# Keys and Defaults
# ==============================================================================

SCHEDULED_TASKS_KEY = "sessiontracker:tasks:scheduled"
DEFAULT_LEASE_SECONDS = 300  # 5 minutes
DEFAULT_RETRY_DELAY_SECONDS = 60


class ValkeyTaskScheduler(TaskScheduler):
    """
    Sorted-set backed delayed task queue.

    Several worker processes may share one queue; the claim transaction
    ensures each due task runs in one worker at a time.
    """

    def __init__(
        self,
        client: redis.Redis,
        key: str = SCHEDULED_TASKS_KEY,
        lease_seconds: int = DEFAULT_LEASE_SECONDS,
        retry_delay_seconds: int = DEFAULT_RETRY_DELAY_SECONDS,
        max_attempts: int = RETRY_ATTEMPTS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the scheduler.

        Args:
            client: Redis client (decode_responses=True)
            key: Sorted set key holding scheduled tasks
            lease_seconds: How long a claimed task is hidden from other workers
            retry_delay_seconds: Delay before a failed task runs again
            max_attempts: Attempts before a failing task is dropped
            clock: Source of epoch seconds (injectable for tests)
        """
        self._client = client
        self._key = key
        self._lease_seconds = lease_seconds
        self._retry_delay_seconds = retry_delay_seconds
        self._max_attempts = max_attempts
        self._clock = clock

    @property
    def key(self) -> str:
        return self._key

    # ==========================================================================
    # Producer side
    # ==========================================================================

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
        task_id = uuid.uuid4().hex
        due_at = self._clock() + to_seconds(delay, unit)
        self._enqueue(
            {"id": task_id, "task": task_name, "payload": payload, "attempt": 1},
            due_at,
        )
        logger.debug("Scheduled %s (%s) in %s %s", task_name, task_id, delay, unit)
        return task_id

    @retry_standard(REDIS_RETRY_EXCEPTIONS, logger)
    def _enqueue(self, task: dict, due_at: float) -> None:
        member = json.dumps(task, sort_keys=True)
        self._client.zadd(self._key, {member: due_at})

    # ==========================================================================
    # Worker side
    # ==========================================================================

    def run_due(self, handlers: Mapping[str, TaskHandler], limit: int = 100) -> int:
        """
        Run tasks whose due time has passed.

        Args:
            handlers: Mapping of task name to handler
            limit: Maximum number of tasks to run in this call

        Returns:
            Count of tasks executed successfully
        """
        now = self._clock()
        members = self._client.zrangebyscore(self._key, "-inf", now, start=0, num=limit)

        executed = 0
        for member in members:
            if not self._claim(member, now):
                continue
            if self._execute(member, handlers):
                executed += 1

        if executed:
            logger.debug("Ran %d due task(s)", executed)
        return executed

    def _claim(self, member: str, now: float) -> bool:
        """Lease a due task to this worker. False if another worker got it."""

        def _lease(pipe) -> bool:
            score = pipe.zscore(self._key, member)
            if score is None or score > now:
                return False
            pipe.multi()
            pipe.zadd(self._key, {member: now + self._lease_seconds})
            return True

        return self._client.transaction(_lease, self._key, value_from_callable=True)

    def _execute(self, member: str, handlers: Mapping[str, TaskHandler]) -> bool:
        try:
            task = json.loads(member)
        except json.JSONDecodeError:
            logger.error("Dropping undecodable task: %s", member)
            self._client.zrem(self._key, member)
            return False

        task_name = task.get("task")
        handler = handlers.get(task_name)
        if handler is None:
            logger.error("Dropping task %s: no handler for %r", task.get("id"), task_name)
            self._client.zrem(self._key, member)
            return False

        try:
            handler(task.get("payload") or {})
        except Exception:
            logger.exception("Task %s (%s) failed", task_name, task.get("id"))
            self._retry_later(member, task)
            return False

        self._client.zrem(self._key, member)
        return True

    def _retry_later(self, member: str, task: dict) -> None:
        attempt = int(task.get("attempt", 1))
        self._client.zrem(self._key, member)
        if attempt >= self._max_attempts:
            logger.error(
                "Giving up on task %s (%s) after %d attempts",
                task.get("task"),
                task.get("id"),
                attempt,
            )
            return
        retry_task = dict(task, attempt=attempt + 1)
        self._enqueue(retry_task, self._clock() + self._retry_delay_seconds)

    # ==========================================================================
    # Inspection
    # ==========================================================================

    def pending_count(self) -> int:
        """Count of tasks waiting to run (due or not)."""
        return self._client.zcard(self._key)

    def due_count(self) -> int:
        """Count of tasks that are due now."""
        return self._client.zcount(self._key, "-inf", self._clock())

    def pending_tasks(self) -> list[tuple[dict, float]]:
        """All scheduled tasks with their due times, soonest first."""
        entries = self._client.zrange(self._key, 0, -1, withscores=True)
        tasks = []
        for member, score in entries:
            try:
                tasks.append((json.loads(member), score))
            except json.JSONDecodeError:
                continue
        return tasks

    def clear(self) -> int:
        """
        Remove all scheduled tasks.

        Returns:
            Count of tasks removed
        """
        count = self._client.zcard(self._key)
        self._client.delete(self._key)
        return count
