# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed ValkeyCache and ValkeyTaskScheduler instances
- A controllable clock shared by the tracker and the scheduler
- A sink that records emitted events
- Clean Redis state per test (automatic flush)
"""

from datetime import datetime, timedelta, timezone

import fakeredis
import pytest

from sessiontracker.base import EventSink
from sessiontracker.core import SessionTracker, TrackerConfig
from sessiontracker.infrastructure.cache import ValkeyCache
from sessiontracker.infrastructure.scheduler import ValkeyTaskScheduler

START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced wall clock.

    now() feeds the tracker, time() feeds the scheduler, so both agree on
    what time it is.
    """

    def __init__(self, start: datetime = START):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def time(self) -> float:
        return self.current.timestamp()

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class RecordingSink(EventSink):
    """Sink that keeps every emitted event in memory."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []
        self.closed = False

    def emit(self, event_name: str, properties: dict) -> None:
        self.events.append((event_name, dict(properties)))

    def close(self) -> None:
        self.closed = True

    def named(self, event_name: str) -> list[dict]:
        return [props for name, props in self.events if name == event_name]


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real Valkey client behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def fake_cache(fake_redis):
    """A ValkeyCache wrapping the fakeredis client."""
    return ValkeyCache(client=fake_redis)


@pytest.fixture()
def clock():
    """A FakeClock starting at 2024-05-01T12:00:00Z."""
    return FakeClock()


@pytest.fixture()
def scheduler(fake_redis, clock):
    """A ValkeyTaskScheduler backed by fakeredis and the fake clock."""
    return ValkeyTaskScheduler(fake_redis, clock=clock.time)


@pytest.fixture()
def sink():
    """A RecordingSink."""
    return RecordingSink()


@pytest.fixture()
def config():
    """Tracker configuration with a 30 minute session length."""
    return TrackerConfig()


@pytest.fixture()
def tracker(config, fake_cache, scheduler, sink, clock):
    """A SessionTracker wired to fakeredis, the fake clock and a recording sink."""
    return SessionTracker(config, fake_cache, scheduler, sink, clock=clock.now)


@pytest.fixture()
def expire_session(fake_redis, config):
    """Simulate the session counter TTL lapsing for a subject.

    fakeredis expires keys on real time, so tests delete the counter instead
    of waiting for it.
    """

    def _expire(subject: str) -> None:
        fake_redis.delete(config.session_key(subject))

    return _expire
