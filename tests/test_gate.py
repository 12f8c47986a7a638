# ==============================================================================
# Tests for Session Gate
# ==============================================================================
"""
Unit tests for the SessionGate.

Tests cover:
- First event opens a session (start event + scheduled check)
- Subsequent events only refresh state
- Counter TTL, last-seen and event count writes
- Self-feedback immunity for synthetic event names
- Events without a subject
- Simultaneous events for one subject opening a single session
"""

import json
import threading

import pytest
from pydantic import ValidationError

from sessiontracker.core import CHECK_SESSION_TASK


def _event(name="pageview", subject="u1", timestamp="2024-05-01T12:00:00Z", **extra):
    event = {"event": name, "distinct_id": subject, "timestamp": timestamp}
    event.update(extra)
    return event


# ==============================================================================
# Session Start
# ==============================================================================


class TestSessionStart:
    """Tests for opening a session."""

    def test_first_event_emits_start(self, tracker, sink):
        """The first qualifying event emits one session-start."""
        tracker.handle(_event())
        assert sink.events == [
            ("Session start", {"distinct_id": "u1", "timestamp": "2024-05-01T12:00:00.000Z"})
        ]

    def test_first_event_schedules_check(self, tracker, scheduler, clock):
        """The watchdog is scheduled one session length later."""
        tracker.handle(_event())

        tasks = scheduler.pending_tasks()
        assert len(tasks) == 1
        task, due_at = tasks[0]
        assert task["task"] == CHECK_SESSION_TASK
        assert task["payload"] == {
            "distinct_id": "u1",
            "session_start": "2024-05-01T12:00:00.000Z",
        }
        assert due_at == pytest.approx(clock.time() + 1800)

    def test_repeat_events_emit_single_start(self, tracker, sink, scheduler):
        """Events inside the window do not open new sessions."""
        for minute in (0, 5, 10):
            tracker.handle(_event(timestamp=f"2024-05-01T12:{minute:02d}:00Z"))

        assert len(sink.named("Session start")) == 1
        assert scheduler.pending_count() == 1

    def test_subjects_are_independent(self, tracker, sink):
        """Each subject gets its own session."""
        tracker.handle(_event(subject="u1"))
        tracker.handle(_event(subject="u2"))
        tracker.handle(_event(subject="u1"))

        starts = sink.named("Session start")
        assert [s["distinct_id"] for s in starts] == ["u1", "u2"]

    def test_new_session_after_counter_lapses(self, tracker, sink, expire_session):
        """Once the counter is gone the next event opens a new session."""
        tracker.handle(_event())
        expire_session("u1")
        tracker.handle(_event(timestamp="2024-05-01T13:00:00Z"))

        starts = sink.named("Session start")
        assert [s["timestamp"] for s in starts] == [
            "2024-05-01T12:00:00.000Z",
            "2024-05-01T13:00:00.000Z",
        ]


# ==============================================================================
# State Writes
# ==============================================================================


class TestStateWrites:
    """Tests for the per-subject keys written on every event."""

    def test_counter_ttl_is_session_length(self, tracker, fake_redis, config):
        """The counter expires one session length after the last event."""
        tracker.handle(_event())
        ttl = fake_redis.ttl(config.session_key("u1"))
        assert 1790 <= ttl <= 1800

    def test_seen_last_tracks_latest_event(self, tracker, fake_cache, config):
        """Last-seen holds the most recent event timestamp."""
        tracker.handle(_event(timestamp="2024-05-01T12:00:00Z"))
        tracker.handle(_event(timestamp="2024-05-01T12:07:30Z"))
        assert fake_cache.get(config.seen_last_key("u1")) == "2024-05-01T12:07:30.000Z"

    def test_event_count_snapshot(self, tracker, fake_cache, config):
        """The count snapshot follows the counter."""
        for _ in range(4):
            tracker.handle(_event())
        assert fake_cache.get(config.event_count_key("u1")) == 4

    def test_state_keys_have_retention(self, tracker, fake_redis, config):
        """Last-seen and count keys expire after the retention period."""
        tracker.handle(_event())
        for key in (config.seen_last_key("u1"), config.event_count_key("u1")):
            ttl = fake_redis.ttl(key)
            assert 0 < ttl <= config.state_ttl_seconds

    def test_stored_values_are_json(self, tracker, fake_redis, config):
        """Last-seen is stored as a JSON string."""
        tracker.handle(_event())
        raw = fake_redis.get(config.seen_last_key("u1"))
        assert json.loads(raw) == "2024-05-01T12:00:00.000Z"

    def test_missing_timestamp_uses_clock(self, tracker, sink):
        """An event without any timestamp is stamped with the clock."""
        tracker.handle({"event": "pageview", "distinct_id": "u1"})
        assert sink.events[0][1]["timestamp"] == "2024-05-01T12:00:00.000Z"


# ==============================================================================
# Ignored Events
# ==============================================================================


class TestIgnoredEvents:
    """Tests for events that must not touch session state."""

    @pytest.mark.parametrize("name", ["Session start", "Session end"])
    def test_synthetic_events_ignored(self, tracker, sink, scheduler, fake_redis, name):
        """The tracker's own events never count as activity."""
        tracker.handle(_event(name=name))
        assert sink.events == []
        assert scheduler.pending_count() == 0
        assert fake_redis.dbsize() == 0

    def test_missing_subject_skipped(self, tracker, sink, fake_redis):
        """Events without a distinct_id are skipped."""
        tracker.handle({"event": "pageview"})
        assert sink.events == []
        assert fake_redis.dbsize() == 0

    def test_invalid_event_raises(self, tracker):
        """Payloads without an event name fail validation."""
        with pytest.raises(ValidationError):
            tracker.handle({"distinct_id": "u1"})

    def test_return_value(self, tracker):
        """handle() reports whether the event was tracked."""
        assert tracker.handle(_event()) is True
        assert tracker.handle(_event(name="Session end")) is False
        assert tracker.handle({"event": "pageview"}) is False


# ==============================================================================
# Concurrency
# ==============================================================================


class TestConcurrentEvents:
    """Tests for simultaneous events of one subject."""

    def test_simultaneous_events_open_one_session(self, tracker, sink, scheduler, fake_cache, config):
        """Only the event whose increment returns 1 emits the start."""
        threads_count = 16
        events_per_thread = 20
        barrier = threading.Barrier(threads_count)
        errors = []

        def worker():
            try:
                barrier.wait()
                for _ in range(events_per_thread):
                    tracker.handle(_event(subject="u1"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert len(sink.named("Session start")) == 1
        assert scheduler.pending_count() == 1
        assert fake_cache.get(config.session_key("u1")) == threads_count * events_per_thread
