# ==============================================================================
# Tests for the Kafka Consumer Runner
# ==============================================================================
"""
Unit tests for SessionTrackerConsumer and message decoding.

The confluent-kafka Consumer is replaced by a MagicMock returning fake
messages, so the consume / process / commit / watchdog loop can be driven
one iteration at a time.
"""

import json
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from sessiontracker.consumers import SessionTrackerConsumer
from sessiontracker.infrastructure.kafka import (
    build_consumer_config,
    build_producer_config,
    decode_message_value,
)
from sessiontracker.utils.config import ConsumerSettings, KafkaSettings


def _message(value=None, error=None):
    msg = MagicMock()
    msg.error.return_value = error
    msg.value.return_value = value
    return msg


def _event_message(subject="u1", name="$pageview", timestamp="2024-05-01T12:00:00Z"):
    payload = {"event": name, "distinct_id": subject, "timestamp": timestamp}
    return _message(json.dumps(payload).encode("utf-8"))


def _runner(tracker, messages=None, run_watchdog=True):
    consumer = MagicMock()
    consumer.consume.return_value = messages or []
    return (
        SessionTrackerConsumer(tracker, consumer, "events", run_watchdog=run_watchdog),
        consumer,
    )


# ==============================================================================
# Decoding
# ==============================================================================


class TestDecodeMessageValue:
    """Tests for decode_message_value()."""

    def test_json_object(self):
        assert decode_message_value(b'{"event": "x"}') == {"event": "x"}

    def test_empty(self):
        assert decode_message_value(b"") is None
        assert decode_message_value(None) is None

    def test_invalid_json(self):
        assert decode_message_value(b"{oops") is None

    def test_non_object(self):
        assert decode_message_value(b"[1, 2]") is None

    def test_invalid_utf8(self):
        assert decode_message_value(b"\xff\xfe") is None


# ==============================================================================
# Poll Loop
# ==============================================================================


class TestPollOnce:
    """Tests for one consume / process / commit / watchdog iteration."""

    def test_events_reach_tracker_and_commit(self, tracker, sink):
        """Decoded events are handled and offsets committed."""
        runner, consumer = _runner(tracker, [_event_message("u1"), _event_message("u2")])

        assert runner.poll_once() == 2

        assert [p["distinct_id"] for p in sink.named("Session start")] == ["u1", "u2"]
        consumer.commit.assert_called_once_with(asynchronous=False)

    def test_no_commit_without_messages(self, tracker):
        runner, consumer = _runner(tracker, [])
        assert runner.poll_once() == 0
        consumer.commit.assert_not_called()

    def test_bad_messages_skipped(self, tracker, sink):
        """Errors, garbage and invalid events do not stop the batch."""
        messages = [
            _message(error="partition EOF"),
            _message(b"not json"),
            _message(json.dumps({"distinct_id": "u1"}).encode()),
            _event_message("u3"),
        ]
        runner, consumer = _runner(tracker, messages)

        assert runner.poll_once() == 1
        assert [p["distinct_id"] for p in sink.named("Session start")] == ["u3"]
        consumer.commit.assert_called_once()

    def test_runs_due_checks(self, tracker, sink, clock, expire_session):
        """Due watchdog checks are drained between polls."""
        runner, consumer = _runner(tracker, [_event_message("u1")])
        runner.poll_once()

        consumer.consume.return_value = []
        clock.advance(30 * 60)
        expire_session("u1")
        runner.poll_once()

        assert len(sink.named("Session end")) == 1

    def test_watchdog_disabled(self, tracker, sink, clock, expire_session):
        """With the watchdog off, due checks are left for workers."""
        runner, consumer = _runner(tracker, [_event_message("u1")], run_watchdog=False)
        runner.poll_once()

        consumer.consume.return_value = []
        clock.advance(30 * 60)
        expire_session("u1")
        runner.poll_once()

        assert sink.named("Session end") == []
        assert tracker.scheduler.pending_count() == 1

    def test_store_failure_propagates_without_commit(self, tracker, monkeypatch):
        """A Valkey failure stops the loop and leaves the batch uncommitted."""
        runner, consumer = _runner(tracker, [_event_message("u1")])

        def unreachable(key, amount=1):
            raise RedisConnectionError("valkey down")

        monkeypatch.setattr(tracker.gate._cache, "increment", unreachable)

        with pytest.raises(RedisConnectionError):
            runner.poll_once()
        consumer.commit.assert_not_called()

    def test_cleanup_closes_consumer_and_sink(self, tracker, sink):
        runner, consumer = _runner(tracker)
        runner._cleanup()
        consumer.close.assert_called_once()
        assert sink.closed


# ==============================================================================
# Client Configuration
# ==============================================================================


class TestClientConfig:
    """Tests for confluent-kafka configuration builders."""

    def test_consumer_config(self):
        config = build_consumer_config(
            KafkaSettings(bootstrap_servers="k1:9092,k2:9092"),
            ConsumerSettings(group_id="g1", auto_offset_reset="latest"),
        )
        assert config["bootstrap.servers"] == "k1:9092,k2:9092"
        assert config["group.id"] == "g1"
        assert config["auto.offset.reset"] == "latest"
        assert config["enable.auto.commit"] is False
        assert config["security.protocol"] == "PLAINTEXT"

    def test_producer_config_is_idempotent(self):
        config = build_producer_config(KafkaSettings())
        assert config["acks"] == "all"
        assert config["enable.idempotence"] is True

    def test_ssl_files_included_when_present(self, tmp_path):
        ca = tmp_path / "ca.pem"
        ca.write_text("cert")
        settings = KafkaSettings(
            security_protocol="SSL", ssl_ca_file=str(ca), ssl_cert_file=str(tmp_path / "missing")
        )
        config = build_producer_config(settings)
        assert config["security.protocol"] == "SSL"
        assert config["ssl.ca.location"] == str(ca)
        assert "ssl.certificate.location" not in config
