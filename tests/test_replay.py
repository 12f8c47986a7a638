# ==============================================================================
# Tests for JSON-lines Replay
# ==============================================================================
"""
Unit tests for reading replay files and feeding them to the tracker.
"""

from sessiontracker.cli.replay import read_events, replay_events


def test_read_events_skips_blank_and_invalid_lines(tmp_path):
    path = tmp_path / "events.jsonl"
    path.write_text(
        '{"event": "$pageview", "distinct_id": "u1"}\n'
        "\n"
        "{broken\n"
        "[1, 2, 3]\n"
        '{"event": "$autocapture", "distinct_id": "u2"}\n',
        encoding="utf-8",
    )

    events = list(read_events(path))

    assert [line for line, _ in events] == [1, 5]
    assert [event["distinct_id"] for _, event in events] == ["u1", "u2"]


def test_handle_many_counts_tracked_events_only(tmp_path, tracker, sink):
    """Own session events are read but not counted as tracked."""
    path = tmp_path / "events.jsonl"
    path.write_text(
        '{"event": "$pageview", "distinct_id": "u1", "timestamp": "2024-05-01T12:00:00Z"}\n'
        '{"event": "$pageview", "distinct_id": "u1", "timestamp": "2024-05-01T12:01:00Z"}\n'
        '{"event": "Session start", "distinct_id": "u1"}\n',
        encoding="utf-8",
    )

    tracked = tracker.handle_many(event for _, event in read_events(path))

    assert tracked == 2
    assert sink.named("Session start") == [
        {"distinct_id": "u1", "timestamp": "2024-05-01T12:00:00.000Z"}
    ]


def test_replay_summary(tmp_path, tracker, sink):
    """Tracked, ignored and invalid events are counted separately."""
    path = tmp_path / "events.jsonl"
    path.write_text(
        '{"event": "$pageview", "distinct_id": "u1"}\n'
        '{"event": "$pageview", "distinct_id": "u2"}\n'
        '{"event": "Session end", "distinct_id": "u1"}\n'
        '{"event": "$pageview"}\n'
        '{"distinct_id": "u3"}\n',
        encoding="utf-8",
    )

    summary = replay_events(tracker, path)

    assert (summary.tracked, summary.ignored, summary.invalid) == (2, 2, 1)
    assert len(sink.named("Session start")) == 2
