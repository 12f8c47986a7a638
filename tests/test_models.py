# ==============================================================================
# Tests for Domain Models
# ==============================================================================
"""
Unit tests for TrackerConfig, InboundEvent and SessionDescriptor.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from sessiontracker.core import InboundEvent, SessionDescriptor, TrackerConfig


class TestTrackerConfig:
    """Tests for the immutable tracker configuration."""

    def test_defaults(self):
        """Defaults match the documented behavior."""
        config = TrackerConfig()
        assert config.session_length_seconds == 1800
        assert config.recheck_interval_seconds == 60
        assert config.session_start_event == "Session start"
        assert config.session_end_event == "Session end"

    def test_frozen(self):
        """Config cannot be mutated after construction."""
        config = TrackerConfig()
        with pytest.raises(ValidationError):
            config.session_length = timedelta(minutes=5)

    def test_key_layout(self):
        """Per-subject keys live under the configured prefix."""
        config = TrackerConfig(key_prefix="st:")
        assert config.session_key("u1") == "st:session:u1"
        assert config.seen_last_key("u1") == "st:seen_last:u1"
        assert config.event_count_key("u1") == "st:last_event_count:u1"

    def test_synthetic_events(self):
        """Both emitted event names are synthetic."""
        config = TrackerConfig(session_start_event="A", session_end_event="B")
        assert config.synthetic_events == frozenset({"A", "B"})


class TestInboundEvent:
    """Tests for inbound event validation."""

    def test_extra_fields_ignored(self):
        """Unknown fields do not fail validation."""
        event = InboundEvent.model_validate(
            {"event": "click", "distinct_id": "u1", "uuid": "x", "team_id": 2}
        )
        assert event.event == "click"

    def test_subject_alias(self):
        """'subject' is accepted as the identifier field."""
        event = InboundEvent.model_validate({"event": "click", "subject": "u9"})
        assert event.distinct_id == "u9"

    def test_numeric_distinct_id_coerced(self):
        """Numeric identifiers become strings."""
        event = InboundEvent.model_validate({"event": "click", "distinct_id": 42})
        assert event.distinct_id == "42"

    def test_blank_distinct_id_is_none(self):
        """Whitespace-only identifiers are treated as missing."""
        event = InboundEvent.model_validate({"event": "click", "distinct_id": "  "})
        assert event.distinct_id is None

    def test_non_dict_properties_replaced(self):
        """Non-object properties become an empty dict."""
        event = InboundEvent.model_validate(
            {"event": "click", "distinct_id": "u1", "properties": "oops"}
        )
        assert event.properties == {}

    def test_event_name_required(self):
        """An event without a name is invalid."""
        with pytest.raises(ValidationError):
            InboundEvent.model_validate({"distinct_id": "u1"})


class TestSessionDescriptor:
    """Tests for the watchdog job payload."""

    def test_payload_shape(self):
        """The payload carries exactly the subject and start time."""
        descriptor = SessionDescriptor(
            distinct_id="u1", session_start="2024-05-01T12:00:00.000Z"
        )
        assert descriptor.to_payload() == {
            "distinct_id": "u1",
            "session_start": "2024-05-01T12:00:00.000Z",
        }

    def test_from_payload_missing_field(self):
        """A payload without a subject is rejected."""
        with pytest.raises(KeyError):
            SessionDescriptor.from_payload({"session_start": "2024-05-01T12:00:00.000Z"})
