# ==============================================================================
# Session Tracker Domain Models
# ==============================================================================
"""
Pydantic models for inbound events, session descriptors and tracker config.

These models are used for:
- Validating events decoded from Kafka or read from JSON-lines files
- Serializing/deserializing watchdog job payloads
- Carrying the immutable tracker configuration into the gate and watchdog

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

from datetime import datetime, timedelta
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from sessiontracker.core.timestamps import first_timestamp

# Name of the delayed job that checks whether a session went idle
CHECK_SESSION_TASK = "checkIfSessionIsOver"


class TrackerConfig(BaseModel):
    """
    Immutable session tracker configuration.

    Built once at startup (see SessionSettings.to_tracker_config) and passed
    to the gate and watchdog. Also owns the Valkey key layout so both sides
    agree on it.
    """

    model_config = {"frozen": True}

    session_length: timedelta = Field(
        default=timedelta(minutes=30), description="Inactivity gap that closes a session"
    )
    session_start_event: str = Field(default="Session start")
    session_end_event: str = Field(default="Session end")
    recheck_interval: timedelta = Field(
        default=timedelta(minutes=1), description="Watchdog cadence once past the session length"
    )
    key_prefix: str = Field(default="sessiontracker:")
    state_ttl_seconds: int = Field(
        default=86400, description="Retention for last-seen and event count keys"
    )

    @property
    def session_length_seconds(self) -> int:
        return int(self.session_length.total_seconds())

    @property
    def recheck_interval_seconds(self) -> int:
        return int(self.recheck_interval.total_seconds())

    @property
    def synthetic_events(self) -> frozenset[str]:
        """Event names this tracker emits itself and must never consume."""
        return frozenset((self.session_start_event, self.session_end_event))

    def session_key(self, subject: str) -> str:
        """Key of the expiring session counter."""
        return f"{self.key_prefix}session:{subject}"

    def seen_last_key(self, subject: str) -> str:
        """Key of the last-seen timestamp."""
        return f"{self.key_prefix}seen_last:{subject}"

    def event_count_key(self, subject: str) -> str:
        """Key of the event count snapshot."""
        return f"{self.key_prefix}last_event_count:{subject}"


class InboundEvent(BaseModel):
    """
    Represents a single behavioral event from an upstream producer.

    Only the fields needed for session tracking are modelled; anything else
    in the payload is ignored.

    Attributes:
        event: Event name
        distinct_id: Stable subject identifier (also accepted as "subject")
        timestamp: Explicit event timestamp
        properties: Event properties, may carry a nested "timestamp"
        now: Server receive time set by some ingestion paths
        sent_at: Client send time
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    event: str = Field(..., description="Event name")
    distinct_id: str | None = Field(
        None,
        validation_alias=AliasChoices("distinct_id", "subject"),
        description="Subject identifier",
    )
    timestamp: Any = None
    properties: dict[str, Any] = Field(default_factory=dict)
    now: Any = None
    sent_at: Any = None

    @field_validator("distinct_id", mode="before")
    @classmethod
    def _coerce_distinct_id(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    def resolve_timestamp(self, now: datetime) -> str:
        """
        Best-effort event time.

        Uses the first parseable of: timestamp, properties.timestamp, now,
        sent_at, and finally the supplied wall-clock time.
        """
        return first_timestamp(
            [self.timestamp, self.properties.get("timestamp"), self.now, self.sent_at],
            now,
        )


class SessionDescriptor(BaseModel):
    """
    Payload carried by every watchdog invocation for one session instance.

    Attributes:
        distinct_id: Subject the session belongs to
        session_start: Normalized timestamp of the event that opened the session
    """

    distinct_id: str = Field(..., description="Subject identifier")
    session_start: str = Field(..., description="ISO-8601 session start")

    def to_payload(self) -> dict:
        """Serialize for the delayed job queue."""
        return {"distinct_id": self.distinct_id, "session_start": self.session_start}

    @classmethod
    def from_payload(cls, data: dict) -> "SessionDescriptor":
        """Deserialize from a delayed job payload."""
        return cls(distinct_id=str(data["distinct_id"]), session_start=str(data["session_start"]))
