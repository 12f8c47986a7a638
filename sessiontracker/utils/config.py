# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.

The session tracker core never reads these settings directly. The process
edge (CLI, runner) calls SessionSettings.to_tracker_config() once at startup
and hands the resulting immutable TrackerConfig to the tracker.
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sessiontracker.core.models import TrackerConfig

# Load .env file before any settings are instantiated
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SESSION_LENGTH = 30
DEFAULT_SESSION_START_EVENT = "Session start"
DEFAULT_SESSION_END_EVENT = "Session end"


class KafkaSettings(BaseSettings):
    """Kafka connection settings."""

    model_config = SettingsConfigDict(env_prefix="KAFKA_")

    bootstrap_servers: str = Field(default="localhost:9092", description="Kafka bootstrap servers")
    security_protocol: str = Field(
        default="PLAINTEXT", description="Security protocol (PLAINTEXT or SSL)"
    )

    # SSL settings for mTLS authentication
    ssl_ca_file: Optional[str] = Field(default=None, description="Path to CA certificate file")
    ssl_cert_file: Optional[str] = Field(
        default=None, description="Path to client certificate file"
    )
    ssl_key_file: Optional[str] = Field(default=None, description="Path to client private key file")

    # Topic configuration
    events_topic: str = Field(default="events", description="Inbound events topic name")
    session_events_topic: str = Field(
        default="session-events", description="Topic for emitted session start/end events"
    )


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for session state."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        # Use rediss:// scheme for SSL connections
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class SessionSettings(BaseSettings):
    """Session boundary detection settings.

    The length is kept as a raw string so that a malformed value degrades to
    the default instead of failing startup.
    """

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    length: str = Field(
        default=str(DEFAULT_SESSION_LENGTH),
        description="Inactivity gap that closes a session (integer, see length_unit)",
    )
    length_unit: Literal["minutes", "seconds"] = Field(
        default="minutes", description="Unit of the session length"
    )
    start_event: str = Field(
        default=DEFAULT_SESSION_START_EVENT, description="Name of the emitted session-start event"
    )
    end_event: str = Field(
        default=DEFAULT_SESSION_END_EVENT, description="Name of the emitted session-end event"
    )
    recheck_interval_seconds: int = Field(
        default=60, description="Watchdog re-check cadence once past the session length"
    )
    key_prefix: str = Field(default="sessiontracker:", description="Namespace for Valkey keys")
    state_ttl_hours: int = Field(
        default=24, description="Retention for last-seen and event count state in hours"
    )

    def parsed_length(self) -> int:
        """
        Parse the configured session length.

        Returns:
            The length as a positive integer, or the default (30) when the
            configured value is not a positive integer.
        """
        try:
            value = int(self.length.strip())
        except (TypeError, ValueError):
            logger.warning(
                "Unparseable session length %r, using default %d",
                self.length,
                DEFAULT_SESSION_LENGTH,
            )
            return DEFAULT_SESSION_LENGTH
        if value <= 0:
            logger.warning(
                "Non-positive session length %d, using default %d", value, DEFAULT_SESSION_LENGTH
            )
            return DEFAULT_SESSION_LENGTH
        return value

    def to_tracker_config(self) -> TrackerConfig:
        """Build the immutable tracker configuration, applying fallbacks."""
        length = self.parsed_length()
        if self.length_unit == "seconds":
            session_length = timedelta(seconds=length)
        else:
            session_length = timedelta(minutes=length)

        # Retention must outlive the counter so the watchdog can read it
        state_ttl_seconds = max(
            self.state_ttl_hours * 3600, int(session_length.total_seconds()) * 2
        )

        return TrackerConfig(
            session_length=session_length,
            session_start_event=self.start_event.strip() or DEFAULT_SESSION_START_EVENT,
            session_end_event=self.end_event.strip() or DEFAULT_SESSION_END_EVENT,
            recheck_interval=timedelta(seconds=max(self.recheck_interval_seconds, 1)),
            key_prefix=self.key_prefix,
            state_ttl_seconds=state_ttl_seconds,
        )


class ConsumerSettings(BaseSettings):
    """Kafka consumer settings for the inbound event stream."""

    model_config = SettingsConfigDict(env_prefix="CONSUMER_")

    group_id: str = Field(
        default="sessiontracker",
        description="Kafka consumer group ID",
    )
    auto_offset_reset: str = Field(
        default="earliest",
        description="Auto offset reset policy (earliest, latest, none)",
    )
    batch_size: int = Field(
        default=500,
        description="Number of messages to fetch per Kafka poll",
    )
    poll_timeout_ms: int = Field(
        default=1000,
        description="Kafka poll timeout in milliseconds",
    )
    worker_batch_size: int = Field(
        default=100,
        description="Maximum number of due watchdog checks to run between polls",
    )


class SinkSettings(BaseSettings):
    """Settings for the sink that receives session start/end events."""

    model_config = SettingsConfigDict(env_prefix="SINK_")

    impl: Literal["kafka", "http", "log"] = Field(
        default="kafka",
        description="Sink implementation (kafka, http, log)",
    )
    http_host: str = Field(
        default="http://localhost:8000", description="Base URL of the HTTP capture endpoint"
    )
    http_api_key: Optional[str] = Field(default=None, description="API key for HTTP capture")
    http_timeout_seconds: int = Field(default=10, description="HTTP request timeout in seconds")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    consumer: ConsumerSettings = Field(default_factory=ConsumerSettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
