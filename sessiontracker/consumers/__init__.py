# ==============================================================================
# Inbound Event Consumers
# ==============================================================================
"""Consumers that read inbound events and feed them to the session tracker."""

from sessiontracker.consumers.confluent import SessionTrackerConsumer

__all__ = ["SessionTrackerConsumer"]
