"""Log event types."""

from redislog.core.events.types import (
    POLICY_KEY,
    RESPONSE_EVENT,
    LogEvent,
    LogTag,
    serialize_event,
)

__all__ = [
    "POLICY_KEY",
    "RESPONSE_EVENT",
    "LogEvent",
    "LogTag",
    "serialize_event",
]
