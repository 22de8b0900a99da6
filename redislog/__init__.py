"""Filter-and-route pipeline for request/response log events stored in Redis."""

from redislog.core.events.types import LogEvent, serialize_event
from redislog.core.exceptions import (
    ConfigurationError,
    RedisLogError,
    SerializationError,
    SinkError,
    SinkUnavailableError,
)
from redislog.core.factory import create_pipeline
from redislog.core.filtering.engine import Decision, FilterEngine
from redislog.core.filtering.policy import FilterPolicy, level_preset, merge_policy
from redislog.core.middleware import PolicyMiddleware
from redislog.core.pipeline import (
    DeliveryReport,
    LogPipeline,
    PolicyLoader,
    bind_policy,
    current_policy,
    policy_scope,
    reset_policy,
)
from redislog.core.sinks import (
    BoundedListSink,
    ChannelSink,
    ConstantName,
    DerivedName,
    NameStrategy,
    tenant_name,
)

__version__ = "0.1.0"

__all__ = [
    "BoundedListSink",
    "ChannelSink",
    "ConfigurationError",
    "ConstantName",
    "Decision",
    "DeliveryReport",
    "DerivedName",
    "FilterEngine",
    "FilterPolicy",
    "LogEvent",
    "LogPipeline",
    "NameStrategy",
    "PolicyLoader",
    "PolicyMiddleware",
    "RedisLogError",
    "SerializationError",
    "SinkError",
    "SinkUnavailableError",
    "bind_policy",
    "create_pipeline",
    "current_policy",
    "level_preset",
    "merge_policy",
    "policy_scope",
    "reset_policy",
    "serialize_event",
    "tenant_name",
]
