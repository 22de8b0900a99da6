"""Redis sinks for filtered log events."""

from redislog.core.sinks.base import BaseSink, create_client
from redislog.core.sinks.bounded_list import DEFAULT_MAX_SIZE, BoundedListSink
from redislog.core.sinks.channel import ChannelSink
from redislog.core.sinks.naming import (
    ConstantName,
    DerivedName,
    NameStrategy,
    event_tenant,
    resolve_name_strategy,
    tenant_name,
)

__all__ = [
    "BaseSink",
    "BoundedListSink",
    "ChannelSink",
    "ConstantName",
    "DEFAULT_MAX_SIZE",
    "DerivedName",
    "NameStrategy",
    "create_client",
    "event_tenant",
    "resolve_name_strategy",
    "tenant_name",
]
