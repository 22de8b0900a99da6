"""Target name strategies for the bounded list sink."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable

from redislog.core.events.types import LogEvent
from redislog.core.exceptions import ConfigurationError

DEFAULT_TENANT = "manager"


class NameStrategy(ABC):
    """Computes the Redis key an event is written to.

    Called on every write; results are never cached.
    """

    @abstractmethod
    def compute(self, event: Any) -> str:
        """Return the target key for this event."""


class ConstantName(NameStrategy):
    """Same key for every event."""

    def __init__(self, name: str):
        if not name:
            raise ConfigurationError("name must be a non-empty string")
        self.name = name

    def compute(self, event: Any) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ConstantName({self.name!r})"


class DerivedName(NameStrategy):
    """Key computed from the event by a user-supplied function."""

    def __init__(self, func: Callable[[Any], str]):
        if not callable(func):
            raise ConfigurationError("redis_key must be a string or a callable")
        self.func = func

    def compute(self, event: Any) -> str:
        return str(self.func(event))

    def __repr__(self) -> str:
        return f"DerivedName({getattr(self.func, '__name__', self.func)!r})"


def event_tenant(event: Any, default: str = DEFAULT_TENANT) -> str:
    """Read config.tenant from an event, falling back to ``default``."""
    if isinstance(event, LogEvent):
        tenant = event.tenant
    elif isinstance(event, Mapping) and isinstance(event.get("config"), Mapping):
        tenant = event["config"].get("tenant")
    else:
        tenant = None
    return str(tenant) if tenant else default


def tenant_name(base: str, default_tenant: str = DEFAULT_TENANT) -> DerivedName:
    """Partition a list per tenant: ``"{base}:{tenant}"``."""

    def name_for_tenant(event: Any) -> str:
        return f"{base}:{event_tenant(event, default_tenant)}"

    return DerivedName(name_for_tenant)


def resolve_name_strategy(
    name: str | None = None,
    redis_key: str | Callable[[Any], str] | NameStrategy | None = None,
) -> NameStrategy:
    """Pick the naming strategy from sink options.

    ``redis_key`` takes precedence over ``name``.
    """
    if redis_key is not None:
        if isinstance(redis_key, NameStrategy):
            return redis_key
        if isinstance(redis_key, str):
            return ConstantName(redis_key)
        return DerivedName(redis_key)

    if name is not None:
        return ConstantName(name)

    raise ConfigurationError("either name or redis_key is required")
