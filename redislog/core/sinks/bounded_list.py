"""Bounded list sink: newest-first capped Redis lists."""

from typing import Any, Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from redislog.core.events.types import serialize_event
from redislog.core.exceptions import ConfigurationError, SinkUnavailableError
from redislog.core.logging import get_logger
from redislog.core.sinks.base import BaseSink, Connection
from redislog.core.sinks.naming import NameStrategy, resolve_name_strategy

logger = get_logger(__name__)

DEFAULT_MAX_SIZE = 1000


class BoundedListSink(BaseSink):
    """
    Appends each event to the head of a Redis list capped at max_size.

    LPUSH and LTRIM run inside one MULTI/EXEC transaction, so readers see
    the list either before or after a write, never in between. The oldest
    entries are evicted first.

    Args:
        connection: Redis URL or client keyword arguments
        name: Static list key
        redis_key: Static key or function of the event; wins over name
        max_size: Maximum list length (default 1000)
        client: Existing client to use instead of creating one
    """

    sink_name = "bounded_list"

    def __init__(
        self,
        connection: Connection = None,
        *,
        name: str | None = None,
        redis_key: str | Callable[[Any], str] | NameStrategy | None = None,
        max_size: int = DEFAULT_MAX_SIZE,
        client: redis.Redis | None = None,
        label: str | None = None,
    ):
        if not isinstance(max_size, int) or max_size < 1:
            raise ConfigurationError(f"max_size must be a positive integer, got {max_size!r}")

        self.naming = resolve_name_strategy(name=name, redis_key=redis_key)
        self.max_size = max_size
        super().__init__(connection, client=client, label=label)

    def target_name(self, event: Any) -> str:
        """Compute the list key for this event."""
        return self.naming.compute(event)

    async def _write(self, event: Any) -> None:
        key = self.target_name(event)
        payload = serialize_event(event, sink=self.label)

        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.lpush(key, payload)
                pipe.ltrim(key, 0, self.max_size - 1)
                await pipe.execute()
        except RedisError as e:
            logger.warning("bounded_list_write_failed", key=key, error=str(e))
            raise SinkUnavailableError(self.label, f"write to {key!r} failed: {e}") from e
