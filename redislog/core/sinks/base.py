"""Base sink class."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import redis.asyncio as redis

from redislog.core.exceptions import ConfigurationError
from redislog.core.logging import get_logger

logger = get_logger(__name__)

Connection = str | Mapping[str, Any] | None


def create_client(connection: Connection) -> redis.Redis:
    """Build a Redis client from a URL or from keyword arguments."""
    if connection is None or isinstance(connection, str):
        return redis.from_url(connection or "redis://localhost:6379/0")
    if isinstance(connection, Mapping):
        if "url" in connection:
            options = dict(connection)
            return redis.from_url(options.pop("url"), **options)
        return redis.Redis(**connection)
    raise ConfigurationError(f"unsupported connection type: {type(connection).__name__}")


class BaseSink(ABC):
    """
    Terminal consumer of filtered events.

    Each sink owns its Redis client for its whole lifetime and serializes
    its own writes: a write waits until the previous one has completed, in
    arrival order.

    Subclasses implement _write(), which raises SinkUnavailableError or
    SerializationError on failure.
    """

    sink_name: str = "sink"

    def __init__(
        self,
        connection: Connection = None,
        *,
        client: redis.Redis | None = None,
        label: str | None = None,
    ):
        self.label = label or self.sink_name
        self._owns_client = client is None and self.requires_client
        self.client: redis.Redis | None = client
        if self._owns_client:
            self.client = create_client(connection)
        self._lock = asyncio.Lock()

    @property
    def requires_client(self) -> bool:
        """Whether this sink talks to the store at all."""
        return True

    async def write(self, event: Any) -> None:
        """Write one event.

        Raises:
            SinkUnavailableError: store unreachable or write rejected
            SerializationError: event cannot be encoded
        """
        async with self._lock:
            await self._write(event)

    @abstractmethod
    async def _write(self, event: Any) -> None:
        """Perform the write. Called with the sink lock held."""

    async def close(self) -> None:
        """Release the Redis client if this sink created it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()
            logger.debug("sink_closed", sink=self.label)
        self.client = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(label={self.label!r})"
