"""Fan-out channel sink: best-effort Redis pub/sub broadcast."""

from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from redislog.core.events.types import serialize_event
from redislog.core.exceptions import SinkUnavailableError
from redislog.core.logging import get_logger
from redislog.core.sinks.base import BaseSink, Connection

logger = get_logger(__name__)


class ChannelSink(BaseSink):
    """
    Publishes each event to a Redis channel for live subscribers.

    Not a durability mechanism: subscribers that are not connected miss the
    event. Without a channel the sink is inert and never touches Redis.
    """

    sink_name = "channel"

    def __init__(
        self,
        connection: Connection = None,
        *,
        channel: str | None = None,
        client: redis.Redis | None = None,
        label: str | None = None,
    ):
        self.channel = channel or None
        self.last_receivers: int | None = None
        super().__init__(connection, client=client, label=label)

    @property
    def requires_client(self) -> bool:
        return self.channel is not None

    @property
    def enabled(self) -> bool:
        return self.channel is not None

    async def _write(self, event: Any) -> None:
        if self.channel is None:
            return

        payload = serialize_event(event, sink=self.label)

        try:
            self.last_receivers = await self.client.publish(self.channel, payload)
        except RedisError as e:
            logger.warning("channel_publish_failed", channel=self.channel, error=str(e))
            raise SinkUnavailableError(self.label, f"publish to {self.channel!r} failed: {e}") from e
