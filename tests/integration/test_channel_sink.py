"""Integration tests for the fan-out channel sink."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from redislog.core.exceptions import SinkUnavailableError
from redislog.core.sinks.channel import ChannelSink


@pytest.mark.integration
class TestChannelSink:
    """Publishing against fakeredis."""

    @pytest.mark.asyncio
    async def test_publishes_to_subscribers(self, redis_client):
        pubsub = redis_client.pubsub()
        await pubsub.subscribe("live-logs")
        sink = ChannelSink(channel="live-logs", client=redis_client)

        await sink.write({"event": "response", "statusCode": 200})

        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
        assert message is not None
        assert json.loads(message["data"]) == {"event": "response", "statusCode": 200}
        assert sink.last_receivers == 1

        await pubsub.unsubscribe("live-logs")
        await pubsub.aclose()

    @pytest.mark.asyncio
    async def test_no_subscribers_is_not_an_error(self, redis_client):
        sink = ChannelSink(channel="nobody-listening", client=redis_client)

        await sink.write("GET / 200")

        assert sink.last_receivers == 0

    @pytest.mark.asyncio
    async def test_publish_failure(self):
        client = MagicMock()
        client.publish = AsyncMock(side_effect=RedisConnectionError("connection refused"))
        sink = ChannelSink(channel="live-logs", client=client)

        with pytest.raises(SinkUnavailableError):
            await sink.write({"n": 1})


class TestUnconfiguredChannelSink:
    """Without a channel the sink is inert."""

    @pytest.mark.asyncio
    async def test_write_is_noop_and_never_touches_store(self):
        client = MagicMock()
        sink = ChannelSink(client=client)

        await sink.write({"event": "response", "statusCode": 500})
        await sink.write({"bad": object()})

        assert sink.enabled is False
        assert client.mock_calls == []

    @pytest.mark.asyncio
    async def test_no_client_created(self):
        sink = ChannelSink("redis://127.0.0.1:1/0")

        await sink.write({"n": 1})

        assert sink.client is None
        await sink.close()
