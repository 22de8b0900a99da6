"""
Shared pytest fixtures for redislog tests.

Test categories:
    - Unit tests: in-memory sinks, no store
    - Integration tests: fakeredis async client standing in for Redis
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fakeredis import aioredis

# Override settings BEFORE importing package modules
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("REDIS_URL", "redis://localhost:6380/0")

from redislog.config import Settings  # noqa: E402
from redislog.core.exceptions import SinkUnavailableError  # noqa: E402
from redislog.core.sinks.base import BaseSink  # noqa: E402


# =============================================================================
# In-memory sinks
# =============================================================================


class RecordingSink(BaseSink):
    """Sink that keeps written events in memory."""

    sink_name = "recording"

    def __init__(self, label: str = "recording", fail: bool = False):
        self.events: list[Any] = []
        self.fail = fail
        super().__init__(label=label)

    @property
    def requires_client(self) -> bool:
        return False

    async def _write(self, event: Any) -> None:
        if self.fail:
            raise SinkUnavailableError(self.label, "store unreachable")
        self.events.append(event)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> RecordingSink:
    return RecordingSink(label="failing", fail=True)


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings instance that ignores any local .env file."""
    return Settings(
        _env_file=None,
        app_env="testing",
        redis_url="redis://localhost:6380/0",
        log_level="WARNING",
    )


# =============================================================================
# Redis Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[aioredis.FakeRedis, None]:
    """Fresh fakeredis client (decoded responses) per test."""
    client = aioredis.FakeRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.flushall()
    await client.aclose()
