"""Log event model and serialization."""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError

from redislog.core.exceptions import SerializationError


class LogTag(str, Enum):
    """Well-known event tags."""

    CONTENT = "content"
    VIZ = "viz"
    API = "api"
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


RESPONSE_EVENT = "response"

# Key under event.config carrying the per-request filter policy
POLICY_KEY = "requestResponseFilter"


class LogEvent(BaseModel):
    """One structured log record flowing through the pipeline.

    Unknown fields are kept so host-specific data survives serialization.
    Hosts may also submit plain mappings; the pipeline stores those as given.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    tags: list[str] = Field(default_factory=list)
    event: str | None = None  # Discriminator, e.g. "response"
    status_code: int | None = Field(default=None, alias="statusCode")
    config: dict[str, Any] | None = None

    @property
    def tenant(self) -> Any:
        if isinstance(self.config, dict):
            return self.config.get("tenant")
        return None


def serialize_event(event: Any, sink: str = "sink") -> str:
    """Encode an event for storage.

    Text passes through untouched; everything else becomes canonical JSON
    (sorted keys, compact separators).

    Raises:
        SerializationError: if the event cannot be JSON encoded
    """
    if isinstance(event, str):
        return event
    if isinstance(event, (bytes, bytearray)):
        try:
            return bytes(event).decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(sink, f"event is not valid UTF-8: {e}") from e

    if isinstance(event, BaseModel):
        try:
            payload = event.model_dump(mode="json", by_alias=True, exclude_unset=True)
        except PydanticSerializationError as e:
            raise SerializationError(sink, f"event is not JSON serializable: {e}") from e
    else:
        payload = event

    try:
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(sink, f"event is not JSON serializable: {e}") from e
