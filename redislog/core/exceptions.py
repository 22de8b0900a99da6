"""Error taxonomy for the log pipeline.

Malformed filter policies are never an error: the filter engine treats
them as absent and lets events through.
"""


class RedisLogError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(RedisLogError, ValueError):
    """Invalid sink or pipeline construction parameters."""


class SinkError(RedisLogError):
    """A sink could not accept an event."""

    def __init__(self, sink: str, message: str):
        self.sink = sink
        super().__init__(f"{sink}: {message}")


class SinkUnavailableError(SinkError):
    """The store was unreachable or rejected the write/publish."""


class SerializationError(SinkError):
    """The event could not be encoded for storage.

    Fatal for that single event only.
    """
