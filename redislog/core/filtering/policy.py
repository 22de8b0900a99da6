"""Filter policy model and log-level presets."""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class LogLevel(str, Enum):
    """Log levels, ordered from most to least verbose."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


LEVEL_ORDER: tuple[LogLevel, ...] = tuple(LogLevel)

_LEVEL_ALIASES = {
    "warning": LogLevel.WARN,
}


class FilterPolicy(BaseModel):
    """Suppression switches for one request.

    Every switch defaults to True (allow); False suppresses matching events.
    Instances are frozen so a compiled policy cannot change under evaluation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Tag switches
    content: bool = True
    viz: bool = True
    api: bool = True

    # Status code switches
    successes: bool = True  # 200-399
    warnings: bool = True  # 400-499
    errors: bool = True  # 500-999

    # Level tag switches
    trace: bool = True
    warn: bool = True
    error: bool = True
    debug: bool = True
    info: bool = True

    @classmethod
    def switches(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields)

    @classmethod
    def from_raw(cls, raw: Any) -> "FilterPolicy | None":
        """Build a policy from host data, or None when there is no usable policy.

        Non-mapping and empty input count as absent. Unknown keys and
        non-boolean values are ignored, leaving that switch allowed.
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping) or not raw:
            return None

        fields = {
            name: raw[name]
            for name in cls.switches()
            if isinstance(raw.get(name), bool)
        }
        return cls(**fields)

    def suppressed(self) -> tuple[str, ...]:
        """Names of switches set to suppress."""
        return tuple(name for name in self.switches() if getattr(self, name) is False)

    def to_dict(self) -> dict[str, bool]:
        return self.model_dump()


def parse_level(name: Any) -> LogLevel | None:
    """Parse a level name, case-insensitively. Unknown names yield None."""
    if isinstance(name, LogLevel):
        return name
    if not isinstance(name, str):
        return None

    key = name.strip().lower()
    if key in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[key]
    try:
        return LogLevel(key)
    except ValueError:
        return None


def level_preset(name: Any) -> dict[str, bool]:
    """Expand a level name into level switches.

    A level enables itself and every less verbose level, and disables
    every more verbose one:

        >>> level_preset("warn")
        {'trace': False, 'debug': False, 'info': False, 'warn': True, 'error': True}
    """
    level = parse_level(name)
    if level is None:
        return {}

    threshold = LEVEL_ORDER.index(level)
    return {
        candidate.value: index >= threshold
        for index, candidate in enumerate(LEVEL_ORDER)
    }


def merge_policy(level: Any = None, explicit: Any = None) -> FilterPolicy | None:
    """Combine a level preset with explicit per-field settings.

    Explicit settings override the preset field by field. Returns None when
    neither side contributes anything.
    """
    merged: dict[str, Any] = dict(level_preset(level))
    if isinstance(explicit, FilterPolicy):
        merged.update(explicit.model_dump(exclude_unset=True))
    elif isinstance(explicit, Mapping):
        merged.update({k: v for k, v in explicit.items() if isinstance(v, bool)})

    return FilterPolicy.from_raw(merged)
