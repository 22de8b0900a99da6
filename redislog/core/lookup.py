"""Dotted-path lookup into host-provided settings."""

from collections.abc import Mapping
from typing import Any


def reach(source: Any, path: str | None, default: Any = None) -> Any:
    """Resolve a dotted path such as ``"plugins.redislog.filter"``.

    Each segment is looked up as a mapping key first and as an attribute
    second, so plain dicts, pydantic models and Starlette ``State`` objects
    all work. Missing segments yield ``default``.
    """
    if not path:
        return default

    current = source
    for segment in path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            if segment not in current:
                return default
            current = current[segment]
        elif hasattr(current, segment):
            current = getattr(current, segment)
        else:
            return default
    return current
