"""Event filtering."""

from redislog.core.filtering.engine import Decision, FilterEngine, compile_policy
from redislog.core.filtering.policy import (
    FilterPolicy,
    LogLevel,
    level_preset,
    merge_policy,
    parse_level,
)

__all__ = [
    "Decision",
    "FilterEngine",
    "FilterPolicy",
    "LogLevel",
    "compile_policy",
    "level_preset",
    "merge_policy",
    "parse_level",
]
