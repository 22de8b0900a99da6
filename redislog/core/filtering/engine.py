"""Filter engine: decides which log events are persisted.

Policies compile into exclusion predicates. An event is dropped as soon as
one predicate matches it. Evaluation never raises: malformed events and
policies fall back to letting the event through.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from redislog.core.events.types import POLICY_KEY, RESPONSE_EVENT, LogEvent, LogTag
from redislog.core.filtering.policy import FilterPolicy
from redislog.core.logging import get_logger

logger = get_logger(__name__)


class Decision(str, Enum):
    """Outcome of evaluating one event."""

    PASS = "pass"
    DROP = "drop"


# Switch name -> tag it excludes
TAG_SWITCHES: dict[str, str] = {
    "content": LogTag.CONTENT.value,
    "viz": LogTag.VIZ.value,
    "api": LogTag.API.value,
    "trace": LogTag.TRACE.value,
    "warn": LogTag.WARN.value,
    "error": LogTag.ERROR.value,
    "debug": LogTag.DEBUG.value,
    "info": LogTag.INFO.value,
}

# Switch name -> inclusive status code range it excludes
STATUS_SWITCHES: dict[str, tuple[int, int]] = {
    "successes": (200, 399),
    "warnings": (400, 499),
    "errors": (500, 999),
}


@dataclass(frozen=True)
class EventView:
    """The parts of an event the engine looks at."""

    tags: frozenset[str]
    event: Any
    status_code: int | None
    policy: Any

    @classmethod
    def of(cls, event: Any) -> "EventView":
        if isinstance(event, LogEvent):
            data = {
                "tags": event.tags,
                "event": event.event,
                "statusCode": event.status_code,
                "config": event.config,
            }
        elif isinstance(event, Mapping):
            data = event
        else:
            data = {}

        raw_tags = data.get("tags")
        if isinstance(raw_tags, (list, tuple, set, frozenset)):
            tags = frozenset(t for t in raw_tags if isinstance(t, str))
        elif isinstance(raw_tags, str):
            tags = frozenset([raw_tags])
        else:
            tags = frozenset()

        status = data.get("statusCode", data.get("status_code"))
        if isinstance(status, bool) or not isinstance(status, int):
            status = None

        config = data.get("config")
        policy = config.get(POLICY_KEY) if isinstance(config, Mapping) else None

        return cls(tags=tags, event=data.get("event"), status_code=status, policy=policy)


@dataclass(frozen=True)
class TagPredicate:
    """Matches events carrying a tag."""

    tag: str

    def matches(self, view: EventView) -> bool:
        return self.tag in view.tags


@dataclass(frozen=True)
class StatusRangePredicate:
    """Matches events whose status code falls in [low, high]."""

    low: int
    high: int

    def matches(self, view: EventView) -> bool:
        return view.status_code is not None and self.low <= view.status_code <= self.high


Predicate = TagPredicate | StatusRangePredicate


@lru_cache(maxsize=256)
def compile_policy(policy: FilterPolicy) -> tuple[Predicate, ...]:
    """Compile a policy into exclusion predicates, one per suppressed switch."""
    predicates: list[Predicate] = []
    for switch in policy.suppressed():
        if switch in TAG_SWITCHES:
            predicates.append(TagPredicate(TAG_SWITCHES[switch]))
        elif switch in STATUS_SWITCHES:
            low, high = STATUS_SWITCHES[switch]
            predicates.append(StatusRangePredicate(low, high))
    return tuple(predicates)


class FilterEngine:
    """
    Evaluates events against the policy attached to them.

    Order of checks:
    1. No usable policy and tagged "content": drop
    2. No usable policy: pass
    3. response_only and event is not a "response": pass
    4. Any exclusion predicate matches: drop, otherwise pass

    Args:
        response_only: Apply policy rules to "response" events only.
            By default rules apply to every event that carries a policy.
    """

    def __init__(self, response_only: bool = False):
        self.response_only = response_only

    def compile(self, policy: Any) -> tuple[Predicate, ...]:
        parsed = FilterPolicy.from_raw(policy)
        if parsed is None:
            return ()
        return compile_policy(parsed)

    def evaluate(self, event: Any) -> Decision:
        view = EventView.of(event)
        policy = FilterPolicy.from_raw(view.policy)

        if policy is None:
            if LogTag.CONTENT.value in view.tags:
                return Decision.DROP
            return Decision.PASS

        if self.response_only and view.event != RESPONSE_EVENT:
            return Decision.PASS

        predicates = compile_policy(policy)
        if not predicates:
            return Decision.PASS

        if any(predicate.matches(view) for predicate in predicates):
            logger.debug(
                "event_suppressed",
                event_type=view.event,
                status_code=view.status_code,
                tags=sorted(view.tags),
            )
            return Decision.DROP
        return Decision.PASS

    def should_persist(self, event: Any) -> bool:
        return self.evaluate(event) is Decision.PASS
