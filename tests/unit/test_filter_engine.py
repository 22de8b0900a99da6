"""Unit tests for the filter engine."""

import pytest

from redislog.core.events.types import LogEvent
from redislog.core.filtering.engine import (
    Decision,
    EventView,
    FilterEngine,
    StatusRangePredicate,
    TagPredicate,
    compile_policy,
)
from redislog.core.filtering.policy import FilterPolicy

ALL_ALLOWED = {name: True for name in FilterPolicy.switches()}


def response(status_code, tags=None, policy=None, **extra):
    event = {"event": "response", "statusCode": status_code, "tags": tags or [], **extra}
    if policy is not None:
        event["config"] = {"requestResponseFilter": policy}
    return event


@pytest.fixture
def engine() -> FilterEngine:
    return FilterEngine()


class TestWithoutPolicy:
    """Events that carry no usable policy."""

    @pytest.mark.parametrize("tags", [[], ["api"], ["error", "viz"], ["debug"]])
    def test_passes_untagged_content(self, engine, tags):
        assert engine.evaluate(response(500, tags)) is Decision.PASS

    @pytest.mark.parametrize("config", [None, {}, {"requestResponseFilter": {}}, {"requestResponseFilter": "x"}])
    def test_content_tag_suppressed(self, engine, config):
        event = {"event": "log", "tags": ["content"], "config": config}
        assert engine.evaluate(event) is Decision.DROP

    def test_explicit_policy_wins_over_content_rule(self, engine):
        event = response(200, ["content"], policy={"content": True})
        assert engine.evaluate(event) is Decision.PASS

    @pytest.mark.parametrize("event", [None, "plain text line", 42, {"tags": "api"}, {"tags": None}])
    def test_total_over_any_shape(self, engine, event):
        assert engine.evaluate(event) is Decision.PASS


class TestWithPolicy:
    """Status range and tag exclusions."""

    def test_all_allowed_passes_everything(self, engine):
        for status in (200, 302, 404, 503):
            for tags in ([], ["content"], ["error", "api", "viz", "trace"]):
                assert engine.evaluate(response(status, tags, ALL_ALLOWED)) is Decision.PASS

    def test_successes_off(self, engine):
        policy = {"successes": False}

        assert engine.evaluate(response(204, policy=policy)) is Decision.DROP
        assert engine.evaluate(response(404, policy=policy)) is Decision.PASS

    @pytest.mark.parametrize(
        "switch,dropped,passed",
        [
            ("successes", [200, 301, 399], [199, 400, 500]),
            ("warnings", [400, 404, 499], [399, 500]),
            ("errors", [500, 503, 999], [499, 1000]),
        ],
    )
    def test_status_ranges_inclusive(self, engine, switch, dropped, passed):
        policy = {switch: False}
        for status in dropped:
            assert engine.evaluate(response(status, policy=policy)) is Decision.DROP
        for status in passed:
            assert engine.evaluate(response(status, policy=policy)) is Decision.PASS

    @pytest.mark.parametrize("tag", ["content", "viz", "api", "trace", "warn", "error", "debug", "info"])
    def test_tag_switches(self, engine, tag):
        policy = {tag: False}

        assert engine.evaluate(response(200, [tag, "other"], policy)) is Decision.DROP
        assert engine.evaluate(response(200, ["other"], policy)) is Decision.PASS

    def test_any_match_drops(self, engine):
        policy = {"errors": False, "debug": False}

        assert engine.evaluate(response(200, ["debug"], policy)) is Decision.DROP
        assert engine.evaluate(response(503, [], policy)) is Decision.DROP
        assert engine.evaluate(response(200, [], policy)) is Decision.PASS

    def test_missing_status_code_never_matches_ranges(self, engine):
        event = {"event": "response", "tags": [], "config": {"requestResponseFilter": {"successes": False}}}
        assert engine.evaluate(event) is Decision.PASS

    def test_log_event_model(self, engine):
        event = LogEvent(
            event="response",
            statusCode=503,
            config={"requestResponseFilter": {"errors": False}},
        )
        assert engine.evaluate(event) is Decision.DROP
        assert engine.should_persist(event) is False


class TestResponseScope:
    """Rule scope for non-response events."""

    def test_rules_apply_to_every_event_by_default(self, engine):
        event = {"event": "log", "tags": ["debug"], "config": {"requestResponseFilter": {"debug": False}}}
        assert engine.evaluate(event) is Decision.DROP

    def test_response_only_skips_other_events(self):
        engine = FilterEngine(response_only=True)
        policy = {"debug": False}

        log_event = {"event": "log", "tags": ["debug"], "config": {"requestResponseFilter": policy}}
        assert engine.evaluate(log_event) is Decision.PASS
        assert engine.evaluate(response(200, ["debug"], policy)) is Decision.DROP


class TestCompile:
    """Tests for policy compilation."""

    def test_no_predicates_for_allow_all(self, engine):
        assert engine.compile(ALL_ALLOWED) == ()
        assert engine.compile(None) == ()

    def test_predicates_per_switch(self):
        predicates = compile_policy(FilterPolicy(errors=False, viz=False))

        assert set(predicates) == {StatusRangePredicate(500, 999), TagPredicate("viz")}

    def test_compile_is_idempotent(self, engine):
        policy = {"warnings": False, "api": False}
        first = engine.compile(policy)
        second = engine.compile(dict(policy))
        events = [response(404), response(200, ["api"]), response(200), response(503, ["viz"])]

        assert first == second
        for event in events:
            view_first = [p.matches(EventView.of(event)) for p in first]
            view_second = [p.matches(EventView.of(event)) for p in second]
            assert view_first == view_second
