"""Pipeline assembly: policy loading, filtering and sink fan-out.

Usage:
    pipeline = LogPipeline(
        [BoundedListSink(settings.redis_url, name="logs"), ChannelSink(channel="logs")],
        policy_loader=PolicyLoader("redislog.filter", "redislog.level"),
    )

    with policy_scope(pipeline.policy_loader.load(host_settings)):
        report = await pipeline.process({"event": "response", "statusCode": 200})
"""

import asyncio
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from redislog.core.events.types import POLICY_KEY, LogEvent
from redislog.core.filtering.engine import Decision, FilterEngine
from redislog.core.filtering.policy import FilterPolicy, merge_policy
from redislog.core.logging import get_logger
from redislog.core.lookup import reach
from redislog.core.sinks.base import BaseSink

logger = get_logger(__name__)

# Policy resolved for the current unit of work (request)
_current_policy: ContextVar[FilterPolicy | None] = ContextVar("redislog_policy", default=None)


def current_policy() -> FilterPolicy | None:
    return _current_policy.get()


def bind_policy(policy: FilterPolicy | None) -> Token:
    """Bind a policy to the current context. Pass the token to reset_policy()."""
    return _current_policy.set(policy)


def reset_policy(token: Token) -> None:
    _current_policy.reset(token)


@contextmanager
def policy_scope(policy: FilterPolicy | None) -> Iterator[FilterPolicy | None]:
    """Bind a policy for the duration of a block."""
    token = bind_policy(policy)
    try:
        yield policy
    finally:
        reset_policy(token)


class PolicyLoader:
    """
    Resolves the filter policy for one unit of work from host settings.

    Args:
        settings_path: Dotted path of the policy mapping in host settings.
            Without it no policy is ever attached.
        log_settings_path: Dotted path of a level name (trace, debug, info,
            warn, error) merged under the explicit policy.
    """

    def __init__(self, settings_path: str | None = None, log_settings_path: str | None = None):
        self.settings_path = settings_path
        self.log_settings_path = log_settings_path

    @property
    def enabled(self) -> bool:
        return bool(self.settings_path)

    def load(self, host_settings: Any) -> FilterPolicy | None:
        if not self.settings_path:
            return None

        explicit = reach(host_settings, self.settings_path)
        level = reach(host_settings, self.log_settings_path) if self.log_settings_path else None
        return merge_policy(level=level, explicit=explicit)

    def __call__(self, host_settings: Any) -> FilterPolicy | None:
        return self.load(host_settings)


@dataclass
class DeliveryReport:
    """Outcome of processing one event."""

    decision: Decision
    errors: dict[str, BaseException] = field(default_factory=dict)
    sinks: tuple[str, ...] = ()

    @property
    def dropped(self) -> bool:
        return self.decision is Decision.DROP

    @property
    def delivered(self) -> tuple[str, ...]:
        """Sinks that accepted the event."""
        return tuple(name for name in self.sinks if name not in self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors


class LogPipeline:
    """
    Filters events and forwards survivors to every sink.

    Sinks are independent: each receives every passed event, and one
    failing never blocks or fails the others. Failures are reported in the
    DeliveryReport, never raised, so the host decides whether to retry.

    Events reach the sinks exactly as submitted; the only change is the
    bound policy added under config.requestResponseFilter.

    Events can be processed directly with process(), or submitted to a
    bounded queue drained in arrival order by run(). run() feeds each sink
    through its own bounded queue, so a slow sink only holds back its own
    writes until its queue fills. submit() suspends while the intake queue
    is full.
    """

    def __init__(
        self,
        sinks: Sequence[BaseSink],
        *,
        engine: FilterEngine | None = None,
        policy_loader: PolicyLoader | None = None,
        queue_size: int = 100,
        on_error: Callable[[Any, DeliveryReport], Any] | None = None,
    ):
        labels = [sink.label for sink in sinks]
        if len(set(labels)) != len(labels):
            raise ValueError(f"sink labels must be unique: {labels}")

        self.sinks = list(sinks)
        self.engine = engine or FilterEngine()
        self.policy_loader = policy_loader or PolicyLoader()
        self.on_error = on_error
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._sink_queues: list[tuple[BaseSink, asyncio.Queue]] = [
            (sink, asyncio.Queue(maxsize=queue_size)) for sink in self.sinks
        ]
        self.running = False

    # === POLICY ===

    def attach_policy(self, event: Any, policy: FilterPolicy | None = None) -> Any:
        """Attach the bound policy unless the event already carries one.

        Returns the event to process (a copy when the policy was attached).
        """
        policy = policy if policy is not None else current_policy()
        if policy is None:
            return event

        if isinstance(event, LogEvent):
            config = dict(event.config or {})
            if config.get(POLICY_KEY):
                return event
            config[POLICY_KEY] = policy.to_dict()
            return event.model_copy(update={"config": config})

        if isinstance(event, Mapping):
            raw_config = event.get("config")
            config = dict(raw_config) if isinstance(raw_config, Mapping) else {}
            if config.get(POLICY_KEY):
                return event
            config[POLICY_KEY] = policy.to_dict()
            return {**event, "config": config}

        return event

    # === PROCESSING ===

    async def process(self, event: Any) -> DeliveryReport:
        """Filter one event and write it to all sinks."""
        event = self.attach_policy(event)
        decision = self.engine.evaluate(event)
        labels = tuple(sink.label for sink in self.sinks)

        if decision is Decision.DROP:
            return DeliveryReport(decision=decision, sinks=labels)

        results = await asyncio.gather(
            *(sink.write(event) for sink in self.sinks),
            return_exceptions=True,
        )

        errors: dict[str, BaseException] = {}
        for sink, result in zip(self.sinks, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                errors[sink.label] = result
                self._log_failure(sink, result)

        return DeliveryReport(decision=decision, errors=errors, sinks=labels)

    async def submit(self, event: Any) -> None:
        """Queue an event for run(); waits while the queue is full.

        The policy bound to the caller's context is attached here, since
        run() executes in its own context.
        """
        await self._queue.put(self.attach_policy(event))

    async def run(self) -> None:
        """Drain the intake queue in arrival order until stop() is called.

        Passed events are handed to one worker per sink. On stop, writes
        already handed out are finished before returning.

        This is a long-running coroutine that should be run as a background task.
        """
        self.running = True
        workers = [
            asyncio.create_task(self._sink_worker(sink, queue))
            for sink, queue in self._sink_queues
        ]
        logger.info("pipeline_started", sinks=[sink.label for sink in self.sinks])

        try:
            while self.running:
                try:
                    event = await asyncio.wait_for(self._queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue

                try:
                    await self._dispatch(event)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error("pipeline_event_error", error=str(e))
                finally:
                    self._queue.task_done()

            for _, queue in self._sink_queues:
                await queue.join()
        except asyncio.CancelledError:
            logger.info("pipeline_cancelled")
            raise
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        logger.info("pipeline_stopped")

    async def _dispatch(self, event: Any) -> None:
        if self.engine.evaluate(event) is Decision.DROP:
            return
        for _, queue in self._sink_queues:
            await queue.put(event)

    async def _sink_worker(self, sink: BaseSink, queue: asyncio.Queue) -> None:
        """Write queued events to one sink, in order, until cancelled."""
        while True:
            event = await queue.get()
            try:
                await sink.write(event)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log_failure(sink, e)
                report = DeliveryReport(
                    decision=Decision.PASS,
                    errors={sink.label: e},
                    sinks=(sink.label,),
                )
                await self._report_failure(event, report)
            finally:
                queue.task_done()

    async def _report_failure(self, event: Any, report: DeliveryReport) -> None:
        if self.on_error is None:
            return
        try:
            result = self.on_error(event, report)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error("pipeline_on_error_failed", error=str(e))

    @staticmethod
    def _log_failure(sink: BaseSink, error: BaseException) -> None:
        logger.warning(
            "sink_write_failed",
            sink=sink.label,
            error=str(error),
            error_type=type(error).__name__,
        )

    async def drain(self) -> None:
        """Wait until every queued event has been written by every sink."""
        await self._queue.join()
        for _, queue in self._sink_queues:
            await queue.join()

    def stop(self) -> None:
        """Stop run() after the event in progress."""
        self.running = False

    async def close(self) -> None:
        """Stop processing and close all sinks."""
        self.stop()
        for sink in self.sinks:
            await sink.close()
