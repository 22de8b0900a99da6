"""ASGI middleware binding per-request filter policy."""

from typing import Any, Callable

import structlog

from redislog.core.events.types import RESPONSE_EVENT, LogEvent, LogTag
from redislog.core.logging import get_logger
from redislog.core.pipeline import LogPipeline, PolicyLoader, bind_policy, reset_policy


def app_state_settings(scope: dict) -> Any:
    """Default settings provider: ``app.state.log_settings``."""
    app = scope.get("app")
    state = getattr(app, "state", None)
    return getattr(state, "log_settings", None)


class PolicyMiddleware:
    """
    ASGI middleware resolving the filter policy once per request.

    The policy is bound for the whole request, so every event the request
    sends through the pipeline carries it. With emit_responses enabled, a
    "response" event with the final status code is processed when the
    request completes.

    Usage:
        app.add_middleware(
            PolicyMiddleware,
            pipeline=pipeline,
            policy_loader=PolicyLoader("redislog.filter", "redislog.level"),
        )
    """

    SKIP_PATHS = {"/health", "/metrics"}

    def __init__(
        self,
        app: Any,
        pipeline: LogPipeline,
        policy_loader: PolicyLoader | None = None,
        settings_provider: Callable[[dict], Any] = app_state_settings,
        emit_responses: bool = True,
        response_tags: list[str] | None = None,
    ) -> None:
        self.app = app
        self.pipeline = pipeline
        self.policy_loader = policy_loader or pipeline.policy_loader
        self.settings_provider = settings_provider
        self.emit_responses = emit_responses
        self.response_tags = response_tags or [LogTag.API.value]
        self.logger = get_logger("redislog.http")

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if path in self.SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        policy = self.policy_loader.load(self.settings_provider(scope))
        token = bind_policy(policy)

        status_code = 500

        async def send_wrapper(message: dict) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            try:
                if self.emit_responses:
                    await self._emit_response(scope, path, status_code)
            finally:
                reset_policy(token)

    async def _emit_response(self, scope: dict, path: str, status_code: int) -> None:
        event = LogEvent(
            event=RESPONSE_EVENT,
            statusCode=status_code,
            tags=list(self.response_tags),
            method=scope.get("method", ""),
            path=path,
            **self._context_fields(),
        )
        report = await self.pipeline.process(event)
        if not report.ok:
            self.logger.warning(
                "response_event_not_delivered",
                path=path,
                status_code=status_code,
                failed_sinks=sorted(report.errors),
            )

    @staticmethod
    def _context_fields() -> dict[str, Any]:
        """Carry structlog request context (e.g. correlation_id) into the event."""
        context = structlog.contextvars.get_contextvars()
        correlation_id = context.get("correlation_id")
        return {"correlation_id": correlation_id} if correlation_id else {}
