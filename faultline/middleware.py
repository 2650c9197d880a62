from __future__ import annotations

from typing import Any, Callable

import starlette
import structlog
from starlette.datastructures import Headers

from faultline.config import Settings, get_settings
from faultline.context import ContextStore, get_context_store
from faultline.filters import user_agent_ignored
from faultline.notifier import Notifier
from faultline.request_data import build_request_payload

RESULT_KEY = "faultline.error_id"

# Checked in order; the first key holding an exception wins.
FRAMEWORK_EXCEPTION_KEYS = ("dispatch.exception", "asgi.exception", "starlette.error")


def framework_exception(scope: dict[str, Any]) -> BaseException | None:
    for key in FRAMEWORK_EXCEPTION_KEYS:
        error = scope.get(key)
        if error is not None:
            return error
    return None


class ErrorReportingMiddleware:
    """Reports errors raised (or recorded in the scope) by the wrapped app, then re-raises them."""

    def __init__(
        self,
        app: Callable[..., Any],
        *,
        notifier: Notifier,
        settings: Settings | None = None,
        context_store: ContextStore | None = None,
    ) -> None:
        self.app = app
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.context_store = context_store or get_context_store()
        self.settings.framework = f"Starlette: {starlette.__version__}"

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        self.context_store.bind()
        try:
            try:
                await self.app(scope, receive, send)
            except BaseException as exc:
                await self._notify(exc, scope)
                raise

            error = framework_exception(scope)
            if error is not None:
                await self._notify(error, scope)
        finally:
            self.context_store.clear()

    def _skip_user_agent(self, scope: dict[str, Any]) -> bool:
        user_agent = Headers(raw=scope.get("headers") or []).get("user-agent")
        return user_agent_ignored(user_agent, self.settings.ignore_user_agent)

    async def _notify(self, error: BaseException, scope: dict[str, Any]) -> None:
        log = structlog.get_logger("faultline")
        if self._skip_user_agent(scope):
            log.debug("error_report_skipped", reason="ignored_user_agent", error_class=type(error).__name__)
            return

        error_id = await self.notifier.notify_or_ignore(error, build_request_payload(scope))
        if error_id is not None:
            scope[RESULT_KEY] = error_id
            log.info("error_reported", error_id=error_id, error_class=type(error).__name__)
