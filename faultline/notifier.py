from __future__ import annotations

import socket
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx
import structlog

from faultline.config import Settings, get_settings
from faultline.context import ContextStore, get_context_store
from faultline.filters import exception_ignored
from faultline.models.schemas import Notice, NoticeCause, NoticeError, NoticeNotifier, NoticeServer
from faultline.version import __version__

_MAX_DEPTH = 8
_MAX_CAUSES = 5


class Notifier(Protocol):
    async def notify_or_ignore(self, error: BaseException, payload: dict[str, Any]) -> str | None:
        """Report ``error`` and return a report id, or None if it was ignored."""
        ...


def _jsonable(value: Any, depth: int = 0) -> Any:
    # ASGI scopes carry app/router objects and raw header bytes.
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if depth >= _MAX_DEPTH:
        return repr(value)
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if isinstance(value, dict):
        return {str(k): _jsonable(v, depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v, depth + 1) for v in value]
    return repr(value)


def _error_class(error: BaseException) -> str:
    cls = type(error)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _causes(error: BaseException) -> list[NoticeCause]:
    causes: list[NoticeCause] = []
    seen = {id(error)}
    current = error.__cause__ or error.__context__
    while current is not None and id(current) not in seen and len(causes) < _MAX_CAUSES:
        seen.add(id(current))
        causes.append(NoticeCause(class_name=_error_class(current), message=str(current)))
        current = current.__cause__ or current.__context__
    return causes


class HttpNotifier:
    """Deliver notices to the tracking service over HTTP.

    Transport failures are logged and never raised; the locally generated
    notice id is returned either way so callers can correlate the request.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        context_store: ContextStore | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.context_store = context_store or get_context_store()
        self._client = client
        self._owns_client = client is None
        self._log = structlog.get_logger("faultline.notifier")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.notify_timeout_seconds)
        return self._client

    def build_notice(self, error: BaseException, payload: dict[str, Any]) -> Notice:
        backtrace = traceback.format_exception(type(error), error, error.__traceback__)
        return Notice(
            id=str(uuid.uuid4()),
            occurred_at=datetime.now(timezone.utc),
            notifier=NoticeNotifier(version=__version__),
            error=NoticeError(
                class_name=_error_class(error),
                message=str(error),
                backtrace=[line.rstrip("\n") for line in backtrace],
                causes=_causes(error),
            ),
            request=_jsonable(payload),
            context=_jsonable(self.context_store.get()),
            server=NoticeServer(
                environment_name=self.settings.environment,
                hostname=socket.gethostname(),
                project_root=self.settings.project_root,
                framework=self.settings.framework,
            ),
        )

    async def notify_or_ignore(self, error: BaseException, payload: dict[str, Any]) -> str | None:
        if not self.settings.is_configured:
            self._log.debug("notice_ignored", reason="unconfigured", error_class=_error_class(error))
            return None

        if exception_ignored(error, self.settings.ignore_exceptions):
            self._log.debug("notice_ignored", reason="ignored_exception", error_class=_error_class(error))
            return None

        notice = self.build_notice(error, payload)
        try:
            response = await self._get_client().post(
                self.settings.notices_url,
                json=notice.model_dump(mode="json", by_alias=True),
                headers={"X-API-Key": self.settings.api_key, "Accept": "application/json"},
                timeout=self.settings.notify_timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPError:
            self._log.exception("notice_delivery_failed", error_id=notice.id, url=self.settings.notices_url)
        return notice.id

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
