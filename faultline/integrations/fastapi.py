from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from faultline.config import Settings
from faultline.context import ContextStore
from faultline.middleware import FRAMEWORK_EXCEPTION_KEYS, ErrorReportingMiddleware
from faultline.notifier import Notifier
from faultline.request_data import CONTROLLER_KEY, DiagnosticsProvider

FILTERED_HEADERS = {"authorization", "cookie", "x-api-key", "proxy-authorization"}
FILTERED_VALUE = "[FILTERED]"


class RequestDiagnostics(DiagnosticsProvider):
    """Request data for reports, with credentials filtered out."""

    def __init__(self, request: Request) -> None:
        self.request = request

    def request_data(self) -> dict[str, Any]:
        request = self.request
        headers = {
            key: (FILTERED_VALUE if key.lower() in FILTERED_HEADERS else value)
            for key, value in request.headers.items()
        }
        client = request.client
        return {
            "url": str(request.url),
            "method": request.method,
            "path_params": dict(request.path_params),
            "query_params": dict(request.query_params),
            "headers": headers,
            "client": f"{client.host}:{client.port}" if client else None,
        }


def attach_request_diagnostics(request: Request) -> None:
    """FastAPI dependency: report this request's data instead of the raw scope."""

    request.scope[CONTROLLER_KEY] = RequestDiagnostics(request)


def record_exception(scope: dict[str, Any], exc: BaseException, key: str = FRAMEWORK_EXCEPTION_KEYS[0]) -> None:
    scope[key] = exc


async def reporting_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # The exception is handled here, so the middleware only sees it through the scope.
    record_exception(request.scope, exc)
    return JSONResponse({"detail": "Internal Server Error"}, status_code=500)


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Starlette runs this outside the middleware stack, after the middleware has
    # reported the raised error; the exception is still re-raised to the server.
    return JSONResponse({"detail": "Internal Server Error"}, status_code=500)


def install(
    app: FastAPI,
    notifier: Notifier,
    *,
    settings: Settings | None = None,
    context_store: ContextStore | None = None,
    handled: tuple[type[Exception], ...] = (),
) -> None:
    """Add error reporting to ``app``.

    Exception classes listed in ``handled`` are turned into 500 responses by
    ``reporting_exception_handler`` inside the middleware and reported from the
    scope. Any other error is reported as it propagates, answered with a JSON
    500 by ``internal_error_handler`` (unless the app already handles
    ``Exception``) and re-raised to the server.

    A notifier with an ``aclose`` coroutine is closed on application shutdown.
    """

    for exc_class in handled:
        app.add_exception_handler(exc_class, reporting_exception_handler)
    if Exception not in app.exception_handlers:
        app.add_exception_handler(Exception, internal_error_handler)
    app.add_middleware(
        ErrorReportingMiddleware,
        notifier=notifier,
        settings=settings,
        context_store=context_store,
    )

    aclose = getattr(notifier, "aclose", None)
    if aclose is not None:
        app.router.on_shutdown.append(aclose)
