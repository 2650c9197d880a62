from __future__ import annotations

from contextvars import ContextVar
from typing import Any


class ContextStore:
    """Diagnostic key/value context accumulated while a request is handled.

    The error-reporting middleware binds one fresh dict per request and clears
    it when the request finishes. ``set`` updates that dict in place, so values
    added from a copied context (sync endpoints run in a threadpool, spawned
    tasks) still reach the report.
    """

    def __init__(self, name: str = "faultline_context") -> None:
        self._var: ContextVar[dict[str, Any] | None] = ContextVar(name, default=None)

    def bind(self) -> None:
        self._var.set({})

    def set(self, **values: Any) -> None:
        current = self._var.get()
        if current is None:
            # Outside a bound request: start a mapping local to this context.
            self._var.set(dict(values))
        else:
            current.update(values)

    def get(self) -> dict[str, Any]:
        return dict(self._var.get() or {})

    def clear(self) -> None:
        self._var.set(None)


_CONTEXT_STORE: ContextStore | None = None


def get_context_store() -> ContextStore:
    global _CONTEXT_STORE
    if _CONTEXT_STORE is None:
        _CONTEXT_STORE = ContextStore()
    return _CONTEXT_STORE


def set_context(**values: Any) -> None:
    """Attach diagnostic values to the current request's error reports."""

    get_context_store().set(**values)
