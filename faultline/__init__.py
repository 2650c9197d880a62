"""Report unhandled errors from ASGI applications to an error-tracking service."""

from faultline.context import ContextStore, get_context_store, set_context
from faultline.middleware import RESULT_KEY, ErrorReportingMiddleware
from faultline.notifier import HttpNotifier, Notifier
from faultline.request_data import DiagnosticsProvider
from faultline.version import __version__

__all__ = [
    "ContextStore",
    "DiagnosticsProvider",
    "ErrorReportingMiddleware",
    "HttpNotifier",
    "Notifier",
    "RESULT_KEY",
    "__version__",
    "get_context_store",
    "set_context",
]
