from __future__ import annotations

from typing import Any

import pytest

from faultline.config import Settings, get_settings
from faultline.context import ContextStore


class RecordingNotifier:
    def __init__(self, result: str | None = "report-1") -> None:
        self.result = result
        self.calls: list[tuple[BaseException, dict[str, Any]]] = []

    async def notify_or_ignore(self, error: BaseException, payload: dict[str, Any]) -> str | None:
        self.calls.append((error, payload))
        return self.result


class FailingNotifier:
    def __init__(self, exc: BaseException) -> None:
        self.exc = exc

    async def notify_or_ignore(self, error: BaseException, payload: dict[str, Any]) -> str | None:
        raise self.exc


class CountingContextStore(ContextStore):
    def __init__(self) -> None:
        super().__init__(name="test_context")
        self.clear_calls = 0

    def clear(self) -> None:
        self.clear_calls += 1
        super().clear()


def http_scope(user_agent: str | None = "curl/8.0", **extra: Any) -> dict[str, Any]:
    headers = [(b"host", b"test")]
    if user_agent is not None:
        headers.append((b"user-agent", user_agent.encode("latin-1")))
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/boom",
        "raw_path": b"/boom",
        "query_string": b"",
        "headers": headers,
        "client": ("127.0.0.1", 5000),
        "server": ("test", 80),
    }
    scope.update(extra)
    return scope


async def noop_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


class SendRecorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "FAULTLINE_API_KEY",
        "FAULTLINE_REPORT_ENABLED",
        "FAULTLINE_IGNORE_USER_AGENT",
        "FAULTLINE_IGNORE_EXCEPTIONS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", endpoint="https://tracker.test", environment="test")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def context_store() -> CountingContextStore:
    return CountingContextStore()
