from typing import Any

from faultline.request_data import (
    CONTROLLER_KEY,
    DiagnosticsController,
    DiagnosticsProvider,
    NoController,
    PlainController,
    build_request_payload,
    classify_controller,
)


class ReportingController(DiagnosticsProvider):
    def request_data(self) -> dict[str, Any]:
        return {"component": "orders", "action": "show"}


def test_classify_without_controller() -> None:
    assert classify_controller({"type": "http"}) == NoController()


def test_classify_plain_controller() -> None:
    controller = object()
    assert classify_controller({CONTROLLER_KEY: controller}) == PlainController(controller)


def test_classify_diagnostics_controller() -> None:
    controller = ReportingController()
    assert classify_controller({CONTROLLER_KEY: controller}) == DiagnosticsController(controller)


def test_payload_uses_controller_output_verbatim() -> None:
    scope = {"type": "http", CONTROLLER_KEY: ReportingController()}
    assert build_request_payload(scope) == {"component": "orders", "action": "show"}


def test_payload_falls_back_to_raw_request() -> None:
    scope = {"type": "http", "path": "/"}
    payload = build_request_payload(scope)
    assert payload == {"raw_request": scope}
    assert payload["raw_request"] is scope
