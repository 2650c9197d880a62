"""Context payload extraction for error reports.

Frameworks can put a controller object into the ASGI scope under
``CONTROLLER_KEY``. Controllers that implement :class:`DiagnosticsProvider`
supply the report payload themselves; otherwise the whole scope is sent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Union

CONTROLLER_KEY = "faultline.controller"
RAW_REQUEST_KEY = "raw_request"


class DiagnosticsProvider(ABC):
    """Optional capability: produce request data for error reports."""

    @abstractmethod
    def request_data(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class NoController:
    pass


@dataclass(frozen=True)
class PlainController:
    controller: Any


@dataclass(frozen=True)
class DiagnosticsController:
    controller: DiagnosticsProvider


Controller = Union[NoController, PlainController, DiagnosticsController]


def classify_controller(scope: dict[str, Any]) -> Controller:
    controller = scope.get(CONTROLLER_KEY)
    if controller is None:
        return NoController()
    if isinstance(controller, DiagnosticsProvider):
        return DiagnosticsController(controller)
    return PlainController(controller)


def build_request_payload(scope: dict[str, Any]) -> dict[str, Any]:
    controller = classify_controller(scope)
    if isinstance(controller, DiagnosticsController):
        return controller.controller.request_data()
    return {RAW_REQUEST_KEY: scope}
