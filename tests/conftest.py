from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
import requests

from lifxcli.api import Response
from lifxcli.config import Settings
from lifxcli.errors import TransportError
from lifxcli.models import StateBatch


class FakeClient:
    """Stands in for api.Client; records calls and answers from a script.

    ``responder`` gets (method, path, body) and returns a Response or raises.
    """

    def __init__(self, responder: Optional[Callable[[str, str, Any], Response]] = None):
        self.calls: List[Tuple[str, str, Any]] = []
        self.responder = responder or (lambda method, path, body: Response(200, b"{}"))

    def send(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Response:
        self.calls.append((method, path, body))
        return self.responder(method, path, body)

    def list_lights(self, selector: str = "all") -> Response:
        return self.send("GET", f"/v1/lights/{selector}")

    def toggle(self, bulb_id: str, duration: float = 2.0) -> Response:
        return self.send("POST", f"/v1/lights/id:{bulb_id}/toggle", {"duration": f"{duration:g}"})

    def set_states(self, batch: StateBatch) -> Response:
        return self.send("PUT", "/v1/lights/states", batch.to_dict())


def transport_failure(method: str, path: str) -> TransportError:
    return TransportError(method, f"https://api.lifx.com{path}", requests.ConnectionError("connection refused"))


def light(id: str, group: str, **extra: Any) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "id": id,
        "label": f"Bulb {id}",
        "power": "on",
        "brightness": 0.5,
        "color": {"hue": 120.0, "saturation": 1.0, "kelvin": 3500},
        "group": {"id": f"g-{group}", "name": group},
    }
    rec.update(extra)
    return rec


def body(records: Any) -> bytes:
    return json.dumps(records).encode("utf-8")


@pytest.fixture
def settings() -> Settings:
    return Settings(token="test-token")


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
