from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Optional

import requests

from .errors import TransportError
from .models import StateBatch

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.lifx.com"


@dataclasses.dataclass(frozen=True)
class Response:
    status_code: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclasses.dataclass
class Client:
    token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 5.0
    session: Optional[requests.Session] = None

    def _s(self) -> requests.Session:
        if self.session is None:
            self.session = requests.Session()
        return self.session

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url.rstrip('/')}{path}"

    def send(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Response:
        """Issue one authenticated request and return its status and raw body.

        Non-2xx statuses are returned as-is; only failures to complete the
        exchange raise, as :class:`TransportError`.
        """
        url = self._url(path)
        headers = {"Authorization": f"Bearer {self.token}"}
        logger.debug("%s %s %s", method, url, body if body is not None else "")
        try:
            r = self._s().request(method, url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(method, url, e) from e
        logger.debug("%s %s -> %s", method, url, r.status_code)
        return Response(status_code=r.status_code, body=r.content or b"")

    # --- Lights ---
    def list_lights(self, selector: str = "all") -> Response:
        return self.send("GET", f"/v1/lights/{selector}")

    def toggle(self, bulb_id: str, duration: float = 2.0) -> Response:
        return self.send("POST", f"/v1/lights/id:{bulb_id}/toggle", {"duration": format_duration(duration)})

    def set_states(self, batch: StateBatch) -> Response:
        return self.send("PUT", "/v1/lights/states", batch.to_dict())


def format_duration(seconds: float) -> str:
    # toggle takes the duration as a string, "2" rather than "2.0"
    return f"{seconds:g}"
