from __future__ import annotations

import json
import logging
from typing import Iterable, List, NamedTuple

from .errors import DecodeError
from .models import Light

logger = logging.getLogger(__name__)

HEADERS = ("idx", "ID", "Label", "Group", "Power", "Brightness", "Hue", "Kelvin", "Sat")


class ListingRow(NamedTuple):
    idx: str
    id: str
    label: str
    group: str
    power: str
    brightness: str
    hue: str
    kelvin: str
    saturation: str


def decode_lights(body: bytes) -> List[Light]:
    """Decode a ``/v1/lights`` response body into Light records.

    The body must be a JSON array of objects; anything else raises
    :class:`DecodeError` instead of yielding an empty listing.
    """
    try:
        data = json.loads(body or b"null")
    except ValueError as e:
        raise DecodeError(f"invalid JSON ({e})", body) from e
    if not isinstance(data, list):
        raise DecodeError(f"expected a JSON array, got {type(data).__name__}", body)
    lights: List[Light] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise DecodeError(f"item {i} is {type(item).__name__}, not an object", body)
        lights.append(Light.from_dict(item))
    logger.debug("lights: %d", len(lights))
    return lights


def sort_by_group(lights: Iterable[Light]) -> List[Light]:
    # sorted() is stable, so lights sharing a group keep their response order
    return sorted(lights, key=lambda light: light.group.name)


def project_rows(lights: Iterable[Light]) -> List[ListingRow]:
    return [
        ListingRow(
            idx=str(k),
            id=v.id,
            label=v.label,
            group=v.group.name,
            power=v.power,
            brightness=f"{v.brightness:.2f}",
            hue=f"{v.color.hue:.2f}",
            kelvin=f"{v.color.kelvin:.0f}",
            saturation=f"{v.color.saturation:.1f}",
        )
        for k, v in enumerate(lights)
    ]


def build_listing(body: bytes) -> List[ListingRow]:
    return project_rows(sort_by_group(decode_lights(body)))
