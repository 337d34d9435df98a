from __future__ import annotations

import dataclasses
from typing import Any, Dict, List, Optional

ALL_SELECTOR = "all"


def _num(data: Dict[str, Any], key: str) -> float:
    # missing, null and non-numeric values all decode as zero
    v = data.get(key)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return 0.0
    return float(v)


def _non_negative(data: Dict[str, Any], key: str) -> float:
    return max(0.0, _num(data, key))


def _str(data: Dict[str, Any], key: str) -> str:
    v = data.get(key)
    return v if isinstance(v, str) else ""


def _obj(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    v = data.get(key)
    return v if isinstance(v, dict) else {}


@dataclasses.dataclass(frozen=True)
class Color:
    hue: float = 0.0
    saturation: float = 0.0
    kelvin: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Color":
        return cls(
            hue=_non_negative(data, "hue"),
            saturation=_non_negative(data, "saturation"),
            kelvin=_num(data, "kelvin"),
        )


@dataclasses.dataclass(frozen=True)
class Ref:
    """An id/name pair, used for both groups and locations."""

    id: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ref":
        return cls(id=_str(data, "id"), name=_str(data, "name"))


@dataclasses.dataclass(frozen=True)
class Capabilities:
    has_color: bool = False
    has_variable_color_temp: bool = False
    has_ir: bool = False
    has_multizone: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Capabilities":
        return cls(
            has_color=bool(data.get("has_color")),
            has_variable_color_temp=bool(data.get("has_variable_color_temp")),
            has_ir=bool(data.get("has_ir")),
            has_multizone=bool(data.get("has_multizone")),
        )


@dataclasses.dataclass(frozen=True)
class Product:
    name: str = ""
    identifier: str = ""
    company: str = ""
    vendor_id: int = 0
    product_id: int = 0
    capabilities: Capabilities = Capabilities()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            name=_str(data, "name"),
            identifier=_str(data, "identifier"),
            company=_str(data, "company"),
            vendor_id=int(_num(data, "vendor_id")),
            product_id=int(_num(data, "product_id")),
            capabilities=Capabilities.from_dict(_obj(data, "capabilities")),
        )


@dataclasses.dataclass(frozen=True)
class Light:
    """Snapshot of one bulb as reported by ``GET /v1/lights/{selector}``."""

    id: str
    label: str = ""
    uuid: str = ""
    power: str = ""
    connected: bool = False
    brightness: float = 0.0
    color: Color = Color()
    group: Ref = Ref()
    location: Optional[Ref] = None
    product: Optional[Product] = None
    last_seen: str = ""
    seconds_since_seen: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Light":
        location = data.get("location")
        product = data.get("product")
        return cls(
            id=_str(data, "id"),
            label=_str(data, "label"),
            uuid=_str(data, "uuid"),
            power=_str(data, "power"),
            connected=bool(data.get("connected")),
            brightness=_non_negative(data, "brightness"),
            color=Color.from_dict(_obj(data, "color")),
            group=Ref.from_dict(_obj(data, "group")),
            location=Ref.from_dict(location) if isinstance(location, dict) else None,
            product=Product.from_dict(product) if isinstance(product, dict) else None,
            last_seen=_str(data, "last_seen"),
            seconds_since_seen=_num(data, "seconds_since_seen"),
        )


@dataclasses.dataclass(frozen=True)
class StateMutation:
    """A sparse update for one selector; fields left as None are not sent."""

    selector: str
    brightness: Optional[float] = None
    power: Optional[str] = None
    color: Optional[str] = None
    duration: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"selector": self.selector}
        if self.brightness is not None:
            payload["brightness"] = self.brightness
        if self.power is not None:
            payload["power"] = self.power
        if self.color is not None:
            payload["color"] = self.color
        if self.duration is not None:
            payload["duration"] = self.duration
        return payload


@dataclasses.dataclass(frozen=True)
class StateBatch:
    states: List[StateMutation]

    def __post_init__(self) -> None:
        if not self.states:
            raise ValueError("StateBatch needs at least one StateMutation")

    def to_dict(self) -> Dict[str, Any]:
        return {"states": [s.to_dict() for s in self.states]}
