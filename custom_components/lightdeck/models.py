"""Data models for the Lightdeck integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal


@dataclass
class AccessToken:
    """Represents a Tuya access token with its local expiry in epoch ms."""

    token: str
    expire_at_ms: int

    def is_valid(self, now_ms: int) -> bool:
        """Return True while the token may still be used for signing."""
        return bool(self.token) and now_ms < self.expire_at_ms


@dataclass(frozen=True)
class Credentials:
    """Tuya cloud project credentials."""

    client_id: str
    client_secret: str

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class UnifiedCommand:
    """Vendor-neutral instruction emitted by the light entities."""

    name: str
    value: Any = None


@dataclass(frozen=True)
class VendorOperation:
    """One atomic instruction in Tuya's data point schema."""

    code: str
    value: Any

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "value": self.value}


class TransitionMode(StrEnum):
    """How a scene moves from one unit to the next."""

    STATIC = "static"
    GRADIENT = "gradient"
    JUMP = "jump"


@dataclass(frozen=True)
class SceneUnit:
    """A single step of a scene light-show."""

    unit_change_mode: TransitionMode
    unit_switch_duration: int
    unit_gradient_duration: int
    h: int
    s: int
    v: int
    bright: int
    temperature: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "unit_change_mode": str(self.unit_change_mode),
            "unit_switch_duration": self.unit_switch_duration,
            "unit_gradient_duration": self.unit_gradient_duration,
            "h": self.h,
            "s": self.s,
            "v": self.v,
            "bright": self.bright,
            "temperature": self.temperature,
        }


@dataclass(frozen=True)
class SceneDescriptor:
    """A canned multi-step lighting effect bound to a scene slot."""

    scene_num: int
    units: tuple[SceneUnit, ...]
    name: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {
            "scene_num": self.scene_num,
            "scene_units": [unit.as_dict() for unit in self.units],
        }


@dataclass
class OperationResult:
    """Uniform outcome of every vendor call."""

    success: bool
    message: str
    data: dict[str, Any] | None = field(default=None, repr=False)


@dataclass(frozen=True)
class DeviceListing:
    """Device list normalized from one of the vendor's listing shapes.

    Attributes:
        kind: "nested" for ``{"devices": [...]}`` results, "array" for
            results that are the list itself.
        devices: Raw device records.

    """

    kind: Literal["nested", "array"]
    devices: list[dict[str, Any]]
