"""Value types exchanged with the WebDriver wire protocol."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# W3C element reference key; legacy drivers use "ELEMENT"
W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_KEY = "ELEMENT"


@dataclass(frozen=True)
class Locator:
    """A protocol-level find request: strategy ("using") and query value."""

    using: str
    value: str

    def as_dict(self) -> dict:
        return {"using": self.using, "value": self.value}


def element_id_from_result(result: dict) -> str:
    """Read an element ID from a find result, preferring the legacy key."""
    if not isinstance(result, dict):
        return ""
    return result.get(LEGACY_ELEMENT_KEY) or result.get(W3C_ELEMENT_KEY) or ""


# Input events


class Button(Enum):
    """Mouse button, sent as its integer code."""

    LEFT = 0
    MIDDLE = 1
    RIGHT = 2

    def __str__(self) -> str:
        return {
            Button.LEFT: "left mouse button",
            Button.MIDDLE: "middle mouse button",
            Button.RIGHT: "right mouse button",
        }[self]


class Click(Enum):
    """Mouse click event."""

    SINGLE = "single click"
    HOLD = "hold"
    RELEASE = "release"

    def __str__(self) -> str:
        return self.value


class Tap(Enum):
    """Touch tap event on an element."""

    SINGLE = "tap"
    DOUBLE = "double tap"
    LONG = "long tap"

    def __str__(self) -> str:
        return self.value


class Touch(Enum):
    """Finger event at a screen position."""

    HOLD_FINGER = "hold finger down"
    RELEASE_FINGER = "release finger"
    MOVE_FINGER = "move finger"

    def __str__(self) -> str:
        return self.value


# Offsets: which axes are present matters for moveto requests


@dataclass(frozen=True)
class XYOffset:
    x: int
    y: int

    def x_axis(self) -> Tuple[int, bool]:
        return self.x, True

    def y_axis(self) -> Tuple[int, bool]:
        return self.y, True

    def position(self) -> Tuple[int, int]:
        return self.x, self.y


@dataclass(frozen=True)
class XOffset:
    x: int

    def x_axis(self) -> Tuple[int, bool]:
        return self.x, True

    def y_axis(self) -> Tuple[int, bool]:
        return 0, False

    def position(self) -> Tuple[int, int]:
        return self.x, 0


@dataclass(frozen=True)
class YOffset:
    y: int

    def x_axis(self) -> Tuple[int, bool]:
        return 0, False

    def y_axis(self) -> Tuple[int, bool]:
        return self.y, True

    def position(self) -> Tuple[int, int]:
        return 0, self.y


Offset = Union[XYOffset, XOffset, YOffset]


# Speeds: flicks accept either a per-axis vector or a scalar


@dataclass(frozen=True)
class VectorSpeed:
    x: int
    y: int

    def vector(self) -> Tuple[int, int]:
        return self.x, self.y

    def scalar(self) -> int:
        return int(math.hypot(self.x, self.y))


@dataclass(frozen=True)
class ScalarSpeed:
    speed: int

    def vector(self) -> Tuple[int, int]:
        component = int(self.speed / math.sqrt(2))
        return component, component

    def scalar(self) -> int:
        return self.speed


Speed = Union[VectorSpeed, ScalarSpeed]


# Wire models


class Cookie(BaseModel):
    """A browser cookie as exchanged with the driver."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    path: Optional[str] = None
    domain: Optional[str] = None
    secure: bool = False
    http_only: bool = Field(default=False, alias="httpOnly")
    expiry: Optional[float] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class LogEntry(BaseModel):
    """A raw log entry returned by the driver's log endpoint."""

    message: str = ""
    level: str = ""
    timestamp: int = 0
