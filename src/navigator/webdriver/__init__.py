"""Low-level WebDriver wire-protocol client and driver process supervision."""

from .client import WebDriver
from .connection import DELETE, GET, POST, Connection
from .element import Element, Window
from .service import Service
from .session import Session
from .types import (
    Button,
    Click,
    Cookie,
    Locator,
    LogEntry,
    Offset,
    ScalarSpeed,
    Speed,
    Tap,
    Touch,
    VectorSpeed,
    XOffset,
    XYOffset,
    YOffset,
)

__all__ = [
    "WebDriver",
    "Connection",
    "GET",
    "POST",
    "DELETE",
    "Element",
    "Window",
    "Service",
    "Session",
    "Button",
    "Click",
    "Cookie",
    "Locator",
    "LogEntry",
    "Offset",
    "ScalarSpeed",
    "Speed",
    "Tap",
    "Touch",
    "VectorSpeed",
    "XOffset",
    "XYOffset",
    "YOffset",
]
