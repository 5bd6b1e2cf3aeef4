"""Selections, pages and drivers built on the wire-protocol client."""

from .exceptions import (
    NavigatorError,
    ConfigurationError,
    InvalidArgumentError,
    TransportError,
    ProtocolError,
    SessionError,
    SelectionError,
    EmptySelectionError,
    ElementNotFoundError,
    AmbiguousFindError,
    IndexOutOfRangeError,
    NoElementsFoundError,
    MultipleElementsError,
    ActionError,
    ServiceError,
    AlreadyRunningError,
    AlreadyStoppedError,
    BootTimeoutError,
    ServiceNotStartedError,
    TemplateError,
)
from .selectors import Selector, SelectorChain, SelectorKind
from .selectable import Selectable
from .selection import MultiSelection, Selection
from .page import Log, Page
from .capabilities import Capabilities, PageConfig

__all__ = [
    "NavigatorError",
    "ConfigurationError",
    "InvalidArgumentError",
    "TransportError",
    "ProtocolError",
    "SessionError",
    "SelectionError",
    "EmptySelectionError",
    "ElementNotFoundError",
    "AmbiguousFindError",
    "IndexOutOfRangeError",
    "NoElementsFoundError",
    "MultipleElementsError",
    "ActionError",
    "ServiceError",
    "AlreadyRunningError",
    "AlreadyStoppedError",
    "BootTimeoutError",
    "ServiceNotStartedError",
    "TemplateError",
    "Selector",
    "SelectorChain",
    "SelectorKind",
    "Selectable",
    "MultiSelection",
    "Selection",
    "Log",
    "Page",
    "Capabilities",
    "PageConfig",
]
