"""Domain-specific exceptions for the navigator client.

Every layer wraps the error it caught with a one-line description of what it
was doing (``raise XError(f"failed to ...: {exc}") from exc``), so the message
reads as a linear chain of causes, most specific last, and ``__cause__``
keeps the original exception for inspection.
"""


class NavigatorError(Exception):
    """Base exception for all navigator errors."""

    pass


# Configuration errors


class ConfigurationError(NavigatorError):
    """Raised for invalid static configuration, such as an empty command."""

    pass


class InvalidArgumentError(ConfigurationError, ValueError):
    """Raised when a caller passes an unusable argument (e.g. a missing element)."""

    pass


# Transport and protocol errors


class TransportError(NavigatorError):
    """Raised when an HTTP request cannot be built or executed."""

    pass


class ProtocolError(NavigatorError):
    """Raised when the driver answers with a non-2xx response."""

    def __init__(self, status_code: int, detail: str, body: bytes = b""):
        self.status_code = status_code
        self.detail = detail
        self.body = body
        super().__init__(f"request unsuccessful: {detail}")


class SessionError(NavigatorError):
    """Raised when a remote session cannot be opened."""

    pass


# Selection errors


class SelectionError(NavigatorError):
    """Raised when a selection cannot be resolved to remote elements."""

    pass


class EmptySelectionError(SelectionError):
    """Raised when resolving a selection with no selectors."""

    def __init__(self):
        super().__init__("empty selection")


class ElementNotFoundError(SelectionError):
    """Raised when a single-element find matches nothing."""

    def __init__(self):
        super().__init__("element not found")


class AmbiguousFindError(SelectionError):
    """Raised when a single-element find matches more than one element."""

    def __init__(self, count: int):
        self.count = count
        super().__init__("ambiguous find")


class IndexOutOfRangeError(SelectionError):
    """Raised when an indexed find points past the matched elements."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__("element index out of range")


class NoElementsFoundError(SelectionError):
    """Raised when an operation needs at least one element but none resolved."""

    def __init__(self):
        super().__init__("no elements found")


class MultipleElementsError(SelectionError):
    """Raised when an operation needs exactly one element but several resolved."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"method does not support multiple elements ({count})")


class ActionError(NavigatorError):
    """Raised when an action or property read on resolved elements fails."""

    pass


# Process lifecycle errors


class ServiceError(NavigatorError):
    """Raised when the driver process cannot be started or stopped."""

    pass


class AlreadyRunningError(ServiceError):
    """Raised when starting a service that is already running."""

    def __init__(self):
        super().__init__("already running")


class AlreadyStoppedError(ServiceError):
    """Raised when stopping a service that is not running."""

    def __init__(self):
        super().__init__("already stopped")


class BootTimeoutError(ServiceError, TimeoutError):
    """Raised when the driver does not report ready before the deadline."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"failed to start before timeout ({timeout_seconds}s)")


class TemplateError(ServiceError, ConfigurationError):
    """Raised when the URL or command template of a service is invalid."""

    pass


class ServiceNotStartedError(ServiceError):
    """Raised when opening a session before the driver service is started."""

    def __init__(self):
        super().__init__("service not started")
