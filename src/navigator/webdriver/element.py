"""Element and window handles scoped to a session."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, List, Tuple

from ..core.exceptions import InvalidArgumentError
from .connection import GET, POST
from .types import Locator, element_id_from_result

if TYPE_CHECKING:
    from .session import Session


def round_half_up(number: float) -> int:
    """Round a protocol float to an int the way pixel assertions expect."""
    return int(math.floor(number + 0.5))


def _join(*parts: str) -> str:
    return "/".join(part.strip("/") for part in parts if part)


class Element:
    """
    A handle to a remote DOM element.

    The handle owns nothing on the remote end; it is valid only while its
    session is open.
    """

    def __init__(self, id: str, session: "Session"):
        self.id = id
        self.session = session

    def __repr__(self) -> str:
        return f"Element(id={self.id!r})"

    async def send(self, method: str, pathname: str, body: Any = None) -> Any:
        """Send a command scoped under ``element/{id}/``."""
        return await self.session.send(method, _join("element", self.id, pathname), body)

    async def get_element(self, locator: Locator) -> "Element":
        """Find the first descendant matching the locator."""
        result = await self.send(POST, "element", locator.as_dict())
        return Element(element_id_from_result(result), self.session)

    async def get_elements(self, locator: Locator) -> List["Element"]:
        """Find all descendants matching the locator."""
        results = await self.send(POST, "elements", locator.as_dict())
        return [Element(element_id_from_result(r), self.session) for r in results or []]

    async def get_text(self) -> str:
        return await self.send(GET, "text")

    async def get_name(self) -> str:
        """Tag name of the element."""
        return await self.send(GET, "name")

    async def get_attribute(self, attribute: str) -> str:
        return await self.send(GET, _join("attribute", attribute))

    async def get_css(self, property: str) -> str:
        return await self.send(GET, _join("css", property))

    async def click(self) -> None:
        await self.send(POST, "click")

    async def clear(self) -> None:
        await self.send(POST, "clear")

    async def value(self, text: str) -> None:
        """Type text into the element, one key per character."""
        await self.send(POST, "value", {"value": list(text)})

    async def submit(self) -> None:
        await self.send(POST, "submit")

    async def is_selected(self) -> bool:
        return bool(await self.send(GET, "selected"))

    async def is_displayed(self) -> bool:
        return bool(await self.send(GET, "displayed"))

    async def is_enabled(self) -> bool:
        return bool(await self.send(GET, "enabled"))

    async def is_equal_to(self, other: "Element") -> bool:
        """
        Ask the driver whether both handles refer to the same element.

        Raises:
            InvalidArgumentError: If other is None (no request is made)
        """
        if other is None:
            raise InvalidArgumentError("nil element is invalid")
        return bool(await self.send(GET, _join("equals", other.id)))

    async def get_location(self) -> Tuple[int, int]:
        location = await self.send(GET, "location")
        return round_half_up(location["x"]), round_half_up(location["y"])

    async def get_size(self) -> Tuple[int, int]:
        size = await self.send(GET, "size")
        return round_half_up(size["width"]), round_half_up(size["height"])


class Window:
    """A handle to a browser window of the session."""

    def __init__(self, id: str, session: "Session"):
        self.id = id
        self.session = session

    def __repr__(self) -> str:
        return f"Window(id={self.id!r})"

    async def send(self, method: str, pathname: str, body: Any = None) -> Any:
        """Send a command scoped under ``window/{id}/``."""
        return await self.session.send(method, _join("window", self.id, pathname), body)

    async def set_size(self, width: int, height: int) -> None:
        await self.send(POST, "size", {"width": width, "height": height})
