"""A remote WebDriver session and its commands."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, List, Optional

import httpx

from ..core.exceptions import InvalidArgumentError, ProtocolError
from .connection import DELETE, GET, POST, Connection
from .element import Element, Window, _join
from .types import (
    LEGACY_ELEMENT_KEY,
    W3C_ELEMENT_KEY,
    Button,
    Cookie,
    Locator,
    LogEntry,
    Offset,
    Speed,
    element_id_from_result,
)

logger = logging.getLogger(__name__)


class Session:
    """
    A server-side browser automation context.

    Created by a successful new-session handshake (see open()) and destroyed
    by delete(); after deletion every further command fails remotely.
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    @classmethod
    async def open(
        cls,
        http_client: httpx.AsyncClient,
        service_url: str,
        capabilities: Optional[dict] = None,
        debug: bool = False,
    ) -> "Session":
        """Open a session on the service at service_url."""
        connection = await Connection.open(http_client, service_url, capabilities, debug)
        return cls(connection)

    @property
    def url(self) -> str:
        """Base URL of this session."""
        return self.connection.session_url

    def __repr__(self) -> str:
        return f"Session(url={self.url!r})"

    async def send(self, method: str, pathname: str, body: Any = None) -> Any:
        return await self.connection.send(method, pathname, body)

    async def delete(self) -> None:
        """Terminate the session."""
        await self.send(DELETE, "")
        logger.info(f"Deleted session {self.url}")

    # Elements

    async def get_element(self, locator: Locator) -> Element:
        """Find the first element in the document matching the locator."""
        result = await self.send(POST, "element", locator.as_dict())
        return Element(element_id_from_result(result), self)

    async def get_elements(self, locator: Locator) -> List[Element]:
        """Find all elements in the document matching the locator."""
        results = await self.send(POST, "elements", locator.as_dict())
        return [Element(element_id_from_result(r), self) for r in results or []]

    async def get_active_element(self) -> Element:
        result = await self.send(POST, "element/active")
        return Element(element_id_from_result(result), self)

    # Windows

    async def get_window(self) -> Window:
        window_id = await self.send(GET, "window_handle")
        return Window(window_id, self)

    async def get_windows(self) -> List[Window]:
        window_ids = await self.send(GET, "window_handles")
        return [Window(window_id, self) for window_id in window_ids or []]

    async def set_window(self, window: Window) -> None:
        if window is None:
            raise InvalidArgumentError("nil window is invalid")
        await self.send(POST, "window", {"name": window.id})

    async def set_window_by_name(self, name: str) -> None:
        await self.send(POST, "window", {"name": name})

    async def delete_window(self) -> None:
        await self.send(DELETE, "window")

    # Cookies

    async def get_cookies(self) -> List[Cookie]:
        cookies = await self.send(GET, "cookie")
        return [Cookie.model_validate(c) for c in cookies or []]

    async def set_cookie(self, cookie: Cookie) -> None:
        if cookie is None:
            raise InvalidArgumentError("nil cookie is invalid")
        await self.send(POST, "cookie", {"cookie": cookie.to_wire()})

    async def delete_cookie(self, name: str) -> None:
        await self.send(DELETE, _join("cookie", name))

    async def delete_cookies(self) -> None:
        await self.send(DELETE, "cookie")

    # Page

    async def get_screenshot(self) -> bytes:
        """Take a screenshot and return the decoded PNG bytes."""
        encoded = await self.send(GET, "screenshot")
        try:
            return base64.b64decode(encoded or "")
        except (binascii.Error, ValueError) as e:
            raise ProtocolError(200, f"invalid screenshot data: {e}") from e

    async def get_url(self) -> str:
        return await self.send(GET, "url")

    async def set_url(self, url: str) -> None:
        await self.send(POST, "url", {"url": url})

    async def get_title(self) -> str:
        return await self.send(GET, "title")

    async def get_source(self) -> str:
        return await self.send(GET, "source")

    async def move_to(self, element: Optional[Element] = None, offset: Optional[Offset] = None) -> None:
        """Move the mouse to the element and/or by the offset; absent axes are omitted."""
        request: dict = {}
        if element is not None:
            request["element"] = element.id
        if offset is not None:
            x, present = offset.x_axis()
            if present:
                request["xoffset"] = x
            y, present = offset.y_axis()
            if present:
                request["yoffset"] = y
        await self.send(POST, "moveto", request)

    async def frame(self, frame: Optional[Element]) -> None:
        """Focus the frame element, or the top-level document when frame is None."""
        frame_id = None
        if frame is not None:
            frame_id = {LEGACY_ELEMENT_KEY: frame.id, W3C_ELEMENT_KEY: frame.id}
        await self.send(POST, "frame", {"id": frame_id})

    async def frame_parent(self) -> None:
        await self.send(POST, "frame/parent")

    async def execute(self, script: str, arguments: Optional[List[Any]] = None) -> Any:
        """Run a synchronous script and return its result."""
        return await self.send(POST, "execute", {"script": script, "args": arguments or []})

    async def forward(self) -> None:
        await self.send(POST, "forward")

    async def back(self) -> None:
        await self.send(POST, "back")

    async def refresh(self) -> None:
        await self.send(POST, "refresh")

    # Alerts

    async def get_alert_text(self) -> str:
        return await self.send(GET, "alert_text")

    async def set_alert_text(self, text: str) -> None:
        await self.send(POST, "alert_text", {"text": text})

    async def accept_alert(self) -> None:
        await self.send(POST, "accept_alert")

    async def dismiss_alert(self) -> None:
        await self.send(POST, "dismiss_alert")

    # Logs

    async def new_logs(self, log_type: str) -> List[LogEntry]:
        """Fetch log entries of log_type produced since the last call."""
        entries = await self.send(POST, "log", {"type": log_type})
        return [LogEntry.model_validate(entry) for entry in entries or []]

    async def get_log_types(self) -> List[str]:
        return list(await self.send(GET, "log/types") or [])

    # Mouse

    async def double_click(self) -> None:
        await self.send(POST, "doubleclick")

    async def click(self, button: Button) -> None:
        await self.send(POST, "click", {"button": button.value})

    async def button_down(self, button: Button) -> None:
        await self.send(POST, "buttondown", {"button": button.value})

    async def button_up(self, button: Button) -> None:
        await self.send(POST, "buttonup", {"button": button.value})

    # Touch

    async def touch_down(self, x: int, y: int) -> None:
        await self.send(POST, "touch/down", {"x": x, "y": y})

    async def touch_up(self, x: int, y: int) -> None:
        await self.send(POST, "touch/up", {"x": x, "y": y})

    async def touch_move(self, x: int, y: int) -> None:
        await self.send(POST, "touch/move", {"x": x, "y": y})

    async def _touch_element(self, pathname: str, element: Element) -> None:
        if element is None:
            raise InvalidArgumentError("nil element is invalid")
        await self.send(POST, pathname, {"element": element.id})

    async def touch_click(self, element: Element) -> None:
        await self._touch_element("touch/click", element)

    async def touch_double_click(self, element: Element) -> None:
        await self._touch_element("touch/doubleclick", element)

    async def touch_long_click(self, element: Element) -> None:
        await self._touch_element("touch/longclick", element)

    async def touch_flick(
        self,
        element: Optional[Element],
        offset: Optional[Offset],
        speed: Speed,
    ) -> None:
        """
        Flick with a speed, either freely or from an element by an offset.

        Without an element the request carries a per-axis speed vector; with
        one it carries the element, the offset and the scalar speed.

        Raises:
            InvalidArgumentError: If speed is None, or exactly one of element
                and offset is given
        """
        if speed is None:
            raise InvalidArgumentError("nil speed is invalid")
        if (element is None) != (offset is None):
            raise InvalidArgumentError("element must be provided if offset is provided and vice versa")
        if element is None:
            x_speed, y_speed = speed.vector()
            await self.send(POST, "touch/flick", {"xspeed": x_speed, "yspeed": y_speed})
            return
        x_offset, y_offset = offset.position()
        await self.send(
            POST,
            "touch/flick",
            {
                "element": element.id,
                "xoffset": x_offset,
                "yoffset": y_offset,
                "speed": speed.scalar(),
            },
        )

    async def touch_scroll(self, element: Optional[Element], offset: Offset) -> None:
        if offset is None:
            raise InvalidArgumentError("nil offset is invalid")
        x_offset, y_offset = offset.position()
        request: dict = {"xoffset": x_offset, "yoffset": y_offset}
        if element is not None and element.id:
            request["element"] = element.id
        await self.send(POST, "touch/scroll", request)

    # Keyboard

    async def keys(self, text: str) -> None:
        await self.send(POST, "keys", {"value": list(text)})

    # Storage

    async def delete_local_storage(self) -> None:
        await self.send(DELETE, "local_storage")

    async def delete_session_storage(self) -> None:
        await self.send(DELETE, "session_storage")

    # Timeouts (milliseconds)

    async def set_implicit_wait(self, timeout_ms: int) -> None:
        await self.send(POST, "timeouts/implicit_wait", {"ms": timeout_ms})

    async def set_page_load(self, timeout_ms: int) -> None:
        await self.send(POST, "timeouts", {"ms": timeout_ms, "type": "page load"})

    async def set_script_timeout(self, timeout_ms: int) -> None:
        await self.send(POST, "timeouts/async_script", {"ms": timeout_ms})
