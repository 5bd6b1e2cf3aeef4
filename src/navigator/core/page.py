"""A browser page: the document-level surface of one session."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import anyio

from ..utils.log_parser import ms_to_datetime, split_message
from ..webdriver.session import Session
from ..webdriver.types import Button, Click, Cookie, XYOffset
from .exceptions import ActionError, InvalidArgumentError, NavigatorError
from .selectable import Selectable

logger = logging.getLogger(__name__)

ABOUT_BLANK = "about:blank"


@dataclass(frozen=True)
class Log:
    """One browser log message."""

    message: str
    location: str  # code location, "" when absent
    level: str  # "DEBUG", "INFO", "WARNING" or "SEVERE"
    time: datetime


class Page(Selectable):
    """
    An open browser session.

    Selections built from a page start at the document root. Pages keep a
    history of every log message they have read, per log type.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._logs: Dict[str, List[Log]] = {}

    def __str__(self) -> str:
        return "page"

    async def destroy(self) -> None:
        """End the session, closing its browser."""
        try:
            await self.session.delete()
        except NavigatorError as e:
            raise ActionError(f"failed to destroy session: {e}") from e

    async def reset(self) -> None:
        """
        Delete cookies and storage for the current domain and go to about:blank.

        Unlike destroy() the page stays usable. Cookies of other domains
        survive a reset.
        """
        try:
            await self.confirm_popup()
        except NavigatorError as e:
            logger.debug(f"No popup to confirm during reset: {e}")

        if await self.url() == ABOUT_BLANK:
            return

        await self.delete_cookies()
        try:
            await self.session.delete_local_storage()
        except NavigatorError:
            await self.run_script("localStorage.clear();")
        try:
            await self.session.delete_session_storage()
        except NavigatorError:
            await self.run_script("sessionStorage.clear();")
        await self.navigate(ABOUT_BLANK)

    async def navigate(self, url: str) -> None:
        try:
            await self.session.set_url(url)
        except NavigatorError as e:
            raise ActionError(f"failed to navigate: {e}") from e

    # Cookies

    async def get_cookies(self) -> List[Cookie]:
        try:
            return await self.session.get_cookies()
        except NavigatorError as e:
            raise ActionError(f"failed to get cookies: {e}") from e

    async def set_cookie(self, cookie: Optional[Cookie]) -> None:
        """Set a cookie on the page; None is a no-op."""
        if cookie is None:
            return
        try:
            await self.session.set_cookie(cookie)
        except NavigatorError as e:
            raise ActionError(f"failed to set cookie: {e}") from e

    async def delete_cookie(self, name: str) -> None:
        try:
            await self.session.delete_cookie(name)
        except NavigatorError as e:
            raise ActionError(f"failed to delete cookie {name}: {e}") from e

    async def delete_cookies(self) -> None:
        try:
            await self.session.delete_cookies()
        except NavigatorError as e:
            raise ActionError(f"failed to clear cookies: {e}") from e

    # Document

    async def url(self) -> str:
        try:
            return await self.session.get_url()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve URL: {e}") from e

    async def size(self, width: int, height: int) -> None:
        """Set the size of the current window in pixels."""
        try:
            window = await self.session.get_window()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve window: {e}") from e
        try:
            await window.set_size(width, height)
        except NavigatorError as e:
            raise ActionError(f"failed to set window size: {e}") from e

    async def screenshot(self, filename: str) -> None:
        """Save a PNG screenshot; filename may be relative to the working directory."""
        path = os.path.abspath(filename)
        try:
            data = await self.session.get_screenshot()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve screenshot: {e}") from e
        try:
            await anyio.Path(path).write_bytes(data)
        except OSError as e:
            raise ActionError(f"failed to save screenshot: {e}") from e
        logger.debug(f"Saved screenshot to {path}")

    async def title(self) -> str:
        try:
            return await self.session.get_title()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve page title: {e}") from e

    async def html(self) -> str:
        """Current DOM of the whole page."""
        try:
            return await self.session.get_source()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve page HTML: {e}") from e

    async def run_script(self, body: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run JavaScript and return its result.

        Every key of arguments is available to the body as a variable:

            await page.run_script("return test;", {"test": 100})  # -> 100
        """
        arguments = arguments or {}
        names = ", ".join(arguments.keys())
        script = f"return (function({names}) {{ {body}; }}).apply(this, arguments);"
        try:
            return await self.session.execute(script, list(arguments.values()))
        except NavigatorError as e:
            raise ActionError(f"failed to run script: {e}") from e

    # Popups

    async def popup_text(self) -> str:
        """Text of the current alert, confirm or prompt popup."""
        try:
            return await self.session.get_alert_text()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve popup text: {e}") from e

    async def enter_popup_text(self, text: str) -> None:
        try:
            await self.session.set_alert_text(text)
        except NavigatorError as e:
            raise ActionError(f"failed to enter popup text: {e}") from e

    async def confirm_popup(self) -> None:
        try:
            await self.session.accept_alert()
        except NavigatorError as e:
            raise ActionError(f"failed to confirm popup: {e}") from e

    async def cancel_popup(self) -> None:
        try:
            await self.session.dismiss_alert()
        except NavigatorError as e:
            raise ActionError(f"failed to cancel popup: {e}") from e

    # History

    async def forward(self) -> None:
        try:
            await self.session.forward()
        except NavigatorError as e:
            raise ActionError(f"failed to navigate forward in history: {e}") from e

    async def back(self) -> None:
        try:
            await self.session.back()
        except NavigatorError as e:
            raise ActionError(f"failed to navigate backwards in history: {e}") from e

    async def refresh(self) -> None:
        try:
            await self.session.refresh()
        except NavigatorError as e:
            raise ActionError(f"failed to refresh page: {e}") from e

    # Frames and windows

    async def switch_to_parent_frame(self) -> None:
        """Focus the parent of the current frame."""
        try:
            await self.session.frame_parent()
        except NavigatorError as e:
            raise ActionError(f"failed to switch to parent frame: {e}") from e

    async def switch_to_root_frame(self) -> None:
        """Focus the top-level document."""
        try:
            await self.session.frame(None)
        except NavigatorError as e:
            raise ActionError(f"failed to switch to original page frame: {e}") from e

    async def switch_to_window(self, name: str) -> None:
        """Focus the first window whose JavaScript window.name is name."""
        try:
            await self.session.set_window_by_name(name)
        except NavigatorError as e:
            raise ActionError(f"failed to switch to named window: {e}") from e

    async def next_window(self) -> None:
        """
        Focus the next window.

        Handles are visited in sorted order, wrapping around, since drivers
        return them in no defined order.
        """
        try:
            windows = await self.session.get_windows()
        except NavigatorError as e:
            raise ActionError(f"failed to find available windows: {e}") from e
        window_ids = sorted(window.id for window in windows)

        try:
            active_window = await self.session.get_window()
        except NavigatorError as e:
            raise ActionError(f"failed to find active window: {e}") from e
        if active_window.id in window_ids:
            position = window_ids.index(active_window.id)
            active_window.id = window_ids[(position + 1) % len(window_ids)]

        try:
            await self.session.set_window(active_window)
        except NavigatorError as e:
            raise ActionError(f"failed to change active window: {e}") from e

    async def close_window(self) -> None:
        try:
            await self.session.delete_window()
        except NavigatorError as e:
            raise ActionError(f"failed to close active window: {e}") from e

    async def window_count(self) -> int:
        try:
            windows = await self.session.get_windows()
        except NavigatorError as e:
            raise ActionError(f"failed to find available windows: {e}") from e
        return len(windows)

    # Logs

    async def log_types(self) -> List[str]:
        """Log types that may be passed to read_new_logs()."""
        try:
            return await self.session.get_log_types()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve log types: {e}") from e

    async def read_new_logs(self, log_type: str) -> List[Log]:
        """
        Log messages of log_type produced since the previous read.

        For example read_new_logs("browser") returns console messages and
        JavaScript errors.
        """
        try:
            entries = await self.session.new_logs(log_type)
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve logs: {e}") from e

        logs = []
        for entry in entries:
            message, location = split_message(entry.message)
            logs.append(
                Log(
                    message=message,
                    location=location,
                    level=entry.level,
                    time=ms_to_datetime(entry.timestamp),
                )
            )
        self._logs.setdefault(log_type, []).extend(logs)
        return logs

    async def read_all_logs(self, log_type: str) -> List[Log]:
        """Every log message of log_type read by this page, new ones included."""
        await self.read_new_logs(log_type)
        return list(self._logs.get(log_type, []))

    # Mouse

    async def move_mouse_by(self, x_offset: int, y_offset: int) -> None:
        try:
            await self.session.move_to(None, XYOffset(x_offset, y_offset))
        except NavigatorError as e:
            raise ActionError(f"failed to move mouse: {e}") from e

    async def double_click(self) -> None:
        """Double-click the left mouse button at the current mouse position."""
        try:
            await self.session.double_click()
        except NavigatorError as e:
            raise ActionError(f"failed to double click: {e}") from e

    async def click(self, click: Click, button: Button) -> None:
        """Perform the click event with button at the current mouse position."""
        click_functions = {
            Click.SINGLE: self.session.click,
            Click.HOLD: self.session.button_down,
            Click.RELEASE: self.session.button_up,
        }
        click_function = click_functions.get(click)
        if click_function is None:
            raise InvalidArgumentError(f"failed to {click} {button}: invalid click event")
        try:
            await click_function(button)
        except NavigatorError as e:
            raise ActionError(f"failed to {click} {button}: {e}") from e

    # Timeouts (milliseconds)

    async def set_implicit_wait(self, timeout_ms: int) -> None:
        await self.session.set_implicit_wait(timeout_ms)

    async def set_page_load(self, timeout_ms: int) -> None:
        await self.session.set_page_load(timeout_ms)

    async def set_script_timeout(self, timeout_ms: int) -> None:
        await self.session.set_script_timeout(timeout_ms)
