"""Selections of remote elements: actions and property reads."""

from __future__ import annotations

import logging
import os
from typing import Awaitable, Callable, List

from ..webdriver.element import Element
from ..webdriver.types import ScalarSpeed, Tap, Touch, XYOffset
from .exceptions import ActionError, InvalidArgumentError, NavigatorError, SelectionError
from .selectable import Selectable
from .selectors import Selector, SelectorKind

logger = logging.getLogger(__name__)

ElementAction = Callable[[Element], Awaitable[None]]

OPTION_XPATH = './option[normalize-space()="{}"]'


class Selection(Selectable):
    """
    A lazy reference to zero or more elements.

    Nothing is looked up when a selection is built; every action and
    property read resolves the selector chain again from the document root.
    Builders called on a selection apply their selectors below each element
    it refers to.

        await page.find("table").all("tr").at(2).first("td input[type=checkbox]").check()
    """

    def __str__(self) -> str:
        return f"selection '{self.selectors}'"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.selectors!s})"

    async def _select_all(self) -> List[Element]:
        try:
            return await self._get_elements_at_least_one()
        except NavigatorError as e:
            raise SelectionError(f"failed to select elements from {self}: {e}") from e

    async def _select_one(self) -> Element:
        try:
            return await self._get_element_exactly_one()
        except NavigatorError as e:
            raise SelectionError(f"failed to select element from {self}: {e}") from e

    async def _for_each_element(self, action: ElementAction) -> None:
        for element in await self._select_all():
            await action(element)

    async def elements(self) -> List[Element]:
        """Resolve the selection to element handles for direct protocol access."""
        try:
            return await self._get_elements()
        except NavigatorError as e:
            raise SelectionError(f"failed to select elements from {self}: {e}") from e

    async def count(self) -> int:
        """Number of elements the selection refers to."""
        return len(await self.elements())

    async def equals_element(self, other: "Selection") -> bool:
        """
        Whether two selections of exactly one element refer to the same element.

        Raises:
            InvalidArgumentError: If other is not a Selection
        """
        if not isinstance(other, Selection):
            raise InvalidArgumentError("must be Selection or MultiSelection")
        element = await self._select_one()
        other_element = await other._select_one()
        try:
            return await element.is_equal_to(other_element)
        except NavigatorError as e:
            raise ActionError(f"failed to compare {self} to {other}: {e}") from e

    async def mouse_to_element(self) -> None:
        """Move the mouse over exactly one element."""
        element = await self._select_one()
        try:
            await self.session.move_to(element, None)
        except NavigatorError as e:
            raise ActionError(f"failed to move mouse to element for {self}: {e}") from e

    # Actions

    async def click(self) -> None:
        """Click every element of the selection."""

        async def action(element: Element) -> None:
            try:
                await element.click()
            except NavigatorError as e:
                raise ActionError(f"failed to click on {self}: {e}") from e

        await self._for_each_element(action)

    async def double_click(self) -> None:
        async def action(element: Element) -> None:
            try:
                await self.session.move_to(element, None)
            except NavigatorError as e:
                raise ActionError(f"failed to move mouse to {self}: {e}") from e
            try:
                await self.session.double_click()
            except NavigatorError as e:
                raise ActionError(f"failed to double-click on {self}: {e}") from e

        await self._for_each_element(action)

    async def clear(self) -> None:
        async def action(element: Element) -> None:
            try:
                await element.clear()
            except NavigatorError as e:
                raise ActionError(f"failed to clear {self}: {e}") from e

        await self._for_each_element(action)

    async def fill(self, text: str) -> None:
        """Clear every field of the selection, then type text into it."""

        async def action(element: Element) -> None:
            try:
                await element.clear()
            except NavigatorError as e:
                raise ActionError(f"failed to clear {self}: {e}") from e
            try:
                await element.value(text)
            except NavigatorError as e:
                raise ActionError(f"failed to enter text into {self}: {e}") from e

        await self._for_each_element(action)

    async def upload_file(self, filename: str) -> None:
        """
        Send a file path to every selected <input type="file">.

        The filename may be relative; it is made absolute against the
        current working directory before it is sent.

        Raises:
            ActionError: If any selected element is not a file input
        """
        path = os.path.abspath(filename)

        async def action(element: Element) -> None:
            try:
                tag_name = await element.get_name()
            except NavigatorError as e:
                raise ActionError(f"failed to determine tag name of {self}: {e}") from e
            if tag_name != "input":
                raise ActionError(f"element for {self} is not an input element")
            try:
                input_type = await element.get_attribute("type")
            except NavigatorError as e:
                raise ActionError(f"failed to determine type attribute of {self}: {e}") from e
            if input_type != "file":
                raise ActionError(f"element for {self} is not a file uploader")
            try:
                await element.value(path)
            except NavigatorError as e:
                raise ActionError(f"failed to enter text into {self}: {e}") from e

        await self._for_each_element(action)

    async def check(self) -> None:
        """Check every unchecked checkbox of the selection."""
        await self._set_checked(True)

    async def uncheck(self) -> None:
        """Uncheck every checked checkbox of the selection."""
        await self._set_checked(False)

    async def _set_checked(self, checked: bool) -> None:
        async def action(element: Element) -> None:
            try:
                element_type = await element.get_attribute("type")
            except NavigatorError as e:
                raise ActionError(f"failed to retrieve type attribute of {self}: {e}") from e
            if element_type != "checkbox":
                raise ActionError(f"{self} does not refer to a checkbox")
            try:
                element_checked = await element.is_selected()
            except NavigatorError as e:
                raise ActionError(f"failed to retrieve state of {self}: {e}") from e
            if element_checked == checked:
                return
            try:
                await element.click()
            except NavigatorError as e:
                raise ActionError(f"failed to click on {self}: {e}") from e

        await self._for_each_element(action)

    async def select(self, text: str) -> None:
        """Click every <option> matching text under each selected <select>."""
        option = Selector(kind=SelectorKind.XPATH, value=OPTION_XPATH.format(text))

        async def action(element: Element) -> None:
            try:
                options = await element.get_elements(option.locator())
            except NavigatorError as e:
                raise ActionError(f"failed to select specified option for {self}: {e}") from e
            if not options:
                raise ActionError(f'no options with text "{text}" found for {self}')
            for option_element in options:
                try:
                    await option_element.click()
                except NavigatorError as e:
                    raise ActionError(
                        f'failed to click on option with text "{text}" for {self}: {e}'
                    ) from e

        await self._for_each_element(action)

    async def submit(self) -> None:
        """Submit every selected form, or the form around every selected input."""

        async def action(element: Element) -> None:
            try:
                await element.submit()
            except NavigatorError as e:
                raise ActionError(f"failed to submit {self}: {e}") from e

        await self._for_each_element(action)

    async def tap(self, tap: Tap) -> None:
        """Perform the tap event on every element of the selection."""
        touch_functions = {
            Tap.SINGLE: self.session.touch_click,
            Tap.DOUBLE: self.session.touch_double_click,
            Tap.LONG: self.session.touch_long_click,
        }
        touch_function = touch_functions.get(tap)
        if touch_function is None:
            raise ActionError(f"failed to {tap} on {self}: invalid tap event")

        async def action(element: Element) -> None:
            try:
                await touch_function(element)
            except NavigatorError as e:
                raise ActionError(f"failed to {tap} on {self}: {e}") from e

        await self._for_each_element(action)

    async def touch(self, touch: Touch) -> None:
        """Perform the touch event at the location of every element of the selection."""
        touch_functions = {
            Touch.HOLD_FINGER: self.session.touch_down,
            Touch.RELEASE_FINGER: self.session.touch_up,
            Touch.MOVE_FINGER: self.session.touch_move,
        }
        touch_function = touch_functions.get(touch)
        if touch_function is None:
            raise ActionError(f"failed to {touch} on {self}: invalid touch event")

        async def action(element: Element) -> None:
            try:
                x, y = await element.get_location()
            except NavigatorError as e:
                raise ActionError(f"failed to retrieve location of {self}: {e}") from e
            try:
                await touch_function(x, y)
            except NavigatorError as e:
                raise ActionError(f"failed to {touch} on {self}: {e}") from e

        await self._for_each_element(action)

    async def flick_finger(self, x_offset: int, y_offset: int, speed: int) -> None:
        """Flick exactly one element by the offset at the given speed."""
        element = await self._select_one()
        try:
            await self.session.touch_flick(element, XYOffset(x_offset, y_offset), ScalarSpeed(speed))
        except NavigatorError as e:
            raise ActionError(f"failed to flick finger on {self}: {e}") from e

    async def scroll_finger(self, x_offset: int, y_offset: int) -> None:
        """Scroll exactly one element by the offset."""
        element = await self._select_one()
        try:
            await self.session.touch_scroll(element, XYOffset(x_offset, y_offset))
        except NavigatorError as e:
            raise ActionError(f"failed to scroll finger on {self}: {e}") from e

    async def send_keys(self, keys: str) -> None:
        async def action(element: Element) -> None:
            try:
                await element.value(keys)
            except NavigatorError as e:
                raise ActionError(f"failed to send key {keys} on {self}: {e}") from e

        await self._for_each_element(action)

    async def switch_to_frame(self) -> None:
        """
        Focus the frame this selection refers to.

        Every new and existing selection, and every page method, applies to
        that frame afterwards.
        """
        element = await self._select_one()
        try:
            await self.session.frame(element)
        except NavigatorError as e:
            raise ActionError(f"failed to switch to frame referred to by {self}: {e}") from e
        logger.debug(f"Switched to frame {self}")

    # Properties

    async def text(self) -> str:
        """Entire text content of exactly one element."""
        element = await self._select_one()
        try:
            return await element.get_text()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve text for {self}: {e}") from e

    async def active(self) -> bool:
        """Whether the single selected element is the active (focused) element."""
        element = await self._select_one()
        try:
            active_element = await self.session.get_active_element()
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve active element: {e}") from e
        try:
            return await element.is_equal_to(active_element)
        except NavigatorError as e:
            raise ActionError(f"failed to compare selection to active element: {e}") from e

    async def attribute(self, attribute: str) -> str:
        element = await self._select_one()
        try:
            return await element.get_attribute(attribute)
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve attribute value for {self}: {e}") from e

    async def css(self, property: str) -> str:
        element = await self._select_one()
        try:
            return await element.get_css(property)
        except NavigatorError as e:
            raise ActionError(f"failed to retrieve CSS property value for {self}: {e}") from e

    async def _has_state(self, method: Callable[[Element], Awaitable[bool]], name: str) -> bool:
        for element in await self._select_all():
            try:
                passed = await method(element)
            except NavigatorError as e:
                raise ActionError(f"failed to determine whether {self} is {name}: {e}") from e
            if not passed:
                return False
        return True

    async def selected(self) -> bool:
        """Whether every element of the selection is selected."""
        return await self._has_state(Element.is_selected, "selected")

    async def visible(self) -> bool:
        """Whether every element of the selection is displayed."""
        return await self._has_state(Element.is_displayed, "visible")

    async def enabled(self) -> bool:
        """Whether every element of the selection is enabled."""
        return await self._has_state(Element.is_enabled, "enabled")


class MultiSelection(Selection):
    """A selection that may be narrowed to one element by index or cardinality."""

    def at(self, index: int) -> Selection:
        """Narrow to the element at index (per parent element)."""
        return Selection(self.session, self.selectors.at(index))

    def single(self) -> Selection:
        """Narrow to exactly one element (per parent element)."""
        return Selection(self.session, self.selectors.single())
