"""Selector builders and the selection resolution engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Union

from ..webdriver.element import Element
from ..webdriver.session import Session
from .exceptions import (
    AmbiguousFindError,
    ElementNotFoundError,
    EmptySelectionError,
    IndexOutOfRangeError,
    MultipleElementsError,
    NoElementsFoundError,
)
from .selectors import Selector, SelectorChain, SelectorKind

if TYPE_CHECKING:
    from .selection import MultiSelection, Selection

# Resolution starts from the session itself: it finds from the document root
Parent = Union[Session, Element]


async def retrieve_elements(parent: Parent, selector: Selector) -> List[Element]:
    """
    Apply one selector below one parent, honouring its cardinality policy.

    Raises:
        ElementNotFoundError: single selector matched nothing
        AmbiguousFindError: single selector matched more than one element
        IndexOutOfRangeError: indexed selector points past the matches
    """
    locator = selector.locator()
    if selector.single:
        elements = await parent.get_elements(locator)
        if not elements:
            raise ElementNotFoundError()
        if len(elements) > 1:
            raise AmbiguousFindError(len(elements))
        return elements[:1]
    if selector.indexed and selector.index == 0:
        return [await parent.get_element(locator)]
    if selector.indexed and selector.index > 0:
        elements = await parent.get_elements(locator)
        if selector.index >= len(elements):
            raise IndexOutOfRangeError(selector.index, len(elements))
        return [elements[selector.index]]
    # Negative indices fail here instead of falling back to an unconstrained find
    if selector.indexed:
        raise IndexOutOfRangeError(selector.index, 0)
    return await parent.get_elements(locator)


class Selectable:
    """
    Anything elements can be selected from: a page or a selection.

    Holds the session and an immutable selector chain. The find* builders
    require exactly one match, first* take the first match and all* take
    every match; each returns a new object and leaves this one untouched.
    """

    def __init__(self, session: Session, selectors: Optional[SelectorChain] = None):
        self.session = session
        self.selectors = selectors if selectors is not None else SelectorChain()

    def _selection(self, chain: SelectorChain) -> "Selection":
        from .selection import Selection

        return Selection(self.session, chain)

    def _multi_selection(self, chain: SelectorChain) -> "MultiSelection":
        from .selection import MultiSelection

        return MultiSelection(self.session, chain)

    def _find(self, kind: SelectorKind, value: str) -> "Selection":
        return self._selection(self.selectors.append(kind, value).single())

    def _first(self, kind: SelectorKind, value: str) -> "Selection":
        return self._selection(self.selectors.append(kind, value).at(0))

    def _all(self, kind: SelectorKind, value: str) -> "MultiSelection":
        return self._multi_selection(self.selectors.append(kind, value))

    # Exactly one element

    def find(self, css: str) -> "Selection":
        """Find exactly one element by CSS selector."""
        return self._find(SelectorKind.CSS, css)

    def find_by_xpath(self, xpath: str) -> "Selection":
        return self._find(SelectorKind.XPATH, xpath)

    def find_by_link(self, text: str) -> "Selection":
        """Find exactly one anchor element by its text content."""
        return self._find(SelectorKind.LINK, text)

    def find_by_label(self, text: str) -> "Selection":
        """Find exactly one input by the text of its associated label."""
        return self._find(SelectorKind.LABEL, text)

    def find_by_button(self, text: str) -> "Selection":
        """
        Find exactly one button with the provided text.

        Supports <button>, <input type="button"> and <input type="submit">.
        """
        return self._find(SelectorKind.BUTTON, text)

    def find_by_name(self, name: str) -> "Selection":
        return self._find(SelectorKind.NAME, name)

    def find_by_class(self, css_class: str) -> "Selection":
        return self._find(SelectorKind.CLASS, css_class)

    def find_by_id(self, element_id: str) -> "Selection":
        return self._find(SelectorKind.ID, element_id)

    def find_by_a11y_id(self, a11y_id: str) -> "Selection":
        """Find exactly one element by accessibility ID (mobile drivers)."""
        return self._find(SelectorKind.ACCESSIBILITY_ID, a11y_id)

    def find_by_android_ui(self, uia: str) -> "Selection":
        return self._find(SelectorKind.ANDROID_AUT, uia)

    def find_by_ios_ui(self, uia: str) -> "Selection":
        return self._find(SelectorKind.IOS_AUT, uia)

    # First element

    def first(self, css: str) -> "Selection":
        """Find the first element by CSS selector."""
        return self._first(SelectorKind.CSS, css)

    def first_by_xpath(self, xpath: str) -> "Selection":
        return self._first(SelectorKind.XPATH, xpath)

    def first_by_link(self, text: str) -> "Selection":
        return self._first(SelectorKind.LINK, text)

    def first_by_label(self, text: str) -> "Selection":
        return self._first(SelectorKind.LABEL, text)

    def first_by_button(self, text: str) -> "Selection":
        return self._first(SelectorKind.BUTTON, text)

    def first_by_name(self, name: str) -> "Selection":
        return self._first(SelectorKind.NAME, name)

    def first_by_class(self, css_class: str) -> "Selection":
        return self._first(SelectorKind.CLASS, css_class)

    def first_by_id(self, element_id: str) -> "Selection":
        return self._first(SelectorKind.ID, element_id)

    def first_by_a11y_id(self, a11y_id: str) -> "Selection":
        return self._first(SelectorKind.ACCESSIBILITY_ID, a11y_id)

    def first_by_android_ui(self, uia: str) -> "Selection":
        return self._first(SelectorKind.ANDROID_AUT, uia)

    def first_by_ios_ui(self, uia: str) -> "Selection":
        return self._first(SelectorKind.IOS_AUT, uia)

    # Zero or more elements

    def all(self, css: str) -> "MultiSelection":
        """Find zero or more elements by CSS selector."""
        return self._all(SelectorKind.CSS, css)

    def all_by_xpath(self, xpath: str) -> "MultiSelection":
        return self._all(SelectorKind.XPATH, xpath)

    def all_by_link(self, text: str) -> "MultiSelection":
        return self._all(SelectorKind.LINK, text)

    def all_by_label(self, text: str) -> "MultiSelection":
        return self._all(SelectorKind.LABEL, text)

    def all_by_button(self, text: str) -> "MultiSelection":
        return self._all(SelectorKind.BUTTON, text)

    def all_by_name(self, name: str) -> "MultiSelection":
        return self._all(SelectorKind.NAME, name)

    def all_by_class(self, css_class: str) -> "MultiSelection":
        return self._all(SelectorKind.CLASS, css_class)

    def all_by_id(self, element_id: str) -> "MultiSelection":
        return self._all(SelectorKind.ID, element_id)

    def all_by_a11y_id(self, a11y_id: str) -> "MultiSelection":
        return self._all(SelectorKind.ACCESSIBILITY_ID, a11y_id)

    def all_by_android_ui(self, uia: str) -> "MultiSelection":
        return self._all(SelectorKind.ANDROID_AUT, uia)

    def all_by_ios_ui(self, uia: str) -> "MultiSelection":
        return self._all(SelectorKind.IOS_AUT, uia)

    # Resolution

    async def _get_elements(self) -> List[Element]:
        """
        Resolve the chain to remote elements.

        Each selector is applied below every element produced by the
        previous one, sequentially and in order; the first failure aborts
        the whole resolution with no partial result.

        Raises:
            EmptySelectionError: If the chain has no selectors
        """
        if not self.selectors:
            raise EmptySelectionError()
        parents: List[Parent] = [self.session]
        for selector in self.selectors:
            children: List[Element] = []
            for parent in parents:
                children.extend(await retrieve_elements(parent, selector))
            parents = children
        return parents

    async def _get_elements_at_least_one(self) -> List[Element]:
        elements = await self._get_elements()
        if not elements:
            raise NoElementsFoundError()
        return elements

    async def _get_element_exactly_one(self) -> Element:
        elements = await self._get_elements_at_least_one()
        if len(elements) > 1:
            raise MultipleElementsError(len(elements))
        return elements[0]
