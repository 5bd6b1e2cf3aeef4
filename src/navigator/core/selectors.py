"""Selector values and the immutable selector chain algebra."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Tuple

from ..webdriver.types import Locator
from .exceptions import InvalidArgumentError


class SelectorKind(Enum):
    """Find strategy of a selector; the value is its description format."""

    CSS = "CSS: {}"
    XPATH = "XPath: {}"
    LINK = 'Link: "{}"'
    LABEL = 'Label: "{}"'
    BUTTON = 'Button: "{}"'
    NAME = 'Name: "{}"'
    ACCESSIBILITY_ID = "Accessibility ID: {}"
    ANDROID_AUT = "Android UIAut.: {}"
    IOS_AUT = "iOS UIAut.: {}"
    CLASS = "Class: {}"
    ID = "ID: {}"

    def describe(self, value: str) -> str:
        return self.value.format(value)


# Kinds not listed here are sent as XPath (label and button are synthesized XPath)
STRATEGY_MAP = {
    SelectorKind.CSS: "css selector",
    SelectorKind.CLASS: "class name",
    SelectorKind.ID: "id",
    SelectorKind.LINK: "link text",
    SelectorKind.NAME: "name",
    SelectorKind.ACCESSIBILITY_ID: "accessibility id",
    SelectorKind.ANDROID_AUT: "-android uiautomator",
    SelectorKind.IOS_AUT: "-ios uiautomation",
    SelectorKind.XPATH: "xpath",
    SelectorKind.LABEL: "xpath",
    SelectorKind.BUTTON: "xpath",
}

LABEL_XPATH = '//input[@id=(//label[normalize-space()="{0}"]/@for)] | //label[normalize-space()="{0}"]/input'
BUTTON_XPATH = (
    '//input[@type="submit" or @type="button"][normalize-space(@value)="{0}"]'
    ' | //button[normalize-space()="{0}"]'
)


def get_strategy(kind: SelectorKind) -> str:
    """Protocol "using" value for a selector kind."""
    return STRATEGY_MAP.get(kind, "xpath")


@dataclass(frozen=True)
class Selector:
    """
    One find step: a kind, its query text and its cardinality policy.

    ``single`` demands exactly one match per parent element; ``indexed``
    picks the match at ``index``. The two are mutually exclusive.
    """

    kind: SelectorKind
    value: str
    index: int = 0
    indexed: bool = False
    single: bool = False

    def __post_init__(self):
        if self.single and self.indexed:
            raise InvalidArgumentError("selector cannot be both single and indexed")

    def __str__(self) -> str:
        suffix = ""
        if self.single:
            suffix = " [single]"
        elif self.indexed:
            suffix = f" [{self.index}]"
        return self.kind.describe(self.value) + suffix

    @property
    def strategy(self) -> str:
        return get_strategy(self.kind)

    @property
    def query(self) -> str:
        """Query text sent to the driver; label and button text become XPath."""
        if self.kind is SelectorKind.LABEL:
            return LABEL_XPATH.format(self.value)
        if self.kind is SelectorKind.BUTTON:
            return BUTTON_XPATH.format(self.value)
        return self.value

    def locator(self) -> Locator:
        return Locator(using=self.strategy, value=self.query)


@dataclass(frozen=True)
class SelectorChain:
    """
    An ordered, persistent sequence of selectors.

    Every operation returns a new chain, so a chain can be forked into many
    branches without one branch ever seeing another's changes.
    """

    selectors: Tuple[Selector, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.selectors)

    def __iter__(self) -> Iterator[Selector]:
        return iter(self.selectors)

    def __getitem__(self, index: int) -> Selector:
        return self.selectors[index]

    def __str__(self) -> str:
        return " | ".join(str(selector) for selector in self.selectors)

    def _can_merge(self, kind: SelectorKind) -> bool:
        if not self.selectors:
            return False
        last = self.selectors[-1]
        both_css = kind is SelectorKind.CSS and last.kind is SelectorKind.CSS
        return both_css and not last.indexed and not last.single

    def append(self, kind: SelectorKind, value: str) -> "SelectorChain":
        """
        Add a find step.

        A CSS step following a plain CSS step is merged into it with a
        descendant combinator ("table" + "tr" -> "table tr"), saving a
        round trip per element.
        """
        if self._can_merge(kind):
            last = self.selectors[-1]
            merged = Selector(kind=kind, value=f"{last.value} {value}")
            return SelectorChain(self.selectors[:-1] + (merged,))
        return SelectorChain(self.selectors + (Selector(kind=kind, value=value),))

    def single(self) -> "SelectorChain":
        """Require exactly one match for the last step. Empty chains stay empty."""
        if not self.selectors:
            return SelectorChain()
        last = replace(self.selectors[-1], single=True, indexed=False)
        return SelectorChain(self.selectors[:-1] + (last,))

    def at(self, index: int) -> "SelectorChain":
        """
        Pick the match at index for the last step. Empty chains stay empty.

        The index is not validated here; out-of-range indices fail when the
        chain is resolved.
        """
        if not self.selectors:
            return SelectorChain()
        last = replace(self.selectors[-1], single=False, indexed=True, index=index)
        return SelectorChain(self.selectors[:-1] + (last,))
