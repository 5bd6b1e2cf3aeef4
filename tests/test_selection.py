"""Tests for selection resolution, actions and properties."""

import os

import pytest

from navigator.core.exceptions import (
    ActionError,
    AmbiguousFindError,
    ElementNotFoundError,
    EmptySelectionError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    MultipleElementsError,
    NoElementsFoundError,
    ProtocolError,
    SelectionError,
)
from navigator.core.selection import MultiSelection, Selection
from navigator.core.selectors import SelectorChain
from navigator.webdriver.types import Tap, Touch


class TestBuilders:
    """Tests for selection builders."""

    def test_find_first_all_types(self, page):
        """Should return single, indexed and multi selections."""
        assert type(page.find("#a")) is Selection
        assert type(page.first("#a")) is Selection
        assert type(page.all("#a")) is MultiSelection

    def test_selection_string(self, page):
        """Should describe the selection by its chain."""
        selection = page.all(".row").at(2).find_by_link("Edit")

        assert str(selection) == "selection 'CSS: .row [2] | Link: \"Edit\" [single]'"

    def test_builders_do_not_mutate(self, page):
        """Should keep parent selections unchanged when branching."""
        table = page.find_by_xpath("//table")
        rows = table.all("tr")
        cells = table.all_by_class("cell")

        assert str(table) == "selection 'XPath: //table [single]'"
        assert str(rows) == "selection 'XPath: //table [single] | CSS: tr'"
        assert str(cells) == "selection 'XPath: //table [single] | Class: cell'"

    def test_multi_selection_narrowing(self, page):
        """Should narrow a multi selection by index or to exactly one."""
        items = page.all_by_name("item")

        assert type(items.at(1)) is Selection
        assert str(items.at(1)) == "selection 'Name: \"item\" [1]'"
        assert str(items.single()) == "selection 'Name: \"item\" [single]'"

    def test_mobile_builders(self, page):
        """Should build accessibility and UI automation selectors."""
        assert str(page.find_by_a11y_id("menu")) == "selection 'Accessibility ID: menu [single]'"
        assert str(page.first_by_android_ui("x")) == "selection 'Android UIAut.: x [0]'"
        assert str(page.all_by_ios_ui("y")) == "selection 'iOS UIAut.: y'"


class TestResolution:
    """Tests for resolving chains to remote elements."""

    @pytest.mark.asyncio
    async def test_find_single_element(self, page, remote):
        """Should fetch all matches at the root and return the only one."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        elements = await page.find("#a").elements()

        assert [e.id for e in elements] == ["e1"]
        assert remote.bodies("POST", "elements") == [{"using": "css selector", "value": "#a"}]

    @pytest.mark.asyncio
    async def test_find_ambiguous(self, page, remote):
        """Should fail when a single selector matches twice."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}])

        with pytest.raises(SelectionError) as exc_info:
            await page.find("#a").elements()

        assert str(exc_info.value) == "failed to select elements from selection 'CSS: #a [single]': ambiguous find"
        assert isinstance(exc_info.value.__cause__, AmbiguousFindError)

    @pytest.mark.asyncio
    async def test_find_not_found(self, page, remote):
        """Should fail when a single selector matches nothing."""
        remote.on("POST", "elements", [])

        with pytest.raises(SelectionError) as exc_info:
            await page.find("#a").count()

        assert "element not found" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ElementNotFoundError)

    @pytest.mark.asyncio
    async def test_first_uses_single_result_find(self, page, remote):
        """Should resolve index 0 with a direct single-element find."""
        remote.on("POST", "element", {"ELEMENT": "e1"})

        elements = await page.first_by_id("main").elements()

        assert [e.id for e in elements] == ["e1"]
        assert remote.bodies("POST", "element") == [{"using": "id", "value": "main"}]
        assert remote.bodies("POST", "elements") == []

    @pytest.mark.asyncio
    async def test_at_index_selects_match(self, page, remote):
        """Should fetch all matches and pick the indexed one."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}, {"ELEMENT": "e3"}])

        elements = await page.all("li").at(2).elements()

        assert [e.id for e in elements] == ["e3"]

    @pytest.mark.asyncio
    async def test_at_index_out_of_range(self, page, remote):
        """Should fail when the index points past the matches."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        with pytest.raises(SelectionError) as exc_info:
            await page.all("li").at(1).elements()

        assert "element index out of range" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, IndexOutOfRangeError)

    @pytest.mark.asyncio
    async def test_negative_index_out_of_range(self, page, remote):
        """Should reject negative indices at resolution without a request."""
        with pytest.raises(SelectionError) as exc_info:
            await page.all("li").at(-1).elements()

        assert isinstance(exc_info.value.__cause__, IndexOutOfRangeError)
        assert remote.session_requests() == []

    @pytest.mark.asyncio
    async def test_nested_selectors_fan_out(self, page, remote):
        """Should apply each selector below every element of the previous step."""
        remote.on("POST", "elements", [{"ELEMENT": "r1"}, {"ELEMENT": "r2"}])
        remote.on("POST", "element/r1/elements", [{"ELEMENT": "c1"}])
        remote.on("POST", "element/r2/elements", [{"ELEMENT": "c2"}, {"ELEMENT": "c3"}])

        elements = await page.all_by_xpath("//tr").all("td").elements()

        assert [e.id for e in elements] == ["c1", "c2", "c3"]
        assert [path for _, path, _ in remote.session_requests()] == [
            "elements",
            "element/r1/elements",
            "element/r2/elements",
        ]

    @pytest.mark.asyncio
    async def test_css_chain_merged_into_one_request(self, page, remote):
        """Should send merged CSS selectors as one descendant query."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}])

        assert await page.all("table").all("tr").count() == 2
        assert remote.bodies("POST", "elements") == [{"using": "css selector", "value": "table tr"}]

    @pytest.mark.asyncio
    async def test_single_per_parent(self, page, remote):
        """Should require exactly one match below each parent."""
        remote.on("POST", "elements", [{"ELEMENT": "r1"}, {"ELEMENT": "r2"}])
        remote.on("POST", "element/r1/elements", [{"ELEMENT": "c1"}])
        remote.on("POST", "element/r2/elements", [])

        with pytest.raises(SelectionError) as exc_info:
            await page.all_by_xpath("//tr").find("td").elements()

        assert isinstance(exc_info.value.__cause__, ElementNotFoundError)

    @pytest.mark.asyncio
    async def test_empty_selection(self, session):
        """Should fail to resolve a selection without selectors."""
        selection = Selection(session, SelectorChain())

        with pytest.raises(SelectionError) as exc_info:
            await selection.count()

        assert isinstance(exc_info.value.__cause__, EmptySelectionError)
        assert "empty selection" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_count_zero(self, page, remote):
        """Should count an unconstrained selection with no matches as zero."""
        remote.on("POST", "elements", [])

        assert await page.all(".missing").count() == 0

    @pytest.mark.asyncio
    async def test_remote_error_during_resolution(self, page, remote):
        """Should wrap protocol failures with the selection description."""
        remote.fail("POST", "elements", "invalid selector")

        with pytest.raises(SelectionError) as exc_info:
            await page.all("][").count()

        assert str(exc_info.value) == (
            "failed to select elements from selection 'CSS: ][': request unsuccessful: invalid selector"
        )
        assert isinstance(exc_info.value.__cause__, ProtocolError)


class TestActions:
    """Tests for actions applied to resolved elements."""

    @pytest.mark.asyncio
    async def test_click_every_element(self, page, remote):
        """Should click each element of the selection."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}])

        await page.all("button").click()

        paths = [path for method, path, _ in remote.session_requests() if method == "POST"]
        assert paths == ["elements", "element/e1/click", "element/e2/click"]

    @pytest.mark.asyncio
    async def test_action_requires_elements(self, page, remote):
        """Should fail an action when nothing is selected."""
        remote.on("POST", "elements", [])

        with pytest.raises(SelectionError) as exc_info:
            await page.all("button").click()

        assert str(exc_info.value) == "failed to select elements from selection 'CSS: button': no elements found"
        assert isinstance(exc_info.value.__cause__, NoElementsFoundError)

    @pytest.mark.asyncio
    async def test_action_failure_wrapped(self, page, remote):
        """Should report which selection an action failed on."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.fail("POST", "element/e1/click", "element not interactable")

        with pytest.raises(ActionError) as exc_info:
            await page.find("#go").click()

        assert str(exc_info.value) == (
            "failed to click on selection 'CSS: #go [single]': request unsuccessful: element not interactable"
        )

    @pytest.mark.asyncio
    async def test_double_click_moves_mouse_first(self, page, remote):
        """Should move to each element before double-clicking."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find("#a").double_click()

        assert remote.session_requests()[1:] == [
            ("POST", "moveto", {"element": "e1"}),
            ("POST", "doubleclick", None),
        ]

    @pytest.mark.asyncio
    async def test_fill_clears_then_types(self, page, remote):
        """Should clear the field and send the text one key per character."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find_by_label("Name").fill("ab")

        assert remote.session_requests()[1:] == [
            ("POST", "element/e1/clear", None),
            ("POST", "element/e1/value", {"value": ["a", "b"]}),
        ]

    @pytest.mark.asyncio
    async def test_upload_file_sends_absolute_path(self, page, remote):
        """Should send the absolute path to a file input."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/name", "input")
        remote.on("GET", "element/e1/attribute/type", "file")

        await page.find("#upload").upload_file("report.pdf")

        assert remote.bodies("POST", "element/e1/value") == [
            {"value": list(os.path.abspath("report.pdf"))}
        ]

    @pytest.mark.asyncio
    async def test_upload_file_rejects_other_inputs(self, page, remote):
        """Should refuse to upload into a non-file input."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/name", "input")
        remote.on("GET", "element/e1/attribute/type", "text")

        with pytest.raises(ActionError, match="is not a file uploader"):
            await page.find("#upload").upload_file("report.pdf")

        assert remote.bodies("POST", "element/e1/value") == []

    @pytest.mark.asyncio
    async def test_check_clicks_only_unchecked(self, page, remote):
        """Should click only the checkboxes whose state differs."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}])
        remote.on("GET", "element/e1/attribute/type", "checkbox")
        remote.on("GET", "element/e2/attribute/type", "checkbox")
        remote.on("GET", "element/e1/selected", False)
        remote.on("GET", "element/e2/selected", True)

        await page.all("input").check()

        assert remote.bodies("POST", "element/e1/click") == [None]
        assert remote.bodies("POST", "element/e2/click") == []

    @pytest.mark.asyncio
    async def test_uncheck_clicks_only_checked(self, page, remote):
        """Should click only checked boxes when unchecking."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/attribute/type", "checkbox")
        remote.on("GET", "element/e1/selected", True)

        await page.find("#agree").uncheck()

        assert remote.bodies("POST", "element/e1/click") == [None]

    @pytest.mark.asyncio
    async def test_check_rejects_non_checkbox(self, page, remote):
        """Should fail when the element is not a checkbox."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/attribute/type", "radio")

        with pytest.raises(ActionError, match="does not refer to a checkbox"):
            await page.find("#agree").check()

    @pytest.mark.asyncio
    async def test_select_clicks_matching_options(self, page, remote):
        """Should click every option with the given text."""
        remote.on("POST", "elements", [{"ELEMENT": "s1"}])
        remote.on("POST", "element/s1/elements", [{"ELEMENT": "o1"}])

        await page.find("select").select("Blue")

        assert remote.bodies("POST", "element/s1/elements") == [
            {"using": "xpath", "value": './option[normalize-space()="Blue"]'}
        ]
        assert remote.bodies("POST", "element/o1/click") == [None]

    @pytest.mark.asyncio
    async def test_select_requires_option(self, page, remote):
        """Should fail when no option matches the text."""
        remote.on("POST", "elements", [{"ELEMENT": "s1"}])
        remote.on("POST", "element/s1/elements", [])

        with pytest.raises(ActionError, match='no options with text "Blue" found'):
            await page.find("select").select("Blue")

    @pytest.mark.asyncio
    async def test_submit(self, page, remote):
        """Should submit each selected form."""
        remote.on("POST", "elements", [{"ELEMENT": "f1"}])

        await page.find("form").submit()

        assert remote.bodies("POST", "element/f1/submit") == [None]

    @pytest.mark.asyncio
    async def test_send_keys(self, page, remote):
        """Should send key events to each element."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find("#q").send_keys("\ue007")

        assert remote.bodies("POST", "element/e1/value") == [{"value": ["\ue007"]}]

    @pytest.mark.asyncio
    async def test_tap(self, page, remote):
        """Should send the touch command for the tap event."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find("#a").tap(Tap.DOUBLE)

        assert remote.bodies("POST", "touch/doubleclick") == [{"element": "e1"}]

    @pytest.mark.asyncio
    async def test_touch_at_rounded_location(self, page, remote):
        """Should touch at the element location, rounded half up."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/location", {"x": 10.5, "y": 20.4})

        await page.find("#a").touch(Touch.HOLD_FINGER)

        assert remote.bodies("POST", "touch/down") == [{"x": 11, "y": 20}]

    @pytest.mark.asyncio
    async def test_flick_finger(self, page, remote):
        """Should flick exactly one element by an offset at a scalar speed."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find("#list").flick_finger(0, -200, 5)

        assert remote.bodies("POST", "touch/flick") == [
            {"element": "e1", "xoffset": 0, "yoffset": -200, "speed": 5}
        ]

    @pytest.mark.asyncio
    async def test_scroll_finger(self, page, remote):
        """Should scroll exactly one element by an offset."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find("#list").scroll_finger(3, 4)

        assert remote.bodies("POST", "touch/scroll") == [{"xoffset": 3, "yoffset": 4, "element": "e1"}]

    @pytest.mark.asyncio
    async def test_switch_to_frame(self, page, remote):
        """Should focus the frame element with both element keys."""
        remote.on("POST", "elements", [{"ELEMENT": "f1"}])

        await page.find("iframe").switch_to_frame()

        assert remote.bodies("POST", "frame") == [
            {"id": {"ELEMENT": "f1", "element-6066-11e4-a52e-4f735466cecf": "f1"}}
        ]

    @pytest.mark.asyncio
    async def test_mouse_to_element(self, page, remote):
        """Should move the mouse over the element."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])

        await page.find("#menu").mouse_to_element()

        assert remote.bodies("POST", "moveto") == [{"element": "e1"}]


class TestProperties:
    """Tests for property reads."""

    @pytest.mark.asyncio
    async def test_text(self, page, remote):
        """Should return the text of exactly one element."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/text", "Hello")

        assert await page.find("h1").text() == "Hello"

    @pytest.mark.asyncio
    async def test_text_rejects_multiple_elements(self, page, remote):
        """Should fail when more than one element resolves."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}])

        with pytest.raises(SelectionError) as exc_info:
            await page.all("p").text()

        assert str(exc_info.value) == (
            "failed to select element from selection 'CSS: p': method does not support multiple elements (2)"
        )
        assert isinstance(exc_info.value.__cause__, MultipleElementsError)

    @pytest.mark.asyncio
    async def test_attribute_and_css(self, page, remote):
        """Should read an attribute and a CSS property."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/attribute/href", "/home")
        remote.on("GET", "element/e1/css/color", "red")

        assert await page.find("a").attribute("href") == "/home"
        assert await page.find("a").css("color") == "red"

    @pytest.mark.asyncio
    async def test_visible_requires_all(self, page, remote):
        """Should be visible only when every element is displayed."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}, {"ELEMENT": "e2"}])
        remote.on("GET", "element/e1/displayed", True)
        remote.on("GET", "element/e2/displayed", False)

        assert await page.all("li").visible() is False

    @pytest.mark.asyncio
    async def test_enabled_and_selected(self, page, remote):
        """Should report enabled and selected state of all elements."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("GET", "element/e1/enabled", True)
        remote.on("GET", "element/e1/selected", True)

        assert await page.find("#opt").enabled() is True
        assert await page.find("#opt").selected() is True

    @pytest.mark.asyncio
    async def test_active(self, page, remote):
        """Should compare the element with the active element."""
        remote.on("POST", "elements", [{"ELEMENT": "e1"}])
        remote.on("POST", "element/active", {"ELEMENT": "e1"})
        remote.on("GET", "element/e1/equals/e1", True)

        assert await page.find("#q").active() is True

    @pytest.mark.asyncio
    async def test_equals_element(self, page, remote):
        """Should ask the driver whether two selections are the same element."""
        remote.on("POST", "element", {"ELEMENT": "e1"})
        remote.on("POST", "elements", [{"ELEMENT": "e2"}])
        remote.on("GET", "element/e1/equals/e2", False)

        assert await page.first("#a").equals_element(page.find("#b")) is False

    @pytest.mark.asyncio
    async def test_equals_element_rejects_other_types(self, page, remote):
        """Should reject comparison with anything but a selection."""
        with pytest.raises(InvalidArgumentError, match="must be Selection or MultiSelection"):
            await page.find("#a").equals_element("#b")

        assert remote.session_requests() == []
