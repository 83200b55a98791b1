from __future__ import annotations

import itertools

import pytest
from textual.app import App, ComposeResult
from textual.widgets import Button

from browser_tui.datamodels import ButtonKind, reader_bar_state
from browser_tui.widgets import ReaderModeBar

FLAGS = list(itertools.product([True, False], repeat=2))


@pytest.mark.parametrize("unread,added", FLAGS)
def test_read_status_enabled_only_when_added(unread, added):
    assert reader_bar_state(unread, added).read_status_enabled is added


@pytest.mark.parametrize("unread", [True, False])
def test_read_status_is_mark_as_unread_when_not_added(unread):
    assert reader_bar_state(unread, False).read_status is ButtonKind.MARK_AS_UNREAD


def test_read_status_follows_unread_when_added():
    assert reader_bar_state(True, True).read_status is ButtonKind.MARK_AS_READ
    assert reader_bar_state(False, True).read_status is ButtonKind.MARK_AS_UNREAD


@pytest.mark.parametrize("unread,added", FLAGS)
def test_list_status_follows_added(unread, added):
    expected = (
        ButtonKind.REMOVE_FROM_READING_LIST if added else ButtonKind.ADD_TO_READING_LIST
    )
    assert reader_bar_state(unread, added).list_status is expected


def test_button_kinds_have_labels():
    assert ButtonKind.SETTINGS.label == "Display Settings"
    assert ButtonKind.ADD_TO_READING_LIST.display.endswith("Add to Reading List")


class BarHost(App):
    """Hosts a reader bar and keeps every notification it sends."""

    def __init__(self, unread: bool = True, added: bool = False):
        super().__init__()
        self.unread = unread
        self.added = added
        self.selected: list[ButtonKind] = []

    def compose(self) -> ComposeResult:
        yield ReaderModeBar(unread=self.unread, added=self.added)

    def on_reader_mode_bar_button_selected(self, message: ReaderModeBar.ButtonSelected) -> None:
        self.selected.append(message.kind)


def button_label(app: App, button_id: str) -> str:
    return str(app.query_one(f"#{button_id}", Button).label)


async def test_add_tap_notifies_once_without_changing_flags():
    app = BarHost(added=False)
    async with app.run_test() as pilot:
        await pilot.click("#list-status")
        await pilot.pause()

        assert app.selected == [ButtonKind.ADD_TO_READING_LIST]
        bar = app.query_one(ReaderModeBar)
        assert bar.added is False
        assert button_label(app, "list-status") == ButtonKind.ADD_TO_READING_LIST.display


async def test_disabled_read_status_sends_nothing():
    app = BarHost(unread=True, added=False)
    async with app.run_test() as pilot:
        button = app.query_one("#read-status", Button)
        assert button.disabled
        assert str(button.label) == ButtonKind.MARK_AS_UNREAD.display

        await pilot.click("#read-status")
        app.query_one(ReaderModeBar).press_button("read-status")
        await pilot.pause()
        assert app.selected == []


async def test_setting_added_rederives_both_buttons():
    app = BarHost(unread=True, added=False)
    async with app.run_test() as pilot:
        bar = app.query_one(ReaderModeBar)
        bar.added = True
        await pilot.pause()

        read_status = app.query_one("#read-status", Button)
        assert not read_status.disabled
        assert str(read_status.label) == ButtonKind.MARK_AS_READ.display
        assert read_status.tooltip == ButtonKind.MARK_AS_READ.label
        assert button_label(app, "list-status") == ButtonKind.REMOVE_FROM_READING_LIST.display

        bar.unread = False
        await pilot.pause()
        assert str(read_status.label) == ButtonKind.MARK_AS_UNREAD.display

        bar.added = False
        await pilot.pause()
        assert read_status.disabled
        assert button_label(app, "list-status") == ButtonKind.ADD_TO_READING_LIST.display


@pytest.mark.parametrize(
    "unread,added,button_id,expected",
    [
        (True, True, "read-status", ButtonKind.MARK_AS_READ),
        (False, True, "read-status", ButtonKind.MARK_AS_UNREAD),
        (True, True, "reader-settings", ButtonKind.SETTINGS),
        (True, False, "reader-settings", ButtonKind.SETTINGS),
        (False, True, "list-status", ButtonKind.REMOVE_FROM_READING_LIST),
    ],
)
async def test_taps_report_intent(unread, added, button_id, expected):
    app = BarHost(unread=unread, added=added)
    async with app.run_test() as pilot:
        app.query_one(ReaderModeBar).press_button(button_id)
        await pilot.pause()
        assert app.selected == [expected]


def test_kind_for_unknown_button():
    bar = ReaderModeBar()
    with pytest.raises(ValueError):
        bar.kind_for("nope")
