from __future__ import annotations

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.message import Message
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Button, Label, ListItem, Markdown, Static
from rich.text import Text

from .datamodels import ButtonKind, Page, ReaderBarState, Tab, reader_bar_state


def accessibility_label(widget: Widget) -> Optional[str]:
    """The label tests and key hints use to address a widget."""
    label = getattr(widget, "accessibility_label", None)
    if label:
        return label
    if widget.name:
        return widget.name
    if isinstance(widget, Button):
        if isinstance(widget.tooltip, str):
            return widget.tooltip
        return str(widget.label)
    return None


# --- Reader mode ---
class ReaderModeBar(Horizontal):
    """Read status, display settings and reading list buttons for reader mode.

    The bar only reports taps. Whoever hosts it decides what a tap means and
    then sets ``unread`` / ``added``, which re-derive what the buttons show.
    """

    DEFAULT_CSS = """
    ReaderModeBar {
        height: 4;
        border-bottom: solid $panel-lighten-2;
    }
    ReaderModeBar Button {
        width: 1fr;
        margin: 0 1;
    }
    ReaderModeBar #read-status:disabled {
        opacity: 60%;
    }
    """

    unread = reactive(True)
    added = reactive(False)

    class ButtonSelected(Message):
        """Posted when one of the bar's buttons is tapped."""

        def __init__(self, bar: ReaderModeBar, kind: ButtonKind) -> None:
            self.bar = bar
            self.kind = kind
            super().__init__()

        @property
        def control(self) -> ReaderModeBar:
            return self.bar

    def __init__(self, unread: bool = True, added: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.set_reactive(ReaderModeBar.unread, unread)
        self.set_reactive(ReaderModeBar.added, added)

    @property
    def state(self) -> ReaderBarState:
        return reader_bar_state(self.unread, self.added)

    def compose(self) -> ComposeResult:
        state = self.state
        read_status = Button(
            state.read_status.display,
            id="read-status",
            disabled=not state.read_status_enabled,
        )
        read_status.tooltip = state.read_status.label
        settings = Button(ButtonKind.SETTINGS.display, id="reader-settings")
        settings.tooltip = ButtonKind.SETTINGS.label
        list_status = Button(state.list_status.display, id="list-status")
        list_status.tooltip = state.list_status.label
        yield read_status
        yield settings
        yield list_status

    def watch_unread(self, unread: bool) -> None:
        self._refresh_read_status(self.state)

    def watch_added(self, added: bool) -> None:
        state = self.state
        self._refresh_list_status(state)
        self._refresh_read_status(state)

    def _refresh_read_status(self, state: ReaderBarState) -> None:
        if not self.is_mounted:
            return
        button = self.query_one("#read-status", Button)
        button.label = state.read_status.display
        button.tooltip = state.read_status.label
        button.disabled = not state.read_status_enabled

    def _refresh_list_status(self, state: ReaderBarState) -> None:
        if not self.is_mounted:
            return
        button = self.query_one("#list-status", Button)
        button.label = state.list_status.display
        button.tooltip = state.list_status.label

    def kind_for(self, button_id: str) -> ButtonKind:
        """The action a tap on ``button_id`` stands for right now."""
        if button_id == "read-status":
            return ButtonKind.MARK_AS_READ if self.unread else ButtonKind.MARK_AS_UNREAD
        if button_id == "reader-settings":
            return ButtonKind.SETTINGS
        if button_id == "list-status":
            return (
                ButtonKind.REMOVE_FROM_READING_LIST
                if self.added
                else ButtonKind.ADD_TO_READING_LIST
            )
        raise ValueError(f"Unknown reader bar button: {button_id}")

    def press_button(self, button_id: str) -> None:
        """Tap a button from the keyboard; disabled buttons ignore it."""
        self.query_one(f"#{button_id}", Button).press()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id is None:
            return
        self.post_message(self.ButtonSelected(self, self.kind_for(event.button.id)))


# --- Browser chrome ---
class TabCountButton(Button):
    """Shows how many tabs are open in the current browsing mode."""

    count = reactive(1)

    def __init__(self, count: int = 1):
        super().__init__(str(count), id="show-tabs", name="Show Tabs")
        self.set_reactive(TabCountButton.count, count)

    def watch_count(self, count: int) -> None:
        self.label = str(count)


class PageView(VerticalScroll):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.page: Optional[Page] = None

    @property
    def accessibility_label(self) -> Optional[str]:
        return self.page.title if self.page else None

    def compose(self) -> ComposeResult:
        yield Static("", id="page-title", classes="page-title")
        yield Markdown("", id="page-content")

    def show(self, page: Page) -> None:
        self.page = page
        self.query(ErrorMessage).remove()
        self.query_one("#page-title", Static).update(page.title)
        content = self.query_one("#page-content", Markdown)
        content.set_class(not page.ok, "page-error")
        content.update(page.content)
        self.scroll_home(animate=False)

    def show_error(self, message: str) -> None:
        self.query(ErrorMessage).remove()
        self.mount(ErrorMessage(message), before=0)


class TabTrayItem(ListItem):
    def __init__(self, tab: Tab, selected: bool = False):
        super().__init__(classes="tab-tray-item")
        self.tab = tab
        self.set_class(selected, "selected-tab")
        self.set_class(tab.is_private, "private-tab")

    @property
    def accessibility_label(self) -> str:
        return self.tab.title

    def compose(self) -> ComposeResult:
        with Horizontal(classes="tab-tray-container"):
            yield Static("●" if self.tab.is_private else "○", classes="tab-mode")
            yield Label(self.tab.title, classes="tab-title")
            yield Static(self.tab.url, classes="tab-url")


class StatusBar(Static):
    loading_status = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        """Update the status bar display."""
        status_items = []
        if self.loading_status:
            status_items.append(self.loading_status)

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()


class ErrorMessage(Static):
    def __init__(self, message: str):
        super().__init__(Text(message, style="bold red"))
