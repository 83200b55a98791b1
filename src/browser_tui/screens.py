from __future__ import annotations

from typing import Any, Dict, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Label,
    ListView,
    Markdown,
    Select,
    Static,
)

from .config import logger, save_config
from .datamodels import ButtonKind, Page, Tab
from .widgets import ReaderModeBar, TabTrayItem

READER_WIDTHS = {"narrow": 72, "wide": None}


# --- Reader mode ---
class ReaderViewScreen(Screen):
    """Shows a page in reader mode and acts on the reader bar's buttons."""

    BINDINGS = [
        Binding("escape,q", "back", "Back"),
        Binding("m", "read_status", "Read/Unread"),
        Binding("a", "list_status", "Reading List"),
        Binding("s", "display_settings", "Display Settings"),
        Binding("down", "scroll_down", "Scroll Down", show=False),
        Binding("up", "scroll_up", "Scroll Up", show=False),
    ]

    def __init__(self, tab: Tab, page: Page):
        super().__init__()
        self.tab = tab
        self.page = page
        self._browser_theme: Optional[str] = None

    def compose(self) -> ComposeResult:
        reading_list = self.app.reading_list
        yield Header()
        yield ReaderModeBar(
            unread=reading_list.is_unread(self.page.url),
            added=self.page.url in reading_list,
            id="reader-bar",
        )
        yield VerticalScroll(
            Markdown(self.page.content, id="reader-markdown"),
            id="reader-scroll",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._browser_theme = self.app.theme
        self.title = self.page.title
        time_to_read = max(1, round(self.page.word_count / 200))
        self.sub_title = f"~{time_to_read} min read"
        self.apply_display_settings(self.app.config.get("reader", {}))
        self.query_one("#reader-scroll").focus()

    @property
    def bar(self) -> ReaderModeBar:
        return self.query_one(ReaderModeBar)

    def apply_display_settings(self, settings: Optional[Dict[str, Any]]) -> None:
        if settings is None:
            return
        markdown = self.query_one("#reader-markdown", Markdown)
        markdown.styles.max_width = READER_WIDTHS.get(settings.get("width", "wide"))
        theme = settings.get("theme")
        if theme and theme in self.app.available_themes:
            self.app.theme = theme
        else:
            self.restore_browser_theme()

    def restore_browser_theme(self) -> None:
        """Put back the theme the browser had before reader mode opened."""
        if self._browser_theme and self.app.theme != self._browser_theme:
            self.app.theme = self._browser_theme

    def action_back(self) -> None:
        self.restore_browser_theme()
        self.app.pop_screen()

    def on_reader_mode_bar_button_selected(
        self, message: ReaderModeBar.ButtonSelected
    ) -> None:
        reading_list = self.app.reading_list
        bar = message.bar
        url = self.page.url
        kind = message.kind
        logger.debug("Reader bar: %s for %s", kind.name, url)

        if kind is ButtonKind.SETTINGS:
            self.app.push_screen(ReaderSettingsScreen(), self.apply_display_settings)
            return

        if kind is ButtonKind.ADD_TO_READING_LIST:
            excerpt = self.page.content[:200] if self.page.content else None
            reading_list.add(url, self.page.title, excerpt=excerpt)
            bar.added = True
            bar.unread = reading_list.is_unread(url)
            self.app.notify("Added to Reading List")
        elif kind is ButtonKind.REMOVE_FROM_READING_LIST:
            reading_list.remove(url)
            bar.added = False
            self.app.notify("Removed from Reading List")
        elif kind is ButtonKind.MARK_AS_READ:
            reading_list.mark_read(url)
            bar.unread = False
        elif kind is ButtonKind.MARK_AS_UNREAD:
            reading_list.mark_unread(url)
            bar.unread = True
        self.app.save_reading_list()

    def action_read_status(self) -> None:
        self.bar.press_button("read-status")

    def action_list_status(self) -> None:
        self.bar.press_button("list-status")

    def action_display_settings(self) -> None:
        self.bar.press_button("reader-settings")

    def action_scroll_down(self) -> None:
        self.query_one("#reader-scroll").scroll_down()

    def action_scroll_up(self) -> None:
        self.query_one("#reader-scroll").scroll_up()


class ReaderSettingsScreen(Screen):
    """Reader display settings."""

    BINDINGS = [
        Binding("escape,q", "cancel", "Back"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="reader-settings-form"):
            yield Label("Theme", classes="settings-label")
            yield Select([], id="reader-theme-select", prompt="Same as browser")
            yield Label("Content width", classes="settings-label")
            yield Select(
                [("Wide", "wide"), ("Narrow", "narrow")],
                id="reader-width-select",
                allow_blank=False,
            )
            yield Button("Save", id="save-reader-settings", classes="settings-button")
        yield Footer()

    def on_mount(self) -> None:
        self.title = ButtonKind.SETTINGS.label
        settings = self.app.config.get("reader", {})

        theme_select = self.query_one("#reader-theme-select", Select)
        theme_select.set_options([(name, name) for name in sorted(self.app.available_themes)])
        if settings.get("theme") in self.app.available_themes:
            theme_select.value = settings["theme"]

        width_select = self.query_one("#reader-width-select", Select)
        if settings.get("width") in READER_WIDTHS:
            width_select.value = settings["width"]

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save-reader-settings":
            self.save_settings()

    def save_settings(self) -> None:
        theme = self.query_one("#reader-theme-select", Select).value
        if theme is Select.BLANK:
            theme = None
        settings = {
            "theme": theme,
            "width": self.query_one("#reader-width-select", Select).value,
        }
        self.app.config["reader"] = settings
        if self.app.persist:
            save_config(self.app.config)
        self.app.notify("Display settings saved.")
        self.dismiss(settings)

    def action_cancel(self) -> None:
        self.dismiss(None)


# --- History ---
class HistoryScreen(Screen):
    BINDINGS = [
        Binding("escape,q", "cancel", "Back"),
        Binding("d", "delete_entry", "Delete"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(classes="screen-toolbar"):
            yield Button("Cancel", id="history-cancel", name="Cancel")
            yield Button("Clear History", id="history-clear", variant="error")
        yield DataTable(id="history-list", name="History List")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "History"
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_column("Title", key="title")
        table.add_column("Address", key="url")
        table.add_column("Visits", key="visits")
        self.populate()
        table.focus()

    def populate(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for entry in self.app.history.entries():
            table.add_row(entry.title, entry.url, str(entry.visit_count), key=entry.url)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "history-cancel":
            self.dismiss(None)
        elif event.button.id == "history-clear":
            self.app.history.clear()
            self.app.save_history()
            self.populate()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.dismiss(str(event.row_key.value))

    def action_delete_entry(self) -> None:
        table = self.query_one(DataTable)
        if not table.is_valid_row_index(table.cursor_row):
            return
        row_key = table.get_row_key(table.cursor_row)
        self.app.history.remove(str(row_key.value))
        self.app.save_history()
        table.remove_row_at(table.cursor_row)

    def action_cancel(self) -> None:
        self.dismiss(None)


# --- Tabs ---
class TabTrayScreen(Screen):
    """All open tabs of the current browsing mode."""

    BINDINGS = [
        Binding("escape", "done", "Done"),
        Binding("d,delete", "close_tab", "Close Tab"),
        Binding("p", "toggle_private", "Private Mode"),
        Binding("n", "add_tab", "Add Tab"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(classes="screen-toolbar"):
            yield Button("Private Mode", id="private-mode", name="Private Mode")
            yield Button("Add Tab", id="add-tab", name="Add Tab", variant="primary")
            yield Button("Done", id="tray-done", name="Done")
        yield Static(
            "[b]Private Browsing[/b]\n\n"
            "Pages you view in private tabs are not kept in your history.",
            id="private-empty",
            name="Private Browsing",
        )
        yield ListView(id="tabs-tray", name="Tabs Tray")
        yield Footer()

    async def on_mount(self) -> None:
        self.title = "Tabs"
        await self.refresh_tray()

    async def refresh_tray(self) -> None:
        tabs = self.app.tabs
        private = tabs.mode.is_private
        self.set_class(private, "private")
        self.query_one("#private-mode", Button).set_class(private, "active")

        tray = self.query_one("#tabs-tray", ListView)
        await tray.clear()
        selected = tabs.selected_tab
        await tray.extend(TabTrayItem(tab, selected=tab is selected) for tab in tabs.tabs())

        empty = private and tabs.count() == 0
        self.query_one("#private-empty", Static).display = empty
        if not empty:
            open_tabs = tabs.tabs()
            if selected in open_tabs:
                tray.index = open_tabs.index(selected)
            tray.focus()
        self.app.refresh_chrome()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "private-mode":
            await self.action_toggle_private()
        elif event.button.id == "add-tab":
            self.action_add_tab()
        elif event.button.id == "tray-done":
            self.action_done()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, TabTrayItem):
            self.app.tabs.select_tab(event.item.tab)
            self.dismiss(event.item.tab)

    async def action_toggle_private(self) -> None:
        self.app.tabs.toggle_private_mode()
        await self.refresh_tray()

    def action_add_tab(self) -> None:
        self.dismiss(self.app.tabs.add_tab())

    async def action_close_tab(self) -> None:
        tray = self.query_one("#tabs-tray", ListView)
        item = tray.highlighted_child
        if not isinstance(item, TabTrayItem):
            return
        self.app.close_tab(item.tab)
        await self.refresh_tray()

    def action_done(self) -> None:
        self.dismiss(self.app.tabs.selected_tab)


# --- Reading list ---
class ReadingListScreen(Screen):
    BINDINGS = [
        Binding("escape,q", "cancel", "Back"),
        Binding("d", "remove_item", "Remove"),
        Binding("m", "toggle_read", "Read/Unread"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        yield DataTable(id="reading-list", name="Reading List")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Reading List"
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_column("", key="status")
        table.add_column("Title", key="title")
        table.add_column("Address", key="url")
        self.populate()
        table.focus()

    def populate(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for item in self.app.reading_list.items():
            status = ButtonKind.MARK_AS_READ.icon if item.unread else ButtonKind.MARK_AS_UNREAD.icon
            table.add_row(status, item.title, item.url, key=item.url)

    def _selected_url(self) -> Optional[str]:
        table = self.query_one(DataTable)
        if not table.is_valid_row_index(table.cursor_row):
            return None
        return str(table.get_row_key(table.cursor_row).value)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.dismiss(str(event.row_key.value))

    def action_remove_item(self) -> None:
        url = self._selected_url()
        if url is None:
            return
        self.app.reading_list.remove(url)
        self.app.save_reading_list()
        self.populate()

    def action_toggle_read(self) -> None:
        url = self._selected_url()
        if url is None:
            return
        reading_list = self.app.reading_list
        if reading_list.is_unread(url):
            reading_list.mark_read(url)
        else:
            reading_list.mark_unread(url)
        self.app.save_reading_list()
        self.populate()

    def action_cancel(self) -> None:
        self.dismiss(None)

