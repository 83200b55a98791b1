from __future__ import annotations

import itertools
from typing import Any, Dict, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.worker import Worker, WorkerState
from textual.widgets import Button, Header, Input

from .cache import PageCache
from .config import (
    CACHE_DIR,
    CACHE_TTL,
    HOME_URL,
    UI_DEFAULTS,
    load_history,
    load_reading_list,
    logger,
    save_history,
    save_reading_list,
)
from .datamodels import BrowsingMode, Page, Tab
from .fetcher import PageFetcher, normalize_url
from .history import History
from .reading_list import ReadingList
from .screens import HistoryScreen, ReaderViewScreen, ReadingListScreen, TabTrayScreen
from .tabs import TabManager
from .widgets import PageView, StatusBar, TabCountButton


class BrowserApp(App):
    TITLE = "Browser"
    SUB_TITLE = "A small terminal browser"

    CSS_PATH = "app.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+l", "focus_url", "Address"),
        Binding("ctrl+t", "show_tabs", "Tabs"),
        Binding("ctrl+y", "show_history", "History"),
        Binding("ctrl+r", "show_reading_list", "Reading List"),
        Binding("R", "reader_mode", "Reader Mode"),
        Binding("alt+left", "go_back", "Back"),
        Binding("alt+right", "go_forward", "Forward"),
        Binding("f5", "reload", "Reload"),
    ]

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        fetcher: Optional[PageFetcher] = None,
        persist: Optional[bool] = None,
        start_url: Optional[str] = None,
        private: bool = False,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.config = config or {}
        self.persist = self.config.get("persist", True) if persist is None else persist
        self.history = History(load_history() if self.persist else None)
        self.reading_list = ReadingList(load_reading_list() if self.persist else None)
        self.tabs = TabManager(self.history)
        if fetcher is None:
            cache = PageCache(CACHE_DIR, CACHE_TTL) if self.persist else None
            fetcher = PageFetcher(cache=cache)
        self.fetcher = fetcher
        self.start_url = start_url
        self.start_private = private
        # Pages shown per tab id; private pages live only here.
        self.pages: Dict[int, Page] = {}
        self._load_ids = itertools.count(1)
        self._latest_load: Dict[int, int] = {}
        self._loads: Dict[Worker, tuple[Tab, int]] = {}

    @property
    def main_screen(self) -> Screen:
        return self.screen_stack[0]

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="toolbar"):
            yield Button("⌂", id="home", name="home")
            yield Button("←", id="back", name="Back")
            yield Button("→", id="forward", name="Forward")
            yield Input(placeholder="Search or enter address", id="url")
            yield Button("History", id="history", name="History")
            yield Button("Reading List", id="reading-list-button", name="Reading List")
            yield TabCountButton()
        yield PageView(id="page-view")
        yield StatusBar()

    def on_mount(self) -> None:
        theme = self.config.get("theme")
        if theme and theme in self.available_themes:
            self.theme = theme

        self.tabs.add_tab(BrowsingMode.NORMAL)
        if self.start_private:
            self.tabs.add_tab(BrowsingMode.PRIVATE)
        self.show_selected_tab()
        if self.start_url:
            self.open_url(self.start_url)

        keybindings_text = self.config.get("ui", {}).get(
            "statusbar_keybindings", UI_DEFAULTS["statusbar_keybindings"]
        )
        self.main_screen.query_one(StatusBar).set_keybindings(
            keybindings_text.format(color="$accent")
        )

    # --- chrome ---
    def refresh_chrome(self) -> None:
        """Bring the toolbar in line with the selected tab and mode."""
        screen = self.main_screen
        private = self.tabs.mode.is_private
        screen.query_one(TabCountButton).count = self.tabs.count()
        screen.set_class(private, "private")
        self.sub_title = "Private Browsing" if private else self.SUB_TITLE

        tab = self.tabs.selected_tab
        screen.query_one("#back", Button).disabled = not (tab and tab.can_go_back)
        screen.query_one("#forward", Button).disabled = not (tab and tab.can_go_forward)
        url_input = screen.query_one("#url", Input)
        if tab is None or tab.url.startswith("about:"):
            url_input.value = ""
        else:
            url_input.value = tab.url

    def show_selected_tab(self) -> None:
        tab = self.tabs.selected_tab
        if tab is None:
            tab = self.tabs.add_tab()
        page = self.pages.get(tab.id)
        if page is None:
            self._load(tab, tab.url, navigate=False)
        else:
            self.main_screen.query_one(PageView).show(page)
        self.refresh_chrome()

    # --- loading ---
    def open_url(self, text: str) -> None:
        url = normalize_url(text)
        tab = self.tabs.selected_tab or self.tabs.add_tab()
        self._load(tab, url, navigate=True)

    def _load(self, tab: Tab, url: str, navigate: bool) -> None:
        self.main_screen.query_one(StatusBar).loading_status = f"Loading {url}..."
        private = tab.is_private
        load_id = next(self._load_ids)
        self._latest_load[tab.id] = load_id
        worker = self.run_worker(
            lambda: (tab, self.fetcher.fetch(url, private=private), navigate, load_id),
            name="page_loader",
            thread=True,
            exit_on_error=False,
        )
        self._loads[worker] = (tab, load_id)

    def _is_current_load(self, tab: Tab, load_id: int) -> bool:
        return self._latest_load.get(tab.id) == load_id

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if getattr(event.worker, "name", None) != "page_loader":
            return
        if event.state is WorkerState.SUCCESS:
            self._loads.pop(event.worker, None)
            tab, page, navigate, load_id = event.worker.result
            if self._is_current_load(tab, load_id):
                self._handle_page_loaded(tab, page, navigate)
        elif event.state is WorkerState.ERROR:
            error = getattr(event.worker, "error", None)
            logger.error("Page loader worker failed: %s", error)
            tab, load_id = self._loads.pop(event.worker, (None, None))
            if tab is None or not self._is_current_load(tab, load_id):
                return
            if tab is self.tabs.selected_tab:
                self.main_screen.query_one(StatusBar).loading_status = "Error loading page."
                self.main_screen.query_one(PageView).show_error(f"Unable to load page: {error}")
        elif event.state is WorkerState.CANCELLED:
            self._loads.pop(event.worker, None)

    def _handle_page_loaded(self, tab: Tab, page: Page, navigate: bool) -> None:
        self.main_screen.query_one(StatusBar).loading_status = ""
        if tab not in self.tabs.tabs(tab.mode):
            return
        if page.ok:
            if navigate:
                self.tabs.navigate(tab, page.url, page.title)
            else:
                self.tabs.update_title(tab, page.url, page.title)
            if not tab.is_private:
                self.save_history()
        elif not navigate:
            # Back/forward already moved along the trail.
            self.tabs.update_title(tab, page.url, page.title, record=False)
        self.pages[tab.id] = page
        if tab is self.tabs.selected_tab:
            self.main_screen.query_one(PageView).show(page)
            self.refresh_chrome()

    # --- tabs ---
    def close_tab(self, tab: Tab) -> None:
        self.tabs.remove_tab(tab)
        self.pages.pop(tab.id, None)
        if not tab.is_private and self.tabs.count(BrowsingMode.NORMAL) == 0:
            self.tabs.add_tab(BrowsingMode.NORMAL)
            self.tabs.set_mode(tab.mode)

    def reset_to_home(self) -> None:
        """Close every tab, forget history and start from a single home tab."""
        while len(self.screen_stack) > 1:
            if isinstance(self.screen, ReaderViewScreen):
                self.screen.restore_browser_theme()
            self.pop_screen()
        self.pages.clear()
        self._latest_load.clear()
        self._loads.clear()
        self.history.clear()
        self.tabs.reset()
        self.save_history()
        self.show_selected_tab()

    def _on_tray_closed(self, tab: Optional[Tab]) -> None:
        if self.tabs.selected_tab is None:
            self.tabs.set_mode(BrowsingMode.NORMAL)
        self.show_selected_tab()

    # --- persistence ---
    def save_history(self) -> None:
        if self.persist:
            save_history(self.history.to_dicts())

    def save_reading_list(self) -> None:
        if self.persist:
            save_reading_list(self.reading_list.to_dicts())

    # --- events ---
    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "url" and event.value.strip():
            self.open_url(event.value)
            self.main_screen.query_one(PageView).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "home":
            self.open_url(HOME_URL)
        elif button_id == "back":
            self.action_go_back()
        elif button_id == "forward":
            self.action_go_forward()
        elif button_id == "history":
            self.action_show_history()
        elif button_id == "reading-list-button":
            self.action_show_reading_list()
        elif button_id == "show-tabs":
            self.action_show_tabs()

    def _open_from_list(self, url: Optional[str]) -> None:
        if url:
            self.open_url(url)

    # --- actions ---
    def action_focus_url(self) -> None:
        self.main_screen.query_one("#url", Input).focus()

    def action_show_tabs(self) -> None:
        self.push_screen(TabTrayScreen(), self._on_tray_closed)

    def action_show_history(self) -> None:
        self.push_screen(HistoryScreen(), self._open_from_list)

    def action_show_reading_list(self) -> None:
        self.push_screen(ReadingListScreen(), self._open_from_list)

    def action_reader_mode(self) -> None:
        tab = self.tabs.selected_tab
        page = self.pages.get(tab.id) if tab else None
        if page is None or not page.ok or page.url.startswith("about:"):
            self.notify("Reader mode is not available for this page.", severity="warning")
            return
        self.push_screen(ReaderViewScreen(tab, page))

    def action_go_back(self) -> None:
        tab = self.tabs.selected_tab
        if tab and (url := self.tabs.go_back(tab)):
            self._load(tab, url, navigate=False)

    def action_go_forward(self) -> None:
        tab = self.tabs.selected_tab
        if tab and (url := self.tabs.go_forward(tab)):
            self._load(tab, url, navigate=False)

    def action_reload(self) -> None:
        tab = self.tabs.selected_tab
        if tab:
            self.pages.pop(tab.id, None)
            self._load(tab, tab.url, navigate=False)
