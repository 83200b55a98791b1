from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .config import HOME_URL
from .datamodels import BrowsingMode, Tab
from .history import History

logger = logging.getLogger("browser")


class TabManager:
    """Open tabs, kept apart by browsing mode.

    Counts are additive within a mode and never mix modes. Only navigation
    in normal tabs reaches the shared history.
    """

    def __init__(self, history: History):
        self.history = history
        self.mode = BrowsingMode.NORMAL
        self._tabs: Dict[BrowsingMode, List[Tab]] = {m: [] for m in BrowsingMode}
        self._selected: Dict[BrowsingMode, Optional[Tab]] = {m: None for m in BrowsingMode}

    @property
    def selected_tab(self) -> Optional[Tab]:
        return self._selected[self.mode]

    def tabs(self, mode: Optional[BrowsingMode] = None) -> List[Tab]:
        return list(self._tabs[mode or self.mode])

    def count(self, mode: Optional[BrowsingMode] = None) -> int:
        return len(self._tabs[mode or self.mode])

    def set_mode(self, mode: BrowsingMode) -> None:
        if mode is not self.mode:
            logger.debug("Switching to %s mode", mode.value)
        self.mode = mode

    def toggle_private_mode(self) -> BrowsingMode:
        self.set_mode(BrowsingMode.NORMAL if self.mode.is_private else BrowsingMode.PRIVATE)
        return self.mode

    def add_tab(self, mode: Optional[BrowsingMode] = None, url: str = HOME_URL, title: str = "Home") -> Tab:
        mode = mode or self.mode
        tab = Tab(mode=mode, url=url, title=title, trail=[url], position=0)
        self._tabs[mode].append(tab)
        logger.debug("Opened %s tab %d", mode.value, tab.id)
        self.select_tab(tab)
        return tab

    def select_tab(self, tab: Tab) -> None:
        if tab not in self._tabs[tab.mode]:
            raise ValueError(f"Tab {tab.id} is not open")
        self._selected[tab.mode] = tab
        self.set_mode(tab.mode)

    def remove_tab(self, tab: Tab) -> None:
        tabs = self._tabs[tab.mode]
        if tab not in tabs:
            return
        index = tabs.index(tab)
        tabs.remove(tab)
        logger.debug("Closed %s tab %d", tab.mode.value, tab.id)
        if self._selected[tab.mode] is tab:
            self._selected[tab.mode] = tabs[min(index, len(tabs) - 1)] if tabs else None

    def close_all(self, mode: BrowsingMode) -> None:
        self._tabs[mode].clear()
        self._selected[mode] = None

    def reset(self) -> Tab:
        """Close every tab and start over with a single normal home tab."""
        for mode in BrowsingMode:
            self.close_all(mode)
        self.mode = BrowsingMode.NORMAL
        return self.add_tab(BrowsingMode.NORMAL)

    def navigate(self, tab: Tab, url: str, title: str) -> None:
        del tab.trail[tab.position + 1 :]
        tab.trail.append(url)
        tab.position = len(tab.trail) - 1
        self._show(tab, url, title)

    def go_back(self, tab: Tab) -> Optional[str]:
        if not tab.can_go_back:
            return None
        tab.position -= 1
        return tab.trail[tab.position]

    def go_forward(self, tab: Tab) -> Optional[str]:
        if not tab.can_go_forward:
            return None
        tab.position += 1
        return tab.trail[tab.position]

    def update_title(self, tab: Tab, url: str, title: str, record: bool = True) -> None:
        """Record a page shown by back/forward without touching the trail.

        With ``record`` off the tab still follows its trail entry, but
        nothing reaches the history.
        """
        self._show(tab, url, title, record)

    def _show(self, tab: Tab, url: str, title: str, record: bool = True) -> None:
        tab.url = url
        tab.title = title
        if record and not tab.is_private:
            self.history.record(url, title)
