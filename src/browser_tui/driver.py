"""Drivers that operate the browser the way a user would.

Elements are addressed by the labels a user sees (``"Show Tabs"``,
``"Private Mode"``, a page or tab title) or, for text fields, by widget id.
``PilotDriver`` works the live Textual app through a ``Pilot``;
``ModelDriver`` applies the same steps to an in-memory tab and history model,
so behavioral scenarios can be written once and run against either.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from textual.pilot import Pilot
from textual.screen import Screen
from textual.widget import Widget
from textual.widgets import Button, DataTable, Input, ListItem, ListView

from .config import HOME_URL
from .datamodels import BrowsingMode, Tab
from .fetcher import PageFetcher
from .history import History
from .tabs import TabManager
from .widgets import accessibility_label

logger = logging.getLogger("browser")

DEFAULT_TIMEOUT = 5.0
POLL_INTERVAL = 0.05
TEARDOWN_TIMEOUT = 0.5


class ElementNotFound(LookupError):
    """No element with the requested label is on screen."""


class WaitTimeout(TimeoutError):
    """An expected UI state did not show up in time."""


class UIDriver(ABC):
    @abstractmethod
    async def tap(self, label: str, timeout: Optional[float] = None) -> None:
        """Tap the element with ``label``, waiting for it to appear first."""

    @abstractmethod
    async def enter_text(self, identifier: str, text: str) -> None:
        """Replace the text of a field; a trailing newline submits it."""

    @abstractmethod
    async def exists(self, label: str) -> bool:
        """Whether an element with ``label`` is currently shown."""

    @abstractmethod
    async def text_of(self, label: str) -> str:
        """The text an element shows, which may differ from its label."""

    @abstractmethod
    async def count(self, container_label: str) -> int:
        """Number of rows or items in a list-like container."""

    @abstractmethod
    async def swipe(self, label: str) -> None:
        """Dismiss an item, the way swiping a tab away closes it."""

    @abstractmethod
    async def first_item_label(self, container_label: str) -> Optional[str]:
        """Label of the first item in a container, if it has any."""

    @abstractmethod
    async def reset_to_home(self) -> None:
        """Forcefully return the browser to a single home tab."""

    async def idle(self, delay: float = POLL_INTERVAL) -> None:
        await asyncio.sleep(delay)

    async def wait_for(self, label: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        deadline = time.monotonic() + timeout
        while not await self.exists(label):
            if time.monotonic() > deadline:
                raise WaitTimeout(f"Timed out waiting for {label!r}")
            await self.idle()

    async def wait_for_absence(self, label: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        deadline = time.monotonic() + timeout
        while await self.exists(label):
            if time.monotonic() > deadline:
                raise WaitTimeout(f"Timed out waiting for {label!r} to go away")
            await self.idle()

    async def wait_for_text(
        self, label: str, text: str, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        deadline = time.monotonic() + timeout
        await self.wait_for(label, timeout)
        while await self.text_of(label) != text:
            if time.monotonic() > deadline:
                raise WaitTimeout(f"Timed out waiting for {label!r} to read {text!r}")
            await self.idle()

    async def assert_count(self, container_label: str, expected: int) -> None:
        await self.wait_for(container_label)
        actual = await self.count(container_label)
        if actual != expected:
            raise AssertionError(
                f"{container_label!r} has {actual} entries, expected {expected}"
            )

    async def tear_down(self) -> None:
        """Try to go home, then reset regardless."""
        try:
            await self.tap("home", timeout=TEARDOWN_TIMEOUT)
        except ElementNotFound:
            logger.debug("No home control to tap during teardown")
        await self.reset_to_home()


def _is_shown(widget: Widget) -> bool:
    node: Optional[Widget] = widget
    while node is not None and not isinstance(node, Screen):
        if not node.display:
            return False
        node = node.parent if isinstance(node.parent, Widget) else None
    return True


class PilotDriver(UIDriver):
    """Drives a running ``BrowserApp`` through its Textual pilot."""

    def __init__(self, pilot: Pilot, timeout: float = DEFAULT_TIMEOUT):
        self.pilot = pilot
        self.app = pilot.app
        self.timeout = timeout

    async def idle(self, delay: float = POLL_INTERVAL) -> None:
        await self.pilot.pause(delay)

    def _find(self, label: str) -> Optional[Widget]:
        for widget in self.app.screen.query("*"):
            if not isinstance(widget, Widget) or not _is_shown(widget):
                continue
            if accessibility_label(widget) == label or widget.id == label:
                return widget
        return None

    async def _resolve(self, label: str, timeout: Optional[float] = None) -> Widget:
        try:
            await self.wait_for(label, self.timeout if timeout is None else timeout)
        except WaitTimeout as e:
            raise ElementNotFound(f"No element labelled {label!r}") from e
        widget = self._find(label)
        if widget is None:
            raise ElementNotFound(f"No element labelled {label!r}")
        return widget

    async def exists(self, label: str) -> bool:
        return self._find(label) is not None

    async def tap(self, label: str, timeout: Optional[float] = None) -> None:
        widget = await self._resolve(label, timeout)
        if isinstance(widget, Button):
            widget.press()
        elif isinstance(widget, ListItem) and isinstance(widget.parent, ListView):
            list_view = widget.parent
            list_view.index = list(list_view.children).index(widget)
            list_view.action_select_cursor()
        elif widget.focusable:
            widget.focus()
        else:
            await self.pilot.click(f"#{widget.id}")
        await self.pilot.pause()

    async def enter_text(self, identifier: str, text: str) -> None:
        widget = await self._resolve(identifier)
        if not isinstance(widget, Input):
            raise ElementNotFound(f"{identifier!r} is not a text field")
        widget.focus()
        widget.value = text.rstrip("\n")
        await self.pilot.pause()
        if text.endswith("\n"):
            await self.pilot.press("enter")
        await self.pilot.pause()

    async def text_of(self, label: str) -> str:
        widget = await self._resolve(label)
        if isinstance(widget, Button):
            return str(widget.label)
        if isinstance(widget, Input):
            return widget.value
        return accessibility_label(widget) or ""

    async def count(self, container_label: str) -> int:
        widget = await self._resolve(container_label)
        if isinstance(widget, DataTable):
            return widget.row_count
        if isinstance(widget, ListView):
            return len(widget.children)
        raise ElementNotFound(f"{container_label!r} is not a list")

    async def swipe(self, label: str) -> None:
        widget = await self._resolve(label)
        if not (isinstance(widget, ListItem) and isinstance(widget.parent, ListView)):
            raise ElementNotFound(f"{label!r} cannot be dismissed")
        list_view = widget.parent
        list_view.index = list(list_view.children).index(widget)
        list_view.focus()
        await self.pilot.pause()
        await self.pilot.press("d")
        await self.pilot.pause()

    async def first_item_label(self, container_label: str) -> Optional[str]:
        widget = await self._resolve(container_label)
        children = list(widget.children)
        return accessibility_label(children[0]) if children else None

    async def reset_to_home(self) -> None:
        self.app.reset_to_home()
        await self.pilot.pause()


class ModelDriver(UIDriver):
    """Applies UI steps to a ``TabManager`` and ``History`` held in memory.

    Screens are tracked by name: ``browser``, ``tabs`` and ``history``.
    """

    def __init__(self, fetcher: Optional[PageFetcher] = None):
        self.fetcher = fetcher or PageFetcher()
        self.history = History()
        self.tabs = TabManager(self.history)
        self.tabs.add_tab()
        self.screen = "browser"
        self.focused: Optional[str] = None

    def _tab_titled(self, title: str) -> Optional[Tab]:
        for tab in self.tabs.tabs():
            if tab.title == title:
                return tab
        return None

    def _labels(self) -> set[str]:
        if self.screen == "history":
            return {"History List", "Cancel"}
        if self.screen == "tabs":
            labels = {"Private Mode", "Add Tab", "Done", "Tabs Tray"}
            if self.tabs.mode.is_private and self.tabs.count() == 0:
                labels.add("Private Browsing")
            labels.update(tab.title for tab in self.tabs.tabs())
            return labels
        labels = {"home", "Back", "Forward", "url", "History", "Show Tabs"}
        if self.tabs.selected_tab is not None:
            labels.add(self.tabs.selected_tab.title)
        return labels

    async def exists(self, label: str) -> bool:
        return label in self._labels()

    async def _require(self, label: str) -> None:
        if not await self.exists(label):
            raise ElementNotFound(f"No element labelled {label!r} on the {self.screen} screen")

    async def tap(self, label: str, timeout: Optional[float] = None) -> None:
        await self._require(label)
        if label == "url":
            self.focused = "url"
        elif label == "home":
            await self._navigate(HOME_URL)
        elif label in ("Back", "Forward"):
            await self._step(label)
        elif label == "History":
            self.screen = "history"
        elif label == "Cancel":
            self.screen = "browser"
        elif label == "Show Tabs":
            self.screen = "tabs"
        elif label == "Private Mode":
            self.tabs.toggle_private_mode()
        elif label == "Add Tab":
            self.tabs.add_tab()
            self.screen = "browser"
        elif label == "Done":
            self._close_tray()
        elif self.screen == "tabs" and (tab := self._tab_titled(label)):
            self.tabs.select_tab(tab)
            self.screen = "browser"

    def _close_tray(self) -> None:
        if self.tabs.selected_tab is None:
            self.tabs.set_mode(BrowsingMode.NORMAL)
            if self.tabs.selected_tab is None:
                self.tabs.add_tab()
        self.screen = "browser"

    async def enter_text(self, identifier: str, text: str) -> None:
        await self._require(identifier)
        if identifier != "url":
            raise ElementNotFound(f"{identifier!r} is not a text field")
        self.focused = identifier
        if text.endswith("\n"):
            await self._navigate(text.rstrip("\n"))

    async def _navigate(self, url: str) -> None:
        tab = self.tabs.selected_tab or self.tabs.add_tab()
        page = await asyncio.to_thread(self.fetcher.fetch, url, tab.is_private)
        if page.ok:
            self.tabs.navigate(tab, page.url, page.title)

    async def _step(self, label: str) -> None:
        tab = self.tabs.selected_tab
        if tab is None:
            return
        step = self.tabs.go_back if label == "Back" else self.tabs.go_forward
        url = step(tab)
        if url is None:
            return
        page = await asyncio.to_thread(self.fetcher.fetch, url, tab.is_private)
        self.tabs.update_title(tab, url, page.title if page.ok else url)

    async def text_of(self, label: str) -> str:
        await self._require(label)
        if label == "Show Tabs":
            return str(self.tabs.count())
        return label

    async def count(self, container_label: str) -> int:
        await self._require(container_label)
        if container_label == "History List":
            return len(self.history)
        if container_label == "Tabs Tray":
            return self.tabs.count()
        raise ElementNotFound(f"{container_label!r} is not a list")

    async def swipe(self, label: str) -> None:
        await self._require(label)
        tab = self._tab_titled(label) if self.screen == "tabs" else None
        if tab is None:
            raise ElementNotFound(f"{label!r} cannot be dismissed")
        self.tabs.remove_tab(tab)
        if not tab.is_private and self.tabs.count(tab.mode) == 0:
            self.tabs.add_tab(tab.mode)

    async def first_item_label(self, container_label: str) -> Optional[str]:
        await self._require(container_label)
        tabs = self.tabs.tabs()
        return tabs[0].title if tabs else None

    async def reset_to_home(self) -> None:
        self.tabs.reset()
        self.history.clear()
        self.screen = "browser"
        self.focused = None
