from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .config import HOME_URL

_tab_ids = itertools.count(1)


# --- Reader bar ---
class ButtonKind(Enum):
    """The actions a reader mode bar button can stand for."""

    MARK_AS_READ = ("Mark as Read", "◉")
    MARK_AS_UNREAD = ("Mark as Unread", "○")
    SETTINGS = ("Display Settings", "Aa")
    ADD_TO_READING_LIST = ("Add to Reading List", "+")
    REMOVE_FROM_READING_LIST = ("Remove from Reading List", "−")

    def __init__(self, label: str, icon: str):
        self.label = label
        self.icon = icon

    @property
    def display(self) -> str:
        return f"{self.icon} {self.label}"


@dataclass(frozen=True)
class ReaderBarState:
    read_status: ButtonKind
    list_status: ButtonKind
    read_status_enabled: bool


def reader_bar_state(unread: bool, added: bool) -> ReaderBarState:
    """Derive what the reader bar buttons show from the article flags.

    The read status button can only be toggled once the article is in the
    reading list; until then it shows "Mark as Unread" and stays disabled.
    """
    if added:
        read_status = ButtonKind.MARK_AS_READ if unread else ButtonKind.MARK_AS_UNREAD
        list_status = ButtonKind.REMOVE_FROM_READING_LIST
    else:
        read_status = ButtonKind.MARK_AS_UNREAD
        list_status = ButtonKind.ADD_TO_READING_LIST
    return ReaderBarState(read_status, list_status, added)


# --- Browsing ---
class BrowsingMode(Enum):
    NORMAL = "normal"
    PRIVATE = "private"

    @property
    def is_private(self) -> bool:
        return self is BrowsingMode.PRIVATE


@dataclass
class Tab:
    mode: BrowsingMode = BrowsingMode.NORMAL
    url: str = HOME_URL
    title: str = "Home"
    trail: List[str] = field(default_factory=list)
    position: int = -1
    id: int = field(default_factory=lambda: next(_tab_ids))

    @property
    def is_private(self) -> bool:
        return self.mode.is_private

    @property
    def can_go_back(self) -> bool:
        return self.position > 0

    @property
    def can_go_forward(self) -> bool:
        return 0 <= self.position < len(self.trail) - 1


@dataclass
class Page:
    url: str
    title: str
    content: str = ""
    ok: bool = True

    @property
    def word_count(self) -> int:
        return len(self.content.split())


@dataclass
class HistoryEntry:
    url: str
    title: str
    visit_count: int = 1
    last_visited: float = field(default_factory=time.time)


@dataclass
class ReadingListItem:
    url: str
    title: str
    unread: bool = True
    added_at: float = field(default_factory=time.time)
    excerpt: Optional[str] = None
