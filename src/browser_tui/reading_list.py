from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Dict, Iterable, List, Optional

from .datamodels import ReadingListItem

logger = logging.getLogger("browser")


class ReadingList:
    def __init__(self, items: Optional[Iterable[dict]] = None):
        self._items: Dict[str, ReadingListItem] = {}
        for raw in items or []:
            try:
                item = ReadingListItem(**raw)
            except TypeError as e:
                logger.warning("Skipping malformed reading list item %r: %s", raw, e)
                continue
            self._items[item.url] = item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, url: object) -> bool:
        return url in self._items

    def get(self, url: str) -> Optional[ReadingListItem]:
        return self._items.get(url)

    def add(self, url: str, title: str, excerpt: Optional[str] = None) -> ReadingListItem:
        """Add an article; adding one that is already saved returns it unchanged."""
        item = self._items.get(url)
        if item is None:
            item = ReadingListItem(url=url, title=title, excerpt=excerpt)
            self._items[url] = item
            logger.debug("Reading list: added %s", url)
        return item

    def remove(self, url: str) -> bool:
        removed = self._items.pop(url, None) is not None
        if removed:
            logger.debug("Reading list: removed %s", url)
        return removed

    def mark_read(self, url: str) -> bool:
        return self._set_unread(url, False)

    def mark_unread(self, url: str) -> bool:
        return self._set_unread(url, True)

    def _set_unread(self, url: str, unread: bool) -> bool:
        item = self._items.get(url)
        if item is None:
            return False
        item.unread = unread
        return True

    def is_unread(self, url: str) -> bool:
        """Articles not in the list count as unread."""
        item = self._items.get(url)
        return True if item is None else item.unread

    def items(self) -> List[ReadingListItem]:
        """Unread items first, then newest first."""
        return sorted(self._items.values(), key=lambda i: (not i.unread, -i.added_at))

    def to_dicts(self) -> List[dict]:
        return [asdict(i) for i in self._items.values()]
