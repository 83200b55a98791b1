from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Dict, Iterable, List, Optional

from .datamodels import HistoryEntry

logger = logging.getLogger("browser")


class History:
    """Browsing history of normal tabs, one entry per distinct URL."""

    def __init__(self, entries: Optional[Iterable[dict]] = None):
        self._entries: Dict[str, HistoryEntry] = {}
        for raw in entries or []:
            try:
                entry = HistoryEntry(**raw)
            except TypeError as e:
                logger.warning("Skipping malformed history entry %r: %s", raw, e)
                continue
            self._entries[entry.url] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def record(self, url: str, title: str) -> Optional[HistoryEntry]:
        if not url or url.startswith("about:"):
            return None
        entry = self._entries.get(url)
        if entry is None:
            entry = HistoryEntry(url=url, title=title)
            self._entries[url] = entry
            logger.debug("History: added %s", url)
        else:
            entry.visit_count += 1
            entry.last_visited = time.time()
            if title:
                entry.title = title
        return entry

    def entries(self) -> List[HistoryEntry]:
        """Entries ordered most recently visited first."""
        return sorted(self._entries.values(), key=lambda e: e.last_visited, reverse=True)

    def remove(self, url: str) -> bool:
        return self._entries.pop(url, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        logger.info("History cleared.")

    def to_dicts(self) -> List[dict]:
        return [asdict(e) for e in self.entries()]
