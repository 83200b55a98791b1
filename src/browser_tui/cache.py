from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from dataclasses import asdict
from typing import Optional

from .datamodels import Page

logger = logging.getLogger("browser")


class PageCache:
    """On-disk cache of fetched pages, one JSON file per URL."""

    def __init__(self, cache_dir: str, ttl: int):
        self.cache_dir = cache_dir
        self.ttl = ttl
        os.makedirs(self.cache_dir, exist_ok=True)

    def _path_for(self, url: str) -> str:
        hashed = hashlib.sha256(url.encode()).hexdigest()
        return os.path.join(self.cache_dir, f"{hashed}.json")

    def get(self, url: str) -> Optional[Page]:
        path = self._path_for(url)
        if not os.path.exists(path):
            logger.debug("Cache miss for %s", url)
            return None

        try:
            with open(path, "r") as f:
                data = json.load(f)
            if time.time() - data.get("timestamp", 0) > self.ttl:
                logger.debug("Cache expired for %s", url)
                return None
            logger.debug("Cache hit for %s", url)
            return Page(**data["page"])
        except (IOError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("Failed to read cache file %s: %s", path, e)
            return None

    def put(self, page: Page) -> None:
        if not page.ok:
            return
        path = self._path_for(page.url)
        try:
            with open(path, "w") as f:
                json.dump({"timestamp": time.time(), "page": asdict(page)}, f)
            logger.debug("Cached %s", page.url)
        except IOError as e:
            logger.warning("Failed to write cache file %s: %s", path, e)

    def clear(self) -> None:
        """Remove every cached page."""
        for filename in os.listdir(self.cache_dir):
            file_path = os.path.join(self.cache_dir, filename)
            try:
                if os.path.isfile(file_path):
                    os.unlink(file_path)
            except OSError as e:
                logger.error("Failed to delete cache file %s: %s", file_path, e)
        logger.info("Cache cleared.")
