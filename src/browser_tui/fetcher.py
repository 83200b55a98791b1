from __future__ import annotations

import logging
import time
from typing import List, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .cache import PageCache
from .config import (
    BLANK_URL,
    HOME_URL,
    HTTP_TIMEOUT,
    INITIAL_RETRY_DELAY,
    REQUEST_HEADERS,
    RETRY_ATTEMPTS,
)
from .datamodels import Page

logger = logging.getLogger("browser")

HOME_CONTENT = (
    "# Home\n\n"
    "Type an address in the bar above and press enter.\n\n"
    "- `ctrl+t` shows your tabs\n"
    "- `ctrl+y` shows your history\n"
    "- `R` opens the page in reader mode\n"
)


def normalize_url(text: str) -> str:
    url = text.strip()
    if not url or url.startswith("about:"):
        return url or BLANK_URL
    if not urlparse(url).scheme:
        url = "http://" + url
    return url


class PageFetcher:
    def __init__(
        self,
        cache: Optional[PageCache] = None,
        attempts: int = RETRY_ATTEMPTS,
        initial_delay: float = INITIAL_RETRY_DELAY,
    ):
        self.cache = cache
        self.attempts = attempts
        self.initial_delay = initial_delay
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=3, backoff_factor=0.3, status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _retryable_fetch(self, url: str, timeout: int = HTTP_TIMEOUT) -> Optional[bytes]:
        delay = self.initial_delay
        for attempt in range(1, self.attempts + 1):
            try:
                logger.debug("Fetching %s (attempt %d/%d)", url, attempt, self.attempts)
                resp = self.session.get(url, timeout=timeout)
                resp.raise_for_status()
                logger.debug("Fetched %s OK", url)
                return resp.content
            except requests.RequestException as e:
                logger.debug("Fetch attempt %d failed for %s: %s", attempt, url, e)
                if attempt == self.attempts:
                    logger.warning("All fetch attempts failed for %s", url)
                    return None
                time.sleep(delay)
                delay *= 2
        return None

    def fetch(self, url: str, private: bool = False) -> Page:
        """Load a page. Private loads never read from or write to the cache."""
        url = normalize_url(url)
        if url == HOME_URL:
            return Page(url=url, title="Home", content=HOME_CONTENT)
        if url == BLANK_URL:
            return Page(url=url, title="New Tab", content="")

        if self.cache is not None and not private:
            cached = self.cache.get(url)
            if cached is not None:
                return cached

        content = self._retryable_fetch(url)
        if content is None:
            return Page(url=url, title=url, content=f"Failed to load {url}.", ok=False)

        try:
            page = parse_page(url, content)
        except Exception as e:
            logger.error("Failed to parse page from %s: %s", url, e)
            return Page(url=url, title=url, content="Could not read this page.", ok=False)

        if self.cache is not None and not private:
            self.cache.put(page)
        return page

    def close(self) -> None:
        self.session.close()


def parse_page(url: str, content: bytes) -> Page:
    soup = BeautifulSoup(content, "lxml")
    title = None
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title and (h1 := soup.find("h1")):
        title = h1.get_text(" ", strip=True)
    main = soup.find("article") or soup.find("main") or soup.body or soup
    return Page(url=url, title=title or url, content=_to_markdown(main))


def _to_markdown(root) -> str:
    parts: List[str] = []
    for node in root.find_all(["h1", "h2", "h3", "p", "li", "blockquote"]):
        text = node.get_text(" ", strip=True)
        if not text:
            continue
        if node.name == "h1":
            parts.append(f"# {text}")
        elif node.name == "h2":
            parts.append(f"## {text}")
        elif node.name == "h3":
            parts.append(f"### {text}")
        elif node.name == "li":
            parts.append(f"- {text}")
        elif node.name == "blockquote":
            parts.append(f"> {text}")
        else:
            parts.append(text)
    if not parts:
        text = root.get_text(" ", strip=True)
        if text:
            parts.append(text)
    return "\n\n".join(parts)
