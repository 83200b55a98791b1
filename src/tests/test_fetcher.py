from __future__ import annotations

from unittest.mock import patch

import pytest

from browser_tui.cache import PageCache
from browser_tui.fetcher import PageFetcher, normalize_url, parse_page

ARTICLE = b"""
    <html>
      <head><title>Reader Test</title></head>
      <body>
        <nav><a href="/">Skip me</a></nav>
        <article>
          <h1>Headline</h1>
          <p>First paragraph.</p>
          <ul><li>Point one</li></ul>
          <blockquote>Quoted</blockquote>
        </article>
      </body>
    </html>
"""


@pytest.fixture
def cached_fetcher(tmp_path):
    return PageFetcher(cache=PageCache(str(tmp_path), ttl=60), attempts=1)


def test_normalize_url():
    assert normalize_url(" example.test/page ") == "http://example.test/page"
    assert normalize_url("https://example.test") == "https://example.test"
    assert normalize_url("about:home") == "about:home"
    assert normalize_url("") == "about:blank"


def test_parse_page_prefers_article():
    page = parse_page("http://example.test", ARTICLE)
    assert page.title == "Reader Test"
    assert page.content == "# Headline\n\nFirst paragraph.\n\n- Point one\n\n> Quoted"
    assert "Skip me" not in page.content


def test_parse_page_title_falls_back_to_heading():
    page = parse_page("http://example.test", b"<body><h1>Only heading</h1></body>")
    assert page.title == "Only heading"


def test_home_is_served_locally(cached_fetcher):
    with patch("browser_tui.fetcher.PageFetcher._retryable_fetch") as mock_fetch:
        page = cached_fetcher.fetch("about:home")
        mock_fetch.assert_not_called()
    assert page.ok
    assert page.title == "Home"


def test_failed_fetch(cached_fetcher):
    with patch("browser_tui.fetcher.PageFetcher._retryable_fetch") as mock_fetch:
        mock_fetch.return_value = None
        page = cached_fetcher.fetch("http://example.test/missing")
    assert not page.ok
    assert cached_fetcher.cache.get("http://example.test/missing") is None


def test_normal_fetch_is_cached(cached_fetcher):
    with patch("browser_tui.fetcher.PageFetcher._retryable_fetch") as mock_fetch:
        mock_fetch.return_value = ARTICLE
        first = cached_fetcher.fetch("http://example.test/article")
        second = cached_fetcher.fetch("http://example.test/article")
    assert mock_fetch.call_count == 1
    assert first == second


def test_private_fetch_bypasses_cache(cached_fetcher, tmp_path):
    with patch("browser_tui.fetcher.PageFetcher._retryable_fetch") as mock_fetch:
        mock_fetch.return_value = ARTICLE
        cached_fetcher.fetch("http://example.test/secret", private=True)
        cached_fetcher.fetch("http://example.test/secret", private=True)
    assert mock_fetch.call_count == 2
    assert list(tmp_path.iterdir()) == []


def test_fetch_numbered_page(fetcher, web_root):
    page = fetcher.fetch(f"{web_root}/numberedPage.html?page=7")
    assert page.ok
    assert page.title == "Page 7"
    assert "page number 7" in page.content


def test_fetch_missing_page(fetcher, web_root):
    page = fetcher.fetch(f"{web_root}/nothing.html")
    assert not page.ok


def test_cache_expiry(tmp_path):
    cache = PageCache(str(tmp_path), ttl=-1)
    cache.put(parse_page("http://example.test", ARTICLE))
    assert cache.get("http://example.test") is None
    cache.clear()
    assert list(tmp_path.iterdir()) == []
