"""Private tabs keep out of history and have their own tab count.

Each scenario runs twice: against the live app through its pilot, and
against the in-memory tab model.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest

from browser_tui.app import BrowserApp
from browser_tui.driver import ModelDriver, PilotDriver


@pytest.fixture(params=["app", "model"])
def open_driver(request, fetcher):
    @asynccontextmanager
    async def _open():
        if request.param == "model":
            driver = ModelDriver(fetcher)
            try:
                yield driver
            finally:
                await driver.tear_down()
            return

        app = BrowserApp(config={}, fetcher=fetcher, persist=False)
        async with app.run_test(size=(120, 40)) as pilot:
            driver = PilotDriver(pilot)
            await driver.wait_for("Home")
            try:
                yield driver
            finally:
                await driver.tear_down()

    return _open


async def visit(driver, url: str, title: str) -> None:
    await driver.tap("url")
    await driver.enter_text("url", f"{url}\n")
    await driver.wait_for(title)


async def test_private_tab_doesnt_track_history(open_driver, web_root):
    url1 = f"{web_root}/numberedPage.html?page=1"
    async with open_driver() as driver:
        # A normal tab records the visit.
        await visit(driver, url1, "Page 1")
        await driver.tap("History")
        await driver.assert_count("History List", 1)
        await driver.tap("Cancel")

        # The same visit from a private tab does not.
        await driver.tap("Show Tabs")
        await driver.tap("Private Mode")
        await driver.tap("Add Tab")
        await driver.wait_for("Home")
        await visit(driver, url1, "Page 1")
        await driver.tap("History")
        await driver.assert_count("History List", 1)

        await driver.tap("Cancel")
        await driver.tap("Show Tabs")
        await driver.tap("Private Mode")
        await driver.tap("Page 1")
        await driver.wait_for_text("Show Tabs", "1")


async def test_tab_count_shows_only_normal_or_private_tab_count(open_driver, web_root):
    url1 = f"{web_root}/numberedPage.html?page=1"
    async with open_driver() as driver:
        await visit(driver, url1, "Page 1")

        await driver.tap("Show Tabs")
        await driver.tap("Add Tab")
        await driver.wait_for_text("Show Tabs", "2")
        assert await driver.text_of("Show Tabs") == "2", "Tab count shows 2 tabs"

        await driver.tap("Show Tabs")
        await driver.tap("Private Mode")
        await driver.tap("Add Tab")
        await driver.wait_for_text("Show Tabs", "1")
        assert await driver.text_of("Show Tabs") == "1", (
            "Private tab count should show 1 tab opened"
        )

        await driver.tap("Show Tabs")
        await driver.tap("Private Mode")
        await driver.tap("Page 1")
        await driver.wait_for_text("Show Tabs", "2")
        assert await driver.text_of("Show Tabs") == "2", "Tab count shows 2 tabs"


async def test_no_private_tabs_shows_and_hides_empty_view(open_driver):
    async with open_driver() as driver:
        await driver.tap("Show Tabs")
        await driver.tap("Private Mode")
        await driver.wait_for("Private Browsing")

        await driver.tap("Add Tab")
        await driver.wait_for("Show Tabs")
        await driver.tap("Show Tabs")
        await driver.wait_for("Home")
        assert not await driver.exists("Private Browsing"), (
            "Private browsing title on empty view is hidden"
        )

        while await driver.count("Tabs Tray") > 0:
            label = await driver.first_item_label("Tabs Tray")
            await driver.swipe(label)
            await driver.wait_for_absence(label)

        await driver.wait_for("Private Browsing")
        assert await driver.exists("Private Browsing"), (
            "Private browsing title on empty view is visible"
        )

        await driver.tap("Private Mode")
        await driver.wait_for_absence("Private Browsing")


async def test_teardown_resets_when_home_is_not_reachable(open_driver):
    async with open_driver() as driver:
        await driver.tap("Show Tabs")
        await driver.tap("Private Mode")
        await driver.tap("Add Tab")
        await driver.tap("Show Tabs")
        assert not await driver.exists("home")

        await driver.tear_down()

        await driver.wait_for("Show Tabs")
        await driver.wait_for_text("Show Tabs", "1")
        await driver.tap("History")
        await driver.assert_count("History List", 0)


async def test_assert_count_reports_a_mismatch(fetcher):
    driver = ModelDriver(fetcher)
    await driver.tap("History")
    with pytest.raises(AssertionError, match="History List"):
        await driver.assert_count("History List", 3)


async def test_teardown_from_the_tray_swallows_missing_home(fetcher):
    driver = ModelDriver(fetcher)
    await driver.tap("Show Tabs")
    await driver.tap("Private Mode")

    await driver.tear_down()

    assert driver.screen == "browser"
    assert driver.tabs.mode.is_private is False
    assert await driver.text_of("Show Tabs") == "1"
