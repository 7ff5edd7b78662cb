"""Browser tab access through Playwright."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)

from .config import HarvestConfig
from .models import ImageCandidate, Tab
from .scanner import ScanError, scan_page
from .utils import is_allowed_url

logger = logging.getLogger("alltabs_images")


class BrowserTabs:
    """Expose the pages of a Chromium browser as tabs that can be scanned.

    Use :meth:`connect` to attach to a browser started with
    ``--remote-debugging-port`` or :meth:`launch` to open URLs in a fresh
    headless browser.
    """

    def __init__(self, browser: Browser, owns_browser: bool = False) -> None:
        self.browser = browser
        self.owns_browser = owns_browser
        self._ids: Dict[Page, str] = {}
        self._pages: Dict[str, Page] = {}

    @classmethod
    async def connect(cls, playwright: Playwright, endpoint: str) -> "BrowserTabs":
        logger.info("Attaching to browser at %s", endpoint)
        browser = await playwright.chromium.connect_over_cdp(endpoint)
        return cls(browser)

    @classmethod
    async def launch(
        cls,
        playwright: Playwright,
        urls: Sequence[str],
        config: HarvestConfig,
    ) -> "BrowserTabs":
        browser = await playwright.chromium.launch(headless=True)
        context = await browser.new_context()
        context.set_default_navigation_timeout(config.navigation_timeout * 1000)
        for url in urls:
            page = await context.new_page()
            try:
                logger.info("Loading %s", url)
                await page.goto(url, wait_until="networkidle")
                if config.wait_after_load:
                    await page.wait_for_timeout(int(config.wait_after_load * 1000))
            except PlaywrightTimeoutError as exc:
                logger.error("Timeout while loading %s: %s", url, exc)
                await page.close()
            except PlaywrightError as exc:
                logger.error("Failed to load %s: %s", url, exc)
                await page.close()
        return cls(browser, owns_browser=True)

    def _tab_id(self, page: Page) -> str:
        tab_id = self._ids.get(page)
        if tab_id is None:
            tab_id = f"tab-{len(self._ids) + 1}"
            self._ids[page] = tab_id
        return tab_id

    async def list_tabs(self) -> List[Tab]:
        """Return the admissible tabs in window order."""
        tabs: List[Tab] = []
        self._pages = {}
        for context in self.browser.contexts:
            for page in context.pages:
                if page.is_closed() or not is_allowed_url(page.url):
                    continue
                tab = Tab(id=self._tab_id(page), url=page.url)
                self._pages[tab.id] = page
                tabs.append(tab)
        return tabs

    async def scan(self, tab: Tab) -> List[ImageCandidate]:
        if not is_allowed_url(tab.url):
            return []
        page = self._pages.get(tab.id)
        if page is None or page.is_closed():
            raise ScanError(f"tab {tab.id} is no longer open")
        return await scan_page(page)

    async def close(self) -> None:
        if self.owns_browser:
            await self.browser.close()
