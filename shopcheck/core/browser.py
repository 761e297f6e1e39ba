"""Playwright browser harness for managing browser lifecycle."""

import asyncio
from contextlib import asynccontextmanager
from typing import List, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Playwright

from .config import Settings
from .logging import get_logger
from .ui import PlaywrightPort

logger = get_logger(__name__)


class BrowserManager:
    """Manages Playwright browser lifecycle.

    One browser process is shared; every UI session gets its own context so
    concurrent workflows never share cookies, carts or pages.
    """

    def __init__(self, settings: Settings):
        """Initialize browser manager."""
        self.settings = settings
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.contexts: List[BrowserContext] = []
        self._start_lock = asyncio.Lock()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        async with self._start_lock:
            if self.browser:
                logger.warning("Browser already started")
                return

            logger.info("Starting Playwright browser", headless=self.settings.headless)

            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.settings.headless,
                args=[
                    '--no-sandbox',
                    '--disable-dev-shm-usage',
                ]
            )

            logger.info("Browser started successfully")

    async def stop(self) -> None:
        """Stop browser and cleanup resources."""
        if not self.browser:
            logger.warning("Browser not running")
            return

        logger.info("Stopping browser", open_contexts=len(self.contexts))

        for context in self.contexts:
            await context.close()
        self.contexts = []

        await self.browser.close()
        self.browser = None

        if self.playwright:
            await self.playwright.stop()
            self.playwright = None

        logger.info("Browser stopped")

    async def new_context(self) -> BrowserContext:
        """
        Create an isolated browser context against the storefront.

        Raises:
            RuntimeError: If browser not started
        """
        if not self.browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self.browser.new_context(
            base_url=self.settings.base_url,
            viewport={'width': 1280, 'height': 720},
            accept_downloads=False,
        )
        context.set_default_timeout(self.settings.browser_timeout)
        context.set_default_navigation_timeout(self.settings.navigation_timeout)
        self.contexts.append(context)
        return context

    async def new_port(self) -> PlaywrightPort:
        """Open a fresh session (own context and page) wrapped as a UI port."""
        context = await self.new_context()
        page = await context.new_page()
        logger.debug("Created new UI session")
        return PlaywrightPort(page, poll_interval=self.settings.poll_interval)

    async def close_port(self, port: PlaywrightPort) -> None:
        """Close a session opened with new_port()."""
        context = port.page.context
        await port.close()
        if context in self.contexts:
            self.contexts.remove(context)


@asynccontextmanager
async def managed_browser(settings: Settings):
    """
    Context manager for browser lifecycle.

    Usage:
        async with managed_browser(settings) as browser:
            port = await browser.new_port()
            # ... use port
    """
    browser = BrowserManager(settings)
    try:
        await browser.start()
        yield browser
    finally:
        await browser.stop()
