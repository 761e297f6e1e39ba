"""
UI Access Port.

Everything the storefront checks do to the browser goes through a UIPort:
navigate, read, write, click and wait, addressed by Playwright selector
strings. PlaywrightPort is the real implementation; tests substitute an
in-memory port with a fake clock.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from playwright.async_api import Page, Error as PlaywrightError

from .errors import UIAccessError
from .logging import get_logger
from .waits import SYSTEM_CLOCK, DEFAULT_POLL_INTERVAL, await_condition, settle

logger = get_logger(__name__)


def nth(locator: str, index: int) -> str:
    """Selector for the index-th match of locator."""
    return f"{locator} >> nth={index}"


def within(parent: str, child: str) -> str:
    """Selector for child scoped to parent."""
    return f"{parent} >> {child}"


def has_text(locator: str, text: str) -> str:
    """Selector for locator matches containing text, quotes escaped."""
    quoted = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'{locator}:has-text("{quoted}")'


class UIPort(ABC):
    """Capability set the checks are written against."""

    clock = SYSTEM_CLOCK
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @abstractmethod
    async def navigate(self, path: str) -> None:
        """Load a storefront path (relative to the base URL) or absolute URL."""

    @abstractmethod
    async def read_text(self, locator: str) -> str:
        """Rendered text content of the first match."""

    @abstractmethod
    async def read_value(self, locator: str) -> str:
        """Current value of the first matching form control."""

    @abstractmethod
    async def set_value(self, locator: str, value: str) -> None:
        """Replace the value of a text input."""

    @abstractmethod
    async def click(self, locator: str) -> None:
        """Click the first match."""

    @abstractmethod
    async def is_visible(self, locator: str) -> bool:
        """True if the first match is rendered and visible. Never raises."""

    @abstractmethod
    async def count(self, locator: str) -> int:
        """Number of elements matching locator."""

    @abstractmethod
    async def select_option(self, locator: str, label: str) -> None:
        """Choose the option with the given label in a select element."""

    @abstractmethod
    async def check(self, locator: str) -> None:
        """Tick a checkbox or radio button."""

    @abstractmethod
    async def get_attribute(self, locator: str, name: str) -> Optional[str]:
        """Attribute value of the first match, None when absent."""

    async def wait_visible(self, locator: str, timeout_ms: float) -> bool:
        """Wait up to timeout_ms for locator to become visible. Never raises."""
        return await await_condition(
            lambda: self.is_visible(locator),
            timeout_ms,
            clock=self.clock,
            poll_interval=self.poll_interval,
        )

    async def wait_any_visible(self, locators: Sequence[str], timeout_ms: float) -> bool:
        """Wait up to timeout_ms for any of locators to become visible. Never raises."""
        async def any_visible():
            for locator in locators:
                if await self.is_visible(locator):
                    return True
            return False

        return await await_condition(
            any_visible,
            timeout_ms,
            clock=self.clock,
            poll_interval=self.poll_interval,
        )

    async def pause(self, ms: float) -> None:
        """Fixed settle delay."""
        await settle(ms, clock=self.clock)


class PlaywrightPort(UIPort):
    """UIPort over a single Playwright page."""

    def __init__(self, page: Page, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.page = page
        self.poll_interval = poll_interval

    def _first(self, locator: str):
        return self.page.locator(locator).first

    async def navigate(self, path: str) -> None:
        logger.debug("Navigating", path=path)
        try:
            await self.page.goto(path, wait_until="domcontentloaded")
        except PlaywrightError as e:
            raise UIAccessError(f"Navigation to {path} failed: {e}") from e

    async def read_text(self, locator: str) -> str:
        try:
            return await self._first(locator).text_content() or ""
        except PlaywrightError as e:
            raise UIAccessError(f"Could not read text of {locator}: {e}") from e

    async def read_value(self, locator: str) -> str:
        try:
            return await self._first(locator).input_value()
        except PlaywrightError as e:
            raise UIAccessError(f"Could not read value of {locator}: {e}") from e

    async def set_value(self, locator: str, value: str) -> None:
        try:
            await self._first(locator).fill(value)
        except PlaywrightError as e:
            raise UIAccessError(f"Could not fill {locator}: {e}") from e

    async def click(self, locator: str) -> None:
        try:
            await self._first(locator).click()
        except PlaywrightError as e:
            raise UIAccessError(f"Could not click {locator}: {e}") from e

    async def is_visible(self, locator: str) -> bool:
        try:
            return await self._first(locator).is_visible()
        except PlaywrightError:
            return False

    async def count(self, locator: str) -> int:
        try:
            return await self.page.locator(locator).count()
        except PlaywrightError as e:
            raise UIAccessError(f"Could not count {locator}: {e}") from e

    async def select_option(self, locator: str, label: str) -> None:
        try:
            await self._first(locator).select_option(label=label)
        except PlaywrightError as e:
            raise UIAccessError(f"Could not select '{label}' in {locator}: {e}") from e

    async def check(self, locator: str) -> None:
        try:
            await self._first(locator).check()
        except PlaywrightError as e:
            raise UIAccessError(f"Could not check {locator}: {e}") from e

    async def get_attribute(self, locator: str, name: str) -> Optional[str]:
        try:
            return await self._first(locator).get_attribute(name)
        except PlaywrightError as e:
            raise UIAccessError(f"Could not read {name} of {locator}: {e}") from e

    async def close(self) -> None:
        """Close the page and its browser context."""
        context = self.page.context
        await self.page.close()
        await context.close()
