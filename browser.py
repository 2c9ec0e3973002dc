#!/usr/bin/env python3
"""
Browser automation for Pinterest Login
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Protocol
from playwright.async_api import async_playwright, Browser, BrowserContext, ElementHandle, Error, Page, Playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import BrowserConfig, LOGGER
from errors import AutomationError, InteractionError, LaunchError, NavigationError, WaitTimeoutError


class SessionHandle(Protocol):
    """Page level operations the login flow needs from a live browser.

    Implementations are single-writer: one logical flow at a time.
    """

    @property
    def current_url(self) -> str: ...

    async def navigate(self, url: str, timeout_ms: int) -> None: ...

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> Any: ...

    async def query_selector(self, selector: str) -> Optional[Any]: ...

    async def type_into(self, element: Any, text: str, timeout_ms: int) -> None: ...

    async def click(self, element: Any, timeout_ms: int) -> None: ...

    async def wait_for_navigation(self, timeout_ms: int) -> None: ...

    async def content(self) -> str: ...

    async def read_cookies(self) -> List[Dict[str, Any]]: ...

    async def close(self) -> None: ...


SessionFactory = Callable[[BrowserConfig], Awaitable[SessionHandle]]


class BrowserSession:
    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext, page: Page):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self._closed = False

    @classmethod
    async def open(cls, config: BrowserConfig) -> "BrowserSession":
        LOGGER.info(f"Launching browser (headless={config.headless})")
        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise LaunchError(f"Playwright driver failed to start: {_describe(e)}") from e

        launch_options: Dict[str, Any] = {
            "headless": config.headless,
            "args": list(config.launch_args),
        }
        if config.executable_path is not None:
            launch_options["executable_path"] = str(config.executable_path)
        if config.launch_timeout_ms is not None:
            launch_options["timeout"] = config.launch_timeout_ms

        browser: Optional[Browser] = None
        try:
            browser = await playwright.chromium.launch(**launch_options)
            context = await browser.new_context()
            context.set_default_timeout(config.timeout_ms)
            context.set_default_navigation_timeout(config.timeout_ms)
            page = await context.new_page()
        except BaseException as e:
            # Cancellation included: nothing else owns these resources yet
            await asyncio.shield(_abort_launch(playwright, browser))
            if isinstance(e, Exception):
                raise LaunchError(f"Browser launch failed: {_describe(e)}") from e
            raise

        LOGGER.info(f"Browser launched, version {browser.version}")
        return cls(playwright, browser, context, page)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current_url(self) -> str:
        return self.page.url

    async def navigate(self, url: str, timeout_ms: int) -> None:
        LOGGER.info(f"Navigating to: {url}")
        try:
            await self.page.goto(url, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(f"Navigation to {url} timed out after {timeout_ms} ms") from e
        except Error as e:
            raise NavigationError(f"Navigation to {url} failed: {e.message}") from e

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> ElementHandle:
        LOGGER.debug(f"Waiting up to {timeout_ms} ms for selector: {selector}")
        try:
            element = await self.page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(f"Selector {selector!r} not found within {timeout_ms} ms") from e
        except Error as e:
            raise AutomationError(f"Waiting for {selector!r} failed: {e.message}") from e
        if element is None:
            raise AutomationError(f"Selector {selector!r} resolved to no element")
        return element

    async def query_selector(self, selector: str) -> Optional[ElementHandle]:
        try:
            return await self.page.query_selector(selector)
        except Error as e:
            raise AutomationError(f"Querying {selector!r} failed: {e.message}") from e

    async def type_into(self, element: ElementHandle, text: str, timeout_ms: int) -> None:
        try:
            await element.click(timeout=timeout_ms)
            await element.fill(text, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(f"Typing into element timed out after {timeout_ms} ms") from e
        except Error as e:
            raise InteractionError(f"Typing into element failed: {e.message}") from e

    async def click(self, element: ElementHandle, timeout_ms: int) -> None:
        try:
            await element.click(timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(f"Click timed out after {timeout_ms} ms") from e
        except Error as e:
            raise InteractionError(f"Click failed: {e.message}") from e

    async def wait_for_navigation(self, timeout_ms: int) -> None:
        try:
            await self.page.wait_for_load_state("load", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(f"Page load did not finish within {timeout_ms} ms") from e
        except Error as e:
            raise AutomationError(f"Waiting for page load failed: {e.message}") from e

    async def content(self) -> str:
        try:
            return await self.page.content()
        except Error as e:
            raise AutomationError(f"Reading page content failed: {e.message}") from e

    async def read_cookies(self) -> List[Dict[str, Any]]:
        try:
            return list(await self.context.cookies())
        except Error as e:
            raise AutomationError(f"Reading cookies failed: {e.message}") from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        LOGGER.info("Cleaning up browser resources")
        try:
            try:
                await self.context.close()
            except Error as e:
                LOGGER.error(f"Context cleanup error: {e.message}")
            try:
                await self.browser.close()
            except Error as e:
                LOGGER.error(f"Browser cleanup error: {e.message}")
        finally:
            await self.playwright.stop()


def _describe(error: BaseException) -> str:
    return error.message if isinstance(error, Error) else str(error)


async def _abort_launch(playwright: Playwright, browser: Optional[Browser]) -> None:
    try:
        if browser is not None:
            await browser.close()
    except Error as e:
        LOGGER.error(f"Browser cleanup after failed launch: {e.message}")
    finally:
        await playwright.stop()


@asynccontextmanager
async def open_session(
    config: BrowserConfig,
    factory: Optional[SessionFactory] = None
) -> AsyncIterator[SessionHandle]:
    """Open a session and close it on every exit path, cancellation included."""
    session = await (factory or BrowserSession.open)(config)
    try:
        yield session
    finally:
        await asyncio.shield(session.close())
