"""Browser page capability and its Playwright implementation."""
from __future__ import annotations

from typing import Callable, Optional, Protocol

from . import logger
from .headers import USER_AGENT

log = logger.get("PAGE")

ResponseListener = Callable[[str], None]

VIEWPORT = {"width": 1280, "height": 720}


class PageSession(Protocol):
    """
    The browser operations the checkout driver and drop waiter need.

    One session holds one active page. It is not safe for concurrent
    navigation; callers serialize access.
    """

    @property
    def current_url(self) -> str: ...

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None: ...

    async def reload(self, wait_until: str = "domcontentloaded") -> None: ...

    async def settle(self, state: str = "networkidle") -> None: ...

    async def wait_for_selector(self, selector: str, timeout: float) -> bool: ...

    async def is_present(self, selector: str) -> bool: ...

    async def click(self, selector: str) -> None: ...

    async def fill(self, selector: str, text: str) -> None: ...

    async def read_text(self, selector: str) -> str: ...

    async def bounding_box(self, selector: str) -> Optional[dict]: ...

    async def mouse_move(self, x: float, y: float, steps: int = 1) -> None: ...

    async def mouse_down(self) -> None: ...

    async def mouse_up(self) -> None: ...

    def on_response(self, listener: ResponseListener) -> None: ...

    def remove_response_listener(self, listener: ResponseListener) -> None: ...

    async def wait_for_response(self, predicate: Callable[[str], bool], timeout: float) -> bool: ...

    async def close(self) -> None: ...


class PlaywrightSession:
    """
    PageSession backed by a single Chromium page.

    Timeouts are in milliseconds, as Playwright takes them.
    """

    def __init__(self, playwright, browser, context, page):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._listeners = {}

    @classmethod
    async def launch(cls, headless: bool = True) -> PlaywrightSession:
        """Start Chromium with a desktop user agent and viewport."""
        from playwright.async_api import async_playwright

        playwright = await async_playwright().start()
        browser = None

        try:
            browser = await playwright.chromium.launch(headless=headless)
            # Headless Chrome advertises itself without an explicit user agent
            context = await browser.new_context(user_agent=USER_AGENT, viewport=VIEWPORT)
            page = await context.new_page()
        except Exception:
            if browser is not None:
                await browser.close()
            await playwright.stop()
            raise

        log.info(f"Browser launched (headless={headless})")
        return cls(playwright, browser, context, page)

    @property
    def current_url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None:
        await self._page.goto(url, wait_until=wait_until)

    async def reload(self, wait_until: str = "domcontentloaded") -> None:
        await self._page.reload(wait_until=wait_until)

    async def settle(self, state: str = "networkidle") -> None:
        await self._page.wait_for_load_state(state)

    async def wait_for_selector(self, selector: str, timeout: float) -> bool:
        """Wait for a visible element. Returns False on timeout."""
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        try:
            await self._page.wait_for_selector(selector, state="visible", timeout=timeout)
            return True
        except PlaywrightTimeoutError:
            return False

    async def is_present(self, selector: str) -> bool:
        return await self._page.query_selector(selector) is not None

    async def click(self, selector: str) -> None:
        await self._page.click(selector)

    async def fill(self, selector: str, text: str) -> None:
        await self._page.fill(selector, text)

    async def read_text(self, selector: str) -> str:
        return (await self._page.inner_text(selector)).strip()

    async def bounding_box(self, selector: str) -> Optional[dict]:
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return await element.bounding_box()

    async def mouse_move(self, x: float, y: float, steps: int = 1) -> None:
        await self._page.mouse.move(x, y, steps=steps)

    async def mouse_down(self) -> None:
        await self._page.mouse.down()

    async def mouse_up(self) -> None:
        await self._page.mouse.up()

    def on_response(self, listener: ResponseListener) -> None:
        if listener in self._listeners:
            return

        def handler(response):
            listener(response.url)

        self._listeners[listener] = handler
        self._page.on("response", handler)

    def remove_response_listener(self, listener: ResponseListener) -> None:
        handler = self._listeners.pop(listener, None)
        if handler is not None:
            self._page.remove_listener("response", handler)

    async def wait_for_response(self, predicate: Callable[[str], bool], timeout: float) -> bool:
        """Wait for a response whose URL matches. Returns False on timeout."""
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        try:
            await self._page.wait_for_event(
                "response",
                predicate=lambda r: predicate(r.url),
                timeout=timeout,
            )
            return True
        except PlaywrightTimeoutError:
            return False

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()
        log.info("Browser closed")
