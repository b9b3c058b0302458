"""Headless Chromium page driver backed by Playwright."""

from playwright.async_api import async_playwright


class PageDriver:
    def __init__(self, headless: bool = True, timeout_seconds: float = 30):
        self.headless = headless
        self.timeout_ms = timeout_seconds * 1000

        self._pw = None
        self.browser = None
        self.context = None
        self.page = None

    # ---------- lifecycle ----------
    async def start(self) -> "PageDriver":
        self._pw = await async_playwright().start()
        try:
            self.browser = await self._pw.chromium.launch(headless=self.headless)
            self.context = await self.browser.new_context()
            self.context.set_default_timeout(self.timeout_ms)
            self.context.set_default_navigation_timeout(self.timeout_ms)
            self.page = await self.context.new_page()
        except BaseException:
            # __aexit__ never runs when __aenter__ raises
            await self.close()
            raise
        return self

    async def close(self) -> None:
        try:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
        finally:
            if self._pw:
                await self._pw.stop()

    async def __aenter__(self) -> "PageDriver":
        return await self.start()

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ---------- page interaction ----------
    @property
    def url(self) -> str:
        return self.page.url

    async def goto(self, url: str) -> None:
        await self.page.goto(url, wait_until="load")

    async def focus(self, selector: str) -> None:
        await self.page.focus(selector)

    async def type(self, text: str) -> None:
        await self.page.keyboard.type(text)

    async def click_and_wait(self, selector: str) -> None:
        """Click and wait for the navigation the click starts."""
        async with self.page.expect_navigation(wait_until="load"):
            await self.page.click(selector)

    async def evaluate(self, expression: str):
        return await self.page.evaluate(expression)
