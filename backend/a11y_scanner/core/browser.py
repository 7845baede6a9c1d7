"""Browser session boundary.

Everything the scanner does to a live page goes through ``BrowserSession``:
navigation, media emulation, key presses and ``evaluate(script, arg)``.
Scripts are plain JS function sources; only JSON-serializable values cross
in either direction.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from playwright.async_api import async_playwright

from a11y_scanner.core.errors import SessionError
from a11y_scanner.core.logger import get_logger

logger = get_logger(__name__)

LAUNCH_ARGS = ["--no-sandbox"]


class ErrorCollector:
    """Sink for console errors and uncaught page errors of one session."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def on_console(self, message: Any) -> None:
        if message.type == "error":
            self.messages.append(message.text)

    def on_page_error(self, error: Any) -> None:
        self.messages.append(getattr(error, "message", None) or str(error))


class BrowserSession:
    def __init__(self, page: Any) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, wait_until: str, timeout_ms: int) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def emulate_media(self, **kwargs: str) -> None:
        await self._page.emulate_media(**kwargs)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def press(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def add_script(self, content: str) -> None:
        await self._page.add_script_tag(content=content)


async def _close_quietly(resource: Optional[Any], what: str) -> None:
    if resource is None:
        return
    try:
        await resource.close()
    except Exception as e:
        logger.warning("session release failed", resource=what, error=repr(e))


@asynccontextmanager
async def open_session(collector: ErrorCollector) -> AsyncIterator[BrowserSession]:
    """Launch an isolated Chromium session and release it on every exit path.

    Release errors are logged and swallowed so they never replace the error
    that ended the scan.
    """
    try:
        driver = await async_playwright().start()
    except Exception as e:
        raise SessionError(f"could not start browser driver: {e}") from e

    browser = context = None
    try:
        try:
            browser = await driver.chromium.launch(args=LAUNCH_ARGS)
            context = await browser.new_context(bypass_csp=True)
            page = await context.new_page()
        except Exception as e:
            raise SessionError(f"could not open browser session: {e}") from e

        page.on("console", collector.on_console)
        page.on("pageerror", collector.on_page_error)
        yield BrowserSession(page)
    finally:
        await _close_quietly(context, "context")
        await _close_quietly(browser, "browser")
        try:
            await driver.stop()
        except Exception as e:
            logger.warning("session release failed", resource="driver", error=repr(e))
