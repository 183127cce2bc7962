"""Playwright browser session shared by the scheduler and the scenarios."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from steadyload.core.config import BrowsersConfig, SessionConfig, SteadyloadConfig
from steadyload.core.exceptions import ConfigurationError, SessionError, UnknownBrowserError
from steadyload.core.logging import get_logger


log = get_logger("session")

SUPPORTED_BROWSERS: Tuple[str, ...] = (
    "chrome",
    "edge",
    "firefox",
    "opera",
    "operabeta",
    "chromium",
    "webkit",
)


@dataclass(frozen=True)
class LaunchSpec:
    """How a browser identifier maps onto a Playwright launch."""
    engine: str
    channel: Optional[str] = None
    executable_path: Optional[str] = None
    args: Tuple[str, ...] = ()
    permissions: Tuple[str, ...] = ()

    @property
    def starts_maximized(self) -> bool:
        return self.engine == "chromium"


def validate_browser(browser: str) -> str:
    """Normalise a browser identifier, raising for anything unsupported."""
    name = (browser or "").strip().lower()
    if name not in SUPPORTED_BROWSERS:
        raise UnknownBrowserError(browser, SUPPORTED_BROWSERS)
    return name


def launch_spec_for(browser: str, browsers: Optional[BrowsersConfig] = None) -> LaunchSpec:
    """Build the Playwright launch description for a browser identifier."""
    name = validate_browser(browser)
    browsers = browsers or BrowsersConfig()
    maximized = ("--start-maximized",)

    if name == "chrome":
        # Sites that prompt for notifications get an answer instead of a bar.
        return LaunchSpec("chromium", channel="chrome", args=maximized, permissions=("notifications",))
    if name == "edge":
        return LaunchSpec("chromium", channel="msedge", args=maximized)
    if name in ("opera", "operabeta"):
        executable = browsers.operabeta_executable if name == "operabeta" else browsers.opera_executable
        if not executable:
            raise ConfigurationError(
                f"No executable configured for '{name}'",
                context={"setting": f"browsers.{name}_executable"},
            )
        # window.open() only works for new tabs with the popup blocker off.
        return LaunchSpec(
            "chromium",
            executable_path=executable,
            args=maximized + ("--disable-popup-blocking",),
        )
    if name == "chromium":
        return LaunchSpec("chromium", args=maximized)
    return LaunchSpec(name)


class BrowserSession:
    """
    One live browser instance and the tab currently in focus.

    The session is created by :func:`open_session` and handed explicitly to
    the scheduler and to every scenario. Scenarios drive the current tab
    through :attr:`page` and the helpers below.

    Args:
        browser: Browser identifier the session was opened for
        config: Session timing settings
        playwright: Started Playwright instance owned by this session
    """

    def __init__(self, browser: str, config: SessionConfig, playwright: Any) -> None:
        self.browser = browser
        self.config = config
        self.playwright = playwright
        self.browser_handle: Any = None
        self.context: Any = None
        self._page: Any = None
        self.tabs_opened = 0
        self.closed = False

    @property
    def page(self):
        if self._page is None:
            raise SessionError("Session has no open page", browser=self.browser)
        return self._page

    async def start(self, spec: LaunchSpec) -> None:
        launcher = getattr(self.playwright, spec.engine)
        launch_kwargs: Dict[str, Any] = {"headless": self.config.headless}
        if spec.channel:
            launch_kwargs["channel"] = spec.channel
        if spec.executable_path:
            launch_kwargs["executable_path"] = spec.executable_path
        if spec.args:
            launch_kwargs["args"] = list(spec.args)

        try:
            self.browser_handle = await launcher.launch(**launch_kwargs)
        except PlaywrightError as exc:
            raise SessionError(
                "Failed to launch browser",
                browser=self.browser,
                context={"engine": spec.engine, "error": str(exc)},
            ) from exc

        context_kwargs: Dict[str, Any] = {}
        if spec.starts_maximized and not self.config.headless:
            context_kwargs["no_viewport"] = True
        else:
            context_kwargs["viewport"] = self.config.viewport.model_dump()
        if spec.permissions:
            context_kwargs["permissions"] = list(spec.permissions)

        self.context = await self.browser_handle.new_context(**context_kwargs)
        self._page = await self.context.new_page()
        log.info("session_opened", browser=self.browser, engine=spec.engine, channel=spec.channel)

        await self.pause(self.config.startup_wait_seconds)
        await self._page.bring_to_front()
        await self.pause(self.config.maximize_wait_seconds)

    async def open_new_tab_and_focus(self) -> None:
        """Open a tab in the same context and make it the current page.

        Waits ``new_tab_settle_seconds`` afterwards so the scenario's first
        commands are not lost while the tab is still coming up.
        """
        if self.context is None:
            raise SessionError("Session is not started", browser=self.browser)
        page = await self.context.new_page()
        await page.bring_to_front()
        self._page = page
        self.tabs_opened += 1
        log.debug("tab_opened", browser=self.browser, tabs_opened=self.tabs_opened)
        await self.pause(self.config.new_tab_settle_seconds)

    async def goto(self, url: str, wait_until: str = "load") -> None:
        log.debug("navigate", url=url)
        await self.page.goto(url, wait_until=wait_until)

    async def scroll_page(self, times: int) -> None:
        """Scroll with the Page Down key, pausing after each press.

        Key presses scroll the way a user does, which scripted
        ``window.scrollBy`` calls do not.
        """
        for _ in range(times):
            await self.page.keyboard.press("PageDown")
            await self.pause(self.config.scroll_pause_seconds)

    async def pause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    async def close(self) -> None:
        """Release the browser. Failures here are logged, never raised."""
        if self.closed:
            return
        self.closed = True
        for step, target, method in (
            ("context", self.context, "close"),
            ("browser", self.browser_handle, "close"),
            ("playwright", self.playwright, "stop"),
        ):
            if target is None:
                continue
            try:
                await getattr(target, method)()
            except Exception as exc:
                log.warning("session_close_failed", step=step, error=str(exc), error_type=type(exc).__name__)
        log.info("session_closed", browser=self.browser, tabs_opened=self.tabs_opened)


@asynccontextmanager
async def open_session(
    browser: str,
    config: Optional[SteadyloadConfig] = None,
    playwright_factory: Callable[[], Any] = async_playwright,
) -> AsyncIterator[BrowserSession]:
    """Launch a browser for ``browser`` and release it on every exit path."""
    config = config or SteadyloadConfig()
    name = validate_browser(browser)
    spec = launch_spec_for(name, config.browsers)

    playwright = await playwright_factory().start()
    session = BrowserSession(name, config.session, playwright)
    try:
        await session.start(spec)
        yield session
    finally:
        await session.close()
