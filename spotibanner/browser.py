"""Browser session management for rendering Spotify artist pages."""

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Protocol

from camoufox import AsyncCamoufox
from playwright.async_api import Browser, Error as PlaywrightError, Page, Playwright, Response, async_playwright
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .dataclasses import BannerConfig, DeviceProfile


DEVICE_SETTINGS: Dict[DeviceProfile, Dict[str, Any]] = {
    DeviceProfile.DESKTOP: {
        'user_agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/121.0.0.0 Safari/537.36',
        'viewport': {'width': 1920, 'height': 1080},
    },
    DeviceProfile.MOBILE: {
        'user_agent': ('Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 '
                       '(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1'),
        'viewport': {'width': 375, 'height': 812},
    },
}


class RenderedPage(Protocol):
    """What the banner locator needs from a loaded page."""

    async def wait_for_load(self) -> None:
        ...

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        ...


class PlaywrightRenderedPage:
    """RenderedPage backed by a Playwright page."""

    def __init__(self, page: Page, config: BannerConfig) -> None:
        self.page = page
        self.config = config
        self.logger = logging.getLogger(__name__)

    async def goto(self, url: str) -> Optional[Response]:
        self.logger.debug(f"Navigating to {url}")
        return await self.page.goto(url, wait_until='load', timeout=self.config.page_timeout)

    async def wait_for_load(self) -> None:
        """Wait for the document to complete, then give client-side rendering time to settle.

        The settle delay is a heuristic: slow pages can still be mid-render when it ends.
        """
        await self.page.wait_for_function("() => document.readyState === 'complete'",
                                          timeout=self.config.page_timeout)
        if self.config.settle_delay > 0:
            await asyncio.sleep(self.config.settle_delay)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)


class BrowserManager:
    """Opens one short-lived browser session per operation, remote or local."""

    def __init__(self, config: BannerConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(__name__)

    def get_browser_options(self, device_profile: DeviceProfile) -> Dict[str, Any]:
        """Get Camoufox options for a local browser."""
        viewport = DEVICE_SETTINGS[device_profile]['viewport']
        browser_options = {
            'headless': self.config.headless,
            'humanize': False,
            'window': (viewport['width'], viewport['height']),
            'i_know_what_im_doing': True,  # We override the user agent per context
        }

        if not self.config.headless:
            self.logger.info("Running in non-headless mode for debugging")

        return browser_options

    def get_context_options(self, device_profile: DeviceProfile) -> Dict[str, Any]:
        settings = DEVICE_SETTINGS[device_profile]
        return {
            'user_agent': settings['user_agent'],
            'viewport': dict(settings['viewport']),
        }

    @retry(stop=stop_after_attempt(3),
           wait=wait_exponential(multiplier=1, min=1, max=8),
           retry=retry_if_exception_type((PlaywrightError, OSError)),
           reraise=True)
    async def _connect_remote(self, playwright: Playwright) -> Browser:
        """Connect to the remote browser over CDP, retrying transient connection failures."""
        return await playwright.chromium.connect_over_cdp(self.config.remote_endpoint,
                                                          timeout=self.config.page_timeout)

    @asynccontextmanager
    async def open_page(self, device_profile: DeviceProfile) -> AsyncIterator[Page]:
        """Open a fresh browser session configured for the device profile.

        The session (context, browser and, for remote sessions, the Playwright
        driver) is closed when the block exits, whether or not it raised.
        """
        device_profile = DeviceProfile.parse(device_profile)

        async with AsyncExitStack() as stack:
            if self.config.has_remote_browser:
                self.logger.info("Using Browserless.io for this session")
                playwright = await stack.enter_async_context(async_playwright())
                browser = await self._connect_remote(playwright)
                stack.push_async_callback(browser.close)
            else:
                self.logger.info("Using local Camoufox browser for this session")
                browser = await stack.enter_async_context(
                    AsyncCamoufox(**self.get_browser_options(device_profile))
                )

            context = await browser.new_context(**self.get_context_options(device_profile))
            stack.push_async_callback(context.close)
            page = await context.new_page()

            try:
                yield page
            finally:
                self.logger.debug("Closing browser session")

    @asynccontextmanager
    async def render(self, url: str, device_profile: DeviceProfile) -> AsyncIterator[RenderedPage]:
        """Open a session, navigate to url and wait until the page has rendered."""
        async with self.open_page(device_profile) as page:
            rendered = PlaywrightRenderedPage(page, self.config)
            self.logger.info(f"Navigating to artist page {url} ({DeviceProfile.parse(device_profile).value})")
            await rendered.goto(url)
            await rendered.wait_for_load()
            yield rendered
