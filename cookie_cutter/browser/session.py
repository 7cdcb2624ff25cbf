"""
Browser session management.

Each :class:`BrowserSession` owns its own Playwright instance,
browser, context and page, so concurrent accept-stream requests do
not interfere with each other.
"""

from __future__ import annotations

from typing import Literal

from playwright import async_api

from cookie_cutter.browser import device_configs
from cookie_cutter.models import browser
from cookie_cutter.utils import logger

log = logger.create_logger("BrowserSession")


class BrowserSession:
    """An isolated browser session for a single page load."""

    def __init__(self, headless: bool = True) -> None:
        self._headless = headless
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch_browser(self, device_type: str = "windows-chrome") -> async_api.Page:
        """Launch Chromium with device emulation and return the new page."""
        device_config = device_configs.get_device_config(device_type)
        log.info("Launching browser", {"deviceType": device_type, "headless": self._headless})

        await self.close()

        pw = await async_api.async_playwright().start()
        self._playwright = pw
        self._browser = await pw.chromium.launch(
            headless=self._headless,
            args=["--no-first-run", "--no-default-browser-check", "--disable-extensions"],
        )
        self._context = await self._browser.new_context(
            viewport={"width": device_config.viewport.width, "height": device_config.viewport.height},
            user_agent=device_config.user_agent,
            device_scale_factor=device_config.device_scale_factor,
            is_mobile=device_config.is_mobile,
            has_touch=device_config.has_touch,
            locale="en-GB",
        )
        self._page = await self._context.new_page()
        log.debug(
            "Browser launched",
            {
                "viewport": f"{device_config.viewport.width}x{device_config.viewport.height}",
                "isMobile": device_config.is_mobile,
            },
        )
        return self._page

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate_to(
        self,
        url: str,
        wait_until: Literal["commit", "domcontentloaded", "load", "networkidle"] = "domcontentloaded",
        timeout: int = 60000,
    ) -> browser.NavigationResult:
        """Navigate the current page to *url*.

        ``domcontentloaded`` is the default so the engine can start
        while late consent scripts are still loading.
        """
        if not self._page:
            raise RuntimeError("No browser session active")

        log.debug("Navigating", {"url": url, "waitUntil": wait_until, "timeout": timeout})
        try:
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as error:
            log.warn("Navigation error", {"url": url, "error": str(error)})
            return browser.NavigationResult(success=False, status_code=None, status_text=None, error_message=str(error))

        status_code = response.status if response else None
        status_text = response.status_text if response else None
        if status_code and status_code >= 400:
            return browser.NavigationResult(
                success=False,
                status_code=status_code,
                status_text=status_text,
                error_message=f"Server error ({status_code}: {status_text})",
            )

        if self._page.url != url:
            log.info("Redirected", {"from": url, "to": self._page.url})
        return browser.NavigationResult(success=True, status_code=status_code, status_text=status_text, error_message=None)

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def close(self) -> None:
        """Close the browser and release every resource."""
        self._page = None

        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None
