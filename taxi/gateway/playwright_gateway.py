"""Non-blocking gateway over a playwright Page."""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Page

from taxi.models.browser import Capabilities

logger = logging.getLogger(__name__)

# Runs a WebDriver-style function body (reading ``arguments``) inside evaluate()
_EVALUATE_WRAPPER = "(payload) => (new Function(payload.source)).apply(null, payload.args)"


class PlaywrightGateway:
    """Gateway for an already opened playwright page.

    Playwright only captures the viewport unless asked for a full page, so
    sessions built on it will normally be detected as needing stitching.
    """

    def __init__(self, page: Page):
        self.page = page

    async def execute(self, script: str, args: list[Any] | None = None) -> Any:
        return await self.page.evaluate(_EVALUATE_WRAPPER, {"source": script, "args": args or []})

    async def take_raw_screenshot(self) -> bytes:
        data = await self.page.screenshot(full_page=False, type="png")
        logger.debug("Raw screenshot: %d bytes", len(data))
        return data

    async def capabilities(self) -> Capabilities:
        browser = self.page.context.browser
        return Capabilities(
            browser_name=browser.browser_type.name if browser else "",
            browser_version=browser.version if browser else "",
        )
