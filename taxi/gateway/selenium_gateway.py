"""Blocking gateway over a selenium WebDriver."""

from __future__ import annotations

import logging
from typing import Any

from selenium.webdriver.remote.webdriver import WebDriver

from taxi.models.browser import Capabilities

logger = logging.getLogger(__name__)


class SeleniumGateway:
    """Runs scripts and takes screenshots through an existing selenium session.

    Session creation and teardown stay with the caller; the gateway only uses
    the execute-script and screenshot endpoints.
    """

    def __init__(self, driver: WebDriver):
        self.driver = driver

    def execute(self, script: str, args: list[Any] | None = None) -> Any:
        return self.driver.execute_script(script, *(args or []))

    def take_raw_screenshot(self) -> bytes:
        data = self.driver.get_screenshot_as_png()
        logger.debug("Raw screenshot: %d bytes", len(data))
        return data

    def capabilities(self) -> Capabilities:
        return Capabilities.model_validate(dict(self.driver.capabilities or {}))
