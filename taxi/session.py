"""Session: the public entry point tying a browser gateway to the pipeline.

A session owns the value registry (cached device-pixel-ratio and stitching
flag, resolution budget), the browser identity and the comparison tools. In
sync mode every public operation runs its coroutine to completion with
``asyncio.run`` and returns a plain value; in async mode it returns the
coroutine for the caller to await.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, Optional

from taxi.comparison.registry import Comparison
from taxi.exceptions import ConfigurationError
from taxi.gateway.base import BlockingGateway, Gateway, as_gateway
from taxi.helpers.device_pixel_ratio import DevicePixelRatio
from taxi.helpers.screenshot import Screenshot
from taxi.helpers.stitching import CapturePolicy, Stitching
from taxi.log import setup_logging
from taxi.models.browser import Capabilities
from taxi.models.capture import ScreenshotOptions
from taxi.models.config import MODE_ASYNC, MODE_SYNC, TaxiConfig
from taxi.utils import DEFAULT_WAIT_INTERVAL_MS, Condition, wait_until

logger = logging.getLogger(__name__)

REGISTRY_KEYS = ("needs_stitching", "device_pixel_ratio", "max_image_resolution")


class Session:
    """Screenshot and comparison operations for one browser session."""

    def __init__(
        self,
        gateway: Gateway | BlockingGateway,
        capabilities: Capabilities | dict | None = None,
        config: TaxiConfig | None = None,
        mode: str | None = None,
        debug: bool = False,
        policy: CapturePolicy | None = None,
    ):
        self.config = config or TaxiConfig()
        self.mode = mode or self.config.mode
        if self.mode not in (MODE_SYNC, MODE_ASYNC):
            raise ConfigurationError(f"Unknown session mode '{self.mode}'. Use '{MODE_SYNC}' or '{MODE_ASYNC}'.")

        self.debug = debug or self.config.debug
        if self.debug:
            setup_logging(verbose=True)

        self.gateway = as_gateway(gateway)
        if isinstance(capabilities, Capabilities):
            self.capabilities = capabilities
        else:
            self.capabilities = Capabilities.model_validate(capabilities or {})
        self.policy = policy or CapturePolicy()

        self._values: dict[str, Any] = {}
        self._reset_values()
        self._comparison: Comparison | None = None
        logger.debug("Session for %s in %s mode", self.browser_id() or "unknown browser", self.mode)

    @classmethod
    def from_selenium(cls, driver, **kwargs) -> "Session":
        """Build a session around an existing selenium WebDriver."""
        from taxi.gateway.selenium_gateway import SeleniumGateway

        gateway = SeleniumGateway(driver)
        kwargs.setdefault("capabilities", gateway.capabilities())
        return cls(gateway, **kwargs)

    @classmethod
    async def from_playwright(cls, page, **kwargs) -> "Session":
        """Build an async session around an open playwright page."""
        from taxi.gateway.playwright_gateway import PlaywrightGateway

        gateway = PlaywrightGateway(page)
        kwargs.setdefault("capabilities", await gateway.capabilities())
        kwargs.setdefault("mode", MODE_ASYNC)
        return cls(gateway, **kwargs)

    # --- value registry -----------------------------------------------------

    def _reset_values(self) -> None:
        self._values = {
            "needs_stitching": None,
            "device_pixel_ratio": None,
            "max_image_resolution": self.config.screenshot.max_image_resolution,
        }

    def get_value(self, name: str) -> Any:
        return self._values.get(name)

    def set_value(self, name: str, value: Any) -> None:
        if name not in REGISTRY_KEYS:
            logger.debug("Storing non-standard session value '%s'", name)
        self._values[name] = value

    # --- modes --------------------------------------------------------------

    def is_sync(self) -> bool:
        return self.mode == MODE_SYNC

    def is_async(self) -> bool:
        return self.mode == MODE_ASYNC

    def _run(self, coroutine: Coroutine) -> Any:
        if self.is_sync():
            return asyncio.run(coroutine)
        return coroutine

    # --- browser identity ---------------------------------------------------

    @property
    def browser_name(self) -> str:
        return self.capabilities.browser_name

    @property
    def browser_version(self) -> str:
        return self.capabilities.browser_version

    @property
    def platform(self) -> str:
        return self.capabilities.platform

    @property
    def device_name(self) -> str:
        return self.capabilities.device_name

    @property
    def device_orientation(self) -> str:
        return self.capabilities.device_orientation

    def browser_id(self) -> str:
        return self.capabilities.browser_id()

    # --- screenshots --------------------------------------------------------

    @staticmethod
    def _options(options: ScreenshotOptions | dict | None) -> ScreenshotOptions:
        if isinstance(options, ScreenshotOptions):
            return options
        return ScreenshotOptions.model_validate(options or {})

    def document_screenshot(self, options: ScreenshotOptions | dict | None = None):
        """PNG of the whole document."""
        return self._run(Screenshot(self).document_screenshot(self._options(options)))

    def viewport_screenshot(self, options: ScreenshotOptions | dict | None = None):
        """PNG of the currently visible viewport."""
        return self._run(Screenshot(self).viewport_screenshot(self._options(options)))

    def area_screenshot(self, x: int, y: int, width: int, height: int,
                        options: ScreenshotOptions | dict | None = None):
        """PNG of a document area given in CSS pixels."""
        return self._run(Screenshot(self).area_screenshot(x, y, width, height, self._options(options)))

    def save_screenshot(self, path: str | Path, options: ScreenshotOptions | dict | None = None):
        return self._run(Screenshot(self).save_screenshot(path, self._options(options)))

    def get_document_size(self):
        """(width, height) of the document in CSS pixels."""
        return self._run(self._window_size("document"))

    def get_viewport_size(self):
        """(width, height) of the viewport in CSS pixels."""
        return self._run(self._window_size("viewport"))

    async def _window_size(self, key: str) -> tuple[int, int]:
        info = await Screenshot(self).window_info()
        return int(info[key]["width"]), int(info[key]["height"])

    def get_device_pixel_ratio(self):
        return self._run(DevicePixelRatio(self).get_device_pixel_ratio())

    def does_need_stitching(self):
        return self._run(Stitching(self).does_need_stitching())

    # --- comparison ---------------------------------------------------------

    @property
    def comparison(self) -> Comparison:
        if self._comparison is None:
            self._comparison = Comparison(self)
            self._comparison.setup()
        return self._comparison

    def compare(self, title: str, image: bytes, options: dict[str, Any] | None = None):
        """Compare a PNG buffer with its approved baseline.

        Resolves to True/False, or None when no baseline existed.
        """
        return self._run(self._compare(title, image, options))

    async def _compare(self, title: str, image: bytes, options: dict[str, Any] | None) -> Optional[bool]:
        return self.comparison.compare(title, image, options)

    def compare_document(self, title: str, options: ScreenshotOptions | dict | None = None):
        return self._run(self._compare_document(title, self._options(options)))

    def compare_viewport(self, title: str, options: ScreenshotOptions | dict | None = None):
        return self._run(self._compare_viewport(title, self._options(options)))

    def compare_area(self, title: str, x: int, y: int, width: int, height: int,
                     options: ScreenshotOptions | dict | None = None):
        return self._run(self._compare_area(title, x, y, width, height, self._options(options)))

    async def _compare_document(self, title: str, options: ScreenshotOptions) -> Optional[bool]:
        image = await Screenshot(self).document_screenshot(options)
        return await self._compare(title, image, options.compare)

    async def _compare_viewport(self, title: str, options: ScreenshotOptions) -> Optional[bool]:
        image = await Screenshot(self).viewport_screenshot(options)
        return await self._compare(title, image, options.compare)

    async def _compare_area(self, title: str, x: int, y: int, width: int, height: int,
                            options: ScreenshotOptions) -> Optional[bool]:
        image = await Screenshot(self).area_screenshot(x, y, width, height, options)
        return await self._compare(title, image, options.compare)

    # --- misc ---------------------------------------------------------------

    def wait_until(
        self,
        condition: Condition,
        timeout_ms: int,
        interval_ms: int = DEFAULT_WAIT_INTERVAL_MS,
        message: str | None = None,
        abort_on_timeout: bool = True,
    ):
        return self._run(wait_until(condition, timeout_ms, interval_ms, message, abort_on_timeout))

    def dispose(self) -> None:
        """Tear down the comparison tools and forget cached measurements."""
        if self._comparison is not None:
            self._comparison.tear_down()
            self._comparison = None
        self._reset_values()


def create_session(
    gateway: Gateway | BlockingGateway,
    capabilities: Capabilities | dict | None = None,
    config: TaxiConfig | str | Path | None = None,
    **kwargs,
) -> Session:
    """Create a session, loading the config from a JSON file when given a path."""
    if isinstance(config, (str, Path)):
        config = TaxiConfig.load(config)
    return Session(gateway, capabilities, config=config, **kwargs)
