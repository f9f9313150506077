"""Screenshot pipeline: document, viewport and area screenshots.

Resolves the cached device-pixel-ratio and stitching flag and plans the
sections from a read-only page measurement. Only then is the page state
snapshotted and mutated for capturing; the document is always reverted
afterwards, whether or not the capture succeeded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from taxi.exceptions import InvalidAreaError
from taxi.helpers.assembler import assemble
from taxi.helpers.base import SessionHelper
from taxi.helpers.capture import CaptureDriver
from taxi.helpers.device_pixel_ratio import DevicePixelRatio
from taxi.helpers.planner import gather_sections, validate_area
from taxi.helpers.stitching import Stitching
from taxi.log import log_method_calls
from taxi.models.capture import CaptureArea, InitData, ScreenshotOptions
from taxi.models.config import PaddingConfig
from taxi.scripts import SCREENSHOT_INIT, SCREENSHOT_REVERT, WINDOW_INFO

logger = logging.getLogger(__name__)

AreaFn = Callable[[InitData], CaptureArea]


class Screenshot(SessionHelper):

    @log_method_calls
    async def document_screenshot(self, options: ScreenshotOptions | None = None) -> bytes:
        """Capture the whole document."""
        return await self._take_screenshot(
            lambda init_data: CaptureArea(
                x=0, y=0, width=init_data.document.width, height=init_data.document.height,
            ),
            options,
        )

    @log_method_calls
    async def viewport_screenshot(self, options: ScreenshotOptions | None = None) -> bytes:
        """Capture what is currently visible in the viewport."""
        return await self._take_screenshot(
            lambda init_data: CaptureArea(
                x=init_data.viewport.x, y=init_data.viewport.y,
                width=init_data.viewport.width, height=init_data.viewport.height,
            ),
            options,
        )

    @log_method_calls
    async def area_screenshot(
        self, x: int, y: int, width: int, height: int, options: ScreenshotOptions | None = None
    ) -> bytes:
        """Capture an arbitrary document area."""
        if width < 0 or height < 0:
            raise InvalidAreaError(f"Area to capture cannot have a negative size ({width}x{height}).")
        return await self._take_screenshot(
            lambda _: CaptureArea(x=x, y=y, width=width, height=height), options,
        )

    async def save_screenshot(self, path: str | Path, options: ScreenshotOptions | None = None) -> Path:
        """Capture the whole document into a PNG file."""
        path = Path(path)
        image = await self.document_screenshot(options)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(image)
        logger.info("Saved screenshot to %s", path)
        return path

    async def window_info(self) -> dict:
        return await self._execute_json(WINDOW_INFO)

    def _padding(self) -> PaddingConfig:
        configured = self.session.config.screenshot.padding
        if configured is not None:
            return configured
        return self.session.policy.viewport_padding(self.session.capabilities)

    async def _take_screenshot(self, area_fn: AreaFn, options: ScreenshotOptions | None) -> bytes:
        options = options or ScreenshotOptions()

        device_pixel_ratio = await DevicePixelRatio(self.session).get_device_pixel_ratio()
        needs_stitching = await Stitching(self.session).does_need_stitching()

        # The budget is counted in device pixels
        max_image_resolution = self.session.get_value("max_image_resolution") / device_pixel_ratio
        padding = self._padding() if needs_stitching else PaddingConfig()
        if not padding.is_empty():
            logger.debug("Cutting viewport padding %s from every capture", padding.model_dump())
        wait_ms = options.wait_ms if options.wait_ms is not None else self.session.config.screenshot.wait_ms

        # Plan on a read-only measurement so bad settings fail before the page is touched
        window = InitData.model_validate(await self.window_info())
        area = validate_area(area_fn(window), window.document.width, window.document.height)
        if area.width == 0 or area.height == 0:
            raise InvalidAreaError(f"Nothing to capture in a {area.width}x{area.height} area.")
        sections = gather_sections(area, window, max_image_resolution, needs_stitching, padding)

        init_data = InitData.model_validate(await self._execute_json(SCREENSHOT_INIT))
        try:
            logger.debug("Capturing area %s in %d section(s), stitching=%s, ratio=%s",
                         area.model_dump(), len(sections), needs_stitching, device_pixel_ratio)

            await CaptureDriver(self.session).capture(
                sections, init_data,
                each_fn=options.each_fn,
                complete_fn=options.complete_fn,
                wait_ms=wait_ms,
                padding=padding,
            )
            return assemble(area, sections, device_pixel_ratio, padding, options.block_outs)
        finally:
            await self._execute(SCREENSHOT_REVERT, [init_data.to_script_arg()])
