"""Stitching Requirement Detector.

Some drivers (chrome among them) return only the visible viewport instead of
the whole document. To find out, the document is resized to twice the
viewport width and one pixel height: a full-document screenshot comes back
about twice as wide as the viewport, a viewport-only one does not.
"""

from __future__ import annotations

import logging

from taxi.helpers.base import SessionHelper
from taxi.helpers.device_pixel_ratio import DevicePixelRatio
from taxi.helpers.images import image_size
from taxi.log import log_method_calls
from taxi.models.browser import Capabilities
from taxi.models.config import PaddingConfig
from taxi.scripts import STITCHING_INIT, STITCHING_REVERT

logger = logging.getLogger(__name__)

# A capture narrower than expected by at least this share was clipped
SHORTFALL_RATIO = 0.2

# Height of the iOS Safari address bar rendered into simulator screenshots
IOS_ADDRESS_BAR_HEIGHT = 64


def needs_stitching_for_width(expected_width: float, actual_width: float) -> bool:
    """True when the screenshot was clipped to (roughly) the viewport."""
    shortfall = expected_width - actual_width
    return shortfall >= 0 and abs(shortfall) >= expected_width * SHORTFALL_RATIO


class CapturePolicy:
    """Empirical per-browser corrections applied on top of measurements.

    Subclass and pass to the session to change how specific browsers are
    treated; the defaults encode corrections for historical browsers.
    """

    ie_stitching_min_version = 10.0

    def needs_stitching(self, capabilities: Capabilities, measured: bool) -> bool:
        if measured:
            return True
        # The width heuristic is unreliable on IE 10+, which clips to the viewport
        if capabilities.browser_name.lower() == "internet explorer":
            version = capabilities.numeric_version()
            if version is not None and version >= self.ie_stitching_min_version:
                return True
        return False

    def viewport_padding(self, capabilities: Capabilities) -> PaddingConfig:
        """Padding used when the configuration does not set one."""
        if "iphone" in capabilities.device_name.lower():
            return PaddingConfig(top=IOS_ADDRESS_BAR_HEIGHT)
        return PaddingConfig()


class Stitching(SessionHelper):

    @log_method_calls
    async def does_need_stitching(self) -> bool:
        """Return the cached flag, measuring it on first use."""
        needs_stitching = self.session.get_value("needs_stitching")
        if needs_stitching is None:
            needs_stitching = await self._determine_needs_stitching()
            self.session.set_value("needs_stitching", needs_stitching)
        return needs_stitching

    async def _determine_needs_stitching(self) -> bool:
        device_pixel_ratio = await DevicePixelRatio(self.session).get_device_pixel_ratio()

        horizontal_padding = self.session.config.screenshot.horizontal_padding
        init_data = await self._execute_json(STITCHING_INIT, [horizontal_padding])
        try:
            screenshot = await self.gateway.take_raw_screenshot()
        finally:
            await self._execute(STITCHING_REVERT, [init_data])

        # Same width the init script gave the body
        expected_width = (init_data["viewport_width"] * 2 - horizontal_padding) * device_pixel_ratio
        actual_width, _ = image_size(screenshot)
        measured = needs_stitching_for_width(expected_width, actual_width)

        needs_stitching = self.session.policy.needs_stitching(self.session.capabilities, measured)
        logger.debug("Stitching: expected width %.0f, actual %d -> measured=%s, final=%s",
                     expected_width, actual_width, measured, needs_stitching)
        return needs_stitching
