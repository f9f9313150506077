"""Device Metrics Resolver: determines the effective device-pixel-ratio.

``window.devicePixelRatio`` cannot be trusted in every browser, so the ratio
is measured: the document is shrunk to one row as wide as the viewport, a
raw screenshot is taken and its pixel width is divided by the known CSS width.
"""

from __future__ import annotations

import logging

from taxi.helpers.base import SessionHelper
from taxi.helpers.images import image_size
from taxi.log import log_method_calls
from taxi.scripts import DEVICE_PIXEL_RATIO_INIT, DEVICE_PIXEL_RATIO_REVERT

logger = logging.getLogger(__name__)

# Reported and measured ratios closer than this are considered equal
RATIO_TOLERANCE = 0.1
_EPSILON = 1e-9


def round_to_tenth(ratio: float) -> float:
    """Snap a measured ratio to the nearest tenth to drop sub-pixel noise."""
    return round(ratio * 10) / 10


def reconcile_device_pixel_ratio(reported: float, measured: float) -> float:
    """Pick between the browser's reported ratio and the measured one.

    The reported value wins when both agree within RATIO_TOLERANCE, since it
    is exact at integral ratios; otherwise the (rounded) measurement wins.
    """
    measured = round_to_tenth(measured)
    if abs(measured - reported) <= RATIO_TOLERANCE + _EPSILON:
        return reported
    return measured


class DevicePixelRatio(SessionHelper):

    @log_method_calls
    async def get_device_pixel_ratio(self) -> float:
        """Return the cached ratio, measuring it on first use."""
        ratio = self.session.get_value("device_pixel_ratio")
        if ratio is None:
            ratio = await self._determine_device_pixel_ratio()
            self.session.set_value("device_pixel_ratio", ratio)
        return ratio

    async def _determine_device_pixel_ratio(self) -> float:
        init_data = await self._execute_json(DEVICE_PIXEL_RATIO_INIT)
        try:
            screenshot = await self.gateway.take_raw_screenshot()
        finally:
            await self._execute(DEVICE_PIXEL_RATIO_REVERT, [init_data])

        document_width = init_data.get("document_width") or 0
        reported = float(init_data.get("device_pixel_ratio") or 1)
        if document_width <= 0:
            logger.debug("No document width measured, using reported ratio %s", reported)
            return reported

        width, _ = image_size(screenshot)
        measured = width / document_width
        ratio = reconcile_device_pixel_ratio(reported, measured)
        logger.debug("Device-pixel-ratio: reported=%s measured=%.3f -> %s", reported, measured, ratio)
        return ratio
