"""Image Assembler — composites captured viewports into one bitmap."""

from __future__ import annotations

import gc
import logging

from PIL import Image, ImageDraw

from taxi.exceptions import InvalidAreaError
from taxi.helpers.images import decode_image, encode_png
from taxi.models.capture import BlockOut, CaptureArea, Section
from taxi.models.config import PaddingConfig

logger = logging.getLogger(__name__)


def _scale(value: float, device_pixel_ratio: float) -> int:
    return int(round(value * device_pixel_ratio))


def assemble(
    area: CaptureArea,
    sections: list[Section],
    device_pixel_ratio: float,
    padding: PaddingConfig | None = None,
    block_outs: list[BlockOut] | None = None,
) -> bytes:
    """Stitch all captured viewports together and return a PNG buffer.

    Each capture is placed at its document offset relative to the area, scaled
    by the device-pixel-ratio. At most the declared viewport size is copied,
    and never more than the capture actually holds. Every viewport image is
    consumed exactly once and released right after compositing.
    """
    padding = padding or PaddingConfig()
    width = _scale(area.width, device_pixel_ratio)
    height = _scale(area.height, device_pixel_ratio)
    if width <= 0 or height <= 0:
        raise InvalidAreaError(f"Nothing to capture in a {area.width}x{area.height} area.")

    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    crop_left = _scale(padding.left, device_pixel_ratio)
    crop_top = _scale(padding.top, device_pixel_ratio)

    for section in sections:
        for viewport in section.viewports:
            image = decode_image(viewport.take_image())
            try:
                offset_x = _scale(section.x - area.x + viewport.x, device_pixel_ratio)
                offset_y = _scale(section.y - area.y + viewport.y, device_pixel_ratio)
                copy_width = min(_scale(viewport.width, device_pixel_ratio), image.width - crop_left)
                copy_height = min(_scale(viewport.height, device_pixel_ratio), image.height - crop_top)
                if copy_width <= 0 or copy_height <= 0:
                    logger.warning("Capture %d is empty after padding, skipped", viewport.index)
                    continue
                if copy_width < _scale(viewport.width, device_pixel_ratio) or \
                        copy_height < _scale(viewport.height, device_pixel_ratio):
                    logger.debug("Capture %d smaller than expected (%dx%d)", viewport.index, image.width, image.height)

                region = image.crop((crop_left, crop_top, crop_left + copy_width, crop_top + copy_height))
                canvas.paste(region, (offset_x, offset_y))
                region.close()
            finally:
                image.close()

    gc.collect()

    if block_outs:
        _paint_block_outs(canvas, area, block_outs, device_pixel_ratio)

    return encode_png(canvas)


def _paint_block_outs(
    canvas: Image.Image, area: CaptureArea, block_outs: list[BlockOut], device_pixel_ratio: float
) -> None:
    draw = ImageDraw.Draw(canvas)
    for block in block_outs:
        if block.width <= 0 or block.height <= 0:
            continue
        left = _scale(block.x - area.x, device_pixel_ratio)
        top = _scale(block.y - area.y, device_pixel_ratio)
        right = left + _scale(block.width, device_pixel_ratio) - 1
        bottom = top + _scale(block.height, device_pixel_ratio) - 1
        if right < 0 or bottom < 0 or left >= canvas.width or top >= canvas.height:
            continue
        draw.rectangle((left, top, right, bottom), fill=block.color.as_tuple())
