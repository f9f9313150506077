"""Perceptual image difference with Pillow.

A pixel counts as different when any of its channels (alpha included) moved
by more than ``delta``. Block-out rectangles are ignored. When the images do
not have the same size, every pixel outside the shared region is counted as
different as well.
"""

from __future__ import annotations

import logging
from typing import Literal

from PIL import Image, ImageChops, ImageDraw
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from taxi.models.capture import BlockOut, Color
from taxi.models.comparison import ComparisonResult, ResultCode

logger = logging.getLogger(__name__)


class PixelDiffOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    threshold: float = Field(default=500, ge=0)
    threshold_type: Literal["pixel", "percent"] = Field(
        default="pixel", validation_alias=AliasChoices("threshold_type", "thresholdType")
    )
    # Per-channel distance tolerated before a pixel is counted
    delta: int = Field(default=20, ge=0, le=255)
    block_out: list[BlockOut] = Field(
        default_factory=list, validation_alias=AliasChoices("block_out", "blockOut")
    )
    output_mask_color: Color = Field(
        default_factory=lambda: Color(red=255, green=0, blue=0),
        validation_alias=AliasChoices("output_mask_color", "outputMaskColor"),
    )
    output_background_opacity: float = Field(
        default=0.6, ge=0, le=1,
        validation_alias=AliasChoices("output_background_opacity", "outputBackgroundOpacity"),
    )

    def is_above_threshold(self, differences: int, dimension: int) -> bool:
        if self.threshold_type == "percent":
            return dimension > 0 and differences / dimension >= self.threshold
        return differences >= self.threshold


def _difference_mask(approved: Image.Image, current: Image.Image, delta: int) -> Image.Image:
    """Mode "L" mask of the shared region: 255 where the images differ."""
    difference = ImageChops.difference(approved, current)
    bands = difference.split()
    strongest = bands[0]
    for band in bands[1:]:
        strongest = ImageChops.lighter(strongest, band)
    return strongest.point(lambda value: 255 if value > delta else 0)


def compare_images(
    approved: Image.Image, current: Image.Image, options: PixelDiffOptions | None = None
) -> tuple[ComparisonResult, Image.Image]:
    """Compare two images and return the result with a difference image."""
    options = options or PixelDiffOptions()
    approved = approved.convert("RGBA")
    current = current.convert("RGBA")

    shared_width = min(approved.width, current.width)
    shared_height = min(approved.height, current.height)
    width = max(approved.width, current.width)
    height = max(approved.height, current.height)
    dimension = width * height

    mask = Image.new("L", (width, height), 255)
    if shared_width and shared_height:
        box = (0, 0, shared_width, shared_height)
        mask.paste(_difference_mask(approved.crop(box), current.crop(box), options.delta), box)

    draw = ImageDraw.Draw(mask)
    for block in options.block_out:
        if block.width > 0 and block.height > 0:
            draw.rectangle((block.x, block.y, block.x + block.width - 1, block.y + block.height - 1), fill=0)

    differences = mask.histogram()[255]
    if differences == 0:
        code = ResultCode.IDENTICAL
    elif options.is_above_threshold(differences, dimension):
        code = ResultCode.DIFFERENT
    else:
        code = ResultCode.SIMILAR

    result = ComparisonResult(
        code=code, differences=differences, dimension=dimension, width=width, height=height,
    )
    logger.debug("Pixel diff: %d of %d pixels differ (%s)", differences, dimension, code.name)
    return result, _render_output(approved, mask, options)


def _render_output(approved: Image.Image, mask: Image.Image, options: PixelDiffOptions) -> Image.Image:
    """Fade the approved image and paint the differing pixels on top."""
    output = Image.new("RGBA", mask.size, (255, 255, 255, 255))
    white = Image.new("RGBA", approved.size, (255, 255, 255, 255))
    output.paste(Image.blend(white, approved, options.output_background_opacity), (0, 0))
    overlay = Image.new("RGBA", mask.size, options.output_mask_color.as_tuple())
    output.paste(overlay, (0, 0), mask)
    return output
