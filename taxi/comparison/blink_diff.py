"""Default comparison tool, backed by the Pillow pixel diff."""

from __future__ import annotations

from typing import Any

from taxi.comparison.base import ComparisonTool
from taxi.comparison.pixel_diff import PixelDiffOptions, compare_images
from taxi.helpers.images import decode_image, encode_png
from taxi.models.comparison import ComparisonResult


class BlinkDiffComparison(ComparisonTool):

    name = "blinkDiff"

    def run_comparison(
        self, approved: bytes, current: bytes, options: dict[str, Any]
    ) -> tuple[ComparisonResult, bytes]:
        approved_image = decode_image(approved)
        current_image = decode_image(current)
        try:
            result, output = compare_images(approved_image, current_image, PixelDiffOptions.model_validate(options))
        finally:
            approved_image.close()
            current_image.close()
        return result, encode_png(output)
