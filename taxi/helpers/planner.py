"""Section Planner — splits a capture area into sections and viewport captures.

Pure functions, no browser I/O. A section is a horizontal slice whose pixel
count stays within the resolution budget; when the browser only returns the
viewport, each section is further tiled into viewport-sized captures.
"""

from __future__ import annotations

import math

from taxi.exceptions import ConfigurationError, InvalidAreaError
from taxi.models.capture import CaptureArea, InitData, Section, ViewPort
from taxi.models.config import PaddingConfig


def validate_area(area: CaptureArea, document_width: int, document_height: int) -> CaptureArea:
    """Return ``area`` clamped to the document bounds.

    Negative sizes are rejected. Offsets are clamped into the document and the
    size is cut down so the area ends inside it. Applying this twice gives the
    same result as applying it once.
    """
    if area.width < 0:
        raise InvalidAreaError("Width of area to capture cannot be negative.")
    if area.height < 0:
        raise InvalidAreaError("Height of area to capture cannot be negative.")

    x, y, width, height = area.x, area.y, area.width, area.height

    x = max(x, 0)
    if x >= document_width:
        x = max(document_width - 1, 0)
    y = max(y, 0)
    if y >= document_height:
        y = max(document_height - 1, 0)

    if x + width > document_width:
        width = max(document_width - x, 0)
    if y + height > document_height:
        height = max(document_height - y, 0)

    return CaptureArea(x=x, y=y, width=width, height=height)


def effective_viewport(init_data: InitData, padding: PaddingConfig | None = None) -> tuple[int, int]:
    """Viewport size left for capturing once the padding is cut off."""
    padding = padding or PaddingConfig()
    for edge in ("top", "right", "bottom", "left"):
        if getattr(padding, edge) < 0:
            raise ConfigurationError(f"Viewport padding '{edge}' cannot be negative.")

    width = init_data.viewport.width - padding.left - padding.right
    height = init_data.viewport.height - padding.top - padding.bottom
    if width <= 0 or height <= 0:
        raise ConfigurationError(
            f"Viewport padding leaves no capturable area "
            f"({init_data.viewport.width}x{init_data.viewport.height} viewport, padding {padding.model_dump()})."
        )
    return width, height


def gather_viewports(section: Section, viewport_width: int, viewport_height: int, index: int) -> list[ViewPort]:
    """Tile ``section`` with viewport-sized captures, row by row.

    Indexes continue from ``index``; cells at the far edges are clipped.
    """
    columns = math.ceil(section.width / viewport_width)
    rows = math.ceil(section.height / viewport_height)

    viewports = []
    for row in range(rows):
        for column in range(columns):
            offset_x = column * viewport_width
            offset_y = row * viewport_height
            viewports.append(ViewPort(
                x=offset_x,
                y=offset_y,
                width=min(viewport_width, section.width - offset_x),
                height=min(viewport_height, section.height - offset_y),
                index=index,
            ))
            index += 1
    return viewports


def gather_sections(
    area: CaptureArea,
    init_data: InitData,
    max_image_resolution: float,
    needs_stitching: bool,
    padding: PaddingConfig | None = None,
) -> list[Section]:
    """Split an already validated area into sections covering its full height."""
    if area.width == 0 or area.height == 0:
        return []

    document_width = init_data.document.width
    if document_width > max_image_resolution:
        raise ConfigurationError(
            "The max_image_resolution needs to be greater or equal to one time the document width "
            f"(document width {document_width}, budget {max_image_resolution:.0f})."
        )

    viewport_width, viewport_height = effective_viewport(init_data, padding)

    section_height = math.floor(max_image_resolution / (document_width - area.x))
    if needs_stitching:
        # Align sections on viewport boundaries so no capture is discarded
        section_height = (section_height // viewport_height) * viewport_height
    if section_height < 1:
        raise ConfigurationError(
            "The max_image_resolution is too small to fit a single viewport row "
            f"(budget {max_image_resolution:.0f}, viewport height {viewport_height})."
        )

    count = math.ceil(area.height / section_height)

    sections = []
    index = 0
    for i in range(count):
        section = Section(
            x=area.x,
            y=area.y + i * section_height,
            width=area.width,
            height=min(section_height, area.height - i * section_height),
            shift=(count != 1),
        )
        if needs_stitching:
            section.viewports = gather_viewports(section, viewport_width, viewport_height, index)
        else:
            section.viewports = [ViewPort(x=0, y=0, width=section.width, height=section.height, index=index)]
        index += len(section.viewports)
        sections.append(section)
    return sections


def plan(
    area: CaptureArea,
    init_data: InitData,
    max_image_resolution: float,
    needs_stitching: bool,
    padding: PaddingConfig | None = None,
) -> list[Section]:
    """Validate ``area`` against the document and return its capture plan."""
    area = validate_area(area, init_data.document.width, init_data.document.height)
    return gather_sections(area, init_data, max_image_resolution, needs_stitching, padding)
