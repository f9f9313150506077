"""Capture Driver — takes the raw screenshots of a capture plan.

Captures run strictly one after another: every step moves the shared
browser document into the position the next screenshot depends on.
"""

from __future__ import annotations

import logging

from taxi.helpers.base import SessionHelper
from taxi.log import log_method_calls
from taxi.models.capture import InitData, Section, ViewPort
from taxi.models.config import PaddingConfig
from taxi.scripts import DOCUMENT_OFFSET
from taxi.utils import sleep

logger = logging.getLogger(__name__)

DEFAULT_WAIT_MS = 100


class CaptureDriver(SessionHelper):

    @log_method_calls
    async def capture(
        self,
        sections: list[Section],
        init_data: InitData,
        each_fn: str | None = None,
        complete_fn: str | None = None,
        wait_ms: int = DEFAULT_WAIT_MS,
        padding: PaddingConfig | None = None,
    ) -> list[Section]:
        """Capture every viewport of every section in planned order.

        ``each_fn`` runs in the browser before each capture with the viewport's
        global index as its only argument; ``complete_fn`` runs once after the
        last capture. Any gateway error aborts the remaining captures.
        """
        padding = padding or PaddingConfig()
        total = sum(len(s.viewports) for s in sections)
        logger.debug("Capturing %d viewport(s) in %d section(s)", total, len(sections))

        for section in sections:
            for viewport in section.viewports:
                await self._capture_viewport(section, viewport, init_data, each_fn, wait_ms, padding)

        await self._execute(complete_fn)
        return sections

    async def _capture_viewport(
        self,
        section: Section,
        viewport: ViewPort,
        init_data: InitData,
        each_fn: str | None,
        wait_ms: int,
        padding: PaddingConfig,
    ) -> None:
        # Place the target offset right below the top/left padding strip
        offset_x = section.x + viewport.x - padding.left
        offset_y = section.y + viewport.y - padding.top
        document_height = section.height if section.shift else None

        await self._execute(DOCUMENT_OFFSET, [offset_x, offset_y, document_height, init_data.to_script_arg()])
        await self._execute(each_fn, [viewport.index])

        # Browsers need a moment to re-layout and paint after the move
        await sleep(wait_ms)

        viewport.store_image(await self.gateway.take_raw_screenshot())
        logger.debug("Captured viewport %d at (%d, %d)", viewport.index, offset_x, offset_y)
