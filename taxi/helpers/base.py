"""Shared plumbing for helpers bound to a session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from taxi.scripts import BrowserScript
from taxi.utils import decode_json_object

if TYPE_CHECKING:
    from taxi.session import Session

logger = logging.getLogger(__name__)


class SessionHelper:
    """Base for helpers that talk to the browser through a session's gateway."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def gateway(self):
        return self.session.gateway

    async def _execute(self, script: BrowserScript | str | None, args: list[Any] | None = None) -> Any:
        """Run a script in the browser; a missing script is skipped."""
        if not script:
            return None
        if isinstance(script, BrowserScript):
            logger.debug("Executing %s", script)
            return await self.gateway.execute(script.source, args or [])
        return await self.gateway.execute(script, args or [])

    async def _execute_json(self, script: BrowserScript, args: list[Any] | None = None) -> dict:
        return decode_json_object(script.name, await self._execute(script, args))
