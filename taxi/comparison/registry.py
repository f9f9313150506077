"""Registry of comparison tools and the session-level fan-out."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from taxi.comparison.base import ComparisonTool
from taxi.comparison.blink_diff import BlinkDiffComparison
from taxi.exceptions import ConfigurationError

if TYPE_CHECKING:
    from taxi.session import Session

logger = logging.getLogger(__name__)

TOOLS: dict[str, type[ComparisonTool]] = {
    BlinkDiffComparison.name: BlinkDiffComparison,
}


def register_tool(tool: type[ComparisonTool]) -> type[ComparisonTool]:
    """Make ``tool`` available under its ``name``; usable as a decorator."""
    if not tool.name:
        raise ConfigurationError(f"Comparison tool {tool.__name__} has no name.")
    TOOLS[tool.name] = tool
    return tool


def combine_verdicts(verdicts: Iterable[Optional[bool]]) -> Optional[bool]:
    """False if any tool failed, else None if any had no baseline, else True."""
    verdicts = list(verdicts)
    if any(v is False for v in verdicts):
        return False
    if any(v is None for v in verdicts):
        return None
    return True


class Comparison:
    """Runs every configured comparison tool on a screenshot, in order."""

    def __init__(self, session: Session, names: Iterable[str] | None = None):
        self.session = session
        names = list(session.config.compare if names is None else names)
        self.tools = [self._create_tool(name) for name in names]

    def _create_tool(self, name: str) -> ComparisonTool:
        tool = TOOLS.get(name)
        if tool is None:
            raise ConfigurationError(
                f"Unknown comparison tool '{name}'. Available: {', '.join(sorted(TOOLS))}"
            )
        return tool(self.session, self.session.config.comparison_for(name))

    def compare(self, title: str, image: bytes, options: dict[str, Any] | None = None) -> Optional[bool]:
        """Compare with every tool; the first exception stops the fan-out."""
        verdicts = []
        for tool in self.tools:
            verdicts.append(tool.compare(title, image, dict(options or {})))
        return combine_verdicts(verdicts)

    def setup(self) -> None:
        for tool in self.tools:
            tool.setup()

    def tear_down(self) -> None:
        for tool in self.tools:
            tool.tear_down()
