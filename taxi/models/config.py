"""Configuration models for sessions, screenshots and comparisons."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

MODE_SYNC = "sync"
MODE_ASYNC = "async"


class PaddingConfig(BaseModel):
    """Pixels cut from each edge of every raw viewport capture.

    Used to exclude browser chrome that is rendered into the screenshot,
    e.g. the address bar of a mobile browser.
    """
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    def is_empty(self) -> bool:
        return not (self.top or self.right or self.bottom or self.left)


class ScreenshotConfig(BaseModel):
    # Pixel budget for one composited section; default is unbounded
    max_image_resolution: int = Field(default=sys.maxsize, gt=0)
    horizontal_padding: int = Field(default=0, ge=0)
    padding: Optional[PaddingConfig] = None  # None lets the capture policy decide
    wait_ms: int = Field(default=100, ge=0)


class ComparisonConfig(BaseModel):
    approved_path: Optional[str] = None
    build_path: Optional[str] = None
    diff_path: Optional[str] = None
    output_on_success: bool = True
    fail_on_difference: bool = True
    auto_approve: bool = False
    # Tool parameters, handed to the comparison tool untouched
    options: dict[str, Any] = Field(default_factory=dict)

    def resolved_approved_path(self) -> Path:
        return Path(self.approved_path) if self.approved_path else Path.cwd()

    def resolved_build_path(self) -> Path:
        return Path(self.build_path) if self.build_path else self.resolved_approved_path()

    def resolved_diff_path(self) -> Path:
        return Path(self.diff_path) if self.diff_path else self.resolved_build_path()


class TaxiConfig(BaseModel):
    mode: Literal["sync", "async"] = MODE_SYNC
    debug: bool = False

    screenshot: ScreenshotConfig = Field(default_factory=ScreenshotConfig)

    # Comparison tools to run, in order
    compare: list[str] = Field(default_factory=lambda: ["blinkDiff"])
    comparison: dict[str, ComparisonConfig] = Field(default_factory=dict)

    @field_validator("compare", mode="before")
    @classmethod
    def coerce_single_tool(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    def comparison_for(self, tool_name: str) -> ComparisonConfig:
        return self.comparison.get(tool_name) or ComparisonConfig()

    @classmethod
    def load(cls, path: str | Path) -> "TaxiConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
