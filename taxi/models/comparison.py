"""Comparison record and result data structures."""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path

from pydantic import BaseModel

from taxi.utils import filename_safe


class ResultCode(IntEnum):
    UNKNOWN = 0
    DIFFERENT = 1
    SIMILAR = 7
    IDENTICAL = 5


class ComparisonResult(BaseModel):
    code: ResultCode = ResultCode.UNKNOWN
    differences: int = 0
    dimension: int = 0  # number of compared pixels
    width: int = 0
    height: int = 0

    @property
    def passed(self) -> bool:
        return self.code in (ResultCode.SIMILAR, ResultCode.IDENTICAL)


class ComparisonRecord(BaseModel):
    """Identifies one comparison slot; stateless, recomputed on every call."""
    title: str
    id: int | str = 1

    def base_name(self) -> str:
        return f"{filename_safe(self.title)}_{self.id}"

    def image_path(self, root: Path, folder: str, suffix: str = "") -> Path:
        return root / folder / f"{self.base_name()}{suffix}.png"
