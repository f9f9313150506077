"""Data structures for planning and capturing stitched screenshots."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class CaptureArea(BaseModel):
    """Rectangle to capture, in document (CSS) pixels."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


class Color(BaseModel):
    red: int = Field(default=0, ge=0, le=255)
    green: int = Field(default=0, ge=0, le=255)
    blue: int = Field(default=0, ge=0, le=255)
    alpha: int = Field(default=255, ge=0, le=255)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)


class BlockOut(BaseModel):
    """Document area painted over in the final screenshot."""
    x: int
    y: int
    width: int
    height: int
    color: Color = Field(default_factory=Color)


class ViewPortInfo(BaseModel):
    x: int = 0  # scroll offset at the time of init
    y: int = 0
    width: int
    height: int


class DocumentInfo(BaseModel):
    width: int
    height: int
    css_height: str = ""
    overflow: str = ""


class BodyTransform(BaseModel):
    property: str = "transform"
    value: str = ""


class InitData(BaseModel):
    """Browser state captured by ``screenshot.init`` before any mutation.

    Lives for exactly one screenshot call: it drives section planning and is
    handed back to ``screenshot.revert`` to restore the page.
    """
    viewport: ViewPortInfo
    document: DocumentInfo
    body_transform: BodyTransform = Field(default_factory=BodyTransform)

    def to_script_arg(self) -> dict:
        return self.model_dump()


class ViewPort(BaseModel):
    """One raw capture inside a section; offsets are relative to the section."""
    x: int
    y: int
    width: int
    height: int
    index: int  # global sequence number across all sections
    image: Optional[bytes] = Field(default=None, repr=False)
    image_taken: bool = Field(default=False, repr=False)

    def store_image(self, image: bytes) -> None:
        self.image = image
        self.image_taken = False

    def take_image(self) -> bytes:
        """Hand the raw buffer over to the caller and clear the slot."""
        if self.image_taken:
            raise RuntimeError(f"Image of viewport {self.index} was already consumed")
        if self.image is None:
            raise RuntimeError(f"Viewport {self.index} has not been captured")
        image, self.image = self.image, None
        self.image_taken = True
        return image


class Section(BaseModel):
    """Horizontal slice of the capture area, sized to the resolution budget."""
    x: int
    y: int
    width: int
    height: int
    shift: bool = False  # document height must be forced while capturing
    viewports: list[ViewPort] = Field(default_factory=list)


class ScreenshotOptions(BaseModel):
    # Browser-side scripts; each_fn receives the capture index as arguments[0]
    each_fn: Optional[str] = None
    complete_fn: Optional[str] = None
    wait_ms: Optional[int] = Field(default=None, ge=0)  # settle delay override
    block_outs: list[BlockOut] = Field(default_factory=list)
    # Comparison options: "id" plus tool parameters
    compare: dict[str, Any] = Field(default_factory=dict)
