"""Pytest configuration and shared fixtures."""

import io
import json
from pathlib import Path
from typing import Any

import pytest
from PIL import Image, ImageDraw

from taxi.models.config import ComparisonConfig, PaddingConfig, ScreenshotConfig, TaxiConfig
from taxi.scripts import (
    DEVICE_PIXEL_RATIO_INIT,
    DEVICE_PIXEL_RATIO_REVERT,
    DOCUMENT_OFFSET,
    SCREENSHOT_INIT,
    SCREENSHOT_REVERT,
    STITCHING_INIT,
    STITCHING_REVERT,
    WINDOW_INFO,
)
from taxi.session import Session

ADDRESS_BAR_COLOR = (128, 128, 128)


# ============================================================================
# Fake Browser
# ============================================================================


def render_document(width: int, height: int) -> Image.Image:
    """Render a document whose every pixel encodes its own position."""
    data = bytearray()
    for y in range(height):
        for x in range(width):
            data += bytes((x % 256, y % 256, (x // 256 + (y // 256) * 16) % 256))
    return Image.frombytes("RGB", (width, height), bytes(data))


class FakeBrowser:
    """Blocking gateway emulating a page, rendered with Pillow.

    Sizes are in CSS pixels; the rendered document and every screenshot are
    in device pixels. ``viewport_only`` makes screenshots return just the
    visible viewport (as chrome does) instead of the whole document.
    """

    def __init__(
        self,
        document_size: tuple[int, int] = (250, 400),
        viewport_size: tuple[int, int] = (100, 80),
        ratio: float = 1,
        reported_ratio: float | None = None,
        viewport_only: bool = True,
        address_bar: int = 0,
    ):
        self.document_width, self.document_height = document_size
        self.viewport_width, self.viewport_height = viewport_size
        self.ratio = ratio
        self.reported_ratio = ratio if reported_ratio is None else reported_ratio
        self.viewport_only = viewport_only
        self.address_bar = address_bar

        self.document = render_document(self._px(self.document_width), self._px(self.document_height))
        self.state = "page"
        self.offset = (0, 0)
        self.forced_height: int | None = None
        self.horizontal_padding = 0

        self.calls: list[str] = []
        self.hook_calls: list[tuple[str, list]] = []
        self.screenshot_count = 0
        self.fail_on_screenshot: int | None = None

    def _px(self, value: float) -> int:
        return int(round(value * self.ratio))

    def expected(self, x: int = 0, y: int = 0, width: int | None = None, height: int | None = None) -> Image.Image:
        """The part of the rendered document a capture of this area must show."""
        width = self.document_width if width is None else width
        height = self.document_height if height is None else height
        return self.document.crop((self._px(x), self._px(y), self._px(x + width), self._px(y + height)))

    # --- gateway ------------------------------------------------------------

    def execute(self, script: str, args: list[Any] | None = None) -> Any:
        args = args or []
        if script == SCREENSHOT_INIT.source:
            self.calls.append(SCREENSHOT_INIT.name)
            return json.dumps(self._init_data())
        if script == SCREENSHOT_REVERT.source:
            self.calls.append(SCREENSHOT_REVERT.name)
            self.offset = (0, 0)
            self.forced_height = None
            return None
        if script == DOCUMENT_OFFSET.source:
            self.calls.append(DOCUMENT_OFFSET.name)
            x, y, height, init_data = args
            self.offset = (x - init_data["viewport"]["x"], y - init_data["viewport"]["y"])
            if height:
                self.forced_height = height
            return None
        if script == DEVICE_PIXEL_RATIO_INIT.source:
            self.calls.append(DEVICE_PIXEL_RATIO_INIT.name)
            self.state = "device_pixel_ratio"
            return json.dumps({
                "body": {}, "root": {},
                "device_pixel_ratio": self.reported_ratio,
                "viewport_width": self.viewport_width,
                "document_width": self.viewport_width,
            })
        if script == STITCHING_INIT.source:
            self.calls.append(STITCHING_INIT.name)
            self.state = "stitching"
            self.horizontal_padding = args[0] if args else 0
            return json.dumps({"body": {}, "viewport_width": self.viewport_width})
        if script in (DEVICE_PIXEL_RATIO_REVERT.source, STITCHING_REVERT.source):
            self.calls.append("styles.revert")
            self.state = "page"
            return None
        if script == WINDOW_INFO.source:
            self.calls.append(WINDOW_INFO.name)
            data = self._init_data()
            return json.dumps({"document": data["document"], "viewport": data["viewport"]})

        self.calls.append("hook")
        self.hook_calls.append((script, list(args)))
        return None

    def take_raw_screenshot(self) -> bytes:
        self.screenshot_count += 1
        if self.fail_on_screenshot == self.screenshot_count:
            raise RuntimeError("browser went away")

        if self.state == "device_pixel_ratio":
            # Document shrunk to a single row as wide as the viewport
            height = self.viewport_height if self.viewport_only else 1
            image = Image.new("RGB", (self._px(self.viewport_width), self._px(height)), "white")
        elif self.state == "stitching":
            width = self.viewport_width if self.viewport_only else self.viewport_width * 2 - self.horizontal_padding
            height = self.viewport_height if self.viewport_only else 1
            image = Image.new("RGB", (self._px(width), self._px(height)), "white")
        else:
            image = self._page_screenshot()
        return _encode(image)

    def _page_screenshot(self) -> Image.Image:
        x, y = self.offset
        if self.viewport_only:
            width, height = self.viewport_width, self.viewport_height
        else:
            width = self.document_width
            height = self.forced_height or self.document_height
        image = self.document.crop((self._px(x), self._px(y), self._px(x + width), self._px(y + height)))
        if self.address_bar:
            draw = ImageDraw.Draw(image)
            draw.rectangle((0, 0, image.width - 1, self._px(self.address_bar) - 1), fill=ADDRESS_BAR_COLOR)
        return image

    def _init_data(self) -> dict:
        return {
            "viewport": {"x": 0, "y": 0, "width": self.viewport_width, "height": self.viewport_height},
            "document": {
                "width": self.document_width, "height": self.document_height,
                "css_height": "", "overflow": "",
            },
            "body_transform": {"property": "transform", "value": ""},
        }


def _encode(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


# ============================================================================
# Helper Functions
# ============================================================================


def png_bytes(size: tuple[int, int] = (40, 30), color=(255, 255, 255)) -> bytes:
    """Create a solid PNG image."""
    return _encode(Image.new("RGB", size, color))


def as_rgb(buffer: bytes) -> Image.Image:
    with Image.open(io.BytesIO(buffer)) as image:
        return image.convert("RGB")


def same_pixels(a: Image.Image, b: Image.Image) -> bool:
    return a.size == b.size and a.convert("RGB").tobytes() == b.convert("RGB").tobytes()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def screenshot_config() -> ScreenshotConfig:
    """Create a screenshot configuration without settle delay."""
    return ScreenshotConfig(wait_ms=0)


@pytest.fixture
def taxi_config(screenshot_config: ScreenshotConfig, tmp_path: Path) -> TaxiConfig:
    """Create a test configuration writing comparison artifacts to tmp_path."""
    return TaxiConfig(
        screenshot=screenshot_config,
        comparison={
            "blinkDiff": ComparisonConfig(
                approved_path=str(tmp_path / "approved"),
                build_path=str(tmp_path / "build"),
                diff_path=str(tmp_path / "diff"),
            ),
        },
    )


@pytest.fixture
def capabilities() -> dict:
    """Create selenium-style capabilities."""
    return {"browserName": "chrome", "browserVersion": "41.0", "platformName": "Windows 8.1"}


# ============================================================================
# Browser and Session Fixtures
# ============================================================================


@pytest.fixture
def fake_browser() -> FakeBrowser:
    """Create a browser returning viewport-only screenshots."""
    return FakeBrowser()


@pytest.fixture
def full_page_browser() -> FakeBrowser:
    """Create a browser returning whole-document screenshots."""
    return FakeBrowser(viewport_only=False)


@pytest.fixture
def make_session(taxi_config: TaxiConfig, capabilities: dict):
    """Factory for sessions around a fake browser."""

    def _make(browser: FakeBrowser, mode: str = "async", **kwargs) -> Session:
        kwargs.setdefault("config", taxi_config)
        kwargs.setdefault("capabilities", capabilities)
        return Session(browser, mode=mode, **kwargs)

    return _make


@pytest.fixture
def session(fake_browser: FakeBrowser, make_session) -> Session:
    """Create an async session on the viewport-only browser."""
    return make_session(fake_browser)


@pytest.fixture
def padded_config(taxi_config: TaxiConfig) -> TaxiConfig:
    """Configuration cutting a 20px strip from the top of every capture."""
    return taxi_config.model_copy(update={
        "screenshot": ScreenshotConfig(wait_ms=0, padding=PaddingConfig(top=20)),
    })
