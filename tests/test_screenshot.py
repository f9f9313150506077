"""End-to-end tests for the screenshot pipeline against a fake browser."""

import pytest

from taxi.exceptions import ConfigurationError, InvalidAreaError
from taxi.helpers.screenshot import Screenshot
from taxi.models.capture import BlockOut, ScreenshotOptions
from taxi.models.config import ScreenshotConfig

from conftest import FakeBrowser, as_rgb, same_pixels


class TestDocumentScreenshot:
    """Tests for whole-document captures."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ratio", [1, 2])
    async def test_stitched_document_matches_page(self, make_session, ratio):
        browser = FakeBrowser(ratio=ratio)
        session = make_session(browser)

        image = as_rgb(await Screenshot(session).document_screenshot())

        assert image.size == (250 * ratio, 400 * ratio)
        assert same_pixels(image, browser.expected())

    @pytest.mark.asyncio
    async def test_full_page_document_matches_page(self, full_page_browser, make_session):
        session = make_session(full_page_browser)

        image = as_rgb(await Screenshot(session).document_screenshot())

        assert same_pixels(image, full_page_browser.expected())
        # DPR, stitching detection and a single capture
        assert full_page_browser.screenshot_count == 3

    @pytest.mark.asyncio
    async def test_sections_respect_resolution_budget(self, make_session, taxi_config):
        taxi_config.screenshot.max_image_resolution = 250 * 100
        browser = FakeBrowser(viewport_only=False)
        session = make_session(browser, config=taxi_config)

        image = as_rgb(await Screenshot(session).document_screenshot())

        assert same_pixels(image, browser.expected())
        assert browser.screenshot_count == 2 + 4

    @pytest.mark.asyncio
    async def test_budget_below_document_width_fails_before_capture(self, make_session, taxi_config):
        taxi_config.screenshot.max_image_resolution = 100
        browser = FakeBrowser()
        session = make_session(browser, config=taxi_config)

        with pytest.raises(ConfigurationError):
            await Screenshot(session).document_screenshot()

        assert "screenshot.init" not in browser.calls

    @pytest.mark.asyncio
    async def test_padding_strip_is_excluded(self, make_session, padded_config):
        browser = FakeBrowser(address_bar=20)
        session = make_session(browser, config=padded_config)

        image = as_rgb(await Screenshot(session).document_screenshot())

        assert same_pixels(image, browser.expected())

    @pytest.mark.asyncio
    async def test_iphone_address_bar_is_excluded_by_default(self, make_session):
        browser = FakeBrowser(viewport_size=(100, 150), address_bar=64)
        session = make_session(browser, capabilities={"deviceName": "iPhone 6", "platformName": "iOS"})

        image = as_rgb(await Screenshot(session).document_screenshot())

        assert same_pixels(image, browser.expected())

    @pytest.mark.asyncio
    async def test_hooks_run_for_every_capture(self, session, fake_browser):
        options = ScreenshotOptions(each_fn="step(arguments[0]);", complete_fn="done();")

        await Screenshot(session).document_screenshot(options)

        assert len(fake_browser.hook_calls) == 3 * 5 + 1
        assert fake_browser.hook_calls[-1][0] == "done();"

    @pytest.mark.asyncio
    async def test_block_outs_are_painted(self, session, fake_browser):
        options = ScreenshotOptions(block_outs=[BlockOut(x=10, y=10, width=20, height=20)])

        image = as_rgb(await Screenshot(session).document_screenshot(options))

        assert image.getpixel((15, 15)) == (0, 0, 0)
        assert image.getpixel((40, 40)) == fake_browser.document.getpixel((40, 40))


class TestAreaScreenshots:
    """Tests for viewport and area captures."""

    @pytest.mark.asyncio
    async def test_viewport_screenshot(self, session, fake_browser):
        image = as_rgb(await Screenshot(session).viewport_screenshot())

        assert same_pixels(image, fake_browser.expected(0, 0, 100, 80))

    @pytest.mark.asyncio
    async def test_area_screenshot(self, session, fake_browser):
        image = as_rgb(await Screenshot(session).area_screenshot(30, 45, 170, 211))

        assert same_pixels(image, fake_browser.expected(30, 45, 170, 211))

    @pytest.mark.asyncio
    async def test_area_is_clamped_to_document(self, session, fake_browser):
        image = as_rgb(await Screenshot(session).area_screenshot(200, 350, 100, 100))

        assert image.size == (50, 50)
        assert same_pixels(image, fake_browser.expected(200, 350, 50, 50))

    @pytest.mark.asyncio
    async def test_negative_size_rejected_without_browser_calls(self, session, fake_browser):
        with pytest.raises(InvalidAreaError):
            await Screenshot(session).area_screenshot(0, 0, -1, 10)

        assert fake_browser.calls == []

    @pytest.mark.asyncio
    async def test_empty_area_rejected_before_page_is_touched(self, session, fake_browser):
        with pytest.raises(InvalidAreaError):
            await Screenshot(session).area_screenshot(0, 0, 0, 10)

        assert "screenshot.init" not in fake_browser.calls


class TestRevert:
    """Tests for restoring the page after a capture."""

    @pytest.mark.asyncio
    async def test_document_reverted_after_success(self, session, fake_browser):
        await Screenshot(session).document_screenshot()

        assert fake_browser.calls[-1] == "screenshot.revert"
        assert fake_browser.offset == (0, 0)

    @pytest.mark.asyncio
    async def test_document_reverted_when_capture_fails(self, session, fake_browser):
        fake_browser.fail_on_screenshot = 4

        with pytest.raises(RuntimeError, match="browser went away"):
            await Screenshot(session).document_screenshot()

        assert fake_browser.calls[-1] == "screenshot.revert"
        assert fake_browser.offset == (0, 0)

    @pytest.mark.asyncio
    async def test_measurements_reused_across_screenshots(self, session, fake_browser):
        await Screenshot(session).viewport_screenshot()
        await Screenshot(session).viewport_screenshot()

        assert fake_browser.calls.count("devicePixelRatio.init") == 1
        assert fake_browser.calls.count("stitching.init") == 1


class TestSaveScreenshot:
    """Tests for writing screenshots to disk."""

    @pytest.mark.asyncio
    async def test_writes_png(self, session, fake_browser, tmp_path):
        path = await Screenshot(session).save_screenshot(tmp_path / "out" / "page.png")

        assert path.exists()
        assert same_pixels(as_rgb(path.read_bytes()), fake_browser.expected())


class TestScreenshotConfig:
    """Tests for screenshot configuration defaults."""

    def test_defaults(self):
        config = ScreenshotConfig()
        assert config.wait_ms == 100
        assert config.padding is None
        assert config.horizontal_padding == 0
