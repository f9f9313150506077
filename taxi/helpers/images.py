"""PNG buffer decoding and encoding with Pillow."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from taxi.exceptions import ImageDecodeError


def decode_image(buffer: bytes) -> Image.Image:
    """Fully decode an encoded image buffer."""
    try:
        image = Image.open(io.BytesIO(buffer))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Cannot decode image buffer ({len(buffer)} bytes): {e}") from e
    return image


def image_size(buffer: bytes) -> tuple[int, int]:
    """Read the pixel size from the image header without decoding pixels."""
    try:
        with Image.open(io.BytesIO(buffer)) as image:
            return image.size
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Cannot read image size ({len(buffer)} bytes): {e}") from e


def encode_png(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()
