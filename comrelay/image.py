"""Decode an uploaded image and re-encode it in three widths."""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Union

from PIL import Image


class ImageFormat(str, Enum):
    """Image formats by their short name."""

    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"


@dataclass
class SizedImages:
    """Encoded images at the big, medium and small widths."""

    big: bytes
    medium: bytes
    small: bytes


BIG_WIDTH = 512
MEDIUM_WIDTH = 256
SMALL_WIDTH = 128


def resize_image(img: Image.Image, width: int) -> Image.Image:
    """Scale ``img`` to ``width`` keeping its aspect ratio, as RGBA."""
    src_width, src_height = img.size
    height = int(width * (src_height / src_width))
    if width <= 0 or height <= 0:
        return Image.new("RGBA", (max(width, 0), max(height, 0)))
    return img.convert("RGBA").resize((width, height), Image.BILINEAR)


def image_to_bytes(img: Image.Image, fmt: Union[ImageFormat, str]) -> bytes:
    """Encode ``img`` in the given format."""
    name = fmt.value if isinstance(fmt, ImageFormat) else str(fmt)
    buf = io.BytesIO()
    if name in (ImageFormat.JPG.value, ImageFormat.JPEG.value):
        img.convert("RGB").save(buf, format="JPEG", quality=75)
    elif name == ImageFormat.PNG.value:
        img.save(buf, format="PNG")
    elif name == ImageFormat.GIF.value:
        img.convert("RGB").save(buf, format="GIF")
    else:
        raise ValueError(f"unsupported image format: {name}")
    return buf.getvalue()


def parse_image(file: Union[BinaryIO, bytes]) -> SizedImages:
    """Decode an image and return it re-encoded at the three standard widths."""
    stream = io.BytesIO(file) if isinstance(file, (bytes, bytearray)) else file
    with Image.open(stream) as img:
        img.load()
        fmt = (img.format or "").lower()
        return SizedImages(
            big=image_to_bytes(resize_image(img, BIG_WIDTH), fmt),
            medium=image_to_bytes(resize_image(img, MEDIUM_WIDTH), fmt),
            small=image_to_bytes(resize_image(img, SMALL_WIDTH), fmt),
        )