"""Screenshot capture and down-scaling."""

import io
from dataclasses import dataclass

from PIL import Image

from ..browser.registry import Session
from ..constants import MAX_SCREENSHOT_DIMENSION
from ..errors import InvalidArgument
from .elements import interaction_errors


MIN_SCREENSHOT_DIMENSION = 50


@dataclass
class Screenshot:
    png: bytes
    width: int
    height: int
    original_width: int
    original_height: int

    @property
    def resized(self) -> bool:
        return (self.width, self.height) != (self.original_width, self.original_height)


def fit_png(png_bytes: bytes, max_dimension: int = MAX_SCREENSHOT_DIMENSION) -> Screenshot:
    """
    Shrink a PNG so its longest side is at most `max_dimension`, keeping the
    aspect ratio. Images that already fit are returned untouched.
    """
    if max_dimension < MIN_SCREENSHOT_DIMENSION:
        raise InvalidArgument(f"max_dimension must be at least {MIN_SCREENSHOT_DIMENSION} pixels")

    img = Image.open(io.BytesIO(png_bytes))
    original_size = img.size
    if max(original_size) <= max_dimension:
        return Screenshot(png_bytes, *original_size, *original_size)

    img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG", optimize=True)
    return Screenshot(buffer.getvalue(), img.width, img.height, *original_size)


async def take_screenshot(
    session: Session,
    full_page: bool = False,
    max_dimension: int = MAX_SCREENSHOT_DIMENSION,
) -> Screenshot:
    with interaction_errors():
        raw = await session.page.screenshot(full_page=full_page, type="png")
    return fit_png(raw, max_dimension)


__all__ = [
    "Screenshot",
    "fit_png",
    "take_screenshot",
]
