"""Image buffer helpers: PNG decode/encode and canvas normalization."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image


@dataclass
class ImageBuffer:
    """Decoded RGBA raster, shape (height, width, 4), row-major uint8."""

    data: np.ndarray

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


def load_image(path: str | Path) -> ImageBuffer:
    """Decode a PNG (any mode) into an RGBA buffer."""
    with Image.open(path) as img:
        rgba = img.convert("RGBA")
        return ImageBuffer(np.array(rgba, dtype=np.uint8))


def save_image(buffer: ImageBuffer, path: str | Path) -> None:
    """Write an RGBA buffer losslessly as PNG, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(buffer.data).save(path, "PNG")


def normalize(image: ImageBuffer, width: int, height: int) -> ImageBuffer:
    """Place *image* at the top-left of a transparent-black canvas of the given size.

    Pixels outside the original extent stay (0, 0, 0, 0). Images that already
    have the target size are returned unchanged. No scaling or alignment is
    attempted; an image larger than the target is clipped.
    """
    if image.width == width and image.height == height:
        return image
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    copy_h = min(image.height, height)
    copy_w = min(image.width, width)
    canvas[:copy_h, :copy_w] = image.data[:copy_h, :copy_w]
    return ImageBuffer(canvas)
