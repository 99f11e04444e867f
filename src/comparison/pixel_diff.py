"""Perceptual pixel diff — YIQ color distance with anti-aliasing detection.

Two same-sized RGBA buffers are compared pixel by pixel. Colors are composited
over white, converted to YIQ and compared with a weighted squared distance; a
pixel differs when that distance exceeds ``MAX_YIQ_DELTA * threshold**2``.
Differing pixels that look like anti-aliasing in either image (a 3x3
neighbourhood that has both a darker and a lighter neighbour, each sitting in a
flat region) are painted in ``aa_color`` and left out of the count unless
``include_aa`` is set.

All work is vectorized with numpy; rows are processed in bands so full-page
screenshots do not need several full-size float copies at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .image_ops import ImageBuffer

# Largest possible YIQ distance between two colors
MAX_YIQ_DELTA = 35215

# (dx, dy) neighbour offsets in column-major scan order; argmin/argmax ties
# resolve to the first entry, so this order decides which extreme is checked
_NEIGHBOURS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]
_OFFSETS = np.array(_NEIGHBOURS, dtype=np.int64)

_BAND_ROWS = 512
_CHUNK = 1 << 18

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class DiffOptions:
    threshold: float = 0.1  # 0..1, smaller is stricter
    include_aa: bool = False
    alpha: float = 0.3  # opacity of the faded original in the diff image
    aa_color: RGB = (255, 255, 0)
    diff_color: RGB = (255, 0, 0)  # current lighter than baseline
    diff_color_alt: Optional[RGB] = (0, 255, 0)  # current darker than baseline


def _bands(height: int):
    for top in range(0, height, _BAND_ROWS):
        yield slice(top, min(top + _BAND_ROWS, height))


def _blend_white(rgba: np.ndarray) -> np.ndarray:
    data = rgba.astype(np.float64)
    alpha = data[..., 3:4] / 255.0
    return 255.0 + (data[..., :3] - 255.0) * alpha


def _rgb2y(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def _rgb2i(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.59597799 - rgb[..., 1] * 0.27417610 - rgb[..., 2] * 0.32180189


def _rgb2q(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.21147017 - rgb[..., 1] * 0.52261711 + rgb[..., 2] * 0.31114694


def color_delta(rgba1: np.ndarray, rgba2: np.ndarray) -> np.ndarray:
    """Signed YIQ distance per pixel; negative where the first image is lighter."""
    rgb1 = _blend_white(rgba1)
    rgb2 = _blend_white(rgba2)
    y1 = _rgb2y(rgb1)
    y2 = _rgb2y(rgb2)
    y = y1 - y2
    i = _rgb2i(rgb1) - _rgb2i(rgb2)
    q = _rgb2q(rgb1) - _rgb2q(rgb2)
    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q
    return np.where(y1 > y2, -delta, delta)


def _brightness_map(rgba: np.ndarray) -> np.ndarray:
    out = np.empty(rgba.shape[:2], dtype=np.float64)
    for rows in _bands(rgba.shape[0]):
        out[rows] = _rgb2y(_blend_white(rgba[rows]))
    return out


def _faded_background(rgba: np.ndarray, alpha: float) -> np.ndarray:
    """Grayscale copy of *rgba* faded toward white, fully opaque."""
    out = np.empty_like(rgba)
    out[..., 3] = 255
    for rows in _bands(rgba.shape[0]):
        data = rgba[rows].astype(np.float64)
        y = _rgb2y(data[..., :3])
        val = 255.0 + (y - 255.0) * (alpha * data[..., 3] / 255.0)
        out[rows, :, :3] = np.clip(val, 0, 255).astype(np.uint8)[..., None]
    return out


def _edge_mask(height: int, width: int) -> np.ndarray:
    mask = np.zeros((height, width), dtype=bool)
    mask[0, :] = mask[-1, :] = True
    mask[:, 0] = mask[:, -1] = True
    return mask


def _shifted(height: int, width: int, dx: int, dy: int):
    """Slices of the centre region and its in-bounds neighbour at (dx, dy)."""
    centre = (slice(max(0, -dy), height - max(0, dy)), slice(max(0, -dx), width - max(0, dx)))
    neighbour = (slice(max(0, dy), height + min(0, dy)), slice(max(0, dx), width + min(0, dx)))
    return centre, neighbour


def _many_siblings(rgba: np.ndarray) -> np.ndarray:
    """True where a pixel has more than two identical neighbours (image border counts as one)."""
    height, width = rgba.shape[:2]
    packed = np.ascontiguousarray(rgba).view(np.uint32)[..., 0]
    count = _edge_mask(height, width).astype(np.int8)
    for dx, dy in _NEIGHBOURS:
        centre, neighbour = _shifted(height, width, dx, dy)
        count[centre] += packed[centre] == packed[neighbour]
    return count > 2


def _antialiased(
    ys: np.ndarray,
    xs: np.ndarray,
    brightness: np.ndarray,
    siblings: np.ndarray,
    other_siblings: np.ndarray,
) -> np.ndarray:
    """Anti-aliasing test for the pixels at (ys, xs) of one image."""
    height, width = brightness.shape
    result = np.zeros(len(ys), dtype=bool)

    for start in range(0, len(ys), _CHUNK):
        cy = ys[start:start + _CHUNK]
        cx = xs[start:start + _CHUNK]
        centre = brightness[cy, cx]
        zeroes = ((cx == 0) | (cx == width - 1) | (cy == 0) | (cy == height - 1)).astype(np.int64)

        deltas = np.empty((len(_NEIGHBOURS), len(cy)), dtype=np.float64)
        valid = np.empty(deltas.shape, dtype=bool)
        for k, (dx, dy) in enumerate(_NEIGHBOURS):
            ny = cy + dy
            nx = cx + dx
            valid[k] = (ny >= 0) & (ny < height) & (nx >= 0) & (nx < width)
            deltas[k] = centre - brightness[np.clip(ny, 0, height - 1), np.clip(nx, 0, width - 1)]

        zeroes += np.count_nonzero(valid & (deltas == 0), axis=0)
        low = np.where(valid, deltas, np.inf)
        high = np.where(valid, deltas, -np.inf)
        min_k = np.argmin(low, axis=0)
        max_k = np.argmax(high, axis=0)
        idx = np.arange(len(cy))

        # a flat or one-sided neighbourhood is never anti-aliasing
        possible = (zeroes <= 2) & (low[min_k, idx] < 0) & (high[max_k, idx] > 0)

        min_y = np.clip(cy + _OFFSETS[min_k, 1], 0, height - 1)
        min_x = np.clip(cx + _OFFSETS[min_k, 0], 0, width - 1)
        max_y = np.clip(cy + _OFFSETS[max_k, 1], 0, height - 1)
        max_x = np.clip(cx + _OFFSETS[max_k, 0], 0, width - 1)
        darkest_flat = siblings[min_y, min_x] & other_siblings[min_y, min_x]
        lightest_flat = siblings[max_y, max_x] & other_siblings[max_y, max_x]

        result[start:start + _CHUNK] = possible & (darkest_flat | lightest_flat)

    return result


def pixel_diff(
    baseline: ImageBuffer,
    current: ImageBuffer,
    options: DiffOptions | None = None,
) -> tuple[int, ImageBuffer]:
    """Compare two same-sized buffers.

    Returns:
        (number of differing pixels, diff image of the same size)
    """
    options = options or DiffOptions()
    if baseline.size != current.size:
        raise ValueError(
            f"Image sizes do not match: {baseline.width}x{baseline.height} "
            f"vs {current.width}x{current.height}"
        )

    a = baseline.data
    b = current.data
    output = _faded_background(a, options.alpha)

    if np.array_equal(a, b):
        return 0, ImageBuffer(output)

    max_delta = MAX_YIQ_DELTA * options.threshold * options.threshold
    delta = np.empty(a.shape[:2], dtype=np.float64)
    for rows in _bands(a.shape[0]):
        delta[rows] = color_delta(a[rows], b[rows])

    ys, xs = np.nonzero(np.abs(delta) > max_delta)

    if not options.include_aa and len(ys):
        siblings_a = _many_siblings(a)
        siblings_b = _many_siblings(b)
        aa = _antialiased(ys, xs, _brightness_map(a), siblings_a, siblings_b)
        aa |= _antialiased(ys, xs, _brightness_map(b), siblings_b, siblings_a)
        output[ys[aa], xs[aa], :3] = options.aa_color
        ys, xs = ys[~aa], xs[~aa]

    darker = delta[ys, xs] < 0
    output[ys, xs, :3] = options.diff_color
    if options.diff_color_alt is not None:
        output[ys[darker], xs[darker], :3] = options.diff_color_alt

    return int(len(ys)), ImageBuffer(output)
