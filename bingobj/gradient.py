"""Colour conversions, resizing and gradient-magnitude maps for 8-bit images.

Images are numpy arrays of shape ``(H, W, 3)`` in BGR channel order.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np

from .scored import ScoredVec

_HSV_SHIFT = 12


class ColorSpace(IntEnum):
    """Colour space in which gradients are measured."""

    MAXBGR = 0
    HSV = 1
    G = 2

    @property
    def label(self) -> str:
        """Short name used in model and result file names."""
        return _LABELS[self]


_LABELS = {ColorSpace.MAXBGR: "MAXBGR", ColorSpace.HSV: "HSV", ColorSpace.G: "I"}


def _as_bgr(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError("expected an image of shape (H, W, 3)")
    return arr


def bgr_to_gray(image) -> np.ndarray:
    """Luma of a BGR image as uint8, in 14-bit fixed point."""
    img = _as_bgr(image).astype(np.int64)
    b, g, r = img[..., 0], img[..., 1], img[..., 2]
    gray = (b * 1868 + g * 9617 + r * 4899 + (1 << 13)) >> 14
    return gray.astype(np.uint8)


def _div_table(numerator: int, scale: float) -> np.ndarray:
    idx = np.arange(256, dtype=np.float64)
    table = np.zeros(256, dtype=np.int64)
    table[1:] = np.rint(numerator / (scale * idx[1:])).astype(np.int64)
    return table


_SDIV = _div_table(255 << _HSV_SHIFT, 1.0)
_HDIV = _div_table(180 << _HSV_SHIFT, 6.0)


def bgr_to_hsv(image) -> np.ndarray:
    """Convert BGR to 8-bit HSV with hue in 0..180."""
    img = _as_bgr(image).astype(np.int64)
    b, g, r = img[..., 0], img[..., 1], img[..., 2]
    v = np.maximum(np.maximum(b, g), r)
    diff = v - np.minimum(np.minimum(b, g), r)
    half = 1 << (_HSV_SHIFT - 1)
    s = (diff * _SDIV[v] + half) >> _HSV_SHIFT
    h = np.where(v == r, g - b, np.where(v == g, b - r + 2 * diff, r - g + 4 * diff))
    h = (h * _HDIV[diff] + half) >> _HSV_SHIFT
    h = np.where(h < 0, h + 180, h)
    return np.stack([h, s, v], axis=-1).astype(np.uint8)


def _linear_axis(src_len: int, dst_len: int):
    scale = src_len / dst_len
    pos = (np.arange(dst_len) + 0.5) * scale - 0.5
    i0 = np.floor(pos).astype(np.int64)
    frac = pos - i0
    low = i0 < 0
    i0[low] = 0
    frac[low] = 0.0
    high = i0 >= src_len - 1
    i0[high] = src_len - 1
    frac[high] = 0.0
    i1 = np.minimum(i0 + 1, src_len - 1)
    return i0, i1, frac


def resize_linear(image, width: int, height: int) -> np.ndarray:
    """Bilinear resize to ``width`` x ``height`` with pixel-centre alignment."""
    arr = np.asarray(image)
    if arr.ndim not in (2, 3):
        raise ValueError("image must have 2 or 3 dimensions")
    if width < 1 or height < 1:
        raise ValueError("target size must be positive")
    src_h, src_w = arr.shape[:2]
    if src_h < 1 or src_w < 1:
        raise ValueError("source image is empty")
    y0, y1, fy = _linear_axis(src_h, height)
    x0, x1, fx = _linear_axis(src_w, width)
    extra = (1,) * (arr.ndim - 2)
    fy = fy.reshape((-1, 1) + extra)
    fx = fx.reshape((1, -1) + extra)
    src = arr.astype(np.float64)
    top = src[y0][:, x0] * (1 - fx) + src[y0][:, x1] * fx
    bottom = src[y1][:, x0] * (1 - fx) + src[y1][:, x1] * fx
    out = top * (1 - fy) + bottom * fy
    if np.issubdtype(arr.dtype, np.integer):
        info = np.iinfo(arr.dtype)
        return np.clip(np.rint(out), info.min, info.max).astype(arr.dtype)
    return out.astype(arr.dtype)


def blur3(matrix) -> np.ndarray:
    """Normalised 3x3 box filter with mirrored (edge-excluded) borders."""
    arr = np.asarray(matrix)
    if arr.ndim not in (2, 3):
        raise ValueError("matrix must have 2 or 3 dimensions")
    h, w = arr.shape[:2]
    pad = [(1, 1), (1, 1)] + [(0, 0)] * (arr.ndim - 2)
    padded = np.pad(arr.astype(np.float64), pad, mode="reflect")
    acc = sum(padded[dy:dy + h, dx:dx + w] for dy in range(3) for dx in range(3)) / 9.0
    if np.issubdtype(arr.dtype, np.integer):
        info = np.iinfo(arr.dtype)
        return np.clip(np.rint(acc), info.min, info.max).astype(arr.dtype)
    return acc.astype(arr.dtype)


def gradient_xy(ix, iy) -> np.ndarray:
    """Combine x and y gradients as ``min(|x| + |y|, 255)`` in uint8."""
    total = np.asarray(ix, dtype=np.int64) + np.asarray(iy, dtype=np.int64)
    return np.minimum(total, 255).astype(np.uint8)


def _max_dist(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    return np.abs(u - v).max(axis=-1)


def _abs_dist(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    return np.abs(u - v)


def _sum_dist(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    return np.abs(u - v).sum(axis=-1)


def _gradient(img: np.ndarray, dist, border_scale: int, inner_div: int) -> np.ndarray:
    h, w = img.shape[:2]
    if h < 2 or w < 2:
        raise ValueError("image must be at least 2x2")
    img = img.astype(np.int32)
    ix = np.empty((h, w), dtype=np.int32)
    iy = np.empty((h, w), dtype=np.int32)
    ix[:, 0] = dist(img[:, 1], img[:, 0]) * border_scale
    ix[:, w - 1] = dist(img[:, w - 1], img[:, w - 2]) * border_scale
    iy[0, :] = dist(img[1, :], img[0, :]) * border_scale
    iy[h - 1, :] = dist(img[h - 1, :], img[h - 2, :]) * border_scale
    ix[:, 1:w - 1] = dist(img[:, : w - 2], img[:, 2:]) // inner_div
    iy[1:h - 1, :] = dist(img[: h - 2, :], img[2:, :]) // inner_div
    return gradient_xy(ix, iy)


def gradient_rgb(image) -> np.ndarray:
    """Gradient magnitude using the largest per-channel BGR difference."""
    return _gradient(_as_bgr(image), _max_dist, 2, 1)


def gradient_gray(image) -> np.ndarray:
    """Gradient magnitude of the grey-level image."""
    return _gradient(bgr_to_gray(image), _abs_dist, 2, 1)


def gradient_hsv(image) -> np.ndarray:
    """Gradient magnitude using summed HSV channel differences."""
    return _gradient(bgr_to_hsv(image), _sum_dist, 1, 2)


_GRADIENTS = {
    ColorSpace.MAXBGR: gradient_rgb,
    ColorSpace.HSV: gradient_hsv,
    ColorSpace.G: gradient_gray,
}


def gradient_mag(image, color_space) -> np.ndarray:
    """Gradient magnitude in the given colour space."""
    try:
        space = ColorSpace(color_space)
    except ValueError:
        raise ValueError(f"not recognized color space: {color_space!r}") from None
    return _GRADIENTS[space](image)


def non_max_suppression(cost, nss: int = 1, max_points: int = 50, fast: bool = True) -> ScoredVec:
    """Pick local maxima of a score map, best first.

    Each chosen point suppresses its ``(2 * nss + 1)``-square neighbourhood.
    With ``fast`` only points at least as large as their 3x3 mean are
    considered. Items are ``(x, y)`` tuples; selection stops once
    ``max_points`` have been taken.
    """
    arr = np.asarray(cost, dtype=np.float32)
    if arr.ndim != 2:
        raise ValueError("cost map must be two-dimensional")
    h, w = arr.shape
    flat = arr.ravel()
    positions = np.arange(flat.size)
    if fast:
        positions = positions[flat >= blur3(arr).ravel()]
    values = flat[positions]
    order = np.lexsort((positions, values))[::-1]

    suppressed = np.zeros((h, w), dtype=bool)
    result = ScoredVec()
    for k in order:
        y, x = divmod(int(positions[k]), w)
        if not suppressed[y, x]:
            result.push(float(values[k]), (x, y))
            suppressed[max(0, y - nss):y + nss + 1, max(0, x - nss):x + nss + 1] = True
        if len(result) >= max_points:
            break
    return result