"""Bounding-box helpers: overlap measures, formatting and small lookups.

A box is a 4-sequence of integers ``(min_x, min_y, max_x, max_y)``. Both
corners are inclusive and coordinates start at 1, as in VOC annotations.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

Box = Sequence[int]

_XML_KEEP = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 ."
)


def intersection_over_union(box: Box, gt: Box) -> float:
    """Return the intersection-over-union of two inclusive boxes."""
    ix0 = max(box[0], gt[0])
    iy0 = max(box[1], gt[1])
    ix1 = min(box[2], gt[2])
    iy1 = min(box[3], gt[3])
    iw = float(ix1 - ix0 + 1)
    ih = float(iy1 - iy0 + 1)
    if iw <= 0 or ih <= 0:
        return 0.0
    area_box = (box[2] - box[0] + 1) * (box[3] - box[1] + 1)
    area_gt = (gt[2] - gt[0] + 1) * (gt[3] - gt[1] + 1)
    union = area_box + area_gt - iw * ih
    return iw * ih / union


def max_intersection_over_union(box: Box, gts: Iterable[Box]) -> float:
    """Return the best overlap of ``box`` with any of ``gts`` (0 if none)."""
    return max((intersection_over_union(box, gt) for gt in gts), default=0.0)


def format_box(box: Box) -> str:
    """Render a box as ``"x1, y1, x2, y2"``."""
    return "%d, %d, %d, %d" % tuple(box[:4])


def keep_xml_chars(text: str) -> str:
    """Keep only ASCII letters, digits, spaces and dots."""
    return "".join(c for c in text if c in _XML_KEEP)


def find_index(item: Any, items: Sequence[Any]) -> int:
    """Return the position of ``item`` in ``items``, or -1 if absent."""
    try:
        return list(items).index(item)
    except ValueError:
        return -1