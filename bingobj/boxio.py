"""Reading and writing text files of proposal boxes."""

from __future__ import annotations

import random

from .boxes import format_box
from .scored import ScoredVec

Box = tuple[int, int, int, int]

# Number of proposals stored per image in the PAMI12 result files.
PAMI12_NUM_DET = 1853


def write_box_file(path, scored: ScoredVec) -> None:
    """Write the count, then one ``score, x1, y1, x2, y2`` line per entry in current order."""
    lines = ["%d\n" % len(scored)]
    lines.extend("%g, %s\n" % (value, format_box(box)) for value, box in scored)
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.writelines(lines)


def _read_tokens(path) -> list[str]:
    with open(path, encoding="utf-8") as fh:
        return fh.read().split()


def _records(tokens: list[str], start: int, count: int, width: int, path) -> list[list[str]]:
    needed = start + count * width
    if count < 0 or len(tokens) < needed:
        raise ValueError(f"expected {count} records in {path}")
    return [tokens[start + k * width:start + (k + 1) * width] for k in range(count)]


def _read_count(tokens: list[str], path) -> int:
    if not tokens:
        raise ValueError(f"missing box count in {path}")
    return int(tokens[0])


def load_pami12_boxes(path) -> list[Box]:
    """Read the fixed number of ``x1 y1 x2 y2 score`` records of a PAMI12 file."""
    tokens = _read_tokens(path)
    boxes = []
    for rec in _records(tokens, 0, PAMI12_NUM_DET, 5, path):
        float(rec[4])
        boxes.append((int(rec[0]), int(rec[1]), int(rec[2]), int(rec[3])))
    return boxes


def load_ijcv13_boxes(path, rng: random.Random | None = None) -> list[Box]:
    """Read a count and ``y1 x1 y2 x2`` records, returned in shuffled order."""
    rng = rng or random.Random()
    tokens = _read_tokens(path)
    count = _read_count(tokens, path)
    boxes = [
        (int(rec[1]), int(rec[0]), int(rec[3]), int(rec[2]))
        for rec in _records(tokens, 1, count, 4, path)
    ]
    rng.shuffle(boxes)
    return boxes


def load_eccv14_boxes(path) -> list[Box]:
    """Read a count and ``x y w h score`` records as inclusive corner boxes."""
    tokens = _read_tokens(path)
    count = _read_count(tokens, path)
    boxes = []
    for rec in _records(tokens, 1, count, 5, path):
        x, y, w, h = (int(v) for v in rec[:4])
        float(rec[4])
        boxes.append((x, y, x + w - 1, y + h - 1))
    return boxes