"""Recall measures for window proposals and their plotting scripts."""

from __future__ import annotations

import math
import random

import numpy as np

from .boxes import intersection_over_union

# Overlap at which a proposal counts as a detection.
THRESHOLD = 0.5

COLORS = (
    "'k'", "'b'", "'g'", "'r'", "'c'", "'m'", "'y'",
    "':k'", "':b'", "':g'", "':r'", "':c'", "':m'", "':y'",
    "'--k'", "'--b'", "'--g'", "'--r'", "'--c'", "'--m'", "'--y'",
)

SUMMARY_POINTS = (1, 10, 100, 1000, 2000, 3000, 4000, 5000)

_EMPTY_BOX = (0, 0, 0, 0)


def format_vector(name: str, values) -> str:
    """A script assignment ``name = [v1 v2 ... ];``."""
    return f"{name} = [" + "".join("%g " % v for v in values) + "];\n"


def _ratio(total: float, count: int) -> float:
    return total / count if count else math.nan


def per_image_recall(boxes, gts, num_win: int):
    """Mean detection rate and mean best overlap after each of ``num_win`` proposals.

    ``boxes[i]`` are the ranked proposals of image ``i`` and ``gts[i]`` its
    ground-truth boxes. Returns ``(recalls, avg_scores)``.
    """
    if not gts:
        raise ValueError("no images to evaluate")
    if len(boxes) < len(gts):
        raise ValueError("proposals are missing for some images")
    recalls = [0.0] * num_win
    avg_scores = [0.0] * num_win
    for img_boxes, img_gts in zip(boxes, gts):
        n = len(img_gts)
        best = [0.0] * n
        curve_r: list[float] = []
        curve_s: list[float] = []
        for box in list(img_boxes)[:num_win]:
            best = [max(s, intersection_over_union(box, gt)) for s, gt in zip(best, img_gts)]
            curve_r.append(_ratio(float(sum(s >= THRESHOLD for s in best)), n))
            curve_s.append(_ratio(float(sum(best)), n))
        pad = num_win - len(curve_r)
        curve_r += [curve_r[-1] if curve_r else _ratio(0.0, n)] * pad
        curve_s += [curve_s[-1] if curve_s else _ratio(0.0, n)] * pad
        recalls = [a + b for a, b in zip(recalls, curve_r)]
        avg_scores = [a + b for a, b in zip(avg_scores, curve_s)]
    num = len(gts)
    return [r / num for r in recalls], [s / num for s in avg_scores]


def recall_summary(recalls, scores, num_win: int) -> str:
    """One-line summary ``k:recall,score`` at the standard proposal counts."""
    return "".join(
        f"{k}:{recalls[k - 1]:.3f},{scores[k - 1]:.3f}\t"
        for k in SUMMARY_POINTS
        if k <= num_win
    )


def write_per_image_recall(path, recalls, scores, num_win: int) -> None:
    """Write a plotting script for the per-image recall curve."""
    text = (
        "figure(1);\n\n"
        + format_vector("DR", recalls)
        + format_vector("MABO", scores)
        + f"semilogx(1:{num_win}, DR(1:{num_win}));\nhold on;\n"
        + f"semilogx(1:{num_win}, DR(1:{num_win}));\naxis([1, 5000, 0, 1]);\nhold off;\n"
    )
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)


def _report_block(figure, per_class, gt_nums, class_names, suffix, ylabel, title, num_win):
    num_cls = len(class_names)
    sum_objs = sum(gt_nums)
    class_avg = np.zeros(num_win)
    objects = np.zeros(num_win)
    parts = [f"\nfigure({figure});\nhold on;\n"]
    legend = []
    for c, name in enumerate(class_names):
        val = per_class[c] / (gt_nums[c] + 1e-200)
        class_avg += val
        objects += per_class[c]
        parts.append(format_vector(name + suffix, val))
        parts.append(f"plot(WinNum, {name}{suffix}, {COLORS[c % len(COLORS)]}, 'linewidth', 2);\n")
        legend.append(f"'{name}'")
    class_avg /= num_cls
    objects /= sum_objs
    parts.append(format_vector("class" + suffix, class_avg))
    parts.append(f"plot(WinNum, class{suffix}, {COLORS[num_cls % len(COLORS)]}, 'linewidth', 2);\n")
    legend.append("'class'")
    parts.append(format_vector("objects" + suffix, objects))
    parts.append(f"plot(WinNum, objects{suffix}, {COLORS[(num_cls + 1) % len(COLORS)]}, 'linewidth', 2);\n")
    legend.append("'objects'")
    parts.append(
        "legend(" + ", ".join(legend) + ");"
        + f"\nhold off;\nxlabel('#WIN');\nylabel('{ylabel}');\ngrid on;\naxis([0 {num_win} 0 1]);\n"
    )
    parts.append(
        f"[class{suffix}([1,10,100,1000,2000]);objects{suffix}([1,10,100,1000,2000])]\ntitle('{title}')\n"
    )
    return "".join(parts)


def per_class_report(boxes, gts, cls_idx, class_names, num_win: int = 1000) -> str:
    """Plotting script of per-class detection recall and mean best overlap.

    Images with fewer than ``num_win`` proposals are padded with empty boxes.
    """
    if len(boxes) != len(gts) or len(cls_idx) != len(gts):
        raise ValueError("boxes, ground truth and class indexes must align")
    num_cls = len(class_names)
    cr_num = np.zeros((num_cls, num_win), dtype=np.int64)
    cr_iou = np.zeros((num_cls, num_win), dtype=np.float64)
    gt_nums = [0.0] * num_cls
    for img_boxes, img_gts, img_cls in zip(boxes, gts, cls_idx):
        padded = list(img_boxes)[:num_win]
        padded += [_EMPTY_BOX] * (num_win - len(padded))
        for gt, c in zip(img_gts, img_cls):
            gt_nums[c] += 1
            running = np.maximum.accumulate(
                np.array([intersection_over_union(b, gt) for b in padded], dtype=np.float64)
            )
            cr_num[c] += running >= THRESHOLD
            cr_iou[c] += running
    if sum(gt_nums) == 0:
        raise ValueError("no ground-truth objects to evaluate")

    header = format_vector("GtNum", gt_nums) + format_vector("WinNum", [float(i) for i in range(num_win)])
    recall = _report_block(1, cr_num.astype(np.float64), gt_nums, class_names, "DR", "Recall", "Detection Recall", num_win)
    mabo = _report_block(2, cr_iou, gt_nums, class_names, "MABO", "MABO", "MABO", num_win)
    return header + recall + mabo


def random_boxes(width: int, height: int, num: int = 10000, rng: random.Random | None = None):
    """``num`` uniformly random 1-based boxes inside a ``width`` x ``height`` image."""
    rng = rng or random.Random()
    result = []
    for _ in range(num):
        x1, x2 = rng.randrange(width) + 1, rng.randrange(width) + 1
        y1, y2 = rng.randrange(height) + 1, rng.randrange(height) + 1
        result.append((min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)))
    return result