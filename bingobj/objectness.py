"""Objectness proposals from binarised normed gradients.

A trained model consists of three matrix files sharing one base name:
``.wS1`` holds the W x W stage-one filter, ``.idx`` the active size
indexes and ``.wS2`` one (scale, offset) row per active size.
"""

from __future__ import annotations

import math
import random

import numpy as np
from PIL import Image

from .boxes import intersection_over_union, max_intersection_over_union
from .evaluation import THRESHOLD
from .filter_bing import FilterBING
from .gradient import ColorSpace, gradient_mag, non_max_suppression, resize_linear
from .matfile import MatFormatError, mat_read, mat_write
from .scored import ScoredVec

Box = tuple[int, int, int, int]

NUM_NEG_BOX = 100
MIN_POSITIVES_PER_SIZE = 50


def read_image(path) -> np.ndarray:
    """Load an image file as a uint8 array of shape ``(H, W, 3)`` in BGR order."""
    with Image.open(path) as img:
        rgb = np.asarray(img.convert("RGB"), dtype=np.uint8)
    return np.ascontiguousarray(rgb[..., ::-1])


class Objectness:
    """Proposes object windows using a two-stage linear model over gradients."""

    def __init__(self, voc, base: float = 2.0, w: int = 8, nss: int = 2) -> None:
        self.voc = voc
        self.base = float(base)
        self.w = int(w)
        self.nss = int(nss)
        self._log_base = math.log(self.base)
        self.min_t = math.ceil(math.log(10.0) / self._log_base)
        self.max_t = math.ceil(math.log(500.0) / self._log_base)
        self.num_t = self.max_t - self.min_t + 1
        self.bing = FilterBING()
        self.svm_sz_idxs: list[int] = []
        self.svm_filter: np.ndarray | None = None
        self.svm_re_w: np.ndarray | None = None
        self.set_color_space(ColorSpace.MAXBGR)

    def set_color_space(self, clr=ColorSpace.MAXBGR) -> None:
        """Choose the gradient colour space and derive model and result paths."""
        self.color_space = ColorSpace(clr)
        tag = "B%gW%d%s" % (self.base, self.w, self.color_space.label)
        self.model_name = self.voc.res_dir + "ObjNess" + tag
        self.train_dir_si = self.voc.local_dir + "TrainS1" + tag + "/"
        self.bb_res_dir = self.voc.res_dir + "BBoxes" + tag + "/"

    def load_trained_model(self, model_name: str = "") -> int:
        """Load a model; return 1 if complete, -1 if stage two is missing, 0 if none."""
        name = model_name or self.model_name
        s1, s2, si = name + ".wS1", name + ".wS2", name + ".idx"
        try:
            filters = mat_read(s1)
            idx = mat_read(si)
        except (OSError, MatFormatError):
            print(f"Can't load model: {s1} or {si}")
            return 0

        idxs = [int(v) for v in np.asarray(idx).ravel()]
        if len(idxs) <= 1 or filters.shape != (self.w, self.w) or filters.dtype != np.float32:
            raise ValueError(f"invalid trained model {name}")
        self.bing.update(filters)
        self.svm_sz_idxs = idxs
        self.svm_filter = filters

        try:
            re_w = mat_read(s2)
        except (OSError, MatFormatError):
            re_w = None
        if re_w is None or re_w.shape != (len(idxs), 2):
            self.svm_re_w = None
            return -1
        self.svm_re_w = re_w.astype(np.float32)
        return 1

    def filters_loaded(self) -> bool:
        """Whether both training stages are available."""
        n = len(self.svm_sz_idxs)
        return (
            n > 0
            and self.svm_re_w is not None
            and self.svm_re_w.shape == (n, 2)
            and self.svm_filter is not None
            and self.svm_filter.shape == (self.w, self.w)
        )

    def template_length(self, t: int) -> int:
        """Window side length at quantised scale ``t``."""
        return int(round(self.base ** t))

    def size_to_index(self, w: int, h: int) -> int:
        """1-based index of the size with quantised width ``w`` and height ``h``."""
        w -= self.min_t
        h -= self.min_t
        if not (0 <= w < self.num_t and 0 <= h < self.num_t):
            raise ValueError("quantised size out of range")
        return h * self.num_t + w + 1

    def gt_box_sampling(self, gt) -> list[tuple[Box, int]]:
        """Quantised windows anchored at ``gt``'s corner that overlap it enough.

        Returns ``(box, size_index)`` pairs.
        """
        w_val = math.log(gt[2] - gt[0] + 1) / self._log_base
        h_val = math.log(gt[3] - gt[1] + 1) / self._log_base
        w_min, w_max = max(int(w_val - 0.5), self.min_t), min(int(w_val + 1.5), self.max_t)
        h_min, h_max = max(int(h_val - 0.5), self.min_t), min(int(h_val + 1.5), self.max_t)
        samples = []
        for h in range(h_min, h_max + 1):
            for w in range(w_min, w_max + 1):
                box = (
                    gt[0],
                    gt[1],
                    gt[0] + self.template_length(w) - 1,
                    gt[1] + self.template_length(h) - 1,
                )
                if intersection_over_union(box, gt) >= THRESHOLD:
                    samples.append((box, self.size_to_index(w, h)))
        return samples

    def get_feature(self, image, box) -> np.ndarray:
        """W x W float32 gradient feature of a 1-based inclusive region."""
        img = np.asarray(image)
        rows, cols = img.shape[:2]
        x, y = box[0] - 1, box[1] - 1
        if x < 0 or y < 0 or box[2] <= x or box[3] <= y or box[2] > cols or box[3] > rows:
            raise ValueError(f"region {tuple(box)} lies outside the image")
        region = img[y:box[3], x:box[2]]
        sub = resize_linear(region, self.w, self.w)
        return gradient_mag(sub, self.color_space).astype(np.float32)

    def predict_stage_one(self, image, num_per_size: int = 100, fast: bool = True):
        """Stage-one scored windows and the active-size position of each.

        Returns ``(scored, sizes)`` where ``scored`` is an unsorted
        :class:`ScoredVec` of boxes and ``sizes[i]`` belongs to its i-th entry.
        """
        img = np.asarray(image)
        img_h, img_w = img.shape[:2]
        scored = ScoredVec()
        sizes: list[int] = []
        for ir in reversed(range(len(self.svm_sz_idxs))):
            r = self.svm_sz_idxs[ir]
            height = self.template_length(r // self.num_t + self.min_t)
            width = self.template_length(r % self.num_t + self.min_t)
            if height > img_h * self.base or width > img_w * self.base:
                continue
            height, width = min(height, img_h), min(width, img_w)
            resized = resize_linear(
                img,
                int(round(self.w * img_w / width)),
                int(round(self.w * img_h / height)),
            )
            ratio_x, ratio_y = width // self.w, height // self.w
            cost = self.bing.match_template(gradient_mag(resized, self.color_space))
            peaks = non_max_suppression(cost, self.nss, num_per_size, fast)
            for value, (px, py) in list(peaks)[: max(num_per_size, 0)]:
                x0, y0 = px * ratio_x, py * ratio_y
                box = (x0 + 1, y0 + 1, min(x0 + width, img_w), min(y0 + height, img_h))
                scored.push(value, box)
                sizes.append(ir)
        return scored, sizes

    def predict_stage_two(self, scored: ScoredVec, sizes) -> None:
        """Re-weight unsorted stage-one scores per size, then sort best first."""
        if self.svm_re_w is None:
            raise RuntimeError("stage-two weights are not loaded")
        if len(sizes) != len(scored):
            raise ValueError("one size index is needed per scored window")
        for i, r in enumerate(sizes):
            scale, offset = self.svm_re_w[r]
            value = np.float32(scored.value(i)) * scale + offset
            scored.set_value(i, float(np.float32(value)))
        scored.sort()

    def get_obj_bnd_boxes(self, image, num_per_size: int = 120) -> ScoredVec:
        """Proposed boxes ``(min_x, min_y, max_x, max_y)`` sorted by score."""
        if not self.filters_loaded():
            raise RuntimeError("trained model is not loaded")
        scored, sizes = self.predict_stage_one(image, num_per_size, False)
        self.predict_stage_two(scored, sizes)
        return scored

    def generate_train_data(self, rng: random.Random | None = None) -> list[int]:
        """Write stage-one training features and active sizes; return the sizes.

        Creates ``.idx``, ``.xP`` and ``.xN`` next to the model name.
        """
        rng = rng or random.Random()
        voc = self.voc
        positives: list[np.ndarray] = []
        negatives: list[np.ndarray] = []
        size_counts = [0] * (self.num_t * self.num_t + 1)

        for name, gts in zip(voc.train_set, voc.gt_train_boxes):
            image = read_image(voc.image_path(name))
            rows, cols = image.shape[:2]
            for gt in gts:
                for box, idx in self.gt_box_sampling(gt):
                    box = (box[0], box[1], min(box[2], cols), min(box[3], rows))
                    feature = self.get_feature(image, box)
                    positives.extend((feature, np.fliplr(feature)))
                    size_counts[idx] += 2
            for _ in range(NUM_NEG_BOX):
                x1, x2 = rng.randrange(cols) + 1, rng.randrange(cols) + 1
                y1, y2 = rng.randrange(rows) + 1, rng.randrange(rows) + 1
                box = (min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))
                if max_intersection_over_union(box, gts) < THRESHOLD:
                    negatives.append(self.get_feature(image, box))

        active = [r - 1 for r, count in enumerate(size_counts) if r > 0 and count > MIN_POSITIVES_PER_SIZE]
        if not active:
            raise ValueError("no window size has enough positive samples")
        if not positives or not negatives:
            raise ValueError("training data needs positive and negative samples")
        mat_write(self.model_name + ".idx", np.array(active, dtype=np.int32).reshape(-1, 1))
        mat_write(self.model_name + ".xP", np.stack([f.ravel() for f in positives]).astype(np.float32))
        mat_write(self.model_name + ".xN", np.stack([f.ravel() for f in negatives]).astype(np.float32))
        return active