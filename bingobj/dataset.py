"""VOC-style dataset layout and its OpenCV-YAML annotation files."""

from __future__ import annotations

import re
from typing import Any

import numpy as np
import yaml

from .boxes import find_index
from .fileutil import get_names_ne, load_str_list, make_dirs

Box = tuple[int, int, int, int]

# Classes with an index below this go to training in the generic split.
GENERIC_TRAIN_CLASSES = 6

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_opencv_yml(text: str) -> dict[str, Any]:
    """Parse an OpenCV ``%YAML:1.0`` document into a dictionary."""
    lines = text.splitlines()
    if lines and lines[0].startswith("%YAML"):
        lines = lines[1:]
    data = yaml.safe_load("\n".join(lines))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("top level of a yml document must be a mapping")
    return data


def _atoi(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def convert_yaml(yaml_name: str, yml_name: str) -> None:
    """Rewrite a plain YAML annotation into the layout OpenCV can read.

    File names are quoted and every line from a sequence item onwards is
    indented by the column of that item's dash.
    """
    with open(yaml_name, encoding="utf-8", newline="") as fh:
        text = fh.read()
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    out = ["%YAML:1.0\n\n"]
    indent = 0
    for line in lines:
        line = line.rstrip("\r")
        if line[:12] == "  filename: ":
            line = '  filename: "' + line[12:] + '"'
        dash = line.find("-")
        if dash >= 0 and not line[:dash].strip(" "):
            indent = dash
        out.append(" " * indent + line + "\n")
    with open(yml_name, "w", encoding="utf-8", newline="\n") as fh:
        fh.writelines(out)


def convert_yaml_dir(anno_dir: str) -> list[str]:
    """Convert every ``*.yaml`` in ``anno_dir`` to ``*.yml``; return the base names."""
    names = get_names_ne(anno_dir + "*.yaml")
    print("Converting annotations to OpenCV yml format:")
    for i, name in enumerate(names):
        print(f"{i}/{len(names)} {name}.yaml", end="\r")
        base = anno_dir + name
        convert_yaml(base + ".yaml", base + ".yml")
    return names


def get_mask_range(mask, ext: int = 0) -> Box:
    """Bounding box (1-based, inclusive) of mask pixels above 10, grown by ``ext``."""
    arr = np.asarray(mask)
    if arr.ndim != 2:
        raise ValueError("mask must be two-dimensional")
    ys, xs = np.nonzero(arr > 10)
    if xs.size == 0:
        raise ValueError("mask has no foreground pixels")
    rows, cols = arr.shape
    max_x = min(int(xs.max()) + ext + 1, cols)
    max_y = min(int(ys.max()) + ext + 1, rows)
    min_x = max(int(xs.min()) - ext, 0)
    min_y = max(int(ys.min()) - ext, 0)
    return (min_x + 1, min_y + 1, max_x, max_y)


class DataSetVOC:
    """Image lists, class names and ground-truth boxes of a VOC-like dataset."""

    def __init__(self, work_dir: str) -> None:
        work_dir = str(work_dir)
        if not work_dir.endswith(("/", "\\")):
            work_dir += "/"
        self.wk_dir = work_dir
        self.res_dir = work_dir + "Results/"
        self.local_dir = work_dir + "Local/"
        self.img_path_w = work_dir + "JPEGImages/%s.jpg"
        self.anno_path_w = work_dir + "Annotations/%s.yml"
        make_dirs(self.res_dir)
        make_dirs(self.local_dir)

        self.train_set: list[str] = load_str_list(work_dir + "ImageSets/Main/train.txt")
        self.test_set: list[str] = load_str_list(work_dir + "ImageSets/Main/test.txt")
        self.class_names: list[str] = load_str_list(work_dir + "ImageSets/Main/class.txt")

        self.gt_train_boxes: list[list[Box]] = []
        self.gt_test_boxes: list[list[Box]] = []
        self.gt_train_cls_idx: list[list[int]] = []
        self.gt_test_cls_idx: list[list[int]] = []

    @property
    def train_num(self) -> int:
        return len(self.train_set)

    @property
    def test_num(self) -> int:
        return len(self.test_set)

    def image_path(self, name: str) -> str:
        """Path of the image with base name ``name``."""
        return self.img_path_w % name

    def annotation_path(self, name: str) -> str:
        """Path of the annotation file for ``name``."""
        return self.anno_path_w % name

    def load_boxes(self, name: str) -> tuple[list[Box], list[int]]:
        """Read the non-difficult boxes of one image and their class indexes."""
        path = self.annotation_path(name)
        with open(path, encoding="utf-8") as fh:
            data = parse_opencv_yml(fh.read())
        annotation = data.get("annotation")
        objects = annotation.get("object") if isinstance(annotation, dict) else None
        if objects is None:
            raise ValueError(f"no annotated objects in {path}")
        if not isinstance(objects, list):
            objects = [objects]
        boxes: list[Box] = []
        classes: list[int] = []
        for obj in objects:
            self._load_box(obj, boxes, classes)
        return boxes, classes

    def _load_box(self, obj: Any, boxes: list[Box], classes: list[int]) -> None:
        if not isinstance(obj, dict):
            raise ValueError("annotated object must be a mapping")
        if _as_str(obj.get("difficult")) == "1":
            return
        bnd = obj.get("bndbox")
        if not isinstance(bnd, dict):
            bnd = {}
        box = tuple(_atoi(bnd.get(k)) for k in ("xmin", "ymin", "xmax", "ymax"))
        idx = find_index(_as_str(obj.get("name")), self.class_names)
        if idx < 0:
            raise ValueError("Invalidate class name")
        boxes.append(box)  # type: ignore[arg-type]
        classes.append(idx)

    def load_annotations(self) -> None:
        """Load ground truth for every training and test image."""
        self.gt_train_boxes, self.gt_train_cls_idx = [], []
        for name in self.train_set:
            boxes, classes = self.load_boxes(name)
            self.gt_train_boxes.append(boxes)
            self.gt_train_cls_idx.append(classes)
        self.gt_test_boxes, self.gt_test_cls_idx = [], []
        for name in self.test_set:
            boxes, classes = self.load_boxes(name)
            self.gt_test_boxes.append(boxes)
            self.gt_test_cls_idx.append(classes)
        print("Load annotations finished")

    def load_data_generic_over_cls(self) -> None:
        """Re-split all images: those with a box of the first classes train, the rest test."""
        all_set = self.train_set + self.test_set
        self.train_set, self.test_set = [], []
        self.gt_train_boxes, self.gt_train_cls_idx = [], []
        self.gt_test_boxes, self.gt_test_cls_idx = [], []
        for name in all_set:
            boxes, classes = self.load_boxes(name)
            train_boxes = [b for b, c in zip(boxes, classes) if c < GENERIC_TRAIN_CLASSES]
            train_idx = [c for c in classes if c < GENERIC_TRAIN_CLASSES]
            test_boxes = [b for b, c in zip(boxes, classes) if c >= GENERIC_TRAIN_CLASSES]
            test_idx = [c for c in classes if c >= GENERIC_TRAIN_CLASSES]
            if train_boxes:
                self.train_set.append(name)
                self.gt_train_boxes.append(train_boxes)
                self.gt_train_cls_idx.append(train_idx)
            else:
                self.test_set.append(name)
                self.gt_test_boxes.append(test_boxes)
                self.gt_test_cls_idx.append(test_idx)
        print("Load annotations (generic over classes) finished")