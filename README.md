# bingobj

Generic objectness proposals with binarized normed gradients (BING).
Given an image and a trained model, `bingobj` proposes a ranked list of
bounding boxes that are likely to contain an object, whatever its class.
The learned 8x8 filter is approximated by two binary components so that
every window can be scored with bit counts. The package also generates
the training features for a model and measures detection recall and mean
best overlap (MABO), writing plot scripts for the results.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Dataset layout

`bingobj.dataset.DataSetVOC` expects a working directory laid out like
this (a trailing separator is added to the path if it is missing):

```
<data>/
    JPEGImages/<name>.jpg
    Annotations/<name>.yml
    ImageSets/Main/train.txt
    ImageSets/Main/test.txt
    ImageSets/Main/class.txt
```

The list files hold one name per line; reading stops at the first empty
line. `Results/` and `Local/` are created inside the directory.

Annotations are OpenCV-style YAML (`%YAML:1.0` header) with an
`annotation` mapping whose `object` entry is one object or a list of
them, each with `name`, `difficult` and `bndbox` (`xmin`, `ymin`,
`xmax`, `ymax`). Objects marked `difficult: 1` are skipped; a class name
not found in `class.txt` raises `ValueError`. Plain YAML annotations can
be rewritten into this layout with `bingobj.dataset.convert_yaml` or, for
a whole directory of `*.yaml` files, `convert_yaml_dir`.

## Command line

```
bingobj /path/to/VOC2007/
```

The command loads the annotations and a trained model from `Results/`
(`ObjNessB2W8MAXBGR.wS1`, `.idx` and `.wS2`), proposes boxes for every
test image (window-size base 2, 8x8 feature window, non-maximal
suppression size 2, 130 proposals per size) and prints the average
prediction time. It then writes one box file per test image to
`Results/BBoxesB2W8MAXBGR/<name>.txt` (the count, then
`score, x1, y1, x2, y2` lines), prints detection recall and MABO at
1, 10, 100, 1000 ... 5000 proposals and writes the curve as
`Results/PerImgAll.m`. It exits with status 1 if no path is given, if the
model is incomplete, or on a read error.

## Library use

```python
from bingobj.dataset import DataSetVOC
from bingobj.objectness import Objectness, read_image

voc = DataSetVOC("/path/to/VOC2007/")
voc.load_annotations()

objness = Objectness(voc, 2, 8, 2)
if objness.load_trained_model() == 1:
    image = read_image("/path/to/image.jpg")   # (H, W, 3) uint8, BGR
    scored = objness.get_obj_bnd_boxes(image, 130)
    for value, box in list(scored)[:10]:
        print(value, box)
```

Boxes are `(min_x, min_y, max_x, max_y)` tuples in 1-based, inclusive
pixel coordinates, as in PASCAL VOC.

- `bingobj.objectness.Objectness` – model loading (`load_trained_model`
  returns 1, -1 or 0 for a complete, partial or missing model), the two
  prediction stages, `set_color_space` (`ColorSpace.MAXBGR`, `HSV` or
  `G`) and `generate_train_data`, which writes the positive and negative
  window features (`.xP`, `.xN`) and the active sizes (`.idx`).
- `bingobj.filter_bing.FilterBING` – binary approximation of a filter and
  `match_template` over a uint8 gradient map.
- `bingobj.gradient` – colour conversions, bilinear resizing, gradient
  magnitude maps and `non_max_suppression`.
- `bingobj.scored.ScoredVec` – items with scores, sortable by score.
- `bingobj.boxes` – `intersection_over_union` and small box helpers.
- `bingobj.evaluation` – `per_image_recall`, `recall_summary`,
  `write_per_image_recall`, `per_class_report` and `random_boxes`.
- `bingobj.boxio` – `write_box_file` and readers for the PAMI12, IJCV13
  and ECCV14 proposal text formats.
- `bingobj.matfile` – `mat_read` / `mat_write` for the binary `CmMat`
  matrix files models are stored in.
- `bingobj.fileutil` – path-string helpers, wildcard file listing and
  list files.
- `bingobj.timer.StopWatch` – a millisecond stopwatch, usable as a
  context manager.

## What it does not do

The package does not fit the linear classifiers of the two training
stages. `generate_train_data` writes the features and active sizes, but
the stage-one filter (`.wS1`) and the stage-two per-size weights
(`.wS2`) must be produced elsewhere and saved with
`bingobj.matfile.mat_write` before proposals can be made. The command
line only predicts and evaluates; per-class evaluation and the other
proposal readers are available from Python only. Drawing result boxes
onto images is not provided.