"""Command that proposes windows for every test image and reports recall."""

from __future__ import annotations

import argparse
import random
import sys

from .boxio import write_box_file
from .dataset import DataSetVOC
from .evaluation import per_image_recall, recall_summary, write_per_image_recall
from .fileutil import make_dirs
from .objectness import Objectness, read_image
from .timer import StopWatch

RESULT_NAME = "WinRecall.m"
RECALL_SCRIPT = "PerImgAll.m"
NUM_EVAL_WIN = 5000
SEED = 131


def run_objectness(data_path, base=2.0, w=8, nss=2, num_per_size=130):
    """Propose boxes for the test images with a trained model and evaluate them.

    Returns the ranked boxes of each test image.
    """
    random.seed(SEED)
    voc = DataSetVOC(data_path)
    voc.load_annotations()
    print(f"Dataset:'{voc.wk_dir}' with {voc.train_num} training and {voc.test_num} testing")
    print(f"{RESULT_NAME} Base = {base:g}, W = {w}, NSS = {nss}, perSz = {num_per_size}")

    obj = Objectness(voc, base, w, nss)
    if obj.load_trained_model() != 1:
        raise RuntimeError(f"trained model {obj.model_name} is not complete")

    print("Start predicting")
    scored_per_image = []
    with StopWatch() as watch:
        for name in voc.test_set:
            image = read_image(voc.image_path(name))
            scored_per_image.append(obj.get_obj_bnd_boxes(image, num_per_size))
    num = max(len(voc.test_set), 1)
    print(
        f"Average time for predicting an image ({obj.color_space.label}) is "
        f"{watch.elapsed_ms() / num / 1000:g}s"
    )

    make_dirs(obj.bb_res_dir)
    boxes = []
    for name, scored in zip(voc.test_set, scored_per_image):
        write_box_file(obj.bb_res_dir + name + ".txt", scored)
        boxes.append(scored.sorted_items())

    recalls, scores = per_image_recall(boxes, voc.gt_test_boxes, NUM_EVAL_WIN)
    print(recall_summary(recalls, scores, NUM_EVAL_WIN))
    write_per_image_recall(voc.res_dir + RECALL_SCRIPT, recalls, scores, NUM_EVAL_WIN)
    return boxes


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Propose object windows and report recall.")
    parser.add_argument("data_path", nargs="?", help="root directory of the dataset")
    args = parser.parse_args(argv)
    if not args.data_path:
        print("Please pass the data path to as first argument", file=sys.stderr)
        return 1
    try:
        run_objectness(args.data_path, 2, 8, 2, 130)
    except (RuntimeError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())