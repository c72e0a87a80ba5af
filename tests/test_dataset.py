import os

import numpy as np
import pytest

from bingobj.dataset import (
    DataSetVOC,
    convert_yaml,
    convert_yaml_dir,
    get_mask_range,
    parse_opencv_yml,
)

CLASSES = ["bird", "car", "cat", "cow", "dog", "sheep", "person"]


def _obj(name, box, difficult="0", indent="      "):
    return (
        f"{indent}- name: {name}\n"
        f'{indent}  difficult: "{difficult}"\n'
        f"{indent}  bndbox:\n"
        f'{indent}     xmin: "{box[0]}"\n'
        f'{indent}     ymin: "{box[1]}"\n'
        f'{indent}     xmax: "{box[2]}"\n'
        f'{indent}     ymax: "{box[3]}"\n'
    )


def _anno(objects):
    return "%YAML:1.0\nannotation:\n   folder: VOC2007\n   object:\n" + "".join(objects)


@pytest.fixture
def voc_dir(tmp_path):
    main = tmp_path / "ImageSets" / "Main"
    main.mkdir(parents=True)
    (main / "train.txt").write_text("img1\nimg2\n")
    (main / "test.txt").write_text("img3\n")
    (main / "class.txt").write_text("\n".join(CLASSES) + "\n")
    anno = tmp_path / "Annotations"
    anno.mkdir()
    (anno / "img1.yml").write_text(
        _anno([_obj("dog", (10, 20, 30, 40)), _obj("cat", (1, 2, 3, 4), difficult="1")])
    )
    (anno / "img2.yml").write_text(_anno([_obj("person", (5, 6, 7, 8))]))
    (anno / "img3.yml").write_text(
        _anno([_obj("cow", (11, 12, 13, 14)), _obj("person", (2, 2, 9, 9))])
    )
    return tmp_path


def test_parse_strips_header():
    data = parse_opencv_yml("%YAML:1.0\nannotation:\n   folder: VOC2007\n")
    assert data == {"annotation": {"folder": "VOC2007"}}


def test_parse_rejects_non_mapping():
    with pytest.raises(ValueError):
        parse_opencv_yml("%YAML:1.0\n- a\n- b\n")


def test_convert_yaml_output(tmp_path):
    src = tmp_path / "a.yaml"
    dst = tmp_path / "a.yml"
    src.write_text(
        "annotation:\n  filename: 000001.jpg\n  object:\n  - name: dog\n    difficult: 0\n"
    )
    convert_yaml(str(src), str(dst))
    text = dst.read_text()
    assert text == (
        "%YAML:1.0\n\n"
        "annotation:\n"
        '  filename: "000001.jpg"\n'
        "  object:\n"
        "    - name: dog\n"
        "      difficult: 0\n"
    )
    data = parse_opencv_yml(text)
    assert data["annotation"]["filename"] == "000001.jpg"
    assert data["annotation"]["object"][0]["name"] == "dog"


def test_convert_yaml_dir(tmp_path):
    for name in ("x", "y"):
        (tmp_path / f"{name}.yaml").write_text("annotation:\n  filename: f.jpg\n")
    names = convert_yaml_dir(str(tmp_path) + "/")
    assert sorted(names) == ["x", "y"]
    for name in names:
        data = parse_opencv_yml((tmp_path / f"{name}.yml").read_text())
        assert data["annotation"]["filename"] == "f.jpg"


def test_mask_range_full_mask():
    mask = np.full((4, 5), 255, dtype=np.uint8)
    assert get_mask_range(mask) == (1, 1, 5, 4)


def test_mask_range_block_and_extension():
    mask = np.zeros((6, 8), dtype=np.uint8)
    mask[2:4, 3:6] = 200
    assert get_mask_range(mask) == (4, 3, 6, 4)
    assert get_mask_range(mask, 10) == (1, 1, 8, 6)


def test_mask_range_ignores_low_values():
    mask = np.full((3, 3), 10, dtype=np.uint8)
    mask[1, 1] = 11
    x1, y1, x2, y2 = get_mask_range(mask)
    assert x1 == x2 and y1 == y2


def test_mask_range_empty_raises():
    with pytest.raises(ValueError):
        get_mask_range(np.zeros((3, 3), dtype=np.uint8))


def test_dataset_layout(voc_dir):
    voc = DataSetVOC(str(voc_dir))
    assert os.path.isdir(voc.res_dir)
    assert os.path.isdir(voc.local_dir)
    assert voc.train_set == ["img1", "img2"]
    assert voc.test_set == ["img3"]
    assert voc.class_names == CLASSES
    assert voc.train_num == 2 and voc.test_num == 1
    assert voc.image_path("img1").endswith("JPEGImages/img1.jpg")


def test_load_boxes_skips_difficult(voc_dir):
    voc = DataSetVOC(str(voc_dir))
    boxes, classes = voc.load_boxes("img1")
    assert boxes == [(10, 20, 30, 40)]
    assert classes == [CLASSES.index("dog")]


def test_load_boxes_single_mapping(voc_dir):
    (voc_dir / "Annotations" / "one.yml").write_text(
        "%YAML:1.0\nannotation:\n   object:\n      name: car\n      difficult: 0\n"
        "      bndbox:\n         xmin: 3\n         ymin: 4\n         xmax: 50\n         ymax: 60\n"
    )
    voc = DataSetVOC(str(voc_dir))
    assert voc.load_boxes("one") == ([(3, 4, 50, 60)], [CLASSES.index("car")])


def test_load_boxes_unknown_class(voc_dir):
    (voc_dir / "Annotations" / "bad.yml").write_text(_anno([_obj("zebra", (1, 1, 2, 2))]))
    voc = DataSetVOC(str(voc_dir))
    with pytest.raises(ValueError):
        voc.load_boxes("bad")


def test_load_annotations(voc_dir):
    voc = DataSetVOC(str(voc_dir))
    voc.load_annotations()
    assert len(voc.gt_train_boxes) == voc.train_num
    assert voc.gt_train_boxes[1] == [(5, 6, 7, 8)]
    assert voc.gt_test_cls_idx == [[CLASSES.index("cow"), CLASSES.index("person")]]


def test_generic_over_classes_split(voc_dir):
    voc = DataSetVOC(str(voc_dir))
    voc.load_data_generic_over_cls()
    assert voc.train_set == ["img1", "img3"]
    assert voc.test_set == ["img2"]
    assert voc.gt_train_boxes[1] == [(11, 12, 13, 14)]
    assert voc.gt_test_boxes == [[(5, 6, 7, 8)]]
    assert all(c < 6 for idx in voc.gt_train_cls_idx for c in idx)