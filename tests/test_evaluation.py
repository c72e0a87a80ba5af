import random

import pytest

from bingobj.evaluation import (
    format_vector,
    per_class_report,
    per_image_recall,
    random_boxes,
    recall_summary,
    write_per_image_recall,
)

GT = (10, 10, 50, 50)
FAR = (200, 200, 220, 220)


def test_format_vector():
    assert format_vector("DR", [1, 0.5, 2]) == "DR = [1 0.5 2 ];\n"
    assert format_vector("E", []) == "E = [];\n"


def test_per_image_recall_perfect():
    recalls, scores = per_image_recall([[GT]], [[GT]], 3)
    assert recalls == [1.0, 1.0, 1.0]
    assert scores == [1.0, 1.0, 1.0]


def test_per_image_recall_miss_then_hit():
    recalls, scores = per_image_recall([[FAR, GT]], [[GT]], 2)
    assert recalls == [0.0, 1.0]
    assert scores == [0.0, 1.0]


def test_per_image_recall_is_monotone_and_averaged():
    boxes = [[FAR, GT], [GT]]
    gts = [[GT], [GT, FAR]]
    recalls, scores = per_image_recall(boxes, gts, 4)
    assert len(recalls) == len(scores) == 4
    assert recalls == sorted(recalls)
    assert all(0.0 <= r <= 1.0 for r in recalls)
    assert recalls[-1] == recalls[1]


def test_per_image_recall_requires_images():
    with pytest.raises(ValueError):
        per_image_recall([], [], 5)


def test_recall_summary():
    text = recall_summary([1.0] * 10, [0.5] * 10, 10)
    assert text == "1:1.000,0.500\t10:1.000,0.500\t"
    assert "100:" not in recall_summary([1.0] * 50, [1.0] * 50, 50)


def test_write_per_image_recall(tmp_path):
    path = tmp_path / "r.m"
    write_per_image_recall(path, [0.5, 1.0], [0.25, 1.0], 2)
    text = path.read_text()
    assert text.startswith("figure(1);\n\nDR = [0.5 1 ];\nMABO = [0.25 1 ];\n")
    assert "semilogx(1:2, DR(1:2));" in text
    assert text.endswith("hold off;\n")


def test_per_class_report():
    report = per_class_report([[GT]], [[GT, FAR]], [[0, 1]], ["cat", "dog"], 2)
    assert report.startswith("GtNum = [1 1 ];\nWinNum = [0 1 ];\n")
    assert "catDR = [1 1 ];" in report
    assert "dogDR = [0 0 ];" in report
    assert "classDR = [0.5 0.5 ];" in report
    assert report.count("legend('cat', 'dog', 'class', 'objects');") == 2
    assert "title('Detection Recall')" in report
    assert "ylabel('MABO');" in report


def test_per_class_report_needs_objects():
    with pytest.raises(ValueError):
        per_class_report([[GT]], [[]], [[]], ["cat"], 2)


def test_per_class_report_alignment():
    with pytest.raises(ValueError):
        per_class_report([[GT], [GT]], [[GT]], [[0]], ["cat"], 2)


def test_random_boxes():
    boxes = random_boxes(30, 20, 50, random.Random(5))
    assert len(boxes) == 50
    for x1, y1, x2, y2 in boxes:
        assert 1 <= x1 <= x2 <= 30
        assert 1 <= y1 <= y2 <= 20
    assert boxes == random_boxes(30, 20, 50, random.Random(5))