import pytest

from bingobj.scored import ScoredVec


def _make():
    vec = ScoredVec()
    vec.push(3, "String 3")
    vec.push(5, "String 5")
    vec.push(4, "String 4")
    vec.push(1, "String 1")
    return vec


def test_ascending_sort():
    vec = _make()
    vec.sort(False)
    assert [vec.value(i) for i in range(len(vec))] == [1, 3, 4, 5]
    assert vec.sorted_items() == ["String 1", "String 3", "String 4", "String 5"]


def test_descending_sort_is_default():
    vec = _make()
    vec.sort()
    assert [vec.value(i) for i in range(len(vec))] == [5, 4, 3, 1]
    assert vec.item(0) == "String 5"


def test_insertion_order_kept_before_sort():
    vec = _make()
    assert vec.sorted_items() == vec.items
    assert len(vec) == 4


def test_ties_follow_insertion_index():
    vec = ScoredVec()
    vec.push(1.0, "a")
    vec.push(1.0, "b")
    vec.sort(descending=True)
    assert vec.sorted_items() == ["b", "a"]
    vec.sort(descending=False)
    assert vec.sorted_items() == ["a", "b"]


def test_set_value_changes_order():
    vec = _make()
    vec.set_value(3, 10)
    vec.sort()
    assert vec.item(0) == "String 1"
    assert vec.value(0) == 10


def test_append_assigns_offset_scores():
    src = _make()
    dst = ScoredVec()
    dst.append(src, 1)
    assert len(dst) == len(src)
    assert dst.value(0) == 300.0
    assert [dst.item(i) for i in range(len(dst))] == src.items


def test_append_with_zero_start_gives_zero_scores():
    dst = ScoredVec()
    dst.append(_make())
    assert {dst.value(i) for i in range(len(dst))} == {0.0}


def test_clear_and_iteration():
    vec = _make()
    assert list(vec)[0] == (3, "String 3")
    vec.clear()
    assert len(vec) == 0
    with pytest.raises(IndexError):
        vec.item(0)