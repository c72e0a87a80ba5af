import numpy as np
import pytest

from bingobj.filter_bing import FilterBING, popcount32, popcount64

FULL = 0xFFFFFFFFFFFFFFFF


def test_popcount64_extremes():
    assert popcount64(FULL) == 64
    assert popcount64(0) == 0


@pytest.mark.parametrize("n", [1, 7, 31, 33, 63])
def test_popcount_of_low_mask(n):
    assert popcount64((1 << n) - 1) == n
    if n <= 32:
        assert popcount32((1 << n) - 1) == n


@pytest.mark.parametrize("k", [0, 5, 40, 63])
def test_popcount_single_bit(k):
    assert popcount64(1 << k) == 1


def test_popcount32_ignores_high_bits():
    assert popcount32(0xFFFFFFFF) == popcount32(0x1FFFFFFFF)


def test_sign_pattern_reconstructs_exactly():
    rng = np.random.default_rng(3)
    weights = np.where(rng.random((8, 8)) > 0.5, 2.5, -2.5).astype(np.float32)
    filt = FilterBING()
    filt.update(weights)
    np.testing.assert_allclose(filt.reconstruct(), weights, atol=1e-6)


def test_top_bit_is_first_weight():
    weights = -np.ones(64, dtype=np.float32)
    weights[0] = 1.0
    filt = FilterBING()
    filt.update(weights)
    assert filt.tigs[0] >> 63 == 1
    assert popcount64(filt.tigs[0]) == 1


def test_reconstruction_reduces_error():
    rng = np.random.default_rng(1)
    weights = rng.normal(size=(8, 8)).astype(np.float32)
    filt = FilterBING()
    filt.update(weights)
    err = np.abs(filt.reconstruct() - weights).sum()
    assert err < np.abs(weights).sum()


def test_update_rejects_wrong_size():
    with pytest.raises(ValueError):
        FilterBING().update(np.zeros(10))


def test_dot_with_full_mask_sums_weights():
    rng = np.random.default_rng(2)
    filt = FilterBING()
    filt.update(rng.normal(size=64))
    assert filt.dot(FULL, 0, 0, 0) == pytest.approx(float(filt.reconstruct().sum()), abs=1e-4)
    assert filt.dot(0, 0, 0, 0) == 0.0


def test_match_template_equals_correlation_with_quantised_gradient():
    rng = np.random.default_rng(0)
    filt = FilterBING()
    filt.update(rng.normal(size=(8, 8)))
    weights = filt.reconstruct().astype(np.float64)
    mag = rng.integers(0, 256, size=(12, 10), dtype=np.uint8)
    scores = filt.match_template(mag)
    assert scores.shape == (5, 3)
    quant = (mag >> 4).astype(np.float64)
    for y in range(scores.shape[0]):
        for x in range(scores.shape[1]):
            expected = float((weights * quant[y : y + 8, x : x + 8]).sum())
            assert scores[y, x] == pytest.approx(expected, rel=1e-4, abs=1e-3)


def test_match_template_rejects_small_map():
    with pytest.raises(ValueError):
        FilterBING().match_template(np.zeros((7, 20), dtype=np.uint8))