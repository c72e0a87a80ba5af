"""Binarised normed-gradient filter and its fast template matching."""

from __future__ import annotations

import numpy as np

_MASK64 = 0xFFFFFFFFFFFFFFFF
_M1_64 = _MASK64 // 3
_M3_64 = _MASK64 // 5
_MF_64 = _MASK64 // 17
_MP_64 = (_MF_64 >> 3) & _MF_64

_MASK32 = 0xFFFFFFFF
_M1_32 = _MASK32 // 3
_M3_32 = _MASK32 // 5
_MF_32 = _MASK32 // 17
_MP_32 = _MASK32 // 255

_U = np.uint64


def popcount64(value: int) -> int:
    """Number of set bits in the low 64 bits of ``value``."""
    w = value & _MASK64
    w -= (w >> 1) & _M1_64
    w = (w & _M3_64) + ((w >> 2) & _M3_64)
    return ((((w + (w >> 4)) & _MF_64) * _MP_64) & _MASK64) >> 56


def popcount32(value: int) -> int:
    """Number of set bits in the low 32 bits of ``value``."""
    w = value & _MASK32
    w -= (w >> 1) & _M1_32
    w = (w & _M3_32) + ((w >> 2) & _M3_32)
    return ((((w + (w >> 4)) & _MF_32) * _MP_32) & _MASK32) >> 24


def _popcount_array(words: np.ndarray) -> np.ndarray:
    w = words.astype(np.uint64)
    w = w - ((w >> _U(1)) & _U(_M1_64))
    w = (w & _U(_M3_64)) + ((w >> _U(2)) & _U(_M3_64))
    w = ((w + (w >> _U(4))) & _U(_MF_64)) * _U(_MP_64)
    return (w >> _U(56)).astype(np.int64)


class FilterBING:
    """An 8x8 linear filter approximated by two binary components."""

    NUM_COMP = 2
    D = 64

    def __init__(self) -> None:
        self._tigs = [0] * self.NUM_COMP
        self._coeffs = [np.float32(0.0)] * self.NUM_COMP

    @property
    def tigs(self) -> tuple[int, ...]:
        """Binary components as 64-bit masks, first weight in the top bit."""
        return tuple(self._tigs)

    @property
    def coeffs(self) -> tuple[float, ...]:
        """Coefficient of each binary component."""
        return tuple(float(c) for c in self._coeffs)

    def update(self, weights) -> None:
        """Approximate a 64-element weight array greedily by binary components."""
        residuals = np.asarray(weights, dtype=np.float32).ravel().copy()
        if residuals.size != self.D:
            raise ValueError(f"filter needs {self.D} weights, got {residuals.size}")
        tigs, coeffs = [], []
        for _ in range(self.NUM_COMP):
            signs = np.where(residuals >= 0.0, 1.0, -1.0).astype(np.float32)
            total = np.cumsum(residuals * signs, dtype=np.float32)[-1]
            avg = np.float32(total / np.float32(self.D))
            residuals = (residuals - avg * signs).astype(np.float32)
            bits = np.packbits(signs > 0)
            tigs.append(int.from_bytes(bits.tobytes(), "big"))
            coeffs.append(avg)
        self._tigs, self._coeffs = tigs, coeffs

    def reconstruct(self) -> np.ndarray:
        """Return the 8x8 float32 weights represented by the components."""
        weights = np.zeros(self.D, dtype=np.float32)
        for tig, coeff in zip(self._tigs, self._coeffs):
            raw = np.frombuffer(tig.to_bytes(8, "big"), dtype=np.uint8)
            signs = np.unpackbits(raw).astype(np.float32) * 2 - 1
            weights += np.float32(coeff) * signs
        return weights.reshape(8, 8)

    def dot(self, tig1: int, tig2: int, tig4: int, tig8: int) -> float:
        """Score of one window given its four bit-plane masks."""
        planes = (tig1, tig2, tig4, tig8)
        counts = [popcount64(t) for t in planes]
        score = np.float32(0.0)
        for comp, coeff in zip(self._tigs, self._coeffs):
            total = sum(
                ((popcount64(comp & t) << 1) - c) << shift
                for shift, (t, c) in enumerate(zip(planes, counts))
            )
            score = np.float32(score + np.float32(coeff) * np.float32(total))
        return float(score)

    def match_template(self, mag) -> np.ndarray:
        """Score every 8x8 window of a uint8 gradient map.

        Returns a float32 array of shape ``(H - 7, W - 7)``; entry ``[y, x]``
        scores the window whose top-left pixel is ``(x, y)``.
        """
        mag = np.asarray(mag)
        if mag.ndim != 2:
            raise ValueError("gradient map must be two-dimensional")
        height, width = mag.shape
        if height < 8 or width < 8:
            raise ValueError("gradient map must be at least 8x8")
        mag = mag.astype(np.uint8)

        codes = [self._window_codes(((mag >> s) & 1).astype(np.uint64)) for s in (4, 5, 6, 7)]
        counts = [_popcount_array(c) for c in codes]
        scores = np.zeros(codes[0].shape, dtype=np.float32)
        for comp, coeff in zip(self._tigs, self._coeffs):
            comp_arr = _U(comp)
            total = np.zeros(codes[0].shape, dtype=np.int64)
            for shift, (code, count) in enumerate(zip(codes, counts)):
                total += ((_popcount_array(code & comp_arr) << 1) - count) << shift
            scores += np.float32(coeff) * total.astype(np.float32)
        return scores

    @staticmethod
    def _window_codes(bits: np.ndarray) -> np.ndarray:
        height, width = bits.shape
        rows = np.zeros_like(bits)
        for k in range(8):
            rows[:, k:] |= bits[:, : width - k] << _U(k)
        codes = np.zeros_like(bits)
        for k in range(8):
            codes[k:, :] |= rows[: height - k, :] << _U(8 * k)
        return codes[7:, 7:]