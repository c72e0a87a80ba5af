"""Reading and writing matrices in the small binary ``CmMat`` format.

The file holds the five bytes ``CmMat``, three little-endian 32-bit
integers (columns, rows, element type code) and then the row-major data.
The type code is ``depth + 8 * (channels - 1)`` with depths 0..6 standing
for uint8, int8, uint16, int16, int32, float32 and float64.
"""

from __future__ import annotations

import struct

import numpy as np

MAGIC = b"CmMat"
_HEADER = struct.Struct("<3i")
_MAX_CHANNELS = 512

_DEPTHS = (
    np.dtype(np.uint8),
    np.dtype(np.int8),
    np.dtype(np.uint16),
    np.dtype(np.int16),
    np.dtype(np.int32),
    np.dtype(np.float32),
    np.dtype(np.float64),
)


class MatFormatError(ValueError):
    """A file is not a valid matrix file."""


def _depth_code(dtype: np.dtype) -> int:
    native = dtype.newbyteorder("=")
    for code, candidate in enumerate(_DEPTHS):
        if candidate == native:
            return code
    raise ValueError(f"unsupported element type {dtype}")


def mat_write(path, array) -> None:
    """Write a 1-, 2- or 3-dimensional array; a 1-D array is stored as a column."""
    arr = np.asarray(array)
    if arr.size == 0:
        raise ValueError("cannot write an empty matrix")
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim == 2:
        rows, cols = arr.shape
        channels = 1
    elif arr.ndim == 3:
        rows, cols, channels = arr.shape
    else:
        raise ValueError("matrix must have 1, 2 or 3 dimensions")
    if channels > _MAX_CHANNELS:
        raise ValueError(f"at most {_MAX_CHANNELS} channels are supported")
    depth = _depth_code(arr.dtype)
    type_code = depth + ((channels - 1) << 3)
    data = np.ascontiguousarray(arr, dtype=_DEPTHS[depth].newbyteorder("<"))
    with open(path, "wb") as fh:
        fh.write(MAGIC)
        fh.write(_HEADER.pack(cols, rows, type_code))
        fh.write(data.tobytes())


def mat_read(path) -> np.ndarray:
    """Read a matrix file.

    Returns an array of shape ``(rows, cols)`` for one channel and
    ``(rows, cols, channels)`` otherwise. Raises ``MatFormatError`` for a
    malformed file.
    """
    with open(path, "rb") as fh:
        magic = fh.read(len(MAGIC))
        if magic != MAGIC:
            raise MatFormatError(f"invalid matrix data file {path}")
        header = fh.read(_HEADER.size)
        if len(header) != _HEADER.size:
            raise MatFormatError(f"truncated header in {path}")
        cols, rows, type_code = _HEADER.unpack(header)
        payload = fh.read()
    if rows < 0 or cols < 0 or type_code < 0:
        raise MatFormatError(f"invalid matrix header in {path}")
    depth = type_code & 7
    channels = (type_code >> 3) + 1
    if depth >= len(_DEPTHS):
        raise MatFormatError(f"unknown element type {type_code} in {path}")
    dtype = _DEPTHS[depth].newbyteorder("<")
    count = rows * cols * channels
    needed = count * dtype.itemsize
    if len(payload) < needed:
        raise MatFormatError(f"truncated data in {path}")
    flat = np.frombuffer(payload[:needed], dtype=dtype, count=count)
    shape = (rows, cols) if channels == 1 else (rows, cols, channels)
    return flat.astype(_DEPTHS[depth]).reshape(shape)