# trpack/op/bytes.py
# Canonical encodings: translation tables, target bytes, LEB128 group framing

from __future__ import annotations
from typing import Iterable, Sequence
import numpy as np

TABLE_SIZE = 256


def as_table(table: Sequence[int] | np.ndarray) -> np.ndarray:
    """
    Coerce a translation table to a read-only uint8 array of length 256.

    Contract:
    Any 256-entry mapping of byte values is a valid table, including
    identity and non-injective tables. Anything else is a caller error.

    Args:
        table: sequence or array of 256 integers in [0, 255]

    Returns:
        np.ndarray: uint8 array, shape (256,), not writeable

    Raises:
        TypeError: if table is not integer-valued
        ValueError: if table length != 256 or a value is out of range
    """
    arr = np.asarray(table)
    if arr.dtype.kind not in "iu":
        raise TypeError("Translation table must be integer-valued")
    if arr.shape != (TABLE_SIZE,):
        raise ValueError(f"Translation table must have {TABLE_SIZE} entries, got shape {arr.shape}")
    if arr.size and (int(arr.min()) < 0 or int(arr.max()) > 0xFF):
        raise ValueError("Translation table values must be bytes (0..255)")

    out = arr.astype(np.uint8, copy=True)
    out.flags.writeable = False
    return out


def as_target(data: str | bytes | bytearray | Sequence[int] | np.ndarray) -> np.ndarray:
    """
    Coerce target data to a read-only uint8 array.

    Text is encoded as UTF-8 first; bytes-like and integer sequences are
    taken as raw byte values.

    Raises:
        TypeError: if data is neither text, bytes-like nor integer-valued
        ValueError: if an integer value is out of byte range
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if isinstance(data, (bytes, bytearray)):
        out = np.frombuffer(bytes(data), dtype=np.uint8).copy()
    else:
        arr = np.asarray(data)
        if arr.size == 0:
            out = np.zeros(0, dtype=np.uint8)
        else:
            if arr.dtype.kind not in "iu":
                raise TypeError("Target bytes must be integer-valued")
            if arr.ndim != 1:
                raise ValueError(f"Target bytes must be 1-D, got shape {arr.shape}")
            if int(arr.min()) < 0 or int(arr.max()) > 0xFF:
                raise ValueError("Target values must be bytes (0..255)")
            out = arr.astype(np.uint8, copy=True)

    out.flags.writeable = False
    return out


def to_bytes_table(table: np.ndarray) -> bytes:
    """Serialize a translation table as its 256 raw bytes (index order)."""
    return as_table(table).tobytes()


def varu(n: int) -> bytes:
    """
    Encode unsigned integer as LEB128 varint.

    Args:
        n: unsigned integer (must be >= 0)

    Returns:
        bytes: LEB128 varint

    Raises:
        ValueError: if n < 0
        OverflowError: if n too large for LEB128
    """
    if n < 0:
        raise ValueError("varu expects unsigned (n >= 0)")

    if n >= (1 << 63):
        raise OverflowError(f"Integer {n} too large for safe LEB128 encoding")

    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            break
    return bytes(out)


def frame_groups(groups: Iterable) -> bytes:
    """
    Frame a group sequence as <count>(<index><size><len><b1>...<bk>)*.

    Works on anything exposing .index, .size and .bytes, so both full and
    truncated trailing groups serialize the same way.
    """
    groups = list(groups)
    out = bytearray()
    out += varu(len(groups))
    for g in groups:
        out += varu(g.index)
        out += varu(g.size)
        out += varu(len(g.bytes))
        out += bytes(g.bytes)
    return bytes(out)
