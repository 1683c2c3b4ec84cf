# trpack/op/candidate.py
# Candidate finder: smallest input bytes per shape translating onto the target

"""
Contract:
For a start index and a group size, try every shape of that size in frozen
priority order. Per byte position choose the smallest byte in the shape's
range whose image under the table equals the target byte.

Two modes with deliberately different selection:
- exact:   first shape (priority order) that fully matches, else None
- partial: longest matched prefix over all shapes, ties to priority order;
           a position past the end of the target stops the shape early

Pure function of (table, target, index, size, partial).
"""

from __future__ import annotations
from typing import List, Optional
import numpy as np

from .shapes import Shape, shapes_for


def _smallest_source(table: np.ndarray, lo: int, hi: int, value: int) -> Optional[int]:
    """Smallest byte b in [lo, hi] with table[b] == value, or None."""
    hits = np.flatnonzero(table[lo:hi + 1] == value)
    if hits.size == 0:
        return None
    return lo + int(hits[0])


def _try_shape(
    table: np.ndarray,
    target: np.ndarray,
    index: int,
    shape: Shape,
    partial: bool
) -> Optional[List[int]]:
    """
    Instantiate one shape at index.

    Returns:
        full byte list on success; in partial mode the prefix matched so far
        (possibly empty) on failure; None on failure in exact mode
    """
    n = len(target)
    out: List[int] = []
    for pos, (lo, hi) in enumerate(shape):
        if index + pos >= n:
            return out if partial else None

        b = _smallest_source(table, lo, hi, int(target[index + pos]))
        if b is None:
            return out if partial else None
        out.append(b)
    return out


def find_candidate(
    table: np.ndarray,
    target: np.ndarray,
    index: int,
    size: int,
    partial: bool = False
) -> Optional[List[int]]:
    """
    Find input bytes for a group of the given size starting at index.

    Args:
        table: uint8 translation table, shape (256,)
        target: uint8 target bytes
        index: start index into target
        size: group size, one of 1..4
        partial: longest-prefix mode (see module contract)

    Returns:
        list of input bytes, or None when nothing matches (partial mode
        also returns None when the longest match is empty)

    Raises:
        ValueError: if size is not one of 1..4
    """
    shapes = shapes_for(size)
    tries = [_try_shape(table, target, index, shape, partial) for shape in shapes]

    if partial:
        best: Optional[List[int]] = None
        best_len = 0
        for cand in tries:
            # Strict > keeps the earliest shape on equal length
            if len(cand) > best_len:
                best_len = len(cand)
                best = cand
        return best

    for cand in tries:
        if cand is not None:
            return cand
    return None
