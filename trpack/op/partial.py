# trpack/op/partial.py
# Partial finder: best-effort trailing extension for coverage feedback

from __future__ import annotations
from typing import List, Optional
import numpy as np

from .candidate import find_candidate
from .packer import DPCell, Group, trace_dp
from .shapes import SIZES


def find_partial(
    table: np.ndarray,
    target: np.ndarray,
    dp: List[Optional[DPCell]]
) -> List[Group]:
    """
    Extend the DP covering with the furthest-reaching partial group.

    Every index reachable from the DP (i == 0 or dp[i-1] present) is tried
    with each size in partial mode. Priority:
      1. highest end index (i + len(bytes) - 1)
      2. lower accumulated cost
      3. later scan position on a full tie

    The winner is spliced into a copy of dp at its end index and traced
    back. Coverage therefore never ends before the last present dp cell.

    Returns:
        groups in left-to-right order; the last may be truncated
    """
    n = len(target)
    best: Optional[DPCell] = None
    best_index = -1

    for index in range(n):
        if index != 0 and dp[index - 1] is None:
            continue

        cost = (dp[index - 1].cost if index != 0 else 0) + 1
        for size in SIZES:
            found = find_candidate(table, target, index, size, partial=True)
            if found is None:
                continue

            end = index + len(found) - 1
            if best is None or end > best_index or (end == best_index and cost <= best.cost):
                best = DPCell(bytes=tuple(found), cost=cost, prev=index - 1, size=size)
                best_index = end

    spliced = list(dp)
    if best is not None:
        spliced[best_index] = best
    return trace_dp(spliced)


def covered_end(groups: List[Group]) -> int:
    """Index of the last covered target byte, or -1 for no coverage."""
    if not groups:
        return -1
    return groups[-1].end - 1
