#!/usr/bin/env python3
# trpack/op/packer.py
# Optimal packer: minimum group-count covering of the target (DP + backtrace)

"""
Contract:
dp[i] is the optimal covering of target[0..i] inclusive, or None.

Frozen recurrence:
  for i in 0..N-1, for s in 1..4 (ascending):
    start = i - s + 1; skip if start < 0 or (start > 0 and dp[start-1] is None)
    bytes = find_candidate(start, s, exact)
    cost  = (dp[start-1].cost if start > 0 else 0) + 1
  dp[i] = first candidate with strictly smaller cost (ascending s)

Feasible iff dp[N-1] is present; N == 0 is feasible with zero groups.
Cost counts groups only, never byte values.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from .candidate import find_candidate
from .shapes import SIZES


@dataclass(frozen=True)
class Group:
    """
    One chosen group: input bytes placed at target[index:index + len(bytes)].

    size is the nominal shape size; a truncated trailing group in a partial
    result has len(bytes) < size.
    """
    bytes: Tuple[int, ...]
    size: int
    index: int

    @property
    def end(self) -> int:
        """Index one past the last covered target byte."""
        return self.index + len(self.bytes)


@dataclass(frozen=True)
class DPCell:
    """Optimal solution ending at some index."""
    bytes: Tuple[int, ...]
    cost: int   # number of groups in the covering
    prev: int   # index of the preceding cell, -1 for start
    size: int


@dataclass
class PackResult:
    """
    Packer output.

    groups is None when no full covering exists.
    """
    groups: Optional[List[Group]]
    can_pack: bool


def build_dp(table: np.ndarray, target: np.ndarray) -> List[Optional[DPCell]]:
    """
    Fill the DP array left to right.

    Args:
        table: uint8 translation table, shape (256,)
        target: uint8 target bytes

    Returns:
        list of length N with a DPCell or None per index
    """
    n = len(target)
    dp: List[Optional[DPCell]] = [None] * n

    for i in range(n):
        best: Optional[DPCell] = None
        for size in SIZES:
            start = i - size + 1
            if start < 0 or (start != 0 and dp[start - 1] is None):
                continue

            found = find_candidate(table, target, start, size)
            if found is None:
                continue

            cost = (dp[start - 1].cost if start != 0 else 0) + 1
            if best is None or cost < best.cost:
                best = DPCell(bytes=tuple(found), cost=cost, prev=start - 1, size=size)
        dp[i] = best

    return dp


def last_filled(dp: List[Optional[DPCell]]) -> int:
    """Highest index with a present cell, or -1."""
    for index in range(len(dp) - 1, -1, -1):
        if dp[index] is not None:
            return index
    return -1


def trace_dp(dp: List[Optional[DPCell]]) -> List[Group]:
    """
    Backtrace from the furthest present cell to the start sentinel.

    Returns:
        groups in left-to-right order
    """
    out: List[Group] = []
    cur = last_filled(dp)
    while cur != -1:
        cell = dp[cur]
        out.append(Group(bytes=cell.bytes, size=cell.size, index=cell.prev + 1))
        cur = cell.prev
    out.reverse()
    return out


def pack(table: np.ndarray, target: np.ndarray) -> Tuple[PackResult, List[Optional[DPCell]]]:
    """
    Solve the optimal covering.

    Returns:
        (result, dp): dp is handed on to the partial finder
    """
    dp = build_dp(table, target)
    can_pack = len(dp) == 0 or dp[-1] is not None
    groups = trace_dp(dp) if can_pack else None
    return PackResult(groups=groups, can_pack=can_pack), dp


def translate_groups(table: np.ndarray, groups: List[Group]) -> bytes:
    """Apply the table to the concatenated group bytes."""
    raw = np.array([b for g in groups for b in g.bytes], dtype=np.uint8)
    return table[raw].tobytes()
