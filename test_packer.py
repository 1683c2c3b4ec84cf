#!/usr/bin/env python3
"""
Optimal Packer Tests

Tests:
1. Single ASCII byte on identity
2. Empty target is trivially packable
3. Multi-byte group beats single bytes when cheaper
4. Equal-cost tie keeps the smaller size (first found)
5. Missing continuation mapping -> infeasible
6. Round-trip and shape validity on a shifted table
7. Optimality against exhaustive search on seeded tables
8. Determinism
"""

import numpy as np
from functools import lru_cache
from trpack.op.bytes import as_table, as_target
from trpack.op.packer import Group, build_dp, last_filled, pack, translate_groups
from trpack.op.shapes import SHAPES, match_shape

IDENTITY = as_table(np.arange(256))


def _exhaustive_min_groups(table, target):
    """Minimum group count by brute force over every (start, size), or None."""
    n = len(target)
    images = [set() for _ in range(256)]
    for b in range(256):
        images[int(table[b])].add(b)

    def exists(start, size):
        if start + size > n:
            return False
        for shape in SHAPES[size]:
            if all(any(lo <= b <= hi for b in images[int(target[start + p])])
                   for p, (lo, hi) in enumerate(shape)):
                return True
        return False

    @lru_cache(maxsize=None)
    def best(start):
        if start == n:
            return 0
        options = [best(start + s) for s in (1, 2, 3, 4) if exists(start, s)]
        options = [o for o in options if o is not None]
        return min(options) + 1 if options else None

    return best(0)


def test_single_ascii():
    """Identity, 'A' -> one size-1 group [0x41]."""
    print("Testing single ASCII byte...")

    result, _ = pack(IDENTITY, as_target("A"))
    assert result.can_pack, "Should pack"
    assert result.groups == [Group(bytes=(0x41,), size=1, index=0)], f"Got {result.groups}"

    print("  ✓ Single ASCII byte works")


def test_empty_target():
    """Empty target -> feasible with zero groups."""
    print("Testing empty target...")

    result, dp = pack(IDENTITY, as_target(b""))
    assert result.can_pack, "Empty target should pack"
    assert result.groups == [], f"Expected no groups, got {result.groups}"
    assert dp == []

    print("  ✓ Empty target works")


def test_multibyte_is_cheaper():
    """'ab' packs as one size-2 group when C2 80 translates to 'ab'."""
    print("Testing multi-byte preference...")

    t = np.arange(256)
    t[0xC2] = ord("a")
    t[0x80] = ord("b")
    result, _ = pack(as_table(t), as_target("ab"))

    assert result.can_pack
    assert result.groups == [Group(bytes=(0xC2, 0x80), size=2, index=0)], f"Got {result.groups}"

    print("  ✓ Multi-byte preference works")


def test_equal_cost_keeps_first_size():
    """At equal cost the size found first (ascending) is kept."""
    print("Testing equal-cost tie-break...")

    t = np.arange(256)
    t[0xC2] = ord("a")
    t[0x80] = ord("b")
    t[0xC3] = ord("b")
    t[0x81] = ord("c")
    table = as_table(t)
    target = as_target("abc")

    dp = build_dp(table, target)
    # dp[2]: size 1 after [C2 80] costs 2, size 2 after 'a' also costs 2
    assert dp[2].size == 1, f"Expected size-1 tail, got size {dp[2].size}"
    assert dp[2].cost == 2

    result, _ = pack(table, target)
    assert result.groups == [
        Group(bytes=(0xC2, 0x80), size=2, index=0),
        Group(bytes=(0x63,), size=1, index=2),
    ], f"Got {result.groups}"

    print("  ✓ Equal-cost tie-break works")


def test_missing_continuation():
    """Nothing maps to 0x80, so 'AÀ' (41 C3 80) cannot be packed."""
    print("Testing infeasible continuation...")

    t = np.arange(256)
    t[0x80] = 0x00
    table = as_table(t)
    target = as_target("AÀ")
    assert target.tolist() == [0x41, 0xC3, 0x80]

    result, dp = pack(table, target)
    assert not result.can_pack, "Should be infeasible"
    assert result.groups is None
    assert dp[1] is None and dp[2] is None
    assert last_filled(dp) == 0

    print("  ✓ Infeasible continuation works")


def test_roundtrip_shifted_table():
    """table[b] = b + 1: every group is shape-valid and translates back."""
    print("Testing round-trip on shifted table...")

    table = as_table((np.arange(256) + 1) % 256)
    target = as_target("Hello, wörld ✓ 😀")

    result, _ = pack(table, target)
    assert result.can_pack, "Shifted table should pack this text"

    assert translate_groups(table, result.groups) == target.tobytes(), "Round-trip mismatch"

    pos = 0
    for g in result.groups:
        assert g.index == pos, f"Groups must be contiguous at {pos}, got {g.index}"
        assert match_shape(g.bytes) is not None, f"Invalid shape {g.bytes}"
        assert match_shape(g.bytes)[0] == g.size
        pos = g.end
    assert pos == len(target)

    print("  ✓ Round-trip works")


def test_optimality_seeded():
    """DP group count equals exhaustive minimum on seeded random tables."""
    print("Testing optimality against exhaustive search...")

    rng = np.random.default_rng(1234)
    alphabet = [0x01, 0x02, 0x03]
    feasible = 0

    for trial in range(40):
        t = np.zeros(256, dtype=np.int64)
        t[0x80:] = rng.choice(alphabet + [0x7E, 0x7F], size=128)
        if trial % 3 == 0:
            t[0x01] = 0x01  # make size-1 groups occasionally possible
        table = as_table(t)
        target = as_target(rng.choice(alphabet, size=int(rng.integers(1, 10))).tolist())

        result, _ = pack(table, target)
        expected = _exhaustive_min_groups(table, target)

        if expected is None:
            assert not result.can_pack, f"trial {trial}: DP packed an infeasible target"
            continue

        feasible += 1
        assert result.can_pack, f"trial {trial}: DP missed a covering"
        assert len(result.groups) == expected, (
            f"trial {trial}: DP used {len(result.groups)} groups, optimum is {expected}"
        )
        assert translate_groups(table, result.groups) == target.tobytes()

    assert feasible > 0, "Seeded trials should include feasible targets"
    print(f"  ✓ Optimality verified ({feasible}/40 feasible)")


def test_determinism():
    """Same inputs, identical groups."""
    print("Testing determinism...")

    table = as_table((np.arange(256) + 1) % 256)
    target = as_target("déterminisme ✓")

    r1, _ = pack(table, target)
    r2, _ = pack(table, target)
    assert r1 == r2, "Pack results should be identical"

    print("  ✓ Determinism verified")


def run_tests():
    print("\n" + "="*60)
    print("Optimal Packer Tests")
    print("="*60 + "\n")

    test_single_ascii()
    test_empty_target()
    test_multibyte_is_cheaper()
    test_equal_cost_keeps_first_size()
    test_missing_continuation()
    test_roundtrip_shifted_table()
    test_optimality_seeded()
    test_determinism()

    print("\n" + "="*60)
    print("✓ All packer tests passed")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_tests()
