#!/usr/bin/env python3
"""
Candidate Finder Tests

Tests:
1. Identity table, single ASCII byte
2. Smallest source byte wins when the table is not injective
3. Two-byte shape on identity
4. Exact mode: first fully matching shape, None otherwise
5. Partial mode: longest prefix, earliest shape on ties
6. Partial mode clips at the end of the target
7. Empty partial match returns None
8. Invalid size is rejected
"""

import numpy as np
from trpack.op.bytes import as_table, as_target
from trpack.op.candidate import find_candidate
from trpack.op.shapes import match_shape

IDENTITY = as_table(np.arange(256))


def _table_with(**overrides):
    """Identity table with table[int(k, 16)] = v overrides (keys like x61)."""
    t = np.arange(256)
    for key, value in overrides.items():
        t[int(key[1:], 16)] = value
    return as_table(t)


def test_identity_ascii():
    """Identity table maps 'A' to itself."""
    print("Testing identity ASCII...")

    target = as_target("A")
    found = find_candidate(IDENTITY, target, 0, 1)
    assert found == [0x41], f"Expected [0x41], got {found}"

    print("  ✓ Identity ASCII works")


def test_smallest_source_wins():
    """Non-injective table: the smallest byte in range is chosen."""
    print("Testing smallest source selection...")

    # 0x61 also maps to 0x41; 0x41 is smaller
    table = _table_with(x61=0x41)
    found = find_candidate(table, as_target("A"), 0, 1)
    assert found == [0x41], f"Expected [0x41], got {found}"

    # 0x10 and 0x20 both map to 'A', 0x41 no longer does
    table = _table_with(x10=0x41, x20=0x41, x41=0x42)
    found = find_candidate(table, as_target("A"), 0, 1)
    assert found == [0x10], f"Expected [0x10], got {found}"

    print("  ✓ Smallest source selection works")


def test_two_byte_identity():
    """'é' (C3 A9) packs as one size-2 group on identity."""
    print("Testing two-byte shape...")

    target = as_target("é")
    found = find_candidate(IDENTITY, target, 0, 2)
    assert found == [0xC3, 0xA9], f"Expected [0xC3, 0xA9], got {found}"
    assert match_shape(found) == (2, 1)

    # Not an ASCII byte
    assert find_candidate(IDENTITY, target, 0, 1) is None

    print("  ✓ Two-byte shape works")


def test_exact_first_fit():
    """Exact mode returns the first shape that fully matches."""
    print("Testing exact first fit...")

    # E0 A0 80 is shape 3/1 on identity
    found = find_candidate(IDENTITY, as_target(bytes([0xE0, 0xA0, 0x80])), 0, 3)
    assert found == [0xE0, 0xA0, 0x80], f"Got {found}"

    # E5 80 80 only fits shape 3/2
    found = find_candidate(IDENTITY, as_target(bytes([0xE5, 0x80, 0x80])), 0, 3)
    assert found == [0xE5, 0x80, 0x80], f"Got {found}"
    assert match_shape(found) == (3, 2)

    # E0 80 ..: shape 3/1 needs A0..BF in position 1; nothing fully matches
    target = as_target(bytes([0xE0, 0x80, 0x41]))
    assert find_candidate(IDENTITY, target, 0, 3) is None

    print("  ✓ Exact first fit works")


def test_partial_longest_fit():
    """Partial mode keeps the longest prefix; first shape on ties."""
    print("Testing partial longest fit...")

    # Same target as above: shape 3/1 matches only E0, others nothing
    target = as_target(bytes([0xE0, 0x80, 0x41]))
    found = find_candidate(IDENTITY, target, 0, 3, partial=True)
    assert found == [0xE0], f"Expected [0xE0], got {found}"

    # E0 and E1 both map to 0x01; shapes 3/1 and 3/2 each match one byte
    table = _table_with(xE0=0x01, xE1=0x01)
    target = as_target(bytes([0x01, 0x02]))
    found = find_candidate(table, target, 0, 3, partial=True)
    assert found == [0xE0], f"Tie must keep the earlier shape, got {found}"

    # A full match is the longest, so partial agrees with exact
    target = as_target(bytes([0xE5, 0x80, 0x80]))
    assert find_candidate(IDENTITY, target, 0, 3, partial=True) == find_candidate(IDENTITY, target, 0, 3)

    print("  ✓ Partial longest fit works")


def test_partial_clips_at_end():
    """A group running past the target end is clipped in partial mode only."""
    print("Testing clipping at target end...")

    target = as_target(bytes([0xC3]))
    assert find_candidate(IDENTITY, target, 0, 2) is None
    found = find_candidate(IDENTITY, target, 0, 2, partial=True)
    assert found == [0xC3], f"Expected [0xC3], got {found}"

    print("  ✓ Clipping works")


def test_partial_empty_is_none():
    """Nothing matched at all -> None, not an empty list."""
    print("Testing empty partial...")

    target = as_target(bytes([0x80]))
    assert find_candidate(IDENTITY, target, 0, 1, partial=True) is None
    assert find_candidate(IDENTITY, target, 0, 4, partial=True) is None

    print("  ✓ Empty partial works")


def test_invalid_size():
    """Size outside 1..4 is a caller error."""
    print("Testing invalid size...")

    for size in (0, 5):
        try:
            find_candidate(IDENTITY, as_target("A"), 0, size)
        except ValueError:
            pass
        else:
            raise AssertionError(f"size={size} should raise ValueError")

    print("  ✓ Invalid size rejected")


def run_tests():
    print("\n" + "="*60)
    print("Candidate Finder Tests")
    print("="*60 + "\n")

    test_identity_ascii()
    test_smallest_source_wins()
    test_two_byte_identity()
    test_exact_first_fit()
    test_partial_longest_fit()
    test_partial_clips_at_end()
    test_partial_empty_is_none()
    test_invalid_size()

    print("\n" + "="*60)
    print("✓ All candidate tests passed")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_tests()
