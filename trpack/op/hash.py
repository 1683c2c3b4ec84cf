# trpack/op/hash.py
# BLAKE3 hashing helpers for receipts

from __future__ import annotations
from typing import Iterable
from blake3 import blake3
import numpy as np
from .bytes import to_bytes_table, frame_groups


def hash_bytes(b: bytes) -> str:
    """
    Hash bytes with BLAKE3, return hex digest.

    Args:
        b: bytes to hash

    Returns:
        str: hex digest (64 hex chars = 256 bits)
    """
    return blake3(b).hexdigest()


def hash_table(table: np.ndarray) -> str:
    """BLAKE3 digest of the 256 raw table bytes."""
    return hash_bytes(to_bytes_table(table))


def hash_groups(groups: Iterable) -> str:
    """
    Hash a group sequence via its LEB128 framing.

    Two results hash equal iff they choose the same bytes at the same
    indices with the same nominal sizes.
    """
    return hash_bytes(frame_groups(groups))
