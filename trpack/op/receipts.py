# trpack/op/receipts.py
# Receipts kernel and environment fingerprinting

from __future__ import annotations
import platform
import sys
import json
from dataclasses import dataclass, asdict
from importlib import metadata
from typing import Any, List, Optional
import numpy as np

from .hash import hash_bytes, hash_groups, hash_table
from .packer import Group, PackResult, translate_groups
from .partial import covered_end


@dataclass
class EnvRc:
    """
    Environment fingerprint.

    Receipts from two runs are only comparable when these match.
    """
    platform: str
    endian: str
    py_version: str
    numpy_version: str
    blake3_version: str
    build_flags_hash: str


def _dist_version(name: str) -> str:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return "unknown"


def env_fingerprint() -> EnvRc:
    """
    Capture environment fingerprint for determinism checking.

    Returns:
        EnvRc: environment receipt
    """
    build_info = {
        "py_version": sys.version,
        "implementation": platform.python_implementation(),
        "version_info": list(sys.version_info),
    }
    flags = hash_bytes(json.dumps(build_info, sort_keys=True).encode())

    return EnvRc(
        platform=platform.platform(),
        endian=sys.byteorder,
        py_version=platform.python_version(),
        numpy_version=np.__version__,
        blake3_version=_dist_version("blake3"),
        build_flags_hash=flags,
    )


@dataclass
class PackRc:
    """
    Optimal packer receipt.

    group_sizes is the per-group size sequence (empty when infeasible).
    last_feasible is the furthest index with a DP cell, -1 if none.
    roundtrip_ok is True iff the groups translate back to the target.
    """
    can_pack: bool
    roundtrip_ok: bool
    target_len: int
    group_count: int
    group_sizes: List[int]
    last_feasible: int
    table_hash: str        # BLAKE3(256 raw table bytes)
    target_hash: str       # BLAKE3(target bytes)
    groups_hash: Optional[str]  # BLAKE3(framed groups), None if infeasible


@dataclass
class PartialRc:
    """
    Partial finder receipt.

    covered_end >= PackRc.last_feasible always holds.
    """
    group_count: int
    covered_end: int
    truncated_tail: bool   # last group shorter than its nominal size
    groups_hash: str


@dataclass
class RunRc:
    """
    Root receipt container for a single job.

    table_hash is BLAKE3 over the sorted "section:hash" lines, so two runs
    agree on it iff every section agrees.
    """
    job_id: str
    env: EnvRc
    sections: dict[str, Any]
    hashes: dict[str, str]
    table_hash: str
    final: dict[str, Any]


def pack_receipt(
    table: np.ndarray,
    target: np.ndarray,
    result: PackResult,
    last_feasible: int
) -> PackRc:
    groups = result.groups or []
    return PackRc(
        can_pack=result.can_pack,
        roundtrip_ok=result.can_pack and translate_groups(table, groups) == target.tobytes(),
        target_len=len(target),
        group_count=len(groups),
        group_sizes=[g.size for g in groups],
        last_feasible=last_feasible,
        table_hash=hash_table(table),
        target_hash=hash_bytes(target.tobytes()),
        groups_hash=hash_groups(groups) if result.can_pack else None,
    )


def partial_receipt(groups: List[Group]) -> PartialRc:
    return PartialRc(
        group_count=len(groups),
        covered_end=covered_end(groups),
        truncated_tail=bool(groups) and len(groups[-1].bytes) < groups[-1].size,
        groups_hash=hash_groups(groups),
    )


def aggregate(run: dict | RunRc) -> dict:
    """
    Convert nested receipts (dataclasses or dicts) to JSON-serializable dict.

    Args:
        run: RunRc or dict containing receipts

    Returns:
        dict: flattened, JSON-serializable representation
    """
    def to_plain(x: Any) -> Any:
        """Recursively convert dataclasses to dicts."""
        if hasattr(x, "__dataclass_fields__"):
            return {k: to_plain(v) for k, v in asdict(x).items()}
        if isinstance(x, dict):
            return {k: to_plain(v) for k, v in x.items()}
        if isinstance(x, (list, tuple)):
            return [to_plain(v) for v in x]
        return x

    return to_plain(run)


def section_hash(section: Any) -> str:
    """BLAKE3 of a receipt section's canonical (sorted, compact) JSON."""
    payload = json.dumps(aggregate(section), sort_keys=True, separators=(",", ":"))
    return hash_bytes(payload.encode())
