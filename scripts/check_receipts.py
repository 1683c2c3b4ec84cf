#!/usr/bin/env python3
# scripts/check_receipts.py
# Compare two run_pack receipt files job by job

from __future__ import annotations
import argparse
import json
import sys
from typing import Any


def load_jsonl(path: str) -> list[dict]:
    """Load JSONL file as list of records."""
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def deep_diff(a: Any, b: Any, path: str = "", ignore: frozenset[str] = frozenset()) -> list[str]:
    """
    Recursively list differences between two JSON values.

    Keys named in ignore are skipped at every depth.
    """
    if isinstance(a, dict) and isinstance(b, dict):
        diffs = []
        a_keys = set(a) - ignore
        b_keys = set(b) - ignore
        if a_keys - b_keys:
            diffs.append(f"{path}: keys only in A: {sorted(a_keys - b_keys)}")
        if b_keys - a_keys:
            diffs.append(f"{path}: keys only in B: {sorted(b_keys - a_keys)}")
        for key in sorted(a_keys & b_keys):
            new_path = f"{path}.{key}" if path else key
            diffs.extend(deep_diff(a[key], b[key], new_path, ignore))
        return diffs

    if isinstance(a, list) and isinstance(b, list) and len(a) == len(b):
        diffs = []
        for i, (va, vb) in enumerate(zip(a, b)):
            diffs.extend(deep_diff(va, vb, f"{path}[{i}]", ignore))
        return diffs

    if a != b:
        return [f"{path}: {a!r} != {b!r}"]
    return []


def compare(records_a: list[dict], records_b: list[dict], *, ignore_env: bool = True) -> list[str]:
    """
    Compare receipt records keyed by job_id.

    Returns:
        list of difference descriptions (empty when receipts match)
    """
    by_id_a = {r.get("job_id"): r for r in records_a}
    by_id_b = {r.get("job_id"): r for r in records_b}
    ignore = frozenset({"env"}) if ignore_env else frozenset()

    diffs = []
    for job_id in sorted(set(by_id_a) | set(by_id_b), key=str):
        if job_id not in by_id_b:
            diffs.append(f"{job_id}: only in A")
            continue
        if job_id not in by_id_a:
            diffs.append(f"{job_id}: only in B")
            continue
        diffs.extend(deep_diff(by_id_a[job_id], by_id_b[job_id], str(job_id), ignore))
    return diffs


def main():
    """
    Compare two receipt JSONL files.

    Usage:
        python scripts/check_receipts.py <a.jsonl> <b.jsonl> [--with-env]

    Exit codes:
        0: receipts match
        1: receipts differ
    """
    parser = argparse.ArgumentParser(description="Compare pack receipts")
    parser.add_argument("file_a")
    parser.add_argument("file_b")
    parser.add_argument("--with-env", action="store_true", help="Also compare environment fingerprints")
    args = parser.parse_args()

    print(f"Comparing receipts:")
    print(f"  A: {args.file_a}")
    print(f"  B: {args.file_b}")

    records_a = load_jsonl(args.file_a)
    records_b = load_jsonl(args.file_b)

    diffs = compare(records_a, records_b, ignore_env=not args.with_env)
    if not diffs:
        print(f"✓ RECEIPTS_MATCH ({len(records_a)} records)")
        return

    print(f"\n✗ {len(diffs)} differences:")
    for diff in diffs[:10]:
        print(f"  {diff}")
    if len(diffs) > 10:
        print(f"  ... and {len(diffs) - 10} more differences")

    print("\n✗ RECEIPTS_DIFFER")
    sys.exit(1)


if __name__ == "__main__":
    main()
