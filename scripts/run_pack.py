#!/usr/bin/env python3
# scripts/run_pack.py
# Batch pack runner with determinism harness

"""
Run solve_job() on every job in a JSON file.

Determinism:
- Solve each job twice
- Compare section hashes, table_hash and the chosen groups
- NONDETERMINISTIC_EXECUTION if anything differs within the same env

Output:
- Per-job receipts to out/receipts/pack_run.jsonl
- Summary: PASS / INFEASIBLE / ERROR counts
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List

# Add project root to path
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

from trpack.io.load_data import load_jobs
from trpack.io.save import write_jsonl
from trpack.op.payload import render_table
from trpack.op.receipts import aggregate
from trpack.op.tr import FALLBACK_TABLE, TrError, table_from_literals
from trpack.runner import solve_job


def run_job_with_determinism(job: Dict[str, Any], *, check: bool = True, debug: bool = False) -> Dict[str, Any]:
    """
    Solve a job (twice when check is set) and summarize.

    Returns:
        {
            "job_id": str,
            "result": "PASS" | "INFEASIBLE" | "NONDETERMINISTIC_EXECUTION" | "ERROR",
            "can_pack": bool | None,
            "char_count": int | None,
            "payload": str | None,
            "receipt": dict | None,
            "error": str | None
        }
    """
    summary: Dict[str, Any] = {
        "job_id": str(job.get("id")),
        "result": "PASS",
        "can_pack": None,
        "char_count": None,
        "payload": None,
        "receipt": None,
        "error": None,
    }

    try:
        result1, partial1, rc1 = solve_job(job, debug=debug)
        summary["can_pack"] = result1.can_pack
        summary["char_count"] = rc1.final["char_count"]
        summary["payload"] = rc1.final["payload"]
        summary["receipt"] = aggregate(rc1)

        if check:
            result2, partial2, rc2 = solve_job(job)

            if rc1.hashes != rc2.hashes:
                diff_sections = [k for k in rc1.hashes if rc1.hashes.get(k) != rc2.hashes.get(k)]
                summary["result"] = "NONDETERMINISTIC_EXECUTION"
                summary["error"] = f"Section hashes differ between runs: {diff_sections}"
                return summary

            if rc1.table_hash != rc2.table_hash:
                summary["result"] = "NONDETERMINISTIC_EXECUTION"
                summary["error"] = "Table hashes differ between runs"
                return summary

            # Redundant with the hashes, but explicit
            if result1.groups != result2.groups or partial1 != partial2:
                summary["result"] = "NONDETERMINISTIC_EXECUTION"
                summary["error"] = "Groups differ between runs"
                return summary

        if not result1.can_pack:
            summary["result"] = "INFEASIBLE"
            summary["error"] = f"no covering; partial reaches index {rc1.final['covered_end']}"

    except Exception as e:
        summary["result"] = "ERROR"
        summary["error"] = f"{type(e).__name__}: {e}"

    return summary


def run_batch(
    jobs: List[Dict[str, Any]],
    output_path: Path,
    *,
    check: bool = True,
    fail_fast: bool = False,
    debug: bool = False
) -> Dict[str, Any]:
    """
    Run a batch of jobs.

    Returns:
        Summary dict with counts and results
    """
    results = []
    result_counts: Dict[str, int] = {}

    for i, job in enumerate(jobs):
        print(f"[{i+1}/{len(jobs)}] Packing {job.get('id')}...", end=" ", flush=True)

        result = run_job_with_determinism(job, check=check, debug=debug)
        status = result["result"]
        result_counts[status] = result_counts.get(status, 0) + 1

        if status == "PASS":
            chars = result["char_count"]
            print(f"PASS ({chars} chars)" if chars is not None else "PASS")
        else:
            print(f"{status}: {result.get('error', 'unknown')}")

        results.append(result)

        if fail_fast and status not in ("PASS", "INFEASIBLE"):
            print(f"\nFail-fast: Stopping on first {status}")
            break

    write_jsonl(str(output_path), results)

    return {
        "total": len(results),
        "result_counts": result_counts,
        "results": results,
    }


def show_table(tr_from: str, tr_to: str) -> str:
    """
    Render the table for two tr literals.

    A TrError is reported and the all-space fallback table is shown instead.
    """
    try:
        table = table_from_literals(tr_from, tr_to)
    except TrError as e:
        print(f"✗ {e}")
        table = FALLBACK_TABLE
    return render_table(table)


def main():
    """
    Main entry point for the batch pack runner.

    Usage:
        python scripts/run_pack.py --jobs jobs.json [--output out.jsonl] [--fail-fast]
        python scripts/run_pack.py --show-table "'a-y'" "'b-z'"
    """
    parser = argparse.ArgumentParser(description="Pack sources through a tr translation table")
    parser.add_argument("--jobs", type=str, help="Path to job JSON (object or list)")
    parser.add_argument("--output", type=str, default="out/receipts/pack_run.jsonl", help="Output JSONL path")
    parser.add_argument("--fail-fast", action="store_true", help="Stop on first error")
    parser.add_argument("--no-determinism", action="store_true", help="Solve each job once")
    parser.add_argument("--debug", action="store_true", help="Print stage diagnostics")
    parser.add_argument("--show-table", nargs=2, metavar=("FROM", "TO"), help="Print the table for two tr literals and exit")

    args = parser.parse_args()

    if args.show_table:
        print(show_table(*args.show_table))
        return

    if not args.jobs:
        parser.error("--jobs is required unless --show-table is given")

    jobs = load_jobs(args.jobs)
    output_path = Path(args.output)

    print(f"\nPacking {len(jobs)} jobs")
    print(f"Output: {output_path}")
    print(f"Determinism check: {not args.no_determinism}\n")

    summary = run_batch(
        jobs,
        output_path,
        check=not args.no_determinism,
        fail_fast=args.fail_fast,
        debug=args.debug,
    )

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)
    print(f"Total jobs: {summary['total']}")
    print(f"\nResult counts:")
    for result, count in sorted(summary['result_counts'].items()):
        print(f"  {result}: {count}")

    print(f"\nReceipts written to: {output_path}")

    if summary['result_counts'].get('NONDETERMINISTIC_EXECUTION', 0) > 0:
        print("\n❌ NONDETERMINISTIC_EXECUTION detected!")
        sys.exit(1)
    elif summary['result_counts'].get('ERROR', 0) > 0:
        print("\n❌ Errors detected!")
        sys.exit(1)
    elif summary['result_counts'].get('INFEASIBLE', 0) > 0:
        print("\n⚠️  Some jobs cannot be packed (partial coverage recorded)")
        sys.exit(0)
    else:
        print("\n✓ All jobs packed deterministically")
        sys.exit(0)


if __name__ == "__main__":
    main()
