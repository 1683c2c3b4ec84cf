#!/usr/bin/env python3
# trpack/runner.py
# Job runner: table -> pack -> partial -> payload, with receipts

"""
Frozen order (no reordering):
table(tr) -> target(UTF-8) -> pack(DP) -> partial(DP copy) -> payload

Every stage is a pure function of (source, table); the run receipt hashes
each section so two runs can be compared for determinism.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
import numpy as np

from trpack.op.bytes import as_table, as_target
from trpack.op.hash import hash_bytes
from trpack.op.packer import Group, PackResult, last_filled, pack
from trpack.op.partial import find_partial
from trpack.op.payload import char_count, highlight_spans, render_payload
from trpack.op.receipts import (
    RunRc,
    aggregate,
    env_fingerprint,
    pack_receipt,
    partial_receipt,
    section_hash,
)
from trpack.op.tr import table_from_literals


def solve(
    job_id: str,
    source: str | bytes | Sequence[int],
    table: Sequence[int] | np.ndarray,
    *,
    tr_from: Optional[str] = None,
    tr_to: Optional[str] = None,
    debug: bool = False
) -> Tuple[PackResult, List[Group], RunRc]:
    """
    Solve one job end to end.

    Args:
        job_id: identifier recorded in the receipt
        source: text (UTF-8 encoded here) or raw target bytes
        table: 256-entry translation table
        tr_from, tr_to: tr literals; when both are given and packing is
            feasible, the payload is assembled
        debug: print stage diagnostics

    Returns:
        (result, partial_groups, receipt)

    Raises:
        TypeError, ValueError: on malformed table or source
    """
    table = as_table(table)
    target = as_target(source)

    result, dp = pack(table, target)
    last = last_filled(dp)
    if debug:
        print(f"[PACK] {job_id}: n={len(target)} can_pack={result.can_pack} last_feasible={last}")

    partial = find_partial(table, target, dp)
    if debug:
        tail = partial[-1] if partial else None
        print(f"[PARTIAL] {job_id}: groups={len(partial)} tail={tail}")

    pack_rc = pack_receipt(table, target, result, last)
    partial_rc = partial_receipt(partial)

    sections: Dict[str, Any] = {
        "pack": aggregate(pack_rc),
        "partial": aggregate(partial_rc),
        "spans": [aggregate(s) for s in highlight_spans(partial)],
    }

    final: Dict[str, Any] = {
        "can_pack": result.can_pack,
        "group_count": pack_rc.group_count,
        "covered_end": partial_rc.covered_end,
        "payload": None,
        "char_count": None,
    }
    if result.can_pack and tr_from is not None and tr_to is not None:
        payload = render_payload(result.groups, tr_from, tr_to)
        final["payload"] = payload
        final["char_count"] = char_count(payload)
        sections["payload"] = {"hash": hash_bytes(payload.encode("utf-8"))}
        if debug:
            print(f"[PAYLOAD] {job_id}: {final['char_count']} chars")

    hashes = {name: section_hash(sec) for name, sec in sections.items()}
    table_lines = "\n".join(f"{k}:{hashes[k]}" for k in sorted(hashes))

    rc = RunRc(
        job_id=job_id,
        env=env_fingerprint(),
        sections=sections,
        hashes=hashes,
        table_hash=hash_bytes(table_lines.encode()),
        final=final,
    )
    return result, partial, rc


def solve_job(job: Dict[str, Any], *, debug: bool = False) -> Tuple[PackResult, List[Group], RunRc]:
    """
    Solve a job dict.

    Accepted keys: "id", "source", and either "table" (256 ints) or the
    "tr_from"/"tr_to" literals. When both are present the explicit table
    wins and the literals are only used for the payload.

    Raises:
        KeyError: if "source" is missing or no table can be derived
        TrError: if the tr literals are invalid
    """
    job_id = str(job.get("id", "job"))
    tr_from = job.get("tr_from")
    tr_to = job.get("tr_to")

    if "table" in job:
        table = job["table"]
    elif tr_from is not None and tr_to is not None:
        table = table_from_literals(tr_from, tr_to)
    else:
        raise KeyError(f"job {job_id}: needs 'table' or both 'tr_from' and 'tr_to'")

    return solve(job_id, job["source"], table, tr_from=tr_from, tr_to=tr_to, debug=debug)
