# trpack/op/payload.py
# Payload assembly, highlight spans and printable translation tables

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Literal
import numpy as np

from .packer import Group

ByteClass = Literal["ascii", "cont", "lead", "lead4"]

# Template: eval<q><packed><q>.b.tr<from>,<to>
PAYLOAD_TEMPLATE = "eval{q}{body}{q}.b.tr{tr_from},{tr_to}"

# Table rows stop at the last legal UTF-8 lead byte
TABLE_LAST_BYTE = 0xF4

_ESCAPED = {0x00: "\\0", 0x09: "\\t", 0x0A: "\\n", 0x0C: "\\f", 0x0D: "\\r"}


@dataclass(frozen=True)
class Span:
    """Highlight span over the source bytes [start, end)."""
    start: int
    end: int
    byte_class: ByteClass
    parity: int  # alternates 0/1 so neighbouring groups stay distinguishable


def byte_class(byte: int) -> ByteClass:
    """Colour class of a byte by its UTF-8 role."""
    if byte <= 0x7F:
        return "ascii"
    if byte <= 0xBF:
        return "cont"
    if byte <= 0xEF:
        return "lead"
    return "lead4"


def packed_text(groups: List[Group]) -> str:
    """Concatenated group bytes decoded as UTF-8."""
    raw = bytes(b for g in groups for b in g.bytes)
    return raw.decode("utf-8")


def render_payload(groups: List[Group], tr_from: str, tr_to: str) -> str:
    """
    Embed the packed text in the eval/tr template.

    The quote character that occurs less often in the packed text is used
    (single quotes on a tie) and its occurrences are backslash-escaped.

    Args:
        groups: full covering from the packer
        tr_from, tr_to: the tr argument literals exactly as typed

    Returns:
        str: payload source text
    """
    body = packed_text(groups)

    if body.count("'") <= body.count('"'):
        q = "'"
    else:
        q = '"'
    body = body.replace(q, "\\" + q)

    return PAYLOAD_TEMPLATE.format(q=q, body=body, tr_from=tr_from, tr_to=tr_to)


def char_count(payload: str) -> int:
    """Length of the payload in characters (code points)."""
    return len(payload)


def highlight_spans(groups: List[Group]) -> List[Span]:
    """One span per group, coloured by its first byte."""
    spans = []
    for k, g in enumerate(groups):
        if not g.bytes:
            continue
        spans.append(Span(
            start=g.index,
            end=g.end,
            byte_class=byte_class(g.bytes[0]),
            parity=k % 2,
        ))
    return spans


def escape_byte(byte: int) -> str:
    """Printable form of a translated byte."""
    if byte in _ESCAPED:
        return _ESCAPED[byte]
    return chr(byte)


def render_table(table: np.ndarray, per_row: int = 16) -> str:
    """
    Two-line cells (hex source over translated byte) for 0x00..0xF4.

    Returns:
        str: rows of cells, per_row cells per row
    """
    lines = []
    for row_start in range(0, TABLE_LAST_BYTE + 1, per_row):
        row = range(row_start, min(row_start + per_row, TABLE_LAST_BYTE + 1))
        lines.append(" ".join(f"{b:>2x}" for b in row))
        lines.append(" ".join(f"{escape_byte(int(table[b])):>2}" for b in row))
    return "\n".join(lines)
