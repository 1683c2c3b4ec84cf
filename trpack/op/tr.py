#!/usr/bin/env python3
# trpack/op/tr.py
# Translation table builder: Ruby String#tr applied to every byte 0x00..0xFF

"""
Contract:
The table is what `[*0x00..0xFF].pack('c*').tr(FROM, TO).bytes` yields,
where FROM and TO are the two string literals the user typed.

Frozen set rules (String#tr):
- leading '^' in FROM negates the set when FROM is longer than one byte
- 'a-z' is an inclusive range; a descending range is an error
- '\\' escapes the next byte; a '-' at either end is literal
- TO is padded with its last byte; a leading '^' in TO is a literal byte
- an empty FROM leaves every byte unchanged, whatever TO holds
- later duplicates in FROM override earlier ones
- an empty TO would delete bytes and is rejected (table length must stay 256)
"""

from __future__ import annotations
from typing import List, Tuple
import numpy as np

from .bytes import TABLE_SIZE, as_table

IDENTITY_TABLE = as_table(np.arange(TABLE_SIZE, dtype=np.uint8))

# What a host displays after a TrError
FALLBACK_TABLE = as_table(np.full(TABLE_SIZE, 0x20, dtype=np.uint8))

_DQ_ESCAPES = {
    "n": 0x0A, "t": 0x09, "r": 0x0D, "f": 0x0C, "v": 0x0B,
    "a": 0x07, "b": 0x08, "e": 0x1B, "s": 0x20,
}
_HEX = "0123456789abcdefABCDEF"
_OCT = "01234567"


class TrError(ValueError):
    """Invalid tr literal or set."""


def parse_literal(text: str) -> bytes:
    """
    Parse a single- or double-quoted Ruby string literal to bytes.

    Single quotes understand only \\\\ and \\'. Double quotes understand
    \\n \\t \\r \\f \\v \\a \\b \\e \\s, \\xHH, octal \\NNN, \\\\ and \\";
    any other escaped character stands for itself. Interpolation and
    non-ASCII characters are rejected (the receiver is a binary string).

    Raises:
        TrError: on malformed literals
    """
    s = text.strip()
    if not s or s[0] not in "'\"":
        raise TrError(f"expected a quoted string literal, got {text!r}")

    quote = s[0]
    out = bytearray()
    i = 1
    while i < len(s):
        ch = s[i]
        if ch == quote:
            if i != len(s) - 1:
                raise TrError(f"unexpected text after string literal: {s[i + 1:]!r}")
            return bytes(out)

        if ord(ch) > 0x7F:
            raise TrError(f"non-ASCII character {ch!r} in tr literal")

        if quote == '"' and ch == "#" and i + 1 < len(s) and s[i + 1] in "{@$":
            raise TrError("string interpolation is not supported in tr literals")

        if ch != "\\" or i + 1 >= len(s):
            out.append(ord(ch))
            i += 1
            continue

        nxt = s[i + 1]
        if quote == "'":
            if nxt in "\\'":
                out.append(ord(nxt))
            else:
                out += b"\\"
                if ord(nxt) > 0x7F:
                    raise TrError(f"non-ASCII character {nxt!r} in tr literal")
                out.append(ord(nxt))
            i += 2
            continue

        # Double-quoted escapes
        if nxt in _DQ_ESCAPES:
            out.append(_DQ_ESCAPES[nxt])
            i += 2
        elif nxt == "x":
            j = i + 2
            while j < len(s) and j < i + 4 and s[j] in _HEX:
                j += 1
            if j == i + 2:
                raise TrError("invalid hex escape")
            out.append(int(s[i + 2:j], 16))
            i = j
        elif nxt in _OCT:
            j = i + 1
            while j < len(s) and j < i + 4 and s[j] in _OCT:
                j += 1
            out.append(int(s[i + 1:j], 8) & 0xFF)
            i = j
        else:
            if ord(nxt) > 0x7F:
                raise TrError(f"non-ASCII character {nxt!r} in tr literal")
            out.append(ord(nxt))
            i += 2

    raise TrError(f"unterminated string literal: {text!r}")


def _expand(charset: bytes) -> List[int]:
    """Expand escapes and ranges of an (already un-negated) set."""
    out: List[int] = []
    n = len(charset)
    p = 0
    while p < n:
        if charset[p] == 0x5C and p + 1 < n:  # backslash
            p += 1
        c = charset[p]
        p += 1

        # '-' followed by at least one byte makes a range
        if p + 1 < n and charset[p] == 0x2D:
            e = charset[p + 1]
            p += 2
            if c > e:
                raise TrError(f'invalid range "{chr(c)}-{chr(e)}" in string transliteration')
            out.extend(range(c, e + 1))
        else:
            out.append(c)
    return out


def expand_tr_set(charset: bytes) -> Tuple[bool, List[int]]:
    """
    Expand a tr character set.

    Returns:
        (negated, bytes_in_order): duplicates are kept in order

    Raises:
        TrError: on a descending range
    """
    if len(charset) > 1 and charset[0] == 0x5E:  # '^'
        return True, _expand(charset[1:])
    return False, _expand(charset)


def build_table(from_set: bytes, to_set: bytes) -> np.ndarray:
    """
    Translation table of tr(from_set, to_set) over all 256 bytes.

    Returns:
        read-only uint8 array, shape (256,)

    Raises:
        TrError: on an empty TO set or invalid ranges
    """
    if not from_set:
        return IDENTITY_TABLE
    if not to_set:
        raise TrError("empty replacement set would delete bytes")

    negated, src = expand_tr_set(from_set)
    rep = _expand(to_set)

    trans = np.arange(TABLE_SIZE, dtype=np.uint8)
    if negated:
        keep = np.zeros(TABLE_SIZE, dtype=bool)
        keep[src] = True
        trans[~keep] = rep[-1]
    else:
        for k, c in enumerate(src):
            trans[c] = rep[k] if k < len(rep) else rep[-1]

    return as_table(trans)


def table_from_literals(from_literal: str, to_literal: str) -> np.ndarray:
    """Parse both tr arguments as typed and build the table."""
    return build_table(parse_literal(from_literal), parse_literal(to_literal))
