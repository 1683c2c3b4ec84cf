# trpack/op/shapes.py
# Frozen group shapes (UTF-8 lead/continuation byte legality)

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

Range = Tuple[int, int]  # inclusive (lo, hi)
Shape = Tuple[Range, ...]

CONT: Range = (0x80, 0xBF)

# Priority order is frozen: ascending size, then listed order within a size.
SHAPES: Dict[int, List[Shape]] = {
    1: [
        ((0x00, 0x7F),),
    ],
    2: [
        ((0xC2, 0xDF), CONT),
    ],
    3: [
        ((0xE0, 0xE0), (0xA0, 0xBF), CONT),
        ((0xE1, 0xEC), CONT, CONT),
        ((0xED, 0xED), (0x80, 0x9F), CONT),
        ((0xEE, 0xEF), CONT, CONT),
    ],
    4: [
        ((0xF0, 0xF0), (0x90, 0xBF), CONT, CONT),
        ((0xF1, 0xF3), CONT, CONT, CONT),
        ((0xF4, 0xF4), (0x80, 0x8F), CONT, CONT),
    ],
}

SIZES: Tuple[int, ...] = (1, 2, 3, 4)


def shapes_for(size: int) -> List[Shape]:
    """
    Shapes of a given group size, in priority order.

    Raises:
        ValueError: if size is not one of 1..4
    """
    if size not in SHAPES:
        raise ValueError(f"Group size must be one of {SIZES}, got {size}")
    return SHAPES[size]


def fits(shape: Shape, data: Sequence[int]) -> bool:
    """True if data has the shape's length and every byte lies in its range."""
    if len(data) != len(shape):
        return False
    return all(lo <= b <= hi for b, (lo, hi) in zip(data, shape))


def match_shape(data: Sequence[int]) -> Optional[Tuple[int, int]]:
    """
    Identify the shape a concrete group instantiates.

    The nine shapes have disjoint lead ranges, so at most one matches.

    Returns:
        (size, shape_no) with shape_no 1-based in priority order, or None
    """
    size = len(data)
    if size not in SHAPES:
        return None
    for k, shape in enumerate(SHAPES[size], start=1):
        if fits(shape, data):
            return size, k
    return None
