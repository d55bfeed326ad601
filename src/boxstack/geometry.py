"""
Geometry utilities for the boxstack project.

This module defines:

- `Box`: a raw input box, three positive integer dimensions plus its
  position in the input.
- `Orientation`: one way of placing a box, with a `(width, depth)`
  footprint (`width <= depth`) and the remaining dimension as height.
- `Stack`: an immutable tuple of orientations, stored bottom-to-top.
- Helpers for strict footprint containment, stack height, validity and
  the top-to-bottom result rows.

Containment convention
----------------------

An orientation `upper` may sit directly on `lower` only when both of its
footprint dimensions are strictly smaller:

    upper.width < lower.width and upper.depth < lower.depth

Equal edges are not allowed. Because footprints are normalized so that
`width <= depth`, comparing like with like is enough; no rotation of the
footprint in the plane is ever considered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set, Tuple

from shapely.geometry import Polygon, box as shapely_box


# ---------------------------------------------------------------------------
# Boxes and orientations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Box:
    """
    A raw box as supplied by the loader.

    `index` is the box's position in the input and is the identity every
    orientation derived from it carries.
    """

    x: int
    y: int
    z: int
    index: int

    @property
    def dims(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Orientation:
    """
    One placement of a box: footprint `(width, depth)` and `height`.

    `box_id` is the index of the source `Box`. Several orientations share
    a `box_id`; a valid stack uses at most one of them.
    """

    width: int
    depth: int
    height: int
    box_id: int

    def __post_init__(self) -> None:
        if self.width > self.depth:
            raise ValueError(
                f"Orientation footprint must have width <= depth, "
                f"got ({self.width}, {self.depth})"
            )

    @property
    def area(self) -> int:
        return self.width * self.depth

    def fits_on(self, lower: "Orientation") -> bool:
        """True if this orientation fits strictly on top of `lower`."""
        return self.width < lower.width and self.depth < lower.depth


# A stack is stored bottom-to-top.
Stack = Tuple[Orientation, ...]

# (width, depth, height, cumulative height from the top)
ResultRow = Tuple[int, int, int, int]


def boxes_from_dims(dims: Iterable[Sequence[int]]) -> List[Box]:
    """
    Wrap raw `(x, y, z)` triples into `Box` objects, numbered by position.
    """
    return [Box(int(d[0]), int(d[1]), int(d[2]), i) for i, d in enumerate(dims)]


def orientations_for_box(b: Box) -> Tuple[Orientation, Orientation, Orientation]:
    """
    Return the three orientations of `b`, one per choice of height.

    Order: height `z`, then height `y`, then height `x`.
    """
    x, y, z = b.x, b.y, b.z
    return (
        Orientation(min(x, y), max(x, y), z, b.index),
        Orientation(min(x, z), max(x, z), y, b.index),
        Orientation(min(y, z), max(y, z), x, b.index),
    )


def expand_orientations(boxes: Sequence[Box]) -> List[Orientation]:
    """
    Expand boxes into the flat orientation pool (exactly three per box).

    The pool keeps input order: all orientations of box 0, then box 1, ...
    Both the seeders and the annealer read from this pool; nothing mutates it.
    """
    pool: List[Orientation] = []
    for b in boxes:
        pool.extend(orientations_for_box(b))
    return pool


# ---------------------------------------------------------------------------
# Stack helpers
# ---------------------------------------------------------------------------

def fits_between(stack: Sequence[Orientation], o: Orientation, pos: int) -> bool:
    """
    Check whether `o` could be inserted at `pos` in `stack`.

    The entry below (`stack[pos - 1]`) must strictly contain `o`, and `o`
    must strictly contain the entry that would end up above it
    (`stack[pos]`). Missing neighbours impose no constraint.
    """
    if pos > 0 and not o.fits_on(stack[pos - 1]):
        return False
    if pos < len(stack) and not stack[pos].fits_on(o):
        return False
    return True


def stack_height(stack: Iterable[Orientation]) -> int:
    return sum(o.height for o in stack)


def used_box_ids(stack: Iterable[Orientation]) -> Set[int]:
    return {o.box_id for o in stack}


def is_single_use(stack: Sequence[Orientation]) -> bool:
    return len(used_box_ids(stack)) == len(stack)


def is_nested(stack: Sequence[Orientation]) -> bool:
    """True if every entry fits strictly on the entry below it."""
    return all(upper.fits_on(lower) for lower, upper in zip(stack, stack[1:]))


def is_valid_stack(stack: Sequence[Orientation]) -> bool:
    """
    A stack is valid when no source box repeats and every adjacent pair
    satisfies strict footprint containment.
    """
    return is_single_use(stack) and is_nested(stack)


def result_rows(stack: Sequence[Orientation]) -> List[ResultRow]:
    """
    Build the output rows for `stack`, from the top box down.

    Each row is `(width, depth, height, cumulative)` where `cumulative` is
    the height from the top of the stack to the bottom of this box.
    """
    rows: List[ResultRow] = []
    cumulative = 0
    for o in reversed(stack):
        cumulative += o.height
        rows.append((o.width, o.depth, o.height, cumulative))
    return rows


# ---------------------------------------------------------------------------
# Footprint polygons
# ---------------------------------------------------------------------------

def footprint_polygon(width: float, depth: float) -> Polygon:
    """
    Footprint rectangle centred on the origin, `width` along x and
    `depth` along y.

    With every box centred on the stack axis, a footprint fits strictly on
    another exactly when the lower polygon `contains_properly` the upper one.
    """
    return shapely_box(-width / 2.0, -depth / 2.0, width / 2.0, depth / 2.0)


__all__ = [
    "Box",
    "Orientation",
    "Stack",
    "ResultRow",
    "boxes_from_dims",
    "orientations_for_box",
    "expand_orientations",
    "fits_between",
    "stack_height",
    "used_box_ids",
    "is_single_use",
    "is_nested",
    "is_valid_stack",
    "result_rows",
    "footprint_polygon",
]
