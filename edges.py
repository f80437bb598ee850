# edges.py
"""
Edge signatures for quartered tiles.

A tile is split by its diagonals into four triangles; each side of the square
is touched by exactly one of them. The boundary code of a side is the color of
that triangle, so at rotation 0 the signature is simply (north, east, south,
west). Rotating the tile clockwise by 90 degrees moves every code one side
clockwise: (top, right, bottom, left) -> (left, top, right, bottom).

Everything that compares boundaries goes through `signature`.
"""

from __future__ import annotations
from typing import NamedTuple, Tuple

from catalog import Tile

ROTATIONS: Tuple[int, ...] = (0, 90, 180, 270)
SIDES: Tuple[str, ...] = ("top", "right", "bottom", "left")
OPPOSITE = {"top": "bottom", "right": "left", "bottom": "top", "left": "right"}

# (dx, dy) from a cell to its neighbour on each side; y grows downwards
SIDE_OFFSETS = {"top": (0, -1), "right": (1, 0), "bottom": (0, 1), "left": (-1, 0)}


class EdgeSignature(NamedTuple):
    top: str
    right: str
    bottom: str
    left: str

    def side(self, name: str) -> str:
        return getattr(self, name)


def rotate_clockwise(sig: EdgeSignature, steps: int) -> EdgeSignature:
    """Shift the four codes clockwise by `steps` quarter turns."""
    k = steps % 4
    if k == 0:
        return sig
    codes = tuple(sig)
    return EdgeSignature(*(codes[(i - k) % 4] for i in range(4)))


def signature(tile: Tile, rotation: int = 0) -> EdgeSignature:
    if rotation not in ROTATIONS:
        raise ValueError(f"rotation must be one of {ROTATIONS}, got {rotation!r}")
    base = EdgeSignature(tile.north, tile.east, tile.south, tile.west)
    return rotate_clockwise(base, rotation // 90)


def edges_match(sig: EdgeSignature, side: str, neighbour: EdgeSignature) -> bool:
    """True when `neighbour`, lying on `side` of `sig`, presents the same code back."""
    return sig.side(side) == neighbour.side(OPPOSITE[side])
