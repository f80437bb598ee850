# traversal.py
"""
Grid traversal orders.

Every pattern yields each index of a width x height row-major grid exactly
once. Sequences are lazy and restartable: iterating a Traversal again replays
the same order (random-walk replays only when seeded).
"""

from __future__ import annotations
from typing import Iterator, Optional, Tuple
import numpy as np

from errors import ConfigurationError

PATTERNS: Tuple[str, ...] = (
    "row-major",
    "column-major",
    "spiral-clockwise",
    "spiral-counterclockwise",
    "diagonal-sweep",
    "block-2x2",
    "checkerboard",
    "random-walk",
)

ALIASES = {
    "spiral-counter": "spiral-counterclockwise",
    "diagonal": "diagonal-sweep",
    "2x2-block": "block-2x2",
}


def canonical_pattern(pattern: str) -> str:
    name = ALIASES.get(pattern, pattern)
    if name not in PATTERNS:
        raise ConfigurationError(f"unknown traversal pattern {pattern!r}; expected one of {PATTERNS}")
    return name


def check_dimensions(width: int, height: int) -> None:
    if int(width) <= 0 or int(height) <= 0:
        raise ConfigurationError(f"grid dimensions must be positive, got {width}x{height}")


# ---------- pattern generators (yield (row, col)) ----------

def _row_major(w: int, h: int):
    for r in range(h):
        for c in range(w):
            yield r, c

def _column_major(w: int, h: int):
    for c in range(w):
        for r in range(h):
            yield r, c

def _spiral_cw(w: int, h: int):
    top, bottom, left, right = 0, h - 1, 0, w - 1
    while top <= bottom and left <= right:
        for c in range(left, right + 1):
            yield top, c
        top += 1
        for r in range(top, bottom + 1):
            yield r, right
        right -= 1
        if top <= bottom:
            for c in range(right, left - 1, -1):
                yield bottom, c
            bottom -= 1
        if left <= right:
            for r in range(bottom, top - 1, -1):
                yield r, left
            left += 1

def _spiral_ccw(w: int, h: int):
    # transpose of the clockwise walk: down the left column first
    top, bottom, left, right = 0, h - 1, 0, w - 1
    while top <= bottom and left <= right:
        for r in range(top, bottom + 1):
            yield r, left
        left += 1
        for c in range(left, right + 1):
            yield bottom, c
        bottom -= 1
        if left <= right:
            for r in range(bottom, top - 1, -1):
                yield r, right
            right -= 1
        if top <= bottom:
            for c in range(right, left - 1, -1):
                yield top, c
            top += 1

def _diagonal(w: int, h: int):
    for d in range(w + h - 1):
        for r in range(h):
            c = d - r
            if 0 <= c < w:
                yield r, c

def _block_2x2(w: int, h: int):
    for br in range(0, h, 2):
        for bc in range(0, w, 2):
            for r in range(br, min(br + 2, h)):
                for c in range(bc, min(bc + 2, w)):
                    yield r, c

def _checkerboard(w: int, h: int):
    for parity in (0, 1):
        for r in range(h):
            for c in range(w):
                if (r + c) % 2 == parity:
                    yield r, c

_GENERATORS = {
    "row-major": _row_major,
    "column-major": _column_major,
    "spiral-clockwise": _spiral_cw,
    "spiral-counterclockwise": _spiral_ccw,
    "diagonal-sweep": _diagonal,
    "block-2x2": _block_2x2,
    "checkerboard": _checkerboard,
}


class Traversal:
    """A finite, restartable permutation of grid indices for one pattern."""

    def __init__(self, pattern: str, width: int, height: int, seed: Optional[int] = None):
        check_dimensions(width, height)
        self.pattern = canonical_pattern(pattern)
        self.width = int(width)
        self.height = int(height)
        self.seed = seed

    def __len__(self) -> int:
        return self.width * self.height

    def __iter__(self) -> Iterator[int]:
        w, h = self.width, self.height
        if self.pattern == "random-walk":
            rng = np.random.RandomState(self.seed)
            for pos in rng.permutation(w * h):
                yield int(pos)
            return
        for r, c in _GENERATORS[self.pattern](w, h):
            yield r * w + c

    def __repr__(self) -> str:
        return f"Traversal({self.pattern!r}, {self.width}x{self.height}, seed={self.seed})"


def generate(pattern: str, width: int, height: int, seed: Optional[int] = None) -> Traversal:
    """Validate eagerly, then return the lazy sequence of positions."""
    return Traversal(pattern, width, height, seed=seed)
