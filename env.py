# env.py
"""
Grid state for tile placement.

This module holds the mutable side of a run: the fixed-size grid of cells and
the PlacementSession that threads the "which tiles are spoken for" state
through every placement call.

Key Components:
- Cell: one grid slot (coordinates, optional tile, rotation)
- Grid: row-major width x height array of cells; owns all cells
- PlacementSession: grid + used tile ids + visited positions for one fill
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple, Any, Union
import numpy as np

from catalog import Tile, TileCatalog
from edges import ROTATIONS, SIDES, SIDE_OFFSETS, EdgeSignature, signature
from errors import ConfigurationError
from traversal import check_dimensions

Coordinate = Tuple[int, int]

# 8-connected offsets, clockwise from north-west
DIAGONAL_OFFSETS: Tuple[Coordinate, ...] = ((-1, -1), (1, -1), (1, 1), (-1, 1))


@dataclass
class Cell:
    x: int
    y: int
    tile: Optional[Tile] = None
    rotation: int = 0

    @property
    def filled(self) -> bool:
        return self.tile is not None

    @property
    def tile_id(self) -> Optional[str]:
        return self.tile.id if self.tile is not None else None

    def signature(self) -> Optional[EdgeSignature]:
        if self.tile is None:
            return None
        return signature(self.tile, self.rotation)


class Grid:
    """
    Fixed-size grid of cells in row-major order.

    The grid does not police tile uniqueness; the placement engine does.
    Swaps exchange (tile, rotation) payloads and never coordinates.
    Cell contents change only through place/clear/swap, which keep the
    tile id -> positions map in step.
    """

    def __init__(self, width: int, height: int):
        check_dimensions(width, height)
        self.width = int(width)
        self.height = int(height)
        self.cells: List[Cell] = [Cell(x, y) for y in range(self.height) for x in range(self.width)]
        self._where: Dict[str, Set[int]] = {}

    # ---- geometry ----

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def coords(self, index: int) -> Coordinate:
        return index % self.width, index // self.width

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        return self.cells[self.index(x, y)]

    def neighbours(self, index: int) -> List[Tuple[str, int]]:
        """Orthogonal neighbours as (side, index) pairs."""
        x, y = self.coords(index)
        out = []
        for side in SIDES:
            dx, dy = SIDE_OFFSETS[side]
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                out.append((side, self.index(nx, ny)))
        return out

    def surrounding(self, index: int, connectivity: int = 4) -> List[int]:
        """Neighbour indices for 4- or 8-connectivity."""
        if connectivity not in (4, 8):
            raise ValueError(f"connectivity must be 4 or 8, got {connectivity}")
        out = [j for _, j in self.neighbours(index)]
        if connectivity == 8:
            x, y = self.coords(index)
            for dx, dy in DIAGONAL_OFFSETS:
                if self.in_bounds(x + dx, y + dy):
                    out.append(self.index(x + dx, y + dy))
        return out

    def manhattan(self, a: int, b: int) -> int:
        ax, ay = self.coords(a)
        bx, by = self.coords(b)
        return abs(ax - bx) + abs(ay - by)

    # ---- contents ----

    def place(self, index: int, tile: Optional[Tile], rotation: int = 0) -> None:
        if rotation not in ROTATIONS:
            raise ValueError(f"rotation must be one of {ROTATIONS}, got {rotation!r}")
        c = self.cells[index]
        self._forget(index)
        c.tile = tile
        c.rotation = rotation if tile is not None else 0
        self._remember(index)

    def clear(self, index: int) -> None:
        self.place(index, None)

    def swap(self, a: int, b: int) -> None:
        if a == b:
            return
        ca, cb = self.cells[a], self.cells[b]
        self._forget(a)
        self._forget(b)
        ca.tile, cb.tile = cb.tile, ca.tile
        ca.rotation, cb.rotation = cb.rotation, ca.rotation
        self._remember(a)
        self._remember(b)

    def _forget(self, index: int) -> None:
        t = self.cells[index].tile
        if t is not None:
            where = self._where[t.id]
            where.discard(index)
            if not where:
                del self._where[t.id]

    def _remember(self, index: int) -> None:
        t = self.cells[index].tile
        if t is not None:
            self._where.setdefault(t.id, set()).add(index)

    def position_of(self, tile_id: str, among: Optional[Set[int]] = None,
                    exclude: Optional[Set[int]] = None) -> Optional[int]:
        """First index holding `tile_id`, restricted to `among` and outside `exclude`."""
        for i in sorted(self._where.get(tile_id, ())):
            if among is not None and i not in among:
                continue
            if exclude is not None and i in exclude:
                continue
            return i
        return None

    def filled_indices(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c.tile is not None]

    @property
    def filled_count(self) -> int:
        return sum(1 for c in self.cells if c.tile is not None)

    def tile_ids(self) -> List[Optional[str]]:
        return [c.tile_id for c in self.cells]

    def copy(self) -> "Grid":
        g = Grid(self.width, self.height)
        for i, src in enumerate(self.cells):
            g.place(i, src.tile, src.rotation)
        return g

    # ---- conversion ----

    @classmethod
    def seeded(
        cls,
        catalog: TileCatalog,
        width: int,
        height: int,
        layout: Sequence[Union[None, str, Tuple[str, int]]],
    ) -> "Grid":
        """
        Build a pre-seeded grid from a row-major layout of tile ids, (id, rotation)
        pairs or None for empty cells.
        """
        g = cls(width, height)
        if len(layout) > len(g):
            raise ConfigurationError(f"layout has {len(layout)} entries for a {width}x{height} grid")
        for i, entry in enumerate(layout):
            if entry is None:
                continue
            if isinstance(entry, tuple) and len(entry) == 2:
                tid, rot = entry
            elif isinstance(entry, str):
                tid, rot = entry, 0
            else:
                raise ConfigurationError(f"layout entry {i}: expected id or (id, rotation), got {entry!r}")
            if tid not in catalog:
                raise ConfigurationError(f"layout entry {i}: unknown tile id {tid!r}")
            if rot not in ROTATIONS:
                raise ConfigurationError(f"layout entry {i}: rotation must be one of {ROTATIONS}, got {rot!r}")
            g.place(i, catalog[tid], rot)
        return g

    def to_records(self) -> List[Dict[str, Any]]:
        return [
            {"x": c.x, "y": c.y, "tile_id": c.tile_id, "rotation": c.rotation}
            for c in self.cells
        ]

    def to_index_array(self, catalog: TileCatalog) -> np.ndarray:
        """(height, width) array of catalog indices, -1 for empty cells."""
        arr = np.full((self.height, self.width), -1, dtype=int)
        for c in self.cells:
            if c.tile is not None:
                arr[c.y, c.x] = catalog.index_of(c.tile.id)
        return arr

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, filled={self.filled_count})"


@dataclass
class PlacementSession:
    """
    All mutable state of one fill, owned by the caller and passed explicitly.

    `used_tile_ids` are the tiles already committed to visited positions;
    a visited position is never touched again during the same session.
    """
    grid: Grid
    catalog: TileCatalog
    used_tile_ids: Set[str] = field(default_factory=set)
    visited: Set[int] = field(default_factory=set)
    order: List[int] = field(default_factory=list)
    swaps: int = 0
    placements: int = 0

    def unused_tiles(self) -> List[Tile]:
        return [t for t in self.catalog if t.id not in self.used_tile_ids]

    def commit(self, position: int, tile_id: Optional[str]) -> None:
        self.visited.add(position)
        self.order.append(position)
        if tile_id is not None:
            self.used_tile_ids.add(tile_id)

    @property
    def done(self) -> bool:
        return len(self.visited) == len(self.grid)
