# scoring.py
"""
Weighted scoring of a candidate tile for a target cell.

The composite score is a weighted sum over a fixed set of named terms (see
`Term`). Each term is a pure function of (tile, position, grid, placed); the
weights live in an explicit `ScoringWeights` table so a score can be broken
down and inspected term by term.

`placed` is the set of positions whose tiles count as already placed (the
session's visited positions during a fill). With `placed=None` every filled
neighbour counts.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import Dict, Optional, Set, Any, Iterable

from catalog import Tile
from edges import OPPOSITE, signature
from env import Grid
from errors import ConfigurationError
from relations import RelationshipIndex


class Term(str, Enum):
    EDGE_MATCH = "edge_match"
    MIRROR = "mirror"
    ROTATION_FAMILY = "rotation_family"
    SHAPE_CLUSTER = "shape_cluster"
    DISTANCE = "distance"


@dataclass
class ScoringWeights:
    edge_match: float = 10.0
    mirror: float = 100.0
    rotation_family: float = 50.0
    shape_cluster: float = 20.0
    distance: float = 1.0
    # per-color multipliers; colors not listed count as 1.0
    color_priority: Dict[str, float] = field(default_factory=dict)
    shape_connectivity: int = 4

    def __post_init__(self):
        if self.shape_connectivity not in (4, 8):
            raise ConfigurationError(f"shape_connectivity must be 4 or 8, got {self.shape_connectivity}")
        for color, m in self.color_priority.items():
            if m < 0:
                raise ConfigurationError(f"color priority for {color!r} must be >= 0, got {m}")

    def weight(self, term: Term) -> float:
        return float(getattr(self, term.value))

    def active_terms(self) -> list:
        return [t for t in Term if self.weight(t) != 0.0]

    def color_multiplier(self, color: str) -> float:
        """Priority of `color` relative to the strongest priority in the table."""
        if not self.color_priority:
            return 1.0
        top = max(max(self.color_priority.values()), 1.0)
        return self.color_priority.get(color, 1.0) / top

    def tile_color_factor(self, tile: Tile) -> float:
        """Scale for non-edge terms: the tile's highest-priority color."""
        if not self.color_priority:
            return 1.0
        return max(self.color_multiplier(c) for c in tile.colors)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "ScoringWeights":
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ConfigurationError(f"unknown scoring weight(s): {sorted(unknown)}")
        return cls(**options)


DEFAULT_WEIGHTS = ScoringWeights()


class ScoringModel:
    """
    Evaluates candidates for a position. `terms` restricts which terms are
    computed at all; a zero weight has the same effect without code changes.
    """

    def __init__(
        self,
        index: RelationshipIndex,
        weights: Optional[ScoringWeights] = None,
        terms: Optional[Iterable[Term]] = None,
    ):
        self.index = index
        self.weights = weights if weights is not None else ScoringWeights()
        self.terms = tuple(Term(t) for t in terms) if terms is not None else tuple(Term)

    # ---- individual terms ----

    def _placed_neighbours(self, position: int, grid: Grid, placed: Optional[Set[int]]):
        for side, j in grid.neighbours(position):
            c = grid[j]
            if c.tile is None:
                continue
            if placed is not None and j not in placed:
                continue
            yield side, c

    def edge_match(self, tile: Tile, position: int, grid: Grid,
                   placed: Optional[Set[int]] = None, rotation: int = 0) -> float:
        sig = signature(tile, rotation)
        total = 0.0
        for side, c in self._placed_neighbours(position, grid, placed):
            code = sig.side(side)
            if code == c.signature().side(OPPOSITE[side]):
                total += self.weights.color_multiplier(code)
        return total

    def mirror(self, tile: Tile, position: int, grid: Grid,
               placed: Optional[Set[int]] = None) -> float:
        for _, c in self._placed_neighbours(position, grid, placed):
            if self.index.is_mirror_pair(c.tile.id, tile.id):
                return 1.0
        return 0.0

    def rotation_family(self, tile: Tile, position: int, grid: Grid,
                        placed: Optional[Set[int]] = None) -> float:
        for _, c in self._placed_neighbours(position, grid, placed):
            if self.index.same_rotation_family(c.tile.id, tile.id):
                return 1.0
        return 0.0

    def shape_cluster(self, tile: Tile, position: int, grid: Grid,
                      placed: Optional[Set[int]] = None) -> float:
        n = 0
        for j in grid.surrounding(position, self.weights.shape_connectivity):
            c = grid[j]
            if c.tile is None or c.tile.id == tile.id:
                continue
            if placed is not None and j not in placed:
                continue
            if c.tile.shape_family == tile.shape_family:
                n += 1
        return float(n)

    def distance(self, tile: Tile, position: int, grid: Grid,
                 placed: Optional[Set[int]] = None) -> float:
        # tiles sitting on visited cells are committed and never relocated
        current = grid.position_of(tile.id, exclude=placed)
        if current is None or current == position:
            return 0.0
        return -float(grid.manhattan(current, position))

    # ---- composite ----

    def breakdown(self, tile: Tile, position: int, grid: Grid,
                  placed: Optional[Set[int]] = None, rotation: int = 0) -> Dict[Term, float]:
        """Raw (unweighted) value of every enabled term with a non-zero weight."""
        out: Dict[Term, float] = {}
        for term in self.terms:
            if self.weights.weight(term) == 0.0:
                continue
            if term is Term.EDGE_MATCH:
                out[term] = self.edge_match(tile, position, grid, placed, rotation)
            elif term is Term.MIRROR:
                out[term] = self.mirror(tile, position, grid, placed)
            elif term is Term.ROTATION_FAMILY:
                out[term] = self.rotation_family(tile, position, grid, placed)
            elif term is Term.SHAPE_CLUSTER:
                out[term] = self.shape_cluster(tile, position, grid, placed)
            elif term is Term.DISTANCE:
                out[term] = self.distance(tile, position, grid, placed)
        return out

    def score(self, tile: Tile, position: int, grid: Grid,
              placed: Optional[Set[int]] = None, rotation: int = 0) -> float:
        parts = self.breakdown(tile, position, grid, placed, rotation)
        factor = self.weights.tile_color_factor(tile)
        total = 0.0
        for term, raw in parts.items():
            contrib = raw * self.weights.weight(term)
            # edge matches are already color-weighted per boundary; distance is color-blind
            if term in (Term.MIRROR, Term.ROTATION_FAMILY, Term.SHAPE_CLUSTER):
                contrib *= factor
            total += contrib
        return total
