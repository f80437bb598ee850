# analysis.py
"""
Pattern quality metrics over a grid.

`PatternAnalyzer.analyze` is pure: it reads the grid and returns a frozen
report. The composite score it computes is the objective of the local search.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence, Tuple, Any
import numpy as np

from env import Grid
from relations import RelationshipIndex

# composite = 0.4*edge + 0.3*mirror + 0.2*balance + 0.1*shape
COMPOSITE_WEIGHTS: Dict[str, float] = {
    "edge": 0.4,
    "mirror": 0.3,
    "balance": 0.2,
    "shape": 0.1,
}

# weight of a mirror pair whose adjacency does not follow its mirror axis
OFF_AXIS_MIRROR_WEIGHT = 0.5


@dataclass(frozen=True)
class PatternReport:
    edge_match_ratio: float
    matched_boundaries: int
    total_boundaries: int
    mirror_adjacency_count: float
    shape_cluster_count: int
    color_balance: float
    composite_score: float
    filled_cells: int
    total_cells: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MirrorPair:
    pos1: int
    pos2: int
    axis: str
    distance: int


class PatternAnalyzer:

    def __init__(
        self,
        index: RelationshipIndex,
        colors: Optional[Sequence[str]] = None,
        composite_weights: Optional[Dict[str, float]] = None,
        off_axis_mirror_weight: float = OFF_AXIS_MIRROR_WEIGHT,
    ):
        self.index = index
        self.colors: Tuple[str, ...] = tuple(colors) if colors is not None else index.catalog.colors
        self.composite_weights = dict(COMPOSITE_WEIGHTS)
        if composite_weights:
            self.composite_weights.update(composite_weights)
        self.off_axis_mirror_weight = off_axis_mirror_weight

    # each internal boundary once: right and bottom neighbour of every cell
    def _boundaries(self, grid: Grid):
        for i, c in enumerate(grid.cells):
            if c.tile is None:
                continue
            for side in ("right", "bottom"):
                for s, j in grid.neighbours(i):
                    if s == side and grid[j].tile is not None:
                        yield i, side, j

    def _mirror_weight(self, grid: Grid, i: int, side: str, j: int) -> float:
        axes = self.index.mirror_axes(grid[i].tile.id, grid[j].tile.id)
        if not axes or grid[i].tile.id == grid[j].tile.id:
            return 0.0
        along = "horizontal" if side == "right" else "vertical"
        return 1.0 if along in axes else self.off_axis_mirror_weight

    def color_balance(self, grid: Grid) -> float:
        k = len(self.colors)
        if k == 0:
            return 0.0
        slot = {c: n for n, c in enumerate(self.colors)}
        counts = np.zeros(k, dtype=float)
        total = 0
        for c in grid.cells:
            sig = c.signature()
            if sig is None:
                continue
            for code in sig:
                total += 1
                if code in slot:
                    counts[slot[code]] += 1
        if total == 0:
            return 0.0
        fractions = counts / total
        return float(1.0 - np.abs(fractions - 1.0 / k).sum())

    def analyze(self, grid: Grid) -> PatternReport:
        matched = 0
        total = 0
        mirror = 0.0
        shape = 0
        for i, side, j in self._boundaries(grid):
            total += 1
            a, b = grid[i], grid[j]
            if a.signature().side(side) == b.signature().side("left" if side == "right" else "top"):
                matched += 1
            mirror += self._mirror_weight(grid, i, side, j)
            if a.tile.shape_family == b.tile.shape_family:
                shape += 1

        edge_ratio = matched / total if total else 0.0
        balance = self.color_balance(grid)
        w = self.composite_weights
        composite = (
            w["edge"] * edge_ratio
            + w["mirror"] * (mirror / total if total else 0.0)
            + w["balance"] * max(0.0, balance)
            + w["shape"] * (shape / total if total else 0.0)
        )
        filled = grid.filled_count
        return PatternReport(
            edge_match_ratio=edge_ratio,
            matched_boundaries=matched,
            total_boundaries=total,
            mirror_adjacency_count=mirror,
            shape_cluster_count=shape,
            color_balance=balance,
            composite_score=composite,
            filled_cells=filled,
            total_cells=len(grid),
        )

    def composite_score(self, grid: Grid) -> float:
        return self.analyze(grid).composite_score

    # ---- extra views ----

    def neighbor_scores(self, grid: Grid) -> np.ndarray:
        """(height, width) array: matching sides per cell, 0 for empty cells."""
        heat = np.zeros((grid.height, grid.width), dtype=int)
        for i, side, j in self._boundaries(grid):
            opposite = "left" if side == "right" else "top"
            if grid[i].signature().side(side) == grid[j].signature().side(opposite):
                xi, yi = grid.coords(i)
                xj, yj = grid.coords(j)
                heat[yi, xi] += 1
                heat[yj, xj] += 1
        return heat

    def match_distribution(self, grid: Grid) -> Dict[str, int]:
        heat = self.neighbor_scores(grid)
        filled = np.array([[grid.cell(x, y).filled for x in range(grid.width)]
                           for y in range(grid.height)], dtype=bool)
        scores = heat[filled]
        return {
            "perfect": int((scores == 4).sum()),
            "good": int((scores == 3).sum()),
            "fair": int((scores == 2).sum()),
            "poor": int((scores == 1).sum()),
            "isolated": int((scores == 0).sum()),
        }

    def mirror_pairs(self, grid: Grid) -> List[MirrorPair]:
        """Every mirror pair present anywhere on the grid, with its axis and distance."""
        where: Dict[str, List[int]] = {}
        for i, c in enumerate(grid.cells):
            if c.tile is not None:
                where.setdefault(c.tile.id, []).append(i)
        pairs: List[MirrorPair] = []
        for i, c in enumerate(grid.cells):
            if c.tile is None:
                continue
            for axis in ("horizontal", "vertical"):
                partner = self.index.mirror_of(c.tile.id, axis)
                if partner is None or partner == c.tile.id:
                    continue
                for j in where.get(partner, ()):
                    if j > i:
                        pairs.append(MirrorPair(i, j, axis, grid.manhattan(i, j)))
        return pairs
