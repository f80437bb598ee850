# greedy.py
"""
Greedy fill-and-swap placement.

Positions are visited in traversal order. At each one the best-scoring unused
tile is chosen; if it already sits at another (unvisited) cell the two cells
exchange payloads, otherwise it is taken from the pool. Committed positions
are never revisited, which is what keeps every tile id on at most one cell.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Any
import logging
import random
import time

from catalog import Tile, TileCatalog
from env import Grid, PlacementSession
from errors import ConfigurationError
from scoring import ScoringModel
from traversal import Traversal, canonical_pattern

logger = logging.getLogger(__name__)

# scores closer than this are treated as a true tie
TIE_EPS = 1e-9


@dataclass
class PlacementParams:
    traversal: str = "row-major"
    rng_seed: Optional[int] = 0
    stochastic_ties: bool = False
    passes: int = 1

    def __post_init__(self):
        self.traversal = canonical_pattern(self.traversal)
        if self.passes < 1:
            raise ConfigurationError(f"passes must be >= 1, got {self.passes}")


@dataclass
class PlacementResult:
    placed: int
    empty: int
    swaps: int
    passes: int
    changed_last_pass: bool
    time: float
    order: List[int]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "placed": self.placed, "empty": self.empty, "swaps": self.swaps,
            "passes": self.passes, "changed_last_pass": self.changed_last_pass,
            "time": self.time,
        }


class PlacementEngine:

    def __init__(self, scoring: ScoringModel, params: Optional[PlacementParams] = None):
        self.scoring = scoring
        self.params = params if params is not None else PlacementParams()
        self._rng = random.Random(self.params.rng_seed)

    def new_session(self, grid: Grid, catalog: Optional[TileCatalog] = None) -> PlacementSession:
        return PlacementSession(grid=grid, catalog=catalog or self.scoring.index.catalog)

    def traversal(self, grid: Grid) -> Traversal:
        return Traversal(self.params.traversal, grid.width, grid.height, seed=self.params.rng_seed)

    def best_tile(self, session: PlacementSession, position: int) -> Optional[Tuple[Tile, float]]:
        """Highest-scoring unused tile for `position`; earliest catalog index wins ties."""
        grid = session.grid
        best: List[Tile] = []
        best_score = float("-inf")
        for tile in session.catalog:
            if tile.id in session.used_tile_ids:
                continue
            s = self.scoring.score(tile, position, grid, placed=session.visited)
            if s > best_score + TIE_EPS:
                best_score = s
                best = [tile]
            elif abs(s - best_score) <= TIE_EPS:
                best.append(tile)
        if not best:
            return None
        if self.params.stochastic_ties and len(best) > 1:
            return self._rng.choice(best), best_score
        return best[0], best_score

    def step(self, session: PlacementSession, position: int) -> Optional[str]:
        """
        Commit one position. Returns the chosen tile id, or None when the
        catalog is exhausted and the cell is left empty.
        """
        if position in session.visited:
            raise ValueError(f"position {position} already visited in this session")
        grid = session.grid
        choice = self.best_tile(session, position)
        if choice is None:
            if grid[position].tile is not None:
                # only a duplicate of a committed tile can be left here
                grid.clear(position)
            session.commit(position, None)
            return None

        tile, score = choice
        here = grid[position]
        if here.tile is None or here.tile.id != tile.id:
            source = grid.position_of(tile.id, exclude=session.visited)
            if source is not None:
                grid.swap(position, source)
                session.swaps += 1
                logger.debug("pos %d: swapped in %s from %d (score %.3f)", position, tile.id, source, score)
            else:
                grid.place(position, tile, 0)
                logger.debug("pos %d: placed %s from pool (score %.3f)", position, tile.id, score)
            session.placements += 1
        session.commit(position, tile.id)
        return tile.id

    def fill(self, session: PlacementSession) -> PlacementSession:
        """One full pass over every position of the session's grid."""
        for position in self.traversal(session.grid):
            if position in session.visited:
                continue
            self.step(session, position)
        return session

    def run(self, grid: Grid, catalog: Optional[TileCatalog] = None) -> PlacementResult:
        """
        Fill `grid` in place. With passes > 1 the fill is repeated on the
        resulting grid until a pass changes nothing.
        """
        t0 = time.time()
        total_swaps = 0
        changed = False
        done_passes = 0
        order: List[int] = []
        for p in range(self.params.passes):
            before = grid.tile_ids()
            session = self.fill(self.new_session(grid, catalog))
            total_swaps += session.swaps
            done_passes = p + 1
            order = session.order
            changed = grid.tile_ids() != before
            logger.info("placement pass %d: %d swaps, %d from pool", done_passes, session.swaps,
                        session.placements - session.swaps)
            if not changed:
                break
        placed = grid.filled_count
        return PlacementResult(
            placed=placed,
            empty=len(grid) - placed,
            swaps=total_swaps,
            passes=done_passes,
            changed_last_pass=changed,
            time=time.time() - t0,
            order=order,
        )


def fill_empty_cells(grid: Grid, catalog: TileCatalog) -> int:
    """
    Put unused tiles, in catalog order, into empty cells in row-major order.
    Tiles already on the grid are left where they are. Returns the number placed.
    """
    on_grid = {tid for tid in grid.tile_ids() if tid is not None}
    pool = [t for t in catalog if t.id not in on_grid]
    k = 0
    for i, c in enumerate(grid.cells):
        if k >= len(pool):
            break
        if c.tile is None:
            grid.place(i, pool[k])
            k += 1
    return k
