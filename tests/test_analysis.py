import numpy as np
import pytest

from analysis import PatternAnalyzer
from catalog import Tile, TileCatalog
from env import Grid
from relations import RelationshipIndex


@pytest.fixture
def analyzer(family_index):
    return PatternAnalyzer(family_index)


def full_grid(catalog):
    return Grid.seeded(catalog, 4, 2, catalog.ids())


def test_analyze_is_pure_and_idempotent(family_catalog, analyzer):
    grid = full_grid(family_catalog)
    before = grid.tile_ids()
    first = analyzer.analyze(grid)
    second = analyzer.analyze(grid)
    assert first == second
    assert grid.tile_ids() == before


def test_report_ranges(family_catalog, analyzer):
    r = analyzer.analyze(full_grid(family_catalog))
    # 4x2 grid: 3*2 horizontal + 4*1 vertical boundaries
    assert r.total_boundaries == 10
    assert 0.0 <= r.edge_match_ratio <= 1.0
    assert -1.0 <= r.color_balance <= 1.0
    assert r.filled_cells == r.total_cells == 8
    assert np.isfinite(r.composite_score)


def test_empty_grid(analyzer):
    r = analyzer.analyze(Grid(3, 3))
    assert r.total_boundaries == 0
    assert r.edge_match_ratio == 0.0
    assert r.composite_score == 0.0


def test_mirror_adjacency_axis_weighting(family_catalog, analyzer):
    # t0|t2 are horizontal mirrors placed side by side
    side_by_side = Grid.seeded(family_catalog, 2, 1, ["t0", "t2"])
    stacked = Grid.seeded(family_catalog, 1, 2, ["t0", "t2"])
    assert analyzer.analyze(side_by_side).mirror_adjacency_count == 1.0
    assert analyzer.analyze(stacked).mirror_adjacency_count == 0.5


def test_shape_cluster_count(family_catalog, analyzer):
    grid = Grid.seeded(family_catalog, 2, 1, ["t0", "t1"])
    assert analyzer.analyze(grid).shape_cluster_count == 1


def test_perfect_color_balance():
    cat = TileCatalog([Tile("u", "a", "b", "c", "d")])
    a = PatternAnalyzer(RelationshipIndex.build(cat))
    assert a.color_balance(Grid.seeded(cat, 1, 1, ["u"])) == pytest.approx(1.0)


def test_neighbor_scores_and_distribution(pair_catalog):
    a = PatternAnalyzer(RelationshipIndex.build(pair_catalog))
    grid = Grid.seeded(pair_catalog, 2, 2, ["A", "B", "C", "D"])
    heat = a.neighbor_scores(grid)
    assert heat.shape == (2, 2)
    assert heat.tolist() == [[1, 1], [0, 0]]
    dist = a.match_distribution(grid)
    assert dist["poor"] == 2 and dist["isolated"] == 2


def test_mirror_pairs_anywhere(family_catalog, analyzer):
    grid = full_grid(family_catalog)
    pairs = analyzer.mirror_pairs(grid)
    found = {(grid[p.pos1].tile_id, grid[p.pos2].tile_id, p.axis) for p in pairs}
    assert ("t0", "t2", "horizontal") in found
    assert ("t3", "t4", "vertical") in found
    assert {p.axis: p.distance for p in pairs} == {"horizontal": 2, "vertical": 4}
