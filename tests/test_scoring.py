import pytest

from env import Grid
from errors import ConfigurationError
from relations import RelationshipIndex
from scoring import ScoringModel, ScoringWeights, Term


def only(term, value=1.0, **extra):
    w = {"edge_match": 0.0, "mirror": 0.0, "rotation_family": 0.0, "shape_cluster": 0.0, "distance": 0.0}
    w[term] = value
    w.update(extra)
    return ScoringWeights(**w)


def test_edge_match_counts_placed_neighbours(pair_catalog):
    idx = RelationshipIndex.build(pair_catalog)
    model = ScoringModel(idx, only("edge_match", 10.0))
    g = Grid(2, 2)
    g.place(0, pair_catalog["A"])
    assert model.score(pair_catalog["B"], 1, g) == 10.0
    assert model.score(pair_catalog["C"], 1, g) == 0.0
    # neighbour outside `placed` does not count
    assert model.score(pair_catalog["B"], 1, g, placed=set()) == 0.0


def test_edge_match_respects_rotation(pair_catalog):
    idx = RelationshipIndex.build(pair_catalog)
    model = ScoringModel(idx, only("edge_match"))
    g = Grid(2, 1)
    g.place(0, pair_catalog["A"])
    # B turned 180 degrees presents its east ('d') on the left
    assert model.edge_match(pair_catalog["B"], 1, g, rotation=180) == 0.0
    assert model.edge_match(pair_catalog["B"], 1, g, rotation=0) == 1.0


def test_mirror_and_rotation_bonus(family_catalog, family_index):
    g = Grid(3, 1)
    g.place(0, family_catalog["t0"])
    mirror = ScoringModel(family_index, only("mirror", 100.0))
    assert mirror.score(family_catalog["t2"], 1, g) == 100.0
    assert mirror.score(family_catalog["t5"], 1, g) == 0.0
    rot = ScoringModel(family_index, only("rotation_family", 50.0))
    assert rot.score(family_catalog["t1"], 1, g) == 50.0
    # not adjacent
    assert rot.score(family_catalog["t1"], 2, g) == 0.0


def test_shape_cluster_connectivity(family_catalog, family_index):
    g = Grid(2, 2)
    g.place(3, family_catalog["t1"])  # diagonal to position 0
    four = ScoringModel(family_index, only("shape_cluster"))
    eight = ScoringModel(family_index, only("shape_cluster", shape_connectivity=8))
    assert four.shape_cluster(family_catalog["t0"], 0, g) == 0.0
    assert eight.shape_cluster(family_catalog["t0"], 0, g) == 1.0


def test_distance_penalises_far_tiles(family_catalog, family_index):
    g = Grid(4, 1)
    g.place(3, family_catalog["t5"])
    model = ScoringModel(family_index, only("distance"))
    assert model.score(family_catalog["t5"], 0, g) == -3.0
    assert model.score(family_catalog["t5"], 3, g) == 0.0
    # tiles not on the grid carry no penalty
    assert model.score(family_catalog["t6"], 0, g) == 0.0


def test_breakdown_skips_zero_weights(family_catalog, family_index):
    model = ScoringModel(family_index, only("mirror"))
    parts = model.breakdown(family_catalog["t0"], 0, Grid(2, 2))
    assert list(parts) == [Term.MIRROR]


def test_color_priority_scales_edge_matches(pair_catalog):
    idx = RelationshipIndex.build(pair_catalog)
    g = Grid(2, 1)
    g.place(0, pair_catalog["A"])
    low = ScoringModel(idx, only("edge_match", 10.0, color_priority={"a": 1.0, "b": 4.0}))
    high = ScoringModel(idx, only("edge_match", 10.0, color_priority={"a": 4.0, "b": 1.0}))
    assert low.score(pair_catalog["B"], 1, g) == pytest.approx(2.5)
    assert high.score(pair_catalog["B"], 1, g) == pytest.approx(10.0)


def test_weights_from_dict_rejects_unknown():
    assert ScoringWeights.from_dict({"mirror": 5}).mirror == 5
    with pytest.raises(ConfigurationError):
        ScoringWeights.from_dict({"mirrors": 5})
    with pytest.raises(ConfigurationError):
        ScoringWeights(shape_connectivity=6)


def test_distance_ignores_committed_cells(family_catalog, family_index):
    g = Grid.seeded(family_catalog, 4, 1, ["t5", None, None, "t5"])
    model = ScoringModel(family_index, only("distance"))
    # the copy at 0 is committed; only the one at 3 can still move
    assert model.score(family_catalog["t5"], 1, g, placed={0}) == -2.0
    assert model.score(family_catalog["t5"], 1, g, placed={0, 3}) == 0.0
