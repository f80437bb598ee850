import pytest

from env import Grid, PlacementSession
from errors import ConfigurationError


def test_position_map_follows_place_swap_and_clear(family_catalog):
    g = Grid(3, 2)
    g.place(4, family_catalog["t0"])
    assert g.position_of("t0") == 4
    g.swap(4, 1)
    assert g.position_of("t0") == 1
    assert g[4].tile is None
    g.place(1, family_catalog["t2"])
    assert g.position_of("t0") is None
    assert g.position_of("t2") == 1
    g.clear(1)
    assert g.position_of("t2") is None
    g.swap(2, 2)
    assert g.filled_count == 0


def test_position_of_with_duplicates_and_filters(family_catalog):
    g = Grid.seeded(family_catalog, 4, 1, ["t5", None, "t5", "t5"])
    assert g.position_of("t5") == 0
    assert g.position_of("t5", exclude={0}) == 2
    assert g.position_of("t5", among={3}) == 3
    assert g.position_of("t5", among={1}) is None


def test_copy_keeps_position_map(family_catalog):
    g = Grid.seeded(family_catalog, 2, 2, [None, ("t1", 90)])
    c = g.copy()
    assert c.position_of("t1") == 1
    assert c[1].rotation == 90
    c.swap(0, 1)
    assert g.position_of("t1") == 1
    assert c.position_of("t1") == 0


@pytest.mark.parametrize("layout", [
    ["t0", "ghost"],
    [("t0", 45)],
    [("t0",)],
    [3],
    ["t0"] * 9,
])
def test_bad_seeded_layout(family_catalog, layout):
    with pytest.raises(ConfigurationError):
        Grid.seeded(family_catalog, 2, 2, layout)


def test_session_commit(family_catalog):
    s = PlacementSession(grid=Grid(2, 1), catalog=family_catalog)
    s.commit(0, "t3")
    s.commit(1, None)
    assert s.done
    assert s.order == [0, 1]
    assert [t.id for t in s.unused_tiles()] == ["t0", "t1", "t2", "t4", "t5", "t6", "t7"]
