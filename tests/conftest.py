import sys, os

import pytest

# Ensure the repository root is on path for test imports
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from catalog import Tile, TileCatalog
from generator import make_tile_catalog
from relations import RelationshipIndex


@pytest.fixture
def pair_catalog():
    """A's east and B's west share color 'a'; no other boundary can match."""
    return TileCatalog([
        Tile("A", north="c", east="a", south="b", west="b"),
        Tile("C", north="c", east="d", south="b", west="b"),
        Tile("D", north="c", east="d", south="b", west="b"),
        Tile("B", north="c", east="d", south="b", west="a"),
    ])


@pytest.fixture
def family_catalog():
    """Eight tiles over six shape families, with mirror and rotation links."""
    return TileCatalog([
        Tile("t0", "a", "b", "c", "d", shape_family=0, mirror_horizontal="t2", rotation90="t1"),
        Tile("t1", "d", "a", "b", "c", shape_family=0, rotation270="t0"),
        Tile("t2", "a", "d", "c", "b", shape_family=1, mirror_horizontal="t0"),
        Tile("t3", "b", "b", "a", "a", shape_family=1, mirror_vertical="t4"),
        Tile("t4", "a", "b", "b", "a", shape_family=2, mirror_vertical="t3"),
        Tile("t5", "c", "c", "c", "c", shape_family=3),
        Tile("t6", "d", "d", "a", "a", shape_family=4),
        Tile("t7", "b", "c", "d", "a", shape_family=5),
    ])


@pytest.fixture
def family_index(family_catalog):
    return RelationshipIndex.build(family_catalog)


@pytest.fixture
def generated_catalog():
    return make_tile_catalog(num_families=10, seed=7)
