import csv

import pytest

from catalog import Tile, TileCatalog, load_catalog_csv, save_catalog_csv, tile_from_record


def test_catalog_lookup_and_order(family_catalog):
    assert len(family_catalog) == 8
    assert family_catalog.ids()[:3] == ["t0", "t1", "t2"]
    assert family_catalog.index_of("t5") == 5
    assert "t7" in family_catalog and "nope" not in family_catalog
    assert family_catalog.get(None) is None
    assert family_catalog.colors == ("a", "b", "c", "d")


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        TileCatalog([Tile("x", "a", "a", "a", "a"), Tile("x", "b", "b", "b", "b")])


def test_rotation0_defaults_to_own_id():
    assert Tile("q", "a", "b", "c", "d").rotation0 == "q"


def test_record_accepts_header_aliases():
    t = tile_from_record({
        "tile_id": "z", "N": "a", "E": "b", "S": "c", "W": "d",
        "shape": "3", "MirrorH": "y", "MirrorV": "", "rot90": "w",
    })
    assert (t.id, t.colors, t.shape_family) == ("z", ("a", "b", "c", "d"), 3)
    assert t.mirror_horizontal == "y"
    assert t.mirror_vertical is None
    assert t.rotation90 == "w"


def test_record_missing_edge_column():
    with pytest.raises(ValueError):
        tile_from_record({"id": "z", "north": "a", "east": "b", "south": "c"})


def test_record_blank_or_missing_color_rejected():
    with pytest.raises(ValueError, match="missing west"):
        tile_from_record({"id": "z", "north": "a", "east": "b", "south": "c", "west": None})
    with pytest.raises(ValueError, match="missing east"):
        tile_from_record({"id": "z", "north": "a", "east": " ", "south": "c", "west": "d"})


def test_csv_short_row_rejected(tmp_path):
    path = tmp_path / "short.csv"
    path.write_text("id,north,east,south,west\np,a,b,a\n")
    with pytest.raises(ValueError, match="tile p: missing west"):
        load_catalog_csv(str(path))


def test_csv_save_and_load(tmp_path, family_catalog):
    path = tmp_path / "cat.csv"
    save_catalog_csv(family_catalog, str(path))
    loaded = load_catalog_csv(str(path))
    assert loaded.ids() == family_catalog.ids()
    assert loaded["t0"] == family_catalog["t0"]
    assert loaded["t3"].mirror_vertical == "t4"


def test_csv_blank_rows_skipped(tmp_path):
    path = tmp_path / "cat.csv"
    with open(path, "w", newline="") as fh:
        w = csv.writer(fh)
        w.writerow(["ID", "EdgeN", "EdgeE", "EdgeS", "EdgeW"])
        w.writerow(["p", "a", "b", "a", "b"])
        w.writerow(["", "", "", "", ""])
        w.writerow(["q", "b", "a", "b", "a"])
    cat = load_catalog_csv(str(path))
    assert cat.ids() == ["p", "q"]
