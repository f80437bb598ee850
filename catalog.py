# catalog.py
"""
Tile catalog

A catalog is the fixed inventory of quartered tiles for one optimization run.
Each tile carries four triangle colors (north, east, south, west), a shape
family shared by its rotation variants, and the ids of its mirror and
rotation relatives. Catalogs are built once and never mutated afterwards.

Key Components:
- Tile: immutable tile value
- TileCatalog: ordered id -> Tile directory
- load_catalog_csv / save_catalog_csv: tabular input with flexible headers
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Any
from pathlib import Path
import csv

COLORS: Tuple[str, ...] = ("a", "b", "c", "d")


@dataclass(frozen=True)
class Tile:
    id: str
    north: str
    east: str
    south: str
    west: str
    shape_family: int = 0
    mirror_horizontal: Optional[str] = None
    mirror_vertical: Optional[str] = None
    rotation0: Optional[str] = None
    rotation90: Optional[str] = None
    rotation180: Optional[str] = None
    rotation270: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("tile id must be a non-empty string")
        if self.rotation0 is None:
            object.__setattr__(self, "rotation0", self.id)

    @property
    def colors(self) -> Tuple[str, str, str, str]:
        """Triangle colors in N, E, S, W order."""
        return (self.north, self.east, self.south, self.west)

    @property
    def rotation_ids(self) -> Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]:
        return (self.rotation0, self.rotation90, self.rotation180, self.rotation270)


class TileCatalog:
    """
    Read-only directory of tiles, ordered as supplied.

    The order matters: placement ties are broken in favour of the tile with
    the smallest catalog index.
    """

    def __init__(self, tiles: Iterable[Tile], colors: Optional[Iterable[str]] = None):
        self._tiles: Tuple[Tile, ...] = tuple(tiles)
        self._by_id: Dict[str, Tile] = {}
        self._index: Dict[str, int] = {}
        for i, t in enumerate(self._tiles):
            if t.id in self._by_id:
                raise ValueError(f"duplicate tile id in catalog: {t.id!r}")
            self._by_id[t.id] = t
            self._index[t.id] = i
        if colors is None:
            seen = {c for t in self._tiles for c in t.colors}
            colors = sorted(seen)
        self._colors: Tuple[str, ...] = tuple(colors)

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def __contains__(self, tile_id: object) -> bool:
        return tile_id in self._by_id

    def __getitem__(self, tile_id: str) -> Tile:
        return self._by_id[tile_id]

    def __repr__(self) -> str:
        return f"TileCatalog({len(self)} tiles, colors={self._colors})"

    @property
    def tiles(self) -> Tuple[Tile, ...]:
        return self._tiles

    @property
    def colors(self) -> Tuple[str, ...]:
        """Color alphabet; inferred from the tiles unless given explicitly."""
        return self._colors

    def get(self, tile_id: Optional[str]) -> Optional[Tile]:
        if tile_id is None:
            return None
        return self._by_id.get(tile_id)

    def index_of(self, tile_id: str) -> int:
        return self._index[tile_id]

    def ids(self) -> List[str]:
        return [t.id for t in self._tiles]

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]], colors: Optional[Iterable[str]] = None) -> "TileCatalog":
        return cls((tile_from_record(r) for r in records), colors=colors)


# ===== Tabular input =====

# header aliases accepted for each field, lower-cased
_COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "tile_id"),
    "north": ("north", "n", "edgen"),
    "east": ("east", "e", "edgee"),
    "south": ("south", "s", "edges"),
    "west": ("west", "w", "edgew"),
    "shape_family": ("shape_family", "shape", "family"),
    "mirror_horizontal": ("mirror_horizontal", "mirrorh", "h_mirror_id", "horizontal_mirror_id"),
    "mirror_vertical": ("mirror_vertical", "mirrorv", "v_mirror_id", "vertical_mirror_id"),
    "rotation0": ("rotation0", "rot0", "r0"),
    "rotation90": ("rotation90", "rot90", "r90"),
    "rotation180": ("rotation180", "rot180", "r180"),
    "rotation270": ("rotation270", "rot270", "r270"),
}

_REQUIRED = ("id", "north", "east", "south", "west")


def _resolve_columns(headers: Iterable[str]) -> Dict[str, str]:
    """Map canonical field name -> actual header present in the file."""
    lowered = {h.strip().lower(): h for h in headers if h is not None}
    found: Dict[str, str] = {}
    for field, aliases in _COLUMN_ALIASES.items():
        for a in aliases:
            if a in lowered:
                found[field] = lowered[a]
                break
    missing = [f for f in _REQUIRED if f not in found]
    if missing:
        raise ValueError(f"catalog table is missing required columns: {missing}")
    return found


def _blank_to_none(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def tile_from_record(record: Dict[str, Any]) -> Tile:
    """Build a Tile from a dict keyed by canonical field names or any alias."""
    cols = _resolve_columns(record.keys())
    get = lambda f: record.get(cols[f]) if f in cols else None
    tid = _blank_to_none(get("id"))
    if tid is None:
        raise ValueError("tile record without an id")
    edges = {}
    for f in ("north", "east", "south", "west"):
        # short rows come back from csv.DictReader with None in the missing cells
        edges[f] = _blank_to_none(get(f))
        if edges[f] is None:
            raise ValueError(f"tile {tid}: missing {f}")
    shape_raw = _blank_to_none(get("shape_family"))
    return Tile(
        id=tid,
        shape_family=int(float(shape_raw)) if shape_raw is not None else 0,
        mirror_horizontal=_blank_to_none(get("mirror_horizontal")),
        mirror_vertical=_blank_to_none(get("mirror_vertical")),
        rotation0=_blank_to_none(get("rotation0")),
        rotation90=_blank_to_none(get("rotation90")),
        rotation180=_blank_to_none(get("rotation180")),
        rotation270=_blank_to_none(get("rotation270")),
        **edges,
    )


def load_catalog_csv(path: str, colors: Optional[Iterable[str]] = None) -> TileCatalog:
    with open(path, newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        rows = [r for r in reader if any((v or "").strip() for k, v in r.items() if k is not None)]
    return TileCatalog.from_records(rows, colors=colors)


CSV_FIELDS = (
    "id", "north", "east", "south", "west", "shape_family",
    "mirror_horizontal", "mirror_vertical",
    "rotation0", "rotation90", "rotation180", "rotation270",
)


def save_catalog_csv(catalog: TileCatalog, path: str) -> str:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as fh:
        w = csv.writer(fh)
        w.writerow(CSV_FIELDS)
        for t in catalog:
            w.writerow([
                t.id, t.north, t.east, t.south, t.west, t.shape_family,
                t.mirror_horizontal or "", t.mirror_vertical or "",
                t.rotation0 or "", t.rotation90 or "", t.rotation180 or "", t.rotation270 or "",
            ])
    return str(path)
