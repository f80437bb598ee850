# relations.py
"""
Relationship index over a tile catalog.

Precomputed, read-only lookups used by the scoring model: mirror partners,
rotation families, shape groups and an edge-color index. The index has no
say in placement; a missing relationship just means "no bonus".
"""

from __future__ import annotations
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional, Tuple
import logging

from catalog import Tile, TileCatalog
from edges import SIDES, OPPOSITE, signature

logger = logging.getLogger(__name__)

AXES: Tuple[str, ...] = ("horizontal", "vertical")

RotationFamily = Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]


class RelationshipIndex:
    """
    Scoring reads the mirror, rotation and shape maps. The edge-color lookups
    (`tiles_with_edge_color_at`, `edge_matches`) are for callers that want
    candidate lists; placement still scores every unused tile so that ties
    stay ordered by catalog index.
    """

    def __init__(self, catalog: TileCatalog):
        self.catalog = catalog
        self._mirrors: Dict[str, Dict[str, Optional[str]]] = {}
        self._rotations: Dict[str, RotationFamily] = {}
        self._family_sets: Dict[str, FrozenSet[str]] = {}
        self._shape_groups: Dict[int, List[str]] = defaultdict(list)
        self._edge_index: Dict[Tuple[str, str], List[str]] = defaultdict(list)
        self.dangling: List[Tuple[str, str, str]] = []

    @classmethod
    def build(cls, catalog: TileCatalog) -> "RelationshipIndex":
        idx = cls(catalog)
        for t in catalog:
            idx._add(t)
        if idx.dangling:
            logger.warning(
                "%d relationship reference(s) point at tiles missing from the catalog; treated as absent",
                len(idx.dangling),
            )
        logger.debug(
            "Built tile relationships: mirrors=%d shapes=%d edge_patterns=%d",
            len(idx._mirrors), len(idx._shape_groups), len(idx._edge_index),
        )
        return idx

    def _resolve(self, tile: Tile, field: str, ref: Optional[str]) -> Optional[str]:
        if ref is None:
            return None
        if ref not in self.catalog:
            logger.warning("tile %s: %s -> %s not in catalog", tile.id, field, ref)
            self.dangling.append((tile.id, field, ref))
            return None
        return ref

    def _add(self, t: Tile) -> None:
        self._mirrors[t.id] = {
            "horizontal": self._resolve(t, "mirror_horizontal", t.mirror_horizontal),
            "vertical": self._resolve(t, "mirror_vertical", t.mirror_vertical),
        }
        fam = (
            self._resolve(t, "rotation0", t.rotation0),
            self._resolve(t, "rotation90", t.rotation90),
            self._resolve(t, "rotation180", t.rotation180),
            self._resolve(t, "rotation270", t.rotation270),
        )
        self._rotations[t.id] = fam
        self._family_sets[t.id] = frozenset(r for r in fam if r is not None) | {t.id}
        self._shape_groups[t.shape_family].append(t.id)
        sig = signature(t, 0)
        for side in SIDES:
            self._edge_index[(side, sig.side(side))].append(t.id)

    # ---- mirrors ----

    def mirror_of(self, tile_id: str, axis: str) -> Optional[str]:
        if axis not in AXES:
            raise ValueError(f"axis must be one of {AXES}, got {axis!r}")
        entry = self._mirrors.get(tile_id)
        return entry[axis] if entry else None

    def mirror_tile(self, tile_id: str, axis: str) -> Optional[Tile]:
        return self.catalog.get(self.mirror_of(tile_id, axis))

    def mirror_axes(self, a: str, b: str) -> Tuple[str, ...]:
        """Axes along which `a` and `b` are declared mirrors, in either direction."""
        return tuple(
            axis for axis in AXES
            if self.mirror_of(a, axis) == b or self.mirror_of(b, axis) == a
        )

    def is_mirror_pair(self, a: str, b: str) -> bool:
        return a != b and bool(self.mirror_axes(a, b))

    # ---- rotations ----

    def rotation_family(self, tile_id: str) -> RotationFamily:
        return self._rotations.get(tile_id, (None, None, None, None))

    def rotation_variants(self, tile_id: str) -> List[Tile]:
        return [self.catalog[r] for r in self.rotation_family(tile_id) if r is not None]

    def same_rotation_family(self, a: str, b: str) -> bool:
        """Two distinct tiles are related when their declared rotation sets intersect."""
        if a == b:
            return False
        fa = self._family_sets.get(a)
        fb = self._family_sets.get(b)
        if fa is None or fb is None:
            return False
        return not fa.isdisjoint(fb)

    # ---- shapes & edges ----

    def shape_group(self, shape_family: int) -> Tuple[str, ...]:
        return tuple(self._shape_groups.get(shape_family, ()))

    @property
    def shape_families(self) -> Tuple[int, ...]:
        return tuple(sorted(self._shape_groups))

    def tiles_with_edge_color_at(self, side: str, color: str) -> Tuple[str, ...]:
        """Tiles whose `side` (at rotation 0) carries `color`."""
        if side not in SIDES:
            raise ValueError(f"side must be one of {SIDES}, got {side!r}")
        return tuple(self._edge_index.get((side, color), ()))

    def edge_matches(self, tile_id: str, side: str) -> Tuple[str, ...]:
        """Tiles that could sit on `side` of `tile_id` with a matching boundary."""
        color = signature(self.catalog[tile_id], 0).side(side)
        return tuple(t for t in self.tiles_with_edge_color_at(OPPOSITE[side], color) if t != tile_id)
