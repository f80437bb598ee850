import numpy as np
from typing import Tuple, Dict, List, Optional, Sequence
from pathlib import Path
import itertools

from catalog import COLORS, Tile, TileCatalog, save_catalog_csv
from edges import EdgeSignature, rotate_clockwise

Colors4 = Tuple[str, str, str, str]

# ------------------ Rotation classes ------------------

def _rotations(colors: Colors4) -> List[Colors4]:
    sig = EdgeSignature(*colors)
    return [tuple(rotate_clockwise(sig, k)) for k in range(4)]


def _canonical(colors: Colors4) -> Colors4:
    return min(_rotations(colors))


def rotation_classes(colors: Sequence[str] = COLORS) -> List[Colors4]:
    """Every distinct color arrangement up to rotation, as its smallest rotation."""
    seen = {_canonical(c) for c in itertools.product(colors, repeat=4)}
    return sorted(seen)


def _mirror_horizontal(c: Colors4) -> Colors4:
    # left-right flip: east and west trade places
    n, e, s, w = c
    return (n, w, s, e)


def _mirror_vertical(c: Colors4) -> Colors4:
    n, e, s, w = c
    return (s, e, n, w)

# ------------------ Single catalog ------------------

def make_tile_catalog(
    num_families: int = 24,
    colors: Sequence[str] = COLORS,
    seed: Optional[int] = 0,
) -> TileCatalog:
    """
    Build a self-consistent catalog of `num_families` distinct rotation classes.

    Every distinct rotation of a class becomes its own tile, sharing the class
    index as shape family. Rotation and mirror ids point at the tiles whose
    colors they produce; a mirror id is left empty when the mirrored
    arrangement is not in the catalog or is the tile itself.
    """
    colors = tuple(colors)
    classes = rotation_classes(colors)
    if not 1 <= num_families <= len(classes):
        raise ValueError(
            f"num_families must be in [1, {len(classes)}] for {len(colors)} colors, got {num_families}"
        )
    rng = np.random.RandomState(seed)
    picked = [classes[i] for i in rng.choice(len(classes), size=num_families, replace=False)]

    by_colors: Dict[Colors4, str] = {}
    members: List[Tuple[int, Colors4]] = []
    for family, base in enumerate(picked):
        # start each family from a random rotation so rotation0 is not always the canonical one
        start = int(rng.randint(4))
        for k in range(4):
            c = _rotations(base)[(start + k) % 4]
            if c in by_colors:
                continue
            by_colors[c] = f"T{len(members):03d}"
            members.append((family, c))

    def lookup(c: Colors4, own: str) -> Optional[str]:
        tid = by_colors.get(c)
        return tid if tid != own else None

    tiles = []
    for family, c in members:
        tid = by_colors[c]
        rot = [by_colors[r] for r in _rotations(c)]
        tiles.append(Tile(
            id=tid,
            north=c[0], east=c[1], south=c[2], west=c[3],
            shape_family=family,
            mirror_horizontal=lookup(_mirror_horizontal(c), tid),
            mirror_vertical=lookup(_mirror_vertical(c), tid),
            rotation0=rot[0], rotation90=rot[1], rotation180=rot[2], rotation270=rot[3],
        ))
    return TileCatalog(tiles, colors=colors)

# ------------------ Batch helpers ------------------

def make_catalog_name(prefix: str, num_families: int, num_colors: int, seed: int) -> str:
    return f"{prefix}_F{num_families}_C{num_colors}_seed{seed}.csv"


def generate_catalogs(
    out_dir: str,
    count: int = 1,
    num_families: int = 24,
    colors: Sequence[str] = COLORS,
    base_seed: int = 123,
    prefix: str = "catalog",
) -> List[str]:
    """
    Generate `count` catalogs with identical parameters (consecutive seeds) and
    save them as CSV under out_dir. Returns the written paths.
    """
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    paths = []
    for k in range(count):
        seed = base_seed + k
        catalog = make_tile_catalog(num_families=num_families, colors=colors, seed=seed)
        fpath = Path(out_dir) / make_catalog_name(prefix, num_families, len(tuple(colors)), seed)
        save_catalog_csv(catalog, str(fpath))
        paths.append(str(fpath))
        print(f"[gen] {fpath.name}: {len(catalog)} tiles")
    return paths


if __name__ == "__main__":
    import argparse
    ap = argparse.ArgumentParser(description="Generate synthetic quartered-tile catalogs.")
    ap.add_argument("--out-dir", type=str, default="catalogs")
    ap.add_argument("--count", type=int, default=1)
    ap.add_argument("--families", type=int, default=24)
    ap.add_argument("--colors", type=str, default="".join(COLORS),
                    help="color alphabet as one character per color")
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--prefix", type=str, default="catalog")
    args = ap.parse_args()
    generate_catalogs(args.out_dir, count=args.count, num_families=args.families,
                      colors=tuple(args.colors), base_seed=args.seed, prefix=args.prefix)
