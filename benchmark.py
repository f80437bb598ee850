#!/usr/bin/env python3
import argparse, os, glob, csv, math, logging
from typing import Dict, List, Any
from pathlib import Path

import wandb

from catalog import COLORS, TileCatalog, load_catalog_csv
from errors import ConfigurationError
from generator import generate_catalogs
from optimizer import OPTIMIZATION_PRESETS, OptimizationConfig, optimize_grid, preset_config
from relations import RelationshipIndex
from traversal import PATTERNS


def setup_logging(level=logging.INFO):
    """Setup logging configuration."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()],
    )
    return logging.getLogger(__name__)


def grid_shape_for(num_tiles: int):
    """Smallest near-square grid holding every tile."""
    w = max(1, math.ceil(math.sqrt(num_tiles)))
    h = max(1, math.ceil(num_tiles / w))
    return w, h


FIELDNAMES = [
    "catalog",
    "mode",
    "name",
    "width",
    "height",
    "edge_match_ratio",
    "mirror_adjacency_count",
    "shape_cluster_count",
    "color_balance",
    "composite_score",
    "filled_cells",
    "total_cells",
    "placement_swaps",
    "improvement_swaps",
    "iterations",
    "converged",
    "time_s",
]

NUMERIC_COLUMNS = [
    "edge_match_ratio",
    "mirror_adjacency_count",
    "shape_cluster_count",
    "color_balance",
    "composite_score",
    "filled_cells",
    "placement_swaps",
    "improvement_swaps",
    "iterations",
    "time_s",
]


def run_once(catalog: TileCatalog, index: RelationshipIndex, width: int, height: int,
             config: OptimizationConfig) -> Dict[str, Any]:
    res = optimize_grid(catalog, width, height, config, index=index)
    r, s = res.report, res.stats
    return {
        "edge_match_ratio": r.edge_match_ratio,
        "mirror_adjacency_count": r.mirror_adjacency_count,
        "shape_cluster_count": r.shape_cluster_count,
        "color_balance": r.color_balance,
        "composite_score": r.composite_score,
        "filled_cells": s.filled_cells,
        "total_cells": s.total_cells,
        "placement_swaps": s.placement_swaps,
        "improvement_swaps": s.improvement_swaps,
        "iterations": s.iterations,
        "converged": s.converged,
        "time_s": s.elapsed,
    }


def build_configs(args) -> List[tuple]:
    """(mode, name, config) for every run requested on the command line."""
    common = {
        "improve": not args.no_improve,
        "max_iterations": args.max_iterations,
        "attempts_per_iteration": args.attempts,
        "seed": args.seed,
        "stochastic_ties": args.stochastic_ties,
        "use_wandb": args.wandb,
        "show_progress": args.progress,
    }
    runs = []
    for pattern in args.patterns:
        runs.append(("pattern", pattern, OptimizationConfig.from_dict({**common, "traversal": pattern})))
    for preset in args.presets:
        runs.append(("preset", preset, preset_config(preset, **common)))
    return runs


def main():
    ap = argparse.ArgumentParser(description="Benchmark tile placement across traversal patterns and presets.")
    ap.add_argument("--catalog", type=str, default=None, help="CSV catalog; generated catalogs are used if omitted")
    ap.add_argument("--catalog-dir", type=str, default="catalogs")
    ap.add_argument("--count", type=int, default=1, help="number of generated catalogs")
    ap.add_argument("--families", type=int, default=24)
    ap.add_argument("--colors", type=str, default="".join(COLORS))
    ap.add_argument("--prefix", type=str, default="catalog")
    ap.add_argument("--width", type=int, default=None)
    ap.add_argument("--height", type=int, default=None)
    ap.add_argument("--patterns", nargs="*", default=list(PATTERNS))
    ap.add_argument("--presets", nargs="*", default=[], help=f"any of {sorted(OPTIMIZATION_PRESETS)}")
    ap.add_argument("--max-iterations", type=int, default=100)
    ap.add_argument("--attempts", type=int, default=50)
    ap.add_argument("--no-improve", action="store_true", help="skip the local search stage")
    ap.add_argument("--stochastic-ties", action="store_true")
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--progress", action="store_true")
    ap.add_argument("--log-level", type=str, default="WARNING")
    ap.add_argument("--wandb", action="store_true")
    ap.add_argument("--csv-out", type=str, default=None, help="Where to write CSV results (defaults to catalog_dir)")

    args = ap.parse_args()
    log = setup_logging(getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        runs = build_configs(args)
    except ConfigurationError as exc:
        ap.error(str(exc))

    if args.catalog:
        paths = [args.catalog]
    else:
        Path(args.catalog_dir).mkdir(parents=True, exist_ok=True)
        pat = f"{args.prefix}_F{args.families}_C{len(args.colors)}_seed*.csv"
        existing = sorted(glob.glob(str(Path(args.catalog_dir) / pat)))
        to_make = max(0, args.count - len(existing))
        if to_make > 0:
            existing.extend(generate_catalogs(
                out_dir=args.catalog_dir, count=to_make, num_families=args.families,
                colors=tuple(args.colors), base_seed=args.seed + len(existing), prefix=args.prefix,
            ))
        paths = sorted(existing)[:args.count]
    print(f"[run] {len(paths)} catalog(s) x {len(runs)} configuration(s)")

    if args.wandb:
        wandb.init(project="quartered-tiles", config=vars(args),
                   name=f"bench_F{args.families}_C{len(args.colors)}_n{args.count}")

    rows = []
    acc: Dict[str, Dict[str, float]] = {}
    for p in paths:
        catalog = load_catalog_csv(p)
        index = RelationshipIndex.build(catalog)
        if args.width and args.height:
            width, height = args.width, args.height
        else:
            width, height = grid_shape_for(len(catalog))
        for mode, name, config in runs:
            try:
                r = run_once(catalog, index, width, height, config)
            except (ConfigurationError, ValueError) as exc:
                log.error("%s [%s %s]: %s", p, mode, name, exc)
                continue
            row = {"catalog": os.path.basename(p), "mode": mode, "name": name,
                   "width": width, "height": height, **r}
            rows.append(row)
            totals = acc.setdefault(name, {col: 0.0 for col in NUMERIC_COLUMNS + ["runs"]})
            for col in NUMERIC_COLUMNS:
                totals[col] += float(row[col])
            totals["runs"] += 1
            print(
                f"[{row['catalog']}] {mode} {name}: edge {row['edge_match_ratio']:.3f}, "
                f"composite {row['composite_score']:.4f}, filled {row['filled_cells']}/{row['total_cells']}, "
                f"swaps {row['placement_swaps']}+{row['improvement_swaps']}, {row['time_s']:.2f}s"
            )

    if not rows:
        print("[fail] no successful runs; CSV not generated")
        return

    avg_rows = []
    for name, totals in acc.items():
        n = totals["runs"]
        avg = {"catalog": "__average__", "name": name, "converged": ""}
        for col in NUMERIC_COLUMNS:
            avg[col] = totals[col] / n
        avg_rows.append(avg)

    if args.csv_out:
        csv_path = Path(args.csv_out)
    else:
        csv_path = Path(args.catalog_dir) / f"benchmark_F{args.families}_C{len(args.colors)}.csv"
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with csv_path.open("w", newline="") as csv_f:
        writer = csv.DictWriter(csv_f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for row in rows + avg_rows:
            writer.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in FIELDNAMES})

    print(f"[done] wrote benchmark results to {csv_path}")
    best = max(avg_rows, key=lambda r: r["composite_score"])
    print(f"[avg] best configuration: {best['name']} (composite {best['composite_score']:.4f}, "
          f"edge {best['edge_match_ratio']:.3f})")

    if args.wandb:
        wandb.log({f"avg/{r['name']}/{col}": r[col] for r in avg_rows for col in NUMERIC_COLUMNS})
        wandb.finish()


if __name__ == "__main__":
    main()
