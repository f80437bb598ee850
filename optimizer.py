# optimizer.py
"""
Run orchestration: configuration, presets and the end-to-end optimize call.

    catalog -> RelationshipIndex -> PlacementEngine -> LocalSearchImprover
            -> PatternAnalyzer report + run statistics

The caller owns the grid; it is filled and improved in place and returned in
the result. All settings are validated before the grid is touched.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Any
import copy
import logging
import time

import wandb

from analysis import PatternAnalyzer, PatternReport
from catalog import TileCatalog
from env import Grid
from errors import ConfigurationError
from greedy import PlacementEngine, PlacementParams, PlacementResult
from local_search import ImproverParams, ImprovementResult, LocalSearchImprover
from relations import RelationshipIndex
from scoring import ScoringModel, ScoringWeights
from traversal import Traversal, canonical_pattern, check_dimensions

logger = logging.getLogger(__name__)


@dataclass
class OptimizationConfig:
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    traversal: str = "row-major"
    placement_passes: int = 1
    improve: bool = True
    max_iterations: int = 100
    attempts_per_iteration: int = 50
    threshold: float = 0.0
    seed: Optional[int] = 0
    stochastic_ties: bool = False
    use_wandb: bool = False
    show_progress: bool = False

    def validate(self) -> "OptimizationConfig":
        if not isinstance(self.weights, ScoringWeights):
            raise ConfigurationError("weights must be a ScoringWeights instance")
        canonical_pattern(self.traversal)
        # building the parameter objects runs their own checks
        self.placement_params()
        self.improver_params()
        return self

    def placement_params(self) -> PlacementParams:
        return PlacementParams(
            traversal=self.traversal,
            rng_seed=self.seed,
            stochastic_ties=self.stochastic_ties,
            passes=self.placement_passes,
        )

    def improver_params(self) -> ImproverParams:
        return ImproverParams(
            attempts_per_iteration=self.attempts_per_iteration,
            max_iterations=self.max_iterations,
            threshold=self.threshold,
            rng_seed=self.seed,
            use_wandb=self.use_wandb,
            show_progress=self.show_progress,
        )

    def as_dict(self) -> Dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["weights"] = self.weights.as_dict()
        return out

    @classmethod
    def from_dict(cls, options: Dict[str, Any], base: Optional["OptimizationConfig"] = None) -> "OptimizationConfig":
        """
        Apply recognized options on top of `base` (defaults if omitted).
        `weights` may be a partial dict merged onto the base weights.
        """
        cfg = copy.deepcopy(base) if base is not None else cls()
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ConfigurationError(f"unknown option(s): {sorted(unknown)}")
        for key, value in options.items():
            if key == "weights" and isinstance(value, dict):
                merged = cfg.weights.as_dict()
                merged.update(value)
                value = ScoringWeights.from_dict(merged)
            setattr(cfg, key, value)
        return cfg.validate()


# recognized presets, expressed as option overrides on top of the defaults
OPTIMIZATION_PRESETS: Dict[str, Dict[str, Any]] = {
    "classic": {},
    "edge-focused": {
        "weights": {"edge_match": 100.0, "mirror": 20.0, "rotation_family": 10.0},
    },
    "mirror-heavy": {
        "weights": {"mirror": 500.0, "edge_match": 5.0, "rotation_family": 25.0},
    },
    "shape-clustered": {
        "weights": {"shape_cluster": 200.0, "edge_match": 5.0, "mirror": 50.0},
        "traversal": "block-2x2",
    },
    "color-focused-a": {
        "weights": {
            "edge_match": 50.0, "mirror": 20.0,
            "color_priority": {"a": 10.0, "b": 0.1, "c": 0.1, "d": 0.1},
        },
    },
    "multi-pass": {
        "traversal": "spiral-clockwise",
        "placement_passes": 3,
    },
    "spiral": {
        "weights": {"distance": 5.0},
        "traversal": "spiral-clockwise",
    },
}


def preset_config(name: str, **overrides) -> OptimizationConfig:
    if name not in OPTIMIZATION_PRESETS:
        raise ConfigurationError(f"unknown preset {name!r}; expected one of {sorted(OPTIMIZATION_PRESETS)}")
    cfg = OptimizationConfig.from_dict(copy.deepcopy(OPTIMIZATION_PRESETS[name]))
    if overrides:
        cfg = OptimizationConfig.from_dict(overrides, base=cfg)
    return cfg


@dataclass
class RunStatistics:
    filled_cells: int
    total_cells: int
    placement_swaps: int
    placement_passes: int
    improvement_swaps: int
    iterations: int
    converged: bool
    elapsed: float
    initial_score: float
    final_score: float
    score_history: List[float] = field(default_factory=list)

    @property
    def swaps(self) -> int:
        return self.placement_swaps + self.improvement_swaps

    def as_dict(self) -> Dict[str, Any]:
        return {
            "filled_cells": self.filled_cells,
            "total_cells": self.total_cells,
            "placement_swaps": self.placement_swaps,
            "placement_passes": self.placement_passes,
            "improvement_swaps": self.improvement_swaps,
            "swaps": self.swaps,
            "iterations": self.iterations,
            "converged": self.converged,
            "elapsed": self.elapsed,
            "initial_score": self.initial_score,
            "final_score": self.final_score,
        }


@dataclass
class OptimizationResult:
    grid: Grid
    report: PatternReport
    stats: RunStatistics
    config: OptimizationConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid": self.grid.to_records(),
            "report": self.report.as_dict(),
            "stats": self.stats.as_dict(),
        }


def optimize_grid(
    catalog: TileCatalog,
    width: int,
    height: int,
    config: Optional[OptimizationConfig] = None,
    grid: Optional[Grid] = None,
    index: Optional[RelationshipIndex] = None,
) -> OptimizationResult:
    """
    Fill (and optionally improve) a width x height grid from `catalog`.

    `grid` may be pre-seeded; it is mutated in place. `index` may be shared
    between runs over the same catalog.
    """
    cfg = (config if config is not None else OptimizationConfig()).validate()
    check_dimensions(width, height)
    Traversal(cfg.traversal, width, height, seed=cfg.seed)
    if grid is None:
        grid = Grid(width, height)
    elif (grid.width, grid.height) != (int(width), int(height)):
        raise ConfigurationError(
            f"seeded grid is {grid.width}x{grid.height}, expected {width}x{height}"
        )
    if index is None:
        index = RelationshipIndex.build(catalog)
    elif index.catalog is not catalog:
        raise ConfigurationError("relationship index was built from a different catalog")

    t0 = time.time()
    scoring = ScoringModel(index, cfg.weights)
    engine = PlacementEngine(scoring, cfg.placement_params())
    placement: PlacementResult = engine.run(grid, catalog)

    analyzer = PatternAnalyzer(index)
    improvement: Optional[ImprovementResult] = None
    if cfg.improve:
        improvement = LocalSearchImprover(analyzer, cfg.improver_params()).improve(grid)

    report = analyzer.analyze(grid)
    if improvement is not None:
        initial, history = improvement.initial_score, improvement.score_history
        converged = improvement.converged
    else:
        initial, history = report.composite_score, [report.composite_score]
        # without local search, a fixed point of the multi-pass fill counts as convergence
        converged = not placement.changed_last_pass

    stats = RunStatistics(
        filled_cells=report.filled_cells,
        total_cells=report.total_cells,
        placement_swaps=placement.swaps,
        placement_passes=placement.passes,
        improvement_swaps=improvement.accepted_swaps if improvement else 0,
        iterations=improvement.iterations if improvement else 0,
        converged=converged,
        elapsed=time.time() - t0,
        initial_score=initial,
        final_score=report.composite_score,
        score_history=history,
    )
    if stats.filled_cells < stats.total_cells:
        logger.info("catalog exhausted: %d of %d cells filled", stats.filled_cells, stats.total_cells)
    logger.info(
        "optimize[%s]: edge=%.3f composite=%.4f swaps=%d iterations=%d converged=%s (%.3fs)",
        cfg.traversal, report.edge_match_ratio, report.composite_score,
        stats.swaps, stats.iterations, stats.converged, stats.elapsed,
    )
    if cfg.use_wandb:
        wandb.log({f"summary/{k}": v for k, v in {**report.as_dict(), **stats.as_dict()}.items()})
    return OptimizationResult(grid=grid, report=report, stats=stats, config=cfg)


def optimize_with_preset(catalog: TileCatalog, width: int, height: int, preset: str,
                         grid: Optional[Grid] = None, **overrides) -> OptimizationResult:
    return optimize_grid(catalog, width, height, preset_config(preset, **overrides), grid=grid)


def optimize_for_single_color(catalog: TileCatalog, width: int, height: int, color: str,
                              grid: Optional[Grid] = None, **overrides) -> OptimizationResult:
    """Bias edge matching strongly towards one color of the alphabet."""
    if color not in catalog.colors:
        raise ConfigurationError(f"color {color!r} not in catalog alphabet {catalog.colors}")
    priority = {c: 0.1 for c in catalog.colors}
    priority[color] = 10.0
    options = {
        "weights": {
            "edge_match": 100.0,
            "mirror": 10.0,
            "rotation_family": 5.0,
            "color_priority": priority,
        },
    }
    cfg = OptimizationConfig.from_dict(options)
    if overrides:
        cfg = OptimizationConfig.from_dict(overrides, base=cfg)
    return optimize_grid(catalog, width, height, cfg, grid=grid)
