import pytest

from env import Grid
from errors import ConfigurationError
from optimizer import (
    OPTIMIZATION_PRESETS,
    OptimizationConfig,
    optimize_for_single_color,
    optimize_grid,
    optimize_with_preset,
    preset_config,
)

FAST = {"max_iterations": 10, "attempts_per_iteration": 10}


def test_end_to_end_fills_and_reports(generated_catalog):
    res = optimize_grid(generated_catalog, 4, 3, OptimizationConfig.from_dict(FAST))
    ids = [t for t in res.grid.tile_ids() if t is not None]
    assert len(ids) == len(set(ids)) == min(12, len(generated_catalog))
    assert res.stats.filled_cells == res.report.filled_cells
    assert res.stats.final_score == pytest.approx(res.report.composite_score)
    assert res.stats.final_score >= res.stats.initial_score
    out = res.to_dict()
    assert len(out["grid"]) == 12
    assert set(out["grid"][0]) == {"x", "y", "tile_id", "rotation"}
    assert "converged" in out["stats"]


def test_improve_disabled(generated_catalog):
    cfg = OptimizationConfig.from_dict({"improve": False})
    res = optimize_grid(generated_catalog, 3, 3, cfg)
    assert res.stats.improvement_swaps == 0
    assert res.stats.iterations == 0


def test_unknown_option_rejected():
    with pytest.raises(ConfigurationError):
        OptimizationConfig.from_dict({"travesal": "row-major"})
    with pytest.raises(ConfigurationError):
        OptimizationConfig.from_dict({"weights": {"edges": 1.0}})


def test_invalid_settings_rejected_before_mutation(family_catalog):
    grid = Grid.seeded(family_catalog, 4, 2, ["t3"])
    with pytest.raises(ConfigurationError):
        optimize_grid(family_catalog, 4, 2, OptimizationConfig(traversal="zigzag"), grid=grid)
    with pytest.raises(ConfigurationError):
        optimize_grid(family_catalog, 4, 2, OptimizationConfig(placement_passes=0), grid=grid)
    with pytest.raises(ConfigurationError):
        optimize_grid(family_catalog, 3, 2, grid=grid)
    with pytest.raises(ConfigurationError):
        optimize_grid(family_catalog, 0, 2)
    assert grid.tile_ids() == ["t3"] + [None] * 7


def test_seeded_grid_is_completed(family_catalog):
    grid = Grid.seeded(family_catalog, 4, 2, ["t5", None, "t5"])
    res = optimize_grid(family_catalog, 4, 2, OptimizationConfig.from_dict(FAST), grid=grid)
    assert res.grid is grid
    assert sorted(grid.tile_ids()) == sorted(family_catalog.ids())


@pytest.mark.parametrize("name", sorted(OPTIMIZATION_PRESETS))
def test_presets(name, generated_catalog):
    res = optimize_with_preset(generated_catalog, 4, 4, name, **FAST)
    ids = [t for t in res.grid.tile_ids() if t is not None]
    assert len(ids) == len(set(ids))
    assert 0.0 <= res.report.edge_match_ratio <= 1.0


def test_preset_values():
    assert preset_config("shape-clustered").traversal == "block-2x2"
    assert preset_config("multi-pass").placement_passes == 3
    assert preset_config("mirror-heavy").weights.mirror == 500.0
    # untouched weights keep their defaults
    assert preset_config("mirror-heavy").weights.shape_cluster == 20.0
    with pytest.raises(ConfigurationError):
        preset_config("fastest")


def test_single_color_focus(generated_catalog):
    res = optimize_for_single_color(generated_catalog, 4, 4, "b", **FAST)
    w = res.config.weights
    assert w.color_priority["b"] == 10.0
    assert w.color_multiplier("b") == 1.0
    assert w.color_multiplier("a") == pytest.approx(0.01)
    with pytest.raises(ConfigurationError):
        optimize_for_single_color(generated_catalog, 4, 4, "z")


def test_caller_config_is_not_modified(generated_catalog):
    cfg = OptimizationConfig(traversal="diagonal", improve=False)
    res = optimize_grid(generated_catalog, 3, 3, cfg)
    assert cfg.traversal == "diagonal"
    assert cfg.placement_params().traversal == "diagonal-sweep"
    assert res.stats.filled_cells == 9
