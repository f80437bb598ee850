# local_search.py
"""
Randomized pairwise-swap hill climbing over the composite pattern score.

One iteration draws up to `attempts_per_iteration` random pairs of filled
cells. The first swap that raises the score by more than `threshold` is kept
and ends the iteration; the next iteration starts with a fresh budget. An
iteration that spends its whole budget without a kept swap means the grid is
at a local optimum (converged). `max_iterations` caps the run.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Dict, Any
import logging
import random
import time

from tqdm import tqdm
import wandb

from analysis import PatternAnalyzer
from env import Grid
from errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ImproverParams:
    attempts_per_iteration: int = 50
    max_iterations: int = 100
    threshold: float = 0.0
    rng_seed: Optional[int] = 0
    use_wandb: bool = False
    show_progress: bool = False

    def __post_init__(self):
        if self.attempts_per_iteration < 1:
            raise ConfigurationError(f"attempts_per_iteration must be >= 1, got {self.attempts_per_iteration}")
        if self.max_iterations < 0:
            raise ConfigurationError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.threshold < 0:
            raise ConfigurationError(f"threshold must be >= 0, got {self.threshold}")


@dataclass
class ImprovementResult:
    initial_score: float
    final_score: float
    accepted_swaps: int
    iterations: int
    attempts: int
    converged: bool
    time: float
    score_history: List[float] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "initial_score": self.initial_score,
            "final_score": self.final_score,
            "accepted_swaps": self.accepted_swaps,
            "iterations": self.iterations,
            "attempts": self.attempts,
            "converged": self.converged,
            "time": self.time,
        }


class LocalSearchImprover:

    def __init__(self, analyzer: PatternAnalyzer, params: Optional[ImproverParams] = None):
        self.analyzer = analyzer
        self.params = params if params is not None else ImproverParams()
        self.rng = random.Random(self.params.rng_seed)

    def iterate(self, grid: Grid, current: float) -> Tuple[bool, float, int]:
        """
        Run one iteration on `grid` in place.

        Returns (accepted, score, attempts_used). On rejection every trial swap
        has been reverted and the grid is unchanged.
        """
        filled = grid.filled_indices()
        if len(filled) < 2:
            return False, current, 0
        for attempt in range(1, self.params.attempts_per_iteration + 1):
            a, b = self.rng.sample(filled, 2)
            grid.swap(a, b)
            score = self.analyzer.composite_score(grid)
            if score > current + self.params.threshold:
                logger.debug("accepted swap %d<->%d: %.5f -> %.5f", a, b, current, score)
                return True, score, attempt
            grid.swap(a, b)
        return False, current, self.params.attempts_per_iteration

    def improve(self, grid: Grid) -> ImprovementResult:
        t0 = time.time()
        score = self.analyzer.composite_score(grid)
        initial = score
        history = [score]
        accepted = 0
        attempts = 0
        converged = False
        iterations = 0

        bar = tqdm(range(self.params.max_iterations), desc="Local search", unit="iter",
                   disable=not self.params.show_progress)
        for it in bar:
            ok, score, used = self.iterate(grid, score)
            iterations = it + 1
            attempts += used
            if not ok:
                converged = True
                break
            accepted += 1
            history.append(score)
            bar.set_postfix_str(f"score={score:.4f}")
            if self.params.use_wandb:
                wandb.log({
                    "local_search/iteration": it,
                    "local_search/score": score,
                    "local_search/attempts": used,
                    "local_search/accepted_swaps": accepted,
                })
        bar.close()

        elapsed = time.time() - t0
        logger.info(
            "local search: %d iteration(s), %d accepted swap(s), score %.4f -> %.4f, converged=%s",
            iterations, accepted, initial, score, converged,
        )
        return ImprovementResult(
            initial_score=initial,
            final_score=score,
            accepted_swaps=accepted,
            iterations=iterations,
            attempts=attempts,
            converged=converged,
            time=elapsed,
            score_history=history,
        )
