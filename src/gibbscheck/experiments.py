"""Sampling experiments: Gibbs histograms next to their exact distributions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import torch

from .exact import ExactDistribution, ExactEnumerator
from .gibbs import GibbsDriver
from .histogram import Histogram, total_variation
from .model import RBM

EXPERIMENTS = ("hidden", "visible", "joint")


@dataclass
class ExperimentResult:
    kind: str
    model: RBM
    histogram: Histogram
    n_draws: int
    exact: ExactDistribution
    frozen: Optional[str] = None  # opposite layer string for marginal runs
    k: Optional[int] = None

    @property
    def empirical(self) -> Dict[str, float]:
        return self.histogram.finalize(self.n_draws)

    @property
    def tv_distance(self) -> float:
        return total_variation(self.empirical, self.exact.as_dict())

    def metrics(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "n_visible": self.model.nv,
            "n_hidden": self.model.nh,
            "n_draws": self.n_draws,
            "k": self.k,
            "frozen": self.frozen,
            "n_states": len(self.exact),
            "n_observed": len(self.histogram),
            "partition": self.exact.partition,
            "tv_distance": self.tv_distance,
        }


def run_experiment(
    kind: str,
    *,
    n_draws: int,
    n_visible: Optional[int] = None,
    n_hidden: Optional[int] = None,
    k: int = 10,
    generator: Optional[torch.Generator] = None,
    progress: bool = True,
    model: Optional[RBM] = None,
) -> ExperimentResult:
    """Build a model, run one Gibbs experiment and enumerate its ground truth.

    Args:
        kind: "hidden" (sample h, v frozen), "visible" (sample v, h frozen)
            or "joint" (k alternating sweeps per recorded draw).
        n_draws: Number of recorded states.
        n_visible, n_hidden: Layer sizes of a freshly drawn model. Required
            only when ``model`` is not given; ignored otherwise.
        k: Sweeps per draw for the joint experiment.
        generator: The single random source for parameters, states and draws.
        progress: Show a progress bar.
        model: Use this model instead of drawing a new one.
    """
    if kind not in EXPERIMENTS:
        raise ValueError(f"Unknown experiment {kind!r}. Known: {list(EXPERIMENTS)}")

    if model is None:
        if n_visible is None or n_hidden is None:
            raise ValueError("n_visible and n_hidden are required when no model is given.")
        model = RBM(n_visible, n_hidden, generator=generator)

    driver = GibbsDriver(model, generator=generator, progress=progress)
    enumerator = ExactEnumerator(model)

    if kind == "hidden":
        frozen = model.visible_string()
        histogram = driver.run_hidden(n_draws)
        exact = enumerator.hidden_distribution()
        return ExperimentResult(kind, model, histogram, n_draws, exact, frozen=frozen)

    if kind == "visible":
        frozen = model.hidden_string()
        histogram = driver.run_visible(n_draws)
        exact = enumerator.visible_distribution()
        return ExperimentResult(kind, model, histogram, n_draws, exact, frozen=frozen)

    histogram = driver.run_joint(n_draws, k=k)
    exact = enumerator.joint_distribution()
    return ExperimentResult(kind, model, histogram, n_draws, exact, k=k)
