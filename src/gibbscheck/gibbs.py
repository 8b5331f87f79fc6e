"""Gibbs chains over a bipolar RBM, recorded into histograms."""

from __future__ import annotations

from typing import Callable, Optional

import torch
from tqdm.auto import tqdm

from .histogram import Histogram
from .model import RBM
from .sampler import ConditionalSampler


class GibbsDriver:
    """Run repeated conditional sampling and count the visited states.

    Args:
        model: RBM whose state the chain moves.
        sampler: Conditional sampler bound to ``model``. Built from
            ``generator`` when omitted.
        generator: Random source used when no sampler is given. Passing a
            sampler together with a different generator raises ValueError.
        progress: Show a tqdm progress bar.
        log_every: Refresh the number of distinct states on the bar every N draws.
    """

    def __init__(
        self,
        model: RBM,
        sampler: Optional[ConditionalSampler] = None,
        *,
        generator: Optional[torch.Generator] = None,
        progress: bool = True,
        log_every: int = 10_000,
    ):
        if sampler is None:
            sampler = ConditionalSampler(model, generator)
        elif sampler.model is not model:
            raise ValueError("Sampler is bound to a different model.")
        elif generator is not None and generator is not sampler.generator:
            raise ValueError("Pass either a sampler or a generator, not both.")
        self.model = model
        self.sampler = sampler
        self.progress = progress
        self.log_every = max(1, int(log_every))

    def _run(self, n_draws: int, step: Callable[[], str], desc: str) -> Histogram:
        n_draws = int(n_draws)
        if n_draws <= 0:
            raise ValueError(f"n_draws must be positive, got {n_draws}.")

        histogram = Histogram()
        pbar = tqdm(total=n_draws, desc=desc, leave=True, disable=not self.progress)

        for t in range(n_draws):
            histogram.record(step())

            if (t + 1) % self.log_every == 0:
                pbar.set_postfix(states=len(histogram))
                pbar.update(self.log_every)

        pbar.update(n_draws - pbar.n)
        pbar.close()
        return histogram

    @torch.no_grad()
    def run_hidden(self, n_draws: int) -> Histogram:
        """Sample h repeatedly with v frozen; record hidden strings."""

        def step() -> str:
            self.sampler.sample_hidden()
            return self.model.hidden_string()

        return self._run(n_draws, step, "Gibbs hidden")

    @torch.no_grad()
    def run_visible(self, n_draws: int) -> Histogram:
        """Sample v repeatedly with h frozen; record visible strings."""

        def step() -> str:
            self.sampler.sample_visible()
            return self.model.visible_string()

        return self._run(n_draws, step, "Gibbs visible")

    @torch.no_grad()
    def run_joint(self, n_draws: int, k: int = 10) -> Histogram:
        """Before each record, do k sweeps of (hidden, then visible).

        Records ``"<visible>_<hidden>"`` strings.
        """
        k = int(k)
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}.")

        def step() -> str:
            for _ in range(k):
                self.sampler.sample_hidden()
                self.sampler.sample_visible()
            return self.model.joint_string()

        return self._run(n_draws, step, f"Gibbs joint (k={k})")
