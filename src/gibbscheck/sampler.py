"""Single-layer conditional sampling for bipolar RBMs."""

from __future__ import annotations

from typing import Optional

import torch

from .model import RBM


def _draw(prob: torch.Tensor, generator: Optional[torch.Generator]) -> torch.Tensor:
    """Set each unit to +1 where a uniform draw falls below its probability."""
    u = torch.rand(prob.shape, generator=generator, dtype=prob.dtype)
    return torch.where(u < prob, torch.ones_like(prob), -torch.ones_like(prob))


class ConditionalSampler:
    """Draw one layer of an RBM given the current state of the other.

    Only the target layer moves during a call, so every unit sees the same
    opposite layer. Uniform draws are taken in unit order from ``generator``.

    Args:
        model: Model whose state is updated in place.
        generator: Random source for the uniform draws.
    """

    def __init__(self, model: RBM, generator: Optional[torch.Generator] = None):
        self.model = model
        self.generator = generator

    @torch.no_grad()
    def sample_visible(self) -> torch.Tensor:
        """Resample v from P(v | h)."""
        prob = self.model.visible_prob()
        self.model.v = _draw(prob, self.generator)
        return self.model.v

    @torch.no_grad()
    def sample_hidden(self) -> torch.Tensor:
        """Resample h from P(h | v)."""
        prob = self.model.hidden_prob()
        self.model.h = _draw(prob, self.generator)
        return self.model.h
