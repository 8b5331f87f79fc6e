"""
Exact Boltzmann distributions of a small RBM by brute-force enumeration.

Every state of the enumerated layer(s) is assigned to the model in ascending
index order, weighted by exp(-E), and normalised by the partition function Z.
The cost is 2^|layer| energy evaluations per layer, so only small layers are
accepted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List

import torch

from .encoding import JOINT_SEPARATOR, index_to_string
from .model import RBM

MAX_ENUMERABLE_UNITS = 20


@dataclass
class ExactDistribution:
    """Unnormalised weights over encoded states, in enumeration order."""

    keys: List[str]
    weights: torch.Tensor
    partition: float

    @property
    def probabilities(self) -> torch.Tensor:
        return self.weights / self.partition

    def as_dict(self) -> Dict[str, float]:
        return dict(zip(self.keys, self.probabilities.tolist()))

    def __len__(self) -> int:
        return len(self.keys)


class ExactEnumerator:
    """Compute exact conditional and joint distributions of ``model``.

    The layer being enumerated is restored to its previous state afterwards;
    the other layer is never touched.
    """

    def __init__(self, model: RBM):
        self.model = model

    @staticmethod
    def _check_width(width: int, layer: str) -> None:
        if width > MAX_ENUMERABLE_UNITS:
            raise ValueError(
                f"{layer} layer has {width} units; exact enumeration is limited to "
                f"{MAX_ENUMERABLE_UNITS} units per layer."
            )

    @staticmethod
    def _normalise(keys: List[str], weights: List[float]) -> ExactDistribution:
        Z = math.fsum(weights)
        if not math.isfinite(Z) or Z <= 0.0:
            raise FloatingPointError(f"Degenerate partition function Z={Z!r}.")
        return ExactDistribution(
            keys=keys,
            weights=torch.tensor(weights, dtype=torch.double),
            partition=Z,
        )

    @torch.no_grad()
    def hidden_distribution(self) -> ExactDistribution:
        """P(h | v) for the current v, over h indices 0 .. 2^|H| - 1."""
        model = self.model
        self._check_width(model.nh, "Hidden")

        saved = model.h.clone()
        keys: List[str] = []
        weights: List[float] = []
        try:
            for n in range(2 ** model.nh):
                key = index_to_string(n, model.nh)
                model.set_hidden(key)
                keys.append(key)
                weights.append(math.exp(-model.energy()))
        finally:
            model.h = saved

        return self._normalise(keys, weights)

    @torch.no_grad()
    def visible_distribution(self) -> ExactDistribution:
        """P(v | h) for the current h, over v indices 0 .. 2^|V| - 1."""
        model = self.model
        self._check_width(model.nv, "Visible")

        saved = model.v.clone()
        keys: List[str] = []
        weights: List[float] = []
        try:
            for n in range(2 ** model.nv):
                key = index_to_string(n, model.nv)
                model.set_visible(key)
                keys.append(key)
                weights.append(math.exp(-model.energy()))
        finally:
            model.v = saved

        return self._normalise(keys, weights)

    @torch.no_grad()
    def joint_distribution(self) -> ExactDistribution:
        """P(v, h) over all states, visible-major then hidden-minor."""
        model = self.model
        self._check_width(model.nv, "Visible")
        self._check_width(model.nh, "Hidden")

        saved_v, saved_h = model.v.clone(), model.h.clone()
        keys: List[str] = []
        weights: List[float] = []
        try:
            for i in range(2 ** model.nv):
                v_key = index_to_string(i, model.nv)
                model.set_visible(v_key)
                for j in range(2 ** model.nh):
                    h_key = index_to_string(j, model.nh)
                    model.set_hidden(h_key)
                    keys.append(v_key + JOINT_SEPARATOR + h_key)
                    weights.append(math.exp(-model.energy()))
        finally:
            model.v, model.h = saved_v, saved_h

        return self._normalise(keys, weights)
