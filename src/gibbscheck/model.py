"""
Restricted Boltzmann Machine with bipolar units in PyTorch.

- Visible and hidden units take values in {-1, +1}
- Parameters drawn uniformly from [-1, 1] and then held fixed
- Energy E(v, h) = -v^T W h - v.a - h.b
- Conditional probabilities P(unit = +1 | other layer) = sigmoid(2 m)

There is no training here. The model only holds parameters and the current
state of both layers, which samplers and the exact enumerator overwrite.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import torch
import torch.nn as nn

from .encoding import DTYPE, JOINT_SEPARATOR, decode, encode, random_bipolar

State = Union[torch.Tensor, Sequence[float], str]


class RBM(nn.Module):
    def __init__(
        self,
        n_visible: int,
        n_hidden: int,
        *,
        generator: Optional[torch.Generator] = None,
        dtype: torch.dtype = DTYPE,
        W: Optional[torch.Tensor] = None,
        a: Optional[torch.Tensor] = None,
        b: Optional[torch.Tensor] = None,
        v: Optional[State] = None,
        h: Optional[State] = None,
    ) -> None:
        super().__init__()

        n_visible = int(n_visible)
        n_hidden = int(n_hidden)
        if n_visible <= 0:
            raise ValueError(f"Visible layer must have positive size, got {n_visible}.")
        if n_hidden <= 0:
            raise ValueError(f"Hidden layer must have positive size, got {n_hidden}.")

        self.nv = n_visible
        self.nh = n_hidden

        # Draw order is fixed: v, h, W (row-major), a, b. Anything given is not drawn.
        v_init = random_bipolar(n_visible, generator, dtype=dtype) if v is None else None
        h_init = random_bipolar(n_hidden, generator, dtype=dtype) if h is None else None
        if W is None:
            W = _uniform((n_visible, n_hidden), generator, dtype)
        if a is None:
            a = _uniform((n_visible,), generator, dtype)
        if b is None:
            b = _uniform((n_hidden,), generator, dtype)

        # Buffers: no gradients, never updated after construction.
        self.register_buffer("W", W.to(dtype).clone())
        self.register_buffer("a", a.to(dtype).clone())
        self.register_buffer("b", b.to(dtype).clone())

        self.v = v_init
        self.h = h_init
        if v is not None:
            self.set_visible(v)
        if h is not None:
            self.set_hidden(h)

    @classmethod
    def from_parameters(
        cls,
        W: Union[torch.Tensor, Sequence[Sequence[float]]],
        a: Union[torch.Tensor, Sequence[float]],
        b: Union[torch.Tensor, Sequence[float]],
        v: Optional[State] = None,
        h: Optional[State] = None,
        *,
        generator: Optional[torch.Generator] = None,
        dtype: torch.dtype = DTYPE,
    ) -> "RBM":
        """Build a model from explicit parameters.

        Only the states that are not given are drawn from ``generator``.
        """
        W = torch.as_tensor(W, dtype=dtype)
        a = torch.as_tensor(a, dtype=dtype).flatten()
        b = torch.as_tensor(b, dtype=dtype).flatten()

        if W.dim() != 2:
            raise ValueError(f"W must be a 2-D matrix, got shape {tuple(W.shape)}.")
        nv, nh = W.shape
        if a.numel() != nv:
            raise ValueError(f"Visible bias has length {a.numel()}, W has {nv} rows.")
        if b.numel() != nh:
            raise ValueError(f"Hidden bias has length {b.numel()}, W has {nh} columns.")

        return cls(nv, nh, generator=generator, dtype=dtype, W=W, a=a, b=b, v=v, h=h)

    # --------------------------------------------------
    # State assignment
    # --------------------------------------------------

    def _as_state(self, x: State, size: int, layer: str) -> torch.Tensor:
        if isinstance(x, str):
            return decode(x, size, dtype=self.W.dtype)

        t = torch.as_tensor(x, dtype=self.W.dtype).flatten()
        if t.numel() != size:
            raise ValueError(f"{layer} state has {t.numel()} units, expected {size}.")
        if not torch.all((t == 1) | (t == -1)):
            raise ValueError(f"{layer} state must contain only -1/+1 values, got {t.tolist()}.")
        return t.clone()

    def set_visible(self, x: State) -> None:
        """Overwrite the visible layer with a bipolar vector or encoded string."""
        self.v = self._as_state(x, self.nv, "Visible")

    def set_hidden(self, x: State) -> None:
        """Overwrite the hidden layer with a bipolar vector or encoded string."""
        self.h = self._as_state(x, self.nh, "Hidden")

    def visible_string(self) -> str:
        return encode(self.v)

    def hidden_string(self) -> str:
        return encode(self.h)

    def joint_string(self) -> str:
        return self.visible_string() + JOINT_SEPARATOR + self.hidden_string()

    # --------------------------------------------------
    # Energy and conditionals
    # --------------------------------------------------

    def energy(self) -> float:
        """E(v, h) = -sum_ij v_i W_ij h_j - sum_i v_i a_i - sum_j h_j b_j."""
        interaction = self.v @ self.W @ self.h
        return float(-interaction - self.v @ self.a - self.h @ self.b)

    def visible_field(self) -> torch.Tensor:
        """m_i = a_i + sum_j W_ij h_j."""
        return self.a + self.W @ self.h

    def hidden_field(self) -> torch.Tensor:
        """m_j = b_j + sum_i W_ij v_i."""
        return self.b + self.v @ self.W

    def visible_prob(self) -> torch.Tensor:
        """Compute P(v_i = +1 | h)."""
        return plus_probability(self.visible_field())

    def hidden_prob(self) -> torch.Tensor:
        """Compute P(h_j = +1 | v)."""
        return plus_probability(self.hidden_field())

    def extra_repr(self) -> str:
        return f"n_visible={self.nv}, n_hidden={self.nh}"


def plus_probability(m) -> torch.Tensor:
    """P(unit = +1) for local field m: exp(m) / (exp(m) + exp(-m)).

    Written as sigmoid(2m) so large fields do not overflow. Tensors keep
    their dtype; plain numbers become DTYPE.
    """
    if not isinstance(m, torch.Tensor):
        m = torch.as_tensor(m, dtype=DTYPE)
    return torch.sigmoid(2.0 * m)


def _uniform(shape, generator: Optional[torch.Generator], dtype: torch.dtype) -> torch.Tensor:
    """Independent draws from U[-1, 1]."""
    return torch.rand(shape, generator=generator, dtype=dtype) * 2.0 - 1.0
