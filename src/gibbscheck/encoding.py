"""Conversions between bipolar state vectors and '0'/'1' strings.

A unit in state +1 is written as '1', a unit in state -1 as '0'. Strings are
used as histogram keys and to enumerate every state of a layer in index
order (most significant bit first).
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import torch

DTYPE = torch.double

JOINT_SEPARATOR = "_"

Vector = Union[torch.Tensor, Sequence[float]]


def encode(vector: Vector) -> str:
    """Map each element to '1' if it is positive, else '0'."""
    if isinstance(vector, torch.Tensor):
        vector = vector.flatten().tolist()
    return "".join("1" if x > 0 else "0" for x in vector)


def decode(
    string: str,
    width: Optional[int] = None,
    *,
    dtype: torch.dtype = DTYPE,
) -> torch.Tensor:
    """Map '0' to -1 and any other character to +1.

    Args:
        string: Encoded state.
        width: Expected layer size. A string of any other length is rejected.
        dtype: Dtype of the returned tensor.
    """
    if width is not None and len(string) != width:
        raise ValueError(
            f"Encoded state {string!r} has width {len(string)}, expected {width}."
        )
    return torch.tensor([-1.0 if c == "0" else 1.0 for c in string], dtype=dtype)


def index_to_string(n: int, width: int) -> str:
    """Zero-padded binary representation of ``n`` using exactly ``width`` bits."""
    if width < 1:
        raise ValueError(f"width must be positive, got {width}.")
    if not 0 <= n < 2 ** width:
        raise ValueError(f"Index {n} out of range for width {width} (0 <= n < {2 ** width}).")
    return format(n, f"0{width}b")


def random_bipolar(
    size: int,
    generator: Optional[torch.Generator] = None,
    *,
    dtype: torch.dtype = DTYPE,
) -> torch.Tensor:
    """Uniformly random vector of -1/+1 values."""
    bits = torch.randint(0, 2, (size,), generator=generator)
    return (2 * bits - 1).to(dtype)
