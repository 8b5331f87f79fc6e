import pytest
import torch

from gibbscheck.model import RBM


@pytest.fixture
def generator() -> torch.Generator:
    """Seeded random source shared by model construction and sampling."""
    return torch.Generator().manual_seed(1234)


@pytest.fixture
def small_rbm(generator) -> RBM:
    """5 visible / 2 hidden units with random parameters."""
    return RBM(5, 2, generator=generator)


@pytest.fixture
def unit_rbm() -> RBM:
    """One visible and one hidden unit with W = 1 and no biases, both units at +1."""
    return RBM.from_parameters([[1.0]], [0.0], [0.0], v=[1], h=[1])


@pytest.fixture
def handcrafted_rbm() -> RBM:
    return RBM.from_parameters(
        W=[[0.5, -0.3], [0.2, 0.8]],
        a=[0.1, -0.4],
        b=[0.3, 0.6],
        v=[1, -1],
        h=[-1, 1],
    )
