import math

import pytest
import torch

from gibbscheck.encoding import random_bipolar
from gibbscheck.model import RBM, plus_probability


def test_construction_shapes_and_ranges(small_rbm):
    assert small_rbm.W.shape == (5, 2)
    assert small_rbm.a.shape == (5,)
    assert small_rbm.b.shape == (2,)
    assert small_rbm.v.shape == (5,)
    assert small_rbm.h.shape == (2,)
    for t in (small_rbm.W, small_rbm.a, small_rbm.b):
        assert torch.all(t >= -1.0) and torch.all(t <= 1.0)
    for t in (small_rbm.v, small_rbm.h):
        assert torch.all((t == 1) | (t == -1))


def test_construction_is_reproducible():
    m1 = RBM(4, 3, generator=torch.Generator().manual_seed(7))
    m2 = RBM(4, 3, generator=torch.Generator().manual_seed(7))
    assert torch.equal(m1.W, m2.W)
    assert torch.equal(m1.a, m2.a)
    assert torch.equal(m1.b, m2.b)
    assert torch.equal(m1.v, m2.v)
    assert torch.equal(m1.h, m2.h)


def test_parameters_are_buffers_without_gradients(small_rbm):
    assert list(small_rbm.parameters()) == []
    names = {name for name, _ in small_rbm.named_buffers()}
    assert names == {"W", "a", "b"}


@pytest.mark.parametrize("nv, nh", [(0, 2), (3, 0), (-1, 1)])
def test_non_positive_sizes_rejected(nv, nh):
    with pytest.raises(ValueError):
        RBM(nv, nh)


def test_unit_energy(unit_rbm):
    assert unit_rbm.energy() == pytest.approx(-1.0)


def test_unit_hidden_probability(unit_rbm):
    m = unit_rbm.hidden_field()
    assert m.item() == pytest.approx(1.0)

    expected = math.exp(1.0) / (math.exp(1.0) + math.exp(-1.0))
    assert unit_rbm.hidden_prob().item() == pytest.approx(expected)
    # Mean of a bipolar unit is 2P - 1 = tanh(m).
    assert 2 * unit_rbm.hidden_prob().item() - 1 == pytest.approx(math.tanh(1.0))
    assert math.tanh(1.0) == pytest.approx(0.7616, abs=1e-4)


def test_energy_matches_explicit_sum(handcrafted_rbm):
    m = handcrafted_rbm
    W, a, b = m.W.tolist(), m.a.tolist(), m.b.tolist()
    v, h = m.v.tolist(), m.h.tolist()
    first = sum(v[i] * W[i][j] * h[j] for i in range(2) for j in range(2))
    second = sum(v[i] * a[i] for i in range(2))
    third = sum(h[j] * b[j] for j in range(2))
    assert m.energy() == pytest.approx(-first - second - third)


def test_energy_has_no_side_effects(handcrafted_rbm):
    v, h = handcrafted_rbm.v.clone(), handcrafted_rbm.h.clone()
    e1 = handcrafted_rbm.energy()
    e2 = handcrafted_rbm.energy()
    assert e1 == e2
    assert torch.equal(handcrafted_rbm.v, v)
    assert torch.equal(handcrafted_rbm.h, h)


@pytest.mark.parametrize("i", [0, 1])
def test_flipping_visible_unit_changes_energy_by_local_field(handcrafted_rbm, i):
    m = handcrafted_rbm
    before = m.energy()
    field = m.visible_field()[i].item()

    v = m.v.clone()
    v[i] = -v[i]
    m.set_visible(v)
    after = m.energy()

    assert after - before == pytest.approx(-2.0 * v[i].item() * field)


@pytest.mark.parametrize("j", [0, 1])
def test_flipping_hidden_unit_changes_energy_by_local_field(handcrafted_rbm, j):
    m = handcrafted_rbm
    before = m.energy()
    field = m.hidden_field()[j].item()

    h = m.h.clone()
    h[j] = -h[j]
    m.set_hidden(h)

    assert m.energy() - before == pytest.approx(-2.0 * h[j].item() * field)


def test_local_fields_add_bias_once():
    m = RBM.from_parameters(
        W=[[0.0, 0.0, 0.0]],
        a=[0.5],
        b=[0.1, 0.2, 0.3],
        v=[1],
        h=[1, 1, 1],
    )
    # With zero weights the field is exactly the bias, whatever the other layer size.
    assert m.visible_field().tolist() == pytest.approx([0.5])
    assert m.hidden_field().tolist() == pytest.approx([0.1, 0.2, 0.3])


def test_plus_probability_monotone():
    m = torch.linspace(-5.0, 5.0, 101, dtype=torch.double)
    p = plus_probability(m)
    assert torch.all(p[1:] >= p[:-1])
    assert plus_probability(0.0).item() == pytest.approx(0.5)


def test_plus_probability_extreme_fields_are_finite():
    p = plus_probability(torch.tensor([-1000.0, 1000.0], dtype=torch.double))
    assert torch.all(torch.isfinite(p))
    assert p.tolist() == pytest.approx([0.0, 1.0])


def test_from_parameters_rejects_shape_mismatch():
    with pytest.raises(ValueError):
        RBM.from_parameters([[1.0, 2.0]], [0.0, 0.0], [0.0, 0.0])
    with pytest.raises(ValueError):
        RBM.from_parameters([[1.0, 2.0]], [0.0], [0.0])
    with pytest.raises(ValueError):
        RBM.from_parameters([1.0, 2.0], [0.0], [0.0])


def test_set_state_from_string(small_rbm):
    small_rbm.set_visible("00101")
    assert small_rbm.visible_string() == "00101"
    small_rbm.set_hidden("10")
    assert small_rbm.hidden_string() == "10"
    assert small_rbm.joint_string() == "00101_10"


def test_set_state_rejects_wrong_width(small_rbm):
    with pytest.raises(ValueError):
        small_rbm.set_visible("0010")
    with pytest.raises(ValueError):
        small_rbm.set_hidden([1, -1, 1])


def test_set_state_rejects_non_bipolar_values(small_rbm):
    with pytest.raises(ValueError):
        small_rbm.set_hidden([0, 1])
    with pytest.raises(ValueError):
        small_rbm.set_visible([1, -1, 1, 0.5, -1])


def test_plus_probability_keeps_tensor_dtype():
    m = torch.tensor([-0.5, 0.0, 0.5], dtype=torch.float32)
    assert plus_probability(m).dtype == torch.float32
    assert plus_probability(0.25).dtype == torch.double


def test_from_parameters_with_states_leaves_generator_untouched():
    gen = torch.Generator().manual_seed(4)
    before = gen.get_state()
    RBM.from_parameters([[1.0]], [0.0], [0.0], v=[1], h=[-1], generator=gen)
    assert torch.equal(gen.get_state(), before)


def test_from_parameters_draws_only_missing_state():
    gen = torch.Generator().manual_seed(4)
    model = RBM.from_parameters([[1.0, 0.0]], [0.0], [0.0, 0.0], v=[1], generator=gen)
    assert model.v.tolist() == [1.0]

    # Only the hidden layer came out of the stream.
    reference = torch.Generator().manual_seed(4)
    expected = random_bipolar(2, reference)
    assert torch.equal(model.h, expected)
    assert torch.equal(gen.get_state(), reference.get_state())
