import numpy as np
import pytest

from swishfit.core.activations import silu
from swishfit.core.errors import DimensionMismatchError
from swishfit.core.initializers import xavier_uniform
from swishfit.core.network import forward, forward_record
from swishfit.core.types import ParameterStore


def test_forward_is_deterministic_and_pure():
    params = xavier_uniform([1, 12, 10, 8, 6, 1], rng=0)
    before = params.copy()
    first = forward([0.7], params)
    second = forward([0.7], params)
    assert first.shape == (1,)
    assert np.array_equal(first, second)
    for W, W0 in zip(params.weights, before.weights):
        assert np.array_equal(W, W0)


def test_recording_forward_matches_plain_forward():
    params = xavier_uniform([2, 5, 3, 1], rng=1)
    output, cache = forward_record([0.3, -1.2], params)
    assert np.array_equal(output, forward([0.3, -1.2], params))
    assert len(cache.activations) == 4
    assert len(cache.pre_activations) == 3
    assert np.array_equal(cache.activations[-1], output)
    assert np.array_equal(cache.activations[0], np.array([0.3, -1.2]))


def test_hidden_layers_use_silu_and_output_is_linear():
    params = ParameterStore.from_nested(
        layers=[1, 2, 1],
        weights=[[[1.0], [-2.0]], [[0.5, 1.5]]],
        biases=[[0.1, 0.0], [-0.3]],
    )
    x = 0.8
    hidden = silu(np.array([1.0 * x + 0.1, -2.0 * x]))
    expected = 0.5 * hidden[0] + 1.5 * hidden[1] - 0.3
    _, cache = forward_record([x], params)
    assert np.allclose(cache.activations[1], hidden)
    assert np.isclose(forward([x], params)[0], expected)


def test_forward_accepts_scalar_for_single_input():
    params = xavier_uniform([1, 3, 1], rng=2)
    assert np.array_equal(forward(0.25, params), forward([0.25], params))


def test_forward_rejects_wrong_width():
    params = xavier_uniform([2, 3, 1], rng=2)
    with pytest.raises(DimensionMismatchError):
        forward([1.0], params)
