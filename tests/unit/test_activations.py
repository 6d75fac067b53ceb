import numpy as np

from swishfit.core.activations import identity, sigmoid, silu, silu_deriv


def test_silu_matches_definition():
    x = np.array([-3.0, -0.5, 0.0, 0.5, 3.0])
    expected = x / (1.0 + np.exp(-x))
    assert np.allclose(silu(x), expected)
    assert silu(0.0) == 0.0


def test_silu_deriv_matches_finite_difference():
    x = np.linspace(-6.0, 6.0, 25)
    eps = 1e-6
    numeric = (silu(x + eps) - silu(x - eps)) / (2 * eps)
    assert np.allclose(silu_deriv(x), numeric, atol=1e-7)
    assert np.isclose(silu_deriv(0.0), 0.5)


def test_sigmoid_saturates_without_warnings():
    with np.errstate(all="raise"):
        out = sigmoid(np.array([-1000.0, 1000.0]))
    assert out[0] == 0.0
    assert out[1] == 1.0


def test_identity_is_passthrough():
    x = np.array([1.5, -2.0])
    assert np.array_equal(identity(x), x)
