"""Tests for the SO(2) transforms module."""

import jax
import jax.numpy as jnp
import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_manifolds.transforms import so2


def test_so2_exp_identity():
    """Test SO(2) exp with zero angle gives identity."""
    np.testing.assert_allclose(so2.exp(0.0), jnp.eye(2), rtol=1e-12, atol=1e-12)


def test_so2_exp_quarter_turn():
    """Test a 90 degree rotation maps x onto y."""
    C = so2.exp(jnp.pi / 2)
    np.testing.assert_allclose(so2.apply(C, jnp.array([1.0, 0.0])), [0.0, 1.0], atol=1e-12)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None)
def test_so2_exp_log_roundtrip(seed):
    """Test log(exp(theta)) == theta on the principal branch."""
    theta = jax.random.uniform(jax.random.PRNGKey(seed), (), minval=-3.1, maxval=3.1)
    np.testing.assert_allclose(so2.log(so2.exp(theta)), theta, atol=1e-12)


def test_so2_log_wraps():
    """Test angles outside (-pi, pi] are wrapped."""
    np.testing.assert_allclose(so2.log(so2.exp(2 * jnp.pi + 0.25)), 0.25, atol=1e-12)


def test_so2_log_half_turn():
    """Test a half turn maps to +pi even when sin rounds to zero from below."""
    for s in (0.0, -0.0, -1e-17):
        C = jnp.array([[-1.0, 0.0], [s, -1.0]])
        np.testing.assert_array_equal(so2.log(C), jnp.pi)


def test_so2_hat_vee():
    """Test the so(2) hat is skew-symmetric and inverted by vee."""
    K = so2.hat(0.3)
    np.testing.assert_allclose(K, -K.T, atol=0.0)
    np.testing.assert_allclose(so2.vee(K), 0.3, atol=0.0)


def test_so2_multiply_inverse():
    """Test angles add under multiplication and the inverse is the transpose."""
    C = so2.multiply(so2.exp(0.2), so2.exp(0.5))
    np.testing.assert_allclose(C, so2.exp(0.7), atol=1e-12)
    np.testing.assert_allclose(so2.multiply(C, so2.inverse(C)), jnp.eye(2), atol=1e-12)


def test_so2_batch_operations():
    """Test SO(2) operations work with batched inputs."""
    thetas = jnp.linspace(-3.0, 3.0, 7)
    Cs = so2.exp(thetas)
    assert Cs.shape == (7, 2, 2)
    np.testing.assert_allclose(so2.log(Cs), thetas, atol=1e-12)

    v = jnp.tile(jnp.array([1.0, 0.0]), (7, 1))
    rotated = so2.apply(Cs, v)
    assert rotated.shape == (7, 2)
    np.testing.assert_allclose(rotated[:, 0], jnp.cos(thetas), atol=1e-12)
