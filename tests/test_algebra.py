"""Tests for the tagged se(2) algebra element."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from jax_manifolds.errors import InvalidAlgebraElement
from jax_manifolds.transforms import Se2Algebra, se2


def test_from_matrix_roundtrip():
    """Test from_matrix(wedge(xi)) recovers xi losslessly."""
    xi = jnp.array([1.0, -2.0, 0.5])
    X = Se2Algebra.from_matrix(se2.wedge(xi))
    np.testing.assert_array_equal(X.vector, xi)
    np.testing.assert_array_equal(X.matrix(), se2.wedge(xi))


@pytest.mark.parametrize(
    "M",
    [
        np.ones((3, 3)),
        np.array([[0.0, -1.0, 1.0], [2.0, 0.0, 1.0], [0.0, 0.0, 0.0]]),
        np.array([[0.0, -1.0, 1.0], [1.0, 0.0, 1.0], [0.0, 0.0, 1.0]]),
        np.array([[0.1, -1.0, 1.0], [1.0, 0.0, 1.0], [0.0, 0.0, 0.0]]),
        np.zeros((2, 2)),
    ],
    ids=["dense", "not-skew", "bottom-row", "diagonal", "wrong-shape"],
)
def test_from_matrix_rejects_invalid(M):
    """Test the checked conversion rejects matrices that vee would silently accept."""
    with pytest.raises(InvalidAlgebraElement):
        Se2Algebra.from_matrix(M)


def test_from_vector_rejects_wrong_shape():
    """Test from_vector requires three components."""
    with pytest.raises(InvalidAlgebraElement):
        Se2Algebra.from_vector(jnp.zeros(4))


def test_exp_log():
    """Test exp/log through the tagged type."""
    X = Se2Algebra.from_vector(jnp.array([0.3, 0.1, -1.2]))
    np.testing.assert_allclose(X.exp(), se2.exp(X.vector), atol=0.0)
    np.testing.assert_allclose(Se2Algebra.log(X.exp()).vector, X.vector, atol=1e-10)


def test_vector_space_operations():
    """Test addition, negation and scaling act on the components."""
    X = Se2Algebra.from_vector(jnp.array([1.0, 2.0, 3.0]))
    Y = Se2Algebra.from_vector(jnp.array([0.5, 0.5, 0.5]))

    np.testing.assert_allclose((X + Y).vector, [1.5, 2.5, 3.5])
    np.testing.assert_allclose((X - Y).vector, [0.5, 1.5, 2.5])
    np.testing.assert_allclose((-X).vector, [-1.0, -2.0, -3.0])
    np.testing.assert_allclose(X.scale(2.0).vector, [2.0, 4.0, 6.0])
    np.testing.assert_allclose(X.translation, [1.0, 2.0])
    np.testing.assert_allclose(X.angle, 3.0)


def test_bracket_generators():
    """Test [E1, E3] = -E2 and [E2, E3] = E1."""
    e1 = Se2Algebra.from_vector(jnp.array([1.0, 0.0, 0.0]))
    e2 = Se2Algebra.from_vector(jnp.array([0.0, 1.0, 0.0]))
    e3 = Se2Algebra.from_vector(jnp.array([0.0, 0.0, 1.0]))

    np.testing.assert_array_equal(e1.bracket(e3).vector, [0.0, -1.0, 0.0])
    np.testing.assert_array_equal(e2.bracket(e3).vector, [1.0, 0.0, 0.0])
    np.testing.assert_array_equal(e1.bracket(e2).vector, [0.0, 0.0, 0.0])


def test_pytree_jit_vmap():
    """Test Se2Algebra passes through jit and vmap."""
    @jax.jit
    def double(X):
        return X + X

    X = Se2Algebra.from_vector(jnp.array([1.0, 2.0, 3.0]))
    np.testing.assert_allclose(double(X).vector, [2.0, 4.0, 6.0])

    batch = Se2Algebra(jnp.arange(6.0).reshape(2, 3))
    Ts = jax.vmap(lambda X: X.exp())(batch)
    assert Ts.shape == (2, 3, 3)


def test_zero():
    """Test the zero element maps to the identity."""
    np.testing.assert_array_equal(Se2Algebra.zero().exp(), jnp.eye(3))
