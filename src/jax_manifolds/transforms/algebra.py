"""Tagged se(2) Lie-algebra elements implemented with JAX."""

from __future__ import annotations

from dataclasses import dataclass

import jax
import jax.numpy as jnp
import numpy as np
from jax.tree_util import register_pytree_node_class

from ..errors import InvalidAlgebraElement
from . import se2

Array = jax.Array

@register_pytree_node_class  # let Se2Algebra work with jit / grad / vmap …
@dataclass(frozen=True)
class Se2Algebra:
    """Immutable se(2) element(s) stored by their three independent components.

    Only ``(rho1, rho2, theta)`` is kept, so converting to and from the 3x3
    matrix form is lossless. ``from_matrix`` is the checked counterpart of
    ``se2.vee``.
    """
    vector: Array  # shape (..., 3)

    # Constructors
    @classmethod
    def from_vector(cls, xi: Array) -> "Se2Algebra":
        xi = jnp.asarray(xi)
        if xi.shape[-1:] != (3,):
            raise InvalidAlgebraElement(f"xi must have shape (...,3), got {xi.shape}")
        return cls(xi)

    @classmethod
    def from_matrix(cls, Xi, atol: float = 0.0) -> "Se2Algebra":
        """Build from a concrete (..., 3, 3) matrix, checking the se(2) structure.

        The bottom row and diagonal must vanish and the top-left block must be
        skew-symmetric, each within ``atol``.
        """
        M = np.asarray(Xi)
        if M.ndim < 2 or M.shape[-2:] != (3, 3):
            raise InvalidAlgebraElement(f"matrix must have shape (...,3,3), got {M.shape}")
        if not np.allclose(M[..., 2, :], 0.0, rtol=0.0, atol=atol):
            raise InvalidAlgebraElement("bottom row of an se(2) matrix must be zero")
        if not np.allclose(np.diagonal(M[..., :2, :2], axis1=-2, axis2=-1), 0.0, rtol=0.0, atol=atol):
            raise InvalidAlgebraElement("rotation block of an se(2) matrix must have a zero diagonal")
        if not np.allclose(M[..., 0, 1], -M[..., 1, 0], rtol=0.0, atol=atol):
            raise InvalidAlgebraElement("rotation block of an se(2) matrix must be skew-symmetric")
        return cls(se2.vee(jnp.asarray(Xi)))

    @classmethod
    def zero(cls, batch_shape=(), *, dtype=jnp.float64) -> "Se2Algebra":
        return cls(jnp.zeros(batch_shape + (3,), dtype=dtype))

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self.vector,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        (vector,) = children
        return cls(vector)

    # Conversions
    def matrix(self) -> Array:
        """The (..., 3, 3) Lie-algebra matrix (wedge)."""
        return se2.wedge(self.vector)

    def exp(self) -> Array:
        """The group element Exp(xi)."""
        return se2.exp(self.vector)

    @classmethod
    def log(cls, T: Array) -> "Se2Algebra":
        """Principal logarithm of SE(2) matrices (theta in (-pi, pi])."""
        return cls(se2.log(T))

    # Vector-space operations
    def __add__(self, other: "Se2Algebra") -> "Se2Algebra":
        return Se2Algebra(self.vector + other.vector)

    def __sub__(self, other: "Se2Algebra") -> "Se2Algebra":
        return Se2Algebra(self.vector - other.vector)

    def __neg__(self) -> "Se2Algebra":
        return Se2Algebra(-self.vector)

    def scale(self, s) -> "Se2Algebra":
        return Se2Algebra(s * self.vector)

    def bracket(self, other: "Se2Algebra") -> "Se2Algebra":
        """Lie bracket [X, Y] = XY - YX, which stays in se(2)."""
        X, Y = self.matrix(), other.matrix()
        return Se2Algebra(se2.vee(jnp.matmul(X, Y) - jnp.matmul(Y, X)))

    # Convenience helpers
    @property
    def translation(self) -> Array:
        return self.vector[..., :2]

    @property
    def angle(self) -> Array:
        return self.vector[..., 2]
