"""Numerical manifold Jacobians: finite differences combined with autodiff.

The right Jacobian J_r(xi) of a parametrization X = Exp(xi) is defined by

    v_r = J_r(xi) xi_dot,    v_r^ = X^-1 X_dot,    X_dot = sum_i (dX/dxi_i) xi_dot_i.

This module estimates it without any closed-form knowledge in two stages:

1. the partials dX/dxi_i are approximated with forward finite differences;
2. v_r, which is linear in xi_dot, is differentiated with respect to xi_dot
   using JAX forward-mode autodiff.

The first stage is deliberately *not* autodiff: keeping it numerical is what
makes the estimator an independent check of the closed-form Jacobians in
``transforms.se2`` and ``transforms.tr``. The left Jacobian is estimated in the
same way from v_l^ = X_dot X^-1.
"""

from typing import Callable, Optional

import jax
import jax.numpy as jnp

from .core import JacobianConfig
from .transforms import se2

Array = jax.Array
ExpMap = Callable[[Array], Array]


def _as_float(x) -> Array:
    x = jnp.asarray(x)
    if not jnp.issubdtype(x.dtype, jnp.floating):
        x = x.astype(float)
    return x


def finite_diff_i(i: int, f: Callable[[Array], Array], x: Array, eps: float = 1e-6) -> Array:
    """Forward-difference partial derivative of f with respect to x[i].

    Computes (f(x + eps e_i) - f(x)) / eps. The truncation error is O(eps)
    while floating-point cancellation grows like O(1/eps); the step is fixed,
    no adaptive selection is performed. Errors raised by ``f`` propagate.

    Args:
        i: zero-based coordinate index
        f: function of a (n,) vector returning an array of any shape
        x: (n,) base point
        eps: finite-difference step

    Returns:
        Array with the shape of f(x)

    Raises:
        ValueError: if i is not a valid index into x
    """
    x = _as_float(x)
    n = x.shape[-1]
    if not -n <= i < n:
        raise ValueError(f"index {i} out of range for x with {n} coordinates")
    step = jnp.zeros_like(x).at[i].set(eps)
    return (f(x + step) - f(x)) / eps


def finite_diff_partials(f: Callable[[Array], Array], x: Array, eps: float = 1e-6) -> Array:
    """Stack of all forward-difference partials, shape (n,) + f(x).shape."""
    x = _as_float(x)
    return jnp.stack([finite_diff_i(i, f, x, eps) for i in range(x.shape[-1])])


def time_derivative(xi: Array, xi_dot: Array, exp_map: ExpMap = se2.exp, eps: float = 1e-6) -> Array:
    """X_dot = sum_i (dExp/dxi_i)(xi) xi_dot_i, with numerical partials."""
    partials = finite_diff_partials(exp_map, xi, eps)
    return jnp.einsum("i...,i->...", partials, _as_float(xi_dot))


def right_tangent(xi: Array, xi_dot: Array, exp_map: ExpMap = se2.exp, eps: float = 1e-6) -> Array:
    """Right (body-frame) tangent vector v_r = vee(Exp(xi)^-1 X_dot)."""
    X = exp_map(_as_float(xi))
    X_dot = time_derivative(xi, xi_dot, exp_map, eps)
    return se2.vee(jnp.linalg.solve(X, X_dot))


def left_tangent(xi: Array, xi_dot: Array, exp_map: ExpMap = se2.exp, eps: float = 1e-6) -> Array:
    """Left (world-frame) tangent vector v_l = vee(X_dot Exp(xi)^-1)."""
    X = exp_map(_as_float(xi))
    X_dot = time_derivative(xi, xi_dot, exp_map, eps)
    return se2.vee(jnp.matmul(X_dot, jnp.linalg.inv(X)))


def numerical_right_jacobian(
    xi: Array,
    exp_map: ExpMap = se2.exp,
    eps: float = 1e-6,
    config: Optional[JacobianConfig] = None,
) -> Array:
    """Estimate the right Jacobian J_r(xi) of ``exp_map``.

    Uses JAX automatic differentiation of ``right_tangent`` with respect to
    xi_dot. Since v_r is linear in xi_dot the evaluation point does not
    matter; the accuracy is limited by the finite-difference step only.

    Args:
        xi: (3,) coordinates
        exp_map: parametrization, ``se2.exp`` by default
        eps: finite-difference step
        config: overrides ``eps`` when given

    Returns:
        (3, 3) right Jacobian estimate
    """
    if config is not None:
        eps = config.eps
    xi = _as_float(xi)
    return jax.jacfwd(lambda xi_dot: right_tangent(xi, xi_dot, exp_map, eps))(xi)


def numerical_left_jacobian(
    xi: Array,
    exp_map: ExpMap = se2.exp,
    eps: float = 1e-6,
    config: Optional[JacobianConfig] = None,
) -> Array:
    """Estimate the left Jacobian J_l(xi) of ``exp_map``; see numerical_right_jacobian."""
    if config is not None:
        eps = config.eps
    xi = _as_float(xi)
    return jax.jacfwd(lambda xi_dot: left_tangent(xi, xi_dot, exp_map, eps))(xi)
