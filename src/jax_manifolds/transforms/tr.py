"""Translation-rotation (T-R) parametrization of SE(2).

    T = expm(r1 E1 + r2 E2) expm(theta E3)

Only theta coincides with the exponential coordinates of ``se2``; the
translation parameters are the actual translation of T, whereas the
exponential coordinates (rho1, rho2) are not. The Jacobians of the two
parametrizations differ accordingly.
"""

import jax
import jax.numpy as jnp

from . import se2, so2

Array = jax.Array


def exp(xi_tr: Array) -> Array:
    """
    Build SE(2) matrices from T-R coordinates.

    Both factors go through the general matrix exponential, mirroring the
    definition above.

    Args:
        xi_tr: (..., 3) coordinates (r1, r2, theta)

    Returns:
        (..., 3, 3) transformation matrices
    """
    xi_tr = jnp.asarray(xi_tr)
    zeros = jnp.zeros_like(xi_tr[..., 0])
    translation = se2.exp(jnp.stack([xi_tr[..., 0], xi_tr[..., 1], zeros], axis=-1))
    rotation = se2.exp(jnp.stack([zeros, zeros, xi_tr[..., 2]], axis=-1))
    return se2.multiply(translation, rotation)


def log(T: Array) -> Array:
    """
    Recover T-R coordinates; theta is on the principal branch (-pi, pi].

    Args:
        T: (..., 3, 3) transformation matrices

    Returns:
        (..., 3) coordinates (r1, r2, theta)
    """
    theta = so2.log(se2.get_rotation(T))
    r = se2.get_position(T)
    return jnp.concatenate([r, theta[..., None]], axis=-1)


def right_jacobian(xi_tr: Array) -> Array:
    """
    Closed-form right Jacobian of the T-R parametrization.

    T^-1 T_dot has translation C^T r_dot and rotation theta_dot, so
    J_r = [[C^T, 0], [0, 1]].

    Args:
        xi_tr: (..., 3) coordinates (r1, r2, theta)

    Returns:
        (..., 3, 3) right Jacobians
    """
    xi_tr = jnp.asarray(xi_tr)
    Ct = so2.inverse(so2.exp(xi_tr[..., 2]))
    zeros = jnp.zeros(xi_tr.shape[:-1] + (2,), dtype=xi_tr.dtype)
    return jnp.concatenate([
        jnp.concatenate([Ct, zeros[..., :, None]], axis=-1),
        jnp.concatenate([zeros, jnp.ones_like(xi_tr[..., 2:])], axis=-1)[..., None, :],
    ], axis=-2)


def left_jacobian(xi_tr: Array) -> Array:
    """
    Closed-form left Jacobian of the T-R parametrization.

    J_l = Adj(T) J_r = [[1, 0, r2], [0, 1, -r1], [0, 0, 1]].

    Args:
        xi_tr: (..., 3) coordinates (r1, r2, theta)

    Returns:
        (..., 3, 3) left Jacobians
    """
    xi_tr = jnp.asarray(xi_tr)
    r1, r2 = xi_tr[..., 0], xi_tr[..., 1]
    zeros = jnp.zeros_like(r1)
    ones = jnp.ones_like(r1)
    return jnp.stack([
        jnp.stack([ones, zeros, r2], axis=-1),
        jnp.stack([zeros, ones, -r1], axis=-1),
        jnp.stack([zeros, zeros, ones], axis=-1),
    ], axis=-2)


def to_exponential(xi_tr: Array) -> Array:
    """Convert T-R coordinates to exponential coordinates (principal branch)."""
    return se2.log(exp(xi_tr))


def from_exponential(xi: Array) -> Array:
    """Convert exponential coordinates to T-R coordinates."""
    return log(se2.exp(xi))
