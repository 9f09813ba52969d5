"""SO(2) and so(2) Lie group operations in JAX.

This module implements planar rotations as 2x2 rotation matrices with a
single angle as the Lie-algebra coordinate. All functions are pure, JIT-able,
and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def exp(theta: Array) -> Array:
    """
    SO(2) exponential map: convert angle(s) to rotation matrices.

    Args:
        theta: (...,) array of angles in radians

    Returns:
        (..., 2, 2) array of rotation matrices
    """
    theta = jnp.asarray(theta)
    c, s = jnp.cos(theta), jnp.sin(theta)

    return jnp.stack([
        jnp.stack([c, -s], axis=-1),
        jnp.stack([s, c], axis=-1)
    ], axis=-2)


def log(C: Array) -> Array:
    """
    SO(2) logarithm map: convert rotation matrices to angles.

    The principal branch is returned, i.e. angles in (-pi, pi]. Angles outside
    that range are not recovered.

    Args:
        C: (..., 2, 2) array of rotation matrices

    Returns:
        (...,) array of angles
    """
    theta = jnp.arctan2(C[..., 1, 0], C[..., 0, 0])
    # atan2 yields -pi for a half turn when sin rounds to -0 or slightly below
    return jnp.where(theta <= -jnp.pi, theta + 2 * jnp.pi, theta)


def hat(theta: Array) -> Array:
    """
    Convert angle(s) to the 2x2 skew-symmetric so(2) matrix.

    Args:
        theta: (...,) array of angles

    Returns:
        (..., 2, 2) skew-symmetric matrices [[0, -theta], [theta, 0]]
    """
    theta = jnp.asarray(theta)
    zeros = jnp.zeros_like(theta)

    return jnp.stack([
        jnp.stack([zeros, -theta], axis=-1),
        jnp.stack([theta, zeros], axis=-1)
    ], axis=-2)


def vee(K: Array) -> Array:
    """Extract the angle from a 2x2 skew-symmetric matrix."""
    return K[..., 1, 0]


def multiply(C1: Array, C2: Array) -> Array:
    """
    Multiply two rotation matrices.

    Args:
        C1: (..., 2, 2) first rotation matrix
        C2: (..., 2, 2) second rotation matrix

    Returns:
        (..., 2, 2) result of C1 @ C2
    """
    return jnp.matmul(C1, C2)


def inverse(C: Array) -> Array:
    """
    Compute inverse of rotation matrix.

    For rotation matrices, the inverse is simply the transpose.

    Args:
        C: (..., 2, 2) rotation matrix

    Returns:
        (..., 2, 2) inverse rotation matrix
    """
    return jnp.swapaxes(C, -1, -2)


def apply(C: Array, v: Array) -> Array:
    """
    Apply rotation to vector(s).

    Args:
        C: (..., 2, 2) rotation matrix
        v: (..., 2) or (..., N, 2) vector(s) to rotate

    Returns:
        (..., 2) or (..., N, 2) rotated vector(s)
    """
    if v.ndim == C.ndim - 1:  # Single vector case
        return jnp.einsum('...ij,...j->...i', C, v)
    else:  # Multiple vectors case
        return jnp.einsum('...ij,...nj->...ni', C, v)
