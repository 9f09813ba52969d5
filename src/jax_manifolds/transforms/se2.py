"""SE(2) and se(2) Lie group operations in JAX.

This module implements planar rigid body transforms using 3x3 homogeneous
matrices and exponential coordinates ``xi = (rho1, rho2, theta)``:

    T = Exp(xi) = expm(xi^),    xi^ = rho1 E1 + rho2 E2 + theta E3.

Besides the maps themselves it provides the Adjoint and the closed-form right
and left Jacobians of this parametrization, defined by

    v_r = J_r(xi) xi_dot,    v_l = J_l(xi) xi_dot,

where ``v_r^ = T^-1 T_dot`` and ``v_l^ = T_dot T^-1``. All functions except the
``check_*``/``checked_*`` helpers and ``right_jacobian_inverse`` are pure,
JIT-able and batch-friendly.
"""

from typing import Tuple

import jax
import jax.numpy as jnp
import numpy as np
from jax.scipy.linalg import expm

from ..errors import InvalidGroupElement, SingularJacobian
from . import so2

Array = jax.Array

# Below this |theta| the Jacobian coefficients switch to their Taylor series.
SMALL_ANGLE = 1e-3

_expm = jnp.vectorize(expm, signature="(n,n)->(n,n)")


def generators() -> Tuple[Array, Array, Array]:
    """
    Basis (E1, E2, E3) of the se(2) Lie algebra.

    E1 and E2 generate translations along x and y, E3 generates rotations.
    Entries are exact 0/1/-1 values.

    Returns:
        tuple of three (3, 3) arrays
    """
    return (
        jnp.array([[0.0, 0.0, 1.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]]),
        jnp.array([[0.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, 0.0, 0.0]]),
        jnp.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]]),
    )


def wedge(xi: Array) -> Array:
    """
    Map coordinates to the Lie algebra: xi^ = sum_i xi_i E_i.

    Args:
        xi: (..., 3) array of coordinates (rho1, rho2, theta)

    Returns:
        (..., 3, 3) se(2) matrices
    """
    xi = jnp.asarray(xi)
    if not jnp.issubdtype(xi.dtype, jnp.floating):
        xi = xi.astype(float)
    E = jnp.stack(generators()).astype(xi.dtype)
    return jnp.einsum("...i,ijk->...jk", xi, E)


def vee(Xi: Array) -> Array:
    """
    Map a Lie-algebra matrix back to coordinates.

    The entries (0, 2), (1, 2) and (1, 0) are read by position. The input is
    assumed to have the se(2) structure and is not checked: for an arbitrary
    matrix the result does not round-trip through ``wedge``. Use
    ``algebra.Se2Algebra.from_matrix`` when validation is needed.

    Args:
        Xi: (..., 3, 3) se(2) matrices

    Returns:
        (..., 3) coordinates (rho1, rho2, theta)
    """
    return jnp.stack([Xi[..., 0, 2], Xi[..., 1, 2], Xi[..., 1, 0]], axis=-1)


def exp(xi: Array) -> Array:
    """
    SE(2) exponential map: matrix exponential of wedge(xi).

    Uses the general-purpose ``jax.scipy.linalg.expm``, so the result does not
    share any formula with the closed-form Jacobians below.

    Args:
        xi: (..., 3) array of coordinates (rho1, rho2, theta)

    Returns:
        (..., 3, 3) transformation matrices
    """
    return _expm(wedge(xi))


def log(T: Array) -> Array:
    """
    SE(2) logarithm map: principal matrix logarithm of T, as coordinates.

    Equivalent to vee(logm(T)) on the principal branch: theta is returned in
    (-pi, pi], so a generating angle with |theta| > pi is not recovered
    (Exp(Log(T)) == T still holds). The input is assumed to be a valid group
    element; see ``checked_log``.

    Args:
        T: (..., 3, 3) transformation matrices

    Returns:
        (..., 3) coordinates (rho1, rho2, theta)
    """
    theta = so2.log(T[..., :2, :2])
    r1, r2 = T[..., 0, 2], T[..., 1, 2]

    A, B, _, _ = _coefficients(theta)

    # V(theta) = [[A, -B], [B, A]], so V^-1 = [[A, B], [-B, A]] / (A^2 + B^2)
    det = A * A + B * B
    rho1 = (A * r1 + B * r2) / det
    rho2 = (-B * r1 + A * r2) / det

    return jnp.stack([rho1, rho2, theta], axis=-1)


def check_group_element(T, atol: float = 1e-9) -> None:
    """
    Raise InvalidGroupElement unless every matrix in T is a valid SE(2) element.

    Works on concrete arrays only (not inside ``jit``).

    Args:
        T: (..., 3, 3) candidate transformation matrices
        atol: absolute tolerance for the structure checks
    """
    T = np.asarray(T)
    if T.ndim < 2 or T.shape[-2:] != (3, 3):
        raise InvalidGroupElement(f"T must have shape (...,3,3), got {T.shape}")
    if not np.all(np.isfinite(T)):
        raise InvalidGroupElement("T contains non-finite entries")

    bottom = T[..., 2, :]
    if not np.allclose(bottom, [0.0, 0.0, 1.0], rtol=0.0, atol=atol):
        raise InvalidGroupElement(f"bottom row must be [0, 0, 1], got {bottom}")

    C = T[..., :2, :2]
    CtC = np.swapaxes(C, -1, -2) @ C
    if not np.allclose(CtC, np.eye(2), rtol=0.0, atol=atol):
        raise InvalidGroupElement("top-left block is not orthogonal")
    if not np.allclose(np.linalg.det(C), 1.0, rtol=0.0, atol=atol):
        raise InvalidGroupElement("top-left block is a reflection (det != 1)")


def checked_log(T, atol: float = 1e-9) -> Array:
    """``log`` for concrete inputs, validating the group structure first."""
    check_group_element(T, atol=atol)
    return log(jnp.asarray(T))


def identity(batch_shape: Tuple[int, ...] = (), dtype=None) -> Array:
    """Identity element(s) of SE(2)."""
    return jnp.broadcast_to(jnp.eye(3, dtype=dtype), batch_shape + (3, 3))


def from_position_and_rotation(r: Array, C: Array) -> Array:
    """
    Construct SE(2) transform from translation and rotation.

    Args:
        r: (..., 2) translation vector
        C: (..., 2, 2) rotation matrix

    Returns:
        (..., 3, 3) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(r.shape[:-1], C.shape[:-2])
    r = jnp.broadcast_to(r, batch_shape + (2,))
    C = jnp.broadcast_to(C, batch_shape + (2, 2))

    T = jnp.zeros(batch_shape + (3, 3), dtype=r.dtype)
    T = T.at[..., :2, :2].set(C)
    T = T.at[..., :2, 2].set(r)
    T = T.at[..., 2, 2].set(1.0)

    return T


def multiply(T1: Array, T2: Array) -> Array:
    """
    Multiply two SE(2) transformation matrices.

    Args:
        T1: (..., 3, 3) first transformation matrix
        T2: (..., 3, 3) second transformation matrix

    Returns:
        (..., 3, 3) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(2) transformation matrix.

    Uses the block structure: T^-1 = [[C^T, -C^T @ r], [0, 1]]

    Args:
        T: (..., 3, 3) transformation matrix

    Returns:
        (..., 3, 3) inverse transformation matrix
    """
    C_inv = so2.inverse(T[..., :2, :2])
    r_inv = -so2.apply(C_inv, T[..., :2, 2])
    return from_position_and_rotation(r_inv, C_inv)


def apply(T: Array, points: Array) -> Array:
    """
    Apply SE(2) transformation to points.

    Args:
        T: (..., 3, 3) transformation matrix
        points: (..., 2) or (..., N, 2) points to transform

    Returns:
        (..., 2) or (..., N, 2) transformed points
    """
    ones = jnp.ones_like(points[..., 0:1])
    points_h = jnp.concatenate([points, ones], axis=-1)
    if points.ndim == T.ndim - 1:
        transformed_h = jnp.einsum("...ij,...j->...i", T, points_h)
    else:
        transformed_h = jnp.einsum("...ij,...nj->...ni", T, points_h)
    return transformed_h[..., :2]


def get_position(T: Array) -> Array:
    """Extract the (..., 2) translation from SE(2) matrices."""
    return T[..., :2, 2]


def get_rotation(T: Array) -> Array:
    """Extract the (..., 2, 2) rotation block from SE(2) matrices."""
    return T[..., :2, :2]


def adjoint(T: Array) -> Array:
    """
    Compute the adjoint matrix of an SE(2) transformation.

    Maps right (body-frame) tangent vectors to left (world-frame) ones,
    v_l = Adj(T) v_r, i.e. wedge(Adj(T) v) == T wedge(v) T^-1.

    Args:
        T: (..., 3, 3) transformation matrix

    Returns:
        (..., 3, 3) adjoint matrix [[C, (r2, -r1)^T], [0, 0, 1]]
    """
    C = T[..., :2, :2]
    r = T[..., :2, 2]

    col = jnp.stack([r[..., 1], -r[..., 0]], axis=-1)
    top = jnp.concatenate([C, col[..., None]], axis=-1)
    bottom = jnp.broadcast_to(
        jnp.array([[0.0, 0.0, 1.0]], dtype=T.dtype),
        T.shape[:-2] + (1, 3),
    )
    return jnp.concatenate([top, bottom], axis=-2)


def _coefficients(theta: Array):
    """
    Coefficients of the SE(2) Jacobians and V matrix.

        A = sin(t)/t, B = (1 - cos(t))/t, P = (t - sin(t))/t^2, Q = (1 - cos(t))/t^2

    Near zero the Taylor series is used. The ``where`` on the argument keeps the
    unused branch finite so that gradients stay finite as well.
    """
    small = jnp.abs(theta) < SMALL_ANGLE
    t = jnp.where(small, 1.0, theta)
    t2 = theta * theta

    sin_t, cos_t = jnp.sin(t), jnp.cos(t)

    Q = jnp.where(small, 0.5 - t2 / 24.0 + t2 * t2 / 720.0, (1.0 - cos_t) / (t * t))
    A = jnp.where(small, 1.0 - t2 / 6.0 + t2 * t2 / 120.0, sin_t / t)
    B = jnp.where(small, theta * Q, (1.0 - cos_t) / t)
    P = jnp.where(small, theta * (1.0 / 6.0 - t2 / 120.0 + t2 * t2 / 5040.0), (t - sin_t) / (t * t))

    return A, B, P, Q


def right_jacobian(xi: Array) -> Array:
    """
    Closed-form right Jacobian of the exponential coordinates.

        J_r = [[ sin(t)/t,     (1-cos(t))/t, (t r1 - r2 + r2 cos(t) - r1 sin(t))/t^2 ],
               [ (cos(t)-1)/t,  sin(t)/t,    (r1 + t r2 - r1 cos(t) - r2 sin(t))/t^2 ],
               [ 0,             0,           1                                      ]]

    with xi = (r1, r2, t). The formula is singular at t = 0; for |t| below
    ``SMALL_ANGLE`` Taylor series are used instead, giving the limit
    [[1, 0, -r2/2], [0, 1, r1/2], [0, 0, 1]] (the identity at xi = 0).

    Args:
        xi: (..., 3) coordinates

    Returns:
        (..., 3, 3) right Jacobians
    """
    xi = jnp.asarray(xi)
    rho1, rho2, theta = xi[..., 0], xi[..., 1], xi[..., 2]
    A, B, P, Q = _coefficients(theta)

    zeros = jnp.zeros_like(theta)
    ones = jnp.ones_like(theta)

    return jnp.stack([
        jnp.stack([A, B, rho1 * P - rho2 * Q], axis=-1),
        jnp.stack([-B, A, rho1 * Q + rho2 * P], axis=-1),
        jnp.stack([zeros, zeros, ones], axis=-1),
    ], axis=-2)


def left_jacobian(xi: Array) -> Array:
    """
    Closed-form left Jacobian, J_l(xi) = Adj(Exp(xi)) J_r(xi).

    For this parametrization J_l(xi) also equals J_r(-xi).

    Args:
        xi: (..., 3) coordinates

    Returns:
        (..., 3, 3) left Jacobians
    """
    return jnp.matmul(adjoint(exp(xi)), right_jacobian(xi))


def right_jacobian_inverse(xi, singular_tol: float = 1e-12) -> Array:
    """
    Inverse of the closed-form right Jacobian, mapping v_r back to xi_dot.

    det J_r = 2 (1 - cos(t)) / t^2 vanishes at t = 2 pi k, k != 0, where the
    exponential coordinates are singular. Works on concrete inputs only.

    Args:
        xi: (..., 3) coordinates
        singular_tol: smallest determinant accepted

    Returns:
        (..., 3, 3) inverse right Jacobians

    Raises:
        SingularJacobian: if any determinant is below ``singular_tol``
    """
    xi = jnp.asarray(xi)
    rho1, rho2, theta = xi[..., 0], xi[..., 1], xi[..., 2]
    A, B, P, Q = _coefficients(theta)
    det = A * A + B * B

    bad = np.asarray(det) < singular_tol
    if np.any(bad):
        theta_bad = np.asarray(theta)[bad].ravel()[0]
        raise SingularJacobian(
            f"right Jacobian is singular at theta={theta_bad:.6g} (det={np.asarray(det)[bad].ravel()[0]:.3e})",
            theta=float(theta_bad),
        )

    # J_r = [[M, c], [0, 1]] with M = [[A, B], [-B, A]]
    c1 = rho1 * P - rho2 * Q
    c2 = rho1 * Q + rho2 * P
    m11, m12 = A / det, -B / det
    m21, m22 = B / det, A / det

    zeros = jnp.zeros_like(theta)
    ones = jnp.ones_like(theta)

    return jnp.stack([
        jnp.stack([m11, m12, -(m11 * c1 + m12 * c2)], axis=-1),
        jnp.stack([m21, m22, -(m21 * c1 + m22 * c2)], axis=-1),
        jnp.stack([zeros, zeros, ones], axis=-1),
    ], axis=-2)
