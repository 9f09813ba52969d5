"""Immutable configuration PyTrees for Jacobian estimation and validation.

Step sizes and tolerances are data, not hidden globals: every computation
that depends on them receives a config (or the bare values) as an argument.
"""

from flax import struct


@struct.dataclass
class JacobianConfig:
    """Settings for the finite-difference stage of the numerical Jacobian.

    Attributes:
        eps: Forward-difference step. Truncation error grows like ``eps`` and
             floating-point cancellation like ``1/eps``; no adaptive step
             selection is performed.
    """
    eps: float = struct.field(pytree_node=False, default=1e-6)


@struct.dataclass
class ValidationConfig:
    """Settings for comparing numerical and closed-form Jacobians.

    Attributes:
        eps: Finite-difference step used by the numerical estimator.
        atol: Absolute elementwise tolerance for agreement.
        minval: Lower bound of the uniform sampling range (inclusive).
        maxval: Upper bound of the uniform sampling range (exclusive).
        num_samples: Number of random coordinates drawn by a validation run.
    """
    eps: float = struct.field(pytree_node=False, default=1e-6)
    atol: float = struct.field(pytree_node=False, default=1e-5)
    minval: float = struct.field(pytree_node=False, default=0.0)
    maxval: float = struct.field(pytree_node=False, default=10.0)
    num_samples: int = struct.field(pytree_node=False, default=100)

    @property
    def jacobian(self) -> JacobianConfig:
        return JacobianConfig(eps=self.eps)
