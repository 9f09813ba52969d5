"""Exceptions raised by jax_manifolds.

The jit-able functions never inspect values; these errors come from the
``checked_*`` helpers and the validation harness, which work on concrete
arrays.
"""

from typing import Optional

import numpy as np


class LieGroupError(ValueError):
    """Base class for all library errors."""


class InvalidGroupElement(LieGroupError):
    """A matrix is not a valid SE(2) element (shape, block structure or rotation)."""


class InvalidAlgebraElement(LieGroupError):
    """A matrix does not have the se(2) zero/skew structure."""


class SingularJacobian(LieGroupError):
    """A Jacobian that must be inverted is (numerically) singular."""

    def __init__(self, message: str, theta: Optional[float] = None):
        super().__init__(message)
        self.theta = theta


class ToleranceExceeded(LieGroupError):
    """Numerical and closed-form Jacobians disagree beyond the tolerance.

    Attributes:
        max_discrepancy: largest elementwise absolute difference
        atol: tolerance that was exceeded
        xi: coordinate vector the Jacobians were evaluated at
    """

    def __init__(self, max_discrepancy: float, atol: float, xi=None):
        self.max_discrepancy = float(max_discrepancy)
        self.atol = float(atol)
        self.xi = None if xi is None else np.asarray(xi)
        msg = f"max elementwise discrepancy {self.max_discrepancy:.3e} exceeds atol={self.atol:.1e}"
        if self.xi is not None:
            msg += f" at xi={np.array2string(self.xi, precision=6)}"
        super().__init__(msg)
