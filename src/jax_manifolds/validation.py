"""Validation of closed-form Jacobians against the numerical estimator.

Random coordinates are drawn uniformly with ``jax.random`` and both Jacobians
are compared elementwise. A disagreement beyond ``atol`` points at a step size
that is too large or too small, a coordinate near a singular point of the
closed form, or a genuine bug; the maximum discrepancy is always reported so
these cases can be told apart.
"""

import logging
from functools import partial
from typing import Callable, Optional

import jax
import jax.numpy as jnp
import numpy as np
from flax import struct

from .core import ValidationConfig
from .errors import ToleranceExceeded
from .jacobians import numerical_left_jacobian, numerical_right_jacobian
from .transforms import se2

Array = jax.Array

log = logging.getLogger(__name__)


@struct.dataclass
class JacobianCheck:
    """Outcome of comparing both Jacobians at a single coordinate."""
    xi: Array
    numerical: Array
    closed_form: Array
    max_discrepancy: float = struct.field(pytree_node=False)


@struct.dataclass
class ValidationReport:
    """Outcome of a validation run over many random coordinates.

    Attributes:
        xi: (N, 3) sampled coordinates
        discrepancies: (N,) max elementwise discrepancy per sample
        atol: tolerance the run was judged against
    """
    xi: np.ndarray = struct.field(pytree_node=False)
    discrepancies: np.ndarray = struct.field(pytree_node=False)
    atol: float = struct.field(pytree_node=False)

    @property
    def worst_index(self) -> int:
        return int(np.argmax(np.nan_to_num(self.discrepancies, nan=np.inf)))

    @property
    def max_discrepancy(self) -> float:
        return float(self.discrepancies[self.worst_index])

    @property
    def worst_xi(self) -> np.ndarray:
        return self.xi[self.worst_index]

    @property
    def passed(self) -> bool:
        return bool(self.max_discrepancy <= self.atol)


def jacobian_discrepancy(numerical: Array, closed_form: Array) -> Array:
    """Max elementwise absolute difference over the last two axes."""
    return jnp.max(jnp.abs(numerical - closed_form), axis=(-2, -1))


def sample_coordinates(key: Array, num_samples: Optional[int], minval: float, maxval: float) -> Array:
    """Draw coordinates with each component uniform in [minval, maxval).

    ``num_samples=None`` returns a single (3,) vector, otherwise (num_samples, 3).
    """
    shape = (3,) if num_samples is None else (num_samples, 3)
    return jax.random.uniform(key, shape, dtype=jnp.float64, minval=minval, maxval=maxval)


def check_jacobian(
    xi: Array,
    numerical: Callable[..., Array],
    closed_form: Callable[[Array], Array],
    exp_map: Callable[[Array], Array] = se2.exp,
    config: ValidationConfig = ValidationConfig(),
) -> JacobianCheck:
    """Compare a numerical and a closed-form Jacobian at one coordinate.

    Raises:
        ToleranceExceeded: if the max elementwise discrepancy exceeds config.atol
    """
    xi = jnp.asarray(xi, dtype=jnp.float64)
    J_num = numerical(xi, exp_map=exp_map, config=config.jacobian)
    J_true = closed_form(xi)
    discrepancy = float(jacobian_discrepancy(J_num, J_true))

    log.debug(f"xi={np.asarray(xi)} discrepancy={discrepancy:.3e}")
    if not discrepancy <= config.atol:
        log.warning(f"Jacobian check failed at xi={np.asarray(xi)}: {discrepancy:.3e} > {config.atol:.1e}")
        raise ToleranceExceeded(discrepancy, config.atol, xi)

    return JacobianCheck(xi=xi, numerical=J_num, closed_form=J_true, max_discrepancy=discrepancy)


def check_right_jacobian(
    key: Array,
    config: ValidationConfig = ValidationConfig(),
    exp_map: Callable[[Array], Array] = se2.exp,
    closed_form: Callable[[Array], Array] = se2.right_jacobian,
) -> JacobianCheck:
    """Check the right Jacobian at one random coordinate drawn from ``key``."""
    xi = sample_coordinates(key, None, config.minval, config.maxval)
    return check_jacobian(xi, numerical_right_jacobian, closed_form, exp_map, config)


def check_left_jacobian(
    key: Array,
    config: ValidationConfig = ValidationConfig(),
    exp_map: Callable[[Array], Array] = se2.exp,
    closed_form: Callable[[Array], Array] = se2.left_jacobian,
) -> JacobianCheck:
    """Check the left Jacobian at one random coordinate drawn from ``key``."""
    xi = sample_coordinates(key, None, config.minval, config.maxval)
    return check_jacobian(xi, numerical_left_jacobian, closed_form, exp_map, config)


def validate_jacobian(
    key: Array,
    numerical: Callable[..., Array],
    closed_form: Callable[[Array], Array],
    exp_map: Callable[[Array], Array] = se2.exp,
    config: ValidationConfig = ValidationConfig(),
    raise_on_failure: bool = True,
) -> ValidationReport:
    """Compare both Jacobians at ``config.num_samples`` random coordinates.

    The numerical estimator is vmapped and jitted over all samples at once.

    Raises:
        ToleranceExceeded: if ``raise_on_failure`` and any sample disagrees
            beyond ``config.atol``; carries the worst discrepancy and its xi
    """
    xi = sample_coordinates(key, config.num_samples, config.minval, config.maxval)

    estimate = jax.jit(jax.vmap(partial(numerical, exp_map=exp_map, config=config.jacobian)))(xi)
    truth = closed_form(xi)
    discrepancies = np.asarray(jacobian_discrepancy(estimate, truth))

    for sample, discrepancy in zip(np.asarray(xi), discrepancies):
        log.debug(f"xi={sample} discrepancy={discrepancy:.3e}")

    report = ValidationReport(xi=np.asarray(xi), discrepancies=discrepancies, atol=config.atol)
    log.info(
        f"Validated {config.num_samples} samples: max discrepancy "
        f"{report.max_discrepancy:.3e} (atol {config.atol:.1e})"
    )

    if raise_on_failure and not report.passed:
        log.warning(f"Worst sample xi={report.worst_xi} exceeds tolerance")
        raise ToleranceExceeded(report.max_discrepancy, config.atol, report.worst_xi)
    return report


def validate_right_jacobian(
    key: Array,
    config: ValidationConfig = ValidationConfig(),
    exp_map: Callable[[Array], Array] = se2.exp,
    closed_form: Callable[[Array], Array] = se2.right_jacobian,
    raise_on_failure: bool = True,
) -> ValidationReport:
    """Validate a closed-form right Jacobian (``se2.right_jacobian`` by default)."""
    return validate_jacobian(key, numerical_right_jacobian, closed_form, exp_map, config, raise_on_failure)


def validate_left_jacobian(
    key: Array,
    config: ValidationConfig = ValidationConfig(),
    exp_map: Callable[[Array], Array] = se2.exp,
    closed_form: Callable[[Array], Array] = se2.left_jacobian,
    raise_on_failure: bool = True,
) -> ValidationReport:
    """Validate a closed-form left Jacobian (``se2.left_jacobian`` by default)."""
    return validate_jacobian(key, numerical_left_jacobian, closed_form, exp_map, config, raise_on_failure)
