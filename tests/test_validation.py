"""Tests for the numerical-vs-closed-form validation harness."""

import logging

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from jax_manifolds.core import ValidationConfig
from jax_manifolds.errors import ToleranceExceeded
from jax_manifolds.jacobians import numerical_right_jacobian
from jax_manifolds.transforms import se2
from jax_manifolds.validation import (
    check_jacobian,
    check_left_jacobian,
    check_right_jacobian,
    sample_coordinates,
    validate_left_jacobian,
    validate_right_jacobian,
)


def test_validate_right_jacobian_100_samples():
    """Test 100 samples from [0, 10)^3 agree to 1e-5."""
    report = validate_right_jacobian(jax.random.PRNGKey(0))

    assert report.passed
    assert report.xi.shape == (100, 3)
    assert report.discrepancies.shape == (100,)
    assert report.max_discrepancy < 1e-5
    assert np.all(report.xi >= 0.0) and np.all(report.xi < 10.0)


def test_validate_left_jacobian():
    """Test the left Jacobian validates on a smaller range."""
    config = ValidationConfig(minval=-3.0, maxval=3.0, num_samples=25)
    report = validate_left_jacobian(jax.random.PRNGKey(1), config=config)
    assert report.passed


def test_validation_reports_discrepancy_on_failure():
    """Test ToleranceExceeded carries the worst discrepancy and coordinate."""
    config = ValidationConfig(atol=1e-14, num_samples=10)
    with pytest.raises(ToleranceExceeded) as excinfo:
        validate_right_jacobian(jax.random.PRNGKey(2), config=config)

    err = excinfo.value
    assert err.max_discrepancy > 1e-14
    assert err.atol == 1e-14
    assert err.xi.shape == (3,)
    assert "exceeds atol" in str(err)


def test_validation_without_raising():
    """Test raise_on_failure=False returns a failing report instead."""
    config = ValidationConfig(atol=1e-14, num_samples=10)
    report = validate_right_jacobian(jax.random.PRNGKey(2), config=config, raise_on_failure=False)

    assert not report.passed
    assert report.max_discrepancy == report.discrepancies.max()
    np.testing.assert_array_equal(report.worst_xi, report.xi[report.worst_index])


def test_validation_detects_wrong_closed_form():
    """Test a deliberately wrong closed form is caught."""
    wrong = lambda xi: jnp.swapaxes(se2.right_jacobian(xi), -1, -2)
    with pytest.raises(ToleranceExceeded) as excinfo:
        validate_right_jacobian(jax.random.PRNGKey(3), config=ValidationConfig(num_samples=5), closed_form=wrong)
    assert excinfo.value.max_discrepancy > 1e-2


def test_check_right_jacobian_single_sample():
    """Test a single random check returns both Jacobians."""
    check = check_right_jacobian(jax.random.PRNGKey(4))
    assert check.xi.shape == (3,)
    assert check.max_discrepancy < 1e-5
    np.testing.assert_allclose(check.numerical, check.closed_form, atol=1e-5)


def test_check_left_jacobian_single_sample():
    """Test a single random left-Jacobian check."""
    check = check_left_jacobian(jax.random.PRNGKey(4), config=ValidationConfig(minval=-2.0, maxval=2.0))
    assert check.max_discrepancy < 1e-5


def test_check_jacobian_quarter_turn():
    """Test the concrete (1, 2, pi/2) scenario through the harness."""
    check = check_jacobian(jnp.array([1.0, 2.0, jnp.pi / 2]), numerical_right_jacobian, se2.right_jacobian)
    h = jnp.pi / 2
    np.testing.assert_allclose(check.closed_form[0, 2], (h - 3.0) / h**2, atol=1e-12)
    np.testing.assert_allclose(check.closed_form[1, 2], (1.0 + 2.0 * h - 2.0) / h**2, atol=1e-12)


def test_check_jacobian_raises():
    """Test a single check raises with the discrepancy attached."""
    with pytest.raises(ToleranceExceeded) as excinfo:
        check_jacobian(
            jnp.array([1.0, 2.0, 3.0]),
            numerical_right_jacobian,
            se2.right_jacobian,
            config=ValidationConfig(eps=1e-1),
        )
    np.testing.assert_allclose(excinfo.value.xi, [1.0, 2.0, 3.0])
    assert excinfo.value.max_discrepancy > 1e-5


def test_sample_coordinates_range():
    """Test sampling is uniform within the configured bounds."""
    xi = sample_coordinates(jax.random.PRNGKey(0), 1000, -2.0, 5.0)
    assert xi.shape == (1000, 3)
    assert xi.dtype == jnp.float64
    assert float(xi.min()) >= -2.0 and float(xi.max()) < 5.0
    assert sample_coordinates(jax.random.PRNGKey(0), None, 0.0, 1.0).shape == (3,)


def test_validation_logs_summary(caplog):
    """Test the run summary is logged at INFO."""
    with caplog.at_level(logging.INFO, logger="jax_manifolds.validation"):
        validate_right_jacobian(jax.random.PRNGKey(6), config=ValidationConfig(num_samples=3))
    assert "Validated 3 samples" in caplog.text
