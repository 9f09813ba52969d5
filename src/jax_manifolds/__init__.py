"""
JAX Manifolds: Lie-group maps and manifold Jacobians for planar rigid motion.

This library provides JIT-compilable implementations of the SE(2) exponential
and logarithm maps, closed-form right/left Jacobians, and a numerical
estimator that validates them against finite differences plus automatic
differentiation.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import errors
from . import core
from . import transforms
from . import jacobians
from . import validation

__version__ = "0.1.0"
__all__ = ["errors", "core", "transforms", "jacobians", "validation"]
