"""Configuration data structures for jax_manifolds.

Numerical knobs are carried in immutable PyTree configs that are passed
explicitly to the functions that need them.
"""

from .config import JacobianConfig, ValidationConfig

__all__ = ["JacobianConfig", "ValidationConfig"]
