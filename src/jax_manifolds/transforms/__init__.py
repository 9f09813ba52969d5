"""
JAX-based planar Lie groups for robotics state estimation.

This module provides JIT-compilable implementations of:
- SO(2) rotations (so2 module)
- SE(2) rigid body transforms in exponential coordinates (se2 module)
- the translation-rotation parametrization of SE(2) (tr module)
- a tagged se(2) Lie-algebra element (algebra module)

All map functions are pure, stateless, and batch-friendly.
"""

# Core Lie group modules
from . import so2
from . import se2
from . import tr
from . import algebra
from .algebra import Se2Algebra

__all__ = [
    "so2",
    "se2",
    "tr",
    "algebra",
    "Se2Algebra",
]
