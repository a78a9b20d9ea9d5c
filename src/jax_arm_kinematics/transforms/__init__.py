"""
JAX-based rigid body transforms used by the arm solvers.

This module provides JIT-compilable implementations of:
- SO(3) rotations (so3 module)
- SE(3) homogeneous transforms (se3 module)

All functions are pure, stateless, and operate on plain JAX arrays.
"""

from . import so3
from . import se3

__all__ = [
    "so3",
    "se3",
]
