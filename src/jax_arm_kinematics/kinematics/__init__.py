"""Closed-form forward and inverse kinematics per wrist topology."""

from .forward import offset_wrist_fk, spherical_wrist_fk
from .inverse import (
    DOMAIN_TOLERANCE,
    SINGULARITY_TOLERANCE,
    offset_wrist_ik,
    spherical_wrist_ik,
    wrap_angle,
)
from .solvers import KinematicSolver, OffsetWristSolver, SphericalWristSolver, solver_for

__all__ = [
    "DOMAIN_TOLERANCE",
    "KinematicSolver",
    "OffsetWristSolver",
    "SINGULARITY_TOLERANCE",
    "SphericalWristSolver",
    "offset_wrist_fk",
    "offset_wrist_ik",
    "solver_for",
    "spherical_wrist_fk",
    "spherical_wrist_ik",
    "wrap_angle",
]
