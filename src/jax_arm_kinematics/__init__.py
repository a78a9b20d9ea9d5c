"""
JAX Arm Kinematics: closed-form kinematics for six-axis robot arms.

This library converts between joint space and tool poses for spherical wrist
and offset (UR-style) wrist arms, with explicit branch selection and
non-fatal diagnostics for unreachable, singular and out-of-range solutions.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from . import kinematics
from .chain import assemble, flange_pose, solve, solve_many
from .core import (
    ArmModel,
    CartesianTarget,
    Diagnostic,
    DiagnosticKind,
    JointTarget,
    KinematicSolution,
    LinkGeometry,
    RobotConfiguration,
    Topology,
)

__version__ = "0.1.0"
__all__ = [
    "ArmModel",
    "CartesianTarget",
    "Diagnostic",
    "DiagnosticKind",
    "JointTarget",
    "KinematicSolution",
    "LinkGeometry",
    "RobotConfiguration",
    "Topology",
    "assemble",
    "core",
    "flange_pose",
    "kinematics",
    "solve",
    "solve_many",
    "transforms",
]
