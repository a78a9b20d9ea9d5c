"""Core data structures for JAX Arm Kinematics.

This module provides the immutable records the solvers consume and produce:
link geometry, arm model, branch selection, targets and solutions.
"""

from .configuration import (
    BranchSelection,
    RobotConfiguration,
    Topology,
    decode,
    decode_offset_wrist,
    decode_spherical_wrist,
)
from .robot_model import NUM_JOINTS, ArmModel, LinkGeometry
from .solution import (
    CartesianTarget,
    Diagnostic,
    DiagnosticKind,
    InverseSolution,
    JointTarget,
    KinematicSolution,
    Target,
)

__all__ = [
    "ArmModel",
    "BranchSelection",
    "CartesianTarget",
    "Diagnostic",
    "DiagnosticKind",
    "InverseSolution",
    "JointTarget",
    "KinematicSolution",
    "LinkGeometry",
    "NUM_JOINTS",
    "RobotConfiguration",
    "Target",
    "Topology",
    "decode",
    "decode_offset_wrist",
    "decode_spherical_wrist",
]
