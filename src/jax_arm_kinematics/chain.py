"""Solution assembly: from a target to the full frame chain of the arm.

This module implements the pipeline shared by every wrist family. It
resolves the joint angles (directly, or through the family's inverse
kinematics), checks them against the joint ranges, runs forward kinematics
and returns the world frames of the base, the six joints and the tool.
"""

import logging
from typing import Iterable, List, Optional

import jax
import jax.numpy as jnp

from .core import (
    NUM_JOINTS,
    ArmModel,
    CartesianTarget,
    Diagnostic,
    DiagnosticKind,
    JointTarget,
    KinematicSolution,
    LinkGeometry,
    Target,
)
from .kinematics import KinematicSolver, solver_for
from .transforms import se3

Array = jax.Array

logger = logging.getLogger(__name__)


def _as_transform(value: Array, name: str) -> Array:
    value = jnp.asarray(value, dtype=float)
    if value.shape != (4, 4):
        raise ValueError(f"{name} must have shape (4, 4), got {value.shape}")
    return value


def flange_pose(base: Array, pose: Array, tool: Optional[Array] = None) -> Array:
    """Flange pose in base coordinates that puts ``tool`` at world ``pose``.

    Args:
        base: (4, 4) arm base frame in world coordinates.
        pose: (4, 4) desired TCP pose in world coordinates.
        tool: Optional (4, 4) TCP frame relative to the flange.

    Returns:
        (4, 4) transform inv(base) @ pose @ inv(tool).
    """
    flange = se3.multiply(se3.inverse(base), pose)
    if tool is not None:
        flange = se3.multiply(flange, se3.inverse(tool))
    return flange


def assemble(
    solver: KinematicSolver,
    geometry: LinkGeometry,
    base: Array,
    target: Target,
) -> KinematicSolution:
    """Solve ``target`` with an explicit solver strategy.

    Args:
        solver: Wrist family strategy providing decode, FK and IK.
        geometry: Link parameters and joint ranges.
        base: (4, 4) arm base frame in world coordinates.
        target: A ``JointTarget`` or ``CartesianTarget``.

    Returns:
        KinematicSolution with frames (8, 4, 4) ordered base, joints 1 to 6,
        tool, all in world coordinates.

    Raises:
        ValueError: If the joint vector or any transform has the wrong shape.
        TypeError: If ``target`` is not a known target type.
    """
    if not isinstance(target, (JointTarget, CartesianTarget)):
        raise TypeError(f"Unsupported target type: {type(target).__name__}")

    base = _as_transform(base, "base")
    tool = None if target.tool is None else _as_transform(target.tool, "tool")
    diagnostics: List[Diagnostic] = []

    if isinstance(target, JointTarget):
        joints = jnp.asarray(target.joints, dtype=float)
        if joints.shape != (NUM_JOINTS,):
            raise ValueError(f"joints must have shape ({NUM_JOINTS},), got {joints.shape}")
    else:
        flange = flange_pose(base, _as_transform(target.pose, "pose"), tool)
        branch = solver.decode(target.configuration)
        solution = solver.inverse(geometry, flange, branch)
        joints = solution.joints
        diagnostics.extend(solver.diagnostics(solution))

    for index in range(NUM_JOINTS):
        if not geometry.is_within_range(index, joints[index]):
            diagnostics.append(Diagnostic(DiagnosticKind.OUT_OF_RANGE, joint=index + 1))

    joint_frames = se3.multiply(base, solver.forward(geometry, joints))
    tool_frame = joint_frames[5] if tool is None else se3.multiply(joint_frames[5], tool)
    frames = jnp.concatenate([base[None], joint_frames, tool_frame[None]], axis=0)

    for diagnostic in diagnostics:
        logger.debug("%s: %s", solver.topology.value, diagnostic.message)

    return KinematicSolution(joints=joints, frames=frames, diagnostics=tuple(diagnostics))


def solve(arm: ArmModel, target: Target) -> KinematicSolution:
    """Solve ``target`` for ``arm`` with the strategy of its topology."""
    return assemble(solver_for(arm.topology), arm.geometry, arm.base, target)


def solve_many(arm: ArmModel, targets: Iterable[Target]) -> List[KinematicSolution]:
    """Solve independent targets one by one; no state carries between them."""
    solver = solver_for(arm.topology)
    return [assemble(solver, arm.geometry, arm.base, target) for target in targets]
