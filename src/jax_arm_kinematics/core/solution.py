"""Targets, diagnostics and the kinematic solution record."""

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from jax import Array
from flax import struct

from .configuration import RobotConfiguration


class DiagnosticKind(enum.Enum):
    OUT_OF_RANGE = "out_of_range"
    UNREACHABLE = "unreachable"
    SINGULARITY = "singularity"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while solving a target.

    Attributes:
        kind: What went wrong.
        joint: 1-based joint index the problem belongs to, ``None`` when it
            concerns the whole pose.
        detail: Short label, e.g. the singularity name.
    """
    kind: DiagnosticKind
    joint: Optional[int] = None
    detail: str = ""

    @property
    def message(self) -> str:
        if self.kind is DiagnosticKind.OUT_OF_RANGE:
            return f"Angle for joint {self.joint} is outside the permitted range."
        if self.kind is DiagnosticKind.UNREACHABLE:
            return "Target out of reach."
        label = f"{self.detail} singularity" if self.detail else "singularity"
        where = f" at joint {self.joint}" if self.joint is not None else ""
        return f"Near {label}{where}."

    def __str__(self) -> str:
        return self.message


@struct.dataclass
class JointTarget:
    """A target given directly in joint space.

    Attributes:
        joints: (6,) joint angles in radians.
        tool: Optional (4, 4) TCP frame relative to the flange.
    """
    joints: Array
    tool: Optional[Array] = None


@struct.dataclass
class CartesianTarget:
    """A target given as a tool pose in world coordinates.

    Attributes:
        pose: (4, 4) desired TCP pose in world coordinates.
        tool: Optional (4, 4) TCP frame relative to the flange. The flange
            itself is the TCP when omitted.
        configuration: Branch selector bits. Static for JIT compilation.
    """
    pose: Array
    tool: Optional[Array] = None
    configuration: RobotConfiguration = struct.field(
        pytree_node=False, default=RobotConfiguration.NONE
    )


Target = Union[JointTarget, CartesianTarget]


@struct.dataclass
class InverseSolution:
    """Raw output of an inverse kinematics kernel.

    Flags stay arrays so the kernels remain traceable; they are turned into
    ``Diagnostic`` records after the fact.

    Attributes:
        joints: (6,) joint angles in radians.
        unreachable: Scalar bool, a triangle or ratio left its valid domain.
        singular: (6,) bools, a degenerate configuration was met at that joint.
    """
    joints: Array
    unreachable: Array
    singular: Array


@struct.dataclass
class KinematicSolution:
    """Result of solving one target.

    Attributes:
        joints: (6,) joint angles in radians.
        frames: (8, 4, 4) world frames: base, joints 1 to 6, tool.
        diagnostics: Problems found, in the order they were detected.
    """
    joints: Array
    frames: Array
    diagnostics: Tuple[Diagnostic, ...] = struct.field(pytree_node=False, default=())

    @property
    def errors(self) -> Tuple[str, ...]:
        return tuple(diagnostic.message for diagnostic in self.diagnostics)

    @property
    def is_valid(self) -> bool:
        return not self.diagnostics

    @property
    def base_frame(self) -> Array:
        return self.frames[0]

    @property
    def joint_frames(self) -> Array:
        return self.frames[1:7]

    @property
    def tool_frame(self) -> Array:
        return self.frames[7]

    def has(self, kind: DiagnosticKind) -> bool:
        return any(diagnostic.kind is kind for diagnostic in self.diagnostics)
