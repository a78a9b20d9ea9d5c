"""Solver strategies, one per wrist topology.

A ``KinematicSolver`` bundles the decode rule, forward kinematics and inverse
kinematics of one wrist family. ``solver_for`` picks the strategy from a
``Topology`` tag; the assembly pipeline in ``jax_arm_kinematics.chain``
receives it as a parameter.
"""

import abc
from typing import Dict, List, Union

import jax
import numpy as np

from ..core import (
    BranchSelection,
    Diagnostic,
    DiagnosticKind,
    InverseSolution,
    LinkGeometry,
    RobotConfiguration,
    Topology,
    decode_offset_wrist,
    decode_spherical_wrist,
)
from .forward import offset_wrist_fk, spherical_wrist_fk
from .inverse import offset_wrist_ik, spherical_wrist_ik

Array = jax.Array


class KinematicSolver(abc.ABC):
    """Closed-form kinematics of one wrist family."""

    topology: Topology
    # singularity name per 0-based joint index
    singularity_labels: Dict[int, str] = {}

    @abc.abstractmethod
    def decode(self, configuration: Union[int, RobotConfiguration]) -> BranchSelection:
        """Turn a selector value into this family's branch choice."""

    @abc.abstractmethod
    def forward(self, geometry: LinkGeometry, joints: Array) -> Array:
        """Joint frames (6, 4, 4) relative to the base."""

    @abc.abstractmethod
    def inverse(self, geometry: LinkGeometry, transform: Array, branch: BranchSelection) -> InverseSolution:
        """Joint angles for a flange pose given in base coordinates."""

    def diagnostics(self, solution: InverseSolution) -> List[Diagnostic]:
        """Convert the flags of a concrete ``InverseSolution`` into diagnostics.

        Unreachability comes first, then singularities in joint order.
        """
        found = []
        if bool(solution.unreachable):
            found.append(Diagnostic(DiagnosticKind.UNREACHABLE))
        for index in np.flatnonzero(np.asarray(solution.singular)):
            found.append(
                Diagnostic(
                    DiagnosticKind.SINGULARITY,
                    joint=int(index) + 1,
                    detail=self.singularity_labels.get(int(index), ""),
                )
            )
        return found

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SphericalWristSolver(KinematicSolver):
    topology = Topology.SPHERICAL_WRIST
    singularity_labels = {0: "shoulder", 4: "wrist"}

    def decode(self, configuration):
        return decode_spherical_wrist(configuration)

    def forward(self, geometry, joints):
        return spherical_wrist_fk(geometry, joints)

    def inverse(self, geometry, transform, branch):
        return spherical_wrist_ik(geometry, transform, branch)


class OffsetWristSolver(KinematicSolver):
    topology = Topology.OFFSET_WRIST
    singularity_labels = {0: "overhead", 4: "overhead"}

    def decode(self, configuration):
        return decode_offset_wrist(configuration)

    def forward(self, geometry, joints):
        return offset_wrist_fk(geometry, joints)

    def inverse(self, geometry, transform, branch):
        return offset_wrist_ik(geometry, transform, branch)


_SOLVERS = {
    Topology.SPHERICAL_WRIST: SphericalWristSolver(),
    Topology.OFFSET_WRIST: OffsetWristSolver(),
}


def solver_for(topology: Union[Topology, str]) -> KinematicSolver:
    """Return the solver strategy for ``topology``.

    Raises:
        ValueError: If ``topology`` names no known wrist family.
    """
    return _SOLVERS[Topology(topology)]
