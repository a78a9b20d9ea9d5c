"""Link geometry and arm model PyTrees for six-axis articulated arms.

This module defines the immutable data structures the solvers read: the
per-joint link parameters and ranges, and the arm that places them in the
world. Both are PyTrees, so they can be passed straight into jitted code.
"""

from typing import Optional, Sequence, Tuple

import jax.numpy as jnp
import numpy as np
from jax import Array
from flax import struct

from .configuration import Topology

NUM_JOINTS = 6


@struct.dataclass
class LinkGeometry:
    """Immutable link parameters and joint ranges of a six-axis arm.

    Index ``i`` describes joint ``i + 1``. Which slots a solver reads depends
    on the wrist topology; unused slots are simply ignored.

    Attributes:
        a: Array of shape (6,) with the link lengths.
        d: Array of shape (6,) with the link offsets along each joint axis.
        lower: Array of shape (6,) with the minimum joint angle in radians.
        upper: Array of shape (6,) with the maximum joint angle in radians.
    """
    a: Array
    d: Array
    lower: Array
    upper: Array

    @classmethod
    def create(
        cls,
        a: Sequence[float],
        d: Sequence[float],
        ranges: Optional[Sequence[Tuple[float, float]]] = None,
    ) -> "LinkGeometry":
        """Build a geometry from plain sequences.

        Args:
            a: Six link lengths.
            d: Six link offsets.
            ranges: Six (min, max) pairs in radians. Unbounded when omitted.

        Raises:
            ValueError: If any sequence does not have six entries or a range
                has min > max.
        """
        a = np.asarray(a, dtype=float)
        d = np.asarray(d, dtype=float)
        if ranges is None:
            ranges = [(-np.inf, np.inf)] * NUM_JOINTS
        ranges = np.asarray(ranges, dtype=float)

        if a.shape != (NUM_JOINTS,) or d.shape != (NUM_JOINTS,):
            raise ValueError(
                f"a and d must have shape ({NUM_JOINTS},), got {a.shape} and {d.shape}"
            )
        if ranges.shape != (NUM_JOINTS, 2):
            raise ValueError(f"ranges must have shape ({NUM_JOINTS}, 2), got {ranges.shape}")
        if np.any(ranges[:, 0] > ranges[:, 1]):
            bad = [int(i) + 1 for i in np.flatnonzero(ranges[:, 0] > ranges[:, 1])]
            raise ValueError(f"Joint ranges must satisfy min <= max, violated for joints {bad}")

        return cls(
            a=jnp.asarray(a),
            d=jnp.asarray(d),
            lower=jnp.asarray(ranges[:, 0]),
            upper=jnp.asarray(ranges[:, 1]),
        )

    def is_within_range(self, index: int, angle: float) -> bool:
        """Whether ``angle`` lies inside the closed range of joint ``index`` (0-based)."""
        return bool((self.lower[index] <= angle) & (angle <= self.upper[index]))

    def within_range(self, joints: Array) -> Array:
        """Element-wise range check of a (6,) joint vector, returns (6,) bools."""
        return (self.lower <= joints) & (joints <= self.upper)


@struct.dataclass
class ArmModel:
    """A six-axis arm: its link geometry, base frame and wrist topology.

    Attributes:
        geometry: The arm's ``LinkGeometry``.
        base: Array of shape (4, 4), the arm base frame in world coordinates.
        topology: Wrist family, selects the solver. Static for JIT compilation.
    """
    geometry: LinkGeometry
    base: Array
    topology: Topology = struct.field(pytree_node=False)

    @classmethod
    def create(
        cls,
        geometry: LinkGeometry,
        topology: Topology,
        base: Optional[Array] = None,
    ) -> "ArmModel":
        topology = Topology(topology)
        if base is None:
            base = jnp.eye(4)
        base = jnp.asarray(base, dtype=float)
        if base.shape != (4, 4):
            raise ValueError(f"base must have shape (4, 4), got {base.shape}")
        return cls(geometry=geometry, base=base, topology=topology)
