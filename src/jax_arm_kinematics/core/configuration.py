"""Branch selection for the closed-form inverse kinematics.

A six-axis arm usually reaches a pose in up to eight ways. Callers pick one
with a ``RobotConfiguration`` flag value; ``decode`` turns it into the three
booleans the solvers branch on. The coupling between the flags differs per
wrist topology, so each family has its own decode rule.
"""

import enum
from typing import Union

from flax import struct


class Topology(enum.Enum):
    """Wrist families with a closed-form solver."""
    SPHERICAL_WRIST = "spherical_wrist"
    OFFSET_WRIST = "offset_wrist"


class RobotConfiguration(enum.IntFlag):
    """Raw branch selector bits."""
    NONE = 0
    SHOULDER = 1
    ELBOW = 2
    WRIST = 4


@struct.dataclass
class BranchSelection:
    """Decoded branch choice.

    All fields are static so that a jitted solver compiles one program per
    branch instead of tracing through both.

    Attributes:
        shoulder: Use the rear shoulder solution (joint 1 turned by pi).
        elbow: Take the second elbow solution.
        wrist: Take the flipped wrist solution.
    """
    shoulder: bool = struct.field(pytree_node=False, default=False)
    elbow: bool = struct.field(pytree_node=False, default=False)
    wrist: bool = struct.field(pytree_node=False, default=False)


def decode_spherical_wrist(configuration: Union[int, RobotConfiguration]) -> BranchSelection:
    """Decode a selector for the spherical wrist.

    - shoulder: the SHOULDER bit.
    - elbow: the ELBOW bit, inverted when shoulder is set, since turning the
      shoulder around mirrors which elbow solution points up.
    - wrist: the inverse of the WRIST bit.
    """
    configuration = RobotConfiguration(configuration)
    shoulder = bool(configuration & RobotConfiguration.SHOULDER)
    elbow = bool(configuration & RobotConfiguration.ELBOW)
    if shoulder:
        elbow = not elbow
    wrist = not configuration & RobotConfiguration.WRIST
    return BranchSelection(shoulder=shoulder, elbow=elbow, wrist=wrist)


def decode_offset_wrist(configuration: Union[int, RobotConfiguration]) -> BranchSelection:
    """Decode a selector for the offset (UR-style) wrist.

    Same as the spherical wrist rule, and the rear shoulder solution also
    inverts the wrist choice.
    """
    configuration = RobotConfiguration(configuration)
    shoulder = bool(configuration & RobotConfiguration.SHOULDER)
    elbow = bool(configuration & RobotConfiguration.ELBOW)
    wrist = not configuration & RobotConfiguration.WRIST
    if shoulder:
        elbow = not elbow
        wrist = not wrist
    return BranchSelection(shoulder=shoulder, elbow=elbow, wrist=wrist)


_DECODERS = {
    Topology.SPHERICAL_WRIST: decode_spherical_wrist,
    Topology.OFFSET_WRIST: decode_offset_wrist,
}


def decode(configuration: Union[int, RobotConfiguration], topology: Topology) -> BranchSelection:
    """Decode ``configuration`` with the rule of ``topology``."""
    return _DECODERS[Topology(topology)](configuration)
