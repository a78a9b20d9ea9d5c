"""Closed-form inverse kinematics for the two wrist families.

Each solver takes the flange pose in base coordinates and a decoded
``BranchSelection`` and returns an ``InverseSolution``. Geometric trouble
never raises: an argument that leaves the domain of ``arccos`` is replaced by
a fixed fallback angle and reported through the solution's flags, so every
call yields finite angles.

The branch fields are static, so both functions can be wrapped in
``jax.jit`` directly.
"""

import jax
import jax.numpy as jnp

from ..core import BranchSelection, InverseSolution, LinkGeometry, NUM_JOINTS
from ..transforms import se3
from .forward import spherical_wrist_fk

Array = jax.Array

# |1 - cos(q5)| below this counts as the wrist axes lining up
SINGULARITY_TOLERANCE = 1e-4
# arccos arguments this close to +/-1 are snapped onto the boundary
DOMAIN_TOLERANCE = 1e-8

TWO_PI = 2.0 * jnp.pi


def wrap_angle(angle: Array) -> Array:
    """Wrap angles into (-pi, pi]."""
    return angle - TWO_PI * jnp.ceil((angle - jnp.pi) / TWO_PI)


def _arccos_or(x: Array, fallback: float):
    """arccos of ``x``, or ``fallback`` when ``x`` is outside [-1, 1] or NaN.

    Returns:
        Tuple of (angle, invalid flag).
    """
    x = jnp.where(jnp.abs(jnp.abs(x) - 1.0) < DOMAIN_TOLERANCE, jnp.sign(x), x)
    invalid = ~(jnp.abs(x) <= 1.0)
    angle = jnp.where(invalid, fallback, jnp.arccos(jnp.clip(x, -1.0, 1.0)))
    return angle, invalid


def _singular(flags) -> Array:
    """Scatter {joint index: flag} into a (6,) bool array."""
    singular = jnp.zeros(NUM_JOINTS, dtype=bool)
    for index, flag in flags.items():
        singular = singular.at[index].set(flag)
    return singular


def spherical_wrist_ik(geometry: LinkGeometry, transform: Array, branch: BranchSelection) -> InverseSolution:
    """Inverse kinematics of a spherical wrist arm.

    The wrist centre sits d6 behind the flange along its Z axis. Joint 1 aims
    the arm plane at it; joints 2 and 3 close the triangle shoulder, elbow,
    wrist centre by the law of cosines; joints 4 to 6 are the ZYZ angles of
    the remaining rotation. Angles are wrapped into (-pi, pi].

    Args:
        geometry: Link parameters; reads a1..a3, d1, d4 and d6.
        transform: (4, 4) flange pose in base coordinates.
        branch: Decoded branch, see ``decode_spherical_wrist``.

    Returns:
        InverseSolution with joint 1 flagged when the wrist centre is on the
        base axis and joint 5 flagged when the wrist axes are aligned.
    """
    a, d = geometry.a, geometry.d
    T = jnp.asarray(transform, dtype=float)

    center = se3.get_position(T) - d[5] * T[:3, 2]

    forearm = jnp.hypot(a[2], d[3])
    forearm_tilt = jnp.arctan2(a[2], d[3])

    q1 = jnp.arctan2(center[1], center[0])
    radial = jnp.stack([jnp.cos(q1), jnp.sin(q1)])
    shoulder_singular = jnp.hypot(center[0], center[1]) < SINGULARITY_TOLERANCE
    shoulder = jnp.stack([a[0] * radial[0], a[0] * radial[1], d[0]])

    if branch.shoulder:
        # reach over the top: turn joint 1 around and mirror the wrist centre
        q1 = q1 + jnp.pi
        center = center * jnp.array([-1.0, -1.0, 1.0])

    to_center = center - shoulder
    span = jnp.linalg.norm(to_center)
    upper_arm = a[1]

    beta, beta_invalid = _arccos_or(
        (upper_arm ** 2 + span ** 2 - forearm ** 2) / (2.0 * upper_arm * span), 0.0
    )
    gamma, gamma_invalid = _arccos_or(
        (upper_arm ** 2 + forearm ** 2 - span ** 2) / (2.0 * upper_arm * forearm), jnp.pi
    )
    if branch.elbow:
        beta = -beta
        gamma = -gamma

    # signed horizontal distance, negative when the centre is behind the shoulder
    horizontal = to_center[0] * radial[0] + to_center[1] * radial[1]
    elevation = jnp.arctan2(to_center[2], horizontal)

    q2 = beta + elevation
    q3 = gamma - forearm_tilt - jnp.pi / 2

    arm = spherical_wrist_fk(geometry, jnp.concatenate([jnp.stack([q1, q2, q3]), jnp.zeros(3)]))[2]
    wrist = se3.inverse(arm) @ T

    q4 = jnp.arctan2(wrist[1, 2], wrist[0, 2])
    q5 = jnp.arccos(jnp.clip(wrist[2, 2], -1.0, 1.0))
    q6 = jnp.arctan2(wrist[2, 1], -wrist[2, 0])
    if branch.wrist:
        q4 = q4 + jnp.pi
        q5 = -q5
        q6 = q6 - jnp.pi

    joints = wrap_angle(jnp.stack([q1, q2, q3, q4, q5, q6]))

    return InverseSolution(
        joints=joints,
        unreachable=beta_invalid | gamma_invalid,
        singular=_singular({
            0: shoulder_singular,
            4: jnp.abs(1.0 - wrist[2, 2]) < SINGULARITY_TOLERANCE,
        }),
    )


def offset_wrist_ik(geometry: LinkGeometry, transform: Array, branch: BranchSelection) -> InverseSolution:
    """Inverse kinematics of an offset (UR-style) wrist arm.

    Follows the analytic solution for the Universal Robots family. Joints 1,
    2, 4 and 6 are shifted by +2 pi when negative, so they come out in
    [0, 2 pi); joints 3 and 5 are the principal arccos value or its
    explement 2 pi - arccos, depending on the branch.

    Args:
        geometry: Link parameters; reads d1, a2, a3, d4, d5 and d6.
        transform: (4, 4) flange pose in base coordinates.
        branch: Decoded branch, see ``decode_offset_wrist``.

    Returns:
        InverseSolution with joint 1 flagged when the wrist passes over the
        base axis and joint 5 flagged when its ratio leaves [-1, 1].
    """
    a, d = geometry.a, geometry.d
    T = jnp.asarray(transform, dtype=float)

    # shoulder
    A = d[5] * T[1, 2] - T[1, 3]
    B = d[5] * T[0, 2] - T[0, 3]
    acos1, overhead = _arccos_or(d[3] / jnp.sqrt(A * A + B * B), 0.0)
    atan1 = jnp.arctan2(-B, A)
    q1 = atan1 - acos1 if branch.shoulder else atan1 + acos1

    c1, s1 = jnp.cos(q1), jnp.sin(q1)

    # wrist 2
    acos5, wrist_invalid = _arccos_or((T[0, 3] * s1 - T[1, 3] * c1 - d[3]) / d[5], jnp.pi)
    q5 = TWO_PI - acos5 if branch.wrist else acos5

    c5, s5 = jnp.cos(q5), jnp.sin(q5)
    sign5 = jnp.sign(s5)

    q6 = jnp.arctan2(
        sign5 * -(T[0, 1] * s1 - T[1, 1] * c1),
        sign5 * (T[0, 0] * s1 - T[1, 0] * c1),
    )
    c6, s6 = jnp.cos(q6), jnp.sin(q6)

    # project the rest of the chain onto the plane of joints 2 to 4
    x04x = -s5 * (T[0, 2] * c1 + T[1, 2] * s1) - c5 * (
        s6 * (T[0, 1] * c1 + T[1, 1] * s1) - c6 * (T[0, 0] * c1 + T[1, 0] * s1)
    )
    x04y = c5 * (T[2, 0] * c6 - T[2, 1] * s6) - T[2, 2] * s5
    p13x = (
        d[4] * (s6 * (T[0, 0] * c1 + T[1, 0] * s1) + c6 * (T[0, 1] * c1 + T[1, 1] * s1))
        - d[5] * (T[0, 2] * c1 + T[1, 2] * s1)
        + T[0, 3] * c1
        + T[1, 3] * s1
    )
    p13y = T[2, 3] - d[0] - d[5] * T[2, 2] + d[4] * (T[2, 1] * c6 + T[2, 0] * s6)

    # elbow
    c3 = (p13x * p13x + p13y * p13y - a[1] * a[1] - a[2] * a[2]) / (2.0 * a[1] * a[2])
    acos3, elbow_invalid = _arccos_or(c3, 0.0)
    q3 = TWO_PI - acos3 if branch.elbow else acos3

    # continue from the fallback angle, not the out-of-domain cosine
    c3, s3 = jnp.cos(acos3), jnp.sin(acos3)
    A = a[1] + a[2] * c3
    B = a[2] * s3

    # the common non-negative scale a2^2 + a3^2 + 2 a2 a3 c3 cancels in atan2
    if branch.elbow:
        q2 = jnp.arctan2(A * p13y + B * p13x, A * p13x - B * p13y)
    else:
        q2 = jnp.arctan2(A * p13y - B * p13x, A * p13x + B * p13y)

    c23, s23 = jnp.cos(q2 + q3), jnp.sin(q2 + q3)
    q4 = jnp.arctan2(c23 * x04y - s23 * x04x, x04x * c23 + x04y * s23)

    joints = jnp.stack([q1, q2, q3, q4, q5, q6])
    shifted = jnp.array([True, True, False, True, False, True]) & (joints < 0.0)
    joints = jnp.where(shifted, joints + TWO_PI, joints)

    return InverseSolution(
        joints=joints,
        unreachable=wrist_invalid | elbow_invalid,
        singular=_singular({0: overhead, 4: wrist_invalid}),
    )
