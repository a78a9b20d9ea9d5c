"""Closed-form forward kinematics for the two wrist families.

Both functions map a (6,) joint vector to the (6, 4, 4) stack of joint frames
relative to the arm base. The matrices are written out in full rather than
multiplied link by link, which keeps them exact and cheap to trace.
"""

from typing import Sequence

import jax
import jax.numpy as jnp

from ..core import LinkGeometry

Array = jax.Array


def _frame(rows: Sequence[Sequence]) -> Array:
    """Assemble a 4x4 transform from its top three rows."""
    rows = list(rows) + [[0.0, 0.0, 0.0, 1.0]]
    return jnp.stack([
        jnp.stack([jnp.asarray(value, dtype=float) for value in row])
        for row in rows
    ])


def spherical_wrist_fk(geometry: LinkGeometry, joints: Array) -> Array:
    """Forward kinematics of a spherical wrist arm.

    The arm frames follow Rz(q1) Tz(d1) Tx(a1) Rx(pi), then Ry(q2) Tx(a2) and
    Ry(q3) Tx(a3): joints 2 and 3 pitch about the horizontal axis with angles
    measured from the base XY plane. The wrist is a ZYZ group centred d4 along
    the forearm axis: Tz(d4) Rz(q4), Ry(q5), Rz(q6) Tz(d6).

    Args:
        geometry: Link parameters; reads a1..a3, d1, d4 and d6.
        joints: Joint angles of shape (6,) in radians.

    Returns:
        Array of shape (6, 4, 4), frame i is joint i + 1 in base coordinates.
    """
    q = jnp.asarray(joints, dtype=float)
    a, d = geometry.a, geometry.d
    c, s = jnp.cos(q), jnp.sin(q)
    c12, s12 = jnp.cos(q[1] + q[2]), jnp.sin(q[1] + q[2])

    reach2 = a[0] + a[1] * c[1]
    reach3 = reach2 + a[2] * c12
    height3 = d[0] + a[1] * s[1] + a[2] * s12

    t1 = _frame([
        [c[0], s[0], 0.0, a[0] * c[0]],
        [s[0], -c[0], 0.0, a[0] * s[0]],
        [0.0, 0.0, -1.0, d[0]],
    ])
    t2 = _frame([
        [c[0] * c[1], s[0], c[0] * s[1], c[0] * reach2],
        [s[0] * c[1], -c[0], s[0] * s[1], s[0] * reach2],
        [s[1], 0.0, -c[1], d[0] + a[1] * s[1]],
    ])
    t3 = _frame([
        [c[0] * c12, s[0], c[0] * s12, c[0] * reach3],
        [s[0] * c12, -c[0], s[0] * s12, s[0] * reach3],
        [s12, 0.0, -c12, height3],
    ])

    # wrist frames relative to frame 3
    w4 = _frame([
        [c[3], -s[3], 0.0, 0.0],
        [s[3], c[3], 0.0, 0.0],
        [0.0, 0.0, 1.0, d[3]],
    ])
    w5 = _frame([
        [c[3] * c[4], -s[3], c[3] * s[4], 0.0],
        [s[3] * c[4], c[3], s[3] * s[4], 0.0],
        [-s[4], 0.0, c[4], d[3]],
    ])
    w6 = _frame([
        [c[3] * c[4] * c[5] - s[3] * s[5], -c[3] * c[4] * s[5] - s[3] * c[5], c[3] * s[4], d[5] * c[3] * s[4]],
        [s[3] * c[4] * c[5] + c[3] * s[5], -s[3] * c[4] * s[5] + c[3] * c[5], s[3] * s[4], d[5] * s[3] * s[4]],
        [-s[4] * c[5], s[4] * s[5], c[4], d[3] + d[5] * c[4]],
    ])

    return jnp.stack([t1, t2, t3, t3 @ w4, t3 @ w5, t3 @ w6])


def offset_wrist_fk(geometry: LinkGeometry, joints: Array) -> Array:
    """Forward kinematics of an offset (UR-style) wrist arm.

    Standard Denavit-Hartenberg chain with twists (pi/2, 0, 0, pi/2, -pi/2, 0),
    expanded with the sums q2+q3 and q2+q3+q4.

    Args:
        geometry: Link parameters; reads d1, a2, a3, d4, d5 and d6.
        joints: Joint angles of shape (6,) in radians.

    Returns:
        Array of shape (6, 4, 4), frame i is joint i + 1 in base coordinates.
    """
    q = jnp.asarray(joints, dtype=float)
    a, d = geometry.a, geometry.d
    c, s = jnp.cos(q), jnp.sin(q)
    c23, s23 = jnp.cos(q[1] + q[2]), jnp.sin(q[1] + q[2])
    c234, s234 = jnp.cos(q[1] + q[2] + q[3]), jnp.sin(q[1] + q[2] + q[3])

    reach = a[1] * c[1] + a[2] * c23
    height = d[0] + a[1] * s[1] + a[2] * s23

    t1 = _frame([
        [c[0], 0.0, s[0], 0.0],
        [s[0], 0.0, -c[0], 0.0],
        [0.0, 1.0, 0.0, d[0]],
    ])
    t2 = _frame([
        [c[0] * c[1], -c[0] * s[1], s[0], a[1] * c[0] * c[1]],
        [s[0] * c[1], -s[0] * s[1], -c[0], a[1] * s[0] * c[1]],
        [s[1], c[1], 0.0, d[0] + a[1] * s[1]],
    ])
    t3 = _frame([
        [c[0] * c23, -c[0] * s23, s[0], c[0] * reach],
        [s[0] * c23, -s[0] * s23, -c[0], s[0] * reach],
        [s23, c23, 0.0, height],
    ])

    p4 = [c[0] * reach + d[3] * s[0], s[0] * reach - d[3] * c[0], height]
    t4 = _frame([
        [c[0] * c234, s[0], c[0] * s234, p4[0]],
        [s[0] * c234, -c[0], s[0] * s234, p4[1]],
        [s234, 0.0, -c234, p4[2]],
    ])

    x5 = [s[0] * s[4] + c234 * c[0] * c[4], c234 * c[4] * s[0] - c[0] * s[4], s234 * c[4]]
    y5 = [-s234 * c[0], -s234 * s[0], c234]
    z5 = [c[4] * s[0] - c234 * c[0] * s[4], -c[0] * c[4] - c234 * s[0] * s[4], -s234 * s[4]]
    p5 = [p4[0] + d[4] * s234 * c[0], p4[1] + d[4] * s234 * s[0], p4[2] - d[4] * c234]
    t5 = _frame([[x5[i], y5[i], z5[i], p5[i]] for i in range(3)])

    t6 = _frame([
        [
            c[5] * x5[i] + s[5] * y5[i],
            -s[5] * x5[i] + c[5] * y5[i],
            z5[i],
            p5[i] + d[5] * z5[i],
        ]
        for i in range(3)
    ])

    return jnp.stack([t1, t2, t3, t4, t5, t6])
