"""SO(3) rotation helpers in JAX.

This module provides the elementary rotations used to write the closed-form
arm kinematics, plus roll-pitch-yaw construction for authoring poses. All
functions are pure, JIT-able, and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp
from typing import Union

Array = jax.Array
Scalar = Union[float, Array]


def _axis_rotation(angle: Scalar, axis: int) -> Array:
    angle = jnp.asarray(angle, dtype=float)
    c, s = jnp.cos(angle), jnp.sin(angle)
    one = jnp.ones_like(c)
    zero = jnp.zeros_like(c)

    if axis == 0:
        rows = [[one, zero, zero], [zero, c, -s], [zero, s, c]]
    elif axis == 1:
        rows = [[c, zero, s], [zero, one, zero], [-s, zero, c]]
    else:
        rows = [[c, -s, zero], [s, c, zero], [zero, zero, one]]

    return jnp.stack([jnp.stack(row, axis=-1) for row in rows], axis=-2)


def rot_x(angle: Scalar) -> Array:
    """Rotation about the X axis by ``angle`` radians, shape (..., 3, 3)."""
    return _axis_rotation(angle, 0)


def rot_y(angle: Scalar) -> Array:
    """Rotation about the Y axis by ``angle`` radians, shape (..., 3, 3)."""
    return _axis_rotation(angle, 1)


def rot_z(angle: Scalar) -> Array:
    """Rotation about the Z axis by ``angle`` radians, shape (..., 3, 3)."""
    return _axis_rotation(angle, 2)


def from_rpy(rpy: Array) -> Array:
    """
    Convert roll-pitch-yaw angles to a rotation matrix.

    Uses the fixed-axis convention R = Rz(yaw) @ Ry(pitch) @ Rx(roll).

    Args:
        rpy: (..., 3) array of [roll, pitch, yaw] angles in radians

    Returns:
        (..., 3, 3) rotation matrices
    """
    rpy = jnp.asarray(rpy, dtype=float)
    roll, pitch, yaw = rpy[..., 0], rpy[..., 1], rpy[..., 2]
    return jnp.matmul(rot_z(yaw), jnp.matmul(rot_y(pitch), rot_x(roll)))
