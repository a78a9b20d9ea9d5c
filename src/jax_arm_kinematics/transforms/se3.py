"""SE(3) homogeneous transforms in JAX.

Rigid body transforms are plain (..., 4, 4) arrays. Composition is matrix
multiplication and inversion uses the rotation/translation block structure,
so the kinematics code never needs anything beyond matrices and 3-vectors.
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    p = jnp.asarray(p, dtype=float)
    R = jnp.asarray(R, dtype=float)

    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def identity() -> Array:
    """The 4x4 identity transform."""
    return jnp.eye(4, dtype=float)


def translation(x: float, y: float, z: float) -> Array:
    """Pure translation by (x, y, z)."""
    return from_position_and_rotation(jnp.array([x, y, z], dtype=float), jnp.eye(3))


def from_xyz_rpy(xyz: Array, rpy: Array) -> Array:
    """
    Construct SE(3) transform from a position and roll-pitch-yaw angles.

    Args:
        xyz: (..., 3) position
        rpy: (..., 3) [roll, pitch, yaw] in radians, see ``so3.from_rpy``

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    return from_position_and_rotation(jnp.asarray(xyz, dtype=float), so3.from_rpy(rpy))


def multiply(T1: Array, T2: Array) -> Array:
    """
    Multiply two SE(3) transformation matrices.

    Args:
        T1: (..., 4, 4) first transformation matrix
        T2: (..., 4, 4) second transformation matrix

    Returns:
        (..., 4, 4) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(3) transformation matrix.

    Uses the block structure for efficient computation:
    T^-1 = [[R^T, -R^T @ t], [0, 1]]

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 4, 4) inverse transformation matrix
    """
    R = T[..., :3, :3]
    t = T[..., :3, 3]

    R_inv = jnp.swapaxes(R, -1, -2)
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, t)

    return from_position_and_rotation(t_inv, R_inv)


def get_position(T: Array) -> Array:
    """Extract the (..., 3) position from a transformation matrix."""
    return T[..., :3, 3]
