"""Tests for closed-form forward and inverse kinematics."""

import itertools

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from jax_arm_kinematics.core import LinkGeometry, RobotConfiguration, decode_offset_wrist, decode_spherical_wrist
from jax_arm_kinematics.kinematics import (
    offset_wrist_fk,
    offset_wrist_ik,
    spherical_wrist_fk,
    spherical_wrist_ik,
    wrap_angle,
)
from jax_arm_kinematics.transforms import se3

# Industrial arm with a spherical wrist
SPHERICAL = LinkGeometry.create(
    a=[0.15, 0.7, 0.11, 0.0, 0.0, 0.0],
    d=[0.5, 0.0, 0.0, 0.8, 0.0, 0.09],
)

# UR5 Denavit-Hartenberg parameters
UR5 = LinkGeometry.create(
    a=[0.0, -0.425, -0.39225, 0.0, 0.0, 0.0],
    d=[0.089159, 0.0, 0.0, 0.10915, 0.09465, 0.0823],
)

Q_SPHERICAL = jnp.array([0.3, 0.4, -0.5, 0.7, 0.9, -1.1])
Q_UR5 = jnp.array([0.5, -1.2, 1.4, -0.6, 1.1, 0.8])

angle = st.floats(min_value=-3.0, max_value=3.0)


def assert_valid_se3(T):
    """Bottom row [0, 0, 0, 1] and an orthonormal, right-handed rotation."""
    np.testing.assert_allclose(T[3, :], jnp.array([0.0, 0.0, 0.0, 1.0]), atol=1e-12)
    R = T[:3, :3]
    np.testing.assert_allclose(R @ R.T, jnp.eye(3), atol=1e-12)
    np.testing.assert_allclose(jnp.linalg.det(R), 1.0, atol=1e-12)


def angle_error(a, b):
    """Largest absolute difference between two joint vectors, modulo 2 pi."""
    return float(jnp.max(jnp.abs(wrap_angle(jnp.asarray(a) - jnp.asarray(b)))))


# Forward kinematics
@pytest.mark.parametrize("fk, geometry, q", [
    (spherical_wrist_fk, SPHERICAL, Q_SPHERICAL),
    (offset_wrist_fk, UR5, Q_UR5),
])
def test_fk_frames_are_rigid(fk, geometry, q):
    """Every joint frame is a proper rigid transform."""
    frames = fk(geometry, q)
    assert frames.shape == (6, 4, 4)
    for T in frames:
        assert_valid_se3(T)


def test_spherical_fk_zero_configuration():
    """At zero the arm stretches along X and the flange points down."""
    frames = spherical_wrist_fk(SPHERICAL, jnp.zeros(6))

    np.testing.assert_allclose(se3.get_position(frames[0]), [0.15, 0.0, 0.5], atol=1e-12)
    np.testing.assert_allclose(se3.get_position(frames[2]), [0.96, 0.0, 0.5], atol=1e-12)
    # wrist centre d4 below the forearm end
    np.testing.assert_allclose(se3.get_position(frames[3]), [0.96, 0.0, -0.3], atol=1e-12)
    np.testing.assert_allclose(se3.get_position(frames[5]), [0.96, 0.0, -0.39], atol=1e-12)
    np.testing.assert_allclose(frames[5][:3, 2], [0.0, 0.0, -1.0], atol=1e-12)


def test_offset_fk_zero_configuration():
    """UR5 zero pose matches the published flange position."""
    frames = offset_wrist_fk(UR5, jnp.zeros(6))
    np.testing.assert_allclose(
        se3.get_position(frames[5]), [-0.81725, -0.19145, -0.005491], atol=1e-9
    )


def test_spherical_fk_wrist_centre_is_fixed_by_wrist_joints():
    """Joints 4 to 6 only rotate about the wrist centre."""
    q_other = Q_SPHERICAL.at[3:].set(jnp.array([-2.0, 0.4, 2.5]))
    a = spherical_wrist_fk(SPHERICAL, Q_SPHERICAL)
    b = spherical_wrist_fk(SPHERICAL, q_other)
    np.testing.assert_allclose(se3.get_position(a[3]), se3.get_position(b[3]), atol=1e-12)
    np.testing.assert_allclose(se3.get_position(a[4]), se3.get_position(b[4]), atol=1e-12)
    np.testing.assert_allclose(a[:3], b[:3], atol=1e-12)


def test_fk_vmap_compatibility():
    """Forward kinematics maps over a batch of joint vectors."""
    qs = jnp.stack([Q_SPHERICAL, jnp.zeros(6), -Q_SPHERICAL])
    batched = jax.vmap(spherical_wrist_fk, in_axes=(None, 0))(SPHERICAL, qs)
    assert batched.shape == (3, 6, 4, 4)
    np.testing.assert_allclose(batched[2], spherical_wrist_fk(SPHERICAL, -Q_SPHERICAL), atol=1e-12)


# Inverse kinematics, spherical wrist
def test_spherical_ik_round_trip():
    """FK followed by IK with the matching branch gives the angles back."""
    flange = spherical_wrist_fk(SPHERICAL, Q_SPHERICAL)[5]
    branch = decode_spherical_wrist(RobotConfiguration.WRIST)

    solution = spherical_wrist_ik(SPHERICAL, flange, branch)

    np.testing.assert_allclose(solution.joints, Q_SPHERICAL, atol=1e-9)
    assert not bool(solution.unreachable)
    assert not bool(jnp.any(solution.singular))


def test_spherical_ik_branches():
    """All eight branches reach the pose with distinct joint vectors."""
    flange = spherical_wrist_fk(SPHERICAL, Q_SPHERICAL)[5]

    solutions = []
    for value in range(8):
        solution = spherical_wrist_ik(SPHERICAL, flange, decode_spherical_wrist(value))
        assert not bool(solution.unreachable)
        np.testing.assert_allclose(spherical_wrist_fk(SPHERICAL, solution.joints)[5], flange, atol=1e-9)
        solutions.append(solution.joints)

    for a, b in itertools.combinations(solutions, 2):
        assert angle_error(a, b) > 1e-3


def test_spherical_ik_normalises_angles():
    """Spherical wrist angles are wrapped into (-pi, pi]."""
    flange = spherical_wrist_fk(SPHERICAL, Q_SPHERICAL)[5]
    for value in range(8):
        joints = spherical_wrist_ik(SPHERICAL, flange, decode_spherical_wrist(value)).joints
        assert bool(jnp.all(joints > -jnp.pi)) and bool(jnp.all(joints <= jnp.pi))


def test_spherical_ik_unreachable_fallback():
    """A pose beyond the arm's reach falls back to fixed angles."""
    far = se3.translation(5.0, 0.0, 0.5)
    solution = spherical_wrist_ik(SPHERICAL, far, decode_spherical_wrist(RobotConfiguration.NONE))

    assert bool(solution.unreachable)
    assert bool(jnp.all(jnp.isfinite(solution.joints)))
    # shoulder term falls back to 0, elbow term to pi
    elevation = jnp.arctan2(0.41 - 0.5, 5.0 - 0.15)
    np.testing.assert_allclose(solution.joints[1], elevation, atol=1e-12)
    np.testing.assert_allclose(solution.joints[2], jnp.pi / 2 - jnp.arctan2(0.11, 0.8), atol=1e-12)


def test_spherical_ik_wrist_singularity():
    """Aligned wrist axes are flagged on joint 5."""
    q = Q_SPHERICAL.at[4].set(0.0)
    flange = spherical_wrist_fk(SPHERICAL, q)[5]
    solution = spherical_wrist_ik(SPHERICAL, flange, decode_spherical_wrist(RobotConfiguration.WRIST))

    assert bool(solution.singular[4])
    assert not bool(solution.unreachable)
    assert bool(jnp.all(jnp.isfinite(solution.joints)))
    # arm joints are unaffected by the wrist degeneracy
    np.testing.assert_allclose(solution.joints[:3], q[:3], atol=1e-9)


def test_spherical_ik_shoulder_singularity():
    """A wrist centre on the base axis is flagged on joint 1."""
    flange = se3.translation(0.0, 0.0, 1.2 + 0.09)
    solution = spherical_wrist_ik(SPHERICAL, flange, decode_spherical_wrist(RobotConfiguration.NONE))

    assert bool(solution.singular[0])
    assert bool(jnp.all(jnp.isfinite(solution.joints)))


def test_spherical_ik_jit_compatibility():
    """Spherical IK compiles with the branch as static data."""
    flange = spherical_wrist_fk(SPHERICAL, Q_SPHERICAL)[5]
    branch = decode_spherical_wrist(RobotConfiguration.WRIST)

    jitted = jax.jit(spherical_wrist_ik)(SPHERICAL, flange, branch)
    eager = spherical_wrist_ik(SPHERICAL, flange, branch)

    np.testing.assert_allclose(jitted.joints, eager.joints, atol=1e-12)
    assert bool(jitted.unreachable) == bool(eager.unreachable)


@given(
    q=st.tuples(
        angle,
        st.floats(min_value=-0.6, max_value=1.2),
        st.floats(min_value=-1.2, max_value=1.0),
        angle,
        st.floats(min_value=0.3, max_value=2.8),
        angle,
    ),
    negative_wrist=st.booleans(),
)
@settings(max_examples=25, deadline=None)
def test_spherical_ik_round_trip_property(q, negative_wrist):
    """Some branch reproduces any joint vector away from singularities."""
    q = jnp.array(q)
    if negative_wrist:
        q = q.at[4].multiply(-1.0)

    frames = spherical_wrist_fk(SPHERICAL, q)
    assume(float(jnp.hypot(frames[3][0, 3], frames[3][1, 3])) > 0.05)
    flange = frames[5]

    errors = []
    for value in range(8):
        solution = spherical_wrist_ik(SPHERICAL, flange, decode_spherical_wrist(value))
        if bool(solution.unreachable):
            continue
        np.testing.assert_allclose(spherical_wrist_fk(SPHERICAL, solution.joints)[5], flange, atol=1e-8)
        errors.append(angle_error(solution.joints, q))

    assert min(errors) < 1e-6


# Inverse kinematics, offset wrist
def test_offset_ik_round_trip():
    """FK followed by IK with the matching branch gives the angles back."""
    flange = offset_wrist_fk(UR5, Q_UR5)[5]
    branch = decode_offset_wrist(RobotConfiguration.WRIST)

    solution = offset_wrist_ik(UR5, flange, branch)

    assert angle_error(solution.joints, Q_UR5) < 1e-9
    expected = jnp.array([0.5, 2 * jnp.pi - 1.2, 1.4, 2 * jnp.pi - 0.6, 1.1, 0.8])
    np.testing.assert_allclose(solution.joints, expected, atol=1e-9)
    assert not bool(solution.unreachable)
    assert not bool(jnp.any(solution.singular))


def test_offset_ik_branches():
    """Reachable branches all reproduce the pose; the shifted joints stay in [0, 2 pi)."""
    flange = offset_wrist_fk(UR5, Q_UR5)[5]

    reachable = []
    for value in range(8):
        solution = offset_wrist_ik(UR5, flange, decode_offset_wrist(value))
        joints = solution.joints
        shifted = joints[jnp.array([0, 1, 3, 5])]
        assert bool(jnp.all(shifted >= 0.0)) and bool(jnp.all(shifted < 2 * jnp.pi))
        assert bool(jnp.all(jnp.isfinite(joints)))
        if not bool(solution.unreachable):
            np.testing.assert_allclose(offset_wrist_fk(UR5, joints)[5], flange, atol=1e-9)
            reachable.append(joints)

    assert len(reachable) >= 2
    for a, b in itertools.combinations(reachable, 2):
        assert angle_error(a, b) > 1e-3


def test_offset_ik_unreachable_fallback():
    """A pose beyond the arm's reach is flagged and stays finite."""
    far = se3.translation(3.0, 0.5, 0.2)
    solution = offset_wrist_ik(UR5, far, decode_offset_wrist(RobotConfiguration.NONE))

    assert bool(solution.unreachable)
    assert bool(jnp.all(jnp.isfinite(solution.joints)))
    # elbow falls back to 0
    np.testing.assert_allclose(solution.joints[2], 0.0, atol=1e-12)


def test_offset_ik_overhead_singularity():
    """A wrist straight above the base is an overhead singularity."""
    overhead = se3.translation(0.0, 0.0, 0.5)
    solution = offset_wrist_ik(UR5, overhead, decode_offset_wrist(RobotConfiguration.NONE))

    assert bool(solution.singular[0])
    assert bool(solution.singular[4])
    assert bool(solution.unreachable)
    assert bool(jnp.all(jnp.isfinite(solution.joints)))
    # joint 5 falls back to pi
    np.testing.assert_allclose(solution.joints[4], jnp.pi, atol=1e-12)


def test_offset_ik_folded_onto_shoulder_axis():
    """A wrist projected onto the shoulder axis falls back without NaNs."""
    # equal upper and forearm folded at the elbow put joint 4 on the shoulder axis
    folded = LinkGeometry.create(a=[0.0, -0.425, -0.425, 0.0, 0.0, 0.0], d=UR5.d)
    flange = offset_wrist_fk(folded, jnp.array([0.4, 0.7, jnp.pi, -0.5, 1.0, 0.3]))[5]

    for value in range(8):
        solution = offset_wrist_ik(UR5, flange, decode_offset_wrist(value))
        assert bool(jnp.all(jnp.isfinite(solution.joints))), value
        assert bool(jnp.all(jnp.isfinite(offset_wrist_fk(UR5, solution.joints))))


@pytest.mark.parametrize("value", [RobotConfiguration.WRIST, RobotConfiguration.ELBOW | RobotConfiguration.WRIST])
def test_spherical_ik_fully_stretched(value):
    """A straight arm is reachable despite rounding at the edge of the arccos domain."""
    q = Q_SPHERICAL.at[2].set(jnp.pi / 2 - jnp.arctan2(0.11, 0.8))
    flange = spherical_wrist_fk(SPHERICAL, q)[5]

    solution = spherical_wrist_ik(SPHERICAL, flange, decode_spherical_wrist(value))

    assert not bool(solution.unreachable)
    assert angle_error(solution.joints, q) < 1e-6


@pytest.mark.parametrize("value", [RobotConfiguration.WRIST, RobotConfiguration.ELBOW | RobotConfiguration.WRIST])
def test_offset_ik_fully_stretched(value):
    """A straight UR arm is reachable despite rounding at the edge of the arccos domain."""
    q = Q_UR5.at[2].set(0.0)
    flange = offset_wrist_fk(UR5, q)[5]

    solution = offset_wrist_ik(UR5, flange, decode_offset_wrist(value))

    assert not bool(solution.unreachable)
    assert angle_error(solution.joints, q) < 1e-6


def test_offset_ik_jit_compatibility():
    """Offset IK compiles with the branch as static data."""
    flange = offset_wrist_fk(UR5, Q_UR5)[5]
    branch = decode_offset_wrist(RobotConfiguration.WRIST)

    jitted = jax.jit(offset_wrist_ik)(UR5, flange, branch)
    eager = offset_wrist_ik(UR5, flange, branch)

    np.testing.assert_allclose(jitted.joints, eager.joints, atol=1e-12)


@given(
    q=st.tuples(
        angle,
        angle,
        st.floats(min_value=0.3, max_value=2.8),
        angle,
        st.floats(min_value=0.3, max_value=2.8),
        angle,
    ),
    negative_elbow=st.booleans(),
    negative_wrist=st.booleans(),
)
@settings(max_examples=25, deadline=None)
def test_offset_ik_round_trip_property(q, negative_elbow, negative_wrist):
    """Some branch reproduces any joint vector away from singularities, modulo 2 pi."""
    q = jnp.array(q)
    if negative_elbow:
        q = q.at[2].multiply(-1.0)
    if negative_wrist:
        q = q.at[4].multiply(-1.0)

    flange = offset_wrist_fk(UR5, q)[5]
    wrist = se3.get_position(flange) - UR5.d[5] * flange[:3, 2]
    assume(float(jnp.hypot(wrist[0], wrist[1])) > float(UR5.d[3]) + 0.02)

    errors = []
    for value in range(8):
        solution = offset_wrist_ik(UR5, flange, decode_offset_wrist(value))
        if bool(solution.unreachable):
            continue
        np.testing.assert_allclose(offset_wrist_fk(UR5, solution.joints)[5], flange, atol=1e-8)
        errors.append(angle_error(solution.joints, q))

    assert min(errors) < 1e-6
