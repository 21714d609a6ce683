# tests/test_energy.py
"""
TEST: Mass Matrix, Gravity Forces and Mechanical Energy
=======================================================

Closed-form checks:

- Pendulum (uniform bar, pivot at one end): T = 1/2 (m L^2 / 3) w^2
- Upright pendulum: V = m g L / 2
- Rigid motion of a body with an off-axis COG:
      T = 1/2 m |v_cog|^2 + 1/2 I_cog w^2

Consistency checks:

- evaluate_energy().kinetic == 1/2 dq' M dq
- generalized gravity forces Q == -dV/dq
"""

import math

import numpy as np
import pytest

from planar_mbs import (
    ModelDefinition,
    RelativeAngleAbsoluteDOF,
    StateMismatchError,
    copy_state,
)
from planar_mbs.examples import build_four_bar_model, build_pendulum_model

G = 9.81


def off_axis_plate_model() -> ModelDefinition:
    """Free plate (3 points, COG off the 0-1 axis) hinged to a grounded crank."""
    model = ModelDefinition()
    model.add_point(0.0, 0.0, fixed=True)
    model.add_point(0.8, 0.3)
    model.add_point(2.6, 0.1)
    model.add_point(1.9, 1.2)
    model.add_body([0, 1], mass=0.7, inertia=0.05, cog=(0.4, 0.0))
    model.add_body([1, 2, 3], mass=3.0, inertia=0.4, cog=(0.7, 0.3))
    return model


class TestPendulum:

    def test_kinetic_energy(self):
        arm = build_pendulum_model(length=1.0).assemble_rigid_mbs()
        omega = 2.5
        # Tip at (1, 0) rotating CCW about the origin
        arm.dq = [0.0, omega]

        m, L = 1.0, 1.0
        e = arm.evaluate_energy()
        assert e.kinetic == pytest.approx(0.5 * (m * L**2 / 3.0) * omega**2)

    def test_potential_energy_upright(self):
        arm = build_pendulum_model(length=1.0, angle=math.pi / 2).assemble_rigid_mbs()
        e = arm.evaluate_energy()

        assert e.kinetic == 0.0
        assert e.potential == pytest.approx(G * 1.0 * 1.0 / 2.0)
        assert e.total == pytest.approx(e.potential)

    def test_horizontal_gravity(self):
        arm = build_pendulum_model(length=2.0).assemble_rigid_mbs(gravity=(-G, 0.0, 0.0))
        # mass = 2, cog x = 1, g pointing towards -x
        assert arm.evaluate_energy().potential == pytest.approx(2.0 * G * 1.0)


def test_rigid_motion_kinetic_energy():
    """Natural-coordinate mass matrix is exact for velocities of a rigid motion."""
    model = ModelDefinition()
    model.add_point(0.5, 0.2)
    model.add_point(2.5, 0.2)
    m, I, cog = 3.0, 0.4, (0.7, 0.3)
    model.add_body([0, 1], mass=m, inertia=I, cog=cog)
    arm = model.assemble_rigid_mbs()

    v0 = np.array([0.3, -1.2])
    omega = 1.7
    r01 = np.array([2.0, 0.0])
    rot90 = np.array([[0.0, -1.0], [1.0, 0.0]])
    v1 = v0 + omega * rot90 @ r01
    arm.dq = np.concatenate([v0, v1])

    v_cog = v0 + omega * rot90 @ np.array(cog)
    expected = 0.5 * m * v_cog @ v_cog + 0.5 * I * omega**2

    assert arm.evaluate_energy().kinetic == pytest.approx(expected, rel=1e-12)


def test_kinetic_energy_matches_mass_matrix():
    arm = off_axis_plate_model().assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)])
    rng = np.random.default_rng(7)

    M = arm.build_mass_matrix()
    assert M.shape == (arm.n_dofs, arm.n_dofs)
    np.testing.assert_allclose(M.toarray(), M.toarray().T, atol=1e-14)

    # Relative coordinates carry no mass
    col = arm.relative_coordinate_index(0)
    assert np.all(M.toarray()[col] == 0.0)

    for _ in range(5):
        arm.dq = rng.normal(size=arm.n_dofs)
        expected = 0.5 * arm.dq @ (M @ arm.dq)
        assert arm.evaluate_energy().kinetic == pytest.approx(expected, rel=1e-12)


@pytest.mark.parametrize("gravity", [(0.0, -G, 0.0), (1.5, -G, 0.0), (-2.0, 0.5, 0.0)])
def test_generalized_forces_are_potential_gradient(gravity):
    arm = off_axis_plate_model().assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)], gravity=gravity)
    Q = arm.build_generalized_forces()
    assert Q is arm.Q

    q0 = arm.q.copy()
    h = 1e-6
    grad = np.zeros(arm.n_dofs)
    for j in range(arm.n_dofs):
        arm.q = q0
        arm.q[j] += h
        vp = arm.evaluate_energy().potential
        arm.q[j] -= 2 * h
        vm = arm.evaluate_energy().potential
        grad[j] = (vp - vm) / (2 * h)
    arm.q = q0

    np.testing.assert_allclose(Q, -grad, atol=1e-7)
    assert Q[arm.relative_coordinate_index(0)] == 0.0


class TestStateExchange:

    def test_copy_state_preserves_energy(self):
        model = build_four_bar_model()
        a = model.assemble_rigid_mbs()
        b = model.assemble_rigid_mbs()

        a.q = a.q + np.array([0.01, -0.02, 0.03, 0.0])
        a.dq = [0.5, -0.1, 0.2, 0.3]
        a.ddq = [9.0, 9.0, 9.0, 9.0]
        q_buffer = b.q

        copy_state(b, a)

        assert b.q is q_buffer
        np.testing.assert_array_equal(b.q, a.q)
        np.testing.assert_array_equal(b.dq, a.dq)
        np.testing.assert_array_equal(b.ddq, 0.0)
        assert b.evaluate_energy() == a.evaluate_energy()

    def test_structural_mismatch(self):
        model = build_four_bar_model()
        a = model.assemble_rigid_mbs()
        b = model.assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)])

        with pytest.raises(StateMismatchError):
            b.copy_state_from(a)
        with pytest.raises(StateMismatchError):
            copy_state(a, b)

    def test_gravity_is_per_instance(self):
        model = build_pendulum_model(angle=math.pi / 2)
        a = model.assemble_rigid_mbs()
        b = model.assemble_rigid_mbs()

        a.gravity = (0.0, 0.0, 0.0)

        assert a.evaluate_energy().potential == 0.0
        assert b.evaluate_energy().potential == pytest.approx(G * 0.5)
        with pytest.raises(ValueError):
            b.gravity = (0.0, -G)
