# tests/test_model_definition.py
"""
TEST: Symbolic Registry and Rigidity Constraints
================================================

The registry turns bodies into constant-distance constraints. We check:

1. The number and the pairs of generated constraints per body size
   (2 points: 1, 3 points: triangle, N > 3 points: fan of 2N - 3)
2. Target lengths are the initial point separations
3. Generation happens once, no matter how many times we assemble
4. Malformed bodies and post-freeze modifications fail loudly
"""

import math

import pytest

from planar_mbs import (
    AssemblyError,
    Body,
    InvalidBodyError,
    ModelDefinition,
    ModelIndexError,
    RelativeAngleAbsoluteDOF,
)
from planar_mbs.constraints import ConstraintConstantDistance, ConstraintRelativePosition
from planar_mbs.examples import build_four_bar_model


def make_polygon_body(n_points: int) -> ModelDefinition:
    """n points on a unit circle (point 0 fixed) forming one body."""
    model = ModelDefinition()
    for i in range(n_points):
        angle = 2 * math.pi * i / n_points
        model.add_point(math.cos(angle), math.sin(angle), fixed=(i == 0))
    model.add_body(list(range(n_points)), mass=1.0, inertia=0.1)
    return model


def distance_pairs(model: ModelDefinition):
    return [(c.point_index0, c.point_index1) for c in model.constraints
            if isinstance(c, ConstraintConstantDistance)]


class TestRigidityConstraints:
    """Constraint sets generated for each body size."""

    def test_two_point_body(self):
        model = make_polygon_body(2)
        model.generate_rigidity_constraints()

        assert distance_pairs(model) == [(0, 1)]
        assert model.constraints[0].length == pytest.approx(2.0)

    def test_three_point_body_is_a_triangle(self):
        model = make_polygon_body(3)
        model.generate_rigidity_constraints()

        assert distance_pairs(model) == [(0, 1), (0, 2), (1, 2)]

        # Equilateral triangle inscribed in the unit circle: side = sqrt(3)
        for c in model.constraints:
            assert c.length == pytest.approx(math.sqrt(3.0))

    @pytest.mark.parametrize("n_points", [4, 5, 7])
    def test_fan_for_more_points(self, n_points):
        model = make_polygon_body(n_points)
        model.generate_rigidity_constraints()

        expected = [(0, 1)]
        for j in range(2, n_points):
            expected += [(0, j), (1, j)]

        assert distance_pairs(model) == expected
        # 2N coordinates - 3 rigid-body DOFs
        assert len(model.constraints) == 2 * n_points - 3

    def test_target_lengths_are_initial_separations(self):
        model = make_polygon_body(5)
        model.generate_rigidity_constraints()

        for c in model.constraints:
            a = model.point_info(c.point_index0)
            b = model.point_info(c.point_index1)
            assert c.length == pytest.approx(math.hypot(b.x - a.x, b.y - a.y), abs=1e-14)

    def test_generation_is_idempotent(self):
        """
        Assembling twice with different relative coordinates must not
        duplicate the rigidity constraints.
        """
        model = build_four_bar_model()
        arm1 = model.assemble_rigid_mbs()
        n_after_first = len(model.constraints)
        arm2 = model.assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)])
        model.generate_rigidity_constraints()

        assert n_after_first == 3
        assert len(model.constraints) == 3
        assert arm1.n_constraints == 3
        assert arm2.n_constraints == 4

    @pytest.mark.parametrize("n_points", [0, 1])
    def test_body_with_too_few_points(self, n_points):
        model = ModelDefinition()
        model.add_point(0.0, 0.0)
        model.add_body([0] * n_points)

        with pytest.raises(InvalidBodyError):
            model.generate_rigidity_constraints()
        assert not model.rigidity_constraints_generated

    def test_body_with_coincident_frame_points(self):
        model = ModelDefinition()
        model.add_point(1.0, 1.0)
        model.add_point(1.0, 1.0)
        model.add_body([0, 1])

        with pytest.raises(InvalidBodyError):
            model.generate_rigidity_constraints()

    def test_body_referencing_missing_point(self):
        model = ModelDefinition()
        model.add_point(0.0, 0.0)
        model.add_point(1.0, 0.0)
        model.add_body([0, 5])

        with pytest.raises(ModelIndexError):
            model.generate_rigidity_constraints()

    @pytest.mark.parametrize("length", [0.0, -1.0])
    def test_body_with_non_positive_length(self, length):
        model = ModelDefinition()
        model.add_point(0.0, 0.0, fixed=True)
        model.add_point(1.0, 0.0)
        model.add_body([0, 1], mass=1.0, inertia=0.1, cog=(0.5, 0.0), length=length)

        with pytest.raises(InvalidBodyError):
            model.assemble_rigid_mbs()
        assert not model.rigidity_constraints_generated
        assert model.constraints == []


class TestRegistry:
    """Points, bodies and the freeze after assembly."""

    def test_bodies_are_auto_named(self):
        model = build_four_bar_model()
        b = model.add_body([1, 2])
        assert b.name == "body3"
        assert model.add_body([0, 1], name="arm").name == "arm"

    def test_set_point_count_and_coords(self):
        model = ModelDefinition()
        model.set_point_count(3)
        model.set_point_coords(1, (2.0, -1.0), fixed=True)

        assert model.point_count == 3
        assert model.point_info(0).coords == (0.0, 0.0)
        assert model.point_info(1).coords == (2.0, -1.0)
        assert model.point_info(1).fixed

        with pytest.raises(ModelIndexError):
            model.point_info(3)

    def test_registry_is_frozen_after_assembly(self):
        model = build_four_bar_model()
        model.assemble()

        with pytest.raises(AssemblyError):
            model.set_point_coords(1, (0.0, 1.0))
        with pytest.raises(AssemblyError):
            model.add_body([1, 2])
        with pytest.raises(AssemblyError):
            model.add_point(0.0, 0.0)

    def test_body_list_cannot_be_extended_after_assembly(self):
        model = build_four_bar_model()
        arm = model.assemble_rigid_mbs()

        bodies = model.bodies
        assert isinstance(bodies, tuple)
        with pytest.raises(AttributeError):
            bodies.append(Body(name="extra", points=[1, 2]))

        assert len(model.bodies) == 3
        # Assembled models keep working on the frozen body set
        arm.build_mass_matrix()
        arm.evaluate_energy()

    def test_constraints_can_still_be_added(self):
        model = build_four_bar_model()
        model.assemble()
        model.add_constraint(ConstraintRelativePosition(0, 1, 2))
        assert len(model.constraints) == 4

    def test_clear_unfreezes(self):
        model = build_four_bar_model()
        model.assemble()
        model.clear()

        assert model.point_count == 0
        assert model.bodies == ()
        assert model.constraints == []
        assert not model.rigidity_constraints_generated
        model.add_point(0.0, 0.0)

    def test_body_local_frame(self):
        """
        The body frame has its origin at point 0 and X towards point 1.
        Local geometry is captured when the registry is frozen.
        """
        model = ModelDefinition()
        model.add_point(1.0, 1.0, fixed=True)
        model.add_point(1.0, 3.0)   # X axis of the body points "up"
        model.add_point(0.0, 2.0)   # (1, 1) in the body frame
        body = model.add_body([0, 1, 2], mass=1.0)
        model.generate_rigidity_constraints()

        assert body.length == pytest.approx(2.0)
        expected = [(0.0, 0.0), (2.0, 0.0), (1.0, 1.0)]
        for got, exp in zip(body.local_points, expected):
            assert got == pytest.approx(exp, abs=1e-14)

    def test_explicit_length_is_kept(self):
        model = ModelDefinition()
        model.add_point(0.0, 0.0, fixed=True)
        model.add_point(3.0, 4.0)
        body = model.add_body([0, 1], length=10.0)
        model.generate_rigidity_constraints()

        assert body.length == 10.0
        # The constraint still holds the initial separation
        assert model.constraints[0].length == pytest.approx(5.0)
