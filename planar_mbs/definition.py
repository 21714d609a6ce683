# planar_mbs/definition.py
"""
MODEL DEFINITION: Symbolic Registry of Points, Bodies and Constraints
=====================================================================

PURPOSE:
--------
This module holds the symbolic description of a planar multibody system
before any numeric state exists:

- Points: coordinates + "fixed to ground" flag
- Bodies: which points they own, mass, inertia, center of gravity
- Constraints: prototypes that every assembled model will clone

and turns it into the input of AssembledRigidModel in two steps:

    1. generate_rigidity_constraints()   bodies -> constant distances
    2. assemble()                        points -> ordered natural DOFs

RIGIDITY:
---------
A body defined by N points only stays rigid if enough point-to-point
distances are held constant:

    N = 2   (0,1)                                  1 constraint
    N = 3   (0,1), (0,2), (1,2)                    3 constraints (triangle)
    N > 3   (0,1), then (0,j), (1,j) for j >= 2    2N - 3 constraints (fan)

The fan pins every extra point to the base segment 0-1 by triangulation,
which is exactly the number of constraints a rigid planar body of N points
needs (2N coordinates - 3 rigid-body DOFs).

The rigidity constraints are generated ONCE. After that the registry is
frozen: points and bodies can no longer change, because assembled models
built from it rely on the DOF layout and the body local frames.

USAGE:
------
    model = ModelDefinition()
    model.set_point_count(3)
    model.set_point_coords(0, (0.0, 0.0), fixed=True)
    model.set_point_coords(1, (1.0, 0.0))
    model.set_point_coords(2, (1.0, 1.0))
    model.add_body([0, 1], mass=1.0, inertia=1/12, cog=(0.5, 0.0))
    model.add_body([1, 2], mass=1.0, inertia=1/12, cog=(0.5, 0.0))

    arm = model.assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)])
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .assembled import AssembledRigidModel
from .config import CONFIG
from .constraints import ConstraintBase, ConstraintConstantDistance
from .kernel.dof import NaturalDOF, PointDOF
from .kernel.errors import AssemblyError, InvalidBodyError, ModelIndexError
from .model import Body, Point2, RelativeAngleAbsoluteDOF, RelativeAngleDOF

logger = logging.getLogger(__name__)

RelativeDOF = Union[RelativeAngleDOF, RelativeAngleAbsoluteDOF]


@dataclass
class SymbolicAssembledModel:
    """
    Symbolic assembly: which unknowns the state vector q will contain.

    Attributes:
    -----------
    model : ModelDefinition
        The (frozen) registry this descriptor was built from
    dofs : List[NaturalDOF]
        Natural coordinates, in q order
    relative_dofs : List[RelativeDOF]
        Relative coordinates, appended after the natural ones
    """
    model: "ModelDefinition"
    dofs: List[NaturalDOF] = field(default_factory=list)
    relative_dofs: List[RelativeDOF] = field(default_factory=list)

    @property
    def n_dofs(self) -> int:
        return len(self.dofs) + len(self.relative_dofs)

    def clear(self) -> None:
        self.dofs.clear()
        self.relative_dofs.clear()


class ModelDefinition:
    """Registry of points, bodies and constraints. Mutable until assembled."""

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self._points: List[Point2] = []
        self._bodies: List[Body] = []
        self._constraints: List[ConstraintBase] = []
        self._rigidity_generated = False

    def clear(self) -> None:
        """Erase all points, bodies and constraints and unfreeze the registry."""
        self._reset()

    def _check_not_frozen(self) -> None:
        if self._rigidity_generated:
            raise AssemblyError("Can't modify model after assembling!")

    # -----------------------------------------------------------------
    # Points
    # -----------------------------------------------------------------
    @property
    def point_count(self) -> int:
        return len(self._points)

    @property
    def points(self) -> Tuple[Point2, ...]:
        return tuple(self._points)

    def set_point_count(self, n: int) -> None:
        """Resize the point list; new points start at the origin, not fixed."""
        self._check_not_frozen()
        if n < len(self._points):
            del self._points[n:]
        else:
            self._points.extend(Point2(0.0, 0.0) for _ in range(n - len(self._points)))

    def add_point(self, x: float, y: float, fixed: bool = False) -> int:
        self._check_not_frozen()
        self._points.append(Point2(float(x), float(y), fixed))
        return len(self._points) - 1

    def set_point_coords(self, i: int, coords: Sequence[float], fixed: bool = False) -> None:
        self._check_not_frozen()
        self._check_point_index(i)
        self._points[i] = Point2(float(coords[0]), float(coords[1]), fixed)

    def point_info(self, i: int) -> Point2:
        self._check_point_index(i)
        return self._points[i]

    def _check_point_index(self, i: int) -> None:
        if not 0 <= i < len(self._points):
            raise ModelIndexError(f"Point index {i} out of range [0, {len(self._points)})")

    # -----------------------------------------------------------------
    # Bodies and constraints
    # -----------------------------------------------------------------
    @property
    def bodies(self) -> Tuple[Body, ...]:
        return tuple(self._bodies)

    def body(self, i: int) -> Body:
        if not 0 <= i < len(self._bodies):
            raise ModelIndexError(f"Body index {i} out of range [0, {len(self._bodies)})")
        return self._bodies[i]

    def add_body(
        self,
        points: Sequence[int],
        mass: float = 0.0,
        inertia: float = 0.0,
        cog: Tuple[float, float] = (0.0, 0.0),
        length: Optional[float] = None,
        name: Optional[str] = None,
    ) -> Body:
        """
        Add a rigid body.

        Args:
            points: member point indices; the first two define the body frame
            mass: body mass
            inertia: rotational inertia about the center of gravity
            cog: center of gravity in the body frame
            length: reference length (default: initial distance point0-point1)
            name: body name (default: "body<index>")

        Returns:
            The new Body (local geometry is filled in when the model is frozen)
        """
        self._check_not_frozen()
        if not name:
            name = CONFIG.body_name_format.format(index=len(self._bodies))

        body = Body(
            name=name,
            points=[int(p) for p in points],
            mass=float(mass),
            inertia=float(inertia),
            cog=(float(cog[0]), float(cog[1])),
            length=None if length is None else float(length),
        )
        self._bodies.append(body)
        return body

    @property
    def constraints(self) -> List[ConstraintBase]:
        return self._constraints

    def add_constraint(self, constraint: ConstraintBase) -> ConstraintBase:
        """Register a constraint prototype; assembled models clone it."""
        self._constraints.append(constraint)
        return constraint

    # -----------------------------------------------------------------
    # Rigidity constraints
    # -----------------------------------------------------------------
    @property
    def rigidity_constraints_generated(self) -> bool:
        return self._rigidity_generated

    def _distance(self, i: int, j: int) -> float:
        pi, pj = self._points[i], self._points[j]
        return math.hypot(pj.x - pi.x, pj.y - pi.y)

    def _validate_body(self, body: Body) -> None:
        n = len(body.points)
        if n < 2:
            raise InvalidBodyError(
                f"Body '{body.name}' has an invalid number of points (={n}), valid are >=2"
            )
        for p in body.points:
            if not 0 <= p < len(self._points):
                raise ModelIndexError(
                    f"Body '{body.name}' references point {p}, "
                    f"but the model has {len(self._points)} points"
                )
        if self._distance(body.points[0], body.points[1]) <= 0.0:
            raise InvalidBodyError(
                f"Body '{body.name}': points {body.points[0]} and {body.points[1]} "
                f"coincide, can't define a body frame"
            )
        if body.length is not None and body.length <= 0.0:
            raise InvalidBodyError(
                f"Body '{body.name}' has non-positive length ({body.length})"
            )

    def _build_local_frame(self, body: Body) -> None:
        p0 = self._points[body.points[0]]
        p1 = self._points[body.points[1]]
        L01 = self._distance(body.points[0], body.points[1])
        if body.length is None:
            body.length = L01

        ux, uy = (p1.x - p0.x) / L01, (p1.y - p0.y) / L01
        body.local_points = []
        for p in body.points:
            pt = self._points[p]
            ex, ey = pt.x - p0.x, pt.y - p0.y
            body.local_points.append((ex * ux + ey * uy, -ex * uy + ey * ux))

    @staticmethod
    def rigidity_pairs(n_points: int) -> List[Tuple[int, int]]:
        """Local point pairs whose distance is held constant for an n-point body."""
        if n_points == 2:
            return [(0, 1)]
        if n_points == 3:
            return [(0, 1), (0, 2), (1, 2)]
        pairs = [(0, 1)]
        for j in range(2, n_points):
            pairs.append((0, j))
            pairs.append((1, j))
        return pairs

    def generate_rigidity_constraints(self) -> None:
        """
        Add the constant-distance constraints that keep every body rigid
        and freeze the registry. Later calls are no-ops.

        Raises:
            InvalidBodyError: body with fewer than 2 points, coincident frame points
                or a non-positive explicit length
            ModelIndexError: body referencing a non-existent point
        """
        if self._rigidity_generated:
            return

        for body in self._bodies:
            self._validate_body(body)

        n_before = len(self._constraints)
        for body in self._bodies:
            self._build_local_frame(body)
            for i, j in self.rigidity_pairs(len(body.points)):
                pi, pj = body.points[i], body.points[j]
                self.add_constraint(ConstraintConstantDistance(pi, pj, self._distance(pi, pj)))

        self._rigidity_generated = True
        logger.debug(
            "Generated %d rigidity constraints for %d bodies",
            len(self._constraints) - n_before, len(self._bodies),
        )

    # -----------------------------------------------------------------
    # Assembly
    # -----------------------------------------------------------------
    def assemble(self, relative_dofs: Optional[Sequence[RelativeDOF]] = None) -> SymbolicAssembledModel:
        """
        Symbolic assembly: list the natural DOFs (x, y of every free point, in
        point order), generate rigidity constraints if still pending and
        attach the optional relative coordinates. No numeric work.
        """
        armi = SymbolicAssembledModel(model=self)

        for i, pt in enumerate(self._points):
            if not pt.fixed:
                armi.dofs.append(NaturalDOF(i, PointDOF.X))
                armi.dofs.append(NaturalDOF(i, PointDOF.Y))

        self.generate_rigidity_constraints()

        if relative_dofs:
            armi.relative_dofs = list(relative_dofs)
        return armi

    def assemble_rigid_mbs(
        self, relative_dofs: Optional[Sequence[RelativeDOF]] = None, gravity=None
    ) -> AssembledRigidModel:
        """Symbolic assembly followed by construction of the numeric model."""
        return AssembledRigidModel(self.assemble(relative_dofs), gravity=gravity)
