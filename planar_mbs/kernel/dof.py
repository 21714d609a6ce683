# planar_mbs/kernel/dof.py
"""
DOF BOOKKEEPING: Natural Coordinates <-> State Vector Columns
=============================================================

PURPOSE:
--------
This module handles the mapping between "point 5, y-coordinate" and
"column 7 of q". In natural coordinates the unknowns are simply the
Cartesian coordinates of the points that are NOT fixed to the ground:

    free point   -> 2 unknowns (x, y)
    fixed point  -> 0 unknowns (its coordinates are constants)

So unlike a structural model (where every node owns a block of DOFs and
supports are applied afterwards), here the fixed points never enter the
state vector at all. The mapping is therefore not a formula but a table,
built once per assembled model and read-only afterwards.

LAYOUT OF q:
------------
    q = [ natural DOFs (point order, x then y) | relative DOFs ]

    Example: points 0 (fixed), 1 (free), 2 (free), 3 (fixed)
             + 1 relative angle
        q[0] = x1, q[1] = y1, q[2] = x2, q[3] = y2, q[4] = theta

USAGE:
------
    dofs = [NaturalDOF(1, PointDOF.X), NaturalDOF(1, PointDOF.Y), ...]
    points2dofs = build_point_dof_map(dofs, n_points=4)

    points2dofs[1].dof_x   # -> 0
    points2dofs[0].dof_x   # -> None (fixed point, no column)
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .errors import ModelIndexError


class PointDOF(Enum):
    """Coordinate axis of a natural DOF."""
    X = "x"
    Y = "y"


@dataclass(frozen=True)
class NaturalDOF:
    """
    One scalar unknown: one axis of one free point.

    Attributes:
    -----------
    point_index : int
        Index of the point in the model registry
    point_dof : PointDOF
        Which coordinate (X or Y) this unknown stands for
    """
    point_index: int
    point_dof: PointDOF

    def describe(self) -> str:
        return f"{self.point_dof.value}{self.point_index}"


@dataclass
class PointDOFs:
    """
    Reverse lookup entry: where the coordinates of one point live in q.

    A value of None means "no column": the point is fixed along that axis
    and its coordinate must be read from the model registry instead.
    """
    dof_x: Optional[int] = None
    dof_y: Optional[int] = None

    @property
    def is_fixed(self) -> bool:
        return self.dof_x is None and self.dof_y is None


def build_point_dof_map(dofs: Sequence[NaturalDOF], n_points: int) -> List[PointDOFs]:
    """
    Build the point -> column reverse map from the ordered natural DOF list.

    Parameters:
    -----------
    dofs : Sequence[NaturalDOF]
        Natural DOFs in state-vector order (column i <-> dofs[i])
    n_points : int
        Total number of points in the model (fixed ones included)

    Returns:
    --------
    List[PointDOFs]
        One entry per point. Fixed points keep both entries as None.

    Raises:
    -------
    ModelIndexError
        If a DOF references a point outside [0, n_points)

    Examples:
    ---------
    >>> m = build_point_dof_map([NaturalDOF(1, PointDOF.X), NaturalDOF(1, PointDOF.Y)], 2)
    >>> m[1].dof_x, m[1].dof_y, m[0].dof_x
    (0, 1, None)
    """
    result = [PointDOFs() for _ in range(n_points)]

    for col, dof in enumerate(dofs):
        if not 0 <= dof.point_index < n_points:
            raise ModelIndexError(
                f"DOF q[{col}] references point {dof.point_index}, "
                f"but the model has {n_points} points"
            )
        entry = result[dof.point_index]
        if dof.point_dof is PointDOF.X:
            entry.dof_x = col
        else:
            entry.dof_y = col

    return result


def element_dof_map(points2dofs: Sequence[PointDOFs], point_ids: Sequence[int]) -> List[Optional[int]]:
    """
    Get the column map for an element (body) touching several points.

    Same role as the scatter map of a finite element, except that fixed
    axes show up as None and must be skipped during assembly.

    Parameters:
    -----------
    points2dofs : Sequence[PointDOFs]
        Reverse map from build_point_dof_map()
    point_ids : Sequence[int]
        Points of the element, e.g. [p0, p1] for a two-point body

    Returns:
    --------
    List[Optional[int]]
        Flattened [x0, y0, x1, y1, ...] columns (None where fixed)

    Examples:
    ---------
    >>> m = build_point_dof_map([NaturalDOF(1, PointDOF.X), NaturalDOF(1, PointDOF.Y)], 2)
    >>> element_dof_map(m, [0, 1])
    [None, None, 0, 1]
    """
    result = []
    for pt in point_ids:
        entry = points2dofs[pt]
        result.extend([entry.dof_x, entry.dof_y])
    return result


def dof_signature(dofs: Sequence[NaturalDOF], relative_dofs: Sequence) -> Tuple:
    """
    Structural fingerprint of a state-vector layout.

    Two assembled models can exchange q/dq only if their signatures are
    equal, i.e. they were built from the same symbolic descriptor lineage.
    """
    natural = tuple((d.point_index, d.point_dof.value) for d in dofs)
    relative = tuple(repr(r) for r in relative_dofs)
    return natural, relative
