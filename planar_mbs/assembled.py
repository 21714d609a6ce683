# planar_mbs/assembled.py
"""
ASSEMBLED RIGID MODEL: Numeric State, Constraints and Jacobians
===============================================================

PURPOSE:
--------
An AssembledRigidModel is built once from a SymbolicAssembledModel and
owns everything numeric:

    q, dq, ddq, Q           state vector, its derivatives, generalized forces
    Phi, dotPhi             constraint residuals and their time derivative
    Phi_q, dotPhi_q, ...    sparse Jacobian family (one shared pattern)
    points2dofs             point -> column reverse map

CONSTRUCTION (in this order):
-----------------------------
    1. size q/dq/ddq/Q (natural + relative DOFs), refuse 0 natural DOFs
    2. q <- current coordinates of every free point
    3. reverse map point -> (dof_x, dof_y)
    4. clone the registry constraints, append one per relative DOF
    5. column count of the sparse matrices = number of DOFs
    6. every constraint declares its Jacobian entries; pattern is frozen

UPDATE PROTOCOL:
----------------
    model.q = ...                 # or model.q[i] = ..., in place
    model.update_constraints()    # MUST be called before reading below
    model.Phi, model.Phi_q, model.evaluate_energy(), ...

There is no dirty tracking: reading Phi after mutating q without an
update returns stale values. An instance is not thread-safe; run one
instance per thread and exchange state with copy_state().
"""

import logging
import math
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, TextIO, Tuple

import numpy as np
import pandas as pd
import scipy.sparse

from .config import CONFIG
from .constraints import (
    ConstraintBase,
    ConstraintRelativeAngle,
    ConstraintRelativeAngleAbsolute,
)
from .kernel.assemble import assemble_global_F, assemble_global_M
from .kernel.dof import PointDOF, PointDOFs, build_point_dof_map, dof_signature, element_dof_map
from .kernel.errors import AssemblyError, InvalidBodyError, ModelIndexError, StateMismatchError
from .kernel.sparse import SparseRowMatrix, SparsityPattern
from .model import RelativeAngleAbsoluteDOF, RelativeAngleDOF

logger = logging.getLogger(__name__)


@dataclass
class EnergyValues:
    """Mechanical energy of the system (J)."""
    kinetic: float = 0.0
    potential: float = 0.0
    total: float = 0.0


class AssembledRigidModel:
    """
    Numeric multibody model in natural (+ optional relative) coordinates.

    Args:
        armi: symbolic descriptor from ModelDefinition.assemble()
        gravity: 3-component gravity vector (default: CONFIG.default_gravity)

    Raises:
        AssemblyError: zero natural DOFs or unknown relative-DOF variant
    """

    def __init__(self, armi, gravity: Optional[Sequence[float]] = None):
        self.parent = armi.model
        self._gravity = np.zeros(3, dtype=float)
        self.gravity = CONFIG.default_gravity if gravity is None else gravity

        self.dofs = list(armi.dofs)
        self.relative_dofs = list(armi.relative_dofs)

        n_natural = len(self.dofs)
        n_dofs = n_natural + len(self.relative_dofs)
        if n_natural == 0:
            raise AssemblyError("Trying to assemble model with 0 Natural Coordinate DOFs")

        # State buffers: allocated once, only ever written in place
        self._q = np.zeros(n_dofs, dtype=float)
        self._dq = np.zeros(n_dofs, dtype=float)
        self._ddq = np.zeros(n_dofs, dtype=float)
        self._Q = np.zeros(n_dofs, dtype=float)

        self.points2dofs: List[PointDOFs] = build_point_dof_map(self.dofs, self.parent.point_count)
        for col, dof in enumerate(self.dofs):
            pt = self.parent.point_info(dof.point_index)
            self._q[col] = pt.x if dof.point_dof is PointDOF.X else pt.y

        self.Phi = np.zeros(0, dtype=float)
        self.dotPhi = np.zeros(0, dtype=float)
        self._pattern = SparsityPattern()
        self.Phi_q = SparseRowMatrix(self._pattern)
        self.dotPhi_q = SparseRowMatrix(self._pattern)
        self.dPhiqdq_dq = SparseRowMatrix(self._pattern)
        self.Phiqq_times_dq = SparseRowMatrix(self._pattern)
        self.d_dotPhiq_ddq_times_dq = SparseRowMatrix(self._pattern)

        self.constraints: List[ConstraintBase] = [c.clone() for c in self.parent.constraints]

        relative_constraints = []
        self._relative_columns: List[int] = []
        for i, rdof in enumerate(self.relative_dofs):
            col = n_natural + i
            constraint = self._make_relative_constraint(rdof, col)
            self.constraints.append(constraint)
            relative_constraints.append(constraint)
            self._relative_columns.append(col)

        self._pattern.set_col_count(n_dofs)
        for c in self.constraints:
            c.build_sparse_structures(self)
        self._pattern.freeze()

        # Start relative coordinates at the angles of the initial configuration
        self.update_constraints()
        for c, col in zip(relative_constraints, self._relative_columns):
            self._q[col] = self.Phi[c.rows[0]]
        if relative_constraints:
            self.update_constraints()

        logger.debug(
            "Assembled model: |q|=%d (%d natural, %d relative), %d constraint rows, nnz=%d",
            n_dofs, n_natural, len(self.relative_dofs), len(self.Phi), self._pattern.nnz,
        )

    @staticmethod
    def _make_relative_constraint(rdof, col: int) -> ConstraintBase:
        if isinstance(rdof, RelativeAngleDOF):
            return ConstraintRelativeAngle(rdof.point_idx0, rdof.point_idx1, rdof.point_idx2, col)
        elif isinstance(rdof, RelativeAngleAbsoluteDOF):
            return ConstraintRelativeAngleAbsolute(rdof.point_idx0, rdof.point_idx1, col)
        raise AssemblyError(f"Unknown type of relative coordinate: {rdof!r}")

    # -----------------------------------------------------------------
    # State vectors (fixed storage: setters copy in place)
    # -----------------------------------------------------------------
    @property
    def q(self) -> np.ndarray:
        return self._q

    @q.setter
    def q(self, value) -> None:
        self._q[:] = value

    @property
    def dq(self) -> np.ndarray:
        return self._dq

    @dq.setter
    def dq(self, value) -> None:
        self._dq[:] = value

    @property
    def ddq(self) -> np.ndarray:
        return self._ddq

    @ddq.setter
    def ddq(self, value) -> None:
        self._ddq[:] = value

    @property
    def Q(self) -> np.ndarray:
        return self._Q

    @Q.setter
    def Q(self, value) -> None:
        self._Q[:] = value

    @property
    def gravity(self) -> np.ndarray:
        return self._gravity

    @gravity.setter
    def gravity(self, value) -> None:
        g = np.asarray(value, dtype=float)
        if g.shape != (3,):
            raise ValueError(f"Gravity must have 3 components, got shape {g.shape}")
        self._gravity[:] = g

    @property
    def n_natural_dofs(self) -> int:
        return len(self.dofs)

    @property
    def n_relative_dofs(self) -> int:
        return len(self.relative_dofs)

    @property
    def n_dofs(self) -> int:
        return len(self._q)

    @property
    def n_constraints(self) -> int:
        return len(self.Phi)

    @property
    def dof_signature(self) -> Tuple:
        return dof_signature(self.dofs, self.relative_dofs)

    def relative_coordinate_index(self, i: int) -> int:
        """Column of q holding the i-th relative coordinate."""
        if not 0 <= i < len(self._relative_columns):
            raise ModelIndexError(
                f"Relative coordinate {i} out of range [0, {len(self._relative_columns)})"
            )
        return self._relative_columns[i]

    # -----------------------------------------------------------------
    # Constraints and sparse structure
    # -----------------------------------------------------------------
    def jacobian_family(self) -> Tuple[SparseRowMatrix, ...]:
        return (self.Phi_q, self.dotPhi_q, self.dPhiqdq_dq,
                self.Phiqq_times_dq, self.d_dotPhiq_ddq_times_dq)

    def add_constraint_row(self) -> int:
        """Grow Phi, dotPhi and every Jacobian-family matrix by one row."""
        idx = len(self.Phi)
        self.Phi = np.append(self.Phi, 0.0)
        self.dotPhi = np.append(self.dotPhi, 0.0)
        self._pattern.add_row()
        return idx

    def register_jacobian_entry(self, row: int, col: int) -> int:
        return self._pattern.register(row, col)

    def update_constraints(self) -> None:
        """Recompute Phi, dotPhi and the Jacobian family at the current q, dq."""
        for c in self.constraints:
            c.update(self)

    # -----------------------------------------------------------------
    # Points and bodies
    # -----------------------------------------------------------------
    def point_dofs(self, pt_idx: int) -> PointDOFs:
        if not 0 <= pt_idx < len(self.points2dofs):
            raise ModelIndexError(f"Point index {pt_idx} out of range [0, {len(self.points2dofs)})")
        return self.points2dofs[pt_idx]

    def point_coords(self, pt_idx: int) -> Tuple[float, float]:
        """Current coordinates of a point (registry value for fixed axes)."""
        pt = self.parent.point_info(pt_idx)
        d = self.points2dofs[pt_idx]
        x = self._q[d.dof_x] if d.dof_x is not None else pt.x
        y = self._q[d.dof_y] if d.dof_y is not None else pt.y
        return float(x), float(y)

    def point_velocity(self, pt_idx: int) -> Tuple[float, float]:
        """Current velocity of a point (zero for fixed axes)."""
        d = self.point_dofs(pt_idx)
        vx = self._dq[d.dof_x] if d.dof_x is not None else 0.0
        vy = self._dq[d.dof_y] if d.dof_y is not None else 0.0
        return float(vx), float(vy)

    def body_point_coords(self, body_idx: int, local: Sequence[float]) -> Tuple[float, float]:
        """
        World coordinates of a point given in a body frame.

        The frame is X: point0 -> point1 (scaled by the body length), Y: X
        rotated +90 deg, origin at point0.
        """
        b = self.parent.body(body_idx)
        L = b.length
        if L is None or L <= 0.0:
            raise InvalidBodyError(f"Body '{b.name}' has non-positive length ({L})")

        x0, y0 = self.point_coords(b.points[0])
        x1, y1 = self.point_coords(b.points[1])
        ux, uy = (x1 - x0) / L, (y1 - y0) / L
        vx, vy = -uy, ux

        return (x0 + ux * local[0] + vx * local[1],
                y0 + uy * local[0] + vy * local[1])

    def body_pose(self, body_idx: int) -> Tuple[float, float, float]:
        """(x, y, theta) of a body frame: origin at point0, heading towards point1."""
        b = self.parent.body(body_idx)
        x0, y0 = self.point_coords(b.points[0])
        x1, y1 = self.point_coords(b.points[1])
        return x0, y0, math.atan2(y1 - y0, x1 - x0)

    # -----------------------------------------------------------------
    # Dynamics helpers
    # -----------------------------------------------------------------
    def _body_dof_map(self, body) -> List[Optional[int]]:
        return element_dof_map(self.points2dofs, body.points[:2])

    def build_mass_matrix(self) -> scipy.sparse.csr_matrix:
        """Global mass matrix M (n x n). Relative coordinates carry no mass."""
        contributions = [(self._body_dof_map(b), b.mass_matrix()) for b in self.parent.bodies]
        return assemble_global_M(self.n_dofs, contributions)

    def build_generalized_forces(self) -> np.ndarray:
        """Fill Q with the generalized gravity forces and return it."""
        contributions = [
            (self._body_dof_map(b), b.gravity_forces(self._gravity)) for b in self.parent.bodies
        ]
        self._Q[:] = assemble_global_F(self.n_dofs, contributions)
        return self._Q

    def evaluate_energy(self) -> EnergyValues:
        """Kinetic, potential and total energy at the current q, dq."""
        e = EnergyValues()

        for i, b in enumerate(self.parent.bodies):
            dq0 = np.array(self.point_velocity(b.points[0]))
            dq1 = np.array(self.point_velocity(b.points[1]))
            M00, M01, M11 = b.mass_blocks()

            # 0.5 * [dq0 dq1] * [M00 M01; M01' M11] * [dq0 dq1]'
            e.kinetic += 0.5 * (dq0 @ M00 @ dq0 + dq1 @ M11 @ dq1) + dq0 @ M01 @ dq1

            cog_x, cog_y = self.body_point_coords(i, b.cog)
            e.potential -= b.mass * (self._gravity[0] * cog_x + self._gravity[1] * cog_y)

        e.kinetic = float(e.kinetic)
        e.total = e.kinetic + e.potential
        return e

    # -----------------------------------------------------------------
    # State exchange
    # -----------------------------------------------------------------
    def copy_state_from(self, other: "AssembledRigidModel") -> None:
        """
        Replicate q and dq of another model built from the same symbolic model.
        ddq and Q are not copied. Buffers are written in place.
        """
        if (self.dof_signature != other.dof_signature
                or self._q.shape != other._q.shape
                or len(self.Phi) != len(other.Phi)):
            raise StateMismatchError(
                f"Can't copy state: models differ structurally "
                f"(|q| {other.n_dofs} -> {self.n_dofs}, "
                f"rows {other.n_constraints} -> {self.n_constraints})"
            )
        self._q[:] = other._q
        self._dq[:] = other._dq

    # -----------------------------------------------------------------
    # Diagnostics
    # -----------------------------------------------------------------
    def _dof_descriptions(self) -> List[Tuple[int, str, Optional[int], str, str]]:
        rows = []
        for i, d in enumerate(self.dofs):
            rows.append((i, "natural", d.point_index, d.point_dof.value, d.describe()))
        for i, r in enumerate(self.relative_dofs):
            rows.append((self._relative_columns[i], "relative", None, "", r.describe()))
        return rows

    def print_coordinates(self, stream: Optional[TextIO] = None) -> None:
        """Print every DOF in assembly order."""
        o = stream if stream is not None else sys.stdout

        o.write(f"[AssembledRigidModel] |q|={self.n_dofs}, {self.n_natural_dofs} natural, "
                f"{self.n_relative_dofs} relative coordinates.\n")
        o.write("Natural coordinates:\n")
        descriptions = self._dof_descriptions()
        for col, kind, _, _, text in descriptions[:self.n_natural_dofs]:
            o.write(f" q[{col}]: {text}\n")
        if self.relative_dofs:
            o.write("Relative coordinates:\n")
            for col, kind, _, _, text in descriptions[self.n_natural_dofs:]:
                o.write(f" q[{col}]: {text}\n")

    def dof_table(self) -> pd.DataFrame:
        """One row per DOF: column, kind, point, axis, description, current value."""
        df = pd.DataFrame(
            self._dof_descriptions(),
            columns=['index', 'kind', 'point', 'axis', 'description'],
        )
        df['value'] = self._q[df['index'].to_numpy()]
        return df


def copy_state(dst: AssembledRigidModel, src: AssembledRigidModel) -> None:
    """Copy q and dq from src into dst (same symbolic model lineage required)."""
    dst.copy_state_from(src)
