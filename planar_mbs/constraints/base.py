# planar_mbs/constraints/base.py
"""
CONSTRAINT BASE: One Object per Constraint Equation
===================================================

Every constraint variant implements the same three operations:

    clone()                        fresh, unbound copy (registry -> model)
    build_sparse_structures(model) claim rows, declare Jacobian entries ONCE
    update(model)                  recompute Phi, dotPhi and all declared
                                   Jacobian entries from current q / dq

The registry keeps unbound "prototype" constraints. Each assembled model
clones them, and the clones bind to that model's rows and sparse slots.
A clone never shares rows or slots with another model.

JACOBIAN FAMILY:
----------------
For holonomic, time-independent constraints Phi(q) = 0:

    Phi_q                  = dPhi/dq
    dotPhi_q               = d(Phi_q)/dt
    dPhiqdq_dq             = d(Phi_q dq)/dq          (= dotPhi_q)
    Phiqq_times_dq         = (d2Phi/dq2) dq          (= dotPhi_q)
    d_dotPhiq_ddq_times_dq = d(dotPhi_q dq)/d(dq)    (= 2 dotPhi_q)

so each variant only derives Phi_q and dotPhi_q analytically; the base
class fans the values out to the rest of the family.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass
class PointBinding:
    """Where one point of a constraint reads its state and writes its partials."""
    point_index: int
    dof_x: Optional[int]
    dof_y: Optional[int]
    fixed_x: float
    fixed_y: float
    slot_x: Optional[int] = None
    slot_y: Optional[int] = None


class ConstraintBase(ABC):
    """Interface and sparse-slot helpers shared by all constraint variants."""

    def __init__(self):
        self.rows: List[int] = []
        self._slots: List[int] = []
        self._slot_array = np.zeros(0, dtype=int)

    @abstractmethod
    def clone(self) -> "ConstraintBase":
        """Return an unbound copy, ready for build_sparse_structures()."""

    @abstractmethod
    def build_sparse_structures(self, model) -> None:
        """Claim rows in model.Phi and register every Jacobian entry this constraint writes."""

    @abstractmethod
    def update(self, model) -> None:
        """Evaluate the constraint at model.q / model.dq."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rows={self.rows})"

    # -----------------------------------------------------------------
    # Helpers for build_sparse_structures()
    # -----------------------------------------------------------------
    def _new_row(self, model) -> int:
        row = model.add_constraint_row()
        self.rows.append(row)
        return row

    def _bind_point(self, model, row: int, point_index: int) -> PointBinding:
        pt = model.parent.point_info(point_index)
        dofs = model.point_dofs(point_index)
        binding = PointBinding(point_index, dofs.dof_x, dofs.dof_y, pt.x, pt.y)
        if dofs.dof_x is not None:
            binding.slot_x = self._register(model, row, dofs.dof_x)
        if dofs.dof_y is not None:
            binding.slot_y = self._register(model, row, dofs.dof_y)
        return binding

    def _register(self, model, row: int, col: int) -> int:
        slot = model.register_jacobian_entry(row, col)
        if slot not in self._slots:
            self._slots.append(slot)
            self._slot_array = np.asarray(self._slots, dtype=int)
        return slot

    # -----------------------------------------------------------------
    # Helpers for update()
    # -----------------------------------------------------------------
    def _begin_update(self, model) -> None:
        # Slots may be shared by two roles of the same point: accumulate from zero
        for matrix in model.jacobian_family():
            matrix.values[self._slot_array] = 0.0

    @staticmethod
    def _point_state(model, b: PointBinding) -> Tuple[float, float, float, float]:
        q = model.q
        dq = model.dq
        if b.dof_x is None:
            x, vx = b.fixed_x, 0.0
        else:
            x, vx = q[b.dof_x], dq[b.dof_x]
        if b.dof_y is None:
            y, vy = b.fixed_y, 0.0
        else:
            y, vy = q[b.dof_y], dq[b.dof_y]
        return x, y, vx, vy

    @staticmethod
    def _add_point_terms(model, b: PointBinding, grad, grad_dot) -> None:
        """Accumulate dPhi/d(x, y) and its time derivative for one point."""
        for slot, g, h in ((b.slot_x, grad[0], grad_dot[0]), (b.slot_y, grad[1], grad_dot[1])):
            if slot is None:
                continue
            model.Phi_q.values[slot] += g
            model.dotPhi_q.values[slot] += h
            model.dPhiqdq_dq.values[slot] += h
            model.Phiqq_times_dq.values[slot] += h
            model.d_dotPhiq_ddq_times_dq.values[slot] += 2.0 * h
