# planar_mbs/constraints/relative_position.py
"""
Relative position: an auxiliary point rigidly attached to the frame of two
reference points. Two rows (x and y), both linear in q.
"""

import math
from typing import Optional, Tuple

from ..kernel.errors import InvalidBodyError
from .base import ConstraintBase


class ConstraintRelativePosition(ConstraintBase):
    """
    Keep point_aux at fixed local coordinates (a, b) in the frame
    origin = p0, X axis towards p1:

        r_aux = r0 + (a/L) (r1 - r0) + (b/L) R90 (r1 - r0)

    L is the reference distance |r1 - r0|. With b = 0 this is a
    colinearity constraint (aux stays on the line p0-p1 at offset a).

    If local/length are not given they are taken from the initial point
    coordinates of the model the constraint is built into.
    """

    def __init__(
        self,
        point_ref0: int,
        point_ref1: int,
        point_aux: int,
        local: Optional[Tuple[float, float]] = None,
        length: Optional[float] = None,
    ):
        super().__init__()
        self.point_ref0 = point_ref0
        self.point_ref1 = point_ref1
        self.point_aux = point_aux
        self.local = local
        self.length = length

    def clone(self) -> "ConstraintRelativePosition":
        return ConstraintRelativePosition(
            self.point_ref0, self.point_ref1, self.point_aux, self.local, self.length
        )

    def _resolve_geometry(self, model) -> None:
        r0 = model.parent.point_info(self.point_ref0)
        r1 = model.parent.point_info(self.point_ref1)
        ra = model.parent.point_info(self.point_aux)

        if self.length is None:
            self.length = math.hypot(r1.x - r0.x, r1.y - r0.y)
        if self.length <= 0.0:
            raise InvalidBodyError(
                f"Relative position: reference points {self.point_ref0} and "
                f"{self.point_ref1} coincide"
            )
        if self.local is None:
            ux, uy = (r1.x - r0.x) / self.length, (r1.y - r0.y) / self.length
            ex, ey = ra.x - r0.x, ra.y - r0.y
            self.local = (ex * ux + ey * uy, -ex * uy + ey * ux)

    def build_sparse_structures(self, model) -> None:
        self._resolve_geometry(model)

        self._row_x = self._new_row(model)
        self._row_y = self._new_row(model)
        self._bindings = {
            row: (
                self._bind_point(model, row, self.point_ref0),
                self._bind_point(model, row, self.point_ref1),
                self._bind_point(model, row, self.point_aux),
            )
            for row in (self._row_x, self._row_y)
        }

    def update(self, model) -> None:
        self._begin_update(model)

        ka = self.local[0] / self.length
        kb = self.local[1] / self.length

        # Partials wrt (x, y) of p0, p1, aux; identical for every q
        partials = {
            self._row_x: ((-1.0 + ka, -kb), (-ka, kb), (1.0, 0.0)),
            self._row_y: ((kb, -1.0 + ka), (-kb, -ka), (0.0, 1.0)),
        }

        for row, bindings in self._bindings.items():
            phi = 0.0
            dphi = 0.0
            for b, grad in zip(bindings, partials[row]):
                x, y, vx, vy = self._point_state(model, b)
                phi += grad[0] * x + grad[1] * y
                dphi += grad[0] * vx + grad[1] * vy
                self._add_point_terms(model, b, grad, (0.0, 0.0))
            model.Phi[row] = phi
            model.dotPhi[row] = dphi

    def __repr__(self) -> str:
        return (f"ConstraintRelativePosition({self.point_ref0}, {self.point_ref1}, "
                f"aux={self.point_aux}, local={self.local})")
