# planar_mbs/constraints/constant_distance.py
"""Constant distance between two points: |p1 - p0|^2 - L^2 = 0."""

from .base import ConstraintBase


class ConstraintConstantDistance(ConstraintBase):
    """
    Rigid bar between two points.

    Phi     = (x1 - x0)^2 + (y1 - y0)^2 - L^2
    Phi_q   = [-2dx, -2dy, 2dx, 2dy]   on [x0, y0, x1, y1]

    Columns of fixed points are simply not registered.
    """

    def __init__(self, point_index0: int, point_index1: int, length: float):
        super().__init__()
        self.point_index0 = point_index0
        self.point_index1 = point_index1
        self.length = float(length)

    def clone(self) -> "ConstraintConstantDistance":
        return ConstraintConstantDistance(self.point_index0, self.point_index1, self.length)

    def build_sparse_structures(self, model) -> None:
        self._row = self._new_row(model)
        self._p0 = self._bind_point(model, self._row, self.point_index0)
        self._p1 = self._bind_point(model, self._row, self.point_index1)

    def update(self, model) -> None:
        self._begin_update(model)

        x0, y0, vx0, vy0 = self._point_state(model, self._p0)
        x1, y1, vx1, vy1 = self._point_state(model, self._p1)

        dx, dy = x1 - x0, y1 - y0
        dvx, dvy = vx1 - vx0, vy1 - vy0

        model.Phi[self._row] = dx * dx + dy * dy - self.length * self.length
        model.dotPhi[self._row] = 2.0 * (dx * dvx + dy * dvy)

        self._add_point_terms(model, self._p0, (-2.0 * dx, -2.0 * dy), (-2.0 * dvx, -2.0 * dvy))
        self._add_point_terms(model, self._p1, (2.0 * dx, 2.0 * dy), (2.0 * dvx, 2.0 * dvy))

    def __repr__(self) -> str:
        return (f"ConstraintConstantDistance({self.point_index0}, {self.point_index1}, "
                f"L={self.length:g})")
