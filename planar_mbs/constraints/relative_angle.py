# planar_mbs/constraints/relative_angle.py
"""
RELATIVE-ANGLE CONSTRAINTS
==========================

A relative coordinate is an extra unknown appended to q (an angle) plus
the equation that ties it to the natural coordinates:

    Phi = angle(points) - q[c] = 0

Two variants:

    ConstraintRelativeAngle          angle at p1 from p1->p0 to p1->p2
    ConstraintRelativeAngleAbsolute  angle of p0->p1 wrt the global X axis

Both angles come from atan2, so the residual is wrapped into (-pi, pi]
to stay continuous when the mechanism turns a full revolution.

GRADIENT OF A SEGMENT ANGLE:
----------------------------
For theta = atan2(vy, vx) and r2 = vx^2 + vy^2:

    d theta / d(vx, vy) = (-vy, vx) / r2

and its time derivative, with w = dv/dt:

    d/dt [(-vy, vx) / r2] = (-wy, wx) / r2 - (-vy, vx) * 2 (v.w) / r2^2
"""

import math
from typing import Tuple

from ..config import CONFIG
from .base import ConstraintBase


def wrap_to_pi(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


def angle_gradient(vx: float, vy: float) -> Tuple[float, float]:
    r2 = vx * vx + vy * vy
    return -vy / r2, vx / r2


def angle_gradient_dot(vx: float, vy: float, wx: float, wy: float) -> Tuple[float, float]:
    r2 = vx * vx + vy * vy
    s = 2.0 * (vx * wx + vy * wy) / (r2 * r2)
    return -wy / r2 + vy * s, wx / r2 - vx * s


def _residual(angle: float, coordinate: float) -> float:
    if CONFIG.angle_wrap:
        return wrap_to_pi(angle - coordinate)
    return angle - coordinate


class ConstraintRelativeAngle(ConstraintBase):
    """
    Relative angle between two segments sharing point p1.

    Phi = (theta(p2 - p1) - theta(p0 - p1)) - q[c]
    """

    def __init__(self, point_index0: int, point_index1: int, point_index2: int, dof_index: int):
        super().__init__()
        self.point_index0 = point_index0
        self.point_index1 = point_index1
        self.point_index2 = point_index2
        self.dof_index = dof_index

    def clone(self) -> "ConstraintRelativeAngle":
        return ConstraintRelativeAngle(
            self.point_index0, self.point_index1, self.point_index2, self.dof_index
        )

    def build_sparse_structures(self, model) -> None:
        self._row = self._new_row(model)
        self._p0 = self._bind_point(model, self._row, self.point_index0)
        self._p1 = self._bind_point(model, self._row, self.point_index1)
        self._p2 = self._bind_point(model, self._row, self.point_index2)
        self._slot_angle = self._register(model, self._row, self.dof_index)

    def update(self, model) -> None:
        self._begin_update(model)

        x0, y0, vx0, vy0 = self._point_state(model, self._p0)
        x1, y1, vx1, vy1 = self._point_state(model, self._p1)
        x2, y2, vx2, vy2 = self._point_state(model, self._p2)

        # a: p1 -> p0, b: p1 -> p2
        ax, ay, dax, day = x0 - x1, y0 - y1, vx0 - vx1, vy0 - vy1
        bx, by, dbx, dby = x2 - x1, y2 - y1, vx2 - vx1, vy2 - vy1

        angle = math.atan2(by, bx) - math.atan2(ay, ax)
        ra2 = ax * ax + ay * ay
        rb2 = bx * bx + by * by
        angle_dot = (bx * dby - by * dbx) / rb2 - (ax * day - ay * dax) / ra2

        model.Phi[self._row] = _residual(angle, model.q[self.dof_index])
        model.dotPhi[self._row] = angle_dot - model.dq[self.dof_index]

        ga = angle_gradient(ax, ay)
        gb = angle_gradient(bx, by)
        ga_dot = angle_gradient_dot(ax, ay, dax, day)
        gb_dot = angle_gradient_dot(bx, by, dbx, dby)

        self._add_point_terms(model, self._p0, (-ga[0], -ga[1]), (-ga_dot[0], -ga_dot[1]))
        self._add_point_terms(
            model, self._p1,
            (ga[0] - gb[0], ga[1] - gb[1]),
            (ga_dot[0] - gb_dot[0], ga_dot[1] - gb_dot[1]),
        )
        self._add_point_terms(model, self._p2, gb, gb_dot)

        model.Phi_q.values[self._slot_angle] += -1.0

    def __repr__(self) -> str:
        return (f"ConstraintRelativeAngle({self.point_index0}, {self.point_index1}, "
                f"{self.point_index2} -> q[{self.dof_index}])")


class ConstraintRelativeAngleAbsolute(ConstraintBase):
    """
    Absolute angle of the segment p0 -> p1 (wrt the global X axis).

    Phi = atan2(y1 - y0, x1 - x0) - q[c]
    """

    def __init__(self, point_index0: int, point_index1: int, dof_index: int):
        super().__init__()
        self.point_index0 = point_index0
        self.point_index1 = point_index1
        self.dof_index = dof_index

    def clone(self) -> "ConstraintRelativeAngleAbsolute":
        return ConstraintRelativeAngleAbsolute(self.point_index0, self.point_index1, self.dof_index)

    def build_sparse_structures(self, model) -> None:
        self._row = self._new_row(model)
        self._p0 = self._bind_point(model, self._row, self.point_index0)
        self._p1 = self._bind_point(model, self._row, self.point_index1)
        self._slot_angle = self._register(model, self._row, self.dof_index)

    def update(self, model) -> None:
        self._begin_update(model)

        x0, y0, vx0, vy0 = self._point_state(model, self._p0)
        x1, y1, vx1, vy1 = self._point_state(model, self._p1)

        dx, dy = x1 - x0, y1 - y0
        dvx, dvy = vx1 - vx0, vy1 - vy0
        r2 = dx * dx + dy * dy

        model.Phi[self._row] = _residual(math.atan2(dy, dx), model.q[self.dof_index])
        model.dotPhi[self._row] = (dx * dvy - dy * dvx) / r2 - model.dq[self.dof_index]

        g = angle_gradient(dx, dy)
        g_dot = angle_gradient_dot(dx, dy, dvx, dvy)

        self._add_point_terms(model, self._p0, (-g[0], -g[1]), (-g_dot[0], -g_dot[1]))
        self._add_point_terms(model, self._p1, g, g_dot)

        model.Phi_q.values[self._slot_angle] += -1.0

    def __repr__(self) -> str:
        return (f"ConstraintRelativeAngleAbsolute({self.point_index0}, {self.point_index1} "
                f"-> q[{self.dof_index}])")
