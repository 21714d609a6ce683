# planar_mbs/constraints - Constraint equations and their analytic Jacobians
"""
CONSTRAINTS
===========

Closed set of constraint variants, all implementing ConstraintBase:

    ConstraintConstantDistance       |p1 - p0|^2 - L^2            (1 row)
    ConstraintRelativeAngle          angle(p0, p1, p2) - q[c]     (1 row)
    ConstraintRelativeAngleAbsolute  angle(p0 -> p1) - q[c]       (1 row)
    ConstraintRelativePosition       aux point fixed in p0-p1     (2 rows)
"""

from .base import ConstraintBase, PointBinding
from .constant_distance import ConstraintConstantDistance
from .relative_angle import ConstraintRelativeAngle, ConstraintRelativeAngleAbsolute, wrap_to_pi
from .relative_position import ConstraintRelativePosition

__all__ = [
    'ConstraintBase', 'PointBinding', 'ConstraintConstantDistance', 'ConstraintRelativeAngle',
    'ConstraintRelativeAngleAbsolute', 'ConstraintRelativePosition', 'wrap_to_pi',
]
