# Point2, Body and relative-coordinate definitions (dataclasses)

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Point2:
    """A 2D point. Fixed points are ground references and never enter q."""
    x: float
    y: float
    fixed: bool = False

    @property
    def coords(self) -> Tuple[float, float]:
        return self.x, self.y


@dataclass
class Body:
    """
    Planar rigid body defined by >= 2 points (natural coordinates).

    The body frame has its origin at points[0] and its X axis towards
    points[1]. cog and local_points are expressed in that frame.
    inertia is the rotational inertia about the center of gravity.
    """
    name: str
    points: List[int]
    mass: float = 0.0
    inertia: float = 0.0
    cog: Tuple[float, float] = (0.0, 0.0)
    length: Optional[float] = None
    local_points: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def I0(self) -> float:
        """Rotational inertia about points[0] (parallel-axis theorem)."""
        xg, yg = self.cog
        return self.inertia + self.mass * (xg * xg + yg * yg)

    def mass_blocks(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        2x2 blocks (M00, M01, M11) of the body mass matrix acting on the
        velocities of points[0] and points[1]:

            T = 1/2 dq0' M00 dq0 + dq0' M01 dq1 + 1/2 dq1' M11 dq1
        """
        L = self.length
        m = self.mass
        xg, yg = self.cog
        I0 = self.I0
        Linv = 1.0 / L
        Linv2 = Linv * Linv

        M00 = (m - 2.0 * m * xg * Linv + I0 * Linv2) * np.eye(2)
        M11 = (I0 * Linv2) * np.eye(2)
        M01 = np.array([
            [m * xg * Linv - I0 * Linv2,          -m * yg * Linv],
            [             m * yg * Linv, m * xg * Linv - I0 * Linv2],
        ], dtype=float)
        return M00, M01, M11

    def mass_matrix(self) -> np.ndarray:
        """4x4 mass matrix on [x0, y0, x1, y1]."""
        M00, M01, M11 = self.mass_blocks()
        return np.block([[M00, M01], [M01.T, M11]])

    def gravity_forces(self, gravity) -> np.ndarray:
        """Generalized gravity forces on [x0, y0, x1, y1]."""
        L = self.length
        m = self.mass
        xg, yg = self.cog
        g = np.array([gravity[0], gravity[1]], dtype=float)
        g_rot = np.array([g[1], -g[0]])  # R^T g, R = +90 deg rotation

        Q0 = m * (1.0 - xg / L) * g - (m * yg / L) * g_rot
        Q1 = (m * xg / L) * g + (m * yg / L) * g_rot
        return np.concatenate([Q0, Q1])


@dataclass(frozen=True)
class RelativeAngleDOF:
    """Angle at point_idx1 from segment p1->p0 to segment p1->p2 (CCW positive)."""
    point_idx0: int
    point_idx1: int
    point_idx2: int

    def describe(self) -> str:
        return f"relativeAngle({self.point_idx0} - {self.point_idx1} - {self.point_idx2})"


@dataclass(frozen=True)
class RelativeAngleAbsoluteDOF:
    """Angle of segment p0->p1 with respect to the global X axis."""
    point_idx0: int
    point_idx1: int

    def describe(self) -> str:
        return f"relativeAngleWrtGround({self.point_idx0} - {self.point_idx1})"
