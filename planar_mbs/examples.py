# planar_mbs/examples.py
"""
EXAMPLE MODELS
==============

Small, well-known mechanisms used by the demos and the test-suite.
Every body is a uniform slender bar:

    mass    = linear_density * L
    cog     = (L/2, 0)            in the body frame
    inertia = mass * L^2 / 12     about the COG

Each builder returns a fresh (not yet assembled) ModelDefinition.
"""

import math
from typing import Sequence

from .definition import ModelDefinition
from .model import Body


def add_bar(model: ModelDefinition, p0: int, p1: int, linear_density: float = 1.0, name=None) -> Body:
    """Add a uniform slender bar between two existing points."""
    a, b = model.point_info(p0), model.point_info(p1)
    L = math.hypot(b.x - a.x, b.y - a.y)
    mass = linear_density * L
    return model.add_body(
        [p0, p1], mass=mass, inertia=mass * L * L / 12.0, cog=(0.5 * L, 0.0), name=name
    )


def build_pendulum_model(length: float = 1.0, angle: float = 0.0) -> ModelDefinition:
    """
    Simple pendulum: fixed pivot at the origin, free tip at
    length * (cos(angle), sin(angle)).
    """
    model = ModelDefinition()
    model.add_point(0.0, 0.0, fixed=True)
    model.add_point(length * math.cos(angle), length * math.sin(angle))
    add_bar(model, 0, 1, name="pendulum")
    return model


def build_double_pendulum_model(lengths: Sequence[float] = (1.0, 1.0)) -> ModelDefinition:
    """Two bars hanging horizontally from a fixed pivot."""
    model = ModelDefinition()
    model.add_point(0.0, 0.0, fixed=True)
    model.add_point(lengths[0], 0.0)
    model.add_point(lengths[0] + lengths[1], 0.0)
    add_bar(model, 0, 1)
    add_bar(model, 1, 2)
    return model


def build_four_bar_model() -> ModelDefinition:
    """
    Four-bar linkage (crank-rocker):

        point 0 (0, 0)  fixed       crank    0-1  L = 1
        point 1 (1, 0)              coupler  1-2  L = 2
        point 2 (1, 2)              rocker   2-3  L = sqrt(13)
        point 3 (4, 0)  fixed       ground   0-3  L = 4
    """
    model = ModelDefinition()
    model.add_point(0.0, 0.0, fixed=True)
    model.add_point(1.0, 0.0)
    model.add_point(1.0, 2.0)
    model.add_point(4.0, 0.0, fixed=True)

    add_bar(model, 0, 1, name="crank")
    add_bar(model, 1, 2, name="coupler")
    add_bar(model, 2, 3, name="rocker")
    return model
