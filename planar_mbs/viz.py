"""
VISUALIZATION: DRAWING A MECHANISM
==================================

PURPOSE:
--------
A thin matplotlib adapter on top of an AssembledRigidModel. It only READS
the model (point_coords / body_point_coords) and never mutates it.

    renderer = ModelRenderer(arm)
    renderer.build(ax)        # create artists once
    ...                       # integrate, arm.q changes
    renderer.update()         # move the artists to the current pose

Rendering is optional: calling update() before build() logs a warning and
does nothing.
"""

import logging
from typing import List, Optional

import matplotlib.pyplot as plt
from matplotlib.lines import Line2D

logger = logging.getLogger(__name__)

COLORS = {
    'body': '#2C3E50',
    'ground': '#1F3A93',
    'joint': '#E74C3C',
}


class ModelRenderer:
    """Keeps one Line2D per body and moves it as the model state changes."""

    def __init__(self, model, show_grounds: bool = True, line_alpha: float = 1.0):
        self.model = model
        self.show_grounds = show_grounds
        self.line_alpha = line_alpha
        self.ax = None
        self._body_lines: List[Line2D] = []

    @property
    def built(self) -> bool:
        return self.ax is not None and len(self._body_lines) == len(self.model.parent.bodies)

    def _body_polyline(self, body_idx: int):
        body = self.model.parent.bodies[body_idx]
        pts = [self.model.body_point_coords(body_idx, p) for p in body.local_points]
        if len(pts) > 2:
            pts.append(pts[0])
        return [p[0] for p in pts], [p[1] for p in pts]

    def build(self, ax: Optional[plt.Axes] = None) -> plt.Axes:
        """Create the artists on ax (a new figure if None) and place them."""
        if ax is None:
            _, ax = plt.subplots(figsize=(6, 6))
        self.ax = ax
        self._body_lines = []

        if self.show_grounds:
            for pt in self.model.parent.points:
                if pt.fixed:
                    ax.plot([pt.x], [pt.y], marker='s', markersize=10,
                            color=COLORS['ground'], linestyle='none', zorder=3)

        for i in range(len(self.model.parent.bodies)):
            xs, ys = self._body_polyline(i)
            (line,) = ax.plot(xs, ys, '-o', color=COLORS['body'],
                              markerfacecolor=COLORS['joint'], linewidth=3,
                              alpha=self.line_alpha, zorder=2)
            self._body_lines.append(line)

        ax.set_aspect('equal')
        ax.grid(True, alpha=0.3)
        return ax

    def update(self) -> None:
        """Move every body artist to the current model state."""
        if not self.built:
            logger.warning("ModelRenderer.update(): renderer is not initialized, call build() first")
            return

        for i, line in enumerate(self._body_lines):
            xs, ys = self._body_polyline(i)
            line.set_data(xs, ys)
            line.set_alpha(self.line_alpha)


def plot_model(model, ax: Optional[plt.Axes] = None, show_grounds: bool = True) -> plt.Axes:
    """Draw the current configuration of an assembled model."""
    return ModelRenderer(model, show_grounds=show_grounds).build(ax)
