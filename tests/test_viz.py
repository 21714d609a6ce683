# tests/test_viz.py
"""
TEST: matplotlib Rendering Adapter (headless, Agg backend)
"""

import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from planar_mbs.examples import build_four_bar_model
from planar_mbs.viz import ModelRenderer, plot_model


def test_update_before_build_warns(caplog):
    arm = build_four_bar_model().assemble_rigid_mbs()
    renderer = ModelRenderer(arm)

    with caplog.at_level(logging.WARNING, logger="planar_mbs.viz"):
        renderer.update()

    assert not renderer.built
    assert "not initialized" in caplog.text


def test_lines_follow_the_model():
    arm = build_four_bar_model().assemble_rigid_mbs()
    fig, ax = plt.subplots()
    renderer = ModelRenderer(arm)
    renderer.build(ax)

    assert renderer.built
    crank = renderer._body_lines[0]
    np.testing.assert_allclose(crank.get_xdata(), [0.0, 1.0])
    np.testing.assert_allclose(crank.get_ydata(), [0.0, 0.0])

    # Move point 1 (crank tip) and redraw
    arm.q[0:2] = [0.0, 1.0]
    renderer.update()
    np.testing.assert_allclose(crank.get_xdata(), [0.0, 0.0], atol=1e-14)
    np.testing.assert_allclose(crank.get_ydata(), [0.0, 1.0])

    # The model itself was only read
    assert arm.point_coords(3) == (4.0, 0.0)
    plt.close(fig)


def test_plot_model_draws_grounds_and_bodies():
    arm = build_four_bar_model().assemble_rigid_mbs()
    ax = plot_model(arm)

    # 2 ground markers + 3 bars
    assert len(ax.lines) == 5
    plt.close(ax.figure)
