# File: demos/run_four_bar.py
"""
DEMO: FOUR-BAR LINKAGE (CRANK SWEEP)
====================================

PURPOSE:
--------
Drive a crank-rocker four-bar through one full revolution of its crank and
draw a few of the poses it goes through.

    point 0 (0, 0) fixed --- crank (L=1) --- point 1
    point 1 --- coupler (L=2) --- point 2
    point 2 --- rocker (L=sqrt 13) --- point 3 (4, 0) fixed

The crank angle is added as a relative coordinate, so q holds:

    q = [x1, y1, x2, y2, theta_crank]

For every commanded theta we solve the position problem Phi(q) = 0 for the
four natural coordinates with Newton-Raphson, holding theta fixed. The
kernel provides Phi and Phi_q; the Newton loop lives here.
"""

import numpy as np
import matplotlib.pyplot as plt

from planar_mbs import RelativeAngleAbsoluteDOF
from planar_mbs.examples import build_four_bar_model
from planar_mbs.viz import ModelRenderer


def solve_position(arm, held_col, tol=1e-12, max_iter=30):
    """Newton-Raphson on Phi(q) = 0, moving every column except held_col."""
    free = [c for c in range(arm.n_dofs) if c != held_col]
    for it in range(max_iter):
        arm.update_constraints()
        err = np.max(np.abs(arm.Phi))
        if err < tol:
            return it
        J = arm.Phi_q.toarray()[:, free]
        arm.q[free] += np.linalg.lstsq(J, -arm.Phi, rcond=None)[0]
    raise RuntimeError(f"Position problem did not converge (|Phi|={err:.2e})")


def main():
    print("=" * 70)
    print("DEMO: FOUR-BAR LINKAGE (CRANK SWEEP)")
    print("=" * 70)
    print()

    # ========================================================================
    # STEP 1: BUILD AND ASSEMBLE THE MODEL
    # ========================================================================
    model = build_four_bar_model()
    arm = model.assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)])
    col = arm.relative_coordinate_index(0)

    print("STEP 1: Assembled model")
    print("-" * 70)
    arm.print_coordinates()
    print()
    print(arm.dof_table().to_string(index=False))
    print()

    e = arm.evaluate_energy()
    print(f"Initial energy: kinetic={e.kinetic:.3f} J, potential={e.potential:.3f} J")
    print()

    # ========================================================================
    # STEP 2: SWEEP THE CRANK
    # ========================================================================
    print("STEP 2: Crank sweep")
    print("-" * 70)

    thetas = np.linspace(0.0, 2.0 * np.pi, 37)
    coupler_path = []
    rocker_angles = []
    iterations = 0

    fig, ax = plt.subplots(figsize=(8, 6))
    renderer = ModelRenderer(arm, line_alpha=0.15)
    renderer.build(ax)

    for k, theta in enumerate(thetas):
        arm.q[col] = theta
        iterations += solve_position(arm, col)

        x2, y2 = arm.point_coords(2)
        coupler_path.append((x2, y2))
        rocker_angles.append(np.degrees(np.arctan2(y2, x2 - 4.0)))

        if k % 6 == 0:
            # Freeze a ghost of the current pose, then keep drawing on new artists
            renderer.update()
            renderer = ModelRenderer(arm, show_grounds=False, line_alpha=0.15)
            renderer.build(ax)

    renderer.line_alpha = 1.0
    renderer.update()

    print(f"Poses solved: {len(thetas)}")
    print(f"Average Newton iterations per pose: {iterations / len(thetas):.1f}")
    print(f"Rocker swing: {min(rocker_angles):.1f} to {max(rocker_angles):.1f} deg")
    print()

    # ========================================================================
    # STEP 3: VISUALIZE
    # ========================================================================
    path = np.array(coupler_path)
    ax.plot(path[:, 0], path[:, 1], '--', color='#E67E22', linewidth=1.5,
            label='Coupler/rocker joint path')
    ax.set_xlabel('x (m)', fontsize=11)
    ax.set_ylabel('y (m)', fontsize=11)
    ax.set_title('Four-Bar Linkage: Crank Sweep', fontsize=12, fontweight='bold')
    ax.legend(loc='upper right')

    plt.tight_layout()
    plt.show()

    print("=" * 70)
    print("DEMO COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
