# planar_mbs/kernel/assemble.py
"""
ASSEMBLY: Global Mass Matrix and Generalized Forces
===================================================

PURPOSE:
--------
This module handles the scatter-add of per-body contributions into the
global mass matrix M and the generalized force vector Q.

In natural coordinates a two-point body contributes a 4x4 block:

    Me = [ M00    M01 ]     acting on [x0, y0, x1, y1]
         [ M01^T  M11 ]

The only twist compared to a classic finite-element assembly is that some
of those four columns may not exist: a fixed point has no DOFs, so its
rows/columns of Me are simply dropped (their velocity is zero, their
acceleration is zero, so they never contribute to the equations of
motion).

USAGE:
------
    contributions = []
    for body in bodies:
        dof_map = element_dof_map(points2dofs, body.points[:2])  # may contain None
        contributions.append((dof_map, body_mass_matrix(body)))

    M = assemble_global_M(ndof, contributions)   # scipy.sparse.csr_matrix
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse


def assemble_global_M(
    ndof: int,
    contributions: Sequence[Tuple[Sequence[Optional[int]], np.ndarray]]
) -> scipy.sparse.csr_matrix:
    """
    Assemble the global (sparse) mass matrix from element contributions.

    ALGORITHM:
    ----------
    for each element:
        for each (a, b) in element Me:
            if dof_map[a] and dof_map[b] both exist:
                M[dof_map[a], dof_map[b]] += Me[a, b]

    Duplicated (row, col) entries are summed by the COO -> CSR conversion.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs (size of q, relative DOFs included)
    contributions : Sequence[Tuple[Sequence[Optional[int]], np.ndarray]]
        (dof_map, Me) pairs. dof_map entries set to None are skipped.

    Returns:
    --------
    scipy.sparse.csr_matrix
        Global mass matrix, shape (ndof, ndof). Rows/columns of relative
        coordinates stay empty: they carry no inertia.
    """
    rows: List[int] = []
    cols: List[int] = []
    vals: List[float] = []

    for dof_map, Me in contributions:
        n_element_dofs = len(dof_map)

        assert Me.shape == (n_element_dofs, n_element_dofs), \
            f"Element Me shape {Me.shape} doesn't match dof_map length {n_element_dofs}"

        for a in range(n_element_dofs):
            ia = dof_map[a]
            if ia is None:
                continue
            for b in range(n_element_dofs):
                ib = dof_map[b]
                if ib is None:
                    continue
                rows.append(ia)
                cols.append(ib)
                vals.append(float(Me[a, b]))

    M = scipy.sparse.coo_matrix((vals, (rows, cols)), shape=(ndof, ndof))
    return M.tocsr()


def assemble_global_F(
    ndof: int,
    contributions: Sequence[Tuple[Sequence[Optional[int]], np.ndarray]]
) -> np.ndarray:
    """
    Assemble a global generalized force vector from element contributions.

    Same scatter-add as assemble_global_M, for vectors.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs
    contributions : Sequence[Tuple[Sequence[Optional[int]], np.ndarray]]
        (dof_map, fe) pairs with fe of shape (len(dof_map),)

    Returns:
    --------
    np.ndarray
        Generalized force vector, shape (ndof,)
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n_element_dofs = len(dof_map)

        assert fe.shape == (n_element_dofs,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n_element_dofs}"

        for a in range(n_element_dofs):
            ia = dof_map[a]
            if ia is not None:
                F[ia] += fe[a]

    return F
