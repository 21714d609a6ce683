# tests/test_sparse.py
"""
TEST: Fixed-Pattern Sparse Matrices
===================================

The Jacobian family shares one sparsity pattern. Adding a constraint row
must grow every matrix by exactly one row without touching existing
values; registered slots are stable handles.
"""

import numpy as np
import pytest

from planar_mbs import AssemblyError, ModelIndexError, RelativeAngleAbsoluteDOF
from planar_mbs.examples import build_four_bar_model
from planar_mbs.kernel.dof import NaturalDOF, PointDOF, build_point_dof_map, element_dof_map
from planar_mbs.kernel.sparse import SparseRowMatrix, SparsityPattern


class TestSparsityPattern:

    def test_register_returns_stable_slots(self):
        pattern = SparsityPattern(n_cols=4)
        r0 = pattern.add_row()
        r1 = pattern.add_row()

        s0 = pattern.register(r0, 2)
        s1 = pattern.register(r1, 0)
        assert (s0, s1) == (0, 1)
        assert pattern.register(r0, 2) == s0
        assert pattern.nnz == 2
        assert pattern.slot(r1, 3) is None

    def test_out_of_shape_entries(self):
        pattern = SparsityPattern(n_cols=2)
        pattern.add_row()
        with pytest.raises(ModelIndexError):
            pattern.register(0, 2)
        with pytest.raises(ModelIndexError):
            pattern.register(1, 0)

    def test_frozen_pattern_still_accepts_rows(self):
        pattern = SparsityPattern(n_cols=2)
        pattern.add_row()
        pattern.register(0, 1)
        pattern.freeze()

        assert pattern.add_row() == 1
        assert pattern.register(0, 1) == 0
        with pytest.raises(AssemblyError):
            pattern.register(1, 1)

    def test_matrices_share_the_pattern(self):
        pattern = SparsityPattern(n_cols=3)
        A = SparseRowMatrix(pattern)
        B = SparseRowMatrix(pattern)
        pattern.add_row()
        pattern.add_row()
        s = pattern.register(1, 2)
        t = pattern.register(0, 0)

        A.values[s] = 5.0
        A.values[t] = -1.0
        B.values[s] = 7.0

        assert A[1, 2] == 5.0
        assert B[1, 2] == 7.0
        assert B[0, 1] == 0.0
        np.testing.assert_array_equal(A.toarray(), [[-1.0, 0.0, 0.0], [0.0, 0.0, 5.0]])
        np.testing.assert_array_equal(A.to_csr().toarray(), A.toarray())
        np.testing.assert_allclose(A.dot(np.array([1.0, 2.0, 3.0])), [-1.0, 15.0])
        assert A.row(1) == {2: 5.0}
        assert A.column(0) == {0: -1.0}


def test_add_constraint_row_grows_the_whole_family():
    arm = build_four_bar_model().assemble_rigid_mbs([RelativeAngleAbsoluteDOF(0, 1)])
    arm.dq = [0.1, -0.2, 0.3, 0.4, 0.5]
    arm.update_constraints()

    family = arm.jacobian_family()
    before = [m.toarray() for m in family]
    phi_before = arm.Phi.copy()
    m0 = arm.n_constraints

    row = arm.add_constraint_row()

    assert row == m0
    assert arm.n_constraints == m0 + 1
    assert len(arm.dotPhi) == m0 + 1
    for matrix, old in zip(family, before):
        assert matrix.row_count == m0 + 1
        assert matrix.col_count == arm.n_dofs
        np.testing.assert_array_equal(matrix.toarray()[:m0], old)
        np.testing.assert_array_equal(matrix.toarray()[m0], 0.0)
    np.testing.assert_array_equal(arm.Phi[:m0], phi_before)


def test_element_dof_map_skips_fixed_points():
    dofs = [NaturalDOF(1, PointDOF.X), NaturalDOF(1, PointDOF.Y),
            NaturalDOF(2, PointDOF.X), NaturalDOF(2, PointDOF.Y)]
    points2dofs = build_point_dof_map(dofs, n_points=4)

    assert element_dof_map(points2dofs, [0, 1]) == [None, None, 0, 1]
    assert element_dof_map(points2dofs, [2, 3]) == [2, 3, None, None]

    with pytest.raises(ModelIndexError):
        build_point_dof_map(dofs, n_points=2)
