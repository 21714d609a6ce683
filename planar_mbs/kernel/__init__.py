# planar_mbs/kernel - Dimension-agnostic bookkeeping for constrained systems
"""
KERNEL: STATE-VECTOR AND SPARSE-STRUCTURE PLUMBING
==================================================

This package contains the pieces of the multibody core that know nothing
about geometry:

- A way to map (point, axis) <-> column of q, with fixed points absent
- Sparse matrices with a sparsity pattern fixed once and reused forever
- Scatter-add assembly of per-body mass/force blocks
- The exception hierarchy

Constraint equations and bodies (the geometric part) live one level up.
"""

from .dof import PointDOF, NaturalDOF, PointDOFs, build_point_dof_map, element_dof_map, dof_signature
from .sparse import SparsityPattern, SparseRowMatrix
from .errors import ModelError, InvalidBodyError, AssemblyError, StateMismatchError, ModelIndexError

__all__ = [
    'PointDOF', 'NaturalDOF', 'PointDOFs', 'build_point_dof_map', 'element_dof_map',
    'dof_signature', 'SparsityPattern', 'SparseRowMatrix',
    'ModelError', 'InvalidBodyError', 'AssemblyError', 'StateMismatchError', 'ModelIndexError',
]
