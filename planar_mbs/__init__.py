# planar_mbs - Planar multibody systems in natural coordinates
"""
PLANAR-MBS: Constrained Planar Multibody Kernel
===============================================

This package provides:
- A symbolic registry of points, rigid bodies and constraints
- Automatic rigidity constraints for bodies with any number of points
- An assembled numeric model: q/dq/ddq/Q, Phi and its sparse Jacobians
- Mass matrix, generalized gravity forces and energy evaluation

ARCHITECTURE:
-------------
    kernel/         State-vector bookkeeping, fixed-pattern sparse matrices,
                    scatter-add assembly, exceptions
    model.py        Point2, Body, relative-coordinate definitions
    definition.py   ModelDefinition registry + symbolic assembly
    constraints/    Constraint equations with analytic Jacobians
    assembled.py    AssembledRigidModel (numeric state and updates)
    examples.py     Pendulum, double pendulum, four-bar linkage
    viz.py          matplotlib rendering adapter

Integrators and estimators are NOT part of this package: they read
Phi / Phi_q / M / Q from an AssembledRigidModel after calling
update_constraints().
"""

from .kernel import (
    PointDOF, NaturalDOF, PointDOFs,
    ModelError, InvalidBodyError, AssemblyError, StateMismatchError, ModelIndexError,
)
from .model import Point2, Body, RelativeAngleDOF, RelativeAngleAbsoluteDOF
from .definition import ModelDefinition, SymbolicAssembledModel
from .assembled import AssembledRigidModel, EnergyValues, copy_state

__version__ = "0.1.0"
