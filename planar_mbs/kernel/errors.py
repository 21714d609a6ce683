# planar_mbs/kernel/errors.py
"""Exceptions raised by the multibody kernel. None of them are recoverable."""


class ModelError(RuntimeError):
    """Base class for malformed models and caller protocol violations."""
    pass


class InvalidBodyError(ModelError):
    """Raised when a body cannot define a rigid frame (too few points, zero length)."""
    pass


class AssemblyError(ModelError):
    """Raised when a model cannot be assembled or is modified after assembly."""
    pass


class StateMismatchError(ModelError):
    """Raised when copying state between structurally different models."""
    pass


class ModelIndexError(ModelError, IndexError):
    """Raised for out-of-range point, body or DOF indices."""
    pass
