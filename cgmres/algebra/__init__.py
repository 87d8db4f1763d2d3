"""Linear system abstractions for the matrix-free solver."""

from cgmres.algebra.protocols import MatrixFreeSystem
from cgmres.algebra.operators import LinearOperator

__all__ = [
    "MatrixFreeSystem",
    "LinearOperator",
]
