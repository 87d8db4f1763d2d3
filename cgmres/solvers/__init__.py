"""Matrix-free Krylov and Newton solvers."""

from cgmres.solvers.base import GMRESResult, InitialSolution
from cgmres.solvers.gmres import MatrixFreeGMRES, gmres
from cgmres.solvers.newton import NewtonGMRES, InitialSystem

__all__ = [
    "GMRESResult",
    "InitialSolution",
    "MatrixFreeGMRES",
    "gmres",
    "NewtonGMRES",
    "InitialSystem",
]
