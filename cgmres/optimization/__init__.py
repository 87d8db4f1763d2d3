"""Continuation update and optimality residual."""

from cgmres.optimization.residual import (
    stationarity,
    ResidualEvaluation,
    OptimalityResidual,
    ContinuationSystem,
)
from cgmres.optimization.interface import MultipleShootingCGMRES

__all__ = [
    "stationarity",
    "ResidualEvaluation",
    "OptimalityResidual",
    "ContinuationSystem",
    "MultipleShootingCGMRES",
]
