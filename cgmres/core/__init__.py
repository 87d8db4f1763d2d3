"""Core abstractions for the C/GMRES controller."""

from cgmres.core.model import NMPCModel, HamiltonianModel
from cgmres.core.horizon import Horizon
from cgmres.core.config import SolverSettings, InitParams
from cgmres.core.errors import (
    CGMRESError,
    ConfigurationError,
    DimensionError,
    ConvergenceError,
)

__all__ = [
    "NMPCModel",
    "HamiltonianModel",
    "Horizon",
    "SolverSettings",
    "InitParams",
    "CGMRESError",
    "ConfigurationError",
    "DimensionError",
    "ConvergenceError",
]
