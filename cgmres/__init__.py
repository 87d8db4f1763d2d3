"""
cgmres: real-time nonlinear model predictive control with the C/GMRES method.

This library provides:
- Multiple-shooting state and costate condensation over a receding horizon
- Matrix-free GMRES driven by forward-difference directional derivatives
- A continuation update that tracks the optimal control every control cycle
- Newton-GMRES initialization of the first solution
"""

__version__ = "0.1.0"

from cgmres.core.model import NMPCModel, HamiltonianModel
from cgmres.core.horizon import Horizon
from cgmres.core.errors import ConfigurationError, DimensionError, ConvergenceError
from cgmres.optimization.interface import MultipleShootingCGMRES

__all__ = [
    "NMPCModel",
    "HamiltonianModel",
    "Horizon",
    "ConfigurationError",
    "DimensionError",
    "ConvergenceError",
    "MultipleShootingCGMRES",
]
