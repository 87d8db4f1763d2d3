"""Exception types raised by the C/GMRES solver."""

from typing import Optional
from numpy.typing import NDArray


class CGMRESError(Exception):
    """Base class for solver errors."""


class ConfigurationError(CGMRESError, ValueError):
    """Invalid parameter or call made out of order."""


class DimensionError(ConfigurationError):
    """Vector shape does not match the configured model dimensions."""


class ConvergenceError(CGMRESError, RuntimeError):
    """Initial Newton-GMRES solve did not reach the residual tolerance."""

    def __init__(
        self,
        message: str,
        solution: Optional[NDArray] = None,
        residual_norm: float = float("nan"),
        iterations: int = 0,
    ):
        super().__init__(message)
        self.solution = solution
        self.residual_norm = residual_norm
        self.iterations = iterations
