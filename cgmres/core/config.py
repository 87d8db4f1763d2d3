"""Solver parameters."""

from dataclasses import dataclass, field
import numpy as np
from numpy.typing import NDArray

from cgmres.core.errors import ConfigurationError


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


@dataclass(frozen=True)
class SolverSettings:
    """Parameters of the continuation/GMRES controller.

    Attributes:
        T_f: Final horizon length (> 0)
        alpha: Horizon growth rate (>= 0, zero keeps the horizon at T_f)
        horizon_division_num: Number of horizon steps N (>= 0)
        finite_difference_step: Forward-difference step h (> 0)
        zeta: Stabilization parameter of the continuation (>= 0)
        kmax: Maximum number of Arnoldi iterations (>= 1)
        gmres_rtol: Relative residual at which GMRES stops early
    """

    T_f: float
    alpha: float
    horizon_division_num: int
    finite_difference_step: float
    zeta: float
    kmax: int
    gmres_rtol: float = 1e-10

    def __post_init__(self) -> None:
        _require(np.isfinite(self.T_f) and self.T_f > 0, f"T_f must be positive, got {self.T_f}")
        _require(np.isfinite(self.alpha) and self.alpha >= 0, f"alpha must be non-negative, got {self.alpha}")
        _require(
            int(self.horizon_division_num) == self.horizon_division_num
            and self.horizon_division_num >= 0,
            f"horizon_division_num must be a non-negative integer, got {self.horizon_division_num}",
        )
        _require(
            np.isfinite(self.finite_difference_step) and self.finite_difference_step > 0,
            f"finite_difference_step must be positive, got {self.finite_difference_step}",
        )
        _require(np.isfinite(self.zeta) and self.zeta >= 0, f"zeta must be non-negative, got {self.zeta}")
        _require(int(self.kmax) == self.kmax and self.kmax >= 1, f"kmax must be at least 1, got {self.kmax}")
        _require(self.gmres_rtol >= 0, f"gmres_rtol must be non-negative, got {self.gmres_rtol}")


@dataclass(frozen=True)
class InitParams:
    """Parameters of the Newton-GMRES solve that seeds the controller.

    Attributes:
        initial_guess: Guess for one control-and-constraint vector (dim_uc,)
        residual_tolerance: Newton stops once the residual norm is below this
        max_iterations: Newton iteration cap (>= 0)
        finite_difference_step: Forward-difference step h (> 0)
        kmax: Maximum number of Arnoldi iterations per Newton step (>= 1)
    """

    initial_guess: NDArray = field(repr=False)
    residual_tolerance: float
    max_iterations: int
    finite_difference_step: float
    kmax: int

    def __post_init__(self) -> None:
        guess = np.array(self.initial_guess, dtype=float)
        _require(guess.ndim == 1, f"initial_guess must be a vector, got shape {guess.shape}")
        object.__setattr__(self, "initial_guess", guess)
        _require(self.residual_tolerance > 0, f"residual_tolerance must be positive, got {self.residual_tolerance}")
        _require(
            int(self.max_iterations) == self.max_iterations and self.max_iterations >= 0,
            f"max_iterations must be a non-negative integer, got {self.max_iterations}",
        )
        _require(
            np.isfinite(self.finite_difference_step) and self.finite_difference_step > 0,
            f"finite_difference_step must be positive, got {self.finite_difference_step}",
        )
        _require(int(self.kmax) == self.kmax and self.kmax >= 1, f"kmax must be at least 1, got {self.kmax}")
