"""Result types shared by the Krylov and Newton solvers."""

from dataclasses import dataclass
from numpy.typing import NDArray


@dataclass
class GMRESResult:
    """Outcome of one matrix-free GMRES solve."""

    solution: NDArray               # flat solution Δ = Δ₀ + V y
    iterations: int                 # Arnoldi vectors actually used
    initial_residual_norm: float    # ||b - A Δ₀||
    residual_norm: float            # estimate of ||b - A Δ|| from the Givens rotations
    converged: bool                 # reached rtol or found an invariant subspace
    breakdown: bool = False         # Arnoldi stopped before kmax on a zero vector

    @property
    def reduction(self) -> float:
        """Achieved residual reduction ||r_k|| / ||r_0|| (0 for a zero right-hand side)."""
        if self.initial_residual_norm == 0:
            return 0.0
        return self.residual_norm / self.initial_residual_norm


@dataclass
class InitialSolution:
    """Converged control-and-constraint vector of the zero-horizon problem."""

    solution: NDArray      # (dim_uc,)
    residual_norm: float
    iterations: int
