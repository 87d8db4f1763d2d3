"""Newton-GMRES solve of the zero-horizon problem that seeds the controller."""

import logging
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import NMPCModel
from cgmres.core.config import InitParams
from cgmres.core.errors import ConvergenceError, DimensionError
from cgmres.solvers.base import InitialSolution
from cgmres.solvers.gmres import MatrixFreeGMRES

logger = logging.getLogger(__name__)


class InitialSystem:
    """
    Stationarity of the zero-length horizon: F(uc) = H_u(x0, uc, φ_x(x0), t0).

    With a zero horizon every node coincides with x0 and the costate equals
    the terminal cost gradient, so one control-and-constraint vector solves
    the whole sequence.
    """

    def __init__(self, model: NMPCModel, finite_difference_step: float):
        self.model = model
        self.h = finite_difference_step
        self._costate: Optional[NDArray] = None
        self._base_residual: Optional[NDArray] = None

    def prepare(self, t: float, x: NDArray) -> None:
        self._costate = self.model.phi_x(x, t)

    def residual(self, t: float, x: NDArray, solution: NDArray) -> NDArray:
        assert self._costate is not None
        return self.model.H_u(x, solution, self._costate, t)

    def rhs(self, t: float, x: NDArray, solution: NDArray, initial_guess: NDArray) -> NDArray:
        """Newton right-hand side -F minus the action on the initial guess."""
        self._base_residual = self.residual(t, x, solution)
        if not np.any(initial_guess):
            return -self._base_residual
        return -self._base_residual - self.matvec(t, x, solution, initial_guess)

    def matvec(self, t: float, x: NDArray, solution: NDArray, direction: NDArray) -> NDArray:
        """Forward-difference Jacobian action (F(uc + h v) - F(uc)) / h."""
        assert self._base_residual is not None
        perturbed = self.residual(t, x, solution + self.h * direction)
        return (perturbed - self._base_residual) / self.h


class NewtonGMRES:
    """Newton iteration with matrix-free GMRES directions."""

    def __init__(self, model: NMPCModel):
        self.model = model
        self.dim = model.control_dim + model.constraint_dim

    def solve(
        self, t0: float, x0: NDArray, params: InitParams, copies: int = 1
    ) -> InitialSolution:
        """
        Iterate uc ← uc + Δ with F'(uc) Δ ≈ -F(uc) until √copies ||F|| < tolerance.

        The solution seeds every step of the horizon, so the norm is measured
        over ``copies`` repetitions of the vector.

        Args:
            t0: Initial time
            x0: Initial state (dim_x,)
            params: Initial guess, tolerance, iteration cap, h, kmax
            copies: Number of horizon steps seeded with the solution

        Returns:
            InitialSolution with the converged vector

        Raises:
            DimensionError: If the guess is not (dim_uc,)
            ConvergenceError: If the tolerance is not met within max_iterations
        """
        if params.initial_guess.shape != (self.dim,):
            raise DimensionError(
                f"initial guess has shape {params.initial_guess.shape}, expected ({self.dim},)"
            )

        system = InitialSystem(self.model, params.finite_difference_step)
        system.prepare(t0, x0)
        krylov = MatrixFreeGMRES(self.dim, params.kmax)

        scale = np.sqrt(max(copies, 1))
        solution = params.initial_guess.copy()
        residual_norm = scale * float(np.linalg.norm(system.residual(t0, x0, solution)))

        iteration = 0
        while residual_norm >= params.residual_tolerance and iteration < params.max_iterations:
            result = krylov.solve(system, t0, x0, solution)
            solution += result.solution
            residual_norm = scale * float(np.linalg.norm(system.residual(t0, x0, solution)))
            iteration += 1
            logger.debug("Newton iteration %d: residual %.3e", iteration, residual_norm)

        if not residual_norm < params.residual_tolerance:
            raise ConvergenceError(
                f"initial solution did not converge: residual {residual_norm:.3e} "
                f"after {iteration} iterations (tolerance {params.residual_tolerance:.3e})",
                solution=solution,
                residual_norm=residual_norm,
                iterations=iteration,
            )

        logger.info(
            "Initial solution converged in %d iterations, residual %.3e",
            iteration,
            residual_norm,
        )
        return InitialSolution(
            solution=solution, residual_norm=residual_norm, iterations=iteration
        )
