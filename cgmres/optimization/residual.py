"""Optimality residual of the multiple-shooting KKT conditions."""

from dataclasses import dataclass
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import NMPCModel
from cgmres.core.horizon import Horizon
from cgmres.stepping.trajectory import ShootingTrajectory, ShootingDefects
from cgmres.stepping.condensing import condense, shooting_defects


def stationarity(
    model: NMPCModel,
    t: float,
    x: NDArray,
    U: NDArray,
    trajectory: ShootingTrajectory,
    dtau: float,
) -> NDArray:
    """
    Stationarity error F_U[i] = H_u(X[i], uc_i, Lambda[i+1], τ_i).

    Node 0 always uses the current state x.

    Returns:
        F_U: (N, dim_uc)
    """
    N = U.shape[0]
    F = np.zeros_like(U)
    for i in range(N):
        x_i = x if i == 0 else trajectory.X[i]
        F[i] = model.H_u(x_i, U[i], trajectory.Lambda[i + 1], t + i * dtau)
    return F


@dataclass
class ResidualEvaluation:
    """Stationarity error and shooting defects at one linearization point."""

    stationarity: NDArray      # (N, dim_uc)
    defects: ShootingDefects   # (N+1, n) each

    def norm(self) -> float:
        """Euclidean norm of the full optimality residual."""
        return float(np.sqrt(np.sum(self.stationarity**2) + self.defects.squared_norm()))


class OptimalityResidual:
    """Evaluates the first-order optimality conditions over the horizon."""

    def __init__(self, model: NMPCModel, horizon: Horizon):
        self.model = model
        self.horizon = horizon

    def evaluate(
        self, t: float, x: NDArray, U: NDArray, trajectory: ShootingTrajectory
    ) -> ResidualEvaluation:
        dtau = self.horizon.step(t)
        return ResidualEvaluation(
            stationarity=stationarity(self.model, t, x, U, trajectory, dtau),
            defects=shooting_defects(self.model, t, x, U, trajectory, dtau),
        )

    def condensed_stationarity(
        self, t: float, x: NDArray, U: NDArray, defects: ShootingDefects
    ) -> tuple[NDArray, ShootingTrajectory]:
        """Stationarity after eliminating X and Lambda through prescribed defects."""
        dtau = self.horizon.step(t)
        trajectory = condense(self.model, t, x, U, dtau, defects)
        return stationarity(self.model, t, x, U, trajectory, dtau), trajectory


class ContinuationSystem:
    """
    Linear system of one C/GMRES step, dU/dt ≈ Δ.

    The residual is required to follow dF/dt = -ζ F. With forward
    differences of step h around the perturbed point (t + h, x + h ẋ):

        A v = (F(U + h v) - F(U)) / h
        b   = -ζ F(U, x, t) - (F(U) - F(U, x, t)) / h

    where unqualified F is evaluated at the perturbed point with the shooting
    defects scaled by (1 - h ζ), so that they decay like the stationarity
    error. ``prepare`` must be called before each solve, and ``rhs`` before
    ``matvec``.
    """

    def __init__(
        self,
        model: NMPCModel,
        horizon: Horizon,
        finite_difference_step: float,
        zeta: float,
    ):
        self.model = model
        self.horizon = horizon
        self.h = finite_difference_step
        self.zeta = zeta
        self.residual = OptimalityResidual(model, horizon)

        self._trajectory: Optional[ShootingTrajectory] = None
        self._shape: tuple[int, int] = (horizon.N, model.control_dim + model.constraint_dim)
        self._incremented_time = 0.0
        self._incremented_state: Optional[NDArray] = None
        self._decayed_defects: Optional[ShootingDefects] = None
        self._incremented_stationarity: Optional[NDArray] = None

    def prepare(
        self, t: float, x: NDArray, U: NDArray, trajectory: ShootingTrajectory
    ) -> None:
        """Set the linearization point: predicts x(t + h) = x + h f(x, u_0, t)."""
        self._trajectory = trajectory
        self._incremented_time = t + self.h
        if U.shape[0] == 0:
            self._incremented_state = x.copy()
        else:
            xdot = self.model.f(x, U[0, : self.model.control_dim], t)
            self._incremented_state = x + self.h * xdot

    def _incremented(self, U: NDArray) -> tuple[NDArray, ShootingTrajectory]:
        assert self._incremented_state is not None and self._decayed_defects is not None
        return self.residual.condensed_stationarity(
            self._incremented_time, self._incremented_state, U, self._decayed_defects
        )

    def rhs(self, t: float, x: NDArray, solution: NDArray, initial_guess: NDArray) -> NDArray:
        assert self._trajectory is not None
        U = solution.reshape(self._shape)
        nominal = self.residual.evaluate(t, x, U, self._trajectory)
        self._decayed_defects = nominal.defects.scaled(1.0 - self.h * self.zeta)

        self._incremented_stationarity, _ = self._incremented(U)
        F = nominal.stationarity
        if not np.any(initial_guess):
            b = -self.zeta * F - (self._incremented_stationarity - F) / self.h
            return b.ravel()

        # b - A Δ₀ in a single evaluation
        dU0 = initial_guess.reshape(self._shape)
        F_guess, _ = self._incremented(U + self.h * dU0)
        return ((1.0 / self.h - self.zeta) * F - F_guess / self.h).ravel()

    def matvec(self, t: float, x: NDArray, solution: NDArray, direction: NDArray) -> NDArray:
        assert self._incremented_stationarity is not None
        U = solution.reshape(self._shape)
        v = direction.reshape(self._shape)
        F_v, _ = self._incremented(U + self.h * v)
        return ((F_v - self._incremented_stationarity) / self.h).ravel()

    def trajectory_rate(self, U: NDArray, dU: NDArray) -> ShootingTrajectory:
        """Forward-difference time derivative of X and Lambda along dU."""
        assert self._trajectory is not None
        _, incremented = self._incremented(U + self.h * dU)
        return ShootingTrajectory(
            X=(incremented.X - self._trajectory.X) / self.h,
            Lambda=(incremented.Lambda - self._trajectory.Lambda) / self.h,
        )
