"""Real-time NMPC controller based on the multiple-shooting C/GMRES method."""

from typing import Optional
import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import NMPCModel
from cgmres.core.horizon import Horizon
from cgmres.core.config import SolverSettings, InitParams
from cgmres.core.errors import ConfigurationError, DimensionError
from cgmres.stepping.trajectory import ShootingTrajectory
from cgmres.stepping.condensing import condense
from cgmres.solvers.base import GMRESResult
from cgmres.solvers.gmres import MatrixFreeGMRES
from cgmres.solvers.newton import NewtonGMRES
from cgmres.optimization.residual import OptimalityResidual, ContinuationSystem


class MultipleShootingCGMRES:
    """
    Tracks the solution of the NMPC problem with one continuation step per cycle.

    The control-and-constraint sequence U (N, dim_uc) and the state and
    costate trajectories are owned by the controller and carried from one
    call to the next. ``init_solution`` must run before ``control_update``.
    """

    def __init__(
        self,
        model: NMPCModel,
        T_f: float,
        alpha: float,
        horizon_division_num: int,
        finite_difference_step: float,
        zeta: float,
        kmax: int,
        gmres_rtol: float = 1e-10,
    ):
        """
        Initialize controller.

        Args:
            model: NMPC model
            T_f: Final horizon length
            alpha: Horizon growth rate, L(t) = T_f (1 - exp(-alpha (t - t0)))
            horizon_division_num: Number of horizon steps N
            finite_difference_step: Forward-difference step h
            zeta: Stabilization parameter, the residual decays like exp(-zeta t)
            kmax: Maximum number of GMRES iterations per cycle
            gmres_rtol: Relative residual at which GMRES stops early
        """
        self.settings = SolverSettings(
            T_f=T_f,
            alpha=alpha,
            horizon_division_num=horizon_division_num,
            finite_difference_step=finite_difference_step,
            zeta=zeta,
            kmax=kmax,
            gmres_rtol=gmres_rtol,
        )
        self.model = model
        self.dim_x = model.state_dim
        self.dim_u = model.control_dim
        self.dim_uc = model.control_dim + model.constraint_dim
        self.N = int(horizon_division_num)

        self.horizon = Horizon(T_f=T_f, alpha=alpha, N=self.N)
        self._system = ContinuationSystem(model, self.horizon, finite_difference_step, zeta)
        self._residual = OptimalityResidual(model, self.horizon)
        self._krylov = MatrixFreeGMRES(self.N * self.dim_uc, kmax, gmres_rtol)
        self._initializer = NewtonGMRES(model)
        self._init_params: Optional[InitParams] = None

        self._solution = np.zeros((self.N, self.dim_uc))
        self._update = np.zeros((self.N, self.dim_uc))
        self._trajectory = ShootingTrajectory(
            X=np.zeros((self.N + 1, self.dim_x)),
            Lambda=np.zeros((self.N + 1, self.dim_x)),
        )
        self._initialized = False
        self.last_gmres_result: Optional[GMRESResult] = None

    @classmethod
    def from_settings(cls, model: NMPCModel, settings: SolverSettings) -> "MultipleShootingCGMRES":
        return cls(
            model,
            T_f=settings.T_f,
            alpha=settings.alpha,
            horizon_division_num=settings.horizon_division_num,
            finite_difference_step=settings.finite_difference_step,
            zeta=settings.zeta,
            kmax=settings.kmax,
            gmres_rtol=settings.gmres_rtol,
        )

    @property
    def solution(self) -> NDArray:
        """Current control-and-constraint sequence (N, dim_uc)."""
        return self._solution.copy()

    @property
    def update(self) -> NDArray:
        """Last continuation direction dU/dt (N, dim_uc)."""
        return self._update.copy()

    @property
    def trajectory(self) -> ShootingTrajectory:
        """Predicted state and costate trajectories."""
        return self._trajectory.copy()

    def set_init_params(
        self,
        initial_guess: NDArray,
        residual_tolerance: float,
        max_iterations: int,
        finite_difference_step: float,
        kmax: int,
    ) -> None:
        """
        Set parameters of the Newton-GMRES solve run by ``init_solution``.

        Args:
            initial_guess: Guess for one control-and-constraint vector (dim_uc,)
            residual_tolerance: Newton stops when the residual norm is below this
            max_iterations: Maximum number of Newton iterations
            finite_difference_step: Forward-difference step h
            kmax: Maximum number of GMRES iterations per Newton step
        """
        params = InitParams(
            initial_guess=initial_guess,
            residual_tolerance=residual_tolerance,
            max_iterations=max_iterations,
            finite_difference_step=finite_difference_step,
            kmax=kmax,
        )
        if params.initial_guess.shape != (self.dim_uc,):
            raise DimensionError(
                f"initial guess has shape {params.initial_guess.shape}, expected ({self.dim_uc},)"
            )
        self._init_params = params

    def init_solution(self, initial_time: float, initial_state: NDArray) -> NDArray:
        """
        Seed the controller at the initial time.

        Every horizon step starts from the converged zero-horizon solution and
        the trajectories are shot from it.

        Returns:
            Control input to apply (dim_u,)

        Raises:
            ConvergenceError: If the initial Newton-GMRES solve fails
        """
        x0 = self._check_state(initial_state)
        params = self._init_params
        if params is None:
            params = InitParams(
                initial_guess=np.zeros(self.dim_uc),
                residual_tolerance=1e-6,
                max_iterations=50,
                finite_difference_step=self.settings.finite_difference_step,
                kmax=self.dim_uc,
            )

        initial = self._initializer.solve(initial_time, x0, params, copies=self.N)

        self.horizon.initial_time = initial_time
        self._solution[:] = initial.solution
        self._update.fill(0.0)
        self._trajectory = condense(
            self.model, initial_time, x0, self._solution, self.horizon.step(initial_time)
        )
        self._initialized = True
        return initial.solution[: self.dim_u].copy()

    def control_update(
        self, current_time: float, sampling_period: float, current_state: NDArray
    ) -> NDArray:
        """
        Advance the solution by one continuation step.

        U ← U + Δt dU/dt with dU/dt from a single matrix-free GMRES solve.

        Args:
            current_time: Time of the measurement
            sampling_period: Control period Δt
            current_state: Measured state (dim_x,)

        Returns:
            First control input of the updated sequence (dim_u,), empty if N = 0
        """
        self._require_initialized()
        if not sampling_period > 0:
            raise ConfigurationError(f"sampling_period must be positive, got {sampling_period}")
        x = self._check_state(current_state)

        self._system.prepare(current_time, x, self._solution, self._trajectory)
        result = self._krylov.solve(
            self._system,
            current_time,
            x,
            self._solution.ravel(),
            self._update.ravel(),
        )
        self.last_gmres_result = result
        self._update[:] = result.solution.reshape(self._update.shape)

        rate = self._system.trajectory_rate(self._solution, self._update)
        self._solution += sampling_period * self._update
        self._trajectory.X += sampling_period * rate.X
        self._trajectory.Lambda += sampling_period * rate.Lambda

        return self.control_input()

    def get_error(self, current_time: float, current_state: NDArray) -> float:
        """Norm of the optimality residual of the current solution at (t, x)."""
        self._require_initialized()
        x = self._check_state(current_state)
        return self._residual.evaluate(
            current_time, x, self._solution, self._trajectory
        ).norm()

    def control_input(self) -> NDArray:
        """First control input of the current sequence."""
        if self.N == 0:
            return np.zeros(0)
        return self._solution[0, : self.dim_u].copy()

    def _check_state(self, state: NDArray) -> NDArray:
        x = np.asarray(state, dtype=float)
        if x.shape != (self.dim_x,):
            raise DimensionError(f"state has shape {x.shape}, expected ({self.dim_x},)")
        return x

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise ConfigurationError("init_solution must be called before updating the control")
