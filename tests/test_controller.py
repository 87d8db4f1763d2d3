"""Integration tests for the multiple-shooting C/GMRES controller."""

import numpy as np
import pytest

from cgmres.optimization.interface import MultipleShootingCGMRES
from cgmres.core.config import SolverSettings
from cgmres.core.errors import ConfigurationError, DimensionError, ConvergenceError
from cgmres.models.linear_quadratic import LinearQuadraticModel
from cgmres.models.pendulum import ConstrainedPendulum


class QuarticControl:
    """ẋ = u with l = u⁴/4 and no terminal cost, so H_u = u³."""

    state_dim = 1
    control_dim = 1
    constraint_dim = 0

    def f(self, x, u, t):
        return u.copy()

    def phi_x(self, x, t):
        return np.zeros(1)

    def H_x(self, x, uc, lmd, t):
        return np.zeros(1)

    def H_u(self, x, uc, lmd, t):
        return uc**3


def _scalar_controller(**overrides):
    params = dict(
        T_f=1.0,
        alpha=0.5,
        horizon_division_num=10,
        finite_difference_step=1e-6,
        zeta=1000.0,
        kmax=3,
    )
    params.update(overrides)
    controller = MultipleShootingCGMRES(LinearQuadraticModel.scalar_integrator(), **params)
    controller.set_init_params(
        initial_guess=np.zeros(1),
        residual_tolerance=1e-6,
        max_iterations=10,
        finite_difference_step=1e-6,
        kmax=1,
    )
    return controller


def test_first_update_is_stabilizing():
    """ẋ = u with cost x² + u²: the control opposes x0 and stays below the LQR feedback |K x0| = 1."""
    controller = _scalar_controller()
    x0 = np.array([1.0])

    u0 = controller.init_solution(0.0, x0)
    u = controller.control_update(0.0, 0.01, x0)

    assert u0 == pytest.approx([-1.0], abs=1e-6)
    assert u.shape == (1,)
    assert np.sign(u[0]) == -np.sign(x0[0])
    assert abs(u[0]) < 1.0
    assert controller.last_gmres_result is not None
    assert controller.last_gmres_result.iterations <= 3


def test_error_after_initialization_below_tolerance():
    controller = _scalar_controller()
    x0 = np.array([1.0])

    controller.init_solution(0.0, x0)

    assert controller.get_error(0.0, x0) < 1e-6


def test_error_after_slow_initialization_below_tolerance():
    """Newton converging linearly still leaves the whole seeded sequence within tolerance."""
    controller = MultipleShootingCGMRES(
        QuarticControl(),
        T_f=1.0, alpha=0.5, horizon_division_num=100,
        finite_difference_step=1e-6, zeta=100.0, kmax=3,
    )
    controller.set_init_params(np.array([1.0]), 1e-3, 50, 1e-6, 1)
    x0 = np.array([0.0])

    controller.init_solution(0.0, x0)

    assert controller.get_error(0.0, x0) < 1e-3


def test_initialization_seeds_every_horizon_step():
    controller = _scalar_controller()
    controller.init_solution(0.0, np.array([1.0]))

    assert controller.solution.shape == (10, 1)
    assert np.allclose(controller.solution, -1.0, atol=1e-6)
    assert np.allclose(controller.trajectory.X, 1.0)
    assert np.allclose(controller.trajectory.Lambda, 2.0)
    assert np.allclose(controller.update, 0.0)


def test_error_decays_in_closed_loop():
    """Fixed horizon, time-invariant LQ model: the residual decays like (1 - ζΔt) per cycle."""
    dt = 0.01
    controller = _scalar_controller(alpha=0.0, horizon_division_num=5, zeta=50.0, kmax=5)
    model = controller.model
    t = 0.0
    x = np.array([1.0])
    u = controller.init_solution(t, x)

    errors = [controller.get_error(t, x)]
    for _ in range(8):
        u = controller.control_update(t, dt, x)
        x = x + dt * model.f(x, u, t)
        t += dt
        errors.append(controller.get_error(t, x))

    assert errors[0] > 1e-3
    assert all(later < earlier for earlier, later in zip(errors, errors[1:]))
    assert errors[-1] < 0.05 * errors[0]


def test_closed_loop_regulates_state():
    dt = 0.01
    controller = _scalar_controller(zeta=100.0)
    model = controller.model
    t = 0.0
    x = np.array([1.0])
    controller.init_solution(t, x)

    for _ in range(300):
        u = controller.control_update(t, dt, x)
        x = x + dt * model.f(x, u, t)
        t += dt

    assert abs(x[0]) < 0.1
    assert np.isfinite(controller.get_error(t, x))


def test_constrained_pendulum_closed_loop():
    dt = 0.01
    model = ConstrainedPendulum(u_max=2.0)
    controller = MultipleShootingCGMRES(
        model,
        T_f=1.0,
        alpha=1.0,
        horizon_division_num=10,
        finite_difference_step=1e-6,
        zeta=1.0 / dt,
        kmax=5,
    )
    controller.set_init_params(
        initial_guess=[0.1, 1.5, 0.1],
        residual_tolerance=1e-8,
        max_iterations=30,
        finite_difference_step=1e-6,
        kmax=3,
    )
    t = 0.0
    x = np.array([0.5, 0.2])
    u = controller.init_solution(t, x)
    assert u.shape == (2,)

    for _ in range(100):
        u = controller.control_update(t, dt, x)
        x = x + dt * model.f(x, u, t)
        t += dt

    assert np.all(np.isfinite(controller.solution))
    assert controller.get_error(t, x) < 1.0
    assert abs(u[0]) <= model.u_max + 0.05


def test_empty_horizon_runs_without_division_by_zero():
    controller = _scalar_controller(horizon_division_num=0)
    x0 = np.array([1.0])

    u0 = controller.init_solution(0.0, x0)
    u = controller.control_update(0.0, 0.01, x0)

    assert u0 == pytest.approx([-1.0], abs=1e-6)
    assert u.shape == (0,)
    assert controller.solution.shape == (0, 1)
    assert controller.get_error(0.01, x0) < 1e-12


def test_from_settings():
    settings = SolverSettings(
        T_f=1.0,
        alpha=0.5,
        horizon_division_num=4,
        finite_difference_step=1e-6,
        zeta=100.0,
        kmax=2,
    )
    controller = MultipleShootingCGMRES.from_settings(LinearQuadraticModel.scalar_integrator(), settings)

    assert controller.N == 4
    assert controller.settings == settings


def test_default_init_params():
    controller = MultipleShootingCGMRES(
        LinearQuadraticModel.scalar_integrator(),
        T_f=1.0, alpha=0.5, horizon_division_num=4,
        finite_difference_step=1e-6, zeta=100.0, kmax=2,
    )

    u0 = controller.init_solution(0.0, np.array([0.5]))

    assert u0 == pytest.approx([-0.5], abs=1e-6)


def test_update_before_initialization_raises():
    controller = _scalar_controller()

    with pytest.raises(ConfigurationError):
        controller.control_update(0.0, 0.01, np.array([1.0]))
    with pytest.raises(ConfigurationError):
        controller.get_error(0.0, np.array([1.0]))


def test_invalid_sampling_period_raises():
    controller = _scalar_controller()
    controller.init_solution(0.0, np.array([1.0]))

    with pytest.raises(ConfigurationError):
        controller.control_update(0.0, 0.0, np.array([1.0]))


def test_state_dimension_mismatch_raises():
    controller = _scalar_controller()

    with pytest.raises(DimensionError):
        controller.init_solution(0.0, np.array([1.0, 2.0]))


def test_init_guess_dimension_mismatch_raises():
    controller = _scalar_controller()

    with pytest.raises(DimensionError):
        controller.set_init_params(np.zeros(3), 1e-6, 10, 1e-6, 1)


def test_invalid_construction_raises():
    with pytest.raises(ConfigurationError):
        _scalar_controller(T_f=0.0)
    with pytest.raises(ConfigurationError):
        _scalar_controller(finite_difference_step=0.0)


def test_initializer_failure_is_surfaced():
    controller = _scalar_controller()
    controller.set_init_params(np.array([3.0]), 1e-6, 0, 1e-6, 1)

    with pytest.raises(ConvergenceError):
        controller.init_solution(0.0, np.array([1.0]))
    with pytest.raises(ConfigurationError):
        controller.control_update(0.0, 0.01, np.array([1.0]))


def test_controllers_do_not_share_state():
    first = _scalar_controller()
    second = _scalar_controller()
    first.init_solution(0.0, np.array([1.0]))
    second.init_solution(0.0, np.array([-1.0]))

    first.control_update(0.0, 0.01, np.array([1.0]))

    assert np.allclose(second.solution, 1.0, atol=1e-6)
