"""Damped pendulum with a bounded torque."""

import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import HamiltonianModel


class ConstrainedPendulum(HamiltonianModel):
    """
    Pendulum θ̈ = -(g/l) sin θ - b θ̇ + u with |u| <= u_max.

    The bound is posed as the equality u² + v² - u_max² = 0 with a dummy
    input v, which is rewarded linearly in the cost to keep it away from
    zero. The control-and-constraint vector is (u, v, ρ).
    """

    state_dim = 2
    control_dim = 2
    constraint_dim = 1

    def __init__(
        self,
        gravity: float = 9.80665,
        length: float = 1.0,
        damping: float = 0.1,
        u_max: float = 2.0,
        theta_ref: float = 0.0,
        q: tuple[float, float] = (1.0, 0.1),
        q_f: tuple[float, float] = (1.0, 0.1),
        r: float = 1.0,
        r_dummy: float = 0.1,
    ):
        self.gravity = gravity
        self.length = length
        self.damping = damping
        self.u_max = u_max
        self.theta_ref = theta_ref
        self.q = np.asarray(q, dtype=float)
        self.q_f = np.asarray(q_f, dtype=float)
        self.r = r
        self.r_dummy = r_dummy

    def _error(self, x: NDArray) -> NDArray:
        return np.array([x[0] - self.theta_ref, x[1]])

    def f(self, x, u, t):
        theta, omega = x
        return np.array([
            omega,
            -(self.gravity / self.length) * np.sin(theta) - self.damping * omega + u[0],
        ])

    def f_x(self, x, u, t):
        return np.array([
            [0.0, 1.0],
            [-(self.gravity / self.length) * np.cos(x[0]), -self.damping],
        ])

    def f_u(self, x, u, t):
        return np.array([[0.0, 0.0], [1.0, 0.0]])

    def l_x(self, x, u, t):
        return self.q * self._error(x)

    def l_u(self, x, u, t):
        return np.array([self.r * u[0], -self.r_dummy])

    def phi_x(self, x, t):
        return self.q_f * self._error(x)

    def c(self, x, u, t):
        return np.array([u[0] ** 2 + u[1] ** 2 - self.u_max**2])

    def c_u(self, x, u, t):
        return np.array([[2.0 * u[0], 2.0 * u[1]]])
