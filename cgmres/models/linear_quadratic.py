"""Linear dynamics with quadratic cost."""

from typing import Optional
import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import HamiltonianModel


class LinearQuadraticModel(HamiltonianModel):
    """
    ẋ = A x + B u with

        l(x, u) = ½ (x - x_ref)ᵀ Q (x - x_ref) + ½ uᵀ R u
        φ(x)    = ½ (x - x_ref)ᵀ Q_f (x - x_ref)
    """

    constraint_dim = 0

    def __init__(
        self,
        A: NDArray,
        B: NDArray,
        Q: NDArray,
        R: NDArray,
        Q_f: Optional[NDArray] = None,
        x_ref: Optional[NDArray] = None,
    ):
        self.A = np.atleast_2d(np.asarray(A, dtype=float))
        self.B = np.atleast_2d(np.asarray(B, dtype=float))
        self.Q = np.atleast_2d(np.asarray(Q, dtype=float))
        self.R = np.atleast_2d(np.asarray(R, dtype=float))
        self.Q_f = self.Q if Q_f is None else np.atleast_2d(np.asarray(Q_f, dtype=float))
        self.state_dim = self.A.shape[0]
        self.control_dim = self.B.shape[1]
        self.x_ref = np.zeros(self.state_dim) if x_ref is None else np.asarray(x_ref, dtype=float)

    @classmethod
    def scalar_integrator(cls, q: float = 2.0, r: float = 2.0, q_f: Optional[float] = None) -> "LinearQuadraticModel":
        """ẋ = u; the defaults give the cost x² + u²."""
        return cls(
            A=[[0.0]],
            B=[[1.0]],
            Q=[[q]],
            R=[[r]],
            Q_f=None if q_f is None else [[q_f]],
        )

    def f(self, x, u, t):
        return self.A @ x + self.B @ u

    def f_x(self, x, u, t):
        return self.A

    def f_u(self, x, u, t):
        return self.B

    def l_x(self, x, u, t):
        return self.Q @ (x - self.x_ref)

    def l_u(self, x, u, t):
        return self.R @ u

    def phi_x(self, x, t):
        return self.Q_f @ (x - self.x_ref)
