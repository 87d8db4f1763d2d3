"""Model protocols for the NMPC problem."""

from abc import ABC, abstractmethod
from typing import Protocol
import numpy as np
from numpy.typing import NDArray


class NMPCModel(Protocol):
    """
    User provides callbacks; the solver never stores model state.

    The control-and-constraint vector ``uc`` concatenates the control input
    (control_dim) with the constraint multipliers (constraint_dim). The last
    constraint_dim entries of H_u are the constraint residuals.
    """

    @property
    def state_dim(self) -> int:
        """State dimension dim_x."""
        ...

    @property
    def control_dim(self) -> int:
        """Control input dimension dim_u."""
        ...

    @property
    def constraint_dim(self) -> int:
        """Number of equality constraints dim_c."""
        ...

    def f(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """State equation: ẋ = f(x, u, t), shape (dim_x,)."""
        ...

    def phi_x(self, x: NDArray, t: float) -> NDArray:
        """Terminal cost gradient ∂φ/∂x, shape (dim_x,)."""
        ...

    def H_x(self, x: NDArray, uc: NDArray, lmd: NDArray, t: float) -> NDArray:
        """Hamiltonian gradient w.r.t. state, shape (dim_x,)."""
        ...

    def H_u(self, x: NDArray, uc: NDArray, lmd: NDArray, t: float) -> NDArray:
        """Hamiltonian gradient w.r.t. control and multipliers, shape (dim_u + dim_c,)."""
        ...


class HamiltonianModel(ABC):
    """
    Builds the Hamiltonian gradients from stage-level partials.

    H(x, u, ρ, λ, t) = l(x, u, t) + λᵀ f(x, u, t) + ρᵀ c(x, u, t)

    Subclasses set the dimensions and provide f, its Jacobians, the stage
    cost gradients and the terminal cost gradient. Constrained models also
    override c, c_x and c_u.
    """

    state_dim: int
    control_dim: int
    constraint_dim: int = 0

    @abstractmethod
    def f(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """State equation ẋ = f(x, u, t)."""

    @abstractmethod
    def f_x(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """State Jacobian ∂f/∂x, shape (dim_x, dim_x)."""

    @abstractmethod
    def f_u(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """Control Jacobian ∂f/∂u, shape (dim_x, dim_u)."""

    @abstractmethod
    def l_x(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """Stage cost gradient ∂l/∂x."""

    @abstractmethod
    def l_u(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """Stage cost gradient ∂l/∂u."""

    @abstractmethod
    def phi_x(self, x: NDArray, t: float) -> NDArray:
        """Terminal cost gradient ∂φ/∂x."""

    def c(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """Equality constraint residual c(x, u, t) = 0."""
        return np.zeros(self.constraint_dim)

    def c_x(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """Constraint Jacobian ∂c/∂x, shape (dim_c, dim_x)."""
        return np.zeros((self.constraint_dim, self.state_dim))

    def c_u(self, x: NDArray, u: NDArray, t: float) -> NDArray:
        """Constraint Jacobian ∂c/∂u, shape (dim_c, dim_u)."""
        return np.zeros((self.constraint_dim, self.control_dim))

    def split(self, uc: NDArray) -> tuple[NDArray, NDArray]:
        """Split a control-and-constraint vector into (u, ρ)."""
        return uc[: self.control_dim], uc[self.control_dim :]

    def H_x(self, x: NDArray, uc: NDArray, lmd: NDArray, t: float) -> NDArray:
        u, rho = self.split(uc)
        hx = self.l_x(x, u, t) + self.f_x(x, u, t).T @ lmd
        if self.constraint_dim:
            hx = hx + self.c_x(x, u, t).T @ rho
        return hx

    def H_u(self, x: NDArray, uc: NDArray, lmd: NDArray, t: float) -> NDArray:
        u, rho = self.split(uc)
        hu = self.l_u(x, u, t) + self.f_u(x, u, t).T @ lmd
        if not self.constraint_dim:
            return hu
        return np.concatenate([hu + self.c_u(x, u, t).T @ rho, self.c(x, u, t)])
