"""Forward state shooting."""

from typing import Optional
import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import NMPCModel


def state_increment(
    model: NMPCModel, x: NDArray, uc: NDArray, tau: float, dtau: float
) -> NDArray:
    """Explicit Euler increment Δτ f(x, u, τ) over one horizon step."""
    return dtau * model.f(x, uc[: model.control_dim], tau)


def forward_shoot(
    model: NMPCModel,
    t: float,
    x: NDArray,
    U: NDArray,
    dtau: float,
    state_defects: Optional[NDArray] = None,
) -> NDArray:
    """
    Integrate the state along the horizon.

    X[0] = x
    X[i+1] = X[i] + Δτ f(X[i], u_i, τ_i) + E_x[i+1]

    Args:
        model: NMPC model
        t: Time at the start of the horizon
        x: Current state (n,)
        U: Control-and-constraint sequence (N, dim_uc)
        dtau: Horizon step Δτ
        state_defects: Shooting errors E_x (N+1, n) to reproduce, or None

    Returns:
        X: States (N+1, n)
    """
    N = U.shape[0]
    X = np.zeros((N + 1, x.shape[0]))
    X[0] = x

    for i in range(N):
        tau = t + i * dtau
        X[i + 1] = X[i] + state_increment(model, X[i], U[i], tau, dtau)
        if state_defects is not None:
            X[i + 1] += state_defects[i + 1]

    return X


def state_defects(
    model: NMPCModel,
    t: float,
    x: NDArray,
    U: NDArray,
    X: NDArray,
    dtau: float,
) -> NDArray:
    """Shooting errors E_x[i+1] = X[i+1] - X[i] - Δτ f(X[i], u_i, τ_i)."""
    N = U.shape[0]
    E = np.zeros((N + 1, x.shape[0]))

    previous = x
    for i in range(N):
        tau = t + i * dtau
        E[i + 1] = X[i + 1] - previous - state_increment(model, previous, U[i], tau, dtau)
        previous = X[i + 1]

    return E
