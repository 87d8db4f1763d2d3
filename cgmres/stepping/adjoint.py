"""Backward costate shooting."""

from typing import Optional
import numpy as np
from numpy.typing import NDArray

from cgmres.core.model import NMPCModel


def costate_increment(
    model: NMPCModel, x: NDArray, uc: NDArray, lmd_next: NDArray, tau: float, dtau: float
) -> NDArray:
    """Adjoint increment Δτ H_x(x_i, uc_i, λ_{i+1}, τ_i)."""
    return dtau * model.H_x(x, uc, lmd_next, tau)


def backward_shoot(
    model: NMPCModel,
    t: float,
    X: NDArray,
    U: NDArray,
    dtau: float,
    costate_defects: Optional[NDArray] = None,
) -> NDArray:
    """
    Integrate the costate backward from the terminal condition.

    Lambda[N] = φ_x(X[N], τ_N) + E_λ[N]
    Lambda[i] = Lambda[i+1] + Δτ H_x(X[i], uc_i, Lambda[i+1], τ_i) + E_λ[i]

    Args:
        model: NMPC model
        t: Time at the start of the horizon
        X: States (N+1, n) from forward_shoot
        U: Control-and-constraint sequence (N, dim_uc)
        dtau: Horizon step Δτ
        costate_defects: Shooting errors E_λ (N+1, n) to reproduce, or None

    Returns:
        Lambda: Costates (N+1, n)
    """
    N = U.shape[0]
    Lambda = np.zeros_like(X)

    # Terminal condition
    Lambda[N] = model.phi_x(X[N], t + N * dtau)
    if costate_defects is not None:
        Lambda[N] += costate_defects[N]

    for i in range(N - 1, -1, -1):
        tau = t + i * dtau
        Lambda[i] = Lambda[i + 1] + costate_increment(
            model, X[i], U[i], Lambda[i + 1], tau, dtau
        )
        if costate_defects is not None and i > 0:
            Lambda[i] += costate_defects[i]

    return Lambda


def costate_defects(
    model: NMPCModel,
    t: float,
    U: NDArray,
    X: NDArray,
    Lambda: NDArray,
    dtau: float,
) -> NDArray:
    """Shooting errors of the costate; row 0 is zero since Lambda[0] is derived."""
    N = U.shape[0]
    E = np.zeros_like(Lambda)

    E[N] = Lambda[N] - model.phi_x(X[N], t + N * dtau)
    for i in range(N - 1, 0, -1):
        tau = t + i * dtau
        E[i] = Lambda[i] - Lambda[i + 1] - costate_increment(
            model, X[i], U[i], Lambda[i + 1], tau, dtau
        )

    return E
