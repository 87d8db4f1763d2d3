"""Matrix-free GMRES."""

import logging
from typing import Callable, Optional
import numpy as np
import scipy.linalg
from numpy.typing import NDArray

from cgmres.algebra.protocols import MatrixFreeSystem
from cgmres.algebra.operators import LinearOperator
from cgmres.solvers.base import GMRESResult

logger = logging.getLogger(__name__)

# ||b|| below this is treated as an exact zero right-hand side
_TINY = np.finfo(float).tiny
# Arnoldi breakdown when the orthogonalized vector loses this much of its norm
_BREAKDOWN_RATIO = 1e-12


class MatrixFreeGMRES:
    """
    GMRES with at most kmax Arnoldi iterations and no restart.

    Workspace arrays are sized once from (dim, kmax) and reused by every
    solve; their contents do not outlive a call to ``solve``.
    """

    def __init__(self, dim: int, kmax: int, rtol: float = 1e-10):
        """
        Args:
            dim: Dimension of the unknown
            kmax: Maximum Krylov dimension (capped at dim)
            rtol: Stop once the residual estimate is below rtol ||r0||
        """
        self.dim = dim
        self.kmax = min(kmax, dim)
        self.rtol = rtol

        self._basis = np.zeros((self.kmax + 1, dim))
        self._hessenberg = np.zeros((self.kmax + 1, self.kmax))
        self._givens_c = np.zeros(self.kmax)
        self._givens_s = np.zeros(self.kmax)
        self._g = np.zeros(self.kmax + 1)

    def solve(
        self,
        system: MatrixFreeSystem,
        t: float,
        x: NDArray,
        solution: NDArray,
        initial_guess: Optional[NDArray] = None,
    ) -> GMRESResult:
        """
        Minimize ||b - A Δ|| over Δ₀ + K_k(A, b - A Δ₀).

        Args:
            system: Provides rhs (b - A Δ₀) and matvec (A v)
            t: Current time, passed through to the system
            x: Current state, passed through to the system
            solution: Linearization point, passed through to the system
            initial_guess: Δ₀ (zero if None)

        Returns:
            GMRESResult with Δ and residual diagnostics
        """
        if initial_guess is None:
            update = np.zeros(self.dim)
        else:
            update = np.array(initial_guess, dtype=float)

        V, H, g = self._basis, self._hessenberg, self._g
        V.fill(0.0)
        H.fill(0.0)
        g.fill(0.0)

        r0 = system.rhs(t, x, solution, update)
        beta = float(np.linalg.norm(r0))
        if beta < _TINY:
            return GMRESResult(
                solution=update,
                iterations=0,
                initial_residual_norm=beta,
                residual_norm=beta,
                converged=True,
            )

        V[0] = r0 / beta
        g[0] = beta

        k = 0
        breakdown = False
        singular = False
        while k < self.kmax:
            w = system.matvec(t, x, solution, V[k])
            w_norm = np.linalg.norm(w)

            # Modified Gram-Schmidt
            for j in range(k + 1):
                H[j, k] = w @ V[j]
                w = w - H[j, k] * V[j]
            H[k + 1, k] = np.linalg.norm(w)

            breakdown = H[k + 1, k] <= _BREAKDOWN_RATIO * w_norm
            if not breakdown:
                V[k + 1] = w / H[k + 1, k]

            # Apply previous rotations to the new column
            for j in range(k):
                self._rotate(H[:, k], j)

            nu = np.hypot(H[k, k], H[k + 1, k])
            if nu == 0:
                logger.debug("GMRES: singular Hessenberg column at k=%d", k)
                singular = True
                break

            self._givens_c[k] = H[k, k] / nu
            self._givens_s[k] = H[k + 1, k] / nu
            H[k, k] = nu
            H[k + 1, k] = 0.0
            self._rotate(g, k)
            k += 1

            if breakdown:
                logger.debug("GMRES: Arnoldi breakdown after %d iterations", k)
                break
            if abs(g[k]) <= self.rtol * beta:
                break

        residual = float(abs(g[k]))
        if k > 0:
            y = scipy.linalg.solve_triangular(H[:k, :k], g[:k])
            update += V[:k].T @ y

        logger.debug(
            "GMRES: %d iterations, residual %.3e -> %.3e", k, beta, residual
        )
        return GMRESResult(
            solution=update,
            iterations=k,
            initial_residual_norm=beta,
            residual_norm=residual,
            converged=not singular and (breakdown or residual <= self.rtol * beta),
            breakdown=breakdown or singular,
        )

    def _rotate(self, vec: NDArray, j: int) -> None:
        """Apply the j-th Givens rotation to entries (j, j+1) of vec."""
        c, s = self._givens_c[j], self._givens_s[j]
        a, b = vec[j], vec[j + 1]
        vec[j] = c * a + s * b
        vec[j + 1] = -s * a + c * b


def gmres(
    matvec: Callable[[NDArray], NDArray],
    b: NDArray,
    x0: Optional[NDArray] = None,
    kmax: Optional[int] = None,
    rtol: float = 1e-10,
) -> GMRESResult:
    """
    Solve A x = b given only a matvec callback.

    Args:
        matvec: Function computing A @ v
        b: Right-hand side
        x0: Initial guess (zero if None)
        kmax: Maximum Krylov dimension (len(b) if None)
        rtol: Relative residual tolerance

    Returns:
        GMRESResult
    """
    b = np.asarray(b, dtype=float)
    n = b.shape[0]
    solver = MatrixFreeGMRES(n, n if kmax is None else kmax, rtol)
    operator = LinearOperator(matvec, b)
    return solver.solve(operator, 0.0, np.zeros(0), np.zeros(n), x0)
