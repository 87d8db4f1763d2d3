"""Matrix-free linear system protocol."""

from typing import Protocol
from numpy.typing import NDArray


class MatrixFreeSystem(Protocol):
    """
    Linear system A Δ = b known only through callbacks.

    Allows the Krylov solver to run on the continuation system, the initial
    Newton system or a plain matrix without forming A. Vectors are flat.
    """

    def rhs(
        self, t: float, x: NDArray, solution: NDArray, initial_guess: NDArray
    ) -> NDArray:
        """
        Initial residual b - A Δ₀.

        Called once per solve, before any matvec.

        Args:
            t: Current time
            x: Current state
            solution: Linearization point (flat)
            initial_guess: Initial guess Δ₀ of the solve (flat)

        Returns:
            Residual of the initial guess (flat)
        """
        ...

    def matvec(
        self, t: float, x: NDArray, solution: NDArray, direction: NDArray
    ) -> NDArray:
        """
        Action A v of the linearized system.

        Args:
            t: Current time
            x: Current state
            solution: Linearization point (flat)
            direction: Direction v (flat)

        Returns:
            Approximation of A v (flat)
        """
        ...
