"""Matrix-free operator wrappers."""

from typing import Callable
import numpy as np
from numpy.typing import NDArray


class LinearOperator:
    """
    Adapts a plain matvec callback and right-hand side to MatrixFreeSystem.

    The linearization arguments are ignored; useful for solving explicit or
    structured linear systems with the same GMRES engine.
    """

    def __init__(self, matvec: Callable[[NDArray], NDArray], b: NDArray):
        """
        Initialize linear operator.

        Args:
            matvec: Function computing A @ v
            b: Right-hand side
        """
        self._matvec = matvec
        self.b = np.asarray(b, dtype=float)

    def rhs(self, t: float, x: NDArray, solution: NDArray, initial_guess: NDArray) -> NDArray:
        if not np.any(initial_guess):
            return self.b.copy()
        return self.b - self._matvec(initial_guess)

    def matvec(self, t: float, x: NDArray, solution: NDArray, direction: NDArray) -> NDArray:
        return self._matvec(direction)
