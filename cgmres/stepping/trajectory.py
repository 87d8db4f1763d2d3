"""Trajectory storage for multiple shooting."""

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray


@dataclass
class ShootingTrajectory:
    """State and costate at every horizon node."""

    X: NDArray       # (N+1, n) states, X[0] is the current state
    Lambda: NDArray  # (N+1, n) costates, Lambda[N] is the terminal costate

    def copy(self) -> "ShootingTrajectory":
        return ShootingTrajectory(X=self.X.copy(), Lambda=self.Lambda.copy())


@dataclass
class ShootingDefects:
    """Multiple-shooting continuity errors of a trajectory.

    Row 0 of both arrays is always zero: node 0 is pinned to the measured
    state and Lambda[0] follows from Lambda[1].
    """

    state: NDArray    # (N+1, n)
    costate: NDArray  # (N+1, n)

    @classmethod
    def zeros(cls, N: int, n: int) -> "ShootingDefects":
        return cls(state=np.zeros((N + 1, n)), costate=np.zeros((N + 1, n)))

    def scaled(self, factor: float) -> "ShootingDefects":
        return ShootingDefects(state=factor * self.state, costate=factor * self.costate)

    def squared_norm(self) -> float:
        return float(np.sum(self.state**2) + np.sum(self.costate**2))
