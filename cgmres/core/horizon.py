"""Receding horizon schedule."""

from dataclasses import dataclass
import numpy as np

from cgmres.core.errors import ConfigurationError


@dataclass
class Horizon:
    """
    Horizon length growing from zero to T_f.

    L(t) = T_f (1 - exp(-alpha (t - t0))), divided into N equal steps.
    With alpha = 0 the horizon is fixed at T_f.
    """

    T_f: float
    alpha: float
    N: int
    initial_time: float = 0.0

    def length(self, t: float) -> float:
        """Horizon length L(t)."""
        if t < self.initial_time:
            raise ConfigurationError(
                f"time {t} precedes the initial time {self.initial_time}"
            )
        if self.alpha == 0:
            return float(self.T_f)
        return float(self.T_f * (1.0 - np.exp(-self.alpha * (t - self.initial_time))))

    def step(self, t: float) -> float:
        """Discretization interval Δτ = L(t)/N (zero for an empty horizon)."""
        length = self.length(t)
        if self.N == 0:
            return 0.0
        return length / self.N

    def grid(self, t: float) -> np.ndarray:
        """Node times τ_i = t + i Δτ for i = 0, ..., N."""
        return t + self.step(t) * np.arange(self.N + 1)
