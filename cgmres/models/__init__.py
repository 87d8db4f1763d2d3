"""Reference NMPC models."""

from cgmres.models.linear_quadratic import LinearQuadraticModel
from cgmres.models.pendulum import ConstrainedPendulum

__all__ = [
    "LinearQuadraticModel",
    "ConstrainedPendulum",
]
