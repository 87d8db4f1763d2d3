"""State and costate shooting along the horizon."""

from cgmres.stepping.trajectory import ShootingTrajectory, ShootingDefects
from cgmres.stepping.forward import forward_shoot, state_defects
from cgmres.stepping.adjoint import backward_shoot, costate_defects
from cgmres.stepping.condensing import condense, shooting_defects

__all__ = [
    "ShootingTrajectory",
    "ShootingDefects",
    "forward_shoot",
    "state_defects",
    "backward_shoot",
    "costate_defects",
    "condense",
    "shooting_defects",
]
