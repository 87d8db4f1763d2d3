"""Multiple-shooting condensing.

The state and costate at the horizon nodes are free variables linked by
shooting defects. Prescribing the defects (rather than the trajectories)
eliminates them, leaving the control-and-constraint sequence as the only
unknown of the Krylov solve.
"""

from typing import Optional
from numpy.typing import NDArray

from cgmres.core.model import NMPCModel
from cgmres.stepping.trajectory import ShootingTrajectory, ShootingDefects
from cgmres.stepping.forward import forward_shoot, state_defects
from cgmres.stepping.adjoint import backward_shoot, costate_defects


def condense(
    model: NMPCModel,
    t: float,
    x: NDArray,
    U: NDArray,
    dtau: float,
    defects: Optional[ShootingDefects] = None,
) -> ShootingTrajectory:
    """Trajectory whose shooting errors equal ``defects`` (zero if None)."""
    X = forward_shoot(
        model, t, x, U, dtau, None if defects is None else defects.state
    )
    Lambda = backward_shoot(
        model, t, X, U, dtau, None if defects is None else defects.costate
    )
    return ShootingTrajectory(X=X, Lambda=Lambda)


def shooting_defects(
    model: NMPCModel,
    t: float,
    x: NDArray,
    U: NDArray,
    trajectory: ShootingTrajectory,
    dtau: float,
) -> ShootingDefects:
    """Continuity errors of a stored trajectory under (t, x, U)."""
    return ShootingDefects(
        state=state_defects(model, t, x, U, trajectory.X, dtau),
        costate=costate_defects(model, t, U, trajectory.X, trajectory.Lambda, dtau),
    )
