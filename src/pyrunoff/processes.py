"""Sub-area ponded depth and runoff process functions.

Numba-compiled functions implementing the nonlinear reservoir: the ponded
depth update over a time step and the runoff rate implied by the new depth.
"""

# ruff: noqa: SIM108
# SIM108: Ternary operators disabled in Numba functions for clarity

from numba import njit

from .constants import MEXP, ZERO
from .odesolve import OK, integrate_depth


@njit(cache=True)
def update_ponded_depth(
    depth: float,
    inflow: float,
    losses: float,
    d_store: float,
    alpha: float,
    t_step: float,
    tolerance: float,
    max_steps: int,
) -> tuple[float, float, int]:
    """Advance ponded depth over one time step.

    If the excess inflow cannot fill depression storage the depth is updated
    explicitly. Otherwise depression storage is filled first and the depth
    above it is integrated over the remainder of the step.

    Args:
        depth: Ponded depth at the start of the step [ft].
        inflow: Total inflow rate, including precipitation [ft/s].
        losses: Evaporation plus infiltration rate [ft/s].
        d_store: Depression storage [ft].
        alpha: Nonlinear reservoir coefficient. Zero disables outflow routing.
        t_step: Time step [s].
        tolerance: Integrator relative error tolerance.
        max_steps: Integrator step limit.

    Returns:
        Tuple of (new_depth, t_runoff, status):
        - new_depth: Ponded depth at the end of the step [ft], never negative
        - t_runoff: Time the depth spent above depression storage [s]
        - status: Integrator status, 0 on success
    """
    ix = inflow - losses
    tx = t_step
    status = OK

    if depth + ix * tx <= d_store:
        depth += ix * tx
    else:
        dx = d_store - depth
        if dx > 0.0 and ix > 0.0:
            tx -= dx / ix
            depth = d_store

        if alpha > 0.0 and tx > 0.0:
            depth, status = integrate_depth(depth, tx, ix, alpha, d_store, tolerance, max_steps)
        else:
            if tx < 0.0:
                tx = 0.0
            depth += ix * tx

    if depth < 0.0:
        depth = 0.0

    return depth, tx, status


@njit(cache=True)
def find_subarea_runoff(depth: float, d_store: float, n: float, alpha: float, t_runoff: float) -> tuple[float, float]:
    """Compute runoff rate from ponded depth.

    Args:
        depth: Ponded depth [ft].
        d_store: Depression storage [ft].
        n: Manning's roughness [-]. Zero drains all excess depth at once.
        alpha: Nonlinear reservoir coefficient.
        t_runoff: Time over which runoff occurred [s].

    Returns:
        Tuple of (depth, runoff) in ft and ft/s. Depth only changes when
        excess water drains without routing.
    """
    x_depth = depth - d_store
    if x_depth <= ZERO:
        return depth, 0.0

    if n > 0.0:
        return depth, alpha * x_depth**MEXP

    if t_runoff <= 0.0:
        return depth, 0.0
    return d_store, x_depth / t_runoff


@njit(cache=True)
def outflow_volume(old_runoff: float, new_runoff: float, t_runoff: float, f_outlet: float) -> float:
    """Runoff volume per unit area sent to the outlet over a step [ft].

    Trapezoidal average of the previous and current runoff over the time the
    sub-area produced runoff, scaled by the fraction routed to the outlet.
    """
    return 0.5 * (old_runoff + new_runoff) * t_runoff * f_outlet
