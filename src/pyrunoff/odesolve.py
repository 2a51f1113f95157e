"""Adaptive Runge-Kutta integration of sub-area ponded depth.

Numba-compiled Cash-Karp embedded Runge-Kutta (4th/5th order) integrator for
the nonlinear reservoir equation

    dd/dt = i - alpha * max(d - d_store, 0) ** (5/3)

where i is the net inflow rate after losses. Every problem parameter is an
explicit argument, so concurrent integrations never share state.
"""

# ruff: noqa: SIM108
# SIM108: Ternary operators disabled in Numba functions for clarity

from numba import njit

from .constants import MEXP

# Step size control
SAFETY: float = 0.9
PGROW: float = -0.2
PSHRNK: float = -0.25
ERRCON: float = 1.89e-4  # (5 / SAFETY) ** (1 / PGROW)
TINY: float = 1.0e-30

# Cash-Karp tableau (stage times are not needed: the equation is autonomous)
B21 = 0.2
B31, B32 = 3.0 / 40.0, 9.0 / 40.0
B41, B42, B43 = 0.3, -0.9, 1.2
B51, B52, B53, B54 = -11.0 / 54.0, 2.5, -70.0 / 27.0, 35.0 / 27.0
B61, B62, B63, B64, B65 = 1631.0 / 55296.0, 175.0 / 512.0, 575.0 / 13824.0, 44275.0 / 110592.0, 253.0 / 4096.0
C1, C3, C4, C6 = 37.0 / 378.0, 250.0 / 621.0, 125.0 / 594.0, 512.0 / 1771.0
DC1 = C1 - 2825.0 / 27648.0
DC3 = C3 - 18575.0 / 48384.0
DC4 = C4 - 13525.0 / 55296.0
DC5 = -277.0 / 14336.0
DC6 = C6 - 0.25

# Integrator status codes
OK: int = 0
TOO_MANY_STEPS: int = 1
STEP_UNDERFLOW: int = 2


@njit(cache=True)
def depth_derivative(depth: float, inflow_excess: float, alpha: float, d_store: float) -> float:
    """Rate of change of ponded depth [ft/s].

    Args:
        depth: Ponded depth [ft].
        inflow_excess: Inflow minus evaporation and infiltration [ft/s].
        alpha: Nonlinear reservoir coefficient.
        d_store: Depression storage [ft].

    Returns:
        Net inflow minus nonlinear outflow. No outflow below depression storage.
    """
    rx = depth - d_store
    if rx < 0.0:
        return inflow_excess
    return inflow_excess - alpha * rx**MEXP


@njit(cache=True)
def _rkck(
    y: float, dydx: float, h: float, inflow_excess: float, alpha: float, d_store: float
) -> tuple[float, float]:
    """Take one Cash-Karp step, returning (new value, error estimate)."""
    ak2 = depth_derivative(y + B21 * h * dydx, inflow_excess, alpha, d_store)
    ak3 = depth_derivative(y + h * (B31 * dydx + B32 * ak2), inflow_excess, alpha, d_store)
    ak4 = depth_derivative(y + h * (B41 * dydx + B42 * ak2 + B43 * ak3), inflow_excess, alpha, d_store)
    ak5 = depth_derivative(y + h * (B51 * dydx + B52 * ak2 + B53 * ak3 + B54 * ak4), inflow_excess, alpha, d_store)
    ak6 = depth_derivative(
        y + h * (B61 * dydx + B62 * ak2 + B63 * ak3 + B64 * ak4 + B65 * ak5), inflow_excess, alpha, d_store
    )
    y_out = y + h * (C1 * dydx + C3 * ak3 + C4 * ak4 + C6 * ak6)
    y_err = h * (DC1 * dydx + DC3 * ak3 + DC4 * ak4 + DC5 * ak5 + DC6 * ak6)
    return y_out, y_err


@njit(cache=True)
def integrate_depth(
    depth: float,
    t_span: float,
    inflow_excess: float,
    alpha: float,
    d_store: float,
    tolerance: float,
    max_steps: int,
) -> tuple[float, int]:
    """Integrate ponded depth over t_span seconds.

    The first trial step spans the whole interval; steps are shrunk until the
    scaled error estimate is within tolerance and grown again afterwards.

    Args:
        depth: Ponded depth at the start of the interval [ft].
        t_span: Length of the interval [s].
        inflow_excess: Inflow minus losses [ft/s].
        alpha: Nonlinear reservoir coefficient.
        d_store: Depression storage [ft].
        tolerance: Acceptable relative error.
        max_steps: Maximum number of accepted steps.

    Returns:
        Tuple of (depth at the end of the interval, status) where status is
        OK, TOO_MANY_STEPS or STEP_UNDERFLOW.
    """
    x = 0.0
    y = depth
    h = t_span

    for _ in range(max_steps):
        dydx = depth_derivative(y, inflow_excess, alpha, d_store)
        yscal = abs(y) + abs(dydx * h) + TINY
        if x + h > t_span:
            h = t_span - x

        # Shrink the step until the error is acceptable
        errmax = 0.0
        y_new = y
        while True:
            y_new, y_err = _rkck(y, dydx, h, inflow_excess, alpha, d_store)
            errmax = abs(y_err / yscal) / tolerance
            if errmax <= 1.0:
                break
            h_temp = SAFETY * h * errmax**PSHRNK
            h = max(h_temp, 0.1 * h)
            if x + h == x:
                return y, STEP_UNDERFLOW

        if errmax > ERRCON:
            h_next = SAFETY * h * errmax**PGROW
        else:
            h_next = 5.0 * h

        x += h
        y = y_new
        if x >= t_span:
            return y, OK
        h = h_next

    return y, TOO_MANY_STEPS
