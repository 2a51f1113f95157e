"""Net precipitation (rainfall plus snowmelt) onto a subcatchment's sub-areas."""

from __future__ import annotations

import numpy as np

from .constants import N_SUBAREAS
from .context import RunoffContext
from .types import Subcatchment


def get_net_precip(subcatch: Subcatchment, ctx: RunoffContext, t_step: float) -> np.ndarray:
    """Find combined rainfall and snowmelt on each sub-area type.

    Sets ``subcatch.rainfall`` to total rain plus snow and, when snowmelt is
    modelled, ``subcatch.new_snow_depth``.

    Args:
        subcatch: Subcatchment to evaluate.
        ctx: Runtime context providing the gage, direct rainfall and snow collaborators.
        t_step: Time step [s].

    Returns:
        Net precipitation per SubareaType [ft/s].
    """
    rainfall = 0.0
    snowfall = 0.0
    if subcatch.gage is not None and ctx.gages is not None:
        rainfall, snowfall = ctx.gages.get_precip(subcatch.gage)

    if ctx.rainfall_override is not None:
        direct = ctx.rainfall_override.get_direct_rainfall(subcatch.index)
        if direct is not None:
            rainfall = direct

    subcatch.rainfall = rainfall + snowfall

    if ctx.snow_active(subcatch):
        snow_depth, net_precip = ctx.snow.get_snowmelt(subcatch.index, rainfall, snowfall, t_step)
        subcatch.new_snow_depth = snow_depth
        return np.asarray(net_precip, dtype=np.float64)

    return np.full(N_SUBAREAS, rainfall + snowfall)
