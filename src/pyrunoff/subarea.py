"""Sub-area hydrology solver.

Advances one sub-area's ponded depth over a time step and derives its runoff
and the water volumes lost to evaporation, infiltration and outflow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .context import RunoffContext
from .errors import IntegrationError
from .odesolve import OK
from .processes import find_subarea_runoff, outflow_volume, update_ponded_depth
from .types import Subarea, Subcatchment, SubareaType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubareaFluxes:
    """Water fluxes of one sub-area over one time step, per unit sub-area.

    Attributes:
        evap_vol: Evaporated depth [ft].
        infil_vol: Infiltrated depth [ft].
        outflow_vol: Runoff depth sent to the subcatchment outlet, averaged
            between the old and new runoff rates [ft].
        outflow: Runoff rate sent to the subcatchment outlet [ft/s].
        losses: Combined evaporation and infiltration rate [ft/s].
        t_runoff: Time over which runoff occurred [s].
    """

    evap_vol: float = 0.0
    infil_vol: float = 0.0
    outflow_vol: float = 0.0
    outflow: float = 0.0
    losses: float = 0.0
    t_runoff: float = 0.0


def get_subarea_infil(
    subcatch: Subcatchment, subarea: Subarea, precip: float, t_step: float, ctx: RunoffContext
) -> float:
    """Infiltration rate [ft/s], limited by available groundwater void space."""
    infil = ctx.infiltration.get_infil(subcatch.index, t_step, precip, subarea.inflow, subarea.depth)
    if ctx.groundwater_active(subcatch):
        infil = min(infil, ctx.groundwater.get_max_infil_vol(subcatch.index) / t_step)
    return infil


def get_subarea_runoff(
    subcatch: Subcatchment,
    kind: SubareaType,
    precip: float,
    evap: float,
    t_step: float,
    ctx: RunoffContext,
) -> SubareaFluxes:
    """Compute runoff and losses from a sub-area over the current time step.

    ``subarea.inflow`` must already hold runon for the step; precip is added
    to it here. Updates the sub-area's depth and runoff in place.

    Args:
        subcatch: Parent subcatchment.
        kind: Which sub-area to solve.
        precip: Rainfall plus snowmelt onto the sub-area [ft/s].
        evap: Evaporation rate ceiling [ft/s].
        t_step: Time step [s].
        ctx: Runtime context.

    Returns:
        SubareaFluxes for mass balance bookkeeping.

    Raises:
        IntegrationError: If ponded depth cannot be integrated.
    """
    subarea = subcatch.subareas[kind]
    old_runoff = subarea.runoff
    subarea.runoff = 0.0
    if subarea.f_area == 0.0:
        return SubareaFluxes(t_runoff=t_step)

    infil = 0.0
    if kind is SubareaType.PERV:
        infil = get_subarea_infil(subcatch, subarea, precip, t_step, ctx)

    subarea.inflow += precip
    surf_moisture = subarea.depth / t_step + subarea.inflow
    surf_evap = min(surf_moisture, evap)

    t_runoff = t_step
    losses = surf_evap + infil
    if losses >= surf_moisture:
        # All surface water is lost this step
        infil = surf_moisture - surf_evap
        losses = surf_moisture
        subarea.depth = 0.0
    else:
        depth, t_runoff, status = update_ponded_depth(
            subarea.depth,
            subarea.inflow,
            losses,
            subarea.d_store,
            subarea.alpha,
            t_step,
            ctx.options.ode_tolerance,
            ctx.options.max_ode_steps,
        )
        if status != OK:
            logger.error(
                "Ponded depth integration failed on %s sub-area of %s (status %d)",
                kind.name,
                subcatch.name,
                status,
            )
            raise IntegrationError(subcatch.name, status)
        subarea.depth = depth

    subarea.depth, subarea.runoff = find_subarea_runoff(
        subarea.depth, subarea.d_store, subarea.n, subarea.alpha, t_runoff
    )

    outflow_vol = 0.0
    outflow = 0.0
    if subarea.f_outlet > 0.0:
        outflow_vol = outflow_volume(old_runoff, subarea.runoff, t_runoff, subarea.f_outlet)
        outflow = subarea.f_outlet * subarea.runoff

    return SubareaFluxes(
        evap_vol=surf_evap * t_step,
        infil_vol=infil * t_step,
        outflow_vol=outflow_vol,
        outflow=outflow,
        losses=losses,
        t_runoff=t_runoff,
    )
