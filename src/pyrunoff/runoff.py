"""Subcatchment state and water balance over one time step.

init_state and commit_old_state manage the double-buffered state.
compute_runoff drives the precipitation resolver and the sub-area solver for
every sub-area type, adds LID and groundwater contributions, stores the
subcatchment's new outflow and loss rates and returns the step's volumes for
the washoff computation. Also provides storage and depth queries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .constants import FT2PERACRE
from .context import RunoffContext
from .precip import get_net_precip
from .subarea import SubareaFluxes, get_subarea_runoff
from .types import Subcatchment, SubareaType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunoffResult:
    """Water balance of a subcatchment over one time step.

    Attributes:
        runoff: Area-averaged runoff before internal re-routing [ft/s]. Drives washoff.
        v_rain: Net precipitation volume onto the non-LID area [ft3].
        v_evap: Evaporation volume [ft3].
        v_infil: Infiltration volume [ft3].
        v_outflow: Runoff volume leaving the subcatchment at the end-of-step
            outflow rate [ft3].
        v_runon: Runon volume from upstream subcatchments [ft3].
        v_ponded: Ponded volume at the start of the step [ft3].
        fluxes: Per unit area fluxes of each sub-area, ordered by SubareaType.
    """

    runoff: float = 0.0
    v_rain: float = 0.0
    v_evap: float = 0.0
    v_infil: float = 0.0
    v_outflow: float = 0.0
    v_runon: float = 0.0
    v_ponded: float = 0.0
    fluxes: tuple[SubareaFluxes, ...] = field(default_factory=tuple)


def init_state(
    subcatch: Subcatchment,
    ctx: RunoffContext,
    start_date: datetime,
    start_dry_days: float = 0.0,
) -> None:
    """Initialize a subcatchment's state at the start of a simulation.

    Clears runoff, snow, ponding and quality state, initializes the attached
    infiltration, groundwater and snowpack collaborators and sets initial
    pollutant buildup on each land use.

    Args:
        subcatch: Subcatchment to initialize.
        ctx: Runtime context.
        start_date: Simulation start time; land uses count days since last
            sweeping from here.
        start_dry_days: Antecedent dry days used when no initial loading is given.
    """
    subcatch.rainfall = 0.0
    subcatch.old_runoff = 0.0
    subcatch.new_runoff = 0.0
    subcatch.old_snow_depth = 0.0
    subcatch.new_snow_depth = 0.0
    subcatch.evap_loss = 0.0
    subcatch.infil_loss = 0.0
    subcatch.runon_inflows.clear()
    subcatch.runon_loads.clear()

    ctx.infiltration.init_state(subcatch.index)
    if ctx.groundwater_active(subcatch):
        ctx.groundwater.init_state(subcatch.index)
    if ctx.snow_active(subcatch):
        ctx.snow.init_snowpack(subcatch.index)

    for subarea in subcatch.subareas:
        subarea.reset()

    subcatch.old_qual[:] = 0.0
    subcatch.new_qual[:] = 0.0
    subcatch.ponded_qual[:] = 0.0
    subcatch.total_load[:] = 0.0

    if ctx.landuse is None:
        return
    for i, factor in enumerate(subcatch.land_factors):
        factor.last_swept = start_date - timedelta(days=ctx.landuse.get_sweep_days0(i))
        factor.buildup[:] = 0.0
        if factor.fraction == 0.0:
            continue
        area = factor.fraction * subcatch.area / FT2PERACRE
        curb = factor.fraction * subcatch.curb_length
        for p in range(subcatch.n_pollutants):
            factor.buildup[p] = ctx.landuse.get_init_buildup(
                i, p, area, curb, subcatch.init_buildup[p], start_dry_days
            )
    logger.debug("Initialized state of subcatchment %s", subcatch.name)


def commit_old_state(subcatch: Subcatchment) -> None:
    """Replace the old state with the new state at the start of a step."""
    subcatch.old_runoff = subcatch.new_runoff
    subcatch.old_snow_depth = subcatch.new_snow_depth
    for subarea in subcatch.subareas:
        subarea.inflow = 0.0
        subarea.internal_inflow = 0.0
    subcatch.old_qual[:] = subcatch.new_qual
    subcatch.new_qual[:] = 0.0
    subcatch.runon_inflows.clear()
    subcatch.runon_loads.clear()


def get_depth(subcatch: Subcatchment, ctx: RunoffContext) -> float:
    """Average depth of ponded water over the whole subcatchment [ft]."""
    depth = 0.0
    for subarea in subcatch.subareas:
        if subarea.f_area > 0.0:
            depth += subarea.depth * subarea.f_area

    if ctx.lid_active(subcatch):
        lid_depth = ctx.lid.get_surface_depth(subcatch.index)
        depth = (depth * subcatch.non_lid_area + lid_depth * subcatch.lid_area) / subcatch.area
    return depth


def get_storage(subcatch: Subcatchment, ctx: RunoffContext) -> float:
    """Volume of water stored on the surface and in LID units [ft3]."""
    v = sum(subarea.depth * subarea.f_area for subarea in subcatch.subareas)
    v *= subcatch.non_lid_area
    if ctx.lid_active(subcatch):
        v += ctx.lid.get_stored_volume(subcatch.index)
    return v


def get_frac_perv(subcatch: Subcatchment, ctx: RunoffContext) -> float:
    """Fraction of subcatchment area, LID units included, that is pervious."""
    frac_perv = 1.0 - subcatch.frac_imperv
    if ctx.lid_active(subcatch):
        frac_perv = (frac_perv * subcatch.non_lid_area + ctx.lid.get_perv_area(subcatch.index)) / subcatch.area
        frac_perv = min(frac_perv, 1.0)
    return frac_perv


def compute_runoff(subcatch: Subcatchment, ctx: RunoffContext, t_step: float) -> RunoffResult:
    """Compute runoff and new ponded depths of a subcatchment.

    Runon routed onto the subcatchment must already be in place. The
    subcatchment's outflow leaving through its outlet is stored in
    ``new_runoff`` [cfs]; the returned runoff is the total generated before
    internal re-routing, averaged over the subcatchment [ft/s].

    Args:
        subcatch: Subcatchment to evaluate.
        ctx: Runtime context.
        t_step: Time step [s].

    Returns:
        RunoffResult with the step's runoff and water volumes.

    Raises:
        IntegrationError: If a sub-area's ponded depth cannot be integrated.
    """
    v_ponded = get_depth(subcatch, ctx) * subcatch.area

    net_precip = get_net_precip(subcatch, ctx, t_step)
    if ctx.options.evap_dry_only and subcatch.rainfall > 0.0:
        evap_rate = 0.0
    else:
        evap_rate = ctx.evap_rate

    runon = subcatch.runon
    for subarea in subcatch.subareas:
        subarea.inflow = runon + subarea.internal_inflow

    rain_vol = 0.0
    evap_vol = 0.0
    infil_vol = 0.0
    perv_evap_vol = 0.0
    outflow = 0.0
    runoff = 0.0
    fluxes: list[SubareaFluxes] = []

    non_lid_area = subcatch.non_lid_area
    for kind in SubareaType:
        subarea = subcatch.subareas[kind]
        area = non_lid_area * subarea.f_area
        if area <= 0.0:
            fluxes.append(SubareaFluxes())
            continue

        fx = get_subarea_runoff(subcatch, kind, net_precip[kind], evap_rate, t_step, ctx)
        fluxes.append(fx)
        runoff += subarea.runoff * area
        rain_vol += net_precip[kind] * t_step * area
        outflow += fx.outflow * area
        evap_vol += fx.evap_vol * area
        infil_vol += fx.infil_vol * area
        if kind is SubareaType.PERV:
            perv_evap_vol += fx.evap_vol * area

    # LID units act as one more sub-area
    if ctx.lid_active(subcatch):
        lid = ctx.lid.get_runoff(subcatch.index, t_step)
        runoff += lid.runoff
        outflow += lid.outflow
        evap_vol += lid.evap_vol
        perv_evap_vol += lid.perv_evap_vol
        infil_vol += lid.infil_vol

    if ctx.groundwater_active(subcatch):
        ctx.groundwater.get_groundwater(subcatch.index, perv_evap_vol, infil_vol, t_step)

    area = subcatch.area
    subcatch.new_runoff = outflow
    subcatch.evap_loss = evap_vol / t_step / area
    subcatch.infil_loss = infil_vol / t_step / area

    # Volume leaving at the end-of-step outflow rate, the same rate new_qual is based on
    outflow_vol = outflow * t_step
    v_runon = runon * t_step * area
    total_rain_vol = subcatch.rainfall * t_step * area
    if ctx.stats is not None:
        ctx.stats.update_subcatch_stats(
            subcatch.index, total_rain_vol, v_runon, evap_vol, infil_vol, outflow_vol, outflow
        )

    # Runoff sent onto another subcatchment has not left the land surface
    system_outflow_vol = outflow_vol if subcatch.drains_to_network else 0.0
    ctx.ledger.update_runoff_totals(total_rain_vol, evap_vol, infil_vol, system_outflow_vol)

    return RunoffResult(
        runoff=runoff / area,
        v_rain=rain_vol,
        v_evap=evap_vol,
        v_infil=infil_vol,
        v_outflow=outflow_vol,
        v_runon=v_runon,
        v_ponded=v_ponded,
        fluxes=tuple(fluxes),
    )
