"""Pollutant buildup, street sweeping and washoff.

Buildup and sweeping act on the land use buildup stored in each
LandFactor. Washoff combines two pollutant streams leaving a subcatchment:
the complete-mix mass balance of ponded water (rain deposition and runon
mass, less infiltration) and washoff of land use buildup.
"""

from __future__ import annotations

import logging
from datetime import datetime

import numpy as np

from .constants import FT2PERACRE, LPERFT3, MIN_RUNOFF, MIN_SNOW_DEPTH, MIN_TOTAL_DEPTH, SECPERDAY
from .context import RunoffContext
from .massbal import LoadType
from .runoff import RunoffResult, get_depth
from .types import Subcatchment, SubareaType

logger = logging.getLogger(__name__)


def get_buildup(subcatch: Subcatchment, ctx: RunoffContext, t_step: float) -> None:
    """Add pollutant buildup on each land use of a subcatchment over one step.

    Buildup never decreases here. Snow-only pollutants only build up while
    the subcatchment carries snow.
    """
    if ctx.landuse is None or ctx.options.ignore_quality:
        return

    for i, factor in enumerate(subcatch.land_factors):
        if factor.fraction == 0.0:
            continue
        area = factor.fraction * subcatch.area / FT2PERACRE
        curb = factor.fraction * subcatch.curb_length

        for p, pollutant in enumerate(ctx.pollutants):
            if pollutant.snow_only and subcatch.new_snow_depth < MIN_SNOW_DEPTH:
                continue
            old_buildup = factor.buildup[p]
            new_buildup = ctx.landuse.get_buildup(i, p, area, curb, old_buildup, t_step)
            new_buildup = max(new_buildup, old_buildup)
            factor.buildup[p] = new_buildup
            ctx.ledger.update_loading_totals(LoadType.BUILDUP, p, new_buildup - old_buildup)


def sweep_buildup(subcatch: Subcatchment, ctx: RunoffContext, date: datetime) -> None:
    """Remove buildup from land uses whose sweeping interval has elapsed.

    No sweeping takes place while snow covers the plowable impervious area.
    """
    if ctx.landuse is None or ctx.options.ignore_quality:
        return
    if subcatch.has_snowpack and ctx.snow is not None:
        if ctx.snow.get_subarea_snow_depth(subcatch.index, SubareaType.IMPERV0) > MIN_TOTAL_DEPTH:
            return

    for i, factor in enumerate(subcatch.land_factors):
        if factor.fraction == 0.0:
            continue
        interval, removal = ctx.landuse.get_sweep_params(i)
        if interval == 0.0:
            continue
        if factor.last_swept is not None:
            days_since = (date - factor.last_swept).total_seconds() / SECPERDAY
            if days_since < interval:
                continue

        factor.last_swept = date
        for p in range(subcatch.n_pollutants):
            old_buildup = factor.buildup[p]
            new_buildup = old_buildup * (1.0 - removal * ctx.landuse.get_sweep_effic(i, p))
            new_buildup = max(0.0, min(old_buildup, new_buildup))
            factor.buildup[p] = new_buildup
            ctx.ledger.update_loading_totals(LoadType.SWEEPING, p, old_buildup - new_buildup)
        logger.debug("Swept land use %d of subcatchment %s", i, subcatch.name)


def update_ponded_qual(
    subcatch: Subcatchment, ctx: RunoffContext, result: RunoffResult, t_step: float
) -> np.ndarray:
    """Complete-mix mass balance of pollutants in ponded surface water.

    Rain deposition and runon mass mix with the ponded mass; infiltration
    removes mass at the mixed concentration and the rest leaves with the
    step's outflow, less BMP removal. A surface that is dry and receives no
    water loses its remaining ponded mass to the final-load category.

    Args:
        subcatch: Subcatchment whose ponded quality is updated.
        ctx: Runtime context.
        result: Water volumes of the step from compute_runoff.
        t_step: Time step [s].

    Returns:
        Pollutant mass leaving with the outflow, per pollutant.
    """
    n = subcatch.n_pollutants
    outflow_load = np.zeros(n)
    runon_load = subcatch.runon_load
    v_in = result.v_rain + result.v_runon
    is_dry = result.v_ponded + v_in == 0.0

    for p, pollutant in enumerate(ctx.pollutants):
        w_ppt = pollutant.ppt_concen * LPERFT3 * result.v_rain
        ctx.ledger.update_loading_totals(LoadType.DEPOSITION, p, w_ppt * pollutant.mcf)

        if is_dry:
            ctx.ledger.update_loading_totals(LoadType.FINAL, p, subcatch.ponded_qual[p] * pollutant.mcf)
            subcatch.ponded_qual[p] = 0.0
            continue

        w = subcatch.ponded_qual[p] + w_ppt + runon_load[p] * t_step
        c = w / (result.v_ponded + v_in)

        w_infil = min(c * result.v_infil, w)
        ctx.ledger.update_loading_totals(LoadType.INFILTRATION, p, w_infil * pollutant.mcf)
        w -= w_infil

        outflow_load[p] = min(w, c * result.v_outflow)

        bmp_effic = 0.0
        if ctx.landuse is not None:
            bmp_effic = ctx.landuse.get_avg_bmp_effic(subcatch.land_factors, p)
        bmp_removal = bmp_effic * outflow_load[p]
        ctx.ledger.update_loading_totals(LoadType.BMP_REMOVAL, p, bmp_removal * pollutant.mcf)
        outflow_load[p] -= bmp_removal

        subcatch.ponded_qual[p] = c * get_depth(subcatch, ctx) * subcatch.area

    return outflow_load


def get_washoff(subcatch: Subcatchment, ctx: RunoffContext, result: RunoffResult, t_step: float) -> np.ndarray:
    """Compute the new runoff quality of a subcatchment.

    Land use washoff is driven by the total runoff generated before internal
    re-routing, while the outflow concentration uses the runoff that actually
    leaves through the outlet.

    Args:
        subcatch: Subcatchment to evaluate.
        ctx: Runtime context.
        result: Water balance of the step from compute_runoff.
        t_step: Time step [s].

    Returns:
        Pollutant mass leaving the subcatchment over the step, per pollutant.
    """
    n = subcatch.n_pollutants
    if n == 0 or subcatch.area == 0.0 or ctx.options.ignore_quality:
        return np.zeros(n)

    outflow_load = update_ponded_qual(subcatch, ctx, result, t_step)

    if result.runoff >= MIN_RUNOFF and ctx.landuse is not None:
        washoff_load = np.zeros(n)
        for i, factor in enumerate(subcatch.land_factors):
            if factor.fraction > 0.0:
                ctx.landuse.get_washoff(
                    i, subcatch.area, subcatch.land_factors, result.runoff, t_step, washoff_load
                )
        for p in range(n):
            washoff_load[p] += ctx.landuse.get_co_pollut_load(p, washoff_load)
        outflow_load += washoff_load

    runoff = subcatch.new_runoff
    for p, pollutant in enumerate(ctx.pollutants):
        mass = outflow_load[p] * pollutant.mcf
        subcatch.total_load[p] += mass
        if subcatch.drains_to_network:
            ctx.ledger.update_loading_totals(LoadType.RUNOFF, p, mass)

        if runoff > MIN_RUNOFF:
            subcatch.new_qual[p] = outflow_load[p] / (runoff * t_step * LPERFT3)
        else:
            subcatch.new_qual[p] = 0.0

    return outflow_load
