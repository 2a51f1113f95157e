"""Runon routing between subcatchments and between sub-areas.

The router runs once per subcatchment per step, before any runoff is
computed, and only reads runoff and quality from the previous step. Each
write is an assignment keyed by its writer, so routing is order independent
and repeating it within a step has no further effect.
"""

from __future__ import annotations

import logging

import numpy as np

from .constants import LPERFT3
from .context import RunoffContext
from .types import RouteTo, Subcatchment, SubareaType

logger = logging.getLogger(__name__)


def route_runon(subcatch: Subcatchment, ctx: RunoffContext) -> None:
    """Route a subcatchment's previous runoff to its outlet subcatchment and sub-areas.

    - Previous runoff [cfs] is spread uniformly over an outlet subcatchment's
      area and enters all three of its sub-areas, together with the
      pollutant mass flux it carries.
    - The routed share of impervious runoff enters the pervious sub-area, or
      the routed share of pervious runoff enters the impervious sub-area with
      depression storage.
    - LID return flow enters the pervious sub-area.

    No pollutant mass moves between sub-areas of the same subcatchment.

    Args:
        subcatch: Subcatchment whose runoff is routed.
        ctx: Runtime context providing the other subcatchments and the LID collaborator.
    """
    _route_to_subcatch(subcatch, ctx)
    _route_between_subareas(subcatch, ctx)


def _route_to_subcatch(subcatch: Subcatchment, ctx: RunoffContext) -> None:
    k = subcatch.out_subcatch
    if k is None or k == subcatch.index:
        return
    target = ctx.subcatchments[k]
    if target.area <= 0.0:
        return

    q = subcatch.old_runoff / target.area
    target.runon_inflows[subcatch.index] = q
    target.runon_loads[subcatch.index] = subcatch.old_runoff * subcatch.old_qual * LPERFT3
    logger.debug("Runon of %.6g ft/s from %s onto %s", q, subcatch.name, target.name)


def _route_between_subareas(subcatch: Subcatchment, ctx: RunoffContext) -> None:
    imperv0 = subcatch.subareas[SubareaType.IMPERV0]
    imperv1 = subcatch.subareas[SubareaType.IMPERV1]
    perv = subcatch.subareas[SubareaType.PERV]
    internal = np.zeros(len(subcatch.subareas))

    # Impervious to pervious
    if subcatch.frac_imperv < 1.0 and imperv0.route_to is RouteTo.PERV and perv.f_area > 0.0:
        q = imperv0.runoff * imperv0.f_area + imperv1.runoff * imperv1.f_area
        internal[SubareaType.PERV] += q * (1.0 - imperv0.f_outlet) / perv.f_area

    # Pervious to impervious
    if subcatch.frac_imperv > 0.0 and perv.route_to is RouteTo.IMPERV and imperv1.f_area > 0.0:
        internal[SubareaType.IMPERV1] += perv.runoff * (1.0 - perv.f_outlet) * perv.f_area / imperv1.f_area

    # LID return flow onto the pervious area
    if ctx.lid_active(subcatch) and subcatch.frac_imperv < 1.0:
        perv_area = perv.f_area * subcatch.non_lid_area
        if perv_area > 0.0:
            internal[SubareaType.PERV] += ctx.lid.get_flow_to_perv(subcatch.index) / perv_area

    for subarea, q in zip(subcatch.subareas, internal):
        subarea.internal_inflow = float(q)
