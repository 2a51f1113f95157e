"""Reportable subcatchment results between two time steps.

Runoff, snow depth and runoff quality are blended linearly between the old
and new state; rainfall, loss rates and groundwater values are reported as
they are. Nothing here modifies model state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
import pandas as pd

from .constants import MIN_RUNOFF_FLOW
from .context import RunoffContext
from .types import Subcatchment


@dataclass(frozen=True)
class SubcatchResults:
    """Subcatchment results at a reporting time.

    Attributes:
        rainfall: Rainfall for the reporting period [ft/s].
        snow_depth: Snow depth [ft].
        evap_loss: Evaporation loss rate [ft/s].
        infil_loss: Infiltration loss rate [ft/s].
        runoff: Runoff leaving the subcatchment [cfs].
        gw_flow: Groundwater flow [cfs].
        gw_elev: Water table elevation [ft].
        soil_moisture: Upper zone moisture content [-].
        washoff: Runoff concentration per pollutant [mass/L].
    """

    rainfall: float = 0.0
    snow_depth: float = 0.0
    evap_loss: float = 0.0
    infil_loss: float = 0.0
    runoff: float = 0.0
    gw_flow: float = 0.0
    gw_elev: float = 0.0
    soil_moisture: float = 0.0
    washoff: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def to_dict(self) -> dict[str, float]:
        """Flatten to a dict with one washoff_<i> entry per pollutant."""
        d = {
            "rainfall": self.rainfall,
            "snow_depth": self.snow_depth,
            "evap_loss": self.evap_loss,
            "infil_loss": self.infil_loss,
            "runoff": self.runoff,
            "gw_flow": self.gw_flow,
            "gw_elev": self.gw_elev,
            "soil_moisture": self.soil_moisture,
        }
        for p, c in enumerate(self.washoff):
            d[f"washoff_{p}"] = float(c)
        return d


def get_wtd_outflow(subcatch: Subcatchment, f: float) -> float:
    """Runoff blended between the old (f = 0) and new (f = 1) state [cfs]."""
    if subcatch.area == 0.0:
        return 0.0
    return (1.0 - f) * subcatch.old_runoff + f * subcatch.new_runoff


def get_wtd_washoff(subcatch: Subcatchment, pollut: int, f: float) -> float:
    """Pollutant mass flux blended between the old and new state [mass/L * cfs]."""
    old_flux = subcatch.old_runoff * subcatch.old_qual[pollut]
    new_flux = subcatch.new_runoff * subcatch.new_qual[pollut]
    return (1.0 - f) * old_flux + f * new_flux


def get_results(subcatch: Subcatchment, ctx: RunoffContext, f: float) -> SubcatchResults:
    """Compute reportable results at a fraction f of the way through the current step.

    Args:
        subcatch: Subcatchment to report.
        ctx: Runtime context.
        f: Blend fraction between old (0) and new (1) state.

    Returns:
        SubcatchResults at the reporting time.
    """
    f1 = 1.0 - f

    rainfall = 0.0
    if subcatch.gage is not None and ctx.gages is not None:
        rainfall = ctx.gages.get_report_rainfall(subcatch.gage)

    snow_depth = f1 * subcatch.old_snow_depth + f * subcatch.new_snow_depth

    runoff = f1 * subcatch.old_runoff + f * subcatch.new_runoff
    if runoff < MIN_RUNOFF_FLOW:
        runoff = 0.0

    gw_flow = gw_elev = soil_moisture = 0.0
    if ctx.groundwater_active(subcatch):
        gw_flow, gw_elev, soil_moisture = ctx.groundwater.get_results(subcatch.index)

    washoff = np.zeros(0)
    if not ctx.options.ignore_quality:
        if runoff < MIN_RUNOFF_FLOW:
            washoff = np.zeros(subcatch.n_pollutants)
        else:
            washoff = f1 * subcatch.old_qual + f * subcatch.new_qual

    return SubcatchResults(
        rainfall=rainfall,
        snow_depth=snow_depth,
        evap_loss=subcatch.evap_loss,
        infil_loss=subcatch.infil_loss,
        runoff=runoff,
        gw_flow=gw_flow,
        gw_elev=gw_elev,
        soil_moisture=soil_moisture,
        washoff=washoff,
    )


def results_to_dataframe(times: Sequence[datetime], results: Sequence[SubcatchResults]) -> pd.DataFrame:
    """Collect a subcatchment's results into a time-indexed DataFrame."""
    if len(times) != len(results):
        msg = f"times and results must have the same length, got {len(times)} and {len(results)}"
        raise ValueError(msg)
    df = pd.DataFrame([r.to_dict() for r in results], index=pd.DatetimeIndex(times, name="time"))
    return df
