"""Global conservation ledger and per-subcatchment statistics.

Default implementations of the MassBalanceLedger and StatisticsSink
collaborators. Both only accumulate; reporting is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum

import numpy as np


class LoadType(IntEnum):
    """Pollutant loading categories tracked by the mass balance."""

    BUILDUP = 0
    DEPOSITION = 1
    SWEEPING = 2
    BMP_REMOVAL = 3
    INFILTRATION = 4
    RUNOFF = 5
    FINAL = 6


@dataclass
class RunoffTotals:
    """Cumulative surface runoff volumes [ft3]."""

    rainfall: float = 0.0
    evap: float = 0.0
    infil: float = 0.0
    runoff: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class MassBalance:
    """Accumulates system-wide runoff volumes and pollutant loadings.

    Args:
        n_pollutants: Number of pollutants tracked.
    """

    def __init__(self, n_pollutants: int = 0) -> None:
        self.runoff_totals = RunoffTotals()
        self.loading_totals = np.zeros((len(LoadType), n_pollutants), dtype=np.float64)

    def update_runoff_totals(self, rain_vol: float, evap_vol: float, infil_vol: float, outflow_vol: float) -> None:
        """Add one subcatchment's step volumes [ft3] to the running totals."""
        self.runoff_totals.rainfall += rain_vol
        self.runoff_totals.evap += evap_vol
        self.runoff_totals.infil += infil_vol
        self.runoff_totals.runoff += outflow_vol

    def update_loading_totals(self, load_type: LoadType, pollut: int, mass: float) -> None:
        """Add a pollutant mass to a loading category."""
        self.loading_totals[load_type, pollut] += mass

    def get_loading(self, load_type: LoadType) -> np.ndarray:
        """Return cumulative mass per pollutant for a loading category."""
        return self.loading_totals[load_type].copy()

    def get_runoff_error(self, init_storage: float, final_storage: float) -> float:
        """Percent continuity error of surface runoff.

        Args:
            init_storage: Surface storage at the start of the run [ft3].
            final_storage: Surface storage at the end of the run [ft3].

        Returns:
            100 * (inflow - outflow - storage change) / inflow, or 0 if there is no inflow.
        """
        totals = self.runoff_totals
        total_inflow = totals.rainfall + init_storage
        total_outflow = totals.evap + totals.infil + totals.runoff + final_storage
        if total_inflow <= 0.0:
            return 0.0
        return 100.0 * (1.0 - total_outflow / total_inflow)


class SubcatchStats:
    """Per-subcatchment cumulative water balance statistics.

    Args:
        n_subcatch: Number of subcatchments.
    """

    def __init__(self, n_subcatch: int) -> None:
        self.precip = np.zeros(n_subcatch)
        self.runon = np.zeros(n_subcatch)
        self.evap = np.zeros(n_subcatch)
        self.infil = np.zeros(n_subcatch)
        self.runoff = np.zeros(n_subcatch)
        self.max_flow = np.zeros(n_subcatch)

    def update_subcatch_stats(
        self,
        subcatch: int,
        rain_vol: float,
        runon_vol: float,
        evap_vol: float,
        infil_vol: float,
        runoff_vol: float,
        runoff: float,
    ) -> None:
        """Record one step of a subcatchment's water balance (volumes in ft3, runoff in cfs)."""
        self.precip[subcatch] += rain_vol
        self.runon[subcatch] += runon_vol
        self.evap[subcatch] += evap_vol
        self.infil[subcatch] += infil_vol
        self.runoff[subcatch] += runoff_vol
        self.max_flow[subcatch] = max(self.max_flow[subcatch], runoff)
