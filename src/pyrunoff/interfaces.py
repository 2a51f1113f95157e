"""Capabilities the runoff engine consumes from the rest of the simulator.

Rain gages, snowpacks, infiltration, groundwater, LID units and land uses are
modelled elsewhere; the engine only talks to them through these protocols.
All rates are in ft/s, flows in cfs and volumes in ft3. Subcatchments and
gages are identified by their list index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, Protocol

import numpy as np

if TYPE_CHECKING:
    from .massbal import LoadType
    from .types import LandFactor, SubareaType


class GageModel(Protocol):
    """Rain gage time series."""

    def get_precip(self, gage: int) -> tuple[float, float]:
        """Return current (rainfall, snowfall) rates [ft/s]."""
        ...

    def get_report_rainfall(self, gage: int) -> float:
        """Return rainfall for the current reporting period [ft/s]."""
        ...


class RainfallOverride(Protocol):
    """Externally supplied rainfall that replaces gage rainfall."""

    def get_direct_rainfall(self, subcatch: int) -> float | None:
        """Return the rainfall rate [ft/s] for a subcatchment, or None if not overridden."""
        ...


class SnowModel(Protocol):
    """Snowpack accumulation and melt."""

    def init_snowpack(self, subcatch: int) -> None: ...

    def get_snowmelt(self, subcatch: int, rainfall: float, snowfall: float, t_step: float) -> tuple[float, np.ndarray]:
        """Return (new snow depth [ft], net precipitation per sub-area type [ft/s])."""
        ...

    def get_subarea_snow_depth(self, subcatch: int, kind: SubareaType) -> float:
        """Return snow water depth on one sub-area type [ft]."""
        ...


class InfiltrationModel(Protocol):
    """Pervious area infiltration."""

    def init_state(self, subcatch: int) -> None: ...

    def get_infil(self, subcatch: int, t_step: float, precip: float, inflow: float, depth: float) -> float:
        """Return the infiltration rate [ft/s]."""
        ...


class GroundwaterModel(Protocol):
    """Two-zone groundwater beneath a subcatchment."""

    def init_state(self, subcatch: int) -> None: ...

    def get_max_infil_vol(self, subcatch: int) -> float:
        """Return the void volume per unit area available to infiltration [ft]."""
        ...

    def get_groundwater(self, subcatch: int, perv_evap_vol: float, infil_vol: float, t_step: float) -> None:
        """Advance groundwater one step given pervious evaporation and infiltration [ft3]."""
        ...

    def get_results(self, subcatch: int) -> tuple[float, float, float]:
        """Return (flow [cfs], water table elevation [ft], upper zone moisture [-])."""
        ...


class LidFluxes(NamedTuple):
    """Flows and volumes contributed by a subcatchment's LID units over one step."""

    runoff: float  # Total runoff generated [cfs]
    outflow: float  # Runoff leaving the subcatchment [cfs]
    evap_vol: float  # [ft3]
    perv_evap_vol: float  # [ft3]
    infil_vol: float  # [ft3]


class LidModel(Protocol):
    """Low impact development units placed in a subcatchment."""

    def get_runoff(self, subcatch: int, t_step: float) -> LidFluxes: ...

    def get_flow_to_perv(self, subcatch: int) -> float:
        """Return LID outflow returned onto the pervious area [cfs]."""
        ...

    def get_stored_volume(self, subcatch: int) -> float:
        """Return water stored in the LID units [ft3]."""
        ...

    def get_surface_depth(self, subcatch: int) -> float:
        """Return ponded surface depth over the LID units [ft]."""
        ...

    def get_perv_area(self, subcatch: int) -> float:
        """Return pervious area of the LID units [ft2]."""
        ...


class LanduseModelProtocol(Protocol):
    """Land use buildup, washoff and sweeping parameters.

    Land areas passed to buildup functions are in acres; curb lengths are in
    user length units.
    """

    def get_init_buildup(
        self, landuse: int, pollut: int, area: float, curb: float, init_loading: float, start_dry_days: float
    ) -> float: ...

    def get_buildup(self, landuse: int, pollut: int, area: float, curb: float, buildup: float, t_step: float) -> float:
        """Return buildup mass after t_step seconds."""
        ...

    def get_washoff(
        self,
        landuse: int,
        area: float,
        land_factors: list[LandFactor],
        runoff: float,
        t_step: float,
        washoff_load: np.ndarray,
    ) -> None:
        """Add each pollutant's washoff mass over t_step into washoff_load, depleting buildup."""
        ...

    def get_co_pollut_load(self, pollut: int, washoff_load: np.ndarray) -> float: ...

    def get_avg_bmp_effic(self, land_factors: list[LandFactor], pollut: int) -> float: ...

    def get_sweep_params(self, landuse: int) -> tuple[float, float]:
        """Return (sweep interval [days], fraction of buildup available for removal)."""
        ...

    def get_sweep_effic(self, landuse: int, pollut: int) -> float:
        """Return the street sweeping removal efficiency of a pollutant [-]."""
        ...

    def get_sweep_days0(self, landuse: int) -> float:
        """Return days since last sweeping at the start of the simulation."""
        ...


class MassBalanceLedger(Protocol):
    """System-wide conservation totals."""

    def update_runoff_totals(self, rain_vol: float, evap_vol: float, infil_vol: float, outflow_vol: float) -> None: ...

    def update_loading_totals(self, load_type: LoadType, pollut: int, mass: float) -> None: ...


class StatisticsSink(Protocol):
    """Per-subcatchment reporting statistics."""

    def update_subcatch_stats(
        self,
        subcatch: int,
        rain_vol: float,
        runon_vol: float,
        evap_vol: float,
        infil_vol: float,
        runoff_vol: float,
        runoff: float,
    ) -> None: ...


class NoInfiltration:
    """Infiltration model for projects without pervious losses."""

    def init_state(self, subcatch: int) -> None:
        return None

    def get_infil(self, subcatch: int, t_step: float, precip: float, inflow: float, depth: float) -> float:
        return 0.0
