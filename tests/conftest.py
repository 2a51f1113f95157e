"""Shared fixtures: small fakes for the collaborators the runoff engine consumes."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest

from pyrunoff.constants import FT2PERACRE
from pyrunoff.context import RunoffContext
from pyrunoff.interfaces import LidFluxes
from pyrunoff.types import RouteTo, Subarea, Subcatchment, SubareaType

# 1 in/hr in ft/s
IN_PER_HR = 1.0 / 12.0 / 3600.0


class FakeGages:
    """Every gage reports the same rain and snow rates."""

    def __init__(self, rain: float = 0.0, snow: float = 0.0) -> None:
        self.rain = rain
        self.snow = snow

    def get_precip(self, gage: int) -> tuple[float, float]:
        return self.rain, self.snow

    def get_report_rainfall(self, gage: int) -> float:
        return self.rain


class FakeRainfallOverride:
    def __init__(self, rates: dict[int, float]) -> None:
        self.rates = rates

    def get_direct_rainfall(self, subcatch: int) -> float | None:
        return self.rates.get(subcatch)


class FakeSnow:
    """Returns fixed melt and snow depths."""

    def __init__(self, depth: float = 0.0, melt: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> None:
        self.depth = depth
        self.melt = np.array(melt)
        self.subarea_depth = 0.0
        self.initialized: list[int] = []

    def init_snowpack(self, subcatch: int) -> None:
        self.initialized.append(subcatch)

    def get_snowmelt(self, subcatch: int, rainfall: float, snowfall: float, t_step: float) -> tuple[float, np.ndarray]:
        return self.depth, self.melt.copy()

    def get_subarea_snow_depth(self, subcatch: int, kind: SubareaType) -> float:
        return self.subarea_depth


class ConstantInfiltration:
    """Infiltration at a constant capacity rate."""

    def __init__(self, rate: float = 0.0) -> None:
        self.rate = rate
        self.initialized: list[int] = []

    def init_state(self, subcatch: int) -> None:
        self.initialized.append(subcatch)

    def get_infil(self, subcatch: int, t_step: float, precip: float, inflow: float, depth: float) -> float:
        return self.rate


class FakeGroundwater:
    """Records the volumes it is advanced with."""

    def __init__(self, max_infil_vol: float = 1.0e6, results: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> None:
        self.max_infil_vol = max_infil_vol
        self.results = results
        self.calls: list[tuple[int, float, float, float]] = []
        self.initialized: list[int] = []

    def init_state(self, subcatch: int) -> None:
        self.initialized.append(subcatch)

    def get_max_infil_vol(self, subcatch: int) -> float:
        return self.max_infil_vol

    def get_groundwater(self, subcatch: int, perv_evap_vol: float, infil_vol: float, t_step: float) -> None:
        self.calls.append((subcatch, perv_evap_vol, infil_vol, t_step))

    def get_results(self, subcatch: int) -> tuple[float, float, float]:
        return self.results


class FakeLid:
    """LID units with fixed fluxes and storage."""

    def __init__(
        self,
        fluxes: LidFluxes | None = None,
        flow_to_perv: float = 0.0,
        stored_volume: float = 0.0,
        surface_depth: float = 0.0,
        perv_area: float = 0.0,
    ) -> None:
        self.fluxes = fluxes or LidFluxes(runoff=0.0, outflow=0.0, evap_vol=0.0, perv_evap_vol=0.0, infil_vol=0.0)
        self.flow_to_perv = flow_to_perv
        self.stored_volume = stored_volume
        self.surface_depth = surface_depth
        self.perv_area = perv_area

    def get_runoff(self, subcatch: int, t_step: float) -> LidFluxes:
        return self.fluxes

    def get_flow_to_perv(self, subcatch: int) -> float:
        return self.flow_to_perv

    def get_stored_volume(self, subcatch: int) -> float:
        return self.stored_volume

    def get_surface_depth(self, subcatch: int) -> float:
        return self.surface_depth

    def get_perv_area(self, subcatch: int) -> float:
        return self.perv_area


class FakeLanduse:
    """Land use model with a fixed buildup increment, washoff mass and sweeping."""

    def __init__(
        self,
        buildup_increment: float = 0.0,
        washoff_mass: float = 0.0,
        sweep_interval: float = 0.0,
        sweep_removal: float = 0.0,
        sweep_effic: float = 0.0,
        bmp_effic: float = 0.0,
        sweep_days0: float = 0.0,
    ) -> None:
        self.buildup_increment = buildup_increment
        self.washoff_mass = washoff_mass
        self.sweep_interval = sweep_interval
        self.sweep_removal = sweep_removal
        self.sweep_effic = sweep_effic
        self.bmp_effic = bmp_effic
        self.sweep_days0 = sweep_days0
        self.washoff_runoff: list[float] = []

    def get_init_buildup(self, landuse, pollut, area, curb, init_loading, start_dry_days) -> float:
        return init_loading * area

    def get_buildup(self, landuse, pollut, area, curb, buildup, t_step) -> float:
        return buildup + self.buildup_increment

    def get_washoff(self, landuse, area, land_factors, runoff, t_step, washoff_load) -> None:
        self.washoff_runoff.append(runoff)
        washoff_load += self.washoff_mass

    def get_co_pollut_load(self, pollut, washoff_load) -> float:
        return 0.0

    def get_avg_bmp_effic(self, land_factors, pollut) -> float:
        return self.bmp_effic

    def get_sweep_params(self, landuse) -> tuple[float, float]:
        return self.sweep_interval, self.sweep_removal

    def get_sweep_effic(self, landuse, pollut) -> float:
        return self.sweep_effic

    def get_sweep_days0(self, landuse) -> float:
        return self.sweep_days0


class RecordingStats:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def update_subcatch_stats(self, subcatch, rain_vol, runon_vol, evap_vol, infil_vol, runoff_vol, runoff) -> None:
        self.calls.append((subcatch, rain_vol, runon_vol, evap_vol, infil_vol, runoff_vol, runoff))


def build_subcatch(
    name: str = "S1",
    index: int = 0,
    area_acres: float = 1.0,
    frac_imperv: float = 0.5,
    width: float = 200.0,
    slope: float = 0.01,
    n_imperv: float = 0.0,
    n_perv: float = 0.0,
    s_imperv: float = 0.0,
    s_perv: float = 0.0,
    frac_zero: float = 0.0,
    gage: int | None = 0,
    out_node: int | None = None,
    out_subcatch: int | None = None,
    **kwargs,
) -> Subcatchment:
    """Build a subcatchment with explicit sub-area properties (storage in ft)."""
    if out_node is None and out_subcatch is None:
        out_node = 0
    subareas = [
        Subarea(kind=SubareaType.IMPERV0, f_area=frac_imperv * frac_zero, n=n_imperv, d_store=0.0),
        Subarea(kind=SubareaType.IMPERV1, f_area=frac_imperv * (1.0 - frac_zero), n=n_imperv, d_store=s_imperv),
        Subarea(kind=SubareaType.PERV, f_area=1.0 - frac_imperv, n=n_perv, d_store=s_perv, route_to=RouteTo.OUTLET),
    ]
    return Subcatchment(
        name=name,
        index=index,
        area=area_acres * FT2PERACRE,
        frac_imperv=frac_imperv,
        width=width,
        slope=slope,
        gage=gage,
        out_node=out_node,
        out_subcatch=out_subcatch,
        subareas=subareas,
        **kwargs,
    )


@pytest.fixture
def make_subcatch() -> Callable[..., Subcatchment]:
    """Factory for subcatchments with explicit sub-area properties."""
    return build_subcatch


@pytest.fixture
def gages() -> FakeGages:
    return FakeGages()


@pytest.fixture
def make_context(gages: FakeGages) -> Callable[..., RunoffContext]:
    """Factory for a RunoffContext around the given subcatchments, wired to the gages fixture."""

    def _make(subcatchments: list[Subcatchment], **kwargs) -> RunoffContext:
        kwargs.setdefault("gages", gages)
        return RunoffContext(subcatchments=subcatchments, **kwargs)

    return _make


@pytest.fixture
def fakes() -> dict[str, type]:
    """Collaborator fake classes, for tests that configure their own instances."""
    return {
        "rainfall_override": FakeRainfallOverride,
        "snow": FakeSnow,
        "infiltration": ConstantInfiltration,
        "groundwater": FakeGroundwater,
        "lid": FakeLid,
        "landuse": FakeLanduse,
        "stats": RecordingStats,
    }
