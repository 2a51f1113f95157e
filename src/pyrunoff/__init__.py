"""pyrunoff: subcatchment runoff and pollutant washoff engine.

Converts precipitation on urban and natural land surfaces into surface
runoff and pollutant loads using a nonlinear reservoir per sub-area, with
runon routing between subcatchments and land use buildup and washoff.
"""

from pyrunoff.config import (
    CoverageConfig,
    LoadingConfig,
    ObjectNames,
    RunoffOptions,
    SubareaConfig,
    SubcatchmentConfig,
    build_subcatchments,
    read_init_buildup,
    read_landuse_params,
    read_subarea_params,
    read_subcatch_params,
)
from pyrunoff.context import RunoffContext
from pyrunoff.errors import ConfigurationError, ErrorCategory, IntegrationError, RunoffError
from pyrunoff.landuse import (
    BuildupFunction,
    BuildupType,
    Landuse,
    LanduseModel,
    Normalizer,
    WashoffFunction,
    WashoffType,
)
from pyrunoff.massbal import LoadType, MassBalance, SubcatchStats
from pyrunoff.quality import get_buildup, get_washoff, sweep_buildup
from pyrunoff.results import SubcatchResults, get_results, get_wtd_outflow, get_wtd_washoff, results_to_dataframe
from pyrunoff.runoff import (
    RunoffResult,
    commit_old_state,
    compute_runoff,
    get_depth,
    get_frac_perv,
    get_storage,
    init_state,
)
from pyrunoff.runon import route_runon
from pyrunoff.types import LandFactor, Pollutant, RouteTo, Subarea, SubareaType, Subcatchment

__all__ = [
    "BuildupFunction",
    "BuildupType",
    "ConfigurationError",
    "CoverageConfig",
    "ErrorCategory",
    "IntegrationError",
    "LandFactor",
    "Landuse",
    "LanduseModel",
    "LoadType",
    "LoadingConfig",
    "MassBalance",
    "Normalizer",
    "ObjectNames",
    "Pollutant",
    "RouteTo",
    "RunoffContext",
    "RunoffError",
    "RunoffOptions",
    "RunoffResult",
    "SubareaConfig",
    "SubareaType",
    "Subarea",
    "SubcatchResults",
    "SubcatchStats",
    "Subcatchment",
    "SubcatchmentConfig",
    "WashoffFunction",
    "WashoffType",
    "build_subcatchments",
    "commit_old_state",
    "compute_runoff",
    "get_buildup",
    "get_depth",
    "get_frac_perv",
    "get_results",
    "get_storage",
    "get_washoff",
    "get_wtd_outflow",
    "get_wtd_washoff",
    "init_state",
    "read_init_buildup",
    "read_landuse_params",
    "read_subarea_params",
    "read_subcatch_params",
    "results_to_dataframe",
    "route_runon",
    "sweep_buildup",
]
