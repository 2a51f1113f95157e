"""Validated configuration for subcatchments.

This module defines the configuration containers and the builders that turn
them into runtime objects:
- RunoffOptions: engine-wide switches and integrator settings
- SubcatchmentConfig / SubareaConfig / CoverageConfig / LoadingConfig:
  one input row each, in US input units (acres, feet, inches, percent)
- read_*: tokenized input row readers reporting categorized ConfigurationErrors
- build_subcatchments: assembles validated Subcatchment objects
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import FT2PERACRE, INPERFT, MAX_ODE_STEPS, ODETOL
from .errors import ConfigurationError, ErrorCategory
from .types import LandFactor, RouteTo, Subarea, Subcatchment, SubareaType

logger = logging.getLogger(__name__)


class RunoffOptions(BaseModel):
    """Engine-wide runoff options.

    Attributes:
        ignore_snowmelt: Skip snowmelt even where snowpacks are defined.
        ignore_groundwater: Skip groundwater even where aquifers are defined.
        ignore_quality: Skip pollutant results.
        evap_dry_only: Only allow evaporation when there is no rainfall.
        ode_tolerance: Relative error tolerance of the ponded depth integrator.
        max_ode_steps: Maximum adaptive sub-steps per integration.
    """

    model_config = ConfigDict(frozen=True)

    ignore_snowmelt: bool = False
    ignore_groundwater: bool = False
    ignore_quality: bool = False
    evap_dry_only: bool = False
    ode_tolerance: float = Field(default=ODETOL, gt=0.0)
    max_ode_steps: int = Field(default=MAX_ODE_STEPS, gt=0)


@dataclass
class ObjectNames:
    """Name-to-index lookups for the objects subcatchment rows refer to."""

    subcatchments: dict[str, int] = field(default_factory=dict)
    gages: dict[str, int] = field(default_factory=dict)
    nodes: dict[str, int] = field(default_factory=dict)
    snowpacks: dict[str, int] = field(default_factory=dict)
    landuses: dict[str, int] = field(default_factory=dict)
    pollutants: dict[str, int] = field(default_factory=dict)


class SubcatchmentConfig(BaseModel):
    """Subcatchment properties.

    Attributes:
        name: Subcatchment name.
        gage: Rain gage name, or None.
        out_node: Outlet node name, or None.
        out_subcatch: Outlet subcatchment name, or None.
        area: Area [acres].
        pct_imperv: Impervious percentage [%].
        width: Characteristic width [ft].
        pct_slope: Slope [%].
        curb_length: Curb length [ft].
        snowpack: Snowpack name, or None.
        has_groundwater: Whether groundwater is modelled beneath the subcatchment.
        lid_area: Area occupied by LID units [acres].
    """

    model_config = ConfigDict(frozen=True)

    name: str
    gage: str | None = None
    out_node: str | None = None
    out_subcatch: str | None = None
    area: float = Field(gt=0.0)
    pct_imperv: float = Field(ge=0.0, le=100.0)
    width: float = Field(ge=0.0)
    pct_slope: float = Field(ge=0.0)
    curb_length: float = Field(default=0.0, ge=0.0)
    snowpack: str | None = None
    has_groundwater: bool = False
    lid_area: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def validate_outlet(self) -> SubcatchmentConfig:
        """Require an outlet node or an outlet subcatchment."""
        if self.out_node is None and self.out_subcatch is None:
            msg = f"subcatchment '{self.name}' has no outlet"
            raise ValueError(msg)
        return self


# Internal routing keywords
_ROUTE_WORDS: dict[str, RouteTo] = {
    "OUTLET": RouteTo.OUTLET,
    "IMPERV": RouteTo.IMPERV,
    "IMPERVIOUS": RouteTo.IMPERV,
    "PERV": RouteTo.PERV,
    "PERVIOUS": RouteTo.PERV,
}

# Sub-area property bounds for validation warnings
_SUBAREA_BOUNDS: dict[str, tuple[float, float]] = {
    "n_imperv": (0.0, 0.05),
    "n_perv": (0.0, 0.8),
    "s_imperv": (0.0, 0.25),
    "s_perv": (0.0, 0.5),
}


def _warn_if_outside_bounds(config: SubareaConfig) -> None:
    """Log warnings for sub-area properties outside typical ranges.

    This does not raise errors - values outside bounds may still be valid
    for unusual surfaces.
    """
    for name, (lower, upper) in _SUBAREA_BOUNDS.items():
        value = getattr(config, name)
        if value < lower or value > upper:
            logger.warning(
                "Subcatchment %s sub-area property %s=%.4f is outside typical range [%.2f, %.2f]",
                config.subcatch,
                name,
                value,
                lower,
                upper,
            )


class SubareaConfig(BaseModel):
    """Sub-area properties of one subcatchment.

    Attributes:
        subcatch: Subcatchment name.
        n_imperv: Manning's N of impervious area [-].
        n_perv: Manning's N of pervious area [-].
        s_imperv: Depression storage of impervious area [in].
        s_perv: Depression storage of pervious area [in].
        pct_zero: Percent of impervious area with no depression storage [%].
        route_to: Internal routing target.
        pct_routed: Percent of runoff routed internally [%].
    """

    model_config = ConfigDict(frozen=True)

    subcatch: str
    n_imperv: float = Field(ge=0.0)
    n_perv: float = Field(ge=0.0)
    s_imperv: float = Field(ge=0.0)
    s_perv: float = Field(ge=0.0)
    pct_zero: float = Field(ge=0.0, le=100.0)
    route_to: RouteTo = RouteTo.OUTLET
    pct_routed: float = Field(default=100.0, ge=0.0, le=100.0)

    @field_validator("route_to", mode="before")
    @classmethod
    def validate_route_to(cls, v: object) -> object:
        """Accept routing keywords as well as RouteTo values."""
        if isinstance(v, str):
            route_to = _ROUTE_WORDS.get(v.upper())
            if route_to is None:
                raise ValueError(f"invalid routing keyword '{v}'")
            return route_to
        return v

    def model_post_init(self, __context: object) -> None:
        _warn_if_outside_bounds(self)


class CoverageConfig(BaseModel):
    """Land use coverage of one subcatchment, in percent of its area."""

    model_config = ConfigDict(frozen=True)

    subcatch: str
    percents: dict[str, float]

    @field_validator("percents")
    @classmethod
    def validate_percents(cls, v: dict[str, float]) -> dict[str, float]:
        for landuse, pct in v.items():
            if not 0.0 <= pct <= 100.0:
                msg = f"coverage of land use '{landuse}' is {pct}%, must be within [0, 100]"
                raise ValueError(msg)
        return v


class LoadingConfig(BaseModel):
    """Initial pollutant buildup of one subcatchment [mass per acre]."""

    model_config = ConfigDict(frozen=True)

    subcatch: str
    loadings: dict[str, float]


# ---------------------------------------------------------------------------
# Tokenized input readers
# ---------------------------------------------------------------------------


def _get_double(token: str) -> float:
    try:
        return float(token)
    except ValueError as e:
        raise ConfigurationError(ErrorCategory.BAD_NUMBER, token) from e


def _get_nonneg(token: str) -> float:
    value = _get_double(token)
    if value < 0.0:
        raise ConfigurationError(ErrorCategory.BAD_NUMBER, token)
    return value


def _get_percent(token: str) -> float:
    value = _get_double(token)
    if not 0.0 <= value <= 100.0:
        raise ConfigurationError(ErrorCategory.BAD_PERCENT, token)
    return value


def _check_name(token: str, lookup: dict[str, int]) -> str:
    if token not in lookup:
        raise ConfigurationError(ErrorCategory.MISSING_OBJECT, token)
    return token


def _read_pairs(tokens: Sequence[str], lookup: dict[str, int], percent: bool) -> dict[str, float]:
    values: dict[str, float] = {}
    for k in range(1, len(tokens), 2):
        name = _check_name(tokens[k], lookup)
        if k + 1 >= len(tokens):
            raise ConfigurationError(ErrorCategory.TOO_FEW_ITEMS)
        values[name] = _get_percent(tokens[k + 1]) if percent else _get_double(tokens[k + 1])
    return values


def read_subcatch_params(tokens: Sequence[str], names: ObjectNames) -> SubcatchmentConfig:
    """Read a subcatchment row.

    Format: ``Name RainGage Outlet Area %Imperv Width %Slope CurbLength [Snowpack]``.
    A rain gage of ``*`` means no gage. The outlet may name a node or a
    subcatchment; a name matching both is kept and rejected later as ambiguous.

    Raises:
        ConfigurationError: On missing items, unknown names or invalid numbers.
    """
    if len(tokens) < 8:
        raise ConfigurationError(ErrorCategory.TOO_FEW_ITEMS)
    name = _check_name(tokens[0], names.subcatchments)
    gage = None if tokens[1] == "*" else _check_name(tokens[1], names.gages)

    out_node = tokens[2] if tokens[2] in names.nodes else None
    out_subcatch = tokens[2] if tokens[2] in names.subcatchments else None
    if out_node is None and out_subcatch is None:
        raise ConfigurationError(ErrorCategory.MISSING_OBJECT, tokens[2])

    area, pct_imperv, width, pct_slope, curb = (_get_nonneg(t) for t in tokens[3:8])
    if area == 0.0:
        raise ConfigurationError(ErrorCategory.BAD_NUMBER, tokens[3])
    if pct_imperv > 100.0:
        raise ConfigurationError(ErrorCategory.BAD_PERCENT, tokens[4])

    snowpack = _check_name(tokens[8], names.snowpacks) if len(tokens) > 8 else None

    return SubcatchmentConfig(
        name=name,
        gage=gage,
        out_node=out_node,
        out_subcatch=out_subcatch,
        area=area,
        pct_imperv=pct_imperv,
        width=width,
        pct_slope=pct_slope,
        curb_length=curb,
        snowpack=snowpack,
    )


def read_subarea_params(tokens: Sequence[str], names: ObjectNames) -> SubareaConfig:
    """Read a sub-area row.

    Format: ``Subcatch N-Imperv N-Perv S-Imperv S-Perv %Zero RouteTo [%Routed]``.

    Raises:
        ConfigurationError: On missing items, unknown names, invalid numbers or keywords.
    """
    if len(tokens) < 7:
        raise ConfigurationError(ErrorCategory.TOO_FEW_ITEMS)
    subcatch = _check_name(tokens[0], names.subcatchments)
    n_imperv, n_perv, s_imperv, s_perv, pct_zero = (_get_nonneg(t) for t in tokens[1:6])
    if pct_zero > 100.0:
        raise ConfigurationError(ErrorCategory.BAD_PERCENT, tokens[5])
    route_to = _ROUTE_WORDS.get(tokens[6].upper())
    if route_to is None:
        raise ConfigurationError(ErrorCategory.BAD_KEYWORD, tokens[6])
    pct_routed = _get_percent(tokens[7]) if len(tokens) >= 8 else 100.0

    return SubareaConfig(
        subcatch=subcatch,
        n_imperv=n_imperv,
        n_perv=n_perv,
        s_imperv=s_imperv,
        s_perv=s_perv,
        pct_zero=pct_zero,
        route_to=route_to,
        pct_routed=pct_routed,
    )


def read_landuse_params(tokens: Sequence[str], names: ObjectNames) -> CoverageConfig:
    """Read a coverage row: ``Subcatch Landuse Percent ... Landuse Percent``."""
    if len(tokens) < 3:
        raise ConfigurationError(ErrorCategory.TOO_FEW_ITEMS)
    subcatch = _check_name(tokens[0], names.subcatchments)
    return CoverageConfig(subcatch=subcatch, percents=_read_pairs(tokens, names.landuses, percent=True))


def read_init_buildup(tokens: Sequence[str], names: ObjectNames) -> LoadingConfig:
    """Read an initial loading row: ``Subcatch Pollutant Loading ... Pollutant Loading``."""
    if len(tokens) < 3:
        raise ConfigurationError(ErrorCategory.TOO_FEW_ITEMS)
    subcatch = _check_name(tokens[0], names.subcatchments)
    return LoadingConfig(subcatch=subcatch, loadings=_read_pairs(tokens, names.pollutants, percent=False))


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_subareas(frac_imperv: float, config: SubareaConfig | None) -> list[Subarea]:
    """Create the three sub-areas of a subcatchment.

    Runoff routed between sub-areas reduces the routing sub-areas' f_outlet to
    1 - pct_routed/100. Routing is forced to the outlet when the subcatchment
    is entirely pervious or entirely impervious.
    """
    if config is None:
        return [
            Subarea(kind=SubareaType.IMPERV0, f_area=0.0),
            Subarea(kind=SubareaType.IMPERV1, f_area=frac_imperv),
            Subarea(kind=SubareaType.PERV, f_area=1.0 - frac_imperv),
        ]

    f_zero = config.pct_zero / 100.0
    subareas = [
        Subarea(kind=SubareaType.IMPERV0, f_area=frac_imperv * f_zero, n=config.n_imperv, d_store=0.0),
        Subarea(
            kind=SubareaType.IMPERV1,
            f_area=frac_imperv * (1.0 - f_zero),
            n=config.n_imperv,
            d_store=config.s_imperv / INPERFT,
        ),
        Subarea(kind=SubareaType.PERV, f_area=1.0 - frac_imperv, n=config.n_perv, d_store=config.s_perv / INPERFT),
    ]

    route_to = config.route_to
    if route_to is not RouteTo.OUTLET and frac_imperv in (0.0, 1.0):
        logger.warning(
            "Subcatchment %s is %d%% impervious; internal routing to %s ignored",
            config.subcatch,
            round(100 * frac_imperv),
            route_to.name,
        )
        route_to = RouteTo.OUTLET

    f_outlet = 1.0 - config.pct_routed / 100.0
    if route_to is RouteTo.IMPERV:
        subareas[SubareaType.PERV].route_to = RouteTo.IMPERV
        subareas[SubareaType.PERV].f_outlet = f_outlet
    elif route_to is RouteTo.PERV:
        for kind in (SubareaType.IMPERV0, SubareaType.IMPERV1):
            subareas[kind].route_to = RouteTo.PERV
            subareas[kind].f_outlet = f_outlet
    return subareas


def build_subcatchments(
    configs: Sequence[SubcatchmentConfig],
    names: ObjectNames,
    subareas: Sequence[SubareaConfig] = (),
    coverages: Sequence[CoverageConfig] = (),
    loadings: Sequence[LoadingConfig] = (),
) -> list[Subcatchment]:
    """Build validated subcatchments ordered by their index in ``names``.

    Raises:
        ConfigurationError: If a row refers to an unknown subcatchment, an
            outlet is ambiguous, or LID area exceeds subcatchment area.
    """
    n_pollutants = len(names.pollutants)
    n_landuses = len(names.landuses)
    subarea_by_name = {c.subcatch: c for c in subareas}
    coverage_by_name = {c.subcatch: c for c in coverages}
    loading_by_name = {c.subcatch: c for c in loadings}
    for row_name in (*subarea_by_name, *coverage_by_name, *loading_by_name):
        _check_name(row_name, names.subcatchments)

    result: list[Subcatchment] = []
    for config in sorted(configs, key=lambda c: names.subcatchments[_check_name(c.name, names.subcatchments)]):
        frac_imperv = config.pct_imperv / 100.0

        land_factors = [LandFactor(fraction=0.0, buildup=np.zeros(n_pollutants)) for _ in range(n_landuses)]
        coverage = coverage_by_name.get(config.name)
        if coverage is not None:
            for landuse, pct in coverage.percents.items():
                land_factors[names.landuses[landuse]].fraction = pct / 100.0

        init_buildup = np.zeros(n_pollutants)
        loading = loading_by_name.get(config.name)
        if loading is not None:
            for pollut, value in loading.loadings.items():
                init_buildup[names.pollutants[pollut]] = value

        result.append(
            Subcatchment(
                name=config.name,
                index=names.subcatchments[config.name],
                area=config.area * FT2PERACRE,
                frac_imperv=frac_imperv,
                width=config.width,
                slope=config.pct_slope / 100.0,
                curb_length=config.curb_length,
                gage=None if config.gage is None else names.gages[config.gage],
                out_node=None if config.out_node is None else names.nodes[config.out_node],
                out_subcatch=None if config.out_subcatch is None else names.subcatchments[config.out_subcatch],
                has_snowpack=config.snowpack is not None,
                has_groundwater=config.has_groundwater,
                lid_area=config.lid_area * FT2PERACRE,
                n_pollutants=n_pollutants,
                subareas=make_subareas(frac_imperv, subarea_by_name.get(config.name)),
                land_factors=land_factors,
                init_buildup=init_buildup,
            )
        )
    logger.debug("Built %d subcatchments", len(result))
    return result
