"""Subcatchment data structures.

This module defines the objects the runoff engine operates on:
- SubareaType / RouteTo: closed enumerations for sub-area kind and routing target
- Subarea: one of the three runoff-generating zones of a subcatchment
- LandFactor: per land use buildup bookkeeping
- Pollutant: static pollutant properties used by washoff
- Subcatchment: structural properties plus double-buffered per-step state
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum

import numpy as np

from .constants import MCOEFF, N_SUBAREAS
from .errors import ConfigurationError, ErrorCategory

logger = logging.getLogger(__name__)


class SubareaType(IntEnum):
    """Kind of sub-area; the value is the sub-area's index in its subcatchment."""

    IMPERV0 = 0  # Impervious without depression storage
    IMPERV1 = 1  # Impervious with depression storage
    PERV = 2  # Pervious

    @property
    def is_impervious(self) -> bool:
        return self is not SubareaType.PERV


class RouteTo(IntEnum):
    """Where a sub-area's runoff is sent."""

    OUTLET = 0
    IMPERV = 1
    PERV = 2


@dataclass
class Subarea:
    """A homogeneous runoff-generating zone of a subcatchment.

    Attributes:
        kind: Sub-area type.
        f_area: Fraction of the subcatchment's non-LID area [-].
        n: Manning's roughness [-]. Zero means runoff drains without routing.
        d_store: Depression storage depth [ft].
        route_to: Routing target of the non-outlet share of runoff.
        f_outlet: Fraction of runoff sent to the subcatchment outlet [-].
        alpha: Nonlinear reservoir coefficient [ft^(-2/3)/s], see compute_alpha.
        depth: Ponded depth [ft].
        inflow: Inflow rate for the current step [ft/s].
        runoff: Runoff rate [ft/s].
        internal_inflow: Runoff received from sibling sub-areas and LID
            return flow, assigned by the runon router [ft/s].
    """

    kind: SubareaType
    f_area: float = 0.0
    n: float = 0.0
    d_store: float = 0.0
    route_to: RouteTo = RouteTo.OUTLET
    f_outlet: float = 1.0
    alpha: float = 0.0

    # Per-step state
    depth: float = 0.0
    inflow: float = 0.0
    runoff: float = 0.0
    internal_inflow: float = 0.0

    def reset(self) -> None:
        """Clear ponded depth and flows."""
        self.depth = 0.0
        self.inflow = 0.0
        self.runoff = 0.0
        self.internal_inflow = 0.0


@dataclass
class LandFactor:
    """Land use coverage of a subcatchment and its pollutant buildup.

    Attributes:
        fraction: Fraction of subcatchment area covered by the land use [-].
        buildup: Pollutant mass built up on the land use, one entry per pollutant.
        last_swept: Time the land use was last swept.
    """

    fraction: float
    buildup: np.ndarray
    last_swept: datetime | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.fraction <= 1.0:
            raise ConfigurationError(ErrorCategory.BAD_PERCENT, f"{100.0 * self.fraction:g}")
        self.buildup = np.asarray(self.buildup, dtype=np.float64)


@dataclass(frozen=True)
class Pollutant:
    """Pollutant properties used by the washoff engine.

    Attributes:
        name: Pollutant name.
        ppt_concen: Concentration in rainfall [mass/L].
        mcf: Factor converting mass to reporting mass units [-].
        snow_only: Buildup only occurs while snow is present.
        co_pollut: Index of the co-pollutant, if any.
        co_fraction: Fraction of the co-pollutant's washoff added to this one [-].
    """

    name: str
    ppt_concen: float = 0.0
    mcf: float = 1.0
    snow_only: bool = False
    co_pollut: int | None = None
    co_fraction: float = 0.0


def _default_subareas(frac_imperv: float) -> list[Subarea]:
    return [
        Subarea(kind=SubareaType.IMPERV0, f_area=0.0),
        Subarea(kind=SubareaType.IMPERV1, f_area=frac_imperv),
        Subarea(kind=SubareaType.PERV, f_area=1.0 - frac_imperv),
    ]


@dataclass
class Subcatchment:
    """A land unit that converts precipitation into runoff.

    Structural fields are fixed after configuration. The old_/new_ pairs are
    double buffered: a time step only writes the new_ values and
    commit_old_state copies them into old_ once the step is complete.

    Attributes:
        name: Subcatchment name.
        index: Position of the subcatchment in the project's subcatchment list.
        area: Total area [ft2].
        frac_imperv: Impervious fraction [-].
        width: Characteristic overland flow width [ft].
        slope: Average surface slope [ft/ft].
        curb_length: Total curb length [user length units].
        gage: Index of the linked rain gage, if any.
        out_node: Index of the outlet conveyance node, if any.
        out_subcatch: Index of the outlet subcatchment, if any.
        has_snowpack: Whether a snowpack is attached.
        has_groundwater: Whether a groundwater object is attached.
        lid_area: Area occupied by LID units [ft2].
        n_pollutants: Number of pollutants tracked.
        subareas: The three sub-areas, ordered by SubareaType.
        land_factors: Land use coverage, one entry per land use.
        init_buildup: Initial buildup loading per pollutant [mass per unit area],
            zero where buildup comes from antecedent dry days.
    """

    name: str
    index: int
    area: float
    frac_imperv: float
    width: float
    slope: float
    curb_length: float = 0.0
    gage: int | None = None
    out_node: int | None = None
    out_subcatch: int | None = None
    has_snowpack: bool = False
    has_groundwater: bool = False
    lid_area: float = 0.0
    n_pollutants: int = 0
    subareas: list[Subarea] = field(default_factory=list)
    land_factors: list[LandFactor] = field(default_factory=list)
    init_buildup: np.ndarray | None = None

    # Per-step state
    rainfall: float = field(default=0.0, init=False)  # [ft/s]
    old_runoff: float = field(default=0.0, init=False)  # [cfs]
    new_runoff: float = field(default=0.0, init=False)  # [cfs]
    old_snow_depth: float = field(default=0.0, init=False)  # [ft]
    new_snow_depth: float = field(default=0.0, init=False)  # [ft]
    evap_loss: float = field(default=0.0, init=False)  # [ft/s]
    infil_loss: float = field(default=0.0, init=False)  # [ft/s]
    old_qual: np.ndarray = field(init=False)  # [mass/L]
    new_qual: np.ndarray = field(init=False)  # [mass/L]
    ponded_qual: np.ndarray = field(init=False)  # [mass]
    total_load: np.ndarray = field(init=False)  # [reporting mass]

    # Runon received this step, keyed by the index of the upstream subcatchment
    runon_inflows: dict[int, float] = field(default_factory=dict, init=False)  # [ft/s]
    runon_loads: dict[int, np.ndarray] = field(default_factory=dict, init=False)  # [mass/s]

    def __post_init__(self) -> None:
        if not self.subareas:
            self.subareas = _default_subareas(self.frac_imperv)
        if len(self.subareas) != N_SUBAREAS:
            msg = f"subcatchment '{self.name}' must have {N_SUBAREAS} sub-areas, got {len(self.subareas)}"
            raise ValueError(msg)
        if self.init_buildup is None:
            self.init_buildup = np.zeros(self.n_pollutants)
        self.old_qual = np.zeros(self.n_pollutants)
        self.new_qual = np.zeros(self.n_pollutants)
        self.ponded_qual = np.zeros(self.n_pollutants)
        self.total_load = np.zeros(self.n_pollutants)
        validate_subcatchment(self)

    def __getitem__(self, kind: SubareaType) -> Subarea:
        return self.subareas[kind]

    @property
    def non_lid_area(self) -> float:
        """Area not occupied by LID units [ft2]."""
        return self.area - self.lid_area

    @property
    def runon(self) -> float:
        """Total runon rate from upstream subcatchments [ft/s]."""
        return sum(self.runon_inflows.values(), 0.0)

    @property
    def runon_load(self) -> np.ndarray:
        """Total pollutant mass flux carried in by runon [mass/s]."""
        load = np.zeros(self.n_pollutants)
        for w in self.runon_loads.values():
            load += w
        return load

    @property
    def drains_to_network(self) -> bool:
        """True if runoff leaves the land surface (to a node or to itself as outlet).

        Runoff sent to another subcatchment is still in transit and is excluded
        from system outflow totals.
        """
        return self.out_node is not None or self.out_subcatch == self.index


def compute_alpha(subcatch: Subcatchment) -> None:
    """Compute the nonlinear reservoir coefficient of each sub-area.

    alpha = 1.49 * W / A * sqrt(S) / N. Both impervious sub-areas use the total
    non-LID impervious area as A, the pervious sub-area the non-LID pervious area.
    """
    non_lid_area = subcatch.non_lid_area
    for subarea in subcatch.subareas:
        if subarea.kind.is_impervious:
            area = subcatch.frac_imperv * non_lid_area
        else:
            area = (1.0 - subcatch.frac_imperv) * non_lid_area
        subarea.alpha = 0.0
        if area > 0.0 and subarea.n > 0.0:
            subarea.alpha = MCOEFF * subcatch.width / area * math.sqrt(subcatch.slope) / subarea.n


def validate_subcatchment(subcatch: Subcatchment) -> None:
    """Check structural consistency and recompute alpha.

    Raises:
        ConfigurationError: If the area is not positive, both outlet kinds
            are set or the LID area exceeds the subcatchment area.
    """
    if not subcatch.area > 0.0:
        raise ConfigurationError(ErrorCategory.BAD_NUMBER, f"area of {subcatch.name}")
    if subcatch.out_node is not None and subcatch.out_subcatch is not None:
        raise ConfigurationError(ErrorCategory.AMBIGUOUS_OUTLET, subcatch.name)
    if subcatch.lid_area > subcatch.area:
        raise ConfigurationError(ErrorCategory.BAD_LID_AREA, subcatch.name)
    for i, subarea in enumerate(subcatch.subareas):
        if subarea.kind != i:
            msg = f"subcatchment '{subcatch.name}' sub-areas must be ordered by SubareaType"
            raise ValueError(msg)
    if subcatch.out_node is None and subcatch.out_subcatch is None:
        logger.warning("Subcatchment '%s' has no outlet; its runoff leaves the system", subcatch.name)
    compute_alpha(subcatch)
