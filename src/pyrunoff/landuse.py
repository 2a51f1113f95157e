"""Reference land use model: pollutant buildup, washoff and sweeping.

Land uses carry one buildup function and one washoff function per pollutant:

- Buildup: POW (power law), EXP (exponential) or SAT (saturation) in time,
  normalized per acre of land or per unit of curb length and capped at a
  maximum buildup.
- Washoff: EXP (proportional to runoff and remaining buildup), RC (rating
  curve in runoff flow) or EMC (event mean concentration).

Washoff removes mass from buildup; land uses without a buildup function for
a pollutant produce unlimited RC/EMC washoff.
"""

from __future__ import annotations

import logging
import math
from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .constants import INPERFT, LPERFT3, SECPERDAY, SECPERHOUR
from .interfaces import MassBalanceLedger
from .massbal import LoadType
from .types import LandFactor, Pollutant

logger = logging.getLogger(__name__)


class BuildupType(str, Enum):
    """Buildup function shape."""

    NONE = "NONE"
    POW = "POW"
    EXP = "EXP"
    SAT = "SAT"


class Normalizer(str, Enum):
    """Quantity buildup is normalized by."""

    AREA = "AREA"
    CURB = "CURB"


class WashoffType(str, Enum):
    """Washoff function shape."""

    NONE = "NONE"
    EXP = "EXP"
    RC = "RC"
    EMC = "EMC"


class BuildupFunction(BaseModel):
    """Buildup of one pollutant on one land use.

    Attributes:
        kind: Function shape.
        max_buildup: Maximum buildup [mass per normalizer unit].
        rate: Rate constant (POW, EXP) [1/days for EXP].
        power: Time exponent (POW) or half-saturation constant (SAT) [days].
        normalizer: Whether buildup is per acre or per curb length.
    """

    model_config = ConfigDict(frozen=True)

    kind: BuildupType = BuildupType.NONE
    max_buildup: float = Field(default=0.0, ge=0.0)
    rate: float = Field(default=0.0, ge=0.0)
    power: float = Field(default=0.0, ge=0.0)
    normalizer: Normalizer = Normalizer.AREA


class WashoffFunction(BaseModel):
    """Washoff of one pollutant from one land use.

    Attributes:
        kind: Function shape.
        coeff: Washoff coefficient (or concentration for EMC).
        expon: Runoff exponent.
        sweep_effic: Street sweeping removal efficiency [-].
        bmp_effic: BMP removal efficiency [-].
    """

    model_config = ConfigDict(frozen=True)

    kind: WashoffType = WashoffType.NONE
    coeff: float = Field(default=0.0, ge=0.0)
    expon: float = Field(default=0.0, ge=0.0)
    sweep_effic: float = Field(default=0.0, ge=0.0, le=1.0)
    bmp_effic: float = Field(default=0.0, ge=0.0, le=1.0)


class Landuse(BaseModel):
    """Land use category.

    Attributes:
        name: Land use name.
        sweep_interval: Days between street sweepings, 0 for no sweeping.
        sweep_removal: Fraction of buildup available for removal by sweeping [-].
        sweep_days0: Days since last sweeping at the start of the simulation.
        buildup: Buildup function per pollutant.
        washoff: Washoff function per pollutant.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    sweep_interval: float = Field(default=0.0, ge=0.0)
    sweep_removal: float = Field(default=0.0, ge=0.0, le=1.0)
    sweep_days0: float = Field(default=0.0, ge=0.0)
    buildup: list[BuildupFunction] = Field(default_factory=list)
    washoff: list[WashoffFunction] = Field(default_factory=list)


def buildup_days(func: BuildupFunction, buildup: float) -> float:
    """Days needed to reach a normalized buildup from zero."""
    c0, c1, c2 = func.max_buildup, func.rate, func.power
    if buildup <= 0.0:
        return 0.0
    if buildup >= c0:
        return math.inf

    if func.kind is BuildupType.POW:
        if c1 * c2 == 0.0:
            return 0.0
        return (buildup / c1) ** (1.0 / c2)
    if func.kind is BuildupType.EXP:
        if c1 == 0.0:
            return 0.0
        return -math.log(1.0 - buildup / c0) / c1
    if func.kind is BuildupType.SAT:
        return buildup * c2 / (c0 - buildup)
    return 0.0


def buildup_mass(func: BuildupFunction, days: float) -> float:
    """Normalized buildup after a number of dry days."""
    c0, c1, c2 = func.max_buildup, func.rate, func.power
    if days <= 0.0:
        return 0.0
    if math.isinf(days):
        return c0

    if func.kind is BuildupType.POW:
        b = c1 * days**c2
    elif func.kind is BuildupType.EXP:
        b = c0 * (1.0 - math.exp(-c1 * days))
    elif func.kind is BuildupType.SAT:
        b = c0 * days / (c2 + days)
    else:
        return 0.0
    return min(b, c0)


class LanduseModel:
    """Land use buildup, washoff and sweeping for a set of land uses.

    Args:
        landuses: Land use definitions, indexed like Subcatchment.land_factors.
        pollutants: Pollutant properties, indexed like the quality arrays.
        ledger: Mass balance receiving BMP removal of washoff. RunoffContext
            supplies its own ledger when this is None.
    """

    def __init__(
        self,
        landuses: list[Landuse],
        pollutants: list[Pollutant],
        ledger: MassBalanceLedger | None = None,
    ) -> None:
        self.landuses = landuses
        self.pollutants = pollutants
        self.ledger = ledger
        for landuse in landuses:
            if len(landuse.buildup) != len(pollutants) or len(landuse.washoff) != len(pollutants):
                msg = f"land use '{landuse.name}' must define buildup and washoff for {len(pollutants)} pollutants"
                raise ValueError(msg)

    def _normalizer(self, func: BuildupFunction, area: float, curb: float) -> float:
        return curb if func.normalizer is Normalizer.CURB else area

    def get_init_buildup(
        self, landuse: int, pollut: int, area: float, curb: float, init_loading: float, start_dry_days: float
    ) -> float:
        """Initial buildup mass from a loading per acre or from antecedent dry days."""
        if init_loading > 0.0:
            return init_loading * area
        func = self.landuses[landuse].buildup[pollut]
        if start_dry_days <= 0.0 or func.kind is BuildupType.NONE:
            return 0.0
        return buildup_mass(func, start_dry_days) * self._normalizer(func, area, curb)

    def get_buildup(self, landuse: int, pollut: int, area: float, curb: float, buildup: float, t_step: float) -> float:
        func = self.landuses[landuse].buildup[pollut]
        if func.kind is BuildupType.NONE:
            return buildup
        per_unit = self._normalizer(func, area, curb)
        if per_unit <= 0.0:
            return buildup
        b = buildup / per_unit
        if b >= func.max_buildup:
            return buildup

        days = buildup_days(func, b) + t_step / SECPERDAY
        return buildup_mass(func, days) * per_unit

    def get_washoff(
        self,
        landuse: int,
        area: float,
        land_factors: list[LandFactor],
        runoff: float,
        t_step: float,
        washoff_load: np.ndarray,
    ) -> None:
        """Add washoff mass of every pollutant from one land use.

        Args:
            landuse: Land use index.
            area: Subcatchment area [ft2].
            land_factors: The subcatchment's land factors; buildup is depleted in place.
            runoff: Subcatchment runoff [ft/s].
            t_step: Time step [s].
            washoff_load: Washoff mass per pollutant, added to in place.
        """
        factor = land_factors[landuse]
        f_area = factor.fraction * area
        if f_area <= 0.0 or runoff <= 0.0:
            return

        for p, func in enumerate(self.landuses[landuse].washoff):
            if func.kind is WashoffType.EXP:
                # Coefficient is per hour, runoff in in/hr
                rate = func.coeff * (runoff * INPERFT * SECPERHOUR) ** func.expon * factor.buildup[p] / SECPERHOUR
            elif func.kind is WashoffType.RC:
                rate = func.coeff * (runoff * f_area) ** func.expon
            elif func.kind is WashoffType.EMC:
                rate = func.coeff * LPERFT3 * runoff * f_area
            else:
                continue

            mass = rate * t_step
            if func.kind is WashoffType.EXP or self.landuses[landuse].buildup[p].kind is not BuildupType.NONE:
                mass = min(mass, factor.buildup[p])
                factor.buildup[p] -= mass

            bmp_removal = func.bmp_effic * mass
            if bmp_removal > 0.0 and self.ledger is not None:
                self.ledger.update_loading_totals(LoadType.BMP_REMOVAL, p, bmp_removal * self.pollutants[p].mcf)
            washoff_load[p] += mass - bmp_removal

    def get_co_pollut_load(self, pollut: int, washoff_load: np.ndarray) -> float:
        """Washoff mass contributed by a pollutant's co-pollutant."""
        pollutant = self.pollutants[pollut]
        if pollutant.co_pollut is None:
            return 0.0
        return pollutant.co_fraction * washoff_load[pollutant.co_pollut]

    def get_avg_bmp_effic(self, land_factors: list[LandFactor], pollut: int) -> float:
        """BMP removal efficiency of a pollutant averaged over land use coverage."""
        return sum(
            factor.fraction * landuse.washoff[pollut].bmp_effic
            for factor, landuse in zip(land_factors, self.landuses)
        )

    def get_sweep_params(self, landuse: int) -> tuple[float, float]:
        lu = self.landuses[landuse]
        return lu.sweep_interval, lu.sweep_removal

    def get_sweep_effic(self, landuse: int, pollut: int) -> float:
        return self.landuses[landuse].washoff[pollut].sweep_effic

    def get_sweep_days0(self, landuse: int) -> float:
        return self.landuses[landuse].sweep_days0
