"""Shared runtime context of the runoff engine.

RunoffContext bundles what the engine reads besides the subcatchment being
processed: the other subcatchments (for runon routing), pollutant properties,
options, the external collaborators and the current evaporation rate.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import RunoffOptions
from .interfaces import (
    GageModel,
    GroundwaterModel,
    InfiltrationModel,
    LanduseModelProtocol,
    LidModel,
    MassBalanceLedger,
    NoInfiltration,
    RainfallOverride,
    SnowModel,
    StatisticsSink,
)
from .massbal import MassBalance
from .types import Pollutant, Subcatchment


@dataclass
class RunoffContext:
    """Runtime context passed to every engine operation.

    Attributes:
        subcatchments: All subcatchments, indexed by Subcatchment.index.
        pollutants: Pollutant properties, indexed like the quality arrays.
        options: Engine options.
        gages: Rain gage collaborator.
        rainfall_override: Optional direct rainfall collaborator.
        snow: Snowmelt collaborator.
        infiltration: Infiltration collaborator.
        groundwater: Groundwater collaborator.
        lid: LID collaborator.
        landuse: Land use buildup/washoff collaborator.
        ledger: System mass balance. Defaults to a new MassBalance. Also given
            to a land use model that has no ledger of its own.
        stats: Optional statistics sink.
        evap_rate: Current potential evaporation rate [ft/s], set by the caller
            before each step.
    """

    subcatchments: list[Subcatchment]
    pollutants: list[Pollutant] = field(default_factory=list)
    options: RunoffOptions = field(default_factory=RunoffOptions)
    gages: GageModel | None = None
    rainfall_override: RainfallOverride | None = None
    snow: SnowModel | None = None
    infiltration: InfiltrationModel = field(default_factory=NoInfiltration)
    groundwater: GroundwaterModel | None = None
    lid: LidModel | None = None
    landuse: LanduseModelProtocol | None = None
    ledger: MassBalanceLedger | None = None
    stats: StatisticsSink | None = None
    evap_rate: float = 0.0

    def __post_init__(self) -> None:
        if self.ledger is None:
            self.ledger = MassBalance(len(self.pollutants))
        # Land use BMP removal of washoff posts to the same ledger
        if self.landuse is not None and getattr(self.landuse, "ledger", False) is None:
            self.landuse.ledger = self.ledger

    @property
    def n_pollutants(self) -> int:
        return len(self.pollutants)

    def snow_active(self, subcatch: Subcatchment) -> bool:
        """True if snowmelt is computed for the subcatchment."""
        return subcatch.has_snowpack and self.snow is not None and not self.options.ignore_snowmelt

    def groundwater_active(self, subcatch: Subcatchment) -> bool:
        """True if groundwater is computed beneath the subcatchment."""
        return subcatch.has_groundwater and self.groundwater is not None and not self.options.ignore_groundwater

    def lid_active(self, subcatch: Subcatchment) -> bool:
        """True if the subcatchment has LID units with a model to evaluate them."""
        return subcatch.lid_area > 0.0 and self.lid is not None
