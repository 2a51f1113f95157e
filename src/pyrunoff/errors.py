"""Exceptions raised by the runoff engine.

Configuration problems are reported as categorized ConfigurationError instances
before any time step runs. The only runtime failure is IntegrationError, raised
when the ponded-depth ODE cannot be solved; it terminates the simulation.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Category of a configuration error."""

    MISSING_OBJECT = "missing_object"
    BAD_NUMBER = "bad_number"
    BAD_PERCENT = "bad_percent"
    BAD_KEYWORD = "bad_keyword"
    TOO_FEW_ITEMS = "too_few_items"
    AMBIGUOUS_OUTLET = "ambiguous_outlet"
    BAD_LID_AREA = "bad_lid_area"

    @property
    def description(self) -> str:
        return {
            ErrorCategory.MISSING_OBJECT: "undefined object",
            ErrorCategory.BAD_NUMBER: "invalid number",
            ErrorCategory.BAD_PERCENT: "percentage outside [0, 100]",
            ErrorCategory.BAD_KEYWORD: "invalid keyword",
            ErrorCategory.TOO_FEW_ITEMS: "too few items",
            ErrorCategory.AMBIGUOUS_OUTLET: "ambiguous outlet",
            ErrorCategory.BAD_LID_AREA: "LID area exceeds subcatchment area",
        }[self]


class RunoffError(Exception):
    """Base class for all runoff engine errors."""


class ConfigurationError(RunoffError, ValueError):
    """Invalid or inconsistent subcatchment configuration.

    Attributes:
        category: Kind of problem found.
        token: The offending input item (object name or text token).
    """

    def __init__(self, category: ErrorCategory, token: str = "") -> None:
        self.category = category
        self.token = token
        msg = f"{category.description}: {token}" if token else category.description
        super().__init__(msg)


class IntegrationError(RunoffError):
    """Ponded depth could not be integrated within tolerance.

    Attributes:
        subcatch: Name of the subcatchment being solved.
        status: Integrator status code (1 = too many steps, 2 = step size underflow).
    """

    def __init__(self, subcatch: str, status: int) -> None:
        self.subcatch = subcatch
        self.status = status
        reason = "too many integration steps" if status == 1 else "integration step size too small"
        super().__init__(f"Ponded depth integration failed for subcatchment '{subcatch}': {reason}")
