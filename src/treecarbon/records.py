"""
Reference-table records consumed by the forecasting engine.

Both record types are immutable; the engine treats them as read-only input
for the duration of one call.
"""
from dataclasses import dataclass
from typing import Optional

__all__ = ['GrowthCoefficientRecord', 'BiomassDensityRecord']


@dataclass(frozen=True)
class GrowthCoefficientRecord:
    """One fitted allometric equation for a species.

    A species usually has several records, one per (independent, dependent)
    role, e.g. dbh -> age, age -> dbh and dbh -> tree ht.

    Attributes:
        region: Reference city/region code the equation was fitted for
        scientific_name: Species scientific name
        species_code: Short species code
        independent_variable: Predictor name ('dbh', 'age', ...)
        dependent_variable: Predicted quantity ('age', 'dbh', 'tree ht', ...)
        equation_form: Equation form tag ('lin', 'quad', 'loglogw1', ...)
        a, b, c, d, e: Equation coefficients (c, d, e may be absent)
        mse: Mean squared error used in log-form bias corrections
    """
    region: str
    scientific_name: str
    species_code: str
    independent_variable: str
    dependent_variable: str
    equation_form: str
    a: float = 0.0
    b: float = 0.0
    c: Optional[float] = None
    d: Optional[float] = None
    e: Optional[float] = None
    mse: float = 0.0

    def has_roles(self, dependent: str, independent: str) -> bool:
        """Check whether this equation predicts `dependent` from `independent`."""
        return (self.dependent_variable == dependent
                and self.independent_variable == independent)


@dataclass(frozen=True)
class BiomassDensityRecord:
    """Wood density for a species.

    Attributes:
        species_code: Short species code
        scientific_name: Species scientific name
        common_name: Species common name
        density: Dry wood density (kg/m3)
    """
    species_code: str
    scientific_name: str
    common_name: str
    density: float
