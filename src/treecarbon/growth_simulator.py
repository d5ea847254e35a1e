"""
Year-by-year growth and carbon forecast for a single tree.

A forecast runs in two phases:

1. Age inference - the species' age-from-dbh equation (or the DBH x 1.2
   heuristic) gives the tree's current age, floored at one year.
2. Forward simulation - for every year 0..horizon the diameter is projected
   from age, height from diameter, and the stored CO2e from both. Annual
   sequestration is the year-over-year gain in storage, never negative.

Every decision point has a heuristic fallback, so a forecast always
succeeds for a non-negative horizon.
"""
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

import pandas as pd

from .carbon import estimate_co2e
from .equations import evaluate_equation
from .logging_config import get_logger
from .records import BiomassDensityRecord, GrowthCoefficientRecord
from .species import ResolvedSpecies, resolve_species

__all__ = [
    'AGE_PER_CM_DBH',
    'MIN_AGE',
    'HEIGHT_VARIABLES',
    'AnnualGrowthPoint',
    'ForecastResult',
    'GrowthSimulator',
    'forecast',
    'heuristic_height',
    'heuristic_diameter',
]

logger = get_logger(__name__)

# Years of age per cm of DBH when no age equation exists
AGE_PER_CM_DBH = 1.2

# Inferred ages are floored at one year
MIN_AGE = 1.0

# Dependent-variable names used for height equations in the coefficient table
HEIGHT_VARIABLES = ('tree ht', 'height')

# Heuristic diameter growth (cm/yr): 1.5 slowing by 0.01 per year of age, floored at 0.2
BASE_DIAMETER_GROWTH = 1.5
DIAMETER_GROWTH_DECLINE = 0.01
MIN_DIAMETER_GROWTH = 0.2


def heuristic_height(diameter_cm: float) -> float:
    """Fallback height model: H = 2 + 0.5 * D^0.7 (m).

    Negative diameters are treated as 0 so the power stays real-valued.
    """
    return 2 + 0.5 * max(0.0, diameter_cm) ** 0.7


def heuristic_diameter(initial_diameter_cm: float, age: float, year_offset: int) -> float:
    """Fallback diameter projection.

    Growth rate declines with age and is floored at MIN_DIAMETER_GROWTH. The
    rate is applied to all elapsed years, so very long horizons for young
    trees can project a smaller diameter than the year before.

    Args:
        initial_diameter_cm: Measured diameter at year 0 (cm)
        age: Simulated age in the target year
        year_offset: Years since the measurement

    Returns:
        Projected diameter (cm)
    """
    growth_rate = max(MIN_DIAMETER_GROWTH, BASE_DIAMETER_GROWTH - age * DIAMETER_GROWTH_DECLINE)
    return initial_diameter_cm + growth_rate * year_offset


@dataclass(frozen=True)
class AnnualGrowthPoint:
    """Projected state of a tree in one simulated year.

    Attributes:
        year_offset: Years since the measurement (0 = current state)
        age: Inferred age in that year
        diameter: Diameter at breast height (cm, 2 decimals)
        height: Total height (m, 2 decimals)
        cumulative_carbon_storage: Stored CO2e (kg, 2 decimals)
        annual_sequestration: CO2e gained since the previous year (kg, 2 decimals).
            Always 0 for year 0.
    """
    year_offset: int
    age: float
    diameter: float
    height: float
    cumulative_carbon_storage: float
    annual_sequestration: float


@dataclass(frozen=True)
class ForecastResult:
    """Result of a growth forecast.

    Attributes:
        series: One AnnualGrowthPoint per year, year_offset 0..horizon
        current_carbon: Unrounded year-0 CO2e estimate (kg)
        resolved: Species resolution used for the run
    """
    series: Tuple[AnnualGrowthPoint, ...]
    current_carbon: float
    resolved: Optional[ResolvedSpecies] = None

    @property
    def horizon(self) -> int:
        return len(self.series) - 1

    @property
    def final_point(self) -> Optional[AnnualGrowthPoint]:
        return self.series[-1] if self.series else None

    @property
    def total_sequestration(self) -> float:
        """Sum of annual sequestration over the whole series (kg CO2e)."""
        return sum(point.annual_sequestration for point in self.series)

    def to_dataframe(self) -> pd.DataFrame:
        """Get the series as a DataFrame, one row per year."""
        columns = ['year_offset', 'age', 'diameter', 'height',
                   'cumulative_carbon_storage', 'annual_sequestration']
        return pd.DataFrame(
            [[getattr(point, col) for col in columns] for point in self.series],
            columns=columns,
        )


class _YearState(NamedTuple):
    """State carried from one simulated year into the next."""
    previous_total_carbon: float


class GrowthSimulator:
    """Forecasts tree growth and carbon storage from reference tables.

    The simulator only holds references to the read-only tables; each
    forecast call is independent and keeps all intermediate state local.

    Attributes:
        densities: Biomass density records
        coefficients: Growth coefficient records
    """

    def __init__(self, densities: Sequence[BiomassDensityRecord],
                 coefficients: Sequence[GrowthCoefficientRecord]):
        self.densities = densities
        self.coefficients = coefficients

    def forecast(self, species_name: str, initial_diameter_cm: float,
                 horizon_years: int) -> ForecastResult:
        """Forecast growth and carbon for one tree.

        Args:
            species_name: Free-text species name
            initial_diameter_cm: Measured diameter at breast height (cm)
            horizon_years: Number of years to project (>= 0)

        Returns:
            ForecastResult with horizon_years + 1 points
        """
        resolved = resolve_species(species_name, self.densities, self.coefficients)
        logger.debug(f"Forecasting '{species_name}' dbh={initial_diameter_cm} for {horizon_years} years")

        current_age = self.infer_age(resolved, initial_diameter_cm)
        diameter_eq = resolved.find_equation('dbh', 'age')
        height_eq = resolved.find_equation(HEIGHT_VARIABLES, 'dbh')

        initial_height = self._predict_height(height_eq, initial_diameter_cm)
        current_carbon = estimate_co2e(initial_diameter_cm, initial_height, resolved.density)

        state = _YearState(previous_total_carbon=current_carbon)
        series: List[AnnualGrowthPoint] = []
        for year_offset in range(horizon_years + 1):
            point, state = self._simulate_year(
                state, year_offset, current_age, initial_diameter_cm,
                diameter_eq, height_eq, resolved.density
            )
            series.append(point)

        if series:
            logger.debug(f"Forecast for '{species_name}' ends at {series[-1].cumulative_carbon_storage} kg CO2e")
        return ForecastResult(series=tuple(series), current_carbon=current_carbon, resolved=resolved)

    @staticmethod
    def infer_age(resolved: ResolvedSpecies, diameter_cm: float) -> float:
        """Infer current age from diameter.

        Uses the species' age-from-dbh equation when present, otherwise
        diameter * AGE_PER_CM_DBH. The result is floored at MIN_AGE.
        """
        age_eq = resolved.find_equation('age', 'dbh')
        if age_eq is not None:
            age = evaluate_equation(age_eq.equation_form, diameter_cm, age_eq)
        else:
            age = diameter_cm * AGE_PER_CM_DBH
        return max(MIN_AGE, age)

    @staticmethod
    def _predict_height(height_eq: Optional[GrowthCoefficientRecord], diameter_cm: float) -> float:
        if height_eq is not None:
            return evaluate_equation(height_eq.equation_form, diameter_cm, height_eq)
        return heuristic_height(diameter_cm)

    def _simulate_year(self, state: _YearState, year_offset: int, current_age: float,
                       initial_diameter_cm: float,
                       diameter_eq: Optional[GrowthCoefficientRecord],
                       height_eq: Optional[GrowthCoefficientRecord],
                       density: float) -> Tuple[AnnualGrowthPoint, _YearState]:
        """Simulate one year and return its point and the state for the next year."""
        age = current_age + year_offset

        if year_offset == 0:
            # Anchor at the measured diameter instead of re-deriving it
            diameter = initial_diameter_cm
        elif diameter_eq is not None:
            diameter = evaluate_equation(diameter_eq.equation_form, age, diameter_eq)
        else:
            diameter = heuristic_diameter(initial_diameter_cm, age, year_offset)

        height = self._predict_height(height_eq, diameter)
        total_carbon = estimate_co2e(diameter, height, density)
        sequestration = max(0.0, total_carbon - state.previous_total_carbon)

        if year_offset == 0:
            # Year 0 is the baseline itself; the next year is measured against it
            next_state = state
        else:
            next_state = _YearState(previous_total_carbon=total_carbon)

        point = AnnualGrowthPoint(
            year_offset=year_offset,
            age=age,
            diameter=round(diameter, 2),
            height=round(height, 2),
            cumulative_carbon_storage=round(total_carbon, 2),
            annual_sequestration=round(sequestration, 2),
        )
        return point, next_state


def forecast(species_name: str, initial_diameter_cm: float, horizon_years: int,
             densities: Sequence[BiomassDensityRecord],
             coefficients: Sequence[GrowthCoefficientRecord]) -> ForecastResult:
    """Forecast growth and carbon storage for one tree.

    Convenience function wrapping GrowthSimulator.

    Args:
        species_name: Free-text species name ("Red maple", "Acer rubrum", ...)
        initial_diameter_cm: Measured diameter at breast height (cm)
        horizon_years: Number of years to project (>= 0)
        densities: Biomass density records
        coefficients: Growth coefficient records

    Returns:
        ForecastResult with horizon_years + 1 points
    """
    return GrowthSimulator(densities, coefficients).forecast(
        species_name, initial_diameter_cm, horizon_years
    )
