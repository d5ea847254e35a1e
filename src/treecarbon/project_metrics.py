"""
Project-level carbon metrics for an inventory of forecast trees.

An inventory is a list of InventoryEntry objects, each holding a per-tree
forecast and the number of identical trees it represents. This module
aggregates those forecasts into project totals, a per-year time series and
a per-species breakdown.

Metrics include:
- Current (year 0) and projected (horizon) CO2e storage
- Net sequestration over the horizon
- Everyday equivalents (passenger car years, gasoline gallons)
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import InventoryError
from .growth_simulator import ForecastResult, forecast
from .records import BiomassDensityRecord, GrowthCoefficientRecord
from .species_catalog import SpeciesInfo, build_catalog, find_catalog_entry

__all__ = [
    'CAR_YEAR_KG_CO2',
    'GASOLINE_GALLON_KG_CO2',
    'InventoryEntry',
    'ProjectSummary',
    'ProjectMetricsCalculator',
    'create_inventory_entry',
    'split_species_label',
]

# Annual emissions of a typical passenger vehicle (kg CO2)
CAR_YEAR_KG_CO2 = 4600.0

# CO2 from burning one US gallon of gasoline (kg)
GASOLINE_GALLON_KG_CO2 = 8.887


@dataclass
class InventoryEntry:
    """A group of identical trees in a project inventory.

    Attributes:
        scientific_name: Scientific name used for the forecast
        common_name: Display name
        count: Number of trees in the group
        initial_diameter: Measured diameter (cm)
        forecast: Per-tree forecast
    """
    scientific_name: str
    common_name: str
    count: int
    initial_diameter: float
    forecast: ForecastResult

    @property
    def initial_height(self) -> float:
        """Year-0 height of one tree (m)."""
        return self.forecast.series[0].height

    @property
    def current_carbon(self) -> float:
        """Year-0 CO2e for the whole group (kg)."""
        return self.forecast.current_carbon * self.count

    def carbon_at(self, year_offset: int) -> float:
        """Stored CO2e for the whole group in a given year (kg)."""
        return self.forecast.series[year_offset].cumulative_carbon_storage * self.count


@dataclass(frozen=True)
class ProjectSummary:
    """Aggregated project totals.

    Attributes:
        total_trees: Number of trees across all entries
        horizon: Projection horizon (years)
        current_total_co2: Year-0 CO2e (kg)
        projected_total_co2: CO2e at the horizon (kg)
        net_sequestration: projected minus current (kg)
        co2_tonnes: Projected CO2e in metric tonnes
        car_years: Projected CO2e as passenger-car years of emissions
        gasoline_gallons: Projected CO2e as gallons of gasoline burned
    """
    total_trees: int
    horizon: int
    current_total_co2: float
    projected_total_co2: float
    net_sequestration: float
    co2_tonnes: float
    car_years: float
    gasoline_gallons: float

    @property
    def percent_increase(self) -> Optional[float]:
        """Net sequestration as a percentage of current storage."""
        if self.current_total_co2 == 0:
            return None
        return self.net_sequestration / self.current_total_co2 * 100


def split_species_label(label: str) -> Tuple[str, str]:
    """Split a "Scientific (Common)" style label into its two names.

    Used for names that are not in the species catalog. Labels without
    parentheses are returned as (label, label).

    Example:
        >>> split_species_label("Acer rubrum (Red maple)")
        ('Acer rubrum', 'Red maple')
    """
    if '(' not in label:
        return label, label
    first, rest = label.split('(', 1)
    scientific = first.strip() or label
    common = rest.replace(')', '').strip() or label
    return scientific, common


def create_inventory_entry(species_name: str, initial_diameter_cm: float, count: int,
                           horizon_years: int,
                           densities: Sequence[BiomassDensityRecord],
                           coefficients: Sequence[GrowthCoefficientRecord],
                           common_name: Optional[str] = None,
                           catalog: Optional[Sequence[SpeciesInfo]] = None) -> InventoryEntry:
    """Forecast one tree and wrap it as an inventory entry.

    When common_name is not given, species_name is first looked up in the
    species catalog, so labels from get_species_label ("Common (Scientific)")
    resolve to their entry. Names not in the catalog fall back to
    split_species_label.

    Args:
        species_name: Scientific name, catalog label or free text
        initial_diameter_cm: Measured diameter (cm)
        count: Number of identical trees (>= 1)
        horizon_years: Projection horizon (>= 0)
        densities: Biomass density records
        coefficients: Growth coefficient records
        common_name: Display name
        catalog: Species catalog; built from the tables when omitted

    Returns:
        InventoryEntry

    Raises:
        InventoryError: If count or horizon_years is invalid
    """
    if count < 1:
        raise InventoryError('count', count, "must be at least 1")
    if horizon_years < 0:
        raise InventoryError('horizon_years', horizon_years, "must not be negative")

    scientific = species_name
    if common_name is None:
        if catalog is None:
            catalog = build_catalog(densities, coefficients)
        entry = find_catalog_entry(catalog, species_name)
        if entry is not None:
            scientific, common_name = entry.scientific_name, entry.common_name
        else:
            scientific, common_name = split_species_label(species_name)

    result = forecast(scientific, initial_diameter_cm, horizon_years, densities, coefficients)
    return InventoryEntry(
        scientific_name=scientific,
        common_name=common_name,
        count=count,
        initial_diameter=initial_diameter_cm,
        forecast=result,
    )


class ProjectMetricsCalculator:
    """Calculator for inventory-level carbon metrics.

    All entries are expected to share one horizon; the first entry's series
    length defines it.

    Attributes:
        entries: Inventory entries
    """

    def __init__(self, entries: Sequence[InventoryEntry]):
        self.entries = list(entries)

    @property
    def horizon(self) -> int:
        if not self.entries:
            return 0
        return self.entries[0].forecast.horizon

    def _storage_matrix(self) -> np.ndarray:
        """Group storage (kg) as an entries x years array."""
        years = self.horizon + 1
        return np.array([
            [entry.carbon_at(year) for year in range(years)]
            for entry in self.entries
        ], dtype=float).reshape(len(self.entries), years)

    def summary(self) -> Optional[ProjectSummary]:
        """Get project totals, or None for an empty inventory."""
        if not self.entries:
            return None

        horizon = self.horizon
        current = sum(entry.current_carbon for entry in self.entries)
        projected = float(self._storage_matrix()[:, horizon].sum())

        return ProjectSummary(
            total_trees=sum(entry.count for entry in self.entries),
            horizon=horizon,
            current_total_co2=current,
            projected_total_co2=projected,
            net_sequestration=projected - current,
            co2_tonnes=projected / 1000,
            car_years=projected / CAR_YEAR_KG_CO2,
            gasoline_gallons=projected / GASOLINE_GALLON_KG_CO2,
        )

    def carbon_time_series(self) -> pd.DataFrame:
        """Get stored CO2e per year, one column per common name plus 'total'.

        Returns:
            DataFrame with a 'year' column; empty for an empty inventory
        """
        if not self.entries:
            return pd.DataFrame(columns=['year', 'total'])

        matrix = self._storage_matrix()
        data: Dict[str, np.ndarray] = {'year': np.arange(self.horizon + 1)}
        for entry, row in zip(self.entries, matrix):
            if entry.common_name in data:
                data[entry.common_name] = data[entry.common_name] + row
            else:
                data[entry.common_name] = row
        data['total'] = matrix.sum(axis=0)
        return pd.DataFrame(data)

    def carbon_by_species(self) -> List[Dict[str, float]]:
        """Get horizon CO2e and tree count per common name, largest first."""
        by_species: Dict[str, Dict[str, float]] = {}
        horizon = self.horizon
        for entry in self.entries:
            row = by_species.setdefault(entry.common_name,
                                        {'name': entry.common_name, 'co2': 0.0, 'count': 0})
            row['co2'] += entry.carbon_at(horizon)
            row['count'] += entry.count
        return sorted(by_species.values(), key=lambda row: row['co2'], reverse=True)
