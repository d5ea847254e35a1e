"""
treecarbon: tree growth and carbon forecasting

Forecasts how an individual urban tree grows and how much CO2-equivalent it
stores, starting from a species name and a measured trunk diameter, using
published allometric growth coefficients and wood density factors.

Quick Start:
    >>> from treecarbon import load_reference_tables, forecast
    >>> tables = load_reference_tables('TS6_Growth_coefficients.csv',
    ...                                'TS9_Biomass_density_factors.csv')
    >>> result = forecast('Red maple', 30.0, 20, tables.densities, tables.coefficients)
    >>> result.series[-1].cumulative_carbon_storage
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "treecarbon Development Team"

# =============================================================================
# Reference Records
# =============================================================================
from .records import GrowthCoefficientRecord, BiomassDensityRecord

# =============================================================================
# Forecasting Engine
# =============================================================================
from .equations import EquationForm, evaluate_equation
from .species import (
    PROXY_SPECIES,
    DEFAULT_DENSITY,
    ResolvedSpecies,
    matches_species,
    resolve_species,
)
from .carbon import (
    FORM_FACTOR,
    BIOMASS_EXPANSION_FACTOR,
    CARBON_FRACTION,
    CO2_TO_CARBON_RATIO,
    estimate_co2e,
)
from .growth_simulator import (
    AnnualGrowthPoint,
    ForecastResult,
    GrowthSimulator,
    forecast,
)

# =============================================================================
# Species Catalog
# =============================================================================
from .species_catalog import (
    SpeciesInfo,
    build_catalog,
    get_species_label,
    species_image_url,
    get_fallback_image,
    search_catalog,
    find_catalog_entry,
)

# =============================================================================
# Reference Table Loading
# =============================================================================
from .data_loader import (
    ReferenceTables,
    load_growth_coefficients,
    load_biomass_density,
    load_reference_tables,
)

# =============================================================================
# Project Metrics
# =============================================================================
from .project_metrics import (
    InventoryEntry,
    ProjectSummary,
    ProjectMetricsCalculator,
    create_inventory_entry,
)

# =============================================================================
# Configuration and Logging
# =============================================================================
from .config_loader import ConfigLoader, get_config_loader, set_config_dir
from .logging_config import setup_logging

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    TreeCarbonError,
    ConfigurationError,
    DataError,
    InvalidDataError,
    MissingColumnsError,
    InventoryError,
)

# =============================================================================
# Public API Definition
# =============================================================================
__all__ = [
    # Package Metadata
    "__version__",
    "__author__",
    # Records
    "GrowthCoefficientRecord",
    "BiomassDensityRecord",
    # Equations
    "EquationForm",
    "evaluate_equation",
    # Species Resolution
    "PROXY_SPECIES",
    "DEFAULT_DENSITY",
    "ResolvedSpecies",
    "matches_species",
    "resolve_species",
    # Carbon
    "FORM_FACTOR",
    "BIOMASS_EXPANSION_FACTOR",
    "CARBON_FRACTION",
    "CO2_TO_CARBON_RATIO",
    "estimate_co2e",
    # Growth Simulation
    "AnnualGrowthPoint",
    "ForecastResult",
    "GrowthSimulator",
    "forecast",
    # Species Catalog
    "SpeciesInfo",
    "build_catalog",
    "get_species_label",
    "species_image_url",
    "get_fallback_image",
    "search_catalog",
    "find_catalog_entry",
    # Table Loading
    "ReferenceTables",
    "load_growth_coefficients",
    "load_biomass_density",
    "load_reference_tables",
    # Project Metrics
    "InventoryEntry",
    "ProjectSummary",
    "ProjectMetricsCalculator",
    "create_inventory_entry",
    # Configuration and Logging
    "ConfigLoader",
    "get_config_loader",
    "set_config_dir",
    "setup_logging",
    # Exceptions
    "TreeCarbonError",
    "ConfigurationError",
    "DataError",
    "InvalidDataError",
    "MissingColumnsError",
    "InventoryError",
]
