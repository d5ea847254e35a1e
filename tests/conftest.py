"""
Shared pytest fixtures for treecarbon tests.

Provides small reference tables whose equations are simple enough to check
by hand.
"""
import pytest

from treecarbon.config_loader import set_config_dir
from treecarbon.records import BiomassDensityRecord, GrowthCoefficientRecord


def coefficient(scientific_name, independent, dependent, form, a, b,
                c=None, d=None, mse=0.0, code="", region="NoEast"):
    """Build a growth coefficient record with test defaults."""
    return GrowthCoefficientRecord(
        region=region,
        scientific_name=scientific_name,
        species_code=code,
        independent_variable=independent,
        dependent_variable=dependent,
        equation_form=form,
        a=a, b=b, c=c, d=d, mse=mse,
    )


# =============================================================================
# Reference Tables
# =============================================================================

@pytest.fixture
def acer_rubrum_coefficients():
    """Linear equations for the proxy species (Acer rubrum).

    - age = 1 + 1.5 * dbh
    - dbh = -1 + 0.8 * age
    - tree ht = 3 + 0.4 * dbh
    """
    return [
        coefficient("Acer rubrum", "dbh", "age", "lin", 1.0, 1.5, code="ACRU"),
        coefficient("Acer rubrum", "age", "dbh", "lin", -1.0, 0.8, code="ACRU"),
        coefficient("Acer rubrum", "dbh", "tree ht", "lin", 3.0, 0.4, code="ACRU"),
    ]


@pytest.fixture
def coefficients(acer_rubrum_coefficients):
    """Growth coefficient table with three species.

    - Quercus alba: full equation set using non-linear forms
    - Pinus strobus: height equation only (age and diameter use heuristics)
    - Acer rubrum: proxy species, linear equations
    """
    return [
        coefficient("Quercus alba", "dbh", "age", "quad", 2.0, 1.1, c=0.01, code="QUAL"),
        coefficient("Quercus alba", "age", "dbh", "loglogw1", 0.5, 2.0, mse=0.02, code="QUAL"),
        coefficient("Quercus alba", "dbh", "height", "cub", 1.5, 0.6, c=-0.004, d=0.00001, code="QUAL"),
        coefficient("Pinus strobus", "dbh", "tree ht", "lin", 2.0, 0.5, code="PIST"),
    ] + acer_rubrum_coefficients


@pytest.fixture
def densities():
    """Biomass density table. Acer rubrum deliberately has no entry."""
    return [
        BiomassDensityRecord("QUAL", "Quercus alba", "White oak", 600.0),
        BiomassDensityRecord("PIST", "Pinus strobus", "Eastern white pine", 370.0),
        BiomassDensityRecord("ACSA", "Acer saccharum", "Sugar maple", 560.0),
    ]


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(autouse=True)
def packaged_config():
    """Make every test start from the packaged cfg/ directory."""
    set_config_dir(None)
    yield
    set_config_dir(None)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
