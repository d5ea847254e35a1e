"""
Point-in-time carbon estimate for a single tree.

Converts trunk diameter and height into a CO2-equivalent mass through a
fixed volume -> biomass -> carbon -> CO2 chain.
"""
import math

__all__ = [
    'FORM_FACTOR',
    'BIOMASS_EXPANSION_FACTOR',
    'CARBON_FRACTION',
    'CO2_TO_CARBON_RATIO',
    'stem_volume',
    'estimate_co2e',
]


# Taper correction applied to the cylinder volume of the stem
FORM_FACTOR = 0.45

# Roots and branches not captured by stem volume (+20%)
BIOMASS_EXPANSION_FACTOR = 1.2

# Carbon share of dry biomass
CARBON_FRACTION = 0.5

# Molar mass ratio CO2 / C (44/12, rounded)
CO2_TO_CARBON_RATIO = 3.6667


def stem_volume(diameter_cm: float, height_m: float) -> float:
    """Calculate stem volume from diameter and height.

    Formula: V = pi * (D/2)^2 * H * FORM_FACTOR, with D in meters.

    Args:
        diameter_cm: Diameter at breast height (cm)
        height_m: Total height (m)

    Returns:
        Stem volume (m3)
    """
    diameter_m = diameter_cm / 100
    return math.pi * (diameter_m / 2) ** 2 * height_m * FORM_FACTOR


def estimate_co2e(diameter_cm: float, height_m: float, density: float) -> float:
    """Estimate the CO2-equivalent mass stored in a tree.

    Args:
        diameter_cm: Diameter at breast height (cm)
        height_m: Total height (m)
        density: Wood density (kg/m3)

    Returns:
        CO2-equivalent mass (kg)
    """
    biomass = stem_volume(diameter_cm, height_m) * density * BIOMASS_EXPANSION_FACTOR
    carbon = biomass * CARBON_FRACTION
    return carbon * CO2_TO_CARBON_RATIO
