"""
Free-text species resolution against the reference tables.

A species query such as "Red maple" or "Acer rubrum" is matched against the
growth coefficient table (by scientific name) and the biomass density table
(by scientific or common name) using tolerant substring containment. When a
table has no match a documented fallback is used instead:

- growth coefficients: every record for the proxy species "Acer rubrum"
- density: DEFAULT_DENSITY (550 kg/m3)

Usage:
    from treecarbon.species import resolve_species

    resolved = resolve_species("Red maple", densities, coefficients)
    resolved.density, resolved.used_proxy
"""
from dataclasses import dataclass
from typing import Collection, Iterable, Optional, Sequence, Tuple, Union

from .logging_config import get_logger, log_species_resolution
from .records import BiomassDensityRecord, GrowthCoefficientRecord

__all__ = [
    'PROXY_SPECIES',
    'DEFAULT_DENSITY',
    'ResolvedSpecies',
    'matches_species',
    'find_density_record',
    'find_coefficient_records',
    'resolve_species',
]

logger = get_logger(__name__)

# Stand-in species whose coefficients are used when a query matches nothing
PROXY_SPECIES = "Acer rubrum"

# Wood density used when no density record matches (kg/m3)
DEFAULT_DENSITY = 550.0


def matches_species(query: str, candidate: str) -> bool:
    """Tolerant, case-insensitive species name match.

    A candidate name matches when it is contained in the query OR the query
    is contained in it. This accepts free text like "Red maple tree" as well
    as exact scientific names, and can produce false positives on very short
    names. A blank candidate (e.g. a missing common name) never matches.

    Args:
        query: Free-text species name entered by the user
        candidate: Scientific or common name from a reference record

    Returns:
        True if either string contains the other
    """
    query = (query or "").lower()
    candidate = (candidate or "").lower()
    if not candidate.strip():
        return False
    return candidate in query or query in candidate


def find_coefficient_records(query: str,
                             coefficients: Iterable[GrowthCoefficientRecord]
                             ) -> Tuple[GrowthCoefficientRecord, ...]:
    """Get every growth coefficient record whose scientific name matches, in input order."""
    return tuple(rec for rec in coefficients if matches_species(query, rec.scientific_name))


def find_density_record(query: str,
                        densities: Iterable[BiomassDensityRecord]
                        ) -> Optional[BiomassDensityRecord]:
    """Get the first density record matching by common or scientific name."""
    for rec in densities:
        if matches_species(query, rec.common_name) or matches_species(query, rec.scientific_name):
            return rec
    return None


@dataclass(frozen=True)
class ResolvedSpecies:
    """Outcome of resolving a species query.

    Attributes:
        query: The species name as given
        coefficients: Active growth coefficient records, in input order
        density: Wood density (kg/m3)
        used_proxy: True if the proxy species' coefficients were substituted
        used_default_density: True if DEFAULT_DENSITY was substituted
        density_record: The matched density record, if any
    """
    query: str
    coefficients: Tuple[GrowthCoefficientRecord, ...]
    density: float
    used_proxy: bool = False
    used_default_density: bool = False
    density_record: Optional[BiomassDensityRecord] = None

    def find_equation(self, dependent: Union[str, Collection[str]],
                      independent: str) -> Optional[GrowthCoefficientRecord]:
        """Find the first active equation with the given roles.

        Args:
            dependent: Predicted variable name, or a collection of accepted names
            independent: Predictor variable name

        Returns:
            Matching record or None
        """
        accepted = (dependent,) if isinstance(dependent, str) else tuple(dependent)
        for rec in self.coefficients:
            if any(rec.has_roles(name, independent) for name in accepted):
                return rec
        return None


def resolve_species(query: str,
                    densities: Sequence[BiomassDensityRecord],
                    coefficients: Sequence[GrowthCoefficientRecord]) -> ResolvedSpecies:
    """Resolve a free-text species name against both reference tables.

    Never raises: an unmatched name falls back to the proxy species'
    coefficients and/or the default density.

    Args:
        query: Free-text species name
        densities: Biomass density records
        coefficients: Growth coefficient records

    Returns:
        ResolvedSpecies with the active coefficient subset and density
    """
    matched = find_coefficient_records(query, coefficients)
    used_proxy = not matched
    if used_proxy:
        active = tuple(rec for rec in coefficients if rec.scientific_name == PROXY_SPECIES)
    else:
        active = matched

    density_record = find_density_record(query, densities)
    used_default_density = density_record is None
    density = DEFAULT_DENSITY if used_default_density else density_record.density

    log_species_resolution(logger, query, len(matched), used_proxy, used_default_density)

    return ResolvedSpecies(
        query=query,
        coefficients=active,
        density=density,
        used_proxy=used_proxy,
        used_default_density=used_default_density,
        density_record=density_record,
    )
