"""
Species catalog built from the reference tables.

Produces a deduplicated, sorted list of species for search/autocomplete,
each with an illustrative image URL. Images are deterministic: a curated
override when one exists, otherwise a seeded image-service URL derived from
the species names.
"""
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence

from .config_loader import get_image_settings
from .records import BiomassDensityRecord, GrowthCoefficientRecord
from .utils import normalize_name, stable_string_hash, species_seed

__all__ = [
    'SpeciesInfo',
    'build_catalog',
    'get_species_label',
    'species_image_url',
    'image_signature',
    'get_fallback_image',
    'search_catalog',
    'find_catalog_entry',
]

# Suggestions shown before anything is typed
BROWSE_LIMIT = 8

# Maximum matches returned for a search
SEARCH_LIMIT = 10


@dataclass(frozen=True)
class SpeciesInfo:
    """Catalog entry for one species.

    Attributes:
        scientific_name: Scientific name as first seen (stripped)
        common_name: Common name, or the scientific name when none is known
        image_url: Illustrative image URL
    """
    scientific_name: str
    common_name: str
    image_url: str

    @property
    def label(self) -> str:
        return get_species_label(self)


def get_fallback_image() -> str:
    """Image shown when an assigned image fails to load."""
    return get_image_settings()['fallback_image']


def _image_seed(scientific_name: str, common_name: Optional[str]) -> str:
    common = (common_name or scientific_name).strip()
    return species_seed(normalize_name(scientific_name), common)


def _signature(seed: str) -> int:
    # Remainder of the magnitude, matching a truncating modulo followed by abs()
    return abs(stable_string_hash(seed)) % 1000


def image_signature(scientific_name: str, common_name: Optional[str] = None) -> int:
    """Stable bucket number (0-999) for a species name pair.

    Hashes the same seed string that species_image_url places in the URL, and
    fills the {signature} field of the seed URL template.

    Args:
        scientific_name: Scientific name
        common_name: Common name (defaults to the scientific name)

    Returns:
        Integer in [0, 999], identical across runs
    """
    return _signature(_image_seed(scientific_name, common_name))


def species_image_url(scientific_name: str, common_name: Optional[str] = None,
                      settings: Optional[Dict] = None) -> str:
    """Get the deterministic image URL for a species.

    The seed URL template may use {seed} (the URL-encoded seed string),
    {signature} (its 0-999 bucket) or both.

    Args:
        scientific_name: Scientific name
        common_name: Common name (defaults to the scientific name)
        settings: Image settings; defaults to the configured settings

    Returns:
        Override URL if the species is curated, otherwise a seeded URL
    """
    if settings is None:
        settings = get_image_settings()
    override = settings['overrides'].get(normalize_name(scientific_name))
    if override:
        return override
    seed = _image_seed(scientific_name, common_name)
    return settings['seed_url_template'].format(seed=seed, signature=_signature(seed))


def build_catalog(densities: Iterable[BiomassDensityRecord],
                  coefficients: Iterable[GrowthCoefficientRecord]) -> List[SpeciesInfo]:
    """Build a deduplicated species catalog from both reference tables.

    Entries are keyed by lower-cased scientific name. Density records are
    added first, then coefficient records. The first entry for a key wins;
    a later record only fills in a missing common name.

    Args:
        densities: Biomass density records
        coefficients: Growth coefficient records

    Returns:
        SpeciesInfo list sorted by scientific name
    """
    settings = get_image_settings()
    catalog: Dict[str, SpeciesInfo] = {}

    def add_species(scientific_name: str, common_name: Optional[str] = None) -> None:
        key = normalize_name(scientific_name)
        if not key:
            return

        if key in catalog:
            existing = catalog[key]
            if not existing.common_name and common_name:
                catalog[key] = replace(existing, common_name=common_name.strip())
            return

        catalog[key] = SpeciesInfo(
            scientific_name=scientific_name.strip(),
            common_name=(common_name or scientific_name).strip(),
            image_url=species_image_url(scientific_name, common_name, settings),
        )

    for rec in densities:
        add_species(rec.scientific_name, rec.common_name)
    for rec in coefficients:
        add_species(rec.scientific_name)

    fallback = settings['fallback_image']
    entries = [
        entry if entry.image_url else replace(entry, image_url=fallback)
        for entry in catalog.values()
    ]
    return sorted(entries, key=lambda entry: entry.scientific_name.lower())


def get_species_label(species: SpeciesInfo) -> str:
    """Display label: "Common (Scientific)", or the scientific name alone."""
    if species.common_name and species.common_name != species.scientific_name:
        return f"{species.common_name} ({species.scientific_name})"
    return species.scientific_name


def search_catalog(catalog: Sequence[SpeciesInfo], text: Optional[str],
                   limit: int = SEARCH_LIMIT) -> List[SpeciesInfo]:
    """Autocomplete search over the catalog.

    An entry matches when the search text is contained in its scientific or
    common name, ignoring case. Empty text returns the first BROWSE_LIMIT
    entries instead.

    Args:
        catalog: Catalog as returned by build_catalog
        text: Search text typed so far
        limit: Maximum number of matches

    Returns:
        Matching entries in catalog order
    """
    if not text:
        return list(catalog[:BROWSE_LIMIT])
    needle = text.lower()
    matches = [
        entry for entry in catalog
        if needle in entry.scientific_name.lower() or needle in entry.common_name.lower()
    ]
    return matches[:limit]


def find_catalog_entry(catalog: Iterable[SpeciesInfo], text: Optional[str]) -> Optional[SpeciesInfo]:
    """Find the catalog entry named in free text.

    Returns the first entry whose scientific or common name appears in the
    text, so a label from get_species_label resolves to its own entry.
    """
    needle = (text or "").lower()
    if not needle.strip():
        return None
    for entry in catalog:
        names = (entry.scientific_name.lower(), entry.common_name.lower())
        if any(name and name in needle for name in names):
            return entry
    return None
