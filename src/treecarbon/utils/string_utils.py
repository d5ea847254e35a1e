"""
String helpers for species names.
"""
import re
from typing import Optional
from urllib.parse import quote

__all__ = ['normalize_name', 'stable_string_hash', 'species_seed']

_WHITESPACE = re.compile(r'\s+')


def normalize_name(name: Optional[str]) -> str:
    """Lower-case and strip a species name for use as a lookup key.

    Args:
        name: Species name (may be None)

    Returns:
        Normalized key, or an empty string for None
    """
    if name is None:
        return ""
    return str(name).lower().strip()


def stable_string_hash(value: str) -> int:
    """Deterministic 32-bit signed string hash.

    Computes h = h * 31 + ord(ch) over the UTF-16 code units of the string,
    wrapping to a signed 32-bit integer after every step. Unlike the built-in
    hash() the result does not change between interpreter runs.

    Args:
        value: String to hash

    Returns:
        Signed 32-bit integer
    """
    h = 0
    encoded = value.encode('utf-16-le')
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def species_seed(scientific_key: str, common_name: str) -> str:
    """Build the URL-safe seed string for a species image.

    Format: "<scientific key>-<common name, lower-cased, whitespace runs as '-'>",
    percent-encoded.

    Example:
        >>> species_seed("acer rubrum", "Red Maple")
        'acer%20rubrum-red-maple'
    """
    common_slug = _WHITESPACE.sub('-', common_name.lower())
    return quote(f"{scientific_key}-{common_slug}", safe="-_.!~*'()")
