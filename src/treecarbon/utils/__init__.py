"""
Utility functions for treecarbon.

This module provides common utilities used throughout the codebase.
"""

from .string_utils import normalize_name, stable_string_hash, species_seed

__all__ = [
    "normalize_name",
    "stable_string_hash",
    "species_seed",
]
