"""
Custom exceptions for treecarbon.
Provides domain-specific error handling with informative messages.

The forecasting engine itself never raises for its documented inputs; these
exceptions belong to the configuration, table-loading and inventory layers.
"""
from typing import Any, Sequence

__all__ = [
    'TreeCarbonError',
    'ConfigurationError',
    'DataError',
    'InvalidDataError',
    'MissingColumnsError',
    'InventoryError',
]


class TreeCarbonError(Exception):
    """Base exception for all treecarbon errors."""
    pass


class ConfigurationError(TreeCarbonError):
    """Raised when there are configuration-related issues."""
    pass


class DataError(TreeCarbonError):
    """Raised when there are data-related issues."""
    pass


class InvalidDataError(DataError):
    """Raised when a data source cannot be read or parsed."""
    def __init__(self, data_type: str, reason: str = ""):
        self.data_type = data_type
        self.reason = reason
        message = f"Invalid {data_type}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MissingColumnsError(DataError):
    """Raised when a reference table has fewer columns than its layout needs."""
    def __init__(self, table: str, expected: int, found: int):
        self.table = table
        self.expected = expected
        self.found = found
        super().__init__(f"Table '{table}' needs at least {expected} columns, "
                         f"found {found}. Check the layout in cfg/table_layouts.yaml")


class InventoryError(TreeCarbonError):
    """Raised when an inventory entry is invalid."""
    def __init__(self, field_name: str, value: Any, reason: str = ""):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        message = f"Invalid value for inventory field '{field_name}': {value}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
